"""Authentication and authorization.

Request pipeline, in order:
1. basic → HTTP Basic credentials checked, principal name out (401 on failure)
2. identity → principal name resolved to a User, or a transient one
3. resolvers (proctor.api.resolvers) → path segments bound into the context (404)
4. roles → coarse role guard (403)
5. ability → owner-based check on each declared resource reference (403)
"""
