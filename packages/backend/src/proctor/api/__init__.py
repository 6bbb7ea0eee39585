"""API route aggregation.

Authentication is applied at the include_router level: get_context runs
before any route dependency, so an unauthenticated request is rejected
(401) before path resolution or guards. Only the health check is open.
"""

from fastapi import APIRouter, Depends

from proctor.api.memberships import router as memberships_router
from proctor.api.root import health_router
from proctor.api.root import router as root_router
from proctor.api.teams import router as teams_router
from proctor.api.users import router as users_router
from proctor.auth.dependencies import get_context

# All protected routers require authentication
_auth = [Depends(get_context)]

api_router = APIRouter()

# Open routes: no auth required
api_router.include_router(health_router, tags=["health"])

# Protected routes: require valid Basic credentials
api_router.include_router(root_router, dependencies=_auth)
api_router.include_router(users_router, tags=["users", "pubkeys"], dependencies=_auth)
api_router.include_router(teams_router, tags=["teams"], dependencies=_auth)
api_router.include_router(memberships_router, tags=["memberships"], dependencies=_auth)
