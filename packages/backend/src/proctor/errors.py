"""Error taxonomy and the FastAPI handlers that render it.

Three terminal outcomes, never retried:
- NotFound → 404, empty body (an unresolved path segment)
- Forbidden → 403, empty body (a role or ability check failed)
- ValidationFailed → 422, {"errors": [...]} (constraint or uniqueness violation)

Request bodies rejected by pydantic are folded into the same 422 shape so
clients only ever see one error format.
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.responses import JSONResponse, Response


class NotFound(Exception):
    """A path segment did not resolve to an existing resource."""


class Forbidden(Exception):
    """The identity lacks the role or ability for this route."""


class ValidationFailed(Exception):
    """The write was rejected. Carries ordered, human-readable messages."""

    def __init__(self, errors: list[str]):
        super().__init__("; ".join(errors))
        self.errors = list(errors)


def _field_label(loc: tuple) -> str:
    # ("body", "name") → "Name"; bare body errors have no field
    fields = [part for part in loc if isinstance(part, str) and part != "body"]
    if not fields:
        return "Body"
    return fields[-1].replace("_", " ").capitalize()


def messages_from_pydantic(errors: list[dict]) -> list[str]:
    """Turn pydantic error dicts into "Field message" strings."""
    messages = []
    for err in errors:
        msg = err.get("msg", "is invalid")
        if err.get("type") == "missing" or (
            err.get("type") == "string_too_short"
            and err.get("ctx", {}).get("min_length") == 1
        ):
            msg = "can't be blank"
        elif msg[:2].istitle():
            msg = msg[0].lower() + msg[1:]
        messages.append(f"{_field_label(tuple(err.get('loc', ())))} {msg}")
    return messages


async def not_found_handler(request: Request, exc: NotFound) -> Response:
    return Response(status_code=404)


async def forbidden_handler(request: Request, exc: Forbidden) -> Response:
    return Response(status_code=403)


async def validation_failed_handler(
    request: Request, exc: ValidationFailed
) -> JSONResponse:
    return JSONResponse(status_code=422, content={"errors": exc.errors})


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content={"errors": messages_from_pydantic(exc.errors())},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(NotFound, not_found_handler)
    app.add_exception_handler(Forbidden, forbidden_handler)
    app.add_exception_handler(ValidationFailed, validation_failed_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
