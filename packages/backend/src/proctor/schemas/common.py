"""Field types shared by the resource schemas."""

from typing import Annotated, Literal

from pydantic import AfterValidator, StringConstraints
from pydantic_core import PydanticCustomError


def _no_slash(value: str) -> str:
    # Names and titles are path segments.
    if "/" in value:
        raise PydanticCustomError("path_separator", "must not contain '/'")
    return value


ResourceName = Annotated[
    str,
    StringConstraints(strip_whitespace=True, min_length=1, max_length=100),
    AfterValidator(_no_slash),
]

RoleName = Literal["admin", "user"]
