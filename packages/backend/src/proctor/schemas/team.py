"""Pydantic schemas for teams and memberships.

Membership bodies name both ends by name and are deliberately loose:
link reports blank or unknown references itself, as ordered messages,
and unlink accepts anything. Names are stripped here, once, so link and
unlink always look up the same strings.
"""

from typing import Annotated, Any, Optional

from pydantic import BaseModel, BeforeValidator, StringConstraints, model_validator

from proctor.schemas.common import ResourceName


def _text_or_blank(value: Any) -> Any:
    # null, numbers, lists: treated as a missing name
    return value if isinstance(value, str) else ""


MemberName = Annotated[
    str,
    StringConstraints(strip_whitespace=True),
    BeforeValidator(_text_or_blank),
]


class TeamUpdate(BaseModel):
    name: Optional[ResourceName] = None


class TeamRead(BaseModel):
    name: str

    model_config = {"from_attributes": True}


class MembershipBody(BaseModel):
    user: MemberName = ""
    team: MemberName = ""

    @model_validator(mode="before")
    @classmethod
    def _object_or_empty(cls, data: Any) -> Any:
        return data if isinstance(data, dict) else {}
