"""Eligibility rules for nominating and voting.

Awards store their criteria as JSON so admins can add rules without a schema
change. The JSON is parsed at the boundary into one of two shapes:

    {"groups": [...], "genders": [...], "is_partnered": true, "notGroups": [...]}
    {"anyOf": [{...simple...}, {...simple...}]}

Every field is optional. When ``anyOf`` is present it is the whole rule and
any sibling fields are ignored. ``is_duo`` marks paired-nomination awards and
takes no part in eligibility.
"""

from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError as PydanticValidationError

from core.exceptions import ValidationError


class SimpleCriteria(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    groups: Optional[List[str]] = None
    genders: Optional[List[str]] = None
    is_partnered: Optional[bool] = None
    not_groups: Optional[List[str]] = Field(None, alias="notGroups")
    is_duo: bool = False


class AnyOfCriteria(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    any_of: List[SimpleCriteria] = Field(..., alias="anyOf")
    is_duo: bool = False


Criteria = Union[SimpleCriteria, AnyOfCriteria]


def parse_criteria(raw: Union[None, dict[str, Any], SimpleCriteria, AnyOfCriteria]) -> Optional[Criteria]:
    """Turn stored criteria JSON into a ``SimpleCriteria`` or ``AnyOfCriteria``.

    Raises ValidationError when the JSON has the wrong shape.
    """
    if raw is None or isinstance(raw, (SimpleCriteria, AnyOfCriteria)):
        return raw
    if not isinstance(raw, dict):
        raise ValidationError("Eligibility criteria must be an object")

    try:
        if raw.get("anyOf") is not None:
            return AnyOfCriteria.model_validate(raw)
        return SimpleCriteria.model_validate(raw)
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid eligibility criteria: {e.errors()[0]['msg']}") from None


def dump_criteria(criteria: Optional[Criteria]) -> Optional[dict[str, Any]]:
    """JSON form of parsed criteria, using the stored key names."""
    if criteria is None:
        return None
    return criteria.model_dump(by_alias=True, exclude_none=True, exclude_defaults=True)


def _check_simple(criteria: SimpleCriteria, user: Any) -> bool:
    user_group = getattr(user, "user_group", None)
    gender = getattr(user, "gender", None)

    if criteria.groups is not None:
        if not user_group or user_group not in criteria.groups:
            return False
    if criteria.genders is not None:
        if not gender or gender not in criteria.genders:
            return False
    if criteria.is_partnered is not None:
        if bool(getattr(user, "is_partnered", False)) != criteria.is_partnered:
            return False
    if criteria.not_groups is not None:
        # A user without a group can't be in an excluded one
        if user_group and user_group in criteria.not_groups:
            return False
    return True


def is_eligible(criteria: Union[None, dict[str, Any], Criteria], user: Any) -> bool:
    """Whether ``user`` satisfies ``criteria``.

    ``user`` is anything exposing ``user_group``, ``gender`` and
    ``is_partnered`` (a caller identity or a directory user).
    """
    parsed = parse_criteria(criteria)
    if parsed is None:
        return True
    if isinstance(parsed, AnyOfCriteria):
        return any(_check_simple(condition, user) for condition in parsed.any_of)
    return _check_simple(parsed, user)
