"""
Field binders: turn raw form input into a new ApplicantProfile.

Every binder returns a fresh profile and leaves its input untouched. The kind
of a field (number, boolean, list, nested container, plain value) is read from
the ApplicantProfile annotations, so adding a field to the model is enough to
make it bindable.
"""

from __future__ import annotations

import logging
import math
import types
import typing
from enum import Enum
from typing import Any, Iterable

from pydantic import BaseModel, ValidationError

from models.profile import (
    COUNTRIES,
    ApplicantProfile,
    EducationLevel,
    ForeignExperience,
    LanguageScores,
    SpouseProfile,
)
from models.wizard import FieldUpdate, NestedContainer, NestedUpdate, ToggleUpdate

logger = logging.getLogger(__name__)

_TRUE_STRINGS = {"true", "yes", "on", "1"}
_FALSE_STRINGS = {"false", "no", "off", "0", ""}


class ProfileUpdateError(ValueError):
    """Raised when a raw form value cannot be bound to the profile."""


def _is_optional(annotation: Any) -> bool:
    return typing.get_origin(annotation) in (typing.Union, types.UnionType) and type(None) in typing.get_args(annotation)


def _unwrap_optional(annotation: Any) -> Any:
    if typing.get_origin(annotation) in (typing.Union, types.UnionType):
        args = [arg for arg in typing.get_args(annotation) if arg is not type(None)]
        if len(args) == 1:
            return args[0]
    return annotation


def field_kind(model: type[BaseModel], name: str) -> str:
    """Classify a model attribute: int, float, bool, list, container or value."""
    info = model.model_fields.get(name)
    if info is None:
        raise ProfileUpdateError(f"Unknown field: {name}")
    annotation = _unwrap_optional(info.annotation)
    if annotation is bool:
        return "bool"
    if annotation is int:
        return "int"
    if annotation is float:
        return "float"
    if typing.get_origin(annotation) is list:
        return "list"
    if isinstance(annotation, type) and issubclass(annotation, BaseModel):
        return "container"
    return "value"


def coerce_number(name: str, value: Any, integer: bool = False) -> int | float:
    if isinstance(value, bool):
        raise ProfileUpdateError(f"{name} must be a number")
    if value is None or (isinstance(value, str) and not value.strip()):
        number = 0.0
    else:
        try:
            number = float(value)
        except (TypeError, ValueError):
            raise ProfileUpdateError(f"{name} must be a number, got {value!r}") from None
    if not math.isfinite(number):
        raise ProfileUpdateError(f"{name} must be a finite number")
    if number < 0:
        raise ProfileUpdateError(f"{name} cannot be negative")
    return int(number) if integer else number


def coerce_bool(name: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
    raise ProfileUpdateError(f"{name} must be true or false, got {value!r}")


def _coerce(model: type[BaseModel], name: str, value: Any) -> Any:
    kind = field_kind(model, name)
    if kind == "int":
        return coerce_number(name, value, integer=True)
    if kind == "float":
        return coerce_number(name, value)
    if kind == "bool":
        return coerce_bool(name, value)
    if kind in ("list", "container"):
        raise ProfileUpdateError(f"{name} cannot be set directly")
    if value == "" and _is_optional(model.model_fields[name].annotation):
        return None
    return value


def _rebuild(data: dict) -> ApplicantProfile:
    try:
        return ApplicantProfile.model_validate(data)
    except ValidationError as e:
        raise ProfileUpdateError(str(e)) from e


def set_field(profile: ApplicantProfile, name: str, value: Any) -> ApplicantProfile:
    data = profile.model_dump()
    data[name] = _coerce(ApplicantProfile, name, value)
    return _rebuild(data)


def toggle_set_member(profile: ApplicantProfile, field: str, value: Any) -> ApplicantProfile:
    """Remove ``value`` from a list-valued field if present, append it otherwise."""
    if field_kind(ApplicantProfile, field) != "list":
        raise ProfileUpdateError(f"{field} is not a multi-select field")

    (member_type,) = typing.get_args(ApplicantProfile.model_fields[field].annotation) or (Any,)
    if isinstance(member_type, type) and issubclass(member_type, Enum):
        try:
            value = member_type(value)
        except ValueError:
            raise ProfileUpdateError(f"{value!r} is not a valid choice for {field}") from None

    members = list(getattr(profile, field))
    if value in members:
        members.remove(value)
    else:
        members.append(value)

    data = profile.model_dump()
    data[field] = members
    return _rebuild(data)


_CONTAINER_MODELS: dict[NestedContainer, type[BaseModel]] = {
    NestedContainer.LANGUAGE_DETAILS: LanguageScores,
    NestedContainer.FRENCH_DETAILS: LanguageScores,
    NestedContainer.SPOUSE: SpouseProfile,
    NestedContainer.SPOUSE_LANGUAGE: LanguageScores,
}


def set_nested_field(
    profile: ApplicantProfile,
    container: NestedContainer | str,
    field: str,
    value: Any,
) -> ApplicantProfile:
    """
    Set one attribute inside a nested container.

    ``french_details`` is created on first write. Spouse containers are left
    alone while the profile has no spouse (status not married / common-law).
    """
    try:
        container = NestedContainer(container)
    except ValueError:
        raise ProfileUpdateError(f"Unknown container: {container}") from None

    coerced = _coerce(_CONTAINER_MODELS[container], field, value)

    if container in (NestedContainer.SPOUSE, NestedContainer.SPOUSE_LANGUAGE) and profile.spouse is None:
        logger.debug("Ignoring %s.%s update: profile has no spouse", container.value, field)
        return profile.model_copy(deep=True)

    data = profile.model_dump()
    if container == NestedContainer.SPOUSE:
        target = data["spouse"]
    elif container == NestedContainer.SPOUSE_LANGUAGE:
        target = data["spouse"]["language_scores"]
    else:
        if data.get(container.value) is None:
            data[container.value] = LanguageScores().model_dump()
        target = data[container.value]
    target[field] = coerced
    return _rebuild(data)


def apply_update(profile: ApplicantProfile, update: FieldUpdate | ToggleUpdate | NestedUpdate) -> ApplicantProfile:
    if isinstance(update, FieldUpdate):
        return set_field(profile, update.name, update.value)
    if isinstance(update, ToggleUpdate):
        return toggle_set_member(profile, update.field, update.value)
    if isinstance(update, NestedUpdate):
        return set_nested_field(profile, update.container, update.field, update.value)
    raise ProfileUpdateError(f"Unsupported update: {update!r}")


def apply_updates(profile: ApplicantProfile, updates: Iterable[FieldUpdate | ToggleUpdate | NestedUpdate]) -> ApplicantProfile:
    """Apply a batch in order. Any failure discards the whole batch."""
    for update in updates:
        profile = apply_update(profile, update)
    return profile


def _extracted_years(value: Any) -> int | None:
    if value is None or value == "":
        return None
    try:
        return coerce_number("work_experience_years", value, integer=True)
    except ProfileUpdateError:
        logger.warning("Ignoring unusable experience value from resume: %r", value)
        return None


def apply_resume_fields(profile: ApplicantProfile, extracted: dict) -> tuple[ApplicantProfile, list[str]]:
    """
    Merge fields extracted from a resume into the profile.

    Values that are missing or unusable fall back to the current ones. The
    foreign experience band is always re-derived: "1" when at least one year
    of experience was extracted, "None" otherwise.

    Returns the new profile and the names of the fields taken from the resume.
    """
    data = profile.model_dump()
    applied: list[str] = []

    name = extracted.get("name")
    if isinstance(name, str) and name.strip():
        data["name"] = name.strip()
        applied.append("name")

    country = extracted.get("country_of_residence") or extracted.get("country")
    if country in COUNTRIES:
        data["country_of_residence"] = country
        applied.append("country_of_residence")

    education = extracted.get("education_level")
    if education in {level.value for level in EducationLevel}:
        data["education_level"] = EducationLevel(education)
        applied.append("education_level")

    field_of_study = extracted.get("field_of_study")
    if isinstance(field_of_study, str) and field_of_study.strip():
        data["field_of_study"] = field_of_study.strip()
        applied.append("field_of_study")

    years = _extracted_years(extracted.get("work_experience_years"))
    if years is not None:
        data["work_experience_years"] = years
        applied.append("work_experience_years")

    english = extracted.get("english_score")
    if english not in (None, ""):
        try:
            data["english_score"] = coerce_number("english_score", english)
            applied.append("english_score")
        except ProfileUpdateError:
            logger.warning("Ignoring unusable English score from resume: %r", english)

    data["foreign_work_experience"] = ForeignExperience.ONE if years and years >= 1 else ForeignExperience.NONE
    return _rebuild(data), applied
