#!/usr/bin/env python3
"""
Discovery filter model and validation.

Validation happens before any pipeline is built, so an invalid filter never
reaches storage.
"""

from typing import Any, Mapping, Optional, Union

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from matchmaking.exceptions import InvalidFilterError
from matchmaking.models import (
    DrinkingHabit,
    DrugHabit,
    Ethnicity,
    Intentions,
    Pet,
    Religion,
    Sexuality,
    SmokingHabit,
)

# Filter field -> profile field it constrains
DESIRED_ATTRIBUTES = {
    'desired_ethnicity': 'ethnicity',
    'desired_pets': 'pets',
    'desired_sexuality': 'sexuality',
    'desired_drinking': 'drinking',
    'desired_smoking': 'smoking',
    'desired_drugs': 'drugs',
    'desired_intentions': 'dating_intentions',
    'desired_religion': 'religion',
}


class UserFilter(BaseModel):
    """
    Transient discovery query.

    Unset bounds (None) are open. max_distance is in kilometers; 0 is
    treated as unset.
    """
    min_age: Optional[int] = Field(default=None, ge=0)
    max_age: Optional[int] = Field(default=None, ge=0)
    min_height: Optional[int] = Field(default=None, ge=0)
    max_height: Optional[int] = Field(default=None, ge=0)
    max_distance: Optional[int] = Field(default=None, ge=0)

    desired_ethnicity: Optional[Ethnicity] = None
    desired_pets: Optional[Pet] = None
    desired_sexuality: Optional[Sexuality] = None
    desired_drinking: Optional[DrinkingHabit] = None
    desired_smoking: Optional[SmokingHabit] = None
    desired_drugs: Optional[DrugHabit] = None
    desired_intentions: Optional[Intentions] = None
    desired_religion: Optional[Religion] = None

    @field_validator(*DESIRED_ATTRIBUTES, mode='before')
    @classmethod
    def normalize_desired(cls, value: Any) -> Any:
        # Query strings arrive as free text; blank means "no preference"
        if isinstance(value, str):
            value = value.strip().lower()
            return value or None
        return value

    @model_validator(mode='after')
    def check_ranges(self) -> 'UserFilter':
        if self.min_age is not None and self.max_age is not None and self.max_age < self.min_age:
            raise ValueError("max_age must be greater than or equal to min_age")
        if self.min_height is not None and self.max_height is not None and self.max_height < self.min_height:
            raise ValueError("max_height must be greater than or equal to min_height")
        return self

    @property
    def max_distance_km(self) -> Optional[int]:
        return self.max_distance or None

    def has_age_bounds(self) -> bool:
        return self.min_age is not None or self.max_age is not None

    def has_height_bounds(self) -> bool:
        return self.min_height is not None or self.max_height is not None

    def desired_attributes(self) -> dict:
        """Profile field -> required value, for the attributes that are set."""
        desired = {}
        for filter_field, profile_field in DESIRED_ATTRIBUTES.items():
            value = getattr(self, filter_field)
            if value is not None:
                desired[profile_field] = value.value
        return desired


def validate_filter(user_filter: Union[UserFilter, Mapping[str, Any], None]) -> UserFilter:
    """
    Validate a filter given as a UserFilter, a mapping or None.

    Raises:
        InvalidFilterError: bounds or enumerated values are invalid
    """
    if user_filter is None:
        return UserFilter()

    data = user_filter.model_dump() if isinstance(user_filter, UserFilter) else dict(user_filter)
    try:
        return UserFilter.model_validate(data)
    except ValidationError as e:
        messages = [f"{'.'.join(str(p) for p in err['loc']) or 'filter'}: {err['msg']}" for err in e.errors()]
        raise InvalidFilterError(f"Invalid discovery filter: {'; '.join(messages)}", errors=messages) from e
