#!/usr/bin/env python3
"""
Domain models shared by the matchmaking services and storage backends.

Storage backends map their own records to and from these models; nothing
in the core depends on a particular storage engine.
"""

from datetime import date, datetime
from enum import Enum
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"
    NON_BINARY = "non-binary"


class Ethnicity(str, Enum):
    WHITE = "white"
    BLACK = "black"
    ASIAN = "asian"
    LATINO = "latino"
    OTHER = "other"


class Pet(str, Enum):
    DOG = "dog"
    CAT = "cat"
    BIRD = "bird"
    REPTILE = "reptile"
    PREFER_NOT_TO_SAY = "prefer not to say"
    NONE = "none"


class Sexuality(str, Enum):
    STRAIGHT = "straight"
    GAY = "gay"
    BISEXUAL = "bisexual"
    PANSEXUAL = "pansexual"
    ASEXUAL = "asexual"
    OTHER = "other"


class DrinkingHabit(str, Enum):
    YES = "yes"
    NO = "no"
    NONE = "none"


class SmokingHabit(str, Enum):
    YES = "yes"
    NO = "no"
    NONE = "none"


class DrugHabit(str, Enum):
    YES = "yes"
    NO = "no"
    NONE = "none"


class Religion(str, Enum):
    CHRISTIAN = "christian"
    MUSLIM = "muslim"
    HINDU = "hindu"
    BUDDHIST = "buddhist"
    OTHER = "other"


class Intentions(str, Enum):
    LIFE_PARTNER = "life partner"
    SHORTER_TIME = "shorter time"
    NONE = "none"
    FIGURING_OUT = "figuring out"
    OTHER = "other"


class EducationLevel(str, Enum):
    HIGH_SCHOOL = "High School"
    COLLEGE = "College"
    ASSOCIATES_DEGREE = "Associates Degree"
    BACHELORS_DEGREE = "Bachelors Degree"
    MASTERS_DEGREE = "Masters Degree"
    PHD_POST_DOCTORAL = "PhD/Post Doctoral"
    OPEN_TO_ALL = "Open to All"


def _check_location(value: Optional[List[float]]) -> Optional[List[float]]:
    if value is None:
        return value
    if len(value) != 2:
        raise ValueError("location must be [latitude, longitude]")
    lat, lon = value
    if not -90 <= lat <= 90 or not -180 <= lon <= 180:
        raise ValueError(f"location out of range: {value}")
    return [float(lat), float(lon)]


class User(BaseModel):
    """A profile as stored. Also mutated by the rating feedback loop."""
    model_config = ConfigDict(from_attributes=True)

    id: Optional[str] = None
    name: str = ""
    email: str = ""
    gender: Optional[Gender] = None
    date_of_birth: Optional[date] = None
    location: Optional[List[float]] = None
    height: Optional[float] = None
    ethnicity: Optional[Ethnicity] = None
    pets: Optional[Pet] = None
    sexuality: Optional[Sexuality] = None
    religion: Optional[Religion] = None
    drinking: Optional[DrinkingHabit] = None
    smoking: Optional[SmokingHabit] = None
    drugs: Optional[DrugHabit] = None
    dating_intentions: Optional[Intentions] = None
    kids: int = 0
    occupation: Optional[str] = None
    bio: Optional[str] = None
    attractiveness: int = Field(default=0, ge=0, le=10)
    swipe_count: int = 0
    daily_swipe_budget: int = 0
    swiping_rate: float = 1.0

    validate_location = field_validator("location")(_check_location)


class CandidateUser(BaseModel):
    """Projected discovery result: public profile fields plus age and distance (km)."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str = ""
    gender: Optional[Gender] = None
    age: Optional[int] = None
    date_of_birth: Optional[date] = None
    location: Optional[List[float]] = None
    height: Optional[float] = None
    ethnicity: Optional[Ethnicity] = None
    pets: Optional[Pet] = None
    sexuality: Optional[Sexuality] = None
    religion: Optional[Religion] = None
    drinking: Optional[DrinkingHabit] = None
    smoking: Optional[SmokingHabit] = None
    drugs: Optional[DrugHabit] = None
    dating_intentions: Optional[Intentions] = None
    kids: int = 0
    occupation: Optional[str] = None
    swipe_count: int = 0
    attractiveness: int = 0
    bio: Optional[str] = None
    distance: Optional[float] = None


# Fields the projection stage keeps; age and distance are computed.
CANDIDATE_FIELDS = tuple(f for f in CandidateUser.model_fields if f not in ("age", "distance"))


class Swipe(BaseModel):
    id: Optional[str] = None
    user_id: str
    prospect_id: str
    interested: bool
    swipe_time: Optional[datetime] = None


class Match(BaseModel):
    id: Optional[str] = None
    profiles: List[str] = Field(min_length=2, max_length=2)
    matched: bool = True

    def pair_key(self) -> Tuple[str, str]:
        """Order-independent identity of the matched pair."""
        a, b = sorted(self.profiles)
        return a, b


class MatchedUserInfo(BaseModel):
    current_user: Optional[User] = None
    matched_users: List[User] = Field(default_factory=list)


class AgeRange(BaseModel):
    min: int = 0
    max: int = 0
    deal_breaker: bool = False


class HeightRange(BaseModel):
    min: int = 0
    max: int = 0
    deal_breaker: bool = False


class DrinkingPreference(BaseModel):
    deal_breaker: bool = False
    status: Optional[DrinkingHabit] = None


class SmokingPreference(BaseModel):
    deal_breaker: bool = False
    status: Optional[SmokingHabit] = None


class DrugPreference(BaseModel):
    deal_breaker: bool = False
    status: Optional[DrugHabit] = None


class Preferences(BaseModel):
    """What a viewer wants. Only drinking, smoking and religion feed the score."""
    interested_in: Optional[Gender] = None
    max_distance: int = 0
    age_range: AgeRange = Field(default_factory=AgeRange)
    ethnicity: Optional[Ethnicity] = None
    religion: Optional[Religion] = None
    height: HeightRange = Field(default_factory=HeightRange)
    children: Optional[str] = None
    drinking: DrinkingPreference = Field(default_factory=DrinkingPreference)
    family_plans: Optional[str] = None
    drugs: DrugPreference = Field(default_factory=DrugPreference)
    smoking: SmokingPreference = Field(default_factory=SmokingPreference)
    education: Optional[EducationLevel] = None
