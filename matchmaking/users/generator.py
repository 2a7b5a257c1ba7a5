"""Random profile generation for registration and seeding."""
import math
import random
from datetime import date, timedelta
from typing import List, Optional

from matchmaking.models import (
    DrinkingHabit,
    DrugHabit,
    Ethnicity,
    Gender,
    Intentions,
    Pet,
    Religion,
    Sexuality,
    SmokingHabit,
    User,
)
from matchmaking.utils import AVERAGE_GREGORIAN_YEAR_SECONDS

# Bounding box profiles are placed in
NORTH_LONDON = {
    'min_lat': 51.5244,
    'max_lat': 51.6722,
    'min_lon': -0.2076,
    'max_lon': 0.1698,
}

MIN_AGE = 18
MAX_AGE = 48
MIN_HEIGHT_CM = 150.0
MAX_HEIGHT_CM = 190.0

FIRST_NAMES = [
    "Amara", "Ben", "Chloe", "Daniel", "Ella", "Farah", "George", "Hana",
    "Isaac", "Jade", "Karim", "Leah", "Mohammed", "Nia", "Oscar", "Priya",
    "Quentin", "Rosa", "Samir", "Tara", "Usman", "Vera", "Will", "Yasmin", "Zain",
]
LAST_NAMES = [
    "Ahmed", "Baker", "Clarke", "Davies", "Evans", "Fernandes", "Green",
    "Hussain", "Ibrahim", "Jones", "Khan", "Lewis", "Mensah", "Nowak",
    "Okafor", "Patel", "Quinn", "Roberts", "Singh", "Taylor", "Walker",
]


def _choice(rng: random.Random, enum_cls):
    return rng.choice(list(enum_cls))


def random_location(rng: random.Random) -> List[float]:
    lat = rng.uniform(NORTH_LONDON['min_lat'], NORTH_LONDON['max_lat'])
    lon = rng.uniform(NORTH_LONDON['min_lon'], NORTH_LONDON['max_lon'])
    return [lat, lon]


def random_date_of_birth(rng: random.Random, today: Optional[date] = None) -> date:
    """A birth date whose calculated age falls in [MIN_AGE, MAX_AGE)."""
    today = today or date.today()
    age = rng.randint(MIN_AGE, MAX_AGE - 1)
    # one day of slack either side for local date vs UTC
    days = math.ceil(age * AVERAGE_GREGORIAN_YEAR_SECONDS / 86400) + rng.randint(1, 363)
    return today - timedelta(days=days)


def generate_random_user(
    rng: Optional[random.Random] = None,
    daily_swipe_budget: int = 0
) -> User:
    """A plausible random profile in North London. The id is assigned on insert."""
    rng = rng or random.Random()
    first = rng.choice(FIRST_NAMES)
    last = rng.choice(LAST_NAMES)
    # Suffix keeps emails unique across a seeding run
    email = f"{first.lower()}.{last.lower()}.{rng.randrange(16 ** 8):08x}@example.com"

    return User(
        name=f"{first} {last}",
        email=email,
        gender=_choice(rng, Gender),
        date_of_birth=random_date_of_birth(rng),
        location=random_location(rng),
        height=round(rng.uniform(MIN_HEIGHT_CM, MAX_HEIGHT_CM), 1),
        ethnicity=_choice(rng, Ethnicity),
        pets=_choice(rng, Pet),
        sexuality=_choice(rng, Sexuality),
        religion=_choice(rng, Religion),
        drinking=_choice(rng, DrinkingHabit),
        smoking=_choice(rng, SmokingHabit),
        drugs=_choice(rng, DrugHabit),
        dating_intentions=_choice(rng, Intentions),
        attractiveness=rng.randint(0, 10),
        daily_swipe_budget=daily_swipe_budget,
    )
