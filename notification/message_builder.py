"""
Builds the per-profile messages for a new match.

Each participant gets one message naming the other participant. Names are
resolved through the user store when one is available; the raw profile id
is used otherwise.
"""
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence

NameLookup = Callable[[str], Optional[str]]


@dataclass
class MatchNotificationContent:
    recipient_id: str
    other_profile_id: str
    match_id: str
    other_name: Optional[str] = None
    metadata: Dict[str, str] = field(default_factory=dict)

    @property
    def subject(self) -> str:
        return "It's a match!"

    @property
    def body(self) -> str:
        who = self.other_name or self.other_profile_id
        return f"You and {who} liked each other. Say hello!"


class MatchMessageBuilder:
    def __init__(self, name_lookup: Optional[NameLookup] = None):
        self.name_lookup = name_lookup

    def _name(self, profile_id: str) -> Optional[str]:
        if self.name_lookup is None:
            return None
        return self.name_lookup(profile_id)

    def build(self, match_id: str, profiles: Sequence[str]) -> List[MatchNotificationContent]:
        if len(profiles) != 2:
            raise ValueError(f"match {match_id} must have exactly two profiles, got {len(profiles)}")
        first, second = profiles
        return [
            MatchNotificationContent(
                recipient_id=recipient,
                other_profile_id=other,
                match_id=match_id,
                other_name=self._name(other),
                metadata={'match_id': match_id},
            )
            for recipient, other in ((first, second), (second, first))
        ]
