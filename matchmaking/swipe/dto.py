from typing import Optional

from pydantic import AliasChoices, BaseModel, Field


class SwipePayload(BaseModel):
    # Accepts "user_id" as well, the key clients historically sent
    prospect_id: str = Field(min_length=1, max_length=255, validation_alias=AliasChoices('prospect_id', 'user_id'))
    interested: bool


class SwipeResponse(BaseModel):
    matched: bool = False
    match_id: Optional[str] = None
