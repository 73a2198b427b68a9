from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

EMAIL_PATTERN = r"^[^\s@]+@[^\s@]+\.[^\s@]+$"


def _clean_preferences(value: Optional[List[str]]) -> List[str]:
    if value is None:
        return []
    cleaned = []
    for item in value:
        item = item.strip()
        if item and item not in cleaned:
            cleaned.append(item)
    return cleaned


class SignupRequest(BaseModel):
    email: str = Field(..., pattern=EMAIL_PATTERN, description="Login email")
    password: str = Field(..., min_length=6, description="Password (at least 6 characters)")
    name: str = Field(..., description="Display name (at least 2 characters)")
    preferences: List[str] = Field(default_factory=list, description="Initial news topics")

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        if len(value.strip()) < 2:
            raise ValueError("Name must be at least 2 characters long")
        return value.strip()

    @field_validator("preferences", mode="after")
    @classmethod
    def validate_preferences(cls, value: List[str]) -> List[str]:
        return _clean_preferences(value)


class LoginRequest(BaseModel):
    email: str
    password: str


class AuthResponse(BaseModel):
    message: str
    user: Dict[str, Any]
    token: str


class PreferencesRequest(BaseModel):
    preferences: List[str] = Field(..., description="News topics used for personalized news")

    @field_validator("preferences", mode="after")
    @classmethod
    def validate_preferences(cls, value: List[str]) -> List[str]:
        return _clean_preferences(value)


class PreferencesResponse(BaseModel):
    message: Optional[str] = None
    preferences: List[str]
