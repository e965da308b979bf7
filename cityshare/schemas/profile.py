"""Profile request/response schemas."""

from datetime import datetime

from pydantic import BaseModel, Field


class ProfileUpdate(BaseModel):
    """Omitted or null fields are left untouched by the upsert."""

    display_name: str | None = Field(None, max_length=255)
    username: str | None = Field(None, max_length=64)
    bio: str | None = None
    location: str | None = Field(None, max_length=255)
    avatar_url: str | None = Field(None, max_length=1024)


class ProfileResponse(BaseModel):
    id: int
    user_id: int
    display_name: str | None = None
    username: str | None = None
    bio: str | None = None
    location: str | None = None
    avatar_url: str | None = None
    is_student: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}


class ProfileEnvelope(BaseModel):
    profile: ProfileResponse | None = None
