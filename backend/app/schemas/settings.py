from pydantic import BaseModel, Field
from typing import Optional


class SettingsResponse(BaseModel):
    username: str
    view_password_enabled: bool

    class Config:
        from_attributes = True


class ChangeUsername(BaseModel):
    new_username: str = Field(min_length=3, max_length=64)
    password: str


class ChangePassword(BaseModel):
    current_password: str
    new_password: str


class ViewPasswordToggle(BaseModel):
    enabled: bool
    # Required only when disabling the check
    password: Optional[str] = None


class PasswordCheck(BaseModel):
    password: str
