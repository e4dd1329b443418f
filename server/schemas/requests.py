"""Pydantic request models for FastAPI endpoints."""

from typing import Optional

from pydantic import BaseModel, Field, model_validator


class SignUpRequest(BaseModel):
    email: str = Field(..., min_length=3)
    name: str = ""
    role: str = ""
    password: str = ""
    confirm_password: str = ""


class SignInRequest(BaseModel):
    email: str = Field(..., min_length=3)
    password: str


class GuestRequest(BaseModel):
    role: str = ""
    passcode: Optional[str] = None


class StartSessionRequest(BaseModel):
    hours: Optional[int] = Field(None, ge=0, le=99)
    minutes: Optional[int] = Field(None, ge=0, le=59)
    total_seconds: Optional[int] = None

    @model_validator(mode="after")
    def validate_duration_source(self):
        if self.total_seconds is None and self.hours is None and self.minutes is None:
            raise ValueError("either total_seconds or hours/minutes is required")
        if self.total_seconds is not None and (self.hours is not None or self.minutes is not None):
            raise ValueError("total_seconds cannot be combined with hours/minutes")
        return self


class PauseRequest(BaseModel):
    password: str = ""


class SearchRequest(BaseModel):
    query: str
