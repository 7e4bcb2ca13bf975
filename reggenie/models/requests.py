"""Request bodies accepted by the HTTP API."""

from typing import Optional

from pydantic import BaseModel, Field


class RegisterRequest(BaseModel):
    code: str
    confirm: str


class LoginRequest(BaseModel):
    code: str


class UserSettingsUpdate(BaseModel):
    openai_api_key: Optional[str] = None
    remote_store_config: Optional[str] = None


class TextEntryRequest(BaseModel):
    text: str = Field(..., min_length=1)


class WebSearchRequest(BaseModel):
    query: str = Field(..., min_length=1)
    jurisdiction: Optional[str] = "Global"


class ChatRequest(BaseModel):
    text: str


class FeedbackRequest(BaseModel):
    rating: int = Field(..., ge=1, le=5)
    comment: str = ""
    query_snippet: Optional[str] = None
    response_snippet: Optional[str] = None
    topic: Optional[str] = None


class FollowUpRequest(BaseModel):
    report_id: str


class ConfirmationRequest(BaseModel):
    report_id: str
    next_visit_date: str = ""
