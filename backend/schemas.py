# schemas.py
from datetime import datetime, timezone
from pydantic import BaseModel, Field, field_validator
from typing import Dict, List, Optional

class SurveyResponseCreate(BaseModel):
    name: str = ""
    email: str = ""
    responses: Dict[str, str | int] = {}
    suggestions: Optional[str] = ""

class SurveyResponseOut(BaseModel):
    id: int
    name: str
    email: str
    responses: Dict[str, str]
    suggestions: Optional[str] = None
    created_at: datetime
    class Config:
        from_attributes = True

    @field_validator("created_at")
    @classmethod
    def _assume_utc(cls, v: datetime) -> datetime:
        # SQLite hands back naive timestamps; they are UTC
        return v if v.tzinfo else v.replace(tzinfo=timezone.utc)

    @property
    def domain(self) -> str:
        return self.email.partition("@")[2]

class QuestionOut(BaseModel):
    key: str
    label: str

class ResponsePage(BaseModel):
    items: List[SurveyResponseOut]
    page: int
    page_size: int
    total: int
    total_pages: int
    search: str = ""

class DashboardLogin(BaseModel):
    password: str = Field(..., description="Dashboard password from server .env")
