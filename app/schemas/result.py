# app/schemas/result.py
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict


class ResultIn(BaseModel):
    subject_id: Optional[int] = None
    subject_name: Optional[str] = None
    score: Optional[int] = None
    total: Optional[int] = None
    answers: Any = None


class ResultOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    subject_id: int
    subject_name: str
    score: int
    total: int
    percentage: int
    answers: Any
    created_at: Optional[datetime] = None
