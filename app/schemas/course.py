# app/schemas/course.py
# Схемы каталога: предметы, классы, курсы, вопросы.
from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict


class SubjectIn(BaseModel):
    name: Optional[str] = None


class SubjectOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    created_at: Optional[datetime] = None


class ClassIn(BaseModel):
    name: Optional[str] = None


class ClassOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    subject_id: int
    name: str
    created_at: Optional[datetime] = None


class CourseIn(BaseModel):
    title: Optional[str] = None
    content: Optional[str] = None


class CourseOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    class_id: int
    title: str
    content: str
    created_at: Optional[datetime] = None


class QuestionIn(BaseModel):
    question: Optional[str] = None
    answer: Optional[str] = None
    options: Optional[List[Any]] = None


class QuestionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    subject_id: int
    question: str
    answer: str
    options: Optional[List[Any]] = None
