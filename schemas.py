from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel
from typing import List, Optional
from datetime import date, datetime

from due_dates import coerce_date
from models import TaskPriority, TaskStatus


class CamelModel(BaseModel):
    """camelCase on the wire, snake_case in Python; accepts either on input."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


def _required_text(value: str, label: str) -> str:
    value = (value or "").strip()
    if not value:
        raise ValueError(f"{label} is required")
    return value


def _parse_due_date(value):
    if value is None or isinstance(value, (date, datetime)):
        return value
    if isinstance(value, str) and not value.strip():
        return None
    parsed = coerce_date(value)
    if parsed is None:
        raise ValueError("Invalid due date")
    return parsed


# Users

class UserCreate(CamelModel):
    name: str = Field(max_length=100)
    email: EmailStr
    password: str = Field(min_length=6, max_length=72)

    @field_validator("name")
    @classmethod
    def name_required(cls, v):
        return _required_text(v, "Name")

    @field_validator("email")
    @classmethod
    def email_lowercase(cls, v):
        return v.lower()


class UserOut(CamelModel):
    id: int
    name: Optional[str] = None
    email: str
    created_at: datetime


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


# Categories

class CategoryCreate(CamelModel):
    name: str = Field(max_length=100)
    color: Optional[str] = Field(default=None, max_length=20)

    @field_validator("name")
    @classmethod
    def name_required(cls, v):
        return _required_text(v, "Category name")


class CategoryUpdate(CamelModel):
    name: str = Field(max_length=100)
    color: str = Field(max_length=20)

    @field_validator("name")
    @classmethod
    def name_required(cls, v):
        return _required_text(v, "Category name")

    @field_validator("color")
    @classmethod
    def color_required(cls, v):
        return _required_text(v, "Category color")


class CategorySummary(CamelModel):
    id: str
    name: str
    color: str


class CategoryOut(CategorySummary):
    user_id: int
    task_count: int = 0
    created_at: datetime
    updated_at: datetime


# Tasks

class TaskCreate(CamelModel):
    title: str = Field(max_length=255)
    description: Optional[str] = None
    status: TaskStatus = TaskStatus.TODO
    priority: TaskPriority = TaskPriority.MEDIUM
    due_date: Optional[date] = None
    category_ids: List[str] = Field(default_factory=list)

    @field_validator("title")
    @classmethod
    def title_required(cls, v):
        return _required_text(v, "Title")

    @field_validator("due_date", mode="before")
    @classmethod
    def due_date_from_text(cls, v):
        return _parse_due_date(v)


class TaskUpdate(TaskCreate):
    """PUT replaces every field, categories included."""


class TaskStatusUpdate(CamelModel):
    status: TaskStatus


class TaskOut(CamelModel):
    id: str
    title: str
    description: Optional[str] = None
    status: str
    priority: Optional[str] = None
    due_date: Optional[date] = None
    user_id: int
    categories: List[CategorySummary] = []
    created_at: datetime
    updated_at: datetime


# Notifications

class AlertOut(CamelModel):
    task_id: str
    title: str
    priority: Optional[str] = None
    due_date: Optional[date] = None
    status: str
    days_until_due: Optional[int] = None
    text: str


class DashboardOut(CamelModel):
    overdue: List[AlertOut]
    due_today: List[AlertOut]
    due_tomorrow: List[AlertOut]
    due_this_week: List[AlertOut]
    urgent: List[AlertOut]
    alert_count: int
    active_count: int
    completed_count: int
    has_notifications: bool
