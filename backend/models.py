"""
Pydantic models shared by the todo pipelines and the HTTP layer.
"""
from datetime import datetime
from typing import Dict, List, Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

Priority = Literal["high", "medium", "low"]
Category = Literal["work", "personal", "learning", "health", "other"]
Period = Literal["today", "week"]

PRIORITIES = ("high", "medium", "low")
CATEGORIES = ("work", "personal", "learning", "health", "other")

TITLE_MAX_LENGTH = 100


# ============ TASKS ============
class Task(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: Optional[str] = None
    title: str = Field(min_length=1, max_length=TITLE_MAX_LENGTH)
    description: Optional[str] = None
    # Stored tasks from the frontend use "due_date" for the full ISO timestamp
    due_at: datetime = Field(validation_alias=AliasChoices("due_at", "due_date"))
    priority: Priority = "medium"
    category: Category = "other"
    completed: bool = False

    @field_validator("due_at")
    @classmethod
    def due_at_must_be_aware(cls, value: datetime) -> datetime:
        if value.tzinfo is None or value.utcoffset() is None:
            raise ValueError("due_at must include a timezone offset")
        return value


class TodoDraft(BaseModel):
    """Candidate task as returned by the model. Every field is untrusted."""
    model_config = ConfigDict(extra="ignore")

    title: str = ""
    due_date: str = ""  # YYYY-MM-DD
    due_time: str = ""  # HH:mm
    priority: Optional[Priority] = None
    category: Optional[Category] = None

    @field_validator("title", "due_date", "due_time", mode="before")
    @classmethod
    def none_to_empty(cls, value):
        return "" if value is None else value

    @field_validator("priority", "category", mode="before")
    @classmethod
    def empty_to_none(cls, value):
        return value or None


class NormalizedTodo(BaseModel):
    title: str
    due_date: str
    due_time: str
    priority: Priority
    category: Category


# ============ SUMMARIES ============
class TodoSummary(BaseModel):
    """Insight bundle returned by the summary model call."""
    model_config = ConfigDict(populate_by_name=True)

    summary: str
    urgent_tasks: List[str] = Field(default_factory=list, alias="urgentTasks")
    insights: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)


class BucketStats(BaseModel):
    total: int = 0
    completed: int = 0
    rate: str = "0"


class OverdueTask(BaseModel):
    title: str
    days_overdue: int
    category: str


class UpcomingDeadline(BaseModel):
    title: str
    days_until: int


class ProductiveBucket(BaseModel):
    name: str
    rate: float
    count: int


class TaskLine(BaseModel):
    """Per-task facts the summary prompt lists one by one."""
    title: str
    completed: bool
    overdue: bool
    priority: str
    category: str
    due_date: str
    days_until: int


class AnalyticsSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True)

    period: Period
    generated_at: datetime
    empty: bool = False
    message: Optional[str] = None

    total: int = 0
    completed: int = 0
    pending: int = 0
    completion_rate: str = "0"

    priority_stats: Dict[str, BucketStats] = Field(default_factory=dict)
    category_stats: Dict[str, BucketStats] = Field(default_factory=dict)

    on_time_completed: int = 0
    on_time_rate: str = "0"

    overdue_tasks: List[OverdueTask] = Field(default_factory=list)
    urgent_tasks: List[str] = Field(default_factory=list)

    time_distribution: Dict[str, int] = Field(default_factory=dict)
    time_completion: Dict[str, BucketStats] = Field(default_factory=dict)
    weekday_completion: Dict[str, BucketStats] = Field(default_factory=dict)

    most_productive_time: Optional[ProductiveBucket] = None
    most_productive_weekday: Optional[ProductiveBucket] = None

    postponed_categories: List[str] = Field(default_factory=list)
    easy_categories: List[str] = Field(default_factory=list)
    upcoming_deadlines: List[UpcomingDeadline] = Field(default_factory=list)

    task_lines: List[TaskLine] = Field(default_factory=list)
