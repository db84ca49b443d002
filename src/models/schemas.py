from pydantic import BaseModel, Field, ConfigDict, ValidationInfo, field_validator
from pydantic.alias_generators import to_camel
from datetime import date
from typing import Any, Optional, List
from enum import Enum


class FeedbackType(str, Enum):
    """Feedback type declared by the patient."""
    COMPLAINT = "COMPLAINT"
    SUGGESTION = "SUGGESTION"
    COMPLIMENT = "COMPLIMENT"


class SentimentLabel(str, Enum):
    """Verdict of a categorization."""
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


class FeedbackRecord(BaseModel):
    """Patient feedback record as served by the feedback API."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    patient_id: int
    category: Optional[str] = None
    question: str = ""
    question_answer: Optional[str] = None
    created_at: str = ""
    department_id: Optional[int] = None

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("question_answer", mode="before")
    @classmethod
    def _coerce_answer(cls, value: Any) -> Optional[str]:
        # Ratings sometimes arrive as bare numbers
        if isinstance(value, bool):
            return None
        if isinstance(value, float) and value.is_integer():
            return str(int(value))
        if isinstance(value, (int, float)):
            return str(value)
        if not isinstance(value, str):
            return None
        return value

    @field_validator("category", "question", "created_at", mode="before")
    @classmethod
    def _drop_non_strings(cls, value: Any, info: ValidationInfo) -> Any:
        if isinstance(value, str):
            return value
        return None if info.field_name == "category" else ""


class SentimentResult(BaseModel):
    """Sentiment score of a single answer."""
    sentiment: float = Field(..., ge=0.0, le=1.0)
    confidence: float = Field(..., ge=0.0, le=1.0)


class FeedbackCategory(BaseModel):
    """Overall verdict for a feedback record or a patient cluster."""
    model_config = ConfigDict(use_enum_values=True)

    overall: SentimentLabel
    confidence: float = Field(..., ge=0.0, le=1.0)
    reasoning: List[str] = Field(..., min_length=1)


class UserFeedbackCluster(BaseModel):
    """All feedback of one patient, reduced to one verdict."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    patient_id: int
    feedbacks: List[FeedbackRecord]
    overall_category: FeedbackCategory
    total_feedbacks: int
    positive_count: int
    negative_count: int
    neutral_count: int
    last_feedback_date: str = ""


class FeedbackTypeSummary(BaseModel):
    """Feedback totals by declared type."""
    total: int = 0
    complaints: int = 0
    suggestions: int = 0
    compliments: int = 0


class WeeklyTypeCount(BaseModel):
    """Feedback totals by declared type for one ISO week."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    week_start: date
    week: int
    complaints: int = 0
    suggestions: int = 0
    compliments: int = 0


class SentimentDistribution(BaseModel):
    """Per-record verdict counts, used by the sentiment pie chart."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    total: int = 0
    positive: int = 0
    negative: int = 0
    neutral: int = 0
    positive_percentage: float = 0.0
    negative_percentage: float = 0.0
    neutral_percentage: float = 0.0
