"""Unit tests for data schemas."""
import pytest
from datetime import date
from src.models.schemas import (
    FeedbackRecord,
    SentimentResult,
    FeedbackCategory,
    SentimentLabel,
    UserFeedbackCluster,
    WeeklyTypeCount,
)


class TestFeedbackRecord:
    """Test FeedbackRecord schema."""

    def test_feedback_record_from_api_payload(self):
        """Test creating a FeedbackRecord from camelCase API fields."""
        record = FeedbackRecord.model_validate({
            "id": "fb-1",
            "category": "COMPLAINT",
            "question": "Was the room clean?",
            "questionAnswer": "No",
            "createdAt": "2024-01-03T08:30:00Z",
            "departmentId": 4,
            "patientId": 12,
        })
        assert record.id == "fb-1"
        assert record.category == "COMPLAINT"
        assert record.question_answer == "No"
        assert record.created_at == "2024-01-03T08:30:00Z"
        assert record.department_id == 4
        assert record.patient_id == 12

    def test_feedback_record_with_snake_case_names(self):
        """Test FeedbackRecord accepts Python field names too."""
        record = FeedbackRecord(id="fb-2", patient_id=3, question_answer="5/5")
        assert record.question_answer == "5/5"
        assert record.category is None
        assert record.question == ""
        assert record.created_at == ""
        assert record.department_id is None

    def test_numeric_fields_are_coerced(self):
        """Test numeric ids, patient ids and answers are coerced at the boundary."""
        record = FeedbackRecord.model_validate({
            "id": 42,
            "patientId": "7",
            "questionAnswer": 4,
        })
        assert record.id == "42"
        assert record.patient_id == 7
        assert record.question_answer == "4"

    def test_integral_float_answer_becomes_rating(self):
        """Test an answer like 4.0 is read as the rating "4"."""
        record = FeedbackRecord.model_validate({"id": "a", "patientId": 1, "questionAnswer": 4.0})
        assert record.question_answer == "4"

    def test_non_string_fields_are_dropped(self):
        """Test non-string answers and categories become None."""
        record = FeedbackRecord.model_validate({
            "id": "fb-3",
            "patientId": 1,
            "category": 3,
            "questionAnswer": ["yes"],
            "createdAt": None,
        })
        assert record.category is None
        assert record.question_answer is None
        assert record.created_at == ""

    def test_missing_patient_id_rejected(self):
        """Test that a record without patient id is rejected."""
        with pytest.raises(ValueError):
            FeedbackRecord.model_validate({"id": "fb-4", "questionAnswer": "yes"})

    def test_dump_by_alias_uses_camel_case(self):
        """Test serialization for the dashboard uses the API field names."""
        record = FeedbackRecord(id="fb-5", patient_id=2, question_answer="Good", created_at="2024-01-01")
        dumped = record.model_dump(by_alias=True)
        assert dumped["questionAnswer"] == "Good"
        assert dumped["patientId"] == 2
        assert dumped["createdAt"] == "2024-01-01"


class TestSentimentResult:
    """Test SentimentResult schema."""

    def test_sentiment_bounds_validation(self):
        """Test that sentiment and confidence are validated to be between 0 and 1."""
        with pytest.raises(ValueError):
            SentimentResult(sentiment=1.5, confidence=0.5)

        with pytest.raises(ValueError):
            SentimentResult(sentiment=0.5, confidence=-0.1)


class TestFeedbackCategory:
    """Test FeedbackCategory schema."""

    def test_overall_stored_as_value(self):
        """Test the verdict is stored as its plain string value."""
        category = FeedbackCategory(overall=SentimentLabel.POSITIVE, confidence=0.9, reasoning=["ok"])
        assert category.overall == "positive"
        assert category.overall == SentimentLabel.POSITIVE

    def test_reasoning_required(self):
        """Test that an empty reasoning list is rejected."""
        with pytest.raises(ValueError):
            FeedbackCategory(overall="neutral", confidence=0.5, reasoning=[])

    def test_unknown_verdict_rejected(self):
        """Test that only positive/negative/neutral are accepted."""
        with pytest.raises(ValueError):
            FeedbackCategory(overall="mixed", confidence=0.5, reasoning=["x"])


class TestUserFeedbackCluster:
    """Test UserFeedbackCluster schema."""

    def test_cluster_dump_by_alias(self):
        """Test cluster serialization uses camelCase keys."""
        record = FeedbackRecord(id="fb-1", patient_id=9, question_answer="5", created_at="2024-01-05")
        cluster = UserFeedbackCluster(
            patient_id=9,
            feedbacks=[record],
            overall_category=FeedbackCategory(overall="positive", confidence=1.0, reasoning=["1 positive, 0 negative, 0 neutral feedbacks"]),
            total_feedbacks=1,
            positive_count=1,
            negative_count=0,
            neutral_count=0,
            last_feedback_date="2024-01-05",
        )
        dumped = cluster.model_dump(by_alias=True)
        assert dumped["patientId"] == 9
        assert dumped["totalFeedbacks"] == 1
        assert dumped["lastFeedbackDate"] == "2024-01-05"
        assert dumped["overallCategory"]["overall"] == "positive"
        assert dumped["feedbacks"][0]["questionAnswer"] == "5"


class TestWeeklyTypeCount:
    """Test WeeklyTypeCount schema."""

    def test_defaults_are_zero(self):
        """Test counts default to zero."""
        week = WeeklyTypeCount(week_start=date(2024, 1, 1), week=1)
        assert week.complaints == 0
        assert week.suggestions == 0
        assert week.compliments == 0
