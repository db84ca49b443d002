"""Shared fixtures for feedback tests."""
import pytest
from unittest.mock import Mock

from src.config.settings import Settings
from src.models.schemas import FeedbackRecord


@pytest.fixture
def make_feedback():
    """Factory for feedback records with sensible defaults."""
    counter = {"next": 1}

    def _make(
        patient_id=1,
        category="SUGGESTION",
        question_answer="3",
        created_at="2024-01-01T10:00:00Z",
        department_id=1,
        question="How was your visit?",
        feedback_id=None,
    ):
        if feedback_id is None:
            feedback_id = f"fb{counter['next']:03d}"
            counter["next"] += 1
        return FeedbackRecord(
            id=feedback_id,
            category=category,
            question=question,
            question_answer=question_answer,
            created_at=created_at,
            department_id=department_id,
            patient_id=patient_id,
        )

    return _make


@pytest.fixture
def mock_config():
    """Create a mock configuration."""
    config = Mock(spec=Settings)
    config.feedback_api_base_url = "http://feedback.test/api/"
    config.feedback_api_token = "test-token"
    config.request_timeout = 5
    config.log_level = "INFO"
    return config
