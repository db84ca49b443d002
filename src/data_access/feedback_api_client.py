# src/data_access/feedback_api_client.py
"""
REST client for the hospital feedback API.
"""

import logging
from typing import Any, List, Optional

import requests
from pydantic import ValidationError

from src.config.settings import Settings
from src.models.schemas import FeedbackRecord

logger = logging.getLogger(__name__)


class FeedbackAPIClient:
    """Feedback API client returning validated feedback records."""

    def __init__(self, config: Settings):
        self.config = config
        self.base_url = config.feedback_api_base_url.rstrip("/")
        self.session: Optional[requests.Session] = None

    def connect(self) -> None:
        """Open an HTTP session carrying the API headers."""
        self.session = requests.Session()
        self.session.headers.update({"Accept": "application/json"})
        if self.config.feedback_api_token:
            self.session.headers.update({"Authorization": f"Bearer {self.config.feedback_api_token}"})

    def close(self) -> None:
        """Close the HTTP session."""
        if self.session:
            self.session.close()
            self.session = None

    def get_all_feedback(self) -> List[FeedbackRecord]:
        """Retrieve the feedback of every department."""
        return self._get_feedback("/feedbacks/all")

    def get_department_feedback(self, department_id: int) -> List[FeedbackRecord]:
        """Retrieve the feedback of one department."""
        return self._get_feedback(f"/feedbacks/department/{department_id}")

    def _get_feedback(self, path: str) -> List[FeedbackRecord]:
        if not self.session:
            self.connect()

        url = f"{self.base_url}{path}"
        response = self.session.get(url, timeout=self.config.request_timeout)
        response.raise_for_status()

        return self._parse_records(response.json(), url)

    def _parse_records(self, payload: Any, url: str) -> List[FeedbackRecord]:
        """
        Validate a feedback payload row by row.

        Args:
            payload: Decoded JSON, either a list of rows or an object with a "data" list
            url: Source URL, for log messages

        Returns:
            Valid feedback records; invalid rows are logged and skipped
        """
        if isinstance(payload, dict) and isinstance(payload.get("data"), list):
            payload = payload["data"]
        if not isinstance(payload, list):
            raise ValueError(f"Unexpected feedback payload from {url}: expected a list, got {type(payload).__name__}")

        records = []
        skipped = 0
        for row in payload:
            try:
                records.append(FeedbackRecord.model_validate(row))
            except ValidationError as e:
                skipped += 1
                row_id = row.get("id") if isinstance(row, dict) else None
                logger.warning(f"Skipping invalid feedback row {row_id} from {url}: {e.error_count()} error(s)")

        if skipped:
            logger.warning(f"Skipped {skipped} of {len(payload)} feedback rows from {url}")
        return records
