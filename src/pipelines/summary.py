"""
Dashboard summaries over fetched feedback: totals by declared type, weekly
type counts for the trend chart and the patient sentiment distribution.
"""

from typing import List
from datetime import date, datetime, timedelta, timezone
import logging

import pandas as pd

from src.categorization.categorizer import categorize_feedback
from src.models.schemas import (
    FeedbackRecord,
    FeedbackType,
    FeedbackTypeSummary,
    SentimentDistribution,
    SentimentLabel,
    WeeklyTypeCount,
)
from src.pipelines.clustering import parse_timestamp

logger = logging.getLogger(__name__)


TYPE_COLUMNS = {
    FeedbackType.COMPLAINT.value: "complaints",
    FeedbackType.SUGGESTION.value: "suggestions",
    FeedbackType.COMPLIMENT.value: "compliments",
}


def _declared_type(record: FeedbackRecord):
    category = record.category
    return category.upper() if isinstance(category, str) else None


def summarize_feedback_types(records: List[FeedbackRecord]) -> FeedbackTypeSummary:
    """Count feedback by declared type; unknown types only count towards the total."""
    counts = {column: 0 for column in TYPE_COLUMNS.values()}
    for record in records:
        column = TYPE_COLUMNS.get(_declared_type(record))
        if column:
            counts[column] += 1

    return FeedbackTypeSummary(total=len(records), **counts)


def _week_start(day: date) -> date:
    return day - timedelta(days=day.weekday())


def weekly_type_counts(records: List[FeedbackRecord], start_date: date, end_date: date) -> List[WeeklyTypeCount]:
    """
    Count feedback by declared type for every ISO week in a date range.

    Args:
        records: Feedback records
        start_date: First day of the range (inclusive)
        end_date: Last day of the range (inclusive)

    Returns:
        One entry per week, oldest first, zero-filled for weeks without feedback
    """
    if end_date < start_date:
        raise ValueError(f"end_date {end_date} is before start_date {start_date}")

    rows = []
    for record in records:
        timestamp = parse_timestamp(record.created_at)
        column = TYPE_COLUMNS.get(_declared_type(record))
        if timestamp is None or column is None:
            continue
        day = datetime.fromtimestamp(timestamp, tz=timezone.utc).date()
        if start_date <= day <= end_date:
            rows.append({"week_start": _week_start(day), "column": column})

    weeks = pd.date_range(_week_start(start_date), _week_start(end_date), freq="7D").date
    if rows:
        df = pd.DataFrame(rows)
        counts = df.groupby(["week_start", "column"]).size().unstack(fill_value=0)
    else:
        counts = pd.DataFrame()
    counts = counts.reindex(index=weeks, columns=list(TYPE_COLUMNS.values()), fill_value=0)

    logger.debug(f"Weekly type counts over {len(weeks)} weeks from {len(rows)} records")

    return [
        WeeklyTypeCount(
            week_start=pd.Timestamp(week_start).date(),
            week=pd.Timestamp(week_start).isocalendar()[1],
            complaints=int(row["complaints"]),
            suggestions=int(row["suggestions"]),
            compliments=int(row["compliments"]),
        )
        for week_start, row in counts.iterrows()
    ]


def sentiment_distribution(records: List[FeedbackRecord]) -> SentimentDistribution:
    """Count per-record verdicts and their share of the total."""
    verdicts = [categorize_feedback(record).overall for record in records]
    total = len(verdicts)
    counts = {label.value: verdicts.count(label.value) for label in SentimentLabel}

    def percentage(count: int) -> float:
        return round(count / total * 100, 1) if total else 0.0

    return SentimentDistribution(
        total=total,
        positive=counts[SentimentLabel.POSITIVE.value],
        negative=counts[SentimentLabel.NEGATIVE.value],
        neutral=counts[SentimentLabel.NEUTRAL.value],
        positive_percentage=percentage(counts[SentimentLabel.POSITIVE.value]),
        negative_percentage=percentage(counts[SentimentLabel.NEGATIVE.value]),
        neutral_percentage=percentage(counts[SentimentLabel.NEUTRAL.value]),
    )
