# src/categorization/categorizer.py
"""
Combine the declared feedback type with the answer sentiment into one verdict.
"""

import math
import logging

from src.categorization.sentiment import score_answer
from src.models.schemas import FeedbackRecord, FeedbackCategory, FeedbackType, SentimentLabel

logger = logging.getLogger(__name__)


CATEGORY_SENTIMENT = {
    FeedbackType.COMPLIMENT.value: 0.9,
    FeedbackType.COMPLAINT.value: 0.1,
    FeedbackType.SUGGESTION.value: 0.6,
}
DEFAULT_CATEGORY_SENTIMENT = 0.5

CATEGORY_WEIGHT = 0.4
ANSWER_WEIGHT = 0.6
CONFIDENCE_BOOST = 0.2

POSITIVE_THRESHOLD = 0.6
NEGATIVE_THRESHOLD = 0.4

INSUFFICIENT_DATA_REASON = "Insufficient data for detailed analysis"

SUMMARY_LABELS = {
    SentimentLabel.POSITIVE.value: "Positive",
    SentimentLabel.NEGATIVE.value: "Negative",
    SentimentLabel.NEUTRAL.value: "Neutral",
}


def classify_sentiment(overall_sentiment: float) -> SentimentLabel:
    """Map a combined sentiment to a verdict; both thresholds are inclusive."""
    if overall_sentiment >= POSITIVE_THRESHOLD:
        return SentimentLabel.POSITIVE
    if overall_sentiment <= NEGATIVE_THRESHOLD:
        return SentimentLabel.NEGATIVE
    return SentimentLabel.NEUTRAL


def categorize_feedback(record: FeedbackRecord) -> FeedbackCategory:
    """
    Categorize a single feedback record.

    The declared type carries 40% of the weight and the answer sentiment 60%.
    Confidence is the answer confidence boosted by 0.2, capped at 1.

    Args:
        record: Feedback record to categorize

    Returns:
        FeedbackCategory with verdict, confidence and at least one reasoning line
    """
    reasoning = []

    category = getattr(record, "category", None)
    declared = category.upper() if isinstance(category, str) else None
    category_sentiment = CATEGORY_SENTIMENT.get(declared, DEFAULT_CATEGORY_SENTIMENT)
    if declared in CATEGORY_SENTIMENT:
        reasoning.append(f"User selected {declared.lower()} as feedback type")

    answer = score_answer(record)

    overall_sentiment = (category_sentiment * CATEGORY_WEIGHT) + (answer.sentiment * ANSWER_WEIGHT)
    confidence = min(answer.confidence + CONFIDENCE_BOOST, 1.0)

    if answer.sentiment > 0.7:
        reasoning.append(f'Positive response: "{record.question_answer}"')
    elif answer.sentiment < 0.3:
        reasoning.append(f'Negative response: "{record.question_answer}"')

    if not reasoning:
        reasoning.append(INSUFFICIENT_DATA_REASON)

    return FeedbackCategory(
        overall=classify_sentiment(overall_sentiment),
        confidence=confidence,
        reasoning=reasoning,
    )


def get_categorization_summary(category: FeedbackCategory) -> str:
    """Human-readable one-liner, e.g. "Positive feedback (84% confidence)"."""
    overall = getattr(category, "overall", None)
    if isinstance(overall, SentimentLabel):
        overall = overall.value
    label = SUMMARY_LABELS.get(overall)
    if label is None:
        return "Unable to categorize feedback"

    # Round half up
    confidence_percent = math.floor(category.confidence * 100 + 0.5)
    return f"{label} feedback ({confidence_percent}% confidence)"
