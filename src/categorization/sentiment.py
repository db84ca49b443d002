# src/categorization/sentiment.py
"""
Answer sentiment scoring for patient feedback.

An answer is scored with one of three strategies depending on its shape:
a numeric rating ("4", "4/5"), a known radio-button phrase ("yes, somewhat"),
or free text matched against positive/negative keyword lists.
"""

import re
import logging
from types import MappingProxyType
from typing import Any

from src.models.schemas import FeedbackRecord, SentimentResult

logger = logging.getLogger(__name__)


POSITIVE_KEYWORDS = frozenset([
    "good", "great", "excellent", "amazing", "wonderful", "fantastic", "perfect", "satisfied",
    "happy", "pleased", "impressed", "helpful", "caring", "professional", "clean", "efficient",
    "quick", "fast", "timely", "polite", "friendly", "kind", "attentive", "thorough",
])

NEGATIVE_KEYWORDS = frozenset([
    "bad", "terrible", "awful", "horrible", "disappointed", "unsatisfied", "unhappy", "angry",
    "frustrated", "upset", "poor", "slow", "dirty", "unclean", "rude", "unprofessional",
    "unhelpful", "uncaring", "neglected", "ignored", "long wait", "delayed", "late",
])

# Radio option answers, keyed by the lower-cased option text
RADIO_SENTIMENT_MAP = MappingProxyType({
    # Positive
    "yes": 1.0, "yes, perfectly": 1.0, "yes, very efficiently": 1.0, "excellent": 1.0,
    "very good": 1.0, "very satisfied": 1.0, "very helpful": 1.0, "very professional": 1.0,
    "very clean": 1.0,

    # Slightly positive
    "yes, somewhat": 0.6, "somewhat efficiently": 0.6, "good": 0.6, "satisfied": 0.6,
    "helpful": 0.6, "professional": 0.6, "clean": 0.6, "somewhat": 0.6,

    # Neutral
    "neutral": 0.5, "okay": 0.5, "average": 0.5, "moderate": 0.5,

    # Slightly negative
    "no, not at all": 0.4, "not very efficiently": 0.4, "poor": 0.4, "unsatisfied": 0.4,
    "unhelpful": 0.4, "unprofessional": 0.4, "dirty": 0.4, "not very": 0.4,

    # Negative
    "no": 0.0, "not at all efficiently": 0.0, "terrible": 0.0, "very poor": 0.0,
    "very unsatisfied": 0.0, "very unhelpful": 0.0, "very unprofessional": 0.0,
    "very dirty": 0.0,
})

RATING_PATTERN = re.compile(r"^(\d+)(?:/5)?$", re.ASCII)

NEUTRAL_SENTIMENT = 0.5
EMPTY_ANSWER_CONFIDENCE = 0.1
RADIO_CONFIDENCE = 0.8
TEXT_CONFIDENCE = 0.6


def _clamp(value: float) -> float:
    return min(max(value, 0.0), 1.0)


def analyze_text_sentiment(text: Any) -> float:
    """
    Score free text by keyword matching.

    Each keyword counts once if it occurs anywhere in the text (plain substring
    containment, so "unsatisfied" also hits "satisfied").

    Args:
        text: Free-text answer

    Returns:
        Sentiment in [0, 1]; 0.5 when no keyword matches
    """
    if not text or not isinstance(text, str):
        return NEUTRAL_SENTIMENT

    lower_text = text.lower()
    positive_count = sum(1 for keyword in POSITIVE_KEYWORDS if keyword in lower_text)
    negative_count = sum(1 for keyword in NEGATIVE_KEYWORDS if keyword in lower_text)

    if positive_count == 0 and negative_count == 0:
        return NEUTRAL_SENTIMENT

    return positive_count / (positive_count + negative_count)


def _score_rating(rating: int) -> SentimentResult:
    if rating <= 2:
        return SentimentResult(sentiment=0.2, confidence=0.9)
    if rating == 3:
        return SentimentResult(sentiment=0.5, confidence=0.8)
    return SentimentResult(sentiment=0.8, confidence=0.9)


def score_answer(record: FeedbackRecord) -> SentimentResult:
    """
    Score the answer of a single feedback record.

    Never raises: a missing or non-string answer scores as low-confidence
    neutral.

    Args:
        record: Feedback record to score

    Returns:
        SentimentResult with sentiment and confidence in [0, 1]
    """
    answer = getattr(record, "question_answer", None)
    if not answer or not isinstance(answer, str):
        return SentimentResult(sentiment=NEUTRAL_SENTIMENT, confidence=EMPTY_ANSWER_CONFIDENCE)

    normalized = answer.strip().lower()

    rating_match = RATING_PATTERN.match(normalized)
    if rating_match:
        digits = rating_match.group(1).lstrip("0") or "0"
        # Huge digit strings would trip int()'s conversion limit; they rate high anyway
        rating = int(digits) if len(digits) <= 3 else 5
        return _score_rating(rating)

    radio_sentiment = RADIO_SENTIMENT_MAP.get(normalized)
    if radio_sentiment is not None:
        return SentimentResult(sentiment=radio_sentiment, confidence=RADIO_CONFIDENCE)

    text_sentiment = analyze_text_sentiment(answer)
    logger.debug(f"Keyword sentiment {text_sentiment:.2f} for feedback {getattr(record, 'id', None)}")
    return SentimentResult(sentiment=_clamp(text_sentiment), confidence=TEXT_CONFIDENCE)
