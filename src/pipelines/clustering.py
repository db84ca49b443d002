"""
Per-patient feedback clustering.
Groups feedback records by patient, categorizes every record and reduces each
patient's feedback to one majority-vote verdict.
"""

from typing import Optional, List, Dict, Any, Tuple
from datetime import datetime, timezone
import logging
import argparse

import pandas as pd

from src.config.settings import Settings
from src.data_access.feedback_api_client import FeedbackAPIClient
from src.categorization.categorizer import categorize_feedback, get_categorization_summary
from src.models.schemas import FeedbackRecord, FeedbackCategory, SentimentLabel, UserFeedbackCluster

logger = logging.getLogger(__name__)


EXPORT_COLUMNS = [
    "patient_id",
    "overall",
    "confidence",
    "summary",
    "total_feedbacks",
    "positive_count",
    "negative_count",
    "neutral_count",
    "last_feedback_date",
]


def parse_timestamp(value: Any) -> Optional[float]:
    """
    Parse an ISO-8601 string into a POSIX timestamp.

    Naive values are read as UTC. Returns None for anything unparseable.
    """
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    try:
        return parsed.timestamp()
    except (OverflowError, OSError, ValueError):
        return None


def _newest_first_key(value: Any) -> Tuple[int, float]:
    # Invalid dates rank below every valid one
    timestamp = parse_timestamp(value)
    if timestamp is None:
        return (0, 0.0)
    return (1, timestamp)


def _is_patient_id(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def filter_by_department(records: List[FeedbackRecord], department_id: Optional[int]) -> List[FeedbackRecord]:
    """Keep the records of one department; None keeps everything."""
    if department_id is None:
        return list(records)
    return [record for record in records if record.department_id == department_id]


def _majority(positive_count: int, negative_count: int, neutral_count: int) -> SentimentLabel:
    if positive_count > negative_count and positive_count > neutral_count:
        return SentimentLabel.POSITIVE
    if negative_count > positive_count and negative_count > neutral_count:
        return SentimentLabel.NEGATIVE
    return SentimentLabel.NEUTRAL


def _build_cluster(patient_id: int, patient_feedbacks: List[FeedbackRecord]) -> UserFeedbackCluster:
    # sorted() is stable, and reverse=True keeps ties in input order
    sorted_feedbacks = sorted(
        patient_feedbacks,
        key=lambda record: _newest_first_key(record.created_at),
        reverse=True,
    )

    verdicts = [categorize_feedback(record).overall for record in sorted_feedbacks]
    positive_count = verdicts.count(SentimentLabel.POSITIVE.value)
    negative_count = verdicts.count(SentimentLabel.NEGATIVE.value)
    neutral_count = verdicts.count(SentimentLabel.NEUTRAL.value)

    total = len(sorted_feedbacks)
    last_feedback_date = sorted_feedbacks[0].created_at if sorted_feedbacks else ""
    if not isinstance(last_feedback_date, str):
        last_feedback_date = ""
    confidence = max(positive_count, negative_count, neutral_count) / total if total > 0 else 0

    return UserFeedbackCluster(
        patient_id=patient_id,
        feedbacks=sorted_feedbacks,
        overall_category=FeedbackCategory(
            overall=_majority(positive_count, negative_count, neutral_count),
            confidence=confidence,
            reasoning=[f"{positive_count} positive, {negative_count} negative, {neutral_count} neutral feedbacks"],
        ),
        total_feedbacks=total,
        positive_count=positive_count,
        negative_count=negative_count,
        neutral_count=neutral_count,
        last_feedback_date=last_feedback_date,
    )


def cluster_user_feedback(feedbacks: List[FeedbackRecord]) -> List[UserFeedbackCluster]:
    """
    Cluster feedback by patient and categorize each patient's overall feedback.

    Args:
        feedbacks: Feedback records; the list and its records are not modified

    Returns:
        One cluster per patient, most recently active patient first
    """
    user_groups: Dict[int, List[FeedbackRecord]] = {}
    skipped = 0
    for feedback in feedbacks:
        patient_id = getattr(feedback, "patient_id", None)
        if not _is_patient_id(patient_id):
            skipped += 1
            continue
        user_groups.setdefault(patient_id, []).append(feedback)

    if skipped:
        logger.warning(f"Skipped {skipped} feedback records without an integer patient id")

    clusters = [
        _build_cluster(patient_id, patient_feedbacks)
        for patient_id, patient_feedbacks in user_groups.items()
    ]
    clusters.sort(key=lambda cluster: _newest_first_key(cluster.last_feedback_date), reverse=True)

    logger.debug(f"Built {len(clusters)} patient clusters from {len(feedbacks)} feedback records")
    return clusters


def clusters_to_dataframe(clusters: List[UserFeedbackCluster]) -> pd.DataFrame:
    """One row per patient, ready for CSV export."""
    rows = [
        {
            "patient_id": cluster.patient_id,
            "overall": cluster.overall_category.overall,
            "confidence": cluster.overall_category.confidence,
            "summary": get_categorization_summary(cluster.overall_category),
            "total_feedbacks": cluster.total_feedbacks,
            "positive_count": cluster.positive_count,
            "negative_count": cluster.negative_count,
            "neutral_count": cluster.neutral_count,
            "last_feedback_date": cluster.last_feedback_date,
        }
        for cluster in clusters
    ]
    return pd.DataFrame(rows, columns=EXPORT_COLUMNS)


class PatientClusteringPipeline:
    """
    Pipeline that fetches feedback from the feedback API and clusters it by
    patient, optionally restricted to one department.
    """

    def __init__(self, config: Settings):
        self.config = config
        self.api_client = FeedbackAPIClient(config)

    def run(
        self,
        department_id: Optional[int] = None,
        export_path: Optional[str] = None,
    ) -> dict:
        """
        Execute the clustering pipeline.

        Args:
            department_id: Only cluster feedback of this department (None = all departments)
            export_path: Write one CSV row per patient to this path

        Returns:
            Dictionary of clustering stats and the clusters themselves
        """
        if department_id is not None:
            logger.info(f"Clustering patient feedback for department {department_id}")
        else:
            logger.info("Clustering patient feedback for all departments")

        try:
            self.api_client.connect()

            feedback_records = self.api_client.get_all_feedback()
            logger.info(f"Fetched {len(feedback_records)} feedback records")

            feedback_records = filter_by_department(feedback_records, department_id)
            total_records = len(feedback_records)

            if total_records == 0:
                logger.info("No records to cluster.")
                return {
                    "total_records": 0,
                    "total_patients": 0,
                    "positive_patients": 0,
                    "negative_patients": 0,
                    "neutral_patients": 0,
                    "department_id": department_id,
                    "export_path": None,
                    "clusters": [],
                }

            clusters = cluster_user_feedback(feedback_records)
            overall_labels = [cluster.overall_category.overall for cluster in clusters]

            logger.info(f"Clustering complete ({len(clusters)} patients, {total_records} records)")

            if export_path:
                clusters_to_dataframe(clusters).to_csv(export_path, index=False)
                logger.info(f"Exported {len(clusters)} patient clusters to {export_path}")

            return {
                "total_records": total_records,
                "total_patients": len(clusters),
                "positive_patients": overall_labels.count(SentimentLabel.POSITIVE.value),
                "negative_patients": overall_labels.count(SentimentLabel.NEGATIVE.value),
                "neutral_patients": overall_labels.count(SentimentLabel.NEUTRAL.value),
                "department_id": department_id,
                "export_path": export_path,
                "clusters": clusters,
            }

        finally:
            self.api_client.close()


def main():
    """Main entry point for clustering patient feedback from the command line."""
    parser = argparse.ArgumentParser(description="Cluster patient feedback by patient and sentiment.")
    parser.add_argument("--department-id", type=int, help="Only cluster feedback of this department.")
    parser.add_argument("--export", type=str, help="Write the per-patient clusters to this CSV file.")
    parser.add_argument("--log-level", type=str, help="Logging level (default from settings).")

    args = parser.parse_args()

    config = Settings()

    logging.basicConfig(
        level=(args.log_level or config.log_level).upper(),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    logging.getLogger("urllib3").setLevel(logging.WARNING)

    pipeline = PatientClusteringPipeline(config)
    try:
        stats = pipeline.run(department_id=args.department_id, export_path=args.export)
    except ValueError as e:
        parser.error(str(e))

    print("\n" + "="*60)
    print("PATIENT CLUSTERING RESULTS")
    print("="*60)
    if stats["department_id"] is not None:
        print(f"Department: {stats['department_id']}")
    else:
        print("Department: all")
    print(f"Feedback records: {stats['total_records']}")
    print(f"Patients: {stats['total_patients']}")
    print(f"Positive patients: {stats['positive_patients']}")
    print(f"Negative patients: {stats['negative_patients']}")
    print(f"Neutral patients: {stats['neutral_patients']}")
    for cluster in stats["clusters"]:
        print(
            f"  patient {cluster.patient_id}: "
            f"{get_categorization_summary(cluster.overall_category)} - "
            f"{cluster.overall_category.reasoning[0]}"
        )
    if stats["export_path"]:
        print(f"Exported to: {stats['export_path']}")
    print("="*60)


if __name__ == "__main__":
    main()
