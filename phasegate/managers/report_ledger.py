"""
ReviewReportLedger for review phase reports.
"""

from typing import List, Optional

from phasegate.constants import (
    PHASE_REVIEW,
    VALIDATION_INVALID_ASSESSMENT,
    VALIDATION_PATH_REQUIRED,
)
from phasegate.exceptions import InvalidOperationError, ValidationError
from phasegate.models.base import Assessment, PhaseStatus, ReviewReportRecord
from phasegate.models.phase import PhaseRecord
from phasegate.models.project import ProjectState
from phasegate.utils import format_sequence_id


def parse_assessment(value: "Assessment | str") -> Assessment:
    """Convert a string to an Assessment.

    Raises:
        ValidationError: If the value is neither "pass" nor "fail".
    """
    if isinstance(value, Assessment):
        return value
    try:
        return Assessment(value)
    except ValueError:
        raise ValidationError(f"{VALIDATION_INVALID_ASSESSMENT} Got '{value}'.")


class ReviewReportLedger:
    """
    Sequentially numbered review reports ("001", "002", ...).

    Each report is stamped with the review iteration it was filed in.
    """

    def __init__(self, project: ProjectState, id_width: int) -> None:
        """
        Initialize ReviewReportLedger.

        Args:
            project: ProjectState holding the review phase.
            id_width: Zero-padding width of report IDs (ConfigFile.report_id_width).
        """
        self.project = project
        self._id_width = id_width

    @property
    def review(self) -> PhaseRecord:
        return self.project.phase(PHASE_REVIEW)

    @property
    def reports(self) -> List[ReviewReportRecord]:
        return self.review.reports

    @property
    def iteration(self) -> int:
        return self.review.iteration or 1

    def add(self, path: str, assessment: "Assessment | str") -> ReviewReportRecord:
        """Record a review report and mark the review phase in progress.

        Args:
            path: Report document path, relative to the project root.
            assessment: "pass" or "fail".

        Returns:
            The new ReviewReportRecord.

        Raises:
            ValidationError: If the path is empty or the assessment is invalid.
            InvalidOperationError: If the review phase is already completed.
        """
        if not path or not path.strip():
            raise ValidationError(VALIDATION_PATH_REQUIRED)
        result = parse_assessment(assessment)

        review = self.review
        if review.status == PhaseStatus.COMPLETED:
            raise InvalidOperationError("Cannot add report: review phase is already completed.")

        report = ReviewReportRecord(
            id=format_sequence_id(len(review.reports) + 1, self._id_width),
            path=path,
            assessment=result,
            iteration=self.iteration,
        )
        review.reports.append(report)
        review.start()
        return report

    def latest(self) -> Optional[ReviewReportRecord]:
        """Return the most recent report, if any."""
        return self.review.latest_report()

    def list(self) -> List[ReviewReportRecord]:
        return list(self.reports)
