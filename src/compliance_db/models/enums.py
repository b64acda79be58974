"""Database-level enumerations for assessments."""

import enum


class AssessmentStatus(str, enum.Enum):
    """Lifecycle states for an assessment.

    Transitions:
        in_progress -> completed   (a terminal sentinel was reached)
        completed -> in_progress   (retreat from the summary, or restart)
    """

    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
