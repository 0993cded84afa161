"""
Enumeration definitions for the change impact prediction service.

All enums inherit from both `str` and `Enum` to ensure JSON serialization
compatibility with Pydantic models, so API responses carry the plain string
values (e.g. "Major Change") rather than enum member names.
"""

from enum import Enum


class ChangeClassification(str, Enum):
    """
    Severity class assigned to a proposed change.

    Values: 'Minor Change' | 'Significant Change' | 'Major Change'

    Every description classifies as exactly one of these; there is no
    "unclassified" outcome.
    """
    MINOR = "Minor Change"
    SIGNIFICANT = "Significant Change"
    MAJOR = "Major Change"


class SeverityTier(str, Enum):
    """
    Keyword taxonomy bucket names.

    Each tier owns an ordered keyword list and a typical delay range:
    - minor: 0-5 business days
    - significant: 5-10 business days
    - major: 11-30 business days

    Ordering matters for classification: the highest non-empty tier wins.
    """
    MINOR = "minor"
    SIGNIFICANT = "significant"
    MAJOR = "major"


class ProjectPhase(str, Enum):
    """
    Course development phases tracked in the historical project data.

    Only FINAL_APPROVAL currently drives a delay multiplier (detected from the
    literal phrases "final approval" / "sign off"); the remaining phases are
    kept so the multiplier table mirrors the historical spreadsheet.
    """
    NOT_STARTED = "Not Started"
    DESIGN = "Design"
    ALPHA_DEVELOPMENT = "Alpha Development"
    BETA_DEVELOPMENT = "Beta Development"
    FINAL_APPROVAL = "Final Approval"
    COMPLETE = "Complete"


class RiskStatus(str, Enum):
    """
    Project risk status labels from the historical project data.

    BEHIND_SCHEDULE and BLOCKED are detected from literal phrases in the
    description and scale the estimated delay.
    """
    ON_TRACK = "On Track"
    BEHIND_SCHEDULE = "Behind Schedule"
    AT_RISK = "At Risk"
    BLOCKED = "Blocked"
