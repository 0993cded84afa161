"""
Static Taxonomy and Historical Pattern Tables

This module holds the read-only configuration the change impact engine scores
against:

- Change definitions: three keyword buckets (minor/significant/major) with
  their typical delay ranges in business days
- Value-stream profiles: average delay, risk factor and paused-task counts per
  ERP value stream, plus a 'default' profile
- Value-stream alias patterns: an ORDERED list of (name, aliases) pairs
- Risk keywords: severity and average delay per risk phrase
- ITC phase complexity multipliers
- Project phase / risk status delay multipliers and delay-indicator phrases

The numbers were hand-tuned against historical ClickUp and ISG course data;
the engine's thresholds depend on them, so change them together.

All tables are immutable (MappingProxyType, tuples, frozen dataclasses) and
safe to share across concurrent requests.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

from change_impact.models.enums import ProjectPhase, RiskStatus, SeverityTier


# =============================================================================
# Table Entry Types
# =============================================================================

@dataclass(frozen=True)
class DelayRange:
    """Typical delay range for a keyword bucket, in business days."""
    min: int
    max: int


@dataclass(frozen=True)
class KeywordBucket:
    """
    One severity bucket of the change definitions.

    Attributes:
        keywords: Lowercase phrases, in match-reporting order
        delay_range: Typical delay for changes in this bucket
    """
    keywords: Tuple[str, ...]
    delay_range: DelayRange


@dataclass(frozen=True)
class ValueStreamProfile:
    """
    Historical delay/risk statistics for one value stream.

    Attributes:
        avg_delay: Average delay in business days
        risk_factor: Relative risk (0-1)
        paused_tasks: Paused task count, used as a secondary risk nudge
        common_issues: Typical issue areas (informational only)
    """
    avg_delay: float
    risk_factor: float
    paused_tasks: int = 0
    common_issues: Tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class RiskKeywordProfile:
    """Severity (0-1) and average delay in days for a risk phrase."""
    severity: float
    avg_delay: int


# =============================================================================
# Change Definitions
# =============================================================================

CHANGE_DEFINITIONS: Mapping[SeverityTier, KeywordBucket] = MappingProxyType({
    SeverityTier.MINOR: KeywordBucket(
        keywords=(
            'quick note', 'tip', 'quick reference', 'link', 'caption', 'label',
            'font', 'color', 'emphasis', 'slide title', 'header', 'clarification',
            'fact correction', 'minor script edit', 'voiceover', 'reorder bullet',
            'swap image', 'icon', 'terminology tweak', 'adjust word', 'narration',
            'audio suggestion', 'video suggestion', 'sequence of points',
            'content adjustment', 'highlight keyword', 'hyperlink', 'resource',
            'glossary', 'side note', 'tip box', 'stock image', 'replace term',
            'rewording for clarity', 'slight rewording', 'update date', 'statistic',
            'name', 'screenshot', 'field addition', 'field removal', 'typo',
        ),
        delay_range=DelayRange(min=0, max=5),
    ),
    SeverityTier.SIGNIFICANT: KeywordBucket(
        keywords=(
            'media overhaul', 'interactivity overhaul', 'delay sme', 'sme feedback',
            'assessment', 'certification requirement', 'content rewrite', 'module',
            'course flow', 'sequence', 'compliance', 'legal requirement',
            'new stakeholder', 'complex interaction', 'simulation', 'learning objective',
            'legal review', 'instructional strategy', 'structural change',
            'bottleneck', 'review cycle', 'reformat', 'rebuild', 'valid assessment',
            'reliable assessment', 'lms integration', 'custom video', 'animation',
            'instructional design', 'programming', 'branching scenario', 'drag-and-drop',
            'media production', 'reorganization',
            'navigation logic', 'scripting', 'storyboarding', 'production', 'editing',
            'vague feedback', 'contradictory feedback',
        ),
        delay_range=DelayRange(min=5, max=10),
    ),
    SeverityTier.MAJOR: KeywordBucket(
        keywords=(
            'tooling overhaul', 'platform overhaul', 'pilot feedback', 'testing feedback',
            'sme unavailable', 'compliance change', 'legal change', 'policy change',
            'delivery format', 'wbt to ilt', 'ilt to wbt', 'target audience shift',
            'shifting target audience',
            'stakeholder disruption', 'resource disruption', 'leadership change',
            'organizational change', 'tech stack', 'integration issue', 'course purpose',
            'course goal', 'key sme loss', 'sensitive topic', 'legal team', 'brand team',
            'strategic shift', 'directional shift', 'regulatory requirement',
            'pilot flaw', 'major flaw', 'redesign', 'budget freeze', 'funding cut',
            'lms change', 'authoring tool', 'hris', 'crm', 'compliance tracking',
            'business objective', 'learning outcome', 'instructor-led', 'entry-level',
            'senior manager', 'complete redesign', 'financial constraint', 'priority shift',
            'negative pilot', 'accessibility failure', 'usability failure',
            'accessibility audit', 'usability testing', 'platform change',
            'tone, content, and complexity',
        ),
        delay_range=DelayRange(min=11, max=30),
    ),
})

# Tier evaluation order for classification: highest severity first
TIER_PRIORITY: Tuple[SeverityTier, ...] = (
    SeverityTier.MAJOR,
    SeverityTier.SIGNIFICANT,
    SeverityTier.MINOR,
)


# =============================================================================
# Value Streams
# =============================================================================

DEFAULT_VALUE_STREAM = 'default'

VALUE_STREAM_PROFILES: Mapping[str, ValueStreamProfile] = MappingProxyType({
    'O2C': ValueStreamProfile(12, 0.8, 11, ('billing', 'invoicing', 'costing sheets')),
    'P2P': ValueStreamProfile(8, 0.65, 3, ('procurement', 'purchase orders')),
    'R2R': ValueStreamProfile(14, 0.85, 5, ('tax accounting', 'federal tax', 'state tax', 'provision')),
    'HCM': ValueStreamProfile(6, 0.55, 0, ('payroll', 'human resources')),
    'PLM': ValueStreamProfile(9, 0.7, 1, ('manufacturing', 'product lifecycle')),
    'PLP': ValueStreamProfile(10, 0.75, 2, ('project management', 'wbs', 'project approval')),
    'A2R': ValueStreamProfile(11, 0.8, 2, ('asset accounting', 'depreciation', 'asset transfer')),
    'PTS': ValueStreamProfile(8, 0.65, 1, ('production', 'service orders')),
    'Finance': ValueStreamProfile(10, 0.75, 0, ('financial reporting', 'accounting')),
    'Tax Accounting': ValueStreamProfile(16, 0.9, 5, ('tax compliance', 'tax provision', 'tax return')),
    DEFAULT_VALUE_STREAM: ValueStreamProfile(9, 0.7),
})

# Evaluated in order. Tax Accounting is checked before the generic finance
# streams so tax-specific text is attributed to it.
VALUE_STREAM_PATTERNS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ('Tax Accounting', ('tax accounting', 'taxation', 'tax compliance', 'tax reporting')),
    ('O2C', ('o2c', 'order to cash', 'order-to-cash', 'sales', 'billing', 'revenue', 'customer')),
    ('P2P', ('p2p', 'procure to pay', 'procure-to-pay', 'procurement', 'purchasing', 'vendor', 'supplier')),
    ('R2R', ('r2r', 'record to report', 'record-to-report', 'reporting', 'financial reporting')),
    ('HCM', ('hcm', 'human capital', 'hr', 'human resources', 'payroll', 'employee')),
    ('PLM', ('plm', 'product lifecycle', 'product', 'manufacturing')),
    ('Finance', ('finance', 'financial', 'accounting', 'budget', 'cost')),
)


# =============================================================================
# Risk Keywords
# =============================================================================

RISK_KEYWORDS: Mapping[str, RiskKeywordProfile] = MappingProxyType({
    'blocked': RiskKeywordProfile(severity=0.95, avg_delay=15),
    'behind schedule': RiskKeywordProfile(severity=0.8, avg_delay=12),
    'curriculum redesign': RiskKeywordProfile(severity=0.85, avg_delay=14),
    'change impacts': RiskKeywordProfile(severity=0.75, avg_delay=8),
    'pending update': RiskKeywordProfile(severity=0.7, avg_delay=6),
    'waiting': RiskKeywordProfile(severity=0.7, avg_delay=5),
    'dependency': RiskKeywordProfile(severity=0.8, avg_delay=7),
    'sme review': RiskKeywordProfile(severity=0.6, avg_delay=3),
    'approval needed': RiskKeywordProfile(severity=0.7, avg_delay=5),
    'scope change': RiskKeywordProfile(severity=0.9, avg_delay=12),
    'technical issue': RiskKeywordProfile(severity=0.8, avg_delay=8),
    'resource constraint': RiskKeywordProfile(severity=0.85, avg_delay=10),
    'stakeholder approval': RiskKeywordProfile(severity=0.75, avg_delay=9),
    'final approval': RiskKeywordProfile(severity=0.6, avg_delay=4),
})


# =============================================================================
# Project Patterns
# =============================================================================

PHASE_RISK_MULTIPLIERS: Mapping[ProjectPhase, float] = MappingProxyType({
    ProjectPhase.NOT_STARTED: 1.0,
    ProjectPhase.DESIGN: 1.2,
    ProjectPhase.ALPHA_DEVELOPMENT: 1.3,
    ProjectPhase.BETA_DEVELOPMENT: 1.4,
    ProjectPhase.FINAL_APPROVAL: 1.5,
    ProjectPhase.COMPLETE: 0.8,
})

RISK_STATUS_MULTIPLIERS: Mapping[RiskStatus, float] = MappingProxyType({
    RiskStatus.ON_TRACK: 1.0,
    RiskStatus.BEHIND_SCHEDULE: 1.6,
    RiskStatus.AT_RISK: 1.4,
    RiskStatus.BLOCKED: 2.0,
})

DELAY_INDICATORS: Tuple[str, ...] = (
    'pending update of change impacts',
    'curriculum redesign',
    'behind schedule',
    'blocked',
    'resource constraint',
    'stakeholder approval',
    'scope change',
)

# Each entry: (phrases, multiplier). First entry with any phrase present wins.
DELAY_PHRASE_MULTIPLIERS: Tuple[Tuple[Tuple[str, ...], float], ...] = (
    (('final approval', 'sign off'), PHASE_RISK_MULTIPLIERS[ProjectPhase.FINAL_APPROVAL]),
    (('behind schedule', 'delayed'), RISK_STATUS_MULTIPLIERS[RiskStatus.BEHIND_SCHEDULE]),
    (('blocked',), RISK_STATUS_MULTIPLIERS[RiskStatus.BLOCKED]),
)

MODULE_KEYWORDS: Tuple[str, ...] = ('module', 'course', 'training', 'lesson', 'unit')


# =============================================================================
# ITC Phase Complexity
# =============================================================================

DEFAULT_ITC_PHASE = 'default'

ITC_PHASE_COMPLEXITY: Mapping[str, float] = MappingProxyType({
    'ITC1': 1.0,
    'ITC2': 1.3,
    'ITC3': 1.5,
    'ITC3B': 1.7,
    DEFAULT_ITC_PHASE: 1.2,
})


# =============================================================================
# Lookups
# =============================================================================

def get_value_stream_profile(stream: str) -> ValueStreamProfile:
    """
    Get the historical profile for a value stream.

    Unknown stream names fall back to the 'default' profile.
    """
    return VALUE_STREAM_PROFILES.get(stream, VALUE_STREAM_PROFILES[DEFAULT_VALUE_STREAM])


def get_itc_multiplier(phase: Optional[str]) -> float:
    """
    Get the complexity multiplier for an ITC phase token such as 'ITC3B'.

    Args:
        phase: Upper-cased phase token, or None

    Returns:
        The phase multiplier; unrecognized phases get the default (1.2)
    """
    if phase is None:
        return ITC_PHASE_COMPLEXITY[DEFAULT_ITC_PHASE]
    return ITC_PHASE_COMPLEXITY.get(phase, ITC_PHASE_COMPLEXITY[DEFAULT_ITC_PHASE])


def get_keyword_bucket(tier: SeverityTier) -> KeywordBucket:
    """Get the change definition bucket for a severity tier."""
    return CHANGE_DEFINITIONS[tier]


__all__ = [
    "DelayRange",
    "KeywordBucket",
    "ValueStreamProfile",
    "RiskKeywordProfile",
    "CHANGE_DEFINITIONS",
    "TIER_PRIORITY",
    "DEFAULT_VALUE_STREAM",
    "VALUE_STREAM_PROFILES",
    "VALUE_STREAM_PATTERNS",
    "RISK_KEYWORDS",
    "PHASE_RISK_MULTIPLIERS",
    "RISK_STATUS_MULTIPLIERS",
    "DELAY_INDICATORS",
    "DELAY_PHRASE_MULTIPLIERS",
    "MODULE_KEYWORDS",
    "DEFAULT_ITC_PHASE",
    "ITC_PHASE_COMPLEXITY",
    "get_value_stream_profile",
    "get_itc_multiplier",
    "get_keyword_bucket",
]
