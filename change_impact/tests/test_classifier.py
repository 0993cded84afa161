"""
Change Classifier Test Module

Tests for change_impact/services/classifier.py covering:
- Keyword tier priority (major over significant over minor)
- Delay bounds per keyword branch
- Threshold fallback when no taxonomy keyword matched
- Justification content
- End-to-end predictions for representative descriptions
"""

from typing import Dict

import pytest

from change_impact.models.enums import ChangeClassification
from change_impact.models.schemas import Analysis, MatchedKeywords, RiskFactor
from change_impact.services.classifier import (
    classify_change,
    predict_batch,
    predict_impact,
    summarize_items,
)


def _analysis(
    estimated_delay: int = 0,
    complexity: float = 0.0,
    minor=None,
    significant=None,
    major=None,
    risks=None,
    streams=None,
) -> Analysis:
    return Analysis(
        description="test change",
        valueStreams=streams or [],
        riskFactors=risks or [],
        matchedKeywords=MatchedKeywords(
            minor=minor or [],
            significant=significant or [],
            major=major or [],
        ),
        complexityScore=complexity,
        estimatedDelay=estimated_delay,
        confidence=0.5,
    )


# =============================================================================
# Keyword Branches
# =============================================================================


class TestKeywordBranches:
    """Tests for the keyword-driven branches of classify_change."""

    @pytest.mark.parametrize("estimated_delay,expected", [(3, 11), (11, 11), (40, 40)])
    def test_major_delay_has_floor(self, estimated_delay: int, expected: int) -> None:
        prediction = classify_change(_analysis(estimated_delay, major=["redesign"]))
        assert prediction.classification == ChangeClassification.MAJOR
        assert prediction.daysDelay == expected

    @pytest.mark.parametrize("estimated_delay,expected", [(2, 5), (7, 7), (30, 10)])
    def test_significant_delay_is_clamped(self, estimated_delay: int, expected: int) -> None:
        prediction = classify_change(_analysis(estimated_delay, significant=["module"]))
        assert prediction.classification == ChangeClassification.SIGNIFICANT
        assert prediction.daysDelay == expected

    @pytest.mark.parametrize("estimated_delay,expected", [(0, 0), (2, 2), (14, 5)])
    def test_minor_delay_has_ceiling(self, estimated_delay: int, expected: int) -> None:
        prediction = classify_change(_analysis(estimated_delay, minor=["typo"]))
        assert prediction.classification == ChangeClassification.MINOR
        assert prediction.daysDelay == expected

    def test_major_wins_over_lower_tiers(self) -> None:
        analysis = _analysis(8, minor=["typo"], significant=["module"], major=["redesign"])
        assert classify_change(analysis).classification == ChangeClassification.MAJOR

    def test_significant_wins_over_minor(self) -> None:
        analysis = _analysis(8, minor=["typo"], significant=["module"])
        assert classify_change(analysis).classification == ChangeClassification.SIGNIFICANT

    def test_keyword_branch_ignores_metrics(self) -> None:
        analysis = _analysis(60, complexity=1.0, minor=["typo"])
        prediction = classify_change(analysis)
        assert prediction.classification == ChangeClassification.MINOR
        assert prediction.daysDelay == 5


# =============================================================================
# Threshold Fallback
# =============================================================================


class TestFallbackThresholds:
    """Tests for the no-keyword fallback branch."""

    def test_low_metrics_without_risk_is_minor(self) -> None:
        prediction = classify_change(_analysis(3, complexity=0.2))
        assert prediction.classification == ChangeClassification.MINOR
        assert prediction.daysDelay == 3

    def test_complexity_at_threshold_is_not_minor(self) -> None:
        prediction = classify_change(_analysis(4, complexity=0.3))
        assert prediction.classification == ChangeClassification.SIGNIFICANT
        assert prediction.daysDelay == 4

    def test_risk_factor_prevents_minor(self) -> None:
        risks = [RiskFactor(factor="waiting", severity=0.7, expectedDelay=5)]
        prediction = classify_change(_analysis(3, complexity=0.2, risks=risks))
        assert prediction.classification == ChangeClassification.SIGNIFICANT
        assert "waiting" in prediction.justification

    def test_moderate_metrics_are_significant(self) -> None:
        prediction = classify_change(_analysis(10, complexity=0.69))
        assert prediction.classification == ChangeClassification.SIGNIFICANT
        assert prediction.daysDelay == 10

    @pytest.mark.parametrize("estimated_delay,complexity", [(11, 0.5), (8, 0.7), (25, 1.0)])
    def test_high_metrics_are_major_and_keep_estimate(
        self,
        estimated_delay: int,
        complexity: float,
    ) -> None:
        prediction = classify_change(_analysis(estimated_delay, complexity=complexity))
        assert prediction.classification == ChangeClassification.MAJOR
        assert prediction.daysDelay == estimated_delay

    def test_major_fallback_reports_complexity_percent(self) -> None:
        prediction = classify_change(_analysis(25, complexity=1.0, streams=["O2C"]))
        assert "100%" in prediction.justification
        assert "O2C" in prediction.justification


# =============================================================================
# Justification
# =============================================================================


class TestJustification:
    """Tests for justification wording."""

    def test_summarize_items_counts_remaining(self) -> None:
        assert summarize_items(["a", "b", "c", "d", "e"]) == "a, b, c and 2 more"

    def test_summarize_items_short_list(self) -> None:
        assert summarize_items(["a", "b"]) == "a, b"

    def test_major_lists_three_keywords_and_remaining_count(self) -> None:
        analysis = _analysis(12, major=["a", "b", "c", "d", "e"], streams=["R2R"])
        justification = classify_change(analysis).justification
        assert "a, b, c and 2 more" in justification
        assert "R2R" in justification

    def test_minor_names_matched_keywords(self) -> None:
        justification = classify_change(_analysis(2, minor=["typo", "caption"])).justification
        assert "typo, caption" in justification


# =============================================================================
# End-to-End Predictions
# =============================================================================


class TestPredictImpact:
    """End-to-end tests for predict_impact."""

    def test_minor_keyword_description(self, sample_descriptions: Dict[str, str]) -> None:
        prediction = predict_impact(sample_descriptions['minor_keyword'])
        assert prediction.classification == ChangeClassification.MINOR
        assert prediction.daysDelay == 5
        assert "typo" in prediction.justification

    def test_significant_keyword_description(self, sample_descriptions: Dict[str, str]) -> None:
        prediction = predict_impact(sample_descriptions['significant_keyword'])
        assert prediction.classification == ChangeClassification.SIGNIFICANT
        assert prediction.daysDelay == 9
        assert "module" in prediction.justification

    def test_major_keyword_description(self, sample_descriptions: Dict[str, str]) -> None:
        prediction = predict_impact(sample_descriptions['major_keyword'])
        assert prediction.classification == ChangeClassification.MAJOR
        assert prediction.daysDelay == 29

    def test_high_risk_description_falls_back_to_major(
        self,
        sample_descriptions: Dict[str, str],
    ) -> None:
        prediction = predict_impact(sample_descriptions['fallback_major'])
        assert prediction.classification == ChangeClassification.MAJOR
        assert prediction.daysDelay == 49
        assert prediction.analysis.valueStreams == ["O2C"]

    def test_moderate_description_falls_back_to_significant(
        self,
        sample_descriptions: Dict[str, str],
    ) -> None:
        prediction = predict_impact(sample_descriptions['fallback_significant'])
        assert prediction.classification == ChangeClassification.SIGNIFICANT
        assert prediction.daysDelay == 8

    def test_new_process_module_is_significant(self) -> None:
        prediction = predict_impact("Add a completely new process module due to scope change")
        assert prediction.classification == ChangeClassification.SIGNIFICANT
        assert 5 <= prediction.daysDelay <= 10

    def test_empty_description_still_classifies(self) -> None:
        prediction = predict_impact("")
        assert prediction.classification == ChangeClassification.MAJOR
        assert prediction.daysDelay == 11

    def test_prediction_carries_analysis(self) -> None:
        prediction = predict_impact("Fix typo in P2P procurement guide")
        assert prediction.analysis is not None
        assert prediction.analysis.matchedKeywords.minor == ["typo"]

    def test_prediction_is_idempotent(self, sample_descriptions: Dict[str, str]) -> None:
        for description in sample_descriptions.values():
            assert predict_impact(description).model_dump_json() == \
                predict_impact(description).model_dump_json()

    def test_predict_batch_preserves_order(self, sample_descriptions: Dict[str, str]) -> None:
        descriptions = [sample_descriptions['major_keyword'], sample_descriptions['minor_keyword']]
        predictions = predict_batch(descriptions)
        assert [p.classification for p in predictions] == [
            ChangeClassification.MAJOR,
            ChangeClassification.MINOR,
        ]
