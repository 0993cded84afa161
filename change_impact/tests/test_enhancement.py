"""
AI Second Opinion Test Module

Tests for change_impact/services/enhancement.py. The Anthropic client is
always mocked; no network calls are made.
"""

import json
from unittest.mock import AsyncMock, Mock, patch

import pytest

from change_impact.models.enums import ChangeClassification
from change_impact.services.classifier import predict_impact
from change_impact.services.enhancement import (
    build_enhancement_prompt,
    enhance_prediction,
    parse_enhancement_response,
    should_enhance,
)


LOW_CONFIDENCE_DESCRIPTION = "Update the payroll walkthrough"


def _mock_client(reply_text: str) -> Mock:
    client = Mock()
    client.messages.create = AsyncMock(return_value=Mock(content=[Mock(text=reply_text)]))
    return client


# =============================================================================
# Prompt and Parsing
# =============================================================================


class TestShouldEnhance:
    """Tests for should_enhance."""

    def test_low_confidence_requests_second_opinion(self) -> None:
        analysis = predict_impact(LOW_CONFIDENCE_DESCRIPTION).analysis
        assert analysis.confidence < 0.7
        assert should_enhance(analysis, 0.7) is True

    def test_threshold_is_exclusive(self) -> None:
        analysis = predict_impact("Fix typo in P2P procurement guide").analysis
        assert should_enhance(analysis, analysis.confidence) is False


class TestBuildPrompt:
    """Tests for build_enhancement_prompt."""

    def test_prompt_includes_description_and_engine_context(self) -> None:
        prediction = predict_impact(LOW_CONFIDENCE_DESCRIPTION)
        prompt = build_enhancement_prompt(
            LOW_CONFIDENCE_DESCRIPTION, prediction.analysis, prediction
        )

        assert LOW_CONFIDENCE_DESCRIPTION in prompt
        assert "HCM" in prompt
        assert "Significant Change, 8 days" in prompt
        assert '"daysDelay": number' in prompt


class TestParseResponse:
    """Tests for parse_enhancement_response."""

    def test_parses_plain_json(self) -> None:
        reply = json.dumps({
            "classification": "Major Change",
            "daysDelay": 15,
            "justification": "Payroll changes need compliance review.",
        })
        prediction = parse_enhancement_response(reply)
        assert prediction.classification == ChangeClassification.MAJOR
        assert prediction.daysDelay == 15
        assert prediction.justification == "Payroll changes need compliance review."

    def test_parses_json_wrapped_in_prose(self) -> None:
        reply = (
            "Here is my assessment:\n```json\n"
            '{"classification": "Minor Change", "daysDelay": 2, "justification": "Small fix"}'
            "\n```"
        )
        assert parse_enhancement_response(reply).classification == ChangeClassification.MINOR

    @pytest.mark.parametrize("raw_delay,expected", [("7", 7), (6.5, 7), (-3, 0)])
    def test_delay_is_coerced(self, raw_delay, expected: int) -> None:
        reply = json.dumps({"classification": "Minor Change", "daysDelay": raw_delay})
        assert parse_enhancement_response(reply).daysDelay == expected

    @pytest.mark.parametrize(
        "reply",
        [
            "I cannot classify this.",
            "{not json}",
            '["Major Change", 12]',
            '{"classification": "Huge Change", "daysDelay": 3}',
            '{"classification": "Minor Change"}',
            '{"classification": "Minor Change", "daysDelay": "soon"}',
            '{"classification": "Minor Change", "daysDelay": true}',
        ],
    )
    def test_malformed_reply_raises(self, reply: str) -> None:
        with pytest.raises(ValueError):
            parse_enhancement_response(reply)


# =============================================================================
# Enhancement Flow
# =============================================================================


class TestEnhancePrediction:
    """Tests for enhance_prediction with a mocked Anthropic client."""

    pytestmark = pytest.mark.asyncio

    async def test_uses_model_reply(self, mock_settings: Mock) -> None:
        engine = predict_impact(LOW_CONFIDENCE_DESCRIPTION)
        client = _mock_client(json.dumps({
            "classification": "Major Change",
            "daysDelay": 12,
            "justification": "Payroll changes are audited.",
        }))

        result = await enhance_prediction(
            LOW_CONFIDENCE_DESCRIPTION,
            engine.analysis,
            engine,
            settings=mock_settings,
            client=client,
        )

        assert result.enhanced is True
        assert result.error is None
        assert result.prediction.classification == ChangeClassification.MAJOR
        assert result.prediction.daysDelay == 12
        assert result.prediction.analysis == engine.analysis
        assert result.engine_prediction == engine

        kwargs = client.messages.create.call_args.kwargs
        assert kwargs["model"] == "claude-3-haiku-20240307"
        assert kwargs["max_tokens"] == 500
        assert kwargs["messages"][0]["role"] == "user"

    async def test_client_error_falls_back_to_engine(self, mock_settings: Mock) -> None:
        engine = predict_impact(LOW_CONFIDENCE_DESCRIPTION)
        client = Mock()
        client.messages.create = AsyncMock(side_effect=RuntimeError("overloaded"))

        result = await enhance_prediction(
            LOW_CONFIDENCE_DESCRIPTION,
            engine.analysis,
            engine,
            settings=mock_settings,
            client=client,
        )

        assert result.enhanced is False
        assert result.prediction == engine
        assert result.error == "overloaded"

    async def test_malformed_reply_falls_back_to_engine(self, mock_settings: Mock) -> None:
        engine = predict_impact(LOW_CONFIDENCE_DESCRIPTION)
        client = _mock_client('{"classification": "Unclassified", "daysDelay": 3}')

        result = await enhance_prediction(
            LOW_CONFIDENCE_DESCRIPTION,
            engine.analysis,
            engine,
            settings=mock_settings,
            client=client,
        )

        assert result.enhanced is False
        assert result.prediction == engine
        assert "Unknown classification" in result.error

    async def test_missing_api_key_skips_call(self, mock_settings: Mock) -> None:
        mock_settings.anthropic_api_key = None
        engine = predict_impact(LOW_CONFIDENCE_DESCRIPTION)

        result = await enhance_prediction(
            LOW_CONFIDENCE_DESCRIPTION,
            engine.analysis,
            engine,
            settings=mock_settings,
        )

        assert result.enhanced is False
        assert result.prediction == engine
        assert "ANTHROPIC_API_KEY" in result.error

    async def test_client_built_from_settings_is_closed(self, mock_settings: Mock) -> None:
        engine = predict_impact(LOW_CONFIDENCE_DESCRIPTION)
        client = _mock_client(json.dumps({"classification": "Minor Change", "daysDelay": 2}))
        client.__aenter__ = AsyncMock(return_value=client)
        client.__aexit__ = AsyncMock(return_value=None)

        with patch(
            'change_impact.services.enhancement.AsyncAnthropic',
            return_value=client,
        ) as mock_anthropic:
            result = await enhance_prediction(
                LOW_CONFIDENCE_DESCRIPTION,
                engine.analysis,
                engine,
                settings=mock_settings,
            )

        assert result.enhanced is True
        mock_anthropic.assert_called_once_with(api_key='test-anthropic-api-key', timeout=30.0)
        client.__aexit__.assert_awaited_once()

    async def test_caller_client_is_left_open(self, mock_settings: Mock) -> None:
        engine = predict_impact(LOW_CONFIDENCE_DESCRIPTION)
        client = _mock_client(json.dumps({"classification": "Minor Change", "daysDelay": 2}))
        client.__aexit__ = AsyncMock(return_value=None)

        await enhance_prediction(
            LOW_CONFIDENCE_DESCRIPTION,
            engine.analysis,
            engine,
            settings=mock_settings,
            client=client,
        )

        client.__aexit__.assert_not_awaited()
