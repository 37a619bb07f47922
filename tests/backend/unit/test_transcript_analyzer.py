"""
Unit tests for services.transcript_analyzer module.
Tests per-turn text extraction, fallback logic and GPT response handling.
"""
import datetime as dt
import json

import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from app.schemas.voiceflow import Turn
from app.services.transcript_analyzer import (
    FALLBACK_TOPIC_DE,
    FALLBACK_TOPIC_EN,
    TranscriptAnalyzerService,
    extract_messages,
    extract_turn_text,
    fallback_analysis,
)


T0 = dt.datetime(2024, 11, 3, 10, 0, 0, tzinfo=dt.timezone.utc)


def _turn(type_: str, payload: dict, turn_id: str = "t") -> Turn:
    return Turn(turn_id=turn_id, type=type_, payload=payload, start_time=T0)


def _slate(*blocks) -> dict:
    return {"payload": {"slate": {"content": [{"children": list(children)} for children in blocks]}}}


def _gpt_response(content: str):
    body = {"choices": [{"message": {"content": content}}]}
    return MagicMock(status_code=200, json=lambda: body, raise_for_status=MagicMock())


def _analyzer() -> TranscriptAnalyzerService:
    analyzer = TranscriptAnalyzerService()
    analyzer.api_key = "sk-test"
    return analyzer


class TestExtractTurnText:
    """Tests for per-kind text extraction."""

    def test_text_turn_flattens_slate_blocks(self):
        turn = _turn("text", _slate(
            [{"text": "Hello "}, {"text": "there", "fontWeight": "700"}],
            [{"text": "Visit "}, {"type": "link", "url": "https://x.test", "children": [{"text": "our site"}]}],
        ))
        assert extract_turn_text(turn) == "Hello there\nVisit our site"

    def test_link_without_children_contributes_nothing(self):
        turn = _turn("text", _slate([{"text": "See "}, {"type": "link", "children": []}]))
        assert extract_turn_text(turn) == "See"

    def test_request_prefers_query_then_label(self):
        assert extract_turn_text(_turn("request", {"payload": {"query": "Hi", "label": "Button"}})) == "Hi"
        assert extract_turn_text(_turn("request", {"payload": {"label": "Button"}})) == "Button"

    def test_launch_request_gets_marker(self):
        turn = _turn("request", {"type": "launch", "payload": {}})
        assert extract_turn_text(turn) == "Conversation started"

    def test_generic_fields_as_last_resort(self):
        assert extract_turn_text(_turn("text", {"message": "top level"})) == "top level"
        assert extract_turn_text(_turn("request", {"text": "plain"})) == "plain"
        assert extract_turn_text(_turn("text", {"data": {"message": "nested"}})) == "nested"
        assert extract_turn_text(_turn("request", {"data": {"text": "nested text"}})) == "nested text"

    def test_empty_slate_falls_through_to_message(self):
        payload = {**_slate([{"text": ""}]), "message": "fallback"}
        assert extract_turn_text(_turn("text", payload)) == "fallback"

    def test_other_kinds_yield_nothing(self):
        assert extract_turn_text(_turn("choice", {"message": "ignored"})) == ""
        assert extract_turn_text(_turn("debug", {"text": "ignored"})) == ""

    def test_unexpected_shapes_never_raise(self):
        assert extract_turn_text(_turn("text", {"payload": {"slate": {"content": "not a list"}}})) == ""
        assert extract_turn_text(_turn("text", {"payload": {"slate": {"content": [None, 3]}}})) == ""
        assert extract_turn_text(_turn("request", {"payload": "string", "message": 42})) == ""

    def test_extract_messages_skips_empty(self):
        turns = [
            _turn("request", {"type": "launch"}),
            _turn("choice", {}),
            _turn("text", _slate([{"text": "Welcome!"}])),
            _turn("request", {}),
        ]
        assert extract_messages(turns) == ["Conversation started", "Welcome!"]


class TestAnalyzerFallback:
    """Tests for the fallback analysis."""

    @pytest.mark.asyncio
    async def test_no_text_returns_fallback_without_calling_api(self):
        analyzer = _analyzer()
        with patch("httpx.AsyncClient") as mock_client:
            result = await analyzer.analyze([_turn("choice", {}), _turn("text", {})])

        mock_client.assert_not_called()
        assert result.language == "en"
        assert result.name == "unknown"
        assert result.topic_en == FALLBACK_TOPIC_EN
        assert result.topic_de == FALLBACK_TOPIC_DE
        assert result == fallback_analysis()

    @pytest.mark.asyncio
    async def test_missing_api_key_returns_fallback(self):
        analyzer = _analyzer()
        with patch.object(analyzer, "is_available", return_value=False), \
             patch("httpx.AsyncClient") as mock_client:
            result = await analyzer.analyze([_turn("request", {"payload": {"query": "Hi"}})])

        mock_client.assert_not_called()
        assert result == fallback_analysis()

    @pytest.mark.asyncio
    async def test_api_error_returns_fallback(self):
        analyzer = _analyzer()
        with patch("httpx.AsyncClient") as mock_client:
            mock_client.return_value.__aenter__.return_value.post.side_effect = Exception("API Error")
            result = await analyzer.analyze([_turn("request", {"payload": {"query": "Hi"}})])

        assert result == fallback_analysis()

    @pytest.mark.asyncio
    async def test_invalid_json_returns_fallback(self):
        analyzer = _analyzer()
        with patch("httpx.AsyncClient") as mock_client:
            mock_client.return_value.__aenter__.return_value.post = AsyncMock(
                return_value=_gpt_response("definitely not json")
            )
            result = await analyzer.analyze([_turn("request", {"payload": {"query": "Hi"}})])

        assert result == fallback_analysis()

    @pytest.mark.asyncio
    async def test_missing_keys_return_fallback(self):
        analyzer = _analyzer()
        with patch("httpx.AsyncClient") as mock_client:
            mock_client.return_value.__aenter__.return_value.post = AsyncMock(
                return_value=_gpt_response(json.dumps({"language": "de"}))
            )
            result = await analyzer.analyze([_turn("request", {"payload": {"query": "Hallo"}})])

        assert result == fallback_analysis()

    @pytest.mark.asyncio
    async def test_empty_content_returns_fallback(self):
        analyzer = _analyzer()
        with patch("httpx.AsyncClient") as mock_client:
            mock_client.return_value.__aenter__.return_value.post = AsyncMock(return_value=_gpt_response(""))
            result = await analyzer.analyze([_turn("request", {"payload": {"query": "Hi"}})])

        assert result == fallback_analysis()


class TestAnalyzerAPI:
    """Tests for GPT API integration (mocked)."""

    @pytest.mark.asyncio
    async def test_parses_analysis_and_sends_conversation_in_order(self):
        analyzer = _analyzer()
        content = json.dumps({
            "language": "de",
            "topic_en": "🚗 car maintenance discussion",
            "topic_de": "🚗 Diskussion über Fahrzeugwartung",
            "name": "Max Muster",
        })
        turns = [
            _turn("request", {"type": "launch"}, "t1"),
            _turn("text", _slate([{"text": "Wie kann ich helfen?"}]), "t2"),
            _turn("request", {"payload": {"query": "Mein Auto macht Geräusche"}}, "t3"),
        ]

        with patch("httpx.AsyncClient") as mock_client:
            post = AsyncMock(return_value=_gpt_response(content))
            mock_client.return_value.__aenter__.return_value.post = post

            result = await analyzer.analyze(turns)

        assert result.language == "de"
        assert result.topic == "🚗 car maintenance discussion"
        assert result.topic_translations == {
            "en": "🚗 car maintenance discussion",
            "de": "🚗 Diskussion über Fahrzeugwartung",
        }
        assert result.name == "Max Muster"

        post.assert_awaited_once()
        payload = post.call_args.kwargs["json"]
        assert payload["response_format"] == {"type": "json_object"}
        prompt = payload["messages"][0]["content"]
        assert "Conversation started\nWie kann ich helfen?\nMein Auto macht Geräusche" in prompt
        assert post.call_args.kwargs["headers"]["Authorization"] == "Bearer sk-test"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("name_field", [{"name": None}, {}])
    async def test_null_or_missing_name_keeps_language_and_topics(self, name_field):
        analyzer = _analyzer()
        content = json.dumps({"language": "de", "topic_en": "🚗 cars", "topic_de": "🚗 Autos", **name_field})

        with patch("httpx.AsyncClient") as mock_client:
            mock_client.return_value.__aenter__.return_value.post = AsyncMock(
                return_value=_gpt_response(content)
            )
            result = await analyzer.analyze([_turn("request", {"payload": {"query": "Hallo"}})])

        assert result.language == "de"
        assert result.topic_translations == {"en": "🚗 cars", "de": "🚗 Autos"}
        assert result.name == "unknown"
