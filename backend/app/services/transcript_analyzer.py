"""
Transcript Analysis Service

Uses OpenAI GPT API to analyze a synced transcript:
1. Primary language (ISO 639-1)
2. Short emoji-prefixed topic in English and German
3. Name/identifier of the person talking to the assistant

Any failure maps to a fixed fallback analysis; it never raises.
"""
import json
import logging
from typing import Any, Callable, Dict, List, Optional, Sequence

import httpx
from pydantic import BaseModel

from ..config import settings
from ..schemas.voiceflow import TranscriptAnalysis, Turn

logger = logging.getLogger("uvicorn.error")

UNKNOWN_NAME = "unknown"
FALLBACK_TOPIC_EN = "💭 Unknown Topic"
FALLBACK_TOPIC_DE = "💭 Unbekanntes Thema"
LAUNCH_MARKER = "Conversation started"


def fallback_analysis() -> TranscriptAnalysis:
    return TranscriptAnalysis(
        language="en",
        topic_en=FALLBACK_TOPIC_EN,
        topic_de=FALLBACK_TOPIC_DE,
        name=UNKNOWN_NAME,
    )


class AnalysisResponse(BaseModel):
    """JSON object the model is asked to return"""
    language: str
    topic_en: str
    topic_de: str
    name: Optional[str] = None  # null or missing means no identifiable person


# -------- text extraction, one function per turn kind --------
def _as_text(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _flatten_slate(content: Any) -> str:
    """Rich text blocks -> newline-joined lines; link nodes contribute their first child's text."""
    if not isinstance(content, list):
        return ""
    lines = []
    for block in content:
        children = block.get("children") if isinstance(block, dict) else None
        parts = []
        for child in children if isinstance(children, list) else []:
            if not isinstance(child, dict):
                continue
            if child.get("type") == "link":
                nested = child.get("children")
                if isinstance(nested, list) and nested and isinstance(nested[0], dict):
                    parts.append(_as_text(nested[0].get("text")))
                continue
            parts.append(_as_text(child.get("text")))
        lines.append("".join(parts))
    return "\n".join(lines).strip()


def _extract_text_turn(payload: Dict[str, Any]) -> str:
    inner = payload.get("payload")
    slate = inner.get("slate") if isinstance(inner, dict) else None
    if isinstance(slate, dict):
        return _flatten_slate(slate.get("content"))
    return ""


def _extract_request_turn(payload: Dict[str, Any]) -> str:
    inner = payload.get("payload")
    if isinstance(inner, dict):
        for key in ("query", "label"):
            text = _as_text(inner.get(key))
            if text:
                return text
    if payload.get("type") == "launch":
        return LAUNCH_MARKER
    return ""


def _extract_generic(payload: Dict[str, Any]) -> str:
    """Last resort: message/text at top level, then under data."""
    for key in ("message", "text"):
        text = _as_text(payload.get(key))
        if text:
            return text
    data = payload.get("data")
    if isinstance(data, dict):
        for key in ("message", "text"):
            text = _as_text(data.get(key))
            if text:
                return text
    return ""


_EXTRACTORS: Dict[str, Callable[[Dict[str, Any]], str]] = {
    "text": _extract_text_turn,      # Assistant responses
    "request": _extract_request_turn,  # User input
}


def extract_turn_text(turn: Turn) -> str:
    """Readable text of one turn, "" for kinds that carry no conversation text."""
    extractor = _EXTRACTORS.get(turn.type)
    if extractor is None:
        return ""
    payload = turn.payload if isinstance(turn.payload, dict) else {}
    try:
        # An empty slate or request still falls through to message/text fields
        return extractor(payload) or _extract_generic(payload)
    except Exception as e:
        logger.warning("[analyzer] Could not extract text from turn %s: %r", turn.turn_id, e)
        return ""


def extract_messages(turns: Sequence[Turn]) -> List[str]:
    messages = [text for text in (extract_turn_text(t) for t in turns) if text]
    logger.info("[analyzer] Extracted %d messages from %d turns", len(messages), len(turns))
    return messages


class TranscriptAnalyzerService:
    """Transcript language/topic/name analysis via GPT"""

    def __init__(self):
        self.api_key = settings.openai_api_key
        self.model = settings.gpt_model
        self.temperature = settings.gpt_temperature
        self.api_url = settings.openai_api_url
        self.timeout = settings.analysis_timeout

    def is_available(self) -> bool:
        """Check if API key is configured"""
        return bool(self.api_key)

    async def analyze(self, turns: Sequence[Turn]) -> TranscriptAnalysis:
        """
        Analyze the turns (already in normalized order).

        No request is made when no turn yields text or no API key is set.
        """
        messages = extract_messages(turns)
        if not messages:
            return fallback_analysis()

        if not self.is_available():
            logger.warning("[analyzer] OPENAI_API_KEY not set, using fallback analysis")
            return fallback_analysis()

        try:
            headers = {
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json"
            }
            payload = {
                "model": self.model,
                "messages": [
                    {"role": "user", "content": self._build_prompt("\n".join(messages))}
                ],
                "temperature": self.temperature,
                "response_format": {"type": "json_object"}  # Require JSON response
            }

            async with httpx.AsyncClient(timeout=self.timeout) as client:
                resp = await client.post(self.api_url, headers=headers, json=payload)
                resp.raise_for_status()
                result = resp.json()

            content = result["choices"][0]["message"]["content"]
            if not content:
                raise ValueError("Empty response from OpenAI")
            parsed = AnalysisResponse.model_validate(json.loads(content))

            logger.info("[analyzer] Analysis completed: %s", parsed.model_dump())
            return TranscriptAnalysis(
                language=parsed.language,
                topic_en=parsed.topic_en,
                topic_de=parsed.topic_de,
                name=parsed.name or UNKNOWN_NAME,
            )

        except Exception as e:
            logger.error("[analyzer] OpenAI analysis failed, using fallback: %r", e)
            return fallback_analysis()

    def _build_prompt(self, conversation: str) -> str:
        """Build the analysis prompt"""
        return f"""Analyze the following conversation and provide:
1. The primary language used (return just the ISO 639-1 code, e.g., 'en' for English)
2. A topic summary in both English and German, each in the format: "[relevant emoji] 3-5 word description"
   For example:
   English: "🚗 car maintenance discussion"
   German: "🚗 Diskussion über Fahrzeugwartung"
3. Any name or identifier for the person having the conversation with the AI Assistant that can be determined from the content. If no clear name/identifier is found, return "unknown"

The conversation includes both user and AI messages. Consider the full context of the dialogue.

Conversation:
{conversation}

Respond in the following JSON format only:
{{
  "language": "xx",
  "topic_en": "[emoji] brief topic in English",
  "topic_de": "[emoji] brief topic in German",
  "name": "firstname, lastname / email address"
}}"""


# Global singleton
transcript_analyzer = TranscriptAnalyzerService()
