# app/schemas/voiceflow.py
"""
Data transfer objects for the transcript sync pipeline.

These are plain dataclasses created fresh on every sync; only the Tortoise
models in app.models are persisted.
"""
import datetime as dt
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


def parse_timestamp(value: Any) -> Optional[dt.datetime]:
    """
    Parse an ISO-8601 timestamp as sent by Voiceflow ("2024-11-03T10:15:00.000Z").

    Naive values are taken as UTC. Returns None for anything unparseable.
    """
    if isinstance(value, dt.datetime):
        parsed = value
    elif isinstance(value, str) and value:
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = dt.datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=dt.timezone.utc)
    return parsed


@dataclass(frozen=True)
class TranscriptSummary:
    """One entry of the transcript list (immutable snapshot)"""
    id: str
    created_at: dt.datetime
    name: Optional[str] = None
    image: Optional[str] = None
    report_tags: List[str] = field(default_factory=list)
    creator_id: Optional[str] = None
    unread: bool = False

    @classmethod
    def from_api(cls, raw: Dict[str, Any]) -> Optional["TranscriptSummary"]:
        """Build from the raw API dict; None when `_id` or `createdAt` is unusable."""
        transcript_id = raw.get("_id")
        created_at = parse_timestamp(raw.get("createdAt"))
        if not transcript_id or created_at is None:
            return None
        tags = raw.get("reportTags")
        return cls(
            id=str(transcript_id),
            created_at=created_at,
            name=raw.get("name"),
            image=raw.get("image"),
            report_tags=list(tags) if isinstance(tags, list) else [],
            creator_id=raw.get("creatorID"),
            unread=bool(raw.get("unread", False)),
        )

    @property
    def metadata(self) -> Dict[str, Any]:
        return {"creatorID": self.creator_id or None, "unread": self.unread}


@dataclass(frozen=True)
class AssignedTranscript:
    """A summary plus its per-project transcript number (lives for one batch)"""
    summary: TranscriptSummary
    number: int
    is_new: bool

    @property
    def id(self) -> str:
        return self.summary.id


@dataclass(frozen=True)
class Turn:
    """
    One turn of a transcript.

    `payload` is the raw turn payload; its shape depends on `type`.
    """
    turn_id: str
    type: str
    payload: Dict[str, Any]
    start_time: dt.datetime
    format: Optional[str] = None


@dataclass
class TranscriptMetrics:
    message_count: int
    first_response: Optional[dt.datetime]
    last_response: Optional[dt.datetime]
    duration: Optional[int]  # Whole seconds between first and last turn
    is_complete: bool


@dataclass
class TranscriptAnalysis:
    language: str  # ISO 639-1
    topic_en: str
    topic_de: str
    name: str  # Participant name/identifier or "unknown"

    @property
    def topic(self) -> str:
        """Main topic column stores the English version"""
        return self.topic_en

    @property
    def topic_translations(self) -> Dict[str, str]:
        return {"en": self.topic_en, "de": self.topic_de}
