# app/schemas/transcript.py
"""
Pydantic schemas for the read-only transcript endpoints.
Defines the response items returned to the dashboard.
"""
from pydantic import BaseModel
from typing import Any, Dict, List, Optional

class TranscriptItem(BaseModel):
    """
    Transcript item model for list endpoints.
    Represents a single synced transcript in a paginated list.
    """
    number: int  # Per-project transcript number
    voiceflowTranscriptId: str  # External Voiceflow transcript id
    name: str  # Display name from Voiceflow ("Untitled" if none)
    reportTags: List[str] = []
    messageCount: int = 0
    duration: Optional[int] = None  # Whole seconds between first and last turn
    isComplete: bool = False
    language: Optional[str] = None  # ISO 639-1 code from analysis
    topic: Optional[str] = None  # English topic
    topicTranslations: Optional[Dict[str, str]] = None  # {"en": ..., "de": ...}
    analyzedName: Optional[str] = None  # Participant name or "unknown"
    createdAt: str  # ISO timestamp reported by Voiceflow

class TranscriptDetail(TranscriptItem):
    """
    Transcript detail model.
    Adds the remaining stored fields to TranscriptItem.
    """
    image: Optional[str] = None
    metadata: Dict[str, Any] = {}
    firstResponse: Optional[str] = None
    lastResponse: Optional[str] = None
    updatedAt: Optional[str] = None

class TurnOut(BaseModel):
    """
    Turn model.
    Represents one persisted turn, in normalized order.
    """
    seq: int  # Position in the normalized order
    turnId: str  # Voiceflow turn id
    type: str  # "text", "request", "choice", ...
    format: Optional[str] = None
    startTime: str  # ISO timestamp
    payload: Dict[str, Any]  # Raw Voiceflow payload

class TranscriptListOut(BaseModel):
    """
    Response model for paginated transcript list endpoint.
    """
    items: List[TranscriptItem]
    offset: int
    limit: int
    total: int

class TranscriptDetailOut(BaseModel):
    """
    Response model for transcript detail endpoint.
    """
    transcript: TranscriptDetail
    turns: List[TurnOut]
