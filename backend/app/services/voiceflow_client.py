"""
Voiceflow Transcript API Client

Reads transcript summaries and per-transcript turns:
    GET {base}/transcripts/{projectId}                -> [summary, ...]
    GET {base}/transcripts/{projectId}/{transcriptId} -> [turn, ...]
Header: Authorization: <project API key>
"""
import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

import httpx

from ..config import settings
from ..core.errors import RemoteFormatError
from ..core.retry import with_retry
from ..schemas.voiceflow import Turn, TranscriptSummary, parse_timestamp

logger = logging.getLogger("uvicorn.error")

# Tie-break at equal start time: user requests sort before everything else
_TYPE_PRIORITY = {"request": 0}
_DEFAULT_PRIORITY = 1


def turn_sort_key(indexed: Tuple[int, Turn]):
    """(start time, type priority, arrival index)"""
    arrival, turn = indexed
    return (turn.start_time, _TYPE_PRIORITY.get(turn.type, _DEFAULT_PRIORITY), arrival)


def sort_turns(turns: Sequence[Turn]) -> List[Turn]:
    """
    Order turns by start time; at equal start time `request` turns come
    before the others, and remaining ties keep their arrival order.
    """
    indexed = sorted(enumerate(turns), key=turn_sort_key)
    return [turn for _, turn in indexed]


def parse_turn(raw: Any) -> Optional[Turn]:
    """Build a Turn from a raw API dict; None when turnID, startTime or type is missing."""
    if not isinstance(raw, dict):
        return None
    turn_id = raw.get("turnID")
    turn_type = raw.get("type")
    start_time = parse_timestamp(raw.get("startTime"))
    if not turn_id or not turn_type or start_time is None:
        return None
    payload = raw.get("payload")
    return Turn(
        turn_id=str(turn_id),
        type=str(turn_type),
        payload=payload if isinstance(payload, dict) else {},
        start_time=start_time,
        format=raw.get("format"),
    )


class VoiceflowClient:
    """Voiceflow transcript API client"""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        max_attempts: int | None = None,
        base_delay: float | None = None,
    ):
        self.base_url = (base_url or settings.voiceflow_api_base).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.voiceflow_timeout
        self.max_attempts = max_attempts if max_attempts is not None else settings.fetch_max_attempts
        self.base_delay = base_delay if base_delay is not None else settings.fetch_base_delay

    def _headers(self, api_key: str) -> Dict[str, str]:
        return {
            "accept": "application/json",
            "Authorization": api_key,
            "Cache-Control": "no-cache",
        }

    async def _get_json(self, url: str, api_key: str) -> Any:
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            resp = await client.get(url, headers=self._headers(api_key))
            resp.raise_for_status()
            return resp.json()

    async def list_transcripts(self, voiceflow_project_id: str, api_key: str) -> List[TranscriptSummary]:
        """
        Fetch all transcript summaries of a project.

        Single request, not retried here. A non-array body raises
        RemoteFormatError, which is fatal for the whole sync.
        """
        url = f"{self.base_url}/transcripts/{voiceflow_project_id}"
        logger.info("[voiceflow] Fetching transcripts url=%s", url)
        try:
            data = await self._get_json(url, api_key)
        except httpx.HTTPStatusError as e:
            logger.error("[voiceflow] Transcript list failed status=%s url=%s body=%s",
                         e.response.status_code, url, e.response.text[:500])
            raise

        if not isinstance(data, list):
            logger.error("[voiceflow] Invalid response format url=%s data=%r", url, data)
            raise RemoteFormatError(url, type(data).__name__)

        summaries = []
        for raw in data:
            summary = TranscriptSummary.from_api(raw) if isinstance(raw, dict) else None
            if summary is None:
                logger.warning("[voiceflow] Dropping invalid transcript summary: %r", raw)
                continue
            summaries.append(summary)

        logger.info("[voiceflow] Received %d transcripts (%d dropped)", len(summaries), len(data) - len(summaries))
        return summaries

    async def fetch_turns(self, transcript_id: str, voiceflow_project_id: str, api_key: str) -> List[Turn]:
        """
        Fetch the turns of one transcript, in normalized order.

        The request is retried with exponential backoff. Turns missing
        turnID, startTime or type are dropped with a warning.
        """
        url = f"{self.base_url}/transcripts/{voiceflow_project_id}/{transcript_id}"

        data = await with_retry(
            lambda: self._get_json(url, api_key),
            max_attempts=self.max_attempts,
            base_delay=self.base_delay,
            label=f"fetch turns {transcript_id}",
        )

        if not isinstance(data, list):
            logger.error("[voiceflow] Unexpected transcript content format transcript=%s received=%s",
                         transcript_id, type(data).__name__)
            return []

        turns = []
        for raw in data:
            turn = parse_turn(raw)
            if turn is None:
                logger.warning("[voiceflow] Dropping invalid turn transcript=%s turn=%r", transcript_id, raw)
                continue
            turns.append(turn)

        ordered = sort_turns(turns)
        logger.info("[voiceflow] Fetched transcript content transcript=%s turns=%d", transcript_id, len(ordered))
        return ordered


# Global singleton
voiceflow_client = VoiceflowClient()
