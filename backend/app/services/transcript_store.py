"""
Per-transcript persistence: row upsert and atomic turn replacement.
"""
import asyncio
import datetime as dt
import logging
from typing import Sequence

from tortoise.transactions import in_transaction

from ..models.transcript import Transcript
from ..models.turn import Turn as TurnRow
from ..schemas.voiceflow import AssignedTranscript, TranscriptAnalysis, TranscriptMetrics, Turn

logger = logging.getLogger("uvicorn.error")


async def upsert_transcript(project_id: int, assigned: AssignedTranscript) -> Transcript:
    """
    Create the transcript row with its assigned number, or refresh the
    mutable fields (name, image, tags, metadata) of an existing one.
    Keyed by (project, voiceflow transcript id); the number is never changed.
    """
    summary = assigned.summary
    fields = {
        "name": summary.name or "Untitled",
        "image": summary.image,
        "report_tags": list(summary.report_tags),
        "metadata": summary.metadata,
    }

    row = await Transcript.get_or_none(project_id=project_id, voiceflow_transcript_id=summary.id)
    if row is None:
        return await Transcript.create(
            project_id=project_id,
            voiceflow_transcript_id=summary.id,
            transcript_number=assigned.number,
            created_at=summary.created_at,
            **fields,
        )

    row.update_from_dict(fields)
    await row.save(update_fields=[*fields.keys(), "updated_at"])
    return row


async def _replace_turns(
    transcript_id: int,
    turns: Sequence[Turn],
    metrics: TranscriptMetrics,
    analysis: TranscriptAnalysis,
) -> None:
    async with in_transaction() as conn:
        await Transcript.filter(id=transcript_id).using_db(conn).update(
            message_count=metrics.message_count,
            first_response=metrics.first_response,
            last_response=metrics.last_response,
            duration=metrics.duration,
            is_complete=metrics.is_complete,
            language=analysis.language,
            topic=analysis.topic,
            topic_translations=analysis.topic_translations,
            analyzed_name=analysis.name,
            updated_at=dt.datetime.now(dt.timezone.utc),
        )
        await TurnRow.filter(transcript_id=transcript_id).using_db(conn).delete()
        if turns:
            await TurnRow.bulk_create(
                [
                    TurnRow(
                        transcript_id=transcript_id,
                        voiceflow_turn_id=turn.turn_id,
                        seq=seq,
                        type=turn.type,
                        payload=turn.payload,
                        start_time=turn.start_time,
                        format=turn.format,
                    )
                    for seq, turn in enumerate(turns)
                ],
                using_db=conn,
            )


async def save_transcript_turns(
    transcript_id: int,
    turns: Sequence[Turn],
    metrics: TranscriptMetrics,
    analysis: TranscriptAnalysis,
    timeout: float = 30.0,
) -> None:
    """
    Store metrics + analysis and replace all turns of a transcript in one
    transaction. `turns` must be in normalized order; `seq` follows it.
    Rolled back if it does not finish within `timeout` seconds.
    """
    await asyncio.wait_for(_replace_turns(transcript_id, turns, metrics, analysis), timeout=timeout)
    logger.info("[sync] Saved transcript %s: %d turns, %d messages, complete=%s, language=%s",
                transcript_id, len(turns), metrics.message_count, metrics.is_complete, analysis.language)
