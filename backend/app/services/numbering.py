"""
Per-project transcript numbering.

Known transcripts keep their stored number. New transcripts get a
contiguous block reserved with one conditional UPDATE on the project
counter, consumed in input order (callers pass creation-time order).
"""
import logging
from typing import Dict, List, Sequence

from tortoise.expressions import F
from tortoise.transactions import in_transaction

from ..core.errors import ProjectNotFoundError
from ..models.project import Project
from ..models.transcript import Transcript
from ..schemas.voiceflow import AssignedTranscript, TranscriptSummary

logger = logging.getLogger("uvicorn.error")


async def reserve_numbers(project_id: int, count: int) -> int:
    """
    Advance the project's counter by `count`; return the first reserved number.

    The increment is a single `counter = counter + count` UPDATE. Reading the
    counter back inside the same transaction gives the value our own update
    produced, since the updated row stays locked until commit.
    """
    async with in_transaction() as conn:
        updated = await Project.filter(id=project_id).using_db(conn).update(
            last_transcript_number=F("last_transcript_number") + count
        )
        if not updated:
            raise ProjectNotFoundError(project_id)
        project = await Project.get(id=project_id).using_db(conn)
    return project.last_transcript_number - count + 1


async def assign_transcript_numbers(
    project_id: int,
    summaries: Sequence[TranscriptSummary],
) -> List[AssignedTranscript]:
    """
    Pair every summary with its transcript number.

    Raises:
        ProjectNotFoundError: if the project does not exist
    """
    if not await Project.filter(id=project_id).exists():
        raise ProjectNotFoundError(project_id)

    ids = list(dict.fromkeys(s.id for s in summaries))
    existing: Dict[str, int] = {}
    if ids:
        rows = await Transcript.filter(
            project_id=project_id, voiceflow_transcript_id__in=ids
        ).values_list("voiceflow_transcript_id", "transcript_number")
        existing = dict(rows)

    new_ids = [tid for tid in ids if tid not in existing]
    numbers = dict(existing)
    if new_ids:
        next_number = await reserve_numbers(project_id, len(new_ids))
        for offset, tid in enumerate(new_ids):
            numbers[tid] = next_number + offset
        logger.info("[numbering] project=%s reserved %d-%d for %d new transcripts",
                    project_id, next_number, next_number + len(new_ids) - 1, len(new_ids))

    return [
        AssignedTranscript(summary=s, number=numbers[s.id], is_new=s.id not in existing)
        for s in summaries
    ]
