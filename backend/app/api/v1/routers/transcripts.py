from fastapi import APIRouter, HTTPException, Query, status
from app.models.project import Project
from app.models.transcript import Transcript
from app.models.turn import Turn
from app.schemas.transcript import (
    TranscriptDetail,
    TranscriptDetailOut,
    TranscriptItem,
    TranscriptListOut,
    TurnOut,
)

router = APIRouter(prefix="/projects", tags=["transcripts"])


def _iso(value):
    return value.isoformat() if value else None


def _item_fields(t: Transcript) -> dict:
    return {
        "number": t.transcript_number,
        "voiceflowTranscriptId": t.voiceflow_transcript_id,
        "name": t.name,
        "reportTags": t.report_tags or [],
        "messageCount": t.message_count,
        "duration": t.duration,
        "isComplete": t.is_complete,
        "language": t.language,
        "topic": t.topic,
        "topicTranslations": t.topic_translations,
        "analyzedName": t.analyzed_name,
        "createdAt": t.created_at.isoformat(),
    }


async def _get_project(voiceflow_project_id: str) -> Project:
    project = await Project.get_or_none(voiceflow_project_id=voiceflow_project_id)
    if not project:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="NOT_FOUND")
    return project


@router.get("/{voiceflow_project_id}/transcripts", response_model=dict)
async def list_transcripts(
    voiceflow_project_id: str,
    offset: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
):
    """
    Get paginated list of synced transcripts for a project.

    Returns transcripts ordered by transcript number (newest first).

    Args:
        voiceflow_project_id: External Voiceflow project id
        offset: Number of items to skip (for pagination)
        limit: Maximum number of items to return (1-200)

    Returns:
        dict: {"success": True, "data": TranscriptListOut}

    Raises:
        HTTPException (404): If the project is unknown
    """
    project = await _get_project(voiceflow_project_id)
    total = await Transcript.filter(project=project).count()
    rows = await Transcript.filter(project=project).order_by("-transcript_number").offset(offset).limit(limit)
    data = TranscriptListOut(
        items=[TranscriptItem(**_item_fields(t)) for t in rows],
        offset=offset,
        limit=limit,
        total=total,
    )
    return {"success": True, "data": data.model_dump()}


@router.get("/{voiceflow_project_id}/transcripts/{number}", response_model=dict)
async def get_transcript_detail(voiceflow_project_id: str, number: int):
    """
    Get one transcript with metrics, analysis and its turns (in seq order).

    Raises:
        HTTPException (404): If the project or transcript is unknown
    """
    project = await _get_project(voiceflow_project_id)
    t = await Transcript.get_or_none(project=project, transcript_number=number)
    if not t:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="NOT_FOUND")
    turns = await Turn.filter(transcript_id=t.id).order_by("seq")
    data = TranscriptDetailOut(
        transcript=TranscriptDetail(
            **_item_fields(t),
            image=t.image,
            metadata=t.metadata or {},
            firstResponse=_iso(t.first_response),
            lastResponse=_iso(t.last_response),
            updatedAt=_iso(t.updated_at),
        ),
        turns=[
            TurnOut(
                seq=r.seq,
                turnId=r.voiceflow_turn_id,
                type=r.type,
                format=r.format,
                startTime=r.start_time.isoformat(),
                payload=r.payload or {},
            )
            for r in turns
        ],
    )
    return {"success": True, "data": data.model_dump()}
