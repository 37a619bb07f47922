# app/api/v1/routers/webhook.py
import asyncio
import logging

from fastapi import APIRouter

from app.schemas.webhook import WebhookAck, WebhookIn
from app.services.transcript_sync import transcript_sync

logger = logging.getLogger("uvicorn.error")

router = APIRouter(prefix="/webhook", tags=["webhook"])

# Running syncs; the event loop only keeps weak references to tasks
_background_tasks: set[asyncio.Task] = set()


def _on_sync_done(task: asyncio.Task) -> None:
    """
    Error sink for detached syncs: failures are logged, never returned
    to the webhook caller.
    """
    _background_tasks.discard(task)
    if task.cancelled():
        logger.warning("[webhook] Background sync %s was cancelled", task.get_name())
        return
    exc = task.exception()
    if exc is not None:
        logger.error("[webhook] Background sync %s failed", task.get_name(), exc_info=exc)


def start_background_sync(voiceflow_project_id: str) -> asyncio.Task:
    """Start a project sync without awaiting it."""
    task = asyncio.create_task(
        transcript_sync.sync_project(voiceflow_project_id),
        name=f"sync:{voiceflow_project_id}",
    )
    _background_tasks.add(task)
    task.add_done_callback(_on_sync_done)
    return task


@router.post("/voiceflow", response_model=WebhookAck)
async def voiceflow_webhook(body: WebhookIn):
    """
    Voiceflow webhook: acknowledge immediately and sync in the background.

    Args:
        body: Request body containing the Voiceflow project id

    Returns:
        WebhookAck: always success once the body is valid, regardless of
        how the background sync ends

    Raises:
        HTTPException (422): If voiceflowProjectId is missing or blank
    """
    logger.info("[webhook] Payload received: voiceflowProjectId=%s", body.voiceflowProjectId)
    start_background_sync(body.voiceflowProjectId)
    logger.info("[webhook] Acknowledged, processing started")
    return WebhookAck()
