"""
Transcript Sync Orchestrator

One sync = one project:
    Idle -> ListingTranscripts -> AssigningNumbers -> ProcessingBatch -> Done
    ListingTranscripts / AssigningNumbers -> Failed (no project, no credential, bad list response)

Each transcript is an independent unit (upsert row, fetch turns, metrics,
analysis, transactional save) retried as a whole with its own backoff.
At most `concurrency` units run at once across the whole batch; a unit
that exhausts its retries is reported and the batch carries on.
"""
import asyncio
import enum
import logging
import random
import time
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from ..config import settings
from ..core.errors import MissingCredentialError, ProjectNotFoundError
from ..models.project import Project
from ..schemas.voiceflow import AssignedTranscript
from .numbering import assign_transcript_numbers
from .transcript_analyzer import TranscriptAnalyzerService, transcript_analyzer
from .transcript_store import save_transcript_turns, upsert_transcript
from .turn_metrics import calculate_metrics
from .voiceflow_client import VoiceflowClient, voiceflow_client

logger = logging.getLogger("uvicorn.error")


class SyncState(str, enum.Enum):
    IDLE = "idle"
    LISTING_TRANSCRIPTS = "listing_transcripts"
    ASSIGNING_NUMBERS = "assigning_numbers"
    PROCESSING_BATCH = "processing_batch"
    DONE = "done"
    FAILED = "failed"


@dataclass
class SyncReport:
    """Outcome of one sync invocation"""
    voiceflow_project_id: str
    state: SyncState = SyncState.IDLE
    total: int = 0
    succeeded: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)
    elapsed_ms: int = 0
    error: Optional[str] = None


def chunked(items: Sequence, size: int) -> List[Sequence]:
    return [items[i:i + size] for i in range(0, len(items), size)]


class TranscriptSyncService:
    """Drives the end-to-end sync of one Voiceflow project"""

    def __init__(
        self,
        client: VoiceflowClient | None = None,
        analyzer: TranscriptAnalyzerService | None = None,
        chunk_size: int | None = None,
        concurrency: int | None = None,
        unit_retries: int | None = None,
        unit_base_delay: float | None = None,
        pacing: tuple[float, float] | None = None,
        transaction_timeout: float | None = None,
    ):
        self.client = client or voiceflow_client
        self.analyzer = analyzer or transcript_analyzer
        self.chunk_size = chunk_size or settings.sync_chunk_size
        self.concurrency = concurrency or settings.sync_concurrency
        self.unit_retries = unit_retries if unit_retries is not None else settings.sync_unit_retries
        self.unit_base_delay = unit_base_delay if unit_base_delay is not None else settings.sync_unit_base_delay
        self.pacing = pacing or (settings.sync_pacing_min, settings.sync_pacing_max)
        self.transaction_timeout = transaction_timeout or settings.sync_transaction_timeout

    def _transition(self, report: SyncReport, state: SyncState) -> None:
        logger.info("[sync] project=%s %s -> %s", report.voiceflow_project_id, report.state.value, state.value)
        report.state = state

    async def sync_project(self, voiceflow_project_id: str) -> SyncReport:
        """
        Sync every transcript of a project.

        Returns the report once all transcripts were attempted (state DONE).

        Raises:
            ProjectNotFoundError, MissingCredentialError, RemoteFormatError,
            or the underlying network/database error while listing or
            numbering; the report state is FAILED in that case.
        """
        started = time.monotonic()
        report = SyncReport(voiceflow_project_id=voiceflow_project_id)

        try:
            self._transition(report, SyncState.LISTING_TRANSCRIPTS)
            project = await Project.get_or_none(voiceflow_project_id=voiceflow_project_id)
            if project is None:
                raise ProjectNotFoundError(voiceflow_project_id)
            api_key = project.voiceflow_api_key
            if not api_key:
                raise MissingCredentialError(voiceflow_project_id)
            summaries = await self.client.list_transcripts(voiceflow_project_id, api_key)

            self._transition(report, SyncState.ASSIGNING_NUMBERS)
            ordered = sorted(summaries, key=lambda s: s.created_at)
            assigned = await assign_transcript_numbers(project.id, ordered)
        except Exception as e:
            self._transition(report, SyncState.FAILED)
            report.error = repr(e)
            report.elapsed_ms = int((time.monotonic() - started) * 1000)
            logger.error("[sync] project=%s failed after %dms: %r", voiceflow_project_id, report.elapsed_ms, e)
            raise

        report.total = len(assigned)
        self._transition(report, SyncState.PROCESSING_BATCH)
        await self._process_batch(project, api_key, assigned, report)

        self._transition(report, SyncState.DONE)
        report.elapsed_ms = int((time.monotonic() - started) * 1000)
        logger.info("[sync] project=%s completed in %dms: %d ok, %d failed of %d",
                    voiceflow_project_id, report.elapsed_ms, len(report.succeeded),
                    len(report.failed), report.total)
        return report

    async def _process_batch(
        self,
        project: Project,
        api_key: str,
        assigned: Sequence[AssignedTranscript],
        report: SyncReport,
    ) -> None:
        # Chunks only pace progress logging; the semaphore spans the whole batch
        semaphore = asyncio.Semaphore(self.concurrency)

        async def run(item: AssignedTranscript) -> None:
            async with semaphore:
                ok = await self._process_with_retry(project, api_key, item)
            (report.succeeded if ok else report.failed).append(item.id)

        tasks = [asyncio.ensure_future(run(item)) for item in assigned]
        chunks = chunked(tasks, self.chunk_size)
        for index, chunk in enumerate(chunks):
            first = index * self.chunk_size + 1
            logger.info("[sync] Processing chunk %d/%d (%d-%d of %d)",
                        index + 1, len(chunks), first, first + len(chunk) - 1, len(tasks))
            results = await asyncio.gather(*chunk, return_exceptions=True)
            for result in results:
                if isinstance(result, BaseException):
                    logger.error("[sync] Unexpected error in transcript task: %r", result)

    async def _process_with_retry(self, project: Project, api_key: str, item: AssignedTranscript) -> bool:
        """Run one unit; retry it whole with delays base, 2*base, 4*base. False when abandoned."""
        attempts = self.unit_retries + 1
        for attempt in range(attempts):
            started = time.monotonic()
            try:
                await self._process_transcript(project, api_key, item)
            except Exception as e:
                logger.error("[sync] Failed to process transcript %s (attempt %d/%d): %r",
                             item.id, attempt + 1, attempts, e)
                if attempt == attempts - 1:
                    logger.error("[sync] Giving up on transcript %s (#%d)", item.id, item.number)
                    return False
                await asyncio.sleep(self.unit_base_delay * (2 ** attempt))
                continue

            logger.info("[sync] Processed transcript %s (#%d) in %dms",
                        item.id, item.number, int((time.monotonic() - started) * 1000))
            # Stay under upstream rate limits
            await asyncio.sleep(random.uniform(*self.pacing))
            return True
        return False

    async def _process_transcript(self, project: Project, api_key: str, item: AssignedTranscript) -> None:
        row = await upsert_transcript(project.id, item)
        turns = await self.client.fetch_turns(item.id, project.voiceflow_project_id, api_key)
        metrics = calculate_metrics(turns)
        analysis = await self.analyzer.analyze(turns)
        await save_transcript_turns(row.id, turns, metrics, analysis, timeout=self.transaction_timeout)


# Global singleton
transcript_sync = TranscriptSyncService()
