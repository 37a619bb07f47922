"""
Services Module

Provides the transcript sync pipeline:
- Voiceflow transcript API client (list + turns)
- Transcript analysis (OpenAI GPT)
- Transcript numbering, metrics and persistence
- Sync orchestrator
"""

# Remote transcript source
from .voiceflow_client import (
    VoiceflowClient,
    sort_turns,
    voiceflow_client,
)

# Analysis
from .transcript_analyzer import (
    TranscriptAnalyzerService,
    fallback_analysis,
    transcript_analyzer,
)

# Numbering / metrics / persistence
from .numbering import assign_transcript_numbers
from .turn_metrics import calculate_metrics
from .transcript_store import save_transcript_turns, upsert_transcript

# Orchestrator
from .transcript_sync import (
    SyncReport,
    SyncState,
    TranscriptSyncService,
    transcript_sync,
)

__all__ = [
    # Remote source
    "VoiceflowClient",
    "sort_turns",
    "voiceflow_client",
    # Analysis
    "TranscriptAnalyzerService",
    "fallback_analysis",
    "transcript_analyzer",
    # Numbering / metrics / persistence
    "assign_transcript_numbers",
    "calculate_metrics",
    "save_transcript_turns",
    "upsert_transcript",
    # Orchestrator
    "SyncReport",
    "SyncState",
    "TranscriptSyncService",
    "transcript_sync",
]
