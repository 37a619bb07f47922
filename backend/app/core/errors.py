# app/core/errors.py
"""
Errors that abort a whole sync batch.

Per-transcript failures (network, database, malformed turns) are plain
httpx / Tortoise exceptions handled by the sync retry loop, and analysis
failures never leave the analyzer, so only batch-fatal conditions get a
dedicated type here.
"""


class SyncError(Exception):
    """Base class for batch-fatal sync errors."""


class ProjectNotFoundError(SyncError):
    def __init__(self, project_ref):
        self.project_ref = project_ref
        super().__init__(f"No project found for {project_ref!r}")


class MissingCredentialError(SyncError):
    def __init__(self, voiceflow_project_id: str):
        self.voiceflow_project_id = voiceflow_project_id
        super().__init__(f"No Voiceflow API key stored for project {voiceflow_project_id!r}")


class RemoteFormatError(SyncError):
    """The transcript list endpoint answered with something other than a JSON array."""

    def __init__(self, url: str, received: str):
        self.url = url
        self.received = received
        super().__init__(f"Invalid response format from {url}: expected array, got {received}")
