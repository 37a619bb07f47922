# app/core/bootstrap.py
"""
Bootstrap module for application initialization.
Handles initial setup tasks such as seeding the default project on first startup.
"""
import logging
from app.config import settings
from app.models.project import Project

logger = logging.getLogger("uvicorn.error")

async def ensure_default_project() -> Project | None:
    """
    If DEFAULT_VOICEFLOW_PROJECT_ID is configured, make sure that project exists.
    Only takes effect under the following conditions:
      - DEFAULT_VOICEFLOW_PROJECT_ID is set
      - And DEFAULT_VOICEFLOW_API_KEY is set (a project without key cannot be synced)
    An existing project without a stored key receives the configured key;
    an existing key is never overwritten.
    Environment variables:
      DEFAULT_PROJECT_NAME        (default: "Default project")
      DEFAULT_VOICEFLOW_PROJECT_ID
      DEFAULT_VOICEFLOW_API_KEY
    """
    voiceflow_project_id = settings.default_voiceflow_project_id
    if not voiceflow_project_id:
        return None  # Nothing to seed

    api_key = settings.default_voiceflow_api_key
    if not api_key:
        logger.warning("[bootstrap] DEFAULT_VOICEFLOW_PROJECT_ID set but DEFAULT_VOICEFLOW_API_KEY missing -> skip seeding project.")
        return None

    project = await Project.get_or_none(voiceflow_project_id=voiceflow_project_id)
    if project is not None:
        if not project.voiceflow_api_key:
            project.voiceflow_api_key = api_key
            await project.save(update_fields=["voiceflow_api_key"])
            logger.warning("[bootstrap] Stored API key for existing project %s", voiceflow_project_id)
        return project

    project = await Project.create(
        name=settings.default_project_name,
        voiceflow_project_id=voiceflow_project_id,
        voiceflow_api_key=api_key,
    )
    logger.warning("[bootstrap] Created default project -> name=%s voiceflowProjectId=%s id=%s",
                   project.name, project.voiceflow_project_id, project.id)
    return project
