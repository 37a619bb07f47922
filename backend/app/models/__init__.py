# app/models/__init__.py
"""
Database models module initialization.
Exports all database models for convenient imports throughout the application.

Models exported:
- Project: Voiceflow project, credential and transcript-number counter
- Transcript: One synced conversation session (belongs to Project)
- Turn: One message/event of a transcript (belongs to Transcript)
"""
from .project import Project
from .transcript import Transcript
from .turn import Turn
