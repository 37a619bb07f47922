# app/models/project.py
"""
Database model for projects.
A project mirrors one Voiceflow project: it stores the API key used to read
its transcripts and the running counter that hands out transcript numbers.
"""
from tortoise import fields, models

class Project(models.Model):
    """
    Project database model.

    Relationships:
    - Has many Transcripts (one-to-many, via related_name="transcripts")

    Numbering:
    - last_transcript_number is only ever changed by a single conditional
      UPDATE (counter = counter + n), never read-modify-write
    """
    id = fields.IntField(pk=True)
    name = fields.CharField(max_length=128)
    voiceflow_project_id = fields.CharField(max_length=64, unique=True, index=True)  # External project id sent by the webhook
    voiceflow_api_key = fields.CharField(max_length=256, null=True)  # Pre-shared per-project credential, passed through as-is
    last_transcript_number = fields.IntField(default=0)  # Highest number handed out so far
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        """Tortoise ORM metadata configuration."""
        table = "projects"
