# app/models/transcript.py
from tortoise import fields, models

class Transcript(models.Model):
    id = fields.IntField(pk=True)
    project = fields.ForeignKeyField("models.Project", related_name="transcripts", on_delete=fields.CASCADE)

    voiceflow_transcript_id = fields.CharField(max_length=64)
    transcript_number = fields.IntField()  # Stable per-project number, never reassigned

    # Mutable fields refreshed from the transcript list on every sync
    name = fields.CharField(max_length=256, default="Untitled")
    image = fields.CharField(max_length=1024, null=True)
    report_tags = fields.JSONField(default=list)
    metadata = fields.JSONField(default=dict)  # {"creatorID": str | None, "unread": bool}

    # Metrics (computed over the normalized turn order)
    message_count = fields.IntField(default=0)
    first_response = fields.DatetimeField(null=True)
    last_response = fields.DatetimeField(null=True)
    duration = fields.IntField(null=True)  # Whole seconds
    is_complete = fields.BooleanField(default=False)

    # Analysis (LLM or fallback)
    language = fields.CharField(max_length=8, null=True)
    topic = fields.CharField(max_length=256, null=True)  # English topic
    topic_translations = fields.JSONField(null=True)  # {"en": ..., "de": ...}
    analyzed_name = fields.CharField(max_length=256, null=True)

    created_at = fields.DatetimeField()  # Creation time reported by Voiceflow
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "transcripts"
        unique_together = (
            ("project", "voiceflow_transcript_id"),
            ("project", "transcript_number"),
        )
