# app/schemas/webhook.py
"""
Pydantic schemas for the Voiceflow webhook endpoint.
"""
from pydantic import BaseModel, Field, field_validator

class WebhookIn(BaseModel):
    """
    Webhook body sent when a project's transcripts changed.
    Only the Voiceflow project id is carried; everything else is looked up.
    """
    voiceflowProjectId: str = Field(..., min_length=1)  # External Voiceflow project id

    @field_validator("voiceflowProjectId")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("voiceflowProjectId must not be blank")
        return v

class WebhookAck(BaseModel):
    """
    Immediate acknowledgment; the sync itself runs in the background.
    """
    success: bool = True
    message: str = "Webhook received, processing in background"
