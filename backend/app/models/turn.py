# app/models/turn.py
from tortoise import fields, models

class Turn(models.Model):
    id = fields.IntField(pk=True)
    transcript = fields.ForeignKeyField("models.Transcript", related_name="turns", on_delete=fields.CASCADE)

    voiceflow_turn_id = fields.CharField(max_length=64)
    seq = fields.IntField()  # Position in the normalized order, 0-based
    type = fields.CharField(max_length=32)  # "text", "request", "choice", ...
    payload = fields.JSONField(default=dict)
    start_time = fields.DatetimeField()
    format = fields.CharField(max_length=32, null=True)

    class Meta:
        table = "turns"
