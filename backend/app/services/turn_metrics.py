"""
Transcript metrics over an already-ordered turn sequence.
"""
import math
from typing import Sequence

from ..schemas.voiceflow import TranscriptMetrics, Turn

MESSAGE_TYPES = ("text", "request")


def calculate_metrics(turns: Sequence[Turn]) -> TranscriptMetrics:
    """
    Compute metrics from turns in normalized order.

    first/last response are the first and last turns of the sequence (not
    min/max), so they agree with the tie-break order that gets persisted.
    A transcript is complete when it ends on a choice, or ends on a text turn
    with no later user request left unanswered.
    """
    message_count = sum(1 for t in turns if t.type in MESSAGE_TYPES)

    if not turns:
        return TranscriptMetrics(
            message_count=0,
            first_response=None,
            last_response=None,
            duration=None,
            is_complete=False,
        )

    first, last = turns[0], turns[-1]
    # Half-up, so 4.5s is stored as 5
    duration = math.floor((last.start_time - first.start_time).total_seconds() + 0.5)

    if last.type == "choice":
        is_complete = True
    elif last.type == "text":
        is_complete = not any(
            t.type == "request" and t.start_time > last.start_time for t in turns
        )
    else:
        is_complete = False

    return TranscriptMetrics(
        message_count=message_count,
        first_response=first.start_time,
        last_response=last.start_time,
        duration=int(duration),
        is_complete=is_complete,
    )
