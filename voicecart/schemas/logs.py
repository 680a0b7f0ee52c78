"""
Log Schemas
Per-command event stream and the recognized-command history
"""

from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime


class LogEvent(BaseModel):
    """Single event in the command log"""
    event_type: str
    timestamp: datetime = Field(default_factory=datetime.utcnow)
    data: dict = Field(default_factory=dict)


class CommandHistoryEntry(BaseModel):
    """One recognized utterance, kept for the history view"""
    command: str
    confidence: float = Field(default=1.0, ge=0.0, le=1.0)
    timestamp: datetime = Field(default_factory=datetime.utcnow)


class CommandLogPacket(BaseModel):
    """
    Complete log of one command, from transcript to outcome

    Example:
    {
        "command_id": "cmd_1a2b3c4d",
        "transcribed_text": "add two bottles of milk",
        "intent_detected": "add",
        "execution_status": "SUCCESS"
    }
    """
    command_id: str

    # Transcription
    transcribed_text: Optional[str] = None
    transcription_confidence: Optional[float] = None

    # Intent
    intent_detected: Optional[str] = None
    parsed_intent: Optional[dict] = None

    # Execution
    execution_status: Optional[str] = None  # "SUCCESS", "FAILED"

    # Timing
    started_at: datetime = Field(default_factory=datetime.utcnow)
    finished_at: Optional[datetime] = None

    # Event stream
    events: List[LogEvent] = Field(default_factory=list)

    # Error tracking
    error_message: Optional[str] = None

    def add_event(self, event_type: str, data: dict = None):
        """Add event to the log stream"""
        self.events.append(LogEvent(
            event_type=event_type,
            data=data or {}
        ))

    def finish(self, success: bool, error: Optional[str] = None):
        self.execution_status = "SUCCESS" if success else "FAILED"
        self.error_message = error
        self.finished_at = datetime.utcnow()

    @property
    def duration_ms(self) -> Optional[int]:
        if self.finished_at is None:
            return None
        return int((self.finished_at - self.started_at).total_seconds() * 1000)
