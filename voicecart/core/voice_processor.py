"""
Voice Command Processor
Turns one recognition event into a parsed, executed command
"""

from collections import deque
from dataclasses import dataclass
from typing import List, Optional
from uuid import uuid4

from voicecart.config.constants import ActionType, LogEventType, OutcomeError, VoiceResponses
from voicecart.config.settings import settings
from voicecart.core.dispatcher import CommandDispatcher, Outcome
from voicecart.core.intent_engine import CommandParser, Intent
from voicecart.schemas.logs import CommandHistoryEntry, CommandLogPacket
import logging

logger = logging.getLogger(__name__)


@dataclass
class Transcript:
    """Final result of one recognition event"""
    text: str
    confidence: float = 1.0
    language: str = settings.SPEECH_LANGUAGE


@dataclass
class ProcessedCommand:
    """Everything produced while handling one transcript"""
    outcome: Outcome
    command_log: CommandLogPacket
    intent: Optional[Intent] = None
    rule: Optional[str] = None


class CommandHistory:
    """Most recent recognized utterances, newest first"""

    def __init__(self, limit: Optional[int] = None):
        self._entries = deque(maxlen=limit or settings.COMMAND_HISTORY_LIMIT)

    def record(self, command: str, confidence: float) -> CommandHistoryEntry:
        entry = CommandHistoryEntry(command=command, confidence=confidence)
        self._entries.appendleft(entry)
        return entry

    def entries(self, limit: Optional[int] = None) -> List[CommandHistoryEntry]:
        entries = list(self._entries)
        return entries[:limit] if limit else entries

    def __len__(self):
        return len(self._entries)


class VoiceCommandProcessor:
    """
    Glue between the transcript source, the parser and the dispatcher

    Confidence is kept in history and logs only. Low-confidence
    transcripts are parsed like any other.
    """

    def __init__(
        self,
        parser: CommandParser,
        dispatcher: CommandDispatcher,
        history: Optional[CommandHistory] = None
    ):
        self.parser = parser
        self.dispatcher = dispatcher
        self.history = history if history is not None else CommandHistory()

    async def handle_transcript(self, transcript: Transcript) -> ProcessedCommand:
        command_log = CommandLogPacket(
            command_id=f"cmd_{uuid4().hex[:8]}",
            transcribed_text=transcript.text,
            transcription_confidence=transcript.confidence
        )
        command_log.add_event(LogEventType.TRANSCRIPT_RECEIVED, {
            "text": transcript.text,
            "confidence": transcript.confidence,
            "language": transcript.language
        })
        self.history.record(transcript.text, transcript.confidence)

        rule, intent = self.parser.parse_with_rule(transcript.text)
        if intent is None:
            command_log.intent_detected = ActionType.UNKNOWN
            command_log.add_event(LogEventType.PARSE_FAILED, {"text": transcript.text, "rule": rule})
            outcome = Outcome(
                action=ActionType.UNKNOWN,
                success=False,
                message=VoiceResponses.DIDNT_UNDERSTAND.format(command=transcript.text.strip()),
                error=OutcomeError.PARSE_FAILURE
            )
            command_log.finish(False, outcome.error)
            return ProcessedCommand(outcome=outcome, command_log=command_log, rule=rule)

        command_log.intent_detected = intent.action
        command_log.parsed_intent = intent.model_dump()
        command_log.add_event(LogEventType.INTENT_DETECTED, {"action": intent.action, "rule": rule})

        outcome = await self.dispatcher.execute(intent, command_log)
        command_log.finish(outcome.success, outcome.error)

        logger.info(
            f"Command {command_log.command_id}: {intent.action} "
            f"{'succeeded' if outcome.success else 'failed'} in {command_log.duration_ms}ms"
        )
        return ProcessedCommand(outcome=outcome, command_log=command_log, intent=intent, rule=rule)

    def handle_error(self, signal: str) -> ProcessedCommand:
        """Map any capture-side error signal to the generic retry message"""
        logger.warning(f"Speech recognition error: {signal}")

        command_log = CommandLogPacket(command_id=f"cmd_{uuid4().hex[:8]}")
        command_log.add_event(LogEventType.TRANSCRIPT_ERROR, {"error": signal})

        outcome = Outcome(
            action=ActionType.UNKNOWN,
            success=False,
            message=VoiceResponses.COULDNT_UNDERSTAND,
            error=OutcomeError.TRANSCRIPT_ERROR
        )
        command_log.finish(False, signal)
        return ProcessedCommand(outcome=outcome, command_log=command_log)
