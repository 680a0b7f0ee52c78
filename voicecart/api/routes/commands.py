"""
Command API Routes
Entry point for transcripts coming from the speech capture side
"""

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from typing import List, Optional

from voicecart.api.dependencies import get_parser, get_processor
from voicecart.core.categorizer import categorize
from voicecart.core.intent_engine import CommandParser
from voicecart.core.voice_processor import Transcript, VoiceCommandProcessor
from voicecart.config.settings import settings
from voicecart.schemas.logs import CommandHistoryEntry, LogEvent
from voicecart.schemas.outcomes import OutcomeResponse

router = APIRouter(prefix="/api", tags=["commands"])


class CommandRequest(BaseModel):
    """Final transcript of one recognition event"""
    text: str
    confidence: float = Field(default=1.0, ge=0.0, le=1.0)
    language: str = settings.SPEECH_LANGUAGE


class CommandErrorRequest(BaseModel):
    """Error signal from recognition, e.g. no-speech or not-allowed"""
    error: str


class CommandResponse(BaseModel):
    command_id: str
    outcome: OutcomeResponse
    rule: Optional[str] = None
    intent: Optional[dict] = None
    duration_ms: Optional[int] = None
    events: List[LogEvent] = Field(default_factory=list)


class ParseRequest(BaseModel):
    text: str


class ParseResponse(BaseModel):
    recognized: bool
    rule: Optional[str] = None
    intent: Optional[dict] = None


class CategoryResponse(BaseModel):
    name: str
    category: str


def _to_response(processed) -> CommandResponse:
    log = processed.command_log
    return CommandResponse(
        command_id=log.command_id,
        outcome=OutcomeResponse.from_outcome(processed.outcome),
        rule=processed.rule,
        intent=processed.intent.model_dump() if processed.intent is not None else None,
        duration_ms=log.duration_ms,
        events=log.events
    )


@router.post("/commands", response_model=CommandResponse)
async def run_command(
    request: CommandRequest,
    processor: VoiceCommandProcessor = Depends(get_processor)
):
    """Parse and execute a spoken command"""
    processed = await processor.handle_transcript(Transcript(
        text=request.text,
        confidence=request.confidence,
        language=request.language
    ))
    return _to_response(processed)


@router.post("/commands/error", response_model=CommandResponse)
async def report_recognition_error(
    request: CommandErrorRequest,
    processor: VoiceCommandProcessor = Depends(get_processor)
):
    """Recognition failed before a transcript was produced"""
    return _to_response(processor.handle_error(request.error))


@router.post("/commands/parse", response_model=ParseResponse)
async def parse_command(
    request: ParseRequest,
    parser: CommandParser = Depends(get_parser)
):
    """
    Parse without executing
    Useful for testing the rule tables
    """
    rule, intent = parser.parse_with_rule(request.text)
    return ParseResponse(
        recognized=intent is not None,
        rule=rule,
        intent=intent.model_dump() if intent is not None else None
    )


@router.get("/commands/history", response_model=List[CommandHistoryEntry])
async def command_history(
    limit: Optional[int] = Query(default=None, ge=1),
    processor: VoiceCommandProcessor = Depends(get_processor)
):
    """Recognized utterances, newest first"""
    return processor.history.entries(limit)


@router.get("/categorize", response_model=CategoryResponse)
async def categorize_item(name: str = Query(...)):
    return CategoryResponse(name=name, category=categorize(name))
