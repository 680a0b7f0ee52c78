"""
Request Dependencies
Components built at startup and kept on app.state
"""

from fastapi import Request

from voicecart.adapters.list_store import BaseListStore
from voicecart.core.dispatcher import CommandDispatcher
from voicecart.core.intent_engine import CommandParser
from voicecart.core.voice_processor import VoiceCommandProcessor


def get_processor(request: Request) -> VoiceCommandProcessor:
    return request.app.state.processor


def get_parser(request: Request) -> CommandParser:
    return request.app.state.processor.parser


def get_dispatcher(request: Request) -> CommandDispatcher:
    return request.app.state.processor.dispatcher


def get_list_store(request: Request) -> BaseListStore:
    return request.app.state.processor.dispatcher.store
