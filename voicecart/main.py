"""
VoiceCart Main Application
Voice-driven shopping list: transcript in, list update and spoken reply out
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from typing import Optional
import logging

from voicecart.config.settings import settings
from voicecart.adapters.list_store import BaseListStore, InMemoryListStore, SQLAlchemyListStore
from voicecart.adapters.suggestions import (
    BaseSuggestionProvider, OpenAISuggestionProvider, RuleBasedSuggestionProvider
)
from voicecart.api.routes import commands, health, shopping_list
from voicecart.core.dispatcher import CommandDispatcher
from voicecart.core.intent_engine import CommandParser
from voicecart.core.voice_processor import VoiceCommandProcessor

# Configure logging
logging.basicConfig(
    level=logging.INFO if not settings.DEBUG else logging.DEBUG,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def build_list_store() -> BaseListStore:
    if settings.STORE_BACKEND == "database":
        return SQLAlchemyListStore()
    return InMemoryListStore()


def build_suggestion_provider() -> Optional[BaseSuggestionProvider]:
    if not settings.SUGGESTIONS_ENABLED:
        return None
    if settings.SUGGESTION_PROVIDER == "openai":
        return OpenAISuggestionProvider()
    return RuleBasedSuggestionProvider()


def build_processor(
    list_store: BaseListStore,
    suggestion_provider: Optional[BaseSuggestionProvider] = None
) -> VoiceCommandProcessor:
    dispatcher = CommandDispatcher(list_store, suggestion_provider)
    return VoiceCommandProcessor(CommandParser(), dispatcher)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler"""
    # Startup
    logger.info(f"Starting {settings.APP_NAME} {settings.APP_VERSION}")
    logger.info(f"Environment: {settings.ENVIRONMENT}, store: {settings.STORE_BACKEND}")

    engine = None
    if settings.STORE_BACKEND == "database":
        from voicecart.db.database import engine, init_models
        await init_models()
        logger.info("Database tables created/verified")

    app.state.processor = build_processor(build_list_store(), build_suggestion_provider())

    yield

    # Shutdown
    logger.info(f"Shutting down {settings.APP_NAME}")
    await app.state.processor.dispatcher.drain_background()
    if engine is not None:
        await engine.dispose()


# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    description=(
        "Voice-controlled shopping list. "
        "Speak a command, the list updates and the reply can be read aloud."
    ),
    version=settings.APP_VERSION,
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Exception handlers
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={
            "error": "An internal error occurred",
            "detail": str(exc) if settings.DEBUG else "Please try again later"
        }
    )


# Include routers
app.include_router(health.router)
app.include_router(commands.router)
app.include_router(shopping_list.router)


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "status": "operational",
        "try": ["add 2 bottles of milk", "remove bread from my list", "find chicken"]
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "voicecart.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG
    )
