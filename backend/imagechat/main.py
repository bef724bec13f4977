"""
ImageChat - Main FastAPI Application
"""

import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

from .config import settings, OllamaConfig
from .api import messages_router, chat_router, models_router
from .core.logging_config import setup_logging
from .core.session import SessionManager, init_session_manager
from .middleware import RequestLoggingMiddleware
from .ollama import OllamaClient
from .storage import LocalMessageStore, create_message_store, init_message_store, get_message_store

# Logger will be initialized after setup_logging() is called
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown events."""
    # Startup
    setup_logging(settings)

    local_store = init_message_store(LocalMessageStore(settings.local_storage_path))
    session_store = create_message_store(settings, local_store=local_store)
    logger.info(f"Message store initialized: {settings.storage_type}")

    ollama_config = OllamaConfig.from_settings(settings)
    init_session_manager(SessionManager(OllamaClient(ollama_config), ollama_config, session_store))

    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Ollama base URL: {ollama_config.base_url}")
    logger.info(f"Storage path: {settings.local_storage_path}")
    logger.info(f"Log level: {settings.log_level.upper()}")
    yield
    # Shutdown
    logger.info(f"Shutting down {settings.app_name}")


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Chat front end for generating images from prompts with a local Ollama server",
    lifespan=lifespan
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Add request logging middleware (after CORS)
if settings.log_api_requests:
    app.add_middleware(RequestLoggingMiddleware)

# Include routers
app.include_router(messages_router)
app.include_router(chat_router)
app.include_router(models_router)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "app": settings.app_name,
        "version": settings.app_version,
        "status": "running",
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    try:
        healthy = await get_message_store().health()
    except RuntimeError:
        healthy = False
    return {
        "success": healthy,
        "storage": settings.storage_type,
        "version": settings.app_version
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "imagechat.main:app",
        host="0.0.0.0",
        port=5000,
        reload=settings.debug
    )
