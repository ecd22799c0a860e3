"""
Audio2Face Server

FastAPI application for converting audio into facial blendshapes.
Runs an Audio2Face ONNX model over fixed-size overlapping windows and
serves both whole-file and streaming conversion.

Usage:
    uvicorn main:app --host 0.0.0.0 --port 8080 --reload

Or run directly:
    python main.py
"""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from core.config import get_allowed_origins, get_settings
from core.logger import get_logger, setup_logging
from routers import process_router, stream_router
from services import get_audio2face_service

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Loads the model on startup and releases the session on shutdown.
    """
    settings = get_settings()

    level = setup_logging("DEBUG" if settings.debug else "INFO")

    logger.info("=" * 60)
    logger.info("Audio2Face Server Starting")
    logger.info("=" * 60)
    logger.info(f"WebSocket endpoint: ws://{settings.server_host}:{settings.server_port}/ws")
    logger.info(f"Audio2Face model: {settings.onnx_model_path}")
    logger.info(f"GPU preferred: {settings.use_gpu}")
    logger.info(
        f"Window: {settings.window_length} samples ({settings.window_duration_ms:.0f}ms), "
        f"hop: {settings.hop_length} samples ({settings.hop_duration_ms:.0f}ms)"
    )
    logger.info(f"Debug: {settings.debug} (log level {logging.getLevelName(level)})")
    logger.info("=" * 60)

    service = get_audio2face_service()
    if service.settings.warmup_on_start:
        await service.warmup()

    yield

    logger.info("Shutting down...")
    service.shutdown()


app = FastAPI(
    title="Audio2Face Server",
    description="""
    Audio to facial blendshape conversion.

    ## Endpoints

    - `POST /api/process` - Upload an audio file, receive averaged blendshapes
    - `WS /ws` - Stream PCM16 audio, receive one smoothed frame per chunk

    ## WebSocket Protocol

    ### Client → Server Messages

    - `{"type": "audio", "data": "<base64>"}` - Audio chunk (PCM16, input sample rate)
    - `{"type": "config", "smoothing": 0.3}` - Set smoothing factor (clamped to [0, 1])
    - `{"type": "reset"}` - Clear buffered audio and smoothing state
    - `{"type": "ping"}` - Heartbeat

    ### Server → Client Messages

    - `{"type": "config", ...}` - Negotiated audio format and window parameters
    - `{"type": "frame", "blendshapes": [...], "jaw": 0.5, "eyes": {...}}` - Frame per chunk
    - `{"type": "error", "message": "..."}` - Request failed, connection stays open
    - `{"type": "pong"}` - Heartbeat response
    """,
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_allowed_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(process_router)
app.include_router(stream_router)


@app.get("/")
async def root():
    """Root endpoint with server information."""
    settings = get_settings()
    return {
        "name": "Audio2Face Server",
        "version": "1.0.0",
        "status": "running",
        "websocket": f"ws://{settings.server_host}:{settings.server_port}/ws",
        "sampleRate": settings.model_sample_rate,
    }


@app.get("/health")
async def health_check():
    """Health check endpoint for container orchestration."""
    service = get_audio2face_service()

    return {
        "status": "healthy",
        "services": {
            "audio2face": "available" if service.is_available else "unavailable",
            "backend": service.backend,
        },
    }


if __name__ == "__main__":
    settings = get_settings()

    uvicorn.run(
        "main:app",
        host=settings.server_host,
        port=settings.server_port,
        reload=settings.debug,
        log_level="debug" if settings.debug else "info",
    )
