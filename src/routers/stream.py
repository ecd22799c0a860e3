"""
Streaming WebSocket Router

Handles WebSocket connections that stream PCM16 audio in and receive one
smoothed blendshape frame per audio chunk.
"""

import uuid

import orjson
from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from core.logger import get_logger
from services import get_audio2face_service
from streaming import StreamSession

logger = get_logger(__name__)


router = APIRouter(tags=["stream"])


@router.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket):
    """
    WebSocket endpoint for real-time audio to blendshape streaming.

    Each connection gets its own pipeline, so concurrent streams never
    share a sample buffer or smoothing state.
    """
    await websocket.accept()

    session_id = str(uuid.uuid4())
    service = get_audio2face_service()
    session = StreamSession(
        websocket=websocket,
        session_id=session_id,
        settings=service.settings,
        audio2face_service=service,
    )

    try:
        await session.start()
        while True:
            text = await websocket.receive_text()
            try:
                data = orjson.loads(text)
            except orjson.JSONDecodeError:
                await session.send_error("Invalid JSON")
                continue
            if not isinstance(data, dict):
                await session.send_error("Expected a JSON object")
                continue
            await session.process_message(data)
    except WebSocketDisconnect:
        logger.info(f"Client disconnected: {session_id}")
    except Exception as e:
        logger.warning(f"WebSocket error: {e}")
    finally:
        await session.stop()
