import base64
import binascii
import time
from typing import Any

import numpy as np
import orjson
from fastapi import WebSocket

from audio2face import Audio2FacePipeline, resample
from core.config import Settings
from core.logger import get_logger
from services import Audio2FaceService

logger = get_logger(__name__)


def pcm16_to_float(audio_bytes: bytes) -> np.ndarray:
    """Convert little-endian PCM16 bytes to float32 samples in [-1, 1)."""
    if len(audio_bytes) % 2:
        audio_bytes = audio_bytes[:-1]
    audio_int16 = np.frombuffer(audio_bytes, dtype="<i2")
    return audio_int16.astype(np.float32) / 32768.0


class StreamSession:
    """
    Represents a single active audio stream.
    Holds all state specific to one client connection, including its own
    pipeline (sample buffer and smoothing state).
    """

    def __init__(
        self,
        websocket: WebSocket,
        session_id: str,
        settings: Settings,
        audio2face_service: Audio2FaceService,
    ):
        logger.info(f"Initializing StreamSession for client: {session_id}")

        self.websocket = websocket
        self.session_id = session_id
        self.settings = settings
        self.audio2face_service = audio2face_service

        self.input_sample_rate = settings.input_sample_rate
        self.pipeline: Audio2FacePipeline = audio2face_service.create_pipeline()

        self.is_active = True
        self.frame_idx = 0

    async def start(self) -> None:
        """Tell the client which audio format to send."""
        await self.send_json({
            "type": "config",
            "audio": {
                "inputSampleRate": self.input_sample_rate,
                "format": "audio/pcm16",
            },
            "windowLength": self.settings.window_length,
            "hopLength": self.settings.hop_length,
            "smoothing": self.pipeline.smoothing_factor,
            "backend": self.pipeline.backend,
        })

    async def stop(self) -> None:
        """Cleanup resources."""
        self.is_active = False
        self.pipeline.dispose()
        logger.info(f"Session {self.session_id} stopped.")

    async def send_json(self, message: dict[str, Any]) -> None:
        """Send JSON to this specific client."""
        if not self.is_active:
            return

        try:
            message_str = orjson.dumps(message).decode("utf-8")
            await self.websocket.send_text(message_str)
        except Exception as e:
            # Silence expected errors on disconnect
            if "Unexpected ASGI message" in str(e) or "websocket.close" in str(e):
                logger.debug(f"Socket closed while sending to {self.session_id}: {e}")
            else:
                logger.error(f"Error sending to client {self.session_id}: {e}")

    async def send_error(self, message: str) -> None:
        await self.send_json({
            "type": "error",
            "message": message,
            "timestamp": int(time.time() * 1000),
        })

    async def _handle_audio(self, audio_b64: str) -> None:
        """Run one streaming chunk through the pipeline and emit its frame."""
        try:
            audio_bytes = base64.b64decode(audio_b64, validate=True)
        except (binascii.Error, ValueError) as e:
            await self.send_error(f"Invalid audio payload: {e}")
            return

        samples = pcm16_to_float(audio_bytes)
        if self.input_sample_rate != self.pipeline.sample_rate:
            samples = resample(samples, self.input_sample_rate, self.pipeline.sample_rate)

        try:
            frame = await self.pipeline.process_chunk(samples)
        except Exception as e:
            logger.error(f"Session {self.session_id}: inference failed: {e}", exc_info=True)
            await self.send_error(str(e))
            return

        if self.frame_idx % 30 == 0:
            logger.debug(f"Session {self.session_id}: Sending frame {self.frame_idx}")

        message = {"type": "frame", "frameIndex": self.frame_idx}
        message.update(frame.to_dict())
        await self.send_json(message)
        self.frame_idx += 1

    async def process_message(self, data: dict[str, Any]) -> None:
        """Handle incoming message from client."""
        msg_type = data.get("type")

        if msg_type == "audio":
            audio_b64 = data.get("data", "")
            if audio_b64:
                await self._handle_audio(audio_b64)

        elif msg_type == "config":
            smoothing = data.get("smoothing")
            if isinstance(smoothing, (int, float)):
                self.pipeline.set_smoothing_factor(smoothing)
                logger.info(f"Session {self.session_id}: smoothing set to {self.pipeline.smoothing_factor}")
            await self.send_json({"type": "config", "smoothing": self.pipeline.smoothing_factor})

        elif msg_type == "reset":
            self.pipeline.reset()
            self.frame_idx = 0

        elif msg_type == "ping":
            await self.send_json({
                "type": "pong",
                "timestamp": int(time.time() * 1000),
            })

        else:
            await self.send_error(f"Unknown message type: {msg_type}")
