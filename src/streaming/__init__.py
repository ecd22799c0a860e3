"""
Streaming Package

Per-connection streaming sessions for the WebSocket endpoint.
"""

from streaming.stream_session import StreamSession, pcm16_to_float

__all__ = ["StreamSession", "pcm16_to_float"]
