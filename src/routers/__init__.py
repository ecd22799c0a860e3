"""
Routers Package

Contains FastAPI router modules for:
- Audio file processing endpoint
- Streaming WebSocket endpoint
"""

from routers.process import router as process_router
from routers.stream import router as stream_router

__all__ = ["process_router", "stream_router"]
