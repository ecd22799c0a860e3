"""
Services Package

Contains service layer classes for:
- Audio2Face model bootstrap and blendshape inference
"""

from services.audio2face_service import (
    Audio2FaceService,
    decode_audio,
    get_audio2face_service,
    set_audio2face_service,
)

__all__ = [
    "Audio2FaceService",
    "decode_audio",
    "get_audio2face_service",
    "set_audio2face_service",
]
