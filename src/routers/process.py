"""
Audio File Router

Converts a whole uploaded audio file into one aggregated blendshape
result.
"""

from fastapi import APIRouter, File, HTTPException, UploadFile

from audio2face import AudioDecodeError, ModelNotLoadedError
from core.logger import get_logger
from services import get_audio2face_service

logger = get_logger(__name__)


router = APIRouter(prefix="/api", tags=["process"])


@router.post("/process")
async def process_audio_file(file: UploadFile = File(...)):
    """
    Process an audio file into averaged blendshapes.

    The file is decoded to mono, resampled to 16kHz and scored window by
    window. Blendshapes and jaw are averaged; eye gaze comes from the last
    window.

    Returns:
        {"blendshapes": [...], "jaw": float, "eyes": {...}, "timestamp": ms, "frameCount": int}

    Raises:
        400: If the file cannot be decoded
        503: If the model is not loaded
    """
    service = get_audio2face_service()
    data = await file.read()
    if not data:
        raise HTTPException(status_code=400, detail="Empty audio file")

    try:
        result = await service.process_file(data)
    except ModelNotLoadedError as e:
        raise HTTPException(status_code=503, detail=str(e))
    except AudioDecodeError as e:
        logger.warning(f"Rejected upload {file.filename}: {e}")
        raise HTTPException(status_code=400, detail=str(e))

    logger.info(f"Processed {file.filename}: {result.frame_count} windows")
    return result.to_dict()
