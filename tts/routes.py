# src/tts/routes.py
import logging
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Body, Depends, HTTPException
from fastapi.responses import FileResponse, JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from config import settings
from content.services import ContentService
from content.text import clean_text_for_tts
from database import get_db
from tts.services import TTSError, TTSService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["tts"])


@router.get("/api/tts/cached")
def get_cached_tts(contentId: Optional[str] = None, db: Session = Depends(get_db)):
    """Return the cached audio for a work, if any."""
    if not contentId:
        return JSONResponse(status_code=400, content={"error": "contentId가 필요합니다."})
    try:
        content = ContentService.get(db, contentId)
        if not content:
            return JSONResponse(status_code=404, content={"error": "콘텐츠를 찾을 수 없습니다."})
        return TTSService.cached(db, content)
    except SQLAlchemyError as e:
        logger.error(f"TTS cache lookup failed for {contentId}: {str(e)}", exc_info=True)
        db.rollback()
        return JSONResponse(status_code=500, content={"error": "TTS 캐시 조회 중 오류가 발생했습니다."})


@router.post("/api/tts/cached")
def generate_tts(payload: dict = Body(default={}), db: Session = Depends(get_db)):
    """Synthesize speech for a work and cache it on the row."""
    if not settings.tts_configured:
        logger.error("TTS requested but GOOGLE_CLOUD_API_KEY is not set")
        return JSONResponse(status_code=500, content={
            "error": "Google Cloud TTS가 설정되지 않았습니다.",
            "details": "환경 변수 설정을 확인하세요: GOOGLE_CLOUD_API_KEY",
        })

    content_id = payload.get("contentId")
    text = payload.get("text")
    if not content_id or not text or not clean_text_for_tts(text):
        return JSONResponse(status_code=400, content={"error": "contentId와 text가 필요합니다."})

    content = ContentService.get(db, content_id)
    if not content:
        return JSONResponse(status_code=404, content={"error": "콘텐츠를 찾을 수 없습니다."})

    try:
        return TTSService.generate(db, content, text)
    except (TTSError, SQLAlchemyError) as e:
        logger.error(f"TTS generation failed for {content_id}: {str(e)}", exc_info=True)
        db.rollback()
        try:
            TTSService.set_status(db, content, "failed")
        except SQLAlchemyError as update_error:
            logger.error(f"Could not mark TTS failed for {content_id}: {str(update_error)}")
            db.rollback()
        return JSONResponse(status_code=500, content={
            "error": "TTS 생성 중 오류가 발생했습니다.",
            "details": str(e),
        })


@router.get("/tts/{file_path:path}")
def legacy_tts_file(file_path: str):
    """Serve MP3 files cached on disk by older releases."""
    root = Path(settings.TTS_LEGACY_DIR).resolve()
    target = (root / file_path).resolve()
    if root not in target.parents or not target.is_file():
        raise HTTPException(status_code=404, detail="Not Found")
    return FileResponse(
        target,
        media_type="audio/mpeg",
        headers={"Cache-Control": "public, max-age=31536000"},
    )
