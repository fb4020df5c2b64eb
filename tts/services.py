# src/tts/services.py
import base64
import logging
from datetime import datetime
from typing import List, Optional

import requests
from pydantic import BaseModel
from sqlalchemy.orm import Session

from config import settings
from content.models import Content
from content.text import clean_text_for_tts, estimate_tts_duration
from tts.chunking import split_text_into_chunks

logger = logging.getLogger(__name__)


class TTSError(Exception):
    """Raised when the speech API fails or returns no audio."""


class TTSResult(BaseModel):
    success: bool = True
    url: str
    duration: int
    chunks: int
    fileSize: int


def is_legacy_url(url: Optional[str]) -> bool:
    """Audio cached as files under /tts/ before it was stored inline."""
    return bool(url) and url.startswith("/tts/") and url.endswith(".mp3")


class TTSService:
    @staticmethod
    def synthesize_chunk(text: str) -> bytes:
        """Call Google Cloud Text-to-Speech REST for one chunk and return MP3 bytes."""
        payload = {
            "input": {"text": text},
            "voice": {
                "languageCode": settings.TTS_LANGUAGE_CODE,
                "name": settings.TTS_VOICE_NAME,
                "ssmlGender": "FEMALE",
            },
            "audioConfig": {
                "audioEncoding": "MP3",
                "speakingRate": 1.0,
                "pitch": 0.0,
                "volumeGainDb": 0.0,
            },
        }
        try:
            response = requests.post(
                settings.TTS_API_URL,
                params={"key": settings.GOOGLE_CLOUD_API_KEY},
                json=payload,
                timeout=settings.HTTP_TIMEOUT_SEC,
            )
        except requests.RequestException as e:
            raise TTSError(f"Speech API request failed: {str(e)}") from e
        if response.status_code != 200:
            raise TTSError(f"Speech API error: {response.status_code} - {response.text[:200]}")
        try:
            audio = response.json().get("audioContent")
            data = base64.b64decode(audio, validate=True) if audio else b""
        except (ValueError, AttributeError) as e:
            raise TTSError(f"Unreadable speech API response: {str(e)}") from e
        if not data:
            raise TTSError("오디오 생성에 실패했습니다.")
        return data

    @staticmethod
    def synthesize(chunks: List[str]) -> bytes:
        # chunks are requested in order and the MP3 frames simply concatenated
        return b"".join(TTSService.synthesize_chunk(chunk) for chunk in chunks)

    @staticmethod
    def set_status(db: Session, content: Content, status: str) -> None:
        content.tts_status = status
        db.commit()

    @staticmethod
    def cached(db: Session, content: Content) -> dict:
        """Report the cached audio, resetting legacy file-based entries to pending."""
        if content.tts_status == "completed" and content.tts_url:
            if is_legacy_url(content.tts_url):
                logger.info(f"Legacy TTS URL for content {content.id}: {content.tts_url}")
                content.tts_status = "pending"
                content.tts_url = None
                db.commit()
                return {"status": "pending", "message": "Legacy TTS detected, will regenerate"}
            return {"status": "cached", "url": content.tts_url, "duration": content.tts_duration}
        return {"status": content.tts_status or "pending"}

    @staticmethod
    def generate(db: Session, content: Content, text: str) -> TTSResult:
        """Synthesize the text and store it inline as a data URL on the content row."""
        TTSService.set_status(db, content, "generating")

        clean_text = clean_text_for_tts(text)
        chunks = split_text_into_chunks(clean_text, settings.TTS_MAX_CHUNK_BYTES)
        logger.info(f"Generating TTS for {content.id}: {len(clean_text)} chars in {len(chunks)} chunks")
        audio = TTSService.synthesize(chunks)

        data_url = f"data:audio/mp3;base64,{base64.b64encode(audio).decode('ascii')}"
        duration = estimate_tts_duration(clean_text)
        content.tts_url = data_url
        content.tts_duration = duration
        content.tts_generated_at = datetime.utcnow()
        content.tts_file_size = len(audio)
        content.tts_chunks_count = len(chunks)
        content.tts_status = "completed"
        db.commit()
        return TTSResult(url=data_url, duration=duration, chunks=len(chunks), fileSize=len(audio))
