# src/main.py
import logging
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from admin.routes import router as admin_router
from auth.routes import AdminLoginRequired, login_redirect, router as auth_router
from config import settings
from content.routes import router as content_router
from database import Base, engine
from seo.routes import router as seo_router
from tts.routes import router as tts_router

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.SITE_NAME,
    description="Webzine for essays, poetry, photography, calligraphy and performance videos",
    version="0.1.0",
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(auth_router)
app.include_router(admin_router)
app.include_router(tts_router)
app.include_router(seo_router)
app.include_router(content_router)

if settings.STORAGE_BACKEND != "s3":
    Path(settings.MEDIA_ROOT).mkdir(parents=True, exist_ok=True)
    app.mount(settings.MEDIA_URL, StaticFiles(directory=settings.MEDIA_ROOT), name="media")


@app.exception_handler(AdminLoginRequired)
async def admin_login_required_handler(request: Request, exc: AdminLoginRequired):
    return login_redirect(exc)


@app.on_event("startup")
async def startup_event():
    """Create missing tables when running without migrations."""
    if settings.AUTO_CREATE_TABLES:
        Base.metadata.create_all(bind=engine)
        logger.info("Database tables ensured")
