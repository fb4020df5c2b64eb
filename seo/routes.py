# src/seo/routes.py
import logging
import urllib.parse
import xml.etree.ElementTree as ET
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse, Response
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from content.categories import CATEGORIES
from content.models import Author, Content
from database import get_db

logger = logging.getLogger(__name__)

router = APIRouter(tags=["seo"])

SITEMAP_NAMESPACE = "http://www.sitemaps.org/schemas/sitemap/0.9"


def _origin(request: Request) -> str:
    return f"{request.url.scheme}://{request.url.netloc}"


def _add_url(urlset: ET.Element, loc: str, lastmod: Optional[datetime], changefreq: str, priority: str) -> None:
    url = ET.SubElement(urlset, "url")
    ET.SubElement(url, "loc").text = loc
    ET.SubElement(url, "lastmod").text = (lastmod or datetime.utcnow()).strftime("%Y-%m-%dT%H:%M:%SZ")
    ET.SubElement(url, "changefreq").text = changefreq
    ET.SubElement(url, "priority").text = priority


def build_sitemap(db: Session, base_url: str) -> bytes:
    """Sitemap of the home, search, category, content and author pages."""
    contents = (
        db.query(Content.id, Content.updated_at)
        .filter(Content.is_published.is_(True))
        .order_by(Content.updated_at.desc())
        .all()
    )
    authors = db.query(Author.name, Author.updated_at).all()

    urlset = ET.Element("urlset", xmlns=SITEMAP_NAMESPACE)
    _add_url(urlset, f"{base_url}/", None, "daily", "1.0")
    _add_url(urlset, f"{base_url}/search", None, "weekly", "0.8")
    for category in CATEGORIES:
        _add_url(urlset, f"{base_url}/category/{category}", None, "daily", "0.9")
    for content_id, updated_at in contents:
        _add_url(urlset, f"{base_url}/content/{content_id}", updated_at, "weekly", "0.8")
    for name, updated_at in authors:
        _add_url(urlset, f"{base_url}/author/{urllib.parse.quote(name, safe='')}", updated_at, "monthly", "0.7")
    return ET.tostring(urlset, encoding="utf-8", xml_declaration=True)


@router.get("/sitemap.xml")
def sitemap(request: Request, db: Session = Depends(get_db)):
    try:
        body = build_sitemap(db, _origin(request))
    except SQLAlchemyError as e:
        logger.error(f"Error generating sitemap: {str(e)}", exc_info=True)
        return PlainTextResponse("Internal Server Error", status_code=500)
    return Response(
        content=body,
        media_type="application/xml",
        headers={"Cache-Control": "public, max-age=3600"},
    )


@router.get("/robots.txt")
def robots(request: Request):
    lines = [
        "User-agent: *",
        "Allow: /",
        "",
        "Disallow: /admin/",
        "Disallow: /admin/*",
        "Disallow: /search?*",
        "",
        f"Sitemap: {_origin(request)}/sitemap.xml",
        "",
        "Allow: /category/",
        "Allow: /content/",
        "Allow: /author/",
        "Allow: /search",
        "",
        "Crawl-delay: 1",
    ]
    return PlainTextResponse("\n".join(lines), headers={"Cache-Control": "public, max-age=86400"})
