from __future__ import annotations

import logging
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, JSONResponse, Response
from jinja2 import Environment, FileSystemLoader, select_autoescape

from docwiki.core.service import AccessDenied, get_service

logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parent
TEMPLATES_DIR = BASE_DIR / "templates"

IMAGE_CACHE_CONTROL = "public, max-age=3600"

jinja = Environment(
    loader=FileSystemLoader(str(TEMPLATES_DIR)),
    autoescape=select_autoescape(["html", "xml"]),
)

app = FastAPI(title="docwiki")


def render(template_name: str, **ctx) -> HTMLResponse:
    template = jinja.get_template(template_name)
    return HTMLResponse(template.render(**ctx))


@app.get("/", response_class=HTMLResponse)
def home(request: Request, q: str = ""):
    """Article list, optionally filtered by title."""
    service = get_service()
    articles = service.get_index(query=q)
    return render(
        "home.html",
        request=request,
        title=service.settings.app_title,
        articles=articles,
        q=q,
    )


@app.get("/api/index")
def api_index():
    """All articles, most recently updated first."""
    return get_service().get_index()


@app.get("/api/pages/{slug}")
def api_page(slug: str):
    """Resolved content of one article, as markdown or base64 PDF."""
    try:
        page = get_service().get_page(slug)
    except Exception:
        logger.exception(f"Failed to load page '{slug}'")
        return JSONResponse({"error": "Page could not be loaded"}, status_code=500)

    if page.get("notFound"):
        return JSONResponse(page, status_code=404)
    return page


@app.get("/api/wordcloud")
def api_wordcloud():
    """Most frequent words across all articles."""
    return get_service().get_word_cloud()


@app.post("/api/cache/clear")
def api_cache_clear():
    get_service().clear_cache()
    return {"cleared": True}


@app.get("/images/{file_id}")
def image(file_id: str):
    """Proxy an image that lives inside the content root.

    Every refusal looks the same, whether or not the file exists.
    """
    try:
        data, content_type = get_service().get_image(file_id)
    except AccessDenied:
        return Response("Forbidden", status_code=403, media_type="text/plain")
    return Response(data, media_type=content_type, headers={"Cache-Control": IMAGE_CACHE_CONTROL})
