"""FastAPI application entrypoint."""
from __future__ import annotations

import logging
import os
from pathlib import Path

from fastapi import FastAPI, Form, HTTPException, Request, status
from fastapi.responses import HTMLResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates

from .analyzer import analyze_url
from .logging_setup import configure_logging

LOG_FILE_PATH = configure_logging(os.getenv("LOG_LEVEL"))
logger = logging.getLogger(__name__)

PACKAGE_DIR = Path(__file__).resolve().parent

app = FastAPI(title="Web Page Analyzer")
app.mount("/static", StaticFiles(directory=PACKAGE_DIR / "static"), name="static")

TEMPLATES = Jinja2Templates(directory=PACKAGE_DIR / "templates")


@app.get("/", response_class=HTMLResponse)
def index(request: Request) -> HTMLResponse:
    return TEMPLATES.TemplateResponse(request, "index.html", {})


@app.post("/analyze", response_class=HTMLResponse)
def analyze(request: Request, url: str = Form("")) -> HTMLResponse:
    url = url.strip()
    if not url:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="URL is required")

    report = analyze_url(url)
    if not report.ok:
        logger.info("Rendering failed analysis for %s: %s", report.url, report.error)
    return TEMPLATES.TemplateResponse(request, "results.html", {"report": report})


@app.get("/healthz")
def healthz() -> dict[str, str]:
    return {"status": "ok"}
