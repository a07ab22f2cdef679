from __future__ import annotations
from pathlib import Path
from typing import Any, Dict, Optional

from fastapi import Request
from fastapi.templating import Jinja2Templates
from starlette.responses import HTMLResponse

TEMPLATES_DIR = str(Path(__file__).resolve().parent / "templates")

def is_htmx(request: Request) -> bool:
    """htmx sends ``HX-Request: true`` with every request it makes."""
    return request.headers.get("HX-Request", "").lower() == "true"

def fragment(
    templates: Jinja2Templates,
    request: Request,
    name: str,
    context: Optional[Dict[str, Any]] = None,
    *,
    trigger: Optional[str] = None,
    retarget: Optional[str] = None,
    reswap: Optional[str] = None,
    status_code: int = 200,
) -> HTMLResponse:
    """Render a partial template, optionally steering htmx with response headers."""
    headers: Dict[str, str] = {}
    if trigger:
        headers["HX-Trigger"] = trigger
    if retarget:
        headers["HX-Retarget"] = retarget
    if reswap:
        headers["HX-Reswap"] = reswap
    return templates.TemplateResponse(request, name, context or {}, status_code=status_code, headers=headers)
