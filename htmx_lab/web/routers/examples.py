from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional

import httpx
from fastapi import APIRouter, Request, Depends, Form, HTTPException
from fastapi.templating import Jinja2Templates
from starlette.responses import HTMLResponse, Response

from htmx_lab.config import Config
from htmx_lab.services.categories import get_makes, get_models
from htmx_lab.services.contacts import BulkContacts, ContactTable, Person, PersonCard, paged_contacts
from htmx_lab.services.countries import search_countries
from htmx_lab.services.progress import ProgressBar
from htmx_lab.services.validate import CONTACT_SCHEMA, EXISTING_EMAIL, validate_against_schema, validate_email
from htmx_lab.web.deps import get_config, get_playground
from htmx_lab.web.htmx import TEMPLATES_DIR, fragment

logger = logging.getLogger(__name__)
templates = Jinja2Templates(directory=TEMPLATES_DIR)
router = APIRouter(prefix="/examples")

CLICK_TO_LOAD_SIZE = 5
INFINITE_SCROLL_SIZE = 25
TABS = ("tab1", "tab2", "tab3")

@dataclass
class Playground:
    """In-memory state behind the playground pages."""
    bulk: BulkContacts = field(default_factory=BulkContacts)
    card: PersonCard = field(default_factory=PersonCard)
    deletable: ContactTable = field(default_factory=ContactTable)
    editable: ContactTable = field(default_factory=ContactTable)
    progress: ProgressBar = field(default_factory=ProgressBar)

@router.get("", response_class=HTMLResponse)
async def examples_index(request: Request):
    return templates.TemplateResponse(request, "examples/index.html", {})

# Active search
@router.get("/active-search", response_class=HTMLResponse)
async def active_search_page(request: Request):
    return templates.TemplateResponse(request, "examples/active_search.html", {})

@router.post("/active-search/search", response_class=HTMLResponse)
async def active_search(request: Request, search_text: str = Form(""), config: Config = Depends(get_config)):
    error = None
    countries: List[str] = []
    try:
        countries = await search_countries(search_text, config.search_url)
    except (httpx.HTTPError, ValueError) as e:
        logger.warning("country search failed: %s", e)
        error = "Search is unavailable right now."
    return fragment(templates, request, "examples/_search_result.html", {"countries": countries, "error": error})

# Bulk update
@router.get("/bulk-update", response_class=HTMLResponse)
async def bulk_update_page(request: Request, pg: Playground = Depends(get_playground)):
    return templates.TemplateResponse(request, "examples/bulk_update.html", {"contacts": pg.bulk.all()})

async def _ids(request: Request) -> List[int]:
    form = await request.form()
    out = []
    for raw in form.getlist("ids"):
        try:
            out.append(int(raw))
        except (TypeError, ValueError):
            continue
    return out

@router.put("/bulk-update/activate", response_class=HTMLResponse)
async def bulk_activate(request: Request, pg: Playground = Depends(get_playground)):
    rows = pg.bulk.set_status(await _ids(request), True)
    return fragment(templates, request, "examples/_bulk_tbody.html", {"contacts": rows})

@router.put("/bulk-update/deactivate", response_class=HTMLResponse)
async def bulk_deactivate(request: Request, pg: Playground = Depends(get_playground)):
    rows = pg.bulk.set_status(await _ids(request), False)
    return fragment(templates, request, "examples/_bulk_tbody.html", {"contacts": rows})

# Click to edit
@router.get("/click-to-edit", response_class=HTMLResponse)
async def click_to_edit_page(request: Request, pg: Playground = Depends(get_playground)):
    return templates.TemplateResponse(request, "examples/click_to_edit.html", {"person": pg.card.get()})

@router.get("/click-to-edit/contact", response_class=HTMLResponse)
async def click_to_edit_display(request: Request, pg: Playground = Depends(get_playground)):
    return fragment(templates, request, "examples/_person_display.html", {"person": pg.card.get()})

@router.get("/click-to-edit/contact/edit", response_class=HTMLResponse)
async def click_to_edit_form(request: Request, pg: Playground = Depends(get_playground)):
    return fragment(templates, request, "examples/_person_edit.html", {"person": pg.card.get(), "errors": {}})

@router.put("/click-to-edit/contact", response_class=HTMLResponse)
async def click_to_edit_replace(request: Request, first_name: str = Form(""), last_name: str = Form(""),
                                email: str = Form(""), pg: Playground = Depends(get_playground)):
    person = Person(first_name.strip(), last_name.strip(), email.strip())
    ok, errors = validate_against_schema({"name": f"{person.first_name} {person.last_name}".strip(), "email": person.email},
                                         CONTACT_SCHEMA)
    if not ok:
        return fragment(templates, request, "examples/_person_edit.html", {"person": person, "errors": errors})
    pg.card.replace(person)
    return fragment(templates, request, "examples/_person_display.html", {"person": person})

# Click to load / infinite scroll
@router.get("/click-to-load", response_class=HTMLResponse)
async def click_to_load_page(request: Request):
    return templates.TemplateResponse(request, "examples/click_to_load.html",
                                      {"contacts": paged_contacts(0, CLICK_TO_LOAD_SIZE, "woody.dev"), "page": 0})

@router.get("/click-to-load/page", response_class=HTMLResponse)
async def click_to_load_next(request: Request, page: int = 0):
    return fragment(templates, request, "examples/_click_to_load_rows.html",
                    {"contacts": paged_contacts(page, CLICK_TO_LOAD_SIZE, "woody.dev"), "page": page})

@router.get("/infinite-scroll", response_class=HTMLResponse)
async def infinite_scroll_page(request: Request):
    return templates.TemplateResponse(request, "examples/infinite_scroll.html",
                                      {"contacts": paged_contacts(0, INFINITE_SCROLL_SIZE, "woodruff.dev"), "page": 0})

@router.get("/infinite-scroll/page", response_class=HTMLResponse)
async def infinite_scroll_next(request: Request, page: int = 0):
    return fragment(templates, request, "examples/_infinite_scroll_rows.html",
                    {"contacts": paged_contacts(page, INFINITE_SCROLL_SIZE, "woodruff.dev"), "page": page})

# Delete row
@router.get("/delete-row", response_class=HTMLResponse)
async def delete_row_page(request: Request, pg: Playground = Depends(get_playground)):
    return templates.TemplateResponse(request, "examples/delete_row.html", {"contacts": pg.deletable.all()})

@router.delete("/delete-row/contacts/{contact_id}")
async def delete_row(contact_id: int, pg: Playground = Depends(get_playground)):
    pg.deletable.delete(contact_id)
    # empty 200 lets hx-swap="outerHTML" remove the row
    return Response(status_code=200)

# Edit row
@router.get("/edit-row", response_class=HTMLResponse)
async def edit_row_page(request: Request, pg: Playground = Depends(get_playground)):
    return templates.TemplateResponse(request, "examples/edit_row.html", {"contacts": pg.editable.all()})

def _editable_or_404(pg: Playground, contact_id: int):
    contact = pg.editable.get(contact_id)
    if contact is None:
        raise HTTPException(status_code=404, detail="contact not found")
    return contact

@router.get("/edit-row/contacts/{contact_id}", response_class=HTMLResponse)
async def edit_row_view(request: Request, contact_id: int, pg: Playground = Depends(get_playground)):
    return fragment(templates, request, "examples/_row_view.html", {"contact": _editable_or_404(pg, contact_id)})

@router.get("/edit-row/contacts/{contact_id}/edit", response_class=HTMLResponse)
async def edit_row_edit(request: Request, contact_id: int, pg: Playground = Depends(get_playground)):
    return fragment(templates, request, "examples/_row_edit.html",
                    {"contact": _editable_or_404(pg, contact_id), "errors": {}})

@router.put("/edit-row/contacts/{contact_id}", response_class=HTMLResponse)
async def edit_row_update(request: Request, contact_id: int, name: str = Form(""), email: str = Form(""),
                          pg: Playground = Depends(get_playground)):
    contact = _editable_or_404(pg, contact_id)
    ok, errors = validate_against_schema({"name": name.strip(), "email": email.strip()}, CONTACT_SCHEMA)
    if not ok:
        return fragment(templates, request, "examples/_row_edit.html", {"contact": contact, "errors": errors})
    return fragment(templates, request, "examples/_row_view.html",
                    {"contact": pg.editable.update(contact_id, name, email)})

# Inline validation
@router.get("/inline-validation", response_class=HTMLResponse)
async def inline_validation_page(request: Request):
    return templates.TemplateResponse(request, "examples/inline_validation.html",
                                      {"person": Person("First", "Last", "name@example.com"), "email_error": None,
                                       "existing_email": EXISTING_EMAIL, "saved": False})

@router.post("/inline-validation", response_class=HTMLResponse)
async def inline_validation_submit(request: Request, first_name: str = Form(""), last_name: str = Form(""),
                                   email: str = Form("")):
    person = Person(first_name, last_name, email)
    error = validate_email(email)
    return templates.TemplateResponse(request, "examples/inline_validation.html",
                                      {"person": person, "email_error": error,
                                       "existing_email": EXISTING_EMAIL, "saved": error is None})

@router.post("/inline-validation/email", response_class=HTMLResponse)
async def inline_validation_email(request: Request, email: str = Form("")):
    return fragment(templates, request, "examples/_email_field.html", {"email": email, "email_error": validate_email(email)})

# Lazy loading
@router.get("/lazy-loading", response_class=HTMLResponse)
async def lazy_loading_page(request: Request):
    return templates.TemplateResponse(request, "examples/lazy_loading.html", {})

@router.get("/lazy-loading/graph", response_class=HTMLResponse)
async def lazy_loading_graph():
    return HTMLResponse('<img alt="Tokyo Climate" src="https://htmx.org/img/tokyo.png">')

# Progress bar
@router.get("/progress-bar", response_class=HTMLResponse)
async def progress_bar_page(request: Request):
    return templates.TemplateResponse(request, "examples/progress_bar.html", {})

@router.post("/progress-bar/start", response_class=HTMLResponse)
async def progress_bar_start(request: Request, pg: Playground = Depends(get_playground)):
    percent = pg.progress.start()
    return fragment(templates, request, "examples/_progress.html", {"percent": percent, "status": "Running"})

@router.get("/progress-bar/job", response_class=HTMLResponse)
async def progress_bar_poll(request: Request, pg: Playground = Depends(get_playground)):
    percent = pg.progress.advance()
    return fragment(templates, request, "examples/_progress_bar.html", {"percent": percent},
                    trigger="done" if percent >= 100 else None)

@router.get("/progress-bar/finalize", response_class=HTMLResponse)
async def progress_bar_finalize(request: Request, pg: Playground = Depends(get_playground)):
    return fragment(templates, request, "examples/_progress.html", {"percent": pg.progress.finalize(), "status": "Complete"})

# Dependent selects
@router.get("/selects", response_class=HTMLResponse)
async def selects_page(request: Request):
    makes = get_makes()
    return templates.TemplateResponse(request, "examples/selects.html",
                                      {"makes": makes, "make": makes[0], "models": get_models(makes[0])})

@router.get("/selects/models", response_class=HTMLResponse)
async def selects_models(request: Request, make: Optional[str] = None):
    return fragment(templates, request, "examples/_model_select.html", {"models": get_models(make)})

# Tabs
@router.get("/tabs", response_class=HTMLResponse)
async def tabs_page(request: Request):
    return templates.TemplateResponse(request, "examples/tabs.html", {"tabs": TABS, "active": TABS[0]})

@router.get("/tabs/{tab}", response_class=HTMLResponse)
async def tabs_tab(request: Request, tab: str):
    if tab not in TABS:
        raise HTTPException(status_code=404, detail="unknown tab")
    return fragment(templates, request, "examples/_tab.html", {"tabs": TABS, "active": tab})
