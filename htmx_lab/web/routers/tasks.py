from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Request, Depends, HTTPException
from fastapi.templating import Jinja2Templates
from starlette.responses import HTMLResponse, JSONResponse, RedirectResponse, Response

from htmx_lab.services.categories import get_categories, get_subcategories
from htmx_lab.services.jobs import JobLimitReached, JobState, JobTracker
from htmx_lab.services.tasks import TaskStore, clean_tags, DEFAULT_PAGE_SIZE
from htmx_lab.services.validate import validate_task, validate_title
from htmx_lab.web.deps import get_task_store, get_tracker
from htmx_lab.web.htmx import TEMPLATES_DIR, fragment, is_htmx

logger = logging.getLogger(__name__)
templates = Jinja2Templates(directory=TEMPLATES_DIR)
router = APIRouter()

FLASH_COOKIE = "flash"
BOOM = "boom"

def _form_ctx(values: Optional[Dict[str, Any]] = None, errors: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
    values = values or {}
    category = values.get("category")
    return {
        "values": {"title": "", "tags": [], "category": None, "subcategory": None, **values},
        "errors": errors or {},
        "categories": get_categories(),
        "subcategories": get_subcategories(category),
    }

def _first_page(store: TaskStore):
    return store.page(page=1, page_size=DEFAULT_PAGE_SIZE)

def _with_flash(response: Response, message: str) -> Response:
    response.set_cookie(FLASH_COOKIE, message, httponly=True, samesite="lax")
    return response

@router.get("/tasks", response_class=HTMLResponse)
async def tasks_page(request: Request, q: Optional[str] = None, page: int = 1, page_size: int = DEFAULT_PAGE_SIZE,
                     store: TaskStore = Depends(get_task_store)):
    view = store.page(q, page, page_size)
    flash = request.cookies.get(FLASH_COOKIE)
    response = templates.TemplateResponse(request, "tasks/index.html", {"view": view, "flash": flash, "job": None, **_form_ctx()})
    if flash:
        response.delete_cookie(FLASH_COOKIE)
    return response

@router.get("/tasks/list", response_class=HTMLResponse)
async def tasks_list(request: Request, q: Optional[str] = None, page: int = 1, page_size: int = DEFAULT_PAGE_SIZE,
                     store: TaskStore = Depends(get_task_store)):
    return fragment(templates, request, "tasks/_list.html", {"view": store.page(q, page, page_size)})

@router.get("/tasks/messages", response_class=HTMLResponse)
async def tasks_messages(request: Request):
    response = fragment(templates, request, "tasks/_messages.html", {"flash": request.cookies.get(FLASH_COOKIE)})
    response.delete_cookie(FLASH_COOKIE)
    return response

@router.get("/tasks/empty-form", response_class=HTMLResponse)
async def tasks_empty_form(request: Request):
    return fragment(templates, request, "tasks/_form.html", _form_ctx())

@router.post("/tasks/validate-title", response_class=HTMLResponse)
async def tasks_validate_title(request: Request):
    form = await request.form()
    return fragment(templates, request, "tasks/_title_validation.html", {"error": validate_title(form.get("title"))})

@router.get("/tasks/tags/add", response_class=HTMLResponse)
async def tasks_add_tag(request: Request, next_index: int = 0):
    return fragment(templates, request, "tasks/_tag_row.html", {"index": next_index, "value": ""})

@router.get("/tasks/tags/remove")
async def tasks_remove_tag():
    # hx-swap="delete" drops the row; body is ignored
    return Response(status_code=200)

@router.get("/tasks/subcategories", response_class=HTMLResponse)
async def tasks_subcategories(request: Request, category: Optional[str] = None):
    return fragment(templates, request, "tasks/_subcategory_select.html",
                    {"subcategories": get_subcategories(category), "selected": None})

@router.get("/tasks/jobs/reset", response_class=HTMLResponse)
async def jobs_reset(request: Request):
    return fragment(templates, request, "tasks/_job_status.html", {"job": None})

@router.post("/tasks/jobs", response_class=HTMLResponse)
async def jobs_start(request: Request, tracker: JobTracker = Depends(get_tracker)):
    try:
        job = tracker.start()
    except JobLimitReached as e:
        return fragment(templates, request, "tasks/_error.html",
                        {"message": f"Too many reports in progress ({e}). Try again shortly."},
                        retarget="#messages", reswap="innerHTML")
    return fragment(templates, request, "tasks/_job_status.html", {"job": job})

@router.get("/tasks/jobs/{job_id}", response_class=HTMLResponse)
async def jobs_status(request: Request, job_id: str, tracker: JobTracker = Depends(get_tracker)):
    job = tracker.status(job_id)
    if job is None or not job.is_terminal:
        return fragment(templates, request, "tasks/_job_status.html", {"job": job})
    if job.state == JobState.COMPLETED:
        message, alert_class = "Report generation completed successfully!", "success"
    else:
        message, alert_class = f"Report generation failed: {job.error}", "danger"
    return fragment(templates, request, "tasks/_job_status_oob.html",
                    {"job": job, "message": message, "alert_class": alert_class})

@router.get("/api/jobs/{job_id}")
async def api_job(job_id: str, tracker: JobTracker = Depends(get_tracker)):
    job = tracker.status(job_id)
    if job is None:
        raise HTTPException(status_code=404, detail="job not found")
    return JSONResponse(job.to_dict())

@router.get("/tasks/{task_id}/details", response_class=HTMLResponse)
async def tasks_details(request: Request, task_id: int, store: TaskStore = Depends(get_task_store)):
    return fragment(templates, request, "tasks/_details.html", {"task": store.find(task_id)})

@router.post("/tasks", response_class=HTMLResponse)
async def tasks_create(request: Request, store: TaskStore = Depends(get_task_store)):
    form = await request.form()
    values = {
        "title": (form.get("title") or "").strip(),
        "tags": clean_tags(form.getlist("tags")),
        "category": (form.get("category") or "").strip() or None,
        "subcategory": (form.get("subcategory") or "").strip() or None,
    }
    ok, errors = validate_task(**values)
    if not ok:
        if is_htmx(request):
            return fragment(templates, request, "tasks/_form.html", _form_ctx(values, errors),
                            retarget="#task-form", reswap="outerHTML")
        return templates.TemplateResponse(request, "tasks/index.html",
                                          {"view": _first_page(store), "flash": None, "job": None, **_form_ctx(values, errors)})

    if values["title"].lower() == BOOM:
        if is_htmx(request):
            return fragment(templates, request, "tasks/_error.html",
                            {"message": "Simulated server error. Try a different title."},
                            retarget="#messages", reswap="innerHTML")
        raise HTTPException(status_code=500, detail="Simulated server error.")

    task = store.add(**values)
    if task.tags:
        logger.info("task %s created with tags: %s", task.id, ", ".join(task.tags))
    if task.category:
        logger.info("task %s category: %s / %s", task.id, task.category, task.subcategory)

    if is_htmx(request):
        n = len(task.tags)
        message = f"Task added with {n} tag(s)!" if n else "Task added successfully!"
        response = fragment(templates, request, "tasks/_list.html", {"view": _first_page(store)},
                            trigger="showMessage,clearForm")
        return _with_flash(response, message)
    return _with_flash(RedirectResponse(url="/tasks", status_code=303), "Task added.")

@router.post("/tasks/{task_id}/delete", response_class=HTMLResponse)
async def tasks_delete(request: Request, task_id: int, store: TaskStore = Depends(get_task_store)):
    removed = store.delete(task_id)
    if is_htmx(request):
        if not removed:
            return fragment(templates, request, "tasks/_messages.html",
                            {"flash": "Task not found (already deleted?)."},
                            retarget="#messages", reswap="outerHTML")
        response = fragment(templates, request, "tasks/_list.html", {"view": _first_page(store)},
                            trigger="showMessage")
        return _with_flash(response, "Task deleted.")
    return _with_flash(RedirectResponse(url="/tasks", status_code=303),
                       "Task deleted." if removed else "Task not found.")

@router.post("/tasks/reset")
async def tasks_reset(store: TaskStore = Depends(get_task_store)):
    store.reset()
    return _with_flash(RedirectResponse(url="/tasks", status_code=303), "Tasks reset.")
