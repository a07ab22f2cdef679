from __future__ import annotations

import asyncio
import logging
import os
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates
from starlette.responses import HTMLResponse

from htmx_lab.config import Config, load_config
from htmx_lab.db import init_db
from htmx_lab.services.jobs import JobTracker
from htmx_lab.services.tasks import TaskStore
from htmx_lab.web.htmx import TEMPLATES_DIR
from htmx_lab.web.routers import catalog, examples, tasks

APP_NAME = "htmx-lab"
logger = logging.getLogger(APP_NAME)

STATIC_DIR = os.path.join(os.path.dirname(TEMPLATES_DIR), "static")

async def _sweep_jobs(tracker: JobTracker, every_s: float, max_age_s: float) -> None:
    while True:
        await asyncio.sleep(every_s)
        try:
            tracker.cleanup(max_age_s)
        except Exception:
            logger.exception("job cleanup sweep failed")

def create_app(config: Optional[Config] = None) -> FastAPI:
    config = config or load_config()
    logging.basicConfig(level=config.log_level)

    app = FastAPI(title=f"{APP_NAME}")
    app.state.config = config
    app.state.jobs = JobTracker(
        steps=config.job_steps,
        interval=config.job_interval,
        max_running=config.job_max_running,
    )
    app.state.tasks = TaskStore()
    app.state.playground = examples.Playground()
    app.state.sweeper = None

    templates = Jinja2Templates(directory=TEMPLATES_DIR)
    if os.path.isdir(STATIC_DIR):
        app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")

    app.include_router(tasks.router, tags=["tasks"])
    app.include_router(examples.router, tags=["examples"])
    app.include_router(catalog.router, tags=["catalog"])

    @app.get("/", response_class=HTMLResponse)
    async def index(request: Request):
        return templates.TemplateResponse(request, "index.html", {})

    @app.on_event("startup")
    async def _startup():
        await init_db()
        if config.job_sweep_s > 0:
            app.state.sweeper = asyncio.create_task(
                _sweep_jobs(app.state.jobs, config.job_sweep_s, config.job_max_age_s))
        logger.info("mounted routes: %s", sorted(getattr(r, "path", "?") for r in app.router.routes))

    @app.on_event("shutdown")
    async def _shutdown():
        if app.state.sweeper is not None:
            app.state.sweeper.cancel()
        await app.state.jobs.aclose()

    return app

app = create_app()
