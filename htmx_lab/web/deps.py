from __future__ import annotations
from fastapi import Request

from htmx_lab.config import Config
from htmx_lab.services.jobs import JobTracker
from htmx_lab.services.tasks import TaskStore

# Shared instances are built once in create_app() and live on app.state.

def get_config(request: Request) -> Config:
    return request.app.state.config

def get_tracker(request: Request) -> JobTracker:
    return request.app.state.jobs

def get_task_store(request: Request) -> TaskStore:
    return request.app.state.tasks

def get_playground(request: Request):
    return request.app.state.playground
