from __future__ import annotations
import math
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional

MAX_PAGE_SIZE = 50
DEFAULT_PAGE_SIZE = 5


@dataclass
class TaskItem:
    id: int
    title: str
    is_done: bool = False
    created_utc: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    tags: List[str] = field(default_factory=list)
    category: Optional[str] = None
    subcategory: Optional[str] = None


@dataclass
class TaskListView:
    items: List[TaskItem]
    page: int
    page_size: int
    total: int
    query: Optional[str] = None

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.page_size) if self.page_size else 0

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages


def clamp_paging(page: int, page_size: int) -> tuple[int, int]:
    return max(1, page), min(max(1, page_size), MAX_PAGE_SIZE)


class TaskStore:
    """In-memory task list for the workshop page."""

    def __init__(self):
        self._tasks: List[TaskItem] = []
        self._next_id = 1
        self._lock = threading.Lock()

    def all(self) -> List[TaskItem]:
        with self._lock:
            # newest first; id breaks ties between same-instant inserts
            return sorted(self._tasks, key=lambda t: (t.created_utc, t.id), reverse=True)

    def find(self, task_id: int) -> Optional[TaskItem]:
        with self._lock:
            return next((t for t in self._tasks if t.id == task_id), None)

    def add(self, title: str, tags: Optional[List[str]] = None,
            category: Optional[str] = None, subcategory: Optional[str] = None) -> TaskItem:
        with self._lock:
            item = TaskItem(
                id=self._next_id,
                title=title.strip(),
                tags=list(tags or []),
                category=category or None,
                subcategory=subcategory or None,
            )
            self._next_id += 1
            self._tasks.append(item)
            return item

    def delete(self, task_id: int) -> bool:
        with self._lock:
            for i, t in enumerate(self._tasks):
                if t.id == task_id:
                    del self._tasks[i]
                    return True
            return False

    def reset(self) -> None:
        with self._lock:
            self._tasks.clear()
            self._next_id = 1

    def page(self, q: Optional[str] = None, page: int = 1, page_size: int = DEFAULT_PAGE_SIZE) -> TaskListView:
        page, page_size = clamp_paging(page, page_size)
        items = self.all()
        if q and q.strip():
            needle = q.strip().lower()
            items = [t for t in items if needle in t.title.lower()]
        start = (page - 1) * page_size
        return TaskListView(
            items=items[start:start + page_size],
            page=page,
            page_size=page_size,
            total=len(items),
            query=q,
        )


def clean_tags(tags: Optional[List[str]]) -> List[str]:
    return [t.strip() for t in tags or [] if t and t.strip()]
