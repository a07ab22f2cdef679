from __future__ import annotations
import uuid
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional


@dataclass
class Contact:
    id: int
    name: str
    email: str
    status: bool = True
    updated: bool = False


@dataclass
class Person:
    first_name: str
    last_name: str
    email: str


@dataclass
class PagedContact:
    name: str
    email: str
    uid: str = field(default_factory=lambda: str(uuid.uuid4()))


class BulkContacts:
    """Rows for the bulk-update demo; ``updated`` marks rows touched by the last request."""

    def __init__(self):
        self._contacts: Dict[int, Contact] = {}
        for name, email, status in [
            ("Joe Smith", "joe@smith.org", True),
            ("Angie MacDowell", "angie@macdowell.org", True),
            ("Fuqua Tarkenton", "fuqua@tarkenton.org", True),
            ("Kim Yee", "kim@yee.org", False),
        ]:
            cid = len(self._contacts) + 1
            self._contacts[cid] = Contact(cid, name, email, status)

    def all(self) -> List[Contact]:
        return list(self._contacts.values())

    def set_status(self, ids: Iterable[int], status: bool) -> List[Contact]:
        touched = {i for i in ids if i in self._contacts}
        for c in self._contacts.values():
            if c.id in touched:
                c.status = status
            c.updated = c.id in touched
        return self.all()


class PersonCard:
    """Single contact for the click-to-edit demo."""

    def __init__(self):
        self._person = Person("Darth", "Vader", "darth@mustafar.com")

    def get(self) -> Person:
        return self._person

    def replace(self, person: Person) -> Person:
        self._person = person
        return person


class ContactTable:
    """Editable/deletable rows for the delete-row and edit-row demos."""

    def __init__(self, seed: Optional[List[tuple]] = None):
        seed = seed or [
            ("Bobby Jones", "bobby@jones.org", True),
            ("Sally Ride", "sally@space.org", True),
            ("Brian Woodruff", "dr.brian@doctor.org", True),
            ("Spencer Woodruff", "spencer@woodruff.org", False),
        ]
        self._rows: List[Contact] = [Contact(i, n, e, s) for i, (n, e, s) in enumerate(seed, start=1)]

    def all(self) -> List[Contact]:
        return list(self._rows)

    def get(self, contact_id: int) -> Optional[Contact]:
        return next((c for c in self._rows if c.id == contact_id), None)

    def update(self, contact_id: int, name: str, email: str) -> Optional[Contact]:
        c = self.get(contact_id)
        if c is None:
            return None
        c.name = name.strip()
        c.email = email.strip()
        return c

    def delete(self, contact_id: int) -> bool:
        before = len(self._rows)
        self._rows = [c for c in self._rows if c.id != contact_id]
        return len(self._rows) != before


def paged_contacts(page: int, size: int, domain: str) -> List[PagedContact]:
    start = 10 + max(0, page) * size
    return [PagedContact("Woody", f"me{i}@{domain}") for i in range(start, start + size)]
