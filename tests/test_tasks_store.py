# tests/test_tasks_store.py
from htmx_lab.services.tasks import TaskStore, clean_tags, clamp_paging


def _store(*titles):
    s = TaskStore()
    for t in titles:
        s.add(t)
    return s


def test_add_trims_and_numbers_from_one():
    s = TaskStore()
    a = s.add("  Write report ")
    b = s.add("Call Bob")
    assert (a.id, a.title) == (1, "Write report")
    assert b.id == 2
    assert s.find(2) is b
    assert s.find(99) is None


def test_all_is_newest_first():
    s = _store("first", "second", "third")
    assert [t.title for t in s.all()] == ["third", "second", "first"]


def test_page_filters_case_insensitively():
    s = _store("Buy milk", "Fix bike", "buy bread")
    view = s.page(q="BUY")
    assert view.total == 2
    assert {t.title for t in view.items} == {"Buy milk", "buy bread"}
    assert view.query == "BUY"


def test_page_slices_and_reports_neighbours():
    s = _store(*[f"task {i}" for i in range(12)])
    view = s.page(page=2, page_size=5)
    assert view.total == 12
    assert view.total_pages == 3
    assert len(view.items) == 5
    assert view.has_previous and view.has_next
    last = s.page(page=3, page_size=5)
    assert len(last.items) == 2
    assert not last.has_next


def test_paging_is_clamped():
    assert clamp_paging(0, 0) == (1, 1)
    assert clamp_paging(-3, 500) == (1, 50)
    view = _store("a").page(page=-1, page_size=1000)
    assert (view.page, view.page_size) == (1, 50)


def test_delete_and_reset():
    s = _store("one", "two")
    assert s.delete(1) is True
    assert s.delete(1) is False
    s.reset()
    assert s.all() == []
    assert s.add("again").id == 1


def test_clean_tags_drops_blanks():
    assert clean_tags([" a ", "", "  ", "b"]) == ["a", "b"]
    assert clean_tags(None) == []
