# tests/test_playground_services.py
from htmx_lab.services.categories import get_categories, get_models, get_subcategories
from htmx_lab.services.contacts import BulkContacts, ContactTable, Person, PersonCard, paged_contacts
from htmx_lab.services.progress import ProgressBar


def test_bulk_update_flags_only_touched_rows():
    bulk = BulkContacts()
    rows = bulk.set_status([4], True)
    kim = [c for c in rows if c.id == 4][0]
    assert kim.status is True and kim.updated is True
    assert all(not c.updated for c in rows if c.id != 4)

    rows = bulk.set_status([1, 2, 42], False)
    assert [c.updated for c in rows] == [True, True, False, False]
    assert [c.status for c in rows] == [False, False, True, True]


def test_person_card_replace():
    card = PersonCard()
    assert card.get().first_name == "Darth"
    card.replace(Person("Luke", "Skywalker", "luke@tatooine.com"))
    assert card.get().last_name == "Skywalker"


def test_contact_table_update_and_delete():
    table = ContactTable()
    assert table.update(2, " Sally K. Ride ", "sally@nasa.gov").name == "Sally K. Ride"
    assert table.update(99, "x", "y") is None
    assert table.delete(1) is True
    assert table.delete(1) is False
    assert [c.id for c in table.all()] == [2, 3, 4]


def test_paged_contacts_numbering():
    first = paged_contacts(0, 5, "woody.dev")
    assert [c.email for c in first] == [f"me{i}@woody.dev" for i in range(10, 15)]
    second = paged_contacts(2, 25, "woodruff.dev")
    assert second[0].email == "me60@woodruff.dev"
    assert len({c.uid for c in second}) == 25


def test_progress_bar_sequence_and_restart():
    bar = ProgressBar()
    assert bar.start() == 2
    seen = [bar.advance() for _ in range(7)]
    assert seen == [18, 22, 52, 67, 98, 100, 0]
    assert bar.finalize() == 100
    assert bar.percent == 0


def test_lookup_data():
    assert get_categories() == ["Work", "Personal", "Home", "Learning"]
    assert get_subcategories("Work")[0] == "Meeting"
    assert get_subcategories(None) == []
    assert get_subcategories("Nope") == []
    assert get_models("BMW") == ["325i", "325ix", "X5"]
    assert get_models(None) == []
