# tests/test_web_catalog.py
import re
import uuid

from conftest import HX


def _unique(prefix):
    return f"{prefix} {uuid.uuid4().hex[:6]}"


def _artist_id(client, name):
    html = client.get("/artists", params={"q": name}).text
    m = re.search(r'href="/artists/(\d+)/edit"', html)
    assert m, html
    return int(m.group(1))


def test_artist_crud_round_trip(client):
    name = _unique("Band")
    r = client.post("/artists/create", data={"name": name}, headers=HX)
    assert r.status_code == 200
    assert r.headers["HX-Trigger"] == "catalogChanged"
    assert "created" in r.text

    artist_id = _artist_id(client, name)
    r = client.get(f"/artists/{artist_id}/edit", headers=HX)
    assert "<html" not in r.text and name in r.text

    r = client.post(f"/artists/{artist_id}/edit", data={"name": name + " II"}, follow_redirects=False)
    assert r.status_code == 303
    assert name + " II" in client.get("/artists").text

    r = client.post(f"/artists/{artist_id}/delete", headers=HX)
    assert "deleted" in r.text
    assert client.get(f"/artists/{artist_id}").status_code == 404


def test_artist_validation(client):
    r = client.post("/artists/create", data={"name": ""}, headers=HX)
    assert "Name is required." in r.text
    r = client.post("/artists/create", data={"name": "x" * 121})
    assert "<html" in r.text
    assert "Must be 120 characters or fewer." in r.text


def test_album_crud_and_artist_cascade(client):
    name = _unique("Singer")
    client.post("/artists/create", data={"name": name}, headers=HX)
    artist_id = _artist_id(client, name)

    r = client.post("/albums/create", data={"title": "No", "artist_id": str(artist_id)}, headers=HX)
    assert "Title must be at least 3 characters." in r.text
    r = client.post("/albums/create", data={"title": "Valid Title", "artist_id": ""}, headers=HX)
    assert "Artist is required." in r.text
    r = client.post("/albums/create", data={"title": "Valid Title", "artist_id": "999999"}, headers=HX)
    assert "Artist does not exist." in r.text

    title = _unique("Album")
    r = client.post("/albums/create", data={"title": title, "artist_id": str(artist_id)}, headers=HX)
    assert "created" in r.text
    assert title in client.get(f"/artists/{artist_id}", headers=HX).text

    r = client.get(f"/artists/{artist_id}/delete", headers=HX)
    assert "1 album(s) will be removed too." in r.text
    client.post(f"/artists/{artist_id}/delete", headers=HX)
    assert title not in client.get("/albums").text


def test_missing_catalog_entities(client):
    assert client.get("/artists/999999/edit").status_code == 404
    assert client.post("/albums/999999/delete").status_code == 404
    assert client.get("/albums/999999/edit", headers=HX).status_code == 404
