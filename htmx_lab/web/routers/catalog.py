from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, Request, Depends, HTTPException
from fastapi.templating import Jinja2Templates
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.responses import HTMLResponse, RedirectResponse

from htmx_lab.db import get_session
from htmx_lab.services import catalog
from htmx_lab.services.validate import ALBUM_SCHEMA, ARTIST_SCHEMA, validate_against_schema
from htmx_lab.web.htmx import TEMPLATES_DIR, fragment, is_htmx

templates = Jinja2Templates(directory=TEMPLATES_DIR)
router = APIRouter()

CHANGED_EVENT = "catalogChanged"

def _partial_or_page(request: Request, partial: str, context: Dict[str, Any], status_code: int = 200):
    """Modal fragment for htmx, the same markup wrapped in the layout otherwise."""
    if is_htmx(request):
        return fragment(templates, request, partial, context, status_code=status_code)
    return templates.TemplateResponse(request, "catalog/page.html", {"partial": partial, **context},
                                      status_code=status_code)

def _done(request: Request, message: str, back: str):
    if is_htmx(request):
        return fragment(templates, request, "catalog/_success.html", {"message": message, "back": back},
                        trigger=CHANGED_EVENT)
    return RedirectResponse(url=back, status_code=303)

def _to_int(raw: Any) -> Optional[int]:
    try:
        return int(raw)
    except (TypeError, ValueError):
        return None

async def _artist_or_404(session: AsyncSession, artist_id: int):
    artist = await catalog.get_artist(session, artist_id)
    if artist is None:
        raise HTTPException(status_code=404, detail="artist not found")
    return artist

async def _album_or_404(session: AsyncSession, album_id: int):
    album = await catalog.get_album(session, album_id)
    if album is None:
        raise HTTPException(status_code=404, detail="album not found")
    return album

# Artists
@router.get("/artists", response_class=HTMLResponse)
async def artists_index(request: Request, q: Optional[str] = None, session: AsyncSession = Depends(get_session)):
    artists = await catalog.list_artists(session, q)
    if is_htmx(request):
        return fragment(templates, request, "catalog/_artist_rows.html", {"artists": artists})
    return templates.TemplateResponse(request, "catalog/artists.html", {"artists": artists, "q": q or ""})

@router.get("/artists/create", response_class=HTMLResponse)
async def artists_create_form(request: Request):
    return _partial_or_page(request, "catalog/_artist_form.html",
                            {"artist": None, "values": {"name": ""}, "errors": {}, "action": "/artists/create"})

@router.post("/artists/create", response_class=HTMLResponse)
async def artists_create(request: Request, session: AsyncSession = Depends(get_session)):
    form = await request.form()
    values = {"name": (form.get("name") or "").strip()}
    ok, errors = validate_against_schema(values, ARTIST_SCHEMA)
    if not ok:
        return _partial_or_page(request, "catalog/_artist_form.html",
                                {"artist": None, "values": values, "errors": errors, "action": "/artists/create"})
    artist = await catalog.create_artist(session, values["name"])
    return _done(request, f"Artist '{artist.name}' created.", "/artists")

@router.get("/artists/{artist_id}", response_class=HTMLResponse)
async def artists_details(request: Request, artist_id: int, session: AsyncSession = Depends(get_session)):
    artist = await _artist_or_404(session, artist_id)
    albums = await catalog.list_albums(session, artist_id=artist_id)
    return _partial_or_page(request, "catalog/_artist_details.html", {"artist": artist, "albums": albums})

@router.get("/artists/{artist_id}/edit", response_class=HTMLResponse)
async def artists_edit_form(request: Request, artist_id: int, session: AsyncSession = Depends(get_session)):
    artist = await _artist_or_404(session, artist_id)
    return _partial_or_page(request, "catalog/_artist_form.html",
                            {"artist": artist, "values": {"name": artist.name}, "errors": {},
                             "action": f"/artists/{artist_id}/edit"})

@router.post("/artists/{artist_id}/edit", response_class=HTMLResponse)
async def artists_edit(request: Request, artist_id: int, session: AsyncSession = Depends(get_session)):
    artist = await _artist_or_404(session, artist_id)
    form = await request.form()
    values = {"name": (form.get("name") or "").strip()}
    ok, errors = validate_against_schema(values, ARTIST_SCHEMA)
    if not ok:
        return _partial_or_page(request, "catalog/_artist_form.html",
                                {"artist": artist, "values": values, "errors": errors,
                                 "action": f"/artists/{artist_id}/edit"})
    await catalog.update_artist(session, artist_id, values["name"])
    return _done(request, f"Artist '{values['name']}' saved.", "/artists")

@router.get("/artists/{artist_id}/delete", response_class=HTMLResponse)
async def artists_delete_confirm(request: Request, artist_id: int, session: AsyncSession = Depends(get_session)):
    artist = await _artist_or_404(session, artist_id)
    albums = await catalog.list_albums(session, artist_id=artist_id)
    return _partial_or_page(request, "catalog/_confirm_delete.html",
                            {"label": f"artist '{artist.name}'", "action": f"/artists/{artist_id}/delete",
                             "note": f"{len(albums)} album(s) will be removed too." if albums else None})

@router.post("/artists/{artist_id}/delete", response_class=HTMLResponse)
async def artists_delete(request: Request, artist_id: int, session: AsyncSession = Depends(get_session)):
    artist = await catalog.delete_artist(session, artist_id)
    if artist is None:
        raise HTTPException(status_code=404, detail="artist not found")
    return _done(request, f"Artist '{artist.name}' deleted.", "/artists")

# Albums
async def _album_form_ctx(session: AsyncSession, album, values, errors, action) -> Dict[str, Any]:
    return {"album": album, "values": values, "errors": errors, "action": action,
            "artists": await catalog.list_artists(session)}

async def _album_values(request: Request, session: AsyncSession):
    form = await request.form()
    values: Dict[str, Any] = {"title": (form.get("title") or "").strip()}
    artist_id = _to_int(form.get("artist_id"))
    if artist_id is not None:
        values["artist_id"] = artist_id
    ok, errors = validate_against_schema(values, ALBUM_SCHEMA)
    if artist_id is not None and "artist_id" not in errors and await catalog.get_artist(session, artist_id) is None:
        errors["artist_id"] = "Artist does not exist."
    return values, errors

@router.get("/albums", response_class=HTMLResponse)
async def albums_index(request: Request, artist_id: Optional[int] = None, session: AsyncSession = Depends(get_session)):
    albums = await catalog.list_albums(session, artist_id=artist_id)
    if is_htmx(request):
        return fragment(templates, request, "catalog/_album_rows.html", {"albums": albums})
    return templates.TemplateResponse(request, "catalog/albums.html", {"albums": albums})

@router.get("/albums/create", response_class=HTMLResponse)
async def albums_create_form(request: Request, session: AsyncSession = Depends(get_session)):
    ctx = await _album_form_ctx(session, None, {"title": "", "artist_id": None}, {}, "/albums/create")
    return _partial_or_page(request, "catalog/_album_form.html", ctx)

@router.post("/albums/create", response_class=HTMLResponse)
async def albums_create(request: Request, session: AsyncSession = Depends(get_session)):
    values, errors = await _album_values(request, session)
    if errors:
        ctx = await _album_form_ctx(session, None, values, errors, "/albums/create")
        return _partial_or_page(request, "catalog/_album_form.html", ctx)
    album = await catalog.create_album(session, values["title"], values["artist_id"])
    return _done(request, f"Album '{album.title}' created.", "/albums")

@router.get("/albums/{album_id}/edit", response_class=HTMLResponse)
async def albums_edit_form(request: Request, album_id: int, session: AsyncSession = Depends(get_session)):
    album = await _album_or_404(session, album_id)
    ctx = await _album_form_ctx(session, album, {"title": album.title, "artist_id": album.artist_id}, {},
                                f"/albums/{album_id}/edit")
    return _partial_or_page(request, "catalog/_album_form.html", ctx)

@router.post("/albums/{album_id}/edit", response_class=HTMLResponse)
async def albums_edit(request: Request, album_id: int, session: AsyncSession = Depends(get_session)):
    album = await _album_or_404(session, album_id)
    values, errors = await _album_values(request, session)
    if errors:
        ctx = await _album_form_ctx(session, album, values, errors, f"/albums/{album_id}/edit")
        return _partial_or_page(request, "catalog/_album_form.html", ctx)
    await catalog.update_album(session, album_id, values["title"], values["artist_id"])
    return _done(request, f"Album '{values['title']}' saved.", "/albums")

@router.get("/albums/{album_id}/delete", response_class=HTMLResponse)
async def albums_delete_confirm(request: Request, album_id: int, session: AsyncSession = Depends(get_session)):
    album = await _album_or_404(session, album_id)
    return _partial_or_page(request, "catalog/_confirm_delete.html",
                            {"label": f"album '{album.title}'", "action": f"/albums/{album_id}/delete", "note": None})

@router.post("/albums/{album_id}/delete", response_class=HTMLResponse)
async def albums_delete(request: Request, album_id: int, session: AsyncSession = Depends(get_session)):
    album = await catalog.delete_album(session, album_id)
    if album is None:
        raise HTTPException(status_code=404, detail="album not found")
    return _done(request, f"Album '{album.title}' deleted.", "/albums")
