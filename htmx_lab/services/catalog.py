from __future__ import annotations
from typing import List, Optional, Tuple
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete

from htmx_lab.models import Artist, Album

async def list_artists(session: AsyncSession, q: str | None = None, limit: int = 200) -> List[Artist]:
    stmt = select(Artist).order_by(Artist.name).limit(limit)
    if q:
        stmt = stmt.filter(Artist.name.contains(q))
    res = await session.execute(stmt)
    return list(res.scalars().all())

async def get_artist(session: AsyncSession, artist_id: int) -> Optional[Artist]:
    return await session.get(Artist, artist_id)

async def create_artist(session: AsyncSession, name: str) -> Artist:
    artist = Artist(name=name.strip())
    session.add(artist)
    await session.commit()
    await session.refresh(artist)
    return artist

async def update_artist(session: AsyncSession, artist_id: int, name: str) -> Optional[Artist]:
    artist = await get_artist(session, artist_id)
    if artist is None:
        return None
    artist.name = name.strip()
    session.add(artist)
    await session.commit()
    await session.refresh(artist)
    return artist

async def delete_artist(session: AsyncSession, artist_id: int) -> Optional[Artist]:
    """Delete an artist together with its albums. Returns the removed row, or None."""
    artist = await get_artist(session, artist_id)
    if artist is None:
        return None
    await session.execute(delete(Album).where(Album.artist_id == artist_id))
    await session.delete(artist)
    await session.commit()
    return artist

async def list_albums(session: AsyncSession, artist_id: int | None = None, limit: int = 200) -> List[Tuple[Album, str]]:
    """Albums joined with their artist's name."""
    stmt = (
        select(Album, Artist.name)
        .join(Artist, Artist.id == Album.artist_id)
        .order_by(Album.title)
        .limit(limit)
    )
    if artist_id is not None:
        stmt = stmt.where(Album.artist_id == artist_id)
    res = await session.execute(stmt)
    return [(album, name) for album, name in res.all()]

async def get_album(session: AsyncSession, album_id: int) -> Optional[Album]:
    return await session.get(Album, album_id)

async def create_album(session: AsyncSession, title: str, artist_id: int) -> Album:
    album = Album(title=title.strip(), artist_id=artist_id)
    session.add(album)
    await session.commit()
    await session.refresh(album)
    return album

async def update_album(session: AsyncSession, album_id: int, title: str, artist_id: int) -> Optional[Album]:
    album = await get_album(session, album_id)
    if album is None:
        return None
    album.title = title.strip()
    album.artist_id = artist_id
    session.add(album)
    await session.commit()
    await session.refresh(album)
    return album

async def delete_album(session: AsyncSession, album_id: int) -> Optional[Album]:
    album = await get_album(session, album_id)
    if album is None:
        return None
    await session.delete(album)
    await session.commit()
    return album
