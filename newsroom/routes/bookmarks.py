from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from newsroom.bookmarks import BookmarkService
from newsroom.database import get_db
from newsroom.schemas import BookmarkCreate, BookmarkResponse, BookmarkTagsUpdate

router = APIRouter(prefix="/users/{user_id}/bookmarks")


def get_bookmarks(db: Session = Depends(get_db)) -> BookmarkService:
    return BookmarkService(db)


@router.get("", response_model=List[BookmarkResponse])
def list_bookmarks(
    user_id: str,
    tags: Optional[List[str]] = Query(None),
    limit: int = 10,
    offset: int = 0,
    bookmarks: BookmarkService = Depends(get_bookmarks),
):
    return bookmarks.list(user_id, tags=tags, limit=limit, offset=offset)


@router.post("", response_model=BookmarkResponse, status_code=201)
def add_bookmark(user_id: str, body: BookmarkCreate, bookmarks: BookmarkService = Depends(get_bookmarks)):
    return bookmarks.add(user_id, body.article_id, body.tags)


# Declared before /{article_id} routes so "tags" isn't taken for an article id
@router.get("/tags", response_model=List[str])
def bookmark_tags(user_id: str, bookmarks: BookmarkService = Depends(get_bookmarks)):
    return bookmarks.tags(user_id)


@router.put("/{article_id}/tags", response_model=BookmarkResponse)
def update_tags(
    user_id: str,
    article_id: str,
    body: BookmarkTagsUpdate,
    bookmarks: BookmarkService = Depends(get_bookmarks),
):
    return bookmarks.update_tags(user_id, article_id, body.tags)


@router.delete("/{article_id}", status_code=204)
def remove_bookmark(user_id: str, article_id: str, bookmarks: BookmarkService = Depends(get_bookmarks)):
    bookmarks.remove(user_id, article_id)
    return Response(status_code=204)
