from typing import List

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from newsroom.database import get_db
from newsroom.newsletters import NewsletterService
from newsroom.schemas import NewsletterCreate, NewsletterResponse, NewsletterUpdate

router = APIRouter()


def get_newsletters(db: Session = Depends(get_db)) -> NewsletterService:
    return NewsletterService(db)


@router.get("/users/{user_id}/newsletters", response_model=List[NewsletterResponse])
def list_newsletters(user_id: str, newsletters: NewsletterService = Depends(get_newsletters)):
    return newsletters.list_for_user(user_id)


@router.post("/users/{user_id}/newsletters", response_model=NewsletterResponse, status_code=201)
def create_newsletter(
    user_id: str,
    body: NewsletterCreate,
    newsletters: NewsletterService = Depends(get_newsletters),
):
    return newsletters.create(user_id, body)


@router.patch("/newsletters/{newsletter_id}", response_model=NewsletterResponse)
def update_newsletter(
    newsletter_id: str,
    body: NewsletterUpdate,
    newsletters: NewsletterService = Depends(get_newsletters),
):
    return newsletters.update(newsletter_id, body)


@router.delete("/newsletters/{newsletter_id}", status_code=204)
def delete_newsletter(newsletter_id: str, newsletters: NewsletterService = Depends(get_newsletters)):
    newsletters.delete(newsletter_id)
    return Response(status_code=204)
