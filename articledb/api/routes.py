"""API routes for articledb."""

from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status

from articledb.core.config import settings
from articledb.models.schemas import (AddArticleResponse, Article,
                                      ArticleRequest, ErrorResponse)
from articledb.services.orchestrator import ArticleAdder

router = APIRouter()


def verify_api_key(x_api_key: Optional[str] = Header(None)):
    """API key verification, skipped when no key is configured."""
    if settings.api_key and x_api_key != settings.api_key:
        raise HTTPException(status_code=401, detail="Invalid API key")
    return x_api_key


def get_adder(request: Request) -> ArticleAdder:
    """Get the article adder built at startup."""
    return request.app.state.adder


@router.post(
    "/articles",
    response_model=AddArticleResponse,
    status_code=status.HTTP_201_CREATED,
    responses={422: {"model": ErrorResponse}, 502: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
)
async def add_article(
    request: ArticleRequest,
    api_key: Optional[str] = Depends(verify_api_key),
    adder: ArticleAdder = Depends(get_adder),
):
    """Enrich an article and store it."""
    article_id = await adder.add(request.to_article())
    return AddArticleResponse(id=article_id)


@router.get(
    "/articles/{article_id}",
    response_model=Article,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
)
async def get_article(
    article_id: str,
    api_key: Optional[str] = Depends(verify_api_key),
    adder: ArticleAdder = Depends(get_adder),
):
    """Fetch a stored article."""
    return await adder.get(article_id)
