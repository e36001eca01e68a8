"""
Router para la ingesta y consulta de contenido de Reddit
"""
import asyncio
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from services.pulse.app import config
from services.pulse.app.container import Container
from services.pulse.app.domain.entities import CallerRole, FetchRequest
from shared.services.logging_config import get_logger

logger = get_logger(__name__)
router = APIRouter(prefix="/reddit", tags=["Reddit"])


def get_container(request: Request) -> Container:
    return request.app.state.container


class FetchRequestBody(BaseModel):
    """Parámetros de un fetch bajo demanda."""
    keyword: str = Field(..., min_length=1, max_length=100)
    subreddits: Optional[List[str]] = None
    maxPosts: int = Field(config.DEFAULT_MAX_POSTS, ge=1, le=100)
    includeComments: bool = True
    maxCommentsPerPost: int = Field(config.DEFAULT_MAX_COMMENTS_PER_POST, ge=0, le=50)
    forceRefresh: bool = False
    callerRole: CallerRole = CallerRole.GENERAL


@router.post("/fetch")
def fetch_reddit_data(body: FetchRequestBody, container: Container = Depends(get_container)):
    """
    Ejecuta un ciclo completo para la keyword y retorna el resultado estructurado.
    Responde 409 si la keyword ya se está procesando.
    """
    request = FetchRequest(
        keyword=body.keyword,
        subreddits=body.subreddits,
        max_posts=body.maxPosts,
        include_comments=body.includeComments,
        max_comments_per_post=body.maxCommentsPerPost,
        force_refresh=body.forceRefresh,
        caller_role=body.callerRole,
    )
    if not request.keyword:
        raise HTTPException(status_code=400, detail="Keyword is required")

    result = asyncio.run(container.keyword_cycle.execute(request))
    status_code = 409 if result.already_processing else 200
    return JSONResponse(status_code=status_code, content=result.to_dict())


@router.get("/data")
def get_reddit_data(
    keyword: Optional[str] = None,
    item_type: str = Query("both", alias="type"),
    sentiment: Optional[str] = None,
    subreddit: Optional[str] = None,
    sort_by: str = Query("aggregateScore", alias="sortBy"),
    sort_order: str = Query("desc", alias="sortOrder"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=config.MAX_QUERY_LIMIT),
    container: Container = Depends(get_container),
):
    """Items almacenados, paginados, filtrados y ordenados."""
    try:
        return container.query.get_data(
            keyword=keyword,
            item_type=item_type,
            sentiment=sentiment,
            subreddit=subreddit,
            sort_by=sort_by,
            sort_order=sort_order,
            page=page,
            limit=limit,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/statistics")
def get_statistics(keyword: Optional[str] = None, container: Container = Depends(get_container)):
    """Totales, sentimiento y top subreddits de una keyword (o globales)."""
    return container.query.statistics(keyword)


@router.get("/trending")
def get_trending_keywords(limit: int = Query(10, ge=1, le=50), container: Container = Depends(get_container)):
    """Keywords ordenadas por actividad reciente."""
    return {"keywords": container.query.trending(limit)}
