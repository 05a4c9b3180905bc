"""
Routes de statistiques: articles les plus lus et répartition par catégorie.
"""

from fastapi import APIRouter, Query, Request

from nouvel_ayiti.api.deps import language_dep, service_dep
from nouvel_ayiti.core.http_constants import MAX_POPULAR_LIMIT
from nouvel_ayiti.domain.entities import Article

router = APIRouter(prefix="/api/stats", tags=["stats"])


@router.get("/popular-articles", response_model=list[Article])
def popular_articles(
    request: Request,
    language: str = language_dep,
    limit: int | None = Query(None, ge=1, le=MAX_POPULAR_LIMIT),
    service=service_dep,
):
    """Articles les plus vus d'une langue (vues décroissantes, puis les plus récents)."""
    if limit is None:
        limit = request.app.state.container.settings.POPULAR_ARTICLES_LIMIT
    return service.popular_articles(language, limit)


@router.get("/categories", response_model=dict[str, int])
def category_stats(language: str = language_dep, service=service_dep):
    """Nombre d'articles par catégorie pour une langue."""
    return service.category_stats(language)
