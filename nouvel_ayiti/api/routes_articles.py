"""
Routes des articles: lecture publique et gestion administrateur.

La lecture d'un article compte une vue; l'article renvoyé porte le compteur déjà incrémenté.
"""

from fastapi import APIRouter, Response

from nouvel_ayiti.api.deps import admin_dep, optional_language_dep, service_dep
from nouvel_ayiti.api.schemas import ArticleCreate, ArticleUpdate
from nouvel_ayiti.core.http_constants import HTTP_CREATED, HTTP_NO_CONTENT
from nouvel_ayiti.domain.entities import Article
from nouvel_ayiti.domain.errors import parse_id

router = APIRouter(prefix="/api/articles", tags=["articles"])
admin_router = APIRouter(
    prefix="/api/admin/articles", tags=["admin"], dependencies=[admin_dep]
)


@router.get("", response_model=list[Article])
def list_articles(
    language: str | None = optional_language_dep,
    category: str | None = None,
    service=service_dep,
):
    """Liste les articles, du plus récent au plus ancien, filtrés par langue et catégorie."""
    return service.list_articles(language=language, category=category or None)


@router.get("/{article_id}", response_model=Article)
def read_article(article_id: str, service=service_dep):
    return service.read_article(parse_id(article_id))


@admin_router.post("", response_model=Article, status_code=HTTP_CREATED)
def create_article(payload: ArticleCreate, service=service_dep):
    return service.create_article(payload.model_dump(exclude_none=True))


@admin_router.put("/{article_id}", response_model=Article)
def update_article(article_id: str, payload: ArticleUpdate, service=service_dep):
    """Mise à jour partielle: seuls les champs fournis sont modifiés."""
    return service.update_article(parse_id(article_id), payload.model_dump(exclude_unset=True))


@admin_router.delete("/{article_id}", status_code=HTTP_NO_CONTENT)
def delete_article(article_id: str, service=service_dep):
    service.delete_article(parse_id(article_id))
    return Response(status_code=HTTP_NO_CONTENT)
