"""
Routes administrateur de la taxonomie: catégories et sous-catégories.
"""

from fastapi import APIRouter, Response

from nouvel_ayiti.api.deps import admin_dep, language_dep, service_dep
from nouvel_ayiti.api.schemas import CategoryCreate, SubcategoryCreate
from nouvel_ayiti.core.http_constants import HTTP_CREATED, HTTP_NO_CONTENT
from nouvel_ayiti.domain.entities import Category, Subcategory
from nouvel_ayiti.domain.errors import parse_id

router = APIRouter(prefix="/api/admin", tags=["admin"], dependencies=[admin_dep])


@router.get("/categories", response_model=list[Category])
def list_categories(language: str = language_dep, service=service_dep):
    return service.list_categories(language)


@router.post("/categories", response_model=Category, status_code=HTTP_CREATED)
def create_category(payload: CategoryCreate, service=service_dep):
    """Crée une catégorie; un nom déjà pris dans la même langue donne un conflit (409)."""
    return service.create_category(payload.model_dump())


@router.delete("/categories/{category_id}", status_code=HTTP_NO_CONTENT)
def delete_category(category_id: str, service=service_dep):
    """Supprime une catégorie et ses sous-catégories."""
    service.delete_category(parse_id(category_id))
    return Response(status_code=HTTP_NO_CONTENT)


@router.post("/subcategories", response_model=Subcategory, status_code=HTTP_CREATED)
def create_subcategory(payload: SubcategoryCreate, service=service_dep):
    return service.create_subcategory(payload.model_dump())


@router.delete("/subcategories/{subcategory_id}", status_code=HTTP_NO_CONTENT)
def delete_subcategory(subcategory_id: str, service=service_dep):
    service.delete_subcategory(parse_id(subcategory_id))
    return Response(status_code=HTTP_NO_CONTENT)
