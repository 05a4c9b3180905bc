"""
Routes des sondages: consultation, résultats, vote et gestion administrateur.
"""

from fastapi import APIRouter, Response

from nouvel_ayiti.api.deps import admin_dep, language_dep, service_dep
from nouvel_ayiti.api.schemas import PollCreate, PollUpdate, VoteRequest
from nouvel_ayiti.core.http_constants import HTTP_CREATED, HTTP_NO_CONTENT
from nouvel_ayiti.domain.entities import Poll, PollTally
from nouvel_ayiti.domain.errors import parse_id

router = APIRouter(prefix="/api/polls", tags=["polls"])
admin_router = APIRouter(prefix="/api/admin/polls", tags=["admin"], dependencies=[admin_dep])


@router.get("", response_model=list[Poll])
def list_polls(language: str = language_dep, service=service_dep):
    return service.list_polls(language)


@router.post("/vote", response_model=Poll)
def vote(payload: VoteRequest, service=service_dep):
    """
    Enregistre un vote.

    Paramètres:
    - payload: `pollId` (entier strict) et `option` (doit appartenir au sondage).

    Retour: le sondage avec ses résultats mis à jour.
    """
    return service.vote(payload.poll_id, payload.option)


@router.get("/{poll_id}", response_model=Poll)
def get_poll(poll_id: str, service=service_dep):
    return service.get_poll(parse_id(poll_id))


@router.get("/{poll_id}/results", response_model=PollTally)
def poll_results(poll_id: str, service=service_dep):
    """Décompte d'un sondage: total des votes et pourcentage par option."""
    return service.poll_results(parse_id(poll_id))


@admin_router.post("", response_model=Poll, status_code=HTTP_CREATED)
def create_poll(payload: PollCreate, service=service_dep):
    return service.create_poll(payload.model_dump())


@admin_router.put("/{poll_id}", response_model=Poll)
def update_poll(poll_id: str, payload: PollUpdate, service=service_dep):
    return service.update_poll(parse_id(poll_id), payload.model_dump(exclude_unset=True))


@admin_router.delete("/{poll_id}", status_code=HTTP_NO_CONTENT)
def delete_poll(poll_id: str, service=service_dep):
    service.delete_poll(parse_id(poll_id))
    return Response(status_code=HTTP_NO_CONTENT)
