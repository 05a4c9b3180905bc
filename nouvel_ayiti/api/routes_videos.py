"""
Routes des vidéos (liste par langue, détail, gestion administrateur).
"""

from fastapi import APIRouter, Response

from nouvel_ayiti.api.deps import admin_dep, language_dep, service_dep
from nouvel_ayiti.api.schemas import VideoCreate, VideoUpdate
from nouvel_ayiti.core.http_constants import HTTP_CREATED, HTTP_NO_CONTENT
from nouvel_ayiti.domain.entities import Video
from nouvel_ayiti.domain.errors import parse_id

router = APIRouter(prefix="/api/videos", tags=["videos"])
admin_router = APIRouter(prefix="/api/admin/videos", tags=["admin"], dependencies=[admin_dep])


@router.get("", response_model=list[Video])
def list_videos(language: str = language_dep, service=service_dep):
    return service.list_videos(language)


@router.get("/{video_id}", response_model=Video)
def get_video(video_id: str, service=service_dep):
    return service.get_video(parse_id(video_id))


@admin_router.post("", response_model=Video, status_code=HTTP_CREATED)
def create_video(payload: VideoCreate, service=service_dep):
    return service.create_video(payload.model_dump(exclude_none=True))


@admin_router.put("/{video_id}", response_model=Video)
def update_video(video_id: str, payload: VideoUpdate, service=service_dep):
    return service.update_video(parse_id(video_id), payload.model_dump(exclude_unset=True))


@admin_router.delete("/{video_id}", status_code=HTTP_NO_CONTENT)
def delete_video(video_id: str, service=service_dep):
    service.delete_video(parse_id(video_id))
    return Response(status_code=HTTP_NO_CONTENT)
