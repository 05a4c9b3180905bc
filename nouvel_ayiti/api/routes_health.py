"""
Endpoint de santé pour vérifier la disponibilité de l'API et du backend.

Expose `/health` pour signaler l'état général de l'application et du stockage.
"""

from fastapi import APIRouter, Depends

from nouvel_ayiti.api.deps import get_container

router = APIRouter(tags=["health"])


@router.get("/health")
def health(container=Depends(get_container)):
    """Vérifie la disponibilité de l'API et le backend de stockage."""
    return {"status": "ok", "storage": getattr(container, "storage_backend", "unknown")}
