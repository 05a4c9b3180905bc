"""Middleware Starlette pour mesurer le temps de traitement des requêtes.

Ajoute l'en-tête X-Process-Time-ms et journalise une ligne d'accès pour les routes `/api`.
"""

import time
from collections.abc import Callable

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

log = structlog.get_logger("nouvel_ayiti.access")


class TimingMiddleware(BaseHTTPMiddleware):
    """Middleware pour mesurer le temps de traitement des requêtes."""

    def __init__(
        self, app: ASGIApp, header_name: str = "X-Process-Time-ms", log_prefix: str = "/api"
    ) -> None:
        """Initialise le middleware.

        Args:
            app: Application ASGI à wrapper.
            header_name: Nom de l'en-tête HTTP pour le temps de traitement.
            log_prefix: Seules les requêtes dont le chemin commence par ce préfixe sont journalisées.
        """
        super().__init__(app)
        self.header_name = header_name
        self.log_prefix = log_prefix

    async def dispatch(self, request, call_next: Callable):
        """Traite une requête en mesurant son temps de traitement.

        Args:
            request: Requête HTTP entrante.
            call_next: Fonction pour appeler le middleware suivant.

        Returns:
            Response: Réponse HTTP avec en-tête de temps de traitement ajouté.
        """
        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = int((time.perf_counter() - start) * 1000)
        response.headers[self.header_name] = str(duration_ms)
        if request.url.path.startswith(self.log_prefix):
            log.info(
                "http_request",
                method=request.method,
                path=request.url.path,
                status=response.status_code,
                duration_ms=duration_ms,
            )
        return response
