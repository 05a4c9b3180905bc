"""
Métriques Prometheus pour l'application.

Ce module définit les métriques HTTP et métier (votes, vues, écritures de contenu) et expose la
route `/metrics` ainsi que le middleware de mesure.
"""

import time

from fastapi import APIRouter, Request
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

metrics_router = APIRouter(tags=["metrics"])

REQUEST_COUNT = Counter(
    "http_requests_total", "Total HTTP requests", ["method", "route", "status"]
)
REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds", "Latency of HTTP requests", ["route"]
)

# Business metrics
POLL_VOTES_TOTAL = Counter(
    "poll_votes_total",
    "Poll votes by outcome",
    ["result"],  # accepted | rejected | closed
)
ARTICLE_VIEWS_TOTAL = Counter(
    "article_views_total",
    "Article reads counted as views",
)
CONTENT_WRITES_TOTAL = Counter(
    "content_writes_total",
    "Administrative content writes",
    ["entity", "op"],
)


def route_label(request: Request) -> str:
    """Gabarit de route (ex: `/api/articles/{article_id}`) pour borner la cardinalité."""
    route = request.scope.get("route")
    path = getattr(route, "path", None)
    return path or "unmatched"


@metrics_router.get("/metrics")
def metrics():
    """
    Expose les métriques Prometheus au format texte.

    Returns:
        Response: Réponse HTTP contenant les métriques au format Prometheus.
    """
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)


class PrometheusMiddleware(BaseHTTPMiddleware):
    """
    Middleware Prometheus pour mesurer les métriques HTTP.

    Collecte les métriques de comptage des requêtes et de latence par route pour l'exposition
    Prometheus.
    """

    async def dispatch(self, request: Request, call_next):
        start = time.perf_counter()
        response: Response = await call_next(request)
        route = route_label(request)
        REQUEST_COUNT.labels(request.method, route, str(response.status_code)).inc()
        REQUEST_LATENCY.labels(route).observe(time.perf_counter() - start)
        return response
