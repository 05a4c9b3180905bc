"""
Application principale FastAPI.

Ce module assemble tous les composants de l'application : middlewares,
routes, métriques et configuration de l'API de contenu.

Responsabilités du module:
- Initialiser le logging structuré et le tracing
- Construire l'application FastAPI avec son titre
- Ajouter les middlewares (CORS, request id, métriques, timing)
- Installer les gestionnaires d'erreurs
- Monter les routers publics et administrateur
"""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from nouvel_ayiti.api import (
    routes_articles,
    routes_auth,
    routes_categories,
    routes_health,
    routes_polls,
    routes_stats,
    routes_videos,
)
from nouvel_ayiti.api.errors import install_error_handlers
from nouvel_ayiti.app.metrics import PrometheusMiddleware, metrics_router
from nouvel_ayiti.app.tracing import setup_tracing
from nouvel_ayiti.core.logging import setup_logging
from nouvel_ayiti.middlewares.request_id import RequestIDMiddleware
from nouvel_ayiti.middlewares.timing import TimingMiddleware


def create_app(container=None) -> FastAPI:
    """
    Construit et retourne l'application FastAPI prête à l'usage.

    Paramètres:
    - container: conteneur de dépendances; le singleton du module `core.container` par défaut.
    """
    if container is None:
        from nouvel_ayiti.core.container import container
    settings = container.settings
    # APP_DEBUG agit sur le niveau de log, jamais sur le corps des erreurs 500
    log_level = "DEBUG" if settings.APP_DEBUG else settings.LOG_LEVEL
    setup_logging(log_level, json_logs=settings.LOG_JSON)
    setup_tracing(settings)

    app = FastAPI(title=settings.APP_NAME)
    app.state.container = container
    if settings.CORS_ORIGINS:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=[str(o).rstrip("/") for o in settings.CORS_ORIGINS],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )
    app.add_middleware(PrometheusMiddleware)
    app.add_middleware(TimingMiddleware)
    # ajouté en dernier: s'exécute en premier et pose l'identifiant pour les autres
    app.add_middleware(RequestIDMiddleware)
    install_error_handlers(app)

    app.include_router(routes_health.router)
    app.include_router(routes_auth.router)
    app.include_router(routes_articles.router)
    app.include_router(routes_polls.router)
    app.include_router(routes_videos.router)
    app.include_router(routes_stats.router)
    app.include_router(routes_articles.admin_router)
    app.include_router(routes_polls.admin_router)
    app.include_router(routes_videos.admin_router)
    app.include_router(routes_categories.router)
    app.include_router(metrics_router)
    return app


app = create_app()


def run() -> None:
    """Lance le serveur uvicorn sur `APP_HOST`:`APP_PORT`."""
    import uvicorn

    settings = app.state.container.settings
    uvicorn.run(app, host=settings.APP_HOST, port=settings.APP_PORT)
