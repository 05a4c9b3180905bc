"""Dépendances partagées pour les routes de l'API.

But du module
-------------
- Exposer aux endpoints les composants du conteneur attaché à l'application
  (`app.state.container`), ce qui permet aux tests d'injecter le leur.
- Résoudre l'identité de l'appelant et imposer le droit administrateur.
- Normaliser les paramètres de langue communs à plusieurs routes.
"""

from fastapi import Depends, Header, Request

from nouvel_ayiti.domain.entities import SUPPORTED_LANGUAGES
from nouvel_ayiti.domain.errors import Unauthorized, ValidationFailed
from nouvel_ayiti.domain.identity import Identity, require_admin


def get_container(request: Request):
    return request.app.state.container


def get_content_service(request: Request):
    return request.app.state.container.content


def get_identity(request: Request, authorization: str | None = Header(None)) -> Identity | None:
    """Identité de l'appelant selon le fournisseur configuré (None si anonyme)."""
    return request.app.state.container.identity.identify(authorization)


def get_current_identity(identity: Identity | None = Depends(get_identity)) -> Identity:
    if identity is None:
        raise Unauthorized("Unauthorized")
    return identity


def admin_identity(identity: Identity | None = Depends(get_identity)) -> Identity:
    """Garde des routes `/api/admin/*`: 401 sans identité, 403 sans droit admin."""
    return require_admin(identity)


def optional_language(language: str | None = None) -> str | None:
    """Filtre de langue facultatif; une valeur vide équivaut à l'absence de filtre."""
    if not language:
        return None
    if language not in SUPPORTED_LANGUAGES:
        raise ValidationFailed(
            "Invalid language",
            errors=[
                {
                    "field": "language",
                    "message": f"must be one of {', '.join(SUPPORTED_LANGUAGES)}",
                }
            ],
        )
    return language


def language_or_default(
    request: Request, language: str | None = Depends(optional_language)
) -> str:
    """Langue demandée, sinon la langue par défaut configurée."""
    return language or request.app.state.container.settings.DEFAULT_LANGUAGE


service_dep = Depends(get_content_service)
admin_dep = Depends(admin_identity)
current_identity_dep = Depends(get_current_identity)
optional_language_dep = Depends(optional_language)
language_dep = Depends(language_or_default)
