"""
Identité de l'appelant et contrôle d'accès administrateur.

Le contrôle `require_admin` est effectué par la façade API avant tout accès au dépôt; il repose sur
un fournisseur d'identité injecté (`IdentityProvider`).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from nouvel_ayiti.domain.auth import decode_token
from nouvel_ayiti.domain.errors import Forbidden, Unauthorized


@dataclass(frozen=True)
class Identity:
    """Appelant authentifié."""

    user_id: int
    username: str
    is_admin: bool


class IdentityProvider(Protocol):
    """Résout l'en-tête `Authorization` en identité (ou `None` si anonyme/invalide)."""

    def identify(self, authorization: str | None) -> Identity | None: ...


class JWTIdentityProvider:
    """Fournisseur d'identité par jeton bearer JWT.

    Le statut administrateur est relu dans le dépôt à chaque requête: un compte rétrogradé perd
    l'accès sans attendre l'expiration du jeton.
    """

    def __init__(self, store, secret: str, alg: str) -> None:
        self.store = store
        self.secret = secret
        self.alg = alg

    def identify(self, authorization: str | None) -> Identity | None:
        if not authorization or not authorization.lower().startswith("bearer "):
            return None
        token = authorization.split(" ", 1)[1].strip()
        data = decode_token(token, self.secret, self.alg)
        if data is None or not data.sub.isdigit():
            return None
        user = self.store.get_user(int(data.sub))
        if user is None:
            return None
        return Identity(user_id=user.id, username=user.username, is_admin=user.is_admin)


def require_admin(identity: Identity | None) -> Identity:
    """
    Vérifie que l'appelant est un administrateur.

    Raises:
        Unauthorized: aucun appelant authentifié.
        Forbidden: appelant authentifié sans droit administrateur.
    """
    if identity is None:
        raise Unauthorized("Unauthorized")
    if not identity.is_admin:
        raise Forbidden("Forbidden: Admin access required")
    return identity
