"""Taxonomie des erreurs métier.

Les services lèvent ces exceptions; la couche API les traduit en réponses HTTP
(`nouvel_ayiti.api.errors`). Aucune dépendance à FastAPI ici.
"""

from __future__ import annotations

from typing import Any


class ErrorCodes:
    """Standard error codes for the API."""

    BAD_REQUEST = "BAD_REQUEST"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_IDENTIFIER = "INVALID_IDENTIFIER"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    METHOD_NOT_ALLOWED = "METHOD_NOT_ALLOWED"
    CONFLICT = "CONFLICT"
    POLL_CLOSED = "POLL_CLOSED"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class ContentError(Exception):
    """Erreur métier de base avec code et statut HTTP associé."""

    status_code = 500
    code = ErrorCodes.INTERNAL_ERROR

    def __init__(self, message: str, errors: list[dict[str, Any]] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.errors = errors


class ValidationFailed(ContentError):
    """Entrée mal formée ou incomplète, détectée avant tout accès au dépôt."""

    status_code = 400
    code = ErrorCodes.VALIDATION_ERROR


class InvalidIdentifier(ContentError):
    """Identifiant de chemin non numérique ou hors plage."""

    status_code = 400
    code = ErrorCodes.INVALID_IDENTIFIER

    def __init__(self, raw: str) -> None:
        super().__init__("Invalid ID")
        self.raw = raw


class NotFound(ContentError):
    status_code = 404
    code = ErrorCodes.NOT_FOUND


class Unauthorized(ContentError):
    status_code = 401
    code = ErrorCodes.UNAUTHORIZED


class Forbidden(ContentError):
    status_code = 403
    code = ErrorCodes.FORBIDDEN


class Conflict(ContentError):
    status_code = 409
    code = ErrorCodes.CONFLICT


class PollClosed(Conflict):
    """Vote refusé sur un sondage inactif (politique `reject`)."""

    code = ErrorCodes.POLL_CLOSED


# plus grand identifiant représentable par une colonne INTEGER 64 bits
MAX_ID = 2**63 - 1


def parse_id(raw: str) -> int:
    """Convertit un identifiant de chemin en entier dans `1..MAX_ID`, sinon `InvalidIdentifier`."""
    value = raw.strip()
    if not (value.isascii() and value.isdigit()) or len(value) > len(str(MAX_ID)):
        raise InvalidIdentifier(raw)
    record_id = int(value)
    if not 1 <= record_id <= MAX_ID:
        raise InvalidIdentifier(raw)
    return record_id
