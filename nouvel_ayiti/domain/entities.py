"""
Entités du domaine éditorial.

Ce module définit les enregistrements manipulés par les dépôts de contenu (articles, sondages,
vidéos, utilisateurs, catégories). Les attributs sont en snake_case côté Python et sérialisés en
camelCase côté API.
"""

from datetime import UTC, datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

Language = Literal["ht", "fr", "en"]
SUPPORTED_LANGUAGES: tuple[str, ...] = ("ht", "fr", "en")


def utcnow() -> datetime:
    """Horodatage courant (UTC)."""
    return datetime.now(UTC)


class Record(BaseModel):
    """Base commune: alias camelCase, construction possible par nom de champ."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Article(Record):
    """Article publié, étiqueté par langue et catégorie."""

    id: int
    title: str
    content: str
    excerpt: str
    cover_image: str | None = None
    category: str
    author: str
    published_at: datetime
    view_count: int = Field(0, ge=0)
    comment_count: int = Field(0, ge=0)
    language: Language


class Poll(Record):
    """Sondage: question, options ordonnées et compteurs par option."""

    id: int
    question: str
    options: list[str]
    results: dict[str, int] = Field(default_factory=dict)
    active: bool = True
    created_at: datetime
    language: Language


class Video(Record):
    id: int
    title: str
    thumbnail_url: str
    video_url: str
    duration: str
    published_at: datetime
    language: Language
    category: str | None = None
    author: str | None = None
    description: str | None = None


class User(Record):
    """Compte utilisateur. Le hash du mot de passe n'est jamais sérialisé."""

    id: int
    username: str
    password_hash: str = Field(exclude=True, repr=False)
    is_admin: bool = False
    created_at: datetime


class Subcategory(Record):
    id: int
    category_id: int
    name: str
    label: str
    created_at: datetime


class Category(Record):
    """Entrée de la taxonomie éditoriale, par langue."""

    id: int
    name: str
    label: str
    language: Language
    created_at: datetime
    subcategories: list[Subcategory] = Field(default_factory=list)


class PollTally(Record):
    """Résultats d'un sondage avec pourcentages arrondis."""

    poll_id: int
    total_votes: int
    results: dict[str, int]
    percentages: dict[str, int]
