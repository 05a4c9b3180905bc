# Schémas Pydantic exposés par l'API (requêtes et réponses).

from datetime import datetime
from typing import Annotated, ClassVar

from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    Field,
    HttpUrl,
    StrictInt,
    StrictStr,
    TypeAdapter,
    ValidationError,
    field_validator,
)
from pydantic.alias_generators import to_camel

from nouvel_ayiti.domain.entities import Language
from nouvel_ayiti.domain.errors import MAX_ID

_HTTP_URL = TypeAdapter(HttpUrl)

# identifiant stockable sur 64 bits signés
RecordId = Annotated[StrictInt, Field(ge=1, le=MAX_ID)]


def _well_formed_url(value: str) -> str:
    try:
        _HTTP_URL.validate_python(value)
    except ValidationError as err:
        raise ValueError("must be a valid URL") from err
    return value


UrlStr = Annotated[str, AfterValidator(_well_formed_url)]
NonEmptyStr = Annotated[str, Field(min_length=1)]
Title = Annotated[str, Field(min_length=5)]
Body = Annotated[str, Field(min_length=50)]
Excerpt = Annotated[str, Field(min_length=10)]


def _options_are_valid(options: list[str]) -> list[str]:
    if len(options) < 2:
        raise ValueError("a poll needs at least 2 options")
    if any(not opt.strip() for opt in options):
        raise ValueError("options must be non-empty strings")
    if len(set(options)) != len(options):
        raise ValueError("options must be unique")
    return options


PollOptions = Annotated[list[StrictStr], AfterValidator(_options_are_valid)]


class Payload(BaseModel):
    """Base des payloads: clés camelCase acceptées (et noms Python)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class _PartialPayload(Payload):
    """Mise à jour partielle: un champ obligatoire ne peut pas être mis à `null`."""

    required_fields: ClassVar[tuple[str, ...]] = ()

    @field_validator("*", mode="before")
    @classmethod
    def _not_null(cls, value, info):
        if value is None and info.field_name in cls.required_fields:
            raise ValueError("may not be null")
        return value


class ArticleCreate(Payload):
    """Payload de création d'article.

    Champs:
    - title: >= 5 caractères
    - content: >= 50 caractères
    - excerpt: >= 10 caractères
    - coverImage: URL http(s) optionnelle
    - category, author: non vides
    - language: ht | fr | en
    - publishedAt: optionnel (maintenant par défaut)
    """

    title: Title
    content: Body
    excerpt: Excerpt
    cover_image: UrlStr | None = None
    category: NonEmptyStr
    author: NonEmptyStr
    language: Language
    published_at: datetime | None = None


class ArticleUpdate(_PartialPayload):
    required_fields: ClassVar[tuple[str, ...]] = (
        "title",
        "content",
        "excerpt",
        "category",
        "author",
        "language",
        "published_at",
    )

    title: Title | None = None
    content: Body | None = None
    excerpt: Excerpt | None = None
    cover_image: UrlStr | None = None
    category: NonEmptyStr | None = None
    author: NonEmptyStr | None = None
    language: Language | None = None
    published_at: datetime | None = None


class PollCreate(Payload):
    question: NonEmptyStr
    options: PollOptions
    language: Language
    active: bool = True


class PollUpdate(_PartialPayload):
    required_fields: ClassVar[tuple[str, ...]] = ("question", "options", "language", "active")

    question: NonEmptyStr | None = None
    options: PollOptions | None = None
    language: Language | None = None
    active: bool | None = None


class VoteRequest(Payload):
    """Vote: `pollId` entier strict, `option` chaîne."""

    poll_id: RecordId
    option: StrictStr


class VideoCreate(Payload):
    title: NonEmptyStr
    thumbnail_url: UrlStr
    video_url: UrlStr
    duration: NonEmptyStr
    language: Language
    published_at: datetime | None = None
    category: str | None = None
    author: str | None = None
    description: str | None = None


class VideoUpdate(_PartialPayload):
    required_fields: ClassVar[tuple[str, ...]] = (
        "title",
        "thumbnail_url",
        "video_url",
        "duration",
        "language",
        "published_at",
    )

    title: NonEmptyStr | None = None
    thumbnail_url: UrlStr | None = None
    video_url: UrlStr | None = None
    duration: NonEmptyStr | None = None
    language: Language | None = None
    published_at: datetime | None = None
    category: str | None = None
    author: str | None = None
    description: str | None = None


class CategoryCreate(Payload):
    name: NonEmptyStr
    label: NonEmptyStr
    language: Language


class SubcategoryCreate(Payload):
    category_id: RecordId
    name: NonEmptyStr
    label: NonEmptyStr


class RegisterPayload(Payload):
    """Payload d'inscription (compte non administrateur)."""

    username: Annotated[str, Field(min_length=3)]
    password: Annotated[str, Field(min_length=6)]


class LoginPayload(Payload):
    username: str
    password: str


class UserPublic(Payload):
    """Vue publique d'un compte (sans empreinte de mot de passe)."""

    id: int
    username: str
    is_admin: bool = False
    created_at: datetime


class LoginResponse(Payload):
    access_token: str
    token_type: str = "bearer"
    user: UserPublic
