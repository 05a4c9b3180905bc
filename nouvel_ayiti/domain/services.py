"""Services métier du contenu éditorial.

Le service orchestre les appels au dépôt et traduit les absences en `NotFound`. La validation des
entrées a déjà eu lieu à la frontière API; le service ne reçoit que des champs bien formés.
"""

from typing import Any

import structlog

from nouvel_ayiti.app.metrics import ARTICLE_VIEWS_TOTAL, CONTENT_WRITES_TOTAL
from nouvel_ayiti.domain.auth import hash_password, verify_password
from nouvel_ayiti.domain.entities import (
    Article,
    Category,
    Poll,
    PollTally,
    Subcategory,
    User,
    Video,
)
from nouvel_ayiti.domain.errors import NotFound
from nouvel_ayiti.domain.polls import PollVotingEngine

log = structlog.get_logger(__name__)


class ContentService:
    """Service métier pour articles, sondages, vidéos, catégories et comptes.

    Responsabilités:
    - Déléguer lectures/écritures au dépôt (`store`), quel que soit le backend.
    - Coupler la lecture d'un article à l'incrément de son compteur de vues.
    - Déléguer les votes au moteur de vote (`voting`).
    """

    def __init__(self, store, voting: PollVotingEngine):
        """Initialise le service avec ses dépendances.

        Paramètres:
        - store: dépôt de contenu (`ContentStore`).
        - voting: moteur de vote partageant le même dépôt.
        """
        self.store = store
        self.voting = voting

    def _written(self, entity: str, op: str, record_id: int) -> None:
        CONTENT_WRITES_TOTAL.labels(entity, op).inc()
        log.info("content_write", entity=entity, op=op, id=record_id)

    # Articles
    def list_articles(self, language: str | None = None, category: str | None = None):
        return self.store.list_articles(language=language, category=category)

    def read_article(self, article_id: int) -> Article:
        """Retourne un article en comptant la lecture comme une vue.

        L'article renvoyé porte le compteur déjà incrémenté.
        """
        article = self.store.increment_views(article_id)
        if article is None:
            raise NotFound("Article not found")
        ARTICLE_VIEWS_TOTAL.inc()
        return article

    def create_article(self, fields: dict[str, Any]) -> Article:
        article = self.store.create_article(fields)
        self._written("article", "create", article.id)
        return article

    def update_article(self, article_id: int, changes: dict[str, Any]) -> Article:
        article = self.store.update_article(article_id, changes)
        if article is None:
            raise NotFound("Article not found")
        self._written("article", "update", article_id)
        return article

    def delete_article(self, article_id: int) -> None:
        if not self.store.delete_article(article_id):
            raise NotFound("Article not found")
        self._written("article", "delete", article_id)

    def popular_articles(self, language: str, limit: int) -> list[Article]:
        return self.store.most_viewed(language, limit)

    def category_stats(self, language: str) -> dict[str, int]:
        return self.store.category_counts(language)

    # Polls
    def list_polls(self, language: str) -> list[Poll]:
        return self.store.list_polls(language=language)

    def get_poll(self, poll_id: int) -> Poll:
        poll = self.store.get_poll(poll_id)
        if poll is None:
            raise NotFound("Poll not found")
        return poll

    def poll_results(self, poll_id: int) -> PollTally:
        return self.voting.tally(self.get_poll(poll_id))

    def vote(self, poll_id: int, option: str) -> Poll:
        return self.voting.vote(poll_id, option)

    def create_poll(self, fields: dict[str, Any]) -> Poll:
        poll = self.store.create_poll(fields)
        self._written("poll", "create", poll.id)
        return poll

    def update_poll(self, poll_id: int, changes: dict[str, Any]) -> Poll:
        poll = self.store.update_poll(poll_id, changes)
        if poll is None:
            raise NotFound("Poll not found")
        self._written("poll", "update", poll_id)
        return poll

    def delete_poll(self, poll_id: int) -> None:
        if not self.store.delete_poll(poll_id):
            raise NotFound("Poll not found")
        self._written("poll", "delete", poll_id)

    # Videos
    def list_videos(self, language: str) -> list[Video]:
        return self.store.list_videos(language=language)

    def get_video(self, video_id: int) -> Video:
        video = self.store.get_video(video_id)
        if video is None:
            raise NotFound("Video not found")
        return video

    def create_video(self, fields: dict[str, Any]) -> Video:
        video = self.store.create_video(fields)
        self._written("video", "create", video.id)
        return video

    def update_video(self, video_id: int, changes: dict[str, Any]) -> Video:
        video = self.store.update_video(video_id, changes)
        if video is None:
            raise NotFound("Video not found")
        self._written("video", "update", video_id)
        return video

    def delete_video(self, video_id: int) -> None:
        if not self.store.delete_video(video_id):
            raise NotFound("Video not found")
        self._written("video", "delete", video_id)

    # Categories
    def list_categories(self, language: str) -> list[Category]:
        return self.store.list_categories(language=language)

    def create_category(self, fields: dict[str, Any]) -> Category:
        """Crée une catégorie; le dépôt lève `Conflict` si le nom existe dans la langue."""
        category = self.store.create_category(fields)
        self._written("category", "create", category.id)
        return category

    def delete_category(self, category_id: int) -> None:
        if not self.store.delete_category(category_id):
            raise NotFound("Category not found")
        self._written("category", "delete", category_id)

    def create_subcategory(self, fields: dict[str, Any]) -> Subcategory:
        sub = self.store.create_subcategory(fields)
        if sub is None:
            raise NotFound("Category not found")
        self._written("subcategory", "create", sub.id)
        return sub

    def delete_subcategory(self, subcategory_id: int) -> None:
        if not self.store.delete_subcategory(subcategory_id):
            raise NotFound("Subcategory not found")
        self._written("subcategory", "delete", subcategory_id)

    # Users
    def register(self, username: str, password: str, is_admin: bool = False) -> User:
        """Crée un compte; un `username` déjà pris lève `Conflict` depuis le dépôt."""
        user = self.store.create_user(
            {
                "username": username,
                "password_hash": hash_password(password),
                "is_admin": is_admin,
            }
        )
        log.info("user_registered", user_id=user.id, is_admin=is_admin)
        return user

    def authenticate(self, username: str, password: str) -> User | None:
        user = self.store.get_user_by_username(username)
        if user is None or not verify_password(password, user.password_hash):
            return None
        return user

    def get_user(self, user_id: int) -> User:
        user = self.store.get_user(user_id)
        if user is None:
            raise NotFound("User not found")
        return user
