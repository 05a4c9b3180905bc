"""Interface de base pour les dépôts de contenu.

Ce module définit l'interface abstraite que doivent implémenter tous les dépôts (mémoire, SQL,
Redis). Les champs d'entrée sont des dicts en snake_case déjà validés par la couche API; les
sorties sont des entités du domaine. Une absence est signalée par `None` (ou `False` pour une
suppression), la traduction en `NotFound` revient aux services. Les contraintes d'unicité et
l'état d'un sondage sont vérifiés par le dépôt dans la même opération que l'écriture
(`Conflict`, `PollClosed`).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections import Counter
from typing import Any

from nouvel_ayiti.domain.entities import Article, Category, Poll, Subcategory, User, Video


def rekey_results(options: list[str], previous: dict[str, int]) -> dict[str, int]:
    """Aligne les compteurs sur un jeu d'options.

    Les options conservées gardent leur compteur, les nouvelles démarrent à 0, les options
    retirées disparaissent.
    """
    return {opt: int(previous.get(opt, 0)) for opt in options}


def recency_key(published_or_created, record_id: int):
    """Clé de tri par récence (desc) avec départage par identifiant (desc)."""
    return (published_or_created.timestamp(), record_id)


class ContentStore(ABC):
    """Interface abstraite des dépôts de contenu."""

    backend_name = "abstract"

    # Users
    @abstractmethod
    def create_user(self, fields: dict[str, Any]) -> User:
        """Crée un utilisateur (`username`, `password_hash`, `is_admin`).

        Raises:
            Conflict: `username` déjà pris.
        """
        raise NotImplementedError

    @abstractmethod
    def get_user(self, user_id: int) -> User | None:
        raise NotImplementedError

    @abstractmethod
    def get_user_by_username(self, username: str) -> User | None:
        raise NotImplementedError

    # Articles
    @abstractmethod
    def list_articles(
        self, language: str | None = None, category: str | None = None
    ) -> list[Article]:
        """Liste les articles du plus récent au plus ancien (filtres conjonctifs)."""
        raise NotImplementedError

    @abstractmethod
    def get_article(self, article_id: int) -> Article | None:
        raise NotImplementedError

    @abstractmethod
    def create_article(self, fields: dict[str, Any]) -> Article:
        """Crée un article avec `view_count=0`, `comment_count=0`."""
        raise NotImplementedError

    @abstractmethod
    def update_article(self, article_id: int, changes: dict[str, Any]) -> Article | None:
        """Fusion superficielle des champs fournis; les autres restent inchangés."""
        raise NotImplementedError

    @abstractmethod
    def delete_article(self, article_id: int) -> bool:
        raise NotImplementedError

    @abstractmethod
    def increment_views(self, article_id: int) -> Article | None:
        """Incrémente `view_count` d'exactement 1 et renvoie l'article mis à jour."""
        raise NotImplementedError

    def most_viewed(self, language: str, limit: int) -> list[Article]:
        """Articles d'une langue, triés par vues décroissantes, tronqués à `limit`."""
        articles = self.list_articles(language=language)
        articles.sort(key=lambda a: a.view_count, reverse=True)
        return articles[: max(limit, 0)]

    def category_counts(self, language: str) -> dict[str, int]:
        """Nombre d'articles par catégorie pour une langue."""
        return dict(Counter(a.category for a in self.list_articles(language=language)))

    # Polls
    @abstractmethod
    def list_polls(self, language: str | None = None) -> list[Poll]:
        raise NotImplementedError

    @abstractmethod
    def get_poll(self, poll_id: int) -> Poll | None:
        raise NotImplementedError

    @abstractmethod
    def create_poll(self, fields: dict[str, Any]) -> Poll:
        """Crée un sondage dont les résultats sont initialisés à 0 pour chaque option."""
        raise NotImplementedError

    @abstractmethod
    def update_poll(self, poll_id: int, changes: dict[str, Any]) -> Poll | None:
        """Met à jour un sondage; un changement d'options réaligne `results`."""
        raise NotImplementedError

    @abstractmethod
    def delete_poll(self, poll_id: int) -> bool:
        raise NotImplementedError

    @abstractmethod
    def vote(self, poll_id: int, option: str, require_active: bool = False) -> Poll | None:
        """Incrémente atomiquement `results[option]`.

        Renvoie `None` si le sondage est absent ou si l'option n'en fait pas partie; dans ce cas
        aucun compteur n'est modifié. Avec `require_active`, un sondage inactif lève
        `PollClosed` sans rien modifier.
        """
        raise NotImplementedError

    # Videos
    @abstractmethod
    def list_videos(self, language: str | None = None) -> list[Video]:
        raise NotImplementedError

    @abstractmethod
    def get_video(self, video_id: int) -> Video | None:
        raise NotImplementedError

    @abstractmethod
    def create_video(self, fields: dict[str, Any]) -> Video:
        raise NotImplementedError

    @abstractmethod
    def update_video(self, video_id: int, changes: dict[str, Any]) -> Video | None:
        raise NotImplementedError

    @abstractmethod
    def delete_video(self, video_id: int) -> bool:
        raise NotImplementedError

    # Categories
    @abstractmethod
    def list_categories(self, language: str | None = None) -> list[Category]:
        """Catégories (avec leurs sous-catégories), triées par nom."""
        raise NotImplementedError

    @abstractmethod
    def get_category(self, category_id: int) -> Category | None:
        raise NotImplementedError

    @abstractmethod
    def create_category(self, fields: dict[str, Any]) -> Category:
        """Crée une catégorie; `Conflict` si le nom existe déjà dans la langue."""
        raise NotImplementedError

    @abstractmethod
    def delete_category(self, category_id: int) -> bool:
        """Supprime une catégorie et ses sous-catégories."""
        raise NotImplementedError

    @abstractmethod
    def create_subcategory(self, fields: dict[str, Any]) -> Subcategory | None:
        """Crée une sous-catégorie; `None` si la catégorie parente est absente."""
        raise NotImplementedError

    @abstractmethod
    def delete_subcategory(self, subcategory_id: int) -> bool:
        raise NotImplementedError
