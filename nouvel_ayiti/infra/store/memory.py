"""
Dépôt de contenu en mémoire (utilisé pour dev/tests).

Stocke les enregistrements dans des dicts locaux, non persistants. Toutes les mutations passent
par un verrou unique: la lecture-modification-écriture d'un compteur de vote ou de vues est donc
atomique vis-à-vis des requêtes concurrentes servies par le pool de threads.
"""

from __future__ import annotations

import itertools
import threading
from typing import Any

from nouvel_ayiti.domain.entities import (
    Article,
    Category,
    Poll,
    Subcategory,
    User,
    Video,
    utcnow,
)
from nouvel_ayiti.domain.errors import Conflict, PollClosed
from nouvel_ayiti.infra.store.base import ContentStore, recency_key, rekey_results


class InMemoryContentStore(ContentStore):
    """Dépôt de contenu en mémoire, une table (dict) par type d'entité."""

    backend_name = "memory"

    def __init__(self) -> None:
        """Initialise une base mémoire vide."""
        self._lock = threading.RLock()
        self._users: dict[int, dict[str, Any]] = {}
        self._articles: dict[int, dict[str, Any]] = {}
        self._polls: dict[int, dict[str, Any]] = {}
        self._videos: dict[int, dict[str, Any]] = {}
        self._categories: dict[int, dict[str, Any]] = {}
        self._subcategories: dict[int, dict[str, Any]] = {}
        self._seq = {
            name: itertools.count(1)
            for name in ("user", "article", "poll", "video", "category", "subcategory")
        }

    def _next_id(self, entity: str) -> int:
        return next(self._seq[entity])

    def _insert(self, entity: str, table: dict[int, dict[str, Any]], record: dict[str, Any]):
        with self._lock:
            record["id"] = self._next_id(entity)
            table[record["id"]] = record
            return dict(record)

    def _merge(self, table: dict[int, dict[str, Any]], record_id: int, changes: dict[str, Any]):
        with self._lock:
            current = table.get(record_id)
            if current is None:
                return None
            updated = {**current, **changes, "id": record_id}
            table[record_id] = updated
            return dict(updated)

    def _remove(self, table: dict[int, dict[str, Any]], record_id: int) -> bool:
        with self._lock:
            return table.pop(record_id, None) is not None

    # Users
    def create_user(self, fields: dict[str, Any]) -> User:
        record = {"is_admin": False, **fields, "created_at": utcnow()}
        with self._lock:
            if any(u["username"] == record["username"] for u in self._users.values()):
                raise Conflict("Username already exists")
            return User.model_validate(self._insert("user", self._users, record))

    def get_user(self, user_id: int) -> User | None:
        record = self._users.get(user_id)
        return User.model_validate(record) if record else None

    def get_user_by_username(self, username: str) -> User | None:
        with self._lock:
            record = next(
                (u for u in self._users.values() if u["username"] == username), None
            )
        return User.model_validate(record) if record else None

    # Articles
    def list_articles(
        self, language: str | None = None, category: str | None = None
    ) -> list[Article]:
        with self._lock:
            rows = [dict(r) for r in self._articles.values()]
        rows = [
            r
            for r in rows
            if (language is None or r["language"] == language)
            and (category is None or r["category"] == category)
        ]
        rows.sort(key=lambda r: recency_key(r["published_at"], r["id"]), reverse=True)
        return [Article.model_validate(r) for r in rows]

    def get_article(self, article_id: int) -> Article | None:
        record = self._articles.get(article_id)
        return Article.model_validate(record) if record else None

    def create_article(self, fields: dict[str, Any]) -> Article:
        record = {
            "cover_image": None,
            **fields,
            "published_at": fields.get("published_at") or utcnow(),
            "view_count": 0,
            "comment_count": 0,
        }
        return Article.model_validate(self._insert("article", self._articles, record))

    def update_article(self, article_id: int, changes: dict[str, Any]) -> Article | None:
        record = self._merge(self._articles, article_id, changes)
        return Article.model_validate(record) if record else None

    def delete_article(self, article_id: int) -> bool:
        return self._remove(self._articles, article_id)

    def increment_views(self, article_id: int) -> Article | None:
        with self._lock:
            record = self._articles.get(article_id)
            if record is None:
                return None
            record["view_count"] += 1
            return Article.model_validate(dict(record))

    # Polls
    def list_polls(self, language: str | None = None) -> list[Poll]:
        with self._lock:
            rows = [self._copy_poll(r) for r in self._polls.values()]
        rows = [r for r in rows if language is None or r["language"] == language]
        rows.sort(key=lambda r: recency_key(r["created_at"], r["id"]), reverse=True)
        return [Poll.model_validate(r) for r in rows]

    @staticmethod
    def _copy_poll(record: dict[str, Any]) -> dict[str, Any]:
        return {**record, "options": list(record["options"]), "results": dict(record["results"])}

    def get_poll(self, poll_id: int) -> Poll | None:
        with self._lock:
            record = self._polls.get(poll_id)
            record = self._copy_poll(record) if record else None
        return Poll.model_validate(record) if record else None

    def create_poll(self, fields: dict[str, Any]) -> Poll:
        options = list(fields["options"])
        record = {
            "active": True,
            **fields,
            "options": options,
            "results": rekey_results(options, {}),
            "created_at": utcnow(),
        }
        return Poll.model_validate(self._copy_poll(self._insert("poll", self._polls, record)))

    def update_poll(self, poll_id: int, changes: dict[str, Any]) -> Poll | None:
        with self._lock:
            current = self._polls.get(poll_id)
            if current is None:
                return None
            changes = {k: v for k, v in changes.items() if k != "results"}
            if "options" in changes:
                changes["options"] = list(changes["options"])
                changes["results"] = rekey_results(changes["options"], current["results"])
            updated = {**current, **changes, "id": poll_id}
            self._polls[poll_id] = updated
            return Poll.model_validate(self._copy_poll(updated))

    def delete_poll(self, poll_id: int) -> bool:
        return self._remove(self._polls, poll_id)

    def vote(self, poll_id: int, option: str, require_active: bool = False) -> Poll | None:
        with self._lock:
            record = self._polls.get(poll_id)
            if record is None:
                return None
            if require_active and not record["active"]:
                raise PollClosed("Poll is closed")
            if option not in record["options"]:
                return None
            results = dict(record["results"])
            results[option] = results.get(option, 0) + 1
            record["results"] = results
            return Poll.model_validate(self._copy_poll(record))

    # Videos
    def list_videos(self, language: str | None = None) -> list[Video]:
        with self._lock:
            rows = [dict(r) for r in self._videos.values()]
        rows = [r for r in rows if language is None or r["language"] == language]
        rows.sort(key=lambda r: recency_key(r["published_at"], r["id"]), reverse=True)
        return [Video.model_validate(r) for r in rows]

    def get_video(self, video_id: int) -> Video | None:
        record = self._videos.get(video_id)
        return Video.model_validate(record) if record else None

    def create_video(self, fields: dict[str, Any]) -> Video:
        record = {**fields, "published_at": fields.get("published_at") or utcnow()}
        return Video.model_validate(self._insert("video", self._videos, record))

    def update_video(self, video_id: int, changes: dict[str, Any]) -> Video | None:
        record = self._merge(self._videos, video_id, changes)
        return Video.model_validate(record) if record else None

    def delete_video(self, video_id: int) -> bool:
        return self._remove(self._videos, video_id)

    # Categories
    def _category(self, record: dict[str, Any]) -> Category:
        subs = sorted(
            (s for s in self._subcategories.values() if s["category_id"] == record["id"]),
            key=lambda s: s["name"],
        )
        return Category.model_validate({**record, "subcategories": [dict(s) for s in subs]})

    def list_categories(self, language: str | None = None) -> list[Category]:
        with self._lock:
            rows = [
                self._category(r)
                for r in self._categories.values()
                if language is None or r["language"] == language
            ]
        return sorted(rows, key=lambda c: (c.name, c.id))

    def get_category(self, category_id: int) -> Category | None:
        with self._lock:
            record = self._categories.get(category_id)
            return self._category(record) if record else None

    def create_category(self, fields: dict[str, Any]) -> Category:
        record = {**fields, "created_at": utcnow()}
        with self._lock:
            if any(
                c["name"] == record["name"] and c["language"] == record["language"]
                for c in self._categories.values()
            ):
                raise Conflict("Category already exists")
            inserted = self._insert("category", self._categories, record)
        return Category.model_validate(inserted)

    def delete_category(self, category_id: int) -> bool:
        with self._lock:
            if self._categories.pop(category_id, None) is None:
                return False
            for sub_id in [
                s["id"] for s in self._subcategories.values() if s["category_id"] == category_id
            ]:
                del self._subcategories[sub_id]
            return True

    def create_subcategory(self, fields: dict[str, Any]) -> Subcategory | None:
        with self._lock:
            if fields["category_id"] not in self._categories:
                return None
            record = {**fields, "created_at": utcnow()}
            return Subcategory.model_validate(
                self._insert("subcategory", self._subcategories, record)
            )

    def delete_subcategory(self, subcategory_id: int) -> bool:
        return self._remove(self._subcategories, subcategory_id)
