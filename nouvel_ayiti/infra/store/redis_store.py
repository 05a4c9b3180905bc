"""Dépôt de contenu adossé à Redis (documents JSON).

Schéma des clés (préfixe `na`):
- `na:seq:{entité}`            compteur d'identifiants (INCR)
- `na:{entité}:{id}`           document JSON
- `na:{entité}:ids`            ensemble des identifiants existants
- `na:article:views`           hash id -> nombre de vues
- `na:poll:{id}:results`       hash option -> nombre de votes
- `na:user:idx:username`       index username -> id
- `na:category:idx:{langue}`   index nom -> id des catégories d'une langue
- `na:category:{id}:subs`      ensemble des sous-catégories d'une catégorie

Les compteurs (vues, votes) sont incrémentés par des scripts Lua: la vérification d'existence et
l'incrément s'exécutent atomiquement côté serveur, sans vote perdu entre plusieurs pods. L'unicité
des noms d'utilisateur et de catégorie est réservée par HSETNX sur l'index avant l'écriture.
"""

from __future__ import annotations

import json
from typing import Any

import redis
import structlog

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

log = structlog.get_logger(__name__)

# KEYS[1] = document du sondage, KEYS[2] = hash des résultats
# ARGV[1] = option, ARGV[2] = 1 pour refuser un sondage inactif (-2)
VOTE_SCRIPT = """
local doc = redis.call('GET', KEYS[1])
if not doc then
    return -1
end
if ARGV[2] == '1' and not cjson.decode(doc)['active'] then
    return -2
end
if redis.call('HEXISTS', KEYS[2], ARGV[1]) == 0 then
    return -1
end
return redis.call('HINCRBY', KEYS[2], ARGV[1], 1)
"""

# KEYS[1] = document de l'article, KEYS[2] = hash des vues, ARGV[1] = id
VIEW_SCRIPT = """
if redis.call('EXISTS', KEYS[1]) == 0 then
    return -1
end
return redis.call('HINCRBY', KEYS[2], ARGV[1], 1)
"""


class RedisContentStore(ContentStore):
    """Dépôt de contenu Redis; un document JSON par enregistrement."""

    backend_name = "redis"
    prefix = "na"

    def __init__(self, url: str | None = None, client: Any = None) -> None:
        """Crée un client Redis à partir de l'URL fournie (ou utilise `client`)."""
        self.client = client or redis.Redis.from_url(url, decode_responses=True)
        self._vote = self.client.register_script(VOTE_SCRIPT)
        self._view = self.client.register_script(VIEW_SCRIPT)

    def _key(self, *parts: object) -> str:
        return ":".join([self.prefix, *(str(p) for p in parts)])

    def _next_id(self, entity: str) -> int:
        return int(self.client.incr(self._key("seq", entity)))

    def _insert(
        self, entity: str, record: dict[str, Any], extra=None, record_id: int | None = None
    ) -> int:
        if record_id is None:
            record_id = self._next_id(entity)
        record["id"] = record_id
        pipe = self.client.pipeline()
        pipe.set(self._key(entity, record_id), json.dumps(record))
        pipe.sadd(self._key(entity, "ids"), record_id)
        if extra:
            extra(pipe, record_id)
        pipe.execute()
        return record_id

    def _load(self, entity: str, record_id: int) -> dict[str, Any] | None:
        raw = self.client.get(self._key(entity, record_id))
        return json.loads(raw) if raw else None

    def _load_all(self, entity: str) -> list[dict[str, Any]]:
        ids = sorted(int(i) for i in self.client.smembers(self._key(entity, "ids")))
        if not ids:
            return []
        raws = self.client.mget([self._key(entity, i) for i in ids])
        return [json.loads(raw) for raw in raws if raw]

    def _save(self, entity: str, record: dict[str, Any]) -> None:
        self.client.set(self._key(entity, record["id"]), json.dumps(record))

    def _remove(self, entity: str, record_id: int, *extra_keys: str) -> bool:
        pipe = self.client.pipeline()
        pipe.delete(self._key(entity, record_id))
        pipe.srem(self._key(entity, "ids"), record_id)
        for key in extra_keys:
            pipe.delete(key)
        removed = pipe.execute()[0]
        return bool(removed)

    @staticmethod
    def _dump(model) -> dict[str, Any]:
        return model.model_dump(mode="json")

    # Users
    def create_user(self, fields: dict[str, Any]) -> User:
        user = User.model_validate({"is_admin": False, **fields, "id": 0, "created_at": utcnow()})
        record = {**self._dump(user), "password_hash": user.password_hash}
        record_id = self._next_id("user")
        index = self._key("user", "idx", "username")
        if not self.client.hsetnx(index, user.username, record_id):
            raise Conflict("Username already exists")
        self._insert("user", record, record_id=record_id)
        return user.model_copy(update={"id": record_id})

    def get_user(self, user_id: int) -> User | None:
        record = self._load("user", user_id)
        return User.model_validate(record) if record else None

    def get_user_by_username(self, username: str) -> User | None:
        user_id = self.client.hget(self._key("user", "idx", "username"), username)
        if not user_id:
            return None
        return self.get_user(int(user_id))

    # Articles
    def _articles(self, records: list[dict[str, Any]]) -> list[Article]:
        if not records:
            return []
        views = self.client.hmget(self._key("article", "views"), [r["id"] for r in records])
        return [
            Article.model_validate({**r, "view_count": int(v or 0)})
            for r, v in zip(records, views, strict=True)
        ]

    def list_articles(
        self, language: str | None = None, category: str | None = None
    ) -> list[Article]:
        records = [
            r
            for r in self._load_all("article")
            if (language is None or r["language"] == language)
            and (category is None or r["category"] == category)
        ]
        articles = self._articles(records)
        articles.sort(key=lambda a: recency_key(a.published_at, a.id), reverse=True)
        return articles

    def get_article(self, article_id: int) -> Article | None:
        record = self._load("article", article_id)
        return self._articles([record])[0] if record else None

    def create_article(self, fields: dict[str, Any]) -> Article:
        article = Article.model_validate(
            {
                "cover_image": None,
                **fields,
                "id": 0,
                "published_at": fields.get("published_at") or utcnow(),
                "view_count": 0,
                "comment_count": 0,
            }
        )
        record_id = self._insert(
            "article",
            self._dump(article),
            extra=lambda pipe, rid: pipe.hset(self._key("article", "views"), rid, 0),
        )
        return article.model_copy(update={"id": record_id})

    def update_article(self, article_id: int, changes: dict[str, Any]) -> Article | None:
        record = self._load("article", article_id)
        if record is None:
            return None
        merged = Article.model_validate({**record, **changes, "id": article_id})
        self._save("article", self._dump(merged))
        return self.get_article(article_id)

    def delete_article(self, article_id: int) -> bool:
        removed = self._remove("article", article_id)
        if removed:
            self.client.hdel(self._key("article", "views"), article_id)
        return removed

    def increment_views(self, article_id: int) -> Article | None:
        count = int(
            self._view(
                keys=[self._key("article", article_id), self._key("article", "views")],
                args=[article_id],
            )
        )
        if count < 0:
            return None
        return self.get_article(article_id)

    # Polls
    def _polls(self, records: list[dict[str, Any]]) -> list[Poll]:
        if not records:
            return []
        pipe = self.client.pipeline()
        for r in records:
            pipe.hgetall(self._key("poll", r["id"], "results"))
        counts = pipe.execute()
        polls = []
        for r, c in zip(records, counts, strict=True):
            results = rekey_results(r["options"], {k: int(v) for k, v in (c or {}).items()})
            polls.append(Poll.model_validate({**r, "results": results}))
        return polls

    def list_polls(self, language: str | None = None) -> list[Poll]:
        records = [
            r for r in self._load_all("poll") if language is None or r["language"] == language
        ]
        polls = self._polls(records)
        polls.sort(key=lambda p: recency_key(p.created_at, p.id), reverse=True)
        return polls

    def get_poll(self, poll_id: int) -> Poll | None:
        record = self._load("poll", poll_id)
        return self._polls([record])[0] if record else None

    def create_poll(self, fields: dict[str, Any]) -> Poll:
        options = list(fields["options"])
        poll = Poll.model_validate(
            {
                "active": True,
                **fields,
                "id": 0,
                "options": options,
                "results": rekey_results(options, {}),
                "created_at": utcnow(),
            }
        )
        record = self._dump(poll)
        record.pop("results")
        record_id = self._insert(
            "poll",
            record,
            extra=lambda pipe, rid: pipe.hset(
                self._key("poll", rid, "results"), mapping=poll.results
            ),
        )
        return poll.model_copy(update={"id": record_id})

    def update_poll(self, poll_id: int, changes: dict[str, Any]) -> Poll | None:
        record = self._load("poll", poll_id)
        if record is None:
            return None
        changes = {k: v for k, v in changes.items() if k not in ("results", "id")}
        merged = Poll.model_validate({**record, **changes, "id": poll_id})
        doc = self._dump(merged)
        doc.pop("results")
        results_key = self._key("poll", poll_id, "results")
        pipe = self.client.pipeline()
        pipe.set(self._key("poll", poll_id), json.dumps(doc))
        if "options" in changes:
            removed = [o for o in record["options"] if o not in merged.options]
            if removed:
                pipe.hdel(results_key, *removed)
            for opt in merged.options:
                pipe.hsetnx(results_key, opt, 0)
        pipe.execute()
        return self.get_poll(poll_id)

    def delete_poll(self, poll_id: int) -> bool:
        return self._remove("poll", poll_id, self._key("poll", poll_id, "results"))

    def vote(self, poll_id: int, option: str, require_active: bool = False) -> Poll | None:
        count = int(
            self._vote(
                keys=[self._key("poll", poll_id), self._key("poll", poll_id, "results")],
                args=[option, 1 if require_active else 0],
            )
        )
        if count == -2:
            raise PollClosed("Poll is closed")
        if count < 0:
            return None
        return self.get_poll(poll_id)

    # Videos
    def list_videos(self, language: str | None = None) -> list[Video]:
        videos = [
            Video.model_validate(r)
            for r in self._load_all("video")
            if language is None or r["language"] == language
        ]
        videos.sort(key=lambda v: recency_key(v.published_at, v.id), reverse=True)
        return videos

    def get_video(self, video_id: int) -> Video | None:
        record = self._load("video", video_id)
        return Video.model_validate(record) if record else None

    def create_video(self, fields: dict[str, Any]) -> Video:
        video = Video.model_validate(
            {**fields, "id": 0, "published_at": fields.get("published_at") or utcnow()}
        )
        record_id = self._insert("video", self._dump(video))
        return video.model_copy(update={"id": record_id})

    def update_video(self, video_id: int, changes: dict[str, Any]) -> Video | None:
        record = self._load("video", video_id)
        if record is None:
            return None
        merged = Video.model_validate({**record, **changes, "id": video_id})
        self._save("video", self._dump(merged))
        return merged

    def delete_video(self, video_id: int) -> bool:
        return self._remove("video", video_id)

    # Categories
    def _category(self, record: dict[str, Any]) -> Category:
        subs_key = self._key("category", record["id"], "subs")
        sub_ids = sorted(int(i) for i in self.client.smembers(subs_key))
        subs = []
        if sub_ids:
            raws = self.client.mget([self._key("subcategory", i) for i in sub_ids])
            subs = sorted(
                (json.loads(raw) for raw in raws if raw), key=lambda s: (s["name"], s["id"])
            )
        return Category.model_validate({**record, "subcategories": subs})

    def list_categories(self, language: str | None = None) -> list[Category]:
        categories = [
            self._category(r)
            for r in self._load_all("category")
            if language is None or r["language"] == language
        ]
        return sorted(categories, key=lambda c: (c.name, c.id))

    def get_category(self, category_id: int) -> Category | None:
        record = self._load("category", category_id)
        return self._category(record) if record else None

    def create_category(self, fields: dict[str, Any]) -> Category:
        category = Category.model_validate({**fields, "id": 0, "created_at": utcnow()})
        record = self._dump(category)
        record.pop("subcategories")
        record_id = self._next_id("category")
        index = self._key("category", "idx", category.language)
        if not self.client.hsetnx(index, category.name, record_id):
            raise Conflict("Category already exists")
        self._insert("category", record, record_id=record_id)
        return category.model_copy(update={"id": record_id})

    def delete_category(self, category_id: int) -> bool:
        record = self._load("category", category_id)
        if record is None:
            return False
        subs_key = self._key("category", category_id, "subs")
        sub_ids = list(self.client.smembers(subs_key))
        removed = self._remove("category", category_id, subs_key)
        if removed:
            self.client.hdel(self._key("category", "idx", record["language"]), record["name"])
        if removed and sub_ids:
            pipe = self.client.pipeline()
            for sub_id in sub_ids:
                pipe.delete(self._key("subcategory", sub_id))
                pipe.srem(self._key("subcategory", "ids"), sub_id)
            pipe.execute()
        return removed

    def create_subcategory(self, fields: dict[str, Any]) -> Subcategory | None:
        category_id = fields["category_id"]
        if not self.client.exists(self._key("category", category_id)):
            return None
        sub = Subcategory.model_validate({**fields, "id": 0, "created_at": utcnow()})
        record_id = self._insert(
            "subcategory",
            self._dump(sub),
            extra=lambda pipe, rid: pipe.sadd(self._key("category", category_id, "subs"), rid),
        )
        return sub.model_copy(update={"id": record_id})

    def delete_subcategory(self, subcategory_id: int) -> bool:
        record = self._load("subcategory", subcategory_id)
        if record is None:
            return False
        self.client.srem(self._key("category", record["category_id"], "subs"), subcategory_id)
        return self._remove("subcategory", subcategory_id)
