# ============================================================
# Module : nouvel_ayiti/infra/store/sql.py
# Objet  : Dépôt de contenu relationnel (SQLAlchemy).
# Notes  : une session/transaction par opération; compteurs
#          incrémentés par UPDATE ... SET n = n + 1.
# ============================================================

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager, nullcontext
from typing import Any

from sqlalchemy import delete, func, select, update
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from nouvel_ayiti.domain.entities import Article, Category, Poll, Subcategory, User, Video
from nouvel_ayiti.domain.errors import Conflict, PollClosed
from nouvel_ayiti.infra.repo.db import get_session_factory, session_scope
from nouvel_ayiti.infra.repo.models import (
    ArticleORM,
    Base,
    CategoryORM,
    PollORM,
    PollResultORM,
    SubcategoryORM,
    UserORM,
    VideoORM,
)
from nouvel_ayiti.infra.store.base import ContentStore, rekey_results


def _columns(row) -> dict[str, Any]:
    return {c.name: getattr(row, c.name) for c in row.__table__.columns}


def _without_null_dates(fields: dict[str, Any]) -> dict[str, Any]:
    return {
        k: v for k, v in fields.items() if not (k in ("published_at", "created_at") and v is None)
    }


class SQLContentStore(ContentStore):
    """Dépôt adossé à une base relationnelle (sqlite, PostgreSQL...)."""

    backend_name = "sql"

    def __init__(self, engine: Engine, create_schema: bool = True) -> None:
        """Construit le dépôt; crée le schéma si demandé (dev/tests, sinon Alembic)."""
        self._engine = engine
        self._sessions = get_session_factory(engine)
        # StaticPool: une seule connexion partagée, les transactions doivent se succéder
        self._lock = threading.RLock() if isinstance(engine.pool, StaticPool) else nullcontext()
        if create_schema:
            Base.metadata.create_all(engine)

    @contextmanager
    def _session(self) -> Iterator[Session]:
        with self._lock, session_scope(self._sessions) as s:
            yield s

    # Users
    def create_user(self, fields: dict[str, Any]) -> User:
        try:
            with self._session() as s:
                row = UserORM(**fields)
                s.add(row)
                s.flush()
                return User.model_validate(_columns(row))
        except IntegrityError:
            raise Conflict("Username already exists") from None

    def get_user(self, user_id: int) -> User | None:
        with self._session() as s:
            row = s.get(UserORM, user_id)
            return User.model_validate(_columns(row)) if row else None

    def get_user_by_username(self, username: str) -> User | None:
        with self._session() as s:
            row = s.execute(
                select(UserORM).where(UserORM.username == username)
            ).scalar_one_or_none()
            return User.model_validate(_columns(row)) if row else None

    # Articles
    def list_articles(
        self, language: str | None = None, category: str | None = None
    ) -> list[Article]:
        stmt = select(ArticleORM)
        if language is not None:
            stmt = stmt.where(ArticleORM.language == language)
        if category is not None:
            stmt = stmt.where(ArticleORM.category == category)
        stmt = stmt.order_by(ArticleORM.published_at.desc(), ArticleORM.id.desc())
        with self._session() as s:
            return [Article.model_validate(_columns(r)) for r in s.execute(stmt).scalars()]

    def get_article(self, article_id: int) -> Article | None:
        with self._session() as s:
            row = s.get(ArticleORM, article_id)
            return Article.model_validate(_columns(row)) if row else None

    def create_article(self, fields: dict[str, Any]) -> Article:
        with self._session() as s:
            row = ArticleORM(**_without_null_dates(fields), view_count=0, comment_count=0)
            s.add(row)
            s.flush()
            return Article.model_validate(_columns(row))

    def update_article(self, article_id: int, changes: dict[str, Any]) -> Article | None:
        with self._session() as s:
            row = s.get(ArticleORM, article_id)
            if row is None:
                return None
            for key, value in changes.items():
                setattr(row, key, value)
            s.flush()
            return Article.model_validate(_columns(row))

    def delete_article(self, article_id: int) -> bool:
        with self._session() as s:
            res = s.execute(delete(ArticleORM).where(ArticleORM.id == article_id))
            return res.rowcount == 1

    def increment_views(self, article_id: int) -> Article | None:
        with self._session() as s:
            res = s.execute(
                update(ArticleORM)
                .where(ArticleORM.id == article_id)
                .values(view_count=ArticleORM.view_count + 1)
                .execution_options(synchronize_session=False)
            )
            if res.rowcount != 1:
                return None
            row = s.get(ArticleORM, article_id, populate_existing=True)
            return Article.model_validate(_columns(row))

    def most_viewed(self, language: str, limit: int) -> list[Article]:
        stmt = (
            select(ArticleORM)
            .where(ArticleORM.language == language)
            .order_by(
                ArticleORM.view_count.desc(),
                ArticleORM.published_at.desc(),
                ArticleORM.id.desc(),
            )
            .limit(max(limit, 0))
        )
        with self._session() as s:
            return [Article.model_validate(_columns(r)) for r in s.execute(stmt).scalars()]

    def category_counts(self, language: str) -> dict[str, int]:
        stmt = (
            select(ArticleORM.category, func.count(ArticleORM.id))
            .where(ArticleORM.language == language)
            .group_by(ArticleORM.category)
        )
        with self._session() as s:
            return {category: int(n) for category, n in s.execute(stmt).all()}

    # Polls
    @staticmethod
    def _poll(s: Session, row: PollORM) -> Poll:
        counts = dict(
            s.execute(
                select(PollResultORM.option, PollResultORM.votes).where(
                    PollResultORM.poll_id == row.id
                )
            ).all()
        )
        data = _columns(row)
        data["options"] = list(row.options)
        data["results"] = rekey_results(data["options"], counts)
        return Poll.model_validate(data)

    def list_polls(self, language: str | None = None) -> list[Poll]:
        stmt = select(PollORM)
        if language is not None:
            stmt = stmt.where(PollORM.language == language)
        stmt = stmt.order_by(PollORM.created_at.desc(), PollORM.id.desc())
        with self._session() as s:
            return [self._poll(s, r) for r in s.execute(stmt).scalars().all()]

    def get_poll(self, poll_id: int) -> Poll | None:
        with self._session() as s:
            row = s.get(PollORM, poll_id)
            return self._poll(s, row) if row else None

    def create_poll(self, fields: dict[str, Any]) -> Poll:
        fields = {k: v for k, v in fields.items() if k != "results"}
        with self._session() as s:
            row = PollORM(**_without_null_dates(fields))
            s.add(row)
            s.flush()
            s.add_all(PollResultORM(poll_id=row.id, option=opt, votes=0) for opt in row.options)
            s.flush()
            return self._poll(s, row)

    def update_poll(self, poll_id: int, changes: dict[str, Any]) -> Poll | None:
        with self._session() as s:
            row = s.get(PollORM, poll_id)
            if row is None:
                return None
            for key, value in changes.items():
                if key in ("results", "id"):
                    continue
                setattr(row, key, list(value) if key == "options" else value)
            if "options" in changes:
                kept = set(changes["options"])
                existing = set(
                    s.execute(
                        select(PollResultORM.option).where(PollResultORM.poll_id == poll_id)
                    ).scalars()
                )
                s.execute(
                    delete(PollResultORM).where(
                        PollResultORM.poll_id == poll_id,
                        PollResultORM.option.not_in(kept),
                    )
                )
                s.add_all(
                    PollResultORM(poll_id=poll_id, option=opt, votes=0)
                    for opt in changes["options"]
                    if opt not in existing
                )
            s.flush()
            return self._poll(s, row)

    def delete_poll(self, poll_id: int) -> bool:
        with self._session() as s:
            s.execute(delete(PollResultORM).where(PollResultORM.poll_id == poll_id))
            res = s.execute(delete(PollORM).where(PollORM.id == poll_id))
            return res.rowcount == 1

    def vote(self, poll_id: int, option: str, require_active: bool = False) -> Poll | None:
        stmt = update(PollResultORM).where(
            PollResultORM.poll_id == poll_id, PollResultORM.option == option
        )
        if require_active:
            stmt = stmt.where(
                select(PollORM.id).where(PollORM.id == poll_id, PollORM.active.is_(True)).exists()
            )
        with self._session() as s:
            # une ligne de résultat existe exactement pour chaque option courante
            res = s.execute(
                stmt.values(votes=PollResultORM.votes + 1).execution_options(
                    synchronize_session=False
                )
            )
            row = s.get(PollORM, poll_id)
            if res.rowcount != 1:
                if require_active and row is not None and not row.active:
                    raise PollClosed("Poll is closed")
                return None
            return self._poll(s, row)

    # Videos
    def list_videos(self, language: str | None = None) -> list[Video]:
        stmt = select(VideoORM)
        if language is not None:
            stmt = stmt.where(VideoORM.language == language)
        stmt = stmt.order_by(VideoORM.published_at.desc(), VideoORM.id.desc())
        with self._session() as s:
            return [Video.model_validate(_columns(r)) for r in s.execute(stmt).scalars()]

    def get_video(self, video_id: int) -> Video | None:
        with self._session() as s:
            row = s.get(VideoORM, video_id)
            return Video.model_validate(_columns(row)) if row else None

    def create_video(self, fields: dict[str, Any]) -> Video:
        with self._session() as s:
            row = VideoORM(**_without_null_dates(fields))
            s.add(row)
            s.flush()
            return Video.model_validate(_columns(row))

    def update_video(self, video_id: int, changes: dict[str, Any]) -> Video | None:
        with self._session() as s:
            row = s.get(VideoORM, video_id)
            if row is None:
                return None
            for key, value in changes.items():
                setattr(row, key, value)
            s.flush()
            return Video.model_validate(_columns(row))

    def delete_video(self, video_id: int) -> bool:
        with self._session() as s:
            res = s.execute(delete(VideoORM).where(VideoORM.id == video_id))
            return res.rowcount == 1

    # Categories
    @staticmethod
    def _categories(s: Session, rows: list[CategoryORM]) -> list[Category]:
        ids = [r.id for r in rows]
        subs: dict[int, list[dict[str, Any]]] = {i: [] for i in ids}
        if ids:
            stmt = (
                select(SubcategoryORM)
                .where(SubcategoryORM.category_id.in_(ids))
                .order_by(SubcategoryORM.name, SubcategoryORM.id)
            )
            for sub in s.execute(stmt).scalars():
                subs[sub.category_id].append(_columns(sub))
        return [Category.model_validate({**_columns(r), "subcategories": subs[r.id]}) for r in rows]

    def list_categories(self, language: str | None = None) -> list[Category]:
        stmt = select(CategoryORM)
        if language is not None:
            stmt = stmt.where(CategoryORM.language == language)
        stmt = stmt.order_by(CategoryORM.name, CategoryORM.id)
        with self._session() as s:
            return self._categories(s, list(s.execute(stmt).scalars()))

    def get_category(self, category_id: int) -> Category | None:
        with self._session() as s:
            row = s.get(CategoryORM, category_id)
            return self._categories(s, [row])[0] if row else None

    def create_category(self, fields: dict[str, Any]) -> Category:
        try:
            with self._session() as s:
                row = CategoryORM(**fields)
                s.add(row)
                s.flush()
                return Category.model_validate(_columns(row))
        except IntegrityError:
            raise Conflict("Category already exists") from None

    def delete_category(self, category_id: int) -> bool:
        with self._session() as s:
            s.execute(delete(SubcategoryORM).where(SubcategoryORM.category_id == category_id))
            res = s.execute(delete(CategoryORM).where(CategoryORM.id == category_id))
            return res.rowcount == 1

    def create_subcategory(self, fields: dict[str, Any]) -> Subcategory | None:
        with self._session() as s:
            if s.get(CategoryORM, fields["category_id"]) is None:
                return None
            row = SubcategoryORM(**fields)
            s.add(row)
            s.flush()
            return Subcategory.model_validate(_columns(row))

    def delete_subcategory(self, subcategory_id: int) -> bool:
        with self._session() as s:
            res = s.execute(delete(SubcategoryORM).where(SubcategoryORM.id == subcategory_id))
            return res.rowcount == 1
