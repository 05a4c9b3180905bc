"""
Conteneur d'injection de dépendances et configuration application.

Instancie les composants centraux (settings, dépôt de contenu, moteur de vote, service,
fournisseur d'identité) et expose un singleton `container` utilisé par l'application.
"""

import structlog

from nouvel_ayiti.core.settings import Settings, get_settings
from nouvel_ayiti.domain.identity import JWTIdentityProvider
from nouvel_ayiti.domain.polls import PollVotingEngine
from nouvel_ayiti.domain.services import ContentService
from nouvel_ayiti.infra.repo.db import get_engine
from nouvel_ayiti.infra.seed import seed_sample_data
from nouvel_ayiti.infra.store.memory import InMemoryContentStore
from nouvel_ayiti.infra.store.redis_store import RedisContentStore
from nouvel_ayiti.infra.store.sql import SQLContentStore

log = structlog.get_logger(__name__)


class Container:
    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()
        self.store = self._build_store()
        self.voting = PollVotingEngine(
            self.store, closed_poll_policy=self.settings.POLL_CLOSED_VOTE_POLICY
        )
        self.content = ContentService(self.store, self.voting)
        self.identity = JWTIdentityProvider(
            self.store, secret=self.settings.JWT_SECRET, alg=self.settings.JWT_ALG
        )
        self._bootstrap()

    def _build_store(self):
        backend = self.settings.STORAGE_BACKEND
        if backend == "sql":
            self.storage_backend = "sql"
            return SQLContentStore(get_engine(self.settings.DATABASE_URL))
        if backend == "redis" or self.settings.REQUIRE_REDIS:
            if not self.settings.REDIS_URL:
                if self.settings.REQUIRE_REDIS:
                    raise RuntimeError("Redis required but REDIS_URL not set")
                log.warning("redis_url_missing_fallback_memory")
                self.storage_backend = "memory-fallback"
                return InMemoryContentStore()
            try:
                store = RedisContentStore(self.settings.REDIS_URL)
                store.client.ping()
                self.storage_backend = "redis"
                return store
            except Exception as err:
                if self.settings.REQUIRE_REDIS:
                    raise RuntimeError("Redis required but unavailable") from err
                log.warning("redis_unavailable_fallback_memory", error=str(err))
                self.storage_backend = "memory-fallback"
                return InMemoryContentStore()
        self.storage_backend = "memory"
        return InMemoryContentStore()

    def _bootstrap(self) -> None:
        """Crée l'administrateur configuré et charge les exemples si demandé."""
        username = self.settings.ADMIN_USERNAME
        password = self.settings.ADMIN_PASSWORD
        if username and password and self.store.get_user_by_username(username) is None:
            self.content.register(username, password, is_admin=True)
        if self.settings.SEED_SAMPLE_DATA:
            seed_sample_data(self.store)


container = Container()
