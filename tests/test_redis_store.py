"""
Tests pour le dépôt de contenu Redis.

Le client Redis est simulé: on vérifie le schéma des clés et l'usage des scripts Lua atomiques.
"""

import json
from unittest.mock import Mock, call

import pytest
import redis

from nouvel_ayiti.domain.errors import Conflict, PollClosed
from nouvel_ayiti.infra.store.redis_store import RedisContentStore

POLL_DOC = {
    "id": 7,
    "question": "Oui ou non?",
    "options": ["Oui", "Non"],
    "active": True,
    "created_at": "2024-01-01T00:00:00Z",
    "language": "ht",
}

CATEGORY_DOC = {
    "id": 9,
    "name": "sport",
    "label": "Sport",
    "language": "fr",
    "created_at": "2024-01-01T00:00:00Z",
}


def _article_doc(article_id: int, published_at: str, language: str = "ht") -> str:
    return json.dumps(
        {
            "id": article_id,
            "title": "Titre d'article",
            "content": "c" * 60,
            "excerpt": "Un extrait",
            "cover_image": None,
            "category": "Politics",
            "author": "Marie",
            "published_at": published_at,
            "view_count": 0,
            "comment_count": 0,
            "language": language,
        }
    )


class TestRedisContentStore:
    """Tests pour RedisContentStore."""

    def setup_method(self) -> None:
        self.client = Mock(spec=redis.Redis)
        self.vote_script = Mock()
        self.view_script = Mock()
        self.client.register_script.side_effect = [self.vote_script, self.view_script]
        self.pipe = Mock()
        self.client.pipeline.return_value = self.pipe
        self.store = RedisContentStore(client=self.client)

    def test_vote_uses_atomic_script(self) -> None:
        self.vote_script.return_value = 3
        self.client.get.return_value = json.dumps(POLL_DOC)
        self.pipe.execute.return_value = [{"Oui": "3", "Non": "1"}]

        poll = self.store.vote(7, "Oui")

        self.vote_script.assert_called_once_with(
            keys=["na:poll:7", "na:poll:7:results"], args=["Oui", 0]
        )
        assert poll.results == {"Oui": 3, "Non": 1}

    def test_vote_rejected_by_script(self) -> None:
        self.vote_script.return_value = -1
        assert self.store.vote(7, "Petèt") is None
        self.client.get.assert_not_called()

    def test_increment_views_missing_article(self) -> None:
        self.view_script.return_value = -1
        assert self.store.increment_views(12) is None
        self.view_script.assert_called_once_with(
            keys=["na:article:12", "na:article:views"], args=[12]
        )

    def test_get_article_merges_view_counter(self) -> None:
        self.client.get.return_value = json.dumps(
            {
                "id": 3,
                "title": "Titre d'article",
                "content": "c" * 60,
                "excerpt": "Un extrait",
                "cover_image": None,
                "category": "Politics",
                "author": "Marie",
                "published_at": "2024-01-01T00:00:00Z",
                "view_count": 0,
                "comment_count": 0,
                "language": "ht",
            }
        )
        self.client.hmget.return_value = ["5"]

        article = self.store.get_article(3)

        assert article.view_count == 5
        self.client.hmget.assert_called_once_with("na:article:views", [3])

    def test_create_poll_writes_document_and_results(self) -> None:
        self.client.incr.return_value = 4

        poll = self.store.create_poll({"question": "Q?", "options": ["A", "B"], "language": "fr"})

        assert poll.id == 4
        assert poll.results == {"A": 0, "B": 0}
        self.client.incr.assert_called_once_with("na:seq:poll")
        key, raw = self.pipe.set.call_args.args
        assert key == "na:poll:4"
        assert "results" not in json.loads(raw)
        self.pipe.sadd.assert_called_once_with("na:poll:ids", 4)
        self.pipe.hset.assert_called_once_with("na:poll:4:results", mapping={"A": 0, "B": 0})

    def test_get_user_by_username_uses_index(self) -> None:
        self.client.hget.return_value = None
        assert self.store.get_user_by_username("ghost") is None
        self.client.hget.assert_called_once_with("na:user:idx:username", "ghost")

    def test_create_subcategory_requires_parent(self) -> None:
        self.client.exists.return_value = 0
        assert self.store.create_subcategory({"category_id": 9, "name": "n", "label": "l"}) is None
        self.client.incr.assert_not_called()

    def test_vote_on_closed_poll_raises_when_active_required(self) -> None:
        self.vote_script.return_value = -2

        with pytest.raises(PollClosed):
            self.store.vote(7, "Oui", require_active=True)

        self.vote_script.assert_called_once_with(
            keys=["na:poll:7", "na:poll:7:results"], args=["Oui", 1]
        )
        self.client.get.assert_not_called()

    def test_create_user_reserves_username(self) -> None:
        self.client.incr.return_value = 5
        self.client.hsetnx.return_value = 1

        user = self.store.create_user({"username": "jean", "password_hash": "hash"})

        assert user.id == 5
        self.client.hsetnx.assert_called_once_with("na:user:idx:username", "jean", 5)
        key, raw = self.pipe.set.call_args.args
        assert key == "na:user:5"
        assert json.loads(raw)["password_hash"] == "hash"

    def test_create_user_taken_username_conflicts(self) -> None:
        self.client.incr.return_value = 6
        self.client.hsetnx.return_value = 0

        with pytest.raises(Conflict):
            self.store.create_user({"username": "jean", "password_hash": "hash"})

        self.pipe.set.assert_not_called()
        self.pipe.sadd.assert_not_called()

    def test_create_category_name_is_unique_per_language(self) -> None:
        self.client.incr.return_value = 3
        self.client.hsetnx.return_value = 0

        with pytest.raises(Conflict):
            self.store.create_category({"name": "sport", "label": "Sport", "language": "fr"})

        self.client.hsetnx.assert_called_once_with("na:category:idx:fr", "sport", 3)
        self.pipe.set.assert_not_called()

    def test_update_poll_rekeys_results_hash(self) -> None:
        updated_doc = {**POLL_DOC, "options": ["Oui", "Petèt"]}
        self.client.get.side_effect = [json.dumps(POLL_DOC), json.dumps(updated_doc)]
        self.pipe.execute.side_effect = [[True, 1, 1, 1], [{"Oui": "2", "Petèt": "0"}]]

        poll = self.store.update_poll(7, {"options": ["Oui", "Petèt"], "results": {"Oui": 99}})

        key, raw = self.pipe.set.call_args.args
        assert key == "na:poll:7"
        assert json.loads(raw)["options"] == ["Oui", "Petèt"]
        assert "results" not in json.loads(raw)
        self.pipe.hdel.assert_called_once_with("na:poll:7:results", "Non")
        assert self.pipe.hsetnx.call_args_list == [
            call("na:poll:7:results", "Oui", 0),
            call("na:poll:7:results", "Petèt", 0),
        ]
        assert poll.results == {"Oui": 2, "Petèt": 0}

    def test_update_poll_without_options_keeps_results_hash(self) -> None:
        closed_doc = {**POLL_DOC, "active": False}
        self.client.get.side_effect = [json.dumps(POLL_DOC), json.dumps(closed_doc)]
        self.pipe.execute.side_effect = [[True], [{"Oui": "4", "Non": "1"}]]

        poll = self.store.update_poll(7, {"active": False})

        assert poll.active is False
        assert poll.results == {"Oui": 4, "Non": 1}
        self.pipe.hdel.assert_not_called()
        self.pipe.hsetnx.assert_not_called()

    def test_update_article_keeps_view_counter(self) -> None:
        self.client.get.side_effect = [
            _article_doc(3, "2024-01-01T00:00:00Z"),
            _article_doc(3, "2024-01-01T00:00:00Z"),
        ]
        self.client.hmget.return_value = ["5"]

        article = self.store.update_article(3, {"title": "Nouveau titre"})

        key, raw = self.client.set.call_args.args
        assert key == "na:article:3"
        assert json.loads(raw)["title"] == "Nouveau titre"
        assert article.view_count == 5
        self.client.hmget.assert_called_once_with("na:article:views", [3])
        self.client.hset.assert_not_called()
        self.client.hdel.assert_not_called()

    def test_delete_article_drops_view_counter(self) -> None:
        self.pipe.execute.return_value = [1, 1]

        assert self.store.delete_article(3) is True

        self.pipe.delete.assert_called_once_with("na:article:3")
        self.pipe.srem.assert_called_once_with("na:article:ids", 3)
        self.client.hdel.assert_called_once_with("na:article:views", 3)

    def test_delete_missing_article_keeps_counters(self) -> None:
        self.pipe.execute.return_value = [0, 0]
        assert self.store.delete_article(3) is False
        self.client.hdel.assert_not_called()

    def test_delete_category_cascades_to_subcategories(self) -> None:
        self.client.get.return_value = json.dumps(CATEGORY_DOC)
        self.client.smembers.return_value = ["11", "12"]
        self.pipe.execute.return_value = [1, 1, 1]

        assert self.store.delete_category(9) is True

        self.client.hdel.assert_called_once_with("na:category:idx:fr", "sport")
        for key in (
            "na:category:9",
            "na:category:9:subs",
            "na:subcategory:11",
            "na:subcategory:12",
        ):
            self.pipe.delete.assert_any_call(key)
        self.pipe.srem.assert_any_call("na:category:ids", 9)
        self.pipe.srem.assert_any_call("na:subcategory:ids", "11")
        self.pipe.srem.assert_any_call("na:subcategory:ids", "12")

    def test_delete_missing_category(self) -> None:
        self.client.get.return_value = None
        assert self.store.delete_category(9) is False
        self.client.smembers.assert_not_called()
        self.pipe.execute.assert_not_called()

    def test_list_articles_orders_by_recency_and_filters_language(self) -> None:
        self.client.smembers.return_value = {"1", "2", "3", "4"}
        self.client.mget.return_value = [
            _article_doc(1, "2024-06-01T00:00:00Z"),
            _article_doc(2, "2024-01-01T00:00:00Z"),
            _article_doc(3, "2024-06-01T00:00:00Z"),
            _article_doc(4, "2024-09-01T00:00:00Z", language="fr"),
        ]
        self.client.hmget.return_value = ["0", "4", "1"]

        articles = self.store.list_articles(language="ht")

        self.client.mget.assert_called_once_with(
            ["na:article:1", "na:article:2", "na:article:3", "na:article:4"]
        )
        self.client.hmget.assert_called_once_with("na:article:views", [1, 2, 3])
        assert [(a.id, a.view_count) for a in articles] == [(3, 1), (1, 0), (2, 4)]
