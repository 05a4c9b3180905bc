"""
Tests des routes articles: lecture publique, compteur de vues et gestion administrateur.
"""

from __future__ import annotations

from conftest import VALID_ARTICLE

from nouvel_ayiti.core.http_constants import (
    HTTP_BAD_REQUEST,
    HTTP_CREATED,
    HTTP_FORBIDDEN,
    HTTP_NO_CONTENT,
    HTTP_NOT_FOUND,
    HTTP_OK,
    HTTP_UNAUTHORIZED,
)


def _create(client, headers, **overrides) -> dict:
    r = client.post("/api/admin/articles", json={**VALID_ARTICLE, **overrides}, headers=headers)
    assert r.status_code == HTTP_CREATED, r.text
    return r.json()


def test_create_article_returns_camel_case_record(client, admin_headers) -> None:
    body = _create(client, admin_headers)
    assert isinstance(body["id"], int)
    assert body["viewCount"] == 0
    assert body["commentCount"] == 0
    assert body["coverImage"] == VALID_ARTICLE["coverImage"]
    assert "publishedAt" in body


def test_read_article_counts_views(client, admin_headers) -> None:
    article = _create(client, admin_headers)
    first = client.get(f"/api/articles/{article['id']}")
    second = client.get(f"/api/articles/{article['id']}")
    assert first.status_code == HTTP_OK
    assert first.json()["viewCount"] == 1
    assert second.json()["viewCount"] == 2


def test_list_articles_filters_and_orders(client, admin_headers) -> None:
    old = _create(client, admin_headers, publishedAt="2024-01-01T00:00:00Z")
    new = _create(client, admin_headers, publishedAt="2024-06-01T00:00:00Z")
    _create(client, admin_headers, language="fr")
    _create(client, admin_headers, category="Politics", publishedAt="2023-01-01T00:00:00Z")

    r = client.get("/api/articles", params={"language": "ht", "category": "Economy"})
    assert r.status_code == HTTP_OK
    assert [a["id"] for a in r.json()] == [new["id"], old["id"]]
    assert len(client.get("/api/articles").json()) == 4
    assert len(client.get("/api/articles?language=").json()) == 4


def test_list_articles_rejects_unknown_language(client) -> None:
    r = client.get("/api/articles", params={"language": "es"})
    assert r.status_code == HTTP_BAD_REQUEST
    assert r.json()["errors"][0]["field"] == "language"


def test_read_missing_article(client) -> None:
    r = client.get("/api/articles/999")
    assert r.status_code == HTTP_NOT_FOUND
    assert r.json()["code"] == "NOT_FOUND"
    assert r.json()["message"] == "Article not found"


def test_non_numeric_id_is_rejected(client) -> None:
    r = client.get("/api/articles/abc")
    assert r.status_code == HTTP_BAD_REQUEST
    assert r.json()["code"] == "INVALID_IDENTIFIER"
    assert r.json()["message"] == "Invalid ID"


def test_admin_routes_require_identity(client) -> None:
    r = client.post("/api/admin/articles", json=VALID_ARTICLE)
    assert r.status_code == HTTP_UNAUTHORIZED
    assert r.json()["code"] == "UNAUTHORIZED"


def test_admin_check_runs_before_validation(client) -> None:
    r = client.post("/api/admin/articles", json={"title": "x"})
    assert r.status_code == HTTP_UNAUTHORIZED


def test_admin_routes_forbid_regular_users(client, user_headers) -> None:
    r = client.post("/api/admin/articles", json=VALID_ARTICLE, headers=user_headers)
    assert r.status_code == HTTP_FORBIDDEN
    assert r.json()["message"] == "Forbidden: Admin access required"
    assert client.get("/api/articles").json() == []


def test_invalid_token_is_unauthorized(client) -> None:
    r = client.delete("/api/admin/articles/1", headers={"Authorization": "Bearer nope"})
    assert r.status_code == HTTP_UNAUTHORIZED


def test_create_article_validation_errors(client, admin_headers) -> None:
    payload = {**VALID_ARTICLE, "title": "abc", "content": "trop court", "coverImage": "pas-une-url"}
    r = client.post("/api/admin/articles", json=payload, headers=admin_headers)
    assert r.status_code == HTTP_BAD_REQUEST
    body = r.json()
    assert body["code"] == "VALIDATION_ERROR"
    fields = {e["field"] for e in body["errors"]}
    assert {"title", "content", "coverImage"} <= fields


def test_create_article_requires_fields(client, admin_headers) -> None:
    payload = {k: v for k, v in VALID_ARTICLE.items() if k != "author"}
    r = client.post("/api/admin/articles", json=payload, headers=admin_headers)
    assert r.status_code == HTTP_BAD_REQUEST
    assert [e["field"] for e in r.json()["errors"]] == ["author"]


def test_update_article_is_partial(client, admin_headers) -> None:
    article = _create(client, admin_headers)
    client.get(f"/api/articles/{article['id']}")
    r = client.put(
        f"/api/admin/articles/{article['id']}",
        json={"title": "Titre mis à jour"},
        headers=admin_headers,
    )
    assert r.status_code == HTTP_OK
    body = r.json()
    assert body["title"] == "Titre mis à jour"
    assert body["content"] == VALID_ARTICLE["content"]
    assert body["viewCount"] == 1


def test_update_article_rejects_null_required_field(client, admin_headers) -> None:
    article = _create(client, admin_headers)
    r = client.put(
        f"/api/admin/articles/{article['id']}", json={"title": None}, headers=admin_headers
    )
    assert r.status_code == HTTP_BAD_REQUEST
    assert r.json()["errors"][0]["field"] == "title"


def test_update_article_can_clear_cover_image(client, admin_headers) -> None:
    article = _create(client, admin_headers)
    r = client.put(
        f"/api/admin/articles/{article['id']}", json={"coverImage": None}, headers=admin_headers
    )
    assert r.status_code == HTTP_OK
    assert r.json()["coverImage"] is None


def test_update_missing_article(client, admin_headers) -> None:
    r = client.put("/api/admin/articles/999", json={"title": "Titre"}, headers=admin_headers)
    assert r.status_code == HTTP_NOT_FOUND


def test_delete_article(client, admin_headers) -> None:
    article = _create(client, admin_headers)
    r = client.delete(f"/api/admin/articles/{article['id']}", headers=admin_headers)
    assert r.status_code == HTTP_NO_CONTENT
    assert r.content == b""
    assert client.get(f"/api/articles/{article['id']}").status_code == HTTP_NOT_FOUND
    again = client.delete(f"/api/admin/articles/{article['id']}", headers=admin_headers)
    assert again.status_code == HTTP_NOT_FOUND
