"""
Tests des routes vidéos et statistiques (articles populaires, catégories).
"""

from __future__ import annotations

from conftest import VALID_ARTICLE, VALID_VIDEO

from nouvel_ayiti.core.http_constants import (
    HTTP_BAD_REQUEST,
    HTTP_CREATED,
    HTTP_NO_CONTENT,
    HTTP_NOT_FOUND,
    HTTP_OK,
)


def _video(client, headers, **overrides) -> dict:
    r = client.post("/api/admin/videos", json={**VALID_VIDEO, **overrides}, headers=headers)
    assert r.status_code == HTTP_CREATED, r.text
    return r.json()


def _article(client, headers, **overrides) -> dict:
    r = client.post("/api/admin/articles", json={**VALID_ARTICLE, **overrides}, headers=headers)
    assert r.status_code == HTTP_CREATED, r.text
    return r.json()


def test_video_lifecycle(client, admin_headers) -> None:
    video = _video(client, admin_headers, description="Agrikilti an Ayiti")
    assert video["thumbnailUrl"] == VALID_VIDEO["thumbnailUrl"]
    assert client.get(f"/api/videos/{video['id']}").json()["description"] == "Agrikilti an Ayiti"

    r = client.put(
        f"/api/admin/videos/{video['id']}", json={"duration": "10:00"}, headers=admin_headers
    )
    assert r.status_code == HTTP_OK
    assert r.json()["duration"] == "10:00"
    assert r.json()["title"] == VALID_VIDEO["title"]

    r = client.delete(f"/api/admin/videos/{video['id']}", headers=admin_headers)
    assert r.status_code == HTTP_NO_CONTENT
    assert client.get(f"/api/videos/{video['id']}").status_code == HTTP_NOT_FOUND


def test_list_videos_defaults_to_creole(client, admin_headers) -> None:
    ht = _video(client, admin_headers)
    en = _video(client, admin_headers, language="en")
    assert [v["id"] for v in client.get("/api/videos").json()] == [ht["id"]]
    assert [v["id"] for v in client.get("/api/videos?language=en").json()] == [en["id"]]


def test_video_urls_are_validated(client, admin_headers) -> None:
    r = client.post(
        "/api/admin/videos",
        json={**VALID_VIDEO, "videoUrl": "not a url", "duration": ""},
        headers=admin_headers,
    )
    assert r.status_code == HTTP_BAD_REQUEST
    assert {e["field"] for e in r.json()["errors"]} == {"videoUrl", "duration"}


def test_popular_articles_ordered_by_views(client, admin_headers) -> None:
    first = _article(client, admin_headers)
    second = _article(client, admin_headers)
    third = _article(client, admin_headers)
    _article(client, admin_headers, language="fr")
    for _ in range(3):
        client.get(f"/api/articles/{second['id']}")
    client.get(f"/api/articles/{third['id']}")

    r = client.get("/api/stats/popular-articles", params={"language": "ht", "limit": 2})
    assert r.status_code == HTTP_OK
    assert [a["id"] for a in r.json()] == [second["id"], third["id"]]

    default = client.get("/api/stats/popular-articles").json()
    assert [a["id"] for a in default] == [second["id"], third["id"], first["id"]]


def test_popular_articles_limit_bounds(client) -> None:
    for limit in (0, 101, "many"):
        r = client.get("/api/stats/popular-articles", params={"limit": limit})
        assert r.status_code == HTTP_BAD_REQUEST
        assert r.json()["errors"][0]["field"] == "limit"


def test_category_stats(client, admin_headers) -> None:
    _article(client, admin_headers, category="Politics")
    _article(client, admin_headers, category="Politics")
    _article(client, admin_headers, category="Economy")
    _article(client, admin_headers, category="Economy", language="en")

    assert client.get("/api/stats/categories").json() == {"Politics": 2, "Economy": 1}
    assert client.get("/api/stats/categories?language=en").json() == {"Economy": 1}
    assert client.get("/api/stats/categories?language=fr").json() == {}
