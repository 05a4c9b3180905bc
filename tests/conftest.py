"""Configuration de test pour pytest avec gestion des chemins.

Ajoute la racine du projet au sys.path et fournit une application isolée par test: conteneur
mémoire sans données d'exemple, administrateur initial et jetons prêts à l'emploi.
"""

import os
import sys

import pytest
from fastapi.testclient import TestClient

# Ensure project root is on sys.path so that
# imports like `from nouvel_ayiti...` resolve.
CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from nouvel_ayiti.app.main import create_app  # noqa: E402
from nouvel_ayiti.core.container import Container  # noqa: E402
from nouvel_ayiti.core.settings import Settings  # noqa: E402

ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "admin-password"

VALID_ARTICLE = {
    "title": "Nouvèl sou Ekonomi Ayiti",
    "content": "Ayiti ap fè anpil pwogrè nan domèn ekonomik la, malgre tout defi yo ki la.",
    "excerpt": "Ekonomi peyi a ap bouje",
    "coverImage": "https://example.com/images/economy.jpg",
    "category": "Economy",
    "author": "Jean Baptiste",
    "language": "ht",
}

VALID_POLL = {
    "question": "Ki domèn ki bezwen plis envèstisman?",
    "options": ["Edikasyon", "Sante", "Agrikilti"],
    "language": "ht",
}

VALID_VIDEO = {
    "title": "Pwogrè nan agrikilti",
    "thumbnailUrl": "https://example.com/images/thumb.jpg",
    "videoUrl": "https://example.com/videos/agri.mp4",
    "duration": "4:32",
    "language": "ht",
}


def make_settings(**overrides) -> Settings:
    values = {
        "STORAGE_BACKEND": "memory",
        "REDIS_URL": None,
        "REQUIRE_REDIS": False,
        "SEED_SAMPLE_DATA": False,
        "ADMIN_USERNAME": ADMIN_USERNAME,
        "ADMIN_PASSWORD": ADMIN_PASSWORD,
        "JWT_SECRET": "test-secret",
        "OTLP_ENDPOINT": None,
        "CORS_ORIGINS": [],
        "APP_DEBUG": False,
    }
    values.update(overrides)
    return Settings(**values)


def login(client: TestClient, username: str, password: str) -> dict[str, str]:
    r = client.post("/api/login", json={"username": username, "password": password})
    assert r.status_code == 200, r.text
    return {"Authorization": f"Bearer {r.json()['accessToken']}"}


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def container(settings) -> Container:
    return Container(settings)


@pytest.fixture
def client(container) -> TestClient:
    return TestClient(create_app(container))


@pytest.fixture
def admin_headers(client) -> dict[str, str]:
    return login(client, ADMIN_USERNAME, ADMIN_PASSWORD)


@pytest.fixture
def user_headers(client) -> dict[str, str]:
    r = client.post("/api/register", json={"username": "reader", "password": "reader-pass"})
    assert r.status_code == 201, r.text
    return login(client, "reader", "reader-pass")
