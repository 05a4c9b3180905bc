"""Données d'exemple pour le développement local.

Charge quelques articles (ht/en/fr), un sondage et une vidéo dans un dépôt vide.
"""

from __future__ import annotations

import structlog

log = structlog.get_logger(__name__)

SAMPLE_ARTICLES = [
    {
        "title": "Nouvèl sou Ekonomi Ayiti",
        "content": "Ayiti ap fè anpil pwogrè nan domèn ekonomik la, malgre defi yo...",
        "excerpt": "Ekonomi peyi a ap bouje dousman men li gen anpil potansyèl",
        "category": "Economy",
        "author": "Jean Baptiste",
        "language": "ht",
        "cover_image": "https://example.com/images/economy-haiti.jpg",
    },
    {
        "title": "Kriz Politik la kontinye",
        "content": "Kriz politik la nan peyi Ayiti kontinye avèk manifestasyon...",
        "excerpt": "Manifestasyon yo kontinye nan tout peyi a",
        "category": "Politics",
        "author": "Marie Claire",
        "language": "ht",
        "cover_image": "https://example.com/images/haiti-politics.jpg",
    },
    {
        "title": "Haiti's Economic Outlook",
        "content": "The economic outlook for Haiti shows signs of improvement despite challenges...",
        "excerpt": "Haiti's economy is slowly recovering",
        "category": "Economy",
        "author": "Robert Smith",
        "language": "en",
        "cover_image": "https://example.com/images/haiti-economy-en.jpg",
    },
    {
        "title": "La situation politique en Haïti",
        "content": "La situation politique en Haïti reste tendue après les récents événements...",
        "excerpt": "Les tensions politiques continuent en Haïti",
        "category": "Politics",
        "author": "Philippe Dupont",
        "language": "fr",
        "cover_image": "https://example.com/images/haiti-politics-fr.jpg",
    },
]

SAMPLE_POLL = {
    "question": "Ki domèn ou panse ki bezwen plis envèstisman an Ayiti?",
    "options": ["Edikasyon", "Sante", "Enfrastrikti", "Agrikilti", "Sekirite"],
    "language": "ht",
    "active": True,
}

SAMPLE_VIDEO = {
    "title": "Ayiti: Pwogrè nan domèn agrikilti",
    "description": "Video sou jan agrikilti a ap devlope an Ayiti",
    "video_url": "https://example.com/videos/haiti-agriculture.mp4",
    "thumbnail_url": "https://example.com/images/agriculture-thumbnail.jpg",
    "duration": "4:32",
    "language": "ht",
    "category": "Agriculture",
    "author": "Pierre Louis",
}


def seed_sample_data(store) -> bool:
    """Peuple un dépôt vide; ne fait rien si des articles existent déjà."""
    if store.list_articles():
        return False
    for article in SAMPLE_ARTICLES:
        store.create_article(dict(article))
    store.create_poll(dict(SAMPLE_POLL))
    store.create_video(dict(SAMPLE_VIDEO))
    log.info("sample_data_seeded", articles=len(SAMPLE_ARTICLES), polls=1, videos=1)
    return True
