"""
Environnement Alembic du dépôt de contenu relationnel (`STORAGE_BACKEND=sql`).

Les métadonnées cibles sont celles des modèles ORM du dépôt; l'URL vient de `DATABASE_URL`.
"""

from __future__ import annotations

import os
import sys
from logging.config import fileConfig
from pathlib import Path

from sqlalchemy import create_engine, pool

from alembic import context  # type: ignore[attr-defined]

# Allow importing project modules when running via Alembic CLI
_this = Path(__file__).resolve()
_candidates = [_this.parent.parent, Path.cwd()]
for p in _candidates:
    s = str(p)
    if s and s not in sys.path:
        sys.path.append(s)

from nouvel_ayiti.infra.repo.models import Base  # noqa: E402

# this is the Alembic Config object, which provides
# access to the values within the .ini file in use.
config = context.config

# Interpret the config file for Python logging.
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    """Génère le SQL des migrations sans connexion (bindings littéraux)."""
    url = os.getenv("DATABASE_URL", "sqlite:///./nouvel_ayiti.db")
    context.configure(url=url, target_metadata=target_metadata, literal_binds=True)
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Applique les migrations sur une connexion ouverte."""
    url = os.getenv("DATABASE_URL", "sqlite:///./nouvel_ayiti.db")
    connectable = create_engine(url, poolclass=pool.NullPool)
    with connectable.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
