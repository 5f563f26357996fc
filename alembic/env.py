"""
Alembic environment for the SubHub SL catalog schema.

The DSN comes from `subhub.core.config.settings.DATABASE_URL` (already
normalized to an async driver) unless overridden on the command line:

    alembic -x dburl=sqlite+aiosqlite:///./local.db upgrade head

SQLite targets run in batch mode so ALTER-style operations work there too.
"""

import asyncio
from logging.config import fileConfig
from typing import Any, Dict

from alembic import context
from sqlalchemy import pool
from sqlalchemy.engine import Connection, make_url
from sqlalchemy.ext.asyncio import create_async_engine

from subhub.core.config import settings
from subhub.db.base import Base  # imports every model onto Base.metadata

# ───────────────────────────────────────────────
# ⚙️ Setup
# ───────────────────────────────────────────────
config = context.config
if config.config_file_name:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def _database_url() -> str:
    return context.get_x_argument(as_dictionary=True).get("dburl") or settings.DATABASE_URL


def _configure_kwargs(url: str) -> Dict[str, Any]:
    return {
        "target_metadata": target_metadata,
        "compare_type": True,
        "compare_server_default": True,
        "render_as_batch": make_url(url).get_backend_name() == "sqlite",
    }


# ───────────────────────────────────────────────
# 📝 Offline: emit SQL
# ───────────────────────────────────────────────
def run_offline(url: str) -> None:
    context.configure(
        url=url,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **_configure_kwargs(url),
    )
    with context.begin_transaction():
        context.run_migrations()


# ───────────────────────────────────────────────
# 🔌 Online: async engine, sync migration body
# ───────────────────────────────────────────────
def _migrate(connection: Connection, url: str) -> None:
    context.configure(connection=connection, **_configure_kwargs(url))
    with context.begin_transaction():
        context.run_migrations()


async def run_online(url: str) -> None:
    engine = create_async_engine(url, poolclass=pool.NullPool)
    try:
        async with engine.connect() as connection:
            await connection.run_sync(_migrate, url)
    finally:
        await engine.dispose()


url = _database_url()
config.set_main_option("sqlalchemy.url", url.replace("%", "%%"))

if context.is_offline_mode():
    run_offline(url)
else:
    asyncio.run(run_online(url))
