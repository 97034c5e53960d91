"""
Alembic environment configuration for Member Cache.

Migrations run synchronously; async driver names in DATABASE_URL are
swapped for their sync counterparts.
"""

from logging.config import fileConfig
from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy import create_engine
from alembic import context
import os

from dotenv import load_dotenv, find_dotenv

from member_cache.models import Base

# alembic.ini values
config = context.config

load_dotenv(find_dotenv())

database_url = os.getenv("DATABASE_URL") or config.get_main_option("sqlalchemy.url")

if not database_url:
    raise ValueError(
        "Set DATABASE_URL or sqlalchemy.url in alembic.ini before running migrations"
    )

database_url = database_url.replace("postgresql+asyncpg://", "postgresql://").replace(
    "sqlite+aiosqlite://", "sqlite://"
)
config.set_main_option("sqlalchemy.url", database_url)

# Logging sections of alembic.ini
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode (emit SQL without a connection)."""
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
    )

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection: Connection) -> None:
    """Configure the context on an open connection and run."""
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        compare_type=True,
        render_as_batch=True,
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Run migrations in 'online' mode."""
    connectable = create_engine(
        config.get_main_option("sqlalchemy.url"),
        poolclass=pool.NullPool,
    )

    try:
        with connectable.connect() as connection:
            do_run_migrations(connection)
    except Exception as e:
        raise RuntimeError(f"members migration failed: {e}") from e
    finally:
        connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
