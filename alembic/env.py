"""
Migration runner for the RepairHub schema.

The database URL is taken from `repairhub.config.settings` (DATABASE_URL / .env),
never from alembic.ini. `alembic upgrade head` builds the schema from
versions/0001_initial_schema.py; later revisions are autogenerated against
`Base.metadata`.
"""

from logging.config import fileConfig

from sqlalchemy import create_engine, pool
from alembic import context

from repairhub.config import settings
from repairhub.database import Base
import repairhub.models  # noqa: F401 - every table must be on Base.metadata

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def _options(url: str) -> dict:
    # SQLite cannot ALTER constraints in place
    return {
        "target_metadata": target_metadata,
        "compare_type": True,
        "render_as_batch": url.startswith("sqlite"),
    }


def run_migrations_offline() -> None:
    """Emit the SQL for the pending revisions instead of executing it."""
    context.configure(
        url=settings.DATABASE_URL,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **_options(settings.DATABASE_URL),
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    engine = create_engine(settings.DATABASE_URL, poolclass=pool.NullPool)
    with engine.connect() as connection:
        context.configure(connection=connection, **_options(settings.DATABASE_URL))
        with context.begin_transaction():
            context.run_migrations()
    engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
