from logging.config import fileConfig
from sqlalchemy import create_engine, pool
from alembic import context

from portal.db.base import Base
from portal.db.models.account_model import Account  # noqa: F401
from portal.db.models.profile_model import Profile  # noqa: F401
from portal.core.config import settings

# Alembic Config object
config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata

# Alembic runs on a synchronous engine; the app itself talks to asyncpg directly.
DATABASE_URL = settings.database_url.replace("+asyncpg", "")


def run_migrations_offline():
    """Run migrations in 'offline' mode."""
    context.configure(
        url=DATABASE_URL,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online():
    """Run migrations in 'online' mode (sync engine for Alembic)."""
    connectable = create_engine(
        DATABASE_URL,
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata)

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
