from logging.config import fileConfig

from sqlalchemy import engine_from_config, make_url, pool

from alembic import context

from workforce.core.database import Base
import workforce.models  # noqa: F401 – registers every table on Base.metadata

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# Shared by offline and online runs; batch mode lets SQLite alter tables
CONFIGURE_OPTS = {
    "target_metadata": Base.metadata,
    "render_as_batch": True,
    "compare_type": True,
}


def sync_url() -> str:
    """The app URL with its async driver dropped (aiosqlite → sqlite, asyncpg → postgresql)."""
    from workforce.core.config import settings
    url = make_url(settings.DATABASE_URL)
    return url.set(drivername=url.get_backend_name()).render_as_string(hide_password=False)


def run_migrations_offline() -> None:
    context.configure(url=sync_url(), literal_binds=True, dialect_opts={"paramstyle": "named"}, **CONFIGURE_OPTS)
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    section = config.get_section(config.config_ini_section, {})
    section["sqlalchemy.url"] = sync_url()
    connectable = engine_from_config(section, prefix="sqlalchemy.", poolclass=pool.NullPool)
    with connectable.connect() as connection:
        context.configure(connection=connection, **CONFIGURE_OPTS)
        with context.begin_transaction():
            context.run_migrations()
    connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
