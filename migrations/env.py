"""Alembic ortamı: hedef SQLModel.metadata, bağlantı uygulamanın engine ayarlarıyla kurulur.

Online modda aesthco.core.database.build_engine kullanılır; SQLite'ta foreign_keys ve
BEGIN IMMEDIATE uygulamayla aynı olur. URL önceliği: -x url=... > DATABASE_URL > alembic.ini.
"""
from logging.config import fileConfig

from alembic import context
from sqlmodel import SQLModel

from aesthco import models  # noqa: F401  tablolar metadata'ya kaydolsun
from aesthco.core.database import DATABASE_URL, build_engine

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = SQLModel.metadata


def _database_url() -> str:
    override = context.get_x_argument(as_dictionary=True).get("url")
    return override or DATABASE_URL or config.get_main_option("sqlalchemy.url")


def _configure(**kwargs) -> None:
    context.configure(
        target_metadata=target_metadata,
        compare_type=True,
        render_as_batch=True,  # SQLite ALTER kısıtları
        **kwargs,
    )


def run_migrations_offline() -> None:
    """'offline' mod: engine oluşturmadan sadece SQL üretir."""
    _configure(url=_database_url(), literal_binds=True, dialect_opts={"paramstyle": "named"})
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    engine = build_engine(_database_url())
    try:
        with engine.connect() as connection:
            _configure(connection=connection)
            with context.begin_transaction():
                context.run_migrations()
    finally:
        engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
