from sqlalchemy import event, text
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from .config import settings


def _normalized_database_url(raw_url: str) -> str:
    """
    DATABASE_URL normalizasyonu:
    - postgres:// veya postgresql:// ise psycopg3 dialekti ile çalışacak şekilde dönüştür.
    - Diğer tüm durumlarda olduğu gibi bırak (SQLite vs.).
    """
    if not raw_url:
        return "sqlite:///./aesthco.db"
    raw_url = raw_url.strip()
    if raw_url.startswith("postgres://"):
        return "postgresql+psycopg://" + raw_url[len("postgres://") :]
    if raw_url.startswith("postgresql://") and "+psycopg" not in raw_url.split("://", 1)[0]:
        return "postgresql+psycopg://" + raw_url[len("postgresql://") :]
    return raw_url


def build_engine(url: str) -> Engine:
    """
    Uygulama ve testler aynı ayarlarla engine kurar.

    SQLite'ta satır kilidi (SELECT ... FOR UPDATE) yoktur; her transaction
    BEGIN IMMEDIATE ile açılır ve yazanlar veritabanı kilidinde sıraya girer.
    Böylece kupon sayımı + kullanım kaydı eşzamanlı checkout'larda da tutarlı kalır.
    """
    url = _normalized_database_url(url)
    if not url.startswith("sqlite"):
        return create_engine(url, pool_pre_ping=True)

    in_memory = ":memory:" in url or url in ("sqlite://", "sqlite:///")
    # In-memory SQLite: tek bağlantı kullan ki init_db tabloları tüm isteklerde görünsün (testler için)
    eng = create_engine(
        url,
        connect_args={"check_same_thread": False, "timeout": 30},
        poolclass=StaticPool if in_memory else None,
    )

    @event.listens_for(eng, "connect")
    def _on_connect(dbapi_conn, _):
        # pysqlite kendi BEGIN'ini göndermesin; transaction'ı "begin" olayı açar
        dbapi_conn.isolation_level = None
        cur = dbapi_conn.cursor()
        try:
            cur.execute("PRAGMA foreign_keys=ON;")
            cur.execute("PRAGMA busy_timeout=30000;")
        finally:
            cur.close()

    @event.listens_for(eng, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    return eng


DATABASE_URL = _normalized_database_url(settings.database_url)
engine = build_engine(DATABASE_URL)


def get_db():
    with Session(engine) as session:
        yield session


def init_db(bind: Engine | None = None) -> None:
    # Tablo sınıfları metadata'ya kaydolsun
    from aesthco import models  # noqa: F401

    SQLModel.metadata.create_all(bind or engine)


def ping(bind: Engine | None = None) -> bool:
    try:
        with (bind or engine).connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception:
        return False
