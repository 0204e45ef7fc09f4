# app/database.py
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine, Session

from app.core.config import get_settings

settings = get_settings()

# ---------------------------------------------------------
# Supabase Postgres connection (via pooler)
#
# - sslmode=require   : enforce SSL when running in the cloud
# - pool_size=1       : keep only 1 connection to the Supabase pooler
# - max_overflow=0    : do not open extra connections beyond the pool
# - pool_pre_ping=True: validate connections before using them
#
# Supabase Session mode limits the number of clients; the SQLAlchemy
# default pool_size of 5+ per process quickly hits
#   "MaxClientsInSessionMode: max clients reached"
#
# sqlite:// URLs (local runs, tests) share one in-process connection.
# ---------------------------------------------------------

db_url = settings.DATABASE_URL


def _with_sslmode(url: str) -> str:
    """Append sslmode=require if it is not already present."""
    if "sslmode=" in url:
        return url
    if "?" in url:
        return url + "&sslmode=require"
    return url + "?sslmode=require"


if db_url.startswith("sqlite"):
    engine = create_engine(
        db_url,
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
else:
    engine = create_engine(
        _with_sslmode(db_url),
        echo=False,        # set to True if you want to debug SQL queries
        pool_pre_ping=True,
        pool_size=1,
        max_overflow=0,
    )


def create_db_and_tables() -> None:
    """
    Create all tables defined in SQLModel metadata if they do not exist.

    This is called once on application startup.
    """
    SQLModel.metadata.create_all(engine)


def get_session():
    """
    FastAPI dependency that yields a SQLModel Session.

    FastAPI caches dependencies per request, so the auth dependency and
    the route body share the same session.

        @router.get("/example")
        def example_endpoint(session: Session = Depends(get_session)):
            ...
    """
    with Session(engine) as session:
        yield session
