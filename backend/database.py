import os
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from dotenv import load_dotenv

load_dotenv()

# Ticketing data lives next to the backend when no DATABASE_URL is configured
DEV_DATABASE_PATH = os.path.join(os.path.dirname(__file__), "ticketing_dev.db")


def resolve_database_url(url: str):
    """
    Return the SQLAlchemy URL and connect_args for a configured database.
    Empty means the local ticketing SQLite file; hosted Postgres dashboards
    hand out postgres:// which SQLAlchemy only accepts as postgresql://.
    """
    if not url:
        url = f"sqlite:///{DEV_DATABASE_PATH}"
    if url.startswith("sqlite"):
        # Request handlers run in FastAPI's threadpool
        return url, {"check_same_thread": False}
    if url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql://", 1)
    return url, {}


DATABASE_URL, _connect_args = resolve_database_url(os.environ.get("DATABASE_URL", ""))

engine = create_engine(DATABASE_URL, connect_args=_connect_args, pool_pre_ping=True)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def get_db():
    """One session per request; purchase and review routes commit explicitly."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
