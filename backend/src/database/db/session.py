from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from src.config.config import Config


def _connect_args(url: str) -> dict:
    # repository calls run in worker threads
    if url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


engine = create_engine(
    Config.database_url,
    pool_pre_ping=True,
    connect_args=_connect_args(Config.database_url),
)

SessionLocal = sessionmaker(
    bind=engine,
    autoflush=False,
    autocommit=False,
)
