from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from fittrack.core.config import settings


def _engine_options(url: str) -> dict:
    if url.startswith("sqlite"):
        # SQLite: одно соединение на поток, пул не настраиваем
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_pre_ping": True,
        "pool_recycle": 300,
        "pool_size": 5,
        "max_overflow": 10,
        "connect_args": {
            "keepalives": 1,
            "keepalives_idle": 30,
            "keepalives_interval": 10,
            "keepalives_count": 5,
        },
    }


engine = create_engine(
    settings.database_url,
    future=True,
    **_engine_options(settings.database_url),
)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)
