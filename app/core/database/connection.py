# File: app/core/database/connection.py

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from app.core.config.settings import settings


def build_engine(url: str):
    # check_same_thread=False is needed only for SQLite (Test Mode)
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(
        url,
        echo=False,
        pool_pre_ping=True,
        connect_args=connect_args
    )


engine = build_engine(settings.DATABASE_URL)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

