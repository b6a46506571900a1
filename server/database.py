# server/database.py

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from models import Base


engine = None

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    expire_on_commit=False
)


def init_db(database_url: str):
    global engine

    options = {}
    if database_url.startswith("sqlite"):
        options["connect_args"] = {"check_same_thread": False}
        if ":memory:" in database_url or database_url == "sqlite://":
            options["poolclass"] = StaticPool

    engine = create_engine(database_url, **options)
    SessionLocal.configure(bind=engine)
    Base.metadata.create_all(bind=engine)
    return engine


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
