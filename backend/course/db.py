from __future__ import annotations
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool
from .settings import settings


DATABASE_URL = settings.database_url or "sqlite:///./course.db"

Base = declarative_base()


def make_engine(url: str) -> Engine:
	"""Engine for `url`; an in-memory SQLite URL shares one connection across threads."""
	if not url.startswith("sqlite"):
		return create_engine(url, future=True)
	options = {"connect_args": {"check_same_thread": False}, "future": True}
	if url in ("sqlite://", "sqlite:///:memory:"):
		options["poolclass"] = StaticPool
	return create_engine(url, **options)


def make_session_factory(bind: Engine) -> sessionmaker:
	return sessionmaker(autocommit=False, autoflush=False, bind=bind, future=True)


engine = make_engine(DATABASE_URL)
SessionLocal = make_session_factory(engine)


def init_db(bind: Engine | None = None) -> None:
	# Import registers the tables on Base.metadata
	from . import models  # noqa: F401
	Base.metadata.create_all(bind=bind or engine)
