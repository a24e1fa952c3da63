import os

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from cinemate.db.session import Base
from cinemate.db import models


def sqlite_engine(url: str, foreign_keys: bool = False, **kwargs):
    engine = create_engine(url, future=True, **kwargs)

    # Let SQLAlchemy drive transactions so savepoints work and writers queue up
    @event.listens_for(engine, "connect")
    def _disable_driver_transactions(dbapi_connection, _connection_record):
        dbapi_connection.isolation_level = None
        if foreign_keys:
            dbapi_connection.execute("PRAGMA foreign_keys=ON")

    @event.listens_for(engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    Base.metadata.create_all(bind=engine)
    return engine


@pytest.fixture()
def engine():
    engine = sqlite_engine("sqlite+pysqlite:///:memory:")
    yield engine
    engine.dispose()


@pytest.fixture()
def db_session(engine):
    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)


@pytest.fixture()
def file_engine(tmp_path):
    engine = sqlite_engine(
        f"sqlite+pysqlite:///{tmp_path / 'cinemate.sqlite'}",
        connect_args={"timeout": 30, "check_same_thread": False},
    )
    yield engine
    engine.dispose()


def create_user(session, user_id="user_1", name="Ada Lovelace", email="ada@example.com"):
    user = models.User(id=user_id, name=name, email=email)
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


def create_show(session, title="Dune: Part Two", starts_in=timedelta(days=1), price=15):
    movie = models.Movie(title=title)
    session.add(movie)
    session.commit()
    show = models.Show(
        movie_id=movie.id,
        show_datetime=datetime.now(timezone.utc) + starts_in,
        show_price=price,
        occupied_seats={},
    )
    session.add(show)
    session.commit()
    session.refresh(show)
    return show


@pytest.fixture()
def user(db_session):
    return create_user(db_session)


@pytest.fixture()
def show(db_session):
    return create_show(db_session)
