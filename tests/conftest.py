# tests/conftest.py
from __future__ import annotations

from collections.abc import Callable, Generator, Iterator
from itertools import count

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from forum_stage.api.v1.dependencies import get_media_store_dep
from forum_stage.core.security import create_access_token
from forum_stage.db.session import Base, enable_sqlite_savepoints
from forum_stage.db.session import get_db as app_get_session
from forum_stage.main import app as fastapi_app
from forum_stage.models import ROLE_INSTRUCTOR, ROLE_MODERATOR, ROLE_STUDENT, Post, User
from forum_stage.services.actor import Actor
from forum_stage.services.media import LocalMediaStore
from forum_stage.services.posts import PostAggregate

TEST_DB_URL = "sqlite://"

_USER_COUNTER = count(1)


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_savepoints(engine)
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    connection = engine.connect()
    transaction = connection.begin()
    # Commits inside the code under test only release a SAVEPOINT.
    session = Session(
        bind=connection,
        autoflush=False,
        expire_on_commit=False,
        join_transaction_mode="create_savepoint",
    )
    try:
        yield session
    finally:
        session.close()
        if transaction.is_active:
            transaction.rollback()
        connection.close()

        # Ensure each test sees a clean database even if commits occurred.
        with engine.begin() as cleanup_conn:
            for table in reversed(Base.metadata.sorted_tables):
                cleanup_conn.execute(table.delete())


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_session_dependency(app: FastAPI, db_session: Session) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)


@pytest.fixture()
def client(app: FastAPI, media_store: LocalMediaStore) -> Iterator[TestClient]:
    app.dependency_overrides[get_media_store_dep] = lambda: media_store
    try:
        with TestClient(app, base_url="http://test") as test_client:
            yield test_client
    finally:
        app.dependency_overrides.pop(get_media_store_dep, None)


@pytest.fixture()
def make_user(db_session: Session) -> Callable[..., User]:
    """Return a factory that persists users with a given role."""

    def _make(role: str = ROLE_STUDENT, full_name: str | None = None) -> User:
        n = next(_USER_COUNTER)
        user = User(
            full_name=full_name or f"User {n}",
            email=f"user{n}@example.com",
            role=role,
        )
        db_session.add(user)
        db_session.flush()
        return user

    return _make


@pytest.fixture()
def author(make_user) -> User:
    """Student who opens the test post."""
    return make_user(ROLE_STUDENT, "Alice Author")


@pytest.fixture()
def student(make_user) -> User:
    return make_user(ROLE_STUDENT, "Bob Student")


@pytest.fixture()
def other_student(make_user) -> User:
    return make_user(ROLE_STUDENT, "Carol Student")


@pytest.fixture()
def instructor(make_user) -> User:
    return make_user(ROLE_INSTRUCTOR, "Ivy Instructor")


@pytest.fixture()
def moderator(make_user) -> User:
    return make_user(ROLE_MODERATOR, "Max Moderator")


@pytest.fixture()
def media_store(tmp_path) -> LocalMediaStore:
    return LocalMediaStore(root=str(tmp_path / "media"), base_url="/media")


@pytest.fixture()
def posts(db_session: Session, media_store: LocalMediaStore) -> PostAggregate:
    return PostAggregate(db_session, media_store)


@pytest.fixture()
def test_post(posts: PostAggregate, author: User) -> Post:
    """Create a baseline post for tests."""
    return posts.create(
        Actor.from_user(author),
        title="How do generators work?",
        content="I do not understand yield.",
        tags=["python", "generators"],
    )


@pytest.fixture()
def auth_headers() -> Callable[[User], dict[str, str]]:
    """Return a helper building bearer headers for a user."""

    def _headers(user: User) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(user.id)}"}

    return _headers
