from __future__ import annotations

from collections.abc import Iterator
from datetime import UTC, datetime
from pathlib import Path

import pytest
from sqlalchemy.orm import Session

import interview_board.data.db as app_db
from interview_board.data.db import init_db, reset_engine
from interview_board.data.models import Experience, User


@pytest.fixture
def api_db(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Iterator[None]:
    """Use a temporary SQLite DB for API tests."""
    db_path = tmp_path / "api.db"
    monkeypatch.setenv("DB_URL", f"sqlite:///{db_path.as_posix()}")
    reset_engine()
    init_db()
    yield
    # Dispose engine to release connections
    reset_engine()


@pytest.fixture
def tmp_db(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Iterator[None]:
    """Point the app's engine at a temporary database for service tests."""
    monkeypatch.setenv("DB_URL", f"sqlite:///{(tmp_path / 'test.db').as_posix()}")
    reset_engine()
    init_db()
    yield
    reset_engine()


@pytest.fixture
def db_session(tmp_db: None) -> Iterator[Session]:
    """A session bound to the temporary database."""
    with app_db.get_session() as session:
        yield session


def make_user(session: Session, name: str = "Tester", *, is_anonymous: bool = False) -> User:
    user = User(name=name, is_anonymous=is_anonymous)
    session.add(user)
    session.commit()
    return user


def make_experience(
    session: Session,
    author: User,
    title: str = "SDE intern loop",
    *,
    created_at: datetime | None = None,
    is_anonymous: bool = False,
) -> Experience:
    experience = Experience(
        title=title,
        company="Acme",
        position="SDE Intern",
        content="Two DSA rounds and one HR round.",
        difficulty="Medium",
        outcome="Selected",
        author_id=author.id,
        is_anonymous=is_anonymous,
        created_at=created_at or datetime.now(UTC),
    )
    session.add(experience)
    session.commit()
    return experience


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Automatically add api_db fixture to tests in API test files."""
    for item in items:
        # Check if test file name contains "api" (case-insensitive)
        test_file_path = Path(str(item.fspath))
        if "api" in test_file_path.stem.lower():
            # Automatically add the api_db fixture using usefixtures marker
            item.add_marker(pytest.mark.usefixtures("api_db"))
