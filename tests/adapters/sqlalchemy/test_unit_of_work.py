from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from sqlalchemy import text

from chatwarden.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyInstanceUnitOfWork,
    StartupError,
    configured_engine,
    create_engine_for,
    is_started,
    shutdown,
    startup,
)
from chatwarden.domain.model import Chat, ChatType

if TYPE_CHECKING:
    from collections.abc import Iterator

    from sqlalchemy.engine import Engine


@pytest.fixture(autouse=True)
def reset_unit_of_work_state() -> Iterator[None]:
    shutdown()
    yield
    shutdown()


def test_unit_of_work_requires_startup() -> None:
    with pytest.raises(StartupError):
        SqlAlchemyInstanceUnitOfWork()


def test_startup_requires_force_for_reconfiguration() -> None:
    engine_a = create_engine_for("sqlite+pysqlite:///:memory:")
    engine_b = create_engine_for("sqlite+pysqlite:///:memory:")

    startup(engine=engine_a, force=True)

    with pytest.raises(StartupError):
        startup(engine=engine_b)

    startup(engine=engine_b, force=True)
    assert configured_engine() is engine_b
    assert is_started()


def test_sqlite_engines_enforce_foreign_keys() -> None:
    engine = create_engine_for("sqlite+pysqlite:///:memory:")

    with engine.connect() as connection:
        assert connection.execute(text("PRAGMA foreign_keys")).scalar_one() == 1


def test_commit_persists_and_exit_without_commit_discards(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, force=True)

    with SqlAlchemyInstanceUnitOfWork() as uow:
        uow.repositories.chats.add(Chat(id=1, type=ChatType.GROUP))
        uow.commit()

    with SqlAlchemyInstanceUnitOfWork() as uow:
        uow.repositories.chats.add(Chat(id=2, type=ChatType.GROUP))

    with SqlAlchemyInstanceUnitOfWork() as uow:
        assert uow.repositories.chats.get(1) is not None
        assert uow.repositories.chats.get(2) is None


def test_exception_inside_unit_rolls_back(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, force=True)

    with pytest.raises(RuntimeError), SqlAlchemyInstanceUnitOfWork() as uow:
        uow.repositories.chats.add(Chat(id=3, type=ChatType.GROUP))
        raise RuntimeError("abort")

    with SqlAlchemyInstanceUnitOfWork() as uow:
        assert uow.repositories.chats.get(3) is None


def test_repositories_unavailable_outside_context(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, force=True)

    with pytest.raises(StartupError):
        _ = SqlAlchemyInstanceUnitOfWork().repositories
