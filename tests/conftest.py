from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest
from sqlalchemy.engine import Engine  # noqa: TC002
from sqlalchemy.orm import Session, sessionmaker

from chatwarden.adapters.sqlalchemy import start_mappers
from chatwarden.adapters.sqlalchemy.migrations import upgrade_head
from chatwarden.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyInstanceUnitOfWork,
    create_engine_for,
    shutdown,
    startup,
)
from chatwarden.adapters.validation import PydanticValidator
from chatwarden.domain.instances import InstanceService
from chatwarden.domain.locking import KeyedLocks
from tests.helpers.instances import FixedClock

os.environ.setdefault("DATABASE_URI", "sqlite+pysqlite:///:memory:")

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator
    from pathlib import Path


@pytest.fixture
def sqlite_engine() -> Iterator[Engine]:
    engine = create_engine_for("sqlite+pysqlite:///:memory:")
    start_mappers()
    upgrade_head(engine=engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def sqlite_file_engine(tmp_path: Path) -> Iterator[Engine]:
    """File-backed engine shared by several threads."""

    engine = create_engine_for(
        f"sqlite+pysqlite:///{tmp_path / 'chatwarden.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    start_mappers()
    upgrade_head(engine=engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def sqlite_session(sqlite_engine: Engine) -> Iterator[Session]:
    session_factory = sessionmaker(bind=sqlite_engine, future=True, expire_on_commit=False)
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def sqlite_unit_of_work(
    sqlite_engine: Engine,
) -> Iterator[Callable[[], SqlAlchemyInstanceUnitOfWork]]:
    startup(engine=sqlite_engine, force=True)

    def factory() -> SqlAlchemyInstanceUnitOfWork:
        return SqlAlchemyInstanceUnitOfWork()

    try:
        yield factory
    finally:
        shutdown()


@pytest.fixture
def validator() -> PydanticValidator:
    return PydanticValidator()


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def instance_service(
    sqlite_unit_of_work: Callable[[], SqlAlchemyInstanceUnitOfWork],
    validator: PydanticValidator,
    clock: FixedClock,
) -> InstanceService:
    return InstanceService(
        unit_of_work_factory=sqlite_unit_of_work,
        validator=validator,
        locks=KeyedLocks(),
        clock=clock,
    )


@pytest.fixture
def threaded_unit_of_work(
    sqlite_file_engine: Engine,
) -> Iterator[Callable[[], SqlAlchemyInstanceUnitOfWork]]:
    """Unit of work factory safe to call from several threads at once."""

    startup(engine=sqlite_file_engine, force=True)
    try:
        yield SqlAlchemyInstanceUnitOfWork
    finally:
        shutdown()
