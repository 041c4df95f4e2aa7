from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from chatwarden.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyInstanceUnitOfWork,
    configured_engine,
    is_started,
    shutdown,
)
from chatwarden.adapters.validation import PydanticValidator
from chatwarden.app import build_instance_service
from chatwarden.domain.locking import KeyedLocks
from chatwarden.domain.model import TERM_ID
from tests.helpers.instances import ok_value

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path


@pytest.fixture(autouse=True)
def reset_adapter() -> Iterator[None]:
    shutdown()
    yield
    shutdown()


def test_build_instance_service_starts_adapter_on_configured_database(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.setenv("DATABASE_URI", f"sqlite+pysqlite:///{tmp_path / 'app.db'}")

    service = build_instance_service()
    term = ok_value(service.fetch_term())

    assert is_started()
    engine = configured_engine()
    assert engine is not None
    assert engine.url.database == str(tmp_path / "app.db")
    assert term.id == TERM_ID


def test_build_instance_service_reuses_started_adapter(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.setenv("DATABASE_URI", f"sqlite+pysqlite:///{tmp_path / 'app.db'}")
    build_instance_service()
    engine = configured_engine()

    build_instance_service()

    assert configured_engine() is engine


def test_build_instance_service_keeps_given_collaborators() -> None:
    shared = KeyedLocks()
    validator = PydanticValidator()

    first = build_instance_service(
        unit_of_work_factory=SqlAlchemyInstanceUnitOfWork, validator=validator, locks=shared
    )
    second = build_instance_service(unit_of_work_factory=SqlAlchemyInstanceUnitOfWork, locks=shared)

    assert len(shared) == 0
    assert first.locks is shared
    assert second.locks is shared
    assert first.validator is validator
    assert first.permission_reconciler.locks is shared
    assert not is_started()
