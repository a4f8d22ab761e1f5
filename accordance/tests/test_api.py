from contextlib import contextmanager
from types import SimpleNamespace

import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, create_engine, select

import accordance
import accordance.api as api_module
from accordance.app.domain.models import AccessLog, EventRecord
from accordance.app.errors import PermissionDeniedError
from accordance.app.infra import db as db_module
from accordance.app.infra.db import init_db


@pytest.fixture
def engine(monkeypatch):
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine, attempts=1)

    @contextmanager
    def _get_session():
        session = Session(engine)
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    monkeypatch.setattr(api_module, "get_session", _get_session)
    return engine


USER = {
    "id": "did:regular-user",
    "resource_roles": [{"role": "agreement.user", "generate_resource": "id"}],
}


def test_package_exports_api():
    assert accordance.accept is api_module.accept
    assert accordance.get_accepted is api_module.get_accepted


def test_accept_then_get_accepted_across_sessions(engine):
    inserted = accordance.accept(USER, ["tos-v1", "privacy-v1"])
    accordance.accept(USER, "tos-v1")

    assert set(accordance.get_accepted(USER, USER["id"])) == {"tos-v1", "privacy-v1"}
    with Session(engine) as session:
        rows = session.exec(select(EventRecord)).all()
        assert len(rows) == 2
        assert inserted.event.id in {row.event_id for row in rows}


def test_denied_accept_keeps_only_the_denial(engine):
    stranger = {"id": "did:stranger"}
    with pytest.raises(PermissionDeniedError):
        accordance.accept(stranger, "tos-v1")

    with Session(engine) as session:
        assert session.exec(select(EventRecord)).all() == []
        logs = session.exec(select(AccessLog)).all()
        assert len(logs) == 1
        assert logs[0].allowed is False
        assert logs[0].permission == "AGREEMENT_ACCEPT"
        assert logs[0].resource == "did:stranger"


def test_denied_get_accepted_is_written_to_access_log(engine):
    with pytest.raises(PermissionDeniedError):
        accordance.get_accepted({"id": "did:a"}, "did:b")

    with Session(engine) as session:
        logs = session.exec(select(AccessLog)).all()
        assert [(log.actor_id, log.permission, log.resource, log.allowed) for log in logs] == [
            ("did:a", "AGREEMENT_ACCESS", "did:b", False)
        ]


def test_granted_decisions_are_committed(engine):
    accordance.accept(USER, "tos-v1")
    accordance.get_accepted(USER, USER["id"])

    with Session(engine) as session:
        logs = session.exec(select(AccessLog)).all()
        assert {(log.permission, log.allowed) for log in logs} == {
            ("AGREEMENT_ACCEPT", True),
            ("AGREEMENT_ACCESS", True),
        }


def test_init_db_retries_then_raises(monkeypatch):
    calls = []

    def _fail(bind):
        calls.append(bind)
        raise RuntimeError("database unavailable")

    monkeypatch.setattr(db_module, "SQLModel", SimpleNamespace(metadata=SimpleNamespace(create_all=_fail)))
    with pytest.raises(RuntimeError):
        init_db(create_engine("sqlite://"), attempts=3, delay=0)
    assert len(calls) == 3


def test_init_configures_logging_and_creates_tables(monkeypatch):
    calls = []
    monkeypatch.setattr(api_module, "configure_logging", lambda: calls.append("logging"))
    monkeypatch.setattr(api_module, "init_db", lambda: calls.append("db"))
    accordance.init()
    assert calls == ["logging", "db"]
