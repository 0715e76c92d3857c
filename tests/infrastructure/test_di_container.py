from __future__ import annotations

import pytest

from tutorhub.application.schedule_service import ScheduleService
from tutorhub.domain.repositories import SessionRepository
from tutorhub.infrastructure import di_container
from tutorhub.infrastructure.di_container import Container, build_container
from tutorhub.infrastructure.json_store import JsonSessionStore
from tutorhub.infrastructure.mappers import ClassRecordMapper


class InMemoryRepository(SessionRepository):
    def __init__(self, rows=None):
        self.rows = list(rows or [])

    def load_records(self):
        return list(self.rows)

    def save_record(self, record):
        self.rows.append(dict(record))

    def delete_records(self, ids):
        doomed = set(ids)
        before = len(self.rows)
        self.rows = [r for r in self.rows if r.get("id") not in doomed]
        return before - len(self.rows)


def test_default_graph_uses_json_store():
    container = build_container()

    service = container.resolve(ScheduleService)

    assert isinstance(service, ScheduleService)
    assert isinstance(service.repository, JsonSessionStore)
    assert isinstance(service.mapper, ClassRecordMapper)


def test_instance_override_is_shared():
    repo = InMemoryRepository([{"id": "a", "title": "Algebra", "date": "2025-06-02"}])
    container = build_container({SessionRepository: repo})

    service = container.resolve(ScheduleService)

    assert service.repository is repo
    assert [s.id for s in service.load()] == ["a"]


def test_class_and_callable_overrides_build_fresh_instances():
    container = build_container(
        {
            SessionRepository: InMemoryRepository,
            ClassRecordMapper: lambda: ClassRecordMapper(),
        }
    )

    first = container.resolve(SessionRepository)
    second = container.resolve(SessionRepository)

    assert isinstance(first, InMemoryRepository)
    assert first is not second
    assert isinstance(container.resolve(ClassRecordMapper), ClassRecordMapper)


def test_resolve_unknown_service_raises():
    with pytest.raises(KeyError):
        Container().resolve(ScheduleService)


def test_register_requires_provider():
    with pytest.raises(ValueError):
        Container().register(ScheduleService)


def test_get_container_is_cached():
    di_container.get_container.cache_clear()
    try:
        assert di_container.get_container() is di_container.get_container()
    finally:
        di_container.get_container.cache_clear()
