"""Service wiring for the CLI: mapper, session store and schedule service."""
from __future__ import annotations

from functools import lru_cache
import inspect
from typing import Any, Callable, Dict, Type

from tutorhub.application.schedule_service import ScheduleService
from tutorhub.config import settings as app_settings
from tutorhub.domain.configuration import DomainSettings, configure as configure_domain
from tutorhub.domain.repositories import SessionRepository
from tutorhub.infrastructure.json_store import JsonSessionStore
from tutorhub.infrastructure.log_utils import log_message
from tutorhub.infrastructure.mappers import ClassRecordMapper

ServiceType = Type[Any]
Factory = Callable[["Container"], Any]


def _seed_domain_settings() -> DomainSettings:
    return configure_domain(
        DomainSettings(
            upcoming_days=app_settings.UPCOMING_DAYS,
            include_error_sessions=app_settings.INCLUDE_ERROR_SESSIONS,
        )
    )


_seed_domain_settings()


class Container:
    """Service registry; every provider is stored as a factory taking the container."""

    def __init__(self) -> None:
        self._providers: Dict[ServiceType, Factory] = {}

    def __contains__(self, service: ServiceType) -> bool:
        return service in self._providers

    def register(
        self,
        service: ServiceType,
        *,
        factory: Factory | None = None,
        instance: Any | None = None,
    ) -> None:
        if instance is not None:
            self._providers[service] = lambda _c, value=instance: value
        elif factory is not None:
            self._providers[service] = factory
        else:
            raise ValueError(f"Register {service!r} with a factory or an instance.")

    def resolve(self, service: ServiceType) -> Any:
        provider = self._providers.get(service)
        if provider is None:
            raise KeyError(f"No provider registered for {service!r}")
        return provider(self)


def _register_defaults(container: Container) -> None:
    container.register(ClassRecordMapper, factory=lambda _c: ClassRecordMapper())
    container.register(
        SessionRepository,
        factory=lambda _c: JsonSessionStore(app_settings.SESSIONS_FILE),
    )
    container.register(
        ScheduleService,
        factory=lambda c: ScheduleService(
            repository=c.resolve(SessionRepository),
            mapper=c.resolve(ClassRecordMapper),
        ),
    )


def _as_factory(provider: Any) -> Factory | None:
    """Turn a class or callable override into a factory; ``None`` for plain instances."""
    if isinstance(provider, type):
        return lambda _c, cls=provider: cls()
    if inspect.isfunction(provider) or inspect.ismethod(provider):
        takes_container = bool(inspect.signature(provider).parameters)
        return (lambda c, fn=provider: fn(c)) if takes_container else (lambda _c, fn=provider: fn())
    return None


def build_container(overrides: Dict[ServiceType, Any] | None = None) -> Container:
    """Create a container; ``overrides`` maps a service to a class, callable or instance."""
    container = Container()
    _register_defaults(container)

    for service, provider in (overrides or {}).items():
        factory = _as_factory(provider)
        if factory is None:
            container.register(service, instance=provider)
        else:
            container.register(service, factory=factory)
        log_message(f"Overriding provider for {getattr(service, '__name__', service)}.", "DEBUG", tag="SYS")

    return container


@lru_cache(maxsize=1)
def get_container() -> Container:
    """Return the process-wide container."""
    return build_container()


__all__ = ["Container", "build_container", "get_container"]
