"""Dependency injection container."""

from dataclasses import dataclass
from typing import TypeVar, Generic, Callable, Optional, Any

from taskboard.domain.protocols import AggregateCache
from taskboard.storage.database import SessionFactory


T = TypeVar("T")


class Provider(Generic[T]):
    """Lazy provider that creates instance on first access."""

    def __init__(self, factory: Callable[[], T]) -> None:
        self._factory = factory
        self._instance: Optional[T] = None

    def get(self) -> T:
        """Get the instance, creating it if necessary."""
        if self._instance is None:
            self._instance = self._factory()
        return self._instance

    def reset(self) -> None:
        """Reset the instance (for testing)."""
        self._instance = None

    def override(self, instance: T) -> None:
        """Override with a specific instance (for testing)."""
        self._instance = instance


@dataclass
class Container:
    """Dependency injection container."""

    _session_factory: Optional[Provider[SessionFactory]] = None
    _aggregate_cache: Optional[Provider[AggregateCache]] = None

    # Settings cache
    _settings: Optional[Any] = None

    @property
    def session_factory(self) -> SessionFactory:
        """Get the storage session factory."""
        if self._session_factory is None:
            raise RuntimeError("Session factory not configured")
        return self._session_factory.get()

    @property
    def aggregate_cache(self) -> AggregateCache:
        """Get the aggregate cache."""
        if self._aggregate_cache is None:
            raise RuntimeError("Aggregate cache not configured")
        return self._aggregate_cache.get()

    @property
    def task_query_service(self) -> Any:
        """Get TaskQueryService instance."""
        from taskboard.queries.executor import PaginatedQueryExecutor
        from taskboard.services.task_query_service import TaskQueryService

        return TaskQueryService(PaginatedQueryExecutor(self.session_factory))

    @property
    def aggregate_counter(self) -> Any:
        """Get AggregateCounter instance sharing the process-wide cache."""
        from taskboard.services.aggregate_service import AggregateCounter

        return AggregateCounter(
            session_factory=self.session_factory,
            cache=self.aggregate_cache,
            ttl_seconds=self.settings.cache.aggregate_ttl_seconds,
        )

    @property
    def settings(self) -> Any:
        """Get application settings."""
        if self._settings is None:
            from taskboard.config.settings import get_settings

            self._settings = get_settings()
        return self._settings

    @property
    def is_configured(self) -> bool:
        return self._session_factory is not None and self._aggregate_cache is not None

    def configure_session_factory(
        self, factory: Callable[[], SessionFactory]
    ) -> "Container":
        """Configure the storage session factory."""
        self._session_factory = Provider(factory)
        return self

    def configure_aggregate_cache(
        self, factory: Callable[[], AggregateCache]
    ) -> "Container":
        """Configure the aggregate cache."""
        self._aggregate_cache = Provider(factory)
        return self

    def reset(self) -> None:
        """Reset all providers (for testing)."""
        if self._session_factory:
            self._session_factory.reset()
        if self._aggregate_cache:
            self._aggregate_cache.reset()
        self._settings = None


# Global container instance
container = Container()


def get_container() -> Container:
    """Get the global container instance."""
    return container


def reset_container() -> None:
    """Reset the global container (for testing)."""
    global container
    container.reset()
    container = Container()


def setup_container() -> Container:
    """Configure the global container from settings unless already configured."""
    from taskboard.repositories.memory import InMemoryAggregateCache
    from taskboard.storage.database import get_engine, get_session_factory

    container = get_container()
    if container.is_configured:
        return container

    db_settings = container.settings.database
    if container._session_factory is None:
        container.configure_session_factory(
            lambda: get_session_factory(
                get_engine(db_settings.url, echo=db_settings.echo)
            )
        )
    if container._aggregate_cache is None:
        container.configure_aggregate_cache(InMemoryAggregateCache)
    return container
