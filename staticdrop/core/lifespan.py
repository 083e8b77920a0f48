"""Lifespan management with event-based architecture for staticdrop."""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any, Generic, TypeVar

from fastapi import FastAPI

from staticdrop.core.logger import LogIcon, logger
from staticdrop.core.settings import settings as st


class State:
    """Mutable application state container with attribute access."""

    __slots__ = ("_data",)

    def __init__(self) -> None:
        object.__setattr__(self, "_data", {})

    def __getattr__(self, name: str) -> Any:
        try:
            return self._data[name]
        except KeyError:
            raise AttributeError(f"State has no attribute '{name}'") from None

    def __setattr__(self, name: str, value: Any) -> None:
        self._data[name] = value

    def __contains__(self, name: str) -> bool:
        return name in self._data

    def __iter__(self):
        return iter(self._data.keys())

    def __repr__(self) -> str:
        return f"State({self._data})"

    def get(self, name: str, default: Any = None) -> Any:
        return self._data.get(name, default)

    def clear(self) -> None:
        self._data.clear()


T = TypeVar("T")


class BaseEvent(ABC, Generic[T]):
    """Abstract base class for lifespan events."""

    name: str
    state: State

    @abstractmethod
    async def startup(self) -> T:
        """Initialize and return the event instance."""
        ...

    async def shutdown(self, instance: T) -> None:  # noqa: B027
        """Optional cleanup. Override if cleanup is needed."""

    @classmethod
    def has_shutdown(cls) -> bool:
        """Check if shutdown was overridden."""
        return cls.shutdown is not BaseEvent.shutdown


class Lifespan:
    """Runs registered events around the application's serving window.

    Instances are passed to ``FastAPI(lifespan=...)``; events are registered as
    ready-built objects so they can carry their own configuration.
    """

    def __init__(self) -> None:
        self._events: list[BaseEvent[Any]] = []
        self._started: list[BaseEvent[Any]] = []
        self._state: State | None = None

    def register(self, event: BaseEvent[Any]) -> "Lifespan":
        """Register an event. Returns self for chaining."""
        self._events.append(event)
        return self

    @property
    def state(self) -> State | None:
        """Access to state after startup execution."""
        return self._state

    @property
    def events(self) -> list[BaseEvent[Any]]:
        """Events that completed startup."""
        return self._started

    async def startup(self) -> State:
        logger.info("Starting application lifespan", icon=LogIcon.START, version=st.API_VERSION)
        self._state = State()

        for event in self._events:
            event.state = self._state
            logger.info(f"Starting event: {event.name}", icon=LogIcon.PROCESSING)
            instance = await event.startup()
            setattr(self._state, event.name, instance)
            logger.info(f"Event ready: {event.name}", icon=LogIcon.SUCCESS)
            self._started.append(event)

        logger.info("App state ready", icon=LogIcon.COMPLETE)
        return self._state

    async def shutdown(self) -> None:
        logger.info("Cleaning up app state", icon=LogIcon.TOOL)

        if not self._state:
            logger.info("No state to cleanup", icon=LogIcon.WARNING)
            return

        for event in reversed(self._started):
            if event.has_shutdown() and event.name in self._state:
                logger.info(f"Shutting down: {event.name}", icon=LogIcon.PROCESSING)
                await event.shutdown(getattr(self._state, event.name))
                logger.info(f"Shutdown complete: {event.name}", icon=LogIcon.SUCCESS)

        self._started.clear()
        self._state.clear()
        logger.info("Cleanup complete", icon=LogIcon.COMPLETE)

    @asynccontextmanager
    async def __call__(self, app: FastAPI) -> AsyncIterator[None]:
        app.state.lifespan = await self.startup()
        try:
            yield
        finally:
            await self.shutdown()


def create_lifespan() -> Lifespan:
    """Create lifespan manager for event registration."""
    return Lifespan()
