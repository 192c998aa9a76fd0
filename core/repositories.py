"""Storage abstraction backing the ledgers.

Services never touch a global mapping directly. They ask the registry for a
named repository (``get_repository('bookings')``), whose backend and optional
seed callable come from ``settings.SKYBOOK_REPOSITORIES``. Tests swap the
backend with ``override_settings`` or start from a clean slate with
``reset_repositories()``.
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from typing import Any, Callable, Generic, Iterable, TypeVar

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured
from django.core.signals import setting_changed
from django.dispatch import receiver
from django.utils.module_loading import import_string

from .exceptions import Conflict

logger = logging.getLogger(__name__)

T = TypeVar('T')

RESET_ON_SETTINGS = {'SKYBOOK_REPOSITORIES', 'SKYBOOK_SEED_DEMO_USERS'}


class Repository(ABC, Generic[T]):
    """Key-value store for one entity type."""

    def __init__(self, alias: str = '') -> None:
        self.alias = alias

    @abstractmethod
    def atomic(self) -> AbstractContextManager:
        """Context manager making a check-then-write sequence atomic."""

    @abstractmethod
    def get(self, key: str) -> T | None: ...

    @abstractmethod
    def add(self, key: str, item: T) -> T:
        """Insert ``item``; raises :class:`Conflict` when ``key`` is taken."""

    @abstractmethod
    def save(self, key: str, item: T) -> T: ...

    @abstractmethod
    def delete(self, key: str) -> bool: ...

    @abstractmethod
    def all(self) -> list[T]: ...

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.get(key) is not None

    def __len__(self) -> int:
        return len(self.all())

    def filter(self, predicate: Callable[[T], bool]) -> list[T]:
        return [item for item in self.all() if predicate(item)]

    def find(self, predicate: Callable[[T], bool]) -> T | None:
        for item in self.all():
            if predicate(item):
                return item
        return None

    def add_first_free(self, keys: Iterable[str], build: Callable[[str], T]) -> T:
        """Store ``build(key)`` under the first key in ``keys`` not already present."""

        with self.atomic():
            for key in keys:
                if key not in self:
                    return self.add(key, build(key))
        raise Conflict(f'No free key left in {self.alias or "repository"}')


class InMemoryRepository(Repository[T]):
    """Process-local repository; contents vanish on restart."""

    def __init__(self, alias: str = '') -> None:
        super().__init__(alias)
        self._items: dict[str, T] = {}
        self._lock = threading.RLock()

    def atomic(self) -> AbstractContextManager:
        return self._lock

    def get(self, key: str) -> T | None:
        with self._lock:
            return self._items.get(key)

    def add(self, key: str, item: T) -> T:
        with self._lock:
            if key in self._items:
                raise Conflict(f'{key} already exists')
            self._items[key] = item
        return item

    def save(self, key: str, item: T) -> T:
        with self._lock:
            self._items[key] = item
        return item

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._items.pop(key, None) is not None

    def all(self) -> list[T]:
        with self._lock:
            return list(self._items.values())

    def clear(self) -> None:
        with self._lock:
            self._items.clear()


_registry: dict[str, Repository[Any]] = {}
_registry_lock = threading.RLock()


def _build_repository(alias: str) -> Repository[Any]:
    configured = getattr(settings, 'SKYBOOK_REPOSITORIES', {})
    try:
        config = configured[alias]
    except KeyError:
        raise ImproperlyConfigured(f"SKYBOOK_REPOSITORIES has no entry for '{alias}'") from None

    backend = import_string(config.get('BACKEND', 'core.repositories.InMemoryRepository'))
    repository = backend(alias=alias)
    seed_path = config.get('SEED')
    if seed_path:
        import_string(seed_path)(repository)
        logger.debug('Seeded %s repository with %d record(s)', alias, len(repository))
    return repository


def get_repository(alias: str) -> Repository[Any]:
    with _registry_lock:
        repository = _registry.get(alias)
        if repository is None:
            repository = _build_repository(alias)
            _registry[alias] = repository
        return repository


def reset_repositories() -> None:
    """Drop every repository so the next access rebuilds (and reseeds) it."""

    with _registry_lock:
        _registry.clear()


@receiver(setting_changed)
def _reset_on_setting_change(*, setting: str, **kwargs: Any) -> None:
    if setting in RESET_ON_SETTINGS:
        reset_repositories()
