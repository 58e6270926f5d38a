"""Base class for bounded, per-session history stores."""

import logging
from abc import ABC, abstractmethod
from typing import Any, Generic, TypeVar

from dm_context.config import with_defaults

logger = logging.getLogger(__name__)

EntryT = TypeVar("EntryT")
ConfigT = TypeVar("ConfigT")


class HistoryStore(ABC, Generic[EntryT, ConfigT]):
    """Ordered, bounded log of domain events for one game session.

    Provides common patterns:
    - Type and sanity checks on record (bad entries are dropped, not raised)
    - FIFO eviction down to the configured retention bound
    - Immutable config, replaced through update_config

    Stores hold session-specific eviction state, so every game session
    constructs its own instances.
    """

    entry_type: type
    config_type: type

    def __init__(self, config: ConfigT | None = None) -> None:
        """Initialize store.

        Args:
            config: Domain configuration (class defaults if None).
        """
        self._config: ConfigT = config if config is not None else self.config_type()

    @property
    def config(self) -> ConfigT:
        """Current configuration."""
        return self._config

    def update_config(self, **changes: Any) -> ConfigT:
        """Replace the configuration and re-apply the retention bound.

        Args:
            **changes: Fields to change on the current configuration.

        Returns:
            The new configuration.
        """
        self._config = with_defaults(self.config_type, changes, base=self._config)
        self.evict_if_over_capacity()
        return self._config

    def record(self, entry: EntryT) -> bool:
        """Append an entry, evicting the oldest if over capacity.

        Args:
            entry: Entry to append.

        Returns:
            True if recorded, False if the entry was rejected.
        """
        if not isinstance(entry, self.entry_type):
            logger.warning(
                f"{type(self).__name__} rejected entry of type {type(entry).__name__}"
            )
            return False

        problem = self._validate_entry(entry)
        if problem:
            logger.warning(f"{type(self).__name__} rejected entry: {problem}")
            return False

        self._append(entry)
        evicted = self.evict_if_over_capacity()
        if evicted:
            logger.debug(f"{type(self).__name__} evicted {evicted} item(s)")
        return True

    @abstractmethod
    def entries(self, domain_key: Any = None) -> tuple[EntryT, ...]:
        """Return retained entries in sequence order (read-only)."""

    @abstractmethod
    def evict_if_over_capacity(self) -> int:
        """Drop the oldest items until within bounds.

        Returns:
            Number of items evicted (entries, or rounds for round-keyed stores).
        """

    @abstractmethod
    def clear(self, domain_key: Any = None) -> None:
        """Clear one domain key, or everything when domain_key is None."""

    def _validate_entry(self, entry: EntryT) -> str | None:
        """Return a reason string if the entry is malformed."""
        return None

    @abstractmethod
    def _append(self, entry: EntryT) -> None:
        """Store a validated entry."""


def is_str_tuple(value: object) -> bool:
    """True for a tuple whose items are all strings."""
    return isinstance(value, tuple) and all(isinstance(item, str) for item in value)
