"""Abstract base class for key-value stores.

This module defines the interface that every store backing a storage tier must
implement. The contract mirrors a browser storage area: string keys, string
values, synchronous calls, and writes that may fail.
"""

from abc import ABC, abstractmethod
from typing import List, Optional
import logging


class StorageError(Exception):
    """Base class for store failures."""


class StorageReadError(StorageError):
    """A value could not be read from the store."""


class StorageWriteError(StorageError):
    """A value could not be written to the store."""


class QuotaExceededError(StorageWriteError):
    """The write would take the store past its capacity."""


class KeyValueStore(ABC):
    """Abstract base class for stores.

    Implementations are either durable (survive a process restart) or
    volatile (cleared when the owning context ends).

    Example:
        class DictStore(KeyValueStore):
            durable = False

            def get(self, key):
                return self._data.get(key)
            # ... implement other methods
    """

    durable: bool = True

    def __init__(self):
        """Initialize the store with a logger."""
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Read the value stored under a key.

        Returns:
            The stored string, or None if the key is absent

        Raises:
            StorageReadError: If the store exists but cannot be read
        """
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store a value, replacing any previous one.

        Raises:
            QuotaExceededError: If the store is full
            StorageWriteError: If the write fails for any other reason
        """
        pass

    @abstractmethod
    def remove(self, key: str) -> None:
        """Remove a key. Removing an absent key is not an error."""
        pass

    @abstractmethod
    def keys(self) -> List[str]:
        """List stored keys, sorted."""
        pass

    def describe(self) -> str:
        """Human-readable description used in status output."""
        kind = "durable" if self.durable else "volatile"
        return f"{self.__class__.__name__} ({kind})"


class GuardedStore(KeyValueStore):
    """Wraps a host store so every failure surfaces as a StorageError.

    Host adapters may raise anything (OSError, a browser-style quota
    exception, a driver error). The layer only catches StorageError, so
    other exceptions are translated here at the store boundary.

    Attributes:
        inner: The wrapped store; looked up on every call
    """

    def __init__(self, inner: KeyValueStore):
        super().__init__()
        self.inner = inner
        self.durable = inner.durable

    def get(self, key: str) -> Optional[str]:
        try:
            return self.inner.get(key)
        except StorageError:
            raise
        except Exception as e:
            raise StorageReadError(f"Store failed reading '{key}': {e!r}") from e

    def set(self, key: str, value: str) -> None:
        try:
            self.inner.set(key, value)
        except StorageError:
            raise
        except Exception as e:
            raise StorageWriteError(f"Store failed writing '{key}': {e!r}") from e

    def remove(self, key: str) -> None:
        try:
            self.inner.remove(key)
        except StorageError:
            raise
        except Exception as e:
            raise StorageWriteError(f"Store failed removing '{key}': {e!r}") from e

    def keys(self) -> List[str]:
        try:
            return self.inner.keys()
        except StorageError:
            raise
        except Exception as e:
            raise StorageReadError(f"Store failed listing keys: {e!r}") from e

    def describe(self) -> str:
        return self.inner.describe()
