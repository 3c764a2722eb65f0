"""Preservation toggle: the persisted switch gating writes, detection and recovery."""

import logging

from material_guard.storage.base import KeyValueStore, StorageError

logger = logging.getLogger(__name__)


class PreservationToggle:
    """Persisted boolean, read on every call.

    Only the literal "false" disables preservation; a missing, unreadable or
    unrecognised value falls back to ``default``.
    """

    def __init__(self, store: KeyValueStore, key: str, default: bool = True):
        self.store = store
        self.key = key
        self.default = default

    def is_enabled(self) -> bool:
        try:
            raw = self.store.get(self.key)
        except StorageError as e:
            logger.warning(f"Preservation flag unreadable, using default {self.default}: {e}")
            return self.default

        if raw is None:
            return self.default
        if raw == "false":
            return False
        if raw == "true":
            return True
        return self.default

    def set_enabled(self, enabled: bool) -> bool:
        """Persist the flag.

        Returns:
            True if the value was stored, False if the store rejected it

        Raises:
            TypeError: If ``enabled`` is not a bool
        """
        if not isinstance(enabled, bool):
            raise TypeError(f"enabled must be a bool, got {type(enabled).__name__}")

        try:
            self.store.set(self.key, "true" if enabled else "false")
        except StorageError as e:
            logger.error(f"Failed to persist preservation flag: {e}")
            return False

        logger.info(f"Material preservation {'enabled' if enabled else 'disabled'}")
        return True

    def initialize(self) -> None:
        """Write the default if no flag has been persisted yet."""
        try:
            if self.store.get(self.key) is not None:
                return
        except StorageError as e:
            logger.warning(f"Preservation flag unreadable during init: {e}")
            return
        self.set_enabled(self.default)
