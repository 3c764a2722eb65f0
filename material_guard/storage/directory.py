"""Directory-backed durable store.

Each key is a file under the store directory. Writes go to a temporary file
first and are moved into place, so a crash mid-write leaves the previous
value intact.
"""

import errno
import os
import tempfile
from pathlib import Path
from typing import List, Optional, Union
from urllib.parse import quote, unquote

from .base import KeyValueStore, QuotaExceededError, StorageReadError, StorageWriteError

# Filesystem errors that mean "out of space"
_QUOTA_ERRNOS = {errno.ENOSPC, getattr(errno, "EDQUOT", errno.ENOSPC)}

FILE_SUFFIX = ".value"


class DirectoryStore(KeyValueStore):
    """Durable store keeping one file per key.

    Attributes:
        root: Directory holding the value files (created on first write)
    """

    durable = True

    def __init__(self, root: Union[str, Path], encoding: str = "utf-8"):
        super().__init__()
        self.root = Path(root)
        self.encoding = encoding

    def _path_for(self, key: str) -> Path:
        # Percent-encode so any key maps to exactly one safe filename
        return self.root / (quote(key, safe="") + FILE_SUFFIX)

    def get(self, key: str) -> Optional[str]:
        path = self._path_for(key)
        try:
            return path.read_text(encoding=self.encoding)
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            raise StorageReadError(f"Failed to read '{key}' from {path}: {e}") from e

    def set(self, key: str, value: str) -> None:
        if not isinstance(value, str):
            raise TypeError(f"Store values must be str, got {type(value).__name__}")

        path = self._path_for(key)
        tmp_name = None
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.root, prefix=".tmp-", suffix=FILE_SUFFIX)
            with os.fdopen(fd, "w", encoding=self.encoding) as f:
                f.write(value)
            os.replace(tmp_name, path)
            tmp_name = None
            self.logger.debug(f"Wrote {len(value)} chars to {path.name}")
        except OSError as e:
            if e.errno in _QUOTA_ERRNOS:
                raise QuotaExceededError(f"No space left writing '{key}': {e}") from e
            raise StorageWriteError(f"Failed to write '{key}' to {path}: {e}") from e
        finally:
            if tmp_name is not None:
                try:
                    os.unlink(tmp_name)
                except OSError:
                    self.logger.debug(f"Could not remove temp file {tmp_name}")

    def remove(self, key: str) -> None:
        try:
            self._path_for(key).unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            raise StorageWriteError(f"Failed to remove '{key}': {e}") from e

    def keys(self) -> List[str]:
        if not self.root.is_dir():
            return []
        return sorted(
            unquote(p.name[: -len(FILE_SUFFIX)])
            for p in self.root.iterdir()
            if p.is_file() and p.name.endswith(FILE_SUFFIX) and not p.name.startswith(".tmp-")
        )

    def describe(self) -> str:
        return f"DirectoryStore ({self.root})"
