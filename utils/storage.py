import asyncio
import json
import logging
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional

from settings import STATE_DIR

logger = logging.getLogger(__name__)


class StateStore:
    """One JSON-file key/value namespace with buffered writes

    Reads are served from an in-memory cache loaded at construction. Writes
    only touch the cache until flush() persists them. Setting a key to None
    deletes it.
    """

    def __init__(self, path: Path, secure: bool = False):
        self.path = Path(path)
        self.secure = secure
        self._cache: Dict[str, Any] = self._read_file()
        self._dirty = False

    def _read_file(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}

        try:
            data = json.loads(self.path.read_text())
        except (json.JSONDecodeError, IOError) as e:
            logger.error(f"Failed to read state file {self.path}: {e}")
            return {}

        if not isinstance(data, dict):
            logger.warning(f"Ignoring malformed state file {self.path}")
            return {}
        return data

    def get(self, key: str, default: Any = None) -> Any:
        return self._cache.get(key, default)

    def set(self, key: str, value: Any) -> None:
        if value is None:
            if key in self._cache:
                del self._cache[key]
                self._dirty = True
            return
        self._cache[key] = value
        self._dirty = True

    def read_from_disk(self, key: str) -> Any:
        """Read a key straight from the file, bypassing the cache"""
        return self._read_file().get(key)

    @property
    def has_pending_writes(self) -> bool:
        return self._dirty

    def flush(self) -> None:
        """Persist the cache to disk atomically

        The file is written to a sibling temp file, fsynced, then renamed over
        the original so a crash never leaves a half-written state file.
        """
        if not self._dirty:
            return

        parent_dir = self.path.parent
        if not parent_dir.exists():
            parent_dir.mkdir(parents=True, exist_ok=True)
            # Set directory permissions to 700 on Unix-like systems
            if platform.system() != "Windows":
                os.chmod(parent_dir, 0o700)

        fd, tmp_name = tempfile.mkstemp(dir=parent_dir, prefix=f".{self.path.name}.")
        try:
            with os.fdopen(fd, "w") as f:
                json.dump(self._cache, f, indent=2)
                f.flush()
                os.fsync(f.fileno())
            # Set file permissions to 600 on Unix-like systems
            if self.secure and platform.system() != "Windows":
                os.chmod(tmp_name, 0o600)
            os.replace(tmp_name, self.path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

        self._dirty = False
        logger.debug(f"Flushed state to {self.path}")


class StateManager:
    """Durable key/value storage with a secret and a general namespace

    This is the storage contract the auth service consumes: getters and
    setters per namespace plus flush_pending_state(), which does not return
    until every pending write is on disk.
    """

    def __init__(self, state_dir: Optional[str] = None):
        self.state_dir = Path(state_dir if state_dir else STATE_DIR).expanduser()
        self.secrets = StateStore(self.state_dir / "secrets.json", secure=True)
        self.global_state = StateStore(self.state_dir / "state.json")

    def get_secret_key(self, key: str) -> Optional[str]:
        return self.secrets.get(key)

    def set_secret(self, key: str, value: Optional[str]) -> None:
        self.secrets.set(key, value)

    def get_global_state_key(self, key: str) -> Any:
        return self.global_state.get(key)

    def set_global_state(self, key: str, value: Any) -> None:
        self.global_state.set(key, value)

    def read_global_state_from_disk(self, key: str) -> Any:
        """Secondary read path used when the cache may predate a reload"""
        return self.global_state.read_from_disk(key)

    def _flush_all(self) -> None:
        self.secrets.flush()
        self.global_state.flush()

    async def flush_pending_state(self) -> None:
        """Write all pending secret and state changes to disk"""
        await asyncio.to_thread(self._flush_all)
