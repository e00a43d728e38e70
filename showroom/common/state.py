"""
Local Key-Value Store

File-based persistence for the catalog cache and admin settings.
One file per key; values are stored as raw JSON text so a corrupt entry
can be detected by the reader without affecting other keys.
"""

import os
import threading
from pathlib import Path

# Well-known keys
PRODUCTS_KEY = "products"
CASES_KEY = "cases"
CLOUD_SETTINGS_KEY = "cloudSettings"


class LocalStore:
    """
    Simple file-based key-value store.

    Uses file locking on Unix systems for safe concurrent access.
    On Windows, uses a simple write-and-rename approach.
    """

    def __init__(self, state_dir: Path | str):
        self.state_dir = Path(state_dir)
        self._lock = threading.Lock()

    def _ensure_dir(self) -> None:
        """Ensure state directory exists"""
        self.state_dir.mkdir(parents=True, exist_ok=True)

    def _get_path(self, key: str) -> Path:
        """Get file path for state key"""
        return self.state_dir / f"{key}.json"

    def set(self, key: str, value: str) -> None:
        """
        Write a raw value with file locking (Unix) or atomic rename (Windows).

        Args:
            key: State key (becomes filename without .json)
            value: JSON text to store
        """
        self._ensure_dir()
        path = self._get_path(key)

        with self._lock:
            if os.name == "nt":
                temp_path = path.with_suffix(".tmp")
                with open(temp_path, "w", encoding="utf-8") as f:
                    f.write(value)
                temp_path.replace(path)
            else:
                import fcntl
                with open(path, "w", encoding="utf-8") as f:
                    fcntl.flock(f.fileno(), fcntl.LOCK_EX)
                    try:
                        f.write(value)
                        f.flush()
                        os.fsync(f.fileno())
                    finally:
                        fcntl.flock(f.fileno(), fcntl.LOCK_UN)

    def get(self, key: str) -> str | None:
        """
        Read a raw value.

        Returns:
            Stored text, or None if the key was never written
        """
        path = self._get_path(key)
        if not path.exists():
            return None

        with self._lock:
            with open(path, "r", encoding="utf-8") as f:
                return f.read()

    def delete(self, key: str) -> bool:
        """
        Delete a key.

        Returns:
            True if deleted, False if not found
        """
        path = self._get_path(key)
        with self._lock:
            if path.exists():
                path.unlink()
                return True
        return False

    def list_keys(self) -> list[str]:
        """List all stored keys"""
        self._ensure_dir()
        return sorted(p.stem for p in self.state_dir.glob("*.json"))
