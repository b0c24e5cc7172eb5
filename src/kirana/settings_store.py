"""Settings storage for kirana."""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from .errors import ValidationError, WriteError
from .record_store import DATA_DIR

logger = logging.getLogger(__name__)

SETTINGS_FILE = "settings.json"

THEMES = ("dark", "light")

# Default value per key; each key is stored and read on its own
DEFAULTS: dict[str, Any] = {
    "theme": "dark",
    "apiKey": "",
    "aiEnabled": False,
}


class SettingsStore:
    """Flat key-value settings kept apart from the record store."""

    def __init__(self, data_dir: Path | None = None):
        """
        Initialize SettingsStore.

        Args:
            data_dir: Override data directory (for testing).
        """
        self.data_dir = Path(data_dir) if data_dir is not None else DATA_DIR
        self.settings_path = self.data_dir / SETTINGS_FILE

    def _load_data(self) -> dict[str, Any]:
        if not self.settings_path.exists():
            return {}
        try:
            with open(self.settings_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(
                "Unreadable settings file, using defaults",
                extra={"path": str(self.settings_path), "error": str(e)},
            )
            return {}
        return data if isinstance(data, dict) else {}

    def _save_data(self, data: dict[str, Any]) -> None:
        """Save settings to disk atomically."""
        self.data_dir.mkdir(parents=True, exist_ok=True)
        fd, temp_path = tempfile.mkstemp(
            dir=self.data_dir, prefix=".settings_", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
                f.write("\n")
            os.replace(temp_path, self.settings_path)
        except Exception:
            try:
                os.unlink(temp_path)
            except OSError:
                pass
            raise

    def get(self, key: str) -> Any:
        """Read one setting, falling back to its default."""
        if key not in DEFAULTS:
            raise ValidationError("setting", f"unknown key '{key}'")
        return self._load_data().get(key, DEFAULTS[key])

    def set(self, key: str, value: Any) -> None:
        """
        Write one setting, leaving every other key as stored.

        Raises:
            ValidationError: If the key is unknown or the value has the wrong shape.
            WriteError: If the settings file cannot be written.
        """
        if key not in DEFAULTS:
            raise ValidationError("setting", f"unknown key '{key}'")
        if key == "theme" and value not in THEMES:
            raise ValidationError("theme", f"must be one of {', '.join(THEMES)}")
        if key == "aiEnabled" and not isinstance(value, bool):
            raise ValidationError("aiEnabled", "must be true or false")
        if key == "apiKey" and not isinstance(value, str):
            raise ValidationError("apiKey", "must be a string")

        data = self._load_data()
        data[key] = value
        try:
            self._save_data(data)
        except OSError as e:
            raise WriteError("settings", str(e)) from e

    def all(self) -> dict[str, Any]:
        """Return every setting with defaults filled in."""
        data = self._load_data()
        return {key: data.get(key, default) for key, default in DEFAULTS.items()}

    @property
    def theme(self) -> str:
        return self.get("theme")

    @property
    def api_key(self) -> str:
        return self.get("apiKey")

    @property
    def ai_enabled(self) -> bool:
        return self.get("aiEnabled")

    def toggle_theme(self) -> str:
        """Switch between dark and light; returns the new theme."""
        new_theme = "light" if self.theme == "dark" else "dark"
        self.set("theme", new_theme)
        return new_theme
