from __future__ import annotations

import json
from pathlib import Path
from typing import Any

DEFAULT_DATE_FORMAT = "%d/%m/%Y %H:%M:%S"


class ConfigStore:
    def __init__(self, app_name: str = "fileops", config_dir: Path | None = None) -> None:
        self._config_dir = config_dir or Path.home() / ".config" / app_name
        self._config_dir.mkdir(parents=True, exist_ok=True)
        self._config_path = self._config_dir / "config.json"
        self._data: dict[str, Any] = {}
        self._load()

    @property
    def path(self) -> Path:
        return self._config_path

    def _load(self) -> None:
        if not self._config_path.exists():
            return
        try:
            data = json.loads(self._config_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            data = {}
        self._data = data if isinstance(data, dict) else {}

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def get_str(self, key: str, default: str = "") -> str:
        value = self._data.get(key, default)
        if value is None:
            return default
        return str(value)

    def get_int(self, key: str, default: int = 0) -> int:
        value = self._data.get(key, default)
        if isinstance(value, bool):
            return default
        try:
            return int(value)
        except (TypeError, ValueError):
            return default

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value

    def get_bool(self, key: str, default: bool = False) -> bool:
        value = self._data.get(key, default)
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            return value.lower() in {"1", "true", "yes", "on"}
        return bool(value)

    def date_format(self) -> str:
        return self.get_str("date_format", DEFAULT_DATE_FORMAT) or DEFAULT_DATE_FORMAT

    def save(self) -> None:
        try:
            self._config_path.write_text(
                json.dumps(self._data, indent=2, sort_keys=True),
                encoding="utf-8",
            )
        except OSError:
            pass

    def clear(self) -> None:
        self._data = {}
        try:
            if self._config_path.exists():
                self._config_path.unlink()
        except OSError:
            pass
