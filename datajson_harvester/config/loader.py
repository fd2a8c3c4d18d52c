"""Configuration loading helpers for the harvester."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path

import yaml

from .models import HarvestConfig

CONFIG_EXTENSIONS = (".yaml", ".yml", ".json")
CONFIG_STEM = "harvest_config"
HOME_ENV_VAR = "DATAJSON_HARVESTER_HOME"


def _read_file(path: Path) -> dict:
    text = path.read_text(encoding="utf-8")
    if path.suffix in (".yaml", ".yml"):
        data = yaml.safe_load(text) or {}
    else:
        data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError(f"Configuration file must contain a mapping: {path}")
    return data


def _write_file(path: Path, payload: dict) -> None:
    with path.open("w", encoding="utf-8") as stream:
        if path.suffix in (".yaml", ".yml"):
            yaml.safe_dump(payload, stream, allow_unicode=True, sort_keys=False)
        else:
            json.dump(payload, stream, indent=2, ensure_ascii=False)


@dataclass(slots=True)
class ConfigLocator:
    """Resolve every file the pipeline reads or writes from the project root."""

    project_root: Path | None = None
    data_dir: Path | None = None
    agencies_dir: Path | None = None
    logs_dir: Path | None = None

    def __post_init__(self) -> None:
        env_root = os.environ.get(HOME_ENV_VAR)
        if self.project_root is not None:
            root = Path(self.project_root).expanduser().resolve()
        elif env_root:
            root = Path(env_root).expanduser().resolve()
        else:
            root = Path(__file__).resolve().parents[2]
        self.project_root = root
        self.data_dir = (root / "data").resolve()
        self.agencies_dir = (self.data_dir / "agencies").resolve()
        self.logs_dir = (root / "logs").resolve()
        self.ensure_directories()

    def ensure_directories(self) -> None:
        for directory in (self.data_dir, self.agencies_dir, self.logs_dir):
            directory.mkdir(parents=True, exist_ok=True)

    def config_path(self) -> Path:
        """Return the first existing config file by extension, else the YAML default."""

        for suffix in CONFIG_EXTENSIONS:
            candidate = self.data_dir / f"{CONFIG_STEM}{suffix}"
            if candidate.is_file():
                return candidate
        return self.data_dir / f"{CONFIG_STEM}{CONFIG_EXTENSIONS[0]}"

    @property
    def directory_csv(self) -> Path:
        return self.data_dir / "dotgov.csv"

    @property
    def inventory_list(self) -> Path:
        return self.data_dir / "inventory-list.json"

    @property
    def combined_json(self) -> Path:
        return self.data_dir / "master-inventory.json"

    @property
    def combined_csv(self) -> Path:
        return self.data_dir / "master-inventory.csv"


class ConfigRepository:
    """Repository encapsulating config IO and schema validation."""

    def __init__(self, locator: ConfigLocator | None = None) -> None:
        self.locator = locator or ConfigLocator()
        self._cache: HarvestConfig | None = None

    def load_config(self) -> HarvestConfig:
        if self._cache is not None:
            return self._cache
        path = self.locator.config_path()
        if path.exists():
            config = HarvestConfig.model_validate(_read_file(path))
        else:
            config = HarvestConfig()
            self.save_config(config)
        self._cache = config
        return config

    def save_config(self, config: HarvestConfig) -> None:
        _write_file(self.locator.config_path(), config.model_dump(mode="json"))
        self._cache = config


__all__ = ["CONFIG_EXTENSIONS", "ConfigLocator", "ConfigRepository", "HOME_ENV_VAR"]
