from __future__ import annotations

import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .utils.io import read_json, write_json


@dataclass
class LoggingConfig:
    level: str = "INFO"
    log_dir: str = "logs"
    filename: str = "quizbank.log"

    def file_path(self) -> Path:
        return Path(self.log_dir) / self.filename


@dataclass
class StorageConfig:
    data_dir: str = os.getenv("QUIZBANK_DATA_DIR", ".quizbank")


@dataclass
class SessionConfig:
    seed: Optional[int] = None  # None: shuffle with the global RNG


@dataclass
class AppConfig:
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    session: SessionConfig = field(default_factory=SessionConfig)

    @staticmethod
    def from_dict(payload: Dict[str, Any]) -> "AppConfig":
        return AppConfig(
            logging=LoggingConfig(**(payload.get("logging") or {})),
            storage=StorageConfig(**(payload.get("storage") or {})),
            session=SessionConfig(**(payload.get("session") or {})),
        )

    @staticmethod
    def from_json(path: str | Path) -> "AppConfig":
        return AppConfig.from_dict(read_json(path))

    @staticmethod
    def from_yaml(path: str | Path) -> "AppConfig":
        with open(path, "r", encoding="utf-8") as f:
            payload = yaml.safe_load(f) or {}
        return AppConfig.from_dict(payload)

    @staticmethod
    def from_file(path: str | Path) -> "AppConfig":
        if Path(path).suffix.lower() in {".yaml", ".yml"}:
            return AppConfig.from_yaml(path)
        return AppConfig.from_json(path)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "logging": asdict(self.logging),
            "storage": asdict(self.storage),
            "session": asdict(self.session),
        }

    def to_json(self, path: str | Path) -> None:
        write_json(path, self.to_dict())


def default_app_config() -> AppConfig:
    return AppConfig()
