from __future__ import annotations

import codecs
import json
from dataclasses import asdict, dataclass
from pathlib import Path

from src.core.runtime_paths import config_path_default


DEFAULT_MAX_SOURCE_BYTES = 512 * 1024
DEFAULT_MAX_RULES_BYTES = 50 * 1024
OUTPUT_FORMATS = ("text", "html", "segments")


@dataclass
class AppConfig:
    max_source_bytes: int = DEFAULT_MAX_SOURCE_BYTES
    max_rules_bytes: int = DEFAULT_MAX_RULES_BYTES
    output_format: str = "text"
    encoding: str = "utf-8"
    check_extensions: bool = True

    @classmethod
    def defaults(cls) -> "AppConfig":
        return cls()


def _positive_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def _known_encoding(value: object) -> bool:
    if not isinstance(value, str) or not value.strip():
        return False
    try:
        codecs.lookup(value)
    except LookupError:
        return False
    return True


class ConfigStore:
    def __init__(self, path: Path):
        self.path = path

    @classmethod
    def default(cls) -> "ConfigStore":
        return cls(config_path_default())

    def load(self) -> AppConfig:
        if not self.path.exists():
            cfg = AppConfig.defaults()
            self.save(cfg)
            return cfg

        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            return AppConfig.defaults()
        if not isinstance(raw, dict):
            return AppConfig.defaults()

        cfg = AppConfig.defaults()
        should_save = False
        for key, value in raw.items():
            if hasattr(cfg, key):
                setattr(cfg, key, value)
        if not _positive_int(cfg.max_source_bytes):
            cfg.max_source_bytes = DEFAULT_MAX_SOURCE_BYTES
            should_save = True
        if not _positive_int(cfg.max_rules_bytes):
            cfg.max_rules_bytes = DEFAULT_MAX_RULES_BYTES
            should_save = True
        if cfg.output_format not in OUTPUT_FORMATS:
            cfg.output_format = "text"
            should_save = True
        if not _known_encoding(cfg.encoding):
            cfg.encoding = "utf-8"
            should_save = True
        if not isinstance(cfg.check_extensions, bool):
            cfg.check_extensions = True
            should_save = True
        if should_save:
            self.save(cfg)
        return cfg

    def save(self, config: AppConfig) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(
            json.dumps(asdict(config), indent=2, ensure_ascii=True),
            encoding="utf-8",
        )
