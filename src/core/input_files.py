from __future__ import annotations

import logging
from pathlib import Path


logger = logging.getLogger("tms.input_files")

ALLOWED_EXTENSIONS = (
    ".txt", ".md", ".markdown",
    ".js", ".jsx", ".ts", ".tsx", ".json",
    ".html", ".htm", ".css", ".scss", ".less",
    ".xml", ".svg", ".log", ".csv", ".yml", ".yaml",
    ".ini", ".conf", ".sh", ".bat", ".ps1",
)


class InputFileError(RuntimeError):
    pass


class InputTooLargeError(InputFileError):
    def __init__(self, path: Path, size: int, limit: int) -> None:
        self.path = path
        self.size = size
        self.limit = limit
        super().__init__(
            f"File too large ({size / 1024 / 1024:.1f}MB). "
            f"Limit is {limit / 1024 / 1024:.1f}MB."
        )


def is_text_file(path: Path) -> bool:
    return path.name.lower().endswith(ALLOWED_EXTENSIONS)


def read_text_file(
    path: Path,
    max_bytes: int,
    encoding: str = "utf-8",
    check_extension: bool = True,
) -> str:
    if not path.is_file():
        raise InputFileError(f"File not found: {path}")
    size = path.stat().st_size
    if size > max_bytes:
        raise InputTooLargeError(path, size, max_bytes)
    if check_extension and not is_text_file(path):
        raise InputFileError(
            f"Unsupported file type: {path.name}. Please use a text file."
        )
    try:
        text = path.read_text(encoding=encoding)
    except (OSError, LookupError, UnicodeDecodeError) as exc:
        raise InputFileError(f"Could not read {path}: {exc}") from exc
    logger.info("Loaded input file. path=%s chars=%s", path, len(text))
    return text
