from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

# GitHub caps `first:` on GraphQL connections at 100.
MAX_PAGE_SIZE = 100


class ConfigError(RuntimeError):
    """Raised when the audit configuration is invalid."""


@dataclass
class AuditConfig:
    """Configuration for a pull request audit."""

    base_url: str = "https://api.github.com"

    # Page sizes for each paginated connection
    commit_page_size: int = 100
    file_page_size: int = 100
    history_page_size: int = 100

    # Upper bound on pages fetched from any single connection
    max_pages: int = 1000

    # Files classified concurrently; 1 keeps enumerator order sequential
    workers: int = 1

    # Exit non-zero when any caught line is reported
    fail_on_caught: bool = False

    def validate(self) -> None:
        for name in ("commit_page_size", "file_page_size", "history_page_size"):
            value = getattr(self, name)
            if not isinstance(value, int) or not 1 <= value <= MAX_PAGE_SIZE:
                raise ConfigError(f"{name} must be between 1 and {MAX_PAGE_SIZE}, got {value!r}")
        if not isinstance(self.max_pages, int) or self.max_pages < 1:
            raise ConfigError(f"max_pages must be a positive integer, got {self.max_pages!r}")
        if not isinstance(self.workers, int) or self.workers < 1:
            raise ConfigError(f"workers must be a positive integer, got {self.workers!r}")


def load_config(path: str | Path | None) -> AuditConfig:
    """Load audit configuration from a JSON file, falling back to defaults."""
    if path is None:
        return AuditConfig()

    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigError(f"cannot read config {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"config {path} must contain a JSON object")

    config = AuditConfig()

    for key, value in data.items():
        if hasattr(config, key):
            setattr(config, key, value)

    return config
