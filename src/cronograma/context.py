"""Global state shared by the CLI callback and its commands."""

from __future__ import annotations

from pathlib import Path

from .unified_config import DEFAULT_CONFIG_FILE, UnifiedConfig, load_unified_config


class _Context:
    def __init__(self) -> None:
        self.config_path: Path | None = None
        self.config: UnifiedConfig | None = None


_context = _Context()


def set_config_path(path: Path | None) -> None:
    """Select the config file for the current invocation and drop any cached config."""
    _context.config_path = path
    _context.config = None


def get_config() -> UnifiedConfig:
    """Load the selected config file once.

    Without ``--config``, ``cronograma_config.yaml`` in the working directory
    is used when present, else the defaults.

    Raises:
        FileNotFoundError: If an explicitly selected file doesn't exist
        ValueError: If the file is invalid
    """
    if _context.config is None:
        path = _context.config_path
        if path is None and Path(DEFAULT_CONFIG_FILE).exists():
            path = Path(DEFAULT_CONFIG_FILE)
        _context.config = load_unified_config(path) if path is not None else UnifiedConfig()
    return _context.config
