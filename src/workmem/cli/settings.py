"""Settings resolution shared by the CLI commands."""

from __future__ import annotations

import logging
from typing import Any

import typer

from workmem.config import Settings, load_settings
from workmem.errors import ConfigError
from workmem.observability.logging import configure_logging

logger = logging.getLogger("workmem.cli")


def settings_or_exit(**overrides: Any) -> Settings:
    """Resolve settings and configure console logging, exiting 1 on ConfigError."""
    try:
        settings = load_settings(**overrides)
    except ConfigError as e:
        configure_logging(json_format=False)
        logger.error(str(e))
        raise typer.Exit(code=1) from e
    configure_logging(json_format=False, level=settings.log_level)
    return settings
