"""
ledger_config -- single public entrypoint for ledger configuration.

Responsibility:
    Provides the ONLY way to obtain configuration at runtime through
    ``get_active_settings()``.  Returns a frozen ``LedgerSettings`` built
    from the packaged ``defaults.yaml`` with an optional override file
    deep-merged over it.

Architecture position:
    Configuration.  Sits above ``ledger_kernel`` and below
    ``ledger_modules``.  The kernel MUST NEVER import from
    ``ledger_config``; ``ledger_config.bridges`` translates settings into
    kernel inputs (PostingPolicy, engine, services).

Failure modes:
    - ``FileNotFoundError`` -- the override file does not exist.
    - ``ConfigurationError`` (a ``ValueError``) -- invalid YAML, unknown
      keys or out-of-range values.
"""

from __future__ import annotations

import logging
from pathlib import Path

from ledger_config.loader import load_merged
from ledger_config.settings import ConfigurationError, LedgerSettings, settings_from_mapping

_logger = logging.getLogger("ledger_kernel.config")


def get_active_settings(config_path: Path | str | None = None) -> LedgerSettings:
    """The ONLY public configuration entrypoint.

    Args:
        config_path: Optional YAML file whose keys override the defaults.

    Returns:
        LedgerSettings, validated and frozen.

    Raises:
        FileNotFoundError: If ``config_path`` does not exist.
        ConfigurationError: If the merged configuration is invalid.
    """
    path = Path(config_path) if config_path is not None else None
    settings = settings_from_mapping(load_merged(path))

    _logger.info(
        "ledger_config_loaded",
        extra={
            "config_path": str(path) if path else None,
            "isolation_level": settings.isolation_level,
            "entry_number_prefix": settings.entry_number_prefix,
            "balance_tolerance": str(settings.balance_tolerance),
            "strict_account_resolution": settings.strict_account_resolution,
        },
    )
    return settings


__all__ = [
    "ConfigurationError",
    "LedgerSettings",
    "get_active_settings",
]
