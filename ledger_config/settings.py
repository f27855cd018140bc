"""
Ledger settings schema (``ledger_config.settings``).

Responsibility
--------------
Frozen dataclass holding every runtime knob of the posting engine, and the
validation that turns a merged YAML mapping into one.

Failure modes
-------------
* Unknown section or key  -> ``ConfigurationError``.
* Wrong type or out-of-range value  -> ``ConfigurationError``.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any

ISOLATION_LEVELS = frozenset(
    {
        "READ UNCOMMITTED",
        "READ COMMITTED",
        "REPEATABLE READ",
        "SERIALIZABLE",
        "AUTOCOMMIT",
    }
)

LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})

_KNOWN_KEYS: dict[str, frozenset[str]] = {
    "database": frozenset({"url", "isolation_level", "pool_size", "max_overflow", "echo"}),
    "numbering": frozenset({"entry_number_prefix", "entry_number_width"}),
    "posting": frozenset({"balance_tolerance", "strict_account_resolution"}),
    "logging": frozenset({"level"}),
}


class ConfigurationError(ValueError):
    """The configuration files do not describe a valid LedgerSettings."""


@dataclass(frozen=True)
class LedgerSettings:
    database_url: str
    isolation_level: str = "READ COMMITTED"
    pool_size: int = 20
    max_overflow: int = 10
    echo: bool = False
    entry_number_prefix: str = "JE-"
    entry_number_width: int = 4
    balance_tolerance: Decimal = Decimal("0.001")
    strict_account_resolution: bool = False
    log_level: str = "INFO"


def _require(condition: bool, key: str, message: str) -> None:
    if not condition:
        raise ConfigurationError(f"{key}: {message}")


def _int(value: Any, key: str, minimum: int) -> int:
    _require(
        isinstance(value, int) and not isinstance(value, bool),
        key,
        f"expected an integer, got {value!r}",
    )
    _require(value >= minimum, key, f"must be at least {minimum}")
    return value


def _bool(value: Any, key: str) -> bool:
    _require(isinstance(value, bool), key, f"expected true/false, got {value!r}")
    return value


def _str(value: Any, key: str) -> str:
    _require(isinstance(value, str) and value != "", key, "expected a non-empty string")
    return value


def _decimal(value: Any, key: str) -> Decimal:
    # YAML floats are routed through str so 0.001 stays exactly 0.001.
    _require(not isinstance(value, bool), key, f"expected a number, got {value!r}")
    try:
        result = Decimal(str(value))
    except InvalidOperation:
        raise ConfigurationError(f"{key}: expected a number, got {value!r}") from None
    _require(result.is_finite() and result >= 0, key, "must be a non-negative number")
    return result


def settings_from_mapping(data: dict[str, Any]) -> LedgerSettings:
    """Validate a merged configuration mapping and build LedgerSettings."""
    _require(isinstance(data, dict), "<root>", "expected a mapping")
    for section, values in data.items():
        _require(section in _KNOWN_KEYS, section, "unknown configuration section")
        _require(isinstance(values, dict), section, "expected a mapping")
        unknown = set(values) - _KNOWN_KEYS[section]
        _require(not unknown, section, f"unknown keys {sorted(unknown)}")

    database = data.get("database", {})
    numbering = data.get("numbering", {})
    posting = data.get("posting", {})
    logging_section = data.get("logging", {})

    _require("url" in database, "database.url", "is required")

    isolation_level = _str(
        database.get("isolation_level", "READ COMMITTED"), "database.isolation_level"
    ).upper()
    _require(
        isolation_level in ISOLATION_LEVELS,
        "database.isolation_level",
        f"must be one of {sorted(ISOLATION_LEVELS)}",
    )

    log_level = _str(logging_section.get("level", "INFO"), "logging.level").upper()
    _require(log_level in LOG_LEVELS, "logging.level", f"must be one of {sorted(LOG_LEVELS)}")

    return LedgerSettings(
        database_url=_str(database["url"], "database.url"),
        isolation_level=isolation_level,
        pool_size=_int(database.get("pool_size", 20), "database.pool_size", 1),
        max_overflow=_int(database.get("max_overflow", 10), "database.max_overflow", 0),
        echo=_bool(database.get("echo", False), "database.echo"),
        entry_number_prefix=_str(
            numbering.get("entry_number_prefix", "JE-"), "numbering.entry_number_prefix"
        ),
        entry_number_width=_int(
            numbering.get("entry_number_width", 4), "numbering.entry_number_width", 1
        ),
        balance_tolerance=_decimal(
            posting.get("balance_tolerance", "0.001"), "posting.balance_tolerance"
        ),
        strict_account_resolution=_bool(
            posting.get("strict_account_resolution", False),
            "posting.strict_account_resolution",
        ),
        log_level=log_level,
    )
