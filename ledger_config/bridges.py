"""
Config -> Kernel Bridges.

Functions that convert LedgerSettings into kernel-compatible inputs.  They
live in ledger_config (the producer) because the kernel must NEVER import
ledger_config.

Usage:
    from ledger_config import get_active_settings
    from ledger_config.bridges import build_journal_service, init_engine_from_settings

    settings = get_active_settings("ledger.yaml")
    init_engine_from_settings(settings)
    with session_scope() as session:
        service = build_journal_service(session, settings, auto_commit=False)
"""

from __future__ import annotations

from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from ledger_config.settings import LedgerSettings
from ledger_kernel.db.engine import init_engine_from_url
from ledger_kernel.domain.clock import Clock
from ledger_kernel.domain.policy import PostingPolicy
from ledger_kernel.logging_config import configure_logging
from ledger_kernel.services.auto_journal import AutoJournalService
from ledger_kernel.services.journal_entry_service import JournalEntryService


def posting_policy_from_settings(settings: LedgerSettings) -> PostingPolicy:
    return PostingPolicy(
        balance_tolerance=settings.balance_tolerance,
        entry_number_prefix=settings.entry_number_prefix,
        entry_number_width=settings.entry_number_width,
        strict_account_resolution=settings.strict_account_resolution,
    )


def init_engine_from_settings(settings: LedgerSettings) -> Engine:
    """Configure logging at the settings' level, then build the engine."""
    configure_logging(level=settings.log_level)
    return init_engine_from_url(
        settings.database_url,
        echo=settings.echo,
        pool_size=settings.pool_size,
        max_overflow=settings.max_overflow,
        isolation_level=settings.isolation_level,
    )


def build_journal_service(
    session: Session,
    settings: LedgerSettings,
    clock: Clock | None = None,
    auto_commit: bool = True,
) -> JournalEntryService:
    return JournalEntryService(
        session,
        clock=clock,
        policy=posting_policy_from_settings(settings),
        auto_commit=auto_commit,
    )


def build_auto_journal(
    session: Session,
    settings: LedgerSettings,
    clock: Clock | None = None,
) -> AutoJournalService:
    return AutoJournalService(
        session,
        clock=clock,
        policy=posting_policy_from_settings(settings),
    )
