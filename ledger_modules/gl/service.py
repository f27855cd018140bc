"""
General Ledger chart-of-accounts setup.

Flush-only; the caller commits.
"""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from ledger_kernel.logging_config import get_logger
from ledger_kernel.models.account import Account
from ledger_kernel.services.account_store import AccountStore
from ledger_modules.gl.chart import DEFAULT_ACCOUNTS, DefaultAccount

logger = get_logger("modules.gl.service")


def seed_default_accounts(
    session: Session,
    company_id: UUID,
    actor_id: UUID,
    accounts: tuple[DefaultAccount, ...] = DEFAULT_ACCOUNTS,
) -> dict[str, Account]:
    """
    Create the default chart of accounts for a company.

    Codes the company already has are left alone, so seeding twice is
    harmless.  Returns every seeded or pre-existing default account by code.
    """
    store = AccountStore(session)
    existing = {
        account.code: account
        for account in session.execute(
            select(Account).where(
                Account.company_id == company_id,
                Account.code.in_([a.code for a in accounts]),
            )
        ).scalars()
    }

    created = 0
    for definition in accounts:
        if definition.code in existing:
            continue
        existing[definition.code] = store.create_account(
            company_id=company_id,
            code=definition.code,
            name=definition.name,
            account_type=definition.account_type.value,
            created_by_id=actor_id,
            normal_balance=definition.normal_balance,
            detail_type=definition.detail_type,
            description=definition.description,
        )
        created += 1

    logger.info(
        "default_accounts_seeded",
        extra={
            "company_id": str(company_id),
            "created_count": created,
            "skipped_count": len(accounts) - created,
        },
    )
    return existing
