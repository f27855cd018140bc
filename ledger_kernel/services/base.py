"""
BaseService -- abstract base for all kernel services.

Responsibility:
    Common constructor and session-handling contract for every write-side
    service.  Services persist through ``session.flush()`` inside the
    caller's transaction.

Invariants enforced:
    - Building-block services (AccountStore, SequenceService,
      EntryGenerator, AutoJournalService) never commit or roll back.
      Only JournalEntryService owns a transaction boundary, and only when
      constructed with ``auto_commit=True``.
"""

from abc import ABC
from typing import Generic, TypeVar

from sqlalchemy.orm import Session

from ledger_kernel.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseService(ABC, Generic[ModelType]):
    """
    Abstract base class for all kernel services.

    Non-goals:
        - Does NOT provide read-only query methods; those belong in
          ``ledger_kernel/selectors/``.
    """

    def __init__(self, session: Session):
        self.session = session
