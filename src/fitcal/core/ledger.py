"""Prepaid module accounting."""

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime

from .errors import NotFound
from .models import Session
from .store import SessionStore

logger = logging.getLogger(__name__)


@dataclass
class LedgerReport:
    """What a ledger tick did."""

    deducted: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)


class ModuleLedger:
    """
    Deducts one prepaid session from a module client once a session has started.

    Each started session is processed once and then marked completed. Sessions
    that can't be charged at that point (no client, not on a module plan, or
    no sessions left) stay undeducted for good: balances never go negative
    and a later top-up doesn't pay for them retroactively.
    """

    def __init__(self, store: SessionStore):
        self.store = store

    def tick(self, now: datetime) -> LedgerReport:
        report = LedgerReport()
        for session in self.store.list_sessions():
            if session.module_deducted or session.completed or not session.start < now:
                continue
            if self._deduct(session):
                report.deducted.append(session.id)
            else:
                report.skipped.append(session.id)
                self.store.update_session(replace(session, completed=True))
        return report

    def _deduct(self, session: Session) -> bool:
        try:
            client = self.store.get_client(session.client_id)
        except NotFound:
            logger.warning(f"Session {session.id} has no client {session.client_id}, not deducting")
            return False

        if not client.is_module:
            return False
        if client.module_count <= 0:
            logger.info(f"{client.name} has no module sessions left, session {session.id} not deducted")
            return False

        # Session first: a failed client write loses one charge, never takes two
        self.store.update_session(replace(session, module_deducted=True, completed=True))
        self.store.update_client(replace(client, module_count=client.module_count - 1))
        logger.info(
            f"Deducted session {session.id} from {client.name}, {client.module_count - 1} remaining"
        )
        return True
