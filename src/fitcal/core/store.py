"""In-memory client/session store, persisted through a RecordStore port."""

import logging
from dataclasses import replace
from datetime import date

from fitcal.ports.record_store import RecordStore

from .errors import InvalidInput, NotFound
from .interval import TimeInterval
from .models import ALLOWED_DURATIONS, Client, Session, TrainingType

logger = logging.getLogger(__name__)

CLIENTS = "clients"
SESSIONS = "sessions"


class SessionStore:
    """
    Sole owner of client and session records.

    Records are kept in insertion-ordered maps keyed by id. Every mutation
    writes the whole collection through the RecordStore before it becomes
    visible, so a failed write leaves the store unchanged.
    """

    def __init__(self, records: RecordStore, durations: tuple[int, ...] = ALLOWED_DURATIONS):
        self.records = records
        self.durations = tuple(durations)
        self._clients: dict[str, Client] = {}
        self._sessions: dict[str, Session] = {}
        self.reload()
        for session in self._sessions.values():
            if session.client_id not in self._clients:
                logger.warning(f"Session {session.id} references unknown client {session.client_id}")

    def reload(self) -> None:
        """Re-read both collections, dropping anything held in memory.

        Long-running processes call this before each unit of work so that
        records written by another process (the CLI) are never overwritten.
        """
        self._clients = {c.id: c for c in (Client.from_record(r) for r in self.records.load(CLIENTS))}
        self._sessions = {s.id: s for s in (Session.from_record(r) for r in self.records.load(SESSIONS))}

    # ============== Clients ==============

    def add_client(self, client: Client) -> Client:
        """Add a new client. Returns the stored record."""
        if client.id in self._clients:
            raise InvalidInput(f"Client already exists: {client.id}")
        client = self._validate_client(client)
        self._commit_clients({**self._clients, client.id: client})
        return client

    def get_client(self, client_id: str) -> Client:
        try:
            return self._clients[client_id]
        except KeyError:
            raise NotFound("Client", client_id) from None

    def update_client(self, client: Client) -> Client:
        """Replace an existing client record."""
        if client.id not in self._clients:
            raise NotFound("Client", client.id)
        client = self._validate_client(client)
        self._commit_clients({**self._clients, client.id: client})
        return client

    def list_clients(self) -> list[Client]:
        return list(self._clients.values())

    def _validate_client(self, client: Client) -> Client:
        if not client.name.strip():
            raise InvalidInput("Client name is required")
        if client.module_count < 0:
            raise InvalidInput(f"Module count cannot be negative: {client.module_count}")
        if client.training_type != TrainingType.MODULE and client.module_count:
            client = replace(client, module_count=0)
        return client

    # ============== Sessions ==============

    def add_session(self, session: Session) -> Session:
        """Add a new session for an existing client."""
        if session.id in self._sessions:
            raise InvalidInput(f"Session already exists: {session.id}")
        self._validate_session(session)
        self._commit_sessions({**self._sessions, session.id: session})
        return session

    def get_session(self, session_id: str) -> Session:
        try:
            return self._sessions[session_id]
        except KeyError:
            raise NotFound("Session", session_id) from None

    def update_session(self, session: Session) -> Session:
        """Replace an existing session record.

        The completed, deduction and notification flags only ever go from False to True.
        """
        current = self.get_session(session.id)
        if current.module_deducted and not session.module_deducted:
            raise InvalidInput(f"Cannot undo module deduction for session {session.id}")
        if current.notification_sent and not session.notification_sent:
            raise InvalidInput(f"Cannot unsend reminder for session {session.id}")
        if current.completed and not session.completed:
            raise InvalidInput(f"Cannot reopen completed session {session.id}")
        if (session.client_id, session.duration, session.lead_minutes) != (
            current.client_id,
            current.duration,
            current.lead_minutes,
        ):
            self._validate_session(session)
        self._commit_sessions({**self._sessions, session.id: session})
        return session

    def list_sessions(self) -> list[Session]:
        return list(self._sessions.values())

    def sessions_for_client(self, client_id: str) -> list[Session]:
        """All sessions for a client, in no particular order."""
        return [s for s in self._sessions.values() if s.client_id == client_id]

    def sessions_on(self, day: date) -> list[Session]:
        """Sessions starting on a given date, sorted by start."""
        return sorted(
            (s for s in self._sessions.values() if s.start.date() == day),
            key=lambda s: s.start,
        )

    def find_conflicts(self, interval: TimeInterval, exclude_id: str | None = None) -> list[Session]:
        """Every stored session whose interval overlaps the given one."""
        return [
            s
            for s in self._sessions.values()
            if s.id != exclude_id and s.interval.overlaps(interval)
        ]

    def _validate_session(self, session: Session) -> None:
        if session.duration not in self.durations:
            raise InvalidInput(
                f"Duration must be one of {', '.join(map(str, self.durations))} minutes, got {session.duration}"
            )
        if session.lead_minutes <= 0:
            raise InvalidInput(f"Reminder lead time must be positive, got {session.lead_minutes}")
        if session.client_id not in self._clients:
            raise NotFound("Client", session.client_id)

    # ============== Persistence ==============

    def _commit_clients(self, clients: dict[str, Client]) -> None:
        self.records.save(CLIENTS, [c.to_record() for c in clients.values()])
        self._clients = clients

    def _commit_sessions(self, sessions: dict[str, Session]) -> None:
        self.records.save(SESSIONS, [s.to_record() for s in sessions.values()])
        self._sessions = sessions
