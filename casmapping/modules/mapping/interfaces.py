"""Session mapping interfaces following Black Box Design principles."""
from typing import Optional, Protocol


class SessionMappingStorage(Protocol):
    """Protocol for ticket <-> session mapping backends."""

    async def add(self, mapping_id: str, session_id: str) -> None:
        """
        Associate a ticket with a session.

        Args:
            mapping_id: Ticket issued by the CAS server
            session_id: Local session identifier
        """
        ...

    async def remove_by_session_id(self, session_id: str) -> None:
        """Drop the association held for a session, if any."""
        ...

    async def remove_by_mapping_id(self, mapping_id: str) -> Optional[str]:
        """
        Drop the association held for a ticket.

        Returns:
            The session id that was associated, or None
        """
        ...
