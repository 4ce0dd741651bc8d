"""
Redis-backed mapping between CAS tickets and local sessions.

Two index records describe one association:

    CASCLI:SESSIONID:<session_id>  -> <mapping_id>
    CASCLI:MAPID:<mapping_id>      -> <session_id>

Both are written with the same TTL and removed together. Removing a session
also deletes the session content written by the cooperating Spring Session
store (<namespace>:sessions:<id> and <namespace>:sessions:expires:<id>) so a
logged-out session cannot be revived from stale content.

Writes and deletes are not transactional at the store. The per-instance lock
keeps calls made through one MappingStore from interleaving, but other
processes sharing the same Redis can still race; the store resolves those as
last write wins.
"""

import asyncio
import logging
from typing import Iterable, List, Optional

from redis.exceptions import RedisError

logger = logging.getLogger(__name__)

SESSION_INDEX_PREFIX = "CASCLI:SESSIONID:"
MAPPING_INDEX_PREFIX = "CASCLI:MAPID:"
DEFAULT_SESSION_NAMESPACE = "spring:session"


class MappingStoreError(Exception):
    """A Redis failure left a removal or lookup incomplete."""

    def __init__(self, message: str, keys: Iterable[str] = ()):
        super().__init__(message)
        self.keys: List[str] = list(keys)


class MappingStore:
    """
    Maintains the ticket <-> session index pair in Redis.

    Conventions:
    - Receives redis_client in __init__
    - Uses fixed key prefixes
    - TTL-based expiration, no background cleanup
    """

    # One day
    DEFAULT_TTL = 86400

    def __init__(
        self,
        redis_client,
        ttl: int = DEFAULT_TTL,
        session_namespace: str = DEFAULT_SESSION_NAMESPACE,
    ):
        """
        Initialize mapping store.

        Args:
            redis_client: Async Redis client
            ttl: Lifetime of both index records in seconds
            session_namespace: Key namespace of the Spring Session store whose
                records are purged on removal
        """
        if ttl <= 0:
            raise ValueError(f"ttl must be a positive number of seconds, got {ttl}")

        self.redis = redis_client
        self.ttl = ttl
        self.session_namespace = session_namespace
        self._lock = asyncio.Lock()

    def _session_key(self, session_id: str) -> str:
        return SESSION_INDEX_PREFIX + session_id

    def _mapping_key(self, mapping_id: str) -> str:
        return MAPPING_INDEX_PREFIX + mapping_id

    def _session_content_key(self, session_id: str) -> str:
        return f"{self.session_namespace}:sessions:{session_id}"

    def _session_expires_key(self, session_id: str) -> str:
        return f"{self.session_namespace}:sessions:expires:{session_id}"

    @staticmethod
    def _require(value: str, name: str) -> None:
        if not value:
            raise ValueError(f"{name} must be a non-empty string")

    @staticmethod
    def _decode(value) -> Optional[str]:
        # Clients created without decode_responses hand back bytes
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return value

    async def add(self, mapping_id: str, session_id: str) -> None:
        """
        Associate a ticket with a session.

        Both index records are written with the configured TTL. An existing
        association for either id is overwritten. Redis failures are logged and
        swallowed, so a return does not guarantee either record was written.

        Args:
            mapping_id: Ticket issued by the CAS server
            session_id: Local session identifier

        Raises:
            ValueError: If either id is empty
        """
        self._require(mapping_id, "mapping_id")
        self._require(session_id, "session_id")

        async with self._lock:
            logger.debug(f"Adding ticket {mapping_id} for session {session_id}")
            try:
                await self.redis.setex(self._session_key(session_id), self.ttl, mapping_id)
                await self.redis.setex(self._mapping_key(mapping_id), self.ttl, session_id)
            except RedisError as e:
                logger.error(f"Failed adding ticket for session {session_id}: {e}", exc_info=True)

    async def remove_by_session_id(self, session_id: str) -> None:
        """
        Remove the association held for a session.

        Deletes the ticket index record (when the session still points at
        one), the session index record and the Spring Session records. Calling
        it for a session with nothing stored is a no-op.

        Raises:
            ValueError: If session_id is empty
            MappingStoreError: If Redis failed during the lookup or delete
        """
        self._require(session_id, "session_id")

        async with self._lock:
            await self._remove_by_session_id(session_id)

    async def remove_by_mapping_id(self, mapping_id: str) -> Optional[str]:
        """
        Remove the association held for a ticket.

        Used on single sign-out, where the CAS server only knows the ticket.

        Args:
            mapping_id: Ticket issued by the CAS server

        Returns:
            The session id the ticket was mapped to, or None if no mapping
            exists (never added, already removed or expired)

        Raises:
            ValueError: If mapping_id is empty
            MappingStoreError: If Redis failed during the lookup or delete
        """
        self._require(mapping_id, "mapping_id")

        async with self._lock:
            mapping_key = self._mapping_key(mapping_id)
            try:
                session_id = self._decode(await self.redis.get(mapping_key))
            except RedisError as e:
                logger.error(f"Failed to look up session for ticket {mapping_id}: {e}")
                raise MappingStoreError(
                    f"Failed to look up session for ticket {mapping_id}", [mapping_key]
                ) from e

            if not session_id:
                logger.debug(f"No session mapped to ticket {mapping_id}. Ignoring.")
                return None

            try:
                await self.redis.delete(mapping_key)
            except RedisError as e:
                logger.error(f"Failed to delete ticket index {mapping_key}: {e}")
                raise MappingStoreError(
                    f"Failed to delete ticket index for {mapping_id}", [mapping_key]
                ) from e

            await self._remove_by_session_id(session_id)
            return session_id

    async def _remove_by_session_id(self, session_id: str) -> None:
        """Cascade removal for a session. Caller holds the lock."""
        logger.debug(f"Attempting to remove session {session_id}")
        session_key = self._session_key(session_id)

        read_error = None
        try:
            mapping_id = self._decode(await self.redis.get(session_key))
        except RedisError as e:
            logger.error(f"Failed to read ticket for session {session_id}: {e}")
            mapping_id = None
            read_error = e

        keys = []
        if mapping_id:
            logger.debug(f"Found ticket {mapping_id} for session {session_id}")
            keys.append(self._mapping_key(mapping_id))
        elif read_error is None:
            logger.debug(f"No ticket mapped to session {session_id}")

        keys.extend(
            [
                session_key,
                self._session_content_key(session_id),
                self._session_expires_key(session_id),
            ]
        )

        # Single DEL so every key is attempted together
        try:
            await self.redis.delete(*keys)
        except RedisError as e:
            logger.error(f"Failed to remove session {session_id}: {e}")
            raise MappingStoreError(f"Failed to remove session {session_id}", keys) from e

        if read_error is not None:
            # Session-side keys are gone, but the ticket index could not be found
            raise MappingStoreError(
                f"Failed to read ticket for session {session_id}; ticket index may remain until expiry",
                [session_key],
            ) from read_error

    async def get_mapping_id(self, session_id: str) -> Optional[str]:
        """
        Get the ticket currently mapped to a session.

        Returns:
            Ticket id or None if not found
        """
        self._require(session_id, "session_id")
        return await self._read(self._session_key(session_id))

    async def get_session_id(self, mapping_id: str) -> Optional[str]:
        """
        Get the session currently mapped to a ticket.

        Returns:
            Session id or None if not found
        """
        self._require(mapping_id, "mapping_id")
        return await self._read(self._mapping_key(mapping_id))

    async def _read(self, key: str) -> Optional[str]:
        try:
            return self._decode(await self.redis.get(key)) or None
        except RedisError as e:
            logger.error(f"Failed to read {key}: {e}")
            raise MappingStoreError(f"Failed to read {key}", [key]) from e
