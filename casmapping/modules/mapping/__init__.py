"""
Mapping Module - Black Box Interface

Purpose: Track which local session a CAS ticket authenticated
Interface: add(), remove_by_session_id(), remove_by_mapping_id()
Hidden: Redis key layout, TTL management, cascading cleanup

Replaceable with any backend that satisfies SessionMappingStorage.
"""

from .interfaces import SessionMappingStorage
from .mapping import MappingStore, MappingStoreError

__all__ = ["MappingStore", "MappingStoreError", "SessionMappingStorage"]
