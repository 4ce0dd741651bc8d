"""
casmapping - Redis-backed CAS ticket to session mapping

Keeps the association between a single-sign-on service ticket and the local
session it authenticated, so a single-sign-out request carrying only the
ticket can find and tear down the right session on any server instance.

Architecture:
- Each module is self-contained with clear interfaces
- All mapping state lives in Redis, never in process memory

Modules:
- mapping: Ticket <-> session index maintenance
- storage: Redis connection ownership
- config: Environment-driven configuration
"""

__version__ = "1.0.0"
