"""
Custom logging configuration that keeps CAS tickets out of log output
"""

import logging
import logging.config
import re
from typing import Dict, Any

# Service, proxy, ticket-granting and proxy-granting tickets
TICKET_PATTERN = re.compile(r"\b((?:ST|PT|TGT|PGT)-)([A-Za-z0-9._-]+)")
VISIBLE_TICKET_CHARS = 4


def mask_ticket(text: str) -> str:
    """Replace everything after the first few characters of each ticket id."""
    return TICKET_PATTERN.sub(
        lambda m: f"{m.group(1)}{m.group(2)[:VISIBLE_TICKET_CHARS]}***", text
    )


class TicketMaskFilter(logging.Filter):
    """Filter to mask CAS ticket ids in casmapping logs."""

    def filter(self, record: logging.LogRecord) -> bool:
        """Rewrite the message of casmapping records with tickets masked."""
        if record.name.startswith("casmapping"):
            message = record.getMessage()
            masked = mask_ticket(message)
            if masked != message:
                record.msg = masked
                record.args = None
        return True  # Never suppress, only rewrite


def get_logging_config(level: str = "INFO", mask_tickets: bool = True) -> Dict[str, Any]:
    """Get logging configuration with optional ticket masking."""
    handler = {
        "class": "logging.StreamHandler",
        "formatter": "default",
        "stream": "ext://sys.stdout",
    }
    if mask_tickets:
        handler["filters"] = ["ticket_mask_filter"]

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "ticket_mask_filter": {
                "()": TicketMaskFilter
            }
        },
        "formatters": {
            "default": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            }
        },
        "handlers": {
            "default": handler
        },
        "loggers": {
            "casmapping": {
                "handlers": ["default"],
                "level": level,
                "propagate": False
            },
            "redis": {
                "handlers": ["default"],
                "level": "WARNING",
                "propagate": False
            }
        },
        "root": {
            "level": "WARNING",
            "handlers": ["default"]
        }
    }
