"""
Identifier generation for agent records.

Public ids are ``<TIER>-<epoch millis>-<SUFFIX>``: sortable by issue time,
safe to paste into a URL, and unique enough without a central sequence.
A collision is left to the store's unique constraint.
"""

import secrets
import string
import time
import uuid
from enum import Enum

SUFFIX_LENGTH = 6
SUFFIX_ALPHABET = string.ascii_uppercase + string.digits
DELIMITER = "-"


class IdentifierTier(str, Enum):
    """Lifecycle tier encoded in the public id prefix."""

    TEMP = "TEMP"  # Developer preview
    ASTRAS = "ASTRAS"  # Converted to a permanent account


def generate_public_id(tier: str = IdentifierTier.TEMP.value) -> str:
    """Generate a public agent id for the given tier."""
    millis = time.time_ns() // 1_000_000
    suffix = "".join(secrets.choice(SUFFIX_ALPHABET) for _ in range(SUFFIX_LENGTH))
    return DELIMITER.join((tier, str(millis), suffix))


def generate_internal_id() -> str:
    """Generate an opaque internal id (UUID4 text)."""
    return str(uuid.uuid4())


def trust_score_label(tier: str, percentage: int = 95) -> str:
    """Render the static trust score label, e.g. ``TEMP-95%``."""
    return f"{tier}{DELIMITER}{percentage}%"
