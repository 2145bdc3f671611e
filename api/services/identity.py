"""
Identity resolution for pilot records.

A display name maps to a storage key by lowercasing and deleting every
character outside [a-z0-9]. "Jane Doe", "jane-doe" and "JANE_DOE" all
resolve to "janedoe" and therefore share one record.
"""
import re

_NON_KEY_CHARS = re.compile(r"[^a-z0-9]")


def resolve_identity_key(name: str) -> str:
    """
    Produce the storage key for a display name.

    Total and deterministic: the empty string resolves to "". Callers must
    reject blank names before relying on the key.
    """
    return _NON_KEY_CHARS.sub("", name.lower())


def is_blank_name(name) -> bool:
    """Return True if name is missing, empty, or whitespace only."""
    return name is None or not str(name).strip()
