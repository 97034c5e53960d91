"""
Member Cache Global Constants

Cache names and key layout shared by the service and the API layer.
"""

from typing import Union

# Read-through cache name; the whole member list lives under this key
MEMBER_CACHE_NAME = "member"

# Manual per-member keys: "member::<id>"
MEMBER_KEY_SEPARATOR = "::"

SCAN_ALL_PATTERN = "*"


def member_key(member_id: Union[int, str]) -> str:
    """Build the manual-path cache key for one member."""
    return f"{MEMBER_CACHE_NAME}{MEMBER_KEY_SEPARATOR}{member_id}"
