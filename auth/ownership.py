"""
auth/ownership.py -- Owner-only mutation check.

A resource stores the id of the user who created it. Only that user may
mutate it. Read paths never call this.
"""

from __future__ import annotations

from typing import Optional


def can_mutate(owner_id: Optional[str], current_user_id: Optional[str]) -> bool:
    """True iff both ids are present, non-empty and equal."""
    if not owner_id or not current_user_id:
        return False
    return owner_id == current_user_id
