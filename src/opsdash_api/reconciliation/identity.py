"""
Identity Resolution

Maps a directory contact (name and/or email) to a local user id.

Priority:
1. Exact email match (case-insensitive)
2. Normalized name against the user's directory-linked name
3. Normalized name against the user's display name

First match wins at each stage. No match is not an error.
"""

import re
from typing import Iterable
from typing import List
from typing import Optional
from typing import Tuple
from uuid import UUID

from opsdash_api.reconciliation.models.entities import Identity

_PARENTHETICAL = re.compile(r"\s*\([^)]*\)")
_WHITESPACE = re.compile(r"\s+")


def normalize_name(name: Optional[str]) -> str:
    """Lowercase, drop parenthetical suffixes like "(Lead)", collapse whitespace."""
    if not name:
        return ""
    normalized = _PARENTHETICAL.sub("", name.lower())
    return _WHITESPACE.sub(" ", normalized).strip()


class IdentityResolver:
    """Resolves contacts against a fixed list of local identities."""

    def __init__(self, identities: Iterable[Identity]):
        self._by_email: List[Tuple[str, UUID]] = []
        self._by_directory_name: List[Tuple[str, UUID]] = []
        self._by_display_name: List[Tuple[str, UUID]] = []

        for identity in identities:
            if identity.email:
                self._by_email.append((identity.email.strip().lower(), identity.id))
            directory_name = normalize_name(identity.directory_name)
            if directory_name:
                self._by_directory_name.append((directory_name, identity.id))
            display_name = normalize_name(identity.name)
            if display_name:
                self._by_display_name.append((display_name, identity.id))

    def resolve(self, name: Optional[str] = None, email: Optional[str] = None) -> Optional[UUID]:
        """
        Resolve a contact to a user id.

        Args:
            name: Contact name as shown in the directory
            email: Contact email, when known

        Returns:
            The matching user id, or None when unresolved
        """
        if email:
            wanted = email.strip().lower()
            for candidate, user_id in self._by_email:
                if candidate == wanted:
                    return user_id

        wanted_name = normalize_name(name)
        if not wanted_name:
            return None

        for candidate, user_id in self._by_directory_name:
            if candidate == wanted_name:
                return user_id

        for candidate, user_id in self._by_display_name:
            if candidate == wanted_name:
                return user_id

        return None
