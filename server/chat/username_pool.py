"""
Username pool module.

Hands out unique display names to connected participants. Names come from a
fixed list; once every name is taken, numbered variants such as ``Ali3`` are
generated instead.
"""

import random
from typing import Iterable, List, Optional, Set

from common.constants import CANDIDATE_NAMES


class UsernamePool:
    """Tracks which usernames are in use."""

    def __init__(self, names: Iterable[str] = CANDIDATE_NAMES, rng: Optional[random.Random] = None):
        self.names: List[str] = list(names)
        if not self.names:
            raise ValueError("Username pool needs at least one candidate name")
        self.used_names: Set[str] = set()
        self.rng = rng or random.Random()

    def assign(self) -> str:
        """Reserve and return a username no live connection is using."""
        for name in self.names:
            if name not in self.used_names:
                self.used_names.add(name)
                return name

        # All names taken: random base name plus a counter that grows on every collision
        counter = 1
        new_name = f"{self.rng.choice(self.names)}{counter}"
        while new_name in self.used_names:
            counter += 1
            new_name = f"{self.rng.choice(self.names)}{counter}"

        self.used_names.add(new_name)
        return new_name

    def release(self, username: str):
        """Return a username to the pool. Unknown names are ignored."""
        self.used_names.discard(username)

    def list_used(self) -> List[str]:
        """Get a snapshot of the usernames currently in use."""
        return list(self.used_names)

    def is_used(self, username: str) -> bool:
        """Check whether a username is currently held."""
        return username in self.used_names

    def __len__(self) -> int:
        """Get the number of usernames currently held."""
        return len(self.used_names)
