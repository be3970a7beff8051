"""
jokes/models.py -- Domain dataclasses for jokes.

These are pure data containers with zero logic. All persistence lives in
jokes/store.py.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class Joke:
    """A shared joke.

    jokester_id is the id of the user whose session created the joke. It is
    stamped once on insert and the store offers no way to change it.

    id is None before the record is written to the database.
    """

    jokester_id: str
    name: str
    content: str
    id: Optional[str] = None
    created_at: str = ""  # ISO 8601, set by store on insert
