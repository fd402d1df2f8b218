"""
Joke Store - JSON snapshot persistence for accepted jokes.

Holds every accepted joke (text, embedding, timestamp, hash) in memory and
mirrors the whole collection to a single pretty-printed JSON file.

Design principles:
- Full rewrite on every mutation (no append writes)
- Atomic replace: write a sibling temp file, then os.replace() it in
- Best-effort persistence: a corrupt or unreadable file starts the store
  empty, a failed save is logged and swallowed
- Linear scan lookups; fine for a desktop-sized memory

Snapshot format (field names kept compatible with existing memory files):
[
  {"id": "...", "joke": "...", "jokeEmbedding": [...], "timestamp": 1700000000000, "hash": "..."},
  ...
]
"""

import json
import logging
import os
import tempfile
import time
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger("jokester")

MS_PER_DAY = 24 * 60 * 60 * 1000


def now_ms() -> int:
    """Current time in milliseconds since epoch."""
    return int(time.time() * 1000)


def generate_joke_id() -> str:
    """Generate a new opaque joke identifier."""
    return str(uuid.uuid4())


@dataclass(frozen=True)
class JokeEntry:
    """One remembered joke. All fields are immutable once created."""
    id: str
    text: str
    embedding: List[float] = field(repr=False)
    timestamp: int
    content_hash: str

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the on-disk JSON shape."""
        return {
            "id": self.id,
            "joke": self.text,
            "jokeEmbedding": list(self.embedding),
            "timestamp": self.timestamp,
            "hash": self.content_hash,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "JokeEntry":
        """
        Build an entry from the on-disk JSON shape.

        Raises:
            KeyError / TypeError / ValueError: If a required field is missing or malformed
        """
        return cls(
            id=str(data["id"]),
            text=str(data["joke"]),
            embedding=[float(v) for v in data["jokeEmbedding"]],
            timestamp=int(data["timestamp"]),
            content_hash=str(data["hash"]),
        )

    @property
    def dimensions(self) -> int:
        return len(self.embedding)


class JokeStore:
    """
    Durable collection of accepted jokes.

    Provides:
    - load/save of the full snapshot
    - insert (append + save)
    - linear query/scan access
    - age-based pruning
    """

    def __init__(self, path: Path, autoload: bool = True):
        """
        Initialize the store.

        Args:
            path: Snapshot file path
            autoload: Load the snapshot immediately
        """
        self.path = Path(path)
        self._jokes: List[JokeEntry] = []

        if autoload:
            self.load()

    def __len__(self) -> int:
        return len(self._jokes)

    # =========================================================================
    # Persistence
    # =========================================================================

    def load(self) -> int:
        """
        Load the snapshot from disk.

        Any read or parse failure leaves the store empty; the host process
        never fails over a corrupt memory file.

        Returns:
            int: Number of entries loaded
        """
        self._jokes = []

        if not self.path.exists():
            logger.info(f"[JokeStore] No memory file at {self.path} - starting empty")
            return 0

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.error(f"[JokeStore] Failed to load {self.path}: {e} - starting empty")
            return 0

        if not isinstance(data, list):
            logger.error(f"[JokeStore] Unexpected snapshot type {type(data).__name__} - starting empty")
            return 0

        seen_hashes = set()
        for item in data:
            try:
                entry = JokeEntry.from_dict(item)
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"[JokeStore] Skipping malformed entry: {e}")
                continue
            if entry.content_hash in seen_hashes:
                logger.warning(f"[JokeStore] Skipping duplicate hash on load: {entry.content_hash[:12]}...")
                continue
            seen_hashes.add(entry.content_hash)
            self._jokes.append(entry)

        logger.info(f"[JokeStore] Loaded {len(self._jokes)} jokes from {self.path}")
        return len(self._jokes)

    def save(self) -> bool:
        """
        Overwrite the snapshot with the full current collection.

        Writes a temp file in the same directory and os.replace()s it over
        the snapshot, so readers see either the old or the new file.

        Returns:
            True if saved, False on failure (already logged)
        """
        tmp_path = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                prefix=f".{self.path.name}.",
                suffix=".tmp",
                dir=str(self.path.parent)
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump([j.to_dict() for j in self._jokes], f, indent=2, ensure_ascii=False)
            os.replace(tmp_path, self.path)
            tmp_path = None

            logger.debug(f"[JokeStore] Saved {len(self._jokes)} jokes to {self.path}")
            return True

        except (OSError, TypeError, ValueError) as e:
            logger.error(f"[JokeStore] Save failed: {e}")
            return False

        finally:
            if tmp_path and os.path.exists(tmp_path):
                try:
                    os.remove(tmp_path)
                except OSError as e:
                    logger.warning(f"[JokeStore] Could not remove temp file {tmp_path}: {e}")

    # =========================================================================
    # Mutation
    # =========================================================================

    def insert(self, entry: JokeEntry) -> bool:
        """
        Append an entry and persist the collection.

        An entry whose hash is already stored is refused.

        Args:
            entry: Entry to add

        Returns:
            True if inserted, False if its hash was already present
        """
        if self.contains_hash(entry.content_hash):
            logger.warning(f"[JokeStore] Refusing duplicate hash: {entry.content_hash[:12]}...")
            return False

        self._jokes.append(entry)
        self.save()
        logger.info(f"[JokeStore] Joke saved (total: {len(self._jokes)}): \"{entry.text[:60]}\"")
        return True

    def purge_older_than(self, cutoff_ms: int) -> int:
        """
        Remove entries created before the cutoff, then save.

        Args:
            cutoff_ms: Entries with timestamp < cutoff_ms are removed

        Returns:
            int: Number of entries removed
        """
        before = len(self._jokes)
        self._jokes = [j for j in self._jokes if j.timestamp >= cutoff_ms]
        removed = before - len(self._jokes)
        self.save()

        logger.info(f"[JokeStore] Purged {removed} jokes older than {cutoff_ms} (remaining: {len(self._jokes)})")
        return removed

    # =========================================================================
    # Queries
    # =========================================================================

    def scan_all(self) -> List[JokeEntry]:
        """Return a snapshot list of every stored entry."""
        return list(self._jokes)

    def query(self, predicate: Callable[[JokeEntry], bool]) -> List[JokeEntry]:
        """Return every entry matching the predicate."""
        return [j for j in self._jokes if predicate(j)]

    def find_by_hash(self, content_hash: str) -> Optional[JokeEntry]:
        """Return the entry with the given hash, if any."""
        for joke in self._jokes:
            if joke.content_hash == content_hash:
                return joke
        return None

    def contains_hash(self, content_hash: str) -> bool:
        return self.find_by_hash(content_hash) is not None

    def recent(self, limit: int = 10) -> List[JokeEntry]:
        """Entries sorted by timestamp descending, top `limit`."""
        if limit <= 0:
            return []
        return sorted(self._jokes, key=lambda j: j.timestamp, reverse=True)[:limit]

    def count_since(self, since_ms: int) -> int:
        """Number of entries with timestamp strictly after since_ms."""
        return sum(1 for j in self._jokes if j.timestamp > since_ms)

    def embedding_dimensions(self) -> Optional[int]:
        """Dimensionality of the first stored embedding, None if empty."""
        if not self._jokes:
            return None
        return self._jokes[0].dimensions
