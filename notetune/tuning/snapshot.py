"""
Saved state of an applied Note.

The snapshot holds the inspected (pre-apply) state of every parameter kind
the Note touched. Its presence in the saved-state directory marks the Note
as applied; revert writes the states back and removes it.
"""

import json
from dataclasses import dataclass, field, asdict
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List


@dataclass
class NoteSnapshot:
    """Live values captured before a Note was applied."""
    note_id: str
    created_at: str
    states: Dict[str, Dict[str, Any]] = field(default_factory=dict)   # kind -> state
    order: List[str] = field(default_factory=list)                    # kinds in apply order

    @classmethod
    def create(cls, note_id: str) -> "NoteSnapshot":
        return cls(note_id=note_id, created_at=datetime.now().isoformat())

    def add(self, kind: str, state: Dict[str, Any]) -> None:
        self.states[kind] = state
        if kind not in self.order:
            self.order.append(kind)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NoteSnapshot":
        """Create from dictionary (JSON deserialization)."""
        return cls(
            note_id=data["note_id"],
            created_at=data.get("created_at", ""),
            states=data.get("states", {}),
            order=data.get("order") or list(data.get("states", {})),
        )

    def save(self, path: Path) -> None:
        """Save snapshot to JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def load(cls, path: Path) -> "NoteSnapshot":
        """Load snapshot from JSON file."""
        with open(path) as f:
            return cls.from_dict(json.load(f))
