"""
Event Recording

An append-only log of facility events. Facilities write to it and never
read back what they wrote.
"""

from dataclasses import dataclass, asdict
import json
import logging
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReactorEvent:
    """One recorded event."""

    agent_id: int
    time: int
    event: str
    value: str = ""


class EventRecorder:
    """In-memory event log."""

    def __init__(self):
        self._events: List[ReactorEvent] = []

    def __len__(self) -> int:
        return len(self._events)

    def record(self, agent_id: int, time: int, event: str, value: Any = "") -> None:
        row = ReactorEvent(agent_id=agent_id, time=time, event=event, value=str(value))
        self._events.append(row)
        logger.debug("agent %d t=%d %s %s", agent_id, time, event, row.value)

    def events(self, name: Optional[str] = None, agent_id: Optional[int] = None) -> List[ReactorEvent]:
        """Recorded events, optionally filtered by event name and agent."""
        return [
            e for e in self._events
            if (name is None or e.event == name)
            and (agent_id is None or e.agent_id == agent_id)
        ]

    def to_rows(self) -> List[Dict[str, Any]]:
        return [asdict(e) for e in self._events]

    def to_json(self, filepath: Optional[str] = None) -> str:
        """
        Export the log to JSON.

        Args:
            filepath: Optional file path to save JSON

        Returns:
            JSON string
        """
        json_str = json.dumps(self.to_rows(), indent=2)

        if filepath:
            with open(filepath, 'w') as f:
                f.write(json_str)

        return json_str
