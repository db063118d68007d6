"""
Tests for the recorder module.
"""

import unittest
import json
import tempfile
import os

from fuel_cycle.recorder import EventRecorder


class TestEventRecorder(unittest.TestCase):
    """Test the event log."""

    def setUp(self):
        self.recorder = EventRecorder()
        self.recorder.record(1, 0, "ENTER")
        self.recorder.record(1, 3, "DISCHARGE", "1 assemblies")
        self.recorder.record(2, 3, "demand", 300.0)

    def test_length(self):
        """Test every record is kept."""
        self.assertEqual(len(self.recorder), 3)

    def test_filter_by_name(self):
        """Test filtering by event name."""
        events = self.recorder.events("DISCHARGE")
        self.assertEqual(len(events), 1)
        self.assertEqual(events[0].time, 3)

    def test_filter_by_agent(self):
        """Test filtering by agent."""
        self.assertEqual(len(self.recorder.events(agent_id=1)), 2)

    def test_values_stored_as_text(self):
        """Test values are recorded as strings."""
        self.assertEqual(self.recorder.events("demand")[0].value, "300.0")

    def test_to_json(self):
        """Test JSON export to file."""
        with tempfile.NamedTemporaryFile(
            mode='w', suffix='.json', delete=False
        ) as f:
            filepath = f.name

        try:
            self.recorder.to_json(filepath)
            with open(filepath, 'r') as f:
                rows = json.load(f)
            self.assertEqual(len(rows), 3)
            self.assertEqual(rows[1]["event"], "DISCHARGE")
        finally:
            os.unlink(filepath)


if __name__ == "__main__":
    unittest.main()
