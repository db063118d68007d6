"""
Tests for the constants module.
"""

import unittest

from fuel_cycle.constants import (
    EPS_RSRC,
    DEFAULT_PREFERENCE,
    DEFAULT_N_ASSEM_SPENT,
    DEFAULT_N_ASSEM_FRESH,
    EVENTS,
)


class TestDefaults(unittest.TestCase):
    """Test default parameter values."""

    def test_tolerance_small(self):
        """Test resource tolerance is well below any assembly mass."""
        self.assertTrue(0 < EPS_RSRC < 1e-3)

    def test_default_preference_zero(self):
        """Test fuel requests default to zero preference."""
        self.assertEqual(DEFAULT_PREFERENCE, 0.0)

    def test_spent_storage_effectively_unbounded(self):
        """Test default spent storage is very large."""
        self.assertEqual(DEFAULT_N_ASSEM_SPENT, 1000000000)

    def test_no_fresh_inventory_by_default(self):
        """Test fuel is ordered just in time by default."""
        self.assertEqual(DEFAULT_N_ASSEM_FRESH, 0)


class TestEvents(unittest.TestCase):
    """Test event names."""

    def test_event_names_unique(self):
        """Test each event has its own name."""
        names = [
            EVENTS.ENTER,
            EVENTS.CYCLE_START,
            EVENTS.CYCLE_END,
            EVENTS.DISCHARGE,
            EVENTS.TRANSMUTE,
            EVENTS.LOAD,
            EVENTS.TRADE,
            EVENTS.DEMAND,
        ]
        self.assertEqual(len(names), len(set(names)))

    def test_events_frozen(self):
        """Test event names cannot be reassigned."""
        with self.assertRaises(Exception):
            EVENTS.LOAD = "OTHER"


if __name__ == "__main__":
    unittest.main()
