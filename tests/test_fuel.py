"""
Tests for the fuel module.
"""

import unittest

from fuel_cycle.errors import ConfigurationError, UnknownResource
from fuel_cycle.fuel import (
    FuelLedger,
    FuelType,
    PreferenceChange,
    RecipeChange,
    ResourceIndex,
    check_parallel_lengths,
)
from fuel_cycle.materials import Material


def _two_fuel_ledger(**kwargs):
    return FuelLedger.from_arrays(
        incommods=["uox", "mox"],
        inrecipes=["fresh_uox", "fresh_mox"],
        outrecipes=["spent_uox", "spent_mox"],
        outcommods=["spent_fuel", "spent_fuel"],
        **kwargs
    )


class TestCheckParallelLengths(unittest.TestCase):
    """Test parallel array validation."""

    def test_equal_lengths(self):
        """Test common length is returned."""
        self.assertEqual(check_parallel_lengths("x", a=[1, 2], b=["p", "q"]), 2)

    def test_mismatch(self):
        """Test mismatched lengths raise error."""
        with self.assertRaises(ConfigurationError):
            check_parallel_lengths("x", a=[1, 2], b=["p"])


class TestFuelLedgerConstruction(unittest.TestCase):
    """Test building ledgers from configuration arrays."""

    def test_default_preferences(self):
        """Test missing preferences default to zero."""
        ledger = _two_fuel_ledger()
        self.assertEqual([f.preference for f in ledger], [0.0, 0.0])

    def test_given_preferences(self):
        """Test preferences are assigned in order."""
        ledger = _two_fuel_ledger(prefs=[1.0, 2.0])
        self.assertEqual(ledger.lookup(1).preference, 2.0)

    def test_preference_length_mismatch(self):
        """Test wrong number of preferences raises error."""
        with self.assertRaises(ConfigurationError):
            _two_fuel_ledger(prefs=[1.0])

    def test_fuel_array_mismatch(self):
        """Test mismatched fuel arrays raise error."""
        with self.assertRaises(ConfigurationError):
            FuelLedger.from_arrays(
                incommods=["uox", "mox"],
                inrecipes=["fresh_uox"],
                outrecipes=["spent_uox", "spent_mox"],
                outcommods=["spent_fuel", "spent_fuel"],
            )

    def test_empty_ledger(self):
        """Test a ledger needs at least one fuel type."""
        with self.assertRaises(ConfigurationError):
            FuelLedger.from_arrays([], [], [], [])

    def test_change_array_mismatch(self):
        """Test mismatched schedule arrays raise error."""
        with self.assertRaises(ConfigurationError):
            _two_fuel_ledger(
                pref_change_times=[1, 2],
                pref_change_commods=["uox"],
                pref_change_values=[1.0, 2.0],
            )
        with self.assertRaises(ConfigurationError):
            _two_fuel_ledger(
                recipe_change_times=[1],
                recipe_change_commods=["uox"],
                recipe_change_in=["a"],
                recipe_change_out=[],
            )

    def test_changes_built(self):
        """Test schedule arrays become change objects."""
        ledger = _two_fuel_ledger(
            pref_change_times=[3],
            pref_change_commods=["mox"],
            pref_change_values=[7.0],
            recipe_change_times=[4],
            recipe_change_commods=["uox"],
            recipe_change_in=["fresh_uox2"],
            recipe_change_out=["spent_uox2"],
        )
        self.assertIn(PreferenceChange(3, "mox", 7.0), ledger.changes)
        self.assertIn(RecipeChange(4, "uox", "fresh_uox2", "spent_uox2"), ledger.changes)

    def test_unique_outcommods(self):
        """Test output commodities are de-duplicated in order."""
        ledger = FuelLedger(
            [
                FuelType("a", "ra", "sa", "out2"),
                FuelType("b", "rb", "sb", "out1"),
                FuelType("c", "rc", "sc", "out2"),
            ]
        )
        self.assertEqual(ledger.unique_outcommods(), ["out2", "out1"])


class TestScheduledChanges(unittest.TestCase):
    """Test time-indexed preference and recipe changes."""

    def setUp(self):
        self.ledger = _two_fuel_ledger(
            prefs=[1.0, 2.0],
            pref_change_times=[3, 6],
            pref_change_commods=["uox", "uox"],
            pref_change_values=[5.0, 9.0],
            recipe_change_times=[3],
            recipe_change_commods=["mox"],
            recipe_change_in=["fresh_mox2"],
            recipe_change_out=["spent_mox2"],
        )

    def test_preference_before_after(self):
        """Test preference is unchanged before T and scheduled from T on."""
        history = []
        for t in range(10):
            self.ledger.apply_due_changes(t)
            history.append(self.ledger.lookup(0).preference)
        self.assertEqual(history[:3], [1.0, 1.0, 1.0])
        self.assertEqual(history[3:6], [5.0, 5.0, 5.0])
        self.assertEqual(history[6:], [9.0, 9.0, 9.0, 9.0])

    def test_recipe_change(self):
        """Test recipe pair changes only for the matching commodity."""
        self.ledger.apply_due_changes(3)
        mox = self.ledger.lookup(1)
        self.assertEqual((mox.inrecipe, mox.outrecipe), ("fresh_mox2", "spent_mox2"))
        uox = self.ledger.lookup(0)
        self.assertEqual((uox.inrecipe, uox.outrecipe), ("fresh_uox", "spent_uox"))

    def test_applied_once_per_step(self):
        """Test a second call in the same step applies nothing."""
        self.assertEqual(self.ledger.apply_due_changes(3), 2)
        self.assertEqual(self.ledger.apply_due_changes(3), 0)

    def test_independent_commodities(self):
        """Test same-time changes for different fuels both apply."""
        self.ledger.apply_due_changes(3)
        self.assertEqual(self.ledger.lookup(0).preference, 5.0)
        self.assertEqual(self.ledger.lookup(1).inrecipe, "fresh_mox2")

    def test_unknown_commodity_ignored(self):
        """Test changes for commodities not in the ledger are skipped."""
        ledger = _two_fuel_ledger(
            pref_change_times=[1],
            pref_change_commods=["thorium"],
            pref_change_values=[4.0],
        )
        with self.assertLogs("fuel_cycle.fuel", level="WARNING"):
            applied = ledger.apply_due_changes(1)
        self.assertEqual(applied, 0)


class TestResourceIndex(unittest.TestCase):
    """Test material to fuel type lookups."""

    def setUp(self):
        self.ledger = _two_fuel_ledger()
        self.mat = Material(quantity=10.0, recipe="fresh_mox")

    def test_index_and_resolve(self):
        """Test materials resolve to the fuel they arrived as."""
        self.assertEqual(self.ledger.index_res(self.mat, "mox"), 1)
        self.assertEqual(self.ledger.resolve(self.mat), 1)
        self.assertEqual(self.ledger.fuel_of(self.mat).outrecipe, "spent_mox")

    def test_unknown_material(self):
        """Test unindexed materials raise error."""
        with self.assertRaises(UnknownResource):
            self.ledger.resolve(self.mat)

    def test_unsupported_incommod(self):
        """Test indexing on an unknown commodity raises error."""
        with self.assertRaises(UnknownResource):
            self.ledger.index_res(self.mat, "thorium")

    def test_entries_kept(self):
        """Test entries survive further indexing."""
        other = Material(quantity=10.0, recipe="fresh_uox")
        self.ledger.index_res(self.mat, "mox")
        self.ledger.index_res(other, "uox")
        self.assertEqual(len(self.ledger.index), 2)
        self.assertIn(self.mat, self.ledger.index)

    def test_dict_round_trip(self):
        """Test index survives JSON-style string keys."""
        index = ResourceIndex({5: 1, 7: 0})
        rebuilt = ResourceIndex.from_dict(index.to_dict())
        self.assertEqual(rebuilt.to_dict(), {"5": 1, "7": 0})


class TestLedgerState(unittest.TestCase):
    """Test ledger snapshot state."""

    def test_restore(self):
        """Test restored ledger has changed values and index."""
        ledger = _two_fuel_ledger(
            pref_change_times=[2],
            pref_change_commods=["uox"],
            pref_change_values=[3.0],
        )
        mat = Material(quantity=1.0, recipe="fresh_uox")
        ledger.index_res(mat, "uox")
        ledger.apply_due_changes(2)

        restored = _two_fuel_ledger(
            pref_change_times=[2],
            pref_change_commods=["uox"],
            pref_change_values=[3.0],
        )
        restored.restore(ledger.state())
        self.assertEqual(restored.lookup(0).preference, 3.0)
        self.assertEqual(restored.resolve(mat), 0)
        self.assertEqual(restored.apply_due_changes(2), 0)


if __name__ == "__main__":
    unittest.main()
