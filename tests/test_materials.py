"""
Tests for the materials module.
"""

import unittest

from fuel_cycle.materials import Material, create_assembly


class TestMaterial(unittest.TestCase):
    """Test material handles."""

    def setUp(self):
        self.mat = Material(quantity=100.0, recipe="fresh_uox")

    def test_unique_ids(self):
        """Test every new material gets a new id."""
        other = Material(quantity=100.0, recipe="fresh_uox")
        self.assertNotEqual(self.mat.obj_id, other.obj_id)

    def test_identity_equality(self):
        """Test materials with equal contents are still different."""
        other = Material(quantity=100.0, recipe="fresh_uox")
        self.assertNotEqual(self.mat, other)
        self.assertEqual(self.mat, self.mat)

    def test_negative_quantity(self):
        """Test that negative mass raises error."""
        with self.assertRaises(ValueError):
            Material(quantity=-1.0, recipe="fresh_uox")

    def test_transmute_keeps_mass(self):
        """Test transmutation only changes the recipe."""
        self.mat.transmute("spent_uox")
        self.assertEqual(self.mat.recipe, "spent_uox")
        self.assertEqual(self.mat.quantity, 100.0)

    def test_dict_round_trip(self):
        """Test snapshot rows rebuild the same material."""
        rebuilt = Material.from_dict(self.mat.to_dict())
        self.assertEqual(rebuilt.obj_id, self.mat.obj_id)
        self.assertEqual(rebuilt.quantity, self.mat.quantity)
        self.assertEqual(rebuilt.recipe, self.mat.recipe)

    def test_restored_id_not_reused(self):
        """Test new ids stay above restored ones."""
        restored = Material.from_dict(
            {"obj_id": self.mat.obj_id + 1000, "quantity": 1.0, "recipe": "x"}
        )
        new = Material(quantity=1.0, recipe="x")
        self.assertGreater(new.obj_id, restored.obj_id)


class TestCreateAssembly(unittest.TestCase):
    """Test assembly factory."""

    def test_assembly(self):
        """Test assembly has requested mass and recipe."""
        assembly = create_assembly(assem_size=446.0, recipe="fresh_uox")
        self.assertEqual(assembly.quantity, 446.0)
        self.assertEqual(assembly.recipe, "fresh_uox")


if __name__ == "__main__":
    unittest.main()
