import unittest

from sqlalchemy.types import Integer, String, Text

from ezxlate.core.capacity import SchemaCapacity, size_tiers, column_capacity, SIZE_TIERS, UNAVAILABLE, \
    UNLIMITED_SIZE, MAX_EXTEND_SIZE
from tests.ezxlate.fixtures import DatabaseTestCase


class SizeTiersTests(unittest.TestCase):

    def test_default_tiers(self):
        self.assertEqual(SIZE_TIERS[:4], (255, 511, 1023, 2047))
        self.assertEqual(SIZE_TIERS[-1], MAX_EXTEND_SIZE)
        self.assertEqual(list(SIZE_TIERS), sorted(set(SIZE_TIERS)))

    def test_custom_tiers(self):
        self.assertEqual(size_tiers(10, 100), (10, 21, 43, 87, 100))

    def test_column_capacity(self):
        self.assertEqual(column_capacity(String(40)), 40)
        self.assertEqual(column_capacity(String()), UNLIMITED_SIZE)
        self.assertEqual(column_capacity(Text()), UNLIMITED_SIZE)
        self.assertIs(column_capacity(Integer()), UNAVAILABLE)


class SchemaCapacityTests(DatabaseTestCase):

    def test_get_capacity(self):
        capacity = SchemaCapacity(self.db)
        self.assertEqual(capacity.get_capacity("course", "fullname"), 50)
        self.assertEqual(capacity.get_capacity("course", "summary"), UNLIMITED_SIZE)
        self.assertIs(capacity.get_capacity("course", "nothing"), UNAVAILABLE)
        self.assertIs(capacity.get_capacity("no_such_table", "name"), UNAVAILABLE)

    def test_capacity_is_cached_until_refreshed(self):
        capacity = SchemaCapacity(self.db)
        self.assertEqual(capacity.get_capacity("course", "fullname"), 50)
        self.db.alter_column_length("course", "fullname", 100)
        self.assertEqual(capacity.get_capacity("course", "fullname"), 50)
        self.assertEqual(capacity.get_capacity("course", "fullname", force_refresh=True), 100)

    def test_fits(self):
        capacity = SchemaCapacity(self.db)
        self.assertTrue(capacity.fits("course", "fullname", 50))
        self.assertFalse(capacity.fits("course", "fullname", 51))
        self.assertFalse(capacity.fits("course", "nothing", 1))

    def test_extend_disabled(self):
        capacity = SchemaCapacity(self.db)
        self.assertFalse(capacity.extend("course", "fullname", 80))
        self.assertEqual(capacity.get_capacity("course", "fullname", force_refresh=True), 50)
        self.assertEqual(capacity.extensions_performed(), {})

    def test_extend(self):
        capacity = SchemaCapacity(self.db, can_extend=True)
        self.assertTrue(capacity.extend("course", "fullname", 80))
        self.assertEqual(capacity.get_capacity("course", "fullname"), 255)
        self.assertEqual(capacity.extensions_performed(),
                         {"course": {"fullname": {"previousSize": 50, "newSize": 255}}})

    def test_extend_never_shrinks(self):
        capacity = SchemaCapacity(self.db, can_extend=True)
        self.assertTrue(capacity.extend("course", "fullname", 300))
        self.assertFalse(capacity.extend("course", "fullname", 80))
        self.assertEqual(capacity.get_capacity("course", "fullname", force_refresh=True), 511)

    def test_previous_size_is_the_first_one(self):
        capacity = SchemaCapacity(self.db, can_extend=True)
        self.assertTrue(capacity.extend("course", "fullname", 80))
        self.assertTrue(capacity.extend("course", "fullname", 600))
        self.assertEqual(capacity.extension_performed(),
                         {"course": {"fullname": {"previousSize": 50, "newSize": 1023}}})

    def test_extend_impossible(self):
        capacity = SchemaCapacity(self.db, can_extend=True)
        self.assertFalse(capacity.extend("course", "nothing", 80))
        self.assertFalse(capacity.extend("course", "summary", 80))
        self.assertFalse(capacity.extend("course", "fullname", MAX_EXTEND_SIZE + 1))
        self.assertEqual(capacity.extensions_performed(), {})

    def test_extend_at_ceiling(self):
        self.db.alter_column_length("course", "fullname", MAX_EXTEND_SIZE)
        capacity = SchemaCapacity(self.db, can_extend=True)
        self.assertFalse(capacity.extend("course", "fullname", MAX_EXTEND_SIZE + 10))


if __name__ == '__main__':
    unittest.main()
