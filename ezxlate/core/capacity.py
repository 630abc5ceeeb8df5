"""Maximum storable length of text columns, and on-demand widening of them."""

import logging
from collections import OrderedDict

from sqlalchemy.types import String

logger = logging.getLogger(__name__)

UNAVAILABLE = None
"""Capacity of a column that does not exist (or does not hold text)"""

UNLIMITED_SIZE = 4294967295
"""Capacity reported for unbounded text columns"""

MAX_EXTEND_SIZE = 65535
"""Columns are never widened beyond this size"""


def size_tiers(first=255, ceiling=MAX_EXTEND_SIZE):
    """Ascending sizes a column may be widened to: first, 2*first+1, ... up to the ceiling."""
    tiers = []
    size = first
    while size < ceiling:
        tiers.append(size)
        size = size * 2 + 1
    tiers.append(ceiling)
    return tuple(tiers)


SIZE_TIERS = size_tiers()


def column_capacity(column_type):
    """Capacity of a reflected column type."""
    if not isinstance(column_type, String):
        return UNAVAILABLE
    length = getattr(column_type, "length", None)
    if not length or length >= UNLIMITED_SIZE:
        return UNLIMITED_SIZE
    return length


class SchemaCapacity (object):
    """Per-request cache of column capacities.

       Capacities are read from the live schema the first time a
       (table, column) is needed and cached afterwards. When extension
       is allowed, `extend()` widens a column to the smallest tier able
       to hold the requested length and remembers the size it had before
       its first widening, for `extensions_performed()`.

       One instance must be created for each request: a capacity cached
       by an earlier request may be stale.
    """

    def __init__(self, database, can_extend=False, tiers=SIZE_TIERS, max_size=MAX_EXTEND_SIZE):
        self.database = database
        self.can_extend = can_extend
        self.tiers = tuple(sorted(tiers))
        self.max_size = max_size
        self._sizes = {}
        self._initial = OrderedDict()

    def get_capacity(self, table, column, force_refresh=False):
        """Maximum length storable in `table`.`column`, or UNAVAILABLE."""
        sizes = self._sizes.setdefault(table, {})
        if column in sizes and not force_refresh:
            return sizes[column]
        columns = self.database.get_columns(table)
        if not columns or column not in columns:
            size = UNAVAILABLE
        else:
            size = column_capacity(columns[column]["type"])
        sizes[column] = size
        return size

    def fits(self, table, column, length):
        size = self.get_capacity(table, column)
        return size is not UNAVAILABLE and length <= size

    def extend(self, table, column, required_length):
        """Widen `table`.`column` so it can hold `required_length` characters.

           Returns False when extension is not allowed, the column is
           absent, already large enough, already at the ceiling, or no tier
           is large enough.
        """
        if not self.can_extend:
            return False
        size = self.get_capacity(table, column)
        if size is UNAVAILABLE or size >= required_length or size >= self.max_size:
            return False
        new_size = None
        for tier in self.tiers:
            if tier >= required_length:
                new_size = tier
                break
        if new_size is None:
            logger.debug("No size tier can hold %d characters in %s.%s", required_length, table, column)
            return False
        if not self.database.alter_column_length(table, column, new_size):
            return False
        self._initial.setdefault(table, OrderedDict()).setdefault(column, size)
        self.get_capacity(table, column, force_refresh=True)
        logger.info("Extended %s.%s from %s to %s characters", table, column, size, new_size)
        return True

    def extensions_performed(self):
        """All widenings of this request: {table: {column: {"previousSize": x, "newSize": y}}}."""
        result = OrderedDict()
        for table, columns in self._initial.items():
            result[table] = OrderedDict()
            for column, size in columns.items():
                result[table][column] = {"previousSize": size,
                                         "newSize": self.get_capacity(table, column)}
        return result

    extension_performed = extensions_performed
