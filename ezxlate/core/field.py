import logging
import numbers

from .tree import ErrorCode, TreeNode, is_blank, present

logger = logging.getLogger(__name__)

GRADEBOOK_TABLE = "grade_items"
GRADEBOOK_HISTORY_TABLE = "grade_items_history"
GRADEBOOK_COLUMN = "itemname"

COMPANION_COLUMNS = {
    "name": [("tool_recyclebin_course", "name")],
    "fullname": [("tool_recyclebin_category", "fullname")],
    "shortname": [("tool_recyclebin_category", "shortname")],
}
"""Copies of a column kept elsewhere, widened together with it"""


class Field (TreeNode):
    """A node that is one column of one row of a table.

       The stored value is given directly, or obtained once from `loader`
       the first time it is needed. Updates overwrite existing non-blank
       text with new non-blank text, subject to the read-only flag, the
       previous-value check, the column capacity (widened when allowed)
       and, for fields marked with gradebook(), the grade item mirroring.
    """

    def __init__(self, context, table, row_id, name, value=None, loader=None):
        super(Field, self).__init__()
        self.context = context
        self.table = table
        self.id = row_id
        self.name = name
        self._value = value
        self._loader = loader
        self.mirrored = False

    def __repr__(self):
        return "<%s %s.%s id=%r>" % (type(self).__name__, self.table, self.name, self.id)

    @property
    def value(self):
        if self._loader is not None:
            self._value = self._loader()
            self._loader = None
        return self._value

    def gradebook(self):
        """Mirror updates of this field into the grade item named after it."""
        self.mirrored = True
        return self

    def get(self):
        return present(self.value)

    def update(self, new_value, previous=None):
        self.error = ErrorCode.ok
        if self.read_only:
            return self._error(ErrorCode.notfound)
        if new_value is not None and (isinstance(new_value, bool) or
                                      not isinstance(new_value, (str, numbers.Number))):
            return self._error(ErrorCode.error)
        if is_blank(new_value) or is_blank(self.value):
            return self._error(ErrorCode.empty)
        new_value = str(new_value)
        if not self.check_previous(previous):
            return self._error(ErrorCode.previous)
        if not self.check_and_extend(len(new_value)):
            return self._error(ErrorCode.toolong)
        database = self.context.database
        if not database.update(self.table, self.id, self.name, new_value):
            return self._error(ErrorCode.error)
        old_value = self.value
        self._value = new_value
        if str(old_value) != new_value:
            self.context.ledger.add(self.table, self.id, self.name)
            logger.debug("Updated %s.%s for id %s", self.table, self.name, self.id)
        if self.mirrored and self.context.features.update_gradebook:
            return self.update_gradebook(old_value, new_value)
        return True

    def get_errors(self):
        if self.error != ErrorCode.ok:
            return self.error
        return None

    def check_previous(self, previous):
        if not self.context.features.previous_verification:
            return True
        if is_blank(previous):
            return False
        return str(previous).strip() == str(self.value).strip()

    def check_and_extend(self, length, table=None, column=None):
        """True if `length` characters fit in the column, widening it when allowed."""
        if table is None:
            table = self.table
        if column is None:
            column = self.name
        capacity = self.context.capacity
        if capacity.fits(table, column, length):
            return True
        if not self.context.features.extend:
            return False
        if table == self.table and column == self.name:
            for companion_table, companion_column in COMPANION_COLUMNS.get(column, []):
                if not capacity.fits(companion_table, companion_column, length) and \
                        not capacity.extend(companion_table, companion_column, length):
                    logger.debug("Companion column %s.%s not extended", companion_table, companion_column)
        return capacity.extend(table, column, length)

    def update_gradebook(self, old_value, new_value):
        """Rename the grade item that carries the previous text of this field."""
        database = self.context.database
        item = database.load_one(
            "SELECT * FROM %s WHERE %s = :name AND itemmodule = :module AND iteminstance = :instance" %
            (GRADEBOOK_TABLE, GRADEBOOK_COLUMN),
            {"name": old_value, "module": self.table, "instance": self.id})
        if item is None:
            return True
        length = len(new_value)
        if not self.check_and_extend(length, GRADEBOOK_TABLE, GRADEBOOK_COLUMN) or \
                not self.check_and_extend(length, GRADEBOOK_HISTORY_TABLE, GRADEBOOK_COLUMN):
            return self._error(ErrorCode.gradebookfailed)
        item_id = item[database.id_name(GRADEBOOK_TABLE)]
        if not database.update(GRADEBOOK_TABLE, item_id, GRADEBOOK_COLUMN, new_value):
            return self._error(ErrorCode.gradebookfailed)
        self.context.ledger.add(GRADEBOOK_TABLE, item_id, GRADEBOOK_COLUMN)
        return True
