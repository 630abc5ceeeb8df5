"""Common protocol of the text tree nodes.

A text tree describes an object (a course, an activity, a question, a tag)
with all the texts it depends on (sections of a course, answers of a
question, ...). Every node of the tree is one of:

- an Entity: one row of a table, with named child nodes
- an Entities list: entities of one table referencing a parent row, by key
- a Field: one column of one row of a table
- a Value: a value inserted directly, not attached to the database

All of them support the same four operations: only_get(), get(),
update(data, previous) and get_errors().
"""

import numbers
from enum import Enum


class ErrorCode (str, Enum):
    """Outcome of an update on a node."""
    ok = 'ok'
    notfound = 'notfound'
    error = 'error'
    empty = 'empty'
    previous = 'previous'
    toolong = 'toolong'
    gradebookfailed = 'gradebookfailed'
    partial = 'partial'


def present(value):
    """Externally visible form of a stored value.

       Numeric zero and the string "0" become 0. Other empty values (None,
       False, empty strings and empty collections) become None, meaning the
       value is omitted by its parent.
    """
    if value is None or isinstance(value, bool):
        return value or None
    if isinstance(value, numbers.Number):
        return 0 if value == 0 else value
    if isinstance(value, str) and value == "0":
        return 0
    if hasattr(value, "__len__") and len(value) == 0:
        return None
    return value


def is_blank(value):
    """True for None, or for a text whose stripped form is empty. "0" is not blank."""
    if value is None:
        return True
    return str(value).strip() == ""


class TreeNode (object):
    """Base class of all nodes."""

    def __init__(self):
        self.read_only = False
        self.error = ErrorCode.ok

    def only_get(self):
        """Declare this node readable only: any later update fails with "notfound".

           This allows one tree declaration to serve both extraction and update
           while protecting some nodes (identifiers, ...) from changes.

           Returns self (to allow chained declarations).
        """
        self.read_only = True
        return self

    def get(self):
        """Extract the branch below this node (None when there is nothing to show)."""
        raise NotImplementedError()

    def update(self, data, previous=None):
        """Update the branch below this node with `data`.

           `previous` holds the values the caller believes are stored, for
           optimistic concurrency checks. Returns True if everything was
           updated; failures are recorded as error codes, never raised.
        """
        raise NotImplementedError()

    def get_errors(self):
        """Errors of the last update: None, an error code, or a mapping of child name to errors."""
        raise NotImplementedError()

    def mark_read_only(self):
        return self.only_get()

    def extract(self):
        return self.get()

    def apply_update(self, data, previous=None):
        return self.update(data, previous)

    def report_errors(self):
        return self.get_errors()

    @property
    def status(self):
        if self.error != ErrorCode.ok:
            return self.error
        return ErrorCode.partial if self.get_errors() else ErrorCode.ok

    def _error(self, code=ErrorCode.error):
        self.error = code
        return False


class Value (TreeNode):
    """A node holding a value directly (identifiers, labels), never updatable."""

    def __init__(self, value):
        super(Value, self).__init__()
        self.value = value

    def __repr__(self):
        return "<%s %r>" % (type(self).__name__, self.value)

    def get(self):
        return present(self.value)

    def update(self, data, previous=None):
        return self._error(ErrorCode.notfound)

    def get_errors(self):
        if self.error != ErrorCode.ok:
            return self.error
        return None
