"""Per-request state shared by the nodes of a tree."""

import logging
from collections import namedtuple

from .capacity import SchemaCapacity
from .utils.core_utils import stob

logger = logging.getLogger(__name__)


def _requested(flag):
    # request flags arrive as booleans, 0/1 or their text forms
    if flag is None or flag == "":
        return False
    return stob(flag)


class Features (namedtuple("Features", ["previous_verification", "extend", "update_gradebook"])):
    """Switches controlling how fields are updated during one request.

       previous_verification: require the caller's "previous" value to match the stored one.
       extend: allow text columns to be widened when a new value does not fit.
       update_gradebook: mirror renames of activities into their grade items.
    """
    __slots__ = ()

    def __new__(cls, previous_verification=False, extend=False, update_gradebook=False):
        return super(Features, cls).__new__(cls, bool(previous_verification), bool(extend), bool(update_gradebook))

    @classmethod
    def resolve(cls, settings, params):
        """Combine server settings with the parameters of a request.

           A feature is on only when the server allows it and the request asks for it.
           Previous-value verification is asked for by sending a "previous" document.
        """
        return cls(
            previous_verification=bool(settings.get("previous")) and params.get("previous") is not None,
            extend=bool(settings.get("extend")) and _requested(params.get("extend")),
            update_gradebook=bool(settings.get("gradebook")) and _requested(params.get("gradebook")),
        )


class ChangeLedger (object):
    """Ordered set of the (table, row id, column) locations modified during a request."""

    def __init__(self):
        self._entries = []
        self._seen = set()

    def add(self, table, row_id, column):
        entry = (table, row_id, column)
        if entry not in self._seen:
            self._seen.add(entry)
            self._entries.append(entry)

    def __len__(self):
        return len(self._entries)

    def __iter__(self):
        return iter(self._entries)

    def __contains__(self, entry):
        return tuple(entry) in self._seen

    def __bool__(self):
        return bool(self._entries)

    def tables(self):
        result = []
        for table, _, _ in self._entries:
            if table not in result:
                result.append(table)
        return result

    def as_strings(self):
        return ["%s:%s:%s" % entry for entry in self._entries]


class RequestContext (object):
    """Everything a tree needs for one extraction or one update.

       Holds the database, the feature switches, a fresh schema capacity
       cache, a fresh change ledger and the module name cache. Build one
       per request and discard it afterwards.
    """

    def __init__(self, database, features=None, capacity=None, ledger=None):
        self.database = database
        self.features = features if features is not None else Features()
        self.capacity = capacity if capacity is not None else SchemaCapacity(database, can_extend=self.features.extend)
        self.ledger = ledger if ledger is not None else ChangeLedger()
        self._modules = None

    def module_name(self, module_id):
        """Name of the activity plugin registered under `module_id` ("" if unknown)."""
        if self._modules is None:
            self._modules = {record["id"]: record["name"] for record in self.database.get_all("modules")}
        try:
            module_id = int(module_id)
        except (TypeError, ValueError):
            return ""
        return self._modules.get(module_id, "")
