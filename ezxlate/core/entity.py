"""Composite nodes: one row with named children, and keyed lists of such rows."""

import importlib
import logging
from collections.abc import Mapping

from .field import Field
from .tree import ErrorCode, TreeNode, Value

logger = logging.getLogger(__name__)

_UNLOADED = object()

_entity_classes = {}


def register_entity(name):
    """Class decorator registering a specialized entity under `name` (a table or module name)."""
    def decorator(cls):
        _entity_classes[name] = cls
        cls.entity_name = name
        return cls
    return decorator


def entity_class(name):
    """Specialized entity class registered under `name`, or None."""
    importlib.import_module("ezxlate.entities")
    return _entity_classes.get(name)


GENERIC_FIELDS = ("name", "intro")
"""Columns exposed by entities of modules without a registered declaration"""


def make_entity(name, id_or_record, context, table=None, fields=None, protected_fields=None):
    """Build the entity registered under `name`, falling back to a generic Entity on `table` (default: `name`)
       exposing `fields` (default: GENERIC_FIELDS)."""
    cls = entity_class(name)
    if cls is None:
        if not fields:
            fields = GENERIC_FIELDS
        logger.debug("No specialized entity for %s, using generic fields %s", name, list(fields))
        return Entity(id_or_record, context, table=table or name, fields=fields, protected_fields=protected_fields)
    return cls(id_or_record, context, table=table, protected_fields=protected_fields)


def split_alias(name):
    """"alias:column" -> (alias, column); "column" -> (column, column)."""
    if ":" in name:
        alias, column = name.split(":", 1)
        return alias, column
    return name, name


class Entity (TreeNode):
    """A row of a table exposed as named child nodes.

       The children are built once, at construction: the `fields` columns of
       the row, the read-only `protected_fields` values, and whatever the
       define_fields() hook of a subclass declares. The row itself is only
       read from the database the first time one of its columns is needed.
    """

    table = None
    entity_name = None

    def __init__(self, id_or_record, context, table=None, fields=(), protected_fields=None):
        super(Entity, self).__init__()
        self.context = context
        if table:
            self.table = table
        self.children = dict()
        self.fields_error = dict()
        self._other_tables = dict()
        if isinstance(id_or_record, Mapping):
            self._record = dict(id_or_record)
            self.id = self._record.get(self.database.id_name(self.table))
        else:
            self._record = _UNLOADED
            self.id = id_or_record
        for name, value in (protected_fields or {}).items():
            self.add_direct(name, value).only_get()
        if fields:
            self.add_fields(*fields)
        self.define_fields()

    def __repr__(self):
        return "<%s %s id=%r>" % (type(self).__name__, self.table, self.id)

    def __getitem__(self, name):
        return self.children[name]

    def __contains__(self, name):
        return name in self.children

    @property
    def database(self):
        return self.context.database

    def define_fields(self):
        """Declare the children of a specialized entity. Nothing to declare for a generic one."""
        pass

    def record(self, name=None):
        """The row of this entity (loaded on first use), or the value of one of its columns."""
        if self._record is _UNLOADED:
            row = None
            if self.table and self.id is not None:
                row = self.database.get(self.table, self.id)
            if row is None:
                logger.debug("No row %r in table %s", self.id, self.table)
            self._record = row or {}
        if name is None:
            return self._record
        return self._record.get(name)

    def is_loaded(self):
        return self._record is not _UNLOADED

    def exists(self):
        return bool(self.record())

    def add_direct(self, name, value):
        """Add a child node as is (wrapped in a Value unless it already is a node)."""
        if not isinstance(value, TreeNode):
            value = Value(value)
        self.children[name] = value
        return value

    def add_field(self, name, table_alias=None):
        """Add a Field child for a column of the row, or of a table registered with add_table().

           `name` is either a column name, or "alias:column" to expose the column under another name.
        """
        alias, column = split_alias(name)
        if table_alias is None:
            field = Field(self.context, self.table, self.id, column,
                          loader=lambda: self.record(column))
        else:
            table, record = self._other_tables[table_alias]
            field = Field(self.context, table, record.get(self.database.id_name(table)), column,
                          value=record.get(column))
        self.children[alias] = field
        return field

    def add_fields(self, *names):
        for name in names:
            self.add_field(name)

    def add_table(self, alias, table, record, fields=()):
        """Register a row of another table under `alias` and add Field children for its `fields`."""
        self._other_tables[alias] = (table, dict(record))
        for name in fields:
            self.add_field(name, alias)

    def _join_columns(self, table, join):
        # join is "target" (target == our id) or {target: local} (target == our local column)
        if isinstance(join, Mapping):
            target, local = next(iter(join.items()))
        else:
            target, local = join, self.database.id_name(self.table)
        return target, local

    def link_table(self, table, join, fields=()):
        """Add Field children taken from the one row of `table` joined to this row.

           Returns the joined row, or None (and adds nothing) when there is no such row.
        """
        target, local = self._join_columns(table, join)
        value = self.record(local)
        if value is None:
            return None
        record = self.database.get(table, value, target)
        if record is None:
            logger.debug("No row of %s where %s=%r", table, target, value)
            return None
        row_id = record.get(self.database.id_name(table))
        for name in fields:
            alias, column = split_alias(name)
            self.children[alias] = Field(self.context, table, row_id, column, value=record.get(column))
        return record

    def add_entities_from_table(self, name, entity, table, join, index_on=None):
        """Add an Entities child built from the rows of `table` referencing this row.

           `entity` is the name of a registered entity, or a list of columns of
           `table` to expose through generic entities.
        """
        if index_on is None:
            index_on = self.database.id_name(table)
        target, local = self._join_columns(table, join)
        value = self.record(local)
        rows = self.database.get_all(table, value, target) if value is not None else []
        if isinstance(entity, str):
            entities = Entities(rows, self.context, entity_name=entity, table=table, index_on=index_on)
        else:
            entities = Entities(rows, self.context, table=table, fields=entity, index_on=index_on)
        self.children[name] = entities
        return entities

    def get(self):
        result = dict()
        for name, child in self.children.items():
            value = child.get()
            if value is not None:
                result[name] = value
        return result or None

    def update(self, data, previous=None):
        self.error = ErrorCode.ok
        self.fields_error = dict()
        if self.read_only:
            return self._error(ErrorCode.notfound)
        if not isinstance(data, Mapping):
            return self._error(ErrorCode.error)
        if not isinstance(previous, Mapping):
            previous = None
        success = True
        for name, value in data.items():
            child = self.children.get(name)
            if child is None:
                self.fields_error[name] = ErrorCode.notfound
                success = False
                continue
            child_previous = previous.get(name) if previous is not None else None
            if not child.update(value, child_previous):
                self.fields_error[name] = ErrorCode.partial
                success = False
        return success

    def get_errors(self):
        if self.error != ErrorCode.ok:
            return self.error
        result = dict()
        for name, code in self.fields_error.items():
            if code == ErrorCode.partial:
                errors = self.children[name].get_errors()
                if errors:
                    result[name] = errors
            elif code != ErrorCode.ok:
                result[name] = code
        return result or None


class Entities (TreeNode):
    """Entities built from rows of one table, keyed by the value of their `index_on` column.

       Each entity is the registered `entity_name` entity, or a generic Entity
       on `table` exposing `fields`. Keys are fixed at construction; updates
       address them by key, compared as text since documents received over
       JSON only have text keys.
    """

    def __init__(self, rows, context, entity_name=None, table=None, fields=(), index_on="id"):
        super(Entities, self).__init__()
        self.context = context
        self.entries = dict()
        self.entities_error = dict()
        self._keys = dict()
        for row in rows:
            key = row.get(index_on)
            if entity_name:
                entity = make_entity(entity_name, row, context, table=table, fields=fields or None)
            else:
                entity = Entity(row, context, table=table, fields=fields)
            self.entries[key] = entity
            self._keys[str(key)] = key

    def __repr__(self):
        return "<%s %r>" % (type(self).__name__, list(self.entries))

    def __len__(self):
        return len(self.entries)

    def __getitem__(self, key):
        return self.entries[self._keys[str(key)]]

    def keys(self):
        return list(self.entries)

    def only_get(self):
        for entity in self.entries.values():
            entity.only_get()
        return super(Entities, self).only_get()

    def get(self):
        result = dict()
        for key, entity in self.entries.items():
            value = entity.get()
            if value is not None:
                result[key] = value
        return result or None

    def update(self, data, previous=None):
        self.error = ErrorCode.ok
        self.entities_error = dict()
        if self.read_only:
            return self._error(ErrorCode.notfound)
        if not isinstance(data, Mapping):
            return self._error(ErrorCode.error)
        if not isinstance(previous, Mapping):
            previous = None
        success = True
        for key, entity_data in data.items():
            entry_key = self._keys.get(str(key))
            if entry_key is None:
                self.entities_error[key] = ErrorCode.notfound
                success = False
                continue
            entity_previous = previous.get(key) if previous is not None else None
            if not self.entries[entry_key].update(entity_data, entity_previous):
                self.entities_error[key] = ErrorCode.partial
                success = False
        return success

    def get_errors(self):
        if self.error != ErrorCode.ok:
            return self.error
        result = dict()
        for key, code in self.entities_error.items():
            if code == ErrorCode.partial:
                errors = self[key].get_errors()
                if errors:
                    result[key] = errors
            elif code != ErrorCode.ok:
                result[key] = code
        return result or None
