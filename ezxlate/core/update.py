"""Run one extraction or one update over a text tree."""

import logging

from .tree import ErrorCode

logger = logging.getLogger(__name__)


class UpdateReport (object):
    """Outcome of run_update().

       code: "ok" when every requested change was applied, "partial" otherwise.
       errors: error report of the root node (None when fully successful).
       extended: columns widened during the update, see SchemaCapacity.extensions_performed().
       changed: (table, row id, column) locations whose value actually changed.
    """

    def __init__(self, code, errors=None, extended=None, changed=None):
        self.code = code
        self.errors = errors
        self.extended = extended or {}
        self.changed = list(changed or [])

    def __repr__(self):
        return "<%s code=%s errors=%r extended=%r changed=%d>" % (
            type(self).__name__, self.code, self.errors, self.extended, len(self.changed))

    @property
    def ok(self):
        return self.code == ErrorCode.ok

    def as_answer(self):
        answer = {"code": self.code.value}
        if self.errors:
            answer["errors"] = self.errors
        if self.extended:
            answer["extended"] = self.extended
        return answer


def run_update(root, data, previous, context):
    root.update(data, previous)
    errors = root.get_errors()
    code = ErrorCode.ok if not errors else ErrorCode.partial
    report = UpdateReport(code,
                          errors=errors,
                          extended=context.capacity.extensions_performed(),
                          changed=context.ledger)
    logger.info("Update of %r: %s, %d value(s) changed, %d table(s) extended",
                root, code.value, len(report.changed), len(report.extended))
    return report


def run_extract(root):
    return root.get()
