import re
import sys
from packaging import version


def get_installed_version(ver):
    """
    Generates an external version string from an internal one. This is currently only being used to determine
    whether we are operating in a "frozen" environment or not, but other decorators could be added.
    """
    version_str = str(ver)
    return version_str if not getattr(sys, 'frozen', False) else version_str + '-frozen'


_OPERATORS = {
    ">=": lambda a, b: a >= b,
    "<=": lambda a, b: a <= b,
    ">": lambda a, b: a > b,
    "<": lambda a, b: a < b,
    "==": lambda a, b: a == b,
    "!=": lambda a, b: a != b,
}


def is_compatible(source_version, compat_versions):
    """
    Compare a source version string to a set of target version string specifications, using the packaging module
    version comparison logic.

    :param source_version: a source version string
    :param compat_versions:
        an array of tuples with each tuple consisting of a set of strings of the form
        `<operator><version>`. The source_version is evaluated in a conjunction against each
        `<operator><version>` string in the tuple. The result of every tuple evaluation is then evaluated in a
        disjunction against other tuples in the array.  If any one of the tuples evaluates to True, then the
        source version is assumed to be compatible.
    :return: boolean indicating compatibility

    Example:
    ::
        is_compatible("1.0.2", [[">=1.0.0", "<2.0.0"]])

    :return: `True`

    """
    pattern = "^(?P<operator>(>=|<=|>|<|==|!=))(?P<version>.*)$"
    compat = None
    for version_spec in compat_versions:
        check = None
        for ver in version_spec:
            match = re.search(pattern, ver.strip())
            if match:
                gd = match.groupdict()
                ret = _OPERATORS[gd["operator"]](version.parse(str(source_version)), version.parse(gd["version"]))
                if check is None:
                    check = ret
                else:
                    check = ret and check
        if compat is None:
            compat = check
        else:
            compat = check or compat

    return compat if compat is not None else False
