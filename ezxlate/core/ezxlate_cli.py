import io
import json
import logging
import sys
import traceback
import requests
from requests.exceptions import HTTPError, ConnectionError
from ezxlate.core import __version__ as VERSION, BaseCLI, KeyValuePairArgs, EzxlateBinding, EzxlateError, \
    get_credential, format_exception
from ezxlate.core.utils import eprint


class EzxlateCLIException (Exception):
    """Base exception class for EzxlateCLI.
    """
    def __init__(self, message):
        super(EzxlateCLIException, self).__init__(message)


class UsageException (EzxlateCLIException):
    """Usage exception.
    """
    def __init__(self, message):
        super(UsageException, self).__init__(message)


class ResourceException (EzxlateCLIException):
    """Remote resource exception.
    """
    def __init__(self, message, cause):
        super(ResourceException, self).__init__(message)
        self.cause = cause


class EzxlateCLI (BaseCLI):
    """Translation API Command-line Interface.
    """
    def __init__(self, description, epilog):
        super(EzxlateCLI, self).__init__(description, epilog, VERSION)

        # initialized after argument parsing
        self.args = None
        self.host = None
        self.protocol = None
        self.binding = None

        self.parser.add_argument("-p", "--protocol", choices=["http", "https"], default='https',
                                 help="transport protocol: 'http' or 'https'")
        self.parser.add_argument("--base-path", metavar="<path>", default="/local/ezxlate",
                                 help="path of the API on the server")
        subparsers = self.parser.add_subparsers(title='sub-commands', dest='subcmd')

        # infos parser
        infos_parser = subparsers.add_parser('infos', help="Show the server version and allowed features.")
        infos_parser.set_defaults(func=self.ezxlate_infos)

        # get parser
        get_parser = subparsers.add_parser('get', help="Extract texts.")
        get_parser.add_argument("action", metavar="<action>", type=str,
                                help="course, module, questioncategories, questions or tags")
        get_parser.add_argument("params", metavar="[key=value key=value ...]",
                                nargs='*', action=KeyValuePairArgs, default={},
                                help="Call parameters, for example: courseid=5 cmid=12")
        get_parser.set_defaults(func=self.ezxlate_get)

        # set parser
        set_parser = subparsers.add_parser('set', help="Update texts.")
        set_parser.add_argument("object", metavar="<object>", type=str,
                                help="course, section, module, question or tag")
        set_parser.add_argument("input_file", metavar="<data.json>", type=str,
                                help="JSON file holding the new texts")
        set_parser.add_argument("--previous", metavar="<previous.json>", type=str,
                                help="JSON file holding the texts expected to be replaced")
        set_parser.add_argument("--extend", action="store_true",
                                help="Allow the server to widen columns too small for the new texts")
        set_parser.add_argument("--gradebook", action="store_true",
                                help="Rename the grade items of renamed activities")
        set_parser.add_argument("params", metavar="[key=value key=value ...]",
                                nargs='*', action=KeyValuePairArgs, default={},
                                help="Call parameters, for example: courseid=5 shortname=cs101")
        set_parser.set_defaults(func=self.ezxlate_set)

    def _post_parser_init(self, args):
        """Shared initialization for all sub-commands.
        """
        self.host = args.host if args.host else 'localhost'
        self.protocol = args.protocol
        key = args.key or get_credential(self.host, args.credential_file)
        if not key:
            raise UsageException("No API key given and none stored for host %s" % self.host)
        self.binding = EzxlateBinding(self.protocol, self.host, key, base_path=args.base_path)

    @staticmethod
    def _load_json(file_path):
        try:
            with io.open(file_path, encoding='utf-8') as f:
                return json.load(f)
        except (OSError, ValueError) as e:
            raise UsageException("Unable to read %s: %s" % (file_path, format_exception(e)))

    @staticmethod
    def _print(answer):
        print(json.dumps(answer, indent=2, ensure_ascii=False))

    @staticmethod
    def _call(method, *args, **kwargs):
        try:
            return method(*args, **kwargs)
        except ValueError as e:
            raise ResourceException("Invalid answer from server", e)

    def ezxlate_infos(self, args):
        """Implements the infos sub-command.
        """
        self._print(self._call(self.binding.infos))

    def ezxlate_get(self, args):
        """Implements the get sub-command.
        """
        self._print(self._call(self.binding.get, args.action, **args.params))

    def ezxlate_set(self, args):
        """Implements the set sub-command.
        """
        data = self._load_json(args.input_file)
        previous = self._load_json(args.previous) if args.previous else None
        self._print(self._call(self.binding.set, args.object, data,
                               previous=previous,
                               extend=args.extend,
                               gradebook=args.gradebook,
                               **args.params))

    def main(self, argv=None):
        """Main routine of the CLI.
        """
        args = self.parse_cli(argv)

        try:
            if not hasattr(args, 'func'):
                self.parser.print_usage()
                return 1

            self._post_parser_init(args)
            args.func(args)
            return 0
        except UsageException as e:
            eprint("{prog} {subcmd}: {msg}".format(prog=self.parser.prog, subcmd=args.subcmd, msg=e))
        except ConnectionError as e:
            eprint("{prog}: Connection error occurred".format(prog=self.parser.prog))
        except EzxlateError as e:
            eprint("{prog} {subcmd}: {msg}".format(prog=self.parser.prog, subcmd=args.subcmd, msg=e))
        except HTTPError as e:
            if e.response is not None and e.response.status_code == requests.codes.not_found:
                msg = 'API not found on this host'
            elif e.response is not None and e.response.status_code == requests.codes.forbidden:
                msg = 'Permission denied'
            else:
                msg = e
            logging.debug(format_exception(e))
            eprint("{prog} {subcmd}: {msg}".format(prog=self.parser.prog, subcmd=args.subcmd, msg=msg))
        except ResourceException as e:
            logging.debug(format_exception(e.cause))
            eprint("{prog} {subcmd}: {msg}".format(prog=self.parser.prog, subcmd=args.subcmd, msg=e))
        except RuntimeError as e:
            logging.warning(format_exception(e))
            eprint('Unexpected runtime error occurred')
        except Exception:
            eprint('Unexpected error occurred')
            traceback.print_exc()
        return 1


def main():
    DESC = "Translation API Command-Line Interface"
    INFO = "Extracts and updates course texts through a remote translation API"
    return EzxlateCLI(DESC, INFO).main()


if __name__ == '__main__':
    sys.exit(main())
