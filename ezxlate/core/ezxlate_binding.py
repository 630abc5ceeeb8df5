import logging
import requests
from . import get_new_requests_session, DEFAULT_SESSION_CONFIG
from .utils.version_utils import is_compatible

logger = logging.getLogger(__name__)

ENDPOINTS = ("infos", "get", "set")


class EzxlateError (Exception):
    """The server answered with a code other than "ok" (or "partial" for updates)."""

    def __init__(self, code, message=None, answer=None):
        super(EzxlateError, self).__init__("%s%s" % (code, ": %s" % message if message else ""))
        self.code = code
        self.message = message
        self.answer = answer


def _response_raise_for_status(r):
    if 400 <= r.status_code < 600:
        raise requests.HTTPError(
            u'%s %s Error: %s for url: [%s]%s' % (
                r.status_code,
                'Client' if r.status_code < 500 else 'Server',
                r.reason,
                r.url,
                " Details: %s" % r.content if r.content else "",
            ),
            response=r
        )


class EzxlateBinding (object):
    """Client of a translation API server.

       Every call POSTs a JSON document (the API key plus the call
       parameters) to one of the endpoints of the server and returns the
       decoded JSON answer.
    """

    def __init__(self, scheme, server, key, base_path="/local/ezxlate", session_config=None, raise_on_error=True):
        """Create HTTP(S) server binding.

           Arguments:
             scheme: 'http' or 'https'
             server: server FQDN string
             key: API key configured on the server
             base_path: path of the API endpoints on the server
             session_config: requests session retry and timeout settings
             raise_on_error: raise EzxlateError when the server answers with an error code
        """
        self._server_uri = "%s://%s" % (scheme, server)
        self.base_path = base_path.rstrip("/")
        self.key = key
        self.raise_on_error = raise_on_error
        self.session_config = DEFAULT_SESSION_CONFIG if not session_config else session_config
        self._session = get_new_requests_session(self._server_uri + '/', self.session_config)
        # allow loopback requests to bypass SSL cert verification
        if "https://localhost" in self._server_uri:
            self._session.verify = False

    def endpoint_url(self, endpoint):
        if endpoint not in ENDPOINTS:
            raise ValueError("Unknown endpoint: %s" % endpoint)
        return "%s%s/%s.php" % (self._server_uri, self.base_path, endpoint)

    def call(self, endpoint, params=None, accepted_codes=("ok",)):
        """POST `params` to `endpoint` and return the decoded answer."""
        body = dict(params or {})
        body["key"] = self.key
        url = self.endpoint_url(endpoint)
        logger.debug("Calling %s with %s", url, sorted(k for k in body if k != "key"))
        r = self._session.post(url, json=body)
        _response_raise_for_status(r)
        answer = r.json()
        code = answer.get("code") if isinstance(answer, dict) else None
        if self.raise_on_error and code not in accepted_codes:
            raise EzxlateError(code or "error", answer.get("message") if isinstance(answer, dict) else None, answer)
        return answer

    def infos(self):
        """Server version and the features (previous verification, fields extension, gradebook) it allows."""
        return self.call("infos")

    def get(self, action, **params):
        """Extract the texts of a course, module, question category, questions or tags."""
        params["action"] = action
        return self.call("get", params)

    def set(self, object_name, data, previous=None, extend=False, gradebook=False, **params):
        """Update the texts of a course, section, module, question or tag.

           Returns the answer, whose "code" is "ok" or "partial" ("errors" then
           details what failed), with the columns widened under "extended".
        """
        params.update({"object": object_name,
                       "data": data,
                       "extend": 1 if extend else 0,
                       "gradebook": 1 if gradebook else 0})
        if previous is not None:
            params["previous"] = previous
        return self.call("set", params, accepted_codes=("ok", "partial"))

    def is_compatible_server(self, compat_versions):
        """True if the version reported by the server matches `compat_versions` (see is_compatible())."""
        version = self.infos().get("version")
        if version is None:
            return False
        return is_compatible(str(version), compat_versions)
