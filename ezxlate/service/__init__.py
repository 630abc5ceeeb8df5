"""Transport-neutral handlers of the translation API calls."""

from ezxlate.core import LoggingEventSink, AmqpEventSink
from ezxlate.service.config import Settings, ConfigurationError, load_settings
from ezxlate.service.api import Api, Authorizer, AllowAll
from ezxlate.service.api_infos import ApiInfos
from ezxlate.service.api_get import ApiGet
from ezxlate.service.api_set import ApiSet

HANDLERS = {
    "infos": ApiInfos,
    "get": ApiGet,
    "set": ApiSet,
}


def make_event_sink(settings):
    """Sink publishing change notices to the settings' "amqp_host", or logging them when there is none.

       Build it once and pass it to every handle() call: an AMQP sink keeps its connection open.
    """
    host = settings.get("amqp_host")
    if host:
        return AmqpEventSink(host)
    return LoggingEventSink()


def handle(endpoint, params, settings, database, **kwargs):
    """Process one call of `endpoint` ("infos", "get" or "set") and return the answer mapping."""
    handler = HANDLERS.get(endpoint)
    if handler is None:
        return Api.failed("error", "unknown endpoint '%s'" % endpoint)
    return handler(params, settings, database, **kwargs).process()
