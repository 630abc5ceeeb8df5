"""Change notices emitted after an update modified stored texts."""

import json
import logging

import pika

from .utils.core_utils import format_exception

logger = logging.getLogger(__name__)


class EventSink (object):
    """Receiver of change notices."""

    def emit(self, event_name, payload):
        """Deliver one notice. Returns True if it was delivered."""
        raise NotImplementedError()

    def close(self):
        pass


class LoggingEventSink (EventSink):
    """Writes notices to the log."""

    def __init__(self, level=logging.INFO):
        self.level = level

    def emit(self, event_name, payload):
        logger.log(self.level, "Change notice %s: %s", event_name, json.dumps(payload, sort_keys=True, default=str))
        return True


class AmqpEventSink (EventSink):
    """Publishes notices as JSON messages on a fanout exchange of an AMQP server."""

    def __init__(self, host, exchange="ezxlate_changes"):
        self.host = host
        self.exchange = exchange
        self.connection = None
        self.channel = None

    def _amqp_bind(self):
        """Bind or rebind to AMQP for change notice publication."""
        self.close()
        self.connection = pika.BlockingConnection(pika.ConnectionParameters(host=self.host))
        self.channel = self.connection.channel()
        self.channel.exchange_declare(self.exchange, exchange_type='fanout')
        logger.debug("Change-notice exchange %s open on %s", self.exchange, self.host)

    def emit(self, event_name, payload):
        body = json.dumps({"event": event_name, "payload": payload}, default=str)
        try:
            if self.channel is None:
                self._amqp_bind()
            self.channel.basic_publish(exchange=self.exchange,
                                       routing_key='',
                                       body=body,
                                       properties=pika.BasicProperties(content_type='application/json'))
        except pika.exceptions.AMQPError as e:
            logger.warning("Unable to publish change notice %s: %s", event_name, format_exception(e))
            self.close()
            return False
        return True

    def close(self):
        if self.connection is not None:
            try:
                self.connection.close()
            except pika.exceptions.AMQPError as e:
                logger.debug("Error closing AMQP connection: %s", format_exception(e))
        self.connection = None
        self.channel = None
