import logging

logger = logging.getLogger(__name__)


class BaseMessageBackend:
    """
    External message delivery (WhatsApp/SMS gateways). Subclasses implement
    send() and return True on success.
    """

    def send(self, phone_number, message):
        raise NotImplementedError


class LoggingMessageBackend(BaseMessageBackend):
    """Writes messages to the log instead of sending them."""

    def send(self, phone_number, message):
        logger.info("Message to %s: %s", phone_number, message)
        return True


class LocmemMessageBackend(BaseMessageBackend):
    """Keeps sent messages in memory. Used by tests."""
    outbox = []

    def send(self, phone_number, message):
        self.outbox.append((phone_number, message))
        return True
