import logging

__all__ = ["Loggable"]


class Loggable:
    """Gives an instance a logger named after its class identifier."""

    @property
    def logger(self) -> logging.Logger:
        return logging.getLogger(self.class_name)
