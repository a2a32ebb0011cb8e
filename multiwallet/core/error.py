"""Common exception classes."""

import re
from typing import Iterator


class BaseError(Exception):
    """Generic exception class which other exceptions should inherit from."""

    def __init__(self, *args, error_code: str = None, **kwargs):
        """Initialize a BaseError instance."""
        super().__init__(*args, **kwargs)
        self.error_code = error_code or None

    @property
    def message(self) -> str:
        """Accessor for the error message."""
        return str(self.args[0]).strip() if self.args else ""

    def causes(self) -> Iterator[BaseException]:
        """Walk this error and the chain of exceptions it was raised from."""
        err = self
        while err is not None:
            yield err
            err = err.__cause__

    @staticmethod
    def _one_line(exc: BaseException) -> str:
        text = str(exc.args[0]).strip() if exc.args else exc.__class__.__name__
        return re.sub(r"\n\s*", ". ", text).strip().rstrip(".")

    @property
    def roll_up(self) -> str:
        """
        Accessor for the messages of the cause chain rolled into one line.

        HTTP error reasons and log lines are cut at the first newline.
        """
        return ". ".join(self._one_line(err) for err in self.causes()) + "."


class StartupError(BaseError):
    """Error raised when the wallet service cannot be started."""
