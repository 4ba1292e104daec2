"""
Newsdesk exception classes.

Every service operation reports failure with one of these; none of them
is retried or translated inside the service layer.  The HTTP layer maps
each class to a status code (see ``newsdesk.main``).
"""
import logging
from typing import Iterable

logger = logging.getLogger(__name__)


class NewsdeskError(Exception):
    """Base class for all exceptions raised within Newsdesk"""

    kind = "error"

    def __init__(self, messages: str | Iterable[str] = ()) -> None:
        if isinstance(messages, str):
            messages = [messages]
        self.messages: list[str] = list(messages)
        super().__init__("; ".join(self.messages))


class ValidationError(NewsdeskError):
    """One or more rule violations, all gathered in a single pass"""

    kind = "validation_error"

    def __init__(self, messages: str | Iterable[str] = ()) -> None:
        super().__init__(messages)
        logger.debug("Validation failed: %s", self.messages)


class InvalidArgumentError(NewsdeskError):
    """Malformed id or search term, rejected before any store/cache access"""

    kind = "invalid_argument"


class NotFoundError(NewsdeskError):
    """Referenced record does not exist"""

    kind = "not_found"


class EmptyResultError(NewsdeskError):
    """A list or search query produced no rows for the requested page"""

    kind = "empty_result"
