"""Error taxonomy of the scheduler core.

Every error is local to the operation that raised it. The caller decides
whether to retry; nothing in the core retries on its own.
"""


class SchedulerError(Exception):
    """Base class for all errors raised by the scheduler core."""


class ValidationError(SchedulerError):
    """Missing or malformed input. The user corrects it and retries."""


class DuplicateEmail(SchedulerError):
    """An account with this e-mail already exists for the role."""


class NotFound(SchedulerError):
    """Referenced id or e-mail does not exist."""


class Forbidden(SchedulerError):
    """Requester is not allowed to perform the operation."""


class InvalidCredential(SchedulerError):
    """Password does not match the stored hash."""


class StorageError(SchedulerError):
    """The database failed. Fatal to the operation, not to the process."""
