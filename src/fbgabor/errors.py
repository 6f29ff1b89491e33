"""Exception taxonomy for filter-bank Gabor synthesis."""

from __future__ import annotations

from enum import IntEnum


class Status(IntEnum):
    """Status codes carried by every :class:`GaborError`."""

    SUCCESS = 0
    FAILED = -1
    NO_MEMORY = -2
    NULL_POINTER = -3
    BAD_ARGUMENT = -4
    BAD_SIZE = -5
    BAD_TRANSFORM_LENGTH = -6
    INIT_FAILED = -7
    INVALID_CONVENTION = -8
    BUSY = -9


class GaborError(RuntimeError):
    """Base class for all errors raised by fbgabor."""

    status: Status = Status.FAILED


class NullArgumentError(GaborError, ValueError):
    """Raised when a required argument is ``None``."""

    status = Status.NULL_POINTER


class InvalidSizeError(GaborError, ValueError):
    """Raised for non-positive sizes or mismatched array shapes."""

    status = Status.BAD_SIZE


class InvalidLengthError(GaborError, ValueError):
    """Raised when ``L`` is not a multiple of ``a`` or is shorter than ``gl``."""

    status = Status.BAD_TRANSFORM_LENGTH


class InvalidArgumentError(GaborError, ValueError):
    """Raised for arguments of an unusable type or value."""

    status = Status.BAD_ARGUMENT


class InvalidConventionError(GaborError, ValueError):
    """Raised for a phase convention outside :class:`PhaseConvention`."""

    status = Status.INVALID_CONVENTION


class EngineInitError(GaborError):
    """Raised when the spectral engine cannot provide a transform."""

    status = Status.INIT_FAILED


class OutOfMemoryError(GaborError, MemoryError):
    """Raised when scratch buffers cannot be allocated."""

    status = Status.NO_MEMORY


class InvalidHandleError(GaborError):
    """Raised when using or releasing a plan that was already released."""

    status = Status.NULL_POINTER


class PlanBusyError(GaborError):
    """Raised when a plan is executed while another execution is in flight."""

    status = Status.BUSY


def status_of(exc: BaseException | None) -> Status:
    """Map an exception (or ``None`` for success) to a :class:`Status`."""
    if exc is None:
        return Status.SUCCESS
    if isinstance(exc, GaborError):
        return exc.status
    if isinstance(exc, MemoryError):
        return Status.NO_MEMORY
    return Status.FAILED
