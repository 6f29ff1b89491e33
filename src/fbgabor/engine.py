"""Spectral micro-transform engines used by the synthesis plan.

An engine hands out :class:`TransformHandle` objects bound in place to one
complex buffer. The plan only relies on the create/execute/destroy
lifecycle, so alternative FFT providers can be registered by name.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping

import numpy as np
import scipy.fft

from .errors import EngineInitError, InvalidHandleError

LOGGER = logging.getLogger(__name__)

DIRECTIONS = ("forward", "backward")


class TransformHandle:
    """In-place fixed-size DFT bound to ``buffer``."""

    def __init__(
        self,
        engine: "SpectralEngine",
        size: int,
        buffer: np.ndarray,
        direction: str,
        run: Callable[[np.ndarray], np.ndarray],
    ) -> None:
        self.engine = engine
        self.size = size
        self.direction = direction
        self._buffer: np.ndarray | None = buffer
        self._run = run

    @property
    def alive(self) -> bool:
        return self._buffer is not None

    def execute(self) -> None:
        """Transform the bound buffer in place."""
        if self._buffer is None:
            raise InvalidHandleError("Transform handle was already destroyed.")
        self._buffer[:] = self._run(self._buffer)

    def destroy(self) -> None:
        if self._buffer is None:
            raise InvalidHandleError("Transform handle was already destroyed.")
        self._buffer = None
        self.engine._release(self)


class SpectralEngine(ABC):
    """Factory of in-place DFT handles.

    ``direction="backward"`` denotes the unnormalized inverse transform
    ``x[k] = sum_m X[m] exp(2j*pi*m*k/size)``; ``"forward"`` the
    unnormalized forward transform.
    """

    name: str
    supported_flags: frozenset[str] = frozenset()

    def __init__(self) -> None:
        self.live_handles = 0

    def create(
        self,
        size: int,
        buffer: np.ndarray,
        direction: str = "backward",
        flags: Mapping[str, Any] | None = None,
    ) -> TransformHandle:
        """Create a handle transforming ``buffer`` in place."""
        if size <= 0:
            raise EngineInitError(f"Transform size must be positive, got {size}.")
        if direction not in DIRECTIONS:
            raise EngineInitError(
                f"Unknown transform direction '{direction}'. "
                f"Expected one of: {', '.join(DIRECTIONS)}"
            )
        if buffer.ndim != 1 or buffer.shape[0] != size:
            raise EngineInitError(
                f"Buffer of shape {buffer.shape} cannot host a size-{size} transform."
            )
        if not np.iscomplexobj(buffer):
            raise EngineInitError("In-place transforms require a complex buffer.")
        options = dict(flags or {})
        unknown = sorted(set(options) - self.supported_flags)
        if unknown:
            raise EngineInitError(
                f"Engine '{self.name}' does not understand flags: {', '.join(unknown)}"
            )
        handle = TransformHandle(
            self, size, buffer, direction, self._make_runner(direction, options)
        )
        self.live_handles += 1
        LOGGER.debug(
            "engine=%s created %s transform of size %d", self.name, direction, size
        )
        return handle

    def _release(self, handle: TransformHandle) -> None:
        self.live_handles -= 1
        LOGGER.debug("engine=%s destroyed transform of size %d", self.name, handle.size)

    @abstractmethod
    def _make_runner(
        self, direction: str, options: dict[str, Any]
    ) -> Callable[[np.ndarray], np.ndarray]:
        """Return a callable computing the transform of one buffer."""


class ScipyFFTEngine(SpectralEngine):
    """:mod:`scipy.fft` engine; honours the ``workers`` flag."""

    name = "scipy"
    supported_flags = frozenset({"workers"})

    def _make_runner(
        self, direction: str, options: dict[str, Any]
    ) -> Callable[[np.ndarray], np.ndarray]:
        workers = options.get("workers")
        if direction == "backward":
            return lambda buf: scipy.fft.ifft(
                buf, norm="forward", workers=workers, overwrite_x=True
            )
        return lambda buf: scipy.fft.fft(buf, workers=workers, overwrite_x=True)


class NumpyFFTEngine(SpectralEngine):
    """:mod:`numpy.fft` engine."""

    name = "numpy"

    def _make_runner(
        self, direction: str, options: dict[str, Any]
    ) -> Callable[[np.ndarray], np.ndarray]:
        del options
        if direction == "backward":
            return lambda buf: np.fft.ifft(buf, norm="forward")
        return np.fft.fft


@dataclass
class EngineRegistry:
    """Name-to-factory mapping for spectral engines."""

    _factories: dict[str, Callable[[], SpectralEngine]] = field(default_factory=dict)

    def register(
        self,
        name: str,
        factory: Callable[[], SpectralEngine],
        *,
        overwrite: bool = False,
    ) -> None:
        if not overwrite and name in self._factories:
            raise ValueError(f"Engine '{name}' is already registered.")
        self._factories[name] = factory

    def create(self, name: str) -> SpectralEngine:
        if name not in self._factories:
            available = ", ".join(sorted(self._factories)) or "<none>"
            raise EngineInitError(
                f"Unknown engine '{name}'. Available engines: {available}"
            )
        return self._factories[name]()

    def available(self) -> list[str]:
        return sorted(self._factories)


ENGINES = EngineRegistry()
ENGINES.register("scipy", ScipyFFTEngine)
ENGINES.register("numpy", NumpyFFTEngine)


def register_engine(
    name: str, factory: Callable[[], SpectralEngine], *, overwrite: bool = False
) -> None:
    """Make ``factory`` available to plans under ``name``."""
    ENGINES.register(name, factory, overwrite=overwrite)


def resolve_engine(engine: str | SpectralEngine) -> SpectralEngine:
    """Return ``engine`` itself or a fresh instance of the named engine."""
    if isinstance(engine, SpectralEngine):
        return engine
    return ENGINES.create(str(engine))
