"""Plan/execute/done interface of the filter-bank inverse Gabor transform."""

from __future__ import annotations

import logging
import threading
from typing import Any, Mapping

import numpy as np

from .engine import SpectralEngine, TransformHandle, resolve_engine
from .errors import (
    EngineInitError,
    InvalidArgumentError,
    InvalidHandleError,
    InvalidLengthError,
    InvalidSizeError,
    NullArgumentError,
    OutOfMemoryError,
    PlanBusyError,
)
from .signal.window import prepare_window
from .synthesis import frame_regions, overlap_add_frame, synthesize_frame
from .types import (
    DOUBLE_COMPLEX,
    DOUBLE_REAL,
    SINGLE_COMPLEX,
    SINGLE_REAL,
    PhaseConvention,
    SynthesisKind,
)

LOGGER = logging.getLogger(__name__)


def _as_int(name: str, value: Any, error: type[Exception]) -> int:
    if isinstance(value, (bool, np.bool_)) or not isinstance(
        value, (int, np.integer)
    ):
        raise error(f"{name} (passed {value!r}) must be an integer.")
    return int(value)


def _check_positive(name: str, value: int) -> int:
    if value is None:
        raise NullArgumentError(f"{name} must not be None.")
    value = _as_int(name, value, InvalidSizeError)
    if value <= 0:
        raise InvalidSizeError(f"{name} (passed {value}) must be positive.")
    return value


class IdgtFbPlan:
    """Reusable synthesis plan for one window, hop size and channel count.

    Parameters
    ----------
    g : ndarray, shape (gl,)
        Zero-centred synthesis window. It is copied at construction and
        never read again.
    a : int
        Hop size in samples.
    M : int
        Number of frequency channels.
    ptype : PhaseConvention, int or str, default="freqinv"
        Phase convention of the coefficients.
    gl : int or None
        Window length; defaults to ``len(g)`` and must match it otherwise.
    kind : SynthesisKind or None
        Precision/window domain. Inferred from ``g.dtype`` when ``None``.
    engine : str or SpectralEngine, default="scipy"
        Spectral micro-transform provider.
    flags : mapping or None
        Engine-specific creation options.

    Notes
    -----
    A plan owns scratch buffers that every :meth:`execute` call mutates, so
    one plan serves one execution at a time. Use separate plans for
    concurrent work.
    """

    def __init__(
        self,
        g: np.ndarray,
        a: int,
        M: int,
        ptype: PhaseConvention | int | str = PhaseConvention.FREQINV,
        *,
        gl: int | None = None,
        kind: SynthesisKind | None = None,
        engine: str | SpectralEngine = "scipy",
        flags: Mapping[str, Any] | None = None,
    ) -> None:
        if g is None:
            raise NullArgumentError("Window g must not be None.")
        g_arr = np.asarray(g)
        if g_arr.ndim != 1:
            raise InvalidSizeError(f"Window must be 1-D, got ndim={g_arr.ndim}.")
        gl = g_arr.shape[0] if gl is None else gl
        self.gl = _check_positive("gl", gl)
        if g_arr.shape[0] != self.gl:
            raise InvalidSizeError(
                f"Window length {g_arr.shape[0]} does not match gl={self.gl}."
            )
        self.a = _check_positive("a", a)
        self.M = _check_positive("M", M)
        self.ptype = PhaseConvention.parse(ptype)
        self.kind = SynthesisKind.from_window(g_arr) if kind is None else kind

        self._engine: SpectralEngine | None = None
        self._handle: TransformHandle | None = None
        self._busy = threading.Lock()
        self.cbuf: np.ndarray | None = None
        self.gw: np.ndarray | None = None
        self.ff: np.ndarray | None = None

        try:
            self._acquire(g_arr, engine, flags)
        except BaseException:
            self._release()
            raise
        LOGGER.debug(
            "Created idgt_fb plan (kind=%s, gl=%d, a=%d, M=%d, ptype=%s)",
            self.kind.suffix,
            self.gl,
            self.a,
            self.M,
            self.ptype.name,
        )

    def _acquire(
        self,
        g: np.ndarray,
        engine: str | SpectralEngine,
        flags: Mapping[str, Any] | None,
    ) -> None:
        cdtype = self.kind.complex_dtype
        try:
            self.cbuf = np.zeros(self.M, dtype=cdtype)
            self.gw = np.zeros(self.gl, dtype=self.kind.window_dtype)
            self.ff = np.zeros(max(self.gl, self.M), dtype=cdtype)
        except MemoryError as exc:
            raise OutOfMemoryError(
                f"Cannot allocate scratch buffers for gl={self.gl}, M={self.M}."
            ) from exc

        try:
            self._engine = resolve_engine(engine)
            self._handle = self._engine.create(self.M, self.cbuf, "backward", flags)
        except EngineInitError:
            raise
        except Exception as exc:
            raise EngineInitError(
                f"Spectral engine failed to create a size-{self.M} transform: {exc}"
            ) from exc

        self.gw[:] = prepare_window(g, self.kind.window_dtype)

    def _release(self) -> None:
        if self._handle is not None and self._handle.alive:
            self._handle.destroy()
        self._handle = None
        self._engine = None
        self.cbuf = None
        self.gw = None
        self.ff = None

    @property
    def released(self) -> bool:
        return self._handle is None

    @property
    def engine(self) -> SpectralEngine | None:
        return self._engine

    def __enter__(self) -> "IdgtFbPlan":
        return self

    def __exit__(self, *exc_info: object) -> None:
        if not self.released:
            self.done()

    def done(self) -> None:
        """Release the transform handle and scratch buffers."""
        if self.released:
            raise InvalidHandleError("Plan was already released.")
        if not self._busy.acquire(blocking=False):
            raise PlanBusyError("Cannot release a plan while it is executing.")
        try:
            self._release()
        finally:
            self._busy.release()
        LOGGER.debug("Released idgt_fb plan (kind=%s)", self.kind.suffix)

    def _validate_execute(
        self, c: np.ndarray, L: int | None, W: int | None
    ) -> tuple[np.ndarray, int, int]:
        if c is None:
            raise NullArgumentError("Coefficient array must not be None.")
        if not isinstance(c, np.ndarray):
            c = np.asarray(c)
        if c.ndim == 2:
            c = c[:, :, None]
        elif c.ndim != 3:
            raise InvalidSizeError(
                f"Coefficients must have shape (M, N) or (M, N, W), got {c.shape}."
            )
        if c.shape[0] != self.M:
            raise InvalidSizeError(
                f"Coefficients have {c.shape[0]} channels, plan expects M={self.M}."
            )
        L = c.shape[1] * self.a if L is None else _as_int("L", L, InvalidLengthError)
        if L <= 0 or L < self.gl or L % self.a:
            raise InvalidLengthError(
                f"L (passed {L}) must be positive, at least gl={self.gl} "
                f"and divisible by a (passed {self.a})."
            )
        if c.shape[1] != L // self.a:
            raise InvalidSizeError(
                f"Coefficients have {c.shape[1]} frames, expected L/a={L // self.a}."
            )
        W = c.shape[2] if W is None else _as_int("W", W, InvalidSizeError)
        if W <= 0:
            raise InvalidSizeError(f"W (passed {W}) must be positive.")
        if c.shape[2] != W:
            raise InvalidSizeError(
                f"Coefficients have {c.shape[2]} signal channels, expected W={W}."
            )
        return c, L, W

    def execute(
        self,
        c: np.ndarray,
        L: int | None = None,
        W: int | None = None,
        *,
        out: np.ndarray | None = None,
    ) -> np.ndarray:
        """Synthesize the signal described by coefficients ``c``.

        Parameters
        ----------
        c : ndarray, shape (M, N, W) or (M, N)
            Gabor coefficients, ``N = L / a``.
        L : int or None
            Signal length; defaults to ``N * a``.
        W : int or None
            Number of signal channels; defaults to ``c.shape[2]``.
        out : ndarray or None
            Optional complex output buffer of shape ``(L, W)`` (``(L,)`` for
            2-D coefficients). It is overwritten entirely.

        Returns
        -------
        ndarray
            Complex signal of shape ``(L, W)``, or ``(L,)`` for 2-D input.
        """
        if self.released:
            raise InvalidHandleError("Cannot execute a released plan.")
        squeeze = c is not None and np.ndim(c) == 2
        c, L, W = self._validate_execute(c, L, W)

        expected = (L,) if squeeze else (L, W)
        if out is None:
            f = np.zeros((L, W), dtype=self.kind.complex_dtype)
        else:
            if out.shape != expected:
                raise InvalidSizeError(
                    f"Output has shape {out.shape}, expected {expected}."
                )
            if not np.iscomplexobj(out):
                raise InvalidArgumentError("Output buffer must be complex.")
            f = out[:, None] if squeeze else out

        if not self._busy.acquire(blocking=False):
            raise PlanBusyError("Plan is already executing; use one plan per thread.")
        try:
            self._run(c, f, L, W)
        finally:
            self._busy.release()
        LOGGER.debug("Executed idgt_fb plan: L=%d, W=%d, N=%d", L, W, L // self.a)

        if out is not None:
            return out
        return f[:, 0] if squeeze else f

    def _run(self, c: np.ndarray, f: np.ndarray, L: int, W: int) -> None:
        a = self.a
        gl = self.gl
        glh = gl // 2
        time_invariant = self.ptype is PhaseConvention.TIMEINV
        regions = frame_regions(L, gl, a)

        f[...] = 0
        for w in range(W):
            fw = f[:, w]
            for region, wrapped in zip(regions, (True, False, True)):
                for n in region:
                    shift = glh if time_invariant else glh - n * a
                    seg = synthesize_frame(
                        c[:, n, w], self._handle, self.cbuf, self.ff, self.gw, shift
                    )
                    overlap_add_frame(fw, seg, n * a - glh, wrapped=wrapped)


def idgt_fb_init(
    g: np.ndarray,
    gl: int | None,
    a: int,
    M: int,
    ptype: PhaseConvention | int | str = PhaseConvention.FREQINV,
    flags: Mapping[str, Any] | None = None,
    *,
    kind: SynthesisKind | None = None,
    engine: str | SpectralEngine = "scipy",
) -> IdgtFbPlan:
    """Create an :class:`IdgtFbPlan`."""
    return IdgtFbPlan(g, a, M, ptype, gl=gl, kind=kind, engine=engine, flags=flags)


def idgt_fb_execute(
    plan: IdgtFbPlan | None,
    c: np.ndarray,
    L: int | None = None,
    W: int | None = None,
    *,
    out: np.ndarray | None = None,
) -> np.ndarray:
    """Run ``plan`` on coefficients ``c``."""
    if plan is None:
        raise NullArgumentError("Plan must not be None.")
    return plan.execute(c, L, W, out=out)


def idgt_fb_done(plan: IdgtFbPlan | None) -> None:
    """Release ``plan``; a second release raises :class:`InvalidHandleError`."""
    if plan is None:
        raise NullArgumentError("Plan must not be None.")
    plan.done()


def idgt_fb(
    c: np.ndarray,
    g: np.ndarray,
    L: int | None,
    a: int,
    M: int,
    ptype: PhaseConvention | int | str = PhaseConvention.FREQINV,
    *,
    W: int | None = None,
    kind: SynthesisKind | None = None,
    engine: str | SpectralEngine = "scipy",
    flags: Mapping[str, Any] | None = None,
    out: np.ndarray | None = None,
) -> np.ndarray:
    """One-shot inverse Gabor transform: init, execute and done."""
    plan = idgt_fb_init(g, None, a, M, ptype, flags, kind=kind, engine=engine)
    try:
        return plan.execute(c, L, W, out=out)
    finally:
        if not plan.released:
            plan.done()


def _fixed_kind(kind: SynthesisKind):
    def run(
        c: np.ndarray,
        g: np.ndarray,
        L: int | None,
        a: int,
        M: int,
        ptype: PhaseConvention | int | str = PhaseConvention.FREQINV,
        **kwargs: Any,
    ) -> np.ndarray:
        return idgt_fb(c, g, L, a, M, ptype, kind=kind, **kwargs)

    run.__name__ = run.__qualname__ = f"idgt_fb_{kind.suffix}"
    run.__doc__ = (
        f"One-shot inverse Gabor transform in {kind.precision.value} precision "
        f"with a {kind.domain.value} window."
    )
    return run


idgt_fb_d = _fixed_kind(DOUBLE_REAL)
idgt_fb_s = _fixed_kind(SINGLE_REAL)
idgt_fb_dc = _fixed_kind(DOUBLE_COMPLEX)
idgt_fb_sc = _fixed_kind(SINGLE_COMPLEX)
