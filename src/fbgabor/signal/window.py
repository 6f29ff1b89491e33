"""Synthesis window construction and preparation."""

from __future__ import annotations

from typing import Any

import numpy as np
from scipy.signal import get_window

from ..errors import InvalidArgumentError, InvalidSizeError


def fir_window(
    window: str | tuple[Any, ...], gl: int, *, dtype: Any = np.float64
) -> np.ndarray:
    """Build a zero-centred FIR window of length ``gl``.

    Sample 0 holds the window centre and negative times wrap to the end of
    the array, which is the layout expected by :class:`~fbgabor.IdgtFbPlan`.
    ``window`` is any specification accepted by
    :func:`scipy.signal.get_window`. The result satisfies
    ``g[k] == g[-k]``: even lengths use the periodic window, odd lengths
    the symmetric one, so the peak always falls on sample ``gl // 2``
    before shifting.
    """
    if gl <= 0:
        raise InvalidSizeError(f"gl (passed {gl}) must be positive.")
    win = get_window(window, gl, fftbins=gl % 2 == 0)
    return np.fft.ifftshift(win).astype(dtype)


def prepare_window(g: np.ndarray, dtype: Any) -> np.ndarray:
    """Return ``g`` circularly shifted right by ``len(g) // 2``.

    The shift moves the zero-centred window onto a contiguous support that
    starts ``len(g) // 2`` samples before the frame position.
    """
    if np.iscomplexobj(g) and not np.issubdtype(np.dtype(dtype), np.complexfloating):
        raise InvalidArgumentError(
            f"Complex window cannot be used with real window dtype {np.dtype(dtype)}."
        )
    try:
        arr = np.asarray(g, dtype=dtype)
    except (TypeError, ValueError) as exc:
        raise InvalidArgumentError(
            f"Window cannot be represented as {np.dtype(dtype)}: {exc}"
        ) from exc
    return np.fft.fftshift(arr)
