"""Per-frame synthesis and circular overlap-add for the filter-bank IDGT."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from .engine import TransformHandle


def circshift(src: np.ndarray, shift: int, out: np.ndarray) -> np.ndarray:
    """Write ``src`` rotated right by ``shift`` into ``out[:len(src)]``.

    Equivalent to ``np.roll(src, shift)``; ``out`` must not alias ``src``.
    """
    size = src.shape[0]
    p = shift % size
    out[p:size] = src[: size - p]
    out[:p] = src[size - p :]
    return out[:size]


def periodize(buf: np.ndarray, period: int, length: int) -> np.ndarray:
    """Extend ``buf[:period]`` in place so that ``buf[i] == buf[i % period]``.

    ``buf`` must hold at least ``max(period, length)`` samples. When
    ``length < period`` the sequence is truncated.
    """
    periods, rest = divmod(length, period)
    for k in range(1, periods):
        buf[k * period : (k + 1) * period] = buf[:period]
    if periods > 0 and rest:
        buf[periods * period : length] = buf[:rest]
    return buf[:length]


def synthesize_frame(
    column: np.ndarray,
    handle: TransformHandle,
    cbuf: np.ndarray,
    ff: np.ndarray,
    gw: np.ndarray,
    shift: int,
) -> np.ndarray:
    """Return the windowed time-domain contribution of one frame.

    The frame's ``M`` coefficients are inverse transformed, rotated by
    ``shift``, periodized to the window length and multiplied by the
    prepared window. The returned array is a view of ``ff``.
    """
    M = cbuf.shape[0]
    gl = gw.shape[0]
    cbuf[:] = column
    handle.execute()
    circshift(cbuf, shift, ff)
    seg = periodize(ff, M, gl)
    seg *= gw
    return seg


@dataclass(frozen=True)
class FrameRegions:
    """Frame index ranges with different wrap behaviour."""

    leading: range
    interior: range
    trailing: range

    def __iter__(self):
        yield self.leading
        yield self.interior
        yield self.trailing


def frame_regions(L: int, gl: int, a: int) -> FrameRegions:
    """Partition the ``L // a`` frames by how their support meets the edges.

    Leading frames start before sample 0, trailing frames end past sample
    ``L - 1``; both wrap around. Interior frames are contiguous.
    """
    glh = gl // 2
    first_interior = -(-glh // a)
    first_trailing = (L - (gl + 1) // 2) // a + 1
    n_frames = L // a
    return FrameRegions(
        leading=range(0, first_interior),
        interior=range(first_interior, first_trailing),
        trailing=range(first_trailing, n_frames),
    )


def overlap_add_frame(
    fw: np.ndarray, seg: np.ndarray, start: int, *, wrapped: bool
) -> None:
    """Add ``seg`` into the circular buffer ``fw`` beginning at ``start``.

    ``start`` may be negative. Interior frames (``wrapped=False``) must fit
    without crossing the end of ``fw``.
    """
    L = fw.shape[0]
    gl = seg.shape[0]
    sp = start % L
    ep = (start + gl - 1) % L
    if not wrapped:
        fw[sp : ep + 1] += seg
        return
    head = L - sp
    fw[sp:] += seg[:head]
    fw[: ep + 1] += seg[head : head + ep + 1]
