"""Enumerations and element-type descriptors shared by the synthesis engine."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Any

import numpy as np

from .errors import InvalidArgumentError, InvalidConventionError


class PhaseConvention(IntEnum):
    """Reference point of the per-frame spectral phase.

    ``FREQINV`` modulates every atom relative to absolute time (frequency
    invariant phase); ``TIMEINV`` modulates relative to the frame position
    (time invariant phase).
    """

    FREQINV = 0
    TIMEINV = 1

    @classmethod
    def parse(cls, value: Any) -> "PhaseConvention":
        """Coerce an enum member, integer, or case-insensitive name."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = value.strip().upper()
            if key in cls.__members__:
                return cls[key]
        elif isinstance(value, (int, np.integer)) and not isinstance(value, bool):
            try:
                return cls(int(value))
            except ValueError:
                pass
        choices = ", ".join(member.name.lower() for member in cls)
        raise InvalidConventionError(
            f"Unknown phase convention {value!r}. Expected one of: {choices}"
        )


class Precision(str, Enum):
    """Floating point width of buffers and arithmetic."""

    SINGLE = "single"
    DOUBLE = "double"


class WindowDomain(str, Enum):
    """Whether the synthesis window holds real or complex samples."""

    REAL = "real"
    COMPLEX = "complex"


@dataclass(frozen=True)
class SynthesisKind:
    """Precision/window-domain pair selecting one concrete instantiation."""

    precision: Precision
    domain: WindowDomain

    @property
    def suffix(self) -> str:
        base = "s" if self.precision is Precision.SINGLE else "d"
        return base + ("c" if self.domain is WindowDomain.COMPLEX else "")

    @property
    def complex_dtype(self) -> np.dtype:
        if self.precision is Precision.SINGLE:
            return np.dtype(np.complex64)
        return np.dtype(np.complex128)

    @property
    def real_dtype(self) -> np.dtype:
        if self.precision is Precision.SINGLE:
            return np.dtype(np.float32)
        return np.dtype(np.float64)

    @property
    def window_dtype(self) -> np.dtype:
        if self.domain is WindowDomain.COMPLEX:
            return self.complex_dtype
        return self.real_dtype

    @classmethod
    def from_window(cls, g: np.ndarray) -> "SynthesisKind":
        """Infer the instantiation matching the dtype of window ``g``."""
        dtype = np.asarray(g).dtype
        single = dtype in (np.dtype(np.float32), np.dtype(np.complex64))
        is_complex = np.issubdtype(dtype, np.complexfloating)
        return cls(
            Precision.SINGLE if single else Precision.DOUBLE,
            WindowDomain.COMPLEX if is_complex else WindowDomain.REAL,
        )

    @classmethod
    def from_names(cls, precision: str, domain: str) -> "SynthesisKind":
        try:
            return cls(Precision(precision.lower()), WindowDomain(domain.lower()))
        except ValueError as exc:
            raise InvalidArgumentError(
                f"Unsupported precision/domain pair ({precision!r}, {domain!r})"
            ) from exc


DOUBLE_REAL = SynthesisKind(Precision.DOUBLE, WindowDomain.REAL)
SINGLE_REAL = SynthesisKind(Precision.SINGLE, WindowDomain.REAL)
DOUBLE_COMPLEX = SynthesisKind(Precision.DOUBLE, WindowDomain.COMPLEX)
SINGLE_COMPLEX = SynthesisKind(Precision.SINGLE, WindowDomain.COMPLEX)

KINDS: dict[str, SynthesisKind] = {
    kind.suffix: kind
    for kind in (DOUBLE_REAL, SINGLE_REAL, DOUBLE_COMPLEX, SINGLE_COMPLEX)
}
