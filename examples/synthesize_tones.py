"""Synthesize a few stationary tones from hand-built Gabor coefficients."""

from __future__ import annotations

import argparse
from pathlib import Path

import numpy as np
import soundfile as sf

from fbgabor import IdgtFbPlan, fir_window
from fbgabor.logging_utils import configure_logging


def tone_coefficients(M: int, n_frames: int, bins: list[int]) -> np.ndarray:
    """Coefficients with constant unit energy in each of ``bins``."""
    c = np.zeros((M, n_frames, 1), dtype=np.complex128)
    for k in bins:
        c[k, :, 0] = 1.0
        c[M - k, :, 0] = 1.0
    return c


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--output", type=Path, default=Path("outputs/tones.wav"))
    parser.add_argument("--sample-rate", type=int, default=16000)
    parser.add_argument("--seconds", type=float, default=2.0)
    args = parser.parse_args()
    configure_logging("INFO")

    a, M = 256, 1024
    n_frames = int(args.seconds * args.sample_rate) // a
    g = fir_window("hann", M) / M
    c = tone_coefficients(M, n_frames, bins=[28, 42, 56])

    with IdgtFbPlan(g, a, M, "freqinv") as plan:
        f = plan.execute(c)

    signal = np.real(f) / np.max(np.abs(f))
    args.output.parent.mkdir(parents=True, exist_ok=True)
    sf.write(args.output, 0.5 * signal, args.sample_rate)
    print(f"Wrote {args.output}")


if __name__ == "__main__":
    main()
