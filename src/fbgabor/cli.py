from __future__ import annotations

import argparse
import logging
import time
from pathlib import Path
from typing import Sequence

import numpy as np
import soundfile as sf

from omegaconf.errors import OmegaConfBaseException

from .configs import (
    build_plan,
    load_synthesis_config,
    save_yaml,
    synthesis_config_to_dict,
)
from .engine import ENGINES
from .errors import GaborError
from .logging_utils import JsonlLogger, configure_logging, synthesis_record

LOGGER = logging.getLogger(__name__)


def _load_coefficients(path: Path, key: str | None) -> np.ndarray:
    if path.suffix == ".npz":
        with np.load(path) as archive:
            name = key or archive.files[0]
            if name not in archive.files:
                raise KeyError(f"Array '{name}' not found in {path}")
            return archive[name]
    return np.load(path)


def _write_signal(path: Path, signal: np.ndarray, sample_rate: int) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    if path.suffix == ".npz":
        np.savez(path, f=signal)
    elif path.suffix == ".npy":
        np.save(path, signal)
    else:
        # Audio containers only hold real samples.
        sf.write(path, np.real(signal), sample_rate)


def synth_command(args: argparse.Namespace) -> int:
    """Synthesize a signal from stored Gabor coefficients."""
    cfg = load_synthesis_config(args.config, overrides=args.set or None)
    configure_logging(cfg.log_level)
    if args.save_config:
        saved = save_yaml(args.save_config, synthesis_config_to_dict(cfg))
        LOGGER.info("Resolved config written to %s", saved)

    coefficients = _load_coefficients(Path(args.coefficients), args.key)
    window = None if args.window_file is None else np.load(args.window_file)

    start = time.perf_counter()
    with build_plan(cfg, window) as plan:
        signal = plan.execute(coefficients, args.length)
    elapsed = time.perf_counter() - start

    output = Path(args.output)
    _write_signal(output, signal, args.sample_rate)
    n_channels = 1 if signal.ndim == 1 else signal.shape[1]
    LOGGER.info(
        "Synthesized L=%d W=%d in %.3f s -> %s",
        signal.shape[0],
        n_channels,
        elapsed,
        output,
    )

    if args.log_jsonl:
        JsonlLogger(args.log_jsonl).write(
            synthesis_record(
                config=synthesis_config_to_dict(cfg),
                signal_length=signal.shape[0],
                n_channels=n_channels,
                elapsed_sec=elapsed,
                output=output,
            )
        )
    return 0


def engines_command(args: argparse.Namespace) -> int:
    """Print available spectral engine names."""
    del args
    for name in ENGINES.available():
        print(name)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fbgabor",
        description="Filter-bank inverse discrete Gabor transform",
    )
    subparsers = parser.add_subparsers(dest="command")

    synth = subparsers.add_parser(
        "synth", help="Reconstruct a signal from Gabor coefficients"
    )
    synth.add_argument(
        "coefficients", help="Coefficients (.npy or .npz) of shape (M, N[, W])"
    )
    synth.add_argument(
        "-o", "--output", required=True, help="Output .npy/.npz or audio file"
    )
    synth.add_argument("--config", default=None, help="Synthesis YAML config")
    synth.add_argument(
        "--set",
        action="append",
        default=[],
        help="Config override in dotlist form, e.g. --set a=128",
    )
    synth.add_argument("--key", default=None, help="Array name inside an .npz file")
    synth.add_argument(
        "--window-file",
        default=None,
        help="Zero-centred window (.npy) replacing the configured window",
    )
    synth.add_argument("--length", type=int, default=None, help="Signal length L")
    synth.add_argument(
        "--sample-rate",
        type=int,
        default=16000,
        help="Sample rate used when writing audio files",
    )
    synth.add_argument("--log-jsonl", default=None, help="Append a run record here")
    synth.add_argument(
        "--save-config",
        default=None,
        help="Write the resolved synthesis config (after --set overrides) as YAML",
    )
    synth.set_defaults(func=synth_command)

    engines = subparsers.add_parser("engines", help="List spectral engines")
    engines.set_defaults(func=engines_command)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not hasattr(args, "func"):
        parser.print_help()
        return 0
    try:
        return args.func(args)
    except GaborError as exc:
        LOGGER.error("%s (status=%s)", exc, exc.status.name)
        return 1
    except (OmegaConfBaseException, OSError, KeyError, ValueError) as exc:
        LOGGER.error("%s: %s", type(exc).__name__, exc)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
