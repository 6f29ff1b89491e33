"""Configuration helpers for fbgabor.

A synthesis run is described by one flat YAML mapping decoded into
:class:`SynthesisConfig`; command-line dotlist overrides are merged on top.
"""

from __future__ import annotations

import importlib
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Iterable, Mapping

import numpy as np
import yaml

from .plan import IdgtFbPlan
from .signal.window import fir_window
from .types import SynthesisKind

try:
    OmegaConf = importlib.import_module("omegaconf").OmegaConf
except ModuleNotFoundError as exc:
    raise RuntimeError(
        "fbgabor requires 'omegaconf'. Install it with `pip install omegaconf`."
    ) from exc


def _to_plain_dict(cfg: Any, *, context: str) -> dict[str, Any]:
    container = OmegaConf.to_container(cfg, resolve=True)
    if not isinstance(container, dict):
        raise TypeError(f"Expected mapping in {context}, got {type(container)!r}")
    return {str(key): item for key, item in container.items()}


def load_yaml(path: str | Path) -> dict[str, Any]:
    """Read a YAML mapping, resolving interpolations."""
    return _to_plain_dict(OmegaConf.load(Path(path)), context=str(path))


def merge_overrides(
    data: Mapping[str, Any],
    overrides: Iterable[str] | None = None,
) -> dict[str, Any]:
    """Return ``data`` with ``key=value`` dotlist overrides applied."""
    override_list = [item for item in (overrides or []) if item]
    if not override_list:
        return dict(data)
    merged = OmegaConf.merge(
        OmegaConf.create(dict(data)), OmegaConf.from_dotlist(override_list)
    )
    return _to_plain_dict(merged, context="merged overrides")


def save_yaml(path: str | Path, data: Mapping[str, Any]) -> Path:
    """Write ``data`` as YAML, keeping key order, and return the path."""
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    with out.open("w", encoding="utf-8") as handle:
        yaml.safe_dump(dict(data), handle, sort_keys=False)
    return out


@dataclass
class SynthesisConfig:
    """Synthesis plan configuration schema."""

    a: int = 64
    M: int = 256
    gl: int = 256
    window: str = "hann"
    ptype: str = "freqinv"
    precision: str = "double"
    window_domain: str = "real"
    engine: str = "scipy"
    workers: int | None = None
    log_level: str = "INFO"

    @property
    def kind(self) -> SynthesisKind:
        return SynthesisKind.from_names(self.precision, self.window_domain)

    @property
    def flags(self) -> dict[str, Any]:
        return {} if self.workers is None else {"workers": int(self.workers)}


def parse_synthesis_config(data: Mapping[str, object]) -> SynthesisConfig:
    """Decode a mapping into :class:`SynthesisConfig`, rejecting unknown keys."""
    base = OmegaConf.structured(SynthesisConfig)
    merged = OmegaConf.merge(base, OmegaConf.create(dict(data)))
    decoded = OmegaConf.to_object(merged)
    if not isinstance(decoded, SynthesisConfig):
        raise TypeError("Failed to decode config as SynthesisConfig")
    return decoded


def load_synthesis_config(
    path: str | Path | None = None,
    *,
    overrides: Iterable[str] | None = None,
) -> SynthesisConfig:
    """Load :class:`SynthesisConfig` from YAML (or defaults) plus overrides."""
    data = {} if path is None else load_yaml(path)
    return parse_synthesis_config(merge_overrides(data, overrides))


def synthesis_config_to_dict(config: SynthesisConfig) -> dict[str, Any]:
    return asdict(config)


def build_plan(
    config: SynthesisConfig, window: np.ndarray | None = None
) -> IdgtFbPlan:
    """Create a plan from ``config``.

    ``window`` replaces the named window; its length must equal
    ``config.gl`` or :class:`~fbgabor.errors.InvalidSizeError` is raised.
    """
    kind = config.kind
    if window is None:
        window = fir_window(config.window, config.gl, dtype=kind.window_dtype)
    return IdgtFbPlan(
        window,
        config.a,
        config.M,
        config.ptype,
        gl=config.gl,
        kind=kind,
        engine=config.engine,
        flags=config.flags,
    )
