from __future__ import annotations

import numpy as np
import pytest

from fbgabor import ENGINES, EngineInitError, InvalidHandleError
from fbgabor.engine import (
    EngineRegistry,
    NumpyFFTEngine,
    ScipyFFTEngine,
    register_engine,
    resolve_engine,
)


@pytest.mark.parametrize("engine_cls", [ScipyFFTEngine, NumpyFFTEngine])
def test_backward_transform_is_unnormalized_inverse_dft(engine_cls) -> None:
    rng = np.random.default_rng(0)
    x = rng.standard_normal(6) + 1j * rng.standard_normal(6)
    buf = x.copy()
    engine = engine_cls()
    handle = engine.create(6, buf, "backward")

    handle.execute()

    np.testing.assert_allclose(buf, np.fft.ifft(x) * 6, atol=1e-12)
    handle.destroy()


@pytest.mark.parametrize("engine_cls", [ScipyFFTEngine, NumpyFFTEngine])
def test_forward_transform_matches_fft(engine_cls) -> None:
    x = np.arange(5, dtype=np.complex128)
    buf = x.copy()
    handle = engine_cls().create(5, buf, "forward")
    handle.execute()
    np.testing.assert_allclose(buf, np.fft.fft(x), atol=1e-12)


def test_single_precision_buffer_keeps_its_dtype() -> None:
    buf = np.ones(4, dtype=np.complex64)
    handle = ScipyFFTEngine().create(4, buf, "backward", {"workers": 1})
    handle.execute()
    assert buf.dtype == np.complex64
    np.testing.assert_allclose(buf, [4, 0, 0, 0], atol=1e-6)


def test_handle_counting_and_double_destroy() -> None:
    engine = ScipyFFTEngine()
    first = engine.create(4, np.zeros(4, dtype=complex))
    second = engine.create(4, np.zeros(4, dtype=complex))
    assert engine.live_handles == 2
    first.destroy()
    assert engine.live_handles == 1
    with pytest.raises(InvalidHandleError):
        first.destroy()
    with pytest.raises(InvalidHandleError):
        first.execute()
    second.destroy()
    assert engine.live_handles == 0


@pytest.mark.parametrize(
    "size,buffer,direction,flags",
    [
        (0, np.zeros(0, dtype=complex), "backward", None),
        (4, np.zeros(3, dtype=complex), "backward", None),
        (4, np.zeros(4), "backward", None),
        (4, np.zeros(4, dtype=complex), "sideways", None),
        (4, np.zeros(4, dtype=complex), "backward", {"planner": "measure"}),
    ],
)
def test_create_rejects_unusable_requests(size, buffer, direction, flags) -> None:
    engine = ScipyFFTEngine()
    with pytest.raises(EngineInitError):
        engine.create(size, buffer, direction, flags)
    assert engine.live_handles == 0


def test_registry_lists_builtin_engines() -> None:
    assert {"numpy", "scipy"} <= set(ENGINES.available())
    assert isinstance(resolve_engine("numpy"), NumpyFFTEngine)
    engine = ScipyFFTEngine()
    assert resolve_engine(engine) is engine


def test_registry_rejects_duplicates_unless_overwriting() -> None:
    registry = EngineRegistry()
    registry.register("fft", ScipyFFTEngine)
    with pytest.raises(ValueError, match="already registered"):
        registry.register("fft", NumpyFFTEngine)
    registry.register("fft", NumpyFFTEngine, overwrite=True)
    assert isinstance(registry.create("fft"), NumpyFFTEngine)
    with pytest.raises(EngineInitError, match="Available engines: fft"):
        registry.create("missing")


def test_register_engine_makes_name_available_to_plans() -> None:
    register_engine("numpy-test-alias", NumpyFFTEngine, overwrite=True)
    assert isinstance(resolve_engine("numpy-test-alias"), NumpyFFTEngine)
