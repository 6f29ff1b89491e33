import numpy as np
import pytest

from fbgabor import (
    DOUBLE_REAL,
    EngineInitError,
    IdgtFbPlan,
    InvalidArgumentError,
    InvalidConventionError,
    InvalidHandleError,
    InvalidLengthError,
    InvalidSizeError,
    NullArgumentError,
    NumpyFFTEngine,
    OutOfMemoryError,
    PlanBusyError,
    ScipyFFTEngine,
    Status,
    idgt_fb,
    idgt_fb_done,
    idgt_fb_execute,
    status_of,
)
from fbgabor.engine import SpectralEngine


class ExplodingEngine(SpectralEngine):
    name = "exploding"

    def _make_runner(self, direction, options):
        raise RuntimeError("no plan for you")


def test_done_twice_reports_invalid_handle() -> None:
    plan = IdgtFbPlan(np.ones(4), 2, 4)
    plan.done()
    with pytest.raises(InvalidHandleError) as info:
        plan.done()
    assert info.value.status is Status.NULL_POINTER
    assert status_of(info.value) is Status.NULL_POINTER


def test_done_and_execute_reject_none_plan() -> None:
    with pytest.raises(NullArgumentError):
        idgt_fb_done(None)
    with pytest.raises(NullArgumentError):
        idgt_fb_execute(None, np.zeros((4, 4)))


def test_execute_after_done_is_rejected() -> None:
    plan = IdgtFbPlan(np.ones(4), 2, 4)
    plan.done()
    with pytest.raises(InvalidHandleError, match="released"):
        plan.execute(np.zeros((4, 4)))


def test_context_manager_releases_transform_handle() -> None:
    engine = ScipyFFTEngine()
    with IdgtFbPlan(np.ones(4), 2, 4, engine=engine) as plan:
        assert engine.live_handles == 1
    assert plan.released
    assert engine.live_handles == 0


def test_init_failure_after_engine_creation_releases_handle() -> None:
    engine = ScipyFFTEngine()
    g = np.ones(4) + 1j
    with pytest.raises(InvalidArgumentError, match="Complex window"):
        IdgtFbPlan(g, 2, 4, kind=DOUBLE_REAL, engine=engine)
    assert engine.live_handles == 0


@pytest.mark.parametrize(
    "kwargs",
    [
        {"engine": "no-such-engine"},
        {"engine": NumpyFFTEngine(), "flags": {"workers": 2}},
        {"engine": ExplodingEngine()},
    ],
)
def test_engine_failures_surface_as_init_failed(kwargs) -> None:
    with pytest.raises(EngineInitError) as info:
        IdgtFbPlan(np.ones(4), 2, 4, **kwargs)
    assert info.value.status is Status.INIT_FAILED


def test_allocation_failure_is_reported_as_out_of_memory(monkeypatch) -> None:
    def fail(*args, **kwargs):
        raise MemoryError("simulated")

    engine = ScipyFFTEngine()
    g = np.ones(4)
    monkeypatch.setattr(np, "zeros", fail)
    with pytest.raises(OutOfMemoryError) as info:
        IdgtFbPlan(g, 2, 4, engine=engine)
    monkeypatch.undo()
    assert isinstance(info.value, MemoryError)
    assert info.value.status is Status.NO_MEMORY
    assert engine.live_handles == 0


@pytest.mark.parametrize(
    "args,kwargs,error",
    [
        ((None, 2, 4), {}, NullArgumentError),
        ((np.ones(4), 0, 4), {}, InvalidSizeError),
        ((np.ones(4), 2, -1), {}, InvalidSizeError),
        ((np.ones(0), 2, 4), {}, InvalidSizeError),
        ((np.ones(4), 2, 4), {"gl": 5}, InvalidSizeError),
        ((np.ones((2, 2)), 2, 4), {}, InvalidSizeError),
        ((np.ones(4), 2, 4, 7), {}, InvalidConventionError),
        ((np.ones(4), 2, 4, "sideways"), {}, InvalidConventionError),
    ],
)
def test_init_validates_arguments(args, kwargs, error) -> None:
    with pytest.raises(error):
        IdgtFbPlan(*args, **kwargs)


def test_execute_validates_lengths_and_shapes() -> None:
    with IdgtFbPlan(np.ones(6), 2, 4) as plan:
        with pytest.raises(NullArgumentError):
            plan.execute(None)
        with pytest.raises(InvalidLengthError, match="divisible"):
            plan.execute(np.zeros((4, 4)), L=9)
        with pytest.raises(InvalidLengthError):
            plan.execute(np.zeros((4, 2)))  # L = 4 < gl
        with pytest.raises(InvalidSizeError, match="channels"):
            plan.execute(np.zeros((3, 4)))
        with pytest.raises(InvalidSizeError, match="frames"):
            plan.execute(np.zeros((4, 4)), L=10)
        with pytest.raises(InvalidSizeError, match="W"):
            plan.execute(np.zeros((4, 4, 0)))
        with pytest.raises(InvalidSizeError):
            plan.execute(np.zeros((4, 4, 2)), W=3)
        with pytest.raises(InvalidSizeError):
            plan.execute(np.zeros(16))
        with pytest.raises(InvalidSizeError, match="Output"):
            plan.execute(np.zeros((4, 4)), out=np.zeros((8, 1), dtype=complex))
        with pytest.raises(InvalidArgumentError):
            plan.execute(np.zeros((4, 4)), out=np.zeros(8))


def test_concurrent_execute_on_one_plan_is_rejected() -> None:
    with IdgtFbPlan(np.ones(4), 2, 4) as plan:
        plan._busy.acquire()
        try:
            with pytest.raises(PlanBusyError):
                plan.execute(np.zeros((4, 4)))
        finally:
            plan._busy.release()
        np.testing.assert_allclose(plan.execute(np.zeros((4, 4))), 0.0)


def test_done_while_executing_is_rejected() -> None:
    plan = IdgtFbPlan(np.ones(4), 2, 4)
    plan._busy.acquire()
    try:
        with pytest.raises(PlanBusyError):
            plan.done()
        assert not plan.released
    finally:
        plan._busy.release()
    plan.done()
    assert plan.released


@pytest.mark.parametrize(
    "args",
    [(2.5, 4), (2, 4.0), (True, 4), (np.float64(2.0), 4)],
)
def test_init_rejects_non_integer_sizes(args) -> None:
    with pytest.raises(InvalidSizeError, match="must be an integer"):
        IdgtFbPlan(np.ones(4), *args)
    with pytest.raises(InvalidSizeError, match="must be an integer"):
        IdgtFbPlan(np.ones(4), 2, 4, gl=4.0)


def test_execute_rejects_non_integer_length_and_channels() -> None:
    with IdgtFbPlan(np.ones(4), 2, 4) as plan:
        with pytest.raises(InvalidLengthError, match="must be an integer"):
            plan.execute(np.zeros((4, 4)), L=8.0)
        with pytest.raises(InvalidSizeError, match="must be an integer"):
            plan.execute(np.zeros((4, 4, 1)), W=1.5)
        assert plan.execute(np.zeros((4, 4)), L=np.int64(8)).shape == (8,)


def test_one_shot_releases_plan_when_execute_fails() -> None:
    engine = ScipyFFTEngine()
    with pytest.raises(InvalidLengthError):
        idgt_fb(np.zeros((4, 4)), np.ones(4), 9, 2, 4, engine=engine)
    assert engine.live_handles == 0


def test_status_of_foreign_exceptions() -> None:
    assert status_of(None) is Status.SUCCESS
    assert status_of(KeyError("x")) is Status.FAILED
    assert status_of(MemoryError()) is Status.NO_MEMORY
