import pytest

from . import StopWatch, stopwatch


@stopwatch
def add(a, b):
    return a + b


@stopwatch(name="fail")
def fail():
    raise RuntimeError("expected")


@pytest.mark.mpi_skip
def test_stopwatch():
    StopWatch.reset()
    assert add(1, 2) == 3
    assert add(2, 3) == 5
    assert StopWatch.n_calls("add") == 2
    with pytest.raises(RuntimeError):
        fail()
    assert StopWatch.n_calls("fail") == 1  # recorded despite exception
    watch = StopWatch("block")
    watch.stop()
    watch.stop()
    assert StopWatch.n_calls("block") == 1
    StopWatch.print_stats()


@pytest.mark.mpi_skip
def test_context():
    StopWatch.reset()
    with pytest.raises(KeyError):
        with StopWatch("context"):
            raise KeyError("expected")
    assert StopWatch.n_calls("context") == 1
