import functools
import typing as t
from datetime import datetime, timedelta
import logging

_LOG = logging.getLogger(__name__)

_CallableT = t.TypeVar('_CallableT', bound=t.Callable)

BenchStart = t.Tuple[str, datetime]

def bench_start(name: str) -> BenchStart:
    _LOG.debug(f'bench_start <{name}>')
    return name, datetime.now()


def bench_end(start: BenchStart) -> timedelta:
    took = datetime.now() - start[1]
    _LOG.info(f'<{start[0]}> took {took}')
    return took


def bench_function(func: _CallableT) -> _CallableT:
    @functools.wraps(func)
    def wrapper_bench(*args, **kwargs):
        bench = bench_start(func.__name__)
        ret = func(*args, **kwargs)
        bench_end(bench)
        return ret
    return t.cast(_CallableT, wrapper_bench)
