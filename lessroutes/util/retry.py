from functools import wraps
import typing as t
from time import sleep
import logging

_LOG = logging.getLogger(__name__)

_CallableT = t.TypeVar('_CallableT', bound=t.Callable)

def retry(
        retries: int = 3,
        exceptions: t.Tuple[t.Type[Exception], ...] = (Exception,),
        sleep_base_s: float = 3,
        sleep_multiplier: float = 2,
        sleep_max_s: float = 60,
) -> t.Callable[[_CallableT], _CallableT]:
    """Retry with exponential back-off, re-raising the last error when done."""

    def inner_wrapper(fun: _CallableT) -> _CallableT:
        @wraps(fun)
        def inner_exec(*args, **kwargs):
            sleep_current = sleep_base_s
            for attempt in range(1, retries + 2):
                try:
                    return fun(*args, **kwargs)
                except exceptions as e:
                    if attempt > retries: raise
                    _LOG.warning(
                        f'Retrying {fun.__name__} ({attempt}/{retries}) ' +
                        f'[sleeping for {sleep_current}s]: ' +
                        f'Error: {e.__class__.__name__} - {e}'
                    )
                    sleep(sleep_current)
                    sleep_current = min(sleep_max_s, sleep_current * sleep_multiplier)

        return t.cast(_CallableT, inner_exec)
    return inner_wrapper
