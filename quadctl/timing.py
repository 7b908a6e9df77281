"""Wall-clock helpers in microseconds."""

import time
import warnings


def get_system_time():
    """Current wall-clock time in microseconds."""
    return time.time_ns() // 1000


def get_time_second():
    """Current wall-clock time in seconds."""
    return get_system_time() * 1e-6


def absolute_wait(start_time, wait_time):
    """Block until ``wait_time`` microseconds have passed since ``start_time``.

    Warns when that moment has already passed.
    """
    elapsed = get_system_time() - start_time
    if elapsed > wait_time:
        warnings.warn(
            f"The wait_time={wait_time} of absolute_wait is not enough! "
            f"The program has already cost {elapsed}us.",
            RuntimeWarning,
            stacklevel=2,
        )
    while get_system_time() - start_time < wait_time:
        time.sleep(50e-6)