"""
debug_trace.py

Diagnostic output for the label filter.

``report()`` prints the user-facing ``[postprocess] ...`` lines and is always
on.  ``trace()`` prints timestamped debug lines and is off unless enabled
with ``configure()`` (``--debug`` or ``[trace] enabled = true``).
Everything goes to stderr; stdout is never written.
"""

import sys
import traceback
from datetime import datetime
from functools import wraps

# Set to True to enable debug tracing
DEBUG_TRACE = False

# Log file (None for stderr only)
LOG_FILE = None

# Prefix of user-facing diagnostics
REPORT_PREFIX = "[postprocess]"

_log_file = None


def configure(enabled: bool, log_file: str = None):
    """Switch tracing on or off and choose the trace log file."""
    global DEBUG_TRACE, LOG_FILE
    close_log()
    DEBUG_TRACE = enabled
    LOG_FILE = log_file or None


def _get_log_file():
    global _log_file, LOG_FILE
    if DEBUG_TRACE and LOG_FILE and _log_file is None:
        try:
            _log_file = open(LOG_FILE, "a", encoding="utf-8")
        except OSError as e:
            print(f"{REPORT_PREFIX} cannot open trace log {LOG_FILE}: {e}", file=sys.stderr, flush=True)
            # don't retry on every line
            LOG_FILE = None
    return _log_file


def _write_log(line: str):
    log_file = _get_log_file()
    if log_file:
        log_file.write(line + "\n")
        log_file.flush()


def report(msg: str):
    """Print a user-facing diagnostic line."""
    line = f"{REPORT_PREFIX} {msg}"
    print(line, file=sys.stderr, flush=True)
    if DEBUG_TRACE:
        _write_log(line)


def trace(msg: str, category: str = "INFO"):
    """Print a trace message with timestamp."""
    if not DEBUG_TRACE:
        return

    timestamp = datetime.now().strftime("%H:%M:%S.%f")[:-3]
    line = f"[{timestamp}] [{category}] {msg}"

    print(line, file=sys.stderr, flush=True)
    _write_log(line)


def trace_exception(msg: str = "Exception"):
    """Print exception info."""
    if not DEBUG_TRACE:
        return
    trace(f"{msg}: {traceback.format_exc()}", "ERROR")


def trace_call(category: str = "CALL"):
    """Decorator to trace function calls.

    The switch is checked per call, so functions decorated at import time
    are traced once ``configure()`` turns tracing on.
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            if not DEBUG_TRACE:
                return func(*args, **kwargs)
            func_name = func.__qualname__
            trace(f">>> {func_name}", category)
            try:
                result = func(*args, **kwargs)
                trace(f"<<< {func_name}", category)
                return result
            except Exception as e:
                trace(f"!!! {func_name} raised {type(e).__name__}: {e}", "ERROR")
                raise
        return wrapper
    return decorator


def close_log():
    """Close log file."""
    global _log_file
    if _log_file:
        _log_file.close()
        _log_file = None
