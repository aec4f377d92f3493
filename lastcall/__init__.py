"""Per-instance memoization of the last call to a method.
Caches the result of a method for the most recent arguments it was called with
Caches are cleared manually, or automatically when the instance is torn down
"""

import os

from .configuration import MemoizeOptions, get_defaults, set_defaults, reset_defaults, load_defaults
from .enums import Strategy
from .errors import MemoizeError, SerialisationError, ConfigurationError, RegistrationError
from .lifecycle import ensure_bound, is_bound, subscribe_teardown, unsubscribe_teardown
from .memoize import Memoized, memoize, clear, invoke
from .messages import MessagePasser
from .registry import method_registry

__all__ = ['memoize', 'clear', 'invoke', 'Memoized', 'Strategy', 'MemoizeOptions', 'get_defaults', 'set_defaults',
           'reset_defaults', 'load_defaults', 'ensure_bound', 'is_bound', 'subscribe_teardown',
           'unsubscribe_teardown', 'MessagePasser', 'method_registry', 'MemoizeError', 'SerialisationError',
           'ConfigurationError', 'RegistrationError']


if os.getenv("LASTCALL_CONFIG"):
    load_defaults(os.environ["LASTCALL_CONFIG"])

if os.getenv("LASTCALL_DO_TESTING"):
    from .testing import run_tests

    run_tests()
