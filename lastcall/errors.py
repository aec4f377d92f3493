__all__ = ['MemoizeError', 'SerialisationError', 'ConfigurationError', 'RegistrationError']


class MemoizeError(Exception):
    pass


class SerialisationError(MemoizeError, ValueError):
    """Arguments could not be encoded into a cache key"""


class ConfigurationError(MemoizeError, ValueError):
    """Invalid memoize option or configuration file"""


class RegistrationError(MemoizeError, TypeError):
    """Memoized method was declared or used incorrectly"""
