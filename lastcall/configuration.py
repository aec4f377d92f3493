from collections import namedtuple

from configobj import ConfigObj, ConfigObjError

from .enums import Strategy
from .errors import ConfigurationError
from .logger import logger

__all__ = ['MemoizeOptions', 'get_defaults', 'set_defaults', 'reset_defaults', 'resolve_options', 'load_defaults',
           'parse_options']


MemoizeOptions = namedtuple("MemoizeOptions", "auto_destroy strategy teardown sort_keys")


_builtin_defaults = MemoizeOptions(auto_destroy=True, strategy=Strategy.reference, teardown="on_destroyed",
                                   sort_keys=False)
_defaults = _builtin_defaults

_boolean_names = {"true": True, "yes": True, "on": True, "1": True,
                  "false": False, "no": False, "off": False, "0": False}

_logger = logger.getChild("configuration")


def _parse_bool(name, value):
    if isinstance(value, bool):
        return value

    try:
        return _boolean_names[str(value).strip().lower()]

    except KeyError as err:
        raise ConfigurationError("Option '{}' expects a boolean, got {!r}".format(name, value)) from err


def _parse_strategy(name, value):
    if isinstance(value, Strategy):
        return value

    try:
        return Strategy.from_name(str(value).strip())

    except ValueError as err:
        raise ConfigurationError("Option '{}' expects one of {}, got {!r}"
                                 .format(name, ", ".join(s.value for s in Strategy), value)) from err


def _parse_name(name, value):
    if not isinstance(value, str) or not value.isidentifier():
        raise ConfigurationError("Option '{}' expects a method name, got {!r}".format(name, value))

    return value


_parsers = {"auto_destroy": _parse_bool, "strategy": _parse_strategy, "teardown": _parse_name,
            "sort_keys": _parse_bool}


def parse_options(options):
    """Validate and convert mapping of option names to values

    :param options: mapping of option name to raw value
    :returns: dictionary of option name to parsed value
    """
    parsed = {}

    for name, value in options.items():
        try:
            parser = _parsers[name]

        except KeyError as err:
            raise ConfigurationError("Unknown memoize option '{}'".format(name)) from err

        parsed[name] = parser(name, value)

    return parsed


def get_defaults():
    """Return current default options"""
    return _defaults


def set_defaults(**options):
    """Override default options for memoized methods declared afterwards

    :param options: option names and values
    :returns: new default options
    """
    global _defaults

    _defaults = _defaults._replace(**parse_options(options))
    return _defaults


def reset_defaults():
    """Restore built-in default options"""
    global _defaults

    _defaults = _builtin_defaults
    return _defaults


def resolve_options(**overrides):
    """Merge explicitly given options with the defaults

    Options with a value of None are taken from the defaults

    :param overrides: option names and values
    """
    given = {name: value for name, value in overrides.items() if value is not None}
    return _defaults._replace(**parse_options(given))


def load_defaults(file_path, section="memoize"):
    """Load default options from an INI-style configuration file

    :param file_path: path to config file
    :param section: name of section holding options
    :returns: new default options
    """
    try:
        parser = ConfigObj(file_path, file_error=True)

    except (ConfigObjError, OSError) as err:
        raise ConfigurationError("Unable to read configuration file '{}': {}".format(file_path, err)) from err

    try:
        options = parser[section]

    except KeyError:
        options = {}

    defaults = set_defaults(**options)
    _logger.info("Loaded memoize defaults from '{}'".format(file_path))
    return defaults
