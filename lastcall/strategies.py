from enum import Enum
from json import JSONEncoder

from numpy import generic, ndarray

from .enums import Strategy
from .errors import ConfigurationError, SerialisationError

__all__ = ['primitive_types', 'values_match', 'arguments_match', 'check_mapping_keys', 'create_arguments_key',
           'ReferenceStrategy', 'SerialisedStrategy', 'get_strategy']


"""Argument equality strategies used to decide cache hits"""


primitive_types = frozenset((int, float, complex, str, bytes, bool, type(None)))


def values_match(previous, current):
    """Determine if two argument values are the same under reference equality

    Primitive values compare by value (and type), everything else by identity

    :param previous: value from last call
    :param current: value from current call
    """
    if previous is current:
        return True

    value_type = type(current)
    return value_type is type(previous) and value_type in primitive_types and previous == current


def arguments_match(previous, args, kwargs):
    """Determine if call arguments are the same as the previously captured arguments

    :param previous: (args, kwargs) pair from last call, or None
    :param args: positional arguments of current call
    :param kwargs: keyword arguments of current call
    """
    if previous is None:
        return False

    previous_args, previous_kwargs = previous

    if len(previous_args) != len(args) or len(previous_kwargs) != len(kwargs):
        return False

    for previous_value, value in zip(previous_args, args):
        if not values_match(previous_value, value):
            return False

    for name, value in kwargs.items():
        try:
            previous_value = previous_kwargs[name]

        except KeyError:
            return False

        if not values_match(previous_value, value):
            return False

    return True


def check_mapping_keys(value, active=None):
    """Ensure all mappings within value have string keys

    JSON converts other keys to strings, so {1: "a"} and {"1": "a"} would share an encoding.
    Objects are not traversed, their fields are checked when they are encoded.

    :param value: value to inspect
    :raises TypeError: mapping has a non-string key
    """
    if active is None:
        active = set()

    if not isinstance(value, (dict, list, tuple)):
        return

    # Cycles are reported by the encoder
    if id(value) in active:
        return

    active.add(id(value))

    if isinstance(value, dict):
        for key, item in value.items():
            if not isinstance(key, str):
                raise TypeError("Mapping keys must be strings, got {!r}".format(key))

            check_mapping_keys(item, active)

    else:
        for item in value:
            check_mapping_keys(item, active)

    active.remove(id(value))


class ArgumentEncoder(JSONEncoder):
    """JSON encoder for argument values which have no native JSON form"""

    def default(self, value):
        if isinstance(value, ndarray):
            return value.tolist()

        if isinstance(value, generic):
            return value.item()

        if isinstance(value, Enum):
            return {"__enum__": type(value).__qualname__, "name": value.name}

        if isinstance(value, (set, frozenset)):
            try:
                return sorted(value)

            except TypeError as err:
                raise TypeError("Unable to order set members for encoding: {!r}".format(value)) from err

        # Functions and classes carry a __dict__ which says nothing about their identity
        if callable(value):
            return super().default(value)

        try:
            fields = vars(value)

        except TypeError:
            return super().default(value)

        encoded = {"__class__": type(value).__qualname__}
        encoded.update(fields)
        check_mapping_keys(encoded)
        return encoded


def create_arguments_key(args, kwargs, sort_keys=False):
    """Create canonical string encoding of call arguments

    Keyword arguments are ordered by name, nested mappings keep their insertion order unless sort_keys is set

    :param args: positional arguments
    :param kwargs: keyword arguments
    :param sort_keys: sort keys of nested mappings
    :raises SerialisationError: arguments could not be encoded
    """
    encoder = ArgumentEncoder(sort_keys=sort_keys, allow_nan=False, separators=(',', ':'))
    arguments = [list(args), sorted(kwargs.items())]

    try:
        check_mapping_keys(arguments)
        return encoder.encode(arguments)

    except (TypeError, ValueError, RecursionError) as err:
        raise SerialisationError("Unable to encode arguments for cache key: {}".format(err)) from err


class ReferenceStrategy:
    """Compare arguments by identity, primitives by value"""

    strategy = Strategy.reference

    def prepare(self, args, kwargs):
        return args, kwargs

    def matches(self, slot, token):
        args, kwargs = token
        return arguments_match(slot.last_args, args, kwargs)

    def capture(self, slot, token):
        args, kwargs = token
        slot.last_args = args, dict(kwargs)
        slot.last_args_key = None

    def __repr__(self):
        return "<ReferenceStrategy>"


class SerialisedStrategy:
    """Compare arguments by their canonical JSON encoding"""

    strategy = Strategy.serialised

    def __init__(self, sort_keys=False):
        self.sort_keys = sort_keys

    def prepare(self, args, kwargs):
        return create_arguments_key(args, kwargs, sort_keys=self.sort_keys)

    def matches(self, slot, token):
        return slot.last_args_key is not None and slot.last_args_key == token

    def capture(self, slot, token):
        slot.last_args_key = token
        slot.last_args = None

    def __repr__(self):
        return "<SerialisedStrategy: sort_keys={}>".format(self.sort_keys)


def get_strategy(strategy, sort_keys=False):
    """Create strategy object for given strategy

    :param strategy: Strategy member or name of strategy
    :param sort_keys: sort keys of nested mappings (serialised strategy only)
    :raises ConfigurationError: unknown strategy
    """
    if not isinstance(strategy, Strategy):
        try:
            strategy = Strategy.from_name(strategy)

        except (ValueError, AttributeError) as err:
            raise ConfigurationError("Unknown memoize strategy: {!r}".format(strategy)) from err

    if strategy is Strategy.serialised:
        return SerialisedStrategy(sort_keys=sort_keys)

    return ReferenceStrategy()
