from functools import update_wrapper
from types import MethodType

from .configuration import parse_options, resolve_options
from .errors import RegistrationError
from .lifecycle import ensure_bound
from .logger import logger
from .registry import MethodDescriptor, create_slot_id, method_registry
from .slots import CacheSlotStore
from .strategies import get_strategy

__all__ = ['Memoized', 'memoize', 'invoke', 'clear']


_logger = logger.getChild("memoize")


def invoke(instance, descriptor, args, kwargs, underlying):
    """Return cached result of memoized method call, or invoke the method and cache its result

    The slot is only updated if the underlying call returns without error, and was not invalidated whilst
    the call was in progress.

    :param instance: instance the method is called upon
    :param descriptor: MethodDescriptor of memoized method
    :param args: positional arguments of call
    :param kwargs: keyword arguments of call
    :param underlying: undecorated method
    """
    strategy = descriptor.strategy
    slots = descriptor.slots

    token = strategy.prepare(args, kwargs)
    slot = slots.get_or_create(instance)

    if slot.initialized and strategy.matches(slot, token):
        return slot.last_result

    _logger.debug("Cache miss for '%s'", descriptor.slot_id)
    result = underlying(instance, *args, **kwargs)

    if slots.get(instance) is slot:
        strategy.capture(slot, token)
        slot.last_result = result
        slot.initialized = True

    return result


def clear(instance, method_name=None):
    """Clear the memoization caches of an instance

    :param instance: instance with memoized methods
    :param method_name: name of method to clear, clears all memoized methods if omitted
    :returns: number of cache slots removed
    """
    cls = type(instance)

    if method_name is None:
        descriptors = method_registry.list(cls)

    else:
        descriptors = method_registry.find(cls, method_name)

    removed = 0
    for descriptor in descriptors:
        if descriptor.slots.invalidate(instance):
            removed += 1

    if removed:
        _logger.debug("Cleared {} cache slot(s) of {}".format(removed, cls.__qualname__))

    return removed


class Memoized:
    """Descriptor caching the result of the last call to a method, per instance"""

    def __init__(self, func, **options):
        if isinstance(func, (staticmethod, classmethod)):
            raise TypeError("Unable to memoize {}: results are cached per instance".format(type(func).__name__))

        if not callable(func):
            raise TypeError("memoize requires a callable, not {!r}".format(func))

        update_wrapper(self, func)

        self.func = func
        self.descriptor = None

        self._options = parse_options({name: value for name, value in options.items() if value is not None})

    def __set_name__(self, owner, name):
        if self.descriptor is not None:
            raise RegistrationError("Memoized method '{}' is already declared on {}"
                                    .format(self.descriptor.name, self.descriptor.owner.__qualname__))

        options = resolve_options(**self._options)
        strategy = get_strategy(options.strategy, sort_keys=options.sort_keys)

        qualname = "{}.{}".format(owner.__qualname__, name)
        self.descriptor = MethodDescriptor(name=name, slot_id=create_slot_id(qualname), owner=owner,
                                           options=options, strategy=strategy, slots=CacheSlotStore(qualname))

        method_registry.register(owner, self.descriptor)

        if options.auto_destroy:
            ensure_bound(owner, options.teardown)

    def __get__(self, instance, owner=None):
        if instance is None:
            return self

        return MethodType(self, instance)

    def __call__(self, instance, *args, **kwargs):
        descriptor = self.descriptor
        if descriptor is None:
            raise RegistrationError("Memoized function '{}' must be declared in a class body"
                                    .format(self.func.__qualname__))

        return invoke(instance, descriptor, args, kwargs, self.func)

    def clear(self, instance):
        """Clear the cache of this method for an instance

        :param instance: instance with cached result
        :returns: True if a cache slot was removed
        """
        if self.descriptor is None:
            return False

        return self.descriptor.slots.invalidate(instance)

    def __repr__(self):
        return "<Memoized '{}'>".format(self.func.__qualname__)


def memoize(func=None, *, auto_destroy=None, strategy=None, teardown=None, sort_keys=None):
    """Cache the result of the last call to a method, per instance

    Usable as a bare decorator, or called with options. Options which are not given are taken from
    the defaults in :py:mod:`lastcall.configuration` when the class body is executed.

    :param func: method to memoize
    :param auto_destroy: clear caches when the teardown method of the instance is invoked
    :param strategy: argument equality strategy, "reference" or "serialised"
    :param teardown: name of teardown method
    :param sort_keys: sort keys of mappings when using the serialised strategy
    """
    options = dict(auto_destroy=auto_destroy, strategy=strategy, teardown=teardown, sort_keys=sort_keys)
    parse_options({name: value for name, value in options.items() if value is not None})

    if func is None:
        def wrapper(func):
            return Memoized(func, **options)

        return wrapper

    return Memoized(func, **options)
