from functools import update_wrapper

from .logger import logger

__all__ = ['is_bound', 'ensure_bound', 'is_teardown_wrapper', 'subscribe_teardown', 'unsubscribe_teardown']


"""Bind cache invalidation to the teardown of memoized instances"""


_bound_marker = "__lastcall_bound__"
_wrapper_marker = "__lastcall_teardown__"

_logger = logger.getChild("lifecycle")


def _clear_instance(instance):
    from .memoize import clear

    return clear(instance)


def is_teardown_wrapper(func):
    """Determine if function is a teardown wrapper installed by ensure_bound

    :param func: function to test
    """
    return getattr(func, _wrapper_marker, False)


def is_bound(cls, teardown_name="on_destroyed"):
    """Determine if class has been bound to clear caches upon teardown

    Only considers the class itself, not its bases

    :param cls: class to inspect
    :param teardown_name: name of teardown method
    """
    return teardown_name in vars(cls).get(_bound_marker, ())


def _find_teardown(cls, name):
    for base_cls in cls.__mro__:
        try:
            return vars(base_cls)[name]

        except KeyError:
            continue

    return None


def _create_teardown_wrapper(cls, name, original):
    if original is None:
        def teardown(self, *args, **kwargs):
            _clear_instance(self)

        teardown.__name__ = name
        teardown.__qualname__ = "{}.{}".format(cls.__qualname__, name)

    else:
        def teardown(self, *args, **kwargs):
            _clear_instance(self)

            try:
                bind = original.__get__

            except AttributeError:
                return original(self, *args, **kwargs)

            return bind(self, type(self))(*args, **kwargs)

        update_wrapper(teardown, getattr(original, "__func__", original))

    setattr(teardown, _wrapper_marker, True)
    return teardown


def ensure_bound(cls, teardown_name="on_destroyed"):
    """Wrap teardown method of class so that it clears all caches of the instance being torn down

    Any existing teardown method (including inherited ones) is invoked after clearing. Binding a class more than
    once for the same teardown name has no effect.

    :param cls: class to bind
    :param teardown_name: name of teardown method invoked by host
    :returns: True if a wrapper was installed
    """
    try:
        bound_names = vars(cls)[_bound_marker]

    except KeyError:
        bound_names = set()
        setattr(cls, _bound_marker, bound_names)

    if teardown_name in bound_names:
        return False

    bound_names.add(teardown_name)

    original = _find_teardown(cls, teardown_name)

    # Inherited wrapper clears caches for all descriptors visible to the instance's class
    if original is not None and is_teardown_wrapper(getattr(original, "__func__", original)):
        _logger.debug("{} inherits bound teardown '{}'".format(cls.__qualname__, teardown_name))
        return False

    setattr(cls, teardown_name, _create_teardown_wrapper(cls, teardown_name, original))
    _logger.debug("Bound teardown '{}' of {}".format(teardown_name, cls.__qualname__))
    return True


_subscriptions = {}


def _clear_published(instance, *args, **kwargs):
    _clear_instance(instance)


def subscribe_teardown(messenger, message_id="destroyed"):
    """Subscribe cache clearing to teardown messages published by a host messenger

    The messenger must provide add_subscriber(message_id, callback), and invoke the callback with the instance
    being torn down as its first argument.

    :param messenger: message dispatcher, such as :py:class:`lastcall.messages.MessagePasser`
    :param message_id: identifier of teardown message
    :returns: True if a new subscription was made
    """
    try:
        _, message_ids = _subscriptions[id(messenger)]

    except KeyError:
        message_ids = set()
        _subscriptions[id(messenger)] = messenger, message_ids

    if message_id in message_ids:
        return False

    messenger.add_subscriber(message_id, _clear_published)
    message_ids.add(message_id)

    _logger.debug("Subscribed to teardown message '{}' of {!r}".format(message_id, messenger))
    return True


def unsubscribe_teardown(messenger, message_id="destroyed"):
    """Remove subscription made by subscribe_teardown

    :param messenger: message dispatcher
    :param message_id: identifier of teardown message
    :returns: True if a subscription was removed
    """
    try:
        _, message_ids = _subscriptions[id(messenger)]

    except KeyError:
        return False

    if message_id not in message_ids:
        return False

    messenger.remove_subscriber(message_id, _clear_published)
    message_ids.remove(message_id)

    if not message_ids:
        del _subscriptions[id(messenger)]

    return True
