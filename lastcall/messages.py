from collections import defaultdict

__all__ = ['MessagePasser']


class MessagePasser:
    """Dispatches messages to multiple subscribers

    Hosts without a teardown method can publish teardown through a messenger, see
    :py:func:`lastcall.lifecycle.subscribe_teardown`
    """

    def __init__(self):
        self._subscribers = defaultdict(list)

    def add_subscriber(self, message_id, callback):
        self._subscribers[message_id].append(callback)

    def clear_subscribers(self):
        self._subscribers.clear()

    def remove_subscriber(self, message_id, callback):
        callbacks = self._subscribers[message_id]
        callbacks.remove(callback)

        if not callbacks:
            del self._subscribers[message_id]

    def has_subscribers(self, message_id):
        return bool(self._subscribers.get(message_id))

    def send(self, message_id, *args, **kwargs):
        callbacks = self._subscribers.get(message_id)
        if not callbacks:
            return

        for callback in callbacks[:]:
            callback(*args, **kwargs)
