from weakref import ref

from .logger import logger

__all__ = ['CacheSlot', 'CacheSlotStore']


class CacheSlot:
    """Record of the last call to a memoized method for one instance"""

    __slots__ = ("last_args", "last_args_key", "last_result", "initialized")

    def __init__(self):
        self.last_args = None
        self.last_args_key = None
        self.last_result = None
        self.initialized = False

    def __repr__(self):
        if not self.initialized:
            return "<CacheSlot: uninitialised>"

        return "<CacheSlot: result={!r}>".format(self.last_result)


class CacheSlotStore:
    """Side table of cache slots for one memoized method, keyed by instance identity

    Slots are not stored on the instance itself. Entries for weak-referenceable instances are dropped when the
    instance is collected; other instances are held until their slot is invalidated.
    """

    def __init__(self, name="<unnamed>"):
        self.name = name

        self._slots = {}
        self._references = {}

        self._logger = logger.getChild("CacheSlotStore")

    def __contains__(self, instance):
        return id(instance) in self._slots

    def __len__(self):
        return len(self._slots)

    def __repr__(self):
        return "<CacheSlotStore '{}': {} slots>".format(self.name, len(self._slots))

    def get(self, instance):
        """Return slot for instance, or None if no slot exists

        :param instance: instance owning slot
        """
        return self._slots.get(id(instance))

    def get_or_create(self, instance):
        """Return slot for instance, creating an empty slot if none exists

        :param instance: instance owning slot
        """
        key = id(instance)

        try:
            return self._slots[key]

        except KeyError:
            pass

        slot = self._slots[key] = CacheSlot()
        self._references[key] = self._create_reference(key, instance)
        return slot

    def invalidate(self, instance):
        """Remove slot for instance, returning True if a slot was removed

        :param instance: instance owning slot
        """
        key = id(instance)

        if key not in self._slots:
            return False

        self._discard(key)
        return True

    def clear(self):
        """Remove all slots"""
        self._slots.clear()
        self._references.clear()

    def _create_reference(self, key, instance):
        def on_collected(reference):
            # Slot may already have been replaced for a new instance with the same identity
            if self._references.get(key) is reference:
                self._discard(key)

        try:
            return ref(instance, on_collected)

        except TypeError:
            self._logger.debug("{} instances are not weak-referenceable, holding strong reference until invalidated"
                               .format(type(instance).__qualname__))
            return instance

    def _discard(self, key):
        self._slots.pop(key, None)
        self._references.pop(key, None)
