from collections import namedtuple
from itertools import count
from weakref import WeakKeyDictionary

from .errors import RegistrationError
from .logger import logger

__all__ = ['MethodDescriptor', 'MethodRegistry', 'create_slot_id', 'method_registry']


MethodDescriptor = namedtuple("MethodDescriptor", "name slot_id owner options strategy slots")
MethodDescriptor.__doc__ = """Identifies one memoized method declared on a class"""


_slot_ids = count()


def create_slot_id(qualname):
    """Create unique cache slot identifier for a memoized method

    :param qualname: qualified name of method
    """
    return "{}#{}".format(qualname, next(_slot_ids))


class MethodRegistry:
    """Per-class listing of memoized method descriptors

    Each class owns the descriptors declared in its own body. Lookups walk the MRO, so subclasses see inherited
    memoized methods, but base classes never see those of their subclasses.
    """

    def __init__(self):
        self._entries = WeakKeyDictionary()
        self._logger = logger.getChild("MethodRegistry")

    def register(self, cls, descriptor):
        """Append descriptor to the registry entry of the class

        :param cls: class declaring memoized method
        :param descriptor: MethodDescriptor instance
        """
        try:
            descriptors = self._entries[cls]

        except KeyError:
            descriptors = self._entries[cls] = []

        if descriptor in descriptors:
            raise RegistrationError("Memoized method '{}' is already registered to {}"
                                    .format(descriptor.name, cls.__qualname__))

        descriptors.append(descriptor)
        self._logger.debug("Registered memoized method '{}' to {}".format(descriptor.name, cls.__qualname__))

    def list(self, cls):
        """Return descriptors visible to class, base class declarations first

        :param cls: class to inspect
        """
        entries = self._entries
        descriptors = []

        for base_cls in reversed(cls.__mro__):
            try:
                descriptors.extend(entries[base_cls])

            except (KeyError, TypeError):
                continue

        return tuple(descriptors)

    def find(self, cls, name):
        """Return descriptors visible to class with the given method name

        :param cls: class to inspect
        :param name: name of memoized method
        """
        return tuple(d for d in self.list(cls) if d.name == name)

    def is_registered(self, cls):
        """Determine if class declares or inherits any memoized methods

        :param cls: class to inspect
        """
        return bool(self.list(cls))

    def declared(self, cls):
        """Return descriptors declared in the body of the class only

        :param cls: class to inspect
        """
        return tuple(self._entries.get(cls, ()))


method_registry = MethodRegistry()
