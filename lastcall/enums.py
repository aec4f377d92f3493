from enum import Enum

__all__ = ['Strategy']


class Strategy(Enum):
    """Argument equality strategies for memoized methods"""

    reference = "reference"
    serialised = "serialised"

    @classmethod
    def from_name(cls, name):
        """Get strategy member from its name

        Accepts the american spelling "serialized" as an alias

        :param name: name of strategy
        """
        name = name.lower()
        if name == "serialized":
            name = "serialised"

        return cls(name)
