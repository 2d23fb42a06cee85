import typing as t


@t.runtime_checkable
class Packable(t.Protocol):
    """ A protocol defining an object with a flat byte representation.
    """

    def pack(self) -> bytes:
        """ Serializes the object into a byte string. """

    @classmethod
    def unpack(cls, data: bytes) -> 'Packable':
        """ Deserializes an object from a byte string. """
