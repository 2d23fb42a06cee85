"""
An instruction describes exactly one change to a greeting record. On the
wire it is a single tag byte selecting the operation, followed by the
operation's payload:

    0  Initialize     owner:32
    1  UpdateMessage  message:UTF-8 (rest of the buffer)
    2  IncrementOnly  -
    3  Close          -

The protocol is closed and versionless; a new operation needs a tag of its own.
"""
import typing as t
from abc import ABC, abstractmethod
from dataclasses import dataclass

from hello_account.errors import InvalidInstruction
from .keys import PUBKEY_BYTES, Pubkey

__all__ = ('Instruction', 'Initialize', 'UpdateMessage', 'IncrementOnly', 'Close')


class Instruction(ABC):
    """ Abstract base class of the greeting program instructions.

    Subclasses declare their wire tag with the `tag` class attribute and
    are registered automatically, so :meth:`unpack` knows every variant.
    """
    tag: t.ClassVar[int]

    _registered: t.ClassVar[dict[int, type['Instruction']]] = dict()

    def __init_subclass__(cls, **kwargs: t.Any):
        super().__init_subclass__(**kwargs)
        assert 0 <= cls.tag <= 0xFF, "Instruction tag must fit in one byte"
        assert cls.tag not in Instruction._registered, f"Instruction tag {cls.tag} already in use"
        Instruction._registered[cls.tag] = cls

    @property
    def name(self) -> str:
        return type(self).__name__

    def pack(self) -> bytes:
        """ Serializes the instruction: tag byte, then payload. """
        return self.tag.to_bytes(1) + self._pack_payload()

    @classmethod
    def unpack(cls, data: bytes) -> 'Instruction':
        """ Deserializes an instruction of any known variant.

        Args:
            data: Raw instruction data.

        Raises:
            InvalidInstruction: If the buffer is empty, the tag is unknown
                or the payload is malformed.
        """
        if not data:
            raise InvalidInstruction("Empty instruction data")
        variant = cls._registered.get(data[0])
        if variant is None:
            raise InvalidInstruction(f"Unknown instruction tag {data[0]}")
        return variant._unpack_payload(bytes(data[1:]))

    @abstractmethod
    def _pack_payload(self) -> bytes:
        """ Serializes the variant's payload. """

    @classmethod
    @abstractmethod
    def _unpack_payload(cls, payload: bytes) -> 'Instruction':
        """ Deserializes the variant from its payload.

        Raises:
            InvalidInstruction: If the payload is malformed.
        """


@dataclass(frozen=True)
class Initialize(Instruction):
    """ Creates a greeting record owned by `owner`. """
    tag = 0
    owner: Pubkey

    def _pack_payload(self) -> bytes:
        return bytes(self.owner)

    @classmethod
    def _unpack_payload(cls, payload: bytes) -> 'Initialize':
        if len(payload) < PUBKEY_BYTES:
            raise InvalidInstruction(f"Owner must be {PUBKEY_BYTES} bytes long, got {len(payload)}")
        return cls(Pubkey(payload[:PUBKEY_BYTES]))


@dataclass(frozen=True)
class UpdateMessage(Instruction):
    """ Replaces the greeting message and bumps the counter. """
    tag = 1
    message: str

    def _pack_payload(self) -> bytes:
        return self.message.encode('utf-8')

    @classmethod
    def _unpack_payload(cls, payload: bytes) -> 'UpdateMessage':
        try:
            return cls(payload.decode('utf-8'))
        except UnicodeDecodeError as exc:
            raise InvalidInstruction("Message is not valid UTF-8") from exc


@dataclass(frozen=True)
class IncrementOnly(Instruction):
    """ Bumps the counter, leaving the message as is. """
    tag = 2

    def _pack_payload(self) -> bytes:
        return b''

    @classmethod
    def _unpack_payload(cls, payload: bytes) -> 'IncrementOnly':
        return cls()


@dataclass(frozen=True)
class Close(Instruction):
    """ Destroys the record and returns its balance to a recipient. """
    tag = 3

    def _pack_payload(self) -> bytes:
        return b''

    @classmethod
    def _unpack_payload(cls, payload: bytes) -> 'Close':
        return cls()
