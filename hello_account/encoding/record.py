"""
A greeting record is the only kind of state this program keeps. The record
always occupies the same number of bytes, whatever the length of its
message, so the storage slot holding it never has to grow or shrink.
"""
import typing as t
from dataclasses import dataclass, replace

from .errors import DeserializeError, SerializeError
from .keys import PUBKEY_BYTES, Pubkey

__all__ = ('GreetingRecord', 'MAX_MESSAGE_LEN', 'DEFAULT_MESSAGE', 'U64_MAX')

MAX_MESSAGE_LEN = 200
DEFAULT_MESSAGE = "Hello, Solana!"
U64_MAX = 2 ** 64 - 1

COUNT_BYTES = 8
LENGTH_BYTES = 4


@dataclass(frozen=True)
class GreetingRecord:
    """ Greeting record.

    Layout: ``owner:32 | count:8 LE | message_len:4 LE | message:200``;
    only the first ``message_len`` bytes of the message region are
    significant, the rest is zero.

    Attributes:
        owner: The only identity allowed to change or close the record.
        count: Number of successful mutations.
        message: Greeting text, up to 200 bytes in UTF-8.
    """
    owner: Pubkey
    count: int = 0
    message: str = DEFAULT_MESSAGE

    @staticmethod
    def space() -> int:
        """ Returns the number of bytes a packed record occupies. """
        return PUBKEY_BYTES + COUNT_BYTES + LENGTH_BYTES + MAX_MESSAGE_LEN

    def pack(self) -> bytes:
        """ Serializes the record into exactly `space()` bytes.

        Raises:
            SerializeError: If a field cannot be represented.
        """
        if len(self.owner) != PUBKEY_BYTES:
            raise SerializeError(f"Owner must be {PUBKEY_BYTES} bytes long")
        if not 0 <= self.count <= U64_MAX:
            raise SerializeError("Count is out of u64 range")
        encoded = self.message.encode('utf-8')
        if len(encoded) > MAX_MESSAGE_LEN:
            raise SerializeError(f"Message is too long; maximum is {MAX_MESSAGE_LEN} bytes")
        return (bytes(self.owner)
                + self.count.to_bytes(COUNT_BYTES, byteorder='little')
                + len(encoded).to_bytes(LENGTH_BYTES, byteorder='little')
                + encoded.ljust(MAX_MESSAGE_LEN, b'\x00'))

    @classmethod
    def unpack(cls, data: bytes) -> 'GreetingRecord':
        """ Deserializes a record.

        Args:
            data: Content of a record slot.

        Raises:
            DeserializeError: If the data is truncated or malformed.
        """
        data = bytes(data)
        if len(data) != cls.space():
            raise DeserializeError(f"Wrong record size; expected {cls.space()}, got {len(data)}")
        pos = PUBKEY_BYTES
        owner = Pubkey(data[:pos])
        count = int.from_bytes(data[pos:pos + COUNT_BYTES], byteorder='little')
        pos += COUNT_BYTES
        size = int.from_bytes(data[pos:pos + LENGTH_BYTES], byteorder='little')
        pos += LENGTH_BYTES
        if size > MAX_MESSAGE_LEN:
            raise DeserializeError(f"Wrong message length {size}")
        if any(data[pos + size:]):
            raise DeserializeError("Message padding is not zeroed")
        try:
            message = data[pos:pos + size].decode('utf-8')
        except UnicodeDecodeError as exc:
            raise DeserializeError("Message is not valid UTF-8") from exc
        return cls(owner, count, message)

    def evolve(self, **changes: t.Any) -> 'GreetingRecord':
        """ Returns a copy of the record with the given fields replaced. """
        return replace(self, **changes)
