"""
Every account in the ledger is addressed by a 32-byte identity. Identities
of parties that sign requests are ed25519 public keys, so a signature made
with the matching secret key proves that the holder authorized a request.
"""
import itertools
import typing as t

from nacl.exceptions import BadSignatureError
from nacl.signing import SigningKey, VerifyKey

from .errors import SignError, VerifyError

__all__ = ('Pubkey', 'Keypair', 'SYSTEM_PROGRAM_ID')

PUBKEY_BYTES = 32
SIGNATURE_BYTES = 64

_unique = itertools.count(1)


class Pubkey(bytes):
    """ A 32-byte account identity.

    Args:
        value: Raw identity bytes.

    Raises:
        ValueError: If `value` is not exactly 32 bytes long.
    """

    if t.TYPE_CHECKING:
        def __init__(self, value: bytes): ...

    def __new__(cls, value: bytes) -> 'Pubkey':
        if len(value) != PUBKEY_BYTES:
            raise ValueError(f"Pubkey must be {PUBKEY_BYTES} bytes long, got {len(value)}")
        return super().__new__(cls, value)

    def __str__(self) -> str:
        return self.hex()

    def __repr__(self) -> str:
        return f"Pubkey({self.hex()[:8]}..)"

    @classmethod
    def from_string(cls, value: str) -> 'Pubkey':
        """ Restores an identity from its hex representation. """
        return cls(bytes.fromhex(value))

    @classmethod
    def new_unique(cls) -> 'Pubkey':
        """ Returns a fresh identity which no key pair stands behind.
        Useful for accounts that never sign. """
        return cls(next(_unique).to_bytes(PUBKEY_BYTES, byteorder='big'))

    def verify(self, message: bytes, signature: bytes) -> bool:
        """ Checks a signature made by the owner of this identity.

        Args:
            message: Signed message.
            signature: 64-byte ed25519 signature.
        """
        if len(signature) != SIGNATURE_BYTES:
            return False
        try:
            VerifyKey(bytes(self)).verify(message, signature)
            return True
        except (BadSignatureError, ValueError):
            return False


SYSTEM_PROGRAM_ID = Pubkey(bytes(PUBKEY_BYTES))


class Keypair:
    """ An ed25519 key pair.

    Args:
        signing_key: Secret key; a new one is generated if omitted.
    """

    def __init__(self, signing_key: SigningKey = None):
        self._signing_key = signing_key or SigningKey.generate()
        self._pubkey = Pubkey(bytes(self._signing_key.verify_key))

    @classmethod
    def from_seed(cls, seed: bytes) -> 'Keypair':
        """ Creates a deterministic key pair from a 32-byte seed. """
        return cls(SigningKey(seed))

    @property
    def pubkey(self) -> Pubkey:
        """ Public identity of this key pair. """
        return self._pubkey

    def sign(self, message: bytes) -> bytes:
        """ Signs a message and returns the detached 64-byte signature.

        Raises:
            SignError: If the message cannot be signed.
        """
        try:
            return self._signing_key.sign(message).signature
        except Exception as exc:
            raise SignError(f"Cannot sign message; {exc}") from exc

    def verify(self, message: bytes, signature: bytes):
        """ Checks own signature.

        Raises:
            VerifyError: If the signature doesn't match.
        """
        if not self._pubkey.verify(message, signature):
            raise VerifyError("Wrong signature")

    def __repr__(self) -> str:
        return f"Keypair({self._pubkey!r})"
