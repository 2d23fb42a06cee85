"""
A request addresses the greeting program with instruction data and the
ordered list of accounts the instruction works on. Before submission it is
signed by every party whose account is marked as a signer; the signatures
cover the request's canonical byte form, `Request.message`.
"""
import typing as t
from dataclasses import dataclass, field

from .errors import SignError
from .keys import Keypair, Pubkey

__all__ = ('AccountMeta', 'Request', 'Transaction')

MAX_ACCOUNTS = 0xFF


@dataclass(frozen=True)
class AccountMeta:
    """ How a request accesses one account. """
    pubkey: Pubkey
    is_signer: bool = False
    is_writable: bool = False

    @property
    def flags(self) -> int:
        return (0b01 if self.is_signer else 0) | (0b10 if self.is_writable else 0)

    def __str__(self) -> str:
        flags = [name for name, on in (('signer', self.is_signer), ('writable', self.is_writable)) if on]
        return f"{str(self.pubkey)[:8]}..({', '.join(flags) or 'readonly'})"


@dataclass(frozen=True)
class Request:
    """ A single instruction addressed to a program.

    Args:
        program_id: Program which must process the request.
        accounts: Accounts in the order the instruction expects them.
        data: Packed instruction.
    """
    program_id: Pubkey
    accounts: tuple[AccountMeta, ...]
    data: bytes

    def __post_init__(self):
        if len(self.accounts) > MAX_ACCOUNTS:
            raise ValueError(f"Too many accounts; maximum is {MAX_ACCOUNTS}")
        object.__setattr__(self, 'accounts', tuple(self.accounts))

    @property
    def signers(self) -> tuple[Pubkey, ...]:
        """ Distinct identities that must sign the request, in order of appearance. """
        return tuple(dict.fromkeys(meta.pubkey for meta in self.accounts if meta.is_signer))

    @property
    def message(self) -> bytes:
        """ Canonical byte form of the request, suitable for signing.

        Layout: ``program_id:32 | n:1 | (pubkey:32 | flags:1) * n | data``.
        """
        result = bytes(self.program_id) + len(self.accounts).to_bytes(1)
        for meta in self.accounts:
            result += bytes(meta.pubkey) + meta.flags.to_bytes(1)
        return result + bytes(self.data)

    def sign(self, *keypairs: Keypair) -> 'Transaction':
        """ Signs the request.

        Args:
            keypairs: Key pairs of all required signers; extra ones are ignored.

        Raises:
            SignError: If a required signer's key pair is missing.
        """
        available = {keypair.pubkey: keypair for keypair in keypairs}
        message = self.message
        signatures = dict()
        for signer in self.signers:
            if (keypair := available.get(signer)) is None:
                raise SignError(f"Missing key pair for signer {signer}")
            signatures[signer] = keypair.sign(message)
        return Transaction(self, signatures)


@dataclass(frozen=True)
class Transaction:
    """ A signed request. """
    request: Request
    signatures: t.Mapping[Pubkey, bytes] = field(default_factory=dict)
