from dataclasses import dataclass, field

from hello_account.encoding import SYSTEM_PROGRAM_ID, Pubkey

__all__ = ('Account', 'AccountInfo', 'Rent')


@dataclass
class Account:
    """ Stored account.

    Attributes:
        lamports: Balance of the account.
        data: Bytes the owning program keeps in the account.
        owner: The only program allowed to change the data or spend the balance.
    """
    lamports: int = 0
    data: bytes = b''
    owner: Pubkey = SYSTEM_PROGRAM_ID

    def __post_init__(self):
        if self.lamports < 0:
            raise ValueError("Lamports cannot be negative")
        self.data = bytes(self.data)

    @property
    def in_use(self) -> bool:
        return bool(self.lamports or self.data or self.owner != SYSTEM_PROGRAM_ID)


@dataclass(eq=False)
class AccountInfo:
    """ Mutable view of an account handed to a program; implements the
    `hello_account.execution.protocols.AccountHandle` protocol.
    """
    key: Pubkey
    is_signer: bool
    is_writable: bool
    lamports: int
    data: bytearray
    owner: Pubkey

    @classmethod
    def from_account(cls, key: Pubkey, account: Account,
                     is_signer: bool = False, is_writable: bool = False) -> 'AccountInfo':
        return cls(key, is_signer, is_writable, account.lamports, bytearray(account.data), account.owner)

    def to_account(self) -> Account:
        return Account(self.lamports, bytes(self.data), self.owner)


@dataclass(frozen=True)
class Rent:
    """ Storage rent parameters.

    An account is exempt from rent when it holds the balance that pays for
    `exemption_threshold` years of storage of its data plus a fixed
    per-account overhead.
    """
    lamports_per_byte_year: int = 3480
    exemption_threshold: float = 2.0
    account_overhead: int = field(default=128)

    def minimum_balance(self, space: int) -> int:
        """ Returns the minimal rent-exempt balance for `space` bytes of data. """
        return int((self.account_overhead + space) * self.lamports_per_byte_year * self.exemption_threshold)
