import typing as t
from abc import ABC, abstractmethod

from hello_account.encoding import Packable, Pubkey
from .accounts import Account
from .errors import AccountNotFound
from .session import Session

__all__ = ('Storage',)

P = t.TypeVar('P', bound=Packable)


class Storage(ABC):
    """ Storage abstract base class. """

    async def get_last_round(self) -> int:
        """ Returns the last committed round, or 0 if nothing has been
        committed yet.
        """
        return await self._session_factory(0).get_last_round()

    async def get_account(self, key: Pubkey) -> Account | None:
        """ Returns a copy of the stored account.

        Args:
            key: Account identity.

        Returns:
            The account, or `None` if there is no such account.
        """
        return await self._session_factory(0).get_account(key)

    async def get_balance(self, key: Pubkey) -> int:
        """ Returns the balance of an account, 0 if there is no such account. """
        account = await self.get_account(key)
        return account.lamports if account else 0

    async def load(self, key: Pubkey, kind: type[P]) -> P:
        """ Reads an account and deserializes its data.

        Args:
            key: Account identity.
            kind: Class to deserialize the data with.

        Raises:
            AccountNotFound: If there is no such account.
            DeserializeError: If the data cannot be deserialized.
        """
        account = await self.get_account(key)
        if account is None:
            raise AccountNotFound(f"Account {key} not found")
        return t.cast(P, kind.unpack(account.data))

    @abstractmethod
    def _session_factory(self, sync_round: int, *args: t.Any, **kwargs: t.Any) -> Session:
        """ This method must return an instance of the `hello_account.storage.Session`
        class.

        Args:
            sync_round: Round number; 0 for a session that only reads.
            args: Arguments reserved for use in implementation.
            kwargs: Keyword arguments reserved for use in implementation.
        """
