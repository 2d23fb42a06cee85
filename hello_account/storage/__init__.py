"""
The `hello_account.storage` module contains the runtime that hosts the
greeting program: account storage, signature checks, account allocation
and the transactional rounds in which requests are executed. Each round
either commits all of its changes or none of them.
"""
import logging
import typing as t
from abc import ABC
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from copy import deepcopy

from hello_account.encoding import SYSTEM_PROGRAM_ID, Pubkey, Transaction
from hello_account.errors import ExecutionCritical, ExecutionError
from .accounts import Account, AccountInfo, Rent
from .errors import (AccountAlreadyInUse, AccountNotFound, ExternalAccountModified, IncorrectProgramId,
                     InsufficientFunds, InvalidSignature, MissingRequiredSignature,
                     ReadonlyAccountModified, UnbalancedInstruction)
from .session import Session, SystemProgram
from .storage import Storage

__all__ = ('Account', 'AccountInfo', 'Rent', 'Session', 'Storage', 'SystemProgram', 'Finalizer', 'Ledger',
           'AccountAlreadyInUse', 'AccountNotFound', 'ExternalAccountModified', 'IncorrectProgramId',
           'InsufficientFunds', 'InvalidSignature', 'MissingRequiredSignature',
           'ReadonlyAccountModified', 'UnbalancedInstruction')

logger = logging.getLogger(__name__)


class Finalizer(Storage, ABC):
    """ Storage (state) finalizer. """

    def __init__(self):
        self._sessions: list[Session] = []

    def execution_round(self, sync_round: int, *args: t.Any, **kwargs: t.Any) \
            -> AbstractAsyncContextManager[t.Callable[[Transaction], t.Awaitable[None]], bool]:
        """ Starts an execution round.
        This method returns a context manager that provides a method for
        executing signed requests. When exiting the context, if there were
        no errors, the final state is committed, or all changes of the
        round are rolled back.

        Args:
            sync_round: Round number; must follow the last committed one.
            args: Arguments reserved for use in implementation.
            kwargs: Keyword arguments reserved for use in implementation.

        Raises:
            ExecutionCritical: If the round has already been committed or
                another round is still open.
        """

        @asynccontextmanager
        async def enter_execution_context():
            session_ = self._session_factory(sync_round, *args, **kwargs)

            async def execute(transaction: Transaction):
                await session_._apply_transaction(transaction)

            if self._sessions:
                raise ExecutionCritical(f"Round# {sync_round} overlaps an open round")
            if sync_round <= await session_.get_last_round():
                raise ExecutionCritical(f"Round# {sync_round} already finalized")
            try:
                self._sessions.append(session_)
                await session_._begin_transaction(*args, **kwargs)
                yield execute
                await session_._commit_transaction()
                logger.info(f"Round# {sync_round}; successful finalized")
            except Exception as exc:
                await session_._rollback_transaction(exc)
                if isinstance(exc, ExecutionError):
                    logger.warning(f"Round# {sync_round}; dropped by error: {exc}", exc_info=exc)
                raise exc
            finally:
                self._sessions.remove(session_)

        return enter_execution_context()

    async def process_transaction(self, transaction: Transaction) -> int:
        """ Executes one signed request in a round of its own.

        Args:
            transaction: Signed request.

        Returns:
            Number of the committed round.

        Raises:
            ExecutionError: If the request is rejected; nothing is changed then.
        """
        sync_round = (await self.get_last_round()) + 1
        async with self.execution_round(sync_round) as execute:
            await execute(transaction)
        return sync_round


class _MemorySession(Session):

    def __init__(self, ledger: 'Ledger', sync_round: int) -> None:
        super().__init__(sync_round, ledger.program_id, ledger.rent)
        self._ledger = ledger
        self._temp: dict[Pubkey, Account] | None = None

    @property
    def _accounts(self) -> dict[Pubkey, Account]:
        return self._ledger._accounts if self._temp is None else self._temp

    async def get_last_round(self) -> int:
        return self._ledger._last_round

    async def get_account(self, key: Pubkey) -> Account | None:
        account = self._accounts.get(key)
        return deepcopy(account) if account is not None else None

    async def _put_account(self, key: Pubkey, account: Account):
        assert self._temp is not None, "Transaction not started"
        if account.lamports:
            self._temp[key] = account
        else:
            self._temp.pop(key, None)

    async def _begin_transaction(self, *args: t.Any, **kwargs: t.Any):
        self._temp = deepcopy(self._ledger._accounts)

    async def _commit_transaction(self):
        if self.sync_round <= self._ledger._last_round:
            raise ExecutionCritical(f"Round# {self.sync_round} already finalized")
        self._ledger._accounts = self._temp
        self._ledger._last_round = self.sync_round
        self._temp = None

    async def _rollback_transaction(self, exc: Exception):
        self._temp = None


class Ledger(Finalizer):
    """ In-memory ledger running the greeting program.

    Args:
        program_id: Identity under which the greeting program is deployed.
        rent: Rent parameters.
    """

    def __init__(self, program_id: Pubkey, rent: Rent = None):
        super().__init__()
        self._program_id = program_id
        self._rent = rent or Rent()
        self._accounts: dict[Pubkey, Account] = dict()
        self._last_round = 0

    @property
    def program_id(self) -> Pubkey:
        return self._program_id

    @property
    def rent(self) -> Rent:
        return self._rent

    async def airdrop(self, key: Pubkey, lamports: int):
        """ Credits a system account outside of any round.

        Raises:
            ExecutionCritical: If a round is open.
            ExternalAccountModified: If the account is owned by a program.
        """
        if lamports <= 0:
            raise ValueError("Airdrop amount must be positive")
        if self._sessions:
            raise ExecutionCritical("Airdrop while a round is open")
        account = self._accounts.setdefault(key, Account())
        if account.owner != SYSTEM_PROGRAM_ID:
            raise ExternalAccountModified(f"Account {key} is owned by a program")
        account.lamports += lamports

    def _session_factory(self, sync_round: int, *args: t.Any, **kwargs: t.Any) -> Session:
        return _MemorySession(self, sync_round)
