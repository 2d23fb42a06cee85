import typing as t
from abc import ABC, abstractmethod

from hello_account.encoding import SYSTEM_PROGRAM_ID, Pubkey, Transaction
from hello_account.execution import Processor
from hello_account.execution.protocols import AccountHandle
from .accounts import Account, AccountInfo, Rent
from .errors import (AccountAlreadyInUse, ExternalAccountModified, IncorrectProgramId, InsufficientFunds,
                     InvalidSignature, MissingRequiredSignature, ReadonlyAccountModified, UnbalancedInstruction)


class SystemProgram:
    """ Account allocation service of a session; implements the
    `hello_account.execution.protocols.SystemProgram` protocol.

    Args:
        rent: Rent parameters.
        trusted: Account states the runtime considers the starting point of
            the program's own changes; updated on every allocation.
    """

    def __init__(self, rent: Rent, trusted: dict[Pubkey, Account]):
        self._rent = rent
        self._trusted = trusted

    def minimum_balance(self, space: int) -> int:
        return self._rent.minimum_balance(space)

    def create_account(self, payer: AccountHandle, new_account: AccountHandle, system: AccountHandle,
                       lamports: int, space: int, owner: Pubkey) -> None:
        if system.key != SYSTEM_PROGRAM_ID:
            raise IncorrectProgramId(f"Account {system.key} is not the system program")
        if not (payer.is_signer and new_account.is_signer):
            raise MissingRequiredSignature("Payer and new account must sign the allocation")
        if not (payer.is_writable and new_account.is_writable):
            raise ReadonlyAccountModified("Payer and new account must be writable")
        if Account(new_account.lamports, new_account.data, new_account.owner).in_use:
            raise AccountAlreadyInUse(f"Account {new_account.key} already in use")
        if payer.owner != SYSTEM_PROGRAM_ID:
            raise ExternalAccountModified(f"Payer {payer.key} is not a system account")
        if payer.lamports < lamports:
            raise InsufficientFunds(f"Payer holds {payer.lamports} lamports; {lamports} required")

        payer.lamports -= lamports
        new_account.lamports += lamports
        new_account.data[:] = bytes(space)
        new_account.owner = owner
        for handle in (payer, new_account):
            self._trusted[handle.key] = Account(handle.lamports, handle.data, handle.owner)


class Session(ABC):
    """ Abstract base class for executing requests within one round.
    All changes are made on a working copy which is committed or rolled
    back as a whole.

    Args:
        sync_round: Round number; 0 for a session that only reads.
        program_id: Identity of the greeting program.
        rent: Rent parameters.
    """

    def __init__(self, sync_round: int, program_id: Pubkey, rent: Rent, *args: t.Any, **kwargs: t.Any) -> None:
        self.__sync_round = sync_round
        self._program_id = program_id
        self._rent = rent

    @property
    def sync_round(self) -> int:
        """ Session round. """
        return self.__sync_round

    @abstractmethod
    async def get_last_round(self) -> int:
        """ Returns the last committed round, or 0 if nothing has been committed yet.
        """

    @abstractmethod
    async def get_account(self, key: Pubkey) -> Account | None:
        """ Returns a copy of an account as the current session sees it.

        Args:
            key: Account identity.

        Returns:
            The account, or `None` if there is no such account.
        """

    async def _apply_transaction(self, transaction: Transaction):
        """ Verifies a signed request, runs the greeting program on it and
        stores the changed accounts in the working copy.

        Raises:
            ProgramError: If the program rejects the request.
            ExecutionError: If the runtime rejects the request.
        """
        request = transaction.request
        if request.program_id != self._program_id:
            raise IncorrectProgramId(f"Program {request.program_id} is not deployed")
        message = request.message
        for signer in request.signers:
            if (signature := transaction.signatures.get(signer)) is None:
                raise MissingRequiredSignature(f"Account {signer} must sign the request")
            if not signer.verify(message, signature):
                raise InvalidSignature(f"Wrong signature of account {signer}")

        handles: dict[Pubkey, AccountInfo] = dict()
        for meta in request.accounts:
            if (handle := handles.get(meta.pubkey)) is None:
                account = await self.get_account(meta.pubkey) or Account()
                handles[meta.pubkey] = AccountInfo.from_account(meta.pubkey, account)
                handle = handles[meta.pubkey]
            handle.is_signer |= meta.is_signer
            handle.is_writable |= meta.is_writable

        original = {key: handle.to_account() for key, handle in handles.items()}
        trusted = dict(original)
        processor = Processor(self._program_id, SystemProgram(self._rent, trusted))
        processor.process([handles[meta.pubkey] for meta in request.accounts], request.data)

        self._check_changes(trusted, handles)
        for key, handle in handles.items():
            if handle.to_account() != original[key] or not handle.lamports:
                await self._put_account(key, handle.to_account())

    def _check_changes(self, trusted: dict[Pubkey, Account], handles: dict[Pubkey, AccountInfo]):
        """ Enforces the runtime rules on what the program changed.

        Raises:
            ReadonlyAccountModified: If a read-only account was changed.
            ExternalAccountModified: If the program touched an account it doesn't own.
            UnbalancedInstruction: If the total balance changed.
        """
        for key, handle in handles.items():
            before = trusted[key]
            after = handle.to_account()
            if after == before:
                continue
            if not handle.is_writable:
                raise ReadonlyAccountModified(f"Account {key} is read-only")
            if after.owner != before.owner:
                raise ExternalAccountModified(f"Owner of account {key} changed")
            if before.owner != self._program_id:
                if after.data != before.data:
                    raise ExternalAccountModified(f"Data of account {key} changed")
                if after.lamports < before.lamports:
                    raise ExternalAccountModified(f"Balance of account {key} spent")
        if sum(a.lamports for a in trusted.values()) != sum(h.lamports for h in handles.values()):
            raise UnbalancedInstruction("Sum of account balances changed")

    @abstractmethod
    async def _put_account(self, key: Pubkey, account: Account):
        """ Stores an account in the working copy. An account left without
        balance must be removed. """

    @abstractmethod
    async def _begin_transaction(self, *args: t.Any, **kwargs: t.Any):
        """ Starts a new transaction for the current round. """

    @abstractmethod
    async def _commit_transaction(self):
        """ Commits the current transaction. """

    @abstractmethod
    async def _rollback_transaction(self, exc: Exception):
        """ Rolls back the current transaction. """
