"""
The `hello_account.execution` module contains the greeting program itself:
the processor that validates one instruction against the accounts it was
given and applies the resulting state transition.

A record goes through three states. Initialize moves an unused slot to
active, UpdateMessage and IncrementOnly keep it active, Close releases it.
Every check happens before the first write, so a failed instruction leaves
the accounts exactly as they were.
"""
import logging
import typing as t

from hello_account.encoding import DeserializeError, GreetingRecord, MAX_MESSAGE_LEN, Pubkey, U64_MAX
from hello_account.encoding.instruction import Close, IncrementOnly, Initialize, Instruction, UpdateMessage
from hello_account.errors import AmountOverflow, InvalidInstruction, MessageTooLong, NotRentExempt, Unauthorized
from .protocols import AccountHandle, SystemProgram

__all__ = ('Processor', 'check_authority', 'next_account')

logger = logging.getLogger(__name__)


def next_account(accounts: t.Iterator[AccountHandle]) -> AccountHandle:
    """ Takes the next account handle the instruction expects.

    Raises:
        InvalidInstruction: If the request carries fewer accounts.
    """
    try:
        return next(accounts)
    except StopIteration:
        raise InvalidInstruction("Not enough account keys") from None


def check_authority(requester: AccountHandle, record: GreetingRecord):
    """ Makes sure the requester has signed the request and is the record owner.

    Raises:
        Unauthorized: If either condition isn't met.
    """
    if not requester.is_signer:
        raise Unauthorized("Missing required signature")
    if requester.key != record.owner:
        raise Unauthorized(f"Account {requester.key} is not the record owner")


class Processor:
    """ State-transition engine of the greeting program.

    Args:
        program_id: Identity of the program; owns every greeting record.
        system: Runtime service that allocates new accounts.
    """

    def __init__(self, program_id: Pubkey, system: SystemProgram):
        assert isinstance(system, SystemProgram)
        self._program_id = program_id
        self._system = system

    @property
    def program_id(self) -> Pubkey:
        return self._program_id

    def process(self, accounts: t.Sequence[AccountHandle], instruction_data: bytes) -> None:
        """ Decodes and applies one instruction.

        Args:
            accounts: Account handles in the order the instruction expects.
            instruction_data: Packed instruction.

        Raises:
            ProgramError: If the instruction is rejected.
            ExecutionError: If the runtime refuses an allocation.
        """
        instruction = Instruction.unpack(instruction_data)
        logger.info(f"Instruction: {instruction.name}")
        accounts = iter(accounts)

        if isinstance(instruction, Initialize):
            self._process_initialize(accounts, instruction.owner)
        elif isinstance(instruction, UpdateMessage):
            self._process_update_message(accounts, instruction.message)
        elif isinstance(instruction, IncrementOnly):
            self._process_increment_only(accounts)
        elif isinstance(instruction, Close):
            self._process_close(accounts)
        else:
            raise InvalidInstruction(f"Unsupported instruction {instruction.name}")

    def _process_initialize(self, accounts: t.Iterator[AccountHandle], owner: Pubkey):
        payer = next_account(accounts)
        greeting_account = next_account(accounts)
        system = next_account(accounts)

        if not payer.is_signer:
            raise Unauthorized("Missing required signature")

        space = GreetingRecord.space()
        lamports = self._system.minimum_balance(space)
        if payer.lamports < lamports:
            raise NotRentExempt(f"Payer holds {payer.lamports} lamports; {lamports} required")

        self._system.create_account(payer, greeting_account, system, lamports, space, self._program_id)

        greeting = GreetingRecord(owner)
        greeting_account.data[:] = greeting.pack()
        logger.info(f"Greeting account created for owner: {owner}")

    def _process_update_message(self, accounts: t.Iterator[AccountHandle], message: str):
        owner = next_account(accounts)
        greeting_account = next_account(accounts)

        greeting = self._load(greeting_account)
        check_authority(owner, greeting)
        if len(message.encode('utf-8')) > MAX_MESSAGE_LEN:
            raise MessageTooLong(f"Message is longer than {MAX_MESSAGE_LEN} bytes")

        greeting = greeting.evolve(message=message, count=self._increment(greeting.count))
        greeting_account.data[:] = greeting.pack()
        logger.info(f"Message updated. Count: {greeting.count}")

    def _process_increment_only(self, accounts: t.Iterator[AccountHandle]):
        owner = next_account(accounts)
        greeting_account = next_account(accounts)

        greeting = self._load(greeting_account)
        check_authority(owner, greeting)

        greeting = greeting.evolve(count=self._increment(greeting.count))
        greeting_account.data[:] = greeting.pack()
        logger.info(f"Counter incremented. Count: {greeting.count}")

    def _process_close(self, accounts: t.Iterator[AccountHandle]):
        owner = next_account(accounts)
        greeting_account = next_account(accounts)
        recipient = next_account(accounts)

        greeting = self._load(greeting_account)
        check_authority(owner, greeting)

        lamports = greeting_account.lamports
        greeting_account.lamports = 0
        recipient.lamports += lamports
        del greeting_account.data[:]
        logger.info(f"Greeting account closed; {lamports} lamports returned to {recipient.key}")

    @staticmethod
    def _load(greeting_account: AccountHandle) -> GreetingRecord:
        try:
            return GreetingRecord.unpack(greeting_account.data)
        except DeserializeError as exc:
            raise InvalidInstruction(f"Account {greeting_account.key} holds no greeting record") from exc

    @staticmethod
    def _increment(count: int) -> int:
        if count >= U64_MAX:
            raise AmountOverflow("Counter reached its maximum")
        return count + 1
