"""
Client side of the greeting program: builders of the requests for each
operation, with the accounts in the order the program expects them, and
a small async client that signs and submits them to a ledger.
"""
import logging

from hello_account.encoding import (MAX_MESSAGE_LEN, SYSTEM_PROGRAM_ID, AccountMeta, GreetingRecord, Keypair,
                                    Pubkey, Request)
from hello_account.encoding import instruction
from hello_account.errors import MessageTooLong
from hello_account.storage import Ledger

__all__ = ('initialize', 'update_message', 'increment_only', 'close', 'Client')

logger = logging.getLogger(__name__)


def initialize(program_id: Pubkey, payer: Pubkey, greeting_account: Pubkey, owner: Pubkey) -> Request:
    """ Builds a request creating a greeting record owned by `owner`.
    Both `payer` and `greeting_account` must sign it. """
    return Request(program_id, (
        AccountMeta(payer, is_signer=True, is_writable=True),
        AccountMeta(greeting_account, is_signer=True, is_writable=True),
        AccountMeta(SYSTEM_PROGRAM_ID),
    ), instruction.Initialize(owner).pack())


def update_message(program_id: Pubkey, owner: Pubkey, greeting_account: Pubkey, message: str) -> Request:
    """ Builds a request replacing the greeting message. """
    return Request(program_id, (
        AccountMeta(owner, is_signer=True),
        AccountMeta(greeting_account, is_writable=True),
    ), instruction.UpdateMessage(message).pack())


def increment_only(program_id: Pubkey, owner: Pubkey, greeting_account: Pubkey) -> Request:
    """ Builds a request bumping the counter. """
    return Request(program_id, (
        AccountMeta(owner, is_signer=True),
        AccountMeta(greeting_account, is_writable=True),
    ), instruction.IncrementOnly().pack())


def close(program_id: Pubkey, owner: Pubkey, greeting_account: Pubkey, recipient: Pubkey = None) -> Request:
    """ Builds a request closing a greeting record. The released balance
    goes to `recipient`, or back to the owner if it is omitted. """
    return Request(program_id, (
        AccountMeta(owner, is_signer=True, is_writable=True),
        AccountMeta(greeting_account, is_writable=True),
        AccountMeta(recipient or owner, is_writable=True),
    ), instruction.Close().pack())


class Client:
    """ Greeting program client.

    Args:
        ledger: Ledger the greeting program runs on.
        payer: Key pair that funds new records and, unless another
            authority is given, signs the requests.
    """

    def __init__(self, ledger: Ledger, payer: Keypair):
        self._ledger = ledger
        self._payer = payer

    @property
    def program_id(self) -> Pubkey:
        return self._ledger.program_id

    async def initialize(self, owner: Pubkey = None) -> Pubkey:
        """ Creates a greeting record.

        Args:
            owner: Owner of the new record; the payer by default.

        Returns:
            Identity of the new greeting account.
        """
        greeting_keypair = Keypair()
        owner = owner or self._payer.pubkey
        logger.info(f"Initializing greeting account {greeting_keypair.pubkey} for owner {owner}")
        request = initialize(self.program_id, self._payer.pubkey, greeting_keypair.pubkey, owner)
        await self._ledger.process_transaction(request.sign(self._payer, greeting_keypair))
        return greeting_keypair.pubkey

    async def update_message(self, greeting_account: Pubkey, message: str, authority: Keypair = None):
        """ Replaces the greeting message.

        Raises:
            MessageTooLong: If the message doesn't fit, before anything is submitted.
        """
        if len(message.encode('utf-8')) > MAX_MESSAGE_LEN:
            raise MessageTooLong(f"Message too long! Max length: {MAX_MESSAGE_LEN}")
        authority = authority or self._payer
        logger.info(f"Updating message of {greeting_account}")
        request = update_message(self.program_id, authority.pubkey, greeting_account, message)
        await self._ledger.process_transaction(request.sign(authority))

    async def increment(self, greeting_account: Pubkey, authority: Keypair = None):
        """ Bumps the counter. """
        authority = authority or self._payer
        logger.info(f"Incrementing counter of {greeting_account}")
        request = increment_only(self.program_id, authority.pubkey, greeting_account)
        await self._ledger.process_transaction(request.sign(authority))

    async def close(self, greeting_account: Pubkey, recipient: Pubkey = None, authority: Keypair = None):
        """ Closes a greeting record and returns its balance to `recipient`. """
        authority = authority or self._payer
        logger.info(f"Closing greeting account {greeting_account}")
        request = close(self.program_id, authority.pubkey, greeting_account, recipient)
        await self._ledger.process_transaction(request.sign(authority))

    async def get_greeting(self, greeting_account: Pubkey) -> GreetingRecord:
        """ Fetches and decodes a greeting record.

        Raises:
            AccountNotFound: If there is no such account.
            DeserializeError: If the account holds no greeting record.
        """
        return await self._ledger.load(greeting_account, GreetingRecord)
