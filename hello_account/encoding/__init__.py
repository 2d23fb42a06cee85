"""
The `hello_account.encoding` module contains the byte-level formats of the
greeting program: identities and keys, the fixed-size greeting record, and
signed requests. Instructions live in `hello_account.encoding.instruction`.
"""
from .errors import DeserializeError, EncodingError, SerializeError, SignError, VerifyError
from .keys import SYSTEM_PROGRAM_ID, Keypair, Pubkey
from .protocols import Packable
from .record import DEFAULT_MESSAGE, MAX_MESSAGE_LEN, U64_MAX, GreetingRecord
from .request import AccountMeta, Request, Transaction

__all__ = ('EncodingError', 'SerializeError', 'DeserializeError', 'SignError', 'VerifyError',
           'Pubkey', 'Keypair', 'SYSTEM_PROGRAM_ID', 'Packable',
           'GreetingRecord', 'MAX_MESSAGE_LEN', 'DEFAULT_MESSAGE', 'U64_MAX',
           'AccountMeta', 'Request', 'Transaction')
