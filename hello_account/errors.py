"""
Failures are reported with typed exceptions. ``ExecutionError`` means the
request was rejected and its changes rolled back; ``ExecutionCritical``
means a runtime invariant was broken.

Errors raised by the greeting program itself are ``ProgramError`` subclasses.
Each one carries a stable integer code, the value a caller observes when
the request fails:

    0  InvalidInstruction
    1  NotRentExempt
    2  ExpectedAmountMismatch   (reserved)
    3  AmountOverflow
    4  Unauthorized
    5  MessageTooLong
"""
import typing as t
from enum import IntEnum

from hello_account.encoding.errors import DeserializeError

__all__ = ('ExecutionError', 'ExecutionCritical', 'ErrorCode', 'ProgramError',
           'InvalidInstruction', 'NotRentExempt', 'ExpectedAmountMismatch',
           'AmountOverflow', 'Unauthorized', 'MessageTooLong')


class ExecutionError(Exception):
    """ Non-critical execution error. """


class ExecutionCritical(Exception):
    """ Critical execution error. """


class ErrorCode(IntEnum):
    INVALID_INSTRUCTION = 0
    NOT_RENT_EXEMPT = 1
    EXPECTED_AMOUNT_MISMATCH = 2
    AMOUNT_OVERFLOW = 3
    UNAUTHORIZED = 4
    MESSAGE_TOO_LONG = 5


class ProgramError(ExecutionError):
    """ Base class of the errors raised by the greeting program.

    Args:
        message: Human-readable explanation; the default description of
            the error kind is used if omitted.
    """
    code: t.ClassVar[ErrorCode]
    description: t.ClassVar[str] = "Program error"

    _registered: t.ClassVar[dict[int, type['ProgramError']]] = dict()

    def __init_subclass__(cls, **kwargs: t.Any):
        super().__init_subclass__(**kwargs)
        if 'code' in cls.__dict__:
            assert cls.code not in ProgramError._registered, f"Duplicate error code {cls.code}"
            ProgramError._registered[cls.code] = cls

    def __init__(self, message: str = None):
        super().__init__(message or self.description)

    @classmethod
    def from_code(cls, code: int) -> type['ProgramError']:
        """ Returns the error class registered for a code.

        Raises:
            KeyError: If no error uses the code.
        """
        return cls._registered[code]

    def to_dict(self) -> dict[str, t.Any]:
        return {'code': int(self.code), 'name': type(self).__name__, 'message': str(self)}


class InvalidInstruction(ProgramError, DeserializeError):
    """ Instruction data or the accounts it was given cannot be used. """
    code = ErrorCode.INVALID_INSTRUCTION
    description = "Invalid Instruction"


class NotRentExempt(ProgramError):
    """ The payer cannot fund the storage reservation. """
    code = ErrorCode.NOT_RENT_EXEMPT
    description = "Not Rent Exempt"


class ExpectedAmountMismatch(ProgramError):
    """ Reserved. """
    code = ErrorCode.EXPECTED_AMOUNT_MISMATCH
    description = "Expected Amount Mismatch"


class AmountOverflow(ProgramError):
    """ The counter cannot be incremented any further. """
    code = ErrorCode.AMOUNT_OVERFLOW
    description = "Amount Overflow"


class Unauthorized(ProgramError):
    """ The requester is not the record owner or didn't sign the request. """
    code = ErrorCode.UNAUTHORIZED
    description = "Unauthorized"


class MessageTooLong(ProgramError):
    """ The message doesn't fit in the record. """
    code = ErrorCode.MESSAGE_TOO_LONG
    description = "Message Too Long"
