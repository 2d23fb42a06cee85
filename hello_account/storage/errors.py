from hello_account.errors import ExecutionError


class MissingRequiredSignature(ExecutionError):
    """ A signer account didn't sign the request. """


class InvalidSignature(ExecutionError):
    """ A signature doesn't match the request. """


class IncorrectProgramId(ExecutionError):
    """ The request is addressed to a program the ledger doesn't run. """


class AccountAlreadyInUse(ExecutionError):
    """ An attempt to allocate an account that already holds a balance or data. """


class InsufficientFunds(ExecutionError):
    """ The payer's balance doesn't cover a transfer. """


class ReadonlyAccountModified(ExecutionError):
    """ An account passed as read-only was changed. """


class ExternalAccountModified(ExecutionError):
    """ A program changed data or spent the balance of an account it doesn't own. """


class UnbalancedInstruction(ExecutionError):
    """ The total balance of the request's accounts changed. """


class AccountNotFound(ExecutionError):
    """ The requested account doesn't exist. """
