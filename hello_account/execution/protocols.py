import typing as t

from hello_account.encoding import Pubkey

__all__ = ('AccountHandle', 'SystemProgram')


@t.runtime_checkable
class AccountHandle(t.Protocol):
    """ A protocol defining an account as the runtime presents it to a program
    for the duration of one request. Changes made through the handle are
    committed by the runtime only if the whole request succeeds.
    """
    key: Pubkey
    is_signer: bool
    is_writable: bool
    lamports: int
    data: bytearray
    owner: Pubkey


@t.runtime_checkable
class SystemProgram(t.Protocol):
    """ A protocol defining the runtime's storage allocation service.
    """

    def minimum_balance(self, space: int) -> int:
        """ Returns the balance an account of `space` bytes must hold
        to be exempt from rent.
        """

    def create_account(self, payer: AccountHandle, new_account: AccountHandle, system: AccountHandle,
                       lamports: int, space: int, owner: Pubkey) -> None:
        """ Allocates and funds a new account.

        Args:
            payer: Account that funds the new one; must be a signer.
            new_account: Unused account to allocate; must be a signer.
            system: Handle of the system program itself.
            lamports: Balance to move from `payer` to `new_account`.
            space: Number of zeroed data bytes to allocate.
            owner: Program that will own the new account.

        Raises:
            ExecutionError: If the runtime refuses the allocation.
        """
