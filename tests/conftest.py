import pytest

from hello_account.encoding import DEFAULT_MESSAGE, SYSTEM_PROGRAM_ID, GreetingRecord, Keypair, Pubkey
from hello_account.execution import Processor
from hello_account.storage import AccountInfo, Ledger, Rent, SystemProgram

LAMPORTS_PER_SOL = 1_000_000_000


@pytest.fixture
def program_id():
    return Pubkey.new_unique()


@pytest.fixture(scope="session")
def alice():
    return Keypair.from_seed(b'0123456789ABCDEF0123456789ABCDEF')


@pytest.fixture(scope="session")
def bob():
    return Keypair.from_seed(b'FEDCBA9876543210FEDCBA9876543210')


@pytest.fixture
async def ledger(program_id, alice, bob):
    ledger = Ledger(program_id)
    await ledger.airdrop(alice.pubkey, 10 * LAMPORTS_PER_SOL)
    await ledger.airdrop(bob.pubkey, LAMPORTS_PER_SOL)
    return ledger


@pytest.fixture
def processor_maker(program_id):
    def processor_maker(rent=None):
        return Processor(program_id, SystemProgram(rent or Rent(), dict()))

    return processor_maker


@pytest.fixture
def handle_maker():
    def handle_maker(key=None, lamports=0, data=b'', owner=SYSTEM_PROGRAM_ID, signer=False, writable=False):
        return AccountInfo(key or Pubkey.new_unique(), signer, writable, lamports, bytearray(data), owner)

    return handle_maker


@pytest.fixture
def greeting_maker(program_id, handle_maker):
    def greeting_maker(owner, count=0, message=DEFAULT_MESSAGE, lamports=2_589_120):
        return handle_maker(lamports=lamports, data=GreetingRecord(owner, count, message).pack(),
                            owner=program_id, writable=True)

    return greeting_maker
