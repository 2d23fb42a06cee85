import logging

import pytest

from hello_account import client
from hello_account.client import Client
from hello_account.encoding import DEFAULT_MESSAGE, SYSTEM_PROGRAM_ID, AccountMeta, DeserializeError, GreetingRecord
from hello_account.encoding.instruction import Close, IncrementOnly, Initialize, Instruction, UpdateMessage
from hello_account.errors import MessageTooLong, Unauthorized
from hello_account.storage import AccountNotFound, Rent


def test_request_builders(program_id, alice, bob):
    greeting = bob.pubkey

    request = client.initialize(program_id, alice.pubkey, greeting, bob.pubkey)
    assert request.accounts == (
        AccountMeta(alice.pubkey, is_signer=True, is_writable=True),
        AccountMeta(greeting, is_signer=True, is_writable=True),
        AccountMeta(SYSTEM_PROGRAM_ID),
    )
    assert Instruction.unpack(request.data) == Initialize(bob.pubkey)

    request = client.update_message(program_id, alice.pubkey, greeting, 'hi')
    assert [meta.pubkey for meta in request.accounts] == [alice.pubkey, greeting]
    assert Instruction.unpack(request.data) == UpdateMessage('hi')

    request = client.increment_only(program_id, alice.pubkey, greeting)
    assert [meta.pubkey for meta in request.accounts] == [alice.pubkey, greeting]
    assert Instruction.unpack(request.data) == IncrementOnly()

    request = client.close(program_id, alice.pubkey, greeting)
    assert [meta.pubkey for meta in request.accounts] == [alice.pubkey, greeting, alice.pubkey]
    assert Instruction.unpack(request.data) == Close()
    request = client.close(program_id, alice.pubkey, greeting, bob.pubkey)
    assert request.accounts[2] == AccountMeta(bob.pubkey, is_writable=True)


async def test_initialize_greeting(ledger, alice):
    greeting = await Client(ledger, alice).initialize()

    record = await Client(ledger, alice).get_greeting(greeting)
    assert record.owner == alice.pubkey
    assert record.count == 0
    assert record.message == DEFAULT_MESSAGE


async def test_update_message(ledger, alice):
    alice_client = Client(ledger, alice)
    greeting = await alice_client.initialize()

    await alice_client.update_message(greeting, "Updated message!")
    assert await alice_client.get_greeting(greeting) == GreetingRecord(alice.pubkey, 1, "Updated message!")

    await alice_client.update_message(greeting, "Updated message!")
    assert await alice_client.get_greeting(greeting) == GreetingRecord(alice.pubkey, 2, "Updated message!")


async def test_increment_only(ledger, alice):
    alice_client = Client(ledger, alice)
    greeting = await alice_client.initialize()

    for _ in range(3):
        await alice_client.increment(greeting)

    assert await alice_client.get_greeting(greeting) == GreetingRecord(alice.pubkey, 3, DEFAULT_MESSAGE)


async def test_unauthorized_update(ledger, alice, bob):
    alice_client = Client(ledger, alice)
    bob_client = Client(ledger, bob)
    greeting = await alice_client.initialize()
    await alice_client.update_message(greeting, 'hi')

    with pytest.raises(Unauthorized):
        await bob_client.update_message(greeting, 'nope')
    with pytest.raises(Unauthorized):
        await bob_client.increment(greeting)
    with pytest.raises(Unauthorized):
        await bob_client.close(greeting)

    assert await alice_client.get_greeting(greeting) == GreetingRecord(alice.pubkey, 1, 'hi')


async def test_owner_other_than_payer(ledger, alice, bob):
    alice_client = Client(ledger, alice)
    greeting = await alice_client.initialize(owner=bob.pubkey)

    with pytest.raises(Unauthorized):
        await alice_client.increment(greeting)
    await alice_client.update_message(greeting, 'from bob', authority=bob)

    assert await alice_client.get_greeting(greeting) == GreetingRecord(bob.pubkey, 1, 'from bob')


async def test_message_too_long(ledger, alice):
    alice_client = Client(ledger, alice)
    greeting = await alice_client.initialize()
    last_round = await ledger.get_last_round()

    with pytest.raises(MessageTooLong, match="Max length: 200"):
        await alice_client.update_message(greeting, 'x' * 201)
    assert await ledger.get_last_round() == last_round

    request = client.update_message(ledger.program_id, alice.pubkey, greeting, 'x' * 201)
    with pytest.raises(MessageTooLong):
        await ledger.process_transaction(request.sign(alice))

    assert await alice_client.get_greeting(greeting) == GreetingRecord(alice.pubkey)


async def test_close_account(caplog, ledger, alice):
    alice_client = Client(ledger, alice)
    greeting = await alice_client.initialize()
    balance = await ledger.get_balance(alice.pubkey)
    caplog.set_level(logging.INFO, logger='hello_account.client')

    await alice_client.close(greeting)

    assert await ledger.get_balance(greeting) == 0
    assert await ledger.get_balance(alice.pubkey) == balance + Rent().minimum_balance(GreetingRecord.space())
    with pytest.raises(AccountNotFound):
        await alice_client.get_greeting(greeting)
    with pytest.raises(DeserializeError):
        await alice_client.increment(greeting)
    assert [record.getMessage() for record in caplog.records if record.name == 'hello_account.client'] == [
        f"Closing greeting account {greeting}",
        f"Incrementing counter of {greeting}",
    ]
