import pytest

from snake_economy.errors import InsufficientBalance, TransferRejected
from snake_economy.journal import Journal
from snake_economy.ledger import GameLedgers, InMemoryTokenLedger, InMemoryNftLedger

AUTHORITY = "snake-game"


class TestTokenLedger:
    def test_mint_and_burn_track_supply(self):
        token = InMemoryTokenLedger("Snake Token", "SNAKE", AUTHORITY)
        token.mint("alice", 10)
        token.burn("alice", 4)
        assert token.balance_of("alice") == 6
        assert token.total_supply == 6

    def test_burn_more_than_balance(self):
        token = InMemoryTokenLedger("Snake Token", "SNAKE", AUTHORITY)
        token.mint("alice", 3)
        with pytest.raises(InsufficientBalance):
            token.burn("alice", 4)
        assert token.balance_of("alice") == 3

    def test_transfer_from_needs_allowance(self):
        token = InMemoryTokenLedger("Snake Token", "SNAKE", AUTHORITY)
        token.mint("alice", 10)
        with pytest.raises(InsufficientBalance):
            token.transfer_from("bob", "alice", "bob", 5)
        token.approve("alice", "bob", 5)
        token.transfer_from("bob", "alice", "bob", 5)
        assert token.balance_of("bob") == 5
        assert token.allowance("alice", "bob") == 0

    def test_authority_also_needs_allowance(self):
        token = InMemoryTokenLedger("Snake Token", "SNAKE", AUTHORITY)
        token.mint("alice", 10)
        with pytest.raises(InsufficientBalance):
            token.transfer_from(AUTHORITY, "alice", AUTHORITY, 10)
        assert token.balance_of("alice") == 10


class TestNftLedger:
    def test_ids_are_sequential_and_enumerable(self):
        nft = InMemoryNftLedger("Snake NFT", "SNFT", AUTHORITY)
        ids = [nft.mint("alice"), nft.mint("bob"), nft.mint("alice")]
        assert ids == [0, 1, 2]
        assert nft.balance_of("alice") == 2
        assert nft.owner_token_at("alice", 1) == 2
        assert nft.owner_of(1) == "bob"

    def test_burn_and_restore(self):
        nft = InMemoryNftLedger("Snake NFT", "SNFT", AUTHORITY)
        for _ in range(3):
            nft.mint("alice")
        nft.burn(0)
        assert nft.balance_of("alice") == 2
        with pytest.raises(InsufficientBalance):
            nft.owner_of(0)
        nft.restore("alice", 0)
        assert nft.owner_token_at("alice", 0) == 0

    def test_approve_requires_ownership(self):
        nft = InMemoryNftLedger("Snake NFT", "SNFT", AUTHORITY)
        token_id = nft.mint("alice")
        with pytest.raises(InsufficientBalance):
            nft.approve("bob", "carol", token_id)
        nft.approve("alice", "carol", token_id)
        assert nft.get_approved(token_id) == "carol"


class TestNativeLedger:
    def test_non_payable_recipient(self):
        native = GameLedgers.in_memory(AUTHORITY).native
        native.credit("alice", 10)
        native.mark_non_payable("contract")
        with pytest.raises(TransferRejected):
            native.transfer("alice", "contract", 5)
        assert native.balance_of("alice") == 10


class TestJournal:
    def test_rollback_restores_every_ledger(self):
        ledgers = GameLedgers.in_memory(AUTHORITY)
        ledgers.snake.mint("alice", 10)
        ledgers.native.credit("alice", 100)
        nft_ids = [ledgers.snake_nft.mint("alice") for _ in range(2)]
        ledgers.snake.approve("alice", AUTHORITY, 5)
        ledgers.snake_nft.approve("alice", AUTHORITY, nft_ids[0])

        journal = Journal(ledgers)
        journal.collect_snake(AUTHORITY, "alice", AUTHORITY, 5)
        journal.mint_fruit("alice", 40)
        journal.burn_snake_nft("alice", nft_ids[0])
        journal.mint_super_pet_nft("alice")
        journal.pay("alice", AUTHORITY, 60)
        journal.rollback()

        assert ledgers.snake.balance_of("alice") == 10
        assert ledgers.snake.total_supply == 10
        assert ledgers.fruit.balance_of("alice") == 0
        assert ledgers.snake_nft.balance_of("alice") == 2
        assert ledgers.super_pet_nft.balance_of("alice") == 0
        assert ledgers.native.balance_of("alice") == 100
        assert ledgers.snake.allowance("alice", AUTHORITY) == 5
        assert ledgers.snake_nft.get_approved(nft_ids[0]) == AUTHORITY

    def test_commit_forgets_undo_actions(self):
        ledgers = GameLedgers.in_memory(AUTHORITY)
        journal = Journal(ledgers)
        journal.mint_snake("alice", 3)
        journal.commit()
        journal.rollback()
        assert ledgers.snake.balance_of("alice") == 3

    def test_rollback_continues_past_a_failed_undo(self):
        ledgers = GameLedgers.in_memory(AUTHORITY)
        ledgers.native.credit("alice", 100)
        journal = Journal(ledgers)
        journal.mint_snake("alice", 3)
        journal.pay("alice", AUTHORITY, 60)
        # the payment is spent elsewhere before the rollback
        ledgers.native.transfer(AUTHORITY, "bob", 60)

        failed = journal.rollback()
        assert failed == ["native transfer"]
        assert ledgers.snake.balance_of("alice") == 0
