import pytest

from snake_economy.constants import SNAKE_ETH_RATE
from snake_economy.errors import (
    AirdropAlreadyClaimed, InsufficientBalance, InsufficientPayment, IncorrectAmount,
    NoGameCredits, GameAlreadyStarted
)

from conftest import fund, give_snake, approve_snake, play, event_names


class TestSnakeAirdrop:
    def test_mints_airdrop_once(self, engine):
        events = engine.snake_airdrop("alice")
        assert event_names(events) == ["SnakeAirdropped"]
        assert engine.ledgers.snake.balance_of("alice") == 10
        assert engine.get_player_data("alice").snake_airdrop_flag is True

    def test_second_airdrop_is_rejected(self, engine):
        engine.snake_airdrop("alice")
        with pytest.raises(AirdropAlreadyClaimed):
            engine.snake_airdrop("alice")
        assert engine.ledgers.snake.balance_of("alice") == 10


class TestBuySnake:
    def test_mints_snake_for_exact_payment(self, engine):
        fund(engine, "alice")
        engine.buy_snake("alice", 40, 40 * SNAKE_ETH_RATE)
        assert engine.ledgers.snake.balance_of("alice") == 40
        assert engine.get_balance() == 40 * SNAKE_ETH_RATE

    def test_underpayment_is_rejected(self, engine):
        fund(engine, "alice")
        with pytest.raises(InsufficientPayment):
            engine.buy_snake("alice", 10, 10 * SNAKE_ETH_RATE - 1)
        assert engine.ledgers.snake.balance_of("alice") == 0
        assert engine.get_balance() == 0

    def test_overpayment_is_kept(self, engine):
        fund(engine, "alice")
        engine.buy_snake("alice", 1, 3 * SNAKE_ETH_RATE)
        assert engine.ledgers.snake.balance_of("alice") == 1
        assert engine.get_balance() == 3 * SNAKE_ETH_RATE

    def test_payment_needs_native_balance(self, engine):
        with pytest.raises(InsufficientBalance):
            engine.buy_snake("alice", 1, SNAKE_ETH_RATE)
        assert engine.ledgers.snake.balance_of("alice") == 0

    @pytest.mark.parametrize("amount", [0, -3, 1.5, True])
    def test_amount_must_be_positive_integer(self, engine, amount):
        fund(engine, "alice")
        with pytest.raises(IncorrectAmount):
            engine.buy_snake("alice", amount, SNAKE_ETH_RATE)


class TestBuyCredits:
    def test_credit_conservation(self, engine):
        give_snake(engine, "alice", 23)
        engine.buy_credits("alice", 4)
        assert engine.get_player_data("alice").game_credits == 4
        assert engine.ledgers.snake.balance_of("alice") == 3

    def test_cost_is_burned(self, engine):
        give_snake(engine, "alice", 10)
        engine.buy_credits("alice", 2)
        assert engine.ledgers.snake.total_supply == 0
        assert engine.ledgers.snake.balance_of(engine.config.engine_address) == 0

    def test_super_pet_nfts_discount_the_price(self, engine):
        engine.ledgers.super_pet_nft.mint("alice")
        engine.ledgers.super_pet_nft.mint("alice")
        assert engine.get_game_credit_price("alice") == 3
        give_snake(engine, "alice", 12)
        events = engine.buy_credits("alice", 4)
        assert events[0].price == 3
        assert engine.ledgers.snake.balance_of("alice") == 0
        assert engine.get_player_data("alice").game_credits == 4

    def test_price_never_drops_below_one(self, engine):
        for _ in range(7):
            engine.ledgers.super_pet_nft.mint("alice")
        assert engine.get_game_credit_price("alice") == 1

    def test_insufficient_snake_is_rejected(self, engine):
        give_snake(engine, "alice", 9)
        with pytest.raises(InsufficientBalance):
            engine.buy_credits("alice", 2)
        assert engine.get_player_data("alice").game_credits == 0
        assert engine.ledgers.snake.balance_of("alice") == 9

    def test_requires_snake_allowance(self, engine):
        give_snake(engine, "alice", 10, approve=False)
        with pytest.raises(InsufficientBalance, match="allowance"):
            engine.buy_credits("alice", 1)
        assert engine.ledgers.snake.balance_of("alice") == 10
        assert engine.get_player_data("alice").game_credits == 0

    def test_partial_allowance_is_not_enough(self, engine):
        give_snake(engine, "alice", 10, approve=False)
        engine.ledgers.snake.approve("alice", engine.config.engine_address, 7)
        with pytest.raises(InsufficientBalance):
            engine.buy_credits("alice", 2)
        engine.buy_credits("alice", 1)
        assert engine.ledgers.snake.allowance("alice", engine.config.engine_address) == 2

    def test_airdropped_snake_buys_airdropped_credits(self, engine):
        engine.snake_airdrop("alice")
        approve_snake(engine, "alice")
        engine.buy_credits("alice", 2)
        account = engine.get_player_data("alice")
        assert account.airdropped_credits == 2
        assert account.purchased_credits == 0
        assert account.airdropped_snake == 0

    def test_partly_airdropped_credit_counts_as_airdropped(self, engine):
        engine.snake_airdrop("alice")
        give_snake(engine, "alice", 8)
        engine.buy_credits("alice", 3)
        account = engine.get_player_data("alice")
        # 10 airdropped SNAKE cover credits one and two, credit three is purchased
        assert (account.airdropped_credits, account.purchased_credits) == (2, 1)

    def test_airdropped_snake_is_spent_before_purchased(self, engine):
        give_snake(engine, "bob", 3)
        engine.snake_airdrop("bob")
        approve_snake(engine, "bob")
        engine.buy_credits("bob", 1)
        bob = engine.get_player_data("bob")
        assert (bob.airdropped_credits, bob.purchased_credits) == (1, 0)
        assert bob.airdropped_snake == 5

    def test_airdrop_split_with_a_mixed_credit(self, engine):
        give_snake(engine, "carol", 7)
        engine.snake_airdrop("carol")
        approve_snake(engine, "carol")
        engine.buy_credits("carol", 1)      # 5 of the 10 airdropped SNAKE
        engine.buy_credits("carol", 2)      # 5 airdropped + 5 purchased
        carol = engine.get_player_data("carol")
        assert (carol.airdropped_credits, carol.purchased_credits) == (2, 1)
        assert carol.airdropped_snake == 0
        assert engine.ledgers.snake.balance_of("carol") == 2


class TestGameStart:
    def test_requires_credits(self, engine):
        with pytest.raises(NoGameCredits):
            engine.game_start("alice")

    def test_consumes_one_credit_and_sets_flag(self, engine):
        give_snake(engine, "alice", 10)
        engine.buy_credits("alice", 2)
        events = engine.game_start("alice")
        account = engine.get_player_data("alice")
        assert event_names(events) == ["GameStarted"]
        assert account.game_credits == 1
        assert account.game_started_flag is True

    def test_single_game_in_flight(self, engine):
        give_snake(engine, "alice", 10)
        engine.buy_credits("alice", 2)
        engine.game_start("alice")
        with pytest.raises(GameAlreadyStarted):
            engine.game_start("alice")
        assert engine.get_player_data("alice").game_credits == 1

    def test_second_start_fails_even_without_credits_left(self, engine):
        give_snake(engine, "alice", 5)
        engine.buy_credits("alice", 1)
        engine.game_start("alice")
        with pytest.raises(GameAlreadyStarted):
            engine.game_start("alice")

    def test_airdropped_credits_are_spent_first(self, engine):
        engine.snake_airdrop("alice")
        give_snake(engine, "alice", 5)
        engine.buy_credits("alice", 3)
        paid = []
        for _ in range(3):
            paid.append(engine.game_start("alice")[0].paid)
            engine.game_over("alice", 0)
        assert paid == [False, False, True]

    def test_credit_is_consumed_per_success_only(self, engine):
        give_snake(engine, "alice", 10)
        engine.buy_credits("alice", 2)
        play(engine, "alice", 10)
        play(engine, "alice", 10)
        with pytest.raises(NoGameCredits):
            engine.game_start("alice")
        assert engine.get_player_data("alice").game_credits == 0
