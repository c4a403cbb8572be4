import pytest

from snake_economy.config import EconomyConfig
from snake_economy.constants import ETHER
from snake_economy.engine import GameEconomyEngine

OPERATOR = "developer"


@pytest.fixture
def engine():
    return GameEconomyEngine()


@pytest.fixture
def make_engine():
    def _make(**overrides):
        return GameEconomyEngine(config=EconomyConfig(**overrides))
    return _make


def fund(engine, player, amount=ETHER):
    """Gives a player native currency."""
    engine.ledgers.native.credit(player, amount)


def approve_snake(engine, player):
    """Lets the engine spend the player's whole SNAKE balance."""
    snake = engine.ledgers.snake
    snake.approve(player, engine.config.engine_address, snake.balance_of(player))


def give_snake(engine, player, amount, approve=True):
    """SNAKE that did not come from the airdrop."""
    engine.ledgers.snake.mint(player, amount)
    if approve:
        approve_snake(engine, player)


def play(engine, player, score):
    engine.game_start(player)
    return engine.game_over(player, score)


def paid_game(engine, player, score):
    """Buys one credit with non-airdropped SNAKE and plays it."""
    give_snake(engine, player, engine.get_game_credit_price(player))
    engine.buy_credits(player, 1)
    return play(engine, player, score)


def event_names(events):
    return [e.name for e in events]
