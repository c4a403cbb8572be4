"""
snake_economy: play-to-earn economy engine for the Snake game.
"""

from .config import EconomyConfig
from .engine import GameEconomyEngine
from .ledger import GameLedgers
from .errors import SnakeGameError

__all__ = ["EconomyConfig", "GameEconomyEngine", "GameLedgers", "SnakeGameError"]
