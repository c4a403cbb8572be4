"""
data_models.py: Data structures for the economy state and its events.
"""

from dataclasses import dataclass, field, asdict
from typing import Optional

from .constants import ZERO_ADDRESS


# -------- Player State --------

@dataclass
class PlayerStats:
    """Historical counters. Only last_score ever goes down."""
    games_played: int = 0
    last_score: int = 0
    best_score: int = 0
    fruits_collected: int = 0
    snake_nfts_amount: int = 0
    super_nfts_amount: int = 0

    def to_client_state(self):
        return asdict(self)


@dataclass
class PlayerAccount:
    """The authoritative per-address state used by the engine."""
    address: str
    game_credits: int = 0
    game_started_flag: bool = False
    snake_airdrop_flag: bool = False
    fruit_to_claim: int = 0
    snake_nfts_to_claim: int = 0
    super_nft_claim_flag: bool = False
    stats: PlayerStats = field(default_factory=PlayerStats)

    # Credit origin tracking (game_credits == purchased + airdropped)
    purchased_credits: int = 0
    airdropped_credits: int = 0
    airdropped_snake: int = 0              # unspent SNAKE received from the airdrop
    current_game_paid: bool = False        # origin of the credit used by the game in flight

    def to_client_state(self):
        """Prepares a minimal state dictionary for network serialization."""
        return {
            "address": self.address,
            "gameCredits": self.game_credits,
            "gameStartedFlag": self.game_started_flag,
            "snakeAirdropFlag": self.snake_airdrop_flag,
            "fruitToClaim": self.fruit_to_claim,
            "snakeNftsToClaim": self.snake_nfts_to_claim,
            "superNftClaimFlag": self.super_nft_claim_flag,
            "purchasedCredits": self.purchased_credits,
            "airdroppedCredits": self.airdropped_credits,
        }


# -------- Round & Global State --------

@dataclass
class GameRound:
    """Aggregate of one competitive round."""
    round_number: int
    games_played: int = 0
    best_player: str = ZERO_ADDRESS
    highest_score: int = 0
    finished: bool = False

    def to_client_state(self):
        return {
            "roundNumber": self.round_number,
            "roundGamesPlayed": self.games_played,
            "roundBestPlayer": self.best_player,
            "roundHighestScore": self.highest_score,
            "finished": self.finished,
        }


@dataclass
class GlobalGameState:
    """All-time records. Mutated only by settlement and round finish."""
    game_round: int = 1
    games_played_total: int = 0
    highest_score_ever: int = 0
    best_player_ever: str = ZERO_ADDRESS


# -------- Events --------

@dataclass
class Event:
    """Notification published after an operation commits."""

    @property
    def name(self) -> str:
        return type(self).__name__

    def to_client_state(self):
        data = asdict(self)
        data["event"] = self.name
        return data


@dataclass
class SnakeAirdropped(Event):
    player: str
    amount: int


@dataclass
class SnakeBought(Event):
    player: str
    amount: int
    payment: int


@dataclass
class CreditsBought(Event):
    player: str
    amount: int
    price: int


@dataclass
class GameStarted(Event):
    player: str
    paid: bool


@dataclass
class GameOver(Event):
    player: str
    score: int
    round_number: int


@dataclass
class SnakeNftUnlocked(Event):
    player: str
    score: int


@dataclass
class MaxSnakeNftsClaimed(Event):
    player: str


@dataclass
class FruitClaimed(Event):
    player: str
    amount: int


@dataclass
class FruitSwapped(Event):
    player: str
    fruit_amount: int
    snake_amount: int


@dataclass
class SnakeNftMinted(Event):
    player: str
    token_id: int


@dataclass
class SuperNftUnlocked(Event):
    player: str


@dataclass
class MaxSuperNftsClaimed(Event):
    player: str


@dataclass
class SuperPetNftMinted(Event):
    player: str
    token_id: int
    burned_token_ids: list


@dataclass
class PrizePaid(Event):
    recipient: str
    amount: int
    role: str


@dataclass
class PrizeTransferFailed(Event):
    recipient: str
    amount: int
    role: str
    reason: str


@dataclass
class RoundFinished(Event):
    round_number: int
    games_played: int
    best_player: str
    highest_score: int
    prize_pool: int


@dataclass
class Deposit(Event):
    sender: str
    amount: int


@dataclass
class EthWithdrawn(Event):
    recipient: str
    amount: int


@dataclass
class RoundPayout:
    """Outcome of one prize distribution."""
    pool: int
    paid: dict = field(default_factory=dict)        # role -> amount
    failed: dict = field(default_factory=dict)      # role -> amount
    skipped: dict = field(default_factory=dict)     # role -> amount
    remainder: int = 0

    @property
    def retained(self) -> int:
        """Amount left in the engine balance for the next round."""
        return self.remainder + sum(self.failed.values()) + sum(self.skipped.values())

    def share_for(self, role: str) -> Optional[int]:
        return self.paid.get(role)
