"""
rewards.py: Turns game scores into FRUIT and Snake NFT entitlements.
"""

from typing import List, Optional

from .config import EconomyConfig
from .data_models import (
    PlayerAccount, Event, SnakeNftUnlocked, MaxSnakeNftsClaimed, FruitClaimed,
    FruitSwapped, SnakeNftMinted
)
from .errors import (
    GameNotStarted, NoFruitTokensToClaim, InsufficientBalance, IncorrectAmount,
    NoSnakeNftsToClaim, require_amount
)
from .journal import Journal
from .ledger import GameLedgers


class RewardCalculator:
    def __init__(self, config: EconomyConfig, ledgers: GameLedgers):
        self.config = config
        self.ledgers = ledgers

    def settle_game(self, account: PlayerAccount, score: int) -> List[Event]:
        """
        Player-side effects of a game over.
        Round bookkeeping is left to the RoundTracker.
        """
        if isinstance(score, bool) or not isinstance(score, int) or score < 0:
            raise IncorrectAmount(f"score must be a non-negative integer, got {score!r}")
        if not account.game_started_flag:
            raise GameNotStarted(f"{account.address} has no game in progress")

        events: List[Event] = []
        account.fruit_to_claim += score
        account.game_started_flag = False

        stats = account.stats
        stats.games_played += 1
        stats.last_score = score
        stats.best_score = max(stats.best_score, score)

        if score >= self.config.score_to_claim_snake_nft:
            unlocked = stats.snake_nfts_amount + account.snake_nfts_to_claim
            if unlocked < self.config.max_snake_nfts:
                account.snake_nfts_to_claim += 1
                events.append(SnakeNftUnlocked(player=account.address, score=score))
            else:
                events.append(MaxSnakeNftsClaimed(player=account.address))
        return events

    def fruit_claim(self, account: PlayerAccount, journal: Journal) -> List[Event]:
        amount = account.fruit_to_claim
        if amount <= 0:
            raise NoFruitTokensToClaim(f"{account.address} has no FRUIT to claim")
        journal.mint_fruit(account.address, amount)
        account.stats.fruits_collected += amount
        account.fruit_to_claim = 0
        return [FruitClaimed(player=account.address, amount=amount)]

    def fruit_to_snake_swap(self, account: PlayerAccount, journal: Journal,
                            amount: int) -> List[Event]:
        require_amount(amount)
        balance = self.ledgers.fruit.balance_of(account.address)
        if balance < amount:
            raise InsufficientBalance(f"FRUIT balance {balance} below swap amount {amount}")
        rate = self.config.fruit_snake_rate
        if amount % rate != 0:
            raise IncorrectAmount(f"swap amount {amount} is not a multiple of {rate}")

        snake_amount = amount // rate
        journal.burn_fruit(account.address, amount)
        journal.mint_snake(account.address, snake_amount)
        return [FruitSwapped(player=account.address, fruit_amount=amount,
                             snake_amount=snake_amount)]

    def snake_nft_claim(self, account: PlayerAccount, journal: Journal,
                        amount: Optional[int] = None) -> List[Event]:
        """Mints pending Snake NFTs, one FRUIT fee each. All or nothing."""
        pending = account.snake_nfts_to_claim
        if pending <= 0:
            raise NoSnakeNftsToClaim(f"{account.address} has no Snake NFTs to claim")
        if amount is None:
            amount = pending
        require_amount(amount)
        if amount > pending:
            raise IncorrectAmount(f"only {pending} Snake NFTs are pending, asked for {amount}")

        fee = self.config.fruit_mint_fee
        events: List[Event] = []
        for _ in range(amount):
            balance = self.ledgers.fruit.balance_of(account.address)
            if balance < fee:
                raise InsufficientBalance(f"FRUIT balance {balance} below mint fee {fee}")
            journal.burn_fruit(account.address, fee)
            token_id = journal.mint_snake_nft(account.address)
            account.snake_nfts_to_claim -= 1
            account.stats.snake_nfts_amount += 1
            events.append(SnakeNftMinted(player=account.address, token_id=token_id))
        return events
