"""
credits.py: SNAKE issuance and conversion of SNAKE into game credits.
"""

import logging
from typing import List

from .config import EconomyConfig
from .data_models import (
    PlayerAccount, Event, SnakeAirdropped, SnakeBought, CreditsBought, GameStarted
)
from .errors import (
    AirdropAlreadyClaimed, InsufficientBalance, InsufficientPayment, NoGameCredits,
    GameAlreadyStarted, require_amount
)
from .journal import Journal
from .ledger import GameLedgers

logger = logging.getLogger(__name__)


class CreditLedger:
    """
    Sells SNAKE for native currency and game credits for SNAKE.

    Credits remember where their SNAKE came from. Airdropped SNAKE is spent
    first, and any credit paid (even partly) with it is an airdropped credit.
    Games played with airdropped credits never set round records.
    """

    def __init__(self, config: EconomyConfig, ledgers: GameLedgers):
        self.config = config
        self.ledgers = ledgers

    def game_credit_price(self, address: str) -> int:
        """Base price minus one SNAKE per Super Pet NFT held, never below 1."""
        discount = self.ledgers.super_pet_nft.balance_of(address)
        return max(1, self.config.game_credit_base_price - discount)

    def snake_airdrop(self, account: PlayerAccount, journal: Journal) -> List[Event]:
        if account.snake_airdrop_flag:
            raise AirdropAlreadyClaimed(f"{account.address} already received the airdrop")
        amount = self.config.snake_airdrop_amount
        journal.mint_snake(account.address, amount)
        account.snake_airdrop_flag = True
        account.airdropped_snake += amount
        return [SnakeAirdropped(player=account.address, amount=amount)]

    def buy_snake(self, account: PlayerAccount, journal: Journal,
                  amount: int, value: int) -> List[Event]:
        """Mints `amount` SNAKE for an attached payment of `value` native units."""
        require_amount(amount)
        required = amount * self.config.snake_eth_rate
        if value < required:
            raise InsufficientPayment(f"payment {value} below required {required}")
        journal.pay(account.address, self.config.engine_address, value)
        journal.mint_snake(account.address, amount)
        if value > required:
            logger.info("%s overpaid %d for SNAKE; kept in the prize pool",
                        account.address, value - required)
        return [SnakeBought(player=account.address, amount=amount, payment=value)]

    def buy_credits(self, account: PlayerAccount, journal: Journal, amount: int) -> List[Event]:
        require_amount(amount)
        price = self.game_credit_price(account.address)
        cost = amount * price
        balance = self.ledgers.snake.balance_of(account.address)
        if balance < cost:
            raise InsufficientBalance(f"SNAKE balance {balance} below cost {cost}")
        allowance = self.ledgers.snake.allowance(account.address, self.config.engine_address)
        if allowance < cost:
            raise InsufficientBalance(f"SNAKE allowance {allowance} below cost {cost}")

        # SNAKE moved out through other channels can no longer count as airdropped
        airdrop_available = min(account.airdropped_snake, balance)
        from_airdrop = min(airdrop_available, cost)
        airdropped = -(-from_airdrop // price)

        journal.collect_snake(self.config.engine_address, account.address,
                              self.config.engine_address, cost)

        account.game_credits += amount
        account.airdropped_credits += airdropped
        account.purchased_credits += amount - airdropped
        account.airdropped_snake = airdrop_available - from_airdrop
        return [CreditsBought(player=account.address, amount=amount, price=price)]

    def game_start(self, account: PlayerAccount) -> List[Event]:
        if account.game_started_flag:
            raise GameAlreadyStarted(f"{account.address} already has a game in progress")
        if account.game_credits < 1:
            raise NoGameCredits(f"{account.address} has no game credits")

        account.game_credits -= 1
        if account.airdropped_credits > 0:
            account.airdropped_credits -= 1
            account.current_game_paid = False
        else:
            account.purchased_credits -= 1
            account.current_game_paid = True
        account.game_started_flag = True
        return [GameStarted(player=account.address, paid=account.current_game_paid)]
