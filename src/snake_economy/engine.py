"""
engine.py: The game economy engine.

Every mutating operation is a unit of work: state is loaded as copies, ledger
calls go through a Journal, and the copies are stored only once everything
succeeded. A failure rolls the ledgers back, stores nothing and publishes no
events. Player operations hold that player's lock; round and prize operations
hold the global lock.
"""

import logging
from collections import deque
from contextlib import contextmanager, ExitStack
from typing import Callable, Deque, List, Optional, Tuple

from .config import EconomyConfig
from .constants import EVENT_HISTORY
from .credits import CreditLedger
from .data_models import (
    PlayerAccount, PlayerStats, GameRound, GlobalGameState, Event, GameOver,
    Deposit, EthWithdrawn, RoundPayout
)
from .eligibility import EligibilityGate
from .errors import EthWithdrawalFailed, TransferRejected, Unauthorized, require_amount
from .journal import Journal
from .ledger import GameLedgers
from .locking import KeyedLocks
from .prizes import PrizeDistributor
from .rewards import RewardCalculator
from .rounds import RoundTracker
from .store import AccountStore, RoundStore, InMemoryAccountStore, InMemoryRoundStore

logger = logging.getLogger(__name__)


class _Work:
    """Mutable copies and the journal of one operation."""

    def __init__(self, ledgers: GameLedgers):
        self.journal = Journal(ledgers)
        self.events: List[Event] = []
        self.account: Optional[PlayerAccount] = None
        self.state: Optional[GlobalGameState] = None
        self.game_round: Optional[GameRound] = None
        self.new_round: Optional[GameRound] = None


class GameEconomyEngine:
    def __init__(self, config: Optional[EconomyConfig] = None,
                 ledgers: Optional[GameLedgers] = None,
                 accounts: Optional[AccountStore] = None,
                 rounds: Optional[RoundStore] = None,
                 event_history: int = EVENT_HISTORY):
        self.config = config or EconomyConfig()
        self.ledgers = ledgers or GameLedgers.in_memory(self.config.engine_address)
        self.accounts = accounts or InMemoryAccountStore()
        self.rounds = rounds or InMemoryRoundStore()
        self.locks = KeyedLocks()

        self.credit_ledger = CreditLedger(self.config, self.ledgers)
        self.rewards = RewardCalculator(self.config, self.ledgers)
        self.eligibility = EligibilityGate(self.config, self.ledgers)
        self.prizes = PrizeDistributor(self.config, self.ledgers)
        self.round_tracker = RoundTracker(self.config, self.prizes)

        # Most recent committed events; listeners see every one
        self.events: Deque[Event] = deque(maxlen=event_history)
        self.last_payout: Optional[RoundPayout] = None
        self._listeners: List[Callable[[Event], None]] = []
        self._init_state()

    def _init_state(self):
        """Creates round 1 on a fresh store."""
        with self.locks.global_only(), self._transaction():
            if self.rounds.get_state() is None:
                state = GlobalGameState()
                self.rounds.put_state(state)
                self.rounds.put_round(GameRound(round_number=state.game_round))

    # -------- Units of work --------

    @contextmanager
    def _transaction(self):
        with ExitStack() as stack:
            stack.enter_context(self.accounts.transaction())
            if self.rounds is not self.accounts:
                stack.enter_context(self.rounds.transaction())
            yield

    def _load_account(self, address: str) -> PlayerAccount:
        return self.accounts.get_account(address) or PlayerAccount(address=address)

    def _load_round_state(self, work: _Work):
        work.state = self.rounds.get_state()
        work.game_round = (self.rounds.get_round(work.state.game_round)
                           or GameRound(round_number=work.state.game_round))

    @contextmanager
    def _unit_of_work(self, player: Optional[str] = None, round_state: bool = False,
                      treasury: bool = False):
        """
        `treasury` marks player operations that pay into the engine balance;
        they also hold the global lock so no round finish or withdrawal can
        spend that payment before it commits or is undone.
        """
        if player is not None and (round_state or treasury):
            lock = self.locks.player_and_global(player)
        elif player is not None:
            lock = self.locks.player(player)
        else:
            lock = self.locks.global_only()

        with lock:
            work = _Work(self.ledgers)
            if player is not None:
                work.account = self._load_account(player)
            if round_state:
                self._load_round_state(work)
            try:
                yield work
                with self._transaction():
                    if work.account is not None:
                        self.accounts.put_account(work.account)
                    if round_state:
                        self.rounds.put_round(work.game_round)
                        if work.new_round is not None:
                            self.rounds.put_round(work.new_round)
                        self.rounds.put_state(work.state)
            except BaseException:
                work.journal.rollback()
                raise
            work.journal.commit()
        self._publish(work.events)

    def _publish(self, events: List[Event]):
        self.events.extend(events)
        for event in events:
            for listener in self._listeners:
                listener(event)

    def subscribe(self, listener: Callable[[Event], None]):
        """Registers a callback invoked for every committed event."""
        self._listeners.append(listener)

    # -------- CreditLedger --------

    def snake_airdrop(self, player: str) -> List[Event]:
        with self._unit_of_work(player) as work:
            work.events += self.credit_ledger.snake_airdrop(work.account, work.journal)
        logger.info("Airdropped %d SNAKE to %s", self.config.snake_airdrop_amount, player)
        return work.events

    def buy_snake(self, player: str, amount: int, value: int) -> List[Event]:
        with self._unit_of_work(player, treasury=True) as work:
            work.events += self.credit_ledger.buy_snake(work.account, work.journal, amount, value)
        logger.info("%s bought %d SNAKE for %d", player, amount, value)
        return work.events

    def buy_credits(self, player: str, amount: int) -> List[Event]:
        with self._unit_of_work(player) as work:
            work.events += self.credit_ledger.buy_credits(work.account, work.journal, amount)
        logger.info("%s bought %d game credits", player, amount)
        return work.events

    def game_start(self, player: str) -> List[Event]:
        with self._unit_of_work(player) as work:
            work.events += self.credit_ledger.game_start(work.account)
        return work.events

    # -------- RewardCalculator / RoundTracker --------

    def game_over(self, player: str, score: int) -> List[Event]:
        with self._unit_of_work(player, round_state=True) as work:
            paid = work.account.current_game_paid
            events = self.rewards.settle_game(work.account, score)
            work.account.current_game_paid = False
            self.round_tracker.record_game(work.game_round, player, score, paid)
            work.events += events
            work.events.append(GameOver(player=player, score=score,
                                        round_number=work.game_round.round_number))
        logger.info("Game over for %s: score %d", player, score)
        return work.events

    def fruit_claim(self, player: str) -> List[Event]:
        with self._unit_of_work(player) as work:
            work.events += self.rewards.fruit_claim(work.account, work.journal)
        return work.events

    def fruit_to_snake_swap(self, player: str, amount: int) -> List[Event]:
        with self._unit_of_work(player) as work:
            work.events += self.rewards.fruit_to_snake_swap(work.account, work.journal, amount)
        return work.events

    def snake_nft_claim(self, player: str, amount: Optional[int] = None) -> List[Event]:
        with self._unit_of_work(player) as work:
            work.events += self.rewards.snake_nft_claim(work.account, work.journal, amount)
        logger.info("%s minted %d Snake NFTs", player, len(work.events))
        return work.events

    # -------- EligibilityGate --------

    def check_super_nft_claim(self, player: str) -> List[Event]:
        with self._unit_of_work(player) as work:
            work.events += self.eligibility.check_super_nft_claim(work.account)
        return work.events

    def super_pet_nft_claim(self, player: str, value: int) -> List[Event]:
        with self._unit_of_work(player, treasury=True) as work:
            work.events += self.eligibility.super_pet_nft_claim(work.account, work.journal, value)
        logger.info("%s minted a Super Pet NFT", player)
        return work.events

    # -------- Rounds & Treasury --------

    def finish_round(self, caller: str) -> List[Event]:
        with self._unit_of_work(round_state=True) as work:
            new_round, payout, events = self.round_tracker.finish_round(
                caller, work.state, work.game_round, work.journal)
            work.new_round = new_round
            work.events += events
        self.last_payout = payout
        return work.events

    def deposit(self, sender: str, value: int) -> List[Event]:
        """Native currency sent straight to the engine; it joins the prize pool."""
        require_amount(value, "value")
        with self._unit_of_work() as work:
            work.journal.pay(sender, self.config.engine_address, value)
            work.events.append(Deposit(sender=sender, amount=value))
        return work.events

    def withdraw_eth(self, caller: str, amount: int, recipient: Optional[str] = None) -> List[Event]:
        if caller != self.config.operator_address:
            raise Unauthorized(f"{caller} may not withdraw")
        require_amount(amount)
        recipient = recipient or caller
        with self._unit_of_work() as work:
            balance = self.get_balance()
            if balance < amount:
                raise EthWithdrawalFailed(f"balance {balance} below withdrawal {amount}")
            try:
                work.journal.pay(self.config.engine_address, recipient, amount)
            except TransferRejected as e:
                raise EthWithdrawalFailed(str(e)) from e
            work.events.append(EthWithdrawn(recipient=recipient, amount=amount))
        logger.info("Withdrew %d to %s", amount, recipient)
        return work.events

    # -------- Read-only accessors --------

    def get_player_data(self, player: str) -> PlayerAccount:
        return self._load_account(player)

    def get_player_stats(self, player: str) -> PlayerStats:
        return self._load_account(player).stats

    def get_game_round(self) -> int:
        return self.rounds.get_state().game_round

    def get_game_round_data(self, round_number: int) -> GameRound:
        """Unknown rounds read as empty rounds."""
        return self.rounds.get_round(round_number) or GameRound(round_number=round_number)

    def get_games_played_total(self) -> int:
        return self.rounds.get_state().games_played_total

    def get_highest_score_ever(self) -> int:
        return self.rounds.get_state().highest_score_ever

    def get_best_player_ever(self) -> str:
        return self.rounds.get_state().best_player_ever

    def get_balance(self) -> int:
        return self.ledgers.native.balance_of(self.config.engine_address)

    def get_game_credit_price(self, player: str) -> int:
        return self.credit_ledger.game_credit_price(player)

    def get_config(self) -> EconomyConfig:
        return self.config

    def get_leaderboard(self) -> List[Tuple[str, int]]:
        return self.accounts.get_leaderboard()
