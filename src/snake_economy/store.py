"""
store.py: Keyed storage for player accounts, rounds and global records.
"""

import copy
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Dict, List, Optional, Tuple

from .data_models import PlayerAccount, GameRound, GlobalGameState


class AccountStore(ABC):
    """address -> PlayerAccount"""

    @abstractmethod
    def get_account(self, address: str) -> Optional[PlayerAccount]:
        """Returns a detached copy, or None for an unknown address."""

    @abstractmethod
    def put_account(self, account: PlayerAccount): ...

    @abstractmethod
    def get_leaderboard(self) -> List[Tuple[str, int]]:
        """Top ten (address, best_score) pairs."""

    @contextmanager
    def transaction(self):
        yield


class RoundStore(ABC):
    """round_number -> GameRound, plus the GlobalGameState singleton."""

    @abstractmethod
    def get_round(self, round_number: int) -> Optional[GameRound]: ...

    @abstractmethod
    def put_round(self, game_round: GameRound): ...

    @abstractmethod
    def get_state(self) -> Optional[GlobalGameState]: ...

    @abstractmethod
    def put_state(self, state: GlobalGameState): ...

    @contextmanager
    def transaction(self):
        yield


class InMemoryAccountStore(AccountStore):
    def __init__(self):
        self._accounts: Dict[str, PlayerAccount] = {}
        self._lock = threading.Lock()

    def get_account(self, address: str) -> Optional[PlayerAccount]:
        with self._lock:
            account = self._accounts.get(address)
            return copy.deepcopy(account) if account else None

    def put_account(self, account: PlayerAccount):
        with self._lock:
            self._accounts[account.address] = copy.deepcopy(account)

    def get_leaderboard(self) -> List[Tuple[str, int]]:
        with self._lock:
            ranked = sorted(self._accounts.values(),
                            key=lambda a: a.stats.best_score, reverse=True)
            return [(a.address, a.stats.best_score) for a in ranked[:10]]


class InMemoryRoundStore(RoundStore):
    def __init__(self):
        self._rounds: Dict[int, GameRound] = {}
        self._state: Optional[GlobalGameState] = None
        self._lock = threading.Lock()

    def get_round(self, round_number: int) -> Optional[GameRound]:
        with self._lock:
            game_round = self._rounds.get(round_number)
            return copy.deepcopy(game_round) if game_round else None

    def put_round(self, game_round: GameRound):
        with self._lock:
            self._rounds[game_round.round_number] = copy.deepcopy(game_round)

    def get_state(self) -> Optional[GlobalGameState]:
        with self._lock:
            return copy.deepcopy(self._state) if self._state else None

    def put_state(self, state: GlobalGameState):
        with self._lock:
            self._state = copy.deepcopy(state)
