"""
rounds.py: Round aggregates, the paid-play fairness rule and round rollover.
"""

import logging
from typing import List, Tuple

from .config import EconomyConfig
from .data_models import GameRound, GlobalGameState, Event, RoundFinished, RoundPayout
from .errors import Unauthorized
from .journal import Journal
from .prizes import PrizeDistributor

logger = logging.getLogger(__name__)


class RoundTracker:
    def __init__(self, config: EconomyConfig, prizes: PrizeDistributor):
        self.config = config
        self.prizes = prizes

    def record_game(self, game_round: GameRound, player: str, score: int, paid: bool):
        """Counts every game; only games paid with purchased credits can set the record."""
        game_round.games_played += 1
        if paid and score > game_round.highest_score:
            game_round.best_player = player
            game_round.highest_score = score

    def finish_round(self, caller: str, state: GlobalGameState, game_round: GameRound,
                     journal: Journal) -> Tuple[GameRound, RoundPayout, List[Event]]:
        """Archives the current round, pays prizes and returns the next, empty round."""
        if caller != self.config.operator_address:
            raise Unauthorized(f"{caller} may not finish rounds")

        state.games_played_total += game_round.games_played
        if game_round.highest_score > state.highest_score_ever:
            state.highest_score_ever = game_round.highest_score
            state.best_player_ever = game_round.best_player

        payout, events = self.prizes.distribute(
            journal, game_round.best_player, state.best_player_ever)

        game_round.finished = True
        events.append(RoundFinished(
            round_number=game_round.round_number,
            games_played=game_round.games_played,
            best_player=game_round.best_player,
            highest_score=game_round.highest_score,
            prize_pool=payout.pool,
        ))
        logger.info("Round %d finished: %d games, best %s (%d), pool %d, retained %d",
                    game_round.round_number, game_round.games_played,
                    game_round.best_player, game_round.highest_score,
                    payout.pool, payout.retained)

        state.game_round = game_round.round_number + 1
        return GameRound(round_number=state.game_round), payout, events
