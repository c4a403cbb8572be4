"""
prizes.py: Splits the engine's native-currency balance at the end of a round.
"""

import logging
from typing import List, Tuple

from .config import EconomyConfig
from .constants import SHARE_DENOMINATOR, ZERO_ADDRESS
from .data_models import Event, PrizePaid, PrizeTransferFailed, RoundPayout
from .errors import TransferRejected, InsufficientBalance
from .journal import Journal
from .ledger import GameLedgers

logger = logging.getLogger(__name__)

ROUND_BEST = "round_best_player"
BEST_EVER = "best_player_ever"
DEVELOPER = "developer"


class PrizeDistributor:
    """
    Pays round best, all-time best and developer their tenths of the balance.

    Whatever is not paid out stays in the balance for the next round: the
    integer-division remainder, shares of unset beneficiaries and shares whose
    transfer was rejected. A rejected transfer never affects the others.
    """

    def __init__(self, config: EconomyConfig, ledgers: GameLedgers):
        self.config = config
        self.ledgers = ledgers

    def shares(self, pool: int) -> List[Tuple[str, int]]:
        c = self.config
        return [
            (ROUND_BEST, pool * c.round_best_share // SHARE_DENOMINATOR),
            (BEST_EVER, pool * c.best_ever_share // SHARE_DENOMINATOR),
            (DEVELOPER, pool * c.developer_share // SHARE_DENOMINATOR),
        ]

    def distribute(self, journal: Journal, round_best: str,
                   best_ever: str) -> Tuple[RoundPayout, List[Event]]:
        engine = self.config.engine_address
        pool = self.ledgers.native.balance_of(engine)
        recipients = {
            ROUND_BEST: round_best,
            BEST_EVER: best_ever,
            DEVELOPER: self.config.developer_address,
        }
        payout = RoundPayout(pool=pool)
        events: List[Event] = []

        for role, amount in self.shares(pool):
            recipient = recipients[role]
            if amount == 0:
                continue
            if not recipient or recipient == ZERO_ADDRESS:
                payout.skipped[role] = amount
                continue
            try:
                journal.pay(engine, recipient, amount)
            except (TransferRejected, InsufficientBalance) as e:
                logger.warning("Prize transfer of %d to %s (%s) failed: %s",
                               amount, recipient, role, e)
                payout.failed[role] = amount
                events.append(PrizeTransferFailed(recipient=recipient, amount=amount,
                                                  role=role, reason=str(e)))
                continue
            payout.paid[role] = amount
            events.append(PrizePaid(recipient=recipient, amount=amount, role=role))

        distributed = sum(amount for _, amount in self.shares(pool))
        payout.remainder = pool - distributed
        return payout, events
