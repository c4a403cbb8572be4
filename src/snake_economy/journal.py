"""
journal.py: Compensating actions for ledger calls made inside one operation.
"""

import logging
from typing import Callable, List, Tuple

from .ledger import GameLedgers

logger = logging.getLogger(__name__)


class Journal:
    """
    Wraps the game ledgers for a single unit of work.
    Every successful mutation records its inverse; rollback() replays them in
    reverse so a failed operation leaves every ledger as it found it.
    """

    def __init__(self, ledgers: GameLedgers):
        self.ledgers = ledgers
        self._undo: List[Tuple[str, Callable, tuple]] = []

    def _record(self, label: str, fn: Callable, *args):
        self._undo.append((label, fn, args))

    # -------- Fungible tokens --------

    def mint_snake(self, account: str, amount: int):
        self.ledgers.snake.mint(account, amount)
        self._record("mint SNAKE", self.ledgers.snake.burn, account, amount)

    def burn_snake(self, account: str, amount: int):
        self.ledgers.snake.burn(account, amount)
        self._record("burn SNAKE", self.ledgers.snake.mint, account, amount)

    def collect_snake(self, spender: str, account: str, custody: str, amount: int):
        """Moves SNAKE into custody using the spender's allowance and burns it there."""
        allowance = self.ledgers.snake.allowance(account, spender)
        self.ledgers.snake.transfer_from(spender, account, custody, amount)
        self._record("restore SNAKE allowance", self.ledgers.snake.approve,
                     account, spender, allowance)
        self._record("collect SNAKE", self.ledgers.snake.transfer_from,
                     custody, custody, account, amount)
        self.burn_snake(custody, amount)

    def mint_fruit(self, account: str, amount: int):
        self.ledgers.fruit.mint(account, amount)
        self._record("mint FRUIT", self.ledgers.fruit.burn, account, amount)

    def burn_fruit(self, account: str, amount: int):
        self.ledgers.fruit.burn(account, amount)
        self._record("burn FRUIT", self.ledgers.fruit.mint, account, amount)

    # -------- Collectibles --------

    def mint_snake_nft(self, owner: str) -> int:
        token_id = self.ledgers.snake_nft.mint(owner)
        self._record("mint Snake NFT", self.ledgers.snake_nft.burn, token_id)
        return token_id

    def burn_snake_nft(self, owner: str, token_id: int):
        approved = self.ledgers.snake_nft.get_approved(token_id)
        self.ledgers.snake_nft.burn(token_id)
        if approved is not None:
            # undone after the restore below
            self._record("restore Snake NFT approval", self.ledgers.snake_nft.approve,
                         owner, approved, token_id)
        self._record("burn Snake NFT", self.ledgers.snake_nft.restore, owner, token_id)

    def mint_super_pet_nft(self, owner: str) -> int:
        token_id = self.ledgers.super_pet_nft.mint(owner)
        self._record("mint Super Pet NFT", self.ledgers.super_pet_nft.burn, token_id)
        return token_id

    # -------- Native currency --------

    def pay(self, sender: str, recipient: str, amount: int):
        self.ledgers.native.transfer(sender, recipient, amount)
        self._record("native transfer", self.ledgers.native.transfer,
                     recipient, sender, amount)

    def rollback(self) -> List[str]:
        """
        Undoes every recorded mutation, newest first.
        An undo that fails is logged and skipped so the rest still run; the
        labels of the failed ones are returned.
        """
        failed = []
        while self._undo:
            label, fn, args = self._undo.pop()
            logger.debug("Rolling back %s %s", label, args)
            try:
                fn(*args)
            except Exception:
                logger.exception("Could not roll back %s %s", label, args)
                failed.append(label)
        return failed

    def commit(self):
        self._undo.clear()
