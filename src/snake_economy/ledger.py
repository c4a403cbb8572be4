"""
ledger.py: External ledger contracts consumed by the engine, plus in-memory ledgers.

The engine never stores balances itself. SNAKE and FRUIT are fungible
TokenLedgers, Snake NFT and Super Pet NFT are NftLedgers, and the native
currency lives in a NativeLedger. Each ledger is atomic per call.
"""

import threading
from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Set, Tuple

from .errors import InsufficientBalance, TransferRejected


# -------- Interfaces --------

class TokenLedger(ABC):
    """Fungible token with a single minting authority."""
    name: str
    symbol: str
    authority: str

    @abstractmethod
    def mint(self, account: str, amount: int): ...

    @abstractmethod
    def burn(self, account: str, amount: int): ...

    @abstractmethod
    def balance_of(self, account: str) -> int: ...

    @abstractmethod
    def approve(self, owner: str, spender: str, amount: int): ...

    @abstractmethod
    def allowance(self, owner: str, spender: str) -> int: ...

    @abstractmethod
    def transfer_from(self, spender: str, owner: str, recipient: str, amount: int) -> bool: ...


class NftLedger(ABC):
    """Counted collectible with enumerable per-owner token ids."""
    name: str
    symbol: str
    authority: str

    @abstractmethod
    def mint(self, owner: str) -> int: ...

    @abstractmethod
    def burn(self, token_id: int): ...

    @abstractmethod
    def restore(self, owner: str, token_id: int):
        """Re-creates a burned token id for its previous owner."""

    @abstractmethod
    def balance_of(self, owner: str) -> int: ...

    @abstractmethod
    def owner_of(self, token_id: int) -> str: ...

    @abstractmethod
    def owner_token_at(self, owner: str, index: int) -> int: ...

    @abstractmethod
    def approve(self, owner: str, spender: str, token_id: int): ...

    @abstractmethod
    def get_approved(self, token_id: int) -> Optional[str]: ...


class NativeLedger(ABC):
    """Native currency balances (ETH in the original deployment)."""

    @abstractmethod
    def balance_of(self, account: str) -> int: ...

    @abstractmethod
    def credit(self, account: str, amount: int): ...

    @abstractmethod
    def transfer(self, sender: str, recipient: str, amount: int): ...


# -------- In-memory Ledgers --------

class InMemoryTokenLedger(TokenLedger):
    def __init__(self, name: str, symbol: str, authority: str):
        self.name = name
        self.symbol = symbol
        self.authority = authority
        self.total_supply = 0
        self._balances: Dict[str, int] = {}
        self._allowances: Dict[Tuple[str, str], int] = {}
        self._lock = threading.Lock()

    def mint(self, account: str, amount: int):
        with self._lock:
            self._balances[account] = self._balances.get(account, 0) + amount
            self.total_supply += amount

    def burn(self, account: str, amount: int):
        with self._lock:
            balance = self._balances.get(account, 0)
            if balance < amount:
                raise InsufficientBalance(
                    f"{self.symbol}: balance {balance} below burn amount {amount}")
            self._balances[account] = balance - amount
            self.total_supply -= amount

    def balance_of(self, account: str) -> int:
        return self._balances.get(account, 0)

    def approve(self, owner: str, spender: str, amount: int):
        with self._lock:
            self._allowances[(owner, spender)] = amount

    def allowance(self, owner: str, spender: str) -> int:
        return self._allowances.get((owner, spender), 0)

    def transfer_from(self, spender: str, owner: str, recipient: str, amount: int) -> bool:
        with self._lock:
            balance = self._balances.get(owner, 0)
            if balance < amount:
                raise InsufficientBalance(
                    f"{self.symbol}: balance {balance} below transfer amount {amount}")
            if spender != owner:
                allowed = self._allowances.get((owner, spender), 0)
                if allowed < amount:
                    raise InsufficientBalance(
                        f"{self.symbol}: allowance {allowed} below transfer amount {amount}")
                self._allowances[(owner, spender)] = allowed - amount
            self._balances[owner] = balance - amount
            self._balances[recipient] = self._balances.get(recipient, 0) + amount
        return True


class InMemoryNftLedger(NftLedger):
    def __init__(self, name: str, symbol: str, authority: str):
        self.name = name
        self.symbol = symbol
        self.authority = authority
        self._owners: Dict[int, str] = {}
        self._tokens: Dict[str, List[int]] = {}
        self._approvals: Dict[int, str] = {}
        self._next_id = 0
        self._lock = threading.Lock()

    def mint(self, owner: str) -> int:
        with self._lock:
            token_id = self._next_id
            self._next_id += 1
            self._owners[token_id] = owner
            self._tokens.setdefault(owner, []).append(token_id)
            return token_id

    def burn(self, token_id: int):
        with self._lock:
            owner = self._owners.pop(token_id, None)
            if owner is None:
                raise InsufficientBalance(f"{self.symbol}: token {token_id} does not exist")
            self._tokens[owner].remove(token_id)
            self._approvals.pop(token_id, None)

    def restore(self, owner: str, token_id: int):
        with self._lock:
            self._owners[token_id] = owner
            self._tokens.setdefault(owner, []).append(token_id)
            self._tokens[owner].sort()

    def balance_of(self, owner: str) -> int:
        return len(self._tokens.get(owner, []))

    def owner_of(self, token_id: int) -> str:
        owner = self._owners.get(token_id)
        if owner is None:
            raise InsufficientBalance(f"{self.symbol}: token {token_id} does not exist")
        return owner

    def owner_token_at(self, owner: str, index: int) -> int:
        tokens = self._tokens.get(owner, [])
        if not 0 <= index < len(tokens):
            raise InsufficientBalance(f"{self.symbol}: {owner} has no token at index {index}")
        return tokens[index]

    def approve(self, owner: str, spender: str, token_id: int):
        with self._lock:
            if self._owners.get(token_id) != owner:
                raise InsufficientBalance(f"{self.symbol}: {owner} does not own token {token_id}")
            self._approvals[token_id] = spender

    def get_approved(self, token_id: int) -> Optional[str]:
        return self._approvals.get(token_id)


class InMemoryNativeLedger(NativeLedger):
    def __init__(self):
        self._balances: Dict[str, int] = {}
        self._non_payable: Set[str] = set()
        self._lock = threading.Lock()

    def balance_of(self, account: str) -> int:
        return self._balances.get(account, 0)

    def credit(self, account: str, amount: int):
        """Faucet used by tests and the standalone server."""
        with self._lock:
            self._balances[account] = self._balances.get(account, 0) + amount

    def mark_non_payable(self, account: str):
        """Makes every transfer to `account` fail, like a contract without receive()."""
        self._non_payable.add(account)

    def transfer(self, sender: str, recipient: str, amount: int):
        with self._lock:
            if recipient in self._non_payable:
                raise TransferRejected(f"{recipient} does not accept payments")
            balance = self._balances.get(sender, 0)
            if balance < amount:
                raise InsufficientBalance(
                    f"native balance {balance} of {sender} below {amount}")
            self._balances[sender] = balance - amount
            self._balances[recipient] = self._balances.get(recipient, 0) + amount


class GameLedgers:
    """The four game ledgers plus the native currency, owned by one engine."""

    def __init__(self, snake: TokenLedger, fruit: TokenLedger, snake_nft: NftLedger,
                 super_pet_nft: NftLedger, native: NativeLedger):
        self.snake = snake
        self.fruit = fruit
        self.snake_nft = snake_nft
        self.super_pet_nft = super_pet_nft
        self.native = native

    @classmethod
    def in_memory(cls, authority: str) -> "GameLedgers":
        return cls(
            snake=InMemoryTokenLedger("Snake Token", "SNAKE", authority),
            fruit=InMemoryTokenLedger("Fruit Token", "FRUIT", authority),
            snake_nft=InMemoryNftLedger("Snake NFT", "SNFT", authority),
            super_pet_nft=InMemoryNftLedger("Super Pet NFT", "SPET", authority),
            native=InMemoryNativeLedger(),
        )
