"""
config.py: Economic configuration of the engine.
Defaults come from constants.py; a JSON file or dict may override any field.
"""

import json
from dataclasses import dataclass, asdict, fields
from typing import Any, Dict

from .constants import (
    SNAKE_AIRDROP_AMOUNT, GAME_CREDIT_BASE_PRICE, SNAKE_ETH_RATE, FRUIT_SNAKE_RATE,
    SCORE_TO_CLAIM_SNAKE_NFT, FRUIT_MINT_FEE, ETH_MINT_FEE, SNAKE_NFTS_REQUIRED,
    MAX_SNAKE_NFTS, MAX_SUPER_NFTS, ROUND_BEST_SHARE, BEST_EVER_SHARE,
    DEVELOPER_SHARE, SHARE_DENOMINATOR, DEVELOPER_ADDRESS, ENGINE_ADDRESS
)


@dataclass(frozen=True)
class EconomyConfig:
    """Constants of one deployed economy. Immutable once the engine is built."""
    snake_airdrop_amount: int = SNAKE_AIRDROP_AMOUNT
    game_credit_base_price: int = GAME_CREDIT_BASE_PRICE
    snake_eth_rate: int = SNAKE_ETH_RATE
    fruit_snake_rate: int = FRUIT_SNAKE_RATE
    score_to_claim_snake_nft: int = SCORE_TO_CLAIM_SNAKE_NFT
    fruit_mint_fee: int = FRUIT_MINT_FEE
    eth_mint_fee: int = ETH_MINT_FEE
    snake_nfts_required: int = SNAKE_NFTS_REQUIRED
    max_snake_nfts: int = MAX_SNAKE_NFTS
    max_super_nfts: int = MAX_SUPER_NFTS
    round_best_share: int = ROUND_BEST_SHARE
    best_ever_share: int = BEST_EVER_SHARE
    developer_share: int = DEVELOPER_SHARE

    # Accounts
    engine_address: str = ENGINE_ADDRESS
    developer_address: str = DEVELOPER_ADDRESS
    operator_address: str = DEVELOPER_ADDRESS

    def __post_init__(self):
        for name in ("game_credit_base_price", "snake_eth_rate", "fruit_snake_rate",
                     "snake_nfts_required"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive")
        for f in fields(self):
            value = getattr(self, f.name)
            if f.type is int and value < 0:
                raise ValueError(f"{f.name} must not be negative")
        total = self.round_best_share + self.best_ever_share + self.developer_share
        if total > SHARE_DENOMINATOR:
            raise ValueError(f"prize shares add up to {total}/{SHARE_DENOMINATOR}")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EconomyConfig":
        """Builds a config from a mapping. Unknown keys are rejected."""
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown config keys: {', '.join(sorted(unknown))}")
        return cls(**data)

    @classmethod
    def load(cls, path: str) -> "EconomyConfig":
        """Reads a JSON config file."""
        with open(path, "r", encoding="utf-8") as fh:
            return cls.from_dict(json.load(fh))

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
