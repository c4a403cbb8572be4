"""
eligibility.py: Unlock and claim rules for the Super Pet NFT.
"""

from typing import List

from .config import EconomyConfig
from .data_models import (
    PlayerAccount, Event, SuperNftUnlocked, MaxSuperNftsClaimed, SuperPetNftMinted
)
from .errors import NoSuperNftToClaim, InsufficientPayment, InsufficientBalance
from .journal import Journal
from .ledger import GameLedgers


class EligibilityGate:
    def __init__(self, config: EconomyConfig, ledgers: GameLedgers):
        self.config = config
        self.ledgers = ledgers

    def check_super_nft_claim(self, account: PlayerAccount) -> List[Event]:
        """Sets the claim flag when the player holds enough Snake NFTs. Safe to repeat."""
        if account.stats.super_nfts_amount >= self.config.max_super_nfts:
            account.super_nft_claim_flag = False
            return [MaxSuperNftsClaimed(player=account.address)]
        held = self.ledgers.snake_nft.balance_of(account.address)
        if held >= self.config.snake_nfts_required:
            account.super_nft_claim_flag = True
            return [SuperNftUnlocked(player=account.address)]
        return []

    def approved_snake_nfts(self, owner: str) -> List[int]:
        """Token ids of `owner` the engine was approved to burn, lowest first."""
        nft = self.ledgers.snake_nft
        tokens = [nft.owner_token_at(owner, i) for i in range(nft.balance_of(owner))]
        return [t for t in tokens if nft.get_approved(t) == self.config.engine_address]

    def super_pet_nft_claim(self, account: PlayerAccount, journal: Journal,
                            value: int) -> List[Event]:
        if not account.super_nft_claim_flag:
            raise NoSuperNftToClaim(f"{account.address} has no Super Pet NFT to claim")
        fee = self.config.eth_mint_fee
        if value < fee:
            raise InsufficientPayment(f"payment {value} below mint fee {fee}")
        required = self.config.snake_nfts_required
        # Balance may have changed since the flag was set
        held = self.ledgers.snake_nft.balance_of(account.address)
        if held < required:
            raise InsufficientBalance(f"{held} Snake NFTs held, {required} required")
        burned = self.approved_snake_nfts(account.address)[:required]
        if len(burned) < required:
            raise InsufficientBalance(
                f"{len(burned)} Snake NFTs approved for burning, {required} required")

        journal.pay(account.address, self.config.engine_address, value)
        for token_id in burned:
            journal.burn_snake_nft(account.address, token_id)
        token_id = journal.mint_super_pet_nft(account.address)

        account.super_nft_claim_flag = False
        account.stats.super_nfts_amount += 1
        return [SuperPetNftMinted(player=account.address, token_id=token_id,
                                  burned_token_ids=burned)]
