"""
constants.py: Centralized defaults for the game economy and network settings.
"""

# -------- Network & Server Config --------
GAME_PORT = 50007
BUFFER_SIZE = 65536
CLIENT_TIMEOUT = 2.0            # seconds to wait for a server reply
DB_FILE = "snake_economy.db"

# Round rollover performed by the server itself (0 disables it)
ROUND_DURATION = 0.0            # seconds
EVENT_HISTORY = 1000            # committed events kept on the engine

# -------- Accounts --------
ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"
ENGINE_ADDRESS = "snake-game"   # custodial account holding fees and payments
DEVELOPER_ADDRESS = "developer"

# -------- Native Currency --------
ETHER = 10**18

# -------- Token Economy --------
SNAKE_AIRDROP_AMOUNT = 10       # one-time free SNAKE per player
GAME_CREDIT_BASE_PRICE = 5      # SNAKE per game credit before discount
SNAKE_ETH_RATE = ETHER // 100   # native units per SNAKE (0.01 ETH)
FRUIT_SNAKE_RATE = 20           # FRUIT per SNAKE in a swap

# -------- NFT Economy --------
SCORE_TO_CLAIM_SNAKE_NFT = 50   # game score unlocking one Snake NFT
FRUIT_MINT_FEE = 100            # FRUIT burned per Snake NFT
ETH_MINT_FEE = ETHER // 10      # native units per Super Pet NFT (0.1 ETH)
SNAKE_NFTS_REQUIRED = 10        # Snake NFTs burned per Super Pet NFT
MAX_SNAKE_NFTS = 40             # per player
MAX_SUPER_NFTS = 3              # per player

# -------- Prize Split (tenths of the engine balance) --------
ROUND_BEST_SHARE = 7
BEST_EVER_SHARE = 2
DEVELOPER_SHARE = 1
SHARE_DENOMINATOR = 10
