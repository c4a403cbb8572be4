"""
server_db.py: SQLite persistence for player accounts, rounds and global records.
Implements both AccountStore and RoundStore on one connection.
"""

import sqlite3
import threading
from contextlib import contextmanager
from typing import Optional, List, Tuple

from .constants import DB_FILE
from .data_models import PlayerAccount, PlayerStats, GameRound, GlobalGameState
from .store import AccountStore, RoundStore

PLAYER_COLUMNS = (
    "address", "game_credits", "game_started_flag", "snake_airdrop_flag",
    "fruit_to_claim", "snake_nfts_to_claim", "super_nft_claim_flag",
    "purchased_credits", "airdropped_credits", "airdropped_snake", "current_game_paid",
    "games_played", "last_score", "best_score", "fruits_collected",
    "snake_nfts_amount", "super_nfts_amount",
)


class Database(AccountStore, RoundStore):
    """Handles all interaction with the SQLite database."""
    def __init__(self, db_file: str = DB_FILE):
        # check_same_thread=False is essential for multi-threading access
        self.conn = sqlite3.connect(db_file, check_same_thread=False)
        self.cur = self.conn.cursor()
        self._lock = threading.RLock()
        self._depth = 0
        self.setup()

    def setup(self):
        """Creates tables if they don't exist."""
        self.cur.execute("""
            CREATE TABLE IF NOT EXISTS Players (
                address TEXT PRIMARY KEY,
                game_credits INTEGER DEFAULT 0,
                game_started_flag INTEGER DEFAULT 0,
                snake_airdrop_flag INTEGER DEFAULT 0,
                fruit_to_claim INTEGER DEFAULT 0,
                snake_nfts_to_claim INTEGER DEFAULT 0,
                super_nft_claim_flag INTEGER DEFAULT 0,
                purchased_credits INTEGER DEFAULT 0,
                airdropped_credits INTEGER DEFAULT 0,
                airdropped_snake INTEGER DEFAULT 0,
                current_game_paid INTEGER DEFAULT 0,
                games_played INTEGER DEFAULT 0,
                last_score INTEGER DEFAULT 0,
                best_score INTEGER DEFAULT 0,
                fruits_collected INTEGER DEFAULT 0,
                snake_nfts_amount INTEGER DEFAULT 0,
                super_nfts_amount INTEGER DEFAULT 0
            )
        """)
        self.cur.execute("""
            CREATE TABLE IF NOT EXISTS Rounds (
                round_number INTEGER PRIMARY KEY,
                games_played INTEGER DEFAULT 0,
                best_player TEXT,
                highest_score INTEGER DEFAULT 0,
                finished INTEGER DEFAULT 0
            )
        """)
        self.cur.execute("""
            CREATE TABLE IF NOT EXISTS GlobalState (
                id INTEGER PRIMARY KEY CHECK (id = 1),
                game_round INTEGER,
                games_played_total INTEGER,
                highest_score_ever INTEGER,
                best_player_ever TEXT
            )
        """)
        self.conn.commit()

    @contextmanager
    def transaction(self):
        """Groups writes into one commit. Nested calls join the outer transaction."""
        with self._lock:
            self._depth += 1
            try:
                yield
            except BaseException:
                self._depth -= 1
                if self._depth == 0:
                    self.conn.rollback()
                raise
            self._depth -= 1
            if self._depth == 0:
                self.conn.commit()

    def _write(self, sql: str, params: tuple):
        with self._lock:
            self.cur.execute(sql, params)
            if self._depth == 0:
                self.conn.commit()

    # -------- Accounts --------

    def get_account(self, address: str) -> Optional[PlayerAccount]:
        """Fetches one player's account."""
        with self._lock:
            self.cur.execute(
                f"SELECT {', '.join(PLAYER_COLUMNS)} FROM Players WHERE address=?", (address,))
            row = self.cur.fetchone()
        if row is None:
            return None
        data = dict(zip(PLAYER_COLUMNS, row))
        stats = PlayerStats(
            games_played=data["games_played"],
            last_score=data["last_score"],
            best_score=data["best_score"],
            fruits_collected=data["fruits_collected"],
            snake_nfts_amount=data["snake_nfts_amount"],
            super_nfts_amount=data["super_nfts_amount"],
        )
        return PlayerAccount(
            address=data["address"],
            game_credits=data["game_credits"],
            game_started_flag=bool(data["game_started_flag"]),
            snake_airdrop_flag=bool(data["snake_airdrop_flag"]),
            fruit_to_claim=data["fruit_to_claim"],
            snake_nfts_to_claim=data["snake_nfts_to_claim"],
            super_nft_claim_flag=bool(data["super_nft_claim_flag"]),
            stats=stats,
            purchased_credits=data["purchased_credits"],
            airdropped_credits=data["airdropped_credits"],
            airdropped_snake=data["airdropped_snake"],
            current_game_paid=bool(data["current_game_paid"]),
        )

    def put_account(self, account: PlayerAccount):
        """Inserts or replaces a player's account."""
        s = account.stats
        values = (
            account.address, account.game_credits, int(account.game_started_flag),
            int(account.snake_airdrop_flag), account.fruit_to_claim,
            account.snake_nfts_to_claim, int(account.super_nft_claim_flag),
            account.purchased_credits, account.airdropped_credits,
            account.airdropped_snake, int(account.current_game_paid),
            s.games_played, s.last_score, s.best_score, s.fruits_collected,
            s.snake_nfts_amount, s.super_nfts_amount,
        )
        placeholders = ", ".join("?" for _ in PLAYER_COLUMNS)
        self._write(
            f"INSERT OR REPLACE INTO Players ({', '.join(PLAYER_COLUMNS)}) VALUES ({placeholders})",
            values)

    # -------- Rounds --------

    def get_round(self, round_number: int) -> Optional[GameRound]:
        with self._lock:
            self.cur.execute(
                "SELECT round_number, games_played, best_player, highest_score, finished "
                "FROM Rounds WHERE round_number=?", (round_number,))
            row = self.cur.fetchone()
        if row is None:
            return None
        number, games, best, highest, finished = row
        return GameRound(round_number=number, games_played=games, best_player=best,
                         highest_score=highest, finished=bool(finished))

    def put_round(self, game_round: GameRound):
        self._write(
            "INSERT OR REPLACE INTO Rounds "
            "(round_number, games_played, best_player, highest_score, finished) "
            "VALUES (?, ?, ?, ?, ?)",
            (game_round.round_number, game_round.games_played, game_round.best_player,
             game_round.highest_score, int(game_round.finished)))

    def get_state(self) -> Optional[GlobalGameState]:
        with self._lock:
            self.cur.execute(
                "SELECT game_round, games_played_total, highest_score_ever, best_player_ever "
                "FROM GlobalState WHERE id = 1")
            row = self.cur.fetchone()
        if row is None:
            return None
        return GlobalGameState(*row)

    def put_state(self, state: GlobalGameState):
        self._write(
            "INSERT OR REPLACE INTO GlobalState "
            "(id, game_round, games_played_total, highest_score_ever, best_player_ever) "
            "VALUES (1, ?, ?, ?, ?)",
            (state.game_round, state.games_played_total, state.highest_score_ever,
             state.best_player_ever))

    def get_leaderboard(self) -> List[Tuple[str, int]]:
        """Fetches the top scores (address, best_score)."""
        with self._lock:
            self.cur.execute("""
                SELECT address, best_score
                FROM Players
                ORDER BY best_score DESC
                LIMIT 10
            """)
            return self.cur.fetchall()

    def close(self):
        self.conn.close()
