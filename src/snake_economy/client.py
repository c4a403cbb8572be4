#!/usr/bin/env python3
"""
client.py

UDP JSON client for the economy server. One method per engine operation.
"""

import itertools
import json
import socket
import time
from typing import Any, Dict, List, Optional, Tuple

from .constants import GAME_PORT, BUFFER_SIZE, CLIENT_TIMEOUT
from .errors import ERROR_KINDS, SnakeGameError

# ----------------- Network Client (request / reply) -----------------

class EconomyClient:
    def __init__(self, player: str, server_addr: Tuple[str, int] = ("127.0.0.1", GAME_PORT),
                 timeout: float = CLIENT_TIMEOUT):
        self.player = player
        self.server_addr = server_addr
        self.timeout = timeout
        self._ids = itertools.count(1)

        self.sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        self.sock.settimeout(0.1)

    def close(self):
        self.sock.close()

    def request(self, msg_type: str, **fields) -> Dict[str, Any]:
        """Sends one request and waits for the reply carrying the same id."""
        request_id = next(self._ids)
        message = {"type": msg_type, "player": self.player, "id": request_id}
        message.update({k: v for k, v in fields.items() if v is not None})
        self.sock.sendto(json.dumps(message).encode('utf-8'), self.server_addr)

        start_time = time.time()
        while time.time() - start_time < self.timeout:
            try:
                data, _ = self.sock.recvfrom(BUFFER_SIZE)
            except socket.timeout:
                continue
            reply = json.loads(data.decode('utf-8'))
            if reply.get("id") != request_id:
                continue  # stale reply from an earlier, timed-out request
            if reply.get("type") in ("result", "data"):
                return reply
            error_cls = ERROR_KINDS.get(reply.get("type"), SnakeGameError)
            raise error_cls(reply.get("message", ""))
        raise TimeoutError(f"No reply to {msg_type} from {self.server_addr}")

    def _events(self, msg_type: str, **fields) -> List[dict]:
        return self.request(msg_type, **fields)["events"]

    def _data(self, msg_type: str, **fields):
        return self.request(msg_type, **fields)["data"]

    # -------- Operations --------

    def snake_airdrop(self):
        return self._events("snake_airdrop")

    def buy_snake(self, amount: int, value: int):
        return self._events("buy_snake", amount=amount, value=value)

    def buy_credits(self, amount: int):
        return self._events("buy_credits", amount=amount)

    def game_start(self):
        return self._events("game_start")

    def game_over(self, score: int):
        return self._events("game_over", score=score)

    def fruit_claim(self):
        return self._events("fruit_claim")

    def fruit_to_snake_swap(self, amount: int):
        return self._events("fruit_to_snake_swap", amount=amount)

    def snake_nft_claim(self, amount: Optional[int] = None):
        return self._events("snake_nft_claim", amount=amount)

    def check_super_nft_claim(self):
        return self._events("check_super_nft_claim")

    def super_pet_nft_claim(self, value: int):
        return self._events("super_pet_nft_claim", value=value)

    def finish_round(self):
        return self._events("finish_round")

    def deposit(self, value: int):
        return self._events("deposit", value=value)

    def withdraw_eth(self, amount: int, recipient: Optional[str] = None):
        return self._events("withdraw_eth", amount=amount, recipient=recipient)

    def faucet(self) -> int:
        return self._data("faucet")

    def approve_snake(self, amount: int) -> int:
        """Lets the game spend `amount` SNAKE on credits. Returns the new allowance."""
        return self._data("approve_snake", amount=amount)

    def approve_snake_nft(self, token_id: int) -> int:
        return self._data("approve_snake_nft", token_id=token_id)

    # -------- Reads --------

    def get_player_data(self) -> dict:
        return self._data("get_player_data")

    def get_player_stats(self) -> dict:
        return self._data("get_player_stats")

    def get_balances(self) -> dict:
        return self._data("get_balances")

    def get_game_round(self) -> int:
        return self._data("get_game_round")

    def get_game_round_data(self, round_number: int) -> dict:
        return self._data("get_game_round_data", round=round_number)

    def get_games_played_total(self) -> int:
        return self._data("get_games_played_total")

    def get_highest_score_ever(self) -> int:
        return self._data("get_highest_score_ever")

    def get_best_player_ever(self) -> str:
        return self._data("get_best_player_ever")

    def get_game_credit_price(self) -> int:
        return self._data("get_game_credit_price")

    def get_config(self) -> dict:
        return self._data("get_config")

    def get_balance(self) -> int:
        return self._data("get_balance")

    def get_leaderboard(self) -> list:
        return self._data("get_leaderboard")


if __name__ == "__main__":
    import sys

    player = sys.argv[1] if len(sys.argv) > 1 else "player1"
    client = EconomyClient(player)
    try:
        print(f"Round {client.get_game_round()}")
        print(json.dumps(client.get_player_data(), indent=2))
        print(json.dumps(client.get_balances(), indent=2))
    except (SnakeGameError, TimeoutError) as e:
        print(f"Request failed: {e}")
    finally:
        client.close()
