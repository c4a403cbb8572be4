#!/usr/bin/env python3
"""
Snake economy server: UDP JSON front end for the GameEconomyEngine.
Uses the modular architecture: server_db for persistence, engine for the rules.
"""

import argparse
import logging
import json
import socket
import threading
import time
from dataclasses import replace
from typing import Callable, Dict, Optional, Tuple

from .config import EconomyConfig
from .constants import GAME_PORT, BUFFER_SIZE, DB_FILE, ROUND_DURATION
from .engine import GameEconomyEngine
from .errors import SnakeGameError
from .server_db import Database

# -------- Request Fields --------

# Every request names its player; these are the extra fields each type needs.
REQUIRED_FIELDS = {
    "buy_snake": ("amount", "value"),
    "buy_credits": ("amount",),
    "game_over": ("score",),
    "fruit_to_snake_swap": ("amount",),
    "super_pet_nft_claim": ("value",),
    "deposit": ("value",),
    "withdraw_eth": ("amount",),
    "approve_snake": ("amount",),
    "approve_snake_nft": ("token_id",),
    "get_game_round_data": ("round",),
}
INT_FIELDS = ("amount", "value", "score", "round", "token_id")
STR_FIELDS = ("type", "player", "recipient")


def validate_request(message: dict) -> Optional[str]:
    """Returns why a decoded request is malformed, or None when it is usable."""
    for name in STR_FIELDS:
        if message.get(name) is not None and not isinstance(message[name], str):
            return f"Field '{name}' must be a string."
    for name in INT_FIELDS:
        value = message.get(name)
        if value is not None and (isinstance(value, bool) or not isinstance(value, int)):
            return f"Field '{name}' must be an integer."
    for name in ("player",) + REQUIRED_FIELDS.get(message.get("type"), ()):
        if message.get(name) is None:
            return f"Missing field '{name}'."
    return None

# -------- Server Class --------

class EconomyServer:
    def __init__(self, engine: GameEconomyEngine, port: int = GAME_PORT, host: str = "",
                 round_duration: float = ROUND_DURATION, faucet_amount: int = 0):
        self.engine = engine
        self.operator = engine.config.operator_address
        self.round_duration = round_duration
        self.faucet_amount = faucet_amount

        # Network
        self.game_sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        self.game_sock.bind((host, port))
        self.game_sock.settimeout(0.5)
        self.port = self.game_sock.getsockname()[1]

        self.handlers: Dict[str, Callable[[dict], dict]] = {
            # Mutating operations
            "snake_airdrop": lambda m: self._events(self.engine.snake_airdrop(m["player"])),
            "buy_snake": lambda m: self._events(
                self.engine.buy_snake(m["player"], m["amount"], m["value"])),
            "buy_credits": lambda m: self._events(
                self.engine.buy_credits(m["player"], m["amount"])),
            "game_start": lambda m: self._events(self.engine.game_start(m["player"])),
            "game_over": lambda m: self._events(
                self.engine.game_over(m["player"], m["score"])),
            "fruit_claim": lambda m: self._events(self.engine.fruit_claim(m["player"])),
            "fruit_to_snake_swap": lambda m: self._events(
                self.engine.fruit_to_snake_swap(m["player"], m["amount"])),
            "snake_nft_claim": lambda m: self._events(
                self.engine.snake_nft_claim(m["player"], m.get("amount"))),
            "check_super_nft_claim": lambda m: self._events(
                self.engine.check_super_nft_claim(m["player"])),
            "super_pet_nft_claim": lambda m: self._events(
                self.engine.super_pet_nft_claim(m["player"], m["value"])),
            "finish_round": lambda m: self._events(self.engine.finish_round(m["player"])),
            "deposit": lambda m: self._events(self.engine.deposit(m["player"], m["value"])),
            "withdraw_eth": lambda m: self._events(
                self.engine.withdraw_eth(m["player"], m["amount"], m.get("recipient"))),
            "faucet": self._handle_faucet,
            # Ledger approvals the engine needs before spending player tokens
            "approve_snake": self._handle_approve_snake,
            "approve_snake_nft": self._handle_approve_snake_nft,
            # Read-only accessors
            "get_player_data": lambda m: self._data(
                self.engine.get_player_data(m["player"]).to_client_state()),
            "get_player_stats": lambda m: self._data(
                self.engine.get_player_stats(m["player"]).to_client_state()),
            "get_game_round": lambda m: self._data(self.engine.get_game_round()),
            "get_game_round_data": lambda m: self._data(
                self.engine.get_game_round_data(m["round"]).to_client_state()),
            "get_games_played_total": lambda m: self._data(self.engine.get_games_played_total()),
            "get_highest_score_ever": lambda m: self._data(self.engine.get_highest_score_ever()),
            "get_best_player_ever": lambda m: self._data(self.engine.get_best_player_ever()),
            "get_balance": lambda m: self._data(self.engine.get_balance()),
            "get_game_credit_price": lambda m: self._data(
                self.engine.get_game_credit_price(m["player"])),
            "get_balances": lambda m: self._data(self._balances(m["player"])),
            "get_config": lambda m: self._data(self.engine.get_config().to_dict()),
            "get_leaderboard": lambda m: self._data(self.engine.get_leaderboard()),
        }

        # Threading
        self.running = threading.Event()
        self.running.set()
        self.network_thread = threading.Thread(target=self._network_loop, daemon=True)
        self.round_thread = threading.Thread(target=self._round_loop, daemon=True)

    def start(self):
        """Start all server loops."""
        self.network_thread.start()
        if self.round_duration > 0:
            self.round_thread.start()

    def stop(self):
        """Stop all server loops."""
        print("Stopping server...")
        self.running.clear()
        self.network_thread.join()
        if self.round_thread.is_alive():
            self.round_thread.join()
        self.game_sock.close()
        print("Server stopped.")

    def _network_loop(self):
        """Listens for and answers incoming UDP requests."""
        print(f"Network thread started. Listening on port {self.port}.")
        while self.running.is_set():
            try:
                data, addr = self.game_sock.recvfrom(BUFFER_SIZE)
            except socket.timeout:
                continue
            except OSError as e:
                if self.running.is_set():
                    print(f"Network receive error: {e}")
                continue
            try:
                reply = self.handle_message(data)
            except Exception as e:
                print(f"Network processing error from {addr}: {e}")
                reply = {"type": "server_error", "message": "Request could not be processed."}
            self._send(addr, reply)

    def handle_message(self, data: bytes) -> dict:
        """Decodes one request and runs it against the engine."""
        try:
            message = json.loads(data.decode('utf-8'))
        except (UnicodeDecodeError, json.JSONDecodeError):
            return {"type": "unknown_message", "message": "Request is not valid JSON."}
        if not isinstance(message, dict):
            return {"type": "unknown_message", "message": "Request must be a JSON object."}

        problem = validate_request(message)
        msg_type = message.get("type")
        if problem is not None:
            reply = {"type": "bad_request", "message": problem}
        elif msg_type not in self.handlers:
            reply = {"type": "unknown_message", "message": f"Invalid message type: {msg_type}"}
        else:
            try:
                reply = self.handlers[msg_type](message)
                reply["op"] = msg_type
            except SnakeGameError as e:
                reply = e.to_message()
            except Exception as e:
                print(f"Error handling {msg_type} for {message['player']}: {e!r}")
                reply = {"type": "server_error", "message": "Request could not be processed."}
        if "id" in message:
            reply["id"] = message["id"]
        return reply

    def _handle_faucet(self, message: dict) -> dict:
        """Credits native currency to a player. Only enabled for development servers."""
        if self.faucet_amount <= 0:
            return {"type": "unknown_message", "message": "Faucet is disabled."}
        self.engine.ledgers.native.credit(message["player"], self.faucet_amount)
        return self._data(self.engine.ledgers.native.balance_of(message["player"]))

    def _handle_approve_snake(self, message: dict) -> dict:
        """Sets the SNAKE allowance the engine may spend for buy_credits."""
        snake = self.engine.ledgers.snake
        snake.approve(message["player"], self.engine.config.engine_address, message["amount"])
        return self._data(snake.allowance(message["player"], self.engine.config.engine_address))

    def _handle_approve_snake_nft(self, message: dict) -> dict:
        """Lets the engine burn one Snake NFT in a Super Pet claim."""
        self.engine.ledgers.snake_nft.approve(
            message["player"], self.engine.config.engine_address, message["token_id"])
        return self._data(message["token_id"])

    def _balances(self, player: str) -> dict:
        ledgers = self.engine.ledgers
        return {
            "native": ledgers.native.balance_of(player),
            "SNAKE": ledgers.snake.balance_of(player),
            "FRUIT": ledgers.fruit.balance_of(player),
            "SNFT": ledgers.snake_nft.balance_of(player),
            "SPET": ledgers.super_pet_nft.balance_of(player),
        }

    @staticmethod
    def _events(events) -> dict:
        return {"type": "result", "events": [e.to_client_state() for e in events]}

    @staticmethod
    def _data(value) -> dict:
        return {"type": "data", "data": value}

    def _send(self, addr: Tuple[str, int], message: dict):
        try:
            self.game_sock.sendto(json.dumps(message).encode('utf-8'), addr)
        except OSError as e:
            print(f"Error replying to {addr}: {e}")
        if message.get("type") not in ("result", "data"):
            print(f"Sent error to {addr}: {message.get('message')}")

    def _round_loop(self):
        """Finishes the current round every `round_duration` seconds as the operator."""
        print(f"Round thread started. Round duration: {self.round_duration}s.")
        next_finish = time.time() + self.round_duration
        while self.running.is_set():
            if time.time() < next_finish:
                time.sleep(min(0.5, next_finish - time.time()))
                continue
            next_finish += self.round_duration
            try:
                self.engine.finish_round(self.operator)
                print(f"Round finished. Now playing round {self.engine.get_game_round()}.")
            except Exception as e:
                print(f"Round finish failed: {e}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Snake game economy server")
    parser.add_argument("--port", type=int, default=GAME_PORT)
    parser.add_argument("--db", default=DB_FILE, help="SQLite file for accounts and rounds")
    parser.add_argument("--config", help="JSON file overriding economy constants")
    parser.add_argument("--operator", help="Address allowed to finish rounds and withdraw")
    parser.add_argument("--round-duration", type=float, default=ROUND_DURATION,
                        help="Seconds between automatic round finishes (0 disables)")
    parser.add_argument("--faucet", type=int, default=0,
                        help="Native units handed out per faucet request (0 disables)")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s: %(message)s")
    config = EconomyConfig.load(args.config) if args.config else EconomyConfig()
    if args.operator:
        config = replace(config, operator_address=args.operator)
    db = Database(args.db)
    engine = GameEconomyEngine(config=config, accounts=db, rounds=db)
    server = EconomyServer(engine, port=args.port,
                           round_duration=args.round_duration, faucet_amount=args.faucet)
    print(f"Server initialized on UDP port {server.port}. Current round: {engine.get_game_round()}.")
    try:
        server.start()
        while server.running.is_set():
            time.sleep(0.1)
    except KeyboardInterrupt:
        server.stop()
    finally:
        db.close()


if __name__ == "__main__":
    main()
