import pytest

from snake_economy.data_models import PlayerAccount
from snake_economy.engine import GameEconomyEngine
from snake_economy.server_db import Database

from conftest import OPERATOR, paid_game


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "economy.db")


def test_fresh_database_starts_round_one(db_path):
    db = Database(db_path)
    engine = GameEconomyEngine(accounts=db, rounds=db)
    assert engine.get_game_round() == 1
    assert engine.get_game_round_data(1).games_played == 0
    db.close()


def test_state_survives_restart(db_path):
    db = Database(db_path)
    engine = GameEconomyEngine(accounts=db, rounds=db)
    engine.snake_airdrop("alice")
    paid_game(engine, "bob", 75)
    engine.finish_round(OPERATOR)
    db.close()

    db = Database(db_path)
    engine = GameEconomyEngine(accounts=db, rounds=db)
    alice = engine.get_player_data("alice")
    assert alice.snake_airdrop_flag is True
    assert alice.airdropped_snake == 10

    bob = engine.get_player_stats("bob")
    assert bob.games_played == 1
    assert bob.best_score == 75
    assert engine.get_game_round() == 2
    assert engine.get_best_player_ever() == "bob"
    assert engine.get_game_round_data(1).finished is True
    assert engine.get_leaderboard() == [("bob", 75), ("alice", 0)]
    db.close()


def test_transaction_rolls_back_on_error(db_path):
    db = Database(db_path)
    with pytest.raises(RuntimeError):
        with db.transaction():
            db.put_account(PlayerAccount(address="alice", game_credits=3))
            raise RuntimeError("boom")
    assert db.get_account("alice") is None
    db.close()


def test_nested_transactions_commit_once(db_path):
    db = Database(db_path)
    with db.transaction():
        with db.transaction():
            db.put_account(PlayerAccount(address="alice", game_credits=3))
        assert db._depth == 1
    db.close()

    db = Database(db_path)
    assert db.get_account("alice").game_credits == 3
    db.close()


def test_account_round_trip(db_path):
    db = Database(db_path)
    account = PlayerAccount(address="alice", game_credits=2, game_started_flag=True,
                            purchased_credits=1, airdropped_credits=1,
                            current_game_paid=True)
    account.stats.best_score = 88
    account.stats.super_nfts_amount = 1
    db.put_account(account)
    assert db.get_account("alice") == account
    db.close()
