import pytest

import players
import saves
from errors import StorageError


def test_missing_save_is_none(db):
    player_id, _ = players.create_player(db, 'Alice')
    assert saves.get(db, player_id) is None


def test_put_then_get_returns_exact_payload(db):
    player_id, _ = players.create_player(db, 'Alice')
    payload = {'level': 3, 'inventory': ['laptop', 'coffee'], 'flags': {'tutorial': True}}

    saves.put(db, player_id, payload, 7)
    save_data, version, updated_at = saves.get(db, player_id)

    assert save_data == payload
    assert version == 7
    assert updated_at is not None


def test_second_put_replaces_wholesale(db):
    player_id, _ = players.create_player(db, 'Alice')
    saves.put(db, player_id, {'a': 1, 'b': 2}, 5)
    saves.put(db, player_id, {'c': 3}, 2)

    save_data, version, _ = saves.get(db, player_id)
    assert save_data == {'c': 3}
    assert version == 2


def test_saves_are_per_player(db):
    alice, _ = players.create_player(db, 'Alice')
    bob, _ = players.create_player(db, 'Bob')
    saves.put(db, alice, {'who': 'alice'}, 1)

    assert saves.get(db, bob) is None
    assert saves.get(db, alice)[0] == {'who': 'alice'}


def test_put_out_of_range_version_is_storage_error(db):
    player_id, _ = players.create_player(db, 'Alice')

    with pytest.raises(StorageError):
        saves.put(db, player_id, {'a': 1}, 2**63)

    assert saves.get(db, player_id) is None
