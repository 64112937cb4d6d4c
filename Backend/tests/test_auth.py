from datetime import datetime, timedelta, timezone

import pytest

from auth import SessionAuthority, hash_password, verify_password
from errors import Unauthenticated


def test_token_verifies_to_issuing_player():
    authority = SessionAuthority('secret')
    token = authority.issue('player-x')
    assert authority.verify(token) == 'player-x'


def test_token_lifetime_is_one_year():
    authority = SessionAuthority('secret')
    issued = datetime(2030, 1, 1, tzinfo=timezone.utc)
    token = authority.issue('player-x', now=issued)
    assert authority.verify(token, now=issued + timedelta(days=364)) == 'player-x'
    with pytest.raises(Unauthenticated):
        authority.verify(token, now=issued + timedelta(days=366))


def test_expired_token_is_rejected():
    authority = SessionAuthority('secret')
    token = authority.issue('player-x', now=datetime.now(timezone.utc) - timedelta(days=400))
    with pytest.raises(Unauthenticated):
        authority.verify(token)


def test_tampered_signature_is_rejected():
    authority = SessionAuthority('secret')
    token = authority.issue('player-x')
    payload, signature = token.rsplit('.', 1)
    flipped = ('B' if signature[0] == 'A' else 'A') + signature[1:]
    with pytest.raises(Unauthenticated):
        authority.verify(f'{payload}.{flipped}')


def test_swapped_payload_is_rejected():
    authority = SessionAuthority('secret')
    payload_x = authority.issue('player-x').rsplit('.', 1)[0]
    signature_y = authority.issue('player-y').rsplit('.', 1)[1]
    with pytest.raises(Unauthenticated):
        authority.verify(f'{payload_x}.{signature_y}')


def test_token_from_other_secret_is_rejected():
    token = SessionAuthority('other').issue('player-x')
    with pytest.raises(Unauthenticated):
        SessionAuthority('secret').verify(token)


@pytest.mark.parametrize('token', ['', 'garbage', 'a.b.c', '...'])
def test_malformed_token_is_rejected(token):
    with pytest.raises(Unauthenticated):
        SessionAuthority('secret').verify(token)


def test_verify_optional_collapses_failures():
    authority = SessionAuthority('secret')
    assert authority.verify_optional(None) is None
    assert authority.verify_optional('') is None
    assert authority.verify_optional('garbage') is None
    assert authority.verify_optional(authority.issue('player-x')) == 'player-x'


def test_password_hash_round_trip():
    hashed = hash_password('correct horse')
    assert hashed != 'correct horse'
    assert hashed.startswith('scrypt:')
    assert verify_password(hashed, 'correct horse')
    assert not verify_password(hashed, 'wrong horse')
    assert not verify_password(None, 'correct horse')
