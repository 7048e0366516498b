"""Tests for reversible short ids and path id decoding."""

import pytest

from casevault.core.exceptions import NotFoundError
from casevault.core.ids import MAX_ID, IdDecodeError, IdObfuscator, decode_path_id, get_id_obfuscator


@pytest.fixture
def obfuscator():
    return IdObfuscator("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789", 10)


@pytest.mark.parametrize("value", [0, 1, 42, 123456789, MAX_ID])
def test_encode_decode_inverse(obfuscator, value):
    token = obfuscator.encode(value)
    assert obfuscator.decode(token) == [value]
    assert obfuscator.decode_id(token) == value


def test_min_length_respected(obfuscator):
    assert len(obfuscator.encode(1)) >= 10


def test_distinct_ids_give_distinct_tokens(obfuscator):
    tokens = {obfuscator.encode(i) for i in range(200)}
    assert len(tokens) == 200


def test_tokens_depend_on_alphabet():
    a = IdObfuscator("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789", 10)
    b = IdObfuscator("0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz", 10)
    assert a.encode(7) != b.encode(7)


@pytest.mark.parametrize("bad", [-1, MAX_ID + 1, True, "7", 1.5])
def test_encode_rejects_non_ids(obfuscator, bad):
    with pytest.raises(ValueError):
        obfuscator.encode(bad)


def test_decode_rejects_empty(obfuscator):
    with pytest.raises(IdDecodeError):
        obfuscator.decode("")


def test_decode_rejects_foreign_characters(obfuscator):
    with pytest.raises(IdDecodeError):
        obfuscator.decode("not-a-token!")


def test_decode_rejects_multi_number_tokens(obfuscator):
    token = obfuscator._sqids.encode([1, 2])
    with pytest.raises(IdDecodeError):
        obfuscator.decode(token)


def test_decode_path_id_maps_failures_to_not_found():
    with pytest.raises(NotFoundError) as exc:
        decode_path_id("%%%", "case")
    assert exc.value.status_code == 404
    assert "case" in exc.value.detail


def test_decode_path_id_round_trip():
    token = get_id_obfuscator().encode(99)
    assert decode_path_id(token) == 99
