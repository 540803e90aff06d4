import pytest

from precompile_kit.addresses import (
    TokenKind,
    hash_address,
    is_precompile,
    token_kind_of,
    used_addresses,
)


def test_hash_address_places_number_in_low_bytes():
    assert hash_address(1) == bytes(19) + b"\x01"
    assert hash_address(1024) == bytes(18) + b"\x04\x00"


def test_hash_address_rejects_too_large():
    with pytest.raises(ValueError):
        hash_address(2**64)


def test_used_addresses_lists_every_known_precompile():
    addresses = used_addresses()
    expected_numbers = [1, 2, 3, 4, 5, 6, 7, 8, 1024, 1025, 1026]
    assert addresses == [hash_address(n) for n in expected_numbers]
    assert all(len(address) == 20 for address in addresses)


@pytest.mark.parametrize("number", [1, 8, 1024, 1026])
def test_is_precompile_for_used(number):
    assert is_precompile(hash_address(number)) is True


@pytest.mark.parametrize("number", [0, 9, 1027, 1029])
def test_is_precompile_false_for_others(number):
    assert is_precompile(hash_address(number)) is False


@pytest.mark.parametrize(
    ("kind", "prefix"),
    [
        (TokenKind.FUNGIBLE, b"\xff\xff\xff\xff"),
        (TokenKind.NON_FUNGIBLE, b"\xfe\xff\xff\xff"),
        (TokenKind.MULTI, b"\xfd\xff\xff\xff"),
    ],
)
def test_prefixes_are_fixed(kind, prefix):
    assert kind.prefix == prefix
    assert kind.into_address(0)[:4] == prefix
    assert token_kind_of(prefix + bytes(16)) is kind


@pytest.mark.parametrize(
    ("kind", "selector"),
    [
        (TokenKind.FUNGIBLE, bytes([66, 236, 171, 192])),
        (TokenKind.NON_FUNGIBLE, bytes([233, 208, 99, 141])),
        (TokenKind.MULTI, bytes([207, 91, 165, 63])),
    ],
)
def test_create_selectors_are_fixed(kind, selector):
    found = token_kind_of(kind.into_address(1))
    assert found is kind
    assert found.create_selector == selector


@pytest.mark.parametrize("kind", list(TokenKind))
@pytest.mark.parametrize("token_id", [0, 1, 42, 2**32 - 1])
def test_round_trip(kind, token_id):
    address = kind.into_address(token_id)
    assert len(address) == 20
    assert address[:4] == kind.prefix
    assert kind.try_from_address(address) == token_id
    assert token_kind_of(address) is kind


def test_try_from_address_reads_only_low_four_bytes():
    address = TokenKind.FUNGIBLE.into_address(2**40 + 7)
    assert TokenKind.FUNGIBLE.try_from_address(address) == 7


def test_try_from_address_with_other_prefix_is_none():
    address = TokenKind.MULTI.into_address(5)
    assert TokenKind.FUNGIBLE.try_from_address(address) is None
    assert TokenKind.NON_FUNGIBLE.try_from_address(hash_address(1)) is None


def test_token_kind_of_unknown_prefix():
    assert token_kind_of(hash_address(1027)) is None


@pytest.mark.parametrize("token_id", [-1, 2**128])
def test_into_address_rejects_out_of_range(token_id):
    with pytest.raises(ValueError):
        TokenKind.FUNGIBLE.into_address(token_id)


def test_into_address_rejects_non_int():
    with pytest.raises(TypeError):
        TokenKind.MULTI.into_address("1")


def test_wrong_address_length_rejected():
    with pytest.raises(ValueError):
        TokenKind.FUNGIBLE.try_from_address(b"\xff" * 19)
    with pytest.raises(ValueError):
        token_kind_of(b"\xff" * 21)