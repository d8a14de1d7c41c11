"""Unit tests for address/phone pairing."""

from uuid import uuid4

from provider_validation.services.linkage import LinkedPair, pair_sub_records


def test_pairs_by_link_id_in_address_order(make_address, make_phone):
    provider_id = uuid4()
    first = make_address(provider_id, link_id="a")
    second = make_address(provider_id, link_id="b")
    phone_b = make_phone(provider_id, link_id="b")
    phone_a = make_phone(provider_id, link_id="a")

    pairs = pair_sub_records([first, second], [phone_b, phone_a])

    assert pairs == [LinkedPair(first, phone_a), LinkedPair(second, phone_b)]


def test_first_phone_wins_when_link_id_is_shared(make_address, make_phone):
    provider_id = uuid4()
    address = make_address(provider_id, link_id="shared")
    earlier = make_phone(provider_id, link_id="shared", phone="512-555-0001")
    later = make_phone(provider_id, link_id="shared", phone="512-555-0002")

    pairs = pair_sub_records([address], [earlier, later])

    assert pairs[0].phone is earlier


def test_address_without_link_id_is_unpaired(make_address, make_phone):
    """No positional fallback: a missing key never borrows the phone at the same index."""
    provider_id = uuid4()
    address = make_address(provider_id, link_id=None)
    phone = make_phone(provider_id, link_id=None)

    pairs = pair_sub_records([address], [phone])

    assert pairs == [LinkedPair(address, None)]


def test_unmatched_key_and_orphan_phones(make_address, make_phone):
    provider_id = uuid4()
    address = make_address(provider_id, link_id="x")
    orphan = make_phone(provider_id, link_id="y")

    pairs = pair_sub_records([address], [orphan])

    assert len(pairs) == 1
    assert pairs[0].phone is None


def test_empty_inputs():
    assert pair_sub_records([], []) == []


def test_inputs_are_not_mutated(make_address, make_phone):
    provider_id = uuid4()
    addresses = [make_address(provider_id, link_id="a")]
    phones = [make_phone(provider_id, link_id="a"), make_phone(provider_id)]
    addresses_before, phones_before = list(addresses), list(phones)

    pair_sub_records(addresses, phones)

    assert addresses == addresses_before
    assert phones == phones_before


def test_three_addresses_two_linked_phones(make_address, make_phone):
    provider_id = uuid4()
    addresses = [make_address(provider_id, link_id=key) for key in ("a1", "a2", "a3")]
    phones = [make_phone(provider_id, link_id=key) for key in ("a1", "a2")]

    pairs = pair_sub_records(addresses, phones)

    assert [pair.address for pair in pairs] == addresses
    assert [pair.phone for pair in pairs] == [phones[0], phones[1], None]
