"""Pairing of addresses with the phones captured alongside them."""

from dataclasses import dataclass
from typing import Optional, Sequence

from provider_validation.database.models import ProviderAddress, ProviderPhone


@dataclass(frozen=True)
class LinkedPair:
    """An address and the phone that shares its link key, if any."""

    address: ProviderAddress
    phone: Optional[ProviderPhone] = None


def pair_sub_records(
    addresses: Sequence[ProviderAddress], phones: Sequence[ProviderPhone]
) -> list[LinkedPair]:
    """Pair each address with the phone that carries the same ``link_id``.

    One pair is produced per address, in address order. Addresses without a
    link key, or whose key matches no phone, are left unpaired. When several
    phones share a key the first one wins. Phones matching no address are
    not reported.
    """
    phones_by_link: dict[str, ProviderPhone] = {}
    for phone in phones:
        if phone.link_id is not None:
            phones_by_link.setdefault(phone.link_id, phone)

    return [
        LinkedPair(
            address=address,
            phone=phones_by_link.get(address.link_id) if address.link_id is not None else None,
        )
        for address in addresses
    ]
