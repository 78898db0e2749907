"""Collaborator lookup registry.

Provides get_*() / set_*() for the catalog, address book, shipping rates
and customer profiles. In-memory adapters are used until a real adapter
is installed with the matching set_*() call.
"""

from storefront.lookups.memory import (
    InMemoryAddressBook,
    InMemoryCatalog,
    InMemoryProfiles,
    InMemoryShippingRates,
)
from storefront.lookups.ports import AddressBook, Catalog, Profiles, ShippingRates

_catalog: Catalog | None = None
_address_book: AddressBook | None = None
_shipping_rates: ShippingRates | None = None
_profiles: Profiles | None = None


def get_catalog() -> Catalog:
    global _catalog
    if _catalog is None:
        _catalog = InMemoryCatalog()
    return _catalog


def set_catalog(catalog: Catalog) -> None:
    global _catalog
    _catalog = catalog


def get_address_book() -> AddressBook:
    global _address_book
    if _address_book is None:
        _address_book = InMemoryAddressBook()
    return _address_book


def set_address_book(address_book: AddressBook) -> None:
    global _address_book
    _address_book = address_book


def get_shipping_rates() -> ShippingRates:
    global _shipping_rates
    if _shipping_rates is None:
        _shipping_rates = InMemoryShippingRates()
    return _shipping_rates


def set_shipping_rates(shipping_rates: ShippingRates) -> None:
    global _shipping_rates
    _shipping_rates = shipping_rates


def get_profiles() -> Profiles:
    global _profiles
    if _profiles is None:
        _profiles = InMemoryProfiles()
    return _profiles


def set_profiles(profiles: Profiles) -> None:
    global _profiles
    _profiles = profiles


def reset_lookups() -> None:
    """Reset every lookup to a fresh in-memory adapter."""
    global _catalog, _address_book, _shipping_rates, _profiles
    _catalog = None
    _address_book = None
    _shipping_rates = None
    _profiles = None
