"""In-memory collaborator adapters for development and testing."""

from storefront.lookups.ports import (
    Address,
    AddressBook,
    Catalog,
    CatalogProduct,
    CustomerProfile,
    Profiles,
    ShippingRate,
    ShippingRates,
)


class InMemoryCatalog(Catalog):
    def __init__(self) -> None:
        self.products: dict[str, CatalogProduct] = {}

    def add(self, product: CatalogProduct) -> None:
        self.products[str(product.product_id)] = product

    def get_product(self, product_id: str) -> CatalogProduct | None:
        return self.products.get(str(product_id))


class InMemoryAddressBook(AddressBook):
    def __init__(self) -> None:
        self.addresses: dict[tuple[str, str], Address] = {}

    def add(self, address: Address) -> None:
        self.addresses[(str(address.user_id), str(address.address_id))] = address

    def get_address(self, user_id: str, address_id: str) -> Address | None:
        return self.addresses.get((str(user_id), str(address_id)))


class InMemoryShippingRates(ShippingRates):
    def __init__(self, rates: list[ShippingRate] | None = None) -> None:
        self.rates: list[ShippingRate] = list(rates or [])

    def add(self, rate: ShippingRate) -> None:
        self.rates.append(rate)

    def list_rates(self) -> list[ShippingRate]:
        return list(self.rates)


class InMemoryProfiles(Profiles):
    def __init__(self) -> None:
        self.profiles: dict[str, CustomerProfile] = {}

    def add(self, profile: CustomerProfile) -> None:
        self.profiles[str(profile.user_id)] = profile

    def get_profile(self, user_id: str) -> CustomerProfile | None:
        return self.profiles.get(str(user_id))
