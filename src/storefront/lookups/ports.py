"""Read-only collaborator ports consumed by checkout and billing.

The catalog, address book, shipping rate table and customer profiles are
owned elsewhere; the storefront only reads them through these interfaces.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field


@dataclass(frozen=True)
class ProductColor:
    code: str
    name: str


@dataclass(frozen=True)
class CatalogProduct:
    product_id: str
    name: str
    price: float
    colors: tuple[ProductColor, ...] = field(default_factory=tuple)

    def color_name(self, code: str | None) -> str | None:
        if not code:
            return None
        return next((color.name for color in self.colors if color.code == code), code)


@dataclass(frozen=True)
class Address:
    address_id: str
    user_id: str
    street: str
    city: str
    zip_code: str
    number: str | None = None
    complement: str | None = None
    neighborhood: str | None = None
    state: str | None = None

    def snapshot(self) -> dict:
        return {
            "street": self.street,
            "number": self.number,
            "complement": self.complement,
            "neighborhood": self.neighborhood,
            "city": self.city,
            "state": self.state,
            "zip_code": self.zip_code,
        }


@dataclass(frozen=True)
class ShippingRate:
    rate_id: str
    label: str
    price: float
    min_order_value: float = 0.0
    is_active: bool = True
    delivery_time_days: int | None = None

    @property
    def delivery_time(self) -> str | None:
        if self.delivery_time_days is None:
            return None
        return f"{self.delivery_time_days} dias úteis"


@dataclass(frozen=True)
class CustomerProfile:
    user_id: str
    full_name: str | None = None
    email: str | None = None
    phone: str | None = None
    tax_id: str | None = None
    discount_percent: float = 0.0


class Catalog(ABC):
    @abstractmethod
    def get_product(self, product_id: str) -> CatalogProduct | None: ...


class AddressBook(ABC):
    @abstractmethod
    def get_address(self, user_id: str, address_id: str) -> Address | None: ...


class ShippingRates(ABC):
    @abstractmethod
    def list_rates(self) -> list[ShippingRate]: ...


class Profiles(ABC):
    @abstractmethod
    def get_profile(self, user_id: str) -> CustomerProfile | None: ...
