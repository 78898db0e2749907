import pytest
from protean import current_domain
from protean.integrations.pytest import DomainFixture

USER_ID = "user-001"
ADDRESS_ID = "addr-001"
SHIRT_ID = "prod-shirt"
CAP_ID = "prod-cap"


@pytest.fixture(scope="session")
def storefront_bed():
    from storefront.domain import storefront

    bed = DomainFixture(storefront)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(storefront_bed):
    with storefront_bed.domain_context():
        yield


# ---------------------------------------------------------------------------
# Gateways
# ---------------------------------------------------------------------------
@pytest.fixture()
def pix_gateway():
    from storefront.gateway import set_pix_gateway
    from storefront.gateway.fake_adapter import FakePixGateway

    gateway = FakePixGateway()
    set_pix_gateway(gateway)
    return gateway


@pytest.fixture()
def card_gateway():
    from storefront.gateway import set_card_gateway
    from storefront.gateway.fake_adapter import FakeCardGateway

    gateway = FakeCardGateway()
    set_card_gateway(gateway)
    return gateway


@pytest.fixture()
def email_channel():
    from storefront.notification.channel import set_email_channel
    from storefront.notification.channel.fake_email import FakeEmailAdapter

    channel = FakeEmailAdapter()
    set_email_channel(channel)
    return channel


# ---------------------------------------------------------------------------
# Collaborator data
# ---------------------------------------------------------------------------
@pytest.fixture()
def lookups():
    """Catalog, address, shipping rates and a complete customer profile."""
    from storefront.lookups import get_address_book, get_catalog, get_profiles, get_shipping_rates
    from storefront.lookups.ports import (
        Address,
        CatalogProduct,
        CustomerProfile,
        ProductColor,
        ShippingRate,
    )

    catalog = get_catalog()
    catalog.add(
        CatalogProduct(
            product_id=SHIRT_ID,
            name="Camiseta Básica",
            price=50.0,
            colors=(ProductColor(code="BLK", name="Preto"), ProductColor(code="WHT", name="Branco")),
        )
    )
    catalog.add(CatalogProduct(product_id=CAP_ID, name="Boné", price=30.0))

    get_address_book().add(
        Address(
            address_id=ADDRESS_ID,
            user_id=USER_ID,
            street="Rua das Flores",
            number="100",
            neighborhood="Centro",
            city="São Paulo",
            state="SP",
            zip_code="01000-000",
        )
    )

    rates = get_shipping_rates()
    rates.add(ShippingRate(rate_id="pac", label="PAC", price=15.0, delivery_time_days=7))
    rates.add(ShippingRate(rate_id="express", label="Expresso", price=30.0, min_order_value=100.0))
    rates.add(ShippingRate(rate_id="free", label="Frete Grátis", price=0.0, min_order_value=500.0))

    get_profiles().add(
        CustomerProfile(
            user_id=USER_ID,
            full_name="Maria Silva",
            email="maria@example.com",
            phone="(11) 98765-4321",
            tax_id="529.982.247-25",
            discount_percent=10.0,
        )
    )
    return {"catalog": catalog, "rates": rates}


@pytest.fixture()
def filled_cart(lookups):
    """Two shirts (M, black) and one cap, all selected."""
    from storefront.cart.management import AddCartLine

    current_domain.process(
        AddCartLine(
            user_id=USER_ID,
            product_id=SHIRT_ID,
            quantity=2,
            size="M",
            color_code="BLK",
            color_name="Preto",
        ),
        asynchronous=False,
    )
    current_domain.process(AddCartLine(user_id=USER_ID, product_id=CAP_ID, quantity=1), asynchronous=False)
    return USER_ID


@pytest.fixture()
def stocked():
    """Ten black M shirts and five caps on the shelf."""
    from storefront.stock.ledger import increment

    increment(SHIRT_ID, "M", "BLK", 10)
    increment(CAP_ID, quantity=5)


def _place_pix_order(user_id=USER_ID, charge_id="bill_test_001", status="pending"):
    """Store a Pix order for two black M shirts and a cap."""
    from storefront.order.order import Order, OrderStatus, PaymentMethod

    order = Order.create(
        user_id=user_id,
        lines=[
            {
                "product_id": SHIRT_ID,
                "quantity": 2,
                "price": 50.0,
                "selected_size": "M",
                "color_code": "BLK",
                "color_name": "Preto",
            },
            {"product_id": CAP_ID, "quantity": 1, "price": 30.0},
        ],
        shipping_address={"street": "Rua das Flores", "number": "100", "city": "São Paulo", "zip_code": "01000-000"},
        payment_method=PaymentMethod.PIX,
        shipping={"id": "pac", "name": "PAC", "cost": 15.0, "delivery_time": "7 dias úteis"},
        discount_percent=10.0,
        status=OrderStatus(status),
        external_reference=charge_id,
    )
    current_domain.repository_for(Order).add(order)
    return order


@pytest.fixture()
def place_pix_order():
    return _place_pix_order
