import pytest
from protean.integrations.pytest import DomainFixture

from shopping.cart.store import CartStore
from shopping.catalogue.product import Catalogue, Product
from shopping.notifications.fake import FakeNotifier
from shopping.session.identity import Identity, IdentitySource
from shopping.sync.engine import SyncEngine
from shopping.wishlist.fake_remote import FakeWishlistRemote
from shopping.wishlist.store import WishlistStore

CATALOGUE_RECORDS = [
    {
        "id": "1",
        "name": "Men's Crewneck Sweatshirt",
        "price": 10.99,
        "category": "tops",
        "sizes": ["XS", "S", "M", "L", "XL"],
        "colors": ["Black", "White", "Navy", "Gray"],
    },
    {
        "id": "2",
        "name": "Slim Fit Denim Jeans",
        "price": 20.99,
        "category": "bottoms",
        "sizes": ["28", "30", "32", "34", "36"],
        "colors": ["Dark Blue", "Light Blue", "Black"],
    },
    {
        "id": "3",
        "name": "Canvas Tote",
        "price": 7.5,
        "category": "accessories",
        "sizes": [],
        "colors": [],
    },
]


@pytest.fixture(scope="session")
def shopping_bed():
    from shopping.domain import shopping

    bed = DomainFixture(shopping)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(shopping_bed):
    with shopping_bed.domain_context():
        yield


@pytest.fixture()
def catalogue():
    return Catalogue.from_records(CATALOGUE_RECORDS)


@pytest.fixture()
def sweatshirt(catalogue) -> Product:
    return catalogue.get("1")


@pytest.fixture()
def jeans(catalogue) -> Product:
    return catalogue.get("2")


@pytest.fixture()
def tote(catalogue) -> Product:
    return catalogue.get("3")


@pytest.fixture()
def identity():
    return Identity(user_id="user-001", email="ada@example.com", name="Ada")


@pytest.fixture()
def identity_source():
    return IdentitySource()


@pytest.fixture()
def remote():
    return FakeWishlistRemote()


@pytest.fixture()
def notifier():
    return FakeNotifier()


@pytest.fixture()
def cart_store():
    return CartStore(session_id="sess-001")


@pytest.fixture()
def wishlist_store(remote, identity_source):
    store = WishlistStore(remote, engine=SyncEngine(timeout=5), identity_source=identity_source)
    yield store
    store.close()
