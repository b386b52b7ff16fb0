"""Storefront — application service behind the shopper's cart and wishlist actions.

Composes the catalogue, the identity source, both stores and a notification
adapter. Each public flow validates the shopper's input, drives the stores
and emits exactly one notification describing the outcome.

Usage:
    configure_logging(settings.log_level, json=settings.log_json)
    shopping.init()
    with shopping.domain_context():
        storefront = create_storefront(catalogue, FakeWishlistRemote())
        storefront.quick_add("1")
        await storefront.identity.sign_in(Identity(user_id="u-1"))
        await storefront.toggle_wishlist("1")
"""

import structlog
from protean.exceptions import ObjectNotFoundError

from shopping.cart.keys import normalize_option
from shopping.cart.state import CartState
from shopping.cart.store import CartStore
from shopping.catalogue.product import Catalogue
from shopping.config import Settings
from shopping.notifications.logging_adapter import LoggingNotifier
from shopping.notifications.port import NotificationKind, NotificationPort
from shopping.session.identity import IdentitySource
from shopping.sync.engine import SyncEngine
from shopping.sync.outcome import SyncOutcome
from shopping.wishlist.polling import PollingWishlistRemote
from shopping.wishlist.remote_port import WishlistRemote
from shopping.wishlist.store import WishlistStore

logger = structlog.get_logger(__name__)


class Storefront:
    def __init__(
        self,
        catalogue: Catalogue,
        cart: CartStore,
        wishlist: WishlistStore,
        identity: IdentitySource,
        notifier: NotificationPort,
    ):
        self.catalogue = catalogue
        self.cart = cart
        self.wishlist = wishlist
        self.identity = identity
        self.notifier = notifier

    def _notify(self, kind: NotificationKind, title: str, message: str) -> None:
        self.notifier.notify(kind, title, message)

    def _find_product(self, product_id):
        try:
            return self.catalogue.get(product_id)
        except ObjectNotFoundError:
            logger.warning("Storefront action on unknown product", product_id=str(product_id))
            self._notify(
                NotificationKind.WARNING,
                "Product Unavailable",
                "This product is no longer available.",
            )
            return None

    # -------------------------------------------------------------------
    # Cart flows
    # -------------------------------------------------------------------
    def add_to_cart(self, product_id, size=None, color=None, quantity=1) -> CartState:
        """Add the selected variant of a product to the cart."""
        product = self._find_product(product_id)
        if product is None:
            return self.cart.state

        size = normalize_option(size)
        color = normalize_option(color)
        if (product.sizes and not size) or (product.colors and not color):
            self._notify(
                NotificationKind.WARNING,
                "Selection Required",
                "Please select a size and color before adding to cart.",
            )
            return self.cart.state

        sizes = [normalize_option(s) for s in product.sizes or []]
        colors = [normalize_option(c) for c in product.colors or []]
        if (sizes and size not in sizes) or (colors and color not in colors):
            self._notify(
                NotificationKind.WARNING,
                "Selection Unavailable",
                f"{product.name} is not offered in {size} / {color}.",
            )
            return self.cart.state

        if quantity is None or quantity < 1:
            self._notify(NotificationKind.WARNING, "Invalid Quantity", "Quantity must be at least 1.")
            return self.cart.state

        state = self.cart.add_item(product, size, color, quantity)
        self._notify(
            NotificationKind.SUCCESS,
            "Added to Cart",
            f"{product.name} has been added to your cart.",
        )
        return state

    def quick_add(self, product_id) -> CartState:
        """Add a product in its default (first listed) size and color."""
        product = self._find_product(product_id)
        if product is None:
            return self.cart.state
        return self.add_to_cart(product_id, product.default_size, product.default_color)

    def update_cart_quantity(self, key, new_quantity) -> CartState:
        line = self.cart.state.line(key)
        if line is None:
            self._notify(NotificationKind.WARNING, "Item Not in Cart", "That item is no longer in your cart.")
            return self.cart.state

        state = self.cart.update_quantity(key, new_quantity)
        if state.line(key) is None:
            self._notify(
                NotificationKind.INFO,
                "Removed from Cart",
                f"{line.product.name} has been removed from your cart.",
            )
        else:
            self._notify(
                NotificationKind.INFO,
                "Cart Updated",
                f"{line.product.name} quantity is now {state.line(key).quantity}.",
            )
        return state

    def remove_from_cart(self, key) -> CartState:
        line = self.cart.state.line(key)
        if line is None:
            self._notify(NotificationKind.WARNING, "Item Not in Cart", "That item is no longer in your cart.")
            return self.cart.state

        state = self.cart.remove_item(key)
        self._notify(
            NotificationKind.INFO,
            "Removed from Cart",
            f"{line.product.name} has been removed from your cart.",
        )
        return state

    def clear_cart(self) -> CartState:
        state = self.cart.clear()
        self._notify(NotificationKind.INFO, "Cart Cleared", "Your cart is now empty.")
        return state

    # -------------------------------------------------------------------
    # Wishlist flows
    # -------------------------------------------------------------------
    def _notify_wishlist_problem(self, outcome: SyncOutcome, product) -> None:
        if outcome.skipped:
            self._notify(
                NotificationKind.WARNING,
                "Sign In Required",
                "Please sign in to use your wishlist.",
            )
        else:
            self._notify(
                NotificationKind.ERROR,
                "Wishlist Update Failed",
                f"We couldn't update your wishlist for {product.name}: {outcome.reason}",
            )

    async def toggle_wishlist(self, product_id) -> SyncOutcome | None:
        """Add the product to the wishlist, or remove it when already there."""
        product = self._find_product(product_id)
        if product is None:
            return None

        if self.wishlist.is_in_wishlist(product.product_id):
            outcome = await self.wishlist.remove_from_wishlist(product.product_id)
            if outcome.ok:
                self._notify(
                    NotificationKind.INFO,
                    "Removed from Wishlist",
                    f"{product.name} has been removed from your wishlist.",
                )
            else:
                self._notify_wishlist_problem(outcome, product)
            return outcome

        outcome = await self.wishlist.add_to_wishlist(product)
        if outcome.ok:
            self._notify(
                NotificationKind.SUCCESS,
                "Added to Wishlist",
                f"{product.name} has been added to your wishlist.",
            )
        else:
            self._notify_wishlist_problem(outcome, product)
        return outcome

    async def move_to_cart(self, product_id) -> SyncOutcome | None:
        """Add a wishlisted product to the cart in its default variant, then unwishlist it."""
        entry = next((e for e in self.wishlist.state.items if e.product_id == str(product_id)), None)
        if entry is None:
            self._notify(
                NotificationKind.WARNING,
                "Not in Wishlist",
                "That product is no longer in your wishlist.",
            )
            return None

        product = entry.product
        self.cart.add_item(product, product.default_size, product.default_color)

        outcome = await self.wishlist.remove_from_wishlist(product.product_id)
        if outcome.ok:
            self._notify(
                NotificationKind.SUCCESS,
                "Added to Cart",
                f"{product.name} has been moved to your cart.",
            )
        else:
            self._notify(
                NotificationKind.ERROR,
                "Wishlist Update Failed",
                f"{product.name} was added to your cart but is still in your wishlist: {outcome.reason}",
            )
        return outcome

    async def retry_wishlist(self) -> SyncOutcome:
        outcome = await self.wishlist.retry()
        if outcome.ok:
            self._notify(NotificationKind.SUCCESS, "Wishlist Loaded", "Your wishlist is up to date.")
        elif outcome.skipped:
            self._notify(NotificationKind.WARNING, "Sign In Required", "Please sign in to use your wishlist.")
        else:
            self._notify(NotificationKind.ERROR, "Wishlist Unavailable", f"We couldn't load your wishlist: {outcome.reason}")
        return outcome

    def close(self) -> None:
        self.cart.close()
        self.wishlist.close()


def create_storefront(
    catalogue: Catalogue,
    remote: WishlistRemote,
    notifier: NotificationPort | None = None,
    identity: IdentitySource | None = None,
    settings: Settings | None = None,
    poll: bool = False,
) -> Storefront:
    """Wire a storefront session. ``poll`` wraps a remote that has no push feed."""
    settings = settings or Settings.from_env()
    identity = identity or IdentitySource()
    if poll:
        remote = PollingWishlistRemote(
            remote, interval=settings.poll_interval_seconds, timeout=settings.remote_timeout_seconds
        )

    engine = SyncEngine(timeout=settings.remote_timeout_seconds)
    return Storefront(
        catalogue=catalogue,
        cart=CartStore(),
        wishlist=WishlistStore(remote, engine=engine, identity_source=identity),
        identity=identity,
        notifier=notifier or LoggingNotifier(),
    )
