"""Domain events for the Wishlist aggregate."""

from protean.fields import DateTime, Identifier, Integer, String

from shopping.domain import shopping


@shopping.event(part_of="Wishlist")
class WishlistSessionStarted:
    """A signed-in identity was bound to the wishlist; loading has begun."""

    __version__ = 1

    wishlist_id = Identifier(required=True)
    user_id = Identifier(required=True)


@shopping.event(part_of="Wishlist")
class WishlistItemAdded:
    """A product was optimistically added to the wishlist."""

    __version__ = 1

    wishlist_id = Identifier(required=True)
    user_id = Identifier()
    product_id = Identifier(required=True)
    added_at = DateTime(required=True)


@shopping.event(part_of="Wishlist")
class WishlistItemRemoved:
    """A product was optimistically removed from the wishlist."""

    __version__ = 1

    wishlist_id = Identifier(required=True)
    user_id = Identifier()
    product_id = Identifier(required=True)


@shopping.event(part_of="Wishlist")
class WishlistChangeReverted:
    """An optimistic change was undone after its remote write failed."""

    __version__ = 1

    wishlist_id = Identifier(required=True)
    user_id = Identifier()
    product_id = Identifier(required=True)
    operation = String(required=True, max_length=50)


@shopping.event(part_of="Wishlist")
class WishlistReplaced:
    """Local items were replaced wholesale by an authoritative snapshot."""

    __version__ = 1

    wishlist_id = Identifier(required=True)
    user_id = Identifier()
    item_count = Integer(required=True)


@shopping.event(part_of="Wishlist")
class WishlistSyncFailed:
    """Loading or writing the remote wishlist failed."""

    __version__ = 1

    wishlist_id = Identifier(required=True)
    user_id = Identifier()
    operation = String(required=True, max_length=50)
    reason = String(max_length=500)


@shopping.event(part_of="Wishlist")
class WishlistCleared:
    """The identity went away and the wishlist was emptied."""

    __version__ = 1

    wishlist_id = Identifier(required=True)
    previous_user_id = Identifier()
