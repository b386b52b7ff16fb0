"""Shopping bounded context — client-side Cart and Wishlist.

Holds the session-local shopping cart (merge-by-variant line items with
derived totals) and the identity-bound wishlist that mirrors a remote
document store through optimistic writes.
"""

import structlog
from protean.domain import Domain

shopping = Domain(name="shopping")

logger = structlog.get_logger(__name__)
