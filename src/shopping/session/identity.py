"""Signed-in identity and the source that announces changes to it.

The authentication provider itself lives outside this package. All the
shopping core needs is the current identity (or None) and a notification
whenever it changes.
"""

from collections.abc import Awaitable, Callable

import structlog
from protean.fields import Identifier, String

from shopping.domain import shopping

logger = structlog.get_logger(__name__)


@shopping.value_object
class Identity:
    """The authenticated user handle gating wishlist operations."""

    user_id = Identifier(required=True)
    email = String(max_length=254)
    name = String(max_length=255)


IdentityListener = Callable[["Identity | None"], Awaitable]


class IdentitySource:
    def __init__(self, identity: Identity | None = None):
        self._current = identity
        self._listeners: list[IdentityListener] = []

    @property
    def current(self) -> Identity | None:
        return self._current

    @property
    def is_authenticated(self) -> bool:
        return self._current is not None

    def subscribe(self, listener: IdentityListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def sign_in(self, identity: Identity) -> list:
        return await self._change(identity)

    async def sign_out(self) -> list:
        return await self._change(None)

    async def _change(self, identity: Identity | None) -> list:
        """Set the identity and await every listener, in subscription order."""
        previous = self._current
        if previous == identity:
            return []

        self._current = identity
        logger.info(
            "Identity changed",
            previous_user_id=str(previous.user_id) if previous else None,
            user_id=str(identity.user_id) if identity else None,
        )

        results = []
        for listener in list(self._listeners):
            results.append(await listener(identity))
        return results
