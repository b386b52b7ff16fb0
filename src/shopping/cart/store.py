"""CartStore — the explicit handle the UI layer holds for one shopping session.

The store owns a Cart aggregate for the life of the session and is the only
way to change it. Every action is applied synchronously; listeners receive a
fresh immutable CartState plus the domain events the change raised.
"""

from collections.abc import Callable

import structlog
from protean.exceptions import ValidationError

from shopping.cart.actions import AddItem, ClearCart, RemoveItem, UpdateQuantity
from shopping.cart.cart import Cart
from shopping.cart.state import CartState

logger = structlog.get_logger(__name__)

CartListener = Callable[[CartState, list], None]


class CartStore:
    def __init__(self, cart: Cart | None = None, session_id: str | None = None):
        self._cart = cart if cart is not None else Cart.create(session_id=session_id)
        self._listeners: list[CartListener] = []
        self._closed = False
        self._state = CartState.from_cart(self._cart)
        self._handlers = {
            AddItem: self._handle_add_item,
            UpdateQuantity: self._handle_update_quantity,
            RemoveItem: self._handle_remove_item,
            ClearCart: self._handle_clear,
        }

    @property
    def cart_id(self) -> str:
        return str(self._cart.id)

    @property
    def state(self) -> CartState:
        return self._state

    # -------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------
    def add_item(self, product, size, color, quantity=1) -> CartState:
        return self.dispatch(AddItem(product=product, size=size, color=color, quantity=quantity))

    def update_quantity(self, key, new_quantity) -> CartState:
        return self.dispatch(UpdateQuantity(key=key, new_quantity=new_quantity))

    def remove_item(self, key) -> CartState:
        return self.dispatch(RemoveItem(key=key))

    def clear(self) -> CartState:
        return self.dispatch(ClearCart())

    def dispatch(self, action) -> CartState:
        """Apply one cart action and return the resulting snapshot."""
        handler = self._handlers.get(type(action))
        if handler is None:
            raise TypeError(f"Unsupported cart action: {type(action).__name__}")

        if self._closed:
            logger.warning("Cart action ignored on a closed store", cart_id=self.cart_id, action=type(action).__name__)
            return self._state

        try:
            changed = handler(action)
        except ValidationError as exc:
            logger.warning(
                "Cart action rejected",
                cart_id=self.cart_id,
                action=type(action).__name__,
                error=str(exc.messages),
            )
            return self._state

        if changed:
            self._publish()
        else:
            logger.debug("Cart action left the cart unchanged", cart_id=self.cart_id, action=type(action).__name__)
        return self._state

    # -------------------------------------------------------------------
    # Handlers
    # -------------------------------------------------------------------
    def _handle_add_item(self, action: AddItem) -> bool:
        self._cart.add_item(action.product, action.size, action.color, action.quantity)
        return True

    def _handle_update_quantity(self, action: UpdateQuantity) -> bool:
        return self._cart.update_quantity(action.key, action.new_quantity)

    def _handle_remove_item(self, action: RemoveItem) -> bool:
        return self._cart.remove_item(action.key)

    def _handle_clear(self, action: ClearCart) -> bool:
        return self._cart.clear()

    # -------------------------------------------------------------------
    # Observation
    # -------------------------------------------------------------------
    def subscribe(self, listener: CartListener) -> Callable[[], None]:
        """Register a listener; returns a callable that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def close(self) -> None:
        """Stop accepting actions and drop all listeners."""
        self._closed = True
        self._listeners.clear()

    def _publish(self) -> None:
        events = list(self._cart._events)
        self._cart._events.clear()
        self._state = CartState.from_cart(self._cart)

        for listener in list(self._listeners):
            listener(self._state, events)
