"""Application service: Shipping Rate Auto-Selector.

Guarantees a shipping rate is selected whenever the remote cart offers
rates and none is chosen yet: on first load and again after an address
update.  Two states, derived from the cart itself:

  UNSELECTED: rates exist, none has ``selected = true``
  SELECTED:   some rate is selected (or there is nothing to select)
"""

from __future__ import annotations

import logging
from enum import Enum

from storefront.application.notifier import Notifier
from storefront.application.remote_cart_sync import RemoteCartSynchronizer
from storefront.domain.exceptions import NetworkError
from storefront.domain.model.remote_cart import RemoteCart

logger = logging.getLogger(__name__)


class SelectionState(Enum):
    UNSELECTED = "UNSELECTED"
    SELECTED = "SELECTED"


class ShippingRateAutoSelector:

    def __init__(self, synchronizer: RemoteCartSynchronizer, notifier: Notifier) -> None:
        self._synchronizer = synchronizer
        self._notifier = notifier
        self._pending = False

    @property
    def is_pending(self) -> bool:
        return self._pending

    @staticmethod
    def state_of(cart: RemoteCart | None) -> SelectionState:
        if cart is None or not cart.shipping_rates:
            return SelectionState.SELECTED
        if cart.selected_rate is not None:
            return SelectionState.SELECTED
        return SelectionState.UNSELECTED

    async def evaluate(self, cart: RemoteCart | None) -> RemoteCart | None:
        """Select the first rate if *cart* needs one.

        Returns the cart after selection, or *cart* unchanged when nothing
        was done (already selected, no rates, a request in flight, or the
        request failed).
        """
        if self.state_of(cart) is SelectionState.SELECTED or self._pending:
            return cart

        first = cart.shipping_rates[0]
        logger.info("Auto-selecting shipping rate %s (%s)", first.rate_id, first.name)
        self._pending = True
        try:
            return await self._synchronizer.select_rate(first.rate_id)
        except NetworkError as exc:
            logger.error("Rate selection failed: %s", exc.message)
            self._notifier.error("Shipping Selection Failed", exc.message)
            return cart
        finally:
            self._pending = False
