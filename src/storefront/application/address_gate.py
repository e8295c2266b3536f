"""Application service: Address Update Gate.

Each address update makes the backend recalculate shipping, and
WooCommerce-style backends reject half-typed postcodes.  The gate only
forwards an address when its country's readiness rules pass, and then
only after the fields have been quiet for a while:

- not ready            -> cancel any pending send
- first ready change   -> send immediately (pre-filled from a profile)
- later ready changes  -> send after ``delay`` seconds of quiescence

Right before sending the strict payload schema is checked again; on the
automatic path a failure there is logged and dropped.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

from storefront.application.notifier import Notifier
from storefront.application.remote_cart_sync import RemoteCartSynchronizer
from storefront.application.shipping_auto_select import ShippingRateAutoSelector
from storefront.domain.exceptions import NetworkError, ValidationError
from storefront.domain.model.address import Address, rules_for, validate_address
from storefront.domain.model.remote_cart import RemoteCart

logger = logging.getLogger(__name__)

AUTO_UPDATE_DELAY = 1.0


class DebounceTimer:
    """A cancellable one-shot timer that runs a coroutine when it fires.

    Cancelling only stops a timer that has not fired yet; a callback that
    already started runs to completion.
    """

    def __init__(self) -> None:
        self._handle: asyncio.TimerHandle | None = None
        self._running: set[asyncio.Task] = set()

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def schedule(self, delay: float, callback: Callable[[], Awaitable[object]]) -> None:
        self.cancel()
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(delay, self._fire, callback)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    async def wait(self) -> None:
        """Wait for callbacks that already fired."""
        while self._running:
            await asyncio.gather(*self._running, return_exceptions=True)

    def _fire(self, callback: Callable[[], Awaitable[object]]) -> None:
        self._handle = None
        task = asyncio.ensure_future(callback())
        self._running.add(task)
        task.add_done_callback(self._done)

    def _done(self, task: asyncio.Task) -> None:
        self._running.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Debounced callback failed: %s", exc)


class AddressGate:

    def __init__(
        self,
        synchronizer: RemoteCartSynchronizer,
        auto_selector: ShippingRateAutoSelector,
        notifier: Notifier,
        delay: float = AUTO_UPDATE_DELAY,
    ) -> None:
        self._synchronizer = synchronizer
        self._auto_selector = auto_selector
        self._notifier = notifier
        self._delay = delay
        self._timer = DebounceTimer()
        self._first_run = True

    @property
    def pending(self) -> bool:
        return self._timer.pending

    def on_change(self, address: Address) -> bool:
        """React to an edit of any address field.

        Returns True when a send was scheduled.
        """
        if not rules_for(address.country).is_ready(address):
            self.cancel()
            return False

        delay = 0.0 if self._first_run else self._delay
        self._first_run = False
        logger.info(
            "Address changed, scheduling update in %.1fs (city=%s, postcode=%s, country=%s)",
            delay, address.city.strip(), address.postcode.strip(), address.country,
        )
        self.schedule(address, delay)
        return True

    def schedule(self, address: Address, delay: float) -> None:
        self._timer.schedule(delay, lambda: self._send(address))

    def cancel(self) -> None:
        self._timer.cancel()

    def close(self) -> None:
        """Owner went away: drop the pending send, keep in-flight ones."""
        self.cancel()

    async def flush(self) -> None:
        """Wait for sends that already started."""
        await self._timer.wait()

    async def submit(self, address: Address) -> RemoteCart | None:
        """Explicit, user-submitted update.

        Raises ValidationError naming the first violated rule.
        """
        self.cancel()
        payload = validate_address(address)
        return await self._push(payload)

    # --- Internal helpers -----------------------------------------------------

    async def _send(self, address: Address) -> RemoteCart | None:
        try:
            payload = validate_address(address)
        except ValidationError as exc:
            logger.warning("Address invalid for auto-update: %s", exc)
            return None
        return await self._push(payload)

    async def _push(self, payload: dict[str, str]) -> RemoteCart | None:
        logger.info("Sending address update (country=%s)", payload.get("country"))
        try:
            cart = await self._synchronizer.update_address(payload)
        except NetworkError as exc:
            logger.error("Address update failed: %s", exc.message)
            self._notifier.error("Address Update Failed", exc.message)
            return None
        return await self._auto_selector.evaluate(cart)
