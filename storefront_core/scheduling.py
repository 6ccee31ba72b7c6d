"""
Scheduling Engine for Pickup and Delivery Slots.

Generates the slots a customer may pick at checkout and re-validates the
chosen slot before the order is submitted.

Which hours apply:
------------------
- **delivery**: ``store.delivery_schedule[day]`` only. A day without an
  entry, with ``closed`` set, or without ``enabled`` is closed for delivery.
  A store with no delivery schedule at all never offers delivery slots.
- **pickup**: ``store.business_hours[day]``, then ``store.weekly_schedule[day]``,
  then ``store.pickup_schedule[day]``. Closed when ``closed`` is set or
  ``enabled`` is explicitly false.
- **special dates** override the resolved window for their calendar date, or
  close the day entirely.

Same-day rules:
---------------
Today is skipped entirely when any cart product is out of stock today or
disallows same-day scheduling. Otherwise today's slots are dropped once the
channel's cutoff time has passed, and slots closer than the lead time to
"now" are never offered.

Stock gate:
-----------
When a cart is given, a day is offered only if every stock-tracked product
in it is in stock on that day. Future days count as reset, so a product sold
out today does not block tomorrow.

``get_available_slots`` is advisory. Checkout must call
``can_schedule_order`` with the final choice because stock and cart contents
may change between listing and submission.
"""

import logging
from datetime import date, datetime, time, timedelta
from typing import Any, Iterable, List, Optional, Tuple

from pydantic import ValidationError

from . import config
from .clock import day_name, hhmm_to_minutes, minutes_of_day
from .config import SchedulingSettings
from .schemas._coerce import to_int
from .schemas.catalog import CartItem
from .schemas.stores import ScheduleDecision, SchedulingOption, Store
from .stock import StockManager

logger = logging.getLogger(__name__)

DELIVERY = "delivery"
PICKUP = "pickup"

REASON_SCHEDULING_DISABLED = "Scheduling is not available for this store."
REASON_INVALID_SLOT = "Please choose a valid date and time."
REASON_PAST_DATE = "The selected date has already passed."
REASON_OUT_OF_STOCK_TODAY = "Some products are sold out for today. Please choose a later date."
REASON_NO_SAME_DAY = "Some products cannot be scheduled for today. Please choose a later date."
REASON_CUTOFF_PASSED = "Orders for today are closed. Please choose a later date."
REASON_DELIVERY_UNAVAILABLE = "Delivery is not available on this day of the week."
REASON_STORE_CLOSED = "The store is closed on this day of the week."
REASON_SPECIAL_DATE_CLOSED = "The store is closed on this date."
REASON_SPECIAL_DATE_NOTE = "The store is closed on this date: {description}."
REASON_TOO_SOON = "Please choose a time at least {minutes} minutes from now."
REASON_OUTSIDE_HOURS = "Time outside opening hours ({start} to {end})."

Window = Tuple[int, int]


def _format_minutes(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def _coerce_cart(cart_items: Optional[Iterable[Any]]) -> Optional[List[CartItem]]:
    """Validate cart lines, dropping entries that are not cart items at all."""
    if cart_items is None:
        return None
    items: List[CartItem] = []
    for raw in cart_items:
        if isinstance(raw, CartItem):
            items.append(raw)
        elif isinstance(raw, dict):
            try:
                items.append(CartItem.model_validate(raw))
            except ValidationError:
                logger.warning("Ignoring malformed cart line: %r", raw)
    return items


def _coerce_day(value: Any) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError:
            return None
    return None


def _coerce_time_of_day(value: Any) -> Optional[int]:
    if isinstance(value, time):
        return value.hour * 60 + value.minute
    return hhmm_to_minutes(value)


def resolve_window(store: Store, delivery_type: str, day: date) -> Optional[Window]:
    """
    Opening window (start, end) in minutes for ``day`` on the given channel.

    Returns None when the channel is closed that day or its hours are
    unusable.
    """
    name = day_name(day)

    if delivery_type == DELIVERY:
        schedule = store.delivery_schedule.get(name)
        if not schedule or schedule.closed or not schedule.enabled:
            return None
    elif delivery_type == PICKUP:
        schedule = (
            store.business_hours.get(name)
            or store.weekly_schedule.get(name)
            or store.pickup_schedule.get(name)
        )
        if not schedule or schedule.closed or schedule.enabled is False:
            return None
    else:
        return None

    start, end = schedule.window_start, schedule.window_end

    special = store.special_date_for(day)
    if special is not None:
        if special.closed:
            return None
        start = special.open or start
        end = special.close or end

    start_minutes, end_minutes = hhmm_to_minutes(start), hhmm_to_minutes(end)
    if start_minutes is None or end_minutes is None:
        return None
    return start_minutes, end_minutes


def _slot_grid(window: Window, interval: int) -> List[int]:
    """
    Slot start times (minutes) inside the window, both ends inclusive.

    Slots step by ``interval`` from the top of the opening hour, so a 09:15
    opening with 30-minute slots starts at 09:30 and a 10:00 opening with
    45-minute slots gives 10:00, 10:45, 11:30.
    """
    anchor = window[0] - window[0] % 60
    first = anchor + -(-(window[0] - anchor) // interval) * interval
    return list(range(first, window[1] + 1, interval))


def _cart_blocks_today(items: Optional[List[CartItem]], now: datetime) -> bool:
    for item in items or []:
        product = item.product
        if product.tracks_stock and not StockManager.check_daily_stock(product, now):
            return True
        if not product.allow_same_day_scheduling:
            return True
    return False


def _cart_in_stock_on(items: List[CartItem], moment: datetime) -> bool:
    return all(
        StockManager.check_daily_stock(item.product, moment)
        for item in items
        if item.product.tracks_stock
    )


def _cutoff_passed(store: Store, delivery_type: str, now: datetime) -> bool:
    cutoff = hhmm_to_minutes(store.cutoff_for(delivery_type))
    return cutoff is not None and minutes_of_day(now) > cutoff


class SchedulingManager:
    """Slot generation and validation. Every method accepts an explicit ``now``."""

    @staticmethod
    def get_available_slots(
        store: Any,
        delivery_type: str,
        days_ahead: Optional[int] = None,
        cart_items: Optional[Iterable[Any]] = None,
        now: Optional[datetime] = None,
        settings: Optional[SchedulingSettings] = None,
    ) -> List[SchedulingOption]:
        """
        List bookable slots from today (or tomorrow) through ``days_ahead`` days out.

        Args:
            store: Store model, dict or ORM row
            delivery_type: "delivery" or "pickup"
            days_ahead: Last day offset to include (defaults to settings)
            cart_items: Cart lines whose stock constrains which days are offered
            now: Reference local time (defaults to the wall clock)
            settings: Slot interval, lead time and default days ahead

        Returns:
            Slots in chronological order
        """
        store = Store.coerce(store)
        settings = settings or config.get_scheduling_settings()
        now = now if now is not None else datetime.now()
        delivery_type = (delivery_type or "").strip().lower()
        last_offset = settings.days_ahead if days_ahead is None else to_int(days_ahead, 0)

        if not store.allow_scheduling:
            return []

        items = _coerce_cart(cart_items)
        start_offset = 1 if _cart_blocks_today(items, now) else 0
        interval = max(settings.slot_interval_minutes, 1)

        slots: List[SchedulingOption] = []
        for offset in range(start_offset, last_offset + 1):
            moment = now + timedelta(days=offset)
            day = moment.date()

            window = resolve_window(store, delivery_type, day)
            if window is None:
                continue

            if items is not None and not _cart_in_stock_on(items, moment):
                continue

            is_today = offset == 0
            if is_today and _cutoff_passed(store, delivery_type, now):
                continue
            earliest_today = minutes_of_day(now) + settings.same_day_lead_minutes

            for slot_minutes in _slot_grid(window, interval):
                if is_today and slot_minutes <= earliest_today:
                    continue
                slots.append(
                    SchedulingOption(
                        date=day.isoformat(),
                        time=_format_minutes(slot_minutes),
                        available=True,
                    )
                )

        logger.debug(
            "Generated %d %s slot(s) for store %s over %d day(s)",
            len(slots), delivery_type, store.id, last_offset + 1,
        )
        return slots

    @staticmethod
    def can_schedule_order(
        store: Any,
        cart_items: Optional[Iterable[Any]],
        delivery_type: str,
        scheduled_date: Any,
        scheduled_time: Any,
        now: Optional[datetime] = None,
        settings: Optional[SchedulingSettings] = None,
    ) -> ScheduleDecision:
        """
        Validate a chosen slot right before the order is submitted.

        Returns:
            ScheduleDecision; on decline, ``reason`` explains the first rule
            that failed and can be shown to the customer as-is.
        """
        store = Store.coerce(store)
        settings = settings or config.get_scheduling_settings()
        now = now if now is not None else datetime.now()
        delivery_type = (delivery_type or "").strip().lower()

        def decline(reason: str) -> ScheduleDecision:
            logger.info("Declined %s slot %s %s: %s", delivery_type, scheduled_date, scheduled_time, reason)
            return ScheduleDecision(can_schedule=False, reason=reason)

        if not store.allow_scheduling:
            return decline(REASON_SCHEDULING_DISABLED)

        day = _coerce_day(scheduled_date)
        slot_minutes = _coerce_time_of_day(scheduled_time)
        if day is None or slot_minutes is None:
            return decline(REASON_INVALID_SLOT)

        today = now.date()
        if day < today:
            return decline(REASON_PAST_DATE)
        is_today = day == today

        items = _coerce_cart(cart_items) or []
        if is_today:
            if any(
                item.product.tracks_stock and not StockManager.check_daily_stock(item.product, now)
                for item in items
            ):
                return decline(REASON_OUT_OF_STOCK_TODAY)
            if any(not item.product.allow_same_day_scheduling for item in items):
                return decline(REASON_NO_SAME_DAY)
            if _cutoff_passed(store, delivery_type, now):
                return decline(REASON_CUTOFF_PASSED)

        special = store.special_date_for(day)
        if special is not None and special.closed:
            if special.description:
                return decline(REASON_SPECIAL_DATE_NOTE.format(description=special.description))
            return decline(REASON_SPECIAL_DATE_CLOSED)

        window = resolve_window(store, delivery_type, day)
        if window is None:
            if delivery_type == DELIVERY:
                return decline(REASON_DELIVERY_UNAVAILABLE)
            return decline(REASON_STORE_CLOSED)

        if slot_minutes < window[0] or slot_minutes > window[1]:
            return decline(
                REASON_OUTSIDE_HOURS.format(
                    start=_format_minutes(window[0]), end=_format_minutes(window[1])
                )
            )

        if is_today and slot_minutes <= minutes_of_day(now) + settings.same_day_lead_minutes:
            return decline(REASON_TOO_SOON.format(minutes=settings.same_day_lead_minutes))

        return ScheduleDecision(can_schedule=True)


get_available_slots = SchedulingManager.get_available_slots
can_schedule_order = SchedulingManager.can_schedule_order


# =============================================================================
# Slot List Helpers
# =============================================================================

def slots_by_date(slots: Iterable[SchedulingOption], day: Any) -> List[SchedulingOption]:
    """Slots falling on ``day`` (date or "YYYY-MM-DD")."""
    target = _coerce_day(day)
    if target is None:
        return []
    key = target.isoformat()
    return [slot for slot in slots if slot.date == key]


def is_slot_available(slots: Iterable[SchedulingOption], day: Any, slot_time: str) -> bool:
    for slot in slots_by_date(slots, day):
        if slot.time == slot_time:
            return slot.available
    return False


def next_available_slot(slots: Iterable[SchedulingOption]) -> Optional[SchedulingOption]:
    for slot in slots:
        if slot.available:
            return slot
    return None


def is_store_open(store: Any, now: Optional[datetime] = None) -> bool:
    """Is the store inside today's general opening hours right now?"""
    store = Store.coerce(store)
    now = now if now is not None else datetime.now()
    name = day_name(now)

    schedule = store.business_hours.get(name) or store.weekly_schedule.get(name)
    if not schedule or schedule.closed:
        return False

    start, end = schedule.window_start, schedule.window_end
    special = store.special_date_for(now.date())
    if special is not None:
        if special.closed:
            return False
        start = special.open or start
        end = special.close or end

    start_minutes, end_minutes = hhmm_to_minutes(start), hhmm_to_minutes(end)
    if start_minutes is None or end_minutes is None:
        return False
    return start_minutes <= minutes_of_day(now) <= end_minutes
