"""
Store Scheduling Schemas
========================

Pydantic models for the scheduling-relevant part of a store's configuration
and for the results the scheduling engine returns.

Schedules:
----------
A store carries up to four day-name keyed schedules:

- ``business_hours`` / ``weekly_schedule``: ``{open, close, closed}`` per day.
  These govern pickup and the store's general opening hours.
- ``delivery_schedule`` / ``pickup_schedule``: ``{start, end, enabled}`` per
  day. Channel-specific windows configured by the merchant.

Keys are normalized to lowercase English day names. Numeric keys ("0".."6",
Sunday first) are accepted for legacy rows. Entries that are not mappings are
dropped, which makes that day closed for the schedule in question.

Special Dates:
--------------
``special_dates`` override the weekly pattern for a calendar date: either the
store is closed that day, or it opens with different hours.

Cutoff Times:
-------------
``same_day_cutoff_time`` is the general "no more orders for today after"
time. ``delivery_cutoff_time`` and ``pickup_cutoff_time`` override it per
channel. Malformed values are treated as unset.
"""

import datetime as dt
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator, model_validator

from ..clock import parse_hhmm
from ._coerce import to_bool, to_optional_str

DeliveryType = Literal["delivery", "pickup"]

_NUMERIC_DAY_KEYS = {
    "0": "sunday",
    "1": "monday",
    "2": "tuesday",
    "3": "wednesday",
    "4": "thursday",
    "5": "friday",
    "6": "saturday",
}


def _coerce_time(v) -> Optional[str]:
    parsed = parse_hhmm(v)
    if parsed is None:
        return None
    return f"{parsed[0]:02d}:{parsed[1]:02d}"


class DaySchedule(BaseModel):
    """
    Opening window for one weekday.

    Business-hours style entries use ``open``/``close``; channel schedules use
    ``start``/``end`` plus ``enabled``. ``enabled`` stays None when the entry
    does not carry the flag at all.
    """
    model_config = ConfigDict(extra="ignore")

    open: Optional[str] = None
    close: Optional[str] = None
    start: Optional[str] = None
    end: Optional[str] = None
    closed: bool = False
    enabled: Optional[bool] = None

    @field_validator("open", "close", "start", "end", mode="before")
    @classmethod
    def _coerce_times(cls, v):
        return _coerce_time(v)

    @field_validator("closed", mode="before")
    @classmethod
    def _coerce_closed(cls, v):
        return to_bool(v, False)

    @field_validator("enabled", mode="before")
    @classmethod
    def _coerce_enabled(cls, v):
        if v is None:
            return None
        return to_bool(v, False)

    @property
    def window_start(self) -> Optional[str]:
        return self.start or self.open

    @property
    def window_end(self) -> Optional[str]:
        return self.end or self.close


class SpecialDate(BaseModel):
    """A calendar date overriding the weekly pattern (holiday, special hours)."""
    model_config = ConfigDict(extra="ignore")

    date: dt.date
    open: Optional[str] = None
    close: Optional[str] = None
    closed: bool = False
    description: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _lift_legacy_fields(cls, data):
        """Accept the legacy ``special_hours``/``reason`` shape."""
        if not isinstance(data, dict):
            return data
        data = dict(data)
        special_hours = data.pop("special_hours", None)
        if isinstance(special_hours, dict):
            data.setdefault("open", special_hours.get("open"))
            data.setdefault("close", special_hours.get("close"))
        if data.get("description") is None and data.get("reason"):
            data["description"] = data.get("reason")
        return data

    @field_validator("date", mode="before")
    @classmethod
    def _coerce_date(cls, v):
        if isinstance(v, str):
            return v.strip()[:10]
        return v

    @field_validator("open", "close", mode="before")
    @classmethod
    def _coerce_times(cls, v):
        return _coerce_time(v)

    @field_validator("closed", mode="before")
    @classmethod
    def _coerce_closed(cls, v):
        return to_bool(v, False)


def _coerce_schedule(value) -> Dict[str, DaySchedule]:
    if not isinstance(value, dict):
        return {}
    schedule: Dict[str, DaySchedule] = {}
    for key, entry in value.items():
        name = _NUMERIC_DAY_KEYS.get(str(key), str(key).strip().lower())
        if isinstance(entry, DaySchedule):
            schedule[name] = entry
        elif isinstance(entry, dict):
            try:
                schedule[name] = DaySchedule.model_validate(entry)
            except ValidationError:
                continue
    return schedule


class Store(BaseModel):
    """
    Scheduling configuration of a store.

    Attributes:
        id: Store identifier
        name: Display name
        allow_scheduling: Master switch for offering slots at all
        same_day_cutoff_time: "HH:MM" after which today is no longer offered
        delivery_cutoff_time: Delivery-specific cutoff (overrides same-day)
        pickup_cutoff_time: Pickup-specific cutoff (overrides same-day)
        weekly_schedule: Day name -> open/close/closed
        business_hours: Day name -> open/close/closed
        delivery_schedule: Day name -> start/end/enabled
        pickup_schedule: Day name -> start/end/enabled
        special_dates: Date-specific overrides
    """
    model_config = ConfigDict(from_attributes=True, extra="ignore")

    id: Optional[str] = None
    name: Optional[str] = None
    allow_scheduling: bool = False
    same_day_cutoff_time: Optional[str] = None
    delivery_cutoff_time: Optional[str] = None
    pickup_cutoff_time: Optional[str] = None
    weekly_schedule: Dict[str, DaySchedule] = {}
    business_hours: Dict[str, DaySchedule] = {}
    delivery_schedule: Dict[str, DaySchedule] = {}
    pickup_schedule: Dict[str, DaySchedule] = {}
    special_dates: List[SpecialDate] = []

    @field_validator("id", "name", mode="before")
    @classmethod
    def _coerce_str(cls, v):
        return to_optional_str(v)

    @field_validator("allow_scheduling", mode="before")
    @classmethod
    def _coerce_allow(cls, v):
        return to_bool(v, False)

    @field_validator(
        "same_day_cutoff_time", "delivery_cutoff_time", "pickup_cutoff_time", mode="before"
    )
    @classmethod
    def _coerce_cutoffs(cls, v):
        return _coerce_time(v)

    @field_validator(
        "weekly_schedule", "business_hours", "delivery_schedule", "pickup_schedule", mode="before"
    )
    @classmethod
    def _coerce_schedules(cls, v):
        return _coerce_schedule(v)

    @field_validator("special_dates", mode="before")
    @classmethod
    def _coerce_special_dates(cls, v):
        if not isinstance(v, (list, tuple)):
            return []
        result = []
        for entry in v:
            if isinstance(entry, SpecialDate):
                result.append(entry)
                continue
            try:
                result.append(SpecialDate.model_validate(entry))
            except ValidationError:
                continue
        return result

    def cutoff_for(self, delivery_type: str) -> Optional[str]:
        """Channel-specific cutoff time, falling back to the same-day cutoff."""
        if delivery_type == "delivery":
            return self.delivery_cutoff_time or self.same_day_cutoff_time
        return self.pickup_cutoff_time or self.same_day_cutoff_time

    def special_date_for(self, day: dt.date) -> Optional[SpecialDate]:
        for special in self.special_dates:
            if special.date == day:
                return special
        return None

    @classmethod
    def coerce(cls, obj) -> "Store":
        """Build a Store from a dict, an ORM row, or another Store."""
        if isinstance(obj, cls):
            return obj
        try:
            return cls.model_validate(obj if obj is not None else {})
        except ValidationError:
            return cls()


class SchedulingOption(BaseModel):
    """A bookable fulfillment slot."""

    date: str
    time: str
    available: bool = True
    reason: Optional[str] = None


class ScheduleDecision(BaseModel):
    """Outcome of validating a chosen slot. ``reason`` is set only on decline."""

    can_schedule: bool
    reason: Optional[str] = None
