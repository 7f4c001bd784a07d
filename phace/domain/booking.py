"""
Booking Domain Models

Staff, services, add-ons and appointments mirror Square objects (team
members, catalog items, bookings). Waitlist entries live in the waitlist
table. Prices are exposed in dollars and durations in minutes.

Author: Phace Web Team
Date: 2025-03-18
"""
from datetime import datetime, timedelta
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from phace.core.aws import from_dynamo, to_dynamo


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_dict(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")


# Square booking status -> local appointment status
SQUARE_TO_LOCAL_STATUS = {
    "ACCEPTED": "confirmed",
    "PENDING": "pending",
    "CANCELLED_BY_CUSTOMER": "cancelled",
    "CANCELLED_BY_SELLER": "cancelled",
    "DECLINED": "cancelled",
    "NO_SHOW": "no-show",
}


def map_from_square_status(status: Optional[str]) -> str:
    return SQUARE_TO_LOCAL_STATUS.get(status or "", "confirmed")


def _cents_to_dollars(amount) -> float:
    return round(float(amount or 0) / 100, 2)


def _ms_to_minutes(duration_ms) -> int:
    return int(int(duration_ms or 0) / 60000)


def _add_minutes(start_at: str, minutes: int) -> Optional[str]:
    """RFC 3339 start + minutes, or None when start_at does not parse"""
    try:
        start = datetime.fromisoformat(start_at.replace("Z", "+00:00"))
    except ValueError:
        return None
    return (start + timedelta(minutes=minutes)).isoformat().replace("+00:00", "Z")


def _first_variation(item_data: dict) -> Optional[dict]:
    variations = item_data.get("variations") or []
    for variation in variations:
        if variation.get("type") == "ITEM_VARIATION" and variation.get("item_variation_data"):
            return variation
    return None


class StaffMember(_CamelModel):
    id: str
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    bio: Optional[str] = None
    is_active: bool = True

    @classmethod
    def from_square(cls, member: dict, profile: Optional[dict] = None) -> "StaffMember":
        """Team member, optionally merged with its booking profile"""
        profile = profile or {}
        name = profile.get("display_name") or " ".join(
            part for part in (member.get("given_name"), member.get("family_name")) if part
        )
        return cls(
            id=member["id"],
            name=name or "Unnamed Staff",
            email=member.get("email_address"),
            phone=member.get("phone_number"),
            bio=profile.get("description"),
            is_active=member.get("status", "ACTIVE") == "ACTIVE" and profile.get("is_bookable", True)
        )


class Service(_CamelModel):
    """Bookable service (Square APPOINTMENTS_SERVICE item, first variation)"""
    id: str
    name: str
    description: Optional[str] = None
    category_id: Optional[str] = None
    price: float = 0
    duration: int = Field(0, description="Minutes")
    variation_id: Optional[str] = None
    variation_version: Optional[int] = None
    is_active: bool = True

    @classmethod
    def from_square(cls, item: dict) -> Optional["Service"]:
        item_data = item.get("item_data") or {}
        variation = _first_variation(item_data)
        if variation is None:
            return None
        variation_data = variation["item_variation_data"]
        category_id = item_data.get("category_id")
        if not category_id and item_data.get("categories"):
            category_id = item_data["categories"][0].get("id")
        return cls(
            id=item["id"],
            name=item_data.get("name") or "Unnamed Service",
            description=item_data.get("description"),
            category_id=category_id,
            price=_cents_to_dollars((variation_data.get("price_money") or {}).get("amount")),
            duration=_ms_to_minutes(variation_data.get("service_duration")),
            variation_id=variation["id"],
            variation_version=variation.get("version"),
            is_active=not item_data.get("is_archived", False)
        )


class ServiceCategory(_CamelModel):
    id: str
    name: str
    is_active: bool = True
    updated_at: Optional[str] = None
    services: List[Service] = Field(default_factory=list)

    @classmethod
    def from_square(cls, obj: dict) -> "ServiceCategory":
        data = obj.get("category_data") or {}
        return cls(
            id=obj["id"],
            name=data.get("name") or "Unnamed Category",
            updated_at=obj.get("updated_at")
        )


class ServiceAddon(_CamelModel):
    """Add-on item from the add-on catalog category"""
    id: str
    name: str
    description: Optional[str] = None
    price: float = 0
    duration: int = Field(0, description="Minutes")
    is_active: bool = True

    @classmethod
    def from_square(cls, item: dict) -> Optional["ServiceAddon"]:
        item_data = item.get("item_data") or {}
        variation = _first_variation(item_data)
        if variation is None:
            return None
        variation_data = variation["item_variation_data"]
        duration_ms = variation_data.get("service_duration") or 0
        if not duration_ms:
            # add-ons that are plain items carry their duration as a custom attribute
            for attr in (variation_data.get("custom_attribute_values") or {}).values():
                if str(attr.get("name", "")).lower() == "duration" and attr.get("number_value"):
                    duration_ms = float(attr["number_value"])
                    break
        return cls(
            id=item["id"],
            name=item_data.get("name") or "Unnamed Addon",
            description=item_data.get("description"),
            price=_cents_to_dollars((variation_data.get("price_money") or {}).get("amount")),
            duration=_ms_to_minutes(duration_ms),
            is_active=not item_data.get("is_archived", False)
        )


class TimeSlot(_CamelModel):
    start_time: str
    end_time: Optional[str] = None
    staff_id: Optional[str] = None
    service_variation_id: Optional[str] = None
    duration: int = 0
    available: bool = True

    @classmethod
    def from_square(cls, availability: dict, default_duration: int = 0) -> "TimeSlot":
        """default_duration (minutes) is used when Square reports no segment durations"""
        segments = availability.get("appointment_segments") or [{}]
        segment = segments[0]
        duration = sum(int(s.get("duration_minutes") or 0) for s in segments) or default_duration
        return cls(
            start_time=availability["start_at"],
            end_time=_add_minutes(availability["start_at"], duration),
            staff_id=segment.get("team_member_id"),
            service_variation_id=segment.get("service_variation_id"),
            duration=duration
        )


class Appointment(_CamelModel):
    id: str
    service_id: Optional[str] = None
    service_name: Optional[str] = None
    staff_id: Optional[str] = None
    staff_name: Optional[str] = None
    start_time: str
    end_time: Optional[str] = None
    status: str = "confirmed"
    customer_id: Optional[str] = None
    client_name: Optional[str] = None
    client_email: Optional[str] = None
    client_phone: Optional[str] = None
    total_price: Optional[float] = None
    total_duration: int = 0
    addons: List[str] = Field(default_factory=list)
    notes: Optional[str] = None
    version: Optional[int] = Field(None, description="Square booking version, needed to cancel")

    @classmethod
    def from_square(cls, booking: dict) -> "Appointment":
        segments = booking.get("appointment_segments") or []
        total_duration = sum(int(s.get("duration_minutes") or 0) for s in segments)
        start_at = booking["start_at"]
        end_time = _add_minutes(start_at, total_duration)
        first = segments[0] if segments else {}
        return cls(
            id=booking["id"],
            service_id=first.get("service_variation_id"),
            staff_id=first.get("team_member_id"),
            start_time=start_at,
            end_time=end_time,
            status=map_from_square_status(booking.get("status")),
            customer_id=booking.get("customer_id"),
            total_duration=total_duration,
            addons=[s["service_variation_id"] for s in segments[1:] if s.get("service_variation_id")],
            notes=booking.get("customer_note"),
            version=booking.get("version")
        )


class WaitlistStatus(str, Enum):
    ACTIVE = "active"
    CONTACTED = "contacted"
    BOOKED = "booked"
    EXPIRED = "expired"


class WaitlistEntry(_CamelModel):
    id: str
    service_id: str
    client_name: str
    client_email: str
    client_phone: str
    preferred_dates: List[str] = Field(default_factory=list)
    preferred_staff_ids: List[str] = Field(default_factory=list)
    status: WaitlistStatus = WaitlistStatus.ACTIVE
    notes: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @staticmethod
    def key(entry_id: str) -> dict:
        return {"pk": f"WAITLIST#{entry_id}", "sk": f"WAITLIST#{entry_id}"}

    @classmethod
    def from_item(cls, item: dict) -> "WaitlistEntry":
        return cls.model_validate(from_dynamo(item))

    def to_item(self) -> dict:
        item = to_dynamo(self.model_dump(by_alias=True, mode="json"))
        item.update(self.key(self.id))
        # GSI1 lets admins list a service's waitlist by status
        item["GSI1PK"] = f"SERVICE#{self.service_id}"
        item["GSI1SK"] = f"STATUS#{self.status.value}"
        item["type"] = "waitlist"
        return item


class RecurrenceFrequency(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"


class Recurrence(_CamelModel):
    frequency: RecurrenceFrequency
    until: str


class BlockedTime(_CamelModel):
    """A stretch of a staff member's calendar that cannot be booked"""
    id: str
    staff_id: str
    start_time: str
    end_time: str
    reason: Optional[str] = None
    recurring: Optional[Recurrence] = None
    created_at: Optional[str] = None

    @staticmethod
    def key(staff_id: str, start_time: str) -> dict:
        return {"pk": f"STAFF#{staff_id}#BLOCKED", "sk": start_time}

    @classmethod
    def from_item(cls, item: dict) -> "BlockedTime":
        return cls.model_validate(from_dynamo(item))

    def to_item(self) -> dict:
        item = to_dynamo(self.model_dump(by_alias=True, mode="json"))
        item.update(self.key(self.staff_id, self.start_time))
        item["type"] = "blocked_time"
        return item
