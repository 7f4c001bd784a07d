"""
Booking Service
Appointment booking on top of Square (team, catalog, availability, bookings,
customers) plus the DynamoDB waitlist and staff blocked time

Square is the system of record for staff, services and appointments; this
service only reshapes its objects into the booking domain models.

Author: Phace Web Team
Date: 2025-03-18
"""
import logging
from datetime import date, datetime, timedelta, timezone
from typing import Dict, List, Optional

from phace.connectors.square_connector import SquareConnector
from phace.core.config import settings
from phace.core.exceptions import NotFoundError, SquareAPIError
from phace.domain.booking import (
    Appointment,
    BlockedTime,
    Recurrence,
    Service,
    ServiceAddon,
    ServiceCategory,
    StaffMember,
    TimeSlot,
    WaitlistEntry,
    WaitlistStatus,
)
from phace.repositories.blocked_time_repository import BlockedTimeRepository
from phace.repositories.waitlist_repository import WaitlistRepository

logger = logging.getLogger(__name__)


def to_rfc3339(value: str, end_of_day: bool = False) -> str:
    """
    Normalise a date or datetime string for Square range filters

    Bare dates become midnight UTC (or 23:59:59 with end_of_day); datetimes
    without an offset are taken as UTC.
    """
    if len(value) == 10:
        return f"{value}T23:59:59Z" if end_of_day else f"{value}T00:00:00Z"
    if value.endswith('Z') or '+' in value[10:] or '-' in value[10:]:
        return value
    return f"{value}Z"


def split_name(full_name: str) -> Dict[str, str]:
    parts = full_name.split(' ')
    return {'given_name': parts[0], 'family_name': ' '.join(parts[1:])}


class BookingService:
    """
    Service for appointment booking

    Handles:
    - Staff (team members + booking profiles)
    - Service categories, services and add-ons from the catalog
    - Availability search and slot checks
    - Appointment create / read / cancel
    - Waitlist entries
    - Staff blocked time
    """

    def __init__(self, connector: SquareConnector = None, waitlist: WaitlistRepository = None,
                 blocked_times: BlockedTimeRepository = None):
        self._connector = connector
        self.waitlist = waitlist or WaitlistRepository()
        self.blocked_times = blocked_times or BlockedTimeRepository()

    @property
    def connector(self) -> SquareConnector:
        # Built on first use so waitlist calls work without Square credentials
        if self._connector is None:
            self._connector = SquareConnector()
        return self._connector

    # ========== Staff ==========

    async def get_staff_members(self) -> List[StaffMember]:
        profiles_response = await self.connector.list_booking_profiles()
        profiles = profiles_response.get('team_member_booking_profiles') or []
        if not profiles:
            logger.info("No team member booking profiles found")
            return []

        members_response = await self.connector.search_team_members()
        members = {m['id']: m for m in members_response.get('team_members') or []}

        staff = []
        for profile in profiles:
            member = members.get(profile.get('team_member_id'))
            if member is None:
                logger.warning(f"No team member found for profile {profile.get('team_member_id')}")
                continue
            staff.append(StaffMember.from_square(member, profile))
        return staff

    async def get_staff_by_id(self, staff_id: str) -> Optional[StaffMember]:
        try:
            member_response = await self.connector.retrieve_team_member(staff_id)
        except SquareAPIError as e:
            if e.status_code == 404:
                return None
            raise

        member = member_response.get('team_member')
        if not member:
            return None

        try:
            profile_response = await self.connector.retrieve_booking_profile(staff_id)
        except SquareAPIError as e:
            if e.status_code == 404:
                logger.info(f"No booking profile for team member {staff_id}")
                return None
            raise

        return StaffMember.from_square(member, profile_response.get('team_member_booking_profile'))

    # ========== Catalog ==========

    async def get_service_categories(self) -> List[ServiceCategory]:
        response = await self.connector.search_catalog_objects(['CATEGORY'])
        return [
            ServiceCategory.from_square(obj)
            for obj in response.get('objects') or []
            if obj.get('type') == 'CATEGORY'
        ]

    async def get_services_by_category(self, category_id: str) -> List[Service]:
        response = await self.connector.search_catalog_items(
            category_ids=[category_id],
            product_types=['APPOINTMENTS_SERVICE']
        )
        services = []
        for item in response.get('items') or []:
            if item.get('type') != 'ITEM':
                continue
            service = Service.from_square(item)
            if service is not None:
                services.append(service)
        return services

    async def get_service_by_id(self, service_id: str) -> Optional[Service]:
        """
        Resolve a service from either its item id or one of its variation ids

        Returns:
            Service priced from the requested variation, or None
        """
        try:
            response = await self.connector.retrieve_catalog_object(service_id)
        except SquareAPIError as e:
            if e.status_code == 404:
                return None
            raise

        obj = response.get('object') or {}
        if obj.get('type') == 'ITEM':
            return Service.from_square(obj)

        if obj.get('type') != 'ITEM_VARIATION':
            return None

        variation_data = obj.get('item_variation_data') or {}
        parent_id = variation_data.get('item_id')
        if not parent_id:
            return None

        parent_response = await self.connector.retrieve_catalog_object(parent_id)
        parent = parent_response.get('object') or {}
        if parent.get('type') != 'ITEM':
            return None

        service = Service.from_square(parent)
        if service is None:
            return None

        variant = Service.from_square({
            'id': parent['id'],
            'item_data': {**(parent.get('item_data') or {}), 'variations': [obj]}
        })
        return service.model_copy(update={
            'price': variant.price,
            'duration': variant.duration,
            'variation_id': variant.variation_id,
            'variation_version': variant.variation_version,
        })

    async def get_services_with_categories(self) -> List[ServiceCategory]:
        categories = await self.get_service_categories()
        result = []
        for category in categories:
            services = await self.get_services_by_category(category.id)
            result.append(category.model_copy(update={'services': services}))
        return result

    async def get_services(self) -> List[Service]:
        services: List[Service] = []
        for category in await self.get_service_categories():
            services.extend(await self.get_services_by_category(category.id))
        return services

    async def delete_service_category(self, category_id: str) -> None:
        await self.connector.delete_catalog_object(category_id)
        logger.info(f"Deleted service category {category_id}")

    # ========== Add-ons ==========

    async def get_all_addons(self) -> List[ServiceAddon]:
        category_id = settings.SQUARE_ADDON_CATEGORY_ID
        if not category_id:
            logger.warning("SQUARE_ADDON_CATEGORY_ID not set; no add-ons available")
            return []

        response = await self.connector.search_catalog_objects(
            ['ITEM'],
            query={'exact_query': {'attribute_name': 'category_id', 'attribute_value': category_id}}
        )
        addons = []
        for item in response.get('objects') or []:
            addon = ServiceAddon.from_square(item)
            if addon is not None:
                addons.append(addon)
        return addons

    async def get_service_addons(self, service_id: str) -> List[ServiceAddon]:
        """Add-ons offered with a service; every active add-on applies to every service"""
        return [addon for addon in await self.get_all_addons() if addon.is_active]

    async def get_addons_by_ids(self, addon_ids: List[str]) -> List[ServiceAddon]:
        if not addon_ids:
            return []
        response = await self.connector.batch_retrieve_catalog_objects(addon_ids)
        addons = []
        for obj in response.get('objects') or []:
            if obj.get('type') != 'ITEM':
                continue
            addon = ServiceAddon.from_square(obj)
            if addon is not None:
                addons.append(addon)
        return addons

    # ========== Availability ==========

    async def get_available_time_slots(self, staff_id: str, service_id: str, day: str,
                                       variation_id: Optional[str] = None,
                                       addon_ids: Optional[List[str]] = None) -> List[TimeSlot]:
        """
        Open slots for one staff member and service on a day

        Square requires a range of at least 24 hours, so the search covers
        the requested day and the next one.
        """
        if date.fromisoformat(day) < date.today():
            logger.info(f"Requested date {day} is in the past")
            return []

        service = await self.get_service_by_id(service_id)
        if service is None:
            logger.info(f"Service not found: {service_id}")
            return []

        total_duration = service.duration
        if addon_ids:
            total_duration += sum(addon.duration for addon in await self.get_addons_by_ids(addon_ids))

        next_day = (date.fromisoformat(day) + timedelta(days=1)).isoformat()
        query = {
            'filter': {
                'start_at_range': {
                    'start_at': to_rfc3339(day),
                    'end_at': to_rfc3339(next_day, end_of_day=True),
                },
                'location_id': await self.connector.get_location_id(),
                'segment_filters': [{
                    'service_variation_id': variation_id or service.variation_id,
                    'team_member_id_filter': {'any': [staff_id]},
                }]
            }
        }
        response = await self.connector.search_availability(query)
        return [
            TimeSlot.from_square(availability, default_duration=total_duration)
            for availability in response.get('availabilities') or []
            if availability.get('start_at')
        ]

    async def check_time_slot_availability(self, staff_id: str, start_time: str, end_time: str,
                                           service_id: Optional[str] = None) -> bool:
        """
        True when Square still offers a slot starting exactly at start_time

        Past start times are never available.
        """
        start = datetime.fromisoformat(to_rfc3339(start_time).replace('Z', '+00:00'))
        if start < datetime.now(timezone.utc):
            return False

        if service_id:
            service = await self.get_service_by_id(service_id)
        else:
            services = await self.get_services()
            service = services[0] if services else None
        if service is None:
            logger.error(f"No service to check availability against ({service_id})")
            return False

        end = datetime.fromisoformat(to_rfc3339(end_time).replace('Z', '+00:00'))
        if end - start < timedelta(hours=24):
            # Square rejects availability ranges shorter than a day
            end = start + timedelta(hours=24)

        segment = {
            'service_variation_id': service.variation_id,
            'team_member_id_filter': {'any': [staff_id]},
        }
        if service.variation_version is not None:
            segment['service_variation_version'] = service.variation_version

        response = await self.connector.search_availability({
            'filter': {
                'start_at_range': {
                    'start_at': start.isoformat().replace('+00:00', 'Z'),
                    'end_at': end.isoformat().replace('+00:00', 'Z'),
                },
                'location_id': await self.connector.get_location_id(),
                'segment_filters': [segment],
            }
        })

        for availability in response.get('availabilities') or []:
            slot_start = datetime.fromisoformat(availability['start_at'].replace('Z', '+00:00'))
            if slot_start == start:
                return True
        return False

    # ========== Appointments ==========

    async def _find_or_create_customer(self, name: str, email: str, phone: str) -> str:
        customers = await self.connector.search_customers_by_email(email)
        if customers:
            return customers[0]['id']

        response = await self.connector.create_customer({
            **split_name(name),
            'email_address': email,
            'phone_number': phone,
        })
        customer_id = (response.get('customer') or {}).get('id')
        if not customer_id:
            raise ValueError("Failed to create or retrieve customer")
        return customer_id

    async def create_appointment(self, service: Service, staff_id: str, start_time: str,
                                 client_name: str, client_email: str, client_phone: str,
                                 total_duration: int, total_price: float,
                                 addons: Optional[List[str]] = None,
                                 notes: Optional[str] = None) -> Appointment:
        """
        Book a service for a client (customer is found by email or created)

        Raises:
            NotFoundError: staff member does not exist
        """
        staff = await self.get_staff_by_id(staff_id)
        if staff is None:
            raise NotFoundError("Staff member not found")

        customer_id = await self._find_or_create_customer(client_name, client_email, client_phone)

        segment = {
            'service_variation_id': service.variation_id,
            'team_member_id': staff_id,
            'duration_minutes': total_duration,
        }
        if service.variation_version is not None:
            segment['service_variation_version'] = service.variation_version

        response = await self.connector.create_booking({
            'location_id': await self.connector.get_location_id(),
            'start_at': to_rfc3339(start_time),
            'appointment_segments': [segment],
            'customer_id': customer_id,
            'seller_note': notes or '',
        })
        booking = response.get('booking')
        if not booking:
            raise ValueError("Failed to create booking in Square")

        appointment = Appointment.from_square(booking)
        logger.info(f"Booked appointment {appointment.id} for {client_email}")
        return appointment.model_copy(update={
            'service_id': service.id,
            'service_name': service.name,
            'staff_name': staff.name,
            'client_name': client_name,
            'client_email': client_email,
            'client_phone': client_phone,
            'total_price': total_price,
            'total_duration': total_duration,
            'end_time': Appointment.from_square({**booking, 'appointment_segments': [segment]}).end_time,
            'addons': addons or [],
            'notes': notes,
        })

    async def get_appointment_by_id(self, appointment_id: str) -> Optional[Appointment]:
        try:
            response = await self.connector.retrieve_booking(appointment_id)
        except SquareAPIError as e:
            if e.status_code == 404:
                return None
            raise

        booking = response.get('booking')
        if not booking:
            return None

        appointment = Appointment.from_square(booking)
        service = await self.get_service_by_id(appointment.service_id) if appointment.service_id else None
        staff = await self.get_staff_by_id(appointment.staff_id) if appointment.staff_id else None
        return appointment.model_copy(update={
            'service_name': service.name if service else 'Unknown Service',
            'staff_name': staff.name if staff else 'Unknown Staff',
            'total_price': service.price if service else 0,
        })

    async def get_staff_appointments(self, staff_id: str, start_date: str, end_date: str) -> List[Appointment]:
        bookings = await self.connector.list_bookings(
            team_member_id=staff_id,
            start_at_min=to_rfc3339(start_date),
            start_at_max=to_rfc3339(end_date, end_of_day=True)
        )
        return [Appointment.from_square(booking) for booking in bookings]

    async def get_client_appointments(self, client_email: str) -> List[Appointment]:
        customers = await self.connector.search_customers_by_email(client_email)
        appointments: List[Appointment] = []
        for customer in customers:
            bookings = await self.connector.list_bookings(customer_id=customer['id'])
            appointments.extend(Appointment.from_square(booking) for booking in bookings)
        return appointments

    async def cancel_appointment(self, appointment_id: str) -> Appointment:
        """
        Raises:
            NotFoundError: Square has no booking with this id
        """
        try:
            response = await self.connector.retrieve_booking(appointment_id)
        except SquareAPIError as e:
            if e.status_code == 404:
                raise NotFoundError("Appointment not found")
            raise
        booking = response.get('booking')
        if not booking:
            raise NotFoundError("Appointment not found")

        cancelled = await self.connector.cancel_booking(appointment_id, booking.get('version'))
        logger.info(f"Cancelled appointment {appointment_id}")
        return Appointment.from_square(cancelled.get('booking') or booking)

    # ========== Waitlist ==========

    def add_to_waitlist(self, service_id: str, client_name: str, client_email: str, client_phone: str,
                        preferred_dates: List[str], preferred_staff_ids: Optional[List[str]] = None) -> WaitlistEntry:
        return self.waitlist.create({
            'serviceId': service_id,
            'clientName': client_name,
            'clientEmail': client_email,
            'clientPhone': client_phone,
            'preferredDates': preferred_dates,
            'preferredStaffIds': preferred_staff_ids or [],
        })

    def get_waitlist_entries(self, status: WaitlistStatus = WaitlistStatus.ACTIVE,
                             service_id: Optional[str] = None) -> List[WaitlistEntry]:
        if service_id:
            return self.waitlist.find_by_service(service_id, status)
        return self.waitlist.find_by_status(status)

    def update_waitlist_status(self, entry_id: str, status: WaitlistStatus,
                               notes: Optional[str] = None) -> WaitlistEntry:
        return self.waitlist.update_status(entry_id, status, notes)

    def delete_waitlist_entry(self, entry_id: str) -> None:
        self.waitlist.delete(entry_id)

    # ========== Blocked time ==========

    def get_blocked_times(self, staff_id: str, start_date: str, end_date: str) -> List[BlockedTime]:
        return self.blocked_times.find_in_range(staff_id, start_date, end_date)

    def block_time(self, staff_id: str, start_time: str, end_time: str, reason: Optional[str] = None,
                   recurring: Optional[Recurrence] = None) -> BlockedTime:
        """Block a staff member's time; recurring blocks are written out one row per occurrence"""
        blocks = self.blocked_times.create(staff_id, start_time, end_time, reason=reason, recurring=recurring)
        logger.info(f"Blocked {len(blocks)} slot(s) for staff {staff_id} from {start_time}")
        return blocks[0]

    def unblock_time(self, staff_id: str, start_time: str) -> None:
        self.blocked_times.delete(staff_id, start_time)
