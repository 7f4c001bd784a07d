"""
Unit tests for BookingService

The Square connector is an AsyncMock and the waitlist repository a
MagicMock; coroutines are driven with asyncio.run.
"""
import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from phace.core.exceptions import NotFoundError, SquareAPIError
from phace.domain.booking import BlockedTime, Recurrence, Service, WaitlistStatus, map_from_square_status
from phace.services.booking_service import BookingService, to_rfc3339


@pytest.fixture
def connector():
    mock = AsyncMock()
    mock.get_location_id.return_value = "LOC_1"
    return mock


@pytest.fixture
def waitlist():
    return MagicMock()


@pytest.fixture
def service_layer(connector, waitlist):
    return BookingService(connector=connector, waitlist=waitlist)


@pytest.fixture
def team_member():
    return {
        "id": "TM_1",
        "given_name": "Amy",
        "family_name": "Lee",
        "email_address": "amy@phace.ca",
        "status": "ACTIVE"
    }


@pytest.fixture
def booking_profile():
    return {
        "team_member_id": "TM_1",
        "display_name": "Dr. Amy Lee",
        "description": "Nurse injector",
        "is_bookable": True
    }


class TestHelpers:

    def test_to_rfc3339_bare_dates(self):
        assert to_rfc3339("2030-05-01") == "2030-05-01T00:00:00Z"
        assert to_rfc3339("2030-05-01", end_of_day=True) == "2030-05-01T23:59:59Z"

    def test_to_rfc3339_keeps_offsets(self):
        assert to_rfc3339("2030-05-01T10:00:00Z") == "2030-05-01T10:00:00Z"
        assert to_rfc3339("2030-05-01T10:00:00-07:00") == "2030-05-01T10:00:00-07:00"
        assert to_rfc3339("2030-05-01T10:00:00") == "2030-05-01T10:00:00Z"

    def test_square_status_mapping(self):
        assert map_from_square_status("ACCEPTED") == "confirmed"
        assert map_from_square_status("CANCELLED_BY_CUSTOMER") == "cancelled"
        assert map_from_square_status("DECLINED") == "cancelled"
        assert map_from_square_status("NO_SHOW") == "no-show"
        assert map_from_square_status(None) == "confirmed"


class TestStaff:
    """Test staff lookups"""

    def test_staff_merges_profiles_and_members(self, service_layer, connector, team_member, booking_profile):
        connector.list_booking_profiles.return_value = {
            "team_member_booking_profiles": [booking_profile, {"team_member_id": "TM_GONE"}]
        }
        connector.search_team_members.return_value = {"team_members": [team_member]}

        staff = asyncio.run(service_layer.get_staff_members())

        assert len(staff) == 1
        assert staff[0].id == "TM_1"
        assert staff[0].name == "Dr. Amy Lee"
        assert staff[0].bio == "Nurse injector"
        assert staff[0].is_active is True

    def test_no_profiles_means_no_staff(self, service_layer, connector):
        connector.list_booking_profiles.return_value = {}

        assert asyncio.run(service_layer.get_staff_members()) == []
        connector.search_team_members.assert_not_called()

    def test_unknown_staff_returns_none(self, service_layer, connector):
        connector.retrieve_team_member.side_effect = SquareAPIError("Not found", status_code=404)

        assert asyncio.run(service_layer.get_staff_by_id("TM_X")) is None

    def test_staff_lookup_other_errors_propagate(self, service_layer, connector):
        connector.retrieve_team_member.side_effect = SquareAPIError("Unauthorized", status_code=401)

        with pytest.raises(SquareAPIError):
            asyncio.run(service_layer.get_staff_by_id("TM_1"))

    def test_staff_by_id_uses_profile_name(self, service_layer, connector, team_member, booking_profile):
        connector.retrieve_team_member.return_value = {"team_member": team_member}
        connector.retrieve_booking_profile.return_value = {"team_member_booking_profile": booking_profile}

        staff = asyncio.run(service_layer.get_staff_by_id("TM_1"))

        assert staff.name == "Dr. Amy Lee"
        assert staff.email == "amy@phace.ca"


class TestCatalog:
    """Test services, categories and add-ons"""

    def test_service_by_item_id(self, service_layer, connector, square_service_item):
        connector.retrieve_catalog_object.return_value = {"object": square_service_item}

        service = asyncio.run(service_layer.get_service_by_id("SERVICE_1"))

        assert service.name == "Signature Facial"
        assert service.price == 150.0
        assert service.duration == 60
        assert service.variation_id == "VAR_1"

    def test_service_by_variation_id_resolves_parent(self, service_layer, connector, square_service_item):
        variation = {
            "type": "ITEM_VARIATION",
            "id": "VAR_90",
            "version": 7,
            "item_variation_data": {
                "item_id": "SERVICE_1",
                "price_money": {"amount": 20000, "currency": "CAD"},
                "service_duration": 5400000
            }
        }
        connector.retrieve_catalog_object.side_effect = [
            {"object": variation},
            {"object": square_service_item},
        ]

        service = asyncio.run(service_layer.get_service_by_id("VAR_90"))

        assert service.id == "SERVICE_1"
        assert service.name == "Signature Facial"
        assert service.price == 200.0
        assert service.duration == 90
        assert service.variation_id == "VAR_90"
        assert service.variation_version == 7

    def test_missing_service_returns_none(self, service_layer, connector):
        connector.retrieve_catalog_object.side_effect = SquareAPIError("Not found", status_code=404)

        assert asyncio.run(service_layer.get_service_by_id("NOPE")) is None

    def test_services_with_categories(self, service_layer, connector, square_service_item):
        connector.search_catalog_objects.return_value = {"objects": [
            {"type": "CATEGORY", "id": "CAT_FACIALS", "category_data": {"name": "Facials"}}
        ]}
        connector.search_catalog_items.return_value = {"items": [square_service_item]}

        categories = asyncio.run(service_layer.get_services_with_categories())

        assert [c.name for c in categories] == ["Facials"]
        assert [s.id for s in categories[0].services] == ["SERVICE_1"]
        connector.search_catalog_items.assert_awaited_once_with(
            category_ids=["CAT_FACIALS"],
            product_types=["APPOINTMENTS_SERVICE"]
        )

    def test_addons_need_category(self, service_layer, connector):
        with patch("phace.services.booking_service.settings") as mock_settings:
            mock_settings.SQUARE_ADDON_CATEGORY_ID = ""
            assert asyncio.run(service_layer.get_all_addons()) == []
        connector.search_catalog_objects.assert_not_called()

    def test_addons_from_addon_category(self, service_layer, connector, square_addon_item):
        connector.search_catalog_objects.return_value = {"objects": [square_addon_item]}

        with patch("phace.services.booking_service.settings") as mock_settings:
            mock_settings.SQUARE_ADDON_CATEGORY_ID = "CAT_ADDONS"
            addons = asyncio.run(service_layer.get_service_addons("SERVICE_1"))

        assert [(a.name, a.price, a.duration) for a in addons] == [("LED Therapy", 25.0, 15)]
        query = connector.search_catalog_objects.call_args.kwargs["query"]
        assert query == {"exact_query": {"attribute_name": "category_id", "attribute_value": "CAT_ADDONS"}}


class TestAvailability:
    """Test availability search"""

    def test_slots_for_day(self, service_layer, connector, square_service_item, tomorrow):
        connector.retrieve_catalog_object.return_value = {"object": square_service_item}
        connector.search_availability.return_value = {"availabilities": [{
            "start_at": f"{tomorrow}T17:00:00Z",
            "appointment_segments": [{
                "duration_minutes": 60,
                "team_member_id": "TM_1",
                "service_variation_id": "VAR_1"
            }]
        }]}

        slots = asyncio.run(service_layer.get_available_time_slots("TM_1", "SERVICE_1", tomorrow))

        assert len(slots) == 1
        assert slots[0].start_time == f"{tomorrow}T17:00:00Z"
        assert slots[0].end_time == f"{tomorrow}T18:00:00Z"
        assert slots[0].staff_id == "TM_1"

        query = connector.search_availability.call_args[0][0]
        assert query["filter"]["start_at_range"]["start_at"] == f"{tomorrow}T00:00:00Z"
        assert query["filter"]["location_id"] == "LOC_1"
        assert query["filter"]["segment_filters"] == [{
            "service_variation_id": "VAR_1",
            "team_member_id_filter": {"any": ["TM_1"]}
        }]

    def test_past_day_has_no_slots(self, service_layer, connector):
        assert asyncio.run(service_layer.get_available_time_slots("TM_1", "SERVICE_1", "2000-01-01")) == []
        connector.search_availability.assert_not_called()

    def test_past_start_time_never_available(self, service_layer, connector):
        available = asyncio.run(service_layer.check_time_slot_availability(
            "TM_1", "2000-01-01T10:00:00Z", "2000-01-01T11:00:00Z", service_id="SERVICE_1"
        ))

        assert available is False
        connector.search_availability.assert_not_called()

    def test_exact_start_match_is_available(self, service_layer, connector, square_service_item):
        connector.retrieve_catalog_object.return_value = {"object": square_service_item}
        connector.search_availability.return_value = {"availabilities": [
            {"start_at": "2030-05-01T16:00:00Z"},
            {"start_at": "2030-05-01T17:00:00Z"},
        ]}

        available = asyncio.run(service_layer.check_time_slot_availability(
            "TM_1", "2030-05-01T17:00:00Z", "2030-05-01T18:00:00Z", service_id="SERVICE_1"
        ))

        assert available is True
        query = connector.search_availability.call_args[0][0]
        # short windows are widened to the 24h minimum
        assert query["filter"]["start_at_range"] == {
            "start_at": "2030-05-01T17:00:00Z",
            "end_at": "2030-05-02T17:00:00Z"
        }

    def test_taken_slot_is_unavailable(self, service_layer, connector, square_service_item):
        connector.retrieve_catalog_object.return_value = {"object": square_service_item}
        connector.search_availability.return_value = {"availabilities": [{"start_at": "2030-05-01T18:00:00Z"}]}

        available = asyncio.run(service_layer.check_time_slot_availability(
            "TM_1", "2030-05-01T17:00:00Z", "2030-05-01T18:00:00Z", service_id="SERVICE_1"
        ))

        assert available is False


class TestAppointments:
    """Test booking, lookup and cancellation"""

    def _service(self, square_service_item):
        return Service.from_square(square_service_item)

    def test_create_appointment_for_existing_customer(self, service_layer, connector, team_member,
                                                      booking_profile, square_service_item, square_booking):
        connector.retrieve_team_member.return_value = {"team_member": team_member}
        connector.retrieve_booking_profile.return_value = {"team_member_booking_profile": booking_profile}
        connector.search_customers_by_email.return_value = [{"id": "CUSTOMER_1"}]
        connector.create_booking.return_value = {"booking": square_booking}

        appointment = asyncio.run(service_layer.create_appointment(
            self._service(square_service_item),
            "TM_1",
            "2030-05-01T17:00:00Z",
            client_name="Jane Client",
            client_email="jane@example.com",
            client_phone="+16045551234",
            total_duration=75,
            total_price=175.0,
            addons=["ADDON_1"]
        ))

        connector.create_customer.assert_not_called()
        booking = connector.create_booking.call_args[0][0]
        assert booking["customer_id"] == "CUSTOMER_1"
        assert booking["location_id"] == "LOC_1"
        assert booking["appointment_segments"] == [{
            "service_variation_id": "VAR_1",
            "team_member_id": "TM_1",
            "duration_minutes": 75,
            "service_variation_version": 1700000000000
        }]

        assert appointment.id == "BOOKING_1"
        assert appointment.service_id == "SERVICE_1"
        assert appointment.service_name == "Signature Facial"
        assert appointment.staff_name == "Dr. Amy Lee"
        assert appointment.client_email == "jane@example.com"
        assert appointment.total_price == 175.0
        assert appointment.end_time == "2030-05-01T18:15:00Z"
        assert appointment.addons == ["ADDON_1"]

    def test_create_appointment_creates_customer(self, service_layer, connector, team_member,
                                                 booking_profile, square_service_item, square_booking):
        connector.retrieve_team_member.return_value = {"team_member": team_member}
        connector.retrieve_booking_profile.return_value = {"team_member_booking_profile": booking_profile}
        connector.search_customers_by_email.return_value = []
        connector.create_customer.return_value = {"customer": {"id": "NEW_CUSTOMER"}}
        connector.create_booking.return_value = {"booking": square_booking}

        asyncio.run(service_layer.create_appointment(
            self._service(square_service_item), "TM_1", "2030-05-01T17:00:00Z",
            client_name="Jane Marie Client", client_email="jane@example.com",
            client_phone="+16045551234", total_duration=60, total_price=150.0
        ))

        customer = connector.create_customer.call_args[0][0]
        assert customer["given_name"] == "Jane"
        assert customer["family_name"] == "Marie Client"
        assert connector.create_booking.call_args[0][0]["customer_id"] == "NEW_CUSTOMER"

    def test_create_appointment_start_without_offset_is_utc(self, service_layer, connector, team_member,
                                                            booking_profile, square_service_item, square_booking):
        connector.retrieve_team_member.return_value = {"team_member": team_member}
        connector.retrieve_booking_profile.return_value = {"team_member_booking_profile": booking_profile}
        connector.search_customers_by_email.return_value = [{"id": "CUSTOMER_1"}]
        connector.create_booking.return_value = {"booking": square_booking}

        asyncio.run(service_layer.create_appointment(
            self._service(square_service_item), "TM_1", "2030-05-01T17:00:00",
            client_name="Jane Client", client_email="jane@example.com",
            client_phone="+16045551234", total_duration=60, total_price=150.0
        ))

        assert connector.create_booking.call_args[0][0]["start_at"] == "2030-05-01T17:00:00Z"

    def test_create_appointment_unknown_staff(self, service_layer, connector, square_service_item):
        connector.retrieve_team_member.side_effect = SquareAPIError("Not found", status_code=404)

        with pytest.raises(NotFoundError):
            asyncio.run(service_layer.create_appointment(
                self._service(square_service_item), "TM_X", "2030-05-01T17:00:00Z",
                client_name="Jane", client_email="jane@example.com",
                client_phone="+16045551234", total_duration=60, total_price=150.0
            ))
        connector.create_booking.assert_not_called()

    def test_cancel_passes_booking_version(self, service_layer, connector, square_booking):
        connector.retrieve_booking.return_value = {"booking": square_booking}
        connector.cancel_booking.return_value = {"booking": {**square_booking, "status": "CANCELLED_BY_SELLER"}}

        appointment = asyncio.run(service_layer.cancel_appointment("BOOKING_1"))

        connector.cancel_booking.assert_awaited_once_with("BOOKING_1", 3)
        assert appointment.status == "cancelled"

    def test_cancel_unknown_booking(self, service_layer, connector):
        connector.retrieve_booking.side_effect = SquareAPIError("Booking not found", status_code=404)

        with pytest.raises(NotFoundError):
            asyncio.run(service_layer.cancel_appointment("NOPE"))
        connector.cancel_booking.assert_not_called()

    def test_cancel_other_square_errors_propagate(self, service_layer, connector):
        connector.retrieve_booking.side_effect = SquareAPIError("Unauthorized", status_code=401)

        with pytest.raises(SquareAPIError):
            asyncio.run(service_layer.cancel_appointment("BOOKING_1"))

    def test_client_appointments_across_customers(self, service_layer, connector, square_booking):
        connector.search_customers_by_email.return_value = [{"id": "C1"}, {"id": "C2"}]
        connector.list_bookings.side_effect = [[square_booking], []]

        appointments = asyncio.run(service_layer.get_client_appointments("jane@example.com"))

        assert [a.id for a in appointments] == ["BOOKING_1"]
        assert connector.list_bookings.await_args_list[1].kwargs == {"customer_id": "C2"}

    def test_staff_appointments_date_range(self, service_layer, connector, square_booking):
        connector.list_bookings.return_value = [square_booking]

        appointments = asyncio.run(service_layer.get_staff_appointments("TM_1", "2030-05-01", "2030-05-07"))

        assert appointments[0].status == "confirmed"
        connector.list_bookings.assert_awaited_once_with(
            team_member_id="TM_1",
            start_at_min="2030-05-01T00:00:00Z",
            start_at_max="2030-05-07T23:59:59Z"
        )


class TestWaitlist:
    """Waitlist calls never need Square"""

    def test_waitlist_without_square_credentials(self, waitlist):
        waitlist.find_by_status.return_value = []

        service_layer = BookingService(waitlist=waitlist)

        assert service_layer.get_waitlist_entries() == []
        waitlist.find_by_status.assert_called_once_with(WaitlistStatus.ACTIVE)

    def test_waitlist_by_service(self, service_layer, waitlist):
        service_layer.get_waitlist_entries(WaitlistStatus.CONTACTED, service_id="SERVICE_1")

        waitlist.find_by_service.assert_called_once_with("SERVICE_1", WaitlistStatus.CONTACTED)

    def test_add_to_waitlist(self, service_layer, waitlist):
        service_layer.add_to_waitlist("SERVICE_1", "Jane", "jane@example.com", "+16045551234", ["2030-05-01"])

        data = waitlist.create.call_args[0][0]
        assert data["serviceId"] == "SERVICE_1"
        assert data["preferredDates"] == ["2030-05-01"]
        assert data["preferredStaffIds"] == []


class TestBlockedTime:
    """Blocked time lives in the staff table, not in Square"""

    def setup_method(self):
        self.blocked_times = MagicMock()
        self.service_layer = BookingService(waitlist=MagicMock(), blocked_times=self.blocked_times)

    def test_block_time_returns_first_block(self):
        first = BlockedTime(id="b1", staff_id="TM_1", start_time="2030-05-01T17:00:00Z",
                            end_time="2030-05-01T18:00:00Z")
        second = first.model_copy(update={"id": "b2", "start_time": "2030-05-02T17:00:00Z"})
        self.blocked_times.create.return_value = [first, second]
        recurring = Recurrence(frequency="daily", until="2030-05-02T17:00:00Z")

        block = self.service_layer.block_time("TM_1", "2030-05-01T17:00:00Z", "2030-05-01T18:00:00Z",
                                              reason="Training", recurring=recurring)

        assert block.id == "b1"
        self.blocked_times.create.assert_called_once_with(
            "TM_1", "2030-05-01T17:00:00Z", "2030-05-01T18:00:00Z", reason="Training", recurring=recurring
        )

    def test_range_and_unblock(self):
        self.blocked_times.find_in_range.return_value = []

        assert self.service_layer.get_blocked_times("TM_1", "2030-05-01", "2030-05-31") == []
        self.service_layer.unblock_time("TM_1", "2030-05-01T17:00:00Z")

        self.blocked_times.find_in_range.assert_called_once_with("TM_1", "2030-05-01", "2030-05-31")
        self.blocked_times.delete.assert_called_once_with("TM_1", "2030-05-01T17:00:00Z")
