from datetime import timedelta
from decimal import Decimal

import pytest

from parking_pos.exceptions import (
    AlreadyClosed, TicketNotFound, InvalidVehicleType, PayFirstNotAllowed, InvalidFeeSchedule
)
from parking_pos.fees.schemas import FeeScheduleName
from parking_pos.ledger.service import TransactionLedger
from parking_pos.models import ParkingLog, ParkingTicket
from parking_pos.tickets.schemas import TicketStatus
from parking_pos.tickets.service import TicketStore


@pytest.fixture
def store(db_session):
    return TicketStore(db_session)


class TestCreateTicket:
    def test_new_ticket_is_open(self, store, clock):
        ticket = store.create_ticket("car", "gate-1", False, clock.now)

        assert ticket.id
        assert ticket.vehicle_type == "car"
        assert ticket.checked_out is False
        assert ticket.exit_time is None
        assert ticket.total_fee is None
        assert ticket.fee_schedule == "standard"

    def test_vehicle_type_normalized(self, store, clock):
        assert store.create_ticket("Motorcycle", "gate-1", False, clock.now).vehicle_type == "motorcycle"

    def test_rejects_unknown_vehicle(self, store, clock):
        with pytest.raises(InvalidVehicleType):
            store.create_ticket("bus", "gate-1", False, clock.now)

    def test_get_missing_ticket(self, store):
        with pytest.raises(TicketNotFound):
            store.get_ticket("does-not-exist")


class TestQuoteTicket:
    def test_live_quote_grows_with_time(self, store, clock):
        ticket = store.create_ticket("car", "gate-1", False, clock.now)

        first = store.quote_ticket(ticket.id, clock.advance(minutes=100))
        assert first.status == TicketStatus.PAYABLE
        assert first.quote.amount_due == Decimal("30")
        assert first.quote.duration_minutes == 100

        later = store.quote_ticket(ticket.id, clock.advance(minutes=95))
        assert later.quote.amount_due == Decimal("50")

    def test_closed_ticket_is_not_payable(self, store, clock):
        ticket = store.create_ticket("car", "gate-1", False, clock.now)
        store.pay_ticket(ticket.id, "cashier-1", clock.advance(minutes=60))

        lookup = store.quote_ticket(ticket.id, clock.advance(minutes=60))
        assert lookup.status == TicketStatus.CHECKED_OUT
        assert lookup.quote is None
        assert lookup.message == "Ticket already checked out"

    def test_legacy_ticket_priced_on_legacy_schedule(self, store, clock):
        ticket = store.create_ticket(
            "car", "gate-1", False, clock.now, fee_schedule=FeeScheduleName.LEGACY
        )
        lookup = store.quote_ticket(ticket.id, clock.advance(minutes=10))
        assert lookup.quote.amount_due == Decimal("30")


class TestCloseTicket:
    def test_close_sets_exit_fields_once(self, store, db_session, clock):
        ticket = store.create_ticket("car", "gate-1", False, clock.now)
        closed = store.close_ticket(ticket.id, Decimal("50"), 200, "cashier-1", clock.advance(minutes=200))

        assert closed.checked_out is True
        assert closed.total_fee == Decimal("50")
        assert closed.duration_minutes == 200
        assert closed.checked_out_by_id == "cashier-1"
        assert closed.exit_time is not None
        assert db_session.query(ParkingLog).filter(ParkingLog.ticket_id == ticket.id).count() == 1

    def test_second_close_fails(self, store, db_session, clock):
        ticket = store.create_ticket("car", "gate-1", False, clock.now)
        store.close_ticket(ticket.id, Decimal("30"), 60, "cashier-1", clock.advance(minutes=60))

        with pytest.raises(AlreadyClosed):
            store.close_ticket(ticket.id, Decimal("50"), 200, "cashier-2", clock.advance(minutes=140))

        reloaded = db_session.get(ParkingTicket, ticket.id)
        assert reloaded.total_fee == Decimal("30")
        assert reloaded.checked_out_by_id == "cashier-1"
        assert db_session.query(ParkingLog).count() == 1

    def test_failed_close_leaves_caller_transaction_alone(self, store, db_session, clock):
        ticket = store.create_ticket("car", "gate-1", False, clock.now)
        store.close_ticket(ticket.id, Decimal("30"), 60, "cashier-1", clock.advance(minutes=60))

        TransactionLedger(db_session, "cashier-2").append(Decimal("15"), clock.now, commit=False)
        with pytest.raises(AlreadyClosed):
            store.close_ticket(ticket.id, Decimal("50"), 60, "cashier-2", clock.now, commit=False)

        assert TransactionLedger(db_session, "cashier-2").sum() == Decimal("15")

    def test_close_missing_ticket(self, store, clock):
        with pytest.raises(TicketNotFound):
            store.close_ticket("nope", Decimal("30"), 60, "cashier-1", clock.now)

    def test_second_cashier_rejected_after_first_pays(self, session_factory, clock):
        first_db, second_db = session_factory(), session_factory()
        try:
            ticket = TicketStore(first_db).create_ticket("car", "gate-1", False, clock.now)
            now = clock.advance(minutes=90)

            # Both cashiers loaded the open ticket before either paid
            first, second = TicketStore(first_db), TicketStore(second_db)
            assert first.get_ticket(ticket.id).checked_out is False
            assert second.get_ticket(ticket.id).checked_out is False

            first.pay_ticket(ticket.id, "cashier-1", now)
            with pytest.raises(AlreadyClosed):
                second.close_ticket(ticket.id, Decimal("30"), 90, "cashier-2", now)
        finally:
            first_db.close()
            second_db.close()


class TestPayTicket:
    def test_charges_stored_discount_flag(self, store, db_session, clock):
        ticket = store.create_ticket("car", "gate-1", True, clock.now)
        result = store.pay_ticket(ticket.id, "cashier-1", clock.advance(minutes=256))

        assert result.amount_charged == Decimal("40")
        assert result.ticket.checked_out is True
        assert result.log.duration_minutes == 256
        assert result.log.fee_charged == Decimal("40")
        assert TransactionLedger(db_session, "cashier-1").sum() == Decimal("40")

    def test_reports_stale_client_fee(self, store, clock):
        ticket = store.create_ticket("car", "gate-1", False, clock.now)
        result = store.pay_ticket(ticket.id, "cashier-1", clock.advance(minutes=195), expected_fee=Decimal("30"))

        assert result.amount_charged == Decimal("50")
        assert result.fee_changed is True

    def test_pay_twice_fails_and_ledger_unchanged(self, store, db_session, clock):
        ticket = store.create_ticket("motorcycle", "gate-1", False, clock.now)
        store.pay_ticket(ticket.id, "cashier-1", clock.advance(minutes=30))

        with pytest.raises(AlreadyClosed):
            store.pay_ticket(ticket.id, "cashier-1", clock.advance(minutes=30))
        assert TransactionLedger(db_session, "cashier-1").sum() == Decimal("30")


class TestPayFirst:
    def test_motorcycle_opened_and_closed(self, store, db_session, clock):
        result = store.pay_first("cashier-1", False, clock.now)

        assert result.amount_charged == Decimal("30")
        assert result.ticket.checked_out is True
        assert result.ticket.duration_minutes == 0
        assert result.ticket.vehicle_type.value == "motorcycle"
        assert TransactionLedger(db_session, "cashier-1").sum() == Decimal("30")

    def test_pwd_is_free(self, store, clock):
        assert store.pay_first("cashier-1", True, clock.now).amount_charged == Decimal("0")

    def test_cars_not_allowed(self, store, db_session, clock):
        with pytest.raises(PayFirstNotAllowed):
            store.pay_first("cashier-1", False, clock.now, vehicle_type="car")
        assert db_session.query(ParkingTicket).count() == 0


class TestQRCode:
    def test_png_for_existing_ticket(self, store, clock):
        ticket = store.create_ticket("car", "gate-1", False, clock.now)
        png = store.generate_qr_png(ticket.id)
        assert png.startswith(b"\x89PNG\r\n\x1a\n")

    def test_missing_ticket(self, store):
        with pytest.raises(TicketNotFound):
            store.generate_qr_png("nope")


class TestStoredRows:
    def add_raw_ticket(self, db_session, clock, **fields):
        values = dict(
            id="raw-ticket",
            vehicle_type="car",
            is_pwd=False,
            fee_schedule="standard",
            entry_time=clock.now,
            checked_out=False,
            issued_by_id="gate-1"
        )
        values.update(fields)
        db_session.add(ParkingTicket(**values))
        db_session.commit()
        return values["id"]

    def test_capitalized_vehicle_type_is_read(self, store, db_session, clock):
        ticket_id = self.add_raw_ticket(db_session, clock, vehicle_type="Car")
        lookup = store.quote_ticket(ticket_id, clock.advance(minutes=100))

        assert lookup.ticket.vehicle_type.value == "car"
        assert lookup.quote.amount_due == Decimal("30")

    def test_unknown_fee_schedule_on_scan(self, store, db_session, clock):
        ticket_id = self.add_raw_ticket(db_session, clock, fee_schedule="weekend")
        with pytest.raises(InvalidFeeSchedule):
            store.quote_ticket(ticket_id, clock.advance(minutes=100))

    def test_unknown_fee_schedule_on_payment(self, store, db_session, clock):
        ticket_id = self.add_raw_ticket(db_session, clock, fee_schedule="weekend")
        with pytest.raises(InvalidFeeSchedule):
            store.pay_ticket(ticket_id, "cashier-1", clock.advance(minutes=100))

        assert db_session.get(ParkingTicket, ticket_id).checked_out is False
        assert db_session.query(ParkingLog).count() == 0
