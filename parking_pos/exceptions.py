"""Domain errors raised by the fee engine and the ticket/ledger services.

Routers translate these into HTTP responses; services never build
HTTPExceptions themselves.
"""


class ParkingError(Exception):
    """Base class for all parking POS errors"""


class InvalidVehicleType(ParkingError, ValueError):
    """Vehicle type is not one of the billable types"""

    def __init__(self, vehicle_type):
        self.vehicle_type = vehicle_type
        super().__init__(f"Invalid vehicle type: {vehicle_type!r}")


class TicketNotFound(ParkingError):
    def __init__(self, ticket_id: str):
        self.ticket_id = ticket_id
        super().__init__(f"Ticket {ticket_id} not found")


class AlreadyClosed(ParkingError):
    """Payment attempted on a ticket that is already checked out"""

    def __init__(self, ticket_id: str):
        self.ticket_id = ticket_id
        super().__init__(f"Ticket {ticket_id} has already been paid")


class PayFirstNotAllowed(ParkingError, ValueError):
    """Pay-first is only offered to motorcycles"""


class InvalidFeeSchedule(ParkingError, ValueError):
    """Stored fee schedule name is not a known schedule"""

    def __init__(self, fee_schedule):
        self.fee_schedule = fee_schedule
        super().__init__(f"Invalid fee schedule: {fee_schedule!r}")
