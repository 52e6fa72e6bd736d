import logging
from typing import Dict, List, Optional, Tuple
from sqlalchemy.orm import Session, joinedload

from schooltrips.clock import Clock, SystemClock
from schooltrips.config import settings
from schooltrips.models import Booking
from schooltrips.exceptions import NotFoundError, ForbiddenError, InvalidTransitionError
from schooltrips.availability.service import AvailabilityLedger
from schooltrips.pricing.quote_service import QuoteCalculator
from schooltrips.pricing.schemas import QuoteRequest, QuoteResult
from schooltrips.bookings.schemas import BookingCreateRequest, BookingStatus
from schooltrips.bookings.state_machine import BookingStateMachine, is_terminal

logger = logging.getLogger("schooltrips.bookings")

class BookingOrchestrator:
    """Creates bookings from quotes and applies lifecycle transitions"""

    def __init__(self, db: Session, clock: Clock = None, enforce_capacity: Optional[bool] = None):
        self.db = db
        self.clock = clock or SystemClock()
        self.quote_calculator = QuoteCalculator(db, self.clock)
        self.ledger = AvailabilityLedger(db)
        self.state_machine = BookingStateMachine()
        self.enforce_capacity = settings.ENFORCE_CAPACITY if enforce_capacity is None else enforce_capacity

    def create_booking(self, client_id: int, request: BookingCreateRequest) -> Booking:
        """Price the configuration, reserve seats and store a pending booking"""

        quote = self.quote_calculator.calculate_quote(QuoteRequest(
            trip_id=request.trip_id,
            students=request.students,
            adults=request.adults,
            start_date=request.start_date,
            meals_per_day=request.meals_per_day,
            transport_type=request.transport_type,
            selected_extras=request.selected_extras
        ))

        seats_reserved = 0
        try:
            if self.enforce_capacity:
                seats_reserved = self.ledger.consume_capacity(
                    request.trip_id, request.start_date,
                    request.students + request.adults, commit=False
                )

            booking = Booking(
                client_id=client_id,
                trip_id=request.trip_id,
                students=request.students,
                adults=request.adults,
                start_date=request.start_date,
                meals_per_day=request.meals_per_day,
                transport_type=request.transport_type.value,
                selected_extras=list(request.selected_extras),
                status=BookingStatus.PENDING.value,
                seats_reserved=seats_reserved,
                client_notes=request.client_notes,
                **self._price_columns(quote)
            )
            self.db.add(booking)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info(
            "Created booking %s client=%s trip=%s total=%s seats=%s",
            booking.id, client_id, request.trip_id, quote.total, seats_reserved
        )
        return self.get_booking(booking.id)

    @staticmethod
    def _price_columns(quote: QuoteResult) -> Dict:
        return {
            "base_students": quote.base_students,
            "base_adults": quote.base_adults,
            "meals": quote.meals,
            "transport": quote.transport,
            "extras": quote.extras,
            "total": quote.total,
            "per_student": quote.per_student,
        }

    def get_booking(self, booking_id: int, client_id: Optional[int] = None) -> Booking:
        """Get a booking; when client_id is given it must own the booking"""
        booking = self.db.query(Booking).options(
            joinedload(Booking.trip),
            joinedload(Booking.client)
        ).populate_existing().filter(Booking.id == booking_id).first()

        if not booking:
            raise NotFoundError("Booking not found")
        if client_id is not None and booking.client_id != client_id:
            raise ForbiddenError("Access denied")
        return booking

    def list_bookings(
        self,
        client_id: Optional[int] = None,
        status: Optional[BookingStatus] = None,
        trip_id: Optional[int] = None,
        page: int = 1,
        limit: int = 20
    ) -> Tuple[List[Booking], int]:
        """Bookings newest first with total count"""
        query = self.db.query(Booking)
        if client_id is not None:
            query = query.filter(Booking.client_id == client_id)
        if status:
            query = query.filter(Booking.status == status.value)
        if trip_id is not None:
            query = query.filter(Booking.trip_id == trip_id)

        total = query.count()
        bookings = query.options(
            joinedload(Booking.trip),
            joinedload(Booking.client)
        ).order_by(Booking.created_at.desc(), Booking.id.desc()).offset((page - 1) * limit).limit(limit).all()

        return bookings, total

    def kanban(self) -> Dict[BookingStatus, List[Booking]]:
        """All bookings grouped into one bucket per status"""
        board = {status: [] for status in BookingStatus}
        bookings = self.db.query(Booking).options(
            joinedload(Booking.trip),
            joinedload(Booking.client)
        ).order_by(Booking.created_at.desc(), Booking.id.desc()).all()

        for booking in bookings:
            board[BookingStatus(booking.status)].append(booking)
        return board

    # Lifecycle
    def update_status(
        self,
        booking_id: int,
        target: BookingStatus,
        actor_id: int,
        notes: Optional[str] = None
    ) -> Booking:
        """Administrator transition along the lifecycle table"""
        booking = self.get_booking(booking_id)
        current = BookingStatus(booking.status)
        update = self.state_machine.admin_transition(
            current, target, actor_id, self.clock.now_utc(), notes
        )
        return self._apply(booking, current, target, update, actor_id)

    def client_confirm(self, booking_id: int, client_id: int) -> Booking:
        booking = self.get_booking(booking_id, client_id)
        current = BookingStatus(booking.status)
        update = self.state_machine.client_confirm(current, self.clock.now_utc())
        return self._apply(booking, current, BookingStatus.CONFIRMED, update, client_id)

    def client_cancel(self, booking_id: int, client_id: int, reason: Optional[str] = None) -> Booking:
        booking = self.get_booking(booking_id, client_id)
        current = BookingStatus(booking.status)
        update = self.state_machine.client_cancel(current, self.clock.now_utc(), reason)
        return self._apply(booking, current, BookingStatus.CANCELLED, update, client_id)

    def _apply(
        self,
        booking: Booking,
        current: BookingStatus,
        target: BookingStatus,
        update: Dict,
        actor_id: int
    ) -> Booking:
        """Write the update only if the stored status is still ``current``"""
        seats = booking.seats_reserved or 0
        release = is_terminal(target) and seats > 0
        if release:
            update = dict(update, seats_reserved=0)

        try:
            matched = self.db.query(Booking).filter(
                Booking.id == booking.id,
                Booking.status == current.value
            ).update(update, synchronize_session=False)

            if not matched:
                self.db.rollback()
                logger.warning(
                    "Lost status race on booking %s: %s -> %s", booking.id, current.value, target.value
                )
                raise InvalidTransitionError(
                    current, target,
                    f"Cannot transition from {current.value} to {target.value}: booking status changed concurrently"
                )

            if release:
                self.ledger.release_capacity(booking.trip_id, booking.start_date, seats, commit=False)
            self.db.commit()
        except InvalidTransitionError:
            raise
        except Exception:
            self.db.rollback()
            raise

        logger.info(
            "Booking %s %s -> %s by user %s", booking.id, current.value, target.value, actor_id
        )
        return self.get_booking(booking.id)
