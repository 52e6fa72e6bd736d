from sqlalchemy import Column, Integer, BigInteger, String, Boolean, DateTime, Date, Text, ForeignKey, Numeric, JSON, UniqueConstraint, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from schooltrips.database import Base

# ================================
# Users
# ================================
class User(Base):
    __tablename__ = "users"

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default="client")
    school = Column(String(255))
    phone = Column(String(50))
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    bookings = relationship("Booking", back_populates="client", foreign_keys="Booking.client_id")

# ================================
# Trip Catalog
# ================================
class Trip(Base):
    __tablename__ = "trips"

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    slug = Column(String(255), unique=True, nullable=False, index=True)
    destination = Column(String(255), nullable=False, index=True)
    country = Column(String(100))
    duration_days = Column(Integer, nullable=False)

    # Price configuration
    base_per_student = Column(Numeric(10, 2), nullable=False)
    base_per_adult = Column(Numeric(10, 2), default=0)
    meal_per_person_per_day = Column(Numeric(10, 2), default=0)
    transport_surcharge = Column(JSON, default=dict)
    extras = Column(JSON, default=dict)

    available_transport = Column(JSON, default=list)
    available_extras = Column(JSON, default=dict)
    min_students = Column(Integer)
    max_students = Column(Integer)
    is_active = Column(Boolean, default=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    pricing_rules = relationship("PricingRule", back_populates="trip")
    bookings = relationship("Booking", back_populates="trip")
    availability = relationship("AvailabilitySlot", back_populates="trip")

# ================================
# Pricing Rules
# ================================
class PricingRule(Base):
    __tablename__ = "pricing_rules"

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, index=True)
    trip_id = Column(BigInteger, ForeignKey("trips.id"), nullable=True, index=True)  # NULL = all trips
    name = Column(String(255), nullable=False)
    rule_type = Column(String(50), nullable=False)
    discount_type = Column(String(20), nullable=False)
    discount_value = Column(Numeric(10, 2), nullable=False)
    min_students = Column(Integer)
    max_students = Column(Integer)
    valid_from = Column(Date)
    valid_to = Column(Date)
    days_before_trip = Column(Integer)
    is_active = Column(Boolean, default=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    trip = relationship("Trip", back_populates="pricing_rules")

# ================================
# Bookings
# ================================
class Booking(Base):
    __tablename__ = "bookings"
    __table_args__ = (
        Index("ix_bookings_client_status", "client_id", "status"),
        Index("ix_bookings_trip_status", "trip_id", "status"),
    )

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, index=True)
    client_id = Column(BigInteger, ForeignKey("users.id"), nullable=False)
    trip_id = Column(BigInteger, ForeignKey("trips.id"), nullable=False)

    # Configuration, frozen at creation
    students = Column(Integer, nullable=False)
    adults = Column(Integer, nullable=False, default=0)
    start_date = Column(Date, nullable=False, index=True)
    meals_per_day = Column(Integer, nullable=False)
    transport_type = Column(String(20), nullable=False)
    selected_extras = Column(JSON, default=list)

    # Price breakdown captured from the quote
    base_students = Column(Numeric(16, 6), nullable=False)
    base_adults = Column(Numeric(16, 6), nullable=False)
    meals = Column(Numeric(16, 6), nullable=False)
    transport = Column(Numeric(16, 6), nullable=False)
    extras = Column(Numeric(16, 6), nullable=False)
    total = Column(Numeric(16, 6), nullable=False)
    per_student = Column(Numeric(16, 6), nullable=False)

    status = Column(String(20), nullable=False, default="pending", index=True)
    seats_reserved = Column(Integer, nullable=False, default=0)
    client_notes = Column(Text)
    admin_notes = Column(Text)
    reviewed_by = Column(BigInteger, ForeignKey("users.id"))
    reviewed_at = Column(DateTime(timezone=True))
    confirmed_at = Column(DateTime(timezone=True))
    cancelled_at = Column(DateTime(timezone=True))
    cancellation_reason = Column(Text)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    client = relationship("User", back_populates="bookings", foreign_keys=[client_id])
    reviewer = relationship("User", foreign_keys=[reviewed_by])
    trip = relationship("Trip", back_populates="bookings")

# ================================
# Availability
# ================================
class AvailabilitySlot(Base):
    __tablename__ = "availability"
    __table_args__ = (
        UniqueConstraint("trip_id", "date", name="uq_availability_trip_date"),
        Index("ix_availability_date_available", "date", "is_available"),
    )

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, index=True)
    trip_id = Column(BigInteger, ForeignKey("trips.id"), nullable=False)
    date = Column(Date, nullable=False)
    total_capacity = Column(Integer, nullable=False, default=0)
    booked_count = Column(Integer, nullable=False, default=0)
    is_available = Column(Boolean, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    trip = relationship("Trip", back_populates="availability")
