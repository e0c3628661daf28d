from __future__ import annotations

from datetime import datetime

from sqlalchemy import CheckConstraint, ForeignKey, Index, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy.sql.sqltypes import BigInteger, DateTime, Integer, String

from .domain.seats import SEATS_PER_TABLE, TABLE_COUNT

SEAT_CLAIM_CONSTRAINT = "uq_seat_claim"


class Base(DeclarativeBase):
    pass


class ReservationModel(Base):
    __tablename__ = "reservations"
    __table_args__ = (
        CheckConstraint("number_of_guests >= 1", name="chk_res_guests"),
        Index("idx_res_customer", "customer_name"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    customer_name: Mapped[str] = mapped_column(String(255), nullable=False)
    contact_info: Mapped[str] = mapped_column(String(255), nullable=False)
    reservation_time: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False)
    number_of_guests: Mapped[int] = mapped_column(Integer, nullable=False)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False)

    seats: Mapped[list["ReservationSeatModel"]] = relationship(
        back_populates="reservation",
        cascade="all, delete-orphan",
        lazy="selectin",
    )


class ReservationSeatModel(Base):
    __tablename__ = "reservation_seats"
    __table_args__ = (
        # one active claim per physical seat; enforces exclusivity across writers
        UniqueConstraint("table_no", "seat_no", name=SEAT_CLAIM_CONSTRAINT),
        CheckConstraint(f"table_no BETWEEN 1 AND {TABLE_COUNT}", name="chk_seat_table"),
        CheckConstraint(f"seat_no BETWEEN 1 AND {SEATS_PER_TABLE}", name="chk_seat_number"),
        Index("idx_seat_reservation", "reservation_id"),
    )

    # SQLite only autoincrements an INTEGER primary key
    id: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True
    )
    reservation_id: Mapped[str] = mapped_column(
        ForeignKey("reservations.id", ondelete="CASCADE"),
        nullable=False,
    )
    table_no: Mapped[int] = mapped_column(Integer, nullable=False)
    seat_no: Mapped[int] = mapped_column(Integer, nullable=False)

    reservation: Mapped["ReservationModel"] = relationship(back_populates="seats")
