from datetime import datetime
from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, JSON, Numeric
from sqlalchemy.orm import Mapped, mapped_column, relationship
from ..session import Base


class Show(Base):
    __tablename__ = "shows"
    __table_args__ = (
        CheckConstraint("show_price >= 0", name="ck_show_price_non_negative"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    movie_id: Mapped[int] = mapped_column(ForeignKey("movies.id", ondelete="CASCADE"))
    show_datetime: Mapped[datetime] = mapped_column(DateTime(timezone=True), index=True)
    show_price: Mapped[float] = mapped_column(Numeric(10, 2))
    # seat id -> holder (user) id; a missing key means the seat is free
    occupied_seats: Mapped[dict[str, str]] = mapped_column(JSON, default=dict, nullable=False)
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    movie = relationship("Movie", back_populates="shows")
    bookings = relationship("Booking", back_populates="show")

    __mapper_args__ = {"version_id_col": version}
