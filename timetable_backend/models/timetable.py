from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, func
from sqlalchemy.orm import relationship

from timetable_backend.database import Base


class Timetable(Base):
    __tablename__ = "timetables"

    id = Column(Integer, primary_key=True)
    # one timetable per user
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False, index=True)
    last_updated = Column(DateTime(timezone=True), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    items = relationship(
        "ScheduleItemRow",
        back_populates="timetable",
        order_by="ScheduleItemRow.position",
        cascade="all, delete-orphan",
    )


class ScheduleItemRow(Base):
    __tablename__ = "schedule_items"

    id = Column(String(32), primary_key=True)
    timetable_id = Column(Integer, ForeignKey("timetables.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False)

    subject = Column(String(200), nullable=False)
    teacher = Column(String(200), nullable=False)
    day = Column(String(10), nullable=False)
    section = Column(String(10), nullable=False)
    start_time = Column(String(5), nullable=False)
    end_time = Column(String(5), nullable=False)
    time_slot_label = Column(String(200), nullable=False, default="")
    start_minutes = Column(Integer, nullable=False)
    end_minutes = Column(Integer, nullable=False)

    timetable = relationship("Timetable", back_populates="items")
