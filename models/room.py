"""
Room inventory
"""

from sqlalchemy import Column, Integer, String, DateTime, Index
from sqlalchemy.orm import relationship
from database.connection import Base
from datetime import datetime


class Room(Base):
    __tablename__ = "rooms"
    __table_args__ = (
        Index('idx_room_category', 'category'),
    )

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False, unique=True, index=True)
    capacity = Column(Integer, nullable=False, default=2)
    category = Column(String(50), nullable=False, default="Standard")

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Single-room bookings point here directly; multi-room ones through booking_rooms
    bookings = relationship("Booking", back_populates="room")
    room_stays = relationship("BookingRoom", back_populates="room")

    def __repr__(self):
        return f"<Room(id={self.id}, name='{self.name}', category='{self.category}')>"
