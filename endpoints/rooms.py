"""
Room inventory endpoints
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query, Response, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from database import connection
from models.booking import Booking, BookingRoom
from models.room import Room
from schemas.rooms import RoomCreate, RoomRead, RoomUpdate
from utils.dependencies import OperatorContext, get_operator, require_admin
from utils.logging_utils import log_event, log_error

router = APIRouter(prefix="/rooms", tags=["Rooms"])


def _get_room(db: Session, room_id: int) -> Room:
    room = db.query(Room).filter(Room.id == room_id).first()
    if not room:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Room not found")
    return room


def _ensure_name_free(db: Session, name: str, exclude_id: Optional[int] = None) -> None:
    query = db.query(Room.id).filter(Room.name == name)
    if exclude_id is not None:
        query = query.filter(Room.id != exclude_id)
    if query.first():
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=f"A room named '{name}' already exists")


def _commit(db: Session, operator: OperatorContext, action: str) -> None:
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        log_error("rooms", operator.label, f"Error: {action}", f"error={str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Could not {action.lower()}"
        )


@router.get("", response_model=List[RoomRead])
def list_rooms(
    category: Optional[str] = Query(None, min_length=1, max_length=50),
    db: Session = Depends(connection.get_db),
):
    query = db.query(Room)
    if category:
        query = query.filter(Room.category == category)
    return query.order_by(Room.name).all()


@router.get("/{room_id}", response_model=RoomRead)
def get_room(room_id: int = Path(..., gt=0), db: Session = Depends(connection.get_db)):
    return _get_room(db, room_id)


@router.post("", response_model=RoomRead, status_code=status.HTTP_201_CREATED)
def create_room(
    room: RoomCreate,
    db: Session = Depends(connection.get_db),
    operator: OperatorContext = Depends(get_operator),
):
    _ensure_name_free(db, room.name)
    new_room = Room(**room.model_dump())
    db.add(new_room)
    _commit(db, operator, "Create room")
    db.refresh(new_room)
    log_event("rooms", operator.label, "Create room", f"id={new_room.id} name={new_room.name}")
    return new_room


@router.put("/{room_id}", response_model=RoomRead)
def update_room(
    data: RoomUpdate,
    room_id: int = Path(..., gt=0),
    db: Session = Depends(connection.get_db),
    operator: OperatorContext = Depends(get_operator),
):
    room = _get_room(db, room_id)
    changes = data.model_dump(exclude_unset=True, exclude_none=True)
    if "name" in changes:
        _ensure_name_free(db, changes["name"], exclude_id=room_id)
    for field, value in changes.items():
        setattr(room, field, value)
    _commit(db, operator, "Update room")
    db.refresh(room)
    log_event("rooms", operator.label, "Update room", f"id={room_id} fields={sorted(changes)}")
    return room


@router.delete("/{room_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_room(
    room_id: int = Path(..., gt=0),
    db: Session = Depends(connection.get_db),
    operator: OperatorContext = Depends(require_admin),
):
    room = _get_room(db, room_id)
    in_use = (
        db.query(Booking.id).filter(Booking.room_id == room_id).first()
        or db.query(BookingRoom.id).filter(BookingRoom.room_id == room_id).first()
    )
    if in_use:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Room has bookings and cannot be deleted"
        )
    db.delete(room)
    _commit(db, operator, "Delete room")
    log_event("rooms", operator.label, "Delete room", f"id={room_id}")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
