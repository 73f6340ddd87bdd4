from typing import List

from sqlmodel import select

from ..db import Database
from ..models import Room
from .table_repo import TableRepo


class RoomsRepo(TableRepo):
    def __init__(self, db: Database):
        super().__init__(db, Room)

    def available(self) -> List[dict]:
        with self.db.session() as session:
            q = (
                select(Room)
                .where(Room.is_available == True)  # noqa: E712
                .order_by(Room.room_id)
            )
            rows = session.exec(q).all()
            return [r.model_dump() for r in rows]
