from typing import Any, Dict, List, Optional, Type

from sqlmodel import SQLModel, select

from ..db import Database


class TableRepo:
    """Plain single-table CRUD for one SQLModel table, rows returned as dicts."""

    def __init__(self, db: Database, model: Type[SQLModel]):
        self.db = db
        self.model = model
        pk_cols = list(model.__table__.primary_key.columns)
        self.pk = pk_cols[0].name

    def _pk_attr(self):
        return getattr(self.model, self.pk)

    def list_all(self) -> List[Dict[str, Any]]:
        with self.db.session() as session:
            rows = session.exec(select(self.model).order_by(self._pk_attr())).all()
            return [r.model_dump() for r in rows]

    def get(self, ident: int) -> Optional[Dict[str, Any]]:
        with self.db.session() as session:
            row = session.get(self.model, ident)
            return row.model_dump() if row else None

    def insert(self, values: Dict[str, Any]) -> Dict[str, Any]:
        with self.db.session() as session:
            row = self.model(**values)
            session.add(row)
            session.commit()
            # re-read so column defaults show up in the result
            session.refresh(row)
            return row.model_dump()

    def update(self, ident: int, values: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        with self.db.session() as session:
            row = session.get(self.model, ident)
            if row is None:
                return None
            for k, v in values.items():
                setattr(row, k, v)
            session.add(row)
            session.commit()
            session.refresh(row)
            return row.model_dump()
