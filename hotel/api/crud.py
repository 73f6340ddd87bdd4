from typing import Type

from fastapi import APIRouter, Depends, HTTPException, Path, Request
from pydantic import BaseModel
from sqlmodel import SQLModel

from ..db import Database
from ..repositories.table_repo import TableRepo
from ..utils.schemas import MAX_ID


def get_db(request: Request) -> Database:
    return request.app.state.db


def add_crud_routes(
    router: APIRouter,
    model: Type[SQLModel],
    schema: Type[BaseModel],
    label: str,
    listing: bool = True,
    create: bool = True,
) -> APIRouter:
    """Attach list / create / read-by-id routes for one table to ``router``.

    Routes with fixed paths (e.g. ``/available``) must be added to the router
    before calling this, since ``/{ident}`` would shadow them.
    """

    if listing:

        @router.get("")
        def list_rows(db: Database = Depends(get_db)):
            return TableRepo(db, model).list_all()

    if create:

        @router.post("", status_code=201)
        def create_row(body: schema, db: Database = Depends(get_db)):
            return TableRepo(db, model).insert(body.model_dump())

    @router.get("/{ident}")
    def get_row(ident: int = Path(ge=1, le=MAX_ID), db: Database = Depends(get_db)):
        row = TableRepo(db, model).get(ident)
        if row is None:
            raise HTTPException(status_code=404, detail=f"{label} not found")
        return row

    return router
