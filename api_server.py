"""Record-store API for budget settings and transactions, served over FastAPI."""

from contextlib import asynccontextmanager
from datetime import datetime
from typing import Callable, List, Optional
from uuid import uuid4

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from budget_defaults import default_settings
from config import API_HOST, API_PORT
from database import SETTINGS_ROW_ID, BudgetSettingsRow, TransactionRow, get_db, init_db
from ledger import trailing_month_start
from log_setup import get_logger
from models import BudgetSettings, BudgetSettingsUpdate, Transaction, TransactionCreate, to_naive_utc, utc_now

logger = get_logger("api")


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


app = FastAPI(title="Budget Record Store", version="0.1.0", lifespan=lifespan)


def get_clock() -> Callable[[], datetime]:
    return utc_now


@app.exception_handler(SQLAlchemyError)
async def database_error(request: Request, exc: SQLAlchemyError):
    logger.error("Database error on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=500, content={"error": str(exc)})


class TransactionList(BaseModel):
    transactions: List[Transaction]


class DeleteResponse(BaseModel):
    success: bool


@app.get("/budget", response_model=BudgetSettings)
async def get_budget(db: Session = Depends(get_db)):
    row = db.get(BudgetSettingsRow, SETTINGS_ROW_ID)
    if row is None:
        raise HTTPException(status_code=404, detail="Budget settings have not been saved yet")
    return row.to_document()


@app.put("/budget", response_model=BudgetSettings)
async def put_budget(update: BudgetSettingsUpdate, db: Session = Depends(get_db)):
    row = db.get(BudgetSettingsRow, SETTINGS_ROW_ID)
    if row is None:
        seed = default_settings().model_dump(mode="json")
        row = BudgetSettingsRow(id=SETTINGS_ROW_ID, **seed)
        db.add(row)

    changes = update.changes()
    for field, value in changes.items():
        setattr(row, field, value)
    row.updated_at = utc_now()
    db.commit()
    db.refresh(row)
    logger.info("Updated budget settings: %s", ", ".join(sorted(changes)) or "no fields")
    return row.to_document()


@app.get("/transactions", response_model=TransactionList)
async def list_transactions(
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    db: Session = Depends(get_db),
    clock: Callable[[], datetime] = Depends(get_clock),
):
    start = to_naive_utc(start) if start else trailing_month_start(clock())
    query = db.query(TransactionRow).filter(TransactionRow.date >= start)
    if end is not None:
        query = query.filter(TransactionRow.date <= to_naive_utc(end))
    rows = query.order_by(TransactionRow.date.desc()).all()
    return {"transactions": [row.to_document() for row in rows]}


@app.post("/transactions", response_model=Transaction, status_code=201)
async def create_transaction(
    payload: TransactionCreate,
    db: Session = Depends(get_db),
    clock: Callable[[], datetime] = Depends(get_clock),
):
    row = TransactionRow(id=uuid4().hex, date=clock(), **payload.model_dump())
    db.add(row)
    db.commit()
    db.refresh(row)
    return row.to_document()


@app.delete("/transactions", response_model=DeleteResponse)
async def delete_transaction(id: Optional[str] = None, db: Session = Depends(get_db)):
    if not id:
        raise HTTPException(status_code=400, detail="Missing id")
    db.query(TransactionRow).filter(TransactionRow.id == id).delete()
    db.commit()
    return {"success": True}


@app.get("/health")
async def health():
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("api_server:app", host=API_HOST, port=API_PORT, reload=True)
