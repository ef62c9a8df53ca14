from contextlib import asynccontextmanager
from datetime import date
from typing import Annotated, List, Union

from fastapi import Body, Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import CORS_ORIGINS, DATABASE_URL, PORT
from database import create_tables, engine, get_db
from errors import LedgerError, describe_validation_errors
from ledger import summarize, window_start
from logger import get_logger
from schemas import Expense, Income, LedgerSummary, Saving, StatsRow, TransactionOut
from store import LedgerStore

log = get_logger("api")

# FastAPI needs Body() to pick the variant from the "type" field
DraftBody = Annotated[Union[Expense, Saving, Income], Body(discriminator="type")]

# ----------------------------------------------------------------------------
# App setup
# ----------------------------------------------------------------------------
@asynccontextmanager
async def lifespan(app: FastAPI):
    await create_tables()
    log.info(f"Ledger API ready (sqlite={DATABASE_URL.startswith('sqlite')})")
    yield
    await engine.dispose()


app = FastAPI(title="Personal Finance Ledger API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_store(db: AsyncSession = Depends(get_db)) -> LedgerStore:
    return LedgerStore(db)

# ----------------------------------------------------------------------------
# Error responses are always {"message": ...}
# ----------------------------------------------------------------------------
@app.exception_handler(LedgerError)
async def ledger_error_handler(request: Request, exc: LedgerError):
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    message = describe_validation_errors(exc.errors())
    log.info(f"Rejected {request.method} {request.url.path}: {message}")
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"message": message})


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"message": str(exc.detail)}, headers=exc.headers)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    log.opt(exception=exc).error(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"message": str(exc)})

# ----------------------------------------------------------------------------
# Health & test
# ----------------------------------------------------------------------------
@app.get("/")
async def read_root():
    return {"message": "Ledger backend is running"}


@app.get("/test")
async def test_database():
    info = {
        "backend": "running",
        "using_sqlite": DATABASE_URL.startswith("sqlite"),
        "connection_status": "Not Connected",
    }
    try:
        async with engine.begin() as conn:
            await conn.execute(text("SELECT 1"))
            info["connection_status"] = "Connected"
    except Exception as e:
        log.warning(f"Database check failed: {e}")
        info["error"] = str(e)[:160]
    return info

# ----------------------------------------------------------------------------
# Expenses
# ----------------------------------------------------------------------------
@app.get("/api/expenses", response_model=List[TransactionOut], response_model_exclude_none=True)
async def list_expenses(store: LedgerStore = Depends(get_store)):
    return await store.list(window_start(date.today()))


@app.get("/api/expenses/stats", response_model=List[StatsRow])
async def expense_stats(store: LedgerStore = Depends(get_store)):
    return await store.aggregate_monthly(window_start(date.today()))


@app.get("/api/expenses/summary", response_model=LedgerSummary)
async def expense_summary(store: LedgerStore = Depends(get_store)):
    today = date.today()
    rows = await store.list(window_start(today))
    return summarize([TransactionOut.model_validate(r) for r in rows], today=today)


@app.post(
    "/api/expenses",
    response_model=TransactionOut,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
)
async def add_expense(payload: DraftBody, store: LedgerStore = Depends(get_store)):
    return await store.create(payload)


@app.put("/api/expenses/{expense_id}", response_model=TransactionOut, response_model_exclude_none=True)
async def update_expense(expense_id: str, payload: DraftBody, store: LedgerStore = Depends(get_store)):
    return await store.update(expense_id, payload)


@app.delete("/api/expenses/{expense_id}")
async def delete_expense(expense_id: str, store: LedgerStore = Depends(get_store)):
    await store.delete(expense_id)
    return {"message": "Expense deleted successfully"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=PORT)
