import logging
from datetime import date as date_type, datetime
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Path, Query
from pydantic import BaseModel, Field
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from database.models import INTEGER_MAX, INTEGER_MIN
from database.repository import ExpenseRepository, IncomeRepository, repository_for
from database.session import get_session
from transactions import TransactionKind, TransactionQueryService, TransactionRecord

logger = logging.getLogger(__name__)

router = APIRouter()


class TransactionCreate(BaseModel):
    type: TransactionKind
    category_id: int = Field(..., ge=INTEGER_MIN, le=INTEGER_MAX)
    currency_id: int = Field(..., ge=INTEGER_MIN, le=INTEGER_MAX)
    amount: Decimal = Field(..., gt=0)
    description: str = ""
    date: date_type


class TransactionUpdate(BaseModel):
    category_id: Optional[int] = Field(None, ge=INTEGER_MIN, le=INTEGER_MAX)
    currency_id: Optional[int] = Field(None, ge=INTEGER_MIN, le=INTEGER_MAX)
    amount: Optional[Decimal] = Field(None, gt=0)
    description: Optional[str] = None
    date: Optional[date_type] = None


class TransactionResponse(BaseModel):
    id: int
    user_id: int
    category_id: int
    currency_id: int
    amount: Decimal
    description: str
    date: date_type
    type: str
    created_at: datetime


class AppliedFilters(BaseModel):
    type: Optional[str]
    category_ids: list[int]
    start_date: Optional[date_type]
    end_date: Optional[date_type]
    page: int
    limit: int


class TransactionListResponse(BaseModel):
    transactions: list[TransactionResponse]
    total: int
    page: int
    limit: int
    total_pages: int
    filters: AppliedFilters


async def get_current_user_id(x_user_id: Optional[str] = Header(None)) -> int:
    # Authentication happens upstream; the header carries the trusted id
    try:
        user_id = int(x_user_id)
    except (TypeError, ValueError):
        raise HTTPException(status_code=401, detail="Missing or invalid user id")
    if not INTEGER_MIN <= user_id <= INTEGER_MAX:
        raise HTTPException(status_code=401, detail="Missing or invalid user id")
    return user_id


def get_query_service(
    session: AsyncSession = Depends(get_session),
) -> TransactionQueryService:
    return TransactionQueryService([ExpenseRepository(session), IncomeRepository(session)])


def to_response(record: TransactionRecord) -> TransactionResponse:
    return TransactionResponse(**record.to_dict())


async def _list_transactions(
    service: TransactionQueryService,
    user_id: int,
    **params,
) -> TransactionListResponse:
    try:
        page = await service.query(user_id, **params)
    except SQLAlchemyError:
        logger.exception("Failed to fetch transactions for user %s", user_id)
        raise HTTPException(status_code=500, detail="Failed to fetch transactions")

    return TransactionListResponse(
        transactions=[to_response(record) for record in page.records],
        total=page.total,
        page=page.page,
        limit=page.limit,
        total_pages=page.total_pages,
        filters=AppliedFilters(**page.filters),
    )


@router.get("/transactions", response_model=TransactionListResponse)
async def list_transactions(
    type: Optional[str] = None,
    category_ids: Optional[list[str]] = Query(None),
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    page: Optional[str] = None,
    limit: Optional[str] = None,
    user_id: int = Depends(get_current_user_id),
    service: TransactionQueryService = Depends(get_query_service),
):
    # Everything arrives as raw strings; the query service normalizes them
    return await _list_transactions(
        service,
        user_id,
        type=type,
        category_ids=category_ids,
        start_date=start_date,
        end_date=end_date,
        page=page,
        limit=limit,
    )


@router.get("/transactions/all", response_model=list[TransactionResponse])
async def list_all_transactions(
    user_id: int = Depends(get_current_user_id),
    service: TransactionQueryService = Depends(get_query_service),
):
    try:
        records = await service.list_all(user_id)
    except SQLAlchemyError:
        logger.exception("Failed to fetch transactions for user %s", user_id)
        raise HTTPException(status_code=500, detail="Failed to fetch transactions")
    return [to_response(record) for record in records]


@router.get("/expenses", response_model=TransactionListResponse)
async def list_expenses(
    category_ids: Optional[list[str]] = Query(None),
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    page: Optional[str] = None,
    limit: Optional[str] = None,
    user_id: int = Depends(get_current_user_id),
    service: TransactionQueryService = Depends(get_query_service),
):
    return await _list_transactions(
        service,
        user_id,
        type=TransactionKind.EXPENSE.value,
        category_ids=category_ids,
        start_date=start_date,
        end_date=end_date,
        page=page,
        limit=limit,
    )


@router.get("/incomes", response_model=TransactionListResponse)
async def list_incomes(
    category_ids: Optional[list[str]] = Query(None),
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    page: Optional[str] = None,
    limit: Optional[str] = None,
    user_id: int = Depends(get_current_user_id),
    service: TransactionQueryService = Depends(get_query_service),
):
    return await _list_transactions(
        service,
        user_id,
        type=TransactionKind.INCOME.value,
        category_ids=category_ids,
        start_date=start_date,
        end_date=end_date,
        page=page,
        limit=limit,
    )


@router.post("/transactions", response_model=TransactionResponse, status_code=201)
async def create_transaction(
    transaction_data: TransactionCreate,
    user_id: int = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_session),
):
    repo = repository_for(transaction_data.type, session)

    try:
        entry = await repo.create(
            user_id=user_id,
            category_id=transaction_data.category_id,
            currency_id=transaction_data.currency_id,
            amount=transaction_data.amount,
            date=transaction_data.date,
            description=transaction_data.description,
        )
        await session.commit()
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    logger.info("Created %s %s for user %s", repo.kind.value, entry.id, user_id)
    return to_response(TransactionRecord.from_row(entry, repo.kind))


@router.put("/transactions/{kind}/{transaction_id}", response_model=TransactionResponse)
async def update_transaction(
    kind: TransactionKind,
    transaction_data: TransactionUpdate,
    transaction_id: int = Path(..., ge=INTEGER_MIN, le=INTEGER_MAX),
    user_id: int = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_session),
):
    repo = repository_for(kind, session)

    entry = await repo.update(
        user_id,
        transaction_id,
        **transaction_data.model_dump(exclude_unset=True),
    )
    if entry is None:
        raise HTTPException(status_code=404, detail=f"{kind.value.capitalize()} not found")

    await session.commit()
    return to_response(TransactionRecord.from_row(entry, kind))


@router.delete("/transactions/{kind}/{transaction_id}")
async def delete_transaction(
    kind: TransactionKind,
    transaction_id: int = Path(..., ge=INTEGER_MIN, le=INTEGER_MAX),
    user_id: int = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_session),
):
    repo = repository_for(kind, session)

    deleted = await repo.delete(user_id, transaction_id)
    if not deleted:
        raise HTTPException(status_code=404, detail=f"{kind.value.capitalize()} not found")

    await session.commit()
    return {"message": f"{kind.value.capitalize()} deleted successfully"}


@router.get("/health")
async def healthcheck():
    return {"status": "ok"}
