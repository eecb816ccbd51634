# transaction_api/api/v1/transactions.py
from fastapi import APIRouter, Depends, Header, Path, Query, Response, status
from typing import Optional, Tuple

from transaction_api.api.v1.deps import get_transaction_service, sort_params
from transaction_api.schemas.simple import ApiResponse, ErrorResponse
from transaction_api.schemas.transaction import (
    TransactionCreate,
    TransactionOut,
    TransactionPage,
    TransactionUpdate,
)
from transaction_api.services.transactions import MAX_ID, MAX_PAGE, TransactionService

router = APIRouter(tags=["transactions"])

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
}


@router.get("", response_model=ApiResponse[TransactionPage], responses={400: {"model": ErrorResponse}})
def list_transactions(
    page: int = Query(0, ge=0, le=MAX_PAGE, description="Page number (0-based)"),
    size: int = Query(10, ge=1, le=200, description="Page size"),
    sort: Tuple[str, str] = Depends(sort_params),
    service: TransactionService = Depends(get_transaction_service),
):
    """
    Paginated list of transactions. Results are cached per (page, size, sort)
    until the next write.
    """
    sort_field, sort_direction = sort
    return ApiResponse(data=service.list(page, size, sort_field, sort_direction))


@router.get("/{txn_id}", response_model=ApiResponse[TransactionOut], responses=ERROR_RESPONSES)
def get_transaction(
    txn_id: int = Path(..., ge=1, le=MAX_ID),
    service: TransactionService = Depends(get_transaction_service),
):
    return ApiResponse(data=service.get(txn_id))


@router.post(
    "",
    response_model=ApiResponse[TransactionOut],
    responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
def create_transaction(
    payload: TransactionCreate,
    idempotency_key: Optional[str] = Header(None, alias="Idempotency-Key"),
    service: TransactionService = Depends(get_transaction_service),
):
    """
    Create a transaction. Requires an Idempotency-Key header; a key can be
    used once per 30 minutes. Expect JSON:
    {
      "description": "Salary",
      "amount": 100.00,
      "type": "INCOME" | "EXPENSE"
    }
    """
    return ApiResponse(data=service.create(payload, idempotency_key))


@router.put("/{txn_id}", response_model=ApiResponse[TransactionOut], responses=ERROR_RESPONSES)
def update_transaction(
    payload: TransactionUpdate,
    txn_id: int = Path(..., ge=1, le=MAX_ID),
    service: TransactionService = Depends(get_transaction_service),
):
    return ApiResponse(data=service.update(txn_id, payload))


@router.delete("/{txn_id}", status_code=status.HTTP_204_NO_CONTENT, responses=ERROR_RESPONSES)
def delete_transaction(
    txn_id: int = Path(..., ge=1, le=MAX_ID),
    service: TransactionService = Depends(get_transaction_service),
):
    service.delete(txn_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
