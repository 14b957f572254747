"""Billing API Routes

FastAPI routes for credit balance and history.
"""

from fastapi import APIRouter, Depends, Query, status
from sqlmodel.ext.asyncio.session import AsyncSession

from src.adapter.repositories.credit_transaction_repository import SqlAlchemyCreditTransactionRepository
from src.adapter.repositories.organization_repository import SqlAlchemyOrganizationRepository
from src.api.auth import get_current_organization
from src.api.error import ClientError
from src.app.use_cases.billing.dtos import BalanceResponseDTO, ListTransactionsResponseDTO
from src.app.use_cases.billing.get_balance import GetCreditBalance
from src.app.use_cases.billing.list_transactions import ListCreditTransactions
from src.depends import get_session
from src.domain.organization import Organization

router = APIRouter(prefix="/billing/credits", tags=["Billing"])


@router.get(
    "/balance",
    response_model=BalanceResponseDTO,
    status_code=status.HTTP_200_OK,
)
async def get_balance(
    organization: Organization = Depends(get_current_organization),
    session: AsyncSession = Depends(get_session),
):
    """
    Current credit balance of the caller's organization.

    **Example response:**
    ```json
    {
      "organization_id": "6f1c2f5e-8a9b-4c1d-9e2f-3a4b5c6d7e8f",
      "balance": 50,
      "subscription_tier": "payg",
      "last_updated": "2026-01-01T00:00:00Z"
    }
    ```
    """
    use_case = GetCreditBalance(SqlAlchemyOrganizationRepository(session))
    result = await use_case.execute(organization.id)

    if result.is_err():
        raise ClientError(result.error)

    return result.value


@router.get("/transactions", response_model=ListTransactionsResponseDTO)
async def list_transactions(
    limit: int = Query(default=20, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    organization: Organization = Depends(get_current_organization),
    session: AsyncSession = Depends(get_session),
):
    """Credit transaction history, newest first."""
    use_case = ListCreditTransactions(SqlAlchemyCreditTransactionRepository(session))
    result = await use_case.execute(organization.id, limit=limit, offset=offset)

    if result.is_err():
        raise ClientError(result.error)

    return result.value
