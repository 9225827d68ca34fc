"""Contract and escrow payment API routes."""

from fastapi import APIRouter, status

from src.api.deps import CurrentAccount, HiringAccount, account_role
from src.schemas.contract import (
    ContractCreate,
    ContractResponse,
    ContractStatusUpdate,
    PaymentCreate,
    PaymentResponse,
)
from src.services.contract_service import ContractService

router = APIRouter(tags=["contracts"])


@router.post(
    "/contracts",
    response_model=ContractResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Hire a freelancer",
    description="Turn a proposal on one of the caller's jobs into a contract. Clients only.",
)
async def create_contract(data: ContractCreate, account: HiringAccount) -> ContractResponse:
    """Create a contract from a proposal."""
    service = ContractService()
    contract = await service.create(account["id"], data)
    return ContractResponse(**contract)


@router.get(
    "/contracts/me",
    response_model=list[ContractResponse],
    summary="List my contracts",
    description="Clients see contracts they created; everyone else sees contracts they were hired on.",
)
async def list_my_contracts(account: CurrentAccount) -> list[ContractResponse]:
    """List the caller's contracts."""
    service = ContractService()
    contracts = await service.list_for_party(account["id"], account_role(account))
    return [ContractResponse(**contract) for contract in contracts]


@router.patch(
    "/contracts/{contract_id}",
    response_model=ContractResponse,
    summary="Complete or cancel a contract",
    description="Either party may cancel an active contract; only the client may complete it.",
)
async def update_contract_status(
    contract_id: int,
    data: ContractStatusUpdate,
    account: CurrentAccount,
) -> ContractResponse:
    """Update a contract's status."""
    service = ContractService()
    contract = await service.set_status(contract_id, account["id"], account_role(account), data.status)
    return ContractResponse(**contract)


@router.post(
    "/payments",
    response_model=PaymentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Fund a contract",
    description="Place a payment for one of the caller's contracts into escrow.",
)
async def fund_payment(data: PaymentCreate, account: HiringAccount) -> PaymentResponse:
    """Create an escrowed payment."""
    service = ContractService()
    payment = await service.fund(account["id"], data)
    return PaymentResponse(**payment)


@router.patch(
    "/payments/{payment_id}/release",
    response_model=PaymentResponse,
    summary="Release an escrowed payment",
)
async def release_payment(payment_id: int, account: HiringAccount) -> PaymentResponse:
    """Release a held payment to the freelancer."""
    service = ContractService()
    payment = await service.release(payment_id, account["id"])
    return PaymentResponse(**payment)
