"""Proposal API routes."""

from typing import Any

from fastapi import APIRouter, Query, status
from typing_extensions import assert_never

from src.api.deps import CurrentAccount, FreelancerAccount, ReviewerAccount, account_role
from src.models.user import Role
from src.schemas.proposal import ProposalCreate, ProposalResponse, ProposalStatusUpdate
from src.services.proposal_service import ProposalService

router = APIRouter(prefix="/proposals", tags=["proposals"])


async def _visible_proposals(
    service: ProposalService,
    account: dict[str, Any],
    job_id: int | None,
) -> list[dict[str, Any]]:
    role = account_role(account)
    match role:
        case Role.FREELANCER:
            return await service.list_for_freelancer(account["id"], job_id=job_id)
        case Role.CLIENT:
            return await service.list_for_client(account["id"], job_id=job_id)
        case Role.ADMIN | Role.SUPPORT | Role.QA | Role.DISPUTE_RESOLUTION | Role.ACCOUNTS:
            return await service.list_all(job_id=job_id)
        case _:
            assert_never(role)


@router.get(
    "",
    response_model=list[ProposalResponse],
    summary="List proposals",
    description=(
        "Freelancers see their own proposals, clients see proposals on their jobs, "
        "staff see all. Optionally filter by job."
    ),
)
async def list_proposals(
    account: CurrentAccount,
    job_id: int | None = Query(default=None, alias="jobId", description="Only proposals on this job"),
) -> list[ProposalResponse]:
    """List the proposals visible to the caller."""
    service = ProposalService()
    proposals = await _visible_proposals(service, account, job_id)
    return [ProposalResponse(**proposal) for proposal in proposals]


@router.post(
    "",
    response_model=ProposalResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Submit a proposal",
    description="Bid on an open job. Freelancers only, one proposal per job.",
)
async def submit_proposal(data: ProposalCreate, account: FreelancerAccount) -> ProposalResponse:
    """Submit a proposal as the calling freelancer."""
    service = ProposalService()
    proposal = await service.submit(account["id"], data)
    return ProposalResponse(**proposal)


@router.patch(
    "/{proposal_id}",
    response_model=ProposalResponse,
    summary="Accept or reject a proposal",
    description="Set a proposal's status. Only the owner of the job may do this.",
)
async def update_proposal_status(
    proposal_id: int,
    data: ProposalStatusUpdate,
    account: ReviewerAccount,
) -> ProposalResponse:
    """Update a proposal's status."""
    service = ProposalService()
    proposal = await service.set_status(proposal_id, account["id"], data.status)
    return ProposalResponse(**proposal)
