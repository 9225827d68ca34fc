"""Support ticket API routes."""

from fastapi import APIRouter, Query, status

from src.api.deps import CurrentAccount, TicketHandlerAccount, account_role
from src.api.middleware.error_handler import BadRequestError
from src.core.permissions import Capability, has_capability
from src.models.ticket import TicketStatus
from src.schemas.ticket import TicketCreate, TicketResponse, TicketUpdate
from src.services.ticket_service import TicketService
from src.services.user_service import UserService

router = APIRouter(prefix="/tickets", tags=["tickets"])


@router.post(
    "",
    response_model=TicketResponse,
    status_code=status.HTTP_201_CREATED,
    summary="File a support ticket",
)
async def create_ticket(data: TicketCreate, account: CurrentAccount) -> TicketResponse:
    """File a ticket as the caller."""
    service = TicketService()
    ticket = await service.create_ticket(account["id"], data)
    return TicketResponse(**ticket)


@router.get(
    "",
    response_model=list[TicketResponse],
    summary="List support tickets",
    description="Support staff see every ticket; everyone else sees their own.",
)
async def list_tickets(
    account: CurrentAccount,
    ticket_status: TicketStatus | None = Query(default=None, alias="status"),
) -> list[TicketResponse]:
    """List tickets visible to the caller."""
    service = TicketService()
    owner = None if has_capability(account_role(account), Capability.VIEW_ALL_TICKETS) else account["id"]
    tickets = await service.list_tickets(user_id=owner, status=ticket_status)
    return [TicketResponse(**ticket) for ticket in tickets]


@router.patch(
    "/{ticket_id}",
    response_model=TicketResponse,
    summary="Update a support ticket",
    description="Support staff change a ticket's status or assign it to a staff member.",
)
async def update_ticket(ticket_id: int, data: TicketUpdate, account: TicketHandlerAccount) -> TicketResponse:
    """Move a ticket along its workflow."""
    if data.assigned_to_id is not None:
        assignee = await UserService().get_user(data.assigned_to_id)
        if not assignee or not has_capability(account_role(assignee), Capability.HANDLE_TICKETS):
            raise BadRequestError("Tickets can only be assigned to support staff")

    service = TicketService()
    ticket = await service.update_ticket(ticket_id, data)
    return TicketResponse(**ticket)
