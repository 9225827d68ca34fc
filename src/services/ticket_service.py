"""Support ticket business logic service."""

import logging
from datetime import datetime, timezone
from typing import Any

from src.api.middleware.error_handler import NotFoundError
from src.core.supabase import get_supabase_client
from src.models.ticket import TicketStatus
from src.schemas.ticket import TicketCreate, TicketUpdate

logger = logging.getLogger(__name__)


class TicketService:
    """Service for filing, listing and handling support tickets."""

    def __init__(self) -> None:
        """Initialize ticket service with Supabase client."""
        self.client = get_supabase_client()

    async def create_ticket(self, user_id: int, data: TicketCreate) -> dict[str, Any]:
        """File a new ticket in status "new".

        Returns:
            dict: The created support_tickets row.
        """
        row = data.model_dump(mode="json")
        row["user_id"] = user_id
        row["status"] = TicketStatus.NEW.value

        response = self.client.table("support_tickets").insert(row).execute()
        ticket = response.data[0]
        logger.info("User %s filed %s ticket %s (%s)", user_id, ticket["type"], ticket["id"], ticket["priority"])
        return ticket

    async def list_tickets(self, user_id: int | None = None, status: TicketStatus | None = None) -> list[dict[str, Any]]:
        """List tickets, newest first.

        Args:
            user_id: Only tickets filed by this user; None lists every ticket.
            status: Optional status filter.
        """
        query = self.client.table("support_tickets").select("*")
        if user_id is not None:
            query = query.eq("user_id", user_id)
        if status is not None:
            query = query.eq("status", TicketStatus(status).value)
        response = query.order("created_at", desc=True).execute()
        return response.data or []

    async def update_ticket(self, ticket_id: int, data: TicketUpdate) -> dict[str, Any]:
        """Change a ticket's status or assignee.

        Moving a ticket to resolved or closed stamps resolved_at.

        Raises:
            NotFoundError: If the ticket does not exist.
        """
        changes = data.model_dump(mode="json", exclude_unset=True)
        now = datetime.now(timezone.utc).isoformat()
        changes["updated_at"] = now
        if data.status in (TicketStatus.RESOLVED, TicketStatus.CLOSED):
            changes["resolved_at"] = now

        response = self.client.table("support_tickets").update(changes).eq("id", ticket_id).execute()
        if not response.data:
            raise NotFoundError("Ticket not found")
        ticket = response.data[0]
        logger.info("Ticket %s now %s, assigned to %s", ticket_id, ticket["status"], ticket.get("assigned_to_id"))
        return ticket
