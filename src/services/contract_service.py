"""Contract and escrow payment business logic service."""

import logging
from datetime import datetime, timezone
from typing import Any

from src.api.middleware.error_handler import AuthorizationError, BadRequestError, NotFoundError
from src.core.supabase import get_supabase_client
from src.models.activity import ActivityType
from src.models.contract import ContractStatus, PaymentStatus
from src.models.job import JobStatus
from src.models.notification import NotificationType
from src.models.proposal import ProposalStatus
from src.models.user import Role
from src.schemas.contract import ContractCreate, PaymentCreate
from src.services.activity_service import ActivityService
from src.services.notification_service import NotificationService
from src.services.proposal_service import ProposalService

logger = logging.getLogger(__name__)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class ContractService:
    """Service for hiring, completing contracts and releasing escrowed payments."""

    def __init__(self) -> None:
        """Initialize contract service with Supabase client."""
        self.client = get_supabase_client()
        self.proposals = ProposalService()
        self.jobs = self.proposals.jobs
        self.activities = ActivityService()
        self.notifications = NotificationService()

    async def get_contract(self, contract_id: int) -> dict[str, Any] | None:
        """Get a contract by id."""
        response = (
            self.client.table("contracts")
            .select("*")
            .eq("id", contract_id)
            .maybe_single()
            .execute()
        )
        return response.data if response and response.data else None

    async def require_contract(self, contract_id: int) -> dict[str, Any]:
        """Get a contract by id or raise NotFoundError."""
        contract = await self.get_contract(contract_id)
        if not contract:
            raise NotFoundError("Contract not found")
        return contract

    async def list_for_party(self, user_id: int, role: Role) -> list[dict[str, Any]]:
        """Contracts where the user is the client (for clients) or the freelancer, newest first."""
        column = "client_id" if role == Role.CLIENT else "freelancer_id"
        response = (
            self.client.table("contracts")
            .select("*")
            .eq(column, user_id)
            .order("created_at", desc=True)
            .execute()
        )
        return response.data or []

    async def create(self, client_id: int, data: ContractCreate) -> dict[str, Any]:
        """Hire the freelancer behind a proposal on the client's own job.

        The proposal becomes accepted and the job moves to in_progress.

        Raises:
            NotFoundError: If the proposal does not exist.
            AuthorizationError: If the caller does not own the job.
            BadRequestError: If the proposal was rejected or already has a contract.
        """
        proposal = await self.proposals.get_proposal(data.proposal_id)
        if not proposal:
            raise NotFoundError("Proposal not found")

        job = await self.jobs.get_job(proposal["job_id"])
        if not job or job["client_id"] != client_id:
            raise AuthorizationError("Not authorized to create this contract")

        if proposal["status"] == ProposalStatus.REJECTED.value:
            raise BadRequestError("Cannot create a contract from a rejected proposal")

        existing = (
            self.client.table("contracts").select("id").eq("proposal_id", proposal["id"]).execute()
        )
        if existing.data:
            raise BadRequestError("A contract already exists for this proposal")

        row = data.model_dump(mode="json")
        row.update(
            {
                "job_id": job["id"],
                "client_id": client_id,
                "freelancer_id": proposal["freelancer_id"],
                "status": ContractStatus.ACTIVE.value,
                "start_date": _now(),
            }
        )
        response = self.client.table("contracts").insert(row).execute()
        contract = response.data[0]
        logger.info("Client %s hired freelancer %s on job %s", client_id, contract["freelancer_id"], job["id"])

        if job["status"] != JobStatus.IN_PROGRESS.value:
            await self.jobs.set_status(job["id"], JobStatus.IN_PROGRESS)
        if proposal["status"] != ProposalStatus.ACCEPTED.value:
            self.client.table("proposals").update({"status": ProposalStatus.ACCEPTED.value}).eq(
                "id", proposal["id"]
            ).execute()

        await self.activities.record(
            client_id,
            ActivityType.CONTRACT_CREATED,
            {"contract_id": contract["id"], "job_id": job["id"], "freelancer_id": contract["freelancer_id"]},
        )
        await self.notifications.create(
            contract["freelancer_id"],
            "New contract",
            f'You were hired for "{job["title"]}"',
            NotificationType.SUCCESS,
            link=f"/contracts/{contract['id']}",
        )
        return contract

    async def set_status(
        self,
        contract_id: int,
        user_id: int,
        role: Role,
        status: ContractStatus,
    ) -> dict[str, Any]:
        """Complete or cancel an active contract.

        Completing a contract also completes its job.

        Raises:
            NotFoundError: If the contract does not exist.
            AuthorizationError: If the caller is not a party, or a non-client tries to complete it.
            BadRequestError: If the target status is active or the contract is no longer active.
        """
        if status == ContractStatus.ACTIVE:
            raise BadRequestError("Contracts can only be completed or canceled")

        contract = await self.require_contract(contract_id)

        if user_id not in (contract["client_id"], contract["freelancer_id"]):
            raise AuthorizationError("Not authorized to update this contract")

        if status == ContractStatus.COMPLETED and role != Role.CLIENT:
            raise AuthorizationError("Only clients can mark contracts as completed")

        if contract["status"] != ContractStatus.ACTIVE.value:
            raise BadRequestError(f"Contract is already {contract['status']}")

        changes = {"status": ContractStatus(status).value, "end_date": _now()}

        response = self.client.table("contracts").update(changes).eq("id", contract_id).execute()
        updated = response.data[0]

        if status == ContractStatus.COMPLETED:
            await self.jobs.set_status(contract["job_id"], JobStatus.COMPLETED)

        return updated

    async def get_payment(self, payment_id: int) -> dict[str, Any] | None:
        """Get a payment by id."""
        response = (
            self.client.table("payments")
            .select("*")
            .eq("id", payment_id)
            .maybe_single()
            .execute()
        )
        return response.data if response and response.data else None

    async def fund(self, client_id: int, data: PaymentCreate) -> dict[str, Any]:
        """Place a payment for the client's contract into escrow.

        Raises:
            NotFoundError: If the contract does not exist.
            AuthorizationError: If the caller is not the contract's client.
        """
        contract = await self.require_contract(data.contract_id)
        if contract["client_id"] != client_id:
            raise AuthorizationError("Not authorized to make payments for this contract")

        row = data.model_dump(mode="json")
        row["status"] = PaymentStatus.HELD.value

        response = self.client.table("payments").insert(row).execute()
        payment = response.data[0]
        logger.info("Client %s funded payment %s on contract %s", client_id, payment["id"], contract["id"])
        return payment

    async def release(self, payment_id: int, client_id: int) -> dict[str, Any]:
        """Release an escrowed payment to the freelancer.

        Raises:
            NotFoundError: If the payment does not exist.
            AuthorizationError: If the caller is not the contract's client.
            BadRequestError: If the payment is not held in escrow.
        """
        payment = await self.get_payment(payment_id)
        if not payment:
            raise NotFoundError("Payment not found")

        contract = await self.get_contract(payment["contract_id"])
        if not contract or contract["client_id"] != client_id:
            raise AuthorizationError("Not authorized to release this payment")

        if payment["status"] != PaymentStatus.HELD.value:
            raise BadRequestError("Payment is not in escrow")

        response = (
            self.client.table("payments")
            .update({"status": PaymentStatus.RELEASED.value, "updated_at": _now()})
            .eq("id", payment_id)
            .execute()
        )
        released = response.data[0]
        logger.info("Client %s released payment %s", client_id, payment_id)

        metadata = {
            "payment_id": payment_id,
            "contract_id": contract["id"],
            "freelancer_id": contract["freelancer_id"],
            "amount": payment["amount"],
        }
        for party in (client_id, contract["freelancer_id"]):
            await self.activities.record(party, ActivityType.PAYMENT_RELEASED, metadata)
        await self.notifications.create(
            contract["freelancer_id"],
            "Payment released",
            f"${payment['amount']:,.2f} was released for contract #{contract['id']}",
            NotificationType.SUCCESS,
            link=f"/contracts/{contract['id']}",
        )
        return released
