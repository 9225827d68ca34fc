"""Proposal business logic service."""

import logging
from typing import Any

from src.api.middleware.error_handler import AuthorizationError, BadRequestError, NotFoundError
from src.core.supabase import get_supabase_client
from src.models.activity import ActivityType
from src.models.job import JobStatus
from src.models.proposal import ProposalStatus
from src.schemas.proposal import ProposalCreate
from src.services.activity_service import ActivityService
from src.services.job_service import JobService

logger = logging.getLogger(__name__)


class ProposalService:
    """Service for submitting and reviewing proposals."""

    def __init__(self) -> None:
        """Initialize proposal service with Supabase client."""
        self.client = get_supabase_client()
        self.jobs = JobService()
        self.activities = ActivityService()

    async def get_proposal(self, proposal_id: int) -> dict[str, Any] | None:
        """Get a proposal by id."""
        response = (
            self.client.table("proposals")
            .select("*")
            .eq("id", proposal_id)
            .maybe_single()
            .execute()
        )
        return response.data if response and response.data else None

    async def list_for_freelancer(self, freelancer_id: int, job_id: int | None = None) -> list[dict[str, Any]]:
        """Proposals a freelancer has submitted, newest first."""
        query = self.client.table("proposals").select("*").eq("freelancer_id", freelancer_id)
        if job_id is not None:
            query = query.eq("job_id", job_id)
        response = query.order("created_at", desc=True).execute()
        return response.data or []

    async def list_for_client(self, client_id: int, job_id: int | None = None) -> list[dict[str, Any]]:
        """Proposals received on a client's jobs, newest first.

        Raises:
            AuthorizationError: If ``job_id`` names a job the client does not own.
        """
        if job_id is not None:
            job = await self.jobs.require_job(job_id)
            if job["client_id"] != client_id:
                raise AuthorizationError("Not authorized to view these proposals")
            job_ids = [job_id]
        else:
            job_ids = await self.jobs.list_job_ids_for_client(client_id)

        if not job_ids:
            return []

        response = (
            self.client.table("proposals")
            .select("*")
            .in_("job_id", job_ids)
            .order("created_at", desc=True)
            .execute()
        )
        return response.data or []

    async def list_all(self, job_id: int | None = None) -> list[dict[str, Any]]:
        """Every proposal, for staff roles."""
        query = self.client.table("proposals").select("*")
        if job_id is not None:
            query = query.eq("job_id", job_id)
        response = query.order("created_at", desc=True).execute()
        return response.data or []

    async def submit(self, freelancer_id: int, data: ProposalCreate) -> dict[str, Any]:
        """Submit a proposal on an open job.

        Raises:
            NotFoundError: If the job does not exist.
            BadRequestError: If the job is not open or the freelancer already applied.
        """
        job = await self.jobs.require_job(data.job_id)

        if job["status"] != JobStatus.OPEN.value:
            raise BadRequestError("Cannot submit proposal for a closed job")

        existing = await self.list_for_freelancer(freelancer_id, job_id=data.job_id)
        if existing:
            raise BadRequestError("You have already submitted a proposal for this job")

        row = data.model_dump(mode="json")
        row["freelancer_id"] = freelancer_id
        row["status"] = ProposalStatus.PENDING.value

        response = self.client.table("proposals").insert(row).execute()
        proposal = response.data[0]
        logger.info("Freelancer %s submitted proposal %s on job %s", freelancer_id, proposal["id"], data.job_id)

        await self.activities.record(
            freelancer_id,
            ActivityType.PROPOSAL_SUBMITTED,
            {"job_id": data.job_id, "proposal_id": proposal["id"]},
        )
        return proposal

    async def set_status(self, proposal_id: int, client_id: int, status: ProposalStatus) -> dict[str, Any]:
        """Accept or reject a proposal on the client's own job.

        Accepting a proposal moves the job to in_progress.

        Raises:
            NotFoundError: If the proposal does not exist.
            AuthorizationError: If the caller does not own the job.
        """
        proposal = await self.get_proposal(proposal_id)
        if not proposal:
            raise NotFoundError("Proposal not found")

        job = await self.jobs.get_job(proposal["job_id"])
        if not job or job["client_id"] != client_id:
            raise AuthorizationError("Not authorized to update this proposal")

        response = (
            self.client.table("proposals")
            .update({"status": ProposalStatus(status).value})
            .eq("id", proposal_id)
            .execute()
        )
        updated = response.data[0]

        if status == ProposalStatus.ACCEPTED and job["status"] == JobStatus.OPEN.value:
            await self.jobs.set_status(job["id"], JobStatus.IN_PROGRESS)

        return updated
