"""Job business logic service."""

import logging
import re
from typing import Any

from src.api.middleware.error_handler import NotFoundError
from src.core.supabase import get_supabase_client
from src.models.activity import ActivityType
from src.models.job import JobStatus
from src.schemas.job import JobCreate
from src.services.activity_service import ActivityService

logger = logging.getLogger(__name__)

# Characters with meaning in a PostgREST or= filter or an ilike pattern.
_FILTER_RESERVED = re.compile(r'[,()*%"\\]')


def search_term(raw: str) -> str | None:
    """Reduce free-text search input to a value safe inside an or= filter."""
    term = " ".join(_FILTER_RESERVED.sub(" ", raw).split())
    return term or None


class JobService:
    """Service for browsing and posting jobs."""

    DEFAULT_PAGE_SIZE = 10
    MAX_PAGE_SIZE = 100

    def __init__(self) -> None:
        """Initialize job service with Supabase client."""
        self.client = get_supabase_client()
        self.activities = ActivityService()

    async def list_jobs(
        self,
        client_id: int | None = None,
        category: str | None = None,
        status: JobStatus | None = None,
        search: str | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[dict[str, Any]]:
        """List jobs, newest first.

        Args:
            client_id: Only jobs posted by this client.
            category: Only jobs in this category.
            status: Only jobs in this status.
            search: Case-insensitive match on title or description.
            limit: Page size.
            offset: Rows to skip.

        Returns:
            list: Jobs rows.
        """
        page_size = min(limit or self.DEFAULT_PAGE_SIZE, self.MAX_PAGE_SIZE)

        query = self.client.table("jobs").select("*")

        if client_id is not None:
            query = query.eq("client_id", client_id)
        if category:
            query = query.eq("category", category)
        if status is not None:
            query = query.eq("status", JobStatus(status).value)
        term = search_term(search) if search else None
        if term:
            query = query.or_(f"title.ilike.%{term}%,description.ilike.%{term}%")

        response = (
            query.order("created_at", desc=True)
            .range(offset, offset + page_size - 1)
            .execute()
        )
        return response.data or []

    async def get_job(self, job_id: int) -> dict[str, Any] | None:
        """Get a job by id."""
        response = (
            self.client.table("jobs")
            .select("*")
            .eq("id", job_id)
            .maybe_single()
            .execute()
        )
        return response.data if response and response.data else None

    async def require_job(self, job_id: int) -> dict[str, Any]:
        """Get a job by id or raise NotFoundError."""
        job = await self.get_job(job_id)
        if not job:
            raise NotFoundError("Job not found")
        return job

    async def list_job_ids_for_client(self, client_id: int) -> list[int]:
        """Ids of every job a client has posted."""
        response = self.client.table("jobs").select("id").eq("client_id", client_id).execute()
        return [row["id"] for row in response.data or []]

    async def create_job(self, client_id: int, data: JobCreate) -> dict[str, Any]:
        """Post a new open job and record it in the client's feed.

        Returns:
            dict: The created jobs row.
        """
        row = data.model_dump(mode="json")
        row["client_id"] = client_id
        row["status"] = JobStatus.OPEN.value

        response = self.client.table("jobs").insert(row).execute()
        job = response.data[0]
        logger.info("Client %s posted job %s", client_id, job["id"])

        await self.activities.record(
            client_id,
            ActivityType.JOB_POSTED,
            {"job_id": job["id"], "job_title": job["title"]},
        )
        return job

    async def set_status(self, job_id: int, status: JobStatus) -> None:
        """Move a job to a new status."""
        self.client.table("jobs").update({"status": JobStatus(status).value}).eq("id", job_id).execute()
        logger.info("Job %s moved to %s", job_id, JobStatus(status).value)
