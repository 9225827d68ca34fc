"""Job API routes."""

from fastapi import APIRouter, Query, status

from src.api.deps import ClientAccount
from src.api.middleware.error_handler import NotFoundError
from src.models.job import JobStatus
from src.schemas.job import JobCreate, JobResponse
from src.services.job_service import JobService

router = APIRouter(prefix="/jobs", tags=["jobs"])


@router.get(
    "",
    response_model=list[JobResponse],
    summary="List jobs",
    description="Browse jobs, newest first. Filter by posting client, category, status or free text.",
)
async def list_jobs(
    client_id: int | None = Query(default=None, alias="clientId", description="Only jobs posted by this client"),
    category: str | None = Query(default=None, description="Category filter"),
    job_status: JobStatus | None = Query(default=None, alias="status", description="Status filter"),
    search: str | None = Query(default=None, max_length=100, description="Matches title or description"),
    limit: int = Query(default=10, ge=1, le=100, description="Page size"),
    offset: int = Query(default=0, ge=0, description="Rows to skip"),
) -> list[JobResponse]:
    """List jobs."""
    service = JobService()
    jobs = await service.list_jobs(
        client_id=client_id,
        category=category,
        status=job_status,
        search=search,
        limit=limit,
        offset=offset,
    )
    return [JobResponse(**job) for job in jobs]


@router.get("/{job_id}", response_model=JobResponse, summary="Get a job")
async def get_job(job_id: int) -> JobResponse:
    """Get a job by id."""
    service = JobService()
    job = await service.get_job(job_id)
    if not job:
        raise NotFoundError("Job not found")
    return JobResponse(**job)


@router.post(
    "",
    response_model=JobResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Post a job",
    description="Post a new open job. Clients only.",
)
async def create_job(data: JobCreate, account: ClientAccount) -> JobResponse:
    """Post a job as the calling client."""
    service = JobService()
    job = await service.create_job(account["id"], data)
    return JobResponse(**job)
