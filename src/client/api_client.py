"""Async HTTP client for the marketplace API.

Reads go through a QueryCache so that screens sharing a request share one
fetch. Every mutation names the keys it makes stale and invalidates them
once the server has accepted the change.
"""

import logging
from typing import Any

import httpx
from pydantic import BaseModel

from src.client.errors import AccessDeniedError, ApiError, NetworkError, ResourceNotFoundError
from src.client.query_cache import QueryCache, QueryCacheConfig, QueryResult, query_key
from src.core.config import ClientSettings, get_client_settings
from src.models.proposal import ProposalStatus
from src.schemas.auth import LoginRequest, SignupRequest
from src.schemas.job import JobCreate
from src.schemas.message import MessageCreate
from src.schemas.proposal import ProposalCreate, ProposalStatusUpdate
from src.schemas.ticket import TicketCreate
from src.schemas.user import UserUpdateRequest

logger = logging.getLogger(__name__)

JOBS_PATH = "/api/jobs"
PROPOSALS_PATH = "/api/proposals"
MESSAGES_PATH = "/api/messages"
CONVERSATIONS_PATH = "/api/messages/conversations"
UNREAD_COUNT_PATH = "/api/messages/unread-count"
ACTIVITIES_PATH = "/api/activities"
TICKETS_PATH = "/api/tickets"
USERS_PATH = "/api/users"
PROFILE_PATH = "/api/users/me"
ME_PATH = "/api/auth/me"


def thread_path(counterpart_id: int) -> str:
    """Path of the thread between the caller and ``counterpart_id``."""
    return f"{MESSAGES_PATH}/{counterpart_id}"


def job_path(job_id: int) -> str:
    return f"{JOBS_PATH}/{job_id}"


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict):
        return str(body.get("message") or body.get("detail") or body.get("error") or response.reason_phrase)
    return response.reason_phrase


class MarketplaceClient:
    """Typed async access to the marketplace REST API.

    Example:
        async with MarketplaceClient() as client:
            client.set_token(token)
            result = await client.list_jobs(status="open")
    """

    def __init__(
        self,
        base_url: str | None = None,
        *,
        token: str | None = None,
        cache: QueryCache | None = None,
        settings: ClientSettings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.settings = settings or get_client_settings()
        self.cache = cache or QueryCache(QueryCacheConfig.from_settings(self.settings))
        self._token = token
        self._http = httpx.AsyncClient(
            base_url=base_url or self.settings.api_base_url,
            timeout=self.settings.request_timeout_seconds,
            transport=transport,
        )

    async def __aenter__(self) -> "MarketplaceClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP connection pool."""
        await self._http.aclose()

    @property
    def token(self) -> str | None:
        return self._token

    def set_token(self, token: str | None) -> None:
        """Set (or clear) the bearer token sent with every request."""
        self._token = token

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        body: BaseModel | dict | None = None,
    ) -> Any:
        """Send one request and decode its JSON body.

        Raises:
            NetworkError: The request never got a response.
            AccessDeniedError: 401 or 403.
            ResourceNotFoundError: 404.
            ApiError: Any other error status.
        """
        headers = {"Authorization": f"Bearer {self._token}"} if self._token else {}
        if params:
            params = {name: value for name, value in params.items() if value is not None}
        payload = body.model_dump(mode="json", exclude_none=True) if isinstance(body, BaseModel) else body

        try:
            response = await self._http.request(method, path, params=params, json=payload, headers=headers)
        except httpx.TransportError as e:
            logger.warning("%s %s failed: %s", method, path, e)
            raise NetworkError(f"Could not reach the marketplace API: {e}") from e

        if response.status_code in (401, 403):
            raise AccessDeniedError(_error_message(response), response.status_code)
        if response.status_code == 404:
            raise ResourceNotFoundError(_error_message(response), 404)
        if response.is_error:
            logger.error("%s %s returned %d", method, path, response.status_code)
            raise ApiError(_error_message(response), response.status_code)

        if not response.content:
            return None
        return response.json()

    async def _cached(
        self,
        path: str,
        params: dict[str, Any] | None = None,
        *,
        stale_time: float | None = None,
        missing_ok: bool = False,
    ) -> QueryResult:
        key = query_key(path, params)

        async def fetch() -> Any:
            try:
                return await self.request("GET", path, params=params)
            except ResourceNotFoundError:
                if missing_ok:
                    return None
                raise

        return await self.cache.read(key, fetch, stale_time=stale_time)

    # Auth

    async def login(self, email: str, password: str) -> dict:
        """Log in with local credentials and adopt the returned token."""
        data = LoginRequest(email=email, password=password)
        result = await self.request("POST", "/api/auth/login", body=data)
        self.set_token(result["access_token"])
        return result

    async def signup(
        self,
        email: str,
        password: str,
        username: str,
        full_name: str,
        role: str = "client",
    ) -> dict:
        """Create an account and adopt the returned token."""
        data = SignupRequest(email=email, password=password, username=username, full_name=full_name, role=role)
        result = await self.request("POST", "/api/auth/signup", body=data)
        self.set_token(result["access_token"])
        return result

    async def logout(self) -> None:
        await self.request("POST", "/api/auth/logout")

    async def get_me(self) -> dict:
        """Fetch the caller's account. Never cached."""
        return await self.request("GET", ME_PATH)

    # Reads

    async def list_users(self) -> QueryResult:
        return await self._cached(USERS_PATH)

    async def get_user(self, user_id: int) -> QueryResult:
        return await self._cached(f"{USERS_PATH}/{user_id}", missing_ok=True)

    async def list_jobs(
        self,
        *,
        client_id: int | None = None,
        category: str | None = None,
        status: str | None = None,
        search: str | None = None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> QueryResult:
        params = {
            "clientId": client_id,
            "category": category,
            "status": status,
            "search": search,
            "limit": limit,
            "offset": offset,
        }
        return await self._cached(JOBS_PATH, params)

    async def get_job(self, job_id: int) -> QueryResult:
        """Get one job; a missing job yields ``data=None`` with no error."""
        return await self._cached(job_path(job_id), missing_ok=True)

    async def list_proposals(self, job_id: int | None = None) -> QueryResult:
        return await self._cached(PROPOSALS_PATH, {"jobId": job_id})

    async def list_messages(self) -> QueryResult:
        return await self._cached(MESSAGES_PATH)

    async def list_conversations(self, limit: int | None = None) -> QueryResult:
        return await self._cached(CONVERSATIONS_PATH, {"limit": limit})

    async def get_thread(self, counterpart_id: int) -> QueryResult:
        """Get a chat thread. Refetched on the chat poll interval."""
        return await self._cached(
            thread_path(counterpart_id),
            stale_time=self.cache.config.poll_interval_seconds,
        )

    async def unread_count(self) -> QueryResult:
        return await self._cached(UNREAD_COUNT_PATH)

    async def list_activities(self, limit: int = 10) -> QueryResult:
        return await self._cached(ACTIVITIES_PATH, {"limit": limit})

    async def list_tickets(self, status: str | None = None) -> QueryResult:
        return await self._cached(TICKETS_PATH, {"status": status})

    # Mutations

    async def post_job(self, **fields: Any) -> dict:
        data = JobCreate(**fields)
        job = await self.request("POST", JOBS_PATH, body=data)
        self.cache.invalidate_path(JOBS_PATH)
        self.cache.invalidate_path(ACTIVITIES_PATH)
        return job

    async def submit_proposal(
        self,
        job_id: int,
        bid_amount: float,
        estimated_duration: str,
        cover_letter: str,
    ) -> dict:
        data = ProposalCreate(
            job_id=job_id,
            bid_amount=bid_amount,
            estimated_duration=estimated_duration,
            cover_letter=cover_letter,
        )
        proposal = await self.request("POST", PROPOSALS_PATH, body=data)
        self.cache.invalidate_path(PROPOSALS_PATH)
        self.cache.invalidate_path(ACTIVITIES_PATH)
        return proposal

    async def update_proposal_status(self, proposal_id: int, status: ProposalStatus | str) -> dict:
        data = ProposalStatusUpdate(status=status)
        proposal = await self.request("PATCH", f"{PROPOSALS_PATH}/{proposal_id}", body=data)
        self.cache.invalidate_path(PROPOSALS_PATH)
        self.cache.invalidate_path(JOBS_PATH)
        self.cache.invalidate_path(job_path(proposal["job_id"]))
        return proposal

    async def send_message(self, receiver_id: int, content: str, job_id: int | None = None) -> dict:
        """Send a message, then mark the thread and list views stale."""
        data = MessageCreate(receiver_id=receiver_id, content=content, job_id=job_id)
        message = await self.request("POST", MESSAGES_PATH, body=data)
        self.cache.invalidate_path(thread_path(receiver_id))
        self.cache.invalidate_path(MESSAGES_PATH)
        self.cache.invalidate_path(CONVERSATIONS_PATH)
        self.cache.invalidate_path(ACTIVITIES_PATH)
        return message

    async def mark_read(self, message_id: int) -> dict:
        message = await self.request("PATCH", f"{MESSAGES_PATH}/{message_id}/read")
        self.cache.invalidate_path(thread_path(message["sender_id"]))
        self.cache.invalidate_path(MESSAGES_PATH)
        self.cache.invalidate_path(CONVERSATIONS_PATH)
        self.cache.invalidate_path(UNREAD_COUNT_PATH)
        return message

    async def create_ticket(self, **fields: Any) -> dict:
        data = TicketCreate(**fields)
        ticket = await self.request("POST", TICKETS_PATH, body=data)
        self.cache.invalidate_path(TICKETS_PATH)
        return ticket

    async def update_profile(self, **fields: Any) -> dict:
        data = UserUpdateRequest(**fields)
        user = await self.request("PATCH", PROFILE_PATH, body=data)
        self.cache.invalidate_path(PROFILE_PATH)
        self.cache.invalidate_path(f"{USERS_PATH}/{user['id']}")
        return user
