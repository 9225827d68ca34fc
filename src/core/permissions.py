"""Role-based capabilities.

Every decision that depends on an account's role is expressed here as an
exhaustive match on Role. Adding a role without extending these functions is
a type error (``assert_never``), not a silent fall-through.
"""

from enum import Enum

from typing_extensions import assert_never

from src.models.user import Role


class Capability(str, Enum):
    """Actions gated by role."""

    POST_JOBS = "post_jobs"
    REVIEW_PROPOSALS = "review_proposals"
    HIRE_FREELANCERS = "hire_freelancers"
    SUBMIT_PROPOSALS = "submit_proposals"
    SEND_MESSAGES = "send_messages"
    FILE_TICKETS = "file_tickets"
    VIEW_ALL_TICKETS = "view_all_tickets"
    HANDLE_TICKETS = "handle_tickets"
    NOTIFY_USERS = "notify_users"
    LIST_USERS = "list_users"
    MANAGE_USERS = "manage_users"
    RESOLVE_DISPUTES = "resolve_disputes"
    MANAGE_PAYMENTS = "manage_payments"


_MEMBER_BASE = frozenset({Capability.SEND_MESSAGES, Capability.FILE_TICKETS})
_STAFF_BASE = frozenset(
    {
        Capability.SEND_MESSAGES,
        Capability.VIEW_ALL_TICKETS,
        Capability.HANDLE_TICKETS,
        Capability.NOTIFY_USERS,
        Capability.LIST_USERS,
    }
)


def capabilities_for(role: Role) -> frozenset[Capability]:
    """Return the capabilities granted to a role."""
    match role:
        case Role.CLIENT:
            return _MEMBER_BASE | {Capability.POST_JOBS, Capability.REVIEW_PROPOSALS, Capability.HIRE_FREELANCERS}
        case Role.FREELANCER:
            return _MEMBER_BASE | {Capability.SUBMIT_PROPOSALS}
        case Role.ADMIN:
            return frozenset(Capability)
        case Role.SUPPORT | Role.QA:
            return _STAFF_BASE
        case Role.DISPUTE_RESOLUTION:
            return _STAFF_BASE | {Capability.RESOLVE_DISPUTES}
        case Role.ACCOUNTS:
            return _STAFF_BASE | {Capability.MANAGE_PAYMENTS}
        case _:
            assert_never(role)


def has_capability(role: Role, capability: Capability) -> bool:
    """Check whether a role grants a capability."""
    return capability in capabilities_for(role)


def dashboard_sections(role: Role) -> list[str]:
    """Return the dashboard sections shown to a role, in display order."""
    match role:
        case Role.CLIENT:
            return ["my_jobs", "proposals_received", "messages", "activity"]
        case Role.FREELANCER:
            return ["find_work", "my_proposals", "messages", "activity"]
        case Role.ADMIN:
            return ["users", "jobs", "tickets", "disputes", "payments"]
        case Role.SUPPORT:
            return ["tickets", "users", "messages"]
        case Role.QA:
            return ["tickets", "jobs"]
        case Role.DISPUTE_RESOLUTION:
            return ["disputes", "tickets", "messages"]
        case Role.ACCOUNTS:
            return ["payments", "users"]
        case _:
            assert_never(role)


def can_self_register(role: Role) -> bool:
    """Check whether an account with this role may be created without an administrator."""
    match role:
        case Role.CLIENT | Role.FREELANCER:
            return True
        case Role.ADMIN | Role.SUPPORT | Role.QA | Role.DISPUTE_RESOLUTION | Role.ACCOUNTS:
            return False
        case _:
            assert_never(role)
