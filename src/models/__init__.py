"""Database model type definitions."""

from src.models.activity import Activity, ActivityType
from src.models.contract import Contract, ContractStatus, Payment, PaymentStatus
from src.models.job import Job, JobStatus
from src.models.message import Message
from src.models.notification import Notification, NotificationType
from src.models.proposal import Proposal, ProposalStatus
from src.models.review import Review
from src.models.ticket import SupportTicket, TicketPriority, TicketStatus, TicketType
from src.models.user import Role, User

__all__ = [
    "Activity",
    "ActivityType",
    "Contract",
    "ContractStatus",
    "Job",
    "JobStatus",
    "Message",
    "Notification",
    "NotificationType",
    "Payment",
    "PaymentStatus",
    "Proposal",
    "ProposalStatus",
    "Review",
    "Role",
    "SupportTicket",
    "TicketPriority",
    "TicketStatus",
    "TicketType",
    "User",
]
