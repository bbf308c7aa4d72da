"""
Models package initialization
Import all models here for easy access
"""

from sayit.models.agency import Agency
from sayit.models.category import Category
from sayit.models.user import (
    UserType, StaffRole, AgentRole, StandardUser, AnonymousUser, Agent, Staff
)
from sayit.models.notification import (
    Notification, NotificationType, NotificationPriority, Recipient, EntityRef
)
from sayit.models.complaint import (
    Complaint, ComplaintStatus, ComplaintPriority, SubmissionType, Attachment
)
from sayit.models.response import Response
from sayit.models.feedback import Feedback
from sayit.models.password_reset_token import PasswordResetToken

__all__ = [
    'Agency',
    'Category',
    'UserType',
    'StaffRole',
    'AgentRole',
    'StandardUser',
    'AnonymousUser',
    'Agent',
    'Staff',
    'Notification',
    'NotificationType',
    'NotificationPriority',
    'Recipient',
    'EntityRef',
    'Complaint',
    'ComplaintStatus',
    'ComplaintPriority',
    'SubmissionType',
    'Attachment',
    'Response',
    'Feedback',
    'PasswordResetToken',
]
