"""
Access scope
Who is acting and what they may see or change
"""

from flask_jwt_extended import get_jwt, get_jwt_identity, verify_jwt_in_request

from sayit.errors import AuthenticationError, Forbidden
from sayit.models import (
    Agent, AnonymousUser, Complaint, Recipient, Staff, StandardUser, UserType
)


CITIZEN_TYPES = (UserType.STANDARD_USER.value, UserType.ANONYMOUS_USER.value)
HANDLER_TYPES = (UserType.AGENT.value, UserType.STAFF.value)

ACCOUNT_MODELS = {
    UserType.STANDARD_USER.value: StandardUser,
    UserType.ANONYMOUS_USER.value: AnonymousUser,
    UserType.AGENT.value: Agent,
    UserType.STAFF.value: Staff,
}


class Actor:
    """Authenticated principal, as carried in the access token"""

    def __init__(self, user_type, id, agency_id=None, role=None):
        self.user_type = user_type
        self.id = int(id)
        self.agency_id = int(agency_id) if agency_id is not None else None
        self.role = role

    @classmethod
    def from_jwt(cls):
        claims = get_jwt()
        user_type = claims.get('user_type')
        if user_type not in ACCOUNT_MODELS:
            raise AuthenticationError('Invalid token')
        return cls(user_type, get_jwt_identity(), claims.get('agency_id'), claims.get('role'))

    @classmethod
    def current(cls, optional=False):
        """Actor for the request, or None when optional and unauthenticated"""
        verify_jwt_in_request(optional=optional)
        if optional and get_jwt_identity() is None:
            return None
        return cls.from_jwt()

    @staticmethod
    def claims_for(account, user_type):
        """Extra token claims describing an account"""
        claims = {'user_type': user_type}
        if user_type == UserType.AGENT.value:
            claims['agency_id'] = account.agency_id
            claims['role'] = account.role
        elif user_type == UserType.STAFF.value:
            claims['role'] = account.role
        return claims

    @property
    def is_citizen(self):
        return self.user_type in CITIZEN_TYPES

    @property
    def is_agent(self):
        return self.user_type == UserType.AGENT.value

    @property
    def is_staff(self):
        return self.user_type == UserType.STAFF.value

    @property
    def is_handler(self):
        return self.user_type in HANDLER_TYPES

    @property
    def is_admin(self):
        return self.is_staff and self.role == 'admin'

    @property
    def recipient(self):
        """Notification recipient for this actor; staff have no inbox"""
        if self.is_staff:
            return None
        return Recipient(self.user_type, self.id)

    def load(self):
        """Fetch the account row, rejecting missing or inactive accounts"""
        account = ACCOUNT_MODELS[self.user_type].query.get(self.id)
        if not account or not account.is_active:
            raise AuthenticationError('Account not found or inactive')
        if isinstance(account, AnonymousUser) and account.is_expired():
            raise AuthenticationError('Access code has expired')
        return account

    def owns(self, complaint):
        if self.user_type == UserType.STANDARD_USER.value:
            return complaint.standard_user_id == self.id
        if self.user_type == UserType.ANONYMOUS_USER.value:
            return complaint.anonymous_user_id == self.id
        return False

    def __repr__(self):
        return f'<Actor {self.user_type}:{self.id}>'


class Scope:
    """Single permission object shared by every complaint-management view"""

    def __init__(self, actor):
        self.actor = actor

    @property
    def is_admin(self):
        return self.actor.is_admin

    def can_view(self, complaint):
        actor = self.actor
        if actor.is_staff:
            return complaint.agency_id is not None or actor.is_admin
        if actor.is_agent:
            return complaint.agency_id is not None and complaint.agency_id == actor.agency_id
        return actor.owns(complaint)

    def can_manage(self, complaint):
        """Status, priority, assignment and notes changes"""
        if self.actor.is_staff:
            return self.can_view(complaint)
        return self.actor.is_agent and self.can_view(complaint)

    def can_respond(self, complaint):
        return self.can_view(complaint)

    def can_post_internal(self, complaint):
        return self.can_manage(complaint)

    def can_reassign_agency(self):
        return self.actor.is_staff

    def sees_internal(self, complaint):
        return self.actor.is_handler and self.can_view(complaint)

    def require_view(self, complaint):
        if not self.can_view(complaint):
            raise Forbidden('You do not have access to this complaint')

    def require_manage(self, complaint):
        if not self.can_manage(complaint):
            raise Forbidden('You are not authorized to update this complaint')

    def filter_complaints(self, query):
        """Restrict a complaint query to what the actor may see"""
        actor = self.actor
        if actor.is_staff:
            if actor.is_admin:
                return query
            # unassigned complaints are routed by administrators only
            return query.filter(Complaint.agency_id.isnot(None))
        if actor.is_agent:
            return query.filter(Complaint.agency_id == actor.agency_id)
        if actor.user_type == UserType.STANDARD_USER.value:
            return query.filter(Complaint.standard_user_id == actor.id)
        return query.filter(Complaint.anonymous_user_id == actor.id)
