"""
SAYIT - Shared Test Fixtures
Application, client, account factories and auth headers.
"""

import pytest
from flask_jwt_extended import create_access_token

from extensions import db
from sayit import create_app
from sayit.models import (
    Agency, Agent, AnonymousUser, Category, Staff, StaffRole, StandardUser, UserType
)
from sayit.services import lifecycle
from sayit.services.access import Actor


# =============================================================================
# Core Fixtures
# =============================================================================

@pytest.fixture
def app(tmp_path):
    """Application bound to a fresh in-memory database."""
    app = create_app('testing')
    app.config['UPLOAD_FOLDER'] = str(tmp_path / 'uploads')

    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


# =============================================================================
# Factories
# =============================================================================

class Factory:
    """Creates persisted rows with sensible defaults."""

    def __init__(self):
        self.counter = 0

    def _next(self):
        self.counter += 1
        return self.counter

    def agency(self, name=None, **kwargs):
        n = self._next()
        agency = Agency(name=name or f'Agency {n}', short_name=f'AG{n}', **kwargs)
        db.session.add(agency)
        db.session.commit()
        return agency

    def category(self, name=None, default_agency=None, **kwargs):
        category = Category(
            name=name or f'Category {self._next()}',
            default_agency_id=default_agency.id if default_agency else None,
            **kwargs
        )
        db.session.add(category)
        db.session.commit()
        return category

    def standard_user(self, email=None, password='password123'):
        n = self._next()
        user = StandardUser(name=f'Citizen {n}', email=email or f'citizen{n}@example.com', password=password)
        db.session.add(user)
        db.session.commit()
        return user

    def anonymous_user(self, expiry_days=30):
        user = AnonymousUser(expiry_days=expiry_days)
        db.session.add(user)
        db.session.commit()
        return user

    def agent(self, agency, email=None, password='password123'):
        n = self._next()
        agent = Agent(name=f'Agent {n}', email=email or f'agent{n}@gov.example',
                      password=password, agency_id=agency.id)
        db.session.add(agent)
        db.session.commit()
        return agent

    def staff(self, role=StaffRole.MODERATOR.value, email=None, password='password123'):
        n = self._next()
        member = Staff(name=f'Staff {n}', email=email or f'staff{n}@sayit.example',
                       password=password, role=role)
        db.session.add(member)
        db.session.commit()
        return member

    def complaint(self, submitter, category, **fields):
        """Create a complaint through the lifecycle engine."""
        data = {'title': 'Broken water pipe', 'description': 'Water has been leaking for days.',
                'category_id': category.id}
        data.update(fields)
        return lifecycle.create_complaint(actor_for(submitter), data)


USER_TYPES = {
    StandardUser: UserType.STANDARD_USER.value,
    AnonymousUser: UserType.ANONYMOUS_USER.value,
    Agent: UserType.AGENT.value,
    Staff: UserType.STAFF.value,
}


def actor_for(account):
    """Actor for an account row, or None for external submissions."""
    if account is None:
        return None
    user_type = USER_TYPES[type(account)]
    claims = Actor.claims_for(account, user_type)
    return Actor(user_type, account.id, claims.get('agency_id'), claims.get('role'))


@pytest.fixture
def factory(app):
    return Factory()


@pytest.fixture
def auth_headers(app):
    """Build Authorization headers for any account."""
    def make(account):
        user_type = USER_TYPES[type(account)]
        token = create_access_token(identity=str(account.id),
                                    additional_claims=Actor.claims_for(account, user_type))
        return {'Authorization': f'Bearer {token}'}
    return make


# =============================================================================
# Common scenario
# =============================================================================

@pytest.fixture
def world(factory):
    """An agency with a routed category, an agent, a citizen and staff."""
    agency = factory.agency(name='Water Board')
    other_agency = factory.agency(name='Roads Authority')

    class World:
        pass

    w = World()
    w.agency = agency
    w.other_agency = other_agency
    w.category = factory.category(name='Water', default_agency=agency)
    w.agent = factory.agent(agency)
    w.other_agent = factory.agent(other_agency)
    w.citizen = factory.standard_user()
    w.anonymous = factory.anonymous_user()
    w.staff = factory.staff()
    w.admin = factory.staff(role=StaffRole.ADMIN.value)
    return w
