"""
Model vocabulary and access scope tests.
"""

import pytest

from sayit.models import Complaint, ComplaintPriority, ComplaintStatus, EntityRef
from sayit.models.complaint import ResourceType
from sayit.services.access import Scope

from tests.conftest import actor_for


class TestVocabulary:
    """Status and priority parsing"""

    @pytest.mark.parametrize('raw, expected', [
        ('pending', ComplaintStatus.PENDING),
        ('  In_Progress ', ComplaintStatus.IN_PROGRESS),
        ('new', ComplaintStatus.PENDING),
        ('pending_info', ComplaintStatus.UNDER_REVIEW),
        ('reopened', ComplaintStatus.IN_PROGRESS),
        ('done', None),
        (None, None),
    ])
    def test_status_parse(self, raw, expected):
        assert ComplaintStatus.parse(raw) is expected

    @pytest.mark.parametrize('raw, expected', [
        ('low', ComplaintPriority.LOW),
        ('URGENT', ComplaintPriority.URGENT),
        ('critical', ComplaintPriority.URGENT),
        ('extreme', None),
    ])
    def test_priority_parse(self, raw, expected):
        assert ComplaintPriority.parse(raw) is expected

    @pytest.mark.parametrize('mimetype, expected', [
        ('image/png', 'image'),
        ('video/mp4', 'video'),
        ('audio/ogg', 'audio'),
        ('application/pdf', 'raw'),
        (None, 'raw'),
    ])
    def test_resource_type(self, mimetype, expected):
        assert ResourceType.from_mimetype(mimetype).value == expected

    def test_tracking_id_shape(self):
        tracking_id = Complaint.generate_tracking_id()
        assert len(tracking_id) == len('SAY-2024-01234')

    def test_entity_ref_kind_checked(self):
        assert EntityRef.response('7') == ('Response', 7)
        with pytest.raises(ValueError):
            EntityRef('Feedback', 1)


class TestScope:
    """Who may see and manage which complaint"""

    @pytest.fixture
    def complaint(self, world, factory):
        return factory.complaint(world.citizen, world.category)

    def test_owner(self, world, complaint):
        scope = Scope(actor_for(world.citizen))

        assert scope.can_view(complaint)
        assert scope.can_respond(complaint)
        assert not scope.can_manage(complaint)
        assert not scope.can_post_internal(complaint)
        assert not scope.sees_internal(complaint)

    def test_agent_of_routed_agency(self, world, complaint):
        scope = Scope(actor_for(world.agent))

        assert scope.can_manage(complaint)
        assert scope.sees_internal(complaint)
        assert not scope.can_reassign_agency()

    def test_agent_of_other_agency(self, world, complaint):
        scope = Scope(actor_for(world.other_agent))

        assert not scope.can_view(complaint)
        assert not scope.can_manage(complaint)

    def test_agent_cannot_see_unassigned(self, world, factory):
        world.agency.is_active = False
        complaint = factory.complaint(world.citizen, world.category)

        assert complaint.agency_id is None
        assert not Scope(actor_for(world.agent)).can_view(complaint)
        assert Scope(actor_for(world.admin)).can_view(complaint)

    def test_unassigned_hidden_from_non_admin_staff(self, world, factory):
        routed = factory.complaint(world.citizen, world.category)
        world.agency.is_active = False
        unassigned = factory.complaint(world.citizen, world.category)
        moderator = Scope(actor_for(world.staff))

        assert not moderator.can_view(unassigned)
        assert not moderator.can_manage(unassigned)
        assert moderator.can_manage(routed)
        assert [c.id for c in moderator.filter_complaints(Complaint.query).all()] == [routed.id]
        assert Scope(actor_for(world.admin)).filter_complaints(Complaint.query).count() == 2

    def test_staff(self, world, complaint):
        scope = Scope(actor_for(world.staff))

        assert scope.can_manage(complaint)
        assert scope.can_reassign_agency()
        assert not scope.is_admin
        assert Scope(actor_for(world.admin)).is_admin

    def test_filter_for_anonymous(self, world, factory, complaint):
        mine = factory.complaint(world.anonymous, world.category)
        query = Scope(actor_for(world.anonymous)).filter_complaints(Complaint.query)

        assert [c.id for c in query.all()] == [mine.id]

    def test_staff_has_no_inbox(self, world):
        assert actor_for(world.staff).recipient is None
        assert actor_for(world.agent).recipient == ('agent', world.agent.id)
