"""
Complaint endpoint tests: submission, listing, updates, responses and tracking.
"""

from datetime import datetime, timedelta

import pytest

from extensions import db
from sayit.models import Complaint, Notification


class TestSubmit:
    """POST /api/complaints"""

    def test_citizen_submits_json(self, client, world, auth_headers):
        response = client.post('/api/complaints', headers=auth_headers(world.citizen), json={
            'title': 'Pothole on Main St',
            'description': 'Large pothole near the school gate',
            'category_id': world.category.id,
            'priority': 'high',
        })

        assert response.status_code == 201
        body = response.get_json()
        assert body['success'] is True
        assert body['data']['tracking_id'] in body['message']
        assert body['data']['agency']['id'] == world.agency.id
        assert body['data']['priority'] == 'high'

    def test_anonymous_submits_multipart(self, client, world, auth_headers):
        response = client.post('/api/complaints', headers=auth_headers(world.anonymous), data={
            'title': 'Streetlight out',
            'description': 'Dark corner every night',
            'category_id': str(world.category.id),
        }, content_type='multipart/form-data')

        assert response.status_code == 201
        complaint = Complaint.query.one()
        assert complaint.anonymous_user_id == world.anonymous.id
        assert complaint.agency_id == world.agency.id

    def test_validation_errors_listed_per_field(self, client, world, auth_headers):
        response = client.post('/api/complaints', headers=auth_headers(world.citizen), json={'title': 'x'})

        assert response.status_code == 400
        body = response.get_json()
        assert body['success'] is False
        assert body['error'] == 'validation_error'
        assert 'description' in body['fields']

    def test_contact_info_must_be_an_object(self, client, world, auth_headers):
        response = client.post('/api/complaints', headers=auth_headers(world.citizen), json={
            'title': 'Pothole', 'description': 'Deep one', 'category_id': world.category.id,
            'contact_info': 'someone@example.com', 'location': [5.6, -0.2],
        })

        assert response.status_code == 400
        assert set(response.get_json()['fields']) == {'contact_info', 'location'}
        assert Complaint.query.count() == 0

    def test_agent_cannot_submit(self, client, world, auth_headers):
        response = client.post('/api/complaints', headers=auth_headers(world.agent), json={
            'title': 'x', 'description': 'y', 'category_id': world.category.id,
        })
        assert response.status_code == 403

    def test_requires_token(self, client, world):
        response = client.post('/api/complaints', json={})

        assert response.status_code == 401
        assert response.get_json() == {
            'success': False, 'message': 'Authentication required', 'error': 'no_token',
        }


class TestList:
    """GET /api/complaints and /api/complaints/mine"""

    def test_pagination_meta(self, client, world, factory, auth_headers):
        for _ in range(25):
            factory.complaint(world.citizen, world.category)

        response = client.get('/api/complaints?page=3&limit=10', headers=auth_headers(world.agent))

        body = response.get_json()
        assert response.status_code == 200
        assert len(body['data']) == 5
        assert body['pagination'] == {'total': 25, 'page': 3, 'pages': 3, 'limit': 10}

    def test_limit_is_clamped(self, client, world, factory, auth_headers):
        factory.complaint(world.citizen, world.category)

        response = client.get('/api/complaints?limit=500', headers=auth_headers(world.staff))
        assert response.get_json()['pagination']['limit'] == 100

    def test_agent_sees_only_own_agency(self, client, world, factory, auth_headers):
        factory.complaint(world.citizen, world.category)
        factory.complaint(world.citizen, world.category, agency_id=world.other_agency.id)

        body = client.get('/api/complaints', headers=auth_headers(world.agent)).get_json()

        assert body['pagination']['total'] == 1
        assert body['data'][0]['agency']['id'] == world.agency.id

    def test_staff_sees_everything(self, client, world, factory, auth_headers):
        factory.complaint(world.citizen, world.category)
        factory.complaint(world.citizen, world.category, agency_id=world.other_agency.id)

        body = client.get('/api/complaints', headers=auth_headers(world.staff)).get_json()
        assert body['pagination']['total'] == 2

    def test_status_filter_accepts_legacy_alias(self, client, world, factory, auth_headers):
        complaint = factory.complaint(world.citizen, world.category)
        factory.complaint(world.citizen, world.category)
        complaint.status = 'under_review'
        db.session.commit()

        body = client.get('/api/complaints?status=pending_info', headers=auth_headers(world.agent)).get_json()

        assert [item['id'] for item in body['data']] == [complaint.id]

    def test_unknown_status_filter_rejected(self, client, world, auth_headers):
        response = client.get('/api/complaints?status=bogus', headers=auth_headers(world.agent))
        assert response.status_code == 400

    def test_search_matches_title(self, client, world, factory, auth_headers):
        factory.complaint(world.citizen, world.category, title='Burst main on Elm Road')
        factory.complaint(world.citizen, world.category)

        body = client.get('/api/complaints?search=elm', headers=auth_headers(world.staff)).get_json()
        assert body['pagination']['total'] == 1

    def test_search_matches_description(self, client, world, factory, auth_headers):
        hit = factory.complaint(world.citizen, world.category, description='Sewage overflowing behind the market')
        factory.complaint(world.citizen, world.category)

        body = client.get('/api/complaints?search=SEWAGE', headers=auth_headers(world.agent)).get_json()
        assert [item['id'] for item in body['data']] == [hit.id]

    def test_priority_filter(self, client, world, factory, auth_headers):
        urgent = factory.complaint(world.citizen, world.category, priority='urgent')
        high = factory.complaint(world.citizen, world.category, priority='high')
        factory.complaint(world.citizen, world.category, priority='low')

        headers = auth_headers(world.agent)
        body = client.get('/api/complaints?priority=critical', headers=headers).get_json()
        assert [item['id'] for item in body['data']] == [urgent.id]

        body = client.get('/api/complaints?priority=urgent,high&sort=oldest', headers=headers).get_json()
        assert [item['id'] for item in body['data']] == [urgent.id, high.id]

        assert client.get('/api/complaints?priority=extreme', headers=headers).status_code == 400

    def test_date_range_includes_whole_end_day(self, client, world, factory, auth_headers):
        before = factory.complaint(world.citizen, world.category)
        first_day = factory.complaint(world.citizen, world.category)
        late_last_day = factory.complaint(world.citizen, world.category)
        after = factory.complaint(world.citizen, world.category)
        before.created_at = datetime(2025, 3, 9, 23, 59)
        first_day.created_at = datetime(2025, 3, 10, 0, 0)
        late_last_day.created_at = datetime(2025, 3, 12, 23, 59, 30)
        after.created_at = datetime(2025, 3, 13, 0, 0, 1)
        db.session.commit()

        body = client.get('/api/complaints?start_date=2025-03-10&end_date=2025-03-12&sort=oldest',
                          headers=auth_headers(world.agent)).get_json()

        assert [item['id'] for item in body['data']] == [first_day.id, late_last_day.id]

    def test_end_date_with_time_is_exact(self, client, world, factory, auth_headers):
        complaint = factory.complaint(world.citizen, world.category)
        complaint.created_at = datetime(2025, 3, 12, 18, 0)
        db.session.commit()

        body = client.get('/api/complaints?end_date=2025-03-12T12:00:00',
                          headers=auth_headers(world.agent)).get_json()
        assert body['pagination']['total'] == 0

    def test_invalid_date_rejected(self, client, world, auth_headers):
        response = client.get('/api/complaints?start_date=yesterday', headers=auth_headers(world.agent))

        assert response.status_code == 400
        assert 'start_date' in response.get_json()['fields']

    @pytest.fixture
    def dated(self, world, factory):
        """Four complaints a day apart, oldest first, with mixed priorities"""
        complaints = [factory.complaint(world.citizen, world.category, priority=priority)
                      for priority in ('medium', 'urgent', 'low', 'high')]
        for offset, complaint in enumerate(complaints):
            complaint.created_at = datetime(2025, 1, 1) + timedelta(days=offset)
        db.session.commit()
        return complaints

    def test_sort_newest_is_default(self, client, world, dated, auth_headers):
        body = client.get('/api/complaints', headers=auth_headers(world.agent)).get_json()
        assert [item['id'] for item in body['data']] == [c.id for c in reversed(dated)]

    def test_sort_oldest(self, client, world, dated, auth_headers):
        body = client.get('/api/complaints?sort=oldest', headers=auth_headers(world.agent)).get_json()
        assert [item['id'] for item in body['data']] == [c.id for c in dated]

    @pytest.mark.parametrize('sort', ['priority-desc', 'priority'])
    def test_sort_by_priority(self, client, world, dated, auth_headers, sort):
        medium, urgent, low, high = dated

        body = client.get(f'/api/complaints?sort={sort}', headers=auth_headers(world.agent)).get_json()

        assert [item['id'] for item in body['data']] == [urgent.id, high.id, medium.id, low.id]

    def test_sort_by_priority_breaks_ties_newest_first(self, client, world, factory, auth_headers):
        older = factory.complaint(world.citizen, world.category, priority='high')
        newer = factory.complaint(world.citizen, world.category, priority='high')
        older.created_at = datetime(2025, 1, 1)
        newer.created_at = datetime(2025, 1, 2)
        db.session.commit()

        body = client.get('/api/complaints?sort=priority-desc', headers=auth_headers(world.agent)).get_json()
        assert [item['id'] for item in body['data']] == [newer.id, older.id]

    def test_unknown_sort_rejected(self, client, world, auth_headers):
        response = client.get('/api/complaints?sort=priority-asc', headers=auth_headers(world.agent))

        assert response.status_code == 400
        assert response.get_json()['fields']['sort'] == 'Must be newest, oldest or priority-desc'

    def test_unassigned_listed_for_admins_only(self, client, world, factory, auth_headers):
        routed = factory.complaint(world.citizen, world.category)
        world.agency.is_active = False
        db.session.commit()
        unassigned = factory.complaint(world.citizen, world.category)

        moderator = client.get('/api/complaints', headers=auth_headers(world.staff)).get_json()
        admin = client.get('/api/complaints?agency=unassigned', headers=auth_headers(world.admin)).get_json()

        assert [item['id'] for item in moderator['data']] == [routed.id]
        assert [item['id'] for item in admin['data']] == [unassigned.id]

    def test_citizen_cannot_list_all(self, client, world, auth_headers):
        assert client.get('/api/complaints', headers=auth_headers(world.citizen)).status_code == 403

    def test_mine_lists_only_own(self, client, world, factory, auth_headers):
        factory.complaint(world.citizen, world.category)
        factory.complaint(world.anonymous, world.category)

        body = client.get('/api/complaints/mine', headers=auth_headers(world.anonymous)).get_json()

        assert body['pagination']['total'] == 1
        assert 'internal_notes' not in body['data'][0]


class TestDetailAndUpdate:
    """GET and PUT /api/complaints/<id>"""

    def test_owner_can_view(self, client, world, factory, auth_headers):
        complaint = factory.complaint(world.citizen, world.category)
        response = client.get(f'/api/complaints/{complaint.id}', headers=auth_headers(world.citizen))

        assert response.status_code == 200
        assert response.get_json()['data']['id'] == complaint.id

    def test_stranger_cannot_view(self, client, world, factory, auth_headers):
        complaint = factory.complaint(world.citizen, world.category)
        stranger = factory.standard_user()

        response = client.get(f'/api/complaints/{complaint.id}', headers=auth_headers(stranger))
        assert response.status_code == 403

    def test_unassigned_complaint_open_to_admin_only(self, client, world, factory, auth_headers):
        world.agency.is_active = False
        db.session.commit()
        complaint = factory.complaint(world.citizen, world.category)

        moderator = client.get(f'/api/complaints/{complaint.id}', headers=auth_headers(world.staff))
        admin = client.get(f'/api/complaints/{complaint.id}', headers=auth_headers(world.admin))

        assert moderator.status_code == 403
        assert admin.status_code == 200

    def test_missing_complaint(self, client, world, auth_headers):
        response = client.get('/api/complaints/999', headers=auth_headers(world.staff))

        assert response.status_code == 404
        assert response.get_json()['success'] is False

    def test_standard_user_cannot_change_status(self, client, world, factory, auth_headers):
        complaint = factory.complaint(world.citizen, world.category)

        response = client.put(f'/api/complaints/{complaint.id}', headers=auth_headers(world.citizen),
                              json={'status': 'resolved'})

        assert response.status_code == 403
        assert response.get_json()['error'] == 'access_denied'
        db.session.expire_all()
        assert Complaint.query.get(complaint.id).status == 'pending'

    def test_agent_updates_status(self, client, world, factory, auth_headers):
        complaint = factory.complaint(world.citizen, world.category)
        Notification.query.delete()
        db.session.commit()

        response = client.put(f'/api/complaints/{complaint.id}', headers=auth_headers(world.agent),
                              json={'status': 'in_progress', 'priority': 'urgent'})

        assert response.status_code == 200
        data = response.get_json()['data']
        assert data['status'] == 'in_progress'
        assert data['priority'] == 'urgent'
        assert Notification.query.count() == 1


class TestResponses:
    """POST /api/complaints/<id>/responses"""

    def test_agent_public_response_reports_status_change(self, client, world, factory, auth_headers):
        complaint = factory.complaint(world.citizen, world.category)

        response = client.post(f'/api/complaints/{complaint.id}/responses',
                               headers=auth_headers(world.agent), json={'content': 'Crew dispatched'})

        assert response.status_code == 201
        data = response.get_json()['data']
        assert data['status_changed'] is True
        assert data['old_status'] == 'pending'
        assert data['new_status'] == 'in_progress'

    def test_internal_response_via_form_flag(self, client, world, factory, auth_headers):
        complaint = factory.complaint(world.citizen, world.category)
        Notification.query.delete()
        db.session.commit()

        response = client.post(f'/api/complaints/{complaint.id}/responses',
                               headers=auth_headers(world.agent),
                               data={'content': 'Budget approval pending', 'is_public': 'false'},
                               content_type='multipart/form-data')

        assert response.status_code == 201
        assert response.get_json()['data']['status_changed'] is False
        assert Notification.query.count() == 0


class TestTracking:
    """GET /api/complaints/track/<tracking_id>"""

    def test_unknown_tracking_id(self, client, app):
        response = client.get('/api/complaints/track/SAY-2023-00001')

        assert response.status_code == 404
        body = response.get_json()
        assert body['success'] is False
        assert body['error'] == 'not_found'

    def test_known_tracking_id_without_auth(self, client, world, factory):
        complaint = factory.complaint(world.citizen, world.category)

        response = client.get(f'/api/complaints/track/{complaint.tracking_id}')

        assert response.status_code == 200
        data = response.get_json()['data']
        assert data['status'] == 'pending'
        assert 'internal_notes' not in data

    @pytest.mark.parametrize('path', ['/api/external/track/SAY-2023-00001'])
    def test_external_tracking_shares_semantics(self, client, app, path):
        assert client.get(path).status_code == 404
