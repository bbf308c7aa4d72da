"""
Feedback, contact form and public directory tests.
"""

from unittest.mock import patch

import pytest

from extensions import db
from sayit.models import Feedback


@pytest.fixture
def resolved(world, factory):
    complaint = factory.complaint(world.citizen, world.category)
    complaint.status = 'resolved'
    db.session.commit()
    return complaint


class TestFeedback:
    """Satisfaction ratings on finished complaints"""

    def test_owner_rates_resolved_complaint(self, client, world, resolved, auth_headers):
        response = client.post('/api/feedback', headers=auth_headers(world.citizen), json={
            'complaint_id': resolved.id,
            'satisfaction_level': 4,
            'response_time_rating': 5,
            'communication_rating': 3,
            'would_recommend': True,
        })

        assert response.status_code == 201
        data = response.get_json()['data']
        assert data['average_rating'] == 4.0
        assert data['would_recommend'] is True

    def test_open_complaint_rejected(self, client, world, factory, auth_headers):
        complaint = factory.complaint(world.citizen, world.category)

        response = client.post('/api/feedback', headers=auth_headers(world.citizen),
                               json={'complaint_id': complaint.id, 'satisfaction_level': 4})
        assert response.status_code == 400

    def test_only_once(self, client, world, resolved, auth_headers):
        payload = {'complaint_id': resolved.id, 'satisfaction_level': 2}
        client.post('/api/feedback', headers=auth_headers(world.citizen), json=payload)

        response = client.post('/api/feedback', headers=auth_headers(world.citizen), json=payload)

        assert response.status_code == 409
        assert Feedback.query.count() == 1

    def test_other_citizen_forbidden(self, client, resolved, factory, auth_headers):
        response = client.post('/api/feedback', headers=auth_headers(factory.standard_user()),
                               json={'complaint_id': resolved.id, 'satisfaction_level': 5})
        assert response.status_code == 403

    def test_rating_out_of_range(self, client, world, resolved, auth_headers):
        response = client.post('/api/feedback', headers=auth_headers(world.citizen),
                               json={'complaint_id': resolved.id, 'satisfaction_level': 9})

        assert response.status_code == 400
        assert 'satisfaction_level' in response.get_json()['fields']

    def test_agent_lists_and_replies(self, client, world, resolved, auth_headers):
        client.post('/api/feedback', headers=auth_headers(world.citizen),
                    json={'complaint_id': resolved.id, 'satisfaction_level': 3})
        feedback = Feedback.query.one()

        listing = client.get('/api/feedback', headers=auth_headers(world.agent)).get_json()
        assert listing['data']['average_satisfaction'] == 3.0

        response = client.post(f'/api/feedback/{feedback.id}/agency-response',
                               headers=auth_headers(world.agent), json={'content': 'Thanks, noted'})

        assert response.status_code == 200
        assert response.get_json()['data']['agency_response']['content'] == 'Thanks, noted'

    def test_other_agency_cannot_reply(self, client, world, resolved, auth_headers):
        client.post('/api/feedback', headers=auth_headers(world.citizen),
                    json={'complaint_id': resolved.id, 'satisfaction_level': 3})
        feedback = Feedback.query.one()

        listing = client.get('/api/feedback', headers=auth_headers(world.other_agent)).get_json()
        assert listing['data']['feedback'] == []

        response = client.post(f'/api/feedback/{feedback.id}/agency-response',
                               headers=auth_headers(world.other_agent), json={'content': 'Hi'})
        assert response.status_code == 403


class TestContact:
    """Contact form relay"""

    def test_info(self, client, app):
        data = client.get('/api/contact').get_json()['data']
        assert {'value': 'general', 'label': 'General Inquiry'} in data['categories']

    @patch('sayit.api.contact.routes.EmailService.send_contact_message', return_value=True)
    def test_message_relayed(self, send, client, app):
        response = client.post('/api/contact', json={
            'name': 'Ann', 'email': 'ann@example.com', 'subject': 'Hello', 'message': 'Question',
        })

        assert response.status_code == 200
        send.assert_called_once_with('Ann', 'ann@example.com', 'general', 'Hello', 'Question')

    @patch('sayit.api.contact.routes.EmailService.send_contact_message', return_value=False)
    def test_delivery_failure(self, send, client, app):
        response = client.post('/api/contact', json={
            'name': 'Ann', 'email': 'ann@example.com', 'subject': 'Hello', 'message': 'Question',
        })

        assert response.status_code == 503
        assert response.get_json()['error'] == 'upstream_failure'

    def test_invalid_email(self, client, app):
        response = client.post('/api/contact', json={
            'name': 'Ann', 'email': 'nope', 'subject': 'Hello', 'message': 'Question',
        })

        assert response.status_code == 400
        assert 'email' in response.get_json()['fields']


class TestPublicDirectory:
    """Unauthenticated listings and external submission"""

    def test_categories_and_agencies(self, client, world):
        categories = client.get('/api/categories').get_json()['data']
        agencies = client.get('/api/agencies').get_json()['data']

        assert [category['name'] for category in categories] == ['Water']
        assert {agency['name'] for agency in agencies} == {'Water Board', 'Roads Authority'}

    def test_agency_detail_lists_categories(self, client, world):
        data = client.get(f'/api/agencies/{world.agency.id}').get_json()['data']
        assert [category['name'] for category in data['categories']] == ['Water']

    def test_unknown_category(self, client, app):
        assert client.get('/api/categories/999').status_code == 404

    @patch('sayit.services.lifecycle.EmailService.send_tracking_confirmation', return_value=True)
    def test_external_submission_emails_tracking_id(self, send, client, world):
        response = client.post('/api/external/complaints', json={
            'title': 'Blocked drain', 'description': 'Flooding after rain',
            'category_id': world.category.id, 'contact_email': 'walkin@example.com',
        })

        assert response.status_code == 201
        data = response.get_json()['data']
        assert data['agency']['id'] == world.agency.id
        send.assert_called_once()
        assert send.call_args[0][1] == 'walkin@example.com'
