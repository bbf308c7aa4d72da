"""Initial SAYIT schema

Revision ID: a1c3e5f7b9d0
Revises:
Create Date: 2026-10-18

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = 'a1c3e5f7b9d0'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table('agencies',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('short_name', sa.String(length=10), nullable=True),
        sa.Column('description', sa.String(length=500), nullable=True),
        sa.Column('contact_email', sa.String(length=120), nullable=True),
        sa.Column('contact_phone', sa.String(length=30), nullable=True),
        sa.Column('address', sa.String(length=255), nullable=True),
        sa.Column('website', sa.String(length=255), nullable=True),
        sa.Column('logo', sa.String(length=500), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_agencies_name', 'agencies', ['name'], unique=True)
    op.create_index('ix_agencies_short_name', 'agencies', ['short_name'])
    op.create_index('ix_agencies_is_active', 'agencies', ['is_active'])

    op.create_table('categories',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=50), nullable=False),
        sa.Column('description', sa.String(length=500), nullable=True),
        sa.Column('default_agency_id', sa.Integer(), nullable=True),
        sa.Column('icon', sa.String(length=50), nullable=False),
        sa.Column('color', sa.String(length=20), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['default_agency_id'], ['agencies.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_categories_name', 'categories', ['name'], unique=True)
    op.create_index('ix_categories_default_agency_id', 'categories', ['default_agency_id'])
    op.create_index('ix_categories_is_active', 'categories', ['is_active'])

    op.create_table('standard_users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('email', sa.String(length=120), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('phone', sa.String(length=30), nullable=True),
        sa.Column('profile_image', sa.String(length=500), nullable=True),
        sa.Column('email_notifications', sa.Boolean(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.Column('last_login', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_standard_users_email', 'standard_users', ['email'], unique=True)

    op.create_table('anonymous_users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('access_code', sa.String(length=12), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.Column('last_login', sa.DateTime(), nullable=True),
        sa.Column('usage_count', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_anonymous_users_access_code', 'anonymous_users', ['access_code'], unique=True)
    op.create_index('ix_anonymous_users_is_active', 'anonymous_users', ['is_active'])
    op.create_index('ix_anonymous_users_expires_at', 'anonymous_users', ['expires_at'])

    op.create_table('agents',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('email', sa.String(length=120), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('phone', sa.String(length=30), nullable=True),
        sa.Column('agency_id', sa.Integer(), nullable=False),
        sa.Column('role', sa.String(length=20), nullable=False),
        sa.Column('position', sa.String(length=100), nullable=True),
        sa.Column('department', sa.String(length=100), nullable=True),
        sa.Column('profile_image', sa.String(length=500), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.Column('last_login', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['agency_id'], ['agencies.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_agents_email', 'agents', ['email'], unique=True)
    op.create_index('ix_agents_agency_id', 'agents', ['agency_id'])
    op.create_index('ix_agents_is_active', 'agents', ['is_active'])

    op.create_table('staff',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('email', sa.String(length=120), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=20), nullable=False),
        sa.Column('profile_image', sa.String(length=500), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.Column('last_login', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_staff_email', 'staff', ['email'], unique=True)
    op.create_index('ix_staff_role', 'staff', ['role'])
    op.create_index('ix_staff_is_active', 'staff', ['is_active'])

    op.create_table('complaints',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(length=100), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('category_id', sa.Integer(), nullable=False),
        sa.Column('agency_id', sa.Integer(), nullable=True),
        sa.Column('assigned_agent_id', sa.Integer(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('priority', sa.String(length=10), nullable=False),
        sa.Column('submission_type', sa.String(length=20), nullable=False),
        sa.Column('tracking_id', sa.String(length=20), nullable=False),
        sa.Column('is_anonymous', sa.Boolean(), nullable=False),
        sa.Column('standard_user_id', sa.Integer(), nullable=True),
        sa.Column('anonymous_user_id', sa.Integer(), nullable=True),
        sa.Column('contact_email', sa.String(length=120), nullable=True),
        sa.Column('contact_phone', sa.String(length=30), nullable=True),
        sa.Column('preferred_contact', sa.String(length=10), nullable=True),
        sa.Column('address', sa.String(length=255), nullable=True),
        sa.Column('district', sa.String(length=100), nullable=True),
        sa.Column('sector', sa.String(length=100), nullable=True),
        sa.Column('cell', sa.String(length=100), nullable=True),
        sa.Column('internal_notes', sa.Text(), nullable=True),
        sa.Column('tags', sa.JSON(), nullable=True),
        sa.Column('is_public', sa.Boolean(), nullable=False),
        sa.Column('due_date', sa.DateTime(), nullable=True),
        sa.Column('resolved_at', sa.DateTime(), nullable=True),
        sa.Column('closed_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint('NOT (standard_user_id IS NOT NULL AND anonymous_user_id IS NOT NULL)',
                           name='ck_complaint_single_submitter'),
        sa.ForeignKeyConstraint(['category_id'], ['categories.id'], ),
        sa.ForeignKeyConstraint(['agency_id'], ['agencies.id'], ),
        sa.ForeignKeyConstraint(['assigned_agent_id'], ['agents.id'], ),
        sa.ForeignKeyConstraint(['standard_user_id'], ['standard_users.id'], ),
        sa.ForeignKeyConstraint(['anonymous_user_id'], ['anonymous_users.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_complaints_tracking_id', 'complaints', ['tracking_id'], unique=True)
    op.create_index('ix_complaints_category_id', 'complaints', ['category_id'])
    op.create_index('ix_complaints_agency_id', 'complaints', ['agency_id'])
    op.create_index('ix_complaints_assigned_agent_id', 'complaints', ['assigned_agent_id'])
    op.create_index('ix_complaints_status', 'complaints', ['status'])
    op.create_index('ix_complaints_priority', 'complaints', ['priority'])
    op.create_index('ix_complaints_submission_type', 'complaints', ['submission_type'])
    op.create_index('ix_complaints_standard_user_id', 'complaints', ['standard_user_id'])
    op.create_index('ix_complaints_anonymous_user_id', 'complaints', ['anonymous_user_id'])
    op.create_index('ix_complaints_created_at', 'complaints', ['created_at'])
    op.create_index('ix_complaints_agency_status', 'complaints', ['agency_id', 'status'])

    op.create_table('responses',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('complaint_id', sa.Integer(), nullable=False),
        sa.Column('responder_type', sa.String(length=20), nullable=False),
        sa.Column('responder_id', sa.Integer(), nullable=True),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('is_public', sa.Boolean(), nullable=False),
        sa.Column('old_status', sa.String(length=20), nullable=True),
        sa.Column('new_status', sa.String(length=20), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['complaint_id'], ['complaints.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_responses_complaint_id', 'responses', ['complaint_id'])
    op.create_index('ix_responses_responder_type', 'responses', ['responder_type'])
    op.create_index('ix_responses_is_public', 'responses', ['is_public'])

    op.create_table('attachments',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('complaint_id', sa.Integer(), nullable=True),
        sa.Column('response_id', sa.Integer(), nullable=True),
        sa.Column('url', sa.String(length=500), nullable=False),
        sa.Column('storage_key', sa.String(length=255), nullable=True),
        sa.Column('original_name', sa.String(length=255), nullable=True),
        sa.Column('file_type', sa.String(length=120), nullable=True),
        sa.Column('file_size', sa.Integer(), nullable=True),
        sa.Column('resource_type', sa.String(length=10), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['complaint_id'], ['complaints.id'], ),
        sa.ForeignKeyConstraint(['response_id'], ['responses.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_attachments_complaint_id', 'attachments', ['complaint_id'])
    op.create_index('ix_attachments_response_id', 'attachments', ['response_id'])

    op.create_table('notifications',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('recipient_type', sa.String(length=20), nullable=False),
        sa.Column('recipient_id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('type', sa.String(length=30), nullable=False),
        sa.Column('read', sa.Boolean(), nullable=False),
        sa.Column('read_at', sa.DateTime(), nullable=True),
        sa.Column('related_type', sa.String(length=20), nullable=True),
        sa.Column('related_id', sa.Integer(), nullable=True),
        sa.Column('priority', sa.String(length=10), nullable=False),
        sa.Column('actions', sa.JSON(), nullable=True),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_notifications_type', 'notifications', ['type'])
    op.create_index('ix_notifications_expires_at', 'notifications', ['expires_at'])
    op.create_index('ix_notifications_recipient_read', 'notifications',
                    ['recipient_type', 'recipient_id', 'read'])
    op.create_index('ix_notifications_recipient_created', 'notifications',
                    ['recipient_type', 'recipient_id', 'created_at'])

    op.create_table('feedback',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('complaint_id', sa.Integer(), nullable=False),
        sa.Column('standard_user_id', sa.Integer(), nullable=True),
        sa.Column('anonymous_user_id', sa.Integer(), nullable=True),
        sa.Column('satisfaction_level', sa.Integer(), nullable=False),
        sa.Column('comment', sa.String(length=1000), nullable=True),
        sa.Column('response_time_rating', sa.Integer(), nullable=True),
        sa.Column('staff_professionalism_rating', sa.Integer(), nullable=True),
        sa.Column('resolution_satisfaction_rating', sa.Integer(), nullable=True),
        sa.Column('communication_rating', sa.Integer(), nullable=True),
        sa.Column('would_recommend', sa.Boolean(), nullable=True),
        sa.Column('is_public', sa.Boolean(), nullable=False),
        sa.Column('agency_response', sa.Text(), nullable=True),
        sa.Column('agency_responded_at', sa.DateTime(), nullable=True),
        sa.Column('agency_responder_type', sa.String(length=20), nullable=True),
        sa.Column('agency_responder_id', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['complaint_id'], ['complaints.id'], ),
        sa.ForeignKeyConstraint(['standard_user_id'], ['standard_users.id'], ),
        sa.ForeignKeyConstraint(['anonymous_user_id'], ['anonymous_users.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_feedback_complaint_id', 'feedback', ['complaint_id'], unique=True)
    op.create_index('ix_feedback_satisfaction_level', 'feedback', ['satisfaction_level'])
    op.create_index('ix_feedback_created_at', 'feedback', ['created_at'])


def downgrade():
    op.drop_table('feedback')
    op.drop_table('notifications')
    op.drop_table('attachments')
    op.drop_table('responses')
    op.drop_table('complaints')
    op.drop_table('staff')
    op.drop_table('agents')
    op.drop_table('anonymous_users')
    op.drop_table('standard_users')
    op.drop_table('categories')
    op.drop_table('agencies')
