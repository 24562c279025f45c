"""initial marketplace schema

Revision ID: 0001_initial_marketplace
Revises:
Create Date: 2026-10-17 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0001_initial_marketplace'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _base_columns():
    return [
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    ]


def _enrollment_columns(subject_column: str, subject_table: str):
    return [
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column(subject_column, sa.Uuid(), sa.ForeignKey(f'{subject_table}.id'), nullable=False),
        sa.Column('payment_status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('payment_reference', sa.String(40)),
        sa.Column('payment_amount', sa.Numeric(12, 2)),
        sa.Column('payment_method', sa.String(50)),
        sa.Column('enrolled_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('paid_at', sa.DateTime(timezone=True)),
        sa.Column('version', sa.Integer(), nullable=False, server_default='1'),
    ]


ENROLLMENT_TABLES = [
    # table, subject column, subject table, unique constraint
    ('class_enrollments', 'class_group_id', 'class_groups', 'uq_class_enrollment_user_subject'),
    ('course_enrollments', 'course_id', 'courses', 'uq_course_enrollment_user_subject'),
    ('mentorship_enrollments', 'mentorship_id', 'mentorships', 'uq_mentorship_enrollment_user_subject'),
]


def upgrade() -> None:
    op.create_table(
        'profiles',
        *_base_columns(),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('full_name', sa.String(200)),
        sa.Column('display_name', sa.String(100)),
        sa.Column('avatar_url', sa.String(500)),
        sa.Column('birth_date', sa.Date()),
        sa.Column('gender', sa.String(20)),
        sa.Column('id_number', sa.String(30)),
        sa.Column('phone', sa.String(20)),
        sa.Column('address', sa.String(500)),
        sa.Column('city', sa.String(100)),
        sa.Column('province', sa.String(50)),
        sa.Column('academic_info', sa.Text()),
        sa.Column('employment_status', sa.String(30)),
        sa.Column('job_title', sa.String(100)),
        sa.Column('company', sa.String(200)),
    )
    op.create_index('ix_profiles_user_id', 'profiles', ['user_id'], unique=True)

    op.create_table(
        'user_roles',
        *_base_columns(),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('role', sa.String(20), nullable=False),
        sa.UniqueConstraint('user_id', 'role', name='uq_user_role'),
    )
    op.create_index('ix_user_roles_user_id', 'user_roles', ['user_id'])

    op.create_table(
        'class_groups',
        *_base_columns(),
        sa.Column('title', sa.String(200), nullable=False),
        sa.Column('description', sa.Text()),
        sa.Column('schedule', sa.String(200), nullable=False),
        sa.Column('format', sa.String(50), nullable=False),
        sa.Column('instructor', sa.String(200)),
        sa.Column('price_aoa', sa.Numeric(12, 2), nullable=False),
        sa.Column('spots', sa.Integer(), nullable=False, server_default='20'),
        sa.Column('start_date', sa.Date()),
        sa.Column('end_date', sa.Date()),
        sa.Column('topics', sa.JSON()),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
    )

    op.create_table(
        'courses',
        *_base_columns(),
        sa.Column('title', sa.String(200), nullable=False),
        sa.Column('description', sa.Text()),
        sa.Column('category', sa.String(100)),
        sa.Column('level', sa.String(50)),
        sa.Column('duration_hours', sa.Integer()),
        sa.Column('image_url', sa.String(500)),
        sa.Column('price_aoa', sa.Numeric(12, 2), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
    )
    op.create_index('ix_courses_category', 'courses', ['category'])

    op.create_table(
        'course_modules',
        *_base_columns(),
        sa.Column('course_id', sa.Uuid(), sa.ForeignKey('courses.id', ondelete='CASCADE'), nullable=False),
        sa.Column('title', sa.String(200), nullable=False),
        sa.Column('description', sa.Text()),
        sa.Column('order_index', sa.Integer(), nullable=False, server_default='0'),
    )
    op.create_index('ix_course_modules_course_id', 'course_modules', ['course_id'])

    op.create_table(
        'course_lessons',
        *_base_columns(),
        sa.Column('module_id', sa.Uuid(), sa.ForeignKey('course_modules.id', ondelete='CASCADE'), nullable=False),
        sa.Column('title', sa.String(200), nullable=False),
        sa.Column('description', sa.Text()),
        sa.Column('content', sa.Text()),
        sa.Column('video_url', sa.String(500)),
        sa.Column('duration_minutes', sa.Integer()),
        sa.Column('order_index', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('is_free', sa.Boolean(), nullable=False, server_default=sa.false()),
    )
    op.create_index('ix_course_lessons_module_id', 'course_lessons', ['module_id'])

    op.create_table(
        'mentorships',
        *_base_columns(),
        sa.Column('title', sa.String(200), nullable=False),
        sa.Column('description', sa.Text()),
        sa.Column('category', sa.String(100)),
        sa.Column('duration_weeks', sa.Integer()),
        sa.Column('image_url', sa.String(500)),
        sa.Column('mentor_id', sa.Uuid(), nullable=False),
        sa.Column('price_aoa', sa.Numeric(12, 2), nullable=False),
        sa.Column('max_students', sa.Integer()),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
    )
    op.create_index('ix_mentorships_mentor_id', 'mentorships', ['mentor_id'])

    # One enrollment per (user, subject); the store enforces it under concurrency
    for table, subject_column, subject_table, constraint in ENROLLMENT_TABLES:
        op.create_table(
            table,
            *_base_columns(),
            *_enrollment_columns(subject_column, subject_table),
            sa.UniqueConstraint('user_id', subject_column, name=constraint),
        )
        op.create_index(f'ix_{table}_user_id', table, ['user_id'])
        op.create_index(f'ix_{table}_{subject_column}', table, [subject_column])
        op.create_index(f'ix_{table}_payment_status', table, ['payment_status'])
        op.create_index(f'ix_{table}_payment_reference', table, ['payment_reference'])

    op.create_table(
        'certificates',
        *_base_columns(),
        sa.Column('certificate_code', sa.String(40), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('course_id', sa.Uuid(), sa.ForeignKey('courses.id')),
        sa.Column('class_group_id', sa.Uuid(), sa.ForeignKey('class_groups.id')),
        sa.Column('issued_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('expires_at', sa.DateTime(timezone=True)),
        sa.Column('is_public', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('skills', sa.JSON()),
        sa.Column('issuer_name', sa.String(200)),
        sa.Column('badge_type', sa.String(50)),
        sa.Column('share_count', sa.Integer(), server_default='0'),
    )
    op.create_index('ix_certificates_certificate_code', 'certificates', ['certificate_code'], unique=True)
    op.create_index('ix_certificates_user_id', 'certificates', ['user_id'])

    op.create_table(
        'certificate_verifications',
        *_base_columns(),
        sa.Column('certificate_id', sa.Uuid(), sa.ForeignKey('certificates.id', ondelete='CASCADE'), nullable=False),
        sa.Column('verified_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('verified_by_ip', sa.String(64)),
        sa.Column('verified_by_country', sa.String(2)),
    )
    op.create_index('ix_certificate_verifications_certificate_id', 'certificate_verifications', ['certificate_id'])

    op.create_table(
        'events',
        *_base_columns(),
        sa.Column('title', sa.String(200), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('address', sa.String(500), nullable=False),
        sa.Column('creator', sa.String(200), nullable=False),
        sa.Column('background_image_url', sa.String(500)),
        sa.Column('target_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('created_by', sa.Uuid(), nullable=False),
    )
    op.create_index('ix_events_target_date', 'events', ['target_date'])

    op.create_table(
        'event_registrations',
        *_base_columns(),
        sa.Column('event_id', sa.Uuid(), sa.ForeignKey('events.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('registered_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint('event_id', 'user_id', name='uq_event_registration'),
    )
    op.create_index('ix_event_registrations_user_id', 'event_registrations', ['user_id'])

    op.create_table(
        'external_participants',
        *_base_columns(),
        sa.Column('event_id', sa.Uuid(), sa.ForeignKey('events.id', ondelete='CASCADE'), nullable=False),
        sa.Column('full_name', sa.String(200), nullable=False),
        sa.Column('email', sa.String(254), nullable=False),
        sa.Column('phone', sa.String(20), nullable=False),
        sa.Column('age', sa.Integer(), nullable=False),
        sa.Column('id_number', sa.String(30), nullable=False),
        sa.Column('academic_info', sa.Text()),
        sa.Column('employment_status', sa.String(30)),
        sa.Column('job_title', sa.String(100)),
        sa.Column('company', sa.String(200)),
        sa.Column('registered_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_external_participants_event_id', 'external_participants', ['event_id'])


def downgrade() -> None:
    op.drop_table('external_participants')
    op.drop_table('event_registrations')
    op.drop_table('events')
    op.drop_table('certificate_verifications')
    op.drop_table('certificates')
    for table, _, _, _ in reversed(ENROLLMENT_TABLES):
        op.drop_table(table)
    op.drop_table('mentorships')
    op.drop_table('course_lessons')
    op.drop_table('course_modules')
    op.drop_table('courses')
    op.drop_table('class_groups')
    op.drop_table('user_roles')
    op.drop_table('profiles')
