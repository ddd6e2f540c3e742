"""create_coursehub_tables

Revision ID: c0a1b2c3d4e5
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'c0a1b2c3d4e5'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create users, courses, videos, enrollments, progress, ratings, reviews and comments."""
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('hashed_password', sa.String(255), nullable=False),
        sa.Column('first_name', sa.String(100), nullable=False),
        sa.Column('last_name', sa.String(100), nullable=False),
        sa.Column('user_type', sa.String(20), nullable=False, server_default='student'),
        sa.Column('bio', sa.Text(), nullable=False, server_default=''),
        sa.Column('status', sa.String(20), nullable=False, server_default='active'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_users_id', 'users', ['id'])
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_user_type', 'users', ['user_type'])

    op.create_table(
        'courses',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=False, server_default=''),
        sa.Column('category', sa.String(100), nullable=False, server_default='General'),
        sa.Column('level', sa.String(50), nullable=False, server_default='Beginner'),
        sa.Column('thumbnail', sa.Text(), nullable=True),
        sa.Column('creator_email', sa.String(255), nullable=False),
        sa.Column('creator_name', sa.String(255), nullable=False, server_default=''),
        sa.Column('published', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_courses_id', 'courses', ['id'])
    op.create_index('ix_courses_category', 'courses', ['category'])
    op.create_index('ix_courses_creator_email', 'courses', ['creator_email'])

    op.create_table(
        'videos',
        sa.Column('id', sa.String(64), nullable=False),
        sa.Column('course_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('video_url', sa.Text(), nullable=True),
        sa.Column('storage_path', sa.String(500), nullable=True),
        sa.Column('thumbnail', sa.Text(), nullable=True),
        sa.Column('size_bytes', sa.BigInteger(), nullable=False, server_default='0'),
        sa.Column('duration_seconds', sa.Float(), nullable=False, server_default='0.0'),
        sa.Column('position', sa.Integer(), nullable=False, server_default='0'),
        sa.ForeignKeyConstraint(['course_id'], ['courses.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_videos_course_id', 'videos', ['course_id'])

    op.create_table(
        'enrollments',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_email', sa.String(255), nullable=False),
        sa.Column('course_id', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(['course_id'], ['courses.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_email', 'course_id', name='uq_enrollment_user_course'),
    )
    op.create_index('ix_enrollments_id', 'enrollments', ['id'])
    op.create_index('ix_enrollments_user_email', 'enrollments', ['user_email'])
    op.create_index('ix_enrollments_course_id', 'enrollments', ['course_id'])

    op.create_table(
        'video_progress',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_email', sa.String(255), nullable=False),
        sa.Column('course_id', sa.Integer(), nullable=False),
        sa.Column('video_id', sa.String(64), nullable=False),
        sa.Column('time_position', sa.Float(), nullable=False, server_default='0.0'),
        sa.Column('duration', sa.Float(), nullable=False, server_default='0.0'),
        sa.Column('percentage', sa.Float(), nullable=False, server_default='0.0'),
        sa.Column('last_updated', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_email', 'course_id', 'video_id', name='uq_progress_user_course_video'),
    )
    op.create_index('ix_video_progress_id', 'video_progress', ['id'])
    op.create_index('ix_video_progress_user_email', 'video_progress', ['user_email'])
    op.create_index('ix_video_progress_course_id', 'video_progress', ['course_id'])
    op.create_index('ix_video_progress_video_id', 'video_progress', ['video_id'])

    op.create_table(
        'ratings',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('subject_type', sa.String(10), nullable=False),
        sa.Column('subject_id', sa.String(64), nullable=False),
        sa.Column('course_id', sa.Integer(), nullable=False),
        sa.Column('user_email', sa.String(255), nullable=False),
        sa.Column('value', sa.Float(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('subject_type', 'subject_id', 'user_email', name='uq_rating_subject_user'),
    )
    op.create_index('ix_ratings_id', 'ratings', ['id'])
    op.create_index('ix_ratings_course_id', 'ratings', ['course_id'])
    op.create_index('ix_ratings_user_email', 'ratings', ['user_email'])

    op.create_table(
        'reviews',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('review_id', sa.String(64), nullable=False),
        sa.Column('course_id', sa.Integer(), nullable=False),
        sa.Column('user_email', sa.String(255), nullable=False),
        sa.Column('user_name', sa.String(255), nullable=False, server_default=''),
        sa.Column('user_initials', sa.String(4), nullable=False, server_default=''),
        sa.Column('user_type', sa.String(20), nullable=False, server_default='student'),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('rating', sa.Integer(), nullable=False),
        sa.Column('helpful_up', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('helpful_down', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('edited', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_reviews_review_id', 'reviews', ['review_id'], unique=True)
    op.create_index('ix_reviews_course_id', 'reviews', ['course_id'])
    op.create_index('ix_reviews_user_email', 'reviews', ['user_email'])

    op.create_table(
        'review_replies',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('reply_id', sa.String(64), nullable=False),
        sa.Column('review_id', sa.String(64), nullable=False),
        sa.Column('user_email', sa.String(255), nullable=False),
        sa.Column('user_name', sa.String(255), nullable=False, server_default=''),
        sa.Column('user_initials', sa.String(4), nullable=False, server_default=''),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(['review_id'], ['reviews.review_id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_review_replies_reply_id', 'review_replies', ['reply_id'], unique=True)
    op.create_index('ix_review_replies_review_id', 'review_replies', ['review_id'])

    op.create_table(
        'review_helpful_votes',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('review_id', sa.String(64), nullable=False),
        sa.Column('user_email', sa.String(255), nullable=False),
        sa.Column('vote', sa.String(4), nullable=False),
        sa.ForeignKeyConstraint(['review_id'], ['reviews.review_id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('review_id', 'user_email', name='uq_helpful_review_user'),
    )
    op.create_index('ix_review_helpful_votes_review_id', 'review_helpful_votes', ['review_id'])

    op.create_table(
        'comments',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('comment_id', sa.String(64), nullable=False),
        sa.Column('course_id', sa.Integer(), nullable=False),
        sa.Column('user_email', sa.String(255), nullable=False),
        sa.Column('user_name', sa.String(255), nullable=False, server_default=''),
        sa.Column('user_initials', sa.String(4), nullable=False, server_default=''),
        sa.Column('user_type', sa.String(20), nullable=False, server_default='student'),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('likes', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('edited', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_comments_comment_id', 'comments', ['comment_id'], unique=True)
    op.create_index('ix_comments_course_id', 'comments', ['course_id'])
    op.create_index('ix_comments_user_email', 'comments', ['user_email'])

    op.create_table(
        'comment_replies',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('reply_id', sa.String(64), nullable=False),
        sa.Column('comment_id', sa.String(64), nullable=False),
        sa.Column('user_email', sa.String(255), nullable=False),
        sa.Column('user_name', sa.String(255), nullable=False, server_default=''),
        sa.Column('user_initials', sa.String(4), nullable=False, server_default=''),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(['comment_id'], ['comments.comment_id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_comment_replies_reply_id', 'comment_replies', ['reply_id'], unique=True)
    op.create_index('ix_comment_replies_comment_id', 'comment_replies', ['comment_id'])

    op.create_table(
        'comment_likes',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('comment_id', sa.String(64), nullable=False),
        sa.Column('user_email', sa.String(255), nullable=False),
        sa.ForeignKeyConstraint(['comment_id'], ['comments.comment_id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('comment_id', 'user_email', name='uq_comment_like_user'),
    )
    op.create_index('ix_comment_likes_comment_id', 'comment_likes', ['comment_id'])


def downgrade() -> None:
    """Drop all CourseHub tables."""
    op.drop_table('comment_likes')
    op.drop_table('comment_replies')
    op.drop_table('comments')
    op.drop_table('review_helpful_votes')
    op.drop_table('review_replies')
    op.drop_table('reviews')
    op.drop_table('ratings')
    op.drop_table('video_progress')
    op.drop_table('enrollments')
    op.drop_table('videos')
    op.drop_table('courses')
    op.drop_table('users')
