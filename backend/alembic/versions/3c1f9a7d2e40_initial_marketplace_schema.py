"""Initial marketplace schema

Revision ID: 3c1f9a7d2e40
Revises:
Create Date: 2026-10-18 09:12:44.118203

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '3c1f9a7d2e40'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table('users',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('hashed_password', sa.String(length=255), nullable=False),
        sa.Column('email_verification_token', sa.String(length=64), nullable=True),
        sa.Column('password_reset_token', sa.String(length=64), nullable=True),
        sa.Column('password_reset_expires', sa.DateTime(), nullable=True),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('phone', sa.String(length=50), nullable=True),
        sa.Column('user_type', sa.String(length=20), nullable=False),
        sa.Column('profile_photo_url', sa.String(length=1000), nullable=True),
        sa.Column('is_verified', sa.Boolean(), nullable=False),
        sa.Column('email_verified', sa.Boolean(), nullable=False),
        sa.Column('notification_preferences', sa.Text(), nullable=True),
        sa.Column('countries_of_interest', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.Column('last_login_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email')
    )
    op.create_index('idx_users_email', 'users', ['email'], unique=False)
    op.create_index('idx_users_user_type', 'users', ['user_type'], unique=False)

    op.create_table('properties',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('user_id', sa.String(length=64), nullable=False),
        sa.Column('title', sa.String(length=500), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('property_type', sa.String(length=50), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('price', sa.Float(), nullable=False),
        sa.Column('currency', sa.String(length=3), nullable=False),
        sa.Column('country', sa.String(length=100), nullable=False),
        sa.Column('region', sa.String(length=100), nullable=True),
        sa.Column('city', sa.String(length=100), nullable=True),
        sa.Column('address', sa.String(length=500), nullable=True),
        sa.Column('latitude', sa.Float(), nullable=True),
        sa.Column('longitude', sa.Float(), nullable=True),
        sa.Column('square_footage', sa.Float(), nullable=True),
        sa.Column('land_size', sa.Float(), nullable=True),
        sa.Column('land_size_unit', sa.String(length=20), nullable=True),
        sa.Column('bedrooms', sa.Integer(), nullable=True),
        sa.Column('bathrooms', sa.Integer(), nullable=True),
        sa.Column('year_built', sa.Integer(), nullable=True),
        sa.Column('natural_features', sa.Text(), nullable=True),
        sa.Column('outdoor_amenities', sa.Text(), nullable=True),
        sa.Column('indoor_amenities', sa.Text(), nullable=True),
        sa.Column('view_types', sa.Text(), nullable=True),
        sa.Column('nearby_attractions', sa.Text(), nullable=True),
        sa.Column('distance_to_landmarks', sa.Text(), nullable=True),
        sa.Column('environmental_features', sa.Text(), nullable=True),
        sa.Column('outdoor_activities', sa.Text(), nullable=True),
        sa.Column('property_condition', sa.String(length=50), nullable=True),
        sa.Column('special_features', sa.Text(), nullable=True),
        sa.Column('listing_duration_days', sa.Integer(), nullable=False),
        sa.Column('is_featured', sa.Boolean(), nullable=False),
        sa.Column('featured_until', sa.DateTime(), nullable=True),
        sa.Column('view_count', sa.Integer(), nullable=False),
        sa.Column('inquiry_count', sa.Integer(), nullable=False),
        sa.Column('favorite_count', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.Column('expires_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_properties_user_id', 'properties', ['user_id'], unique=False)
    op.create_index('idx_properties_status', 'properties', ['status'], unique=False)
    op.create_index('idx_properties_country', 'properties', ['country'], unique=False)
    op.create_index('idx_properties_property_type', 'properties', ['property_type'], unique=False)
    op.create_index('idx_properties_price', 'properties', ['price'], unique=False)
    op.create_index('idx_properties_created_at', 'properties', ['created_at'], unique=False)
    op.create_index('idx_properties_view_count', 'properties', ['view_count'], unique=False)
    op.create_index('idx_properties_title', 'properties', ['title'], unique=False)
    op.create_index('idx_properties_square_footage', 'properties', ['square_footage'], unique=False)

    op.create_table('property_photos',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('property_id', sa.String(length=64), nullable=False),
        sa.Column('photo_url', sa.String(length=1000), nullable=False),
        sa.Column('caption', sa.String(length=500), nullable=True),
        sa.Column('photo_order', sa.Integer(), nullable=False),
        sa.Column('is_primary', sa.Boolean(), nullable=False),
        sa.Column('photo_type', sa.String(length=20), nullable=True),
        sa.Column('file_size', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['property_id'], ['properties.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_property_photos_property_id', 'property_photos', ['property_id'], unique=False)
    op.create_index('idx_property_photos_primary', 'property_photos', ['property_id', 'is_primary'], unique=False)

    op.create_table('property_inquiries',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('property_id', sa.String(length=64), nullable=False),
        sa.Column('sender_user_id', sa.String(length=64), nullable=True),
        sa.Column('recipient_user_id', sa.String(length=64), nullable=False),
        sa.Column('sender_name', sa.String(length=255), nullable=False),
        sa.Column('sender_email', sa.String(length=255), nullable=False),
        sa.Column('sender_phone', sa.String(length=50), nullable=True),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('is_interested_in_viewing', sa.Boolean(), nullable=False),
        sa.Column('wants_similar_properties', sa.Boolean(), nullable=False),
        sa.Column('response_message', sa.Text(), nullable=True),
        sa.Column('responded_at', sa.DateTime(), nullable=True),
        sa.Column('priority', sa.String(length=10), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['property_id'], ['properties.id'], ),
        sa.ForeignKeyConstraint(['sender_user_id'], ['users.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['recipient_user_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_inquiries_property_id', 'property_inquiries', ['property_id'], unique=False)
    op.create_index('idx_inquiries_recipient', 'property_inquiries', ['recipient_user_id', 'status'], unique=False)
    op.create_index('idx_inquiries_sender', 'property_inquiries', ['sender_user_id'], unique=False)

    op.create_table('inquiry_responses',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('inquiry_id', sa.String(length=64), nullable=False),
        sa.Column('sender_user_id', sa.String(length=64), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('attachments', sa.Text(), nullable=True),
        sa.Column('is_read', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['inquiry_id'], ['property_inquiries.id'], ),
        sa.ForeignKeyConstraint(['sender_user_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id')
    )

    op.create_table('saved_properties',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('user_id', sa.String(length=64), nullable=False),
        sa.Column('property_id', sa.String(length=64), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
        sa.ForeignKeyConstraint(['property_id'], ['properties.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_saved_properties_user_id', 'saved_properties', ['user_id'], unique=False)
    op.create_index('idx_saved_properties_unique', 'saved_properties', ['user_id', 'property_id'], unique=True)

    # Saved searches and search history share the filter snapshot columns
    for table_name in ('saved_searches', 'search_history'):
        filter_columns = [
            sa.Column('country', sa.String(length=100), nullable=True),
            sa.Column('property_type', sa.String(length=50), nullable=True),
            sa.Column('price_min', sa.Float(), nullable=True),
            sa.Column('price_max', sa.Float(), nullable=True),
            sa.Column('bedrooms_min', sa.Integer(), nullable=True),
            sa.Column('bathrooms_min', sa.Integer(), nullable=True),
            sa.Column('square_footage_min', sa.Float(), nullable=True),
            sa.Column('square_footage_max', sa.Float(), nullable=True),
            sa.Column('land_size_min', sa.Float(), nullable=True),
            sa.Column('land_size_max', sa.Float(), nullable=True),
            sa.Column('natural_features', sa.Text(), nullable=True),
            sa.Column('outdoor_amenities', sa.Text(), nullable=True),
            sa.Column('location_text', sa.String(length=500), nullable=True),
        ]
        if table_name == 'saved_searches':
            op.create_table(table_name,
                sa.Column('id', sa.String(length=64), nullable=False),
                sa.Column('user_id', sa.String(length=64), nullable=False),
                sa.Column('search_name', sa.String(length=255), nullable=False),
                *filter_columns,
                sa.Column('alert_frequency', sa.String(length=10), nullable=False),
                sa.Column('is_active', sa.Boolean(), nullable=False),
                sa.Column('last_alert_sent', sa.DateTime(), nullable=True),
                sa.Column('created_at', sa.DateTime(), nullable=False),
                sa.Column('updated_at', sa.DateTime(), nullable=False),
                sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
                sa.PrimaryKeyConstraint('id')
            )
            op.create_index('idx_saved_searches_user_id', 'saved_searches', ['user_id'], unique=False)
        else:
            op.create_table(table_name,
                sa.Column('id', sa.String(length=64), nullable=False),
                sa.Column('user_id', sa.String(length=64), nullable=True),
                sa.Column('session_id', sa.String(length=100), nullable=True),
                *filter_columns,
                sa.Column('sort_by', sa.String(length=50), nullable=True),
                sa.Column('results_count', sa.Integer(), nullable=True),
                sa.Column('created_at', sa.DateTime(), nullable=False),
                sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
                sa.PrimaryKeyConstraint('id')
            )
            op.create_index('idx_search_history_user_id', 'search_history', ['user_id', 'created_at'], unique=False)

    op.create_table('notifications',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('user_id', sa.String(length=64), nullable=False),
        sa.Column('type', sa.String(length=20), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('related_property_id', sa.String(length=64), nullable=True),
        sa.Column('related_inquiry_id', sa.String(length=64), nullable=True),
        sa.Column('is_read', sa.Boolean(), nullable=False),
        sa.Column('is_email_sent', sa.Boolean(), nullable=False),
        sa.Column('email_sent_at', sa.DateTime(), nullable=True),
        sa.Column('action_url', sa.String(length=1000), nullable=True),
        sa.Column('priority', sa.String(length=10), nullable=False),
        sa.Column('expires_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
        sa.ForeignKeyConstraint(['related_property_id'], ['properties.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['related_inquiry_id'], ['property_inquiries.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_notifications_user_id', 'notifications', ['user_id', 'is_read'], unique=False)

    op.create_table('property_views',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('property_id', sa.String(length=64), nullable=False),
        sa.Column('user_id', sa.String(length=64), nullable=True),
        sa.Column('session_id', sa.String(length=100), nullable=True),
        sa.Column('ip_address', sa.String(length=45), nullable=True),
        sa.Column('user_agent', sa.String(length=500), nullable=True),
        sa.Column('referrer_url', sa.String(length=1000), nullable=True),
        sa.Column('view_duration_seconds', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['property_id'], ['properties.id'], ),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_property_views_property_id', 'property_views', ['property_id', 'created_at'], unique=False)

    op.create_table('user_sessions',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('user_id', sa.String(length=64), nullable=False),
        sa.Column('refresh_token', sa.String(length=64), nullable=True),
        sa.Column('device_info', sa.String(length=500), nullable=True),
        sa.Column('ip_address', sa.String(length=45), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('last_activity_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('refresh_token')
    )
    op.create_index('idx_user_sessions_user_id', 'user_sessions', ['user_id'], unique=False)

    op.create_table('property_analytics',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('property_id', sa.String(length=64), nullable=False),
        sa.Column('date', sa.String(length=10), nullable=False),
        sa.Column('views_count', sa.Integer(), nullable=False),
        sa.Column('inquiries_count', sa.Integer(), nullable=False),
        sa.Column('favorites_count', sa.Integer(), nullable=False),
        sa.Column('shares_count', sa.Integer(), nullable=False),
        sa.Column('search_impressions', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['property_id'], ['properties.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_property_analytics_property_date', 'property_analytics', ['property_id', 'date'], unique=True)


def downgrade() -> None:
    op.drop_index('idx_property_analytics_property_date', table_name='property_analytics')
    op.drop_table('property_analytics')
    op.drop_index('idx_user_sessions_user_id', table_name='user_sessions')
    op.drop_table('user_sessions')
    op.drop_index('idx_property_views_property_id', table_name='property_views')
    op.drop_table('property_views')
    op.drop_index('idx_notifications_user_id', table_name='notifications')
    op.drop_table('notifications')
    op.drop_index('idx_search_history_user_id', table_name='search_history')
    op.drop_table('search_history')
    op.drop_index('idx_saved_searches_user_id', table_name='saved_searches')
    op.drop_table('saved_searches')
    op.drop_index('idx_saved_properties_unique', table_name='saved_properties')
    op.drop_index('idx_saved_properties_user_id', table_name='saved_properties')
    op.drop_table('saved_properties')
    op.drop_table('inquiry_responses')
    op.drop_index('idx_inquiries_sender', table_name='property_inquiries')
    op.drop_index('idx_inquiries_recipient', table_name='property_inquiries')
    op.drop_index('idx_inquiries_property_id', table_name='property_inquiries')
    op.drop_table('property_inquiries')
    op.drop_index('idx_property_photos_primary', table_name='property_photos')
    op.drop_index('idx_property_photos_property_id', table_name='property_photos')
    op.drop_table('property_photos')
    for index_name in (
        'idx_properties_square_footage', 'idx_properties_title', 'idx_properties_view_count',
        'idx_properties_created_at', 'idx_properties_price', 'idx_properties_property_type',
        'idx_properties_country', 'idx_properties_status', 'idx_properties_user_id',
    ):
        op.drop_index(index_name, table_name='properties')
    op.drop_table('properties')
    op.drop_index('idx_users_user_type', table_name='users')
    op.drop_index('idx_users_email', table_name='users')
    op.drop_table('users')
