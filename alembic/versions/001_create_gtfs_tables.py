"""Create GTFS tables

Revision ID: 001
Revises:
Create Date: 2026-10-17
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Routes table
    op.create_table(
        'gtfs_routes',
        sa.Column('id', sa.String(100), primary_key=True),
        sa.Column('agency_id', sa.String(100), nullable=False, server_default=''),
        sa.Column('short_name', sa.String(50), nullable=False, server_default=''),
        sa.Column('long_name', sa.String(255), nullable=False, server_default=''),
        sa.Column('route_type', sa.Integer(), nullable=False, server_default='3'),
        sa.Column('color', sa.String(6), nullable=True),
        sa.Column('text_color', sa.String(6), nullable=True),
        sa.Column('description', sa.String(500), nullable=True),
    )

    # Stops table
    op.create_table(
        'gtfs_stops',
        sa.Column('id', sa.String(100), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('lat', sa.Float(), nullable=False),
        sa.Column('lon', sa.Float(), nullable=False),
        sa.Column('code', sa.String(50), nullable=True),
        sa.Column('description', sa.String(500), nullable=True),
        sa.Column('zone_id', sa.String(100), nullable=True),
        sa.Column('location_type', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('parent_station_id', sa.String(100), sa.ForeignKey('gtfs_stops.id'), nullable=True),
        sa.Column('platform_code', sa.String(50), nullable=True),
    )

    # Calendar table
    op.create_table(
        'gtfs_calendar',
        sa.Column('service_id', sa.String(100), primary_key=True),
        sa.Column('monday', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('tuesday', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('wednesday', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('thursday', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('friday', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('saturday', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('sunday', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=False),
    )

    # Trips table (no FK on service_id: trips may reference a service without calendar row)
    op.create_table(
        'gtfs_trips',
        sa.Column('id', sa.String(100), primary_key=True),
        sa.Column('route_id', sa.String(100), sa.ForeignKey('gtfs_routes.id'), nullable=False),
        sa.Column('service_id', sa.String(100), nullable=False),
        sa.Column('headsign', sa.String(255), nullable=True),
        sa.Column('short_name', sa.String(100), nullable=True),
        sa.Column('direction_id', sa.Integer(), nullable=True),
        sa.Column('block_id', sa.String(100), nullable=True),
        sa.Column('shape_id', sa.String(100), nullable=True),
        sa.Column('wheelchair_accessible', sa.Integer(), nullable=True),
        sa.Column('bikes_allowed', sa.Integer(), nullable=True),
    )
    op.create_index('ix_trips_route_service', 'gtfs_trips', ['route_id', 'service_id'])

    # Stop times table, times are NULL for skipped stops
    op.create_table(
        'gtfs_stop_times',
        sa.Column('trip_id', sa.String(100), sa.ForeignKey('gtfs_trips.id'), primary_key=True),
        sa.Column('stop_sequence', sa.Integer(), primary_key=True),
        sa.Column('stop_id', sa.String(100), sa.ForeignKey('gtfs_stops.id'), nullable=False),
        sa.Column('arrival_time', sa.String(10), nullable=True),
        sa.Column('departure_time', sa.String(10), nullable=True),
        sa.Column('stop_headsign', sa.String(255), nullable=True),
        sa.Column('pickup_type', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('drop_off_type', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('shape_dist_traveled', sa.Float(), nullable=True),
        sa.Column('timepoint', sa.Integer(), nullable=False, server_default='1'),
    )
    op.create_index('ix_stop_times_stop_id', 'gtfs_stop_times', ['stop_id'])
    op.create_index('ix_stop_times_trip_stop', 'gtfs_stop_times', ['trip_id', 'stop_id'])


def downgrade() -> None:
    op.drop_index('ix_stop_times_trip_stop', table_name='gtfs_stop_times')
    op.drop_index('ix_stop_times_stop_id', table_name='gtfs_stop_times')
    op.drop_table('gtfs_stop_times')
    op.drop_index('ix_trips_route_service', table_name='gtfs_trips')
    op.drop_table('gtfs_trips')
    op.drop_table('gtfs_calendar')
    op.drop_table('gtfs_stops')
    op.drop_table('gtfs_routes')
