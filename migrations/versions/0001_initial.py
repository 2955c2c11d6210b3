"""initial schema: cabins, site settings, admin identity, reviews

Revision ID: 0001
Revises:
Create Date: 2025-05-05 12:00:00
"""
from alembic import op
import sqlalchemy as sa

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "cabins",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("price_per_night", sa.Integer(), nullable=False),
        sa.Column("location", sa.String()),
        sa.Column("bedrooms", sa.Integer()),
        sa.Column("bathrooms", sa.Integer()),
        sa.Column("max_guests", sa.Integer()),
        sa.Column("amenities", sa.Text()),
        sa.Column("images", sa.Text()),
        sa.Column("featured", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
    )
    op.create_index("idx_cabins_featured", "cabins", ["featured"])
    op.create_index("idx_cabins_created_at", "cabins", ["created_at"])

    op.create_table(
        "site_settings",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("key", sa.String(), nullable=False, unique=True),
        sa.Column("value", sa.Text()),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
    )
    op.create_index("idx_site_settings_key", "site_settings", ["key"])

    op.create_table(
        "admin_credentials",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("username", sa.String(), nullable=False, unique=True),
        sa.Column("password_hash", sa.String(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
    )

    op.create_table(
        "admin_path",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("path", sa.String(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
    )

    op.create_table(
        "reviews",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("email", sa.String()),
        sa.Column("rating", sa.Integer(), nullable=False),
        sa.Column("comment", sa.Text(), nullable=False),
        sa.Column("approved", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
    )
    op.create_index("idx_reviews_approved", "reviews", ["approved"])


def downgrade():
    op.drop_index("idx_reviews_approved", table_name="reviews")
    op.drop_table("reviews")
    op.drop_table("admin_path")
    op.drop_table("admin_credentials")
    op.drop_index("idx_site_settings_key", table_name="site_settings")
    op.drop_table("site_settings")
    op.drop_index("idx_cabins_created_at", table_name="cabins")
    op.drop_index("idx_cabins_featured", table_name="cabins")
    op.drop_table("cabins")
