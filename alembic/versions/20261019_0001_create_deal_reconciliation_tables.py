"""create deal reconciliation tables

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19 09:00:00
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "partners",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column(
            "is_direct",
            sa.Boolean(),
            nullable=False,
            comment="Direct partners are subject to SOP gating",
        ),
        sa.Column("has_contract", sa.Boolean(), nullable=False),
        sa.Column("has_license", sa.Boolean(), nullable=False),
        sa.Column("has_banking", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_partners_name", "partners", ["name"], unique=False)

    op.create_table(
        "brands",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("partner_id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column(
            "brand_domain",
            sa.String(length=255),
            nullable=True,
            comment="Registered domain used for heuristic link matching",
        ),
        sa.Column("status", sa.String(length=32), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["partner_id"], ["partners.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_brands_partner_id", "brands", ["partner_id"], unique=False)
    op.create_index("ix_brands_status", "brands", ["status"], unique=False)

    op.create_table(
        "assets",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("asset_domain", sa.String(length=255), nullable=True),
        sa.Column("status", sa.String(length=32), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_assets_status", "assets", ["status"], unique=False)

    op.create_table(
        "pages",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("asset_id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("path", sa.String(length=1024), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["asset_id"], ["assets.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_pages_asset_id", "pages", ["asset_id"], unique=False)

    op.create_table(
        "positions",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("page_id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["page_id"], ["pages.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_positions_page_id", "positions", ["page_id"], unique=False)

    op.create_table(
        "deals",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("partner_id", sa.Uuid(), nullable=False),
        sa.Column("brand_id", sa.Uuid(), nullable=False),
        sa.Column("asset_id", sa.Uuid(), nullable=False),
        sa.Column("page_id", sa.Uuid(), nullable=False),
        sa.Column("position_id", sa.Uuid(), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False),
        sa.Column("geo", sa.String(length=2), nullable=True),
        sa.Column("affiliate_link", sa.Text(), nullable=True),
        sa.Column("tracking_domain", sa.String(length=255), nullable=True),
        sa.Column("is_direct", sa.Boolean(), nullable=False),
        sa.Column("start_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("end_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("replaced_deal_id", sa.Uuid(), nullable=True),
        sa.Column("created_by_id", sa.String(length=255), nullable=True),
        sa.Column("updated_by_id", sa.String(length=255), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["partner_id"], ["partners.id"]),
        sa.ForeignKeyConstraint(["brand_id"], ["brands.id"]),
        sa.ForeignKeyConstraint(["asset_id"], ["assets.id"]),
        sa.ForeignKeyConstraint(["page_id"], ["pages.id"]),
        sa.ForeignKeyConstraint(["position_id"], ["positions.id"]),
        sa.ForeignKeyConstraint(["replaced_deal_id"], ["deals.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("replaced_deal_id"),
    )
    op.create_index("ix_deals_asset_id_status", "deals", ["asset_id", "status"], unique=False)
    op.create_index("ix_deals_brand_id", "deals", ["brand_id"], unique=False)
    op.create_index("ix_deals_partner_id", "deals", ["partner_id"], unique=False)
    op.create_index(
        "uq_deals_position_occupying",
        "deals",
        ["position_id"],
        unique=True,
        postgresql_where=sa.text("status <> 'Inactive'"),
    )

    op.create_table(
        "scan_results",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("asset_id", sa.Uuid(), nullable=False),
        sa.Column("scanned_url", sa.Text(), nullable=False),
        sa.Column("total_links", sa.Integer(), nullable=False),
        sa.Column("affiliate_links", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.String(length=255), nullable=True),
        sa.Column("scanned_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.ForeignKeyConstraint(["asset_id"], ["assets.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_scan_results_asset_id_scanned_at",
        "scan_results",
        ["asset_id", "scanned_at"],
        unique=False,
    )

    op.create_table(
        "scan_result_items",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("scan_id", sa.Uuid(), nullable=False),
        sa.Column("ordinal", sa.Integer(), nullable=False),
        sa.Column("type", sa.String(length=32), nullable=False),
        sa.Column("found_url", sa.Text(), nullable=True),
        sa.Column("found_anchor", sa.Text(), nullable=True),
        sa.Column("matched_deal_id", sa.Uuid(), nullable=True),
        sa.Column("matched_brand_id", sa.Uuid(), nullable=True),
        sa.Column("confidence", sa.Float(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("action", sa.String(length=32), nullable=False),
        sa.ForeignKeyConstraint(["scan_id"], ["scan_results.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["matched_deal_id"], ["deals.id"]),
        sa.ForeignKeyConstraint(["matched_brand_id"], ["brands.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_scan_result_items_scan_id", "scan_result_items", ["scan_id"], unique=False)
    op.create_index("ix_scan_result_items_action", "scan_result_items", ["action"], unique=False)

    op.create_table(
        "audit_logs",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.String(length=255), nullable=False),
        sa.Column("entity", sa.String(length=64), nullable=False),
        sa.Column("entity_id", sa.String(length=64), nullable=False),
        sa.Column("action", sa.String(length=64), nullable=False),
        sa.Column("details", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_audit_logs_entity_entity_id",
        "audit_logs",
        ["entity", "entity_id"],
        unique=False,
    )
    op.create_index("ix_audit_logs_created_at", "audit_logs", ["created_at"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_audit_logs_created_at", table_name="audit_logs")
    op.drop_index("ix_audit_logs_entity_entity_id", table_name="audit_logs")
    op.drop_table("audit_logs")
    op.drop_index("ix_scan_result_items_action", table_name="scan_result_items")
    op.drop_index("ix_scan_result_items_scan_id", table_name="scan_result_items")
    op.drop_table("scan_result_items")
    op.drop_index("ix_scan_results_asset_id_scanned_at", table_name="scan_results")
    op.drop_table("scan_results")
    op.drop_index("uq_deals_position_occupying", table_name="deals")
    op.drop_index("ix_deals_partner_id", table_name="deals")
    op.drop_index("ix_deals_brand_id", table_name="deals")
    op.drop_index("ix_deals_asset_id_status", table_name="deals")
    op.drop_table("deals")
    op.drop_index("ix_positions_page_id", table_name="positions")
    op.drop_table("positions")
    op.drop_index("ix_pages_asset_id", table_name="pages")
    op.drop_table("pages")
    op.drop_index("ix_assets_status", table_name="assets")
    op.drop_table("assets")
    op.drop_index("ix_brands_status", table_name="brands")
    op.drop_index("ix_brands_partner_id", table_name="brands")
    op.drop_table("brands")
    op.drop_index("ix_partners_name", table_name="partners")
    op.drop_table("partners")
