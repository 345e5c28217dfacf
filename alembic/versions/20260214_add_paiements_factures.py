"""add paiements_factures

Revision ID: 20260214_paiements_factures
Revises: 20260110_caisse
Create Date: 2026-02-14 10:03:21.550871
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "20260214_paiements_factures"
down_revision = "20260110_caisse"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "paiements_factures",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("facture_id", sa.Integer, sa.ForeignKey("factures_fournisseurs.id"), nullable=False),
        sa.Column("montant", sa.Numeric(18, 2), nullable=False),
        sa.Column("date_paiement", sa.DateTime(timezone=True), nullable=False),
        sa.Column("mode_paiement", sa.String(length=30), nullable=False),
        sa.Column("reference", sa.String(length=128), nullable=True),
        sa.CheckConstraint("montant > 0", name="ck_paiement_facture_positive_montant"),
    )
    op.create_index("ix_paiements_factures_facture_id", "paiements_factures", ["facture_id"])


def downgrade() -> None:
    op.drop_index("ix_paiements_factures_facture_id", table_name="paiements_factures")
    op.drop_table("paiements_factures")
