"""create caisse tables

Revision ID: 20260110_caisse
Revises:
Create Date: 2026-01-10 09:12:44.118203
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "20260110_caisse"
down_revision = None
branch_labels = None
depends_on = None

TYPE_TRANSACTION = sa.Enum("entree", "sortie", name="typetransaction")
TYPE_OPERATION = sa.Enum(
    "versement_agent",
    "paiement_loyer",
    "paiement_souscription",
    "paiement_droit_terre",
    "paiement_caution",
    "vente",
    "depense_entreprise",
    "paiement_facture",
    "remboursement_caution",
    "autre",
    name="typeoperation",
)
FACTURE_STATUT = sa.Enum("en_attente", "partiel", "payee", name="facturestatut")


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def _payment_columns() -> list[sa.Column]:
    return [
        sa.Column("montant", sa.Numeric(18, 2), nullable=False),
        sa.Column("date_paiement", sa.DateTime(timezone=True), nullable=False),
        sa.Column("mode_paiement", sa.String(length=30), nullable=False),
        sa.Column("reference", sa.String(length=128), nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        "cash_transactions",
        *_timestamps(),
        sa.Column("type_transaction", TYPE_TRANSACTION, nullable=True),
        sa.Column("type_operation", TYPE_OPERATION, nullable=False),
        sa.Column("montant", sa.Numeric(18, 2), nullable=False),
        sa.Column("date_transaction", sa.DateTime(timezone=True), nullable=False),
        sa.Column("mois_concerne", sa.String(length=20), nullable=True),
        sa.Column("annee_concerne", sa.Integer, nullable=True),
        sa.Column("solde_avant", sa.Numeric(18, 2), nullable=True),
        sa.Column("solde_apres", sa.Numeric(18, 2), nullable=True),
        sa.Column("type", sa.String(length=50), nullable=True),
        sa.Column("mode", sa.String(length=30), nullable=True),
        sa.Column("reference", sa.String(length=128), nullable=True),
        sa.Column("agent_id", sa.Integer, nullable=True),
        sa.Column("beneficiaire", sa.String(length=255), nullable=True),
        sa.Column("reference_operation", sa.String(length=128), nullable=True),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("piece_justificative", sa.String(length=255), nullable=True),
        sa.CheckConstraint("montant > 0", name="ck_cash_transaction_positive_montant"),
    )
    op.create_index("ix_cash_transactions_chrono", "cash_transactions", ["date_transaction", "created_at"])
    op.create_index("ix_cash_transactions_periode", "cash_transactions", ["mois_concerne", "annee_concerne"])
    op.create_index("ix_cash_transactions_operation", "cash_transactions", ["type_operation", "type_transaction"])
    op.create_index("ix_cash_transactions_agent_id", "cash_transactions", ["agent_id"])

    op.create_table(
        "caisse_balance",
        *_timestamps(),
        sa.Column("solde_courant", sa.Numeric(18, 2), nullable=False),
        sa.Column("balance", sa.Numeric(18, 2), nullable=False),
        sa.Column("derniere_maj", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_caisse_balance_updated_at", "caisse_balance", ["updated_at"])

    op.create_table(
        "paiements_locations",
        *_timestamps(),
        sa.Column("location_id", sa.Integer, nullable=False),
        sa.Column("client_id", sa.Integer, nullable=True),
        *_payment_columns(),
        sa.Column("mois_concerne", sa.String(length=20), nullable=True),
        sa.Column("annee_concerne", sa.Integer, nullable=True),
        sa.CheckConstraint("montant > 0", name="ck_paiement_location_positive_montant"),
    )
    op.create_index("ix_paiements_locations_location_id", "paiements_locations", ["location_id"])

    op.create_table(
        "paiements_souscriptions",
        *_timestamps(),
        sa.Column("souscription_id", sa.Integer, nullable=False),
        sa.Column("client_id", sa.Integer, nullable=True),
        *_payment_columns(),
        sa.CheckConstraint("montant > 0", name="ck_paiement_souscription_positive_montant"),
    )
    op.create_index(
        "ix_paiements_souscriptions_souscription_id", "paiements_souscriptions", ["souscription_id"]
    )

    op.create_table(
        "paiements_droit_terre",
        *_timestamps(),
        sa.Column("souscription_id", sa.Integer, nullable=False),
        sa.Column("client_id", sa.Integer, nullable=True),
        *_payment_columns(),
        sa.Column("annee_concerne", sa.Integer, nullable=True),
        sa.CheckConstraint("montant > 0", name="ck_paiement_droit_terre_positive_montant"),
    )
    op.create_index("ix_paiements_droit_terre_souscription_id", "paiements_droit_terre", ["souscription_id"])

    op.create_table(
        "paiements_cautions",
        *_timestamps(),
        sa.Column("location_id", sa.Integer, nullable=True),
        *_payment_columns(),
        sa.CheckConstraint("montant > 0", name="ck_paiement_caution_positive_montant"),
    )
    op.create_index("ix_paiements_cautions_location_id", "paiements_cautions", ["location_id"])

    op.create_table(
        "ventes",
        *_timestamps(),
        sa.Column("article_id", sa.Integer, nullable=False),
        sa.Column("montant", sa.Numeric(18, 2), nullable=False),
        sa.Column("quantite", sa.Integer, nullable=False),
        sa.CheckConstraint("montant > 0", name="ck_vente_positive_montant"),
    )
    op.create_index("ix_ventes_article_id", "ventes", ["article_id"])

    op.create_table(
        "factures_fournisseurs",
        *_timestamps(),
        sa.Column("numero", sa.String(length=64), nullable=False, unique=True),
        sa.Column("fournisseur_id", sa.Integer, nullable=True),
        sa.Column("montant_total", sa.Numeric(18, 2), nullable=False),
        sa.Column("montant_paye", sa.Numeric(18, 2), nullable=False),
        sa.Column("solde", sa.Numeric(18, 2), nullable=False),
        sa.Column("statut", FACTURE_STATUT, nullable=False),
        sa.CheckConstraint("montant_total >= 0", name="ck_facture_montant_total_non_negative"),
        sa.CheckConstraint("montant_paye >= 0", name="ck_facture_montant_paye_non_negative"),
    )
    op.create_index("ix_factures_fournisseurs_fournisseur_id", "factures_fournisseurs", ["fournisseur_id"])

    op.create_table(
        "audit_logs",
        *_timestamps(),
        sa.Column("actor", sa.String(length=100), nullable=False),
        sa.Column("action", sa.String(length=100), nullable=False),
        sa.Column("entity", sa.String(length=100), nullable=False),
        sa.Column("entity_id", sa.Integer, nullable=True),
        sa.Column("data_json", sa.JSON, nullable=False),
        sa.Column("at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_audit_logs_entity", "audit_logs", ["entity", "entity_id"])

    op.create_table(
        "alerts",
        *_timestamps(),
        sa.Column("type", sa.String(length=100), nullable=False),
        sa.Column("message", sa.String(length=255), nullable=False),
        sa.Column("payload_json", sa.JSON, nullable=False),
    )
    op.create_index("ix_alerts_created_at", "alerts", ["created_at"])
    op.create_index("ix_alerts_type", "alerts", ["type"])


def downgrade() -> None:
    op.drop_index("ix_alerts_type", table_name="alerts")
    op.drop_index("ix_alerts_created_at", table_name="alerts")
    op.drop_table("alerts")
    op.drop_index("ix_audit_logs_entity", table_name="audit_logs")
    op.drop_table("audit_logs")
    op.drop_index("ix_factures_fournisseurs_fournisseur_id", table_name="factures_fournisseurs")
    op.drop_table("factures_fournisseurs")
    op.drop_index("ix_ventes_article_id", table_name="ventes")
    op.drop_table("ventes")
    op.drop_index("ix_paiements_cautions_location_id", table_name="paiements_cautions")
    op.drop_table("paiements_cautions")
    op.drop_index("ix_paiements_droit_terre_souscription_id", table_name="paiements_droit_terre")
    op.drop_table("paiements_droit_terre")
    op.drop_index("ix_paiements_souscriptions_souscription_id", table_name="paiements_souscriptions")
    op.drop_table("paiements_souscriptions")
    op.drop_index("ix_paiements_locations_location_id", table_name="paiements_locations")
    op.drop_table("paiements_locations")
    op.drop_index("ix_caisse_balance_updated_at", table_name="caisse_balance")
    op.drop_table("caisse_balance")
    op.drop_index("ix_cash_transactions_agent_id", table_name="cash_transactions")
    op.drop_index("ix_cash_transactions_operation", table_name="cash_transactions")
    op.drop_index("ix_cash_transactions_periode", table_name="cash_transactions")
    op.drop_index("ix_cash_transactions_chrono", table_name="cash_transactions")
    op.drop_table("cash_transactions")
    TYPE_TRANSACTION.drop(op.get_bind(), checkfirst=True)
    TYPE_OPERATION.drop(op.get_bind(), checkfirst=True)
    FACTURE_STATUT.drop(op.get_bind(), checkfirst=True)
