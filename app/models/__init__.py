"""ORM models package."""
from .alert import Alert
from .audit import AuditLog
from .base import Base
from .cash import CaisseBalance, CashTransaction, TypeOperation, TypeTransaction
from .facture import FactureFournisseur, FactureStatut, PaiementFacture
from .paiements import PaiementCaution, PaiementDroitTerre, PaiementLocation, PaiementSouscription, Vente

__all__ = [
    "Alert",
    "AuditLog",
    "Base",
    "CaisseBalance",
    "CashTransaction",
    "FactureFournisseur",
    "FactureStatut",
    "PaiementCaution",
    "PaiementDroitTerre",
    "PaiementFacture",
    "PaiementLocation",
    "PaiementSouscription",
    "TypeOperation",
    "TypeTransaction",
    "Vente",
]
