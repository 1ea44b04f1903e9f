from mida_app.models.user import User
from mida_app.models.chemical import ChemicalInventory
from mida_app.models.certificate import TreatmentCertificate
from mida_app.models.treatment import TreatmentSchedule

__all__ = ["User", "ChemicalInventory", "TreatmentCertificate", "TreatmentSchedule"]
