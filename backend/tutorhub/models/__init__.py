# Importe tous les modèles pour enregistrer leurs tables dans Base.metadata
# avant que SQLAlchemy tente de résoudre les clés étrangères inter-modèles.
# Sans cet import, student_requests.student_id → users.id échoue
# avec NoReferencedTableError si user.py n'est pas chargé avant student_request.py.

from tutorhub.models.user import User  # noqa: F401 (doit précéder student_request)
from tutorhub.models.student_request import StudentRequest  # noqa: F401
