# Importe tous les modèles pour enregistrer leurs tables dans Base.metadata
# avant que SQLAlchemy tente de résoudre les clés étrangères inter-modèles.
# L'ordre suit les dépendances : institutes → teachers → courses → students → attendances.

from app.models.institute import Institute  # noqa: F401
from app.models.teacher import Teacher  # noqa: F401
from app.models.course import Course  # noqa: F401
from app.models.student import Student, StudentCourse  # noqa: F401
from app.models.attendance import Attendance  # noqa: F401
