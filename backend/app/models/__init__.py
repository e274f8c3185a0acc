# Importe tous les modèles pour enregistrer leurs tables dans Base.metadata
# avant que SQLAlchemy tente de résoudre les clés étrangères inter-modèles.
# Sans cet import, les FK comme classes.teacher_id → users.user_id échouent
# avec NoReferencedTableError si user.py n'est pas chargé avant school_class.py.

from app.models.user import User  # noqa: F401  doit précéder school_class
from app.models.course import Course  # noqa: F401
from app.models.school_class import SchoolClass, ClassStudent  # noqa: F401
from app.models.schedule import Schedule  # noqa: F401
from app.models.attendance import Attendance  # noqa: F401
