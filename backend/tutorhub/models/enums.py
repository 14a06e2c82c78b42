"""
Énumérations partagées par les modèles et les schémas.
Les valeurs sont celles exposées telles quelles par l'API.
"""

import enum


class UserRole(str, enum.Enum):
    STUDENT = "student"
    TUTOR = "tutor"
    ADMIN = "admin"


class Subject(str, enum.Enum):
    MATHEMATICS = "Mathematics"
    ENGLISH = "English"
    SCIENCE = "Science"
    HISTORY = "History"
    GEOGRAPHY = "Geography"
    ICT = "ICT"
    OTHER = "Other"


class GradeLevel(str, enum.Enum):
    GRADE_6 = "Grade 6"
    GRADE_7 = "Grade 7"
    GRADE_8 = "Grade 8"
    GRADE_9 = "Grade 9"
    GRADE_10 = "Grade 10"
    GRADE_11 = "Grade 11"
    GRADE_12 = "Grade 12"
    UNIVERSITY = "University"


class RequestType(str, enum.Enum):
    ONE_TIME = "one-time"
    ONGOING = "ongoing"


class Priority(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class RequestStatus(str, enum.Enum):
    """Cycle de vie : open → in-progress → completed | cancelled (open → cancelled possible)."""
    OPEN = "open"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
