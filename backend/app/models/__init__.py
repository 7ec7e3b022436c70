from .user import User
from .client import Client
from .profile import Profile, AccessLevel
from .assessment import Assessment, Dimension, Field, NON_QUESTION_FIELD_TYPES
from .assignment import Assignment, AssignmentField

__all__ = [
    "User",
    "Client",
    "Profile",
    "AccessLevel",
    "Assessment",
    "Dimension",
    "Field",
    "NON_QUESTION_FIELD_TYPES",
    "Assignment",
    "AssignmentField",
]
