"""
API schemas package. Import from submodules or from this package.

Example:
    from api.schemas import LearningActionRequest
    from api.schemas.learning_schemas import LearningActionRequest
"""

from api.schemas.learning_schemas import (
    CatalogFilterRequest,
    CatalogResponse,
    CreateLearningSessionRequest,
    EndLearningSessionResponse,
    LearningAction,
    LearningActionRequest,
    LearningActionResponse,
    LearningSessionResponse,
)

__all__ = [
    # requests
    "CreateLearningSessionRequest",
    "LearningAction",
    "LearningActionRequest",
    "CatalogFilterRequest",
    # responses
    "LearningSessionResponse",
    "LearningActionResponse",
    "CatalogResponse",
    "EndLearningSessionResponse",
]
