from .assignment import (
    AssignmentAccessResponse,
    AssignmentBatchResponse,
    AssignmentEmailRequest,
    AssignmentListResponse,
    AssignmentResponse,
    AssignmentUpdate,
    AssignmentUpdateResponse,
    EmailSendResponse,
    PairFailureResponse,
    QuestionResponse,
    SurveyDeleteResponse,
)

__all__ = [
    "AssignmentAccessResponse",
    "AssignmentBatchResponse",
    "AssignmentEmailRequest",
    "AssignmentListResponse",
    "AssignmentResponse",
    "AssignmentUpdate",
    "AssignmentUpdateResponse",
    "EmailSendResponse",
    "PairFailureResponse",
    "QuestionResponse",
    "SurveyDeleteResponse",
]
