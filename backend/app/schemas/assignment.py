from datetime import datetime
from typing import Optional, List, Dict, Any
from pydantic import BaseModel, EmailStr, Field, ConfigDict


class AssignmentResponse(BaseModel):
    id: str
    user_id: str
    assessment_id: str
    target_id: Optional[str] = None
    survey_id: str
    expires: datetime
    whitelabel: bool = False
    completed: bool = False
    custom_fields: Optional[Dict[str, Any]] = None
    job_id: Optional[str] = None
    url: Optional[str] = None
    reminder: bool = False
    reminder_frequency: Optional[str] = None
    next_reminder: Optional[datetime] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    # For list/table display (from joined profile/assessment)
    user_name: Optional[str] = None
    user_email: Optional[str] = None
    assessment_title: Optional[str] = None
    question_count: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)


class PairFailureResponse(BaseModel):
    user_id: str
    assessment_id: str
    stage: str
    error: str


class AssignmentBatchResponse(BaseModel):
    success: bool = True
    assignments: List[AssignmentResponse]
    count: int
    survey_id: str
    # Temporary passwords for profiles that were given an identity in this batch
    user_passwords: Dict[str, str] = Field(default_factory=dict, alias="userPasswords")
    failures: List[PairFailureResponse] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True)


class AssignmentListResponse(BaseModel):
    assignments: List[AssignmentResponse]


class AssignmentUpdate(BaseModel):
    expires: Optional[datetime] = None
    whitelabel: Optional[bool] = None
    job_id: Optional[str] = Field(default=None, max_length=200)
    started_at: Optional[datetime] = None


class AssignmentUpdateResponse(BaseModel):
    success: bool = True
    assignment: AssignmentResponse


class QuestionResponse(BaseModel):
    id: str
    order: int
    type: str
    content: Optional[str] = None
    dimension_id: Optional[str] = None


class AssignmentAccessResponse(BaseModel):
    assignment: AssignmentResponse
    assessment_title: str
    username: str
    selected: bool
    questions: List[QuestionResponse]


class EmailAssignmentItem(BaseModel):
    assessment_title: str = Field(min_length=1, max_length=300)
    url: Optional[str] = None


class AssignmentEmailRequest(BaseModel):
    to: EmailStr
    to_name: str = Field(min_length=1, max_length=200)
    username: Optional[str] = Field(default=None, max_length=200)
    subject: Optional[str] = Field(default=None, max_length=300)
    body: Optional[str] = Field(default=None, max_length=20000)
    assignments: List[EmailAssignmentItem] = Field(min_length=1)
    expiration_date: datetime
    password: Optional[str] = Field(default=None, max_length=200)
    assignment_id: Optional[str] = None


class EmailSendResponse(BaseModel):
    success: bool
    email_id: str = ""


class SurveyDeleteResponse(BaseModel):
    success: bool = True
    survey_id: str
    deleted: int


class SuccessResponse(BaseModel):
    success: bool = True
