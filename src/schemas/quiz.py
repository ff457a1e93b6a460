"""Quiz schema definitions.

Input models only describe the shape of a request body. Range checks
(lengths, counts, the single correct option) are enforced by
utils.validators so that every entry point reports them the same way.
"""

from typing import List, Optional

from pydantic import BaseModel, Field

from models.quiz import QuizStatus


class OptionInput(BaseModel):
    label: str = ""
    is_correct: bool = False


class QuestionInput(BaseModel):
    prompt: str = ""
    options: List[OptionInput] = Field(default_factory=list)


class QuizInput(BaseModel):
    """Payload for submitting, editing or creating a quiz."""
    title: str = ""
    description: Optional[str] = None
    category_id: str = ""
    questions: List[QuestionInput] = Field(default_factory=list)


class Option(BaseModel):
    option_id: str
    label: str
    is_correct: bool


class Question(BaseModel):
    question_id: str
    prompt: str
    options: List[Option] = Field(default_factory=list)


class Quiz(BaseModel):
    """A quiz together with its ordered questions and options."""
    quiz_id: str = Field(description="The unique identifier for the quiz.")
    title: str
    description: str = ""
    category_id: str
    created_by: str = Field(description="user_id of the submitter.")
    created_at: str
    status: QuizStatus = Field(description="Moderation state of the quiz.")
    reviewed_by: Optional[str] = None
    reviewed_at: Optional[str] = None
    rejection_reason: Optional[str] = None
    questions: List[Question] = Field(default_factory=list)


class ModerationRequest(BaseModel):
    """Body of an approve/reject decision."""
    action: str = ""
    rejection_reason: Optional[str] = None
