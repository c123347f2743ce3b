from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

ACTIONS = ("summary", "studyPlan", "quiz")
STREAMING_ACTIONS = ("summary", "studyPlan")

QuestionType = Literal["mcq", "tf", "short"]


class GenerateRequest(BaseModel):
    # Both optional so the router can answer with its own 400 message
    pdf_text: Optional[str] = Field(default=None, alias="pdfText")
    action: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)


class QuizQuestion(BaseModel):
    question: str
    type: QuestionType
    options: Optional[list[str]] = None  # only for mcq
    answer: str

    model_config = ConfigDict(frozen=True)


class QuizData(BaseModel):
    quiz: list[QuizQuestion] = Field(min_length=1)

    model_config = ConfigDict(frozen=True)


class ErrorResponse(BaseModel):
    error: str
