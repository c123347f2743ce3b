import json
import logging
import re
from typing import AsyncIterator, Optional

from langchain_core.language_models import BaseChatModel
from langchain_core.prompts import PromptTemplate
from langchain_google_genai import ChatGoogleGenerativeAI

from pdf_assistant.backend.utils.config import Settings
from pdf_assistant.schemas import QuizData

logger = logging.getLogger(__name__)

# OpenAPI-style schema understood by Gemini's structured output mode
QUIZ_SCHEMA = {
    "type": "object",
    "properties": {
        "quiz": {
            "type": "array",
            "description": "An array of quiz questions.",
            "minItems": 1,
            "items": {
                "type": "object",
                "properties": {
                    "question": {"type": "string"},
                    "type": {"type": "string", "enum": ["mcq", "tf", "short"]},
                    "options": {"type": "array", "items": {"type": "string"}},
                    "answer": {"type": "string"},
                },
                "required": ["question", "type", "answer"],
            },
        },
    },
}


class EmptyResponseError(RuntimeError):
    """The provider answered without any text."""


class GenerationService:
    """Builds prompts per action and talks to Gemini.

    ``llm`` serves the streamed markdown actions, ``quiz_llm`` the
    schema-constrained quiz request. Both default to Gemini chat models
    configured from ``settings``.
    """

    def __init__(
        self,
        settings: Settings,
        llm: Optional[BaseChatModel] = None,
        quiz_llm: Optional[BaseChatModel] = None,
    ):
        self.settings = settings
        if llm is None:
            llm = ChatGoogleGenerativeAI(
                model=settings.llm_model,
                google_api_key=settings.api_key,
            )
        if quiz_llm is None:
            quiz_llm = ChatGoogleGenerativeAI(
                model=settings.llm_model,
                google_api_key=settings.api_key,
                response_mime_type="application/json",
                response_schema=QUIZ_SCHEMA,
            )
        self.llm = llm
        self.quiz_llm = quiz_llm
        self.setup_prompts()

    def setup_prompts(self):
        """Setup the fixed prompt templates for every action"""
        summary_template = (
            "Provide a concise, well-structured summary of the following document. "
            "Use markdown for formatting:\n\n---\n{text}\n---"
        )
        study_plan_template = (
            "Based on the following document, create a detailed 4-week study plan. "
            "Break it down week by week with specific goals, topics to cover, and "
            "suggestions for revision. Use markdown for formatting:\n\n---\n{text}\n---"
        )
        quiz_template = (
            "Generate a {number}-question quiz based on the following document. "
            "Include multiple-choice (mcq), true/false (tf), and short-answer (short) "
            "questions. For each question, provide the question, type, options (for mcq), "
            "and the correct answer. The answer for mcq must exactly match one of the "
            "options. Document content:\n\n---\n{text}\n---"
        )

        self.stream_prompts = {
            "summary": PromptTemplate(input_variables=["text"], template=summary_template),
            "studyPlan": PromptTemplate(input_variables=["text"], template=study_plan_template),
        }
        self.quiz_prompt = PromptTemplate(
            input_variables=["text", "number"],
            template=quiz_template,
        )

    async def stream_text(self, action: str, pdf_text: str) -> AsyncIterator[str]:
        """Yield generated markdown for ``summary`` or ``studyPlan`` as it arrives"""
        prompt = self.stream_prompts[action].format(text=pdf_text)
        async for chunk in self.llm.astream(prompt):
            text = chunk_text(chunk.content)
            if text:
                yield text

    async def generate_quiz(self, pdf_text: str) -> QuizData:
        """Request a schema-constrained quiz and parse it"""
        prompt = self.quiz_prompt.format(
            text=pdf_text, number=self.settings.quiz_question_count
        )
        response = await self.quiz_llm.ainvoke(prompt)

        json_text = chunk_text(response.content)
        if not json_text or not json_text.strip():
            raise EmptyResponseError("Failed to generate quiz. The AI returned an empty response.")

        quiz = QuizData.model_validate(self.extract_json(json_text.strip()))
        logger.info(f"Generated quiz with {len(quiz.quiz)} questions")
        return quiz

    def extract_json(self, text: str) -> dict:
        """Extract JSON from LLM response text"""
        try:
            return json.loads(text)
        except json.JSONDecodeError:
            # Handle fenced or wrapped JSON
            match = re.search(r'\{.*\}', text, re.DOTALL)
            if match:
                return json.loads(match.group())
            raise


def chunk_text(content) -> str:
    """Flatten message content (plain string or list of content blocks) to text"""
    if isinstance(content, str):
        return content
    parts = []
    for block in content or []:
        if isinstance(block, str):
            parts.append(block)
        elif isinstance(block, dict) and block.get("type") == "text":
            parts.append(block.get("text", ""))
    return "".join(parts)
