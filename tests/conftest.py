from dataclasses import dataclass

import fitz
import pytest

from pdf_assistant.schemas import QuizData

SAMPLE_QUIZ = {
    "quiz": [
        {
            "question": "What does photosynthesis convert light into?",
            "type": "mcq",
            "options": ["Heat", "Chemical energy", "Sound"],
            "answer": "Chemical energy",
        },
        {
            "question": "Photosynthesis happens in chloroplasts.",
            "type": "tf",
            "answer": "True",
        },
        {
            "question": "Name the green pigment used in photosynthesis.",
            "type": "short",
            "answer": "Chlorophyll",
        },
    ]
}


@dataclass
class FakeUpload:
    name: str
    type: str
    data: bytes = b""

    def getvalue(self) -> bytes:
        return self.data


class FakeExtractor:
    def __init__(self, text="Photosynthesis converts light into chemical energy.", error=None):
        self.text = text
        self.error = error

    def extract(self, uploaded_file):
        if self.error:
            raise self.error
        return self.text


class FakeDispatcher:
    def __init__(self, pieces=(), quiz=None, error=None):
        self.pieces = list(pieces)
        self.quiz = quiz
        self.error = error
        self.calls = []
        self.cancels = []

    def stream(self, pdf_text, action, cancel=None):
        self.calls.append((action, pdf_text))
        self.cancels.append(cancel)
        if self.error:
            raise self.error
        yield from self.pieces

    def fetch_quiz(self, pdf_text):
        self.calls.append(("quiz", pdf_text))
        if self.error:
            raise self.error
        return self.quiz


def make_pdf(*pages: str) -> bytes:
    """Build a PDF with one line of text per page"""
    doc = fitz.open()
    for text in pages:
        page = doc.new_page()
        page.insert_text((72, 72), text)
    data = doc.tobytes()
    doc.close()
    return data


@pytest.fixture
def sample_quiz():
    return QuizData.model_validate(SAMPLE_QUIZ)
