import logging
import threading
from dataclasses import dataclass, replace
from typing import Callable, Optional, Union

import requests

from pdf_assistant.frontend import quiz_player
from pdf_assistant.frontend.dispatcher import ActionDispatcher, DispatchError
from pdf_assistant.frontend.extraction import ExtractionError, TextExtractor, UnsupportedFileError
from pdf_assistant.schemas import ACTIONS, STREAMING_ACTIONS, QuizData

logger = logging.getLogger(__name__)

INVALID_FILE = "Please select a valid PDF file."
EXTRACTION_FAILED = "Failed to process PDF file. Please try another file."
NO_TEXT = "Please upload and process a PDF first."
COMMUNICATION_FAILED = "An error occurred while communicating with the AI. Please try again."


@dataclass(frozen=True)
class SessionState:
    file_name: Optional[str] = None
    pdf_text: str = ""
    output: Union[str, QuizData, None] = None
    active_action: Optional[str] = None
    is_loading: bool = False
    error: str = ""
    copy_status: str = ""
    quiz: Optional[quiz_player.QuizPlayerState] = None
    quiz_round: int = 0  # bumped on every loaded quiz


# Pure transforms: each returns the next snapshot

def file_selected(state: SessionState, file_name: str) -> SessionState:
    return replace(
        state, file_name=file_name, output=None, active_action=None,
        quiz=None, is_loading=True, error="",
    )


def text_extracted(state: SessionState, text: str) -> SessionState:
    return replace(state, pdf_text=text, is_loading=False)


def file_rejected(state: SessionState, message: str) -> SessionState:
    return replace(state, file_name=None, pdf_text="", is_loading=False, error=message)


def action_started(state: SessionState, action: str) -> SessionState:
    return replace(
        state, active_action=action, output=None, quiz=None,
        is_loading=True, error="", copy_status="",
    )


def output_updated(state: SessionState, text: str) -> SessionState:
    return replace(state, output=text)


def quiz_loaded(state: SessionState, quiz: QuizData) -> SessionState:
    return replace(
        state, output=quiz, quiz=quiz_player.start(quiz), quiz_round=state.quiz_round + 1,
    )


def action_failed(state: SessionState, message: str) -> SessionState:
    return replace(state, error=message, is_loading=False)


def action_finished(state: SessionState) -> SessionState:
    return replace(state, is_loading=False)


def output_copied(state: SessionState) -> SessionState:
    return replace(state, copy_status="Copied!")


def quiz_changed(state: SessionState, quiz: quiz_player.QuizPlayerState) -> SessionState:
    return replace(state, quiz=quiz)


class AssistantController:
    """Owns the session state and drives extraction, dispatch and the quiz."""

    def __init__(self, extractor: TextExtractor, dispatcher: ActionDispatcher):
        self.extractor = extractor
        self.dispatcher = dispatcher
        self.state = SessionState()
        self._cancel: Optional[threading.Event] = None

    def load_file(self, uploaded_file) -> SessionState:
        if uploaded_file.type != "application/pdf":
            self.state = file_rejected(self.state, INVALID_FILE)
            return self.state

        self.state = file_selected(self.state, uploaded_file.name)
        try:
            text = self.extractor.extract(uploaded_file)
        except UnsupportedFileError:
            self.state = file_rejected(self.state, INVALID_FILE)
        except ExtractionError:
            logger.exception("PDF processing failed")
            self.state = file_rejected(self.state, EXTRACTION_FAILED)
        else:
            self.state = text_extracted(self.state, text)
        return self.state

    def cancel_stream(self):
        if self._cancel is not None:
            self._cancel.set()
            self._cancel = None

    def run_action(self, action: str, on_update: Optional[Callable[[SessionState], None]] = None) -> SessionState:
        """Run one action to completion, calling ``on_update`` after every state change"""
        if action not in ACTIONS:
            raise ValueError(f"Unknown action: {action}")
        if not self.state.pdf_text:
            self.state = action_failed(self.state, NO_TEXT)
            return self.state

        self.cancel_stream()
        cancel = self._cancel = threading.Event()
        self.state = action_started(self.state, action)
        notify = on_update or (lambda state: None)
        notify(self.state)

        try:
            if action in STREAMING_ACTIONS:
                accumulated = ""
                for piece in self.dispatcher.stream(self.state.pdf_text, action, cancel):
                    accumulated += piece
                    self.state = output_updated(self.state, accumulated)
                    notify(self.state)
            else:
                quiz = self.dispatcher.fetch_quiz(self.state.pdf_text)
                self.state = quiz_loaded(self.state, quiz)
        except DispatchError as e:
            logger.error(f"Action '{action}' failed: {str(e)}")
            self.state = action_failed(self.state, str(e))
        except requests.RequestException as e:
            logger.error(f"Action '{action}' failed: {str(e)}")
            self.state = action_failed(self.state, COMMUNICATION_FAILED)
        finally:
            # Also runs when Streamlit interrupts the script mid-stream
            self.state = action_finished(self.state)
            if self._cancel is cancel:
                self._cancel = None
        return self.state

    def mark_copied(self):
        if isinstance(self.state.output, str):
            self.state = output_copied(self.state)

    # Quiz navigation

    def answer(self, value: str):
        if self.state.quiz is not None:
            self.state = quiz_changed(self.state, quiz_player.select_answer(self.state.quiz, value))

    def next_question(self):
        if self.state.quiz is not None:
            self.state = quiz_changed(self.state, quiz_player.next_question(self.state.quiz))

    def finish_quiz(self):
        if self.state.quiz is not None:
            self.state = quiz_changed(self.state, quiz_player.finish(self.state.quiz))
