import logging
import os
import threading
from typing import Iterator, Optional

import requests
from pydantic import ValidationError

from pdf_assistant.schemas import QuizData

logger = logging.getLogger(__name__)

BACKEND_URL = os.getenv("BACKEND_URL", "http://localhost:8000")
REQUEST_TIMEOUT = float(os.getenv("REQUEST_TIMEOUT", "300"))


class DispatchError(Exception):
    """A request to the generation endpoint failed; the message is user-facing."""


class ActionDispatcher:
    """Sends ``{pdfText, action}`` to the backend and reads back the result."""

    def __init__(self, base_url: str = BACKEND_URL, session=None, timeout: float = REQUEST_TIMEOUT):
        self.url = f"{base_url.rstrip('/')}/api/gemini"
        self.session = session or requests.Session()
        self.timeout = timeout

    def _post(self, pdf_text: str, action: str, stream: bool):
        return self.session.post(
            self.url,
            json={"pdfText": pdf_text, "action": action},
            stream=stream,
            timeout=self.timeout,
        )

    @staticmethod
    def _raise_for_error(response):
        if response.ok:
            return
        try:
            message = response.json().get("error")
        except ValueError:
            message = None
        raise DispatchError(message or "API request failed")

    def stream(self, pdf_text: str, action: str, cancel: Optional[threading.Event] = None) -> Iterator[str]:
        """Yield decoded text increments until the body ends or ``cancel`` is set.

        Leaving the loop early (cancel, or the caller closing the generator)
        closes the HTTP response without waiting for the rest of the body.
        """
        response = self._post(pdf_text, action, stream=True)
        self._raise_for_error(response)
        # Response.close() needs a raw body, so check before entering the with block
        if response.raw is None:
            raise DispatchError("Failed to read streaming response.")

        with response:
            if response.encoding is None:
                response.encoding = "utf-8"

            for piece in response.iter_content(chunk_size=None, decode_unicode=True):
                if cancel is not None and cancel.is_set():
                    logger.info(f"Stopped reading '{action}' stream on cancel")
                    return
                if piece:
                    yield piece

    def fetch_quiz(self, pdf_text: str) -> QuizData:
        response = self._post(pdf_text, "quiz", stream=False)
        self._raise_for_error(response)
        try:
            return QuizData.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            logger.error(f"Quiz payload rejected: {str(e)}")
            raise DispatchError("The quiz returned by the server was malformed.") from e
