"""One-question-at-a-time quiz state machine.

Every transition takes the current ``QuizPlayerState`` and returns the next
one; nothing is mutated. Once ``finished`` is set no transition changes the
state any more.
"""
from dataclasses import dataclass, replace

from pdf_assistant.schemas import QuizData

TRUE_FALSE_OPTIONS = ("True", "False")


@dataclass(frozen=True)
class QuizPlayerState:
    index: int
    answers: tuple[str, ...]
    finished: bool = False


@dataclass(frozen=True)
class QuestionResult:
    number: int
    question: str
    user_answer: str
    correct_answer: str
    is_correct: bool


def start(quiz: QuizData) -> QuizPlayerState:
    return QuizPlayerState(index=0, answers=("",) * len(quiz.quiz))


def is_last_question(state: QuizPlayerState) -> bool:
    return state.index >= len(state.answers) - 1


def select_answer(state: QuizPlayerState, answer: str) -> QuizPlayerState:
    if state.finished or not state.answers:
        return state
    answers = list(state.answers)
    answers[state.index] = answer
    return replace(state, answers=tuple(answers))


def next_question(state: QuizPlayerState) -> QuizPlayerState:
    if state.finished or is_last_question(state):
        return state
    return replace(state, index=state.index + 1)


def finish(state: QuizPlayerState) -> QuizPlayerState:
    # Only reachable from the last question
    if state.finished or not is_last_question(state):
        return state
    return replace(state, finished=True)


def progress(state: QuizPlayerState) -> float:
    if not state.answers:
        return 0.0
    return (state.index + 1) / len(state.answers)


def is_correct(expected: str, given: str) -> bool:
    return expected.lower() == given.lower()


def score(quiz: QuizData, state: QuizPlayerState) -> int:
    return sum(
        1 for question, given in zip(quiz.quiz, state.answers)
        if is_correct(question.answer, given)
    )


def results(quiz: QuizData, state: QuizPlayerState) -> list[QuestionResult]:
    return [
        QuestionResult(
            number=i + 1,
            question=question.question,
            user_answer=given,
            correct_answer=question.answer,
            is_correct=is_correct(question.answer, given),
        )
        for i, (question, given) in enumerate(zip(quiz.quiz, state.answers))
    ]


def choices_for(question) -> tuple[str, ...]:
    """Options offered for a question; short answers have none"""
    if question.type == "mcq":
        return tuple(question.options or ())
    if question.type == "tf":
        return TRUE_FALSE_OPTIONS
    return ()
