import logging

import streamlit as st

from pdf_assistant.frontend import quiz_player
from pdf_assistant.frontend.dispatcher import ActionDispatcher
from pdf_assistant.frontend.extraction import PdfTextExtractor
from pdf_assistant.frontend.rendering import MarkdownRenderer, StreamlitMarkdownRenderer
from pdf_assistant.frontend.session import AssistantController
from pdf_assistant.schemas import QuizData

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

ACTION_LABELS = {
    "summary": "📖 Generate Summary",
    "studyPlan": "🗓️ Create Study Plan",
    "quiz": "❓ Start Quiz",
}


# Initialize session state
def init_session():
    session_defaults = {
        "controller": lambda: AssistantController(PdfTextExtractor(), ActionDispatcher()),
        "last_upload_id": lambda: None,
    }
    for key, factory in session_defaults.items():
        if key not in st.session_state:
            st.session_state[key] = factory()


def render_upload(controller: AssistantController):
    st.header("Controls")
    uploaded_file = st.file_uploader(
        "Click to upload or drag and drop a PDF here",
        type="pdf",
        accept_multiple_files=False,
    )
    # Streamlit reruns the script on every interaction; only process new uploads
    if uploaded_file is not None and uploaded_file.file_id != st.session_state.last_upload_id:
        st.session_state.last_upload_id = uploaded_file.file_id
        with st.spinner("Processing PDF..."):
            controller.load_file(uploaded_file)

    if controller.state.file_name:
        st.markdown(f"**File:** {controller.state.file_name}")


def render_actions(controller: AssistantController):
    if not controller.state.pdf_text:
        return None
    clicked = None
    for action, label in ACTION_LABELS.items():
        selected = controller.state.active_action == action
        if st.button(label, key=f"action_{action}", width="stretch",
                     type="primary" if selected else "secondary",
                     disabled=controller.state.is_loading):
            clicked = action
    return clicked


def run_action(controller: AssistantController, action: str, renderer: MarkdownRenderer):
    def on_update(state):
        if isinstance(state.output, str):
            renderer.render(state.output)

    if action == "quiz":
        with st.spinner("AI is working its magic..."):
            controller.run_action(action, on_update)
    else:
        controller.run_action(action, on_update)


def render_quiz(controller: AssistantController, quiz: QuizData, title: str):
    state = controller.state.quiz
    total = len(quiz.quiz)

    if not total:
        st.warning("The generated quiz has no questions. Please try again.")
        return

    if state.finished:
        st.subheader(f'Quiz Results for "{title}"')
        st.success(f"## You scored {quiz_player.score(quiz, state)} out of {total}")
        for res in quiz_player.results(quiz, state):
            status = "✅" if res.is_correct else "❌"
            st.markdown(f"{status} **{res.number}.** {res.question}")
            st.markdown(f"- Your answer: **{res.user_answer or 'No answer'}**")
            st.markdown(f"- Correct answer: **{res.correct_answer}**")
            st.divider()
        return

    question = quiz.quiz[state.index]
    st.subheader(f"Question: {state.index + 1} / {total}")
    st.progress(quiz_player.progress(state))
    st.markdown(f"**{question.question}**")

    current = state.answers[state.index]
    # Fresh widget keys per loaded quiz so old answers never leak into a new one
    key = f"answer_{controller.state.quiz_round}_{state.index}"
    if question.type == "short":
        value = st.text_input("Your answer", value=current, key=key,
                              placeholder="Type your answer here...")
    else:
        choices = list(quiz_player.choices_for(question))
        value = st.radio(
            "Select an answer:",
            options=choices,
            index=choices.index(current) if current in choices else None,
            key=key,
        )
    if value is not None and value != current:
        controller.answer(value)

    if quiz_player.is_last_question(state):
        if st.button("Finish Quiz"):
            controller.finish_quiz()
            st.rerun()
    elif st.button("Next Question"):
        controller.next_question()
        st.rerun()


def render_output(controller: AssistantController, pending_action):
    state = controller.state
    renderer = StreamlitMarkdownRenderer()

    if pending_action is not None:
        run_action(controller, pending_action, renderer)
        state = controller.state
    elif state.is_loading and state.output is None:
        st.info("AI is working its magic..." if state.pdf_text else "Processing PDF...")
        return

    if state.error:
        renderer.render("")
        st.error(state.error)
    elif state.output is None:
        st.info("Choose an action to begin." if state.file_name else "📘 Upload a PDF to get started.")
    elif state.active_action == "quiz" and isinstance(state.output, QuizData):
        render_quiz(controller, state.output, state.file_name or "Quiz")
    else:
        renderer.render(state.output)
        st.download_button(
            state.copy_status or "📋 Save as Markdown",
            data=state.output,
            file_name=f"{state.active_action}.md",
            mime="text/markdown",
            on_click=controller.mark_copied,
        )
        with st.expander("Copy raw markdown"):
            st.code(state.output, language="markdown")


def main():
    st.set_page_config(page_title="AI-Powered PDF Learning Assistant", layout="wide")
    init_session()
    controller = st.session_state.controller

    st.title("📚 AI-Powered PDF Learning Assistant")

    with st.sidebar:
        render_upload(controller)
        pending_action = render_actions(controller)

    render_output(controller, pending_action)
