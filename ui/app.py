"""
Streamlit UI for the PDF Quiz Extractor.

Run with: streamlit run ui/app.py
"""

import logging
import os
import sys
from pathlib import Path

import streamlit as st

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from config import DATABASE_PATH, UI_LAYOUT, UI_PAGE_ICON, UI_PAGE_TITLE
from database import SavedQuizzes, SQLiteQuizStore
from pipeline.assembly import answers_from_mapping, build_quiz_document, check_answer
from pipeline.extraction import extract_quiz_document
from pipeline.pdf_loader import PDFLoader, quiz_title_from_filename
from pipeline.session import QuizSession, SessionStateError, SessionStatus
from ui.rendering import render_math, to_markdown

logger = logging.getLogger(__name__)

MODE_QUIZ = "Quiz (questions and answer key in one PDF)"
MODE_EXAM = "Exam (questions only)"


# ── Gemini API key detection ──────────────────────────────────────────
def _get_gemini_api_key() -> str | None:
    """Check env var, .env file, and Streamlit secrets for a Gemini API key."""
    # 1. Environment variable
    key = os.environ.get("GEMINI_API_KEY")
    if key:
        return key
    # 2. .env file in project root
    env_path = Path(__file__).parent.parent / ".env"
    if env_path.exists():
        for line in env_path.read_text().splitlines():
            line = line.strip()
            if line.startswith("GEMINI_API_KEY="):
                val = line.split("=", 1)[1].strip().strip("'\"")
                if val:
                    return val
    # 3. Streamlit secrets
    try:
        key = st.secrets.get("GEMINI_API_KEY")
        if key:
            return key
    except Exception:
        # Missing or unreadable secrets.toml; fall through to the warning
        logger.debug("Streamlit secrets unavailable", exc_info=True)
    return None


@st.cache_resource
def get_saved_quizzes() -> SavedQuizzes:
    return SavedQuizzes(SQLiteQuizStore(DATABASE_PATH))


@st.cache_resource
def get_gemini_client(api_key: str):
    from utils.gemini_client import GeminiClient
    return GeminiClient(api_key=api_key)


def get_session() -> QuizSession:
    if "session" not in st.session_state:
        st.session_state.session = QuizSession()
    return st.session_state.session


# ── Screens ───────────────────────────────────────────────────────────

def show_upload(session: QuizSession, saved: SavedQuizzes):
    if session.last_error:
        st.error(f"Oh no! Something went wrong. {session.last_error}")

    api_key = _get_gemini_api_key()
    if not api_key:
        st.warning(
            "GEMINI_API_KEY is not set. Get a free key at "
            "https://aistudio.google.com/app/apikey"
        )

    mode = st.radio("What are you uploading?", [MODE_QUIZ, MODE_EXAM])
    uploaded = st.file_uploader("Question PDF", type=["pdf"], key="question_pdf")
    key_upload = None
    if mode == MODE_EXAM:
        key_upload = st.file_uploader(
            "Answer key PDF (optional, you can also enter answers by hand)",
            type=["pdf"],
            key="answer_key_pdf",
        )

    disabled = uploaded is None or not api_key or session.status is SessionStatus.PROCESSING
    if st.button("Extract Questions", type="primary", disabled=disabled):
        loader = PDFLoader()
        try:
            request = loader.from_bytes(uploaded.getvalue(), uploaded.name)
            key_request = (
                loader.from_bytes(key_upload.getvalue(), key_upload.name) if key_upload else None
            )
        except ValueError as e:
            st.error(f"Invalid File Type. {e}")
            return

        def run_extraction():
            return extract_quiz_document(
                title=quiz_title_from_filename(uploaded.name),
                document_bytes=request.document_bytes,
                client=get_gemini_client(api_key),
                includes_answers=(mode == MODE_QUIZ),
                answer_key_bytes=key_request.document_bytes if key_request else None,
            )

        with st.spinner("Our AI is analyzing your document. This may take a few moments."):
            try:
                session.process(run_extraction)
            except SessionStateError:
                st.info("An extraction is already running.")
                return
        st.rerun()

    quizzes = saved.all()
    if quizzes:
        st.divider()
        st.subheader(f"Saved Quizzes ({len(quizzes)})")
        for i, quiz in enumerate(quizzes):
            col1, col2, col3 = st.columns([4, 1, 1])
            with col1:
                st.markdown(f"**{quiz.title}** · {len(quiz.questions)} questions")
            with col2:
                if st.button("Start", key=f"start_saved_{i}"):
                    session.start_saved(quiz)
                    st.rerun()
            with col3:
                if st.button("Delete", key=f"delete_saved_{i}"):
                    if saved.delete(quiz.title):
                        st.toast(f'"{quiz.title}" has been removed.')
                    st.rerun()


def show_manual_answer_key(session: QuizSession):
    """Let the user pick the correct option for each question."""
    document = session.document
    with st.expander("Provide answer key", expanded=True):
        with st.form("answer_key_form"):
            picks = {}
            for q in document.questions:
                st.markdown(f"**{q.question_number}.** {to_markdown(q.question_text)}")
                picks[q.question_number] = st.radio(
                    f"Correct answer for question {q.question_number}",
                    q.options,
                    index=None,
                    format_func=to_markdown,
                    key=f"key_{q.question_number}",
                    label_visibility="collapsed",
                )
            if st.form_submit_button("Save Answer Key"):
                answers = answers_from_mapping({n: a for n, a in picks.items() if a})
                session.document = build_quiz_document(
                    document.title, document.questions, answers
                )
                st.rerun()


def show_ready(session: QuizSession, saved: SavedQuizzes):
    document = session.document
    st.subheader("Quiz Ready!")
    st.markdown(f"Extracted {len(document.questions)} questions from **{document.title}**")
    if document.accuracy_assessment:
        st.info(document.accuracy_assessment)

    if not any(q.correct_answer for q in document.questions):
        show_manual_answer_key(session)

    col1, col2, col3 = st.columns(3)
    with col1:
        if st.button("Play Now", type="primary"):
            session.play()
            st.rerun()
    with col2:
        if st.button("Save for Later"):
            replaced = saved.save(document)
            st.toast("Quiz Updated!" if replaced else "Quiz Saved!")
            session.restart()
            st.rerun()
    with col3:
        if st.button("Start Over"):
            session.restart()
            st.rerun()


@st.fragment(run_every=1)
def show_timer(session: QuizSession):
    """Live countdown; submits the quiz when time runs out."""
    if session.check_timer():
        st.rerun(scope="app")
    st.metric("Time Left", session.timer.display())


def show_quiz(session: QuizSession):
    if session.check_timer():
        st.rerun()

    document = session.document
    question = session.current_question

    main_col, side_col = st.columns([2, 1])
    with main_col:
        st.caption(document.title.upper())
        st.markdown(f"**Question No. {question.question_number}**")
        render_math(question.question_text)

        previous = session.answers.get(question.question_number)
        choice = st.radio(
            "Options",
            question.options,
            index=question.options.index(previous) if previous in question.options else None,
            format_func=to_markdown,
            key=f"answer_{question.question_number}",
            label_visibility="collapsed",
        )
        if choice is not None:
            session.answer(question.question_number, choice)

        nav1, nav2 = st.columns(2)
        with nav1:
            if st.button("← Previous Question", disabled=session.current_index == 0):
                session.previous_question()
                st.rerun()
        with nav2:
            if session.is_last_question:
                if st.button("Finish Quiz", type="primary"):
                    session.submit()
                    st.rerun()
            elif st.button("Next Question →"):
                session.next_question()
                st.rerun()

    with side_col:
        show_timer(session)
        if st.button("End Session"):
            session.submit()
            st.rerun()

        st.markdown(f"**Status** · {session.answered_count()}/{len(document.questions)} answered")
        grid = st.columns(6)
        for index, q in enumerate(document.questions):
            answered = bool(session.answers.get(q.question_number))
            label = f"{q.question_number}{' ✓' if answered else ''}"
            with grid[index % 6]:
                if st.button(label, key=f"goto_{index}"):
                    session.go_to(index)
                    st.rerun()


def show_results(session: QuizSession):
    document = session.document
    report = session.report

    st.subheader("Quiz Complete!")
    st.markdown(f"Here's how you did on **{document.title}**.")
    st.metric("Score", f"{report.percentage}%", f"{report.score}/{report.total} correct")

    only_incorrect = st.toggle("Show only incorrect")
    questions = report.incorrect if only_incorrect else document.questions
    if only_incorrect and not questions:
        st.success("You answered all questions correctly.")

    for q in questions:
        user_answer = session.answers.get(q.question_number)
        correct = check_answer(user_answer, q.correct_answer)
        icon = "✅" if correct else "❌"
        with st.expander(f"{icon} {q.question_number}. {q.question_text[:80]}"):
            render_math(q.question_text)
            for option in q.options:
                marks = []
                if check_answer(option, q.correct_answer):
                    marks.append("**Correct Answer**")
                if option == user_answer and not check_answer(option, q.correct_answer):
                    marks.append("*Your Answer*")
                st.markdown(f"- {to_markdown(option)} {' '.join(marks)}")
            if not correct and user_answer:
                st.markdown(f"Your answer: {to_markdown(user_answer)}")
            st.markdown(f"Correct answer: {to_markdown(q.correct_answer) or '(not provided)'}")

    if st.button("Start Over", type="primary"):
        session.restart()
        st.rerun()


def main():
    """Main Streamlit application."""
    st.set_page_config(
        page_title=UI_PAGE_TITLE,
        page_icon=UI_PAGE_ICON,
        layout=UI_LAYOUT,
    )

    st.title(f"{UI_PAGE_ICON} {UI_PAGE_TITLE}")

    session = get_session()
    saved = get_saved_quizzes()

    if session.status in (SessionStatus.UPLOAD, SessionStatus.PROCESSING):
        show_upload(session, saved)
    elif session.status is SessionStatus.READY:
        show_ready(session, saved)
    elif session.status is SessionStatus.QUIZ:
        show_quiz(session)
    else:
        show_results(session)


if __name__ == "__main__":
    main()
