"""
Quiz session state: upload -> processing -> ready -> quiz -> results.

Holds no UI code, so the Streamlit app and the tests drive the same object.
"""

import logging
import time
from enum import Enum
from typing import Callable, Dict, Optional, Tuple

from config import EXAM_DURATION_SECONDS
from pipeline.assembly import ScoreReport, score_quiz
from pipeline.errors import ExtractionError
from pipeline.schemas import QuizDocument, ScoredQuestion

logger = logging.getLogger(__name__)


class SessionStatus(str, Enum):
    UPLOAD = "upload"
    PROCESSING = "processing"
    READY = "ready"
    QUIZ = "quiz"
    RESULTS = "results"


class SessionStateError(RuntimeError):
    """An action was attempted in a state that does not allow it."""


def format_time(total_seconds: float) -> Tuple[int, int, int]:
    """Split seconds into (hours, minutes, seconds), clamped at zero."""
    remaining = max(0, int(total_seconds))
    hours, rest = divmod(remaining, 3600)
    minutes, seconds = divmod(rest, 60)
    return hours, minutes, seconds


class ExamTimer:
    """Countdown for a timed session."""

    def __init__(self, duration_seconds: float = EXAM_DURATION_SECONDS,
                 clock: Callable[[], float] = time.monotonic):
        self.duration_seconds = duration_seconds
        self._clock = clock
        self._started_at: Optional[float] = None

    def start(self):
        self._started_at = self._clock()

    @property
    def started(self) -> bool:
        return self._started_at is not None

    def remaining(self) -> float:
        if self._started_at is None:
            return float(self.duration_seconds)
        elapsed = self._clock() - self._started_at
        return max(0.0, self.duration_seconds - elapsed)

    @property
    def expired(self) -> bool:
        return self.started and self.remaining() <= 0

    def display(self) -> str:
        hours, minutes, seconds = format_time(self.remaining())
        return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


class QuizSession:
    """State of one user's quiz, from upload to results."""

    def __init__(self, timer_factory: Callable[[], ExamTimer] = ExamTimer):
        self._timer_factory = timer_factory
        self.status = SessionStatus.UPLOAD
        self.document: Optional[QuizDocument] = None
        self.answers: Dict[int, str] = {}
        self.current_index = 0
        self.timer: Optional[ExamTimer] = None
        self.report: Optional[ScoreReport] = None
        self.last_error: Optional[str] = None

    def _require(self, *allowed: SessionStatus):
        if self.status not in allowed:
            names = ", ".join(s.value for s in allowed)
            raise SessionStateError(
                f"Cannot do that while {self.status.value}; expected {names}"
            )

    # ── Upload / processing ─────────────────────────────────────────────

    def begin_processing(self):
        """Mark an extraction as in flight; a second submission is refused."""
        self._require(SessionStatus.UPLOAD)
        self.status = SessionStatus.PROCESSING
        self.last_error = None

    def complete_processing(self, document: QuizDocument):
        self._require(SessionStatus.PROCESSING)
        self.document = document
        self.status = SessionStatus.READY

    def fail_processing(self, message: str):
        """Back to upload with a message for the user."""
        self._require(SessionStatus.PROCESSING)
        self.last_error = message
        self.document = None
        self.status = SessionStatus.UPLOAD

    def process(self, extract_document: Callable[[], QuizDocument]) -> bool:
        """
        Run one extraction and move to ready, or back to upload on failure.

        Whatever ``extract_document`` raises, the session never stays in
        processing. Returns True if a document was extracted.
        """
        self.begin_processing()
        try:
            document = extract_document()
        except ExtractionError as e:
            logger.warning("Extraction failed (%s)", e.kind)
            self.fail_processing(e.user_message)
            return False
        except ValueError as e:
            self.fail_processing(str(e))
            return False
        except Exception:
            logger.exception("Unexpected error during extraction")
            self.fail_processing(ExtractionError.default_message)
            return False
        self.complete_processing(document)
        return True

    # ── Playing ─────────────────────────────────────────────────────────

    def play(self):
        self._require(SessionStatus.READY)
        self._start_quiz()

    def start_saved(self, document: QuizDocument):
        """Jump straight into a saved quiz from the upload screen."""
        self._require(SessionStatus.UPLOAD, SessionStatus.READY)
        self.document = document
        self._start_quiz()

    def _start_quiz(self):
        self.answers = {}
        self.current_index = 0
        self.report = None
        self.timer = self._timer_factory()
        self.timer.start()
        self.status = SessionStatus.QUIZ

    @property
    def current_question(self) -> Optional[ScoredQuestion]:
        if not self.document or not self.document.questions:
            return None
        return self.document.questions[self.current_index]

    @property
    def is_last_question(self) -> bool:
        return bool(self.document) and self.current_index == len(self.document.questions) - 1

    def answer(self, question_number: int, option: str):
        self._require(SessionStatus.QUIZ)
        self.answers[question_number] = option

    def next_question(self):
        if self.document and self.current_index < len(self.document.questions) - 1:
            self.current_index += 1

    def previous_question(self):
        if self.current_index > 0:
            self.current_index -= 1

    def go_to(self, index: int):
        if not self.document or not 0 <= index < len(self.document.questions):
            raise IndexError(f"No question at position {index}")
        self.current_index = index

    def answered_count(self) -> int:
        return sum(1 for value in self.answers.values() if value)

    def check_timer(self) -> bool:
        """Submit automatically once time is up. Returns True if it did."""
        if self.status is SessionStatus.QUIZ and self.timer and self.timer.expired:
            self.submit()
            return True
        return False

    def submit(self) -> ScoreReport:
        """End the session (also used by 'End Session') and score it."""
        self._require(SessionStatus.QUIZ)
        self.report = score_quiz(self.document, self.answers)
        self.status = SessionStatus.RESULTS
        return self.report

    def restart(self):
        self.status = SessionStatus.UPLOAD
        self.document = None
        self.answers = {}
        self.current_index = 0
        self.timer = None
        self.report = None
