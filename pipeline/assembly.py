"""
Quiz assembly and scoring.

Pure data transforms: merge an answer key into extracted questions, build a
QuizDocument, and score a finished session.
"""

import math
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from pipeline.schemas import AnswerRecord, ExtractedQuestion, QuizDocument, ScoredQuestion


def merge_answers(
    questions: Iterable[ExtractedQuestion],
    answers: Iterable[AnswerRecord] = (),
) -> List[ScoredQuestion]:
    """
    Attach correct answers to questions by question number.

    Questions without a matching answer get ``""``. If the key lists the same
    number twice, the first answer wins.
    """
    answer_map: Dict[int, str] = {}
    for answer in answers:
        answer_map.setdefault(answer.question_number, answer.correct_answer)

    return [
        ScoredQuestion(
            question_number=q.question_number,
            question_text=q.question_text,
            options=list(q.options),
            correct_answer=answer_map.get(q.question_number, ""),
        )
        for q in questions
    ]


def answers_from_mapping(mapping: Mapping[int, str]) -> List[AnswerRecord]:
    """Turn a manually entered {question number: answer} key into records, skipping blanks."""
    return [
        AnswerRecord(question_number=int(number), correct_answer=answer)
        for number, answer in sorted(mapping.items(), key=lambda item: int(item[0]))
        if answer and answer.strip()
    ]


def build_quiz_document(
    title: str,
    questions: Sequence[ExtractedQuestion],
    answers: Optional[Sequence[AnswerRecord]] = None,
    accuracy_assessment: Optional[str] = None,
) -> QuizDocument:
    """
    Build a QuizDocument from extracted questions and an optional answer key.

    Questions that already carry a correct answer (quiz extraction) keep it
    unless the key supplies one for the same number.
    """
    answer_list = list(answers or [])
    own_answers = [
        AnswerRecord(question_number=q.question_number, correct_answer=q.correct_answer)
        for q in questions
        if isinstance(q, ScoredQuestion) and q.correct_answer.strip()
    ]
    scored = merge_answers(questions, answer_list + own_answers)

    if accuracy_assessment is None:
        accuracy_assessment = ""
        if answer_list:
            matched = sum(1 for q in scored if q.correct_answer)
            accuracy_assessment = (
                f"Answer key matched {matched} of {len(scored)} questions."
            )

    return QuizDocument(
        title=title,
        questions=scored,
        accuracy_assessment=accuracy_assessment,
    )


def check_answer(user_answer: Optional[str], correct_answer: Optional[str]) -> bool:
    """
    Compare a chosen option with the key.

    Keys are often just the option letter, so a match on either side's prefix
    counts: "d) E" is correct for key "d".
    """
    if not user_answer or not correct_answer:
        return False
    ua = user_answer.strip()
    ca = correct_answer.strip()
    if not ua or not ca:
        return False
    return ua == ca or ua.startswith(ca) or ca.startswith(ua)


@dataclass
class ScoreReport:
    """Result of a finished quiz."""
    score: int
    total: int
    incorrect: List[ScoredQuestion] = field(default_factory=list)

    @property
    def percentage(self) -> int:
        if self.total == 0:
            return 0
        # Round half up, not to even
        return int(math.floor(self.score * 100 / self.total + 0.5))


def score_quiz(document: QuizDocument, user_answers: Mapping[int, str]) -> ScoreReport:
    """Score the user's answers, keyed by question number."""
    incorrect = [
        q for q in document.questions
        if not check_answer(user_answers.get(q.question_number), q.correct_answer)
    ]
    total = len(document.questions)
    return ScoreReport(score=total - len(incorrect), total=total, incorrect=incorrect)
