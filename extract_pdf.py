#!/usr/bin/env python3
"""
extract_pdf.py - Extract a quiz from a PDF using Gemini

Usage:
    export GEMINI_API_KEY="your-key"
    python extract_pdf.py quiz.pdf                          # Questions + answer key in one PDF
    python extract_pdf.py exam.pdf --exam                   # Questions only
    python extract_pdf.py exam.pdf --exam --answer-key key.pdf --save
    python extract_pdf.py key.pdf --kind answerKey --json   # Any single extraction, as JSON
    python extract_pdf.py --list                            # Saved quizzes
    python extract_pdf.py --delete "quiz.pdf"
"""

import argparse
import json
import logging
import os
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent))

from config import DATABASE_PATH
from database import SavedQuizzes, SQLiteQuizStore
from pipeline.errors import ExtractionError
from pipeline.extraction import extract, extract_quiz_document
from pipeline.pdf_loader import PDFLoader, quiz_title_from_filename
from pipeline.tasks import ExtractionKind
from utils.gemini_client import GeminiClient


def print_document(document):
    print(f"\n{'=' * 60}")
    print(document.title)
    print("=" * 60)
    for q in document.questions:
        print(f"\nQ{q.question_number}. {q.question_text}")
        for option in q.options:
            print(f"    - {option}")
        print(f"  Answer: {q.correct_answer or '(none)'}")
    if document.accuracy_assessment:
        print(f"\nAccuracy: {document.accuracy_assessment}")


def run_single(args, client, request) -> int:
    result = extract(args.kind, request.document_bytes, client, request.mime_type)
    payload = {
        "kind": result.kind.value,
        "records": [r.model_dump(mode="json", by_alias=True) for r in result.records],
        "dropped": result.dropped,
    }
    if result.accuracy_assessment is not None:
        payload["accuracyAssessment"] = result.accuracy_assessment
    print(json.dumps(payload, indent=2, ensure_ascii=False))
    return 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Extract a quiz from a PDF with Gemini")
    parser.add_argument("pdf", nargs="?", type=Path, help="Question PDF")
    parser.add_argument("--exam", action="store_true",
                        help="PDF has questions only (no answer key)")
    parser.add_argument("--answer-key", type=Path, help="Separate answer key PDF")
    parser.add_argument("--kind", choices=[k.value for k in ExtractionKind],
                        help="Run a single extraction and print its records")
    parser.add_argument("--json", action="store_true", help="Print the quiz as JSON")
    parser.add_argument("--save", action="store_true", help="Save the quiz for later")
    parser.add_argument("--db", type=Path, default=DATABASE_PATH, help="Saved quiz database")
    parser.add_argument("--list", action="store_true", help="List saved quizzes")
    parser.add_argument("--delete", metavar="TITLE", help="Delete a saved quiz")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    saved = SavedQuizzes(SQLiteQuizStore(args.db))

    if args.list:
        quizzes = saved.all()
        print(f"[INFO] {len(quizzes)} saved quiz(zes)")
        for quiz in quizzes:
            print(f"  {quiz.title} ({len(quiz.questions)} questions)")
        return 0

    if args.delete:
        if saved.delete(args.delete):
            print(f"[OK] Deleted \"{args.delete}\"")
            return 0
        print(f"[ERROR] No saved quiz named \"{args.delete}\"")
        return 1

    if args.pdf is None:
        parser.error("a PDF is required unless --list or --delete is given")

    # Check API key
    api_key = os.environ.get("GEMINI_API_KEY")
    if not api_key:
        print("[ERROR] GEMINI_API_KEY not set!")
        print("Get a free key at: https://aistudio.google.com/app/apikey")
        print("Then: export GEMINI_API_KEY='your-key'")
        return 1

    loader = PDFLoader()
    try:
        request = loader.load(args.pdf)
        key_request = loader.load(args.answer_key) if args.answer_key else None
    except (FileNotFoundError, ValueError) as e:
        print(f"[ERROR] {e}")
        return 1

    try:
        pages = loader.get_page_count(request.document_bytes)
        print(f"[INFO] {args.pdf.name}: {pages} page(s)")
    except ValueError as e:
        print(f"[WARN] {e}")

    client = GeminiClient(api_key=api_key)

    try:
        if args.kind:
            return run_single(args, client, request)

        print("[INFO] Extracting questions... this may take a while")
        document = extract_quiz_document(
            title=quiz_title_from_filename(args.pdf.name),
            document_bytes=request.document_bytes,
            client=client,
            includes_answers=not args.exam,
            answer_key_bytes=key_request.document_bytes if key_request else None,
        )
    except ExtractionError as e:
        print(f"[ERROR] {e.user_message}")
        return 1

    if args.json:
        print(json.dumps(document.model_dump(mode="json", by_alias=True), indent=2, ensure_ascii=False))
    else:
        print_document(document)

    if args.save:
        replaced = saved.save(document)
        print(f"\n[OK] Quiz {'updated' if replaced else 'saved'}: {document.title}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
