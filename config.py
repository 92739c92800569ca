"""
Configuration constants for the PDF Quiz Extractor.
"""

from pathlib import Path

# Directory paths
PROJECT_ROOT = Path(__file__).parent
DATA_DIR = PROJECT_ROOT / "data"
DATABASE_PATH = DATA_DIR / "saved_quizzes.db"

# Gemini configuration
DEFAULT_MODEL = "gemini-2.0-flash"

# Rate limiting for free tier (15 RPM)
REQUESTS_PER_MINUTE = 15
REQUEST_DELAY = 60 / REQUESTS_PER_MINUTE  # ~4 seconds between requests

# None = wait for the model as long as it takes
REQUEST_TIMEOUT_SECONDS = None

PDF_MIME_TYPE = "application/pdf"

# Default exam duration: 2 hours
EXAM_DURATION_SECONDS = 2 * 60 * 60

# ============================================================================
# EXTRACTION PROMPTS
# ============================================================================

# Shared instruction for math notation; the renderer splits on these delimiters.
LATEX_INSTRUCTION = """IMPORTANT: If you encounter any mathematical equations or symbols (like fractions, integrals, summations, greek letters, etc.), you MUST format them using LaTeX. For inline mathematics, wrap the expression in single dollar signs ($...$). For block-level or display mathematics, wrap the expression in double dollar signs ($$...$$)."""

ANSWER_KEY_PROMPT = """You are an expert at extracting answers from an answer key document. Your task is to extract the question number and the corresponding correct answer from the attached PDF.

Your output MUST be a JSON object with a single key "answers" that contains an array of answer objects. Each answer object must have "questionNumber" (number) and "correctAnswer" (string).

The answer key may list answers in various formats (e.g., "1. A", "2. B", "3) C", etc.). Parse this information accurately. The "correctAnswer" should be the letter or the option text itself. For example, if the key says "1. A) Photosynthesis", the "correctAnswer" can be "A" or "Photosynthesis". Be consistent.

It is critical that you extract ALL answers from the document. Carefully scan every page to ensure no answers are missed.

{latex}

Return ONLY valid JSON (no markdown, no explanation).""".format(latex=LATEX_INSTRUCTION)

EXAM_QUESTIONS_PROMPT = """You are an expert exam question extractor. Your task is to extract exam questions and their multiple-choice options from the attached PDF.

Your output MUST be a JSON object with a single key "questions" that contains an array of question objects. Each question object must have "questionNumber" (number), "questionText" (string), and "options" (array of strings).

It is critical that you extract ALL questions from the document. Carefully scan every page to ensure no questions are missed. Do NOT extract the correct answers, only the questions and the options.

{latex}

Return ONLY valid JSON (no markdown, no explanation).""".format(latex=LATEX_INSTRUCTION)

QUIZ_QUESTIONS_PROMPT = """You are an expert quiz question extractor. Your task is to extract quiz questions, answer options, and correct answers from the attached PDF, which contains the questions and an answer key.

Your output MUST be a JSON object with two keys:
- "questions": an array of question objects, each with "questionNumber" (number), "questionText" (string), "options" (array of strings) and "correctAnswer" (string).
- "accuracyAssessment": a short string evaluating how accurately the questions and answers could be extracted.

It is critical that you extract ALL questions from the document. Carefully scan every page to ensure no questions are missed. Pay close attention to the formatting and structure of the document, and take each correct answer from the answer key section.

{latex}

Return ONLY valid JSON (no markdown, no explanation).""".format(latex=LATEX_INSTRUCTION)

# Streamlit UI settings
UI_PAGE_TITLE = "PDF Quiz Extractor"
UI_PAGE_ICON = "📝"
UI_LAYOUT = "wide"
