"""
Math-aware text rendering helpers for the Streamlit UI.

Question text and options carry LaTeX between $...$ (inline) and $$...$$
(block) delimiters, exactly as the model produced them.
"""

import re
from typing import List, Tuple

import streamlit as st

_MATH_SEGMENT = re.compile(r"(\$\$[^$]+\$\$|\$[^$]+\$)")


def split_math(text: str) -> List[Tuple[str, str]]:
    """
    Split text into ("text" | "inline" | "block", content) segments.

    Delimiters are removed from math segments. Empty text segments are dropped.
    """
    if not isinstance(text, str):
        return []

    segments = []
    for part in _MATH_SEGMENT.split(text):
        if not part:
            continue
        if part.startswith("$$") and part.endswith("$$") and len(part) > 4:
            segments.append(("block", part[2:-2]))
        elif part.startswith("$") and part.endswith("$") and len(part) > 2:
            segments.append(("inline", part[1:-1]))
        else:
            segments.append(("text", part))
    return segments


def to_markdown(text: str) -> str:
    """Markdown for st.markdown: inline math kept as $...$, block math on its own line."""
    pieces = []
    for kind, content in split_math(text):
        if kind == "block":
            pieces.append(f"\n\n$${content}$$\n\n")
        elif kind == "inline":
            pieces.append(f"${content}$")
        else:
            pieces.append(content)
    return "".join(pieces).strip()


def render_math(text: str):
    """Render question text, using st.latex for block math."""
    buffer = []
    for kind, content in split_math(text):
        if kind == "block":
            if buffer:
                st.markdown("".join(buffer))
                buffer = []
            st.latex(content)
        elif kind == "inline":
            buffer.append(f"${content}$")
        else:
            buffer.append(content)
    if buffer:
        st.markdown("".join(buffer))
