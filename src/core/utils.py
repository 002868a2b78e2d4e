"""Shared utility functions for BakBak."""

import re


def strip_code_fences(text: str) -> str:
    """Remove markdown code fences wrapping an LLM response."""
    text = text.strip()
    if text.startswith("```"):
        text = re.sub(r"^```\w*\n?", "", text)
        text = re.sub(r"\n?```$", "", text)
    return text.strip()


def strip_wrapping_quotes(text: str) -> str:
    """Drop one pair of matching quotes the model sometimes echoes back."""
    text = text.strip()
    for open_q, close_q in (('"', '"'), ("'", "'"), ("“", "”"), ("「", "」")):
        if len(text) >= 2 and text.startswith(open_q) and text.endswith(close_q):
            return text[1:-1].strip()
    return text
