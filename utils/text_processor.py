import re
from typing import List


def normalize_text(text: str) -> str:
    """Normalizes whitespace and unicode"""
    if not text:
        return ""
    # Replace non-breaking spaces
    text = text.replace('\u00A0', ' ')
    # Collapse multiple spaces
    text = re.sub(r'\s+', ' ', text)
    return text.strip()


def split_segments(text: str, prefix: str = "seg") -> List[dict]:
    """One segment per non-empty line, with sequential ids"""
    segments = []
    for line in (text or "").splitlines():
        line = normalize_text(line)
        if line:
            segments.append({'id': f"{prefix}-{len(segments) + 1}", 'text': line})
    return segments
