"""
Helpers shared by every LLM-backed component that expects JSON back.
"""

from typing import Any


def extract_text(message: Any) -> str:
    """
    Flatten a chat model reply into plain text.

    Handles plain-string content as well as the list-of-blocks content
    some providers return (``[{"type": "text", "text": ...}, ...]``).
    """
    content = getattr(message, "content", message)
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for chunk in content:
            if isinstance(chunk, str):
                parts.append(chunk)
            elif isinstance(chunk, dict) and isinstance(chunk.get("text"), str):
                parts.append(chunk["text"])
        return "".join(parts).strip()
    return ""


def model_name(llm: Any) -> str:
    """Extract model name from an LLM for Langfuse metadata."""
    if hasattr(llm, "model_name"):
        return llm.model_name
    if hasattr(llm, "model"):
        return llm.model
    return "unknown"
