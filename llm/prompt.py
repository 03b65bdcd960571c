import logging
from typing import Dict

import requests

from .base import LLM

logger = logging.getLogger(__name__)

GENERATION_FAILED = "A server error occurred while trying to generate the response."


def build_prompt(question: str, context: str, system_prompt: str) -> Dict[str, str]:
    """Retrieved context goes directly in front of the user's question."""
    question = question.strip()
    if context:
        prompt = f"CONTEXT: {context}\n\nUSER QUESTION: {question}"
    else:
        prompt = question
    return {"system": system_prompt, "prompt": prompt}


def answer_question(llm: LLM, question: str, context: str, system_prompt: str) -> str:
    """Ask the backend; transport failures become a fixed apology, not an exception."""
    p = build_prompt(question, context, system_prompt)
    try:
        return llm.generate(p["prompt"], system=p["system"])
    except requests.exceptions.RequestException as e:
        logger.exception("Generation backend failed: %s", e.__class__.__name__)
        return GENERATION_FAILED
