"""Gemini Vision client."""

import logging
from typing import List

import google.generativeai as genai

from chart_analyzer import config
from chart_analyzer.prompt import Part

log = logging.getLogger(__name__)


def generate_reply(api_key: str, parts: List[Part]) -> str:
    """Send one text+image prompt and return the model's raw text reply.

    Provider errors (bad key, quota, blocked prompt) propagate to the caller.
    """
    genai.configure(api_key=api_key)
    model = genai.GenerativeModel(config.GEMINI_MODEL)

    response = model.generate_content(
        contents=[{"role": "user", "parts": parts}],
        generation_config=genai.types.GenerationConfig(
            temperature=config.GEMINI_TEMPERATURE,
            top_p=config.GEMINI_TOP_P,
            max_output_tokens=config.GEMINI_MAX_OUTPUT_TOKENS,
        ),
    )

    # .text raises ValueError when the candidate was blocked or empty
    response_text = response.text
    log.info("Gemini raw response (%s): %s", config.GEMINI_MODEL, response_text)
    return response_text
