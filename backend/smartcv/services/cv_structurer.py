"""
CV Structurer - Gemini-powered conversion of raw CV text into structured JSON.

The model is asked for a fixed JSON schema. Its answer is cleaned of code
fences and parsed; anything that does not parse into a JSON object is a
GenerationFailure. Fields are neither validated nor defaulted.
"""

import json
import logging
import re
from typing import Any, Optional

import google.generativeai as genai

from smartcv.core.config import settings
from smartcv.core.errors import GenerationFailure

# Configure logging for the structurer service
logger = logging.getLogger("cv_structurer")
logger.setLevel(logging.INFO)

if not logger.handlers:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(
        '🧠 [CV STRUCTURER] %(message)s'
    ))
    logger.addHandler(handler)


CV_SCHEMA_TEMPLATE = """{
  "name": "Full name of the person",
  "email": "Email address",
  "phone": "Phone number",
  "education": [
    {
      "institution": "University/School name",
      "degree": "Degree or qualification",
      "year": "Year or duration"
    }
  ],
  "experience": [
    {
      "company": "Company name",
      "position": "Job title",
      "duration": "Time period",
      "description": "Brief description of responsibilities"
    }
  ],
  "skills": ["skill1", "skill2", "skill3"]
}"""

PROMPT_TEMPLATE = """You are an expert CV parser and formatter. Analyze the following raw text extracted from a document and create a structured professional CV in JSON format.

Extract and organize the information into this exact JSON structure:
{schema}

Raw text to parse:
{raw_text}

Return ONLY valid JSON without any markdown formatting or code blocks.
"""

# ```json ... ``` or ``` ... ``` wrapping the whole answer
_CODE_FENCE_PATTERN = re.compile(r"^```[\w+-]*[ \t]*\n?(.*?)\n?[ \t]*```$", re.DOTALL)


def build_prompt(raw_text: str) -> str:
    """Embed the extracted text and the target schema into the instruction prompt."""
    return PROMPT_TEMPLATE.format(schema=CV_SCHEMA_TEMPLATE, raw_text=raw_text)


def clean_model_output(response_text: str) -> str:
    """Strip surrounding whitespace and a wrapping fenced code block, if any."""
    cleaned = response_text.strip()
    match = _CODE_FENCE_PATTERN.match(cleaned)
    if match:
        cleaned = match.group(1).strip()
    return cleaned


def parse_structured_cv(response_text: str) -> dict[str, Any]:
    """
    Parse a raw model answer into a CV document.

    Raises:
        GenerationFailure: the cleaned text is not a JSON object
    """
    cleaned = clean_model_output(response_text)
    try:
        structured_cv = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise GenerationFailure(f"Gemini CV generation failed: invalid JSON ({e})") from e

    if not isinstance(structured_cv, dict):
        raise GenerationFailure(
            f"Gemini CV generation failed: expected a JSON object, got {type(structured_cv).__name__}"
        )
    return structured_cv


class GeminiCvStructurer:
    """
    Structuring adapter backed by a Gemini ``GenerativeModel``.

    Args:
        model: Anything exposing ``generate_content(prompt)`` returning an
            object with ``.text``. Built from settings when omitted.
    """

    def __init__(self, model: Optional[Any] = None):
        if model is None:
            genai.configure(api_key=settings.GEMINI_API_KEY)
            model = genai.GenerativeModel(settings.GEMINI_MODEL)
            logger.info(f"Gemini model '{settings.GEMINI_MODEL}' configured")
        self._model = model

    def structure(self, raw_text: str) -> dict[str, Any]:
        """
        Ask the model for a structured CV. One model call, no retries.

        Raises:
            GenerationFailure: the model call failed or returned unusable output
        """
        prompt = build_prompt(raw_text)

        logger.info(f"📡 Sending {len(raw_text)} characters to Gemini...")
        try:
            response = self._model.generate_content(prompt)
            response_text = response.text
        except Exception as e:
            logger.error(f"❌ Gemini API error: {e}")
            raise GenerationFailure(f"Gemini CV generation failed: {e}") from e

        structured_cv = parse_structured_cv(response_text)
        logger.info(f"✅ Structured CV received with fields: {sorted(structured_cv)}")
        return structured_cv
