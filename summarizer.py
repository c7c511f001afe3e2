import json
import logging
from typing import Any, List, Optional

import vertexai
from google.auth import default
from vertexai.generative_models import GenerativeModel

from models import PresentationStructure, SlideContent
from prompts import build_prompt


class SummarizerError(Exception):
    pass


# Canned slides for mock mode, used when no Gemini project is configured
SAMPLE_SLIDES = [
    SlideContent(title="Executive Summary", bullets=[
        "Revenue grew 24% year over year",
        "Customer retention reached a record 92%",
        "Three new markets launched ahead of plan",
    ]),
    SlideContent(title="Key Metrics", bullets=[
        "Monthly active users up to 1.2M",
        "Average deal size increased 18%",
        "Support ticket volume down 30%",
    ]),
    SlideContent(title="Strategic Priorities", bullets=[
        "Expand enterprise sales coverage",
        "Invest in platform reliability",
        "Accelerate partner integrations",
    ]),
    SlideContent(title="Risks and Mitigations", bullets=[
        "Hiring pace may slow roadmap delivery",
        "Vendor consolidation reduces cost exposure",
        "Quarterly reviews track execution risk",
    ]),
    SlideContent(title="Next Steps", bullets=[
        "Approve Q3 budget allocation",
        "Finalize regional launch timeline",
        "Schedule follow-up review in 30 days",
    ]),
]


class GeminiClient:
    """Thin wrapper around a Vertex AI Gemini model."""

    def __init__(self, project: str, location: str, model_name: str = "gemini-2.5-pro"):
        logging.info(f"Initializing Vertex AI for project '{project}' in '{location}'...")
        try:
            # Explicitly request the cloud-platform scope to call Vertex AI
            credentials, _ = default(scopes=["https://www.googleapis.com/auth/cloud-platform"])
            vertexai.init(project=project, location=location, credentials=credentials)
            self.model = GenerativeModel(model_name)
        except Exception as e:
            logging.error(f"Failed to initialize Vertex AI or model: {e}", exc_info=True)
            raise
        self.model_name = model_name

    def generate(self, prompt: str) -> str:
        response = self.model.generate_content(prompt)
        try:
            return response.text
        except ValueError:
            # Blocked or empty candidates have no text part
            logging.warning(f"Gemini returned no text part: {response}")
            return ""


def strip_code_fences(text: str) -> str:
    cleaned = text.strip()
    if cleaned.startswith("```json"):
        cleaned = cleaned[len("```json"):]
    elif cleaned.startswith("```"):
        cleaned = cleaned[len("```"):]
    if cleaned.endswith("```"):
        cleaned = cleaned[:-len("```")]
    return cleaned.strip()


def clean_bullets(bullets: List[Any]) -> List[str]:
    return [b.strip() for b in bullets if isinstance(b, str) and b.strip()]


def parse_slide_response(text: str, slide_count: Optional[int] = None) -> List[SlideContent]:
    """
    Parses the model's JSON answer into validated slides.
    Raises SummarizerError on malformed JSON or an unexpected shape.
    """
    try:
        data = json.loads(strip_code_fences(text))
    except json.JSONDecodeError as e:
        raise SummarizerError(f"Failed to parse Gemini response as JSON: {text}") from e

    raw_slides = data.get("slides") if isinstance(data, dict) else None
    if not isinstance(raw_slides, list):
        raise SummarizerError("Invalid response structure: missing slides array")

    slides = []
    for index, raw in enumerate(raw_slides):
        title = str(raw.get("title") or "").strip() if isinstance(raw, dict) else ""
        if not title or not isinstance(raw.get("bullets"), list):
            raise SummarizerError(f"Invalid slide structure at index {index}")
        slides.append(SlideContent(title=title, bullets=clean_bullets(raw["bullets"])))

    if slide_count is not None:
        if len(slides) > slide_count:
            logging.warning(f"Gemini returned {len(slides)} slides, keeping the first {slide_count}")
            slides = slides[:slide_count]
        elif len(slides) < slide_count:
            raise SummarizerError(f"Expected {slide_count} slides, Gemini returned {len(slides)}")
    return slides


def mock_structure(title: str, slide_count: int) -> PresentationStructure:
    slides = [SAMPLE_SLIDES[i % len(SAMPLE_SLIDES)] for i in range(slide_count)]
    return PresentationStructure(title=title, slides=[s.model_copy(deep=True) for s in slides])


class Summarizer:
    def __init__(self, model: Optional[GeminiClient] = None):
        self.model = model

    @property
    def mock_mode(self) -> bool:
        return self.model is None

    def summarize(
        self, content: str, title: str, slide_count: int, custom_prompt: Optional[str] = None
    ) -> PresentationStructure:
        """Turns document text into a PresentationStructure titled with `title`."""
        if self.model is None:
            logging.info(f"Mock mode: returning {slide_count} sample slides")
            return mock_structure(title, slide_count)

        prompt = build_prompt(content, slide_count, custom_prompt)
        logging.info("Calling LLM to generate slide data...")
        try:
            text = self.model.generate(prompt)
        except Exception as e:
            logging.error(f"LLM call failed: {e}", exc_info=True)
            raise
        logging.debug(f"Received raw response from LLM: {text}")

        if not text or not text.strip():
            raise SummarizerError("No response from Gemini")

        slides = parse_slide_response(text, slide_count)
        return PresentationStructure(title=title, slides=slides)
