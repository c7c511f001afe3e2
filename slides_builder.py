import logging
from typing import Any, Dict, List, Optional

from googleapiclient.errors import HttpError

from auth import GoogleServices, build_services
from models import PresentationStructure, RgbColor, SlideContent, TemplateConfig, TemplateSummary

PRESENTATION_URL = "https://docs.google.com/presentation/d/{presentation_id}/edit"


# --- 1. Design Constants ---
EMU_PER_INCH = 914400


def inches(value: float) -> int:
    return int(value * EMU_PER_INCH)


# Slide Dimensions (default Google Slides 16:9 page)
SLIDE_WIDTH = inches(10)
SLIDE_HEIGHT = inches(5.625)
# Margins
MARGIN_LEFT = inches(0.5)
MARGIN_RIGHT = inches(0.5)
MARGIN_TOP = inches(0.4)
MARGIN_BOTTOM = inches(0.4)
# Regions
HEADER_HEIGHT = inches(0.25)
TITLE_HEIGHT = inches(0.9)
TITLE_BODY_GAP = inches(0.2)
# Font Sizes (points)
TITLE_SLIDE_FONT_SIZE = 40
SLIDE_TITLE_FONT_SIZE = 28
BODY_FONT_SIZE = 16

BULLET_PRESET = "BULLET_DISC_CIRCLE_SQUARE"

# Templates
DEFAULT_TEMPLATE_ID = "modern"

SLIDE_TEMPLATES: Dict[str, TemplateConfig] = {
    "modern": TemplateConfig(
        id="modern",
        name="Modern",
        description="Clean, minimalist design with blue accents",
        title_color=RgbColor(red=0.1, green=0.3, blue=0.6),
        body_color=RgbColor(red=0.2, green=0.2, blue=0.2),
        background_color=RgbColor(red=1, green=1, blue=1),
    ),
    "corporate": TemplateConfig(
        id="corporate",
        name="Corporate",
        description="Professional design with dark headers",
        title_color=RgbColor(red=0.15, green=0.15, blue=0.15),
        body_color=RgbColor(red=0.3, green=0.3, blue=0.3),
        background_color=RgbColor(red=0.98, green=0.98, blue=0.98),
        header_color=RgbColor(red=0.15, green=0.15, blue=0.15),
    ),
    "creative": TemplateConfig(
        id="creative",
        name="Creative",
        description="Bold colors and dynamic style",
        title_color=RgbColor(red=0.8, green=0.2, blue=0.4),
        body_color=RgbColor(red=0.25, green=0.25, blue=0.25),
        background_color=RgbColor(red=1, green=0.98, blue=0.95),
    ),
    "minimal": TemplateConfig(
        id="minimal",
        name="Minimal",
        description="Simple black and white design",
        title_color=RgbColor(red=0, green=0, blue=0),
        body_color=RgbColor(red=0.3, green=0.3, blue=0.3),
        background_color=RgbColor(red=1, green=1, blue=1),
    ),
    "executive": TemplateConfig(
        id="executive",
        name="Executive",
        description="Traditional executive presentation style",
        title_color=RgbColor(red=0.1, green=0.2, blue=0.4),
        body_color=RgbColor(red=0.2, green=0.2, blue=0.2),
        background_color=RgbColor(red=0.95, green=0.95, blue=0.97),
        header_color=RgbColor(red=0.1, green=0.2, blue=0.4),
    ),
}


class SlidesError(Exception):
    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


def get_template(template_id: Optional[str] = None) -> TemplateConfig:
    """Looks up a template by id. Raises KeyError for unknown ids."""
    return SLIDE_TEMPLATES[template_id or DEFAULT_TEMPLATE_ID]


def list_templates() -> List[TemplateSummary]:
    return [TemplateSummary(id=t.id, name=t.name, description=t.description) for t in SLIDE_TEMPLATES.values()]


# --- 2. Helper Functions ---

def solid_fill(color: RgbColor) -> Dict[str, Any]:
    return {"solidFill": {"color": {"rgbColor": color.model_dump()}}}


def element_properties(page_id: str, x: int, y: int, width: int, height: int) -> Dict[str, Any]:
    return {
        "pageObjectId": page_id,
        "size": {
            "width": {"magnitude": width, "unit": "EMU"},
            "height": {"magnitude": height, "unit": "EMU"},
        },
        "transform": {"scaleX": 1, "scaleY": 1, "translateX": x, "translateY": y, "unit": "EMU"},
    }


def page_background(page_id: str, color: RgbColor) -> Dict[str, Any]:
    return {
        "updatePageProperties": {
            "objectId": page_id,
            "pageProperties": {"pageBackgroundFill": solid_fill(color)},
            "fields": "pageBackgroundFill.solidFill.color",
        }
    }


def text_box(object_id: str, page_id: str, x: int, y: int, width: int, height: int) -> Dict[str, Any]:
    return {
        "createShape": {
            "objectId": object_id,
            "shapeType": "TEXT_BOX",
            "elementProperties": element_properties(page_id, x, y, width, height),
        }
    }


def insert_text(object_id: str, text: str) -> Dict[str, Any]:
    return {"insertText": {"objectId": object_id, "text": text, "insertionIndex": 0}}


def text_style(object_id: str, color: RgbColor, font_size: Optional[int] = None, bold: bool = False) -> Dict[str, Any]:
    style: Dict[str, Any] = {"foregroundColor": {"opaqueColor": {"rgbColor": color.model_dump()}}}
    fields = ["foregroundColor"]
    if font_size:
        style["fontSize"] = {"magnitude": font_size, "unit": "PT"}
        fields.append("fontSize")
    if bold:
        style["bold"] = True
        fields.append("bold")
    return {
        "updateTextStyle": {
            "objectId": object_id,
            "textRange": {"type": "ALL"},
            "style": style,
            "fields": ",".join(fields),
        }
    }


def header_bar(object_id: str, page_id: str, color: RgbColor) -> List[Dict[str, Any]]:
    """A full-width rectangle across the top of the page."""
    return [
        {
            "createShape": {
                "objectId": object_id,
                "shapeType": "RECTANGLE",
                "elementProperties": element_properties(page_id, 0, 0, SLIDE_WIDTH, HEADER_HEIGHT),
            }
        },
        {
            "updateShapeProperties": {
                "objectId": object_id,
                "shapeProperties": {
                    "shapeBackgroundFill": solid_fill(color),
                    "outline": {"propertyState": "NOT_RENDERED"},
                },
                "fields": "shapeBackgroundFill.solidFill.color,outline.propertyState",
            }
        },
    ]


def find_title_placeholder(presentation: Dict[str, Any]) -> Optional[str]:
    """Returns the objectId of the title placeholder on the first slide, if any."""
    slides = presentation.get("slides") or []
    if not slides:
        return None
    for element in slides[0].get("pageElements") or []:
        placeholder = (element.get("shape") or {}).get("placeholder") or {}
        if placeholder.get("type") in ("CENTERED_TITLE", "TITLE"):
            return element.get("objectId")
    return None


# --- 3. Slide Drawing Functions ---

def draw_title_slide(presentation: Dict[str, Any], title: str, template: TemplateConfig) -> List[Dict[str, Any]]:
    """Styles the title slide created along with the presentation."""
    slides = presentation.get("slides") or []
    if not slides:
        return []
    requests_ = [page_background(slides[0]["objectId"], template.background_color)]

    title_shape_id = find_title_placeholder(presentation)
    if title_shape_id and title:
        requests_.append(insert_text(title_shape_id, title))
        requests_.append(text_style(title_shape_id, template.title_color, TITLE_SLIDE_FONT_SIZE, bold=True))
    logging.debug(f"  - Drawing Title Slide: {title}")
    return requests_


def draw_content_slide(index: int, slide: SlideContent, template: TemplateConfig) -> List[Dict[str, Any]]:
    """Adds one title-and-bullets slide after the title slide."""
    slide_id = f"slide_{index}"
    title_id = f"title_{index}"
    body_id = f"body_{index}"
    content_width = SLIDE_WIDTH - MARGIN_LEFT - MARGIN_RIGHT

    requests_: List[Dict[str, Any]] = [
        {
            "createSlide": {
                "objectId": slide_id,
                "insertionIndex": index + 1,
                "slideLayoutReference": {"predefinedLayout": "BLANK"},
            }
        },
        page_background(slide_id, template.background_color),
    ]

    title_top = MARGIN_TOP
    if template.header_color is not None:
        requests_.extend(header_bar(f"header_{index}", slide_id, template.header_color))
        title_top += HEADER_HEIGHT

    requests_.append(text_box(title_id, slide_id, MARGIN_LEFT, title_top, content_width, TITLE_HEIGHT))
    requests_.append(insert_text(title_id, slide.title))
    requests_.append(text_style(title_id, template.title_color, SLIDE_TITLE_FONT_SIZE, bold=True))

    # The Slides API rejects empty insertText, so a slide without bullets has no body
    if slide.bullets:
        body_top = title_top + TITLE_HEIGHT + TITLE_BODY_GAP
        body_height = SLIDE_HEIGHT - body_top - MARGIN_BOTTOM
        requests_.append(text_box(body_id, slide_id, MARGIN_LEFT, body_top, content_width, body_height))
        requests_.append(insert_text(body_id, "\n".join(slide.bullets)))
        requests_.append(text_style(body_id, template.body_color, BODY_FONT_SIZE))
        requests_.append({
            "createParagraphBullets": {
                "objectId": body_id,
                "textRange": {"type": "ALL"},
                "bulletPreset": BULLET_PRESET,
            }
        })

    logging.debug(f"  - Drawing Content Slide {index + 1}: {slide.title}")
    return requests_


def build_requests(
    presentation: Dict[str, Any], structure: PresentationStructure, template: TemplateConfig
) -> List[Dict[str, Any]]:
    """Assembles the full batchUpdate request list for a new presentation."""
    requests_ = draw_title_slide(presentation, structure.title, template)
    for index, slide in enumerate(structure.slides):
        requests_.extend(draw_content_slide(index, slide, template))
    return requests_


# --- 4. Main Execution Logic ---

class SlidesBuilder:
    """Creates a Google Slides presentation in the user's Drive."""

    def __init__(self, services: GoogleServices):
        self.slides = services.slides

    def create_blank(self, title: str) -> Dict[str, Any]:
        try:
            presentation = self.slides.presentations().create(body={"title": title}).execute()
        except HttpError as e:
            raise SlidesError(f"Failed to create presentation: {e.resp.status} {e.reason}", e.resp.status) from e
        if not (presentation or {}).get("presentationId"):
            raise SlidesError("Failed to create presentation")
        return presentation

    def batch_update(self, presentation_id: str, requests_: List[Dict[str, Any]]) -> Dict[str, Any]:
        try:
            return self.slides.presentations().batchUpdate(
                presentationId=presentation_id, body={"requests": requests_}
            ).execute()
        except HttpError as e:
            raise SlidesError(f"Failed to update presentation: {e.resp.status} {e.reason}", e.resp.status) from e

    def create_presentation(self, structure: PresentationStructure, template: Optional[str] = None) -> Dict[str, str]:
        config = get_template(template)
        logging.info(f"Creating presentation '{structure.title}' with {len(structure.slides)} slides, template '{config.id}'")

        presentation = self.create_blank(structure.title)
        presentation_id = presentation["presentationId"]

        requests_ = build_requests(presentation, structure, config)
        if requests_:
            self.batch_update(presentation_id, requests_)

        slides_url = PRESENTATION_URL.format(presentation_id=presentation_id)
        logging.info(f"Presentation created: {slides_url}")
        return {"slidesUrl": slides_url, "slidesId": presentation_id}


def create_presentation(
    structure: PresentationStructure,
    access_token: str,
    template: Optional[str] = None,
    services: Optional[GoogleServices] = None,
) -> Dict[str, str]:
    if services is None:
        services = build_services(access_token)
    return SlidesBuilder(services).create_presentation(structure, template)
