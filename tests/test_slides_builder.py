import pytest

from models import PresentationStructure, SlideContent
from slides_builder import (
    SLIDE_TEMPLATES,
    SlidesBuilder,
    SlidesError,
    build_requests,
    create_presentation,
    find_title_placeholder,
    get_template,
    list_templates,
)

CREATED = {
    "presentationId": "pres123",
    "slides": [{
        "objectId": "p",
        "pageElements": [
            {"objectId": "i0", "shape": {"placeholder": {"type": "CENTERED_TITLE"}}},
            {"objectId": "i1", "shape": {"placeholder": {"type": "SUBTITLE"}}},
        ],
    }],
}

STRUCTURE = PresentationStructure(
    title="Board Update",
    slides=[
        SlideContent(title="Summary", bullets=["Revenue up", "Costs down"]),
        SlideContent(title="Next Steps", bullets=["Hire", "Ship"]),
    ],
)


def kinds(requests_):
    return [next(iter(r)) for r in requests_]


def test_five_templates():
    assert [t.id for t in list_templates()] == ["modern", "corporate", "creative", "minimal", "executive"]
    assert get_template().id == "modern"
    with pytest.raises(KeyError):
        get_template("neon")


def test_template_dump_uses_wire_names():
    dumped = SLIDE_TEMPLATES["corporate"].model_dump(by_alias=True)
    assert dumped["titleColor"] == {"red": 0.15, "green": 0.15, "blue": 0.15}
    assert dumped["headerColor"] is not None


def test_find_title_placeholder():
    assert find_title_placeholder(CREATED) == "i0"
    assert find_title_placeholder({"slides": []}) is None


def test_build_requests_keeps_slide_order():
    requests_ = build_requests(CREATED, STRUCTURE, get_template("modern"))
    created = [r["createSlide"] for r in requests_ if "createSlide" in r]

    assert [c["objectId"] for c in created] == ["slide_0", "slide_1"]
    assert [c["insertionIndex"] for c in created] == [1, 2]
    assert requests_[0]["updatePageProperties"]["objectId"] == "p"
    assert requests_[1]["insertText"] == {"objectId": "i0", "text": "Board Update", "insertionIndex": 0}


def test_bullets_are_newline_joined_and_formatted():
    requests_ = build_requests(CREATED, STRUCTURE, get_template("minimal"))
    texts = {r["insertText"]["objectId"]: r["insertText"]["text"] for r in requests_ if "insertText" in r}
    bullets = [r["createParagraphBullets"] for r in requests_ if "createParagraphBullets" in r]

    assert texts["title_0"] == "Summary"
    assert texts["body_0"] == "Revenue up\nCosts down"
    assert texts["body_1"] == "Hire\nShip"
    assert [b["objectId"] for b in bullets] == ["body_0", "body_1"]
    assert bullets[0]["bulletPreset"] == "BULLET_DISC_CIRCLE_SQUARE"


@pytest.mark.parametrize("template_id, has_header", [
    ("modern", False),
    ("corporate", True),
    ("creative", False),
    ("minimal", False),
    ("executive", True),
])
def test_header_bar_only_for_header_templates(template_id, has_header):
    requests_ = build_requests(CREATED, STRUCTURE, get_template(template_id))
    shapes = [r["createShape"] for r in requests_ if "createShape" in r]
    rectangles = [s for s in shapes if s["shapeType"] == "RECTANGLE"]
    assert bool(rectangles) == has_header


def test_slide_without_bullets_has_no_body():
    structure = PresentationStructure(title="T", slides=[SlideContent(title="Only Title", bullets=[])])
    requests_ = build_requests(CREATED, structure, get_template())
    assert "createParagraphBullets" not in kinds(requests_)
    assert all(r["insertText"]["text"] for r in requests_ if "insertText" in r)


def test_create_presentation_sends_one_batch(fake_google):
    api = fake_google(CREATED, {"replies": []})
    result = SlidesBuilder(api).create_presentation(STRUCTURE, "executive")

    assert result == {
        "slidesUrl": "https://docs.google.com/presentation/d/pres123/edit",
        "slidesId": "pres123",
    }
    assert [c["method"] for c in api.calls] == ["presentations.create", "presentations.batchUpdate"]
    assert api.calls[0]["body"] == {"title": "Board Update"}
    assert api.calls[1]["presentationId"] == "pres123"
    assert api.calls[1]["body"]["requests"] == build_requests(CREATED, STRUCTURE, get_template("executive"))


def test_create_presentation_without_id(fake_google):
    api = fake_google({"slides": []})
    with pytest.raises(SlidesError, match="Failed to create presentation"):
        create_presentation(STRUCTURE, "token", services=api)


def test_create_presentation_http_failure(fake_google, make_http_error):
    api = fake_google(make_http_error(403, b"insufficient scopes"))
    with pytest.raises(SlidesError) as e:
        create_presentation(STRUCTURE, "token", services=api)
    assert e.value.status == 403


def test_batch_failure_fails_whole_operation(fake_google, make_http_error):
    api = fake_google(CREATED, make_http_error(400, b"bad request"))
    with pytest.raises(SlidesError) as e:
        SlidesBuilder(api).create_presentation(STRUCTURE)
    assert e.value.status == 400
    assert len(api.calls) == 2
