import json

import pytest

from summarizer import (
    SAMPLE_SLIDES,
    Summarizer,
    SummarizerError,
    parse_slide_response,
    strip_code_fences,
)


def slides_json(count, bullets=("a", "b")):
    return json.dumps({"slides": [{"title": f"Slide {i + 1}", "bullets": list(bullets)} for i in range(count)]})


def test_strip_code_fences():
    assert strip_code_fences('```json\n{"a": 1}\n```') == '{"a": 1}'
    assert strip_code_fences('```\n{"a": 1}\n```') == '{"a": 1}'
    assert strip_code_fences('  {"a": 1}  ') == '{"a": 1}'


def test_fenced_and_plain_output_parse_the_same():
    raw = slides_json(3)
    assert parse_slide_response(f"```json\n{raw}\n```", 3) == parse_slide_response(raw, 3)


def test_blank_bullets_are_dropped():
    slides = parse_slide_response('{"slides":[{"title":"T","bullets":["a","","  ","b"]}]}')
    assert slides[0].title == "T"
    assert slides[0].bullets == ["a", "b"]


def test_non_string_bullets_are_dropped():
    slides = parse_slide_response('{"slides":[{"title":"T","bullets":[" a ", 3, null, "b"]}]}')
    assert slides[0].bullets == ["a", "b"]


def test_invalid_json_includes_raw_text():
    with pytest.raises(SummarizerError) as e:
        parse_slide_response("Sure! Here are your slides")
    assert "Sure! Here are your slides" in str(e.value)


@pytest.mark.parametrize("text", ['{"title": "x"}', '{"slides": "nope"}', "[]"])
def test_missing_slides_array(text):
    with pytest.raises(SummarizerError, match="missing slides array"):
        parse_slide_response(text)


@pytest.mark.parametrize("bad_slide", [
    {"title": "", "bullets": ["a"]},
    {"title": "   ", "bullets": ["a"]},
    {"title": None, "bullets": ["a"]},
    "not a slide",
    {"bullets": ["a"]},
    {"title": "T", "bullets": "a"},
    {"title": "T"},
])
def test_invalid_slide_reports_index(bad_slide):
    text = json.dumps({"slides": [{"title": "Ok", "bullets": ["a"]}, bad_slide]})
    with pytest.raises(SummarizerError, match="index 1"):
        parse_slide_response(text)


def test_extra_slides_are_truncated():
    assert len(parse_slide_response(slides_json(7), 5)) == 5


def test_too_few_slides_fail():
    with pytest.raises(SummarizerError, match="Expected 5 slides"):
        parse_slide_response(slides_json(2), 5)


def test_summarize_uses_caller_title(fake_model):
    text = json.dumps({"title": "Model Title", "slides": json.loads(slides_json(3))["slides"]})
    model = fake_model(text)
    structure = Summarizer(model).summarize("Document body", "Board Update", 3, "Be brief")

    assert structure.title == "Board Update"
    assert [s.title for s in structure.slides] == ["Slide 1", "Slide 2", "Slide 3"]
    assert "Document body" in model.prompts[0]
    assert "Be brief" in model.prompts[0]


def test_summarize_parses_fenced_output(fake_model):
    structure = Summarizer(fake_model(f"```json\n{slides_json(4)}\n```")).summarize("c", "t", 4)
    assert len(structure.slides) == 4


@pytest.mark.parametrize("text", ["", "   "])
def test_summarize_empty_response(fake_model, text):
    with pytest.raises(SummarizerError, match="No response"):
        Summarizer(fake_model(text)).summarize("c", "t", 3)


@pytest.mark.parametrize("slide_count", [3, 5, 10])
def test_mock_mode(slide_count):
    summarizer = Summarizer()
    assert summarizer.mock_mode
    structure = summarizer.summarize("anything", "Quarterly Review", slide_count)

    assert structure.title == "Quarterly Review"
    assert len(structure.slides) == slide_count
    for i, slide in enumerate(structure.slides):
        assert slide.title == SAMPLE_SLIDES[i % len(SAMPLE_SLIDES)].title
        assert slide.bullets


def test_mock_mode_returns_independent_copies():
    structure = Summarizer().summarize("x", "t", 3)
    structure.slides[0].bullets.append("changed")
    assert "changed" not in SAMPLE_SLIDES[0].bullets


def test_slide_titles_are_trimmed():
    slides = parse_slide_response('{"slides":[{"title":"  Outlook \\n","bullets":["a"]}]}')
    assert slides[0].title == "Outlook"
