"""Tests for project field normalization (catalog/services/validation.py)."""

import pytest
from hypothesis import given
from hypothesis import strategies as st

from catalog.core.errors import ValidationError
from catalog.schemas.project import ProjectFields
from catalog.services.validation import (
    check_fields,
    normalize_patch,
    normalize_project,
    split_tech,
)

pytestmark = pytest.mark.unit


def _raw(**overrides):
    raw = {
        "title": "Portfolio A",
        "category": "Web",
        "description": "desc",
        "tech": "Go, React",
        "url": "",
    }
    raw.update(overrides)
    return raw


# --- normalize_project ---


def test_normalize_trims_and_splits():
    fields = normalize_project(
        _raw(title="  Portfolio A ", tech=" Go, React ,, ", url=" https://x.dev ")
    )
    assert fields.title == "Portfolio A"
    assert fields.tech == ["Go", "React"]
    assert fields.url == "https://x.dev"


def test_normalize_defaults_optional_fields():
    fields = normalize_project({"title": "T", "category": "C", "description": "D"})
    assert fields.tech == []
    assert fields.url == ""


@pytest.mark.parametrize("missing", ["title", "category", "description"])
def test_blank_required_field_rejected(missing):
    with pytest.raises(ValidationError) as exc_info:
        normalize_project(_raw(**{missing: "   "}))
    assert missing in exc_info.value.message


def test_all_missing_fields_named():
    with pytest.raises(ValidationError) as exc_info:
        normalize_project({})
    assert "title, category, description" in exc_info.value.message


def test_non_string_values_treated_as_missing():
    with pytest.raises(ValidationError):
        normalize_project(_raw(title=42))


# --- split_tech ---


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        (None, []),
        ("", []),
        (" , ,", []),
        ("Python", ["Python"]),
        ("Go,React", ["Go", "React"]),
        (["  Go", "", "React "], ["Go", "React"]),
    ],
)
def test_split_tech(raw, expected):
    assert split_tech(raw) == expected


@given(tokens=st.lists(st.text(alphabet=st.characters(exclude_characters=","), max_size=12)))
def test_split_tech_tokens_are_trimmed_and_non_empty(tokens):
    result = split_tech(",".join(tokens))
    assert all(t and t == t.strip() for t in result)
    assert result == [t.strip() for t in tokens if t.strip()]


@given(title=st.text(max_size=20), category=st.text(max_size=20), description=st.text(max_size=20))
def test_normalize_never_yields_blank_required_fields(title, category, description):
    try:
        fields = normalize_project(
            {"title": title, "category": category, "description": description}
        )
    except ValidationError:
        assert not (title.strip() and category.strip() and description.strip())
    else:
        assert fields.title and fields.category and fields.description
        assert fields.title == title.strip()


# --- normalize_patch ---


def test_patch_only_carries_supplied_fields():
    patch = normalize_patch({"title": " New ", "category": None})
    assert patch.supplied() == {"title": "New"}
    assert not patch.is_empty()


def test_empty_patch():
    assert normalize_patch({}).is_empty()


def test_patch_rejects_blank_required_field():
    with pytest.raises(ValidationError):
        normalize_patch({"description": "  "})


def test_patch_blank_url_and_tech_clear_values():
    patch = normalize_patch({"url": "", "tech": " "})
    assert patch.supplied() == {"url": "", "tech": []}


# --- check_fields ---


def test_check_fields_catches_unnormalized_blank():
    with pytest.raises(ValidationError):
        check_fields(ProjectFields(title=" ", category="C", description="D"))
