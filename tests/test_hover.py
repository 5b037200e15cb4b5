"""Tests for prodimo_assist.hover module."""
from __future__ import annotations

from prodimo_assist.catalog import ParameterCatalog, ParameterDefinition
from prodimo_assist.hover import (
    DEFAULT_WIKI_BASE_URL,
    HoverResolver,
    parameter_name_at,
    render_hover,
)

LINE = "0.01   ! Mdisk   [Msun] : disk mass"  # name spans 9..14


def _catalog() -> ParameterCatalog:
    return ParameterCatalog({
        "Mdisk": ParameterDefinition(
            name="Mdisk",
            type="real",
            default="0.01",
            unit="Msun",
            description="disk mass",
            wiki_references=("DiskStructure.md", "DiskMass.md"),
        ),
        "NXX": ParameterDefinition(
            name="NXX", type="integer", default="70", unit="-", description="",
        ),
    })


class TestParameterNameAt:
    def test_cursor_on_name(self) -> None:
        assert parameter_name_at(LINE, 9) == "Mdisk"
        assert parameter_name_at(LINE, 12) == "Mdisk"

    def test_cursor_at_name_end(self) -> None:
        assert parameter_name_at(LINE, 14) == "Mdisk"

    def test_cursor_outside_name(self) -> None:
        assert parameter_name_at(LINE, 2) is None
        assert parameter_name_at(LINE, 16) is None

    def test_requires_exactly_one_separator(self) -> None:
        assert parameter_name_at("0.01 ! Mdisk ! again", 8) is None
        assert parameter_name_at("0.01 Mdisk", 6) is None

    def test_bang_without_space_is_not_separator(self) -> None:
        assert parameter_name_at("0.01 !Mdisk", 7) is None


class TestHoverResolver:
    def test_known_parameter(self) -> None:
        result = HoverResolver(_catalog()).resolve(LINE, 10)
        assert result is not None
        assert result.markdown.startswith("disk mass")
        assert "Unit: Msun" in result.markdown

    def test_reference_links(self) -> None:
        result = HoverResolver(_catalog(), "https://docs.example/wiki/").resolve(LINE, 10)
        assert result is not None
        assert "- [DiskStructure](https://docs.example/wiki/DiskStructure.html)" in result.markdown
        assert "- [DiskMass](https://docs.example/wiki/DiskMass.html)" in result.markdown

    def test_unknown_parameter(self) -> None:
        assert HoverResolver(_catalog()).resolve("1.0  ! Unknown", 8) is None

    def test_cursor_off_name(self) -> None:
        assert HoverResolver(_catalog()).resolve(LINE, 0) is None

    def test_dimensionless_unit_omitted(self) -> None:
        result = HoverResolver(_catalog()).resolve("70  ! NXX", 6)
        assert result is not None
        assert "Unit" not in result.markdown


class TestRenderHover:
    def test_markdown_special_characters_preserved(self) -> None:
        desc = "*bold* _under_ [link](x) `code` <tag> # not a heading | a|b"
        definition = ParameterDefinition(
            name="p", type="real", default="0", unit="", description=desc,
        )
        assert render_hover(definition) == desc

    def test_default_base_url(self) -> None:
        definition = ParameterDefinition(
            name="p", type="real", default="0", unit="K", description="d",
            wiki_references=("Page.md",),
        )
        text = render_hover(definition)
        assert text == f"d\n\nUnit: K\n\n- [Page]({DEFAULT_WIKI_BASE_URL}Page.html)"

    def test_non_markdown_reference_kept(self) -> None:
        definition = ParameterDefinition(
            name="p", type="real", default="0", unit="", description="",
            wiki_references=("notes.pdf",),
        )
        assert render_hover(definition, "https://b/") == "- [notes.pdf](https://b/notes.pdf)"
