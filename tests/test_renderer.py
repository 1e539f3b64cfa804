"""Tests for HelpRenderer rules."""

from __future__ import annotations

from pathlib import Path

from helprender.config import RenderConfig
from helprender.nodes import DocNode, Tag, make_document, node
from helprender.oracle import StaticOracle
from helprender.renderer import RULES, HelpRenderer, render_document
from helprender.sinks import TextSink
from helprender.state import Bullets, RenderState


def _render(*body: DocNode, oracle=None, images: bool = False, **kwargs) -> TextSink:
    """Render ``body`` under a document titled "Title" (output starts "Title\\n\\n")."""
    sink = TextSink(images=images)
    render_document(make_document("Title", "", body), sink, oracle, **kwargs)
    return sink


def _body(*body: DocNode, **kwargs) -> str:
    """Rendered text with the title block removed."""
    text = _render(*body, **kwargs).text
    assert text.startswith("Title\n\n")
    return text[len("Title\n\n") :]


def _prose(text: str) -> DocNode:
    return node(Tag.PROSE, None, node(Tag.TEXT, text))


class TestRuleTable:
    def test_every_tag_has_a_rule(self) -> None:
        assert set(RULES) == set(Tag)


# =============================================================================
# Header
# =============================================================================


class TestHeader:
    def test_title_and_summary(self) -> None:
        sink = TextSink()
        render_document(make_document("SinOsc", "Sine oscillator"), sink)
        assert sink.text == "SinOsc\n\nSine oscillator\n\n"

    def test_categories_and_related(self) -> None:
        doc = make_document(
            "SinOsc",
            "Sine",
            header=(
                node(Tag.CATEGORIES, "UGens>Generators"),
                node(
                    Tag.RELATED,
                    None,
                    node(Tag.LINK, "Classes/Osc"),
                    node(Tag.LINK, "Classes/FSinOsc"),
                ),
                node(Tag.CLASS, "SinOsc"),
                node(Tag.REDIRECT, "Other"),
            ),
        )
        sink = TextSink()
        render_document(doc, sink)
        assert sink.text == (
            "SinOsc\n\nSine\n\nCategories: UGens>Generators\n\n"
            "See also: Classes/Osc, Classes/FSinOsc\n\n"
        )
        assert [link.target for link in sink.links] == ["Classes/Osc", "Classes/FSinOsc"]

    def test_class_banner(self) -> None:
        opened: list[str] = []
        files: list[str] = []
        oracle = StaticOracle(
            superclasses={"SinOsc": ["PureUGen", "UGen", "Object"]},
            files={"SinOsc": "/sc/Osc.sc"},
        )
        sink = TextSink()
        render_document(
            make_document("SinOsc"),
            sink,
            oracle,
            subject_class="SinOsc",
            open_topic=opened.append,
            open_file=files.append,
        )
        assert sink.text == (
            "SinOsc\n\nInherits from: PureUGen : UGen : Object\nSource: Osc.sc\n\n"
        )
        assert [link.target for link in sink.links] == [
            "Classes/PureUGen",
            "Classes/UGen",
            "Classes/Object",
        ]
        sink.activate(sink.links[1].start)
        sink.activate(sink.buttons[0].start)
        assert opened == ["Classes/UGen"]
        assert files == ["/sc/Osc.sc"]

    def test_class_banner_omitted_without_facts(self) -> None:
        sink = TextSink()
        render_document(make_document("SinOsc"), sink, subject_class="SinOsc")
        assert sink.text == "SinOsc\n\n"

    def test_class_banner_ignores_string_superclasses(self) -> None:
        class StringOracle(StaticOracle):
            def lookup_superclasses(self, class_id):
                return "Object"

        sink = TextSink()
        render_document(make_document("SinOsc"), sink, StringOracle(), subject_class="SinOsc")
        assert sink.text == "SinOsc\n\n"
        assert sink.links == ()

    def test_class_topic_format_is_configurable(self) -> None:
        oracle = StaticOracle(superclasses={"A": ["Object"]})
        sink = TextSink()
        render_document(
            make_document("A"),
            sink,
            oracle,
            subject_class="A",
            config=RenderConfig(class_topic="class:{name}"),
        )
        assert sink.links[0].target == "class:Object"


# =============================================================================
# Sections and blocks
# =============================================================================


class TestSections:
    def test_section(self) -> None:
        assert _body(node(Tag.SECTION, "Usage", _prose("x"))) == "* Usage\n\nx\n\n"

    def test_subsection(self) -> None:
        body = _body(node(Tag.SUBSECTION, "Details", _prose("x")))
        assert body == "** Details\n\nx\n\n"

    def test_fixed_headings(self) -> None:
        body = _body(
            node(Tag.DESCRIPTION),
            node(Tag.CLASSMETHODS),
            node(Tag.INSTANCEMETHODS),
            node(Tag.EXAMPLES),
            node(Tag.DISCUSSION),
            node(Tag.RETURNS),
        )
        assert body == (
            "* Description\n\n* Class Methods\n\n* Instance Methods\n\n"
            "* Examples\n\n** Discussion\n\n*** Returns\n\n"
        )

    def test_heading_after_inline_text_gets_blank_line(self) -> None:
        body = _body(node(Tag.TEXT, "loose"), node(Tag.SECTION, "Next"))
        assert body == "loose\n\n* Next\n\n"

    def test_heading_marker_is_configurable(self) -> None:
        body = _body(node(Tag.SUBSECTION, "Deep"), config=RenderConfig(heading_marker="#"))
        assert body == "## Deep\n\n"


class TestInline:
    def test_runs_are_verbatim(self) -> None:
        prose = node(
            Tag.PROSE,
            None,
            node(Tag.TEXT, "Use "),
            node(Tag.CODE, "SinOsc.ar"),
            node(Tag.SOFT, " or "),
            node(Tag.STRONG, "*bold*"),
            node(Tag.EMPHASIS, " and"),
            node(Tag.TELETYPE, " tt"),
            node(Tag.STRING, ' "s"'),
        )
        assert _body(prose) == 'Use SinOsc.ar or *bold* and tt "s"\n\n'

    def test_prose_is_filled(self) -> None:
        words = " ".join(["oscillator"] * 12)
        body = _body(_prose(words), config=RenderConfig(fill_column=30))
        lines = body.rstrip("\n").split("\n")
        assert len(lines) > 1
        assert all(len(line) <= 30 for line in lines)

    def test_teletype_block(self) -> None:
        body = _body(_prose("before"), node(Tag.TELETYPEBLOCK, "x = 1"), _prose("after"))
        assert body == "before\n\nx = 1\n\nafter\n\n"

    def test_code_block_is_addressable(self) -> None:
        sink = _render(_prose("before"), node(Tag.CODEBLOCK, "{ SinOsc.ar(440) }.play"))
        assert sink.text.endswith("before\n\n{ SinOsc.ar(440) }.play\n\n")
        (block,) = sink.code_blocks
        assert block.payload == "{ SinOsc.ar(440) }.play"
        assert sink.code_block_at(block.start + 3) == block

    def test_nl_inserts_blank_line(self) -> None:
        assert _body(node(Tag.TEXT, "a"), node(Tag.NL), node(Tag.TEXT, "b")) == "a\n\nb"

    def test_note_and_warning(self) -> None:
        body = _body(
            node(Tag.NOTE, None, node(Tag.TEXT, "careful")),
            node(Tag.WARNING, None, node(Tag.TEXT, "loud")),
        )
        assert body == "NOTE: careful\nWARNING: loud\n"

    def test_ignored_markers_are_skipped(self) -> None:
        body = _body(
            node(Tag.PRIVATE, None, node(Tag.TEXT, "secret")),
            node(Tag.COPYMETHOD, "Foo *bar"),
            node(Tag.ANCHOR, "here"),
            node(Tag.KEYWORD, "sine"),
            _prose("shown"),
        )
        assert body == "shown\n\n"


# =============================================================================
# Lists, definitions, tables
# =============================================================================


def _item(text: str) -> DocNode:
    return node(Tag.ITEM, None, node(Tag.TEXT, text))


class TestLists:
    def test_unordered(self) -> None:
        assert _body(node(Tag.LIST, None, _item("a"), _item("b"))) == "* a\n* b\n"

    def test_tree_is_unordered(self) -> None:
        assert _body(node(Tag.TREE, None, _item("a"))) == "* a\n"

    def test_numbered(self) -> None:
        body = _body(node(Tag.NUMBEREDLIST, None, _item("a"), _item("b"), _item("c")))
        assert body == "1. a\n2. b\n3. c\n"

    def test_nested_list_restores_outer_numbering(self) -> None:
        tree = node(
            Tag.NUMBEREDLIST,
            None,
            _item("one"),
            _item("two"),
            node(Tag.LIST, None, _item("x"), _item("y")),
            _item("three"),
        )
        assert _body(tree) == "1. one\n2. two\n* x\n* y\n3. three\n"

    def test_list_nested_in_item(self) -> None:
        tree = node(
            Tag.NUMBEREDLIST,
            None,
            node(Tag.ITEM, None, node(Tag.TEXT, "one"), node(Tag.LIST, None, _item("x"))),
            _item("two"),
        )
        assert _body(tree) == "1. one\n* x\n2. two\n"

    def test_mode_restored_after_render(self) -> None:
        state = RenderState()
        tree = node(Tag.NUMBEREDLIST, None, _item("a"), node(Tag.LIST, None, _item("b")))
        HelpRenderer().render(tree, state, TextSink())
        assert state.bullet_mode is Bullets.NONE

    def test_mode_restored_when_item_is_malformed(self) -> None:
        state = RenderState()
        tree = node(Tag.LIST, None, node(Tag.ITEM, None, node(Tag.TEXT, None)))
        HelpRenderer().render(tree, state, TextSink())
        assert state.bullet_mode is Bullets.NONE

    def test_configurable_bullet(self) -> None:
        body = _body(node(Tag.LIST, None, _item("a")), config=RenderConfig(bullet="- "))
        assert body == "- a\n"


class TestDefinitions:
    def test_definition_list(self) -> None:
        tree = node(
            Tag.DEFINITIONLIST,
            None,
            node(Tag.TERM, None, node(Tag.TEXT, "freq")),
            node(Tag.DEFINITION, None, node(Tag.TEXT, "Frequency")),
        )
        assert _body(tree) == "freq\n    Frequency\n\n"

    def test_arguments(self) -> None:
        tree = node(
            Tag.ARGUMENTS,
            None,
            node(Tag.ARGUMENT, "freq", _prose("Frequency in Hz.")),
            node(Tag.ARGUMENT, "phase", _prose("Phase offset.")),
        )
        assert _body(tree) == "freq    Frequency in Hz.\n\nphase    Phase offset.\n\n"

    def test_unnamed_argument(self) -> None:
        assert _body(node(Tag.ARGUMENT, None, node(Tag.TEXT, "rest"))) == "rest\n\n"

    def test_arguments_must_not_carry_text(self) -> None:
        body = _body(node(Tag.ARGUMENTS, "oops"), _prose("after"))
        assert body == "[malformed ARGUMENTS]after\n\n"


class TestTables:
    def test_rows_and_cells(self) -> None:
        def row(*cells: str) -> DocNode:
            return node(
                Tag.ROW, None, *(node(Tag.CELL, None, node(Tag.TEXT, c)) for c in cells)
            )

        body = _body(node(Tag.TABLE, None, row("a", "b"), row("c", "d")), _prose("after"))
        assert body == "a | b\nc | d\n\nafter\n\n"

    def test_table_rejects_stray_children(self) -> None:
        body = _body(node(Tag.TABLE, None, node(Tag.TEXT, "x")))
        assert body == "[malformed TABLE]"


# =============================================================================
# Links and images
# =============================================================================


class _RecordingOracle(StaticOracle):
    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self.title_queries: list[str] = []

    def lookup_document_title(self, document_id: str) -> str | None:
        self.title_queries.append(document_id)
        return super().lookup_document_title(document_id)


def _link(text: str, oracle=None, **kwargs) -> TextSink:
    return _render(node(Tag.LINK, text), oracle=oracle, **kwargs)


class TestLinks:
    def test_explicit_title_wins(self) -> None:
        oracle = StaticOracle(titles={"DocA": "Doc A Title"})
        assert _link("DocA#anchor#My Title", oracle).links[0].label == "My Title"

    def test_anchor_when_oracle_has_no_title(self) -> None:
        assert _link("DocA#anchor").links[0].label == "anchor"

    def test_oracle_title(self) -> None:
        oracle = StaticOracle(titles={"DocA": "Doc A Title"})
        sink = _link("DocA", oracle)
        assert sink.links[0].label == "Doc A Title"
        assert sink.text == "Title\n\nDoc A Title"

    def test_raw_document_id_fallback(self) -> None:
        assert _link("DocA").links[0].label == "DocA"

    def test_same_document_anchor_skips_oracle(self) -> None:
        oracle = _RecordingOracle()
        sink = _link("#sec", oracle)
        assert sink.links[0].label == "sec"
        assert sink.links[0].target == "#sec"
        assert oracle.title_queries == []

    def test_same_document_link_opens_nothing(self) -> None:
        opened: list[str] = []
        sink = _link("#usage", open_topic=opened.append)
        assert sink.activate(sink.links[0].start) is None
        assert opened == []

    def test_empty_link_has_empty_label(self) -> None:
        oracle = _RecordingOracle()
        sink = _link("", oracle)
        assert sink.links[0].label == ""
        assert oracle.title_queries == []

    def test_internal_link_opens_document(self) -> None:
        opened: list[str] = []
        sink = _link("Guides/Intro#part", open_topic=opened.append)
        link = sink.links[0]
        assert link.target == "Guides/Intro#part"
        sink.activate(link.start)
        assert opened == ["Guides/Intro"]

    def test_external_link(self) -> None:
        urls: list[str] = []
        sink = _link("https://example.org/a#frag", open_url=urls.append)
        link = sink.links[0]
        assert link.label == "https://example.org/a#frag"
        sink.activate(link.start)
        assert urls == ["https://example.org/a#frag"]

    def test_external_link_title(self) -> None:
        oracle = _RecordingOracle()
        sink = _link("ftp://files.example.org##Archive", oracle)
        assert sink.links[0].label == "Archive"
        assert sink.links[0].target == "ftp://files.example.org"
        assert oracle.title_queries == []


class TestImages:
    def test_label_when_sink_has_no_images(self) -> None:
        assert _body(node(Tag.IMAGE, "img/scope.png#Scope")) == "Scope"
        assert _body(node(Tag.IMAGE, "img/scope.png")) == "img/scope.png"

    def test_image_resolved_against_source_directory(self, tmp_path: Path) -> None:
        (tmp_path / "img").mkdir()
        (tmp_path / "img" / "scope.png").write_bytes(b"\x89PNG")
        sink = _render(
            node(Tag.IMAGE, "img/scope.png#Scope"),
            images=True,
            source_path=tmp_path / "Scope.schelp",
        )
        (image,) = sink.regions
        assert image.kind == "image"
        assert image.target == str(tmp_path / "img" / "scope.png")
        assert sink.text.endswith("[image: Scope]")

    def test_missing_image_degrades_to_label(self, tmp_path: Path) -> None:
        sink = _render(
            node(Tag.IMAGE, "img/none.png#Scope"),
            images=True,
            source_path=tmp_path / "Scope.schelp",
        )
        assert sink.regions == ()
        assert sink.text.endswith("Scope")


# =============================================================================
# Methods
# =============================================================================


def _method(tag: Tag, *names: str, text: str | None = None, body: str = "Body.") -> DocNode:
    return node(
        tag,
        text,
        node(Tag.METHODNAMES, None, *(node(Tag.STRING, n) for n in names)),
        node(Tag.METHODBODY, None, _prose(body)),
    )


class TestMethods:
    def test_method_uses_literal_signature(self) -> None:
        body = _body(_method(Tag.METHOD, "ar", "kr", text="(freq, phase)"))
        assert body == "ar(freq, phase)\nkr(freq, phase)\n\nBody.\n\n"

    def test_class_method_signature(self) -> None:
        oracle = StaticOracle(method_args={("Foo", "bar"): [("x", "1"), ("y", None)]})
        body = _body(_method(Tag.CMETHOD, "bar"), oracle=oracle, subject_class="Foo")
        assert "Foo.bar(x: 1, y)\n" in body

    def test_class_method_queries_metaclass(self) -> None:
        oracle = StaticOracle(method_args={("Meta_Foo", "new"): [("size", "8")]})
        body = _body(
            _method(Tag.CMETHOD, "new"),
            oracle=oracle,
            subject_class="Foo",
            subject_metaclass="Meta_Foo",
        )
        assert "Foo.new(size: 8)\n" in body

    def test_empty_args_render_no_parentheses(self) -> None:
        oracle = StaticOracle(method_args={("Foo", "bar"): []})
        body = _body(_method(Tag.CMETHOD, "bar"), oracle=oracle, subject_class="Foo")
        assert body == "Foo.bar\n\nBody.\n\n"

    def test_instance_method_signature(self) -> None:
        oracle = StaticOracle(method_args={("Foo", "play"): [("target", None)]})
        body = _body(_method(Tag.IMETHOD, "play"), oracle=oracle, subject_class="Foo")
        assert body == "play(target)\n\nBody.\n\n"

    def test_class_method_without_subject(self) -> None:
        assert _body(_method(Tag.CMETHOD, "bar")) == "bar\n\nBody.\n\n"

    def test_failing_oracle_omits_arguments(self) -> None:
        class BrokenOracle(StaticOracle):
            def lookup_method_args(self, owner_id, method):
                raise RuntimeError("index not built")

        body = _body(_method(Tag.IMETHOD, "play"), oracle=BrokenOracle(), subject_class="Foo")
        assert body == "play\n\nBody.\n\n"

    def test_misshapen_oracle_answer_keeps_document(self) -> None:
        class NamesOnlyOracle(StaticOracle):
            def lookup_method_args(self, owner_id, method):
                return ["freq", "phase"]

        body = _body(
            _method(Tag.CMETHOD, "ar"),
            _prose("after"),
            oracle=NamesOnlyOracle(),
            subject_class="Foo",
        )
        assert body == "Foo.ar\n\nBody.\n\nafter\n\n"
