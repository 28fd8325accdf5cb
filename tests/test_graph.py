"""Tests for DOT graph rendering and the graph exporter."""

import io

import pytest
from pydantic import ValidationError

from fsmgraph import (
    ExporterStateError,
    ExporterStatus,
    GraphExporter,
    GraphOptions,
    SinkCreationError,
    SinkWriteError,
    TransitionHistory,
    render_dot,
    write_dot,
)
from fsmgraph.graph import dot_id

HEADER = (
    'strict digraph stategraph {\n'
    '\tstart [shape="circle", color="green", style="filled"]\n'
    '\tend [shape="circle", color="red", style="filled"]\n'
)


def make_history(*pairs):
    history = TransitionHistory()
    for source, destination in pairs:
        history.record(source, destination)
    return history


@pytest.fixture
def history():
    return make_history(("start", "A"), ("A", "B"), ("B", "A"), ("A", "B"), ("B", "end"))


class TestRenderDot:
    """Test the rendered DOT text."""

    def test_empty_history(self):
        assert render_dot(TransitionHistory()) == HEADER + "}\n"

    def test_one_line_per_edge(self, history):
        assert render_dot(history) == HEADER + (
            '\tstart -> A [label=" 1", fontsize=10]\n'
            '\tA -> B [label=" 2,4", fontsize=10]\n'
            '\tB -> A [label=" 3", fontsize=10]\n'
            '\tB -> end [label=" 5", fontsize=10]\n'
            '}\n'
        )

    def test_rendering_is_repeatable(self, history):
        assert render_dot(history) == render_dot(history)

    def test_write_dot_to_stream(self, history):
        stream = io.StringIO()
        write_dot(history, stream)
        assert stream.getvalue() == render_dot(history)

    def test_custom_options(self):
        options = GraphOptions(graph_name="ghost", font_size=14, start_color="blue", end_color="black")
        text = render_dot(make_history(("start", "A")), options)

        assert text.startswith("strict digraph ghost {\n")
        assert '\tstart [shape="circle", color="blue", style="filled"]\n' in text
        assert '\tend [shape="circle", color="black", style="filled"]\n' in text
        assert '\tstart -> A [label=" 1", fontsize=14]\n' in text

    def test_names_needing_quotes(self):
        text = render_dot(make_history(("start", "return to base"), ("return to base", "end")))
        assert '\tstart -> "return to base" [label=" 1", fontsize=10]\n' in text
        assert '\t"return to base" -> end [label=" 2", fontsize=10]\n' in text


class TestDotId:
    """Test quoting of vertex names."""

    @pytest.mark.parametrize("name", ["A", "wander", "_x1", "ChaseState", "42", "-1.5", ".5"])
    def test_bare_ids(self, name):
        assert dot_id(name) == name

    @pytest.mark.parametrize("name,expected", [
        ("return to base", '"return to base"'),
        ("a-b", '"a-b"'),
        ("1abc", '"1abc"'),
        ("node", '"node"'),
        ("Graph", '"Graph"'),
        ('say "hi"', '"say \\"hi\\""'),
        ("A\n", '"A\n"'),
        ("dir\\", '"dir\\\\"'),
        ('C:\\temp "x"', '"C:\\\\temp \\"x\\""'),
    ])
    def test_quoted_ids(self, name, expected):
        assert dot_id(name) == expected

    def test_trailing_backslash_does_not_escape_closing_quote(self):
        quoted = dot_id("dir\\")
        assert quoted.endswith('\\\\"')
        assert quoted.count('"') == 2


class TestGraphOptions:
    """Test validation of the graph options."""

    def test_defaults(self):
        options = GraphOptions()
        assert options.file_name == "dot_graph"
        assert options.extension == "gv"
        assert options.graph_name == "stategraph"
        assert options.font_size == 10

    def test_file_path(self):
        options = GraphOptions()
        assert options.file_path("") == "./dot_graph.gv"
        assert options.file_path("out") == "out/dot_graph.gv"
        assert options.file_path("out/") == "out/dot_graph.gv"

    @pytest.mark.parametrize("kwargs", [
        {"font_size": 0},
        {"file_name": ""},
        {"file_name": "a/b"},
        {"extension": "g\\v"},
        {"graph_name": "state graph"},
        {"start_color": 'gr"een'},
        {"unknown": 1},
    ])
    def test_invalid(self, kwargs):
        with pytest.raises(ValidationError):
            GraphOptions(**kwargs)

    def test_frozen(self):
        with pytest.raises(ValidationError):
            GraphOptions().font_size = 12


class TestGraphExporter:
    """Test the exporter lifecycle."""

    def test_disabled_by_default(self):
        exporter = GraphExporter()
        assert exporter.status is ExporterStatus.DISABLED
        assert not exporter.enabled
        assert exporter.path is None

    def test_enable_creates_file(self, tmp_path):
        exporter = GraphExporter()
        path = exporter.enable(str(tmp_path))

        assert exporter.enabled
        assert path == str(tmp_path / "dot_graph.gv")
        assert (tmp_path / "dot_graph.gv").exists()

    def test_custom_file_name(self, tmp_path):
        exporter = GraphExporter(GraphOptions(file_name="ghost", extension="dot"))
        exporter.enable(str(tmp_path))
        assert (tmp_path / "ghost.dot").exists()

    def test_render_writes_and_closes(self, tmp_path, history):
        exporter = GraphExporter()
        exporter.enable(str(tmp_path))
        exporter.render(history)

        assert exporter.status is ExporterStatus.RENDERED
        assert not exporter.enabled
        assert (tmp_path / "dot_graph.gv").read_text() == render_dot(history)

    def test_two_sinks_get_identical_output(self, tmp_path, history):
        first, second = tmp_path / "one", tmp_path / "two"
        first.mkdir()
        second.mkdir()
        for directory in (first, second):
            exporter = GraphExporter()
            exporter.enable(str(directory))
            exporter.render(history)

        assert (first / "dot_graph.gv").read_bytes() == (second / "dot_graph.gv").read_bytes()

    def test_enable_failure_leaves_exporter_disabled(self, tmp_path):
        exporter = GraphExporter()
        with pytest.raises(SinkCreationError) as excinfo:
            exporter.enable(str(tmp_path / "missing"))

        assert excinfo.value.path == str(tmp_path / "missing" / "dot_graph.gv")
        assert isinstance(excinfo.value.__cause__, OSError)
        assert exporter.status is ExporterStatus.DISABLED

        exporter.enable(str(tmp_path))
        assert exporter.enabled

    def test_enable_twice(self, tmp_path):
        exporter = GraphExporter()
        exporter.enable(str(tmp_path))
        with pytest.raises(ExporterStateError):
            exporter.enable(str(tmp_path))

    def test_render_before_enable(self, history):
        with pytest.raises(ExporterStateError):
            GraphExporter().render(history)

    def test_render_twice(self, tmp_path, history):
        exporter = GraphExporter()
        exporter.enable(str(tmp_path))
        exporter.render(history)
        with pytest.raises(ExporterStateError):
            exporter.render(history)

    def test_partial_write_is_kept(self, tmp_path, history):
        written = []

        class BrokenSink(io.StringIO):
            def write(self, text):
                if written:
                    raise OSError("disk full")
                written.append(text)
                return len(text)

        exporter = GraphExporter()
        exporter.enable(str(tmp_path))
        exporter._sink.close()
        exporter._sink = BrokenSink()

        with pytest.raises(SinkWriteError) as excinfo:
            exporter.render(history)

        assert excinfo.value.path == str(tmp_path / "dot_graph.gv")
        assert str(excinfo.value.original_exception) == "disk full"
        assert written and written[0].startswith("strict digraph")
        assert exporter.status is ExporterStatus.RENDERED

    def test_unencodable_name_is_a_write_error(self, tmp_path):
        exporter = GraphExporter()
        exporter.enable(str(tmp_path))

        with pytest.raises(SinkWriteError) as excinfo:
            exporter.render(make_history(("start", "bad\udcff")))

        assert isinstance(excinfo.value.original_exception, UnicodeEncodeError)
        assert exporter.status is ExporterStatus.RENDERED
