"""
DOT graph export of a machine's transition history.

The graph layout lives in ``templates/stategraph.gv.j2`` and is rendered
with Jinja2. Output looks like::

    strict digraph stategraph {
    	start [shape="circle", color="green", style="filled"]
    	end [shape="circle", color="red", style="filled"]
    	start -> wander [label=" 1", fontsize=10]
    	wander -> chase [label=" 2,5", fontsize=10]
    	...
    }
"""

import io
import logging
import os
import re
from enum import Enum
from typing import Optional, TextIO

from jinja2 import Environment, PackageLoader, StrictUndefined, Template
from pydantic import BaseModel, ConfigDict, Field, PositiveInt, field_validator

from .exceptions import ExporterStateError, SinkCreationError, SinkWriteError
from .history import END_STATE, START_STATE, TransitionHistory

logger = logging.getLogger(__name__)

TEMPLATE_NAME = "stategraph.gv.j2"

_DOT_IDENTIFIER = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_DOT_NUMERAL = re.compile(r"-?(\.[0-9]+|[0-9]+(\.[0-9]*)?)")
_DOT_KEYWORDS = {"node", "edge", "graph", "digraph", "subgraph", "strict"}


class GraphOptions(BaseModel):
    """Static configuration for the exported graph file and its styling."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    file_name: str = Field("dot_graph", min_length=1, description="Output file name without extension")
    extension: str = Field("gv", min_length=1, description="Output file extension")
    graph_name: str = Field("stategraph", pattern=r"^[A-Za-z_][A-Za-z0-9_]*$")
    font_size: PositiveInt = Field(10, description="Font size of the step labels on edges")
    start_color: str = Field("green", pattern=r'^[^"\\]+$')
    end_color: str = Field("red", pattern=r'^[^"\\]+$')

    @field_validator("file_name", "extension")
    @classmethod
    def no_path_separators(cls, value: str) -> str:
        if "/" in value or "\\" in value:
            raise ValueError("must not contain path separators")
        return value

    def file_path(self, directory: str = "") -> str:
        """Location of the graph file inside ``directory`` (default: cwd)."""
        return os.path.join(directory or ".", f"{self.file_name}.{self.extension}")


def dot_id(name: str) -> str:
    """Quote a vertex name unless it is already a valid bare DOT ID."""
    if (_DOT_IDENTIFIER.fullmatch(name) and name.lower() not in _DOT_KEYWORDS) or _DOT_NUMERAL.fullmatch(name):
        return name
    return '"' + name.replace('\\', '\\\\').replace('"', '\\"') + '"'


_environment: Optional[Environment] = None


def _get_template() -> Template:
    global _environment
    if _environment is None:
        # DOT output, not HTML: escaping would mangle the attribute quotes
        _environment = Environment(  # nosec B701
            loader=PackageLoader("fsmgraph", "templates"),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
            undefined=StrictUndefined,
        )
        _environment.filters["dot_id"] = dot_id
    return _environment.get_template(TEMPLATE_NAME)


def write_dot(history: TransitionHistory, stream: TextIO, options: Optional[GraphOptions] = None) -> None:
    """Stream the DOT description of ``history`` into ``stream``.

    Output is written chunk by chunk as the template renders; if the stream
    fails partway, whatever was already written stays written.
    """
    options = options or GraphOptions()
    chunks = _get_template().generate(
        options=options,
        start_state=START_STATE,
        end_state=END_STATE,
        edges=history.edges(),
    )
    for chunk in chunks:
        stream.write(chunk)


def render_dot(history: TransitionHistory, options: Optional[GraphOptions] = None) -> str:
    """Return the DOT description of ``history`` as a string."""
    buffer = io.StringIO()
    write_dot(history, buffer, options)
    return buffer.getvalue()


class ExporterStatus(Enum):
    """Lifecycle of a GraphExporter. There is no way back to DISABLED."""

    DISABLED = "disabled"
    ENABLED = "enabled"
    RENDERED = "rendered"


class GraphExporter:
    """Owns the graph output file from enable() until render() finishes."""

    def __init__(self, options: Optional[GraphOptions] = None):
        self.options = options or GraphOptions()
        self.path: Optional[str] = None
        self._status = ExporterStatus.DISABLED
        self._sink: Optional[TextIO] = None

    @property
    def status(self) -> ExporterStatus:
        return self._status

    @property
    def enabled(self) -> bool:
        return self._status is ExporterStatus.ENABLED

    def enable(self, path: str = "") -> str:
        """Create the graph file inside ``path`` and start tracing.

        Returns the full path of the created file. On failure the exporter
        stays disabled.
        """
        if self._status is not ExporterStatus.DISABLED:
            raise ExporterStateError(f"Graph export is already {self._status.value}")

        file_path = self.options.file_path(path)
        try:
            sink = open(file_path, "w", encoding="utf-8")
        except OSError as e:
            raise SinkCreationError(
                f"Could not create graph file '{file_path}': {e}", file_path, e
            ) from e

        self._sink = sink
        self.path = file_path
        self._status = ExporterStatus.ENABLED
        logger.debug(f"Tracing state transitions to {file_path}")
        return file_path

    def render(self, history: TransitionHistory) -> None:
        """Write ``history`` to the graph file and close it."""
        if self._status is not ExporterStatus.ENABLED or self._sink is None:
            raise ExporterStateError(f"Cannot render graph while export is {self._status.value}")

        sink, self._sink = self._sink, None
        self._status = ExporterStatus.RENDERED
        try:
            with sink:
                write_dot(history, sink, self.options)
        except (OSError, UnicodeError) as e:
            raise SinkWriteError(
                f"Could not write graph file '{self.path}': {e}", self.path or "", e
            ) from e

        logger.debug(f"Wrote {len(history)} transitions to {self.path}")
