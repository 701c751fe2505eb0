"""
mermaidgen - Build Mermaid flowcharts and gantt charts in Python.

Build a model with Flowchart or Gantt, render it to Mermaid code and get a
mermaid.live view URL for it.
"""

from .errors import (
    MermaidGenError,
    InvalidConfigurationError,
    DependencyCycleError,
    ExportError,
    UnsupportedPlatformError,
)
from .styles import NodeStyle, EdgeStyle, StyleRegistry
from .flowchart import (
    # Enums
    Direction,
    NodeShape,
    EdgeShape,
    # Model
    Node,
    Edge,
    Subgraph,
    Flowchart,
)
from .gantt import AxisFormat, GanttConfig, TaskConfig, Task, Section, Gantt
from .render import render
from .export import LIVE_URL, live_url, decode_live_url
from .browser import view_in_browser

__all__ = [
    # Errors
    "MermaidGenError",
    "InvalidConfigurationError",
    "DependencyCycleError",
    "ExportError",
    "UnsupportedPlatformError",
    # Styles
    "NodeStyle",
    "EdgeStyle",
    "StyleRegistry",
    # Flowchart
    "Direction",
    "NodeShape",
    "EdgeShape",
    "Node",
    "Edge",
    "Subgraph",
    "Flowchart",
    # Gantt
    "AxisFormat",
    "GanttConfig",
    "TaskConfig",
    "Task",
    "Section",
    "Gantt",
    # Output
    "render",
    "LIVE_URL",
    "live_url",
    "decode_live_url",
    "view_in_browser",
]
