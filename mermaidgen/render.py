"""
Render flowchart and gantt models to Mermaid code.

Rendering is a pure function of the current model: no I/O, no caching, so
rendering again after further changes reflects them. Line layout and blank
lines are part of the output contract and must not change.
"""

from datetime import datetime, timedelta, timezone
from typing import Union

from .flowchart import NODE_BRACKETS, Edge, Flowchart, GraphItem, Node, Subgraph
from .gantt import AxisFormat, Gantt, Section, Task
from .styles import EdgeStyle, NodeStyle

GANTT_HEADER = "gantt\ndateFormat YYYY-MM-DDTHH:mm:ssZ\n"

# Largest unit first; the first one dividing a duration exactly is used.
_DURATION_UNITS = [
    ("w", timedelta(weeks=1)),
    ("d", timedelta(days=1)),
    ("h", timedelta(hours=1)),
    ("m", timedelta(minutes=1)),
    ("s", timedelta(seconds=1)),
    ("ms", timedelta(milliseconds=1)),
]


def _escape(text: str) -> str:
    """Replace characters that end a Mermaid label with entity codes."""
    return text.replace('"', "#quot;").replace("|", "#124;")


def _label(lines: list[str], fallback: str) -> str:
    return _escape("<br/>".join(lines)) if lines else fallback


# --- Flowchart ---

def render_node_style(style: NodeStyle) -> str:
    return f"classDef {style.id} {style.css()}\n"


def render_edge_style(style: EdgeStyle, target: Union[int, str]) -> str:
    """``linkStyle`` line for an edge index or ``"default"``."""
    return f"linkStyle {target} {style.css()}\n"


def render_node(node: Node) -> str:
    opening, closing = NODE_BRACKETS[node.shape]
    text = f'{node.id}{opening}"{_label(node.text, node.id)}"{closing}\n'
    if node.style is not None:
        text += f"class {node.id} {node.style.id}\n"
    if node.link:
        link = node.link.replace('"', "%22")
        text += f'click {node.id} "{link}" "{_escape(node.link_text)}"\n'
    return text


def render_subgraph(subgraph: Subgraph) -> str:
    if subgraph.title:
        text = f"subgraph {subgraph.id} [{_escape(subgraph.title)}]\n"
    else:
        text = f"subgraph {subgraph.id}\n"
    for item in subgraph.items:
        text += render_item(item)
    return text + "end\n"


def render_item(item: GraphItem) -> str:
    """Render a node or a subgraph."""
    if isinstance(item, Node):
        return render_node(item)
    if isinstance(item, Subgraph):
        return render_subgraph(item)
    raise TypeError(f"cannot render {type(item).__name__} as a flowchart item")


def render_edge(edge: Edge) -> str:
    text = f"{edge.source.id}{edge.shape.value}"
    if edge.text:
        text += f"|{_label(edge.text, '')}|"
    text += f"{edge.target.id}\n"
    if edge.style is not None:
        text += render_edge_style(edge.style, edge.index)
    return text


def render_flowchart(flowchart: Flowchart) -> str:
    text = f"graph {flowchart.direction.value}\n"
    if flowchart.default_edge_style is not None:
        text += render_edge_style(flowchart.default_edge_style, "default")
    for style in flowchart.node_styles:
        text += render_node_style(style)
    text += "\n"
    for item in flowchart.items:
        text += render_item(item)
    text += "\n"
    for edge in flowchart.list_edges():
        text += render_edge(edge)
    return text


# --- Gantt ---

def format_start(value: datetime) -> str:
    """Timestamp matching ``YYYY-MM-DDTHH:mm:ssZ``; naive times are UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat(timespec="seconds")


def format_duration(value: timedelta) -> str:
    if not value:
        return "0d"
    for unit, size in _DURATION_UNITS:
        if value % size == timedelta(0):
            return f"{value // size}{unit}"
    raise ValueError(f"duration {value} is not a whole number of milliseconds")


def render_task(task: Task) -> str:
    tokens = []
    if task.critical:
        tokens.append("crit")
    if task.active:
        tokens.append("active")
    if task.done:
        tokens.append("done")
    tokens.append(task.id)
    if task.after is not None:
        tokens.append(f"after {task.after.id}")
    elif task.start is not None:
        tokens.append(format_start(task.start))
    if task.duration is not None:
        tokens.append(format_duration(task.duration))
    return f"{task.title or task.id} :{', '.join(tokens)}\n"


def render_section(section: Section) -> str:
    text = f"section {section.title}\n"
    for task in section.list_tasks():
        text += render_task(task)
    return text


def render_gantt(gantt: Gantt) -> str:
    text = GANTT_HEADER
    axis_format = gantt.axis_format
    if isinstance(axis_format, AxisFormat):
        axis_format = axis_format.value
    if axis_format:
        text += f"axisFormat {axis_format}\n"
    if gantt.title:
        text += f"title {gantt.title}\n"
    for task in gantt.list_local_tasks():
        text += render_task(task)
    for section in gantt.list_sections():
        text += render_section(section)
    return text


def render(diagram: Union[Flowchart, Gantt]) -> str:
    """Render a Flowchart or a Gantt to Mermaid code."""
    if isinstance(diagram, Flowchart):
        return render_flowchart(diagram)
    if isinstance(diagram, Gantt):
        return render_gantt(diagram)
    raise TypeError(f"cannot render {type(diagram).__name__}")
