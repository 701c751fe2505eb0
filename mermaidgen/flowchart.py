"""
Flowchart model - nodes, edges and nested subgraphs.

A Flowchart is the entrypoint: create one, then use its add_* methods to
build the graph. Nodes and subgraphs are never created standalone.

Identity rules:
- Node ids are unique across the whole flowchart, including nodes added to
  subgraphs. The same holds for subgraph ids.
- Edges have no id. Their index is the position in creation order and is
  what ``linkStyle`` lines refer to.
- Adding a duplicate id returns None and changes nothing.
"""

import logging
import weakref
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, model_validator

from .styles import EdgeStyle, NodeStyle, StyleRegistry

log = logging.getLogger(__name__)


class Direction(str, Enum):
    """Graph directions as understood by ``graph <dir>``."""
    TOP_DOWN = "TB"
    BOTTOM_UP = "BT"
    RIGHT_LEFT = "RL"
    LEFT_RIGHT = "LR"


class NodeShape(str, Enum):
    """Node shapes. See ``NODE_BRACKETS`` for the rendered bracket pairs."""
    RECT = "rect"
    ROUND_RECT = "round_rect"
    STADIUM = "stadium"
    SUBROUTINE = "subroutine"
    DATABASE = "database"
    CIRCLE = "circle"
    FLAG_LEFT = "flag_left"
    RHOMBUS = "rhombus"
    HEXAGON = "hexagon"
    PARALLELOGRAM = "parallelogram"
    PARALLELOGRAM_ALT = "parallelogram_alt"
    TRAPEZOID = "trapezoid"
    TRAPEZOID_ALT = "trapezoid_alt"


NODE_BRACKETS: dict[NodeShape, tuple[str, str]] = {
    NodeShape.RECT: ("[", "]"),
    NodeShape.ROUND_RECT: ("(", ")"),
    NodeShape.STADIUM: ("([", "])"),
    NodeShape.SUBROUTINE: ("[[", "]]"),
    NodeShape.DATABASE: ("[(", ")]"),
    NodeShape.CIRCLE: ("((", "))"),
    NodeShape.FLAG_LEFT: (">", "]"),
    NodeShape.RHOMBUS: ("{", "}"),
    NodeShape.HEXAGON: ("{{", "}}"),
    NodeShape.PARALLELOGRAM: ("[/", "/]"),
    NodeShape.PARALLELOGRAM_ALT: ("[\\", "\\]"),
    NodeShape.TRAPEZOID: ("[/", "\\]"),
    NodeShape.TRAPEZOID_ALT: ("[\\", "/]"),
}


class EdgeShape(str, Enum):
    """Edge connectors, the value is the token written between the node ids."""
    LINE = "---"
    ARROW = "-->"
    DOTTED_LINE = "-.-"
    DOTTED_ARROW = "-.->"
    THICK_LINE = "==="
    THICK_ARROW = "==>"


class Node(BaseModel):
    """A node. Create it with Flowchart.add_node or Subgraph.add_node."""
    model_config = ConfigDict(validate_assignment=True)

    id: str = Field(frozen=True)
    shape: NodeShape = NodeShape.RECT
    text: list[str] = Field(default_factory=list)  # Lines; empty shows the id
    link: str = ""        # Target of a "click" statement
    link_text: str = ""   # Tooltip of the "click" statement
    style: Optional[NodeStyle] = None


class Edge(BaseModel):
    """
    A directed edge between two nodes. Create it with Flowchart.add_edge.

    Note that an EdgeStyle overrides the line look of the shape: a styled
    DOTTED_ARROW is drawn solid unless the style sets ``stroke_dash``.
    """
    model_config = ConfigDict(validate_assignment=True)

    source: Node
    target: Node
    shape: EdgeShape = EdgeShape.ARROW
    text: list[str] = Field(default_factory=list)
    style: Optional[EdgeStyle] = None

    _index: int = PrivateAttr(default=-1)

    @property
    def index(self) -> int:
        """Position of this edge in its flowchart, fixed at creation."""
        return self._index

    @model_validator(mode="after")
    def note_style_override(self) -> "Edge":
        if (self.style is not None and not self.style.stroke_dash
                and self.shape in (EdgeShape.DOTTED_LINE, EdgeShape.DOTTED_ARROW)):
            log.debug("EdgeStyle %r hides the dotted line of edge %s-%s",
                      self.style.id, self.source.id, self.target.id)
        return self


class _GraphScope:
    """Item storage shared by Flowchart and Subgraph."""

    def __init__(self):
        self._nodes: dict[str, Node] = {}
        self._subgraphs: dict[str, "Subgraph"] = {}
        self._items: list["GraphItem"] = []

    def _flowchart(self) -> "Flowchart":
        raise NotImplementedError

    # --- Styles ---

    def node_style(self, style_id: str) -> NodeStyle:
        """Look up or create the flowchart's NodeStyle with this id."""
        return self._flowchart().node_styles.get(style_id)

    def edge_style(self, style_id: str) -> EdgeStyle:
        """
        Look up or create the flowchart's EdgeStyle with this id.

        EdgeStyles override an edge's shape: a colored EdgeShape.DOTTED_ARROW
        loses its dots unless the style defines ``stroke_dash``.
        """
        return self._flowchart().edge_styles.get(style_id)

    # --- Add Items ---

    def add_node(self, node_id: str) -> Optional[Node]:
        """
        Add a node to this scope.

        Returns None if a node with this id already exists anywhere in the
        flowchart.
        """
        flowchart = self._flowchart()
        if node_id in flowchart._node_index:
            log.debug("Node %r already exists", node_id)
            return None
        node = Node(id=node_id)
        flowchart._node_index[node_id] = node
        self._nodes[node_id] = node
        self._items.append(node)
        return node

    def add_subgraph(self, subgraph_id: str) -> Optional["Subgraph"]:
        """
        Add a nested subgraph to this scope.

        Returns None if a subgraph with this id already exists anywhere in
        the flowchart.
        """
        flowchart = self._flowchart()
        if subgraph_id in flowchart._subgraph_index:
            log.debug("Subgraph %r already exists", subgraph_id)
            return None
        subgraph = Subgraph(subgraph_id, flowchart)
        flowchart._subgraph_index[subgraph_id] = subgraph
        self._subgraphs[subgraph_id] = subgraph
        self._items.append(subgraph)
        return subgraph

    # --- Get / List Items ---

    def get_node(self, node_id: str) -> Optional[Node]:
        """Get a node of this scope by id."""
        return self._nodes.get(node_id)

    def get_subgraph(self, subgraph_id: str) -> Optional["Subgraph"]:
        """Get a subgraph of this scope by id."""
        return self._subgraphs.get(subgraph_id)

    def list_nodes(self) -> list[Node]:
        """All nodes of this scope. The order is not guaranteed."""
        return list(self._nodes.values())

    def list_subgraphs(self) -> list["Subgraph"]:
        """All subgraphs of this scope. The order is not guaranteed."""
        return list(self._subgraphs.values())

    @property
    def items(self) -> list["GraphItem"]:
        """Nodes and subgraphs of this scope in render order."""
        return list(self._items)


class Subgraph(_GraphScope):
    """
    A nestable group of nodes and subgraphs.

    Holds only a weak reference to its flowchart, used to reach the shared
    id indexes and style registries.
    """

    def __init__(self, subgraph_id: str, flowchart: "Flowchart"):
        super().__init__()
        self._id = subgraph_id
        self._flowchart_ref = weakref.ref(flowchart)
        self.title: str = ""

    @property
    def id(self) -> str:
        return self._id

    def _flowchart(self) -> "Flowchart":
        flowchart = self._flowchart_ref()
        if flowchart is None:
            raise RuntimeError(f"flowchart of subgraph {self._id!r} no longer exists")
        return flowchart

    @property
    def flowchart(self) -> "Flowchart":
        """The flowchart this subgraph belongs to."""
        return self._flowchart()

    def __repr__(self) -> str:
        return f"Subgraph(id={self._id!r}, items={len(self._items)})"


GraphItem = Union[Node, Subgraph]


class Flowchart(_GraphScope):
    """
    A Mermaid flowchart (``graph`` dialect).

    Nodes and subgraphs added here are rendered at the top level in the
    order they were added, followed by all edges in index order.
    """

    def __init__(self, direction: Union[Direction, str] = Direction.TOP_DOWN):
        super().__init__()
        self.direction = direction
        self.default_edge_style: Optional[EdgeStyle] = None
        self.node_styles: StyleRegistry[NodeStyle] = StyleRegistry(NodeStyle)
        self.edge_styles: StyleRegistry[EdgeStyle] = StyleRegistry(EdgeStyle)

        # Flowchart-wide indexes, covering nodes/subgraphs of all subgraphs
        self._node_index: dict[str, Node] = {}
        self._subgraph_index: dict[str, Subgraph] = {}
        self._edges: list[Edge] = []

    def _flowchart(self) -> "Flowchart":
        return self

    @property
    def direction(self) -> Direction:
        return self._direction

    @direction.setter
    def direction(self, value: Union[Direction, str]):
        self._direction = Direction(value)

    # --- Edges ---

    def add_edge(self, source: Node, target: Node) -> Edge:
        """
        Add an edge from ``source`` to ``target``. Always succeeds.

        The new edge's index is its position in creation order.
        """
        edge = Edge(source=source, target=target)
        edge._index = len(self._edges)
        self._edges.append(edge)
        return edge

    def get_edge(self, index: int) -> Optional[Edge]:
        """Get an edge by index, None if out of range."""
        if index < 0 or index >= len(self._edges):
            return None
        return self._edges[index]

    def list_edges(self) -> list[Edge]:
        """All edges in the order they were added."""
        return list(self._edges)

    # --- Flowchart-wide lookups ---

    def get_node(self, node_id: str) -> Optional[Node]:
        """Get any node of the flowchart by id, including nested ones."""
        return self._node_index.get(node_id)

    def get_subgraph(self, subgraph_id: str) -> Optional[Subgraph]:
        """Get any subgraph of the flowchart by id, including nested ones."""
        return self._subgraph_index.get(subgraph_id)

    def list_nodes(self) -> list[Node]:
        """All nodes of the flowchart. The order is not guaranteed."""
        return list(self._node_index.values())

    def list_subgraphs(self) -> list[Subgraph]:
        """All subgraphs of the flowchart. The order is not guaranteed."""
        return list(self._subgraph_index.values())

    # --- Output ---

    def render(self) -> str:
        """Render the whole flowchart to Mermaid code."""
        from .render import render_flowchart
        return render_flowchart(self)

    def __str__(self) -> str:
        return self.render()

    def live_url(self) -> str:
        """Render and encode the flowchart as a mermaid.live view URL."""
        from .export import live_url
        return live_url(self.render())

    def view_in_browser(self):
        """Open the live URL in the default browser without waiting for it."""
        from .browser import view_in_browser
        return view_in_browser(self.live_url())
