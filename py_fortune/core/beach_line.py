"""
Beach line tree and breakpoint algebra.

The beach line is a binary tree whose leaves are parabolic arcs, one per
frontier piece of a site's parabola, and whose internal nodes are the
breakpoints where two neighbouring arcs meet. In-order traversal of the
leaves gives the frontier from left to right.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Optional, Tuple

import structlog

from .errors import MalformedTreeError
from .geometry import Coordinate

if TYPE_CHECKING:
    from .dcel import HalfEdge, Site
    from .events import Event

logger = structlog.get_logger()


def breakpoint_x(left: Coordinate, right: Coordinate, sweep_y: float) -> float:
    """
    X position of the breakpoint between the arcs of two foci.

    ``left`` is the focus whose arc lies left of the breakpoint. Unlike
    breakpoint_position() this is defined when both foci lie on the
    sweepline: the arcs are then vertical rays and the breakpoint sits
    halfway between them.
    """
    if left.y == right.y:
        return (left.x + right.x) / 2
    if left.y == sweep_y:
        return left.x
    if right.y == sweep_y:
        return right.x

    # Equate both parabolas and keep the root where the left arc hands
    # over to the right one. With x measured from the left focus the
    # parabolas meet where
    #   (q - p) * x**2 - 2 * half_b * x + c = 0
    # and the wanted root is (half_b - root) / (q - p).
    p = left.y - sweep_y
    q = right.y - sweep_y
    dx = right.x - left.x
    dy = right.y - left.y  # q - p without the rounding of the subtraction
    half_b = -p * dx
    c = -p * dx * dx - p * q * dy
    root = math.sqrt(p * q * (dx * dx + dy * dy))

    if half_b > 0:
        # Same root from the product of the roots; stays finite as dy
        # shrinks to a rounding step
        return left.x + c / (half_b + root)
    return left.x + (half_b - root) / dy


def parabola_y(focus: Coordinate, x: float, sweep_y: float) -> float:
    """Height of the parabola with ``focus`` and directrix ``sweep_y`` at ``x``."""
    return ((x - focus.x) ** 2 + focus.y ** 2 - sweep_y ** 2) / (2 * (focus.y - sweep_y))


def breakpoint_position(left: Coordinate, right: Coordinate,
                        sweep_y: float) -> Optional[Coordinate]:
    """
    Intersection of two neighbouring arcs for the sweepline at ``sweep_y``.

    Degenerate cases are resolved in this order:
    foci at the same height give the midpoint (no intersection when both lie
    on the sweepline); a focus on the sweepline is a vertical ray at its x,
    and the other parabola gives y.

    Returns:
        The breakpoint, or None if the arcs do not intersect yet
    """
    if left.y == right.y and left.y == sweep_y:
        return None

    x = breakpoint_x(left, right, sweep_y)
    focus = right if left.y == sweep_y else left
    return Coordinate(x, parabola_y(focus, x, sweep_y))


class NodeKind(Enum):
    ARC = "arc"
    BREAKPOINT = "breakpoint"


class BeachNode:
    """
    Beach line node.

    An ARC leaf holds its ``site`` and the pending circle event that would
    remove it. A BREAKPOINT holds the ordered ``sites`` pair (left arc's site,
    right arc's site) and the half-edge it is tracing. ``parent`` is only
    used to walk the tree.
    """

    def __init__(self, kind: NodeKind, site: Optional["Site"] = None,
                 sites: Optional[Tuple["Site", "Site"]] = None,
                 edge: Optional["HalfEdge"] = None):
        self.kind = kind
        self.site = site
        self.sites = sites
        self.edge = edge
        self.circle_event: Optional["Event"] = None

        self.left: Optional["BeachNode"] = None
        self.right: Optional["BeachNode"] = None
        self.parent: Optional["BeachNode"] = None

    @classmethod
    def arc(cls, site: "Site") -> "BeachNode":
        return cls(NodeKind.ARC, site=site)

    @classmethod
    def breakpoint(cls, left_site: "Site", right_site: "Site") -> "BeachNode":
        return cls(NodeKind.BREAKPOINT, sites=(left_site, right_site))

    @property
    def is_leaf(self) -> bool:
        return self.kind is NodeKind.ARC

    def adopt(self, left: "BeachNode", right: "BeachNode") -> None:
        """Attach both children at once; nodes never have a single child."""
        self.left = left
        self.right = right
        left.parent = self
        right.parent = self

    def update_sites(self, left: Optional["Site"] = None,
                     right: Optional["Site"] = None) -> None:
        old_left, old_right = self.sites
        self.sites = (left or old_left, right or old_right)

    def x_at(self, sweep_y: float) -> float:
        left, right = self.sites
        return breakpoint_x(left.coordinate, right.coordinate, sweep_y)

    # Tree navigation

    def is_left_child(self) -> bool:
        return self.parent is not None and self.parent.left is self

    def is_right_child(self) -> bool:
        return self.parent is not None and self.parent.right is self

    def minimum(self) -> "BeachNode":
        """Leftmost leaf of this subtree."""
        node = self
        while node.left is not None:
            node = node.left
        return node

    def maximum(self) -> "BeachNode":
        """Rightmost leaf of this subtree."""
        node = self
        while node.right is not None:
            node = node.right
        return node

    def predecessor(self) -> Optional["BeachNode"]:
        """Arc immediately to the left, None at the left end of the beach line."""
        if self.left is not None:
            return self.left.maximum()

        node = self
        while node.is_left_child():
            node = node.parent
        if node.parent is None:
            return None
        return node.parent.left.maximum()

    def successor(self) -> Optional["BeachNode"]:
        """Arc immediately to the right, None at the right end of the beach line."""
        if self.right is not None:
            return self.right.minimum()

        node = self
        while node.is_right_child():
            node = node.parent
        if node.parent is None:
            return None
        return node.parent.right.minimum()

    def __repr__(self):
        if self.is_leaf:
            return f"Arc{self.site.coordinate!r}"
        left, right = self.sites
        return f"Breakpoint({left.coordinate!r}, {right.coordinate!r})"


@dataclass
class ArcDeletion:
    """Breakpoints around a removed arc.

    ``deleted`` left the tree, ``updated`` now separates the removed arc's
    neighbours. ``left``/``right`` give their order along the beach line.
    """
    deleted: BeachNode
    updated: BeachNode
    left: BeachNode
    right: BeachNode


class BeachLine:
    """The beach line tree, owned through its root handle."""

    def __init__(self):
        self.root: Optional[BeachNode] = None

    @property
    def is_empty(self) -> bool:
        return self.root is None

    def arcs(self):
        """Yield the arcs from left to right."""
        if self.root is None:
            return
        node = self.root.minimum()
        while node is not None:
            yield node
            node = node.successor()

    def find_arc_above(self, coordinate: Coordinate) -> BeachNode:
        """
        Find the arc vertically in line with a new site.

        Args:
            coordinate: The site; its y is the current sweep position

        Returns:
            The arc leaf whose x-range contains the site
        """
        if self.root is None:
            raise MalformedTreeError("Cannot search an empty beach line")

        key = coordinate.x
        sweep_y = coordinate.y
        node = self.root
        while not node.is_leaf:
            x = node.x_at(sweep_y)
            if math.isnan(x):
                raise MalformedTreeError(f"Breakpoint {node!r} has no position at y={sweep_y}")

            if key == x:
                # The site lies exactly under a breakpoint: take the arc to its left
                return node.left.maximum()
            node = node.left if key < x else node.right
            if node is None:
                raise MalformedTreeError("Breakpoint with a missing child")
        return node

    def replace(self, node: BeachNode, subtree: BeachNode) -> BeachNode:
        """
        Put ``subtree`` where ``node`` was.

        When ``node`` is the root the root handle moves to ``subtree``.

        Returns:
            The subtree now in place
        """
        parent = node.parent
        subtree.parent = parent
        if parent is None:
            self.root = subtree
        elif parent.left is node:
            parent.left = subtree
        elif parent.right is node:
            parent.right = subtree
        else:
            raise MalformedTreeError(f"{node!r} is not a child of its parent")
        node.parent = None
        return subtree

    def get_breakpoint_between(self, left_arc: BeachNode, right_arc: BeachNode,
                               sweep_y: float) -> BeachNode:
        """
        Locate the breakpoint separating two neighbouring arcs.

        The breakpoint for the pair is evaluated at ``sweep_y`` and searched for
        by x. The node found must carry exactly this site pair; when rounding
        leads the search astray the lowest common ancestor of the two arcs,
        which is the breakpoint between adjacent leaves, is used.
        """
        left_site, right_site = left_arc.site, right_arc.site
        if left_site is None or right_site is None:
            raise MalformedTreeError("Breakpoint lookup needs two arcs")

        query_x = breakpoint_x(left_site.coordinate, right_site.coordinate, sweep_y)
        node = self.root
        while node is not None and not node.is_leaf:
            if node.sites[0] is left_site and node.sites[1] is right_site:
                return node
            x = node.x_at(sweep_y)
            node = node.left if query_x < x else node.right

        ancestor = self._common_ancestor(left_arc, right_arc)
        if (ancestor is None or ancestor.sites[0] is not left_site
                or ancestor.sites[1] is not right_site):
            raise MalformedTreeError(
                f"No breakpoint between {left_arc!r} and {right_arc!r}")
        logger.debug("Breakpoint located structurally", sweep_y=sweep_y,
                     breakpoint=repr(ancestor))
        return ancestor

    @staticmethod
    def _common_ancestor(a: BeachNode, b: BeachNode) -> Optional[BeachNode]:
        ancestors = set()
        node = a.parent
        while node is not None:
            ancestors.add(id(node))
            node = node.parent
        node = b.parent
        while node is not None:
            if id(node) in ancestors:
                return node
            node = node.parent
        return None

    def delete_arc(self, arc: BeachNode, predecessor: BeachNode, successor: BeachNode,
                   sweep_y: float) -> ArcDeletion:
        """
        Remove an arc and the breakpoint next to it.

        The arc's parent breakpoint is replaced by the arc's sibling. The other
        breakpoint around the arc is kept and takes over the pair of the
        removed arc's neighbours.

        Returns:
            Which breakpoint was deleted and which was updated
        """
        parent = arc.parent
        if parent is None:
            raise MalformedTreeError(f"{arc!r} has no parent")

        if arc.is_left_child():
            # parent is the breakpoint (arc, successor)
            sibling = parent.right
            if sibling is None:
                raise MalformedTreeError(f"{arc!r} has no sibling")
            companion = self.get_breakpoint_between(predecessor, arc, sweep_y)
            self.replace(parent, sibling)
            companion.update_sites(right=successor.site)
            return ArcDeletion(deleted=parent, updated=companion,
                               left=companion, right=parent)

        # parent is the breakpoint (predecessor, arc)
        sibling = parent.left
        if sibling is None:
            raise MalformedTreeError(f"{arc!r} has no sibling")
        companion = self.get_breakpoint_between(arc, successor, sweep_y)
        self.replace(parent, sibling)
        companion.update_sites(left=predecessor.site)
        return ArcDeletion(deleted=parent, updated=companion,
                           left=parent, right=companion)
