"""Mutable multigraph container shared by every algorithm in the engine."""

from __future__ import annotations

from .data import GraphKind, IdentityContext, Link, Vertex
from .exceptions import InvalidGraphError


class Graph:
    """A multigraph of one GraphKind with dense vertex and link ids.

    Vertices are numbered 1..N in insertion order and links 1..M. Removing a
    link shifts the ids of the links after it down by one, so ids stay dense;
    match ids are never rewritten. Adjacency maps of both endpoints are updated
    together with the link table on every add and remove.

    Attributes:
        kind: The GraphKind, which fixes the link kinds the graph accepts.
        context: IdentityContext issuing link guids.
        depot_id: Vertex id at which routes (Euler tours) start and end.

    Examples:
        >>> g = Graph(GraphKind.DIRECTED, n=3)
        >>> arc = g.add_link(1, 2, cost=10)
        >>> arc.id, arc.match_id, g.vertex(1).out_degree
        (1, 1, 1)
    """

    def __init__(
        self,
        kind: GraphKind = GraphKind.UNDIRECTED,
        n: int = 0,
        context: IdentityContext | None = None,
        depot_id: int = 1,
    ):
        self.kind = kind
        self.context = context if context is not None else IdentityContext()
        self.depot_id = depot_id
        self._vertices: list[Vertex] = []
        self._links: list[Link] = []
        for _ in range(n):
            self.add_vertex()

    def __repr__(self) -> str:
        return (
            f"Graph(kind={self.kind.value}, vertices={len(self._vertices)}, "
            f"links={len(self._links)}, depot={self.depot_id})"
        )

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def num_vertices(self) -> int:
        return len(self._vertices)

    @property
    def num_links(self) -> int:
        return len(self._links)

    @property
    def vertices(self) -> tuple[Vertex, ...]:
        return tuple(self._vertices)

    @property
    def links(self) -> tuple[Link, ...]:
        return tuple(self._links)

    @property
    def is_directed(self) -> bool:
        return self.kind is GraphKind.DIRECTED

    def vertex(self, vertex_id: int) -> Vertex:
        """Return the vertex with the given id, failing fast on a stale id."""
        if not 1 <= vertex_id <= len(self._vertices):
            raise InvalidGraphError(
                f"Vertex {vertex_id} does not exist in a graph with "
                f"{len(self._vertices)} vertices"
            )
        return self._vertices[vertex_id - 1]

    def link(self, link_id: int) -> Link:
        """Return the link with the given id, failing fast on a stale id."""
        if not 1 <= link_id <= len(self._links):
            raise InvalidGraphError(
                f"Link {link_id} does not exist in a graph with {len(self._links)} links"
            )
        return self._links[link_id - 1]

    def links_by_match_id(self) -> dict[int, list[Link]]:
        """Group the links of this graph by their match id."""
        index: dict[int, list[Link]] = {}
        for link in self._links:
            index.setdefault(link.match_id, []).append(link)
        return index

    def find_links(self, first_id: int, second_id: int) -> list[Link]:
        """Return every link joining the two vertices, in either direction."""
        found = list(self.vertex(first_id).neighbors.get(second_id, ()))
        for link in self.vertex(second_id).neighbors.get(first_id, ()):
            if not any(link is other for other in found):
                found.append(link)
        return found

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def add_vertex(
        self,
        label: str = "",
        demand: int | None = None,
        coordinates: tuple[float, float] | None = None,
    ) -> Vertex:
        vertex = Vertex(
            id=len(self._vertices) + 1,
            label=label,
            demand=demand,
            coordinates=coordinates,
        )
        self._vertices.append(vertex)
        return vertex

    def add_link(
        self,
        tail_id: int,
        head_id: int,
        cost: int,
        directed: bool | None = None,
        reverse_cost: int | None = None,
        required: bool = True,
        capacity: int | None = None,
        match_id: int | None = None,
        label: str = "",
    ) -> Link:
        """Insert a link between two existing vertices and return it.

        Args:
            tail_id: First endpoint (tail of an arc).
            head_id: Second endpoint (head of an arc).
            cost: Traversal cost.
            directed: Whether the link is an arc. Defaults to True in directed
                      graphs and False otherwise.
            reverse_cost: Head -> tail cost; windy graphs only (defaults to cost there).
            required: Whether a route must cover the link.
            capacity: Flow capacity; None means unbounded.
            match_id: Advisory correlation id; defaults to the new link's id.
            label: Free-form label.

        Raises:
            InvalidGraphError: If an endpoint does not exist, the link kind is
                not allowed in this graph, or the capacity is negative.
        """
        tail = self.vertex(tail_id)
        head = self.vertex(head_id)
        if directed is None:
            directed = self.kind is GraphKind.DIRECTED
        self._check_link_kind(directed, reverse_cost)
        if self.kind is GraphKind.WINDY and reverse_cost is None:
            reverse_cost = cost
        if capacity is not None and capacity < 0:
            raise InvalidGraphError(
                f"Link {tail_id} -> {head_id} has negative capacity {capacity}"
            )

        link = Link(
            guid=self.context.next_guid(),
            tail=tail,
            head=head,
            cost=cost,
            directed=directed,
            reverse_cost=reverse_cost,
            capacity=capacity,
            required=required,
            label=label,
        )
        self._links.append(link)
        link.id = len(self._links)
        link.match_id = match_id if match_id is not None else link.id
        self._attach(link)
        return link

    def remove_link(self, link: Link | int) -> None:
        """Remove a link from the link table and from both endpoints' adjacency."""
        if isinstance(link, int):
            link = self.link(link)
        elif link.id < 1 or link.id > len(self._links) or self._links[link.id - 1] is not link:
            raise InvalidGraphError(f"Link {link.id} does not belong to this graph")

        self._detach(link)
        index = link.id - 1
        del self._links[index]
        for later in self._links[index:]:
            later.id -= 1
        link.id = -1

    def get_deep_copy(self) -> Graph:
        """Return a structural clone whose links match back to this graph's link ids.

        The copy shares this graph's identity context, so its links get fresh
        guids. Vertex ids, link ids, costs, capacities and demands are preserved.
        """
        copy = Graph(self.kind, context=self.context, depot_id=self.depot_id)
        for vertex in self._vertices:
            copy.add_vertex(
                label=vertex.label,
                demand=vertex.demand,
                coordinates=vertex.coordinates,
            )
        for link in self._links:
            copy.add_link(
                link.tail.id,
                link.head.id,
                link.cost,
                directed=link.directed,
                reverse_cost=link.reverse_cost,
                required=link.required,
                capacity=link.capacity,
                match_id=link.id,
                label=link.label,
            )
        return copy

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _check_link_kind(self, directed: bool, reverse_cost: int | None) -> None:
        if self.kind is GraphKind.UNDIRECTED and directed:
            raise InvalidGraphError("Undirected graphs cannot hold arcs")
        if self.kind is GraphKind.DIRECTED and not directed:
            raise InvalidGraphError("Directed graphs cannot hold undirected edges")
        if self.kind is GraphKind.WINDY and directed:
            raise InvalidGraphError("Windy graphs cannot hold arcs")
        if reverse_cost is not None and self.kind is not GraphKind.WINDY:
            raise InvalidGraphError(
                f"Only windy graphs accept a reverse cost (graph is {self.kind.value})"
            )

    @staticmethod
    def _attach(link: Link) -> None:
        tail, head = link.tail, link.head
        tail.neighbors.setdefault(head.id, []).append(link)
        if link.directed:
            tail.out_degree += 1
            head.in_degree += 1
            return
        if tail is not head:
            head.neighbors.setdefault(tail.id, []).append(link)
        tail.degree += 1
        head.degree += 1

    @staticmethod
    def _detach(link: Link) -> None:
        tail, head = link.tail, link.head
        _discard(tail.neighbors, head.id, link)
        if link.directed:
            tail.out_degree -= 1
            head.in_degree -= 1
            return
        if tail is not head:
            _discard(head.neighbors, tail.id, link)
        tail.degree -= 1
        head.degree -= 1


def _discard(neighbors: dict[int, list[Link]], key: int, link: Link) -> None:
    bucket = neighbors[key]
    for position, candidate in enumerate(bucket):
        if candidate is link:
            del bucket[position]
            break
    if not bucket:
        del neighbors[key]
