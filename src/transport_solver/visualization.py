"""Visualization utilities for transportation plans.

This module draws a shipment plan as a bipartite graph of sources and
destinations using matplotlib and networkx.

Example:
    >>> from transport_solver import solve_transportation, visualize_plan
    >>>
    >>> result = solve_transportation(problem)
    >>> fig = visualize_plan(problem, result)
    >>> fig.savefig("plan.png")
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .data import TransportationProblem, TransportResult

# Check for optional dependencies
try:
    import matplotlib.pyplot as plt
    import networkx as nx  # type: ignore[import-untyped,unused-ignore]
    from matplotlib.figure import Figure

    _HAS_VISUALIZATION_DEPS = True
except ImportError:
    _HAS_VISUALIZATION_DEPS = False
    Figure = Any  # type: ignore[misc, assignment]


def _check_dependencies() -> None:
    """Check if visualization dependencies are installed."""
    if not _HAS_VISUALIZATION_DEPS:
        msg = (
            "Visualization requires optional dependencies. "
            "Install with: pip install 'transport_solver[visualization]'"
        )
        raise ImportError(msg)


def build_plan_graph(problem: TransportationProblem, result: TransportResult) -> nx.Graph:
    """Build a bipartite graph with one edge per shipping or basic cell.

    Source nodes are named ``S0..Sm-1`` and destination nodes ``D0..Dn-1``.
    Edges carry ``quantity``, ``cost`` and ``basic`` attributes.
    """
    _check_dependencies()
    graph = nx.Graph()
    for i, supply in enumerate(problem.supply):
        graph.add_node(f"S{i}", bipartite=0, amount=int(supply))
    for j, demand in enumerate(problem.demand):
        graph.add_node(f"D{j}", bipartite=1, amount=int(demand))

    basic_cells = result.basis.basic_cells if result.basis is not None else set()
    num_sources, num_destinations = problem.shape
    for i in range(num_sources):
        for j in range(num_destinations):
            quantity = int(result.allocations[i, j])
            is_basic = (i, j) in basic_cells
            if quantity > 0 or is_basic:
                graph.add_edge(
                    f"S{i}",
                    f"D{j}",
                    quantity=quantity,
                    cost=float(problem.costs[i, j]),
                    basic=is_basic,
                )
    return graph


def visualize_plan(
    problem: TransportationProblem,
    result: TransportResult,
    figsize: tuple[float, float] = (10, 8),
    node_size: int = 1200,
    font_size: int = 10,
    show_edge_labels: bool = True,
    title: str | None = None,
) -> Figure:
    """Visualize a shipment plan.

    Sources are drawn on the left, destinations on the right. Edge width is
    proportional to the shipped quantity; basic cells carrying zero units are
    drawn dashed.

    Args:
        problem: Transportation problem
        result: Result from solve_transportation()
        figsize: Figure size (width, height) in inches
        node_size: Size of node markers
        font_size: Font size for labels
        show_edge_labels: Whether to label edges with quantity and unit cost
        title: Custom title for the plot (default: "Shipment Plan")

    Returns:
        matplotlib Figure object

    Raises:
        ImportError: If matplotlib or networkx are not installed
    """
    _check_dependencies()
    graph = build_plan_graph(problem, result)
    num_sources, num_destinations = problem.shape

    pos = {f"S{i}": (0.0, -float(i)) for i in range(num_sources)}
    pos.update({f"D{j}": (1.0, -float(j)) for j in range(num_destinations)})

    fig, ax = plt.subplots(figsize=figsize)

    nx.draw_networkx_nodes(
        graph,
        pos,
        nodelist=[f"S{i}" for i in range(num_sources)],
        node_color="lightgreen",
        node_size=node_size,
        ax=ax,
        label="Sources",
    )
    nx.draw_networkx_nodes(
        graph,
        pos,
        nodelist=[f"D{j}" for j in range(num_destinations)],
        node_color="lightcoral",
        node_size=node_size,
        ax=ax,
        label="Destinations",
    )

    shipping = [(a, b) for a, b, d in graph.edges(data=True) if d["quantity"] > 0]
    zero_basic = [(a, b) for a, b, d in graph.edges(data=True) if d["quantity"] == 0]
    max_quantity = max((graph.edges[e]["quantity"] for e in shipping), default=1)
    if shipping:
        nx.draw_networkx_edges(
            graph,
            pos,
            edgelist=shipping,
            width=[1.0 + 5.0 * graph.edges[e]["quantity"] / max_quantity for e in shipping],
            edge_color="steelblue",
            ax=ax,
        )
    if zero_basic:
        nx.draw_networkx_edges(
            graph, pos, edgelist=zero_basic, style="dashed", edge_color="gray", ax=ax
        )

    node_labels = {node: f"{node}\n({data['amount']})" for node, data in graph.nodes(data=True)}
    nx.draw_networkx_labels(graph, pos, labels=node_labels, font_size=font_size, ax=ax)

    if show_edge_labels:
        edge_labels = {
            (a, b): f"{d['quantity']} @ {d['cost']:g}" for a, b, d in graph.edges(data=True)
        }
        nx.draw_networkx_edge_labels(
            graph, pos, edge_labels=edge_labels, font_size=font_size - 2, label_pos=0.3, ax=ax
        )

    default_title = f"Shipment Plan ({result.status}, cost {result.objective:g})"
    ax.set_title(title or default_title, fontsize=14, fontweight="bold")
    ax.legend(loc="upper left", fontsize=font_size)
    ax.axis("off")

    plt.tight_layout()
    return fig
