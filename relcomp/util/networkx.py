"""Provides graph-centric algorithms based on NetworkX [nx]_.

The operator trees produced by relcomp are plain Python object graphs. The utilities in this module mirror such object graphs
as NetworkX digraphs, which allows to check structural properties (e.g. whether the graph actually is a tree) with
well-tested graph algorithms rather than hand-written traversals.

References
----------

.. [nx] Aric A. Hagberg, Daniel A. Schult and Pieter J. Swart, "Exploring network structure, dynamics, and function using
        NetworkX", in Proceedings of the 7th Python in Science Conference (SciPy2008), Gäel Varoquaux, Travis Vaught, and
        Jarrod Millman (Eds), (Pasadena, CA USA), pp. 11-15, Aug 2008
"""
from __future__ import annotations

import collections
import typing
from collections.abc import Callable, Sequence

import networkx as nx

NodeType = typing.TypeVar("NodeType")
"""Generic type to model the specific objects that are mirrored in a NetworkX graph."""


def nx_from_tree(root: NodeType, children: Callable[[NodeType], Sequence[NodeType]]) -> nx.MultiDiGraph:
    """Mirrors an object graph that is expected to be a tree as a directed NetworkX graph.

    Graph nodes are identified by the `id` of the objects, since tree nodes do not need to be hashable and two structurally
    equal subtrees should still be treated as distinct nodes. The original object is stored in the *obj* attribute of each
    node. Edges point from parents to their children.

    The traversal visits each object only once, so shared objects and cycles in the object graph are mirrored faithfully
    rather than being expanded infinitely. An object that is referenced twice by the same parent produces two parallel
    edges, which is why a multigraph is used.

    Parameters
    ----------
    root : NodeType
        The object to start the traversal from
    children : Callable[[NodeType], Sequence[NodeType]]
        Provides the child objects of a node

    Returns
    -------
    nx.MultiDiGraph
        The mirrored graph
    """
    graph = nx.MultiDiGraph()
    graph.add_node(id(root), obj=root)
    visited: set[int] = set()
    queue = collections.deque([root])
    while queue:
        current = queue.popleft()
        if id(current) in visited:
            continue
        visited.add(id(current))
        for child in children(current):
            graph.add_node(id(child), obj=child)
            graph.add_edge(id(current), id(child))
            queue.append(child)
    return graph


def nx_is_tree(graph: nx.DiGraph) -> bool:
    """Checks, whether a directed graph is a rooted tree with edges pointing away from the root.

    This is the case if there is exactly one source node, each other node has exactly one parent and there are no cycles.
    """
    if not graph.number_of_nodes():
        return False
    return nx.is_arborescence(graph)
