"""networkx view of a layout's dependency relation.

Nodes are the constraint objects themselves (they hash by identity) and
edges run from a dependent expression to each of its operands.  Numbers
carry no identity and are left out.
"""

from __future__ import annotations

from typing import List, Optional

import networkx as nx

from .constraints import Constraint, DependentOperand
from .layout import Layout


def dependency_graph(layout: Layout) -> nx.DiGraph:
    g = nx.DiGraph()
    stack: List[Constraint] = []
    for prop in layout.properties():
        g.add_node(prop.constraint, box=prop.box, slot=prop.slot, bound=True)
        stack.append(prop.constraint)

    seen = set()
    while stack:
        node = stack.pop()
        if id(node) in seen:
            continue
        seen.add(id(node))
        if not isinstance(node, DependentOperand):
            continue
        for operand in node.operands:
            if isinstance(operand, (int, float)):
                continue
            if operand not in g:
                g.add_node(operand, box=None, slot=None, bound=False)
            g.add_edge(node, operand)
            stack.append(operand)
    return g


def find_dependency_cycle(layout: Layout) -> Optional[List[Constraint]]:
    g = dependency_graph(layout)
    try:
        edges = nx.find_cycle(g)
    except nx.NetworkXNoCycle:
        return None
    return [u for u, _ in edges]


def transitive_dependents(layout: Layout, constraint: Constraint) -> List[Constraint]:
    """Every bound constraint that reaches ``constraint`` through operands."""

    g = dependency_graph(layout)
    if constraint not in g:
        return []
    return [node for node in nx.ancestors(g, constraint) if g.nodes[node]["bound"]]
