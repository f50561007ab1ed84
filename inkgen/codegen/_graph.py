"""
 * Copyright(c) 2022 ZettaScale Technology and others
 *
 * This program and the accompanying materials are made available under the
 * terms of the Eclipse Public License v. 2.0 which is available at
 * http://www.eclipse.org/legal/epl-2.0, or the Eclipse Distribution License
 * v. 1.0 which is available at
 * http://www.eclipse.org/org/documents/edl-v10.php.
 *
 * SPDX-License-Identifier: EPL-2.0 OR BSD-3-Clause
"""
from typing import Dict, List, Set, Tuple


def kosaraju(graph: List[List[int]]) -> Tuple[List[int], List[Set[int]]]:
    """Strongly connected components of an adjacency list graph.

    Returns
    -------
    component_ids: List[int]
        Component of every node, components numbered by their lowest root.
    component_graph: List[Set[int]]
        Edges between distinct components.
    """
    # https://en.wikipedia.org/wiki/Kosaraju%27s_algorithm
    # Both passes use explicit stacks, the graph may be deeper than the interpreter stack.
    number_of_nodes = len(graph)

    visited = [False] * number_of_nodes
    finished: List[int] = []
    reverse_graph: List[List[int]] = [[] for _ in range(number_of_nodes)]

    for start in range(number_of_nodes):
        if visited[start]:
            continue
        visited[start] = True
        stack = [(start, iter(graph[start]))]
        while stack:
            u, edges = stack[-1]
            for v in edges:
                reverse_graph[v].append(u)
                if not visited[v]:
                    visited[v] = True
                    stack.append((v, iter(graph[v])))
                    break
            else:
                stack.pop()
                finished.append(u)

    roots = [-1] * number_of_nodes
    for root in reversed(finished):
        if roots[root] != -1:
            continue
        roots[root] = root
        todo = [root]
        while todo:
            u = todo.pop()
            for v in reverse_graph[u]:
                if roots[v] == -1:
                    roots[v] = root
                    todo.append(v)

    numbering = {r: i for i, r in enumerate(sorted(set(roots)))}
    component_ids = [numbering[r] for r in roots]
    component_graph: List[Set[int]] = [set() for _ in numbering]

    for u, c in enumerate(component_ids):
        for v in graph[u]:
            if component_ids[v] != c:
                component_graph[c].add(component_ids[v])

    return component_ids, component_graph


def dependency_order(graph: List[List[int]]) -> List[List[int]]:
    """Group nodes into strongly connected components and order the components so that every
    component comes after the components it points at. Components are visited by their lowest
    node, and nodes inside a component keep their original order."""
    component_ids, component_graph = kosaraju(graph)

    members: Dict[int, List[int]] = {}
    for node, c in enumerate(component_ids):
        members.setdefault(c, []).append(node)

    def first(c):
        return members[c][0]

    done: Set[int] = set()
    ordered: List[List[int]] = []

    for c in sorted(members, key=first):
        if c in done:
            continue
        done.add(c)
        stack = [(c, iter(sorted(component_graph[c], key=first)))]
        while stack:
            current, deps = stack[-1]
            for d in deps:
                if d not in done:
                    done.add(d)
                    stack.append((d, iter(sorted(component_graph[d], key=first))))
                    break
            else:
                stack.pop()
                ordered.append(members[current])

    return ordered
