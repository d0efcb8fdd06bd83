# dag.py
from __future__ import annotations

import heapq
from dataclasses import dataclass
from typing import Dict, List, Set, Tuple, Union

from .model import Step, WaitStep


@dataclass
class CyclicDependency(Exception):
    """Raised when the declared dependencies admit no execution order."""
    cycle: List[Step]

    def __str__(self) -> str:
        path = " -> ".join(str(s) for s in self.cycle + self.cycle[:1])
        return f"Cyclic dependency: {path}"


# ----------------------------------------------------------------------
# Graph construction
# ----------------------------------------------------------------------

def close_steps(steps: List[Step]) -> List[Step]:
    """
    Fold every transitively referenced dependency into `steps`.

    A step may depend on something that was never added to the pipeline.
    Such steps are appended to `steps` in discovery order (this mutates the
    caller's list) and take part in the sort like any other step.

    Returns the distinct nodes: a step listed twice is one node.
    """
    nodes: List[Step] = []
    known: Set[Step] = set()
    for s in steps:
        if s not in known:
            known.add(s)
            nodes.append(s)

    i = 0
    while i < len(nodes):
        for dep in nodes[i].dependencies:
            if dep not in known:
                known.add(dep)
                nodes.append(dep)
                steps.append(dep)
        i += 1
    return nodes


def build_graph(steps: List[Step]) -> Tuple[Dict[Step, List[Step]], Dict[Step, int]]:
    """
    Build adjacency + indegree maps.

    Requires a closed node list (see close_steps).
    Edge dep -> step (dep must run BEFORE step).
    """
    adj: Dict[Step, List[Step]] = {s: [] for s in steps}
    indeg: Dict[Step, int] = {s: 0 for s in steps}

    for step in steps:
        for dep in step.dependencies:
            adj[dep].append(step)
            indeg[step] += 1

    return adj, indeg


# ----------------------------------------------------------------------
# Sorter
# ----------------------------------------------------------------------

def sort_steps(steps: List[Step]) -> List[Step]:
    """
    Topologically sort steps.

    Among steps with no ordering constraint between them, input order is
    kept: the ready step with the smallest input index always goes next.

    Raises:
        CyclicDependency: if no valid order exists
    """
    nodes = close_steps(steps)
    adj, indeg = build_graph(nodes)
    index = {s: i for i, s in enumerate(nodes)}
    indeg = dict(indeg)

    ready = [index[s] for s in nodes if indeg[s] == 0]
    heapq.heapify(ready)

    ordered: List[Step] = []
    while ready:
        node = nodes[heapq.heappop(ready)]
        ordered.append(node)
        for child in adj[node]:
            indeg[child] -= 1
            if indeg[child] == 0:
                heapq.heappush(ready, index[child])

    if len(ordered) != len(nodes):
        stuck = [s for s in nodes if indeg[s] > 0]
        raise CyclicDependency(find_cycle(stuck))

    return ordered


def find_cycle(stuck: List[Step]) -> List[Step]:
    """
    Walk dependencies from the first stuck step until a step repeats.

    Every stuck step has at least one stuck dependency, so the walk always
    closes a loop.
    """
    stuck_set = set(stuck)
    path: List[Step] = []
    seen: Dict[Step, int] = {}
    node = stuck[0]
    while node not in seen:
        seen[node] = len(path)
        path.append(node)
        node = next(d for d in node.dependencies if d in stuck_set)
    # path runs against the edges (step -> dep); report it in execution order
    return list(reversed(path[seen[node]:]))


# ----------------------------------------------------------------------
# Barrier insertion
# ----------------------------------------------------------------------

def insert_waits(ordered: List[Step]) -> List[Union[Step, WaitStep]]:
    """
    Interleave wait steps so every dependency finishes before its dependent.

    A batch runner executes everything between two waits concurrently, so a
    wait goes in front of a step whenever one of its dependencies was placed
    after the most recent wait. At most one wait is added per step.
    """
    out: List[Union[Step, WaitStep]] = []
    position: Dict[Step, int] = {}
    last_wait = -1

    for step in ordered:
        for dep in step.dependencies:
            placed = position.get(dep)
            if placed is not None and placed > last_wait:
                out.append(WaitStep())
                last_wait = len(out) - 1
                break
        position[step] = len(out)
        out.append(step)

    return out


def apply_always(sequence: List[Union[Step, WaitStep]]) -> List[Union[Step, WaitStep]]:
    """
    Adjust waits for always-execute steps.

      - an always step behind a plain wait turns it into continue-on-failure
      - a normal step behind a continue-on-failure wait gets a fresh plain wait

    Waits are mutated in place; the returned list is new.
    """
    out: List[Union[Step, WaitStep]] = []
    last_wait: WaitStep | None = None

    for item in sequence:
        if isinstance(item, WaitStep):
            last_wait = item
            out.append(item)
            continue

        if last_wait is not None:
            if item.always and not last_wait.continue_on_failure:
                last_wait.continue_on_failure = True
            elif last_wait.continue_on_failure and not item.always:
                last_wait = WaitStep()
                out.append(last_wait)
        out.append(item)

    return out


def resolve(steps: List[Step]) -> List[Union[Step, WaitStep]]:
    """Sort, insert waits, refine for always-execute steps."""
    return apply_always(insert_waits(sort_steps(steps)))


def batches(sequence: List[Union[Step, WaitStep]]) -> List[Tuple[WaitStep | None, List[Step]]]:
    """
    Split a resolved sequence into (opening wait, steps) groups.

    The first group has no opening wait. Empty groups are dropped.
    """
    groups: List[Tuple[WaitStep | None, List[Step]]] = []
    opener: WaitStep | None = None
    current: List[Step] = []

    for item in sequence:
        if isinstance(item, WaitStep):
            if current:
                groups.append((opener, current))
            opener, current = item, []
        else:
            current.append(item)

    if current:
        groups.append((opener, current))
    return groups
