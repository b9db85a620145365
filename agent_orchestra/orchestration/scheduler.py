from collections import deque
from typing import Dict, List, Optional

import loguru

from agent_orchestra.logger import PLAN_LEVEL_NAME, component_logger

from .errors import PlanCycleError, UnresolvedDependencyError
from .plan import Plan, SubtaskNode


class Scheduler:
    """
    Orders subtasks so every node follows its dependencies (Kahn's algorithm).

    In the default lenient mode, dependency ids that do not resolve are logged
    and ignored, and a cyclic plan degrades to declaration order. With
    ``strict=True`` both conditions raise instead.
    """

    def __init__(self, strict: bool = False, logger: Optional["loguru.Logger"] = None):
        self.strict = strict
        self.logger = component_logger("scheduler", logger)

    def _edges(self, plan: Plan) -> Dict[str, List[str]]:
        """Map each node id to the ids that depend on it, dropping unresolved refs."""
        known = set(plan.ids())
        graph: Dict[str, List[str]] = {node.id: [] for node in plan.nodes}
        for node in plan.nodes:
            for dep_id in node.depends_on:
                if dep_id not in known:
                    if self.strict:
                        raise UnresolvedDependencyError(
                            f"Subtask {node.id!r} depends on unknown subtask {dep_id!r}"
                        )
                    self.logger.warning(
                        f"Dependency {dep_id} not found in plan for subtask {node.id}, ignoring it"
                    )
                    continue
                if dep_id == node.id:
                    if self.strict:
                        raise PlanCycleError(f"Subtask {node.id!r} depends on itself")
                    self.logger.warning(f"Subtask {node.id} depends on itself")
                graph[dep_id].append(node.id)
        return graph

    def _kahn_levels(self, plan: Plan) -> Optional[List[List[str]]]:
        graph = self._edges(plan)
        in_degree = {node_id: 0 for node_id in graph}
        for dependents in graph.values():
            for node_id in dependents:
                in_degree[node_id] += 1

        position = {node.id: i for i, node in enumerate(plan.nodes)}
        queue = deque(node.id for node in plan.nodes if in_degree[node.id] == 0)
        levels: List[List[str]] = []
        visited = 0
        while queue:
            # ties within a level keep declaration order
            level = sorted(queue, key=position.__getitem__)
            queue.clear()
            levels.append(level)
            visited += len(level)
            for current in level:
                for neighbor in graph[current]:
                    in_degree[neighbor] -= 1
                    if in_degree[neighbor] == 0:
                        queue.append(neighbor)

        if visited != len(plan):
            stuck = [node_id for node_id, degree in in_degree.items() if degree > 0]
            if self.strict:
                raise PlanCycleError(f"Dependency cycle between subtasks: {stuck}")
            self.logger.warning(
                f"Dependency cycle detected among {stuck}, using declaration order"
            )
            return None
        return levels

    def order(self, plan: Plan) -> List[SubtaskNode]:
        """Linear execution order; declaration order when the plan is cyclic."""
        levels = self._kahn_levels(plan)
        if levels is None:
            ordered = list(plan.nodes)
        else:
            ordered = [plan.get(node_id) for level in levels for node_id in level]  # type: ignore
        self.logger.log(
            PLAN_LEVEL_NAME, "Execution order: " + " -> ".join(n.id for n in ordered)
        )
        return ordered

    def waves(self, plan: Plan) -> List[List[SubtaskNode]]:
        """
        Topological levels: nodes in one wave share no dependency path and may
        run concurrently. A cyclic plan collapses to one node per wave.
        """
        levels = self._kahn_levels(plan)
        if levels is None:
            return [[node] for node in plan.nodes]
        return [[plan.get(node_id) for node_id in level] for level in levels]  # type: ignore
