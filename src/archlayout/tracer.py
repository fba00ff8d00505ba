"""
Debug tracing infrastructure for archlayout.

When debug mode is enabled, the engine records a snapshot of the node
positions (and, once routed, the edge waypoints) after every pipeline stage.

This is primarily useful for:
1. Understanding why a node ended up where it did
2. Seeing how far the force simulation moved the seed layout
3. Writing targeted tests against intermediate states

Usage:
    >>> engine = LayoutEngine()
    >>> result = engine.layout(nodes, edges, debug=True)
    >>> print(result.trace.summary())
    >>> result.trace.dump_to_file("layout_trace.txt")

The trace captures:
- Pipeline stages (placement, refinement, routing, finalization)
- Node positions at each stage
- Waypoints at each stage after routing
- Warnings raised by each stage
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .models import Edge, LayoutWarning, Node


@dataclass
class PipelineStage:
    """
    Snapshot of state at a pipeline stage.

    The layout pipeline has these stages:
    1. placement - Clustering-seeded initial positions
    2. refinement - Positions after force simulation, spacing and snapping
    3. routing - Ports and waypoints resolved
    4. finalization - Everything translated to the canvas origin

    Attributes:
        name: Name of this pipeline stage
        data: Dictionary of relevant data at this stage
        positions: Node (x, y) positions, in node order
        waypoints: Waypoints per edge as (x, y) tuples, once routed
    """

    name: str
    data: Dict[str, Any]
    positions: List[Tuple[float, float]] = field(default_factory=list)
    waypoints: Optional[List[List[Tuple[float, float]]]] = None

    def __str__(self) -> str:
        lines = [f"=== Stage: {self.name} ==="]
        for key, value in self.data.items():
            # Truncate long values
            str_val = str(value)
            if len(str_val) > 100:
                str_val = str_val[:100] + "..."
            lines.append(f"  {key}: {str_val}")
        lines.append(f"  positions: {len(self.positions)} nodes")
        for i, (x, y) in enumerate(self.positions[:15]):
            lines.append(f"    [{i}] ({x:g}, {y:g})")
        if self.waypoints is not None:
            lines.append(f"  waypoints: {len(self.waypoints)} edges")
        return "\n".join(lines)


@dataclass
class LayoutTrace:
    """
    Complete trace of a layout run.

    Attributes:
        stages: List of pipeline stages with their data
        warnings: Warnings in the order they were raised
    """

    stages: List[PipelineStage] = field(default_factory=list)
    warnings: List[LayoutWarning] = field(default_factory=list)

    def add_stage(
        self,
        name: str,
        data: Dict[str, Any],
        nodes: Sequence[Node],
        edges: Optional[Sequence[Edge]] = None,
    ) -> None:
        """
        Add a pipeline stage snapshot.

        Args:
            name: Name of the stage (e.g., "refinement")
            data: Dictionary of relevant data at this stage
            nodes: Nodes to snapshot positions from
            edges: Edges to snapshot waypoints from, if routed already
        """
        positions = [(node.x, node.y) for node in nodes]
        waypoints = None
        if edges is not None:
            waypoints = [[p.as_tuple() for p in edge.waypoints] for edge in edges]
        self.stages.append(PipelineStage(name, data.copy(), positions, waypoints))

    def get_stage(self, name: str) -> Optional[PipelineStage]:
        """Get a specific pipeline stage by name."""
        for stage in self.stages:
            if stage.name == name:
                return stage
        return None

    def get_positions_at_stage(self, name: str) -> Optional[List[Tuple[float, float]]]:
        stage = self.get_stage(name)
        if stage is None:
            return None
        return stage.positions

    def displacement(self, start: str, end: str) -> List[float]:
        """
        How far every node moved between two stages (Manhattan distance).

        Returns an empty list if either stage is missing.
        """
        before = self.get_positions_at_stage(start)
        after = self.get_positions_at_stage(end)
        if before is None or after is None:
            return []
        return [abs(bx - ax) + abs(by - ay) for (ax, ay), (bx, by) in zip(before, after)]

    def summary(self) -> str:
        """
        Generate a human-readable summary of the trace.

        Returns a string with:
        - Pipeline stages overview
        - Warning counts by kind
        """
        lines = [
            "=" * 60,
            "LAYOUT TRACE SUMMARY",
            "=" * 60,
            "",
            f"Pipeline stages: {len(self.stages)}",
        ]

        for stage in self.stages:
            has_routes = "+" if stage.waypoints is not None else "-"
            lines.append(f"  [{has_routes}] {stage.name}")

        lines.extend(["", f"Warnings: {len(self.warnings)}"])

        kind_counts: Dict[str, int] = {}
        for warning in self.warnings:
            kind_counts[warning.kind.value] = kind_counts.get(warning.kind.value, 0) + 1
        for kind, count in sorted(kind_counts.items(), key=lambda x: -x[1]):
            lines.append(f"  {kind}: {count}")

        return "\n".join(lines)

    def dump(self) -> str:
        """Generate a complete human-readable dump of the trace."""
        lines = [self.summary(), "", "=" * 60, "DETAILED TRACE", "=" * 60, ""]

        lines.append("PIPELINE STAGES:")
        lines.append("-" * 40)
        for stage in self.stages:
            lines.append(str(stage))
            lines.append("")

        lines.append("WARNINGS:")
        lines.append("-" * 40)
        for warning in self.warnings:
            lines.append(str(warning))

        return "\n".join(lines)

    def dump_to_file(self, filename: str) -> None:
        """Write the complete trace dump to a file."""
        with open(filename, "w", encoding="utf-8") as f:
            f.write(self.dump())
