"""
File export for layout results.

This module turns a LayoutResult into pictures, mainly for inspecting
layouts while tuning the configuration:
- SVG documents, optionally with grid lines and port markers
- PNG images rendered with Pillow

Node fill colours come from the node's ``color`` attribute.
"""

import html
from pathlib import Path
from typing import Optional, Set, Tuple

from PIL import Image, ImageDraw, ImageFont

from .config import DEFAULT_GRID_CELL_SIZE
from .models import LayoutResult, PortDirection
from .ports import port_anchor

DEFAULT_NODE_FILL = "lightblue"
PORT_FILLS = {
    PortDirection.INPUT: "lightblue",
    PortDirection.OUTPUT: "lightcoral",
}
# Side length of the square drawn for a port
PORT_MARKER_SIZE = 6.0


def used_ports(result: LayoutResult) -> Set[Tuple[int, int]]:
    """(node index, port index) pairs referenced by at least one edge."""
    used = set()
    for edge in result.edges:
        if edge.source_port is not None:
            used.add((edge.source, edge.source_port))
        if edge.target_port is not None:
            used.add((edge.target, edge.target_port))
    return used


def render_svg(
    result: LayoutResult,
    show_grid: bool = False,
    show_all_ports: bool = False,
    grid_cell_size: float = DEFAULT_GRID_CELL_SIZE,
) -> str:
    """
    Render a layout result as an SVG document.

    Args:
        result: Finished layout.
        show_grid: Draw the routing grid lines.
        show_all_ports: Draw every port, not only the ones edges attach to.
        grid_cell_size: Spacing of the grid lines.

    Returns:
        The SVG document as a string.
    """
    width = result.canvas_width
    height = result.canvas_height
    parts = [
        f'<svg width="{width:g}" height="{height:g}" '
        f'xmlns="http://www.w3.org/2000/svg">',
        '<rect width="100%" height="100%" fill="white"/>',
    ]

    if show_grid:
        columns = int(width // grid_cell_size)
        rows = int(height // grid_cell_size)
        for i in range(columns + 1):
            x = i * grid_cell_size
            parts.append(
                f'<line x1="{x:g}" y1="0" x2="{x:g}" y2="{height:g}" '
                f'stroke="lightgray" stroke-width="0.5"/>'
            )
        for i in range(rows + 1):
            y = i * grid_cell_size
            parts.append(
                f'<line x1="0" y1="{y:g}" x2="{width:g}" y2="{y:g}" '
                f'stroke="lightgray" stroke-width="0.5"/>'
            )

    for node in result.nodes:
        fill = html.escape(node.attributes.get("color", DEFAULT_NODE_FILL), quote=True)
        parts.append(
            f'<rect x="{node.x:g}" y="{node.y:g}" width="{node.width:g}" '
            f'height="{node.height:g}" fill="{fill}" stroke="black"/>'
        )
        parts.append(
            f'<text x="{node.x + node.width / 2:g}" y="{node.y + node.height / 2 + 5:g}" '
            f'font-family="Arial" font-size="12" text-anchor="middle">'
            f"{html.escape(node.id)}</text>"
        )

    for edge in result.edges:
        if len(edge.waypoints) < 2:
            continue
        first = edge.waypoints[0]
        path = f"M {first.x:g} {first.y:g}" + "".join(
            f" L {p.x:g} {p.y:g}" for p in edge.waypoints[1:]
        )
        parts.append(f'<path d="{path}" stroke="black" stroke-width="2" fill="none"/>')

    used = used_ports(result)
    half = PORT_MARKER_SIZE / 2
    for node_index, node in enumerate(result.nodes):
        for port_index, port in enumerate(node.ports):
            if not show_all_ports and (node_index, port_index) not in used:
                continue
            anchor = port_anchor(node, port_index)
            parts.append(
                f'<rect x="{anchor.x - half:g}" y="{anchor.y - half:g}" '
                f'width="{PORT_MARKER_SIZE:g}" height="{PORT_MARKER_SIZE:g}" '
                f'fill="{PORT_FILLS[port.direction]}" stroke="black"/>'
            )

    parts.append("</svg>")
    return "\n".join(parts)


def export_svg(
    result: LayoutResult,
    filename: Optional[str] = None,
    show_grid: bool = False,
    show_all_ports: bool = False,
    grid_cell_size: float = DEFAULT_GRID_CELL_SIZE,
) -> str:
    """
    Render a layout result as SVG and optionally save it.

    Args:
        result: Finished layout.
        filename: Output file (should end in .svg); nothing is written if None.
        show_grid: Draw the routing grid lines.
        show_all_ports: Draw every port, not only the used ones.
        grid_cell_size: Spacing of the grid lines.

    Returns:
        The SVG document as a string.
    """
    svg = render_svg(result, show_grid, show_all_ports, grid_cell_size)
    if filename is not None:
        Path(filename).write_text(svg, encoding="utf-8")
    return svg


def export_png(
    result: LayoutResult,
    filename: str,
    scale: int = 1,
    bg_color: str = "#FFFFFF",
    line_color: str = "#000000",
) -> None:
    """
    Save a layout result as a PNG image.

    Args:
        result: Finished layout.
        filename: Output filename (should end in .png).
        scale: Resolution multiplier (2 for retina-style output).
        bg_color: Background colour.
        line_color: Colour of node outlines, edges and labels.
    """
    img_width = max(1, int(round(result.canvas_width * scale)))
    img_height = max(1, int(round(result.canvas_height * scale)))
    img = Image.new("RGB", (img_width, img_height), bg_color)
    draw = ImageDraw.Draw(img)
    font = ImageFont.load_default()

    for node in result.nodes:
        box = [
            node.x * scale,
            node.y * scale,
            (node.x + node.width) * scale,
            (node.y + node.height) * scale,
        ]
        fill = node.attributes.get("color", DEFAULT_NODE_FILL)
        try:
            draw.rectangle(box, fill=fill, outline=line_color)
        except ValueError:
            # Unknown colour name
            draw.rectangle(box, fill=DEFAULT_NODE_FILL, outline=line_color)
        draw.text(
            ((node.x + 4) * scale, (node.y + 4) * scale),
            node.id,
            fill=line_color,
            font=font,
        )

    for edge in result.edges:
        if len(edge.waypoints) < 2:
            continue
        points = [(p.x * scale, p.y * scale) for p in edge.waypoints]
        draw.line(points, fill=line_color, width=max(1, 2 * scale))

    half = PORT_MARKER_SIZE / 2
    for node_index, port_index in sorted(used_ports(result)):
        node = result.nodes[node_index]
        anchor = port_anchor(node, port_index)
        draw.rectangle(
            [
                (anchor.x - half) * scale,
                (anchor.y - half) * scale,
                (anchor.x + half) * scale,
                (anchor.y + half) * scale,
            ],
            fill=PORT_FILLS[node.ports[port_index].direction],
            outline=line_color,
        )

    img.save(Path(filename), "PNG")
