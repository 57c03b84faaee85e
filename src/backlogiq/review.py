"""Format onboarding data into a review summary and hierarchy tree."""

from __future__ import annotations

from backlogiq.hierarchy import count_positions
from backlogiq.schemas import OrganizationData, PositionNode, ReviewSummary


def format_review(organization: OrganizationData, forest: list[PositionNode]) -> ReviewSummary:
    """Create the summary and indented hierarchy tree shown before finishing."""
    total = count_positions(forest)
    noun = "position" if total == 1 else "positions"

    summary_lines = [f"Organization: {organization.name}"]
    if organization.description:
        summary_lines.append(f"Description: {organization.description}")
    summary_lines.append(f"Team Structure: {total} {noun}")

    if forest:
        tree = "Team Structure:\n" + _create_hierarchy_tree(forest)
    else:
        tree = "Team Structure:\nNo positions defined"

    return ReviewSummary(
        summary="\n".join(summary_lines),
        hierarchy_tree=tree,
        total_positions=total,
    )


def _create_hierarchy_tree(nodes: list[PositionNode], indent: int = 0) -> str:
    lines: list[str] = []
    for node in nodes:
        label = node.title
        if node.description:
            label += f" - {node.description}"
        lines.append(" " * (indent * 4) + label)
        if node.children:
            lines.append(_create_hierarchy_tree(node.children, indent + 1))
    return "\n".join(lines)
