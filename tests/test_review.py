"""Tests for the onboarding review formatter."""

from __future__ import annotations

from backlogiq.review import format_review
from backlogiq.schemas import OrganizationData, PositionNode


def test_review_lists_positions_indented() -> None:
    forest = [
        PositionNode(
            id="root",
            title="CEO",
            description="Chief Executive Officer",
            children=[
                PositionNode(
                    id="t1",
                    title="CTO",
                    parent_id="root",
                    children=[PositionNode(id="t2", title="Developer", parent_id="t1")],
                )
            ],
        )
    ]
    review = format_review(OrganizationData(name="Acme", description="Widgets"), forest)

    assert review.total_positions == 3
    assert review.summary == "Organization: Acme\nDescription: Widgets\nTeam Structure: 3 positions"
    assert review.hierarchy_tree == (
        "Team Structure:\n"
        "CEO - Chief Executive Officer\n"
        "    CTO\n"
        "        Developer"
    )


def test_review_singular_position() -> None:
    review = format_review(OrganizationData(name="Solo"), [PositionNode(id="root", title="CEO")])
    assert review.summary == "Organization: Solo\nTeam Structure: 1 position"


def test_review_empty_hierarchy() -> None:
    review = format_review(OrganizationData(name="Empty"), [])
    assert review.total_positions == 0
    assert review.hierarchy_tree == "Team Structure:\nNo positions defined"
    assert review.summary.endswith("Team Structure: 0 positions")
