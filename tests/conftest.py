"""
Shared fixtures: small hand-built catalogs and a fixed reference time.
"""

from datetime import datetime, timedelta, timezone

import pytest

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


def make_item(item_id, category="", tags=None, **fields):
    record = {"id": item_id, "title": fields.pop("title", item_id), "category": category, "tags": tags or []}
    record.update(fields)
    return record


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def search_catalog():
    return [
        make_item(
            "wizard",
            category="creativity",
            tags=["brainstorming", "creativity"],
            title="The Idea Wizard",
            description="Generate fresh concepts for any project",
            content="Act as a creative partner and propose bold angles.",
        ),
        make_item(
            "sql",
            category="data",
            tags=["sql", "database"],
            title="SQL Query Optimizer",
            description="Speed up slow database lookups",
            content="Review the plan and suggest indexes.",
        ),
        make_item(
            "email",
            category="writing",
            tags=["email", "sales"],
            title="Cold Email Writer",
            description="Short outreach messages that get replies",
            content="Write a friendly cold email for a prospect.",
        ),
        make_item(
            "report",
            category="data",
            tags=["reporting"],
            title="Weekly Report Builder",
            description="Summarize metrics for stakeholders",
            content="Turn raw sql output into a short weekly summary.",
        ),
    ]


@pytest.fixture
def rec_catalog():
    """
    Four automation prompts, two writing, two coding.

    a1/a2 are the ones the recommendation tests save.
    """
    return [
        make_item("a1", category="automation", tags=["automation", "workflow"], author="ana"),
        make_item("a2", category="automation", tags=["automation", "zapier"], author="ben"),
        make_item("a3", category="automation", tags=["automation", "scripts"], author="ana"),
        make_item("a4", category="automation", tags=["workflow", "integrations"], author="cy"),
        make_item("w1", category="writing", tags=["copywriting", "email"]),
        make_item("w2", category="writing", tags=["blog"]),
        make_item("c1", category="coding", tags=["python", "scripting"]),
        make_item("c2", category="coding", tags=["rust"]),
    ]


@pytest.fixture
def trending_pair(now):
    """Scenario: X is popular, well rated, and fresh; Y is barely used and two months old."""
    return [
        make_item(
            "y",
            stats={"views": 10, "copies": 5, "saves": 2, "rating": 3.0, "rating_count": 2},
            updated_at=(now - timedelta(days=60)).isoformat(),
        ),
        make_item(
            "x",
            stats={"views": 1000, "copies": 500, "saves": 200, "rating": 4.8, "rating_count": 100},
            updated_at=now.isoformat(),
        ),
    ]
