#!/usr/bin/env python
"""
Generate demo/seed data for development.
"""

import argparse
import asyncio
import sys
from uuid import uuid4

from sqlalchemy import select

from thermio.core.auth.roles import Role
from thermio.core.constants import DEFAULT_CHECKLIST_QUESTIONS
from thermio.core.database import async_session_factory
from thermio.modules.users.models import User
from thermio.modules.vehicles.models import Vehicle, ZoneType
from thermio.modules.workspaces.models import Workspace


DEMO_SETTINGS = {
    "timezone": "Australia/Perth",
    "temp_ranges": {
        "cabin": {"min": 0, "max": 30},
        "chiller": {"min": 0, "max": 5},
        "freezer": {"min": -25, "max": -15},
    },
    "sign_off": {"weekday": 5, "require_odometer": True, "require_signature": True},
}

DEMO_VEHICLES = [
    ("1ABC123", ZoneType.CHILLER),
    ("1XYZ789", ZoneType.DUAL),
    ("1FRZ456", ZoneType.FREEZER),
]

DEMO_USERS = [
    ("Dana Owner", "owner", Role.ADMIN, True),
    ("Office Desk", "office", Role.OFFICE, False),
    ("Sam Driver", "sam", Role.DRIVER, False),
    ("Alex Driver", "alex", Role.DRIVER, False),
]


async def seed_workspace(name: str, slug: str) -> None:
    """Create one workspace with people and vehicles, unless it exists."""
    async with async_session_factory() as session:
        result = await session.execute(select(Workspace).where(Workspace.slug == slug))
        existing = result.scalar_one_or_none()

        if existing:
            print(f"Workspace already exists: {existing.name}")
            return

        workspace = Workspace(
            id=uuid4(),
            name=name,
            slug=slug,
            settings=DEMO_SETTINGS,
            checklist_questions=list(DEFAULT_CHECKLIST_QUESTIONS),
        )
        session.add(workspace)
        await session.flush()

        for full_name, username, role, is_owner in DEMO_USERS:
            session.add(
                User(
                    id=uuid4(),
                    workspace_id=workspace.id,
                    name=full_name,
                    username=username,
                    role=role,
                    is_owner=is_owner,
                    password_history=[],
                )
            )

        for registration, zone_type in DEMO_VEHICLES:
            session.add(
                Vehicle(
                    id=uuid4(),
                    workspace_id=workspace.id,
                    registration=registration,
                    zone_type=zone_type,
                )
            )

        await session.commit()
        print(f"Created workspace: {workspace.name} ({workspace.id})")


async def main(scenario: str) -> None:
    """Run the seeding based on scenario."""
    if scenario == "default":
        await seed_workspace("Demo Cold Chain", "demo")
    elif scenario == "demo":
        await seed_workspace("Demo Cold Chain", "demo")
        await seed_workspace("Southern Freight", "southern")
    else:
        print(f"Unknown scenario: {scenario}")
        print("Available scenarios: default, demo")
        sys.exit(1)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed database with demo data")
    parser.add_argument(
        "--scenario",
        "-s",
        default="default",
        help="Seed scenario to run (default, demo)",
    )
    args = parser.parse_args()

    asyncio.run(main(args.scenario))
