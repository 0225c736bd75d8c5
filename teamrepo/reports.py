"""Plain-text reports about teams, lists and website data."""

from __future__ import annotations

from .data import Data
from .people import TeamKind
from .permissions import DataError
from .teams import Team


def dump_team_members(
    team: Team, data: Data, only_leads: bool = False, tab_offset: int = 0
) -> list[str]:
    """One line per member, sorted, with leads marked."""
    leads = team.leads()
    indent = "\t" * tab_offset
    return [
        f"{indent}{member}{' (lead)' if member in leads else ''}"
        for member in sorted(team.members(data))
        if not only_leads or member in leads
    ]


def dump_teams(
    data: Data,
    exclude_working_groups: bool = False,
    exclude_subteams: bool = False,
    include_project_groups: bool = False,
    only_leads: bool = False,
) -> list[str]:
    lines = []
    for team in sorted(data.teams(), key=lambda t: t.name):
        excluded = (
            (exclude_working_groups and team.kind is TeamKind.WORKING_GROUP)
            or (not include_project_groups and team.kind is TeamKind.PROJECT_GROUP)
            or (exclude_subteams and team.subteam_of is not None)
            or team.kind is TeamKind.MARKER_TEAM
        )
        if excluded:
            continue
        lines.append(f"{team.name} ({team.kind}):")
        if team.subteam_of is not None:
            lines.append(f"  parent team: {team.subteam_of}")
        lines.append("  members: ")
        lines.extend(dump_team_members(team, data, only_leads, 1))
    return lines


def dump_team(data: Data, name: str) -> list[str]:
    team = data.team(name)
    if team is None:
        raise DataError("unknown team")
    return dump_team_members(team, data, False, 0)


def dump_list(data: Data, name: str) -> list[str]:
    mailing = data.list(name)
    if mailing is None:
        raise DataError("unknown list")
    return sorted(mailing.emails)


def dump_website(data: Data) -> list[str]:
    """Website translation entries in Fluent (.ftl) form."""
    lines = ["# Autogenerated by `teamrepo dump-website`"]
    roles: dict[str, str] = {}
    for team in sorted(data.teams(), key=lambda t: t.name):
        if team.website is not None:
            lines.append(f"governance-team-{team.name}-name = {team.website.name}")
            lines.append(
                f"governance-team-{team.name}-description = {team.website.description}"
            )
            lines.append("")
        for role in team.roles:
            roles[role.id] = role.description
    lines.extend(
        f"governance-role-{role_id} = {description}"
        for role_id, description in sorted(roles.items())
    )
    return lines