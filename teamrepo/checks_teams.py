"""Consistency checks on teams, their members, roles and hierarchy."""

from __future__ import annotations

import json
from collections.abc import Callable, Iterable
from itertools import chain
from string import ascii_lowercase, digits
from typing import Any, TypeVar

from .people import TeamKind
from .permissions import DataError

_T = TypeVar("_T")

_KEBAB_CHARS = frozenset(ascii_lowercase + digits + "-")


def collect(
    items: Iterable[_T],
    errors: list[str],
    func: Callable[[_T, list[str]], Any],
) -> None:
    """Run ``func`` on every item, recording raised data errors in ``errors``."""
    for item in items:
        try:
            func(item, errors)
        except DataError as err:
            errors.append(str(err))


def ascii_kebab_case(s: str) -> bool:
    """Whether ``s`` holds only lowercase ASCII letters, digits and hyphens."""
    return all(char in _KEBAB_CHARS for char in s)


def _ensure_prefix(team, kind: TeamKind, prefix: str, exceptions: tuple[str, ...]) -> None:
    if team.name in exceptions:
        return
    if team.kind is kind and not team.name.startswith(prefix):
        raise DataError(f"{kind} `{team.name}`'s name doesn't start with `{prefix}`")
    if team.kind is not kind and team.name.startswith(prefix):
        raise DataError(
            f"{team.kind} `{team.name}` seems like a {kind} "
            f"(since it has the `{prefix}` prefix)"
        )


def validate_name_prefixes(data, errors: list[str]) -> None:
    """Working groups start with `wg-`, project groups with `project-`."""

    def check(team, _):
        _ensure_prefix(team, TeamKind.WORKING_GROUP, "wg-", ("wg-leads",))
        _ensure_prefix(
            team, TeamKind.PROJECT_GROUP, "project-", ("project-group-leads",)
        )

    collect(data.teams(), errors, check)


def validate_subteam_of(data, errors: list[str]) -> None:
    """`subteam-of` points to an existing team and forms no cycle."""

    def check(team, _):
        visited: list[str] = []
        while team.subteam_of is not None:
            parent = team.subteam_of
            visited.append(team.name)
            if parent in visited:
                chain_text = " => ".join(visited)
                raise DataError(
                    f"team `{parent}` is a subteam of itself: {chain_text} => {parent}"
                )
            parent_team = data.team(parent)
            if parent_team is None:
                raise DataError(
                    f"the parent of team `{team.name}` doesn't exist: `{parent}`"
                )
            team = parent_team

    collect(data.teams(), errors, check)


def validate_team_leads(data, errors: list[str]) -> None:
    """Team leads are members of the teams they lead."""

    def check(team, errors):
        members = team.members(data)

        def check_lead(lead, _):
            if lead not in members:
                raise DataError(
                    f"`{lead}` leads team `{team.name}`, but is not a member of it"
                )

        collect(sorted(team.leads()), errors, check_lead)

    collect(data.teams(), errors, check)


def validate_team_members(data, errors: list[str]) -> None:
    """Every team member has a person file."""

    def check(team, errors):
        def check_member(member, _):
            if data.person(member) is None:
                raise DataError(
                    f"person `{member}` is member of team `{team.name}` but doesn't exist"
                )

        collect(sorted(team.members(data)), errors, check_member)

    collect(data.teams(), errors, check)


def validate_alumni(data, errors: list[str]) -> None:
    """The alumni team is automatic, and other teams keep an alumni list."""
    alumni_team = data.team("alumni")
    if alumni_team is None:
        errors.append("cannot find an 'alumni' team")
        return
    if alumni_team.explicit_members():
        errors.append(
            "'alumni' team must not have explicit members; "
            "move them to the appropriate team's alumni entry"
        )

    def check(team, _):
        people = team.people
        if people.alumni is not None:
            return
        exempt_kind = team.kind is TeamKind.MARKER_TEAM
        exempt_composition = not people.members and (
            people.include_team_leads
            or people.include_wg_leads
            or people.include_project_group_leads
            or people.include_all_team_members
            or people.include_all_alumni
            or bool(people.included_teams)
        )
        if not (exempt_kind or exempt_composition):
            raise DataError(f"team '{team.name}' needs an `alumni = []` entry")

    collect(data.teams(), errors, check)


def validate_archived_teams(data, errors: list[str]) -> None:
    """Archived teams have no current members."""

    def check(team, _):
        if team.members(data):
            raise DataError(
                f"archived team '{team.name}' must not have current members; "
                "please move members to that team's alumni"
            )

    collect(data.archived_teams(), errors, check)


def validate_inactive_members(data, errors: list[str]) -> None:
    """Every person is referenced somewhere, or holds access of some kind."""
    referenced: set[str] = set()

    def gather(team, _):
        referenced.update(team.members(data))
        referenced.update(alum.github for alum in team.explicit_alumni())
        for mailing in team.raw_lists:
            referenced.update(mailing.extra_people)

    collect(chain(data.teams(), data.archived_teams()), errors, gather)

    all_members = {person.github for person in data.people()}
    individual_contributors = {
        name for repo in data.all_repos() for name in repo.access.individuals
    }
    try:
        zulip_groups = data.zulip_groups()
    except DataError as err:
        errors.append(f"could not get all the Zulip groups: {err}")
        return
    extra_zulip_people = {
        member.github
        for group in zulip_groups.values()
        for member in group.members
        if member.github is not None
    }

    def check(name, _):
        person = data.person(name)
        if (
            not person.permissions.has_any()
            and name not in individual_contributors
            and name not in extra_zulip_people
        ):
            raise DataError(
                f"person `{name}` is not a member of any team (active or archived), "
                "has no permissions, is not an individual contributor to any repo, and "
                "is not included as a extra person in a Zulip group"
            )

    collect(sorted(all_members - referenced), errors, check)


def validate_team_names(data, errors: list[str]) -> None:
    """Team names are lowercase alphanumeric with hyphens."""

    def check(team, _):
        if not ascii_kebab_case(team.name):
            raise DataError(
                f"team name `{team.name}` can only be alphanumeric with hyphens"
            )

    collect(data.teams(), errors, check)


def validate_subteam_of_required(data, errors: list[str]) -> None:
    """Every team is either top-level or has a parent."""

    def check(team, _):
        top_level = bool(team.top_level)
        if top_level and team.subteam_of is not None:
            raise DataError(
                f"team `{team.name}` specifies both top-level=true and subteam-of, "
                "it should only specify one or the other"
            )
        if top_level and team.kind is not TeamKind.TEAM:
            raise DataError(
                f"team `{team.name}` is top-level, but is a `{team.kind}` team kind, "
                'it must be a normal team (don\'t specify "kind")'
            )
        if (
            team.kind is not TeamKind.MARKER_TEAM
            and team.subteam_of is None
            and team.name not in ("leadership-council", "core")
            and not top_level
        ):
            raise DataError(
                f"team `{team.name}` must specify `subteam-of` or top-level=true"
            )

    collect(data.teams(), errors, check)


def validate_discord_team_members_have_discord_ids(data, errors: list[str]) -> None:
    """Members of teams with Discord roles have Discord ids."""

    def check(team, _):
        if team.discord_roles is None or team.name == "all":
            return
        members = team.members(data)
        if len(members) != len(team.discord_ids(data)):
            missing = sorted(
                name
                for name in members
                if (person := data.person(name)) is not None and person.discord_id is None
            )
            raise DataError(
                f'the following members of the "{team.name}" team do not have '
                f"discord_ids: {', '.join(missing)}"
            )

    collect(data.teams(), errors, check)


def validate_member_roles(data, errors: list[str]) -> None:
    """Roles are well named, consistently described and assigned only when defined."""
    role_descriptions: dict[str, str] = {}

    def check(team, errors):
        role_ids: set[str] = set()
        for role in team.roles:
            if not ascii_kebab_case(role.id):
                errors.append(
                    f"role id {json.dumps(role.id, ensure_ascii=False)} "
                    "must be alphanumeric with hyphens"
                )
            known = role_descriptions.setdefault(role.id, role.description)
            if known != role.description:
                errors.append(
                    f"role '{role.id}' has inconsistent description between "
                    "different teams; if this is intentional, you must give "
                    "those roles different ids"
                )
            if role.id in role_ids:
                errors.append(f"role '{role.id}' is duplicated in team '{team.name}'")
            role_ids.add(role.id)

        for member in team.explicit_members():
            for role in member.roles:
                if role not in role_ids:
                    errors.append(
                        f"person '{member.github}' in team '{team.name}' "
                        f"has unrecognized role '{role}'"
                    )

    collect(chain(data.teams(), data.archived_teams()), errors, check)


def validate_website(data, errors: list[str]) -> None:
    """Every team except marker teams has website data."""

    def check(team, _):
        if team.kind is TeamKind.MARKER_TEAM:
            return
        if team.website is None:
            raise DataError(f"team `{team.name}` should have a `[website]` table")

    collect(data.teams(), errors, check)