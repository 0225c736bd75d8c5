"""Reports about people, permissions and individual repository access."""

from __future__ import annotations

from enum import Enum

from .data import Data
from .people import EmailState
from .permissions import DataError, Permissions, allowed_people


class GroupBy(Enum):
    """How individual repository access is grouped."""

    PERSON = "person"
    REPO = "repo"


def show_person(data: Data, github_username: str) -> list[str]:
    """Describe one person: contacts, teams and effective permissions."""
    person = data.person(github_username)
    if person is None:
        raise DataError("unknown person")

    lines = [f"-- {person.name} --", "", f"github: @{person.github}"]
    if person.zulip_id is not None:
        lines.append(f"zulip_id: {person.zulip_id}")
    email = person.email()
    if email.state is EmailState.PRESENT:
        lines.append(f"email: {email.address}")
    lines.append("")

    # repo -> the Permissions object whose bors entry for that repo wins
    bors: dict[str, Permissions] = {}
    booleans: dict[str, bool] = {}

    def merge(permissions: Permissions) -> None:
        for repo in permissions.bors:
            bors[repo] = permissions
        booleans.update(permissions.booleans)

    merge(person.permissions)

    teams = sorted(
        (team for team in data.teams() if team.contains_person(data, person)),
        key=lambda team: team.name,
    )
    lines.append("teams:")
    if not teams:
        lines.append("  (none)")
    for team in teams:
        lines.append(f"  - {team.name}")
        merge(team.permissions)
        if person.github in team.leads():
            merge(team.leads_permissions)
    lines.append("")

    lines.append("bors permissions:")
    if not bors:
        lines.append("  (none)")
    for repo, source in sorted(bors.items()):
        lines.append(f"  - {repo}")
        if source.has_directly(f"bors.{repo}.review"):
            lines.append("    - review")
        if source.has_directly(f"bors.{repo}.try"):
            lines.append("    - try")
    lines.append("")

    granted = sorted(key for key, value in booleans.items() if value)
    lines.append("other permissions:")
    if not granted:
        lines.append("  (none)")
    lines.extend(f"  - {key}" for key in granted)
    return lines


def dump_permission(data: Data, name: str) -> list[str]:
    """GitHub names of everyone holding a permission, sorted."""
    if name not in Permissions.available(data.config):
        raise DataError(f"unknown permission: {name}")
    return sorted(person.github for person in allowed_people(data, name))


def dump_individual_access(data: Data, group_by: GroupBy = GroupBy.REPO) -> list[str]:
    """Individual repository access, grouped by person or by repository."""
    group_by = GroupBy(group_by)
    grouped: dict[str, list[tuple[str, object]]] = {}
    for repo in data.repos():
        repo_name = f"{repo.org}/{repo.name}"
        for user, access in repo.access.individuals.items():
            if group_by is GroupBy.PERSON:
                grouped.setdefault(user, []).append((repo_name, access))
            else:
                grouped.setdefault(repo_name, []).append((user, access))

    lines = []
    for key in sorted(grouped):
        lines.append(key)
        for name, access in sorted(grouped[key], key=lambda entry: entry[0]):
            lines.append(f"\t {name}: {access.value.capitalize()}")
    return lines