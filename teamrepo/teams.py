"""Teams, their membership rules and what they expand to."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import IntEnum
from itertools import chain
from typing import Any

from .people import EmailState, Person, TeamKind
from .permissions import (
    DataError,
    Permissions,
    _as_bool,
    _as_enum,
    _as_str,
    _as_uint,
    _list_of,
    _nested,
    _Table,
)
from .records import DiscordRole, MemberRole, RfcbotData, WebsiteData

_strings = _list_of(_as_str)


@dataclass
class TeamMember:
    """An explicitly listed member: a bare GitHub name or a table with roles."""

    github: str
    roles: list[str] = field(default_factory=list)

    @classmethod
    def from_value(cls, value: Any) -> TeamMember:
        if isinstance(value, str):
            return cls(github=value)
        if isinstance(value, Mapping):
            table = _Table(value, "team member", ("github", "roles"))
            return cls(
                github=table.take("github", _as_str),
                roles=table.take("roles", _strings),
            )
        raise DataError(
            f"team member: invalid type: expected a string or a table, "
            f"found {type(value).__name__}"
        )


_PEOPLE_FIELDS = (
    "leads",
    "members",
    "alumni",
    "included-teams",
    "include-team-leads",
    "include-wg-leads",
    "include-project-group-leads",
    "include-all-team-members",
    "include-all-alumni",
)


@dataclass
class TeamPeople:
    leads: list[str]
    members: list[TeamMember]
    alumni: list[TeamMember] | None = None
    included_teams: list[str] = field(default_factory=list)
    include_team_leads: bool = False
    include_wg_leads: bool = False
    include_project_group_leads: bool = False
    include_all_team_members: bool = False
    include_all_alumni: bool = False

    @classmethod
    def from_dict(cls, raw: Any) -> TeamPeople:
        table = _Table(raw, "people", _PEOPLE_FIELDS)
        members = _list_of(_nested(TeamMember.from_value))
        flags = {
            key.replace("-", "_"): table.take(key, _as_bool, False)
            for key in _PEOPLE_FIELDS[4:]
        }
        return cls(
            leads=table.take("leads", _strings),
            members=table.take("members", members),
            alumni=table.take("alumni", members, None),
            included_teams=table.take("included-teams", _strings, []),
            **flags,
        )


@dataclass
class GitHubData:
    orgs: list[str]
    team_name: str | None = None
    extra_teams: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, raw: Any) -> GitHubData:
        table = _Table(raw, "github", ("team-name", "orgs", "extra-teams"))
        return cls(
            orgs=table.take("orgs", _strings),
            team_name=table.take("team-name", _as_str, None),
            extra_teams=table.take("extra-teams", _strings, []),
        )


@dataclass
class TeamList:
    address: str
    include_team_members: bool = True
    include_subteam_members: bool = False
    extra_people: list[str] = field(default_factory=list)
    extra_emails: list[str] = field(default_factory=list)
    extra_teams: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, raw: Any) -> TeamList:
        table = _Table(
            raw,
            "list",
            (
                "address",
                "include-team-members",
                "include-subteam-members",
                "extra-people",
                "extra-emails",
                "extra-teams",
            ),
        )
        return cls(
            address=table.take("address", _as_str),
            include_team_members=table.take("include-team-members", _as_bool, True),
            include_subteam_members=table.take(
                "include-subteam-members", _as_bool, False
            ),
            extra_people=table.take("extra-people", _strings, []),
            extra_emails=table.take("extra-emails", _strings, []),
            extra_teams=table.take("extra-teams", _strings, []),
        )


@dataclass
class RawZulipCommon:
    name: str
    include_team_members: bool = True
    extra_people: list[str] = field(default_factory=list)
    extra_zulip_ids: list[int] = field(default_factory=list)
    extra_teams: list[str] = field(default_factory=list)
    excluded_people: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, raw: Any) -> RawZulipCommon:
        table = _Table(
            raw,
            "zulip",
            (
                "name",
                "include-team-members",
                "extra-people",
                "extra-zulip-ids",
                "extra-teams",
                "excluded-people",
            ),
        )
        return cls(
            name=table.take("name", _as_str),
            include_team_members=table.take("include-team-members", _as_bool, True),
            extra_people=table.take("extra-people", _strings, []),
            extra_zulip_ids=table.take("extra-zulip-ids", _list_of(_as_uint), []),
            extra_teams=table.take("extra-teams", _strings, []),
            excluded_people=table.take("excluded-people", _strings, []),
        )


@dataclass
class RawZulipGroup:
    common: RawZulipCommon


@dataclass
class RawZulipStream:
    common: RawZulipCommon


@dataclass
class List:
    """A mailing list with its resolved addresses."""

    address: str
    emails: list[str] = field(default_factory=list)


class _ZulipMemberKind(IntEnum):
    WITH_ID = 0
    JUST_ID = 1
    WITHOUT_ID = 2


@dataclass(frozen=True, order=True)
class ZulipMember:
    """A Zulip group or stream member; ordered by kind, then name, then id."""

    kind: _ZulipMemberKind
    github: str | None = None
    zulip_id: int | None = None

    @classmethod
    def with_id(cls, github: str, zulip_id: int) -> ZulipMember:
        return cls(_ZulipMemberKind.WITH_ID, github, zulip_id)

    @classmethod
    def just_id(cls, zulip_id: int) -> ZulipMember:
        return cls(_ZulipMemberKind.JUST_ID, None, zulip_id)

    @classmethod
    def without_id(cls, github: str) -> ZulipMember:
        return cls(_ZulipMemberKind.WITHOUT_ID, github, None)


@dataclass
class ZulipCommon:
    name: str
    includes_team_members: bool
    members: list[ZulipMember]


@dataclass
class ZulipGroup(ZulipCommon):
    pass


@dataclass
class ZulipStream(ZulipCommon):
    pass


@dataclass
class GitHubTeam:
    """A GitHub team as configured; sorts by organisation, then name."""

    org: str
    name: str
    members: list[tuple[str, int]]

    def __lt__(self, other: GitHubTeam) -> bool:
        return (self.org, self.name) < (other.org, other.name)


_TEAM_FIELDS = (
    "name",
    "kind",
    "subteam-of",
    "top-level",
    "people",
    "permissions",
    "leads-permissions",
    "github",
    "rfcbot",
    "website",
    "roles",
    "lists",
    "zulip-groups",
    "zulip-streams",
    "discord-roles",
)


def _zulip_group(raw: Any) -> RawZulipGroup:
    return RawZulipGroup(RawZulipCommon.from_dict(raw))


def _zulip_stream(raw: Any) -> RawZulipStream:
    return RawZulipStream(RawZulipCommon.from_dict(raw))


@dataclass
class Team:
    """One team definition from the teams/ directory."""

    name: str
    people: TeamPeople
    kind: TeamKind = TeamKind.TEAM
    subteam_of: str | None = None
    top_level: bool | None = None
    permissions: Permissions = field(default_factory=Permissions)
    leads_permissions: Permissions = field(default_factory=Permissions)
    github: list[GitHubData] = field(default_factory=list)
    rfcbot: RfcbotData | None = None
    website: WebsiteData | None = None
    roles: list[MemberRole] = field(default_factory=list)
    raw_lists: list[TeamList] = field(default_factory=list)
    raw_zulip_groups: list[RawZulipGroup] = field(default_factory=list)
    raw_zulip_streams: list[RawZulipStream] = field(default_factory=list)
    discord_roles: list[DiscordRole] | None = None

    @classmethod
    def from_dict(cls, raw: Any) -> Team:
        table = _Table(raw, "team", _TEAM_FIELDS)
        return cls(
            name=table.take("name", _as_str),
            kind=table.take("kind", _as_enum(TeamKind), TeamKind.TEAM),
            subteam_of=table.take("subteam-of", _as_str, None),
            top_level=table.take("top-level", _as_bool, None),
            people=table.take("people", _nested(TeamPeople.from_dict)),
            permissions=table.take(
                "permissions", _nested(Permissions.from_dict), Permissions()
            ),
            leads_permissions=table.take(
                "leads-permissions", _nested(Permissions.from_dict), Permissions()
            ),
            github=table.take("github", _list_of(_nested(GitHubData.from_dict)), []),
            rfcbot=table.take("rfcbot", _nested(RfcbotData.from_dict), None),
            website=table.take("website", _nested(WebsiteData.from_dict), None),
            roles=table.take("roles", _list_of(_nested(MemberRole.from_dict)), []),
            raw_lists=table.take("lists", _list_of(_nested(TeamList.from_dict)), []),
            raw_zulip_groups=table.take(
                "zulip-groups", _list_of(_nested(_zulip_group)), []
            ),
            raw_zulip_streams=table.take(
                "zulip-streams", _list_of(_nested(_zulip_stream)), []
            ),
            discord_roles=table.take(
                "discord-roles", _list_of(_nested(DiscordRole.from_dict)), None
            ),
        )

    def is_parent_of(self, data, subteam: Team) -> bool:
        """Whether ``subteam`` sits somewhere below this team."""
        visited: list[str] = []
        team: Team | None = subteam
        while team is not None:
            parent = team.subteam_of
            if parent is None:
                return False
            if parent == self.name:
                return True
            visited.append(team.name)
            if parent in visited:
                return False
            team = data.team(parent)
        return False

    def leads(self) -> set[str]:
        return set(self.people.leads)

    def members(self, data) -> set[str]:
        """All GitHub names belonging to the team, after expanding inclusions."""
        members = {member.github for member in self.people.members}

        for name in self.people.included_teams:
            included = data.team(name)
            if included is None:
                raise DataError(
                    f"team '{self.name}' includes members from non-existent team '{name}'"
                )
            members |= included.members(data)

        lead_kinds = (
            (self.people.include_team_leads, TeamKind.TEAM),
            (self.people.include_wg_leads, TeamKind.WORKING_GROUP),
            (self.people.include_project_group_leads, TeamKind.PROJECT_GROUP),
        )
        for enabled, kind in lead_kinds:
            if enabled:
                for team in data.teams():
                    if team.name != self.name and team.kind is kind:
                        members |= team.leads()

        if self.people.include_all_team_members:
            for team in data.teams():
                if (
                    team.kind is not TeamKind.TEAM
                    or team.name == self.name
                    or team.is_alumni_team()
                ):
                    continue
                members |= team.members(data)

        if self.is_alumni_team():
            active = data.active_members()
            members.update(
                alum.github
                for team in chain(data.teams(), data.archived_teams())
                for alum in team.explicit_alumni()
                if alum.github not in active
            )
        return members

    def lists(self, data) -> list[List]:
        result = []
        for raw in self.raw_lists:
            members = self.members(data) if raw.include_team_members else set()
            if raw.include_subteam_members:
                for subteam in data.subteams_of(self.name):
                    members |= subteam.members(data)
            members.update(raw.extra_people)
            for name in raw.extra_teams:
                extra = data.team(name)
                if extra is None:
                    raise DataError(f"team {name} is missing")
                members |= extra.members(data)

            emails = []
            for member in members:
                person = data.person(member)
                if person is None:
                    raise DataError(f"member {member} is missing")
                email = person.email()
                if email.state is EmailState.PRESENT:
                    emails.append(email.address)
            emails.extend(raw.extra_emails)
            result.append(List(raw.address, emails))
        return result

    def _expand_zulip_membership(
        self, data, common: RawZulipCommon, label: str
    ) -> list[ZulipMember]:
        members = self.members(data) if common.include_team_members else set()
        members.update(common.extra_people)
        for name in common.extra_teams:
            extra = data.team(name)
            if extra is None:
                raise DataError(f"team {name} is missing")
            members |= extra.members(data)
        for excluded in common.excluded_people:
            if excluded not in members:
                raise DataError(
                    f"'{excluded}' was specifically excluded from the Zulip {label} "
                    f"'{common.name}' but they were already not included"
                )
            members.discard(excluded)

        result = []
        for member in members:
            person = data.person(member)
            if person is None:
                raise DataError(f"{member} does not have a person configuration")
            if person.zulip_id is not None:
                result.append(ZulipMember.with_id(person.github, person.zulip_id))
            else:
                result.append(ZulipMember.without_id(person.github))
        result.extend(ZulipMember.just_id(extra) for extra in common.extra_zulip_ids)
        return result

    def zulip_groups(self, data) -> list[ZulipGroup]:
        return [
            ZulipGroup(
                name=raw.common.name,
                includes_team_members=raw.common.include_team_members,
                members=self._expand_zulip_membership(data, raw.common, "group"),
            )
            for raw in self.raw_zulip_groups
        ]

    def zulip_streams(self, data) -> list[ZulipStream]:
        return [
            ZulipStream(
                name=raw.common.name,
                includes_team_members=raw.common.include_team_members,
                members=self._expand_zulip_membership(data, raw.common, "stream"),
            )
            for raw in self.raw_zulip_streams
        ]

    def github_teams(self, data) -> list[GitHubTeam]:
        def identities(names):
            return [
                (person.github, person.github_id)
                for name in names
                if (person := data.person(name)) is not None
            ]

        result = []
        for github in self.github:
            members = identities(self.members(data))
            for name in github.extra_teams:
                extra = data.team(name)
                if extra is None:
                    raise DataError(f"missing team {name}")
                members.extend(identities(extra.members(data)))
            members.sort()
            team_name = github.team_name if github.team_name is not None else self.name
            result.extend(
                GitHubTeam(org=org, name=team_name, members=list(members))
                for org in github.orgs
            )
        return result

    def discord_ids(self, data) -> list[int]:
        return [
            person.discord_id
            for name in self.members(data)
            if (person := data.person(name)) is not None
            and person.discord_id is not None
        ]

    def is_alumni_team(self) -> bool:
        return self.people.include_all_alumni

    def explicit_members(self) -> list[TeamMember]:
        return self.people.members

    def explicit_alumni(self) -> list[TeamMember]:
        return self.people.alumni or []

    def contains_person(self, data, person: Person) -> bool:
        return person.github in self.members(data)