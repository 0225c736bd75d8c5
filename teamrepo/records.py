"""Repository, website, role and rfcbot records from the data files."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .permissions import (
    _as_bool,
    _as_enum,
    _as_int,
    _as_str,
    _as_uint,
    _list_of,
    _map_of,
    _nested,
    _Table,
)


class Bot(Enum):
    BORS = "bors"
    HIGHFIVE = "highfive"
    RUSTBOT = "rustbot"
    RUST_TIMER = "rust-timer"
    RFCBOT = "rfcbot"
    CRATERBOT = "craterbot"
    GLACIERBOT = "glacierbot"
    LOG_ANALYZER = "log-analyzer"
    RENOVATE = "renovate"


class RepoPermission(Enum):
    TRIAGE = "triage"
    WRITE = "write"
    MAINTAIN = "maintain"
    ADMIN = "admin"


class MergeBot(Enum):
    HOMU = "homu"


@dataclass
class BranchProtection:
    pattern: str
    ci_checks: list[str] = field(default_factory=list)
    dismiss_stale_review: bool = False
    required_approvals: int | None = None
    pr_required: bool = True
    allowed_merge_teams: list[str] = field(default_factory=list)
    merge_bots: list[MergeBot] = field(default_factory=list)

    @classmethod
    def from_dict(cls, raw: Any) -> BranchProtection:
        table = _Table(
            raw,
            "branch protection",
            (
                "pattern",
                "ci-checks",
                "dismiss-stale-review",
                "required-approvals",
                "pr-required",
                "allowed-merge-teams",
                "merge-bots",
            ),
        )
        strings = _list_of(_as_str)
        return cls(
            pattern=table.take("pattern", _as_str),
            ci_checks=table.take("ci-checks", strings, []),
            dismiss_stale_review=table.take("dismiss-stale-review", _as_bool, False),
            required_approvals=table.take("required-approvals", _as_uint, None),
            pr_required=table.take("pr-required", _as_bool, True),
            allowed_merge_teams=table.take("allowed-merge-teams", strings, []),
            merge_bots=table.take("merge-bots", _list_of(_as_enum(MergeBot)), []),
        )


@dataclass
class RepoAccess:
    teams: dict[str, RepoPermission]
    individuals: dict[str, RepoPermission] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, raw: Any) -> RepoAccess:
        table = _Table(raw, "access", ("teams", "individuals"))
        permission_map = _map_of(_as_enum(RepoPermission))
        return cls(
            teams=table.take("teams", permission_map),
            individuals=table.take("individuals", permission_map, {}),
        )


@dataclass
class Repo:
    org: str
    name: str
    description: str
    bots: list[Bot]
    access: RepoAccess
    homepage: str | None = None
    private_non_synced: bool | None = None
    branch_protections: list[BranchProtection] = field(default_factory=list)

    @classmethod
    def from_dict(cls, raw: Any) -> Repo:
        table = _Table(
            raw,
            "repo",
            (
                "org",
                "name",
                "description",
                "homepage",
                "private-non-synced",
                "bots",
                "access",
                "branch-protections",
            ),
        )
        return cls(
            org=table.take("org", _as_str),
            name=table.take("name", _as_str),
            description=table.take("description", _as_str),
            homepage=table.take("homepage", _as_str, None),
            private_non_synced=table.take("private-non-synced", _as_bool, None),
            bots=table.take("bots", _list_of(_as_enum(Bot))),
            access=table.take("access", _nested(RepoAccess.from_dict)),
            branch_protections=table.take(
                "branch-protections",
                _list_of(_nested(BranchProtection.from_dict)),
                [],
            ),
        )


@dataclass(frozen=True)
class DiscordRole:
    name: str
    color: str | None = None

    @classmethod
    def from_dict(cls, raw: Any) -> DiscordRole:
        table = _Table(raw, "discord role", ("name", "color"))
        return cls(
            name=table.take("name", _as_str),
            color=table.take("color", _as_str, None),
        )


@dataclass(frozen=True)
class DiscordInvite:
    url: str
    channel: str


@dataclass(frozen=True)
class WebsiteData:
    name: str
    description: str
    page: str | None = None
    email: str | None = None
    repo: str | None = None
    discord_invite: str | None = None
    discord_name: str | None = None
    matrix_room: str | None = None
    zulip_stream: str | None = None
    weight: int = 0

    @classmethod
    def from_dict(cls, raw: Any) -> WebsiteData:
        optional = (
            "page",
            "email",
            "repo",
            "discord-invite",
            "discord-name",
            "matrix-room",
            "zulip-stream",
        )
        table = _Table(raw, "website", ("name", "description", *optional, "weight"))
        return cls(
            name=table.take("name", _as_str),
            description=table.take("description", _as_str),
            weight=table.take("weight", _as_int, 0),
            **{key.replace("-", "_"): table.take(key, _as_str, None) for key in optional},
        )

    def discord(self) -> DiscordInvite | None:
        if self.discord_invite is not None and self.discord_name is not None:
            return DiscordInvite(url=self.discord_invite, channel=self.discord_name)
        return None


@dataclass(frozen=True)
class MemberRole:
    id: str
    description: str

    @classmethod
    def from_dict(cls, raw: Any) -> MemberRole:
        table = _Table(raw, "role", ("id", "description"))
        return cls(
            id=table.take("id", _as_str),
            description=table.take("description", _as_str),
        )


@dataclass
class RfcbotData:
    label: str
    name: str
    ping: str
    exclude_members: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, raw: Any) -> RfcbotData:
        table = _Table(raw, "rfcbot", ("label", "name", "ping", "exclude-members"))
        return cls(
            label=table.take("label", _as_str),
            name=table.take("name", _as_str),
            ping=table.take("ping", _as_str),
            exclude_members=table.take("exclude-members", _list_of(_as_str), []),
        )