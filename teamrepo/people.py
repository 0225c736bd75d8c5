"""Repository configuration, people and team kinds."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any

from .permissions import (
    DataError,
    Permissions,
    _as_str,
    _as_uint,
    _list_of,
    _nested,
    _Table,
)


@dataclass(frozen=True)
class Config:
    """Global settings from config.toml."""

    allowed_mailing_lists_domains: frozenset[str]
    allowed_github_orgs: frozenset[str]
    permissions_bors_repos: frozenset[str]
    permissions_bools: frozenset[str]

    @classmethod
    def from_dict(cls, raw: Any) -> Config:
        names = [item.name for item in fields(cls)]
        keys = {name: name.replace("_", "-") for name in names}
        table = _Table(raw, "config", keys.values())
        strings = _list_of(_as_str)
        return cls(**{name: frozenset(table.take(key, strings)) for name, key in keys.items()})


class EmailState(Enum):
    MISSING = "missing"
    DISABLED = "disabled"
    PRESENT = "present"


@dataclass(frozen=True)
class Email:
    """A person's e-mail setting; ``address`` is set only when present."""

    state: EmailState
    address: str | None = None


def _as_email(value: Any, where: str) -> bool | str:
    if isinstance(value, (bool, str)):
        return value
    raise DataError(f"{where}: data did not match any variant of untagged enum EmailField")


_PERSON_FIELDS = (
    "name",
    "github",
    "github-id",
    "zulip-id",
    "irc",
    "email",
    "discord-id",
    "matrix",
    "permissions",
)


@dataclass
class Person:
    """One person from the people/ directory."""

    name: str
    github: str
    github_id: int
    zulip_id: int | None = None
    irc_nick: str | None = None
    email_field: bool | str | None = None
    discord_id: int | None = None
    matrix: str | None = None
    permissions: Permissions = field(default_factory=Permissions)

    @classmethod
    def from_dict(cls, raw: Any) -> Person:
        table = _Table(raw, "person", _PERSON_FIELDS)
        return cls(
            name=table.take("name", _as_str),
            github=table.take("github", _as_str),
            github_id=table.take("github-id", _as_uint),
            zulip_id=table.take("zulip-id", _as_uint, None),
            irc_nick=table.take("irc", _as_str, None),
            email_field=table.take("email", _as_email, None),
            discord_id=table.take("discord-id", _as_uint, None),
            matrix=table.take("matrix", _as_str, None),
            permissions=table.take(
                "permissions", _nested(Permissions.from_dict), Permissions()
            ),
        )

    def email(self) -> Email:
        match self.email_field:
            case False:
                return Email(EmailState.DISABLED)
            case True | None:
                return Email(EmailState.MISSING)
            case address:
                return Email(EmailState.PRESENT, address)

    def irc(self) -> str:
        return self.irc_nick if self.irc_nick is not None else self.github

    def validate(self) -> None:
        if self.email_field is True:
            raise DataError(f"`email = true` is not valid (for person {self.github})")


class TeamKind(Enum):
    TEAM = "team"
    WORKING_GROUP = "working-group"
    PROJECT_GROUP = "project-group"
    MARKER_TEAM = "marker-team"

    def __str__(self) -> str:
        return self.value.replace("-", " ")