"""Permission grants attached to people and teams, and who ends up holding them."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class DataError(Exception):
    """Raised when the team data is malformed or inconsistent."""


_REQUIRED = object()

_Checker = Callable[[Any, str], Any]


def _invalid(where: str, expected: str, value: Any) -> DataError:
    return DataError(
        f"{where}: invalid type: expected {expected}, found {type(value).__name__}"
    )


def _as_str(value: Any, where: str) -> str:
    if not isinstance(value, str):
        raise _invalid(where, "a string", value)
    return value


def _as_bool(value: Any, where: str) -> bool:
    if not isinstance(value, bool):
        raise _invalid(where, "a boolean", value)
    return value


def _as_int(value: Any, where: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise _invalid(where, "an integer", value)
    return value


def _as_uint(value: Any, where: str) -> int:
    number = _as_int(value, where)
    if number < 0:
        raise DataError(
            f"{where}: invalid value: expected a non-negative integer, found {number}"
        )
    return number


def _list_of(check: _Checker) -> _Checker:
    def convert(value: Any, where: str) -> list:
        if not isinstance(value, list):
            raise _invalid(where, "an array", value)
        return [check(item, f"{where}[{index}]") for index, item in enumerate(value)]

    return convert


def _map_of(check: _Checker) -> _Checker:
    def convert(value: Any, where: str) -> dict:
        if not isinstance(value, Mapping):
            raise _invalid(where, "a table", value)
        return {
            _as_str(key, where): check(item, f"{where}.{key}")
            for key, item in value.items()
        }

    return convert


def _as_enum(enum_cls: type[Enum]) -> _Checker:
    def convert(value: Any, where: str) -> Enum:
        text = _as_str(value, where)
        try:
            return enum_cls(text)
        except ValueError:
            expected = ", ".join(f"`{member.value}`" for member in enum_cls)
            raise DataError(
                f"{where}: unknown variant `{text}`, expected one of {expected}"
            ) from None

    return convert


def _nested(parse: Callable[[Any], Any]) -> _Checker:
    def convert(value: Any, where: str) -> Any:
        try:
            return parse(value)
        except DataError as err:
            raise DataError(f"{where}: {err}") from err

    return convert


class _Table:
    """Reads typed fields out of a parsed TOML table."""

    def __init__(self, raw: Any, where: str, fields: Iterable[str] | None = None):
        if not isinstance(raw, Mapping):
            raise _invalid(where, "a table", raw)
        if fields is not None:
            allowed = tuple(fields)
            for key in raw:
                if key not in allowed:
                    expected = ", ".join(f"`{name}`" for name in allowed)
                    raise DataError(
                        f"{where}: unknown field `{key}`, expected one of {expected}"
                    )
        self._raw = raw
        self._where = where

    def take(self, key: str, check: _Checker, default: Any = _REQUIRED) -> Any:
        if key not in self._raw:
            if default is _REQUIRED:
                raise DataError(f"{self._where}: missing field `{key}`")
            return default
        return check(self._raw[key], f"{self._where}.{key}")

    def items(self):
        return self._raw.items()


@dataclass(frozen=True)
class BorsAcl:
    """Bors rights on one repository."""

    review: bool = False
    try_: bool = False

    @classmethod
    def from_dict(cls, raw: Any) -> BorsAcl:
        table = _Table(raw, "bors permissions", ("review", "try"))
        return cls(
            review=table.take("review", _as_bool, False),
            try_=table.take("try", _as_bool, False),
        )


@dataclass
class Permissions:
    """Boolean permissions plus per-repository bors permissions."""

    bors: dict[str, BorsAcl] = field(default_factory=dict)
    booleans: dict[str, bool] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, raw: Any) -> Permissions:
        table = _Table(raw, "permissions")
        bors = table.take("bors", _map_of(_nested(BorsAcl.from_dict)), {})
        booleans = {
            key: _as_bool(value, f"permissions.{key}")
            for key, value in table.items()
            if key != "bors"
        }
        return cls(bors=bors, booleans=booleans)

    @staticmethod
    def available(config) -> list[str]:
        """All permission names that the configuration knows about."""
        result = sorted(config.permissions_bools)
        for repo in sorted(config.permissions_bors_repos):
            result.append(f"bors.{repo}.review")
            result.append(f"bors.{repo}.try")
        return result

    def has(self, permission: str) -> bool:
        return self.has_directly(permission) or self.has_indirectly(permission)

    def has_directly(self, permission: str) -> bool:
        match permission.split("."):
            case [boolean]:
                return self.booleans.get(boolean, False)
            case ["bors", repo, "review"]:
                acl = self.bors.get(repo)
                return acl.review if acl is not None else False
            case ["bors", repo, "try"]:
                acl = self.bors.get(repo)
                return acl.try_ if acl is not None else False
            case _:
                return False

    def has_indirectly(self, permission: str) -> bool:
        match permission.split("."):
            case ["bors", repo, "try"]:
                acl = self.bors.get(repo)
                return acl.review if acl is not None else False
            case _:
                return False

    def has_any(self) -> bool:
        return any(self.booleans.values()) or any(
            acl.review or acl.try_ for acl in self.bors.values()
        )

    def validate(self, what: str, config) -> None:
        for boolean in sorted(self.booleans):
            if boolean not in config.permissions_bools:
                raise DataError(
                    f"unknown permission: {boolean} (maybe add it to config.toml?)"
                )
        for repo in sorted(self.bors):
            acl = self.bors[repo]
            if repo not in config.permissions_bors_repos:
                raise DataError(
                    f"unknown bors repository: {repo} (maybe add it to config.toml?)"
                )
            if acl.try_ and acl.review:
                raise DataError(
                    f"{what} has both the `bors.{repo}.review` and "
                    f"`bors.{repo}.try` permissions"
                )


def allowed_people(data, permission: str) -> list:
    """People holding a permission directly or through a team they belong to."""
    members_with_perms: set[str] = set()
    for team in data.teams():
        if team.permissions.has(permission):
            members_with_perms.update(team.members(data))
        if team.leads_permissions.has(permission):
            members_with_perms.update(team.leads())
    return [
        person
        for person in data.people()
        if person.github in members_with_perms or person.permissions.has(permission)
    ]