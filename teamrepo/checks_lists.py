"""Consistency checks on mailing lists, addresses, permissions, rfcbot and Zulip."""

from __future__ import annotations

import re

from .checks_teams import collect
from .people import EmailState
from .permissions import DataError, Permissions

_LIST_ADDRESS = re.compile(r"[a-zA-Z0-9_.-]+@([a-zA-Z0-9_.-]+)")


def validate_list_email_addresses(data, errors: list[str]) -> None:
    """Every member of a team with a mailing list has an e-mail address."""

    def check(team, errors):
        lists = team.lists(data)
        if not lists:
            return
        addresses = ", ".join(mailing.address for mailing in lists)

        def check_member(name, _):
            person = data.person(name)
            if person is not None and person.email().state is EmailState.MISSING:
                raise DataError(
                    f"person `{person.github}` is a member of at least one mailing "
                    f"list ({addresses}) but has no email address"
                )

        collect(sorted(team.members(data)), errors, check_member)

    collect(data.teams(), errors, check)


def validate_list_extra_people(data, errors: list[str]) -> None:
    """People named in a list's extra-people exist."""

    def check(team, errors):
        def check_list(mailing, _):
            for name in mailing.extra_people:
                if data.person(name) is None:
                    raise DataError(
                        f"person `{name}` does not exist (in list `{mailing.address}`)"
                    )

        collect(team.raw_lists, errors, check_list)

    collect(data.teams(), errors, check)


def validate_list_extra_teams(data, errors: list[str]) -> None:
    """Teams named in a list's extra-teams exist."""

    def check(team, errors):
        def check_list(mailing, _):
            for name in mailing.extra_teams:
                if data.team(name) is None:
                    raise DataError(
                        f"team `{name}` does not exist (in list `{mailing.address}`)"
                    )

        collect(team.raw_lists, errors, check_list)

    collect(data.teams(), errors, check)


def validate_list_addresses(data, errors: list[str]) -> None:
    """List addresses are well formed and on a domain that is ours."""
    allowed = data.config.allowed_mailing_lists_domains

    def check(team, errors):
        def check_list(mailing, _):
            match = _LIST_ADDRESS.fullmatch(mailing.address)
            if match is None:
                raise DataError(f"invalid list address: `{mailing.address}`")
            if match.group(1) not in allowed:
                raise DataError(
                    f"list address on a domain we don't own: `{mailing.address}`"
                )

        collect(team.raw_lists, errors, check_list)

    collect(data.teams(), errors, check)


def validate_people_addresses(data, errors: list[str]) -> None:
    """People's e-mail addresses contain an @."""

    def check(person, _):
        email = person.email()
        if email.state is EmailState.PRESENT and "@" not in email.address:
            raise DataError(
                f"invalid email address of `{person.github}`: {email.address}"
            )

    collect(data.people(), errors, check)


def validate_duplicate_permissions(data, errors: list[str]) -> None:
    """Members don't hold a permission both directly and through their team."""
    available = Permissions.available(data.config)

    def check(team, errors):
        def check_member(name, _):
            person = data.person(name)
            if person is None:
                return
            for permission in available:
                if team.permissions.has(permission) and person.permissions.has_directly(
                    permission
                ):
                    raise DataError(
                        f"user `{name}` has the permission `{permission}` both "
                        f"explicitly and through the `{team.name}` team"
                    )

        collect(sorted(team.members(data)), errors, check_member)

    collect(data.teams(), errors, check)


def validate_permissions(data, errors: list[str]) -> None:
    """Every permission used is declared in the configuration."""

    def check_team(team, _):
        team.permissions.validate(f"team `{team.name}`", data.config)
        team.leads_permissions.validate(f"team `{team.name}`", data.config)

    def check_person(person, _):
        person.permissions.validate(f"user `{person.github}`", data.config)

    collect(data.teams(), errors, check_team)
    collect(data.people(), errors, check_person)


def validate_rfcbot_labels(data, errors: list[str]) -> None:
    """No two teams share an rfcbot label."""
    labels: set[str] = set()

    def check(team, errors):
        rfcbot = team.rfcbot
        if rfcbot is None:
            return
        if rfcbot.label in labels:
            errors.append(f"duplicate rfcbot label: {rfcbot.label}")
        labels.add(rfcbot.label)

    collect(data.teams(), errors, check)


def validate_rfcbot_exclude_members(data, errors: list[str]) -> None:
    """rfcbot exclude-members lists only team members, each once."""

    def check(team, errors):
        rfcbot = team.rfcbot
        if rfcbot is None:
            return
        members = team.members(data)
        seen: set[str] = set()

        def check_member(name, _):
            if name in seen:
                raise DataError(
                    f"duplicate member in `{team.name}` rfcbot.exclude-members: {name}"
                )
            seen.add(name)
            if name not in members:
                raise DataError(
                    f"person `{name}` is not a member of team `{team.name}` "
                    "(in rfcbot.exclude-members)"
                )

        collect(rfcbot.exclude_members, errors, check_member)

    collect(data.teams(), errors, check)


def validate_zulip_stream_name(data, errors: list[str]) -> None:
    """The website's Zulip stream is a name, not a link."""

    def check(team, _):
        stream = team.website.zulip_stream if team.website is not None else None
        if stream is not None and stream.startswith("https://"):
            raise DataError(
                f"the zulip stream name of the team `{team.name}` is a link: "
                "only the name is required"
            )

    collect(data.teams(), errors, check)


def _validate_unique(data, errors: list[str], expand, label: str) -> None:
    owners: dict[str, str] = {}

    def check(team, errors):
        try:
            items = expand(team)
        except DataError:
            items = []

        def check_item(item, _):
            other = owners.get(item.name)
            owners[item.name] = team.name
            if other is not None:
                raise DataError(
                    f"the Zulip {label} `{item.name}` is defined in both "
                    f"`{team.name}` and `{other}` team definitions"
                )

        collect(items, errors, check_item)

    collect(data.teams(), errors, check)


def _validate_zulip_ids(data, errors: list[str], expand, label: str) -> None:
    def check(team, errors):
        items = expand(team)
        if not any(item.includes_team_members for item in items):
            return

        def check_member(name, _):
            person = data.person(name)
            if person is not None and person.zulip_id is None:
                raise DataError(
                    f"person `{person.github}` in '{team.name}' is a member of a "
                    f"Zulip {label} but has no Zulip id"
                )

        collect(sorted(team.members(data)), errors, check_member)

    collect(data.teams(), errors, check)


def _validate_extra_people(data, errors: list[str], raw_items, label: str) -> None:
    def check(team, errors):
        def check_item(item, _):
            for name in item.common.extra_people:
                if data.person(name) is None:
                    raise DataError(
                        f"person `{name}` does not exist (in Zulip {label} "
                        f"`{item.common.name}`)"
                    )

        collect(raw_items(team), errors, check_item)

    collect(data.teams(), errors, check)


def validate_unique_zulip_groups(data, errors: list[str]) -> None:
    """Each Zulip group is defined by one team only."""
    _validate_unique(data, errors, lambda team: team.zulip_groups(data), "group")


def validate_zulip_group_ids(data, errors: list[str]) -> None:
    """Team members put in Zulip groups have Zulip ids."""
    _validate_zulip_ids(
        data, errors, lambda team: team.zulip_groups(data), "user group"
    )


def validate_zulip_group_extra_people(data, errors: list[str]) -> None:
    """People named in a Zulip group's extra-people exist."""
    _validate_extra_people(data, errors, lambda team: team.raw_zulip_groups, "group")


def validate_unique_zulip_streams(data, errors: list[str]) -> None:
    """Each Zulip stream is defined by one team only."""
    _validate_unique(data, errors, lambda team: team.zulip_streams(data), "stream")


def validate_zulip_stream_ids(data, errors: list[str]) -> None:
    """Team members put in Zulip streams have Zulip ids."""
    _validate_zulip_ids(data, errors, lambda team: team.zulip_streams(data), "stream")


def validate_zulip_stream_extra_people(data, errors: list[str]) -> None:
    """People named in a Zulip stream's extra-people exist."""
    _validate_extra_people(
        data, errors, lambda team: team.raw_zulip_streams, "stream"
    )