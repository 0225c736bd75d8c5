"""Loading the team repository's data files and querying them as a whole."""

from __future__ import annotations

import tomllib
from collections.abc import Callable, Iterable, Iterator
from itertools import chain
from pathlib import Path
from typing import Any, TypeVar

from .people import Config, Person
from .permissions import DataError
from .records import Repo
from .teams import List, Team, ZulipGroup, ZulipStream

_T = TypeVar("_T")


def load_file(path) -> dict[str, Any]:
    """Read and parse one TOML file."""
    path = Path(path)
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as err:
        raise DataError(f"failed to read {path}: {err}") from err
    try:
        return tomllib.loads(content)
    except tomllib.TOMLDecodeError as err:
        raise DataError(f"failed to parse {path}: {err}") from err


def _parse(path: Path, parser: Callable[[Any], _T]) -> _T:
    raw = load_file(path)
    try:
        return parser(raw)
    except DataError as err:
        raise DataError(f"failed to parse {path}: {err}") from err


def _toml_files(directory: Path, nested: bool) -> Iterator[tuple[str, Path]]:
    """Yield (containing directory name, path) for TOML files in ``directory``.

    With ``nested``, only the files one level down in subdirectories are read.
    """
    try:
        entries = sorted(directory.iterdir())
    except OSError as err:
        raise DataError(f"`load_dir` failed to read directory '{directory}'") from err
    for path in entries:
        if nested and path.is_dir():
            yield from _toml_files(path, False)
        elif not nested and path.is_file() and path.suffix == ".toml":
            yield path.parent.name, path


def _validate_repo(org: str, repo: Repo, path: Path) -> None:
    if repo.org != org:
        raise DataError(
            f"repo '{repo.name}' is located in the '{org}' org directory "
            f"but its org is '{repo.org}'"
        )
    if repo.name != path.stem:
        raise DataError(
            f"repo '{repo.name}' is located in file '{path.name}', "
            "please ensure that the name matches"
        )


class Data:
    """Everything in the team repository: config, people, teams and repos."""

    def __init__(
        self,
        config: Config,
        people: Iterable[Person] = (),
        teams: Iterable[Team] = (),
        archived_teams: Iterable[Team] = (),
        repos: Iterable[Repo] = (),
        archived_repos: Iterable[Repo] = (),
    ):
        self.config = config
        self._people = {person.github: person for person in people}
        self._teams = {team.name: team for team in teams}
        self._archived_teams = list(archived_teams)
        self._repos = list(repos)
        self._archived_repos = list(archived_repos)

    @classmethod
    def load(cls, root=".") -> Data:
        root = Path(root)
        config = _parse(root / "config.toml", Config.from_dict)

        repos = []
        for org, path in _toml_files(root / "repos", True):
            repo = _parse(path, Repo.from_dict)
            if org == "archive":
                raise DataError(
                    f"repo '{repo.name}' is located in the 'archive/' directory. "
                    "Move it into the org subdirectory, e.g. 'archive/rust-lang/'"
                )
            _validate_repo(org, repo, path)
            repos.append(repo)

        archived_repos = []
        archive = root / "repos" / "archive"
        if archive.is_dir():
            for org, path in _toml_files(archive, True):
                repo = _parse(path, Repo.from_dict)
                _validate_repo(org, repo, path)
                archived_repos.append(repo)

        people = []
        for _, path in _toml_files(root / "people", False):
            person = _parse(path, Person.from_dict)
            person.validate()
            people.append(person)

        teams = [_parse(path, Team.from_dict) for _, path in _toml_files(root / "teams", False)]
        archived_teams = [
            _parse(path, Team.from_dict)
            for _, path in _toml_files(root / "teams" / "archive", False)
        ]

        return cls(
            config,
            people=people,
            teams=teams,
            archived_teams=archived_teams,
            repos=repos,
            archived_repos=archived_repos,
        )

    def team(self, name: str) -> Team | None:
        return self._teams.get(name)

    def teams(self) -> Iterator[Team]:
        return iter(self._teams.values())

    def person(self, name: str) -> Person | None:
        return self._people.get(name)

    def people(self) -> Iterator[Person]:
        return iter(self._people.values())

    def lists(self) -> dict[str, List]:
        return {
            mailing.address: mailing
            for team in self.teams()
            for mailing in team.lists(self)
        }

    def list(self, name: str) -> List | None:
        return self.lists().get(name)

    def zulip_groups(self) -> dict[str, ZulipGroup]:
        return {
            group.name: group for team in self.teams() for group in team.zulip_groups(self)
        }

    def zulip_streams(self) -> dict[str, ZulipStream]:
        return {
            stream.name: stream
            for team in self.teams()
            for stream in team.zulip_streams(self)
        }

    def subteams_of(self, team_name: str) -> Iterator[Team]:
        parent = self.team(team_name)
        if parent is None:
            return
        yield from (team for team in self.teams() if parent.is_parent_of(self, team))

    def active_members(self) -> set[str]:
        active: set[str] = set()
        for team in self.teams():
            if not team.is_alumni_team():
                active |= team.members(self)
        return active

    def repos(self) -> Iterator[Repo]:
        return iter(self._repos)

    def archived_repos(self) -> Iterator[Repo]:
        return iter(self._archived_repos)

    def all_repos(self) -> Iterator[Repo]:
        return chain(self._repos, self._archived_repos)

    def archived_teams(self) -> Iterator[Team]:
        return iter(self._archived_teams)

    def github_teams(self) -> set[tuple[str, str]]:
        """Every configured GitHub team as an (org, team name) pair."""
        result = set()
        for team in self.teams():
            try:
                github_teams = team.github_teams(self)
            except DataError:
                continue
            result.update((github.org, github.name) for github in github_teams)
        return result