# teamrepo

A library for a directory of TOML files that describe people, teams and
repositories. It loads the data, expands team membership, answers questions
about mailing lists, Zulip groups and streams, GitHub teams and permissions,
and runs consistency checks over the whole set.

## Data layout

`Data.load(root)` reads, under `root`:

- `config.toml`: `allowed-mailing-lists-domains`, `allowed-github-orgs`,
  `permissions-bors-repos` and `permissions-bools`
- `people/*.toml`: one file per person
- `teams/*.toml` and `teams/archive/*.toml`: active and archived teams
- `repos/<org>/*.toml` and `repos/archive/<org>/*.toml`: repositories; a
  repository's `org` must match its directory and its `name` its file name

Malformed or inconsistent data raises `teamrepo.permissions.DataError`.

## Installation

```
pip install .
```

## Library use

```python
from teamrepo.data import Data
from teamrepo.reports import dump_team, dump_teams, dump_list, dump_website
from teamrepo.queries import GroupBy, show_person, dump_permission, dump_individual_access

data = Data.load(".")

team = data.team("compiler")
print(sorted(team.members(data)))

print("\n".join(dump_teams(data, exclude_working_groups=True)))
print("\n".join(dump_team(data, "compiler")))        # leads marked " (lead)"
print("\n".join(dump_list(data, "all@example.com")))  # sorted addresses
print("\n".join(dump_website(data)))                  # Fluent (.ftl) entries
print("\n".join(show_person(data, "some-user")))
print("\n".join(dump_permission(data, "perf")))
print("\n".join(dump_individual_access(data, GroupBy.PERSON)))
```

Every report function returns a list of lines rather than printing.

### Modules

- `teamrepo.permissions`: `Permissions`, `BorsAcl`, `allowed_people` and
  `DataError`. Review rights on a bors repository also grant try rights.
- `teamrepo.people`: `Config`, `Person`, `Email`/`EmailState`, `TeamKind`.
- `teamrepo.records`: repositories, branch protections, website, role,
  Discord and rfcbot records.
- `teamrepo.teams`: `Team` and its membership expansion (`members`,
  `lists`, `zulip_groups`, `zulip_streams`, `github_teams`, `discord_ids`).
- `teamrepo.data`: `Data`, the loaded repository as a whole.
- `teamrepo.reports` and `teamrepo.queries`: the text reports above.
- `teamrepo.checks_teams` and `teamrepo.checks_lists`: checks of the form
  `validate_*(data, errors)`, each appending messages to `errors`.

### Checks

```python
from teamrepo import checks_lists, checks_teams

errors: list[str] = []
checks_teams.validate_alumni(data, errors)
checks_teams.validate_subteam_of(data, errors)
checks_lists.validate_list_addresses(data, errors)
checks_lists.validate_unique_zulip_groups(data, errors)
for message in sorted(set(errors)):
    print(message)
```

Team checks cover name prefixes, the subteam hierarchy, leads, members,
alumni, archived teams, people not referenced anywhere, team names, Discord
ids, member roles and website data. List checks cover mailing lists, e-mail
addresses, duplicated and undeclared permissions, rfcbot labels and
exclusions, and Zulip groups and streams.

## What the package does not do

- There is no command-line program; everything is called from Python.
- It does not write a static JSON API from the data.
- There is no single function that runs every check and reports a total;
  checks are called one by one.
- Repository-level checks (repository access, admin access, archived
  repositories, branch protections, GitHub team uniqueness and allowed
  organisations) are not included, nor is anything that talks to GitHub or
  Zulip over the network.

## Tests

```
pip install .[test]
pytest
```