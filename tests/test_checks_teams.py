import pytest

from teamrepo import checks_teams
from teamrepo.data import Data
from teamrepo.people import Config, Person, TeamKind
from teamrepo.permissions import DataError, Permissions
from teamrepo.records import (
    DiscordRole,
    MemberRole,
    Repo,
    RepoAccess,
    RepoPermission,
    WebsiteData,
)
from teamrepo.teams import RawZulipCommon, RawZulipGroup, Team, TeamMember, TeamPeople

CONFIG = Config(
    allowed_mailing_lists_domains=frozenset(),
    allowed_github_orgs=frozenset(),
    permissions_bors_repos=frozenset(),
    permissions_bools=frozenset({"perf"}),
)


def make_person(github, github_id=1, **kwargs):
    return Person(name=github.title(), github=github, github_id=github_id, **kwargs)


def make_team(name, members=(), leads=(), alumni=(), **kwargs):
    people = TeamPeople(
        leads=list(leads),
        members=[m if isinstance(m, TeamMember) else TeamMember(m) for m in members],
        alumni=None if alumni is None else [TeamMember(a) for a in alumni],
    )
    return Team(name=name, people=people, **kwargs)


def alumni_team(members=()):
    return Team(
        name="alumni",
        people=TeamPeople(
            leads=[], members=[TeamMember(m) for m in members], include_all_alumni=True
        ),
    )


def make_data(teams=(), people=(), archived_teams=(), repos=()):
    return Data(
        CONFIG, people=people, teams=teams, archived_teams=archived_teams, repos=repos
    )


def run(check, data):
    errors = []
    check(data, errors)
    return errors


@pytest.mark.parametrize(
    ("text", "expected"),
    [("wg-async-2", True), ("Compiler", False), ("foo_bar", False), ("", True)],
)
def test_ascii_kebab_case(text, expected):
    assert checks_teams.ascii_kebab_case(text) is expected


def test_collect_records_data_errors():
    def func(item, errors):
        if item % 2 == 0:
            raise DataError(f"bad {item}")

    errors = []
    checks_teams.collect([1, 2, 3, 4], errors, func)
    assert errors == ["bad 2", "bad 4"]


def test_name_prefixes():
    data = make_data(
        teams=[
            make_team("async", kind=TeamKind.WORKING_GROUP),
            make_team("wg-foo"),
            make_team("wg-leads"),
            make_team("project-x", kind=TeamKind.PROJECT_GROUP),
        ]
    )
    assert run(checks_teams.validate_name_prefixes, data) == [
        "working group `async`'s name doesn't start with `wg-`",
        "team `wg-foo` seems like a working group (since it has the `wg-` prefix)",
    ]


def test_subteam_of_valid_chain():
    data = make_data(teams=[make_team("root"), make_team("child", subteam_of="root")])
    assert run(checks_teams.validate_subteam_of, data) == []


def test_team_leads_must_be_members():
    data = make_data(
        people=[make_person("alice"), make_person("bob")],
        teams=[make_team("t", members=["alice"], leads=["alice", "bob"])],
    )
    assert run(checks_teams.validate_team_leads, data) == [
        "`bob` leads team `t`, but is not a member of it"
    ]


def test_team_members_must_exist():
    data = make_data(
        people=[make_person("alice")], teams=[make_team("t", members=["alice", "ghost"])]
    )
    assert run(checks_teams.validate_team_members, data) == [
        "person `ghost` is member of team `t` but doesn't exist"
    ]


def test_alumni_team_required():
    data = make_data(teams=[make_team("t")])
    assert run(checks_teams.validate_alumni, data) == ["cannot find an 'alumni' team"]


def test_alumni_entry_required():
    data = make_data(
        teams=[
            alumni_team(),
            make_team("with-alumni"),
            make_team("without", alumni=None),
            make_team("marker", alumni=None, kind=TeamKind.MARKER_TEAM),
        ]
    )
    assert run(checks_teams.validate_alumni, data) == [
        "team 'without' needs an `alumni = []` entry"
    ]


def test_alumni_team_explicit_members():
    data = make_data(people=[make_person("x")], teams=[alumni_team(members=["x"])])
    errors = run(checks_teams.validate_alumni, data)
    assert errors[0].startswith("'alumni' team must not have explicit members")
    assert errors[1] == "team 'alumni' needs an `alumni = []` entry"


def test_archived_teams_have_no_members():
    data = make_data(
        people=[make_person("alice")],
        archived_teams=[make_team("old", members=["alice"]), make_team("older")],
    )
    errors = run(checks_teams.validate_archived_teams, data)
    assert len(errors) == 1
    assert errors[0].startswith("archived team 'old' must not have current members")


def test_inactive_members():
    group = RawZulipGroup(
        RawZulipCommon(name="g", include_team_members=False, extra_people=["frank"])
    )
    repo = Repo(
        org="rust-lang",
        name="r",
        description="d",
        bots=[],
        access=RepoAccess(teams={}, individuals={"erin": RepoPermission.WRITE}),
    )
    data = make_data(
        people=[
            make_person("alice"),
            make_person("bob"),
            make_person("carol"),
            make_person("dave", permissions=Permissions(booleans={"perf": True})),
            make_person("erin"),
            make_person("frank"),
        ],
        teams=[
            make_team("t", members=["alice"], alumni=["bob"], raw_zulip_groups=[group])
        ],
        repos=[repo],
    )
    errors = run(checks_teams.validate_inactive_members, data)
    assert len(errors) == 1
    assert errors[0].startswith("person `carol` is not a member of any team")


def test_team_names():
    data = make_data(teams=[make_team("Bad_Name"), make_team("good-name")])
    assert run(checks_teams.validate_team_names, data) == [
        "team name `Bad_Name` can only be alphanumeric with hyphens"
    ]


def test_subteam_of_required():
    data = make_data(
        teams=[
            make_team("orphan"),
            make_team("core"),
            make_team("top", top_level=True),
            make_team("both", top_level=True, subteam_of="core"),
            make_team("wg-x", top_level=True, kind=TeamKind.WORKING_GROUP),
            make_team("marker", kind=TeamKind.MARKER_TEAM),
        ]
    )
    assert run(checks_teams.validate_subteam_of_required, data) == [
        "team `orphan` must specify `subteam-of` or top-level=true",
        "team `both` specifies both top-level=true and subteam-of, "
        "it should only specify one or the other",
        "team `wg-x` is top-level, but is a `working group` team kind, "
        'it must be a normal team (don\'t specify "kind")',
    ]


def test_discord_ids_required():
    people = [make_person("alice", discord_id=5), make_person("bob")]
    roles = [DiscordRole(name="t")]
    data = make_data(
        people=people,
        teams=[
            make_team("t", members=["alice", "bob"], discord_roles=roles),
            make_team("all", members=["alice", "bob"], discord_roles=roles),
            make_team("plain", members=["bob"]),
        ],
    )
    assert run(checks_teams.validate_discord_team_members_have_discord_ids, data) == [
        'the following members of the "t" team do not have discord_ids: bob'
    ]


def test_member_roles_valid():
    data = make_data(
        people=[make_person("alice")],
        teams=[
            make_team(
                "t",
                members=[TeamMember("alice", ["co-lead"])],
                roles=[MemberRole("co-lead", "Co-lead")],
            )
        ],
    )
    assert run(checks_teams.validate_member_roles, data) == []


def test_member_roles_bad_id_and_duplicate():
    data = make_data(
        teams=[
            make_team(
                "a",
                roles=[MemberRole("Bad Role", "x"), MemberRole("lead", "Lead"), MemberRole("lead", "Lead")],
            )
        ]
    )
    assert run(checks_teams.validate_member_roles, data) == [
        'role id "Bad Role" must be alphanumeric with hyphens',
        "role 'lead' is duplicated in team 'a'",
    ]


def test_member_roles_inconsistent_and_unrecognized():
    data = make_data(
        people=[make_person("alice")],
        teams=[
            make_team("a", roles=[MemberRole("lead", "Lead")]),
            make_team(
                "b",
                members=[TeamMember("alice", ["ghost-role"])],
                roles=[MemberRole("lead", "Leader")],
            ),
        ],
    )
    errors = run(checks_teams.validate_member_roles, data)
    assert len(errors) == 2
    assert errors[0].startswith("role 'lead' has inconsistent description")
    assert errors[1] == "person 'alice' in team 'b' has unrecognized role 'ghost-role'"


def test_website_required():
    data = make_data(
        teams=[
            make_team("t"),
            make_team("marker", kind=TeamKind.MARKER_TEAM),
            make_team("site", website=WebsiteData(name="Site", description="d")),
        ]
    )
    assert run(checks_teams.validate_website, data) == [
        "team `t` should have a `[website]` table"
    ]