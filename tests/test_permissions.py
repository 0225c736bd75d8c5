import pytest

from teamrepo.people import Config, Person
from teamrepo.permissions import BorsAcl, DataError, Permissions, allowed_people


def make_config(bools=("perf", "infra"), repos=("rust",)):
    return Config.from_dict(
        {
            "allowed-mailing-lists-domains": ["example.com"],
            "allowed-github-orgs": ["rust-lang"],
            "permissions-bors-repos": list(repos),
            "permissions-bools": list(bools),
        }
    )


class FakeTeam:
    def __init__(self, members, leads, permissions=None, leads_permissions=None):
        self._members = set(members)
        self._leads = set(leads)
        self.permissions = permissions or Permissions()
        self.leads_permissions = leads_permissions or Permissions()

    def members(self, data):
        return set(self._members)

    def leads(self):
        return set(self._leads)


class FakeData:
    def __init__(self, teams, people):
        self._teams = teams
        self._people = people

    def teams(self):
        return iter(self._teams)

    def people(self):
        return iter(self._people)


def test_bors_acl_defaults_and_rename():
    acl = BorsAcl.from_dict({"try": True})
    assert acl.try_ is True
    assert acl.review is False


def test_bors_acl_rejects_unknown_field():
    with pytest.raises(DataError, match="unknown field"):
        BorsAcl.from_dict({"merge": True})


def test_permissions_from_dict_splits_booleans_and_bors():
    perms = Permissions.from_dict({"perf": True, "bors": {"rust": {"review": True}}})
    assert perms.booleans == {"perf": True}
    assert perms.bors == {"rust": BorsAcl(review=True, try_=False)}


def test_permissions_reject_non_boolean_values():
    with pytest.raises(DataError):
        Permissions.from_dict({"perf": "yes"})


def test_has_directly_forms():
    perms = Permissions.from_dict({"perf": True, "bors": {"rust": {"try": True}}})
    assert perms.has_directly("perf")
    assert perms.has_directly("bors.rust.try")
    assert not perms.has_directly("bors.rust.review")
    assert not perms.has_directly("bors.cargo.try")
    assert not perms.has_directly("infra")
    assert not perms.has_directly("a.b")


def test_review_implies_try_indirectly():
    perms = Permissions.from_dict({"bors": {"rust": {"review": True}}})
    assert perms.has_indirectly("bors.rust.try")
    assert not perms.has_directly("bors.rust.try")
    assert perms.has("bors.rust.try")
    assert not perms.has_indirectly("bors.rust.review")


def test_has_any():
    assert not Permissions().has_any()
    assert not Permissions.from_dict({"perf": False}).has_any()
    assert Permissions.from_dict({"perf": True}).has_any()
    assert Permissions.from_dict({"bors": {"rust": {"try": True}}}).has_any()


def test_available_lists_booleans_and_bors_entries():
    available = Permissions.available(make_config())
    assert set(available) == {"perf", "infra", "bors.rust.review", "bors.rust.try"}
    assert len(available) == 4


def test_validate_unknown_boolean():
    perms = Permissions.from_dict({"deploy": True})
    with pytest.raises(DataError, match="unknown permission: deploy"):
        perms.validate("user `alice`", make_config())


def test_validate_unknown_bors_repo():
    perms = Permissions.from_dict({"bors": {"cargo": {"try": True}}})
    with pytest.raises(DataError, match="unknown bors repository: cargo"):
        perms.validate("user `alice`", make_config())


def test_validate_both_review_and_try():
    perms = Permissions.from_dict({"bors": {"rust": {"try": True, "review": True}}})
    with pytest.raises(DataError, match="team `infra` has both"):
        perms.validate("team `infra`", make_config())


def _person(github, permissions=None):
    return Person(
        name=github.title(),
        github=github,
        github_id=len(github),
        permissions=permissions or Permissions(),
    )


def test_allowed_people_combines_sources():
    people = [
        _person("alice"),
        _person("bob"),
        _person("carol"),
        _person("dave", Permissions.from_dict({"infra": True})),
        _person("erin"),
    ]
    teams = [
        FakeTeam(
            ["alice", "bob", "carol", "ghost"],
            ["carol"],
            permissions=Permissions.from_dict({"perf": True}),
            leads_permissions=Permissions.from_dict({"infra": True}),
        ),
        FakeTeam(
            ["erin"],
            [],
            permissions=Permissions.from_dict({"bors": {"rust": {"review": True}}}),
        ),
    ]
    data = FakeData(teams, people)

    assert {p.github for p in allowed_people(data, "perf")} == {"alice", "bob", "carol"}
    assert {p.github for p in allowed_people(data, "infra")} == {"carol", "dave"}
    assert {p.github for p in allowed_people(data, "bors.rust.try")} == {"erin"}
    assert allowed_people(data, "unknown") == []