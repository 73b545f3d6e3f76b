import pytest

from barrelkeep.core.entities import ModuleEntry
from barrelkeep.core.naming import check_collisions, namespace_name, to_pascal_case
from barrelkeep.errors import InvalidIdentifier, NamespaceCollision

pytestmark = pytest.mark.unit


@pytest.mark.parametrize(
    "filename,expected",
    [
        ("auth.ts", "Auth"),
        ("foo-bar.ts", "FooBar"),
        ("foo_bar.ts", "FooBar"),
        ("user.service.ts", "UserService"),
        ("api--client__v2.tsx", "ApiClientV2"),
        ("$store.ts", "$store"),
        ("alreadyCamel.ts", "AlreadyCamel"),
    ],
)
def test_to_pascal_case(filename, expected):
    assert to_pascal_case(filename) == expected


def test_to_pascal_case_rejects_leading_digit():
    with pytest.raises(InvalidIdentifier) as exc:
        to_pascal_case("2fa.ts")
    assert exc.value.filename == "2fa.ts"
    assert exc.value.result == "2fa"


def test_to_pascal_case_rejects_other_characters():
    with pytest.raises(InvalidIdentifier):
        to_pascal_case("hello world.ts")


def test_namespace_name_keeps_directory_name_whole():
    mod = ModuleEntry.make("date.utils", "namespace", is_directory=True)
    assert namespace_name(mod) == "DateUtils"
    assert mod.specifier == "date.utils"


def test_collision_between_dash_and_underscore():
    mods = [
        ModuleEntry.make("foo-bar.ts", "namespace"),
        ModuleEntry.make("foo_bar.ts", "namespace"),
    ]
    with pytest.raises(NamespaceCollision) as exc:
        check_collisions(mods)
    assert exc.value.derived_name == "FooBar"
    assert {exc.value.filename1, exc.value.filename2} == {"foo-bar.ts", "foo_bar.ts"}


def test_collision_is_case_insensitive():
    mods = [
        ModuleEntry.make("Auth.ts", "namespace"),
        ModuleEntry.make("auth.tsx", "namespace"),
    ]
    with pytest.raises(NamespaceCollision):
        check_collisions(mods)


def test_star_modules_are_exempt_from_collisions():
    mods = [
        ModuleEntry.make("foo-bar.ts", "star"),
        ModuleEntry.make("foo_bar.ts", "namespace"),
    ]
    check_collisions(mods)


def test_invalid_star_module_name_is_not_checked():
    check_collisions([ModuleEntry.make("2fa.ts", "star")])
