import pytest

from commands.command_registry import Cost, CommandDefinition, CommandRegistry
from commands.errors import DuplicateAliasError, DuplicateNameError, NotFoundError
from commands.permissions import Capability, PermissionLevel

from conftest import make_command


async def noop(ctx, args, level):
    return None


def test_register_and_resolve_by_name_and_alias(registry: CommandRegistry) -> None:
    registry.register(make_command("wanted", noop, aliases=["poster"]))
    registry.register(make_command("help", noop, aliases=["h", "halp"]))

    assert registry.resolve("wanted").name == "wanted"
    assert registry.resolve("POSTER").name == "wanted"
    assert registry.resolve("halp").name == "help"
    assert registry.has("h")


def test_resolve_unknown_raises_not_found(registry: CommandRegistry) -> None:
    with pytest.raises(NotFoundError):
        registry.resolve("missing")
    assert registry.get("missing") is None


def test_duplicate_name_leaves_registry_unchanged(registry: CommandRegistry) -> None:
    original = make_command("wanted", noop)
    registry.register(original)

    with pytest.raises(DuplicateNameError):
        registry.register(make_command("wanted", noop, aliases=["fresh"]))

    assert registry.resolve("wanted") is original
    assert registry.get("fresh") is None


def test_name_colliding_with_alias_is_duplicate_name(registry: CommandRegistry) -> None:
    registry.register(make_command("help", noop, aliases=["h"]))

    with pytest.raises(DuplicateNameError):
        registry.register(make_command("h", noop))


def test_alias_collision_does_not_partially_insert(registry: CommandRegistry) -> None:
    registry.register(make_command("help", noop, aliases=["h"]))

    with pytest.raises(DuplicateAliasError):
        registry.register(make_command("hug", noop, aliases=["squeeze", "h"]))

    assert registry.get("hug") is None
    assert registry.get("squeeze") is None
    assert registry.resolve("h").name == "help"
    assert [c.name for c in registry.list_commands()] == ["help"]


def test_alias_colliding_with_existing_name(registry: CommandRegistry) -> None:
    registry.register(make_command("help", noop))

    with pytest.raises(DuplicateAliasError):
        registry.register(make_command("assist", noop, aliases=["help"]))


def test_repeated_alias_within_one_command_is_rejected(registry: CommandRegistry) -> None:
    with pytest.raises(DuplicateAliasError):
        registry.register(make_command("help", noop, aliases=["h", "h"]))
    assert len(registry.list_commands()) == 0


def test_unregister_removes_every_alias(registry: CommandRegistry) -> None:
    registry.register(make_command("help", noop, aliases=["h", "halp"]))
    registry.register(make_command("wanted", noop, aliases=["poster"]))

    registry.unregister("help")

    assert registry.get("help") is None
    assert registry.get("h") is None
    assert registry.get("halp") is None
    assert set(registry.aliases) == {"poster"}


def test_unregister_unknown_raises(registry: CommandRegistry) -> None:
    with pytest.raises(NotFoundError):
        registry.unregister("nothing")


def test_unregister_then_register_same_name(registry: CommandRegistry) -> None:
    registry.register(make_command("wanted", noop, aliases=["poster"]))
    registry.unregister("wanted")

    replacement = make_command("wanted", noop, aliases=["poster"])
    registry.register(replacement)

    assert registry.resolve("poster") is replacement


def test_list_commands_is_ordered_and_restartable(registry: CommandRegistry) -> None:
    for name in ("zeta", "alpha", "mid"):
        registry.register(make_command(name, noop))

    view = registry.list_commands()
    assert [c.name for c in view] == ["zeta", "alpha", "mid"]
    assert [c.name for c in view] == ["zeta", "alpha", "mid"]
    assert "alpha" in view


def test_list_commands_survives_mutation_during_iteration(registry: CommandRegistry) -> None:
    registry.register(make_command("one", noop))
    registry.register(make_command("two", noop))

    seen = []
    for command in registry.list_commands():
        seen.append(command.name)
        if command.name == "one":
            registry.unregister("two")

    assert seen == ["one", "two"]


def test_definition_from_config_parses_levels_and_capabilities() -> None:
    definition = CommandDefinition.from_config({
        "name": "Reload",
        "perm_level": "Bot Admin",
        "bot_perms": ["SEND_MESSAGES", "attach_files"],
        "cost": 3,
    })

    assert definition.name == "reload"
    assert definition.perm_level is PermissionLevel.BOT_ADMIN
    assert definition.bot_perms == {Capability.SEND_MESSAGES, Capability.ATTACH_FILES}
    assert definition.cost == Cost.fixed(3)


def test_definition_rejects_unknown_level() -> None:
    with pytest.raises(ValueError):
        CommandDefinition.from_config({"name": "x", "perm_level": "Emperor"})


def test_command_definition_is_immutable() -> None:
    definition = CommandDefinition.from_config({"name": "wanted"})
    with pytest.raises(AttributeError):
        definition.name = "other"  # type: ignore[misc]


def test_cost_variants() -> None:
    assert Cost.coerce(None).evaluate(PermissionLevel.USER) == 0
    assert Cost.coerce(7).evaluate(PermissionLevel.OWNER) == 7

    discounted = Cost.by_level(lambda level: 10 - 2 * int(level))
    assert not discounted.is_fixed
    assert discounted.evaluate(PermissionLevel.USER) == 10
    assert discounted.evaluate(PermissionLevel.MODERATOR) == 6

    with pytest.raises(ValueError):
        Cost.fixed(-1)
    with pytest.raises(ValueError):
        Cost.by_level(lambda level: -5).evaluate(PermissionLevel.USER)


def test_help_is_filtered_by_level(registry: CommandRegistry) -> None:
    registry.register(make_command("help", noop, category="System"))
    registry.register(make_command("reload", noop, category="System", perm_level="Bot Admin"))

    user_help = registry.generate_help(PermissionLevel.USER, "~")
    admin_help = registry.generate_help(PermissionLevel.BOT_ADMIN, "~")

    assert "`~help`" in user_help
    assert "reload" not in user_help
    assert "`~reload`" in admin_help


def test_command_help_lists_aliases_and_cost(registry: CommandRegistry) -> None:
    registry.register(make_command("wanted", noop, aliases=["poster"], cost=5, usage="wanted [@mention]"))

    text = registry.generate_command_help("poster", "~")

    assert "`wanted`" in text
    assert "`poster`" in text
    assert "**Cost:** 5" in text
    assert registry.generate_command_help("missing") is None
