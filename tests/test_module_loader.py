import os
from pathlib import Path

import pytest

from commands.command_registry import CommandRegistry
from commands.errors import LoadError, NotFoundError
from commands.module_loader import ModuleLoader

from conftest import make_command

PING_V1 = '''
COMMAND = {"name": "ping", "aliases": ["p"], "description": "first"}


async def run(ctx, args, level):
    return "v1"
'''

PING_V2 = '''
COMMAND = {"name": "ping", "aliases": ["p", "pong"], "description": "second version"}


async def run(ctx, args, level):
    return "v2"
'''

TEARDOWN_FAILS = '''
COMMAND = {"name": "sticky"}


async def run(ctx, args, level):
    return None


def teardown():
    raise RuntimeError("still busy")
'''


def write_module(root: Path, category: str, name: str, source: str) -> Path:
    directory = root / category
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / f"{name}.py"
    path.write_text(source, encoding="utf-8")
    return path


@pytest.mark.asyncio
async def test_load_registers_command(loader: ModuleLoader, registry: CommandRegistry, tmp_path: Path) -> None:
    path = write_module(tmp_path, "fun", "ping", PING_V1)

    command = loader.load(path)

    assert registry.resolve("p") is command
    assert command.source_location == str(path.resolve())
    assert loader.is_cached(path)
    assert await command.run(None, [], None) == "v1"


def test_load_missing_file(loader: ModuleLoader, tmp_path: Path) -> None:
    with pytest.raises(LoadError):
        loader.load(tmp_path / "nothing.py")


@pytest.mark.parametrize("source", [
    "COMMAND = {'name': 'broken'\n",
    "async def run(ctx, args, level):\n    return None\n",
    "COMMAND = {'name': 'sync'}\n\ndef run(ctx, args, level):\n    return None\n",
    "COMMAND = {'name': 'bad', 'perm_level': 'Emperor'}\n\nasync def run(ctx, args, level):\n    pass\n",
    "raise ImportError('missing dependency')\n",
])
def test_malformed_modules_are_load_errors(loader: ModuleLoader, registry: CommandRegistry, tmp_path: Path, source: str) -> None:
    path = write_module(tmp_path, "fun", "broken", source)

    with pytest.raises(LoadError):
        loader.load(path)

    assert len(registry.list_commands()) == 0
    assert not loader.is_cached(path)


def test_name_mismatch_is_rejected(loader: ModuleLoader, tmp_path: Path) -> None:
    path = write_module(tmp_path, "fun", "ping", PING_V1)

    with pytest.raises(LoadError):
        loader.load(path, name="pong")


def test_registry_conflict_becomes_load_error(loader: ModuleLoader, registry: CommandRegistry, tmp_path: Path) -> None:
    async def noop(ctx, args, level):
        return None

    registry.register(make_command("other", noop, aliases=["p"]))
    path = write_module(tmp_path, "fun", "ping", PING_V1)

    with pytest.raises(LoadError):
        loader.load(path)

    assert registry.get("ping") is None
    assert not loader.is_cached(path)


def test_unload_removes_command_and_cache(loader: ModuleLoader, registry: CommandRegistry, tmp_path: Path) -> None:
    path = write_module(tmp_path, "fun", "ping", PING_V1)
    loader.load(path)

    removed = loader.unload("p")

    assert removed.name == "ping"
    assert registry.get("ping") is None
    assert registry.get("p") is None
    assert not loader.is_cached(path)


def test_unload_unknown(loader: ModuleLoader) -> None:
    with pytest.raises(NotFoundError):
        loader.unload("ghost")


def test_failed_teardown_keeps_command(loader: ModuleLoader, registry: CommandRegistry, tmp_path: Path) -> None:
    path = write_module(tmp_path, "fun", "sticky", TEARDOWN_FAILS)
    command = loader.load(path)

    with pytest.raises(LoadError):
        loader.unload("sticky")

    assert registry.resolve("sticky") is command
    assert loader.is_cached(path)


@pytest.mark.asyncio
async def test_reload_picks_up_edited_source(loader: ModuleLoader, registry: CommandRegistry, tmp_path: Path) -> None:
    path = write_module(tmp_path, "fun", "ping", PING_V1)
    old = loader.load(path)

    path.write_text(PING_V2, encoding="utf-8")
    fresh = await loader.reload("ping")

    assert fresh is not old
    assert fresh.description == "second version"
    assert registry.resolve("pong") is fresh
    assert await fresh.run(None, [], None) == "v2"
    assert await old.run(None, [], None) == "v1"


@pytest.mark.asyncio
async def test_reload_by_alias(loader: ModuleLoader, tmp_path: Path) -> None:
    path = write_module(tmp_path, "fun", "ping", PING_V1)
    loader.load(path)

    fresh = await loader.reload("p")

    assert fresh.name == "ping"


@pytest.mark.asyncio
async def test_failed_reload_leaves_command_absent(loader: ModuleLoader, registry: CommandRegistry, tmp_path: Path) -> None:
    path = write_module(tmp_path, "fun", "ping", PING_V1)
    loader.load(path)

    path.write_text("COMMAND = {'name': 'ping'\n", encoding="utf-8")
    with pytest.raises(LoadError):
        await loader.reload("ping")

    assert registry.get("ping") is None
    assert registry.get("p") is None

    path.write_text(PING_V2, encoding="utf-8")
    assert loader.load(path).description == "second version"


@pytest.mark.asyncio
async def test_reload_unknown_command(loader: ModuleLoader) -> None:
    with pytest.raises(NotFoundError):
        await loader.reload("ghost")


@pytest.mark.asyncio
async def test_reload_inline_command_is_refused(loader: ModuleLoader, registry: CommandRegistry) -> None:
    async def noop(ctx, args, level):
        return None

    registry.register(make_command("inline", noop))

    with pytest.raises(LoadError):
        await loader.reload("inline")

    assert registry.has("inline")


def test_load_all_skips_broken_and_private_modules(loader: ModuleLoader, registry: CommandRegistry, tmp_path: Path) -> None:
    write_module(tmp_path, "fun", "ping", PING_V1)
    write_module(tmp_path, "fun", "broken", "this is not python")
    write_module(tmp_path, "fun", "__init__", "")
    write_module(tmp_path, "system", "sticky", TEARDOWN_FAILS)

    loaded = loader.load_all(tmp_path)

    assert sorted(c.name for c in loaded) == ["ping", "sticky"]
    assert len(registry.list_commands()) == 2


@pytest.mark.asyncio
async def test_reload_ignores_bytecode_cache(loader: ModuleLoader, tmp_path: Path) -> None:
    path = write_module(tmp_path, "fun", "ping", PING_V1)
    stat = path.stat()
    loader.load(path)

    # Same size and timestamp: a .pyc keyed on both would still look fresh
    path.write_text(PING_V1.replace('"v1"', '"v9"'), encoding="utf-8")
    os.utime(path, ns=(stat.st_atime_ns, stat.st_mtime_ns))

    fresh = await loader.reload("ping")

    assert await fresh.run(None, [], None) == "v9"
    assert not (path.parent / "__pycache__").exists()
