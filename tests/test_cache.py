import json
import os

import pytest

from barrelkeep.config.schema import build_config
from barrelkeep.core import cache as cache_mod
from barrelkeep.core.cache import ScanCache, cache_path, load_cache, new_cache, save_cache
from barrelkeep.core.planner import plan_with_cache

pytestmark = pytest.mark.unit

CONFIG = {"extensions": "none", "rules": [{"dirs": "src"}]}


def test_lookup_requires_exact_file_list():
    c = ScanCache(config_hash="h", extension_mode="none", tsconfig_mtime=0.0)
    c.store("/p/src", ["a.ts", "b.ts"], "content")
    assert c.lookup("/p/src", ("a.ts", "b.ts")).barrel_content == "content"
    assert c.lookup("/p/src", ["b.ts", "a.ts"]) is None
    assert c.lookup("/p/src", ["a.ts"]) is None
    assert c.lookup("/p/other", ["a.ts", "b.ts"]) is None


def test_prune_drops_untouched_missing_dirs(tmp_path):
    live = tmp_path / "live"
    live.mkdir()
    c = ScanCache(config_hash="h", extension_mode="none", tsconfig_mtime=0.0)
    c.store(str(live), [], "x")
    c.dirs[str(tmp_path / "gone")] = cache_mod.CacheEntry((), "y")
    c.dirs[str(tmp_path / "elsewhere")] = cache_mod.CacheEntry((), "z")

    removed = c.prune(keep=[str(live), str(tmp_path / "elsewhere")])
    assert removed == [str(tmp_path / "gone")]
    assert set(c.dirs) == {str(live), str(tmp_path / "elsewhere")}


def test_save_and_load_roundtrip(tmp_path):
    config = build_config(CONFIG)
    c = new_cache(str(tmp_path), config, "none")
    c.store(str(tmp_path / "src"), ["a.ts"], "barrel")
    save_cache(str(tmp_path), c)

    assert cache_path(str(tmp_path)).is_file()
    assert not list(cache_path(str(tmp_path)).parent.glob("*.tmp.*"))
    loaded = load_cache(str(tmp_path), config, "none")
    assert loaded is not None
    assert loaded.dirs == c.dirs


def test_plan_with_cache_reuses_entries(tmp_path, write_tree):
    write_tree(tmp_path, {"src/a.ts": "", "src/b.ts": ""})
    config = build_config(CONFIG)

    first = plan_with_cache(config, str(tmp_path))
    assert first.actions[0].content.endswith("export * from './b';\n")

    # Poison the cached content; a hit must return it verbatim.
    data = json.loads(cache_path(str(tmp_path)).read_text())
    data["dirs"][str(tmp_path / "src")]["barrel_content"] = "cached"
    cache_path(str(tmp_path)).write_text(json.dumps(data))

    second = plan_with_cache(config, str(tmp_path))
    assert second.actions[0].content == "cached"


def test_file_list_change_misses(tmp_path, write_tree):
    write_tree(tmp_path, {"src/a.ts": ""})
    config = build_config(CONFIG)
    plan_with_cache(config, str(tmp_path))
    write_tree(tmp_path, {"src/c.ts": ""})

    result = plan_with_cache(config, str(tmp_path))
    assert "export * from './c'" in result.actions[0].content


def test_no_cache_leaves_disk_untouched(tmp_path, write_tree):
    write_tree(tmp_path, {"src/a.ts": ""})
    plan_with_cache(build_config(CONFIG), str(tmp_path), use_cache=False)
    assert not cache_path(str(tmp_path)).exists()


@pytest.mark.parametrize(
    "mutate",
    [
        lambda d: d.update(version=99),
        lambda d: d.update(config_hash="different"),
        lambda d: d.update(extension_mode=".js"),
        lambda d: d.update(tsconfig_mtime=12345.0),
        lambda d: d.update(dirs={"/x": {"files": "nope", "barrel_content": ""}}),
        lambda d: d.pop("dirs"),
    ],
)
def test_invalid_cache_is_a_miss(tmp_path, mutate):
    config = build_config(CONFIG)
    c = new_cache(str(tmp_path), config, "none")
    save_cache(str(tmp_path), c)
    data = json.loads(cache_path(str(tmp_path)).read_text())
    mutate(data)
    cache_path(str(tmp_path)).write_text(json.dumps(data))

    assert load_cache(str(tmp_path), config, "none") is None


def test_corrupt_json_is_a_miss(tmp_path):
    path = cache_path(str(tmp_path))
    path.parent.mkdir(parents=True)
    path.write_text("{not json")
    assert load_cache(str(tmp_path), build_config(CONFIG), "none") is None


def test_config_change_invalidates(tmp_path):
    save_cache(str(tmp_path), new_cache(str(tmp_path), build_config(CONFIG), "none"))
    other = build_config({"extensions": "none", "rules": [{"dirs": "lib"}]})
    assert load_cache(str(tmp_path), other, "none") is None


def test_tsconfig_touch_invalidates(tmp_path):
    config = build_config(CONFIG)
    tsconfig = tmp_path / "tsconfig.json"
    tsconfig.write_text("{}")
    save_cache(str(tmp_path), new_cache(str(tmp_path), config, "none"))
    assert load_cache(str(tmp_path), config, "none") is not None

    stat = tsconfig.stat()
    os.utime(tsconfig, (stat.st_atime, stat.st_mtime + 10))
    assert load_cache(str(tmp_path), config, "none") is None


def test_save_failure_is_swallowed(tmp_path):
    # A file where the cache directory should be makes mkdir fail.
    (tmp_path / "node_modules").write_text("")
    save_cache(str(tmp_path), new_cache(str(tmp_path), build_config(CONFIG), "none"))
    assert cache_mod.cache_size(str(tmp_path)) is None
