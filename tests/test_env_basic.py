import json
import pathlib
import sys

import numpy as np
import pytest

ROOT = pathlib.Path(__file__).resolve().parents[1]
sys.path.append(str(ROOT / "src"))

from wfc_rl_env import (  # noqa: E402
    Biome,
    ConstantAdjustmentPolicy,
    EnvConfig,
    HeuristicAdjustmentPolicy,
    Layout,
    TileCatalog,
    TileVariant,
    WFCGenerationEnv,
    default_catalog,
    encode_obs_to_vector,
    task_presets,
)


def test_env_reset_and_step_shapes():
    cfg = EnvConfig(width=5, height=4, biome=Biome.DESERT, layout=Layout.OPEN, seed=0)
    env = WFCGenerationEnv(default_catalog(), config=cfg)
    obs = env.reset()
    assert obs["cells"].shape == (4, 5, 2)
    assert obs["cells"].dtype == np.float32
    assert np.all(obs["cells"][..., 0] == 0.0)
    assert np.allclose(obs["cells"][..., 1], 1.0)
    assert obs["biome"].shape == (len(Biome),)
    assert obs["biome"][list(Biome).index(Biome.DESERT)] == 1.0
    assert obs["layout"].sum() == 1.0
    assert obs["progress"].tolist() == [0.0, 0.0]

    next_obs, done, info = env.step(0.0)
    assert not done
    assert info["success"] and not info["failed"] and not info["timeout"]
    assert next_obs["cells"][0, 0, 0] == 1.0
    assert next_obs["cells"][0, 0, 1] == 0.0
    assert next_obs["progress"][0] == pytest.approx(1 / 20)


def test_env_episode_completes_within_cell_count():
    cfg = EnvConfig(width=4, height=4, biome=Biome.GRASSLAND, layout=Layout.WALLED, seed=3)
    env = WFCGenerationEnv(default_catalog(), config=cfg)
    env.reset()
    done, steps, info = False, 0, {}
    while not done:
        _, done, info = env.step(0.3)
        steps += 1
    assert steps == 16
    assert info["complete"] and not info["failed"]


def test_env_times_out_after_max_steps():
    cfg = EnvConfig(width=5, height=5, biome=Biome.CITY, layout=Layout.OPEN, max_steps=3, seed=1)
    env = WFCGenerationEnv(default_catalog(), config=cfg)
    env.reset()
    results = [env.step(0.0) for _ in range(3)]
    assert [done for _, done, _ in results] == [False, False, True]
    assert results[-1][2]["timeout"]
    assert not results[-1][2]["complete"]


def test_env_draws_biome_and_layout_from_catalog():
    catalog = default_catalog()
    env = WFCGenerationEnv(catalog, config=EnvConfig(width=3, height=3, seed=12))
    seen = set()
    for _ in range(20):
        env.reset()
        assert env.biome in catalog.biomes()
        seen.add((env.biome, env.layout))
    assert len(seen) > 1


def test_env_rejects_catalog_without_requested_biome():
    with pytest.raises(ValueError):
        WFCGenerationEnv(default_catalog(), config=EnvConfig(biome=Biome.OCEAN))
    with pytest.raises(ValueError):
        WFCGenerationEnv(TileCatalog([]))


def test_encode_obs_to_vector_length():
    cfg = EnvConfig(width=3, height=2, biome=Biome.FOREST, layout=Layout.SPARSE)
    env = WFCGenerationEnv(default_catalog(), config=cfg)
    vec = encode_obs_to_vector(env.reset())
    assert vec.dtype == np.float32
    assert vec.shape == (3 * 2 * 2 + len(Biome) + len(Layout) + 2,)


def test_run_episode_summary_and_jsonl_log(tmp_path):
    log_path = tmp_path / "episodes.jsonl"
    cfg = EnvConfig(width=4, height=3, seed=5, log_path=str(log_path))
    env = WFCGenerationEnv(default_catalog(), config=cfg)
    first = env.run_episode(HeuristicAdjustmentPolicy(seed=0))
    second = env.run_episode(ConstantAdjustmentPolicy(0.0))
    for summary in (first, second):
        assert summary["complete"] and not summary["failed"]
        assert summary["steps"] == 12
        assert summary["completion"] == 1.0
    lines = log_path.read_text(encoding="utf-8").strip().splitlines()
    assert len(lines) == 2
    assert json.loads(lines[1])["episode"] == second["episode"]
    assert second["episode"] > first["episode"]


def test_heuristic_policy_is_seeded_and_biome_aware():
    env = WFCGenerationEnv(
        default_catalog(), config=EnvConfig(width=3, height=3, biome=Biome.FOREST, layout=Layout.SPARSE)
    )
    obs = env.reset()
    a = [HeuristicAdjustmentPolicy(seed=4)(obs) for _ in range(3)]
    b = [HeuristicAdjustmentPolicy(seed=4)(obs) for _ in range(3)]
    assert a == b
    quiet = HeuristicAdjustmentPolicy(seed=4, noise=0.0)
    assert quiet(obs) == pytest.approx(0.2)


def test_task_presets_build_environments():
    catalog = default_catalog()
    for name, task in task_presets().items():
        assert task.name == name
        env = WFCGenerationEnv(catalog, config=task.env_config)
        obs = env.reset()
        cfg = task.env_config
        assert obs["cells"].shape == (cfg.height, cfg.width, 2)
        assert env.max_steps == cfg.width * cfg.height * 2


def test_env_step_reports_contradiction_as_done_and_failed():
    isolated = TileCatalog([TileVariant("a", Biome.GRASSLAND), TileVariant("b", Biome.GRASSLAND)])
    cfg = EnvConfig(width=2, height=1, biome=Biome.GRASSLAND, layout=Layout.OPEN, seed=0)
    env = WFCGenerationEnv(isolated, config=cfg)
    env.reset()
    _, done, info = env.step(0.0)
    assert done
    assert info["failed"] and not info["success"]
    assert not info["complete"] and not info["timeout"]

    summary = env.run_episode(ConstantAdjustmentPolicy(0.0))
    assert summary["failed"] and summary["steps"] == 1
    assert summary["completion"] == 0.5


def test_env_max_steps_zero_is_not_the_default():
    with pytest.raises(ValueError):
        WFCGenerationEnv(default_catalog(), config=EnvConfig(width=3, height=3, max_steps=0))

    env = WFCGenerationEnv(default_catalog(), config=EnvConfig(width=3, height=3, biome=Biome.CITY, seed=2))
    summary = env.run_episode(ConstantAdjustmentPolicy(0.0), max_steps=0)
    assert summary["steps"] == 0
    assert summary["completion"] == 0.0
