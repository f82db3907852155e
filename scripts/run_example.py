import argparse
from copy import deepcopy

import numpy as np

from wfc_rl_env import (
    ConstantAdjustmentPolicy,
    HeuristicAdjustmentPolicy,
    WFCGenerationEnv,
    default_catalog,
    task_presets,
)


def main():
    parser = argparse.ArgumentParser(description="Generate maps step by step with an adjustment policy.")
    parser.add_argument("--task", type=str, default="mixed_biomes", choices=list(task_presets().keys()))
    parser.add_argument("--episodes", type=int, default=5)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument(
        "--policy",
        type=str,
        default="heuristic",
        choices=["heuristic", "neutral"],
        help="Adjustment policy: the hand-written heuristic or a constant neutral signal.",
    )
    parser.add_argument("--log_path", type=str, default=None, help="Optional JSONL log file.")
    parser.add_argument("--show_grid", action="store_true", help="Print tile ids of the last episode.")
    args = parser.parse_args()

    preset = task_presets()[args.task]
    env_config = deepcopy(preset.env_config)
    env_config.seed = args.seed
    env_config.log_path = args.log_path
    env = WFCGenerationEnv(default_catalog(), config=env_config)

    if args.policy == "heuristic":
        policy = HeuristicAdjustmentPolicy(seed=args.seed)
    else:
        policy = ConstantAdjustmentPolicy(0.0)

    completions = []
    for ep in range(args.episodes):
        summary = env.run_episode(policy)
        completions.append(summary["completion"])
        status = "complete" if summary["complete"] else ("failed" if summary["failed"] else "timeout")
        print(
            f"Episode {ep+1}/{args.episodes}: biome={summary['biome']}, layout={summary['layout']}, "
            f"seed={summary['seed']}, steps={summary['steps']}, status={status}, "
            f"completion={summary['completion']:.3f}"
        )
    print(f"Mean completion over {args.episodes} episodes: {float(np.mean(completions)):.3f}")

    if args.show_grid:
        tiles = env.generator.get_grid().tile_ids()
        for row in tiles:
            print(" ".join(f"{(t or '?'):>12}" for t in row))


if __name__ == "__main__":
    main()
