"""
Evolve every target of a YAML suite and record how long each took to emerge.

Writes <out-dir>/runs/suite.csv (one row per task) and
<out-dir>/runs/suite_best.json (final candidate and settings per task).
"""

import argparse
import csv
import json
import os
import sys
from typing import Any, Dict, List, Optional

import yaml

from weasel.tasks.target_suite import DEFAULT_TARGETS_YAML, TargetTask, load_target_tasks
from weasel.weasel_evolution import EvolutionConfig, EvolutionRunner

SUITE_FIELDS = ["run_id", "task", "target", "success", "generations", "best_fitness", "duration"]


def ensure_output_dirs(out_dir: str) -> str:
    """Create <out_dir>/runs if needed and return it."""
    runs_dir = os.path.join(out_dir, "runs")
    os.makedirs(runs_dir, exist_ok=True)
    return runs_dir


def run_task(task: TargetTask, seed: Optional[int], max_generations: Optional[int], quiet: bool = True) -> Dict[str, Any]:
    settings = dict(task.settings)
    settings["target"] = task.target
    if seed is not None:
        settings.setdefault("seed", seed)
    if max_generations is not None:
        settings.setdefault("max_generations", max_generations)
    config = EvolutionConfig.from_dict(settings)

    if quiet:
        runner = EvolutionRunner(config, on_progress=lambda candidate, generation: None,
                                 on_start=lambda candidate: None)
    else:
        runner = EvolutionRunner(config)
    result = runner.run_evolution()
    result["settings"] = settings
    return result


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(prog="weasel-suite", description="Evolve every target of a YAML suite")
    ap.add_argument("--targets_yaml", default=DEFAULT_TARGETS_YAML, help="Path to YAML file with target tasks")
    ap.add_argument("--tasks", default="", help="Optional comma-separated list of task names to run; if empty, run all from YAML")
    ap.add_argument("--seed", type=int, default=42)
    ap.add_argument("--max-generations", type=int, default=None, help="Optional cap per task")
    ap.add_argument("--out-dir", default="outputs")
    ap.add_argument("--show-progress", action="store_true", help="Print each improvement line")
    args = ap.parse_args(argv)

    try:
        all_tasks = {t.name: t for t in load_target_tasks(args.targets_yaml)}
    except (ValueError, OSError, yaml.YAMLError) as e:
        print(f"Cannot load tasks: {e}", file=sys.stderr)
        return 1

    task_names = [n for n in args.tasks.split(",") if n] if args.tasks else list(all_tasks.keys())
    runs_dir = ensure_output_dirs(args.out_dir)
    out_file = os.path.join(runs_dir, "suite.csv")
    best_file = os.path.join(runs_dir, "suite_best.json")

    rows = []
    best = {}
    for tn in task_names:
        if tn not in all_tasks:
            print(f"Skipping unknown task '{tn}' (not in {args.targets_yaml})")
            continue
        task = all_tasks[tn]
        print(f"Evolving task: {tn} -> '{task.target}'")
        try:
            result = run_task(task, args.seed, args.max_generations, quiet=not args.show_progress)
        except ValueError as e:
            print(f"  ✗ Invalid settings for {tn}: {e}")
            continue

        if result["success"]:
            print(f"  ✓ Matched at gen {result['generations']} ({result['duration']:.2f}s)")
        else:
            print(f"  ✗ Not matched in {result['generations']} generations (best fitness {result['best_fitness']})")

        rows.append({
            "run_id": args.seed,
            "task": tn,
            "target": task.target,
            "success": result["success"],
            "generations": result["generations"],
            "best_fitness": result["best_fitness"],
            "duration": round(result["duration"], 4),
        })
        best[tn] = {
            "target": task.target,
            "best_candidate": result["best_candidate"],
            "generations": result["generations"],
            "settings": result["settings"],
        }

    with open(out_file, "w", newline="") as f:
        w = csv.DictWriter(f, fieldnames=SUITE_FIELDS)
        w.writeheader()
        w.writerows(rows)
    with open(best_file, "w") as f:
        json.dump(best, f, indent=2)

    print(f"\nResults written to {out_file}")
    print(f"Best candidates written to {best_file}")

    solved = [r for r in rows if r["success"]]
    print("\nSUMMARY:")
    print(f"  Tasks attempted: {len(rows)}")
    print(f"  Tasks solved: {len(solved)}")
    if solved:
        avg = sum(r["generations"] for r in solved) / len(solved)
        print(f"  Average emergence time: {avg:.1f} generations")
    return 0


if __name__ == "__main__":
    sys.exit(main())
