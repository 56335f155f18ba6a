#!/usr/bin/env python3
"""
weasel: evolve a random string into a target phrase.

    weasel                      # METHINKS IT IS LIKE A WEASEL
    weasel "TO BE OR NOT TO BE" --seed 7 --plot outputs/hamlet.png
"""

import argparse
import sys
from typing import Any, Dict, List, Optional

import yaml

from weasel.core.alphabet import InvalidCharacter
from weasel.tasks.target_suite import load_run_settings
from weasel.weasel_evolution import DEFAULT_TARGET, EvolutionConfig, EvolutionRunner


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="weasel", description="Evolve a random string toward a target phrase")
    ap.add_argument("target", nargs="?", default=None, help=f"Target phrase (default: {DEFAULT_TARGET!r})")
    ap.add_argument("--config", default=None, help="YAML file with evolution settings; flags override it")
    ap.add_argument("--nb-copy", type=int, default=None, help="Children per generation (default 400)")
    ap.add_argument("--mutation-rate", type=float, default=None, help="Per-character mutation probability (default 0.05)")
    ap.add_argument("--num-parents", type=int, default=None, help="Parents kept each generation (default 3)")
    ap.add_argument("--no-recombination", action="store_true", help="Mutation only, no crossover")
    ap.add_argument("--keep-parent-on-stall", action="store_true", help="Keep parents when a generation does not improve")
    ap.add_argument("--simple", action="store_true", help="Single-parent weasel: 1 parent, no crossover, keep on stall")
    ap.add_argument("--seed", type=int, default=None)
    ap.add_argument("--max-generations", type=int, default=None, help="Optional cap; unbounded by default")
    ap.add_argument("--parallel", action="store_true", help="Score children in a process pool kept for the whole run; only pays off for expensive fitness functions")
    ap.add_argument("--history-csv", default=None, help="Write per-generation statistics to CSV")
    ap.add_argument("--history-json", default=None, help="Write per-generation statistics to JSON")
    ap.add_argument("--plot", default=None, help="Save a convergence plot (PNG)")
    ap.add_argument("--verbose", action="store_true", help="Print the timestamped evolution log")
    return ap


def config_from_args(args: argparse.Namespace) -> EvolutionConfig:
    settings: Dict[str, Any] = load_run_settings(args.config) if args.config else {}

    if args.simple:
        settings.update(num_parents=1, recombination=False, keep_parent_on_stall=True)
    overrides = {
        "target": args.target,
        "nb_copy": args.nb_copy,
        "mutation_rate": args.mutation_rate,
        "num_parents": args.num_parents,
        "seed": args.seed,
        "max_generations": args.max_generations,
    }
    settings.update({k: v for k, v in overrides.items() if v is not None})
    if args.no_recombination:
        settings["recombination"] = False
    if args.keep_parent_on_stall:
        settings["keep_parent_on_stall"] = True
    if args.parallel:
        settings["parallel_eval"] = True
    if args.verbose:
        settings["verbose"] = True
    settings.setdefault("target", DEFAULT_TARGET)
    return EvolutionConfig.from_dict(settings)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = config_from_args(args)
    except InvalidCharacter as e:
        print(str(e), file=sys.stderr)
        return 1
    except (ValueError, OSError, yaml.YAMLError) as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 1

    print(config.target)
    runner = EvolutionRunner(config)
    result = runner.run_evolution()
    history = runner.engine.history

    if args.history_csv:
        history.to_csv(args.history_csv)
    if args.history_json:
        history.to_json(args.history_json)
    if args.plot and len(history):
        from weasel.visualization import plot_convergence
        plot_convergence(history, args.plot)

    if result["interrupted"]:
        return 130
    return 0 if result["success"] else 2


if __name__ == "__main__":
    sys.exit(main())
