"""
Tests for the command line surfaces and file outputs
=====================================================
Covers: weasel CLI (output format, exit codes, YAML settings), target suite
loading, history export, convergence plot, weasel-suite batch runner.
All files are written under tmp_path.
"""

import csv
import json

import pytest

from weasel.__main__ import main
from weasel.core.alphabet import InvalidCharacter
from weasel.experiments import evolve_suite
from weasel.history import EvolutionHistory
from weasel.tasks.target_suite import DEFAULT_TARGETS_YAML, load_run_settings, load_target_tasks
from weasel.visualization import plot_convergence


def _lines(out):
    return [line for line in out.splitlines()]


# ---------------------------------------------------------------------------
# weasel CLI
# ---------------------------------------------------------------------------

class TestMain:

    def test_prints_target_then_progress(self, capsys):
        assert main(["CAT", "--seed", "3"]) == 0
        lines = _lines(capsys.readouterr().out)
        assert lines[0] == "CAT"
        # starting candidate, bare
        assert len(lines[1]) == 3 and " : " not in lines[1]
        candidate, generation = lines[-1].split(" : ")
        assert candidate == "CAT"
        assert int(generation) >= 1
        gens = [int(line.split(" : ")[1]) for line in lines[2:]]
        assert gens == sorted(gens)

    def test_lowercase_target_fails(self, capsys):
        assert main(["cat"]) == 1
        captured = capsys.readouterr()
        assert captured.out == ""
        assert captured.err.strip() == (
            "Bad character: c, permissable characters: ABCDEFGHIJKLMNOPQRSTUVWXYZ"
        )

    def test_empty_target_terminates_immediately(self, capsys):
        assert main(["", "--seed", "1"]) == 0
        assert _lines(capsys.readouterr().out) == ["", ""]

    def test_invalid_option_value(self, capsys):
        assert main(["CAT", "--mutation-rate", "2"]) == 1
        assert "Invalid configuration" in capsys.readouterr().err

    @pytest.mark.parametrize("line", ['nb_copy: "400"', "num_parents: 2.5", "mutation_rate: high"])
    def test_mistyped_config_file_values(self, tmp_path, capsys, line):
        cfg = tmp_path / "run.yaml"
        cfg.write_text(f"evolution:\n  {line}\n")
        assert main(["CAT", "--config", str(cfg)]) == 1
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "Invalid configuration" in captured.err

    def test_generation_cap_exit_status(self, capsys):
        assert main(["METHINKS IT IS LIKE A WEASEL", "--seed", "0",
                     "--max-generations", "1", "--mutation-rate", "0"]) == 2

    def test_config_file_and_override(self, tmp_path, capsys):
        cfg = tmp_path / "run.yaml"
        cfg.write_text("evolution:\n  target: DOG\n  nb_copy: 200\n  seed: 9\n")
        assert main(["--config", str(cfg)]) == 0
        lines = _lines(capsys.readouterr().out)
        assert lines[0] == "DOG"
        assert lines[-1].startswith("DOG : ")

        assert main(["CAT", "--config", str(cfg)]) == 0
        assert _lines(capsys.readouterr().out)[0] == "CAT"

    def test_simple_mode(self, capsys):
        assert main(["CAT", "--simple", "--seed", "2"]) == 0
        assert _lines(capsys.readouterr().out)[-1].startswith("CAT : ")

    def test_writes_history_and_plot(self, tmp_path, capsys):
        csv_path = tmp_path / "out" / "history.csv"
        json_path = tmp_path / "out" / "history.json"
        png_path = tmp_path / "out" / "plot.png"
        assert main(["HELLO", "--seed", "4", "--history-csv", str(csv_path),
                     "--history-json", str(json_path), "--plot", str(png_path)]) == 0
        with open(csv_path) as f:
            rows = list(csv.DictReader(f))
        data = json.loads(json_path.read_text())
        assert data["target"] == "HELLO"
        assert data["total_generations"] == len(rows)
        assert rows[-1]["best_fitness"] == "0"
        assert png_path.stat().st_size > 0


# ---------------------------------------------------------------------------
# Target suite loading
# ---------------------------------------------------------------------------

class TestTargetSuite:

    def test_bundled_suite(self):
        tasks = {t.name: t for t in load_target_tasks(DEFAULT_TARGETS_YAML)}
        assert tasks["weasel"].target == "METHINKS IT IS LIKE A WEASEL"
        assert tasks["weasel_simple"].settings["num_parents"] == 1

    def test_mapping_format(self, tmp_path):
        path = tmp_path / "t.yaml"
        path.write_text("cat: CAT\ndog: DOG\n")
        assert [(t.name, t.target) for t in load_target_tasks(str(path))] == [("cat", "CAT"), ("dog", "DOG")]

    def test_list_format_with_settings(self, tmp_path):
        path = tmp_path / "t.yaml"
        path.write_text("- name: cat\n  target: CAT\n  nb_copy: 50\n")
        (task,) = load_target_tasks(str(path))
        assert task.settings == {"nb_copy": 50}

    def test_invalid_target_rejected(self, tmp_path):
        path = tmp_path / "t.yaml"
        path.write_text("bad: cat\n")
        with pytest.raises(InvalidCharacter):
            load_target_tasks(str(path))

    @pytest.mark.parametrize("text", ["", "- name: x\n", "- target: CAT\n", "42\n"])
    def test_malformed_files(self, tmp_path, text):
        path = tmp_path / "t.yaml"
        path.write_text(text)
        with pytest.raises(ValueError):
            load_target_tasks(str(path))

    def test_run_settings_plain_mapping(self, tmp_path):
        path = tmp_path / "s.yaml"
        path.write_text("mutation_rate: 0.1\n")
        assert load_run_settings(str(path)) == {"mutation_rate": 0.1}


# ---------------------------------------------------------------------------
# History / plot
# ---------------------------------------------------------------------------

class TestHistory:

    def test_record_statistics(self):
        h = EvolutionHistory("CAT")
        stats = h.record(1, [("CAR", 1), ("DOG", 3), ("CAB", 1)], improved=True)
        assert stats.best_fitness == 1
        assert stats.best_candidate == "CAR"
        assert stats.worst_fitness == 3
        assert stats.mean_fitness == pytest.approx(5 / 3)
        assert len(h) == 1
        assert h.best is stats
        assert h.improvements() == [stats]

    def test_plot_requires_generations(self, tmp_path):
        with pytest.raises(ValueError):
            plot_convergence(EvolutionHistory("CAT"), tmp_path / "x.png")


# ---------------------------------------------------------------------------
# weasel-suite
# ---------------------------------------------------------------------------

class TestEvolveSuite:

    def test_runs_selected_tasks(self, tmp_path, capsys):
        targets = tmp_path / "targets.yaml"
        targets.write_text(
            "tasks:\n"
            "  - name: cat\n    target: CAT\n"
            "  - name: dog\n    target: DOG\n    num_parents: 1\n    recombination: false\n"
            "  - name: skip\n    target: SKIP\n"
        )
        out_dir = tmp_path / "outputs"
        assert evolve_suite.main(["--targets_yaml", str(targets), "--tasks", "cat,dog,nope",
                                  "--out-dir", str(out_dir), "--seed", "3"]) == 0

        with open(out_dir / "runs" / "suite.csv") as f:
            rows = list(csv.DictReader(f))
        assert [r["task"] for r in rows] == ["cat", "dog"]
        assert all(r["success"] == "True" for r in rows)

        best = json.loads((out_dir / "runs" / "suite_best.json").read_text())
        assert best["cat"]["best_candidate"] == "CAT"
        assert best["dog"]["settings"]["num_parents"] == 1
        assert "Skipping unknown task 'nope'" in capsys.readouterr().out

    def test_bad_suite_file(self, tmp_path, capsys):
        targets = tmp_path / "targets.yaml"
        targets.write_text("bad: cat\n")
        assert evolve_suite.main(["--targets_yaml", str(targets), "--out-dir", str(tmp_path)]) == 1
