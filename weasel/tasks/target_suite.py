from dataclasses import dataclass, field
from typing import List, Dict, Any
import os

import yaml

from weasel.core.alphabet import validate_target

# bundled suite, used by weasel-suite when no file is given
DEFAULT_TARGETS_YAML = os.path.join(os.path.dirname(__file__), "targets.yaml")


@dataclass
class TargetTask:
    name: str
    target: str
    settings: Dict[str, Any] = field(default_factory=dict)  # EvolutionConfig overrides for this task


def _read_yaml(path: str) -> Any:
    with open(path, "r") as f:
        return yaml.safe_load(f)


def _coerce_target(name: str, value: Any) -> str:
    if not isinstance(value, str):
        raise ValueError(f"Task '{name}': target must be a string")
    return validate_target(value)


def load_target_tasks(path: str) -> List[TargetTask]:
    """Load target tasks from a YAML file.
    Supported formats:
      1) { tasks: [ { name, target, <config overrides>... }, ... ] }
      2) Mapping of name -> target, e.g.: { weasel: "METHINKS IT IS LIKE A WEASEL" }
      3) A list of { name, target, ... } objects
    Every target is validated against the alphabet.
    """
    data = _read_yaml(path)
    if data is None:
        raise ValueError(f"Empty tasks file: {path}")

    items: List[Dict[str, Any]]
    if isinstance(data, dict):
        if "tasks" in data and isinstance(data["tasks"], list):
            items = data["tasks"]
        else:
            items = [{"name": k, "target": v} for k, v in data.items()]
    elif isinstance(data, list):
        items = data
    else:
        raise ValueError("Unsupported tasks structure; expected dict or list")

    tasks: List[TargetTask] = []
    for obj in items:
        if not isinstance(obj, dict):
            raise ValueError("Each task must be a mapping with 'name' and 'target'")
        name = obj.get("name")
        if not name:
            raise ValueError("Each task must have 'name'")
        if "target" not in obj:
            raise ValueError(f"Task '{name}' must have 'target'")
        settings = {k: v for k, v in obj.items() if k not in ("name", "target")}
        tasks.append(TargetTask(name=str(name), target=_coerce_target(name, obj["target"]), settings=settings))
    return tasks


def load_run_settings(path: str) -> Dict[str, Any]:
    """Load EvolutionConfig keyword arguments from a YAML mapping.
    A top-level 'evolution' section is used when present.
    """
    data = _read_yaml(path)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError("Run settings must be a mapping")
    if "evolution" in data:
        data = data["evolution"]
        if not isinstance(data, dict):
            raise ValueError("'evolution' section must be a mapping")
    return dict(data)
