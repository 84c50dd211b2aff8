# treefuzz/config.py
import os
import json
import random
from typing import Any, Dict, Optional

from treefuzz.grammar.generator import GenerationConfig, LeafSelection

DEFAULT_CONFIG: Dict[str, Any] = {
    "min_nonterminals": 0,
    "max_nonterminals": 10,
    "exploration_budget": 1000,
    "max_steps": None,
    "leaf_selection": LeafSelection.RANDOM.value,
    "seed": None,
    "count": 10,
    "workers": 1,
    "start": None,
    "output_dir": None,
    "log_level": "INFO",
    "log_to_file": True,
    "log_file": "~/.treefuzz/treefuzz.log",
}


class TreefuzzConfigError(Exception):
    """Custom exception for treefuzz configuration errors."""
    pass


class TreefuzzConfig:
    def __init__(self, **kwargs):
        data = dict(DEFAULT_CONFIG)
        data.update(kwargs)
        self._data = data

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def __getattr__(self, name: str) -> Any:
        if name == "_data":
            raise AttributeError(name)
        if name in self._data:
            return self._data[name]
        raise AttributeError(f"'TreefuzzConfig' object has no attribute '{name}'")

    def __setattr__(self, name: str, value: Any) -> None:
        if name == "_data":
            super().__setattr__(name, value)
        else:
            self._data[name] = value

    def to_dict(self) -> Dict[str, Any]:
        return dict(self._data)

    @classmethod
    def load(cls, path: Optional[str] = None) -> "TreefuzzConfig":
        """
        Load config from `path`, or from ~/.treefuzz/config.json.

        The default file is created with default values when missing; an
        explicit path that does not exist is an error.
        """
        if path is None:
            config_path = os.path.join(_ensure_treefuzz_dir(), "config.json")
            if not os.path.exists(config_path):
                cfg = cls()
                cfg.save(config_path)
                return cfg
        else:
            config_path = os.path.expanduser(path)

        try:
            with open(config_path, "r") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise TreefuzzConfigError(f"Failed to load config from {config_path}: {e}")
        if not isinstance(data, dict):
            raise TreefuzzConfigError(f"Config in {config_path} must be a JSON object")
        return cls(**data)

    def save(self, path: Optional[str] = None) -> None:
        config_path = os.path.expanduser(path) if path else os.path.join(_ensure_treefuzz_dir(), "config.json")
        try:
            with open(config_path, "w") as f:
                json.dump(self._data, f, indent=2)
        except OSError as e:
            raise TreefuzzConfigError(f"Failed to save treefuzz config: {e}")

    def generation_config(self, rng: Optional[random.Random] = None) -> GenerationConfig:
        """
        Build the generation settings described by this config.

        Uses random.Random(seed) when no rng is given.
        """
        if rng is None:
            rng = random.Random(self.seed)
        try:
            return GenerationConfig(
                min_nonterminals=int(self.min_nonterminals),
                max_nonterminals=int(self.max_nonterminals),
                rng=rng,
                leaf_selection=LeafSelection(self.leaf_selection),
                exploration_budget=self.exploration_budget,
                max_steps=self.max_steps,
            )
        except (TypeError, ValueError) as e:
            raise TreefuzzConfigError(f"Invalid generation settings: {e}")


def _ensure_treefuzz_dir() -> str:
    """Ensure that ~/.treefuzz/ directory exists. Return its path."""
    home = os.path.expanduser("~")
    treefuzz_dir = os.path.join(home, ".treefuzz")
    os.makedirs(treefuzz_dir, exist_ok=True)
    return treefuzz_dir
