from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Mapping, Union

PathLike = Union[str, Path]


class ClippingRule(Enum):
    """
    How candidate columns near the image border are rejected.

    ``SYMMETRIC`` mirrors the row rule on the horizontal axis, including its
    ``>=`` bound: a block whose last column is the last image column is
    rejected too, just as a block ending on the last row is. ``LEGACY``
    reproduces the historical rule, which only rejects negative x origins and
    compares the candidate's vertical extent against the image width; such
    candidates may read past the end of a row into the next one.
    """

    SYMMETRIC = "symmetric"
    LEGACY = "legacy"


@dataclass(slots=True)
class MatchConfig:
    """
    Parameters of the exhaustive block matcher.
    """

    block_size: int = 16
    search_radius: int = 12
    clipping: ClippingRule = ClippingRule.SYMMETRIC
    workers: int = 1

    @property
    def block_radius(self) -> int:
        return self.block_size // 2

    def validate(self) -> None:
        if self.block_size <= 0:
            raise ValueError("block_size must be positive")
        if self.search_radius < 0:
            raise ValueError("search_radius must be >= 0")
        if not isinstance(self.clipping, ClippingRule):
            raise ValueError(f"clipping must be a ClippingRule, got {self.clipping!r}")
        if self.workers < 1:
            raise ValueError("workers must be >= 1")

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["clipping"] = self.clipping.value
        return data

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "MatchConfig":
        unknown = set(values) - {"block_size", "search_radius", "clipping", "workers"}
        if unknown:
            raise ValueError(f"Unknown configuration keys: {', '.join(sorted(unknown))}")

        config = cls()
        try:
            if "block_size" in values:
                config.block_size = int(values["block_size"])
            if "search_radius" in values:
                config.search_radius = int(values["search_radius"])
            if "clipping" in values:
                config.clipping = ClippingRule(values["clipping"])
            if "workers" in values:
                config.workers = int(values["workers"])
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Invalid configuration values: {dict(values)}") from exc

        config.validate()
        return config


def load_match_config(path: PathLike) -> MatchConfig:
    """
    Read a JSON object with optional ``block_size``, ``search_radius``,
    ``clipping`` and ``workers`` keys.
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with config_path.open(encoding="utf-8") as handle:
        try:
            values = json.load(handle)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Config file is not valid JSON: {config_path}") from exc

    if not isinstance(values, dict):
        raise ValueError(f"Config file must contain a JSON object: {config_path}")
    return MatchConfig.from_mapping(values)


__all__ = ["ClippingRule", "MatchConfig", "load_match_config"]
