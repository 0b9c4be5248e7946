from __future__ import annotations
from dataclasses import dataclass, fields
from typing import Any

from quatsym.io import InvalidInputException, dict as dict_utils, yaml


@dataclass(frozen=True)
class SolverParameters:
    """Acceptance thresholds and search limits of `RotationSolver`.
    Can be specified in YAML with hyphenated keys, for example:

    .. code-block:: yaml

        rmsd-threshold: 3.0
        subunit-rmsd-threshold: 6.0
        fit-score-threshold: 50.0
        pseudo-symmetry-allowed: no
        max-order: 60
    """

    #: Maximum full-atom RMSD (A) of an accepted operation.
    rmsd_threshold: float = 3.0
    #: Maximum RMSD (A) of superposed subunit centers.
    subunit_rmsd_threshold: float = 6.0
    #: Minimum worst-subunit global distance test score (0 to 100).
    fit_score_threshold: float = 50.0
    #: Relate subunits from different sequence clusters or with unequal atoms.
    pseudo_symmetry_allowed: bool = False
    #: Cap on the number of operations searched for spherical (icosahedral) cases.
    max_order: int = 60
    #: Number of sampled rotation axes.
    n_axes: int = 1000

    def __post_init__(self) -> None:
        for name in ("rmsd_threshold", "subunit_rmsd_threshold"):
            if not getattr(self, name) > 0.0:
                raise InvalidInputException(f"{name} must be positive")
        if not 0.0 <= self.fit_score_threshold <= 100.0:
            raise InvalidInputException("fit_score_threshold must be in [0, 100]")
        for name in ("max_order", "n_axes"):
            value = getattr(self, name)
            try:
                is_count = float(value).is_integer() and value >= 1
            except (TypeError, ValueError):
                is_count = False
            if isinstance(value, bool) or not is_count:
                raise InvalidInputException(f"{name} must be a positive integer")
            object.__setattr__(self, name, int(value))  # eg. 60.0 from YAML

    @classmethod
    def from_dict(cls, params: dict[str, Any]) -> SolverParameters:
        """Construct from a dict, such as from YAML (hyphens allowed in keys)."""
        params = dict_utils.key_cleanup(params)
        known = {field.name for field in fields(cls)}
        unknown = sorted(set(params) - known)
        if unknown:
            raise InvalidInputException(f"Unknown solver parameters: {unknown}")
        return cls(**params)

    @classmethod
    def load(cls, filename: str) -> SolverParameters:
        """Construct from a YAML file (supports `include` and $ENV substitution)."""
        return cls.from_dict(yaml.load(filename))

    def updated(self, **kwargs) -> SolverParameters:
        """Copy with some parameters changed."""
        return self.from_dict({**self.as_dict(), **kwargs})

    def as_dict(self) -> dict[str, Any]:
        return {field.name: getattr(self, field.name) for field in fields(self)}

    def dump(self) -> str:
        """YAML representation (with hyphenated keys), readable by `load`."""
        return yaml.dump({k.replace("_", "-"): v for k, v in self.as_dict().items()})
