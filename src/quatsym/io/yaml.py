"""Parameter files in YAML, with environment substitution and includes."""
__all__ = ["load", "dump"]

import os

import yaml

from . import dict as dict_utils


def load(filename: str, _parents: tuple[str, ...] = ()) -> dict:
    """Read parameters from YAML file `filename` into a dict.
    Environment variables ($NAME or ${NAME}) are substituted before parsing,
    and an empty file yields an empty dict. Files named by the key `include`
    (a path or list of paths, relative to the including file) are read first,
    so that entries of the including file override them."""
    path = os.path.abspath(filename)
    if path in _parents:
        chain = " > ".join(_parents + (path,))
        raise RecursionError(f"Cyclic include {chain}")
    with open(path) as f:
        params = yaml.safe_load(os.path.expandvars(f.read())) or {}
    if not isinstance(params, dict):
        raise ValueError(f"{filename} must contain a mapping of parameters")
    includes = params.pop("include", [])
    if isinstance(includes, str):
        includes = [includes]
    base_dir = os.path.dirname(path)
    included = [
        load(os.path.join(base_dir, name), _parents + (path,)) for name in includes
    ]
    return dict_utils.merge(included + [params])


def dump(params: dict) -> str:
    """YAML text for `params`, in block style for flat dicts."""
    return yaml.dump(params, default_flow_style=None)
