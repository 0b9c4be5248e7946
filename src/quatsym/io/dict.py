"""Clean-up and merging of parameter dicts read from YAML."""
__all__ = ["key_cleanup", "merge"]


def key_cleanup(params: dict) -> dict:
    """Replace hyphens in keys by underscores, so that keys written in YAML
    style (max-order) can be passed as keyword arguments (max_order)."""
    return {key.replace("-", "_"): value for key, value in params.items()}


def merge(d_list: list[dict]) -> dict:
    """Merge dicts in `d_list`, with later ones taking precedence.
    Nested dicts are merged key by key rather than replaced whole."""
    result: dict = {}
    for d in d_list:
        for key, value in d.items():
            previous = result.get(key)
            if isinstance(value, dict) and isinstance(previous, dict):
                result[key] = merge([previous, value])
            else:
                result[key] = value
    return result
