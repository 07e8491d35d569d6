from typing import Any, Dict, Iterable, Mapping


# PUBLIC_INTERFACE
def clean_items(items: Mapping[str, Any], needed_keys: Iterable[str]) -> Dict[str, Any]:
    """
    Keep only the entries of ``items`` named in ``needed_keys``.

    Keys that are missing or hold ``None`` are dropped. The result follows
    the order of ``needed_keys``, so a client can never smuggle an extra
    column (``is_admin`` and friends) into a generated query.
    """
    cleaned: Dict[str, Any] = {}
    for key in needed_keys:
        value = items.get(key)
        if value is None:
            continue
        cleaned[key] = value
    return cleaned
