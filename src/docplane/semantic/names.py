"""Display-name normalization for engine-reported names."""

from __future__ import annotations

import re

# Engines name unique symbols "__@<description>@<id>"; the id changes between runs
_UNIQUE_SYMBOL_RE = re.compile(r"^__@(.*)@\d+$")


def get_human_name(name: str) -> str:
    """Turn an engine name into the name shown in documentation.

    - ``__@iterator@44`` -> ``[iterator]``
    - ``"my-module"`` / ``'my-module'`` -> ``my-module`` (string-literal names)
    - anything else is returned unchanged
    """
    match = _UNIQUE_SYMBOL_RE.match(name)
    if match:
        return f"[{match.group(1)}]"
    if len(name) >= 2 and name[0] == name[-1] and name[0] in ("'", '"'):
        return name[1:-1]
    return name
