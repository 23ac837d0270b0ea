import os
from pathlib import Path
from typing import Optional, Union


def is_within(path: Union[str, Path], root: Union[str, Path]) -> bool:
    """True if the fully resolved ``path`` is ``root`` or lies below it."""
    real_path = os.path.realpath(path)
    real_root = os.path.realpath(root)
    return real_path == real_root or real_path.startswith(real_root.rstrip(os.sep) + os.sep)


def resolve_inside(root: Union[str, Path], name: str) -> Optional[Path]:
    """
    Resolve ``root / name`` and return it only if it stays inside ``root``.

    A symbolic link that points outside the repository resolves to None, so a
    cloned repository can never make us read host files.
    """
    candidate = Path(root) / name
    if not is_within(candidate, root):
        return None
    return candidate
