import fnmatch
from pathlib import Path
from typing import List, Union


def find_files(directory: Union[str, Path], pattern: str) -> List[Path]:
    """
    Return the files in `directory` matching a glob `pattern`, sorted by path.

    Simple patterns such as '*.toml' are matched case-insensitively against the
    directory's direct children. Patterns containing a path separator or '**'
    are handed to Path.glob unchanged.

    Raises:
        FileNotFoundError: If the directory does not exist
        NotADirectoryError: If the path is not a directory
    """
    path_obj = Path(directory).expanduser()

    if not path_obj.exists():
        raise FileNotFoundError(f"Path does not exist: {path_obj}")
    if not path_obj.is_dir():
        raise NotADirectoryError(f"Path is not a directory: {path_obj}")

    if "/" in pattern or "**" in pattern:
        return sorted(p for p in path_obj.glob(pattern) if p.is_file())

    lowered = pattern.lower()
    return sorted(
        p for p in path_obj.iterdir()
        if p.is_file() and fnmatch.fnmatchcase(p.name.lower(), lowered)
    )
