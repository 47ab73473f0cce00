"""Utility for computing relative links between generated files."""


def path_segments(path: str) -> list[str]:
    """Split a path into forward-slash segments, accepting either separator."""
    return [s for s in path.replace("\\", "/").split("/") if s and s != "."]


def relative_path(from_file: str, to_file: str) -> str:
    """Return the shortest relative path from `from_file`'s directory to `to_file`.

    Both paths are rooted at the same base. The result always uses forward
    slashes, and is empty when both paths name the same file.
    """
    source = path_segments(from_file)
    target = path_segments(to_file)
    if source == target:
        return ""

    source_dirs = source[:-1]
    target_dirs = target[:-1]
    common = 0
    while (
        common < len(source_dirs)
        and common < len(target_dirs)
        and source_dirs[common] == target_dirs[common]
    ):
        common += 1

    ups = [".."] * (len(source_dirs) - common)
    return "/".join(ups + target[common:])
