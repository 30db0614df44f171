# space_storage/path_utils.py

def sanitize_path(path: str) -> str:
    """Normalizes a bucket path: no leading/trailing or repeated slashes, no '.' segments.

    '/photos//2020/./a.png ' -> 'photos/2020/a.png'. The bucket root ('', '/') becomes ''.
    """
    segments = [segment for segment in path.strip().replace("\\", "/").split("/") if segment not in ("", ".")]
    return "/".join(segments)


def join_path(*parts: str) -> str:
    """Joins path parts, sanitizing the result."""
    return sanitize_path("/".join(part for part in parts if part))
