"""
Workspace path validation.

Pure function: the only side effects are read-only filesystem queries made
while resolving symlinks. Every failure to resolve is a rejection.
"""

import os
from collections.abc import Iterable
from pathlib import Path

from guard.models.policy import PathVerdict

# Checked against the raw string BEFORE any normalization, so that a path
# which would collapse back inside the root is still refused.
TRAVERSAL_TOKENS: tuple[str, ...] = ("../", "/..", "..\\", "\\..")

DEFAULT_BLOCKED_PATHS: tuple[str, ...] = (
    "~/.ssh",
    "~/.aws",
    "~/.gnupg",
    "~/.kube",
    "~/.docker",
    "~/.netrc",
    "~/.config/gcloud",
)


def validate_path(
    candidate: str,
    root: str | Path,
    blocked_paths: Iterable[str] = DEFAULT_BLOCKED_PATHS,
) -> PathVerdict:
    """Check that candidate resolves inside root and outside every blocked path."""
    # 1. Traversal intent
    if candidate == "..":
        return PathVerdict(ok=False, raw=candidate, reason="Path traversal blocked: '..'")
    for token in TRAVERSAL_TOKENS:
        if token in candidate:
            return PathVerdict(
                ok=False,
                raw=candidate,
                reason=f"Path traversal blocked: pattern {token!r} in {candidate!r}",
            )

    try:
        # 2. Home shorthand
        path = os.path.expanduser(candidate) if candidate.startswith("~") else candidate

        # 3–4. Canonicalize candidate and root (symlinks followed)
        abs_root = Path(root).expanduser().resolve(strict=True)
        if os.path.isabs(path):
            resolved = Path(path).resolve(strict=False)
        else:
            resolved = (abs_root / path).resolve(strict=False)
    except (OSError, RuntimeError, ValueError) as e:
        return PathVerdict(
            ok=False,
            raw=candidate,
            reason=f"Path could not be resolved: {type(e).__name__}: {e}",
        )

    # 5. Nesting on path segments, not string prefix
    if resolved != abs_root and abs_root not in resolved.parents:
        return PathVerdict(
            ok=False,
            raw=candidate,
            resolved=str(resolved),
            reason=f"Path outside workspace: {resolved} (workspace: {abs_root})",
        )

    # 6. Blocklist, additive to the nesting check
    for fragment in blocked_paths:
        if fragment and _matches_blocked(fragment, candidate, resolved):
            return PathVerdict(
                ok=False,
                raw=candidate,
                resolved=str(resolved),
                reason=f"Path matches blocked location '{fragment}': {resolved}",
            )

    return PathVerdict(
        ok=True,
        raw=candidate,
        resolved=str(resolved),
        reason="path inside workspace",
    )


def _matches_blocked(fragment: str, candidate: str, resolved: Path) -> bool:
    """Absolute fragments match by containment, relative ones by substring."""
    expanded = os.path.expanduser(fragment)
    if fragment in candidate or expanded in candidate:
        return True
    if os.path.isabs(expanded):
        try:
            blocked = Path(expanded).resolve(strict=False)
        except (OSError, RuntimeError):
            blocked = Path(expanded)
        return resolved == blocked or blocked in resolved.parents
    return expanded in resolved.as_posix()
