import logging
import subprocess

from branch_reviewer.errors import (
    EmptyChangeSet,
    InvalidRevision,
    NoMergeBase,
    SubprocessFailure,
)

logger = logging.getLogger(__name__)

UPSTREAM_CANDIDATES = ("origin/main", "origin/master")
CONTEXT_LINES = 30


def _run_git(*args: str) -> subprocess.CompletedProcess:
    logger.debug("git %s", " ".join(args))
    return subprocess.run(["git", *args], capture_output=True, check=False)


def _merge_base(upstream: str) -> str | None:
    """Return the merge base, "" if git found none, or None if the lookup failed."""
    try:
        result = _run_git("merge-base", upstream, "HEAD")
    except OSError as exc:
        logger.debug("merge-base with %s failed: %s", upstream, exc)
        return None
    if result.returncode != 0:
        logger.debug("merge-base with %s exited %d", upstream, result.returncode)
        return None
    return result.stdout.decode("utf-8", errors="replace").strip()


def resolve_base(against: str | None = None) -> str:
    """Return the revision the current HEAD should be diffed against.

    An explicit revision is used as-is once git confirms it exists. Otherwise
    the merge base with the first upstream default branch git can look up is
    used, and an empty answer from that lookup means there is none.
    """
    if against is not None:
        try:
            result = _run_git("rev-parse", "--verify", against)
        except OSError:
            result = None
        if result is None or result.returncode != 0:
            raise InvalidRevision(f"Invalid git revision: {against}")
        return against

    for upstream in UPSTREAM_CANDIDATES:
        base = _merge_base(upstream)
        if base is None:
            continue
        if base:
            return base
        break

    raise NoMergeBase(
        "Failed to find merge base with " + " or ".join(UPSTREAM_CANDIDATES)
    )


def extract_diff(base: str) -> str:
    try:
        result = _run_git("diff", f"-U{CONTEXT_LINES}", base, "HEAD")
    except OSError as exc:
        raise SubprocessFailure(f"Failed to run `git diff`: {exc}") from exc

    if result.returncode != 0:
        raise SubprocessFailure(f"`git diff` failed with status: {result.returncode}")

    if not result.stdout:
        raise EmptyChangeSet("No changes found")

    return result.stdout.decode("utf-8", errors="replace")


def get_changes(against: str | None = None) -> str:
    return extract_diff(resolve_base(against))
