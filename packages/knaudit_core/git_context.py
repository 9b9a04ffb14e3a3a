"""Read commit, branch and repository name from a checked-out ``.git`` directory.

Only plain files are read; no git binary or library is involved. The workflow
image clones a single branch, so ``.git/refs/heads`` normally holds exactly
one ref file whose name is the branch and whose content is the commit.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from packages.knaudit_core.errors import AmbiguousRefError, NotFoundError, RepoNotFoundError

_HEADS_DIR = Path(".git") / "refs" / "heads"
_HEAD_FILE = Path(".git") / "HEAD"
_CONFIG_FILE = Path(".git") / "config"
_SYMBOLIC_REF_PREFIX = "ref: refs/heads/"


@dataclass(frozen=True)
class GitHead:
    """Commit hash and branch name of the checked-out ref."""

    commit_sha1: str
    branch: str


@dataclass(frozen=True)
class GitContext:
    """Source-control provenance fields of the audit record."""

    commit_sha1: str
    branch: str
    repo: str


def read_head(repo_path: str | Path) -> GitHead:
    """Return the commit and branch of the single ref under ``refs/heads``.

    When several refs exist, ``.git/HEAD`` decides; if it does not name one of
    them, ``AmbiguousRefError`` is raised rather than guessing.
    """
    root = Path(repo_path)
    heads_dir = root / _HEADS_DIR
    refs = _list_refs(heads_dir)
    if not refs:
        raise NotFoundError(f"no branch refs found under {heads_dir}", path=str(heads_dir))

    if len(refs) == 1:
        branch = refs[0]
    else:
        branch = _branch_from_head(root / _HEAD_FILE, refs)
        if branch is None:
            raise AmbiguousRefError(refs, path=str(heads_dir))

    ref_file = heads_dir / branch
    try:
        commit = ref_file.read_text(encoding="utf-8").replace("\n", "").strip()
    except OSError as exc:
        raise NotFoundError(f"cannot read ref {ref_file}: {exc}", path=str(ref_file)) from exc
    if not commit:
        raise NotFoundError(f"ref {ref_file} is empty", path=str(ref_file))
    return GitHead(commit_sha1=commit, branch=branch)


def read_repo(repo_path: str | Path, allowed_orgs: Iterable[str]) -> str:
    """Return ``org/repo`` from the first allow-listed GitHub URL in ``.git/config``."""
    config_file = Path(repo_path) / _CONFIG_FILE
    pattern = repo_url_pattern(allowed_orgs)
    try:
        with config_file.open("r", encoding="utf-8") as handle:
            for line in handle:
                match = pattern.search(line)
                if match is not None:
                    return f"{match.group('org')}/{match.group('repo')}"
    except OSError as exc:
        raise RepoNotFoundError(
            f"cannot read {config_file}: {exc}", path=str(config_file)
        ) from exc
    raise RepoNotFoundError(
        f"no github.com URL for an allowed organization in {config_file}",
        path=str(config_file),
    )


def read_git_context(repo_path: str | Path, allowed_orgs: Iterable[str]) -> GitContext:
    """Read head and repository name in one call."""
    head = read_head(repo_path)
    return GitContext(
        commit_sha1=head.commit_sha1,
        branch=head.branch,
        repo=read_repo(repo_path, allowed_orgs),
    )


def repo_url_pattern(allowed_orgs: Iterable[str]) -> re.Pattern[str]:
    """Compile the GitHub URL pattern for the given organizations.

    Matches both ``https://github.com/org/repo(.git)`` and
    ``git@github.com:org/repo(.git)``; the organization must match whole.
    """
    orgs = "|".join(re.escape(org) for org in allowed_orgs)
    return re.compile(
        rf"github\.com[/:](?P<org>{orgs})/(?P<repo>[A-Za-z0-9_.-]+?)(?:\.git)?/?(?=\s|$)"
    )


def _list_refs(heads_dir: Path) -> list[str]:
    """Return ref names below ``heads_dir`` using ``/`` for nested branches."""
    if not heads_dir.is_dir():
        return []
    try:
        return sorted(
            path.relative_to(heads_dir).as_posix()
            for path in heads_dir.rglob("*")
            if path.is_file()
        )
    except OSError as exc:
        raise NotFoundError(
            f"cannot list refs under {heads_dir}: {exc}", path=str(heads_dir)
        ) from exc


def _branch_from_head(head_file: Path, refs: list[str]) -> str | None:
    """Return the branch named by a symbolic ``HEAD`` when it is one of ``refs``."""
    try:
        content = head_file.read_text(encoding="utf-8").strip()
    except OSError:
        return None
    if not content.startswith(_SYMBOLIC_REF_PREFIX):
        return None
    branch = content[len(_SYMBOLIC_REF_PREFIX) :]
    return branch if branch in refs else None

