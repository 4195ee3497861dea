"""Precomputed set of files that the transform applies to."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Iterator
from pathlib import Path

import pathspec

from transcache_core.config.models import EligibilityConfig

logger = logging.getLogger(__name__)

# Never descended into while enumerating
_SKIP_DIRS = {".git", ".hg", ".svn"}


class EligibilityError(Exception):
    """Raised when the eligible file set cannot be enumerated."""

    def __init__(self, root: str, cause: Exception) -> None:
        self.root = root
        super().__init__(f"cannot enumerate eligible files under {root}: {cause}")
        self.__cause__ = cause


class EligibilitySet:
    """Static set of POSIX paths, relative to the pipeline root.

    Resolved once before any file flows through the stage and never changed
    afterwards.
    """

    def __init__(self, paths: Iterable[str]) -> None:
        self._paths = frozenset(Path(p).as_posix() for p in paths)

    @classmethod
    def from_globs(
        cls,
        root: str | Path,
        include: Iterable[str],
        always_include: Iterable[str] = (),
        exclude: Iterable[str] = (),
    ) -> EligibilitySet:
        """Match gitignore-style globs against every file under *root*.

        Excludes only narrow the include set; always-include patterns name
        files the excludes would otherwise drop and are added back last.
        """
        root_path = Path(root)
        include_spec = pathspec.GitIgnoreSpec.from_lines(list(include))
        always_spec = pathspec.GitIgnoreSpec.from_lines(list(always_include))
        exclude_spec = pathspec.GitIgnoreSpec.from_lines(list(exclude))

        selected: set[str] = set()
        for rel in _walk_files(root_path):
            if include_spec.match_file(rel) and not exclude_spec.match_file(rel):
                selected.add(rel)
            elif always_spec.match_file(rel):
                selected.add(rel)

        logger.info("%d eligible files under %s", len(selected), root_path)
        return cls(selected)

    @classmethod
    def from_config(cls, config: EligibilityConfig) -> EligibilitySet:
        return cls.from_globs(
            config.root,
            include=config.include,
            always_include=config.always_include,
            exclude=config.exclude,
        )

    @property
    def paths(self) -> frozenset[str]:
        return self._paths

    def __contains__(self, path: object) -> bool:
        return isinstance(path, str) and path in self._paths

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._paths))

    def __len__(self) -> int:
        return len(self._paths)


def match_files(
    root: str | Path, include: Iterable[str], exclude: Iterable[str] = ()
) -> list[str]:
    """Sorted relative paths under *root* matching *include* and not *exclude*."""
    include_spec = pathspec.GitIgnoreSpec.from_lines(list(include))
    exclude_spec = pathspec.GitIgnoreSpec.from_lines(list(exclude))
    return sorted(
        rel
        for rel in _walk_files(Path(root))
        if include_spec.match_file(rel) and not exclude_spec.match_file(rel)
    )


def _walk_files(root: Path) -> list[str]:
    """Relative POSIX paths of every regular file under *root*."""
    if not root.is_dir():
        raise EligibilityError(str(root), FileNotFoundError(f"not a directory: {root}"))

    def _raise(err: OSError) -> None:
        raise err

    files: list[str] = []
    try:
        for dirpath, dirnames, filenames in os.walk(root, onerror=_raise):
            dirnames[:] = [d for d in dirnames if d not in _SKIP_DIRS]
            rel_dir = Path(dirpath).relative_to(root)
            for name in filenames:
                files.append((rel_dir / name).as_posix())
    except OSError as e:
        raise EligibilityError(str(root), e) from e
    return files
