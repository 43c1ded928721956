"""Ignore rules deciding which files never get suggestions."""

import fnmatch
import logging
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)


def _parse_gitignore(text: str) -> List[Tuple[str, bool]]:
    """Parse .gitignore text into (pattern, negated) pairs."""
    rules = []
    for raw in text.splitlines():
        line = raw.strip()
        if not line or line.startswith('#'):
            continue
        negated = line.startswith('!')
        if negated:
            line = line[1:]
        rules.append((line, negated))
    return rules


def _matches(pattern: str, rel_path: str) -> bool:
    directory_only = pattern.endswith('/')
    pattern = pattern.rstrip('/')
    parts = rel_path.split('/')

    if pattern.startswith('/') or '/' in pattern:
        # Anchored to the project root
        pattern = pattern.lstrip('/')
        if fnmatch.fnmatch(rel_path, pattern) or fnmatch.fnmatch(rel_path, pattern + '/*'):
            return True
        prefixes = ['/'.join(parts[:i]) for i in range(1, len(parts))]
        return any(fnmatch.fnmatch(prefix, pattern) for prefix in prefixes)

    # Unanchored patterns match any path component
    candidates = parts[:-1] if directory_only else parts
    return any(fnmatch.fnmatch(part, pattern) for part in candidates)


class IgnoreRules:
    """.gitignore patterns (with negation) plus configured globs."""

    def __init__(self, project_root: Path, gitignore: Sequence[Tuple[str, bool]] = (),
                 ignored_globs: Sequence[str] = ()):
        self.project_root = project_root
        self.gitignore = list(gitignore)
        self.ignored_globs = list(ignored_globs)

    @classmethod
    def load(cls, project_root: Path, ignored_globs: Sequence[str] = ()) -> "IgnoreRules":
        """
        Read the project's .gitignore, if any.

        Args:
            project_root: Directory holding the .gitignore.
            ignored_globs: Extra glob patterns from configuration.

        Returns:
            IgnoreRules for the project.
        """
        rules: List[Tuple[str, bool]] = []
        gitignore = project_root / ".gitignore"
        if gitignore.exists():
            try:
                rules = _parse_gitignore(gitignore.read_text(encoding='utf-8'))
            except (OSError, UnicodeDecodeError) as e:
                logger.warning(f"Failed to read {gitignore}: {e}")
        return cls(project_root, rules, ignored_globs)

    def _relative(self, path: str) -> Optional[str]:
        try:
            rel_path = Path(path).resolve().relative_to(self.project_root.resolve())
        except ValueError:
            return None
        return str(rel_path).replace('\\', '/')

    def _matches_globs(self, rel_path: str) -> bool:
        return any(
            fnmatch.fnmatch(rel_path, pattern) or Path(rel_path).match(pattern)
            for pattern in self.ignored_globs
        )

    def is_ignored(self, path: str) -> bool:
        """Check if a file should never receive suggestions."""
        rel_path = self._relative(path)
        if rel_path is None:
            # Outside the project: only configured globs apply
            return self._matches_globs(Path(path).name)

        if '.git' in rel_path.split('/'):
            return True
        if self._matches_globs(rel_path):
            return True

        # Last matching rule wins, as in git
        ignored = False
        for pattern, negated in self.gitignore:
            if _matches(pattern, rel_path):
                ignored = not negated
        return ignored
