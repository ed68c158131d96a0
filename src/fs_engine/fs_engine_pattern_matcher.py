"""
Component-wise glob matching with recursive-descent wildcards.

Standard glob grammar has no way to say "any number of directories", so patterns
are split into path components and matched one component at a time.  Ordinary
components use single-component glob rules (`*`, `?`, `[...]`, `[!...]`), which
can never cross a separator.  The `**` component matches zero or more whole
components; when it is not the final component every possible split point is
tried until one lets the rest of the pattern match.
"""

from fnmatch import fnmatchcase
import os
from typing import List, Sequence, Set, Tuple


class FsEnginePatternMatcher:
    """Matches relative paths against component patterns."""

    RECURSIVE_WILDCARD = "**"

    @staticmethod
    def split(path: str) -> List[str]:
        """
        Split a path or pattern into components.

        Both '/' and the OS separator are accepted.  Empty and '.' components are dropped.

        Args:
            path: Path or pattern string

        Returns:
            List of components
        """
        if os.sep != "/":
            path = path.replace(os.sep, "/")

        if os.altsep and os.altsep != "/":
            path = path.replace(os.altsep, "/")

        return [part for part in path.split("/") if part not in ("", ".")]

    @classmethod
    def has_recursive_wildcard(cls, pattern: str) -> bool:
        """
        Check whether a pattern needs recursive matching.

        Args:
            pattern: Pattern string

        Returns:
            True if any component of the pattern is '**'
        """
        return cls.RECURSIVE_WILDCARD in cls.split(pattern)

    def match(self, pattern: str, candidate: str) -> bool:
        """
        Match a candidate path string against a pattern string.

        Args:
            pattern: Pattern such as 'src/**/*.py'
            candidate: Relative path such as 'src/pkg/module.py'

        Returns:
            True if the candidate matches
        """
        return self.match_components(self.split(candidate), self.split(pattern))

    def match_components(self, path_components: Sequence[str], pattern_components: Sequence[str]) -> bool:
        """
        Match a sequence of path components against a sequence of pattern components.

        Args:
            path_components: Components of the candidate path
            pattern_components: Components of the pattern

        Returns:
            True if the whole path is consumed by the whole pattern
        """
        failed: Set[Tuple[int, int]] = set()
        return self._match_from(path_components, pattern_components, 0, 0, failed)

    def _match_from(
        self,
        path_components: Sequence[str],
        pattern_components: Sequence[str],
        path_index: int,
        pattern_index: int,
        failed: Set[Tuple[int, int]]
    ) -> bool:
        """
        Match the suffixes starting at the given indices.

        `failed` records (path_index, pattern_index) starting points already known not
        to match, so multiple `**` tokens do not re-explore the same suffix pair.
        """
        start = (path_index, pattern_index)
        if start in failed:
            return False

        path_len = len(path_components)
        pattern_len = len(pattern_components)

        while path_index < path_len and pattern_index < pattern_len:
            token = pattern_components[pattern_index]

            if token == self.RECURSIVE_WILDCARD:
                if pattern_index == pattern_len - 1:
                    return True

                # Try consuming 0, 1, 2, ... components with this '**'
                for split_index in range(path_index, path_len + 1):
                    if self._match_from(path_components, pattern_components, split_index, pattern_index + 1, failed):
                        return True

                failed.add(start)
                return False

            if not fnmatchcase(path_components[path_index], token):
                failed.add(start)
                return False

            path_index += 1
            pattern_index += 1

        # Any pattern left over can only be '**' tokens, each consuming nothing
        if path_index == path_len and all(
            token == self.RECURSIVE_WILDCARD for token in pattern_components[pattern_index:]
        ):
            return True

        failed.add(start)
        return False
