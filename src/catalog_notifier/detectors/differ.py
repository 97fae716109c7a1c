"""
Comparing a catalog file across two git revisions.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from catalog_notifier.core.errors import GitError
from catalog_notifier.vcs.git import VersionControl

logger = logging.getLogger(__name__)


def parse_commit_range(commit_range: str) -> Tuple[str, str]:
    """
    Split a commit range into its two revisions.

    Three-dot ranges (``A...B``) are split before two-dot ranges (``A..B``),
    so ``HEAD~1...HEAD`` and ``HEAD~1..HEAD`` both give ``("HEAD~1", "HEAD")``.

    Raises:
        GitError: If the range has no separator or an empty side
    """
    if "..." in commit_range:
        before, _, after = commit_range.partition("...")
    elif ".." in commit_range:
        before, _, after = commit_range.partition("..")
    else:
        before, after = "", ""

    before, after = before.strip(), after.strip()
    if not before or not after:
        raise GitError(
            "Invalid commit range",
            f'"{commit_range}" is not a commit range.',
            ["Use the A..B or A...B syntax, e.g. --commit-range HEAD~1..HEAD"],
        )
    return before, after


@dataclass(frozen=True)
class ResourceSnapshots:
    """A file's content before and after a commit range (untrimmed)."""

    file_path: str
    before: str
    after: str

    @property
    def has_both(self) -> bool:
        return bool(self.before.strip()) and bool(self.after.strip())

    @property
    def before_trimmed(self) -> str:
        return self.before.strip()

    @property
    def after_trimmed(self) -> str:
        return self.after.strip()


def diff_resource_across_commits(
    vcs: VersionControl,
    file_path: str,
    commit_range: str,
) -> ResourceSnapshots:
    """
    Snapshot a file at both ends of a commit range.

    A side where the file did not exist comes back as an empty string.
    """
    before_rev, after_rev = parse_commit_range(commit_range)
    before = vcs.file_at_revision(file_path, before_rev)
    after = vcs.file_at_revision(file_path, after_rev)
    logger.debug(
        f"Snapshots for {file_path}: {before_rev}={len(before)} chars, "
        f"{after_rev}={len(after)} chars"
    )
    return ResourceSnapshots(file_path=file_path, before=before, after=after)


def _middle_snake(
    a: List[int], b: List[int], a_lo: int, a_hi: int, b_lo: int, b_hi: int
) -> Optional[Tuple[int, int]]:
    """
    Split point of a[a_lo:a_hi] / b[b_lo:b_hi] on a shortest edit path.

    Myers' linear-space bisection: a forward and a reverse search run until
    their furthest-reaching paths overlap. Returns absolute (a, b) indices,
    or None when the two ranges share no element.
    """
    n, m = a_hi - a_lo, b_hi - b_lo
    max_d = (n + m + 1) // 2
    v_offset = max_d
    v_length = 2 * max_d + 2
    v1 = [-1] * v_length
    v2 = [-1] * v_length
    v1[v_offset + 1] = 0
    v2[v_offset + 1] = 0
    delta = n - m
    # Odd delta: the paths meet while extending forward, otherwise in reverse
    front = delta % 2 != 0
    k1start = k1end = k2start = k2end = 0

    for d in range(max_d):
        for k1 in range(-d + k1start, d + 1 - k1end, 2):
            k1_offset = v_offset + k1
            if k1 == -d or (k1 != d and v1[k1_offset - 1] < v1[k1_offset + 1]):
                x1 = v1[k1_offset + 1]
            else:
                x1 = v1[k1_offset - 1] + 1
            y1 = x1 - k1
            while x1 < n and y1 < m and a[a_lo + x1] == b[b_lo + y1]:
                x1 += 1
                y1 += 1
            v1[k1_offset] = x1
            if x1 > n:
                k1end += 2
            elif y1 > m:
                k1start += 2
            elif front:
                k2_offset = v_offset + delta - k1
                if 0 <= k2_offset < v_length and v2[k2_offset] != -1:
                    if x1 >= n - v2[k2_offset]:
                        return a_lo + x1, b_lo + y1

        for k2 in range(-d + k2start, d + 1 - k2end, 2):
            k2_offset = v_offset + k2
            if k2 == -d or (k2 != d and v2[k2_offset - 1] < v2[k2_offset + 1]):
                x2 = v2[k2_offset + 1]
            else:
                x2 = v2[k2_offset - 1] + 1
            y2 = x2 - k2
            while x2 < n and y2 < m and a[a_hi - x2 - 1] == b[b_hi - y2 - 1]:
                x2 += 1
                y2 += 1
            v2[k2_offset] = x2
            if x2 > n:
                k2end += 2
            elif y2 > m:
                k2start += 2
            elif not front:
                k1_offset = v_offset + delta - k2
                if 0 <= k1_offset < v_length and v1[k1_offset] != -1:
                    x1 = v1[k1_offset]
                    y1 = v_offset + x1 - k1_offset
                    if x1 >= n - x2:
                        return a_lo + x1, b_lo + y1

    return None


def _common_pairs(a: List[int], b: List[int]) -> List[Tuple[int, int]]:
    """Index pairs of a longest common subsequence of a and b, in order."""
    pairs: List[Tuple[int, int]] = []
    pending = [(0, len(a), 0, len(b))]

    while pending:
        a_lo, a_hi, b_lo, b_hi = pending.pop()
        while a_lo < a_hi and b_lo < b_hi and a[a_lo] == b[b_lo]:
            pairs.append((a_lo, b_lo))
            a_lo += 1
            b_lo += 1
        while a_lo < a_hi and b_lo < b_hi and a[a_hi - 1] == b[b_hi - 1]:
            a_hi -= 1
            b_hi -= 1
            pairs.append((a_hi, b_hi))
        if a_lo == a_hi or b_lo == b_hi:
            continue

        split = _middle_snake(a, b, a_lo, a_hi, b_lo, b_hi)
        if split is None:
            continue
        x, y = split
        pending.append((a_lo, x, b_lo, y))
        pending.append((x, a_hi, y, b_hi))

    pairs.sort()
    return pairs


def diff_lines(before: str, after: str) -> List[Tuple[str, str]]:
    """
    Minimal line diff between two texts.

    Returns a list of ("-", line) / ("+", line) / (" ", line) operations,
    with line terminators removed from the returned lines. Terminators do
    take part in the comparison, so ``}`` and ``}\\n`` are different lines.
    Changed lines come out as a deletion followed by an insertion; between
    two unchanged lines all deletions are emitted before the insertions.

    Runs in O((N+M)D) time and linear space.
    """
    a_lines = before.splitlines(keepends=True)
    b_lines = after.splitlines(keepends=True)
    a_text = before.splitlines()
    b_text = after.splitlines()

    ids: Dict[str, int] = {}
    a = [ids.setdefault(line, len(ids)) for line in a_lines]
    b = [ids.setdefault(line, len(ids)) for line in b_lines]

    # Lines present on one side only can never be matched
    shared = set(a) & set(b)
    a_kept = [i for i, line in enumerate(a) if line in shared]
    b_kept = [j for j, line in enumerate(b) if line in shared]
    pairs = _common_pairs([a[i] for i in a_kept], [b[j] for j in b_kept])

    ops: List[Tuple[str, str]] = []
    i = j = 0
    for x, y in ((a_kept[p], b_kept[q]) for p, q in pairs):
        ops.extend(("-", line) for line in a_text[i:x])
        ops.extend(("+", line) for line in b_text[j:y])
        ops.append((" ", a_text[x]))
        i, j = x + 1, y + 1
    ops.extend(("-", line) for line in a_text[i:])
    ops.extend(("+", line) for line in b_text[j:])
    return ops


def generate_schema_diff(before: str, after: str) -> str:
    """
    Render a context-free diff of two schema texts as a fenced block.

    Only removed (``-``) and added (``+``) lines are shown; blank lines are
    dropped. Identical inputs give an empty block.
    """
    rows = [
        f"{op}{line}"
        for op, line in diff_lines(before, after)
        if op != " " and line.strip()
    ]
    body = "".join(f"{row}\n" for row in rows)
    return f"```diff\n{body}```"
