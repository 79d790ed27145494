"""Line-level diff based on the longest common subsequence (LCS)."""

from typing import List, Sequence, Tuple

from ..models.diff import DiffLine, DiffLineType, DiffResult, LineNumbers


def split_lines(text: str) -> List[str]:
    """Split on ``\\n``. The empty string has no lines."""
    if not text:
        return []
    return text.split("\n")


def line_count(text: str) -> int:
    return len(split_lines(text))


def diff_table_cells(old_text: str, new_text: str) -> int:
    """Size of the LCS table a diff of the two texts would build."""
    return (line_count(old_text) + 1) * (line_count(new_text) + 1)


def longest_common_subsequence(
    old_lines: Sequence[str], new_lines: Sequence[str]
) -> List[Tuple[int, int]]:
    """Return ``(old_index, new_index)`` pairs of an LCS, in ascending order.

    ``dp[i][j]`` holds the LCS length of the first ``i`` old lines and the
    first ``j`` new lines. The backtrace steps the new index whenever the old
    index branch is not strictly better, so ties surface as additions.
    """
    m, n = len(old_lines), len(new_lines)
    dp = [[0] * (n + 1) for _ in range(m + 1)]

    for i in range(1, m + 1):
        old_line = old_lines[i - 1]
        row, prev_row = dp[i], dp[i - 1]
        for j in range(1, n + 1):
            if old_line == new_lines[j - 1]:
                row[j] = prev_row[j - 1] + 1
            else:
                row[j] = max(prev_row[j], row[j - 1])

    pairs: List[Tuple[int, int]] = []
    i, j = m, n
    while i > 0 and j > 0:
        if old_lines[i - 1] == new_lines[j - 1]:
            pairs.append((i - 1, j - 1))
            i -= 1
            j -= 1
        elif dp[i - 1][j] > dp[i][j - 1]:
            i -= 1
        else:
            j -= 1

    pairs.reverse()
    return pairs


def compute_diff(old_text: str, new_text: str) -> DiffResult:
    """Diff two texts line by line.

    Entries are emitted in reading order: before each common line come the
    removed old lines, then the added new lines, then the common line itself.
    Line numbers are 1-based and counted separately for each side.
    """
    old_lines = split_lines(old_text)
    new_lines = split_lines(new_text)

    lines: List[DiffLine] = []
    old_idx = new_idx = 0

    def removed(index: int) -> DiffLine:
        return DiffLine(
            type=DiffLineType.REMOVED,
            content=old_lines[index],
            line_number=LineNumbers(old=index + 1),
        )

    def added(index: int) -> DiffLine:
        return DiffLine(
            type=DiffLineType.ADDED,
            content=new_lines[index],
            line_number=LineNumbers(new=index + 1),
        )

    for common_old, common_new in longest_common_subsequence(old_lines, new_lines):
        while old_idx < common_old:
            lines.append(removed(old_idx))
            old_idx += 1
        while new_idx < common_new:
            lines.append(added(new_idx))
            new_idx += 1
        lines.append(
            DiffLine(
                type=DiffLineType.UNCHANGED,
                content=old_lines[old_idx],
                line_number=LineNumbers(old=old_idx + 1, new=new_idx + 1),
            )
        )
        old_idx += 1
        new_idx += 1

    while old_idx < len(old_lines):
        lines.append(removed(old_idx))
        old_idx += 1
    while new_idx < len(new_lines):
        lines.append(added(new_idx))
        new_idx += 1

    return summarize(lines)


def summarize(lines: List[DiffLine]) -> DiffResult:
    """Wrap diff entries with their added/removed/unchanged counts."""
    counts = {kind: 0 for kind in DiffLineType}
    for line in lines:
        counts[line.type] += 1

    return DiffResult(
        lines=lines,
        added=counts[DiffLineType.ADDED],
        removed=counts[DiffLineType.REMOVED],
        unchanged=counts[DiffLineType.UNCHANGED],
    )
