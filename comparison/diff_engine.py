"""Word- and line-granularity text diff producing added/removed/unchanged fragments."""
from __future__ import annotations

import re
from typing import Callable, Dict, Iterable, List, Sequence, Tuple

from comparison.models import DiffFragment, Granularity

Opcode = Tuple[str, int, int, int, int]  # (tag, i1, i2, j1, j2), same shape as difflib

_WORD_TOKEN_RE = re.compile(r"\S+|\s+")
_LINE_TOKEN_RE = re.compile(r"[^\n]*\n|[^\n]+")


def tokenize_words(text: str) -> List[str]:
    """Split text into alternating word and whitespace runs (joining them gives the text back)."""
    return _WORD_TOKEN_RE.findall(text)


def tokenize_lines(text: str) -> List[str]:
    """Split text into lines, each keeping its trailing newline."""
    return _LINE_TOKEN_RE.findall(text)


_TOKENIZERS: Dict[str, Callable[[str], List[str]]] = {
    "word": tokenize_words,
    "line": tokenize_lines,
}


def _edit_path(a: Sequence[str], b: Sequence[str]) -> List[str]:
    """
    Shortest edit script between two token sequences (Myers, O(ND) time, linear space).

    Returns one step per token: "equal", "delete" (token only in ``a``) or
    "insert" (token only in ``b``), in order.
    """
    steps: List[str] = []
    _extend_path(a, 0, len(a), b, 0, len(b), steps)
    return steps


def _extend_path(
    a: Sequence[str],
    a_lo: int,
    a_hi: int,
    b: Sequence[str],
    b_lo: int,
    b_hi: int,
    steps: List[str],
) -> None:
    """Append the edit steps for ``a[a_lo:a_hi]`` against ``b[b_lo:b_hi]`` by splitting on the middle snake."""
    head = 0
    while a_lo < a_hi and b_lo < b_hi and a[a_lo] == b[b_lo]:
        a_lo += 1
        b_lo += 1
        head += 1
    tail = 0
    while a_lo < a_hi and b_lo < b_hi and a[a_hi - 1] == b[b_hi - 1]:
        a_hi -= 1
        b_hi -= 1
        tail += 1

    steps.extend(["equal"] * head)
    if a_lo == a_hi:
        steps.extend(["insert"] * (b_hi - b_lo))
    elif b_lo == b_hi:
        steps.extend(["delete"] * (a_hi - a_lo))
    else:
        # Both ends differ here, so the edit distance is at least 2 and each
        # half around the middle snake is strictly cheaper than the whole.
        x0, y0, x1, y1 = _middle_snake(a, a_lo, a_hi, b, b_lo, b_hi)
        _extend_path(a, a_lo, x0, b, b_lo, y0, steps)
        steps.extend(["equal"] * (x1 - x0))
        _extend_path(a, x1, a_hi, b, y1, b_hi, steps)
    steps.extend(["equal"] * tail)


def _middle_snake(
    a: Sequence[str],
    a_lo: int,
    a_hi: int,
    b: Sequence[str],
    b_lo: int,
    b_hi: int,
) -> Tuple[int, int, int, int]:
    """
    Find the middle snake of a shortest edit path (Myers 1986, section 4b).

    Furthest-reaching paths are grown from both corners at once, one edit per
    round, until they overlap on a diagonal. The snake where they meet lies
    on a shortest path and is returned as absolute ``(x0, y0, x1, y1)``.
    """
    n = a_hi - a_lo
    m = b_hi - b_lo
    delta = n - m
    odd = delta % 2 == 1
    max_d = (n + m + 1) // 2
    offset = max_d + 1

    # forward[offset + k]: furthest x on diagonal k = x - y, starting at (0, 0)
    # reverse[offset + k]: smallest x on diagonal k + delta, starting at (n, m)
    forward = [0] * (2 * max_d + 3)
    reverse = [n + 1] * (2 * max_d + 3)

    for d in range(max_d + 1):
        for k in range(-d, d + 1, 2):
            if k == -d or (k != d and forward[offset + k - 1] < forward[offset + k + 1]):
                x = forward[offset + k + 1]
            else:
                x = forward[offset + k - 1] + 1
            y = x - k
            start_x, start_y = x, y
            while x < n and y < m and a[a_lo + x] == b[b_lo + y]:
                x += 1
                y += 1
            forward[offset + k] = x
            if odd and delta - (d - 1) <= k <= delta + (d - 1) and x >= reverse[offset + k - delta]:
                return a_lo + start_x, b_lo + start_y, a_lo + x, b_lo + y

        for k in range(-d, d + 1, 2):
            diagonal = k + delta
            if k == -d or (k != d and reverse[offset + k + 1] - 1 < reverse[offset + k - 1]):
                x = reverse[offset + k + 1] - 1
            else:
                x = reverse[offset + k - 1]
            y = x - diagonal
            end_x, end_y = x, y
            while x > 0 and y > 0 and a[a_lo + x - 1] == b[b_lo + y - 1]:
                x -= 1
                y -= 1
            reverse[offset + k] = x
            if not odd and -d <= diagonal <= d and x <= forward[offset + diagonal]:
                return a_lo + x, b_lo + y, a_lo + end_x, b_lo + end_y

    raise AssertionError("middle snake search did not terminate")  # pragma: no cover


def _group_steps(steps: Iterable[str]) -> List[Opcode]:
    """Collapse per-token steps into opcodes; any mix of deletes/inserts between equal runs is one hunk."""
    opcodes: List[Opcode] = []
    i = j = 0
    pending_del = pending_ins = 0
    equal_run = 0

    def flush_change() -> None:
        nonlocal i, j, pending_del, pending_ins
        if not pending_del and not pending_ins:
            return
        if pending_del and pending_ins:
            tag = "replace"
        elif pending_del:
            tag = "delete"
        else:
            tag = "insert"
        opcodes.append((tag, i, i + pending_del, j, j + pending_ins))
        i += pending_del
        j += pending_ins
        pending_del = pending_ins = 0

    def flush_equal() -> None:
        nonlocal i, j, equal_run
        if not equal_run:
            return
        opcodes.append(("equal", i, i + equal_run, j, j + equal_run))
        i += equal_run
        j += equal_run
        equal_run = 0

    for step in steps:
        if step == "equal":
            flush_change()
            equal_run += 1
        else:
            flush_equal()
            if step == "delete":
                pending_del += 1
            else:
                pending_ins += 1

    flush_change()
    flush_equal()
    return opcodes


def myers_opcodes(a: Sequence[str], b: Sequence[str]) -> List[Opcode]:
    """
    Minimal edit script between two token sequences as difflib-style opcodes.

    Tags are "equal", "delete", "insert" and "replace". Common prefix and
    suffix are matched before each search, so long unchanged pages stay cheap,
    and memory stays linear in the input size. The function is pure;
    identical inputs always give identical opcodes.
    """
    return _group_steps(_edit_path(a, b))


def diff(old_text: str, new_text: str, granularity: Granularity = "word") -> List[DiffFragment]:
    """
    Compute an ordered list of diff fragments between two texts.

    Args:
        old_text: Original text
        new_text: Modified text
        granularity: "word" (whitespace-separated tokens) or "line"

    Returns:
        Fragments whose values rebuild ``old_text`` when added fragments are
        dropped and ``new_text`` when removed fragments are dropped. A changed
        region is a removed fragment followed by an added fragment.

    Examples:
        >>> [(f.value, f.added, f.removed) for f in diff("Hello world", "Hello there")]
        [('Hello ', False, False), ('world', False, True), ('there', True, False)]
    """
    tokenizer = _TOKENIZERS.get(granularity)
    if tokenizer is None:
        raise ValueError(f"Unknown diff granularity: {granularity!r}")

    old_tokens = tokenizer(old_text)
    new_tokens = tokenizer(new_text)

    fragments: List[DiffFragment] = []
    for tag, i1, i2, j1, j2 in myers_opcodes(old_tokens, new_tokens):
        if tag == "equal":
            fragments.append(DiffFragment("".join(old_tokens[i1:i2])))
            continue
        if tag in ("delete", "replace"):
            fragments.append(DiffFragment("".join(old_tokens[i1:i2]), removed=True))
        if tag in ("insert", "replace"):
            fragments.append(DiffFragment("".join(new_tokens[j1:j2]), added=True))
    return fragments


def diff_words(old_text: str, new_text: str) -> List[DiffFragment]:
    return diff(old_text, new_text, "word")


def diff_lines(old_text: str, new_text: str) -> List[DiffFragment]:
    return diff(old_text, new_text, "line")


def filter_additions(fragments: Iterable[DiffFragment]) -> List[DiffFragment]:
    return [fragment for fragment in fragments if fragment.added]


def filter_removals(fragments: Iterable[DiffFragment]) -> List[DiffFragment]:
    return [fragment for fragment in fragments if fragment.removed]


def has_changes(fragments: Iterable[DiffFragment]) -> bool:
    """True if any fragment is added or removed."""
    return any(fragment.added or fragment.removed for fragment in fragments)


def reconstruct_old(fragments: Iterable[DiffFragment]) -> str:
    return "".join(fragment.value for fragment in fragments if not fragment.added)


def reconstruct_new(fragments: Iterable[DiffFragment]) -> str:
    return "".join(fragment.value for fragment in fragments if not fragment.removed)
