from __future__ import annotations


def similarity(left: str | None, right: str | None) -> float:
    """Edit-distance similarity in [0, 1], case-insensitive.

    ``1 - levenshtein / max(len)``; an empty side scores 0 unless both are
    empty, which counts as equal.
    """
    left = (left or "").lower()
    right = (right or "").lower()
    if left == right:
        return 1.0
    if not left or not right:
        return 0.0
    distance = levenshtein(left, right)
    return 1.0 - distance / max(len(left), len(right))


def levenshtein(left: str, right: str) -> int:
    if left == right:
        return 0
    if not left:
        return len(right)
    if not right:
        return len(left)

    prev = list(range(len(right) + 1))
    for i, c1 in enumerate(left, start=1):
        curr = [i]
        for j, c2 in enumerate(right, start=1):
            cost = 0 if c1 == c2 else 1
            curr.append(min(curr[j - 1] + 1, prev[j] + 1, prev[j - 1] + cost))
        prev = curr
    return prev[-1]
