"""Capture projection: split one matched span by its capture groups.

A rule's capture map assigns scopes to group indexes. Projection turns
the match into the fewest tokens that cover it exactly:

- text inside a scoped group gets ``base + [group scope]``
- text inside nested scoped groups stacks them, outer group first
- everything else stays under ``base``

Adjacent pieces that end up with the same scope path are merged. Group
spans reaching outside the match (lookahead groups) are clipped to it.

Example:
    "apiVersion: v1" matched by ``^(\\w+)(:)\\s*(.*)$`` with captures
    {1: tag, 3: value} projects to [0,10) tag, [10,12) base, [12,14) value.

"""

from __future__ import annotations

from collections.abc import Sequence

from tessera.rules import CaptureMap
from tessera.tokens import ScopedToken


def extend_scopes(path: tuple[str, ...], scope: str | None) -> tuple[str, ...]:
    """Append a scope name to a path.

    A scope name may hold several space-separated scopes; each is pushed.
    """
    if not scope:
        return path
    return (*path, *scope.split())


def project_captures(
    start: int,
    end: int,
    groups: Sequence[tuple[int, int] | None],
    captures: CaptureMap,
    base_scopes: tuple[str, ...],
) -> list[ScopedToken]:
    """Split the span [start, end) into scoped tokens.

    Args:
        start: Match start offset
        end: Match end offset (exclusive)
        groups: Span per group from the regex engine, group 0 first
        captures: (group index, scope) pairs sorted by group index
        base_scopes: Scope path for text not covered by a scoped group

    Returns:
        Contiguous tokens whose union is exactly [start, end); empty for
        an empty span
    """
    if start >= end:
        return []

    regions: list[tuple[int, int, str]] = []
    for index, scope in captures:
        if index >= len(groups):
            continue
        span = groups[index]
        if span is None:
            continue
        s = max(span[0], start)
        e = min(span[1], end)
        if s < e:
            regions.append((s, e, scope))

    if not regions:
        return [ScopedToken(start, end, base_scopes)]

    bounds = sorted({start, end, *(r[0] for r in regions), *(r[1] for r in regions)})
    tokens: list[ScopedToken] = []
    for a, b in zip(bounds, bounds[1:]):
        path = base_scopes
        # Regions are in group order, so enclosing groups come first.
        for s, e, scope in regions:
            if s <= a and b <= e:
                path = extend_scopes(path, scope)
        if tokens and tokens[-1].scopes == path:
            tokens[-1] = ScopedToken(tokens[-1].start, b, path)
        else:
            tokens.append(ScopedToken(a, b, path))
    return tokens


__all__ = ["extend_scopes", "project_captures"]
