"""Tree views over flat parent-pointer navs: children, breadcrumbs, orphans."""

from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass

from outline_sync.ids import ROOT_NAV_ID
from outline_sync.models.outline import Nav


@dataclass(frozen=True)
class NavTree:
    """Navs indexed by id, plus a children index sorted by (order, id)."""

    by_id: dict[str, Nav]
    child_ids: dict[str, tuple[str, ...]]

    def children(self, nav_id: str) -> tuple[Nav, ...]:
        return tuple(self.by_id[c] for c in self.child_ids.get(nav_id, ()))

    def roots(self) -> tuple[Nav, ...]:
        """Navs at the top of the tree (parid is the ROOT sentinel)."""
        return self.children(ROOT_NAV_ID)

    def breadcrumbs(self, nav_id: str) -> tuple[Nav, ...]:
        """Ancestors of nav_id, outermost first, excluding the nav itself.

        Stops at the ROOT sentinel, at a missing parent, or on a cycle.
        """
        chain: list[Nav] = []
        seen = {nav_id}
        nav = self.by_id.get(nav_id)
        while nav is not None and nav.parid != ROOT_NAV_ID and nav.parid not in seen:
            seen.add(nav.parid)
            nav = self.by_id.get(nav.parid)
            if nav is not None:
                chain.append(nav)
        return tuple(reversed(chain))

    def orphans(self) -> tuple[Nav, ...]:
        """Navs whose parent is neither ROOT nor present in this tree."""
        return tuple(
            n for n in self.by_id.values()
            if n.parid != ROOT_NAV_ID and n.parid not in self.by_id
        )


def build_index(navs: Iterable[Nav]) -> NavTree:
    by_id = {n.id: n for n in navs}
    grouped: dict[str, list[Nav]] = defaultdict(list)
    for nav in by_id.values():
        grouped[nav.parid].append(nav)

    child_ids = {
        parent: tuple(n.id for n in sorted(kids, key=lambda n: (n.same_deep_order, n.id)))
        for parent, kids in grouped.items()
    }
    return NavTree(by_id=by_id, child_ids=child_ids)
