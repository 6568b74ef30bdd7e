"""Render a note's outline as markdown."""

import io
import sqlite3

from outline_sync.core.store.navs import get_note_navs
from outline_sync.core.store.notes import get_note
from outline_sync.core.tree.navigation import NavTree, build_index


def render_note_as_markdown(
    conn: sqlite3.Connection,
    note_id: str,
    *,
    max_depth: int | None = None,
) -> str:
    """Render the live navs below a note's root as an indented bullet list.

    Args:
        conn: Database connection.
        note_id: Note to render.
        max_depth: Max levels below the root to include (None = unlimited).

    Returns:
        Markdown with the note title as a heading.
    """
    note = get_note(conn, note_id)
    tree = build_index(get_note_navs(conn, note.id))

    out = io.StringIO()
    out.write(f"# {note.title}\n\n")
    _render_children(tree, note.root_nav_id, depth=0, max_depth=max_depth, out=out)
    return out.getvalue()


def _render_children(
    tree: NavTree,
    parent_id: str,
    *,
    depth: int,
    max_depth: int | None,
    out: io.StringIO,
) -> None:
    for nav in tree.children(parent_id):
        indent = "    " * depth
        lines = nav.content.split("\n")
        out.write(f"{indent}- {lines[0]}\n")
        for line in lines[1:]:
            out.write(f"{indent}  {line}\n")

        kids = tree.child_ids.get(nav.id, ())
        if max_depth is not None and depth + 1 >= max_depth:
            if kids:
                noun = "child" if len(kids) == 1 else "children"
                out.write(f"{indent}    - ... ({len(kids)} more {noun}, id={nav.id})\n")
            continue
        _render_children(tree, nav.id, depth=depth + 1, max_depth=max_depth, out=out)
