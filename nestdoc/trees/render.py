"""HTML rendering of reconstructed trees.

Pure formatting over ``TreeQueryEngine.get_tree`` output: nested ``<ul>``
lists, one ``<li>`` per node, optional links built from a URL template in
which ``[-ID-]`` is replaced by the node's primary key.
"""

from html import escape
from typing import List, Union

from ..schemas.tree import NodeTree, TreeNode

ID_PLACEHOLDER = "[-ID-]"


def render_tree_html(tree: NodeTree, url: str = "", css_class: str = "tree") -> str:
    """Render a NodeTree as nested unordered lists.

    Args:
        tree: Tree returned by get_tree().
        url: Optional link template, e.g. "/category/[-ID-]".
        css_class: Class of the outermost list.

    Returns:
        HTML string, empty when the tree has no nodes.
    """
    if not tree:
        return ""

    parts: List[str] = [f'<ul class="{escape(css_class)}">']

    # Explicit stack of nodes and pending closing tags: depth is unbounded
    stack: List[Union[TreeNode, str]] = list(reversed(tree.nodes))
    while stack:
        item = stack.pop()
        if isinstance(item, str):
            parts.append(item)
            continue

        _render_label(item, url, parts)
        if item.children:
            parts.append("<ul>")
            stack.append("</ul></li>")
            stack.extend(reversed(item.children))
        else:
            parts.append("</li>")

    parts.append("</ul>")
    return "".join(parts)


def _render_label(node: TreeNode, url: str, parts: List[str]) -> None:
    name = escape("" if node.name is None else str(node.name))

    parts.append("<li><span>")
    if url:
        href = url.replace(ID_PLACEHOLDER, str(node.primary))
        parts.append(f'<a href="{escape(href)}">{name}</a>')
    else:
        parts.append(name)
    parts.append("</span>")
