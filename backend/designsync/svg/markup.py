"""Markup access helpers over lxml for the CRDesign SVG dialect.

CRDesign markup is SVG with extra attributes on ``<image>`` and ``<text>``
elements (``Dg_type``, ``DgAngleZ``, ``Text``, ``DgTitle*``). Documents may
embed large base64 payloads, so parsing runs with ``huge_tree``.
"""

from __future__ import annotations

import copy
from collections.abc import Iterator

from lxml import etree

from designsync.errors import ClassificationError

SVG_NS = "http://www.w3.org/2000/svg"
XLINK_NS = "http://www.w3.org/1999/xlink"
XLINK_HREF = f"{{{XLINK_NS}}}href"

TYPE_ATTR = "Dg_type"


def _parser() -> etree.XMLParser:
    # lxml parser objects must not be shared between threads
    return etree.XMLParser(
        recover=True,
        huge_tree=True,
        resolve_entities=False,
        no_network=True,
    )


def parse_markup(markup: str | bytes) -> etree._Element:
    """Parse markup text into its root element."""
    data = markup.encode("utf-8") if isinstance(markup, str) else markup
    if not data.strip():
        raise ClassificationError("Markup is empty")
    try:
        root = etree.fromstring(data, parser=_parser())
    except etree.XMLSyntaxError as e:
        raise ClassificationError(f"Markup is not well-formed XML: {e}") from e
    if root is None:
        raise ClassificationError("Markup has no root element")
    return root


def iter_elements(root: etree._Element, name: str) -> Iterator[etree._Element]:
    """Elements with local name ``name`` in document order, any namespace."""
    return root.iter(f"{{*}}{name}")


def local_name(el: etree._Element) -> str:
    return etree.QName(el).localname


def href_of(el: etree._Element) -> str:
    """``xlink:href`` with a plain ``href`` fallback."""
    for key in (XLINK_HREF, "href"):
        value = el.get(key)
        if value:
            return value
    # Recovered documents that never declared the xlink prefix keep it literally
    for key, value in el.attrib.items():
        if key.partition(":")[2] == "href" and value:
            return value
    return ""


def layer_type_of(el: etree._Element) -> str:
    return el.get(TYPE_ATTR, "")


def to_markup(root: etree._Element) -> str:
    return etree.tostring(root, encoding="unicode")


def to_plain_markup(el: etree._Element) -> str:
    """Serialize one element with namespaces stripped from its tags.

    Used when lifting elements out of their source document, so the result
    reads as a bare fragment under the new document's default namespace.
    """
    clone = copy.deepcopy(el)
    clone.tail = None
    for node in clone.iter():
        if isinstance(node.tag, str):
            node.tag = etree.QName(node).localname
    etree.cleanup_namespaces(clone)
    return etree.tostring(clone, encoding="unicode")


def detach(el: etree._Element) -> None:
    """Remove ``el`` from its parent, keeping any tail text in place."""
    parent = el.getparent()
    if parent is None:
        return
    if el.tail:
        previous = el.getprevious()
        if previous is not None:
            previous.tail = (previous.tail or "") + el.tail
        else:
            parent.text = (parent.text or "") + el.tail
    parent.remove(el)
