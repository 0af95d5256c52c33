"""Minimal element tree built on the standard library HTML parser.

The upstream pages are server-rendered tables and tab panels; this builds
just enough of a tree to walk them by tag, id and class.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from html.parser import HTMLParser

_VOID_TAGS = frozenset(
    {"area", "base", "br", "col", "embed", "hr", "img", "input", "link", "meta", "param", "source", "track", "wbr"}
)


class Element:
    def __init__(self, tag: str, attrs: dict[str, str | None] | None = None) -> None:
        self.tag = tag
        self.attrs = attrs or {}
        self.children: list[Element | str] = []

    @property
    def classes(self) -> frozenset[str]:
        return frozenset((self.attrs.get("class") or "").split())

    def has_class(self, name: str) -> bool:
        return name in self.classes

    def get(self, attr: str, default: str = "") -> str:
        value = self.attrs.get(attr)
        return default if value is None else value

    @property
    def element_children(self) -> list[Element]:
        return [child for child in self.children if isinstance(child, Element)]

    def iter(self) -> Iterator[Element]:
        """Yield all descendant elements in document order."""
        for child in self.children:
            if isinstance(child, Element):
                yield child
                yield from child.iter()

    def find_all(self, tag: str | None = None, *, class_: str | None = None, id_: str | None = None) -> list[Element]:
        return [el for el in self.iter() if _matches(el, tag, class_, id_)]

    def find(self, tag: str | None = None, *, class_: str | None = None, id_: str | None = None) -> Element | None:
        return next((el for el in self.iter() if _matches(el, tag, class_, id_)), None)

    def text(self) -> str:
        parts: list[str] = []
        for child in self.children:
            parts.append(child if isinstance(child, str) else child.text())
        return "".join(parts)

    def __repr__(self) -> str:
        return f"Element({self.tag!r}, {self.attrs!r})"


def _matches(el: Element, tag: str | None, class_: str | None, id_: str | None) -> bool:
    if tag is not None and el.tag != tag:
        return False
    if class_ is not None and not el.has_class(class_):
        return False
    return id_ is None or el.attrs.get("id") == id_


def select_within(roots: list[Element], predicate: Callable[[Element], bool]) -> list[Element]:
    """Descendants of any root matching ``predicate``, deduplicated, in document order."""
    seen: set[int] = set()
    found: list[Element] = []
    for root in roots:
        for el in root.iter():
            if id(el) not in seen and predicate(el):
                seen.add(id(el))
                found.append(el)
    return found


class _TreeBuilder(HTMLParser):
    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self.root = Element("#document")
        self._stack: list[Element] = [self.root]

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        el = Element(tag, dict(attrs))
        self._stack[-1].children.append(el)
        if tag not in _VOID_TAGS:
            self._stack.append(el)

    def handle_startendtag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        self._stack[-1].children.append(Element(tag, dict(attrs)))

    def handle_endtag(self, tag: str) -> None:
        # Close the nearest open element with this tag; stray end tags are ignored.
        for depth in range(len(self._stack) - 1, 0, -1):
            if self._stack[depth].tag == tag:
                del self._stack[depth:]
                return

    def handle_data(self, data: str) -> None:
        self._stack[-1].children.append(data)


def parse_html(html: str) -> Element:
    builder = _TreeBuilder()
    builder.feed(html)
    builder.close()
    return builder.root
