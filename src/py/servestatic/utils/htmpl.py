from typing import Callable, Iterable, Iterator, Optional, Union, cast
from mypy_extensions import KwArg, VarArg

# --
# HTMPL defines the functions to create the (small) HTML documents the
# engine produces itself: redirect and error pages.

HTML_EMPTY: set[str] = set("area base br col embed hr img input link meta source wbr".split())
HTML_ESCAPED = str.maketrans(
	{"&": "&amp;", "<": "&lt;", ">": "&gt;", '"': "&quot;", "'": "&#39;"}
)


def escape(text: str) -> str:
	return text.translate(HTML_ESCAPED)


TNodeContent = Union["Node", str]
TAttributeContent = str | None


class Node:
	__slots__ = ["name", "attributes", "children"]

	def __init__(
		self,
		name: str,
		children: Optional[Iterable[TNodeContent]] = None,
		attributes: Optional[dict[str, TAttributeContent]] = None,
	):
		self.name: str = name
		self.attributes: dict[str, TAttributeContent] = attributes or {}
		self.children: list[TNodeContent] = [_ for _ in children] if children else []

	def iterHTML(self) -> Iterator[str]:
		yield f"<{self.name}"
		for k, v in self.attributes.items():
			yield f' {k}="{escape(v)}"' if v is not None else f" {k}"
		yield ">"
		if self.name in HTML_EMPTY:
			return
		for _ in self.children:
			if isinstance(_, Node):
				yield from _.iterHTML()
			else:
				yield escape(_)
		yield f"</{self.name}>"

	def __str__(self) -> str:
		return "".join(self.iterHTML())


NodeFactory = Callable[[VarArg(TNodeContent), KwArg(TAttributeContent)], Node]


def nodeFactory(name: str) -> NodeFactory:
	def f(*children: TNodeContent, **attributes: TAttributeContent) -> Node:
		# `_` stands for `class`, which is a keyword
		return Node(
			name,
			children,
			{("class" if k == "_" else k): v for k, v in attributes.items()},
		)

	f.__name__ = name
	return cast(NodeFactory, f)


HTML_TAGS: list[str] = "a body head html meta p pre title".split()


class Markup:
	__slots__ = ["_factories"]

	def __init__(self, factories: dict[str, NodeFactory]):
		self._factories: dict[str, NodeFactory] = factories

	def __getattr__(self, name: str) -> NodeFactory:
		if name not in self._factories:
			raise KeyError(f"No tag {name}, pick one of {','.join(self._factories)}")
		return self._factories[name]


H: Markup = Markup({_: nodeFactory(_) for _ in HTML_TAGS})


def html(*nodes: Node, doctype: str | None = "html") -> str:
	"""Renders the given nodes as an HTML document."""
	head: str = f"<!DOCTYPE {doctype}>\n" if doctype else ""
	return head + "\n".join("".join(_.iterHTML()) for _ in nodes) + "\n"


def document(title: str, *body: TNodeContent) -> str:
	"""Renders a minimal HTML document, as used for redirects and errors."""
	return html(
		H.html(
			H.head(H.meta(charset="utf-8"), H.title(title)),
			H.body(H.pre(*body)),
			lang="en",
		)
	)


# EOF
