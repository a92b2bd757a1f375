"""Text-role classification and re-layout of CRDesign ``<text>`` fields.

Placeholder business-card text is mapped to a fixed set of semantic fields
so one template can be reused across customers. Each visible text field is
rebuilt as plain SVG text with one ``<tspan>`` per line; decorative title
texts are dropped.
"""

from __future__ import annotations

import enum
import logging
import re
from dataclasses import dataclass, field

from lxml import etree

from designsync.svg.markup import detach, iter_elements, layer_type_of, parse_markup, to_markup
from designsync.utils.geometry import format_number, parse_number

logger = logging.getLogger(__name__)

TITLE_TYPE = "DgTitle"
LINE_BREAK = "\n"
# Line breaks as they appear in the serialized Text attribute; roles are
# matched against this form
ESCAPED_LINE_BREAK = "&#10;"
DEFAULT_FONT_FAMILY = "sans-serif"
DEFAULT_FONT_SIZE = 16.0
DEFAULT_FILL = "#000000"

_NUMBER_RE = re.compile(r"^\s*(?:\d*\.)?\d+\s*$")
_HEX_RE = re.compile(r"^#?([0-9a-fA-F]{3,8})$")


class TextRole(str, enum.Enum):
    SELF_NAME = "selfName"
    COMPANY_NAME = "companyName"
    WEBSITE = "website"
    DESIGNATION = "designation"
    SELF_PHONE = "selfPhone"
    TO_NAME = "toName"
    EDITABLE_TEXT = "editableText"


CENTERED_ROLES = frozenset({TextRole.TO_NAME, TextRole.EDITABLE_TEXT})


@dataclass(frozen=True)
class RoleReferences:
    """Placeholder values recognized in templates and their replacements."""

    self_names: frozenset[str] = frozenset(
        {"Leena Khanolkar", "Mina Dalal", "Mina Desai", "Mansi Desai"}
    )
    self_name_value: str = "Khan Afzal"
    company_names: frozenset[str] = frozenset({"DgFlick Insurance", "Instrasoft Solutions"})
    company_value: str = "Datacomp Web Technologies Pvt. Ltd."
    website_pattern: re.Pattern[str] = re.compile(r"(?:https?://)?(?:www\.)?\S+\.\S+")
    website_value: str = "www.webmail.datacomp.in"
    designations: frozenset[str] = frozenset(
        {
            "Chief Operating Officer",
            "Chief Marketing Officer",
            "Chief Maketing Officer",
            "Chief marketing Manager",
            "Chief Marketing Manager",
            "Manager",
        }
    )
    designation_value: str = "Software Developer"
    # Optional +91, ten digits, optionally a second number after a slash
    phone_pattern: re.Pattern[str] = re.compile(r"(?:\+91)?\d{10}(?:\s*/\s*\d{10})?")
    phone_value: str = "8692979117"
    # Recipient placeholders stay as-is so they remain editable downstream
    to_names: frozenset[str] = frozenset({"Rohit Jahagirdar"})


DEFAULT_REFERENCES = RoleReferences()


@dataclass(frozen=True)
class RoleAssignment:
    role: TextRole
    text: str


def classify_text(text: str, refs: RoleReferences = DEFAULT_REFERENCES) -> RoleAssignment:
    """Ordered classification of a raw text value. First match wins."""
    if text in refs.self_names:
        return RoleAssignment(TextRole.SELF_NAME, refs.self_name_value)
    if text in refs.company_names:
        return RoleAssignment(TextRole.COMPANY_NAME, refs.company_value)
    if refs.website_pattern.search(text):
        return RoleAssignment(TextRole.WEBSITE, refs.website_value)
    if text in refs.designations:
        return RoleAssignment(TextRole.DESIGNATION, refs.designation_value)
    if refs.phone_pattern.fullmatch(text):
        return RoleAssignment(TextRole.SELF_PHONE, refs.phone_value)
    if text in refs.to_names:
        return RoleAssignment(TextRole.TO_NAME, text)
    return RoleAssignment(TextRole.EDITABLE_TEXT, text)


@dataclass
class TextField:
    """A CRDesign text element, mutated in place during re-layout."""

    x: float
    y: float
    width: float = 0.0
    height: float = 0.0
    lines: list[str] = field(default_factory=lambda: [""])
    font_family: str = DEFAULT_FONT_FAMILY
    font_size: float = DEFAULT_FONT_SIZE
    bold: bool = False
    italic: bool = False
    fill: str = DEFAULT_FILL
    role: TextRole | None = None

    @property
    def raw_text(self) -> str:
        return LINE_BREAK.join(self.lines)

    @property
    def source_text(self) -> str:
        return ESCAPED_LINE_BREAK.join(self.lines)

    @property
    def line_height(self) -> float:
        return self.height / len(self.lines) if self.lines else self.height

    @property
    def centered(self) -> bool:
        # A hyphen in the last line marks a continuation/signature line
        return self.role in CENTERED_ROLES and "-" not in self.lines[-1]

    @classmethod
    def from_element(cls, el: etree._Element) -> TextField:
        content = el.get("Text")
        if content is None:
            content = "".join(el.itertext())
        font_size = parse_number(el.get("DgTitlePointSize"), DEFAULT_FONT_SIZE)
        return cls(
            x=parse_number(el.get("x")),
            y=parse_number(el.get("y")),
            width=parse_number(el.get("width")),
            height=parse_number(el.get("height")),
            lines=content.split(LINE_BREAK),
            font_family=el.get("DgTitleFamily") or DEFAULT_FONT_FAMILY,
            font_size=font_size if font_size > 0 else DEFAULT_FONT_SIZE,
            bold=el.get("DgTitleBold") == "1",
            italic=el.get("DgTitleItalic") == "1",
            fill=_fill_color(el.get("DgTitleColor")),
        )

    def apply_role(self, refs: RoleReferences = DEFAULT_REFERENCES) -> RoleAssignment:
        """Classify the whole text; only single-line fields take the replacement."""
        assignment = classify_text(self.source_text, refs)
        self.role = assignment.role
        if len(self.lines) == 1:
            self.lines = [assignment.text]
        return assignment

    def to_element(self, namespace: str | None = None) -> etree._Element:
        def tag(name: str) -> str:
            return f"{{{namespace}}}{name}" if namespace else name

        centered = self.centered
        el = etree.Element(tag("text"))
        el.set("id", self.role.value if self.role else TextRole.EDITABLE_TEXT.value)
        el.set("x", format_number(self.x))
        el.set("y", format_number(self.y))
        el.set("width", format_number(self.width))
        el.set("height", format_number(self.height))
        el.set("font-family", self.font_family)
        el.set("font-size", format_number(self.font_size))
        el.set("font-weight", "bold" if self.bold else "normal")
        el.set("font-style", "italic" if self.italic else "normal")
        el.set("fill", self.fill)
        if centered:
            el.set("text-anchor", "middle")

        line_height = self.line_height
        for index, line in enumerate(self.lines):
            span = etree.SubElement(el, tag("tspan"))
            span.set("x", "50%" if centered else format_number(self.x))
            span.set("dy", format_number(line_height + 1 if index == 0 else line_height))
            span.text = line
        return el


def is_title(el: etree._Element) -> bool:
    return layer_type_of(el) == TITLE_TYPE


def is_visible_field(el: etree._Element) -> bool:
    """Both ``x`` and ``y`` present as plain non-negative numbers (``.5`` counts; signs,
    exponents and units do not). Others are hidden/unused."""
    x, y = el.get("x"), el.get("y")
    return x is not None and y is not None and bool(_NUMBER_RE.match(x)) and bool(_NUMBER_RE.match(y))


def relayout_text(root: etree._Element, refs: RoleReferences = DEFAULT_REFERENCES) -> list[TextField]:
    """Drop title texts and rebuild visible text fields in place."""
    texts = list(iter_elements(root, "text"))
    rebuilt: list[TextField] = []

    for el in texts:
        if is_title(el):
            detach(el)
            continue
        if not is_visible_field(el):
            continue

        text_field = TextField.from_element(el)
        assignment = text_field.apply_role(refs)
        logger.debug("Text %r → %s", text_field.raw_text, assignment.role.value)

        new_el = text_field.to_element(etree.QName(el).namespace)
        parent = el.getparent()
        if parent is None:
            continue
        new_el.tail = el.tail
        parent.replace(el, new_el)
        rebuilt.append(text_field)

    logger.info("Re-laid out %d text fields", len(rebuilt))
    return rebuilt


def substitute_text(markup: str | bytes, refs: RoleReferences = DEFAULT_REFERENCES) -> str:
    """Markup with titles removed and text fields role-substituted."""
    root = parse_markup(markup)
    relayout_text(root, refs)
    return to_markup(root)


def _fill_color(value: str | None) -> str:
    if not value:
        return DEFAULT_FILL
    match = _HEX_RE.match(value.strip())
    return f"#{match.group(1)}" if match else DEFAULT_FILL
