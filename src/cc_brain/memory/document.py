"""Markdown document model: a preamble followed by ordered `## ` sections.

Section lookup is by exact, case-sensitive heading text, so names containing
regex metacharacters need no escaping. A section spans from its heading to the
next `## ` heading or the end of the document; deeper headings (`###`) belong
to the enclosing section.
"""

from __future__ import annotations

from dataclasses import dataclass, field

SECTION_PREFIX = "## "


@dataclass
class Section:
    name: str
    body: str = ""

    def render(self) -> str:
        body = self.body.lstrip("\n").rstrip()
        if not body:
            return f"{SECTION_PREFIX}{self.name}"
        return f"{SECTION_PREFIX}{self.name}\n{body}"


@dataclass
class Document:
    preamble: str = ""
    sections: list[Section] = field(default_factory=list)

    def get(self, name: str) -> Section | None:
        for section in self.sections:
            if section.name == name:
                return section
        return None

    def set_section(self, name: str, body: str) -> None:
        """Replace the named section in place, or append it at the end."""
        existing = self.get(name)
        if existing is not None:
            existing.body = body
        else:
            self.sections.append(Section(name, body))

    def render(self) -> str:
        blocks = []
        preamble = self.preamble.strip()
        if preamble:
            blocks.append(preamble)
        blocks.extend(section.render() for section in self.sections)
        if not blocks:
            return ""
        return "\n\n".join(blocks) + "\n"


def _is_section_heading(line: str) -> bool:
    return line.startswith(SECTION_PREFIX)


def parse_document(text: str) -> Document:
    """Split markdown into a preamble and `## ` sections."""
    doc = Document()
    preamble: list[str] = []
    current: Section | None = None
    body: list[str] = []

    for line in text.split("\n"):
        if _is_section_heading(line):
            if current is not None:
                current.body = "\n".join(body)
                doc.sections.append(current)
            current = Section(line[len(SECTION_PREFIX):].rstrip())
            body = []
        elif current is None:
            preamble.append(line)
        else:
            body.append(line)

    if current is not None:
        current.body = "\n".join(body)
        doc.sections.append(current)
    doc.preamble = "\n".join(preamble)
    return doc
