"""Parser for WordPress-style readme.txt files.

Layout:
    === Plugin Name ===
    Contributors: alice, bob
    Requires at least: 4.0
    Tested up to: 4.4
    Stable tag: 1.2

    Short description.

    == Description ==
    ...
    == Changelog ==
    = 1.2 =
    * Fixed a thing

Section bodies are rendered to HTML; `= Heading =` lines become level-4 headings.
"""

from __future__ import annotations

import re
from dataclasses import asdict, dataclass, field, fields
from typing import Any, Dict, List, Optional

from .changelog import render_markdown

_TITLE_RE = re.compile(r"^===\s*(.+?)\s*===\s*$")
_SECTION_RE = re.compile(r"^==\s*(.+?)\s*==\s*$")
_SUBSECTION_RE = re.compile(r"^=\s*(.+?)\s*=\s*$")
_HEADER_RE = re.compile(r"^([A-Za-z][A-Za-z ]*?)\s*:\s*(.*)$")

# readme header label (lowercased) -> StructuredReadme field
_HEADER_FIELDS: Dict[str, str] = {
    "contributors": "contributors",
    "donate link": "donate_link",
    "tags": "tags",
    "requires at least": "requires",
    "tested up to": "tested",
    "requires php": "requires_php",
    "stable tag": "stable_tag",
    "license": "license",
    "license uri": "license_uri",
}
_LIST_FIELDS = ("contributors", "tags")


@dataclass
class StructuredReadme:
    name: str = ""
    contributors: List[str] = field(default_factory=list)
    donate_link: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    requires: Optional[str] = None
    tested: Optional[str] = None
    requires_php: Optional[str] = None
    stable_tag: Optional[str] = None
    license: Optional[str] = None
    license_uri: Optional[str] = None
    short_description: str = ""
    sections: Dict[str, str] = field(default_factory=dict)

    @property
    def version(self) -> Optional[str]:
        return self.stable_tag

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StructuredReadme":
        names = {f.name for f in fields(cls)}
        return cls(**{k: v for (k, v) in dict(data or {}).items() if k in names})


def _section_key(title: str) -> str:
    return re.sub(r"\s+", "_", title.strip().lower())


def _render_section(lines: List[str]) -> str:
    body = []
    for line in lines:
        m = _SUBSECTION_RE.match(line)
        body.append(f"#### {m.group(1)}" if m else line)
    return render_markdown("\n".join(body).strip())


def parse_readme(text: str) -> StructuredReadme:
    """Parse readme.txt content into a StructuredReadme."""
    readme = StructuredReadme()
    lines = str(text or "").lstrip("\ufeff").replace("\r\n", "\n").replace("\r", "\n").split("\n")

    i = 0
    while i < len(lines) and not lines[i].strip():
        i += 1
    if i < len(lines):
        m = _TITLE_RE.match(lines[i].strip())
        if m:
            readme.name = m.group(1)
            i += 1

    # Header block: "Key: value" lines up to the first blank line.
    while i < len(lines) and lines[i].strip():
        line = lines[i].strip()
        if _SECTION_RE.match(line):
            break
        m = _HEADER_RE.match(line)
        attr = _HEADER_FIELDS.get(m.group(1).strip().lower()) if m else None
        if attr in _LIST_FIELDS:
            setattr(readme, attr, [v.strip() for v in m.group(2).split(",") if v.strip()])
        elif attr:
            setattr(readme, attr, m.group(2).strip() or None)
        i += 1

    # Short description: everything before the first "== Section ==".
    short: List[str] = []
    while i < len(lines) and not _SECTION_RE.match(lines[i].strip()):
        short.append(lines[i])
        i += 1
    readme.short_description = " ".join(s.strip() for s in short if s.strip())

    current: Optional[str] = None
    buf: List[str] = []
    for line in lines[i:]:
        m = _SECTION_RE.match(line.strip())
        if m:
            if current is not None:
                readme.sections[current] = _render_section(buf)
            current, buf = _section_key(m.group(1)), []
        else:
            buf.append(line)
    if current is not None:
        readme.sections[current] = _render_section(buf)

    return readme
