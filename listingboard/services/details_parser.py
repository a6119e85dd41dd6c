"""
Outline parser for listing details.

Full details are stored as plain text. At render time lines starting with
"## " or "### " open a section and lines starting with "- " are bullets;
everything else is a paragraph line of the current section.
"""

from typing import List


def _new_section(heading=None, level=2) -> dict:
    return {"heading": heading, "level": level, "paragraphs": [], "bullets": []}


def _is_empty(section: dict) -> bool:
    return not (section["heading"] or section["paragraphs"] or section["bullets"])


def parse_details(full_details: str) -> List[dict]:
    """Split pseudo-markdown into sections of paragraphs and bullets."""
    sections = []
    current = _new_section()

    for raw in (full_details or "").splitlines():
        line = raw.strip()
        if not line:
            continue
        if line.startswith("### ") or line.startswith("## "):
            if not _is_empty(current):
                sections.append(current)
            level = 3 if line.startswith("### ") else 2
            current = _new_section(line[level + 1:].strip(), level)
        elif line.startswith("- "):
            current["bullets"].append(line[2:].strip())
        else:
            current["paragraphs"].append(line)

    if not _is_empty(current):
        sections.append(current)
    return sections
