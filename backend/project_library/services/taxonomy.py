"""
Project Library Backend - Topic Taxonomy Parsing and Rendering
===============================================================

What:  Turns the topics CSV into rows, rows into a sorted forest, and the
       forest into a Mermaid `flowchart TD` diagram.
How:   Pure functions over plain dataclasses; no database access. The CSV is
       read with the standard `csv` module (quoted cells may contain commas).

CSV Format:
    header row, then one row per topic:
        topic, parent, descendants, synonyms
    - blank cells and the literal "null" (any case) mean "absent"
    - descendants and synonyms are comma-separated inside their cell
"""

import csv
import io
from dataclasses import dataclass, field
from typing import Dict, List, Optional


@dataclass
class TaxonomyRow:
    topic: str
    parent: Optional[str] = None
    descendants: List[str] = field(default_factory=list)
    synonyms: List[str] = field(default_factory=list)


@dataclass
class TaxonomyNode:
    name: str
    parent: Optional[str] = None
    children: List["TaxonomyNode"] = field(default_factory=list)
    synonyms: List[str] = field(default_factory=list)


def _normalize(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    trimmed = value.strip()
    if not trimmed or trimmed.lower() == "null":
        return None
    return trimmed


def _split_multi(value: Optional[str]) -> List[str]:
    normalized = _normalize(value)
    if not normalized:
        return []
    return [entry.strip() for entry in normalized.split(",") if entry.strip()]


def parse_taxonomy_csv(content: str) -> List[TaxonomyRow]:
    """Parse CSV text into rows, skipping the header and blank lines."""
    reader = csv.reader(io.StringIO(content))
    rows: List[TaxonomyRow] = []
    header_seen = False
    for cells in reader:
        if not any(cell.strip() for cell in cells):
            continue
        if not header_seen:
            header_seen = True
            continue

        cells = cells + [""] * (4 - len(cells))
        topic = cells[0].strip()
        if not topic:
            continue
        rows.append(
            TaxonomyRow(
                topic=topic,
                parent=_normalize(cells[1]),
                descendants=_split_multi(cells[2]),
                synonyms=_split_multi(cells[3]),
            )
        )
    return rows


def build_taxonomy_tree(rows: List[TaxonomyRow]) -> List[TaxonomyNode]:
    """
    Build a forest from rows.

    A parent named only as someone's parent still becomes a node. Synonyms of
    repeated topics are merged. Roots and every child list are sorted by name.
    """
    nodes: Dict[str, TaxonomyNode] = {}

    def get_or_create(name: str) -> TaxonomyNode:
        node = nodes.get(name)
        if node is None:
            node = TaxonomyNode(name=name)
            nodes[name] = node
        return node

    for row in rows:
        node = get_or_create(row.topic)
        for synonym in row.synonyms:
            if synonym not in node.synonyms:
                node.synonyms.append(synonym)

        if row.parent:
            parent = get_or_create(row.parent)
            if all(child is not node for child in parent.children):
                parent.children.append(node)
            if node.parent is None:
                node.parent = row.parent

    sorted_names = set()

    def sort_children(node: TaxonomyNode) -> None:
        sorted_names.add(node.name)
        node.children.sort(key=lambda n: n.name.lower())
        for child in node.children:
            if child.name not in sorted_names:
                sort_children(child)

    roots = sorted((n for n in nodes.values() if n.parent is None), key=lambda n: n.name.lower())
    for root in roots:
        sort_children(root)
    return roots


def _escape_label(label: str) -> str:
    return label.replace('"', '\\"')


def build_mermaid_diagram(roots: List[TaxonomyNode]) -> str:
    """
    Render the forest as Mermaid.

    Example:
        flowchart TD
        node0["Science (STEM)"]
        node1["Physics"]
        node0 --> node1
    """
    lines = ["flowchart TD"]
    ids: Dict[str, str] = {}

    def node_id(name: str) -> str:
        if name not in ids:
            ids[name] = f"node{len(ids)}"
        return ids[name]

    def render(node: TaxonomyNode, path: frozenset) -> str:
        nid = node_id(node.name)
        label = f"{node.name} ({', '.join(node.synonyms)})" if node.synonyms else node.name
        lines.append(f'{nid}["{_escape_label(label)}"]')
        for child in node.children:
            if child.name in path:
                # Cyclic CSV data: link back without descending again
                lines.append(f"{nid} --> {node_id(child.name)}")
                continue
            child_id = render(child, path | {child.name})
            lines.append(f"{nid} --> {child_id}")
        return nid

    for root in roots:
        render(root, frozenset({root.name}))
    return "\n".join(lines)
