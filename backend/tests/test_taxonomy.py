"""
Project Library Backend - Topic Taxonomy Tests
===============================================

What we test:
    ✅ CSV parsing: header skipped, "null"/blank cells absent, quoted lists
    ✅ Tree building: implicit parents, sorted children, merged synonyms
    ✅ Mermaid rendering with synonyms in labels
    ✅ Import into the database is idempotent on label
"""

import pytest

from project_library.services.taxonomy import (
    TaxonomyRow,
    build_mermaid_diagram,
    build_taxonomy_tree,
    parse_taxonomy_csv,
)
from project_library.services.topic_service import TopicService

SAMPLE_CSV = """topic,parent,descendants,synonyms
Science,null,"Physics,Biology",STEM
Physics,Science,null,
Biology,Science,,"Life science, Bio"

Art,,,
"""


class TestParseTaxonomyCsv:

    def test_rows_and_absent_cells(self):
        rows = parse_taxonomy_csv(SAMPLE_CSV)

        assert [r.topic for r in rows] == ["Science", "Physics", "Biology", "Art"]
        science, physics, biology, art = rows
        assert science.parent is None
        assert science.descendants == ["Physics", "Biology"]
        assert science.synonyms == ["STEM"]
        assert physics.parent == "Science"
        assert physics.descendants == []
        assert biology.synonyms == ["Life science", "Bio"]
        assert art.parent is None

    def test_short_rows_are_padded(self):
        rows = parse_taxonomy_csv("topic,parent\nChess\n")
        assert rows == [TaxonomyRow(topic="Chess")]

    def test_empty_input(self):
        assert parse_taxonomy_csv("") == []


class TestBuildTaxonomyTree:

    def test_forest_is_sorted(self):
        roots = build_taxonomy_tree(parse_taxonomy_csv(SAMPLE_CSV))

        assert [r.name for r in roots] == ["Art", "Science"]
        science = roots[1]
        assert [c.name for c in science.children] == ["Biology", "Physics"]

    def test_parent_only_named_in_parent_column(self):
        roots = build_taxonomy_tree([TaxonomyRow(topic="Jazz", parent="Music")])

        assert [r.name for r in roots] == ["Music"]
        assert [c.name for c in roots[0].children] == ["Jazz"]

    def test_repeated_topic_merges_synonyms(self):
        roots = build_taxonomy_tree(
            [
                TaxonomyRow(topic="AI", synonyms=["ML"]),
                TaxonomyRow(topic="AI", synonyms=["ML", "Machine learning"]),
            ]
        )

        assert roots[0].synonyms == ["ML", "Machine learning"]

    def test_cycle_does_not_recurse_forever(self):
        rows = [
            TaxonomyRow(topic="Root"),
            TaxonomyRow(topic="A", parent="Root"),
            TaxonomyRow(topic="B", parent="A"),
            TaxonomyRow(topic="A", parent="B"),
        ]

        roots = build_taxonomy_tree(rows)
        diagram = build_mermaid_diagram(roots)

        assert [r.name for r in roots] == ["Root"]
        assert diagram.count('["A"]') == 1


class TestMermaid:

    def test_labels_and_edges(self):
        roots = build_taxonomy_tree(parse_taxonomy_csv(SAMPLE_CSV))

        diagram = build_mermaid_diagram(roots)
        lines = diagram.splitlines()

        assert lines[0] == "flowchart TD"
        assert 'node1["Science (STEM)"]' in lines
        assert 'node2["Biology (Life science, Bio)"]' in lines
        assert "node1 --> node2" in lines
        assert "node1 --> node3" in lines

    def test_quotes_are_escaped(self):
        diagram = build_mermaid_diagram([build_taxonomy_tree([TaxonomyRow(topic='Say "hi"')])[0]])
        assert 'node0["Say \\"hi\\""]' in diagram


class TestTopicImport:

    def setup_method(self):
        self.service = TopicService()

    @pytest.mark.asyncio
    async def test_import_is_idempotent(self, db_session):
        rows = parse_taxonomy_csv(SAMPLE_CSV)

        first = await self.service.import_rows(db_session, rows)
        second = await self.service.import_rows(db_session, rows)

        assert first == (4, 0)
        assert second == (0, 0)
        topics = await self.service.list_topics(db_session)
        assert [t.label for t in topics] == ["Art", "Biology", "Physics", "Science"]

    @pytest.mark.asyncio
    async def test_import_links_parents_and_merges_synonyms(self, db_session):
        await self.service.import_rows(db_session, parse_taxonomy_csv(SAMPLE_CSV))

        created, updated = await self.service.import_rows(
            db_session, [TaxonomyRow(topic="Physics", synonyms=["Mechanics"])]
        )
        roots, mermaid = await self.service.topic_tree(db_session)

        assert (created, updated) == (0, 1)
        science = next(r for r in roots if r.name == "Science")
        physics = next(c for c in science.children if c.name == "Physics")
        assert physics.synonyms == ["Mechanics"]
        assert 'Physics (Mechanics)' in mermaid
