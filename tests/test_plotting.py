"""Tests for the Graphviz export of layouts."""

from famtree.graph import assemble_graph
from famtree.layout import EMPTY_LAYOUT, build_layout
from famtree.plotting import layout_to_dot, write_layout


class TestLayoutToDot:

    def test_couple_and_disconnected_cluster(self, member, no_photos):
        records = [
            member("p1", generation=0, spouse="p2"),
            member("p2", generation=0, gender="Female"),
            member("c1", father="p1", mother="p2"),
            member("lone", generation=3),
        ]
        dot = layout_to_dot(build_layout(assemble_graph(records, no_photos)))
        text = dot.to_string()

        assert "FAM_p1_p2" in text
        assert "lightpink" in text
        assert "rank" in text
        assert "Additional Family Members" in text
        assert {n.get_name() for n in dot.get_nodes()} >= {"p1", "p2", "c1", "FAM_p1_p2"}
        edges = {(e.get_source(), e.get_destination()) for e in dot.get_edges()}
        assert ("FAM_p1_p2", "c1") in edges

    def test_empty_layout(self):
        assert "Start Building Your Family Tree" in layout_to_dot(EMPTY_LAYOUT).to_string()

    def test_write_dot_file(self, member, no_photos, tmp_path):
        layout = build_layout(assemble_graph([member("a", generation=0)], no_photos))
        out = tmp_path / "tree.dot"

        write_layout(layout, out)

        assert out.read_text(encoding="utf-8").startswith("digraph")
