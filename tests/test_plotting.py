from helpers import parent, parents, partner, people

from kinlayout.generational import generational_layout
from kinlayout.graph import build_relationship_graph
from kinlayout.models import Person
from kinlayout.plotting import _label, child_anchors, partner_pairs, plot_layout, to_dot


def laid_out_family():
    everyone = people("A", "B", "C", "D")
    graph = build_relationship_graph(
        everyone, [partner("A", "B"), *parents("A", "B", "C"), parent("A", "D")]
    )
    return graph, generational_layout(everyone, graph)


def test_partner_pairs_listed_once_left_first():
    graph, positions = laid_out_family()
    assert partner_pairs(positions, graph) == [("A", "B")]


def test_two_parent_child_anchored_at_parents_midpoint():
    graph, positions = laid_out_family()
    by_id = {p.id: p for p in positions}

    anchors = {child: anchor for anchor, child in child_anchors(positions, graph)}

    assert set(anchors) == {"C", "D"}
    assert anchors["C"][0] == (by_id["A"].x + by_id["B"].x) / 2 + 60
    assert anchors["C"][1] == anchors["D"][1]


def test_plot_layout_writes_png(tmp_path):
    graph, positions = laid_out_family()
    path = tmp_path / "chart.png"

    plot_layout(positions, graph, path)

    assert path.read_bytes()[:8] == b"\x89PNG\r\n\x1a\n"


def test_to_dot_pins_positions():
    graph, positions = laid_out_family()

    P = to_dot(positions, graph)
    source = P.to_string()

    assert len(P.get_nodes()) == 4
    # one partner edge plus C->A, C->B and D->A
    assert len(P.get_edges()) == 4
    assert source.count("!") == 4


def test_label_shows_birth_year_when_known():
    assert _label(Person("I1", name="John Smith", birth_date="1950-03-12"), "I1") == "John Smith\n1950"
    flagged = Person("I1", name="John Smith", birth_date="1950-03-12", birth_date_unknown=True)
    assert _label(flagged, "I1") == "John Smith"
    assert _label(Person("I1"), "I1") == "I1"
    assert _label(None, "I9") == "I9"
