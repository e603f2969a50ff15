import math

import pytest

from algorithms import (
    ConfigError,
    DijkstraConfig,
    InternalInvariantViolation,
    InvalidWeight,
    NegativeWeight,
    PhaseLabel,
    SourceNotInGraph,
    StepAfterCompletion,
    StepKind,
    StepwiseDijkstra,
    UnknownVertex,
    Unreachable,
)
from algorithms.paths import PredecessorMap
from conftest import EdgeListGraph, build_graph


def run_all(engine):
    steps = []
    engine.run(on_step=steps.append)
    return steps


# ---------------------------------------------------------------------------
# Scenarios
# ---------------------------------------------------------------------------
def test_triangle_with_shortcut(triangle):
    engine = StepwiseDijkstra(triangle, "A")
    run_all(engine)
    assert engine.distances() == {"A": 0.0, "B": 1.0, "C": 2.0}
    assert engine.path_to("B") == ["A", "B"]
    assert engine.path_to("C") == ["A", "B", "C"]


def test_triangle_step_sequence(triangle):
    engine = StepwiseDijkstra(triangle, "A")
    steps = run_all(engine)
    trace = [(s.kind, s.vertex, s.edge[:2] if s.edge else None) for s in steps]
    assert trace == [
        (StepKind.SELECTED_UNVISITED, "A", None),
        (StepKind.EXAMINED_EDGE,      "A", ("A", "B")),
        (StepKind.RELAXED,            "A", ("A", "B")),
        (StepKind.EXAMINED_EDGE,      "A", ("A", "C")),
        (StepKind.RELAXED,            "A", ("A", "C")),
        (StepKind.FINISHED_VERTEX,    "A", None),
        (StepKind.SELECTED_UNVISITED, "B", None),
        (StepKind.EXAMINED_EDGE,      "B", ("B", "C")),
        (StepKind.RELAXED,            "B", ("B", "C")),
        (StepKind.FINISHED_VERTEX,    "B", None),
        (StepKind.SELECTED_UNVISITED, "C", None),
        (StepKind.FINISHED_VERTEX,    "C", None),
    ]
    assert [s.step_number for s in steps] == list(range(12))
    assert [s.new_distance for s in steps if s.kind is StepKind.RELAXED] == [1.0, 5.0, 2.0]


def test_disconnected_vertex(disconnected):
    engine = StepwiseDijkstra(disconnected, "A")
    run_all(engine)
    assert engine.distance_of("A") == 0
    assert engine.distance_of("B") == 3
    assert math.isinf(engine.distance_of("C"))
    assert engine.unvisited() == ["C"]
    with pytest.raises(Unreachable):
        engine.path_to("C")


def test_zero_weight_edge():
    engine = StepwiseDijkstra(build_graph("AB", [("A", "B", 0)]), "A")
    run_all(engine)
    assert engine.distances() == {"A": 0.0, "B": 0.0}
    assert engine.path_to("B") == ["A", "B"]


def test_diamond_tie_goes_to_first_visited(diamond):
    engine = StepwiseDijkstra(diamond, "A")
    steps = run_all(engine)
    assert engine.distances() == {"A": 0, "B": 2, "C": 2, "D": 5}
    selected = [s.vertex for s in steps if s.kind is StepKind.SELECTED_UNVISITED]
    assert selected == ["A", "B", "C", "D"]
    assert engine.predecessor_of("D") == "B"
    assert engine.path_to("D") == ["A", "B", "D"]


def test_diamond_tie_follows_vertex_order():
    g = build_graph("ACBD", [("A", "B", 2), ("A", "C", 2), ("B", "D", 3), ("C", "D", 3)])
    engine = StepwiseDijkstra(g, "A")
    run_all(engine)
    assert engine.predecessor_of("D") == "C"


def test_relaxation_overrides_longer_prefix(shortcut):
    engine = StepwiseDijkstra(shortcut, "A")
    run_all(engine)
    assert engine.distances() == {"A": 0, "B": 3, "C": 1, "D": 4}
    assert engine.path_to("D") == ["A", "C", "B", "D"]


def test_cycle_terminates(cycle):
    engine = StepwiseDijkstra(cycle, "A")
    steps = run_all(engine)
    assert engine.distances() == {"A": 0, "B": 1, "C": 2}
    assert len(steps) == 11
    back_edge = [s for s in steps if s.edge and s.edge.target == "A"]
    assert len(back_edge) == 1
    assert back_edge[0].kind is StepKind.EXAMINED_EDGE
    assert back_edge[0].relaxed is False
    assert not engine.has_next_step()


def test_source_path_is_itself(triangle):
    engine = StepwiseDijkstra(triangle, "A")
    assert engine.path_to("A") == ["A"]
    run_all(engine)
    assert engine.path_to("A") == ["A"]


# ---------------------------------------------------------------------------
# Phase machine
# ---------------------------------------------------------------------------
def test_initial_state(triangle):
    engine = StepwiseDijkstra(triangle, "A")
    assert engine.phase is PhaseLabel.SELECT_UNVISITED
    assert engine.current is None
    assert engine.pending_edge is None
    assert engine.distances() == {"A": 0.0, "B": math.inf, "C": math.inf}
    assert engine.predecessors() == {}
    assert engine.unvisited() == ["A", "B", "C"]
    assert engine.has_next_step()


def test_phases_cycle(triangle):
    engine = StepwiseDijkstra(triangle, "A")
    engine.step()
    assert engine.phase is PhaseLabel.SELECT_NEIGHBOR
    assert engine.current == "A"
    engine.step()
    assert engine.phase is PhaseLabel.RELAX
    assert engine.pending_edge[:3] == ("A", "B", 1.0)
    engine.step()
    assert engine.phase is PhaseLabel.SELECT_NEIGHBOR
    assert engine.distance_of("B") == 1.0
    assert engine.pending_edge is None


def test_vertex_leaves_unvisited_only_after_queue_drains(triangle):
    engine = StepwiseDijkstra(triangle, "A")
    while engine.has_next_step():
        result = engine.step()
        if result.kind is StepKind.FINISHED_VERTEX:
            assert engine.remaining_edges(result.vertex) == []
            assert not engine.is_unvisited(result.vertex)
        elif result.vertex is not None:
            assert engine.is_unvisited(result.vertex)


def test_step_after_completion(triangle):
    engine = StepwiseDijkstra(triangle, "A")
    run_all(engine)
    assert engine.is_finished
    with pytest.raises(StepAfterCompletion):
        engine.step()


def test_run_requires_callback(triangle):
    with pytest.raises(TypeError):
        StepwiseDijkstra(triangle, "A").run(None)


def test_self_loop_never_raises_distance():
    g = build_graph("AB", [("A", "A", 2), ("A", "B", 1)])
    for mode in ("guarded", "unconditional"):
        engine = StepwiseDijkstra(g, "A", DijkstraConfig(relaxation=mode))
        steps = run_all(engine)
        loop = [s for s in steps if s.kind is StepKind.RELAXED and s.edge.target == "A"]
        assert len(loop) == 1
        assert loop[0].updated is False
        assert loop[0].new_distance == 2.0
        assert engine.distance_of("A") == 0.0
        assert engine.predecessor_of("A") is None


def test_unconditional_relaxation_keeps_last_write():
    g = build_graph("ABCD", [("A", "B", 1), ("A", "C", 1), ("B", "D", 1), ("C", "D", 5)])

    guarded = StepwiseDijkstra(g, "A")
    run_all(guarded)
    assert guarded.distance_of("D") == 2.0
    assert guarded.path_to("D") == ["A", "B", "D"]

    raw = StepwiseDijkstra(g, "A", DijkstraConfig(relaxation="unconditional"))
    run_all(raw)
    assert raw.distance_of("D") == 6.0
    assert raw.path_to("D") == ["A", "C", "D"]


def test_unconditional_diamond_picks_last_writer(diamond):
    engine = StepwiseDijkstra(diamond, "A", DijkstraConfig(relaxation="unconditional"))
    run_all(engine)
    assert engine.distance_of("D") == 5.0
    assert engine.predecessor_of("D") == "C"


# ---------------------------------------------------------------------------
# Edge orderings
# ---------------------------------------------------------------------------
def _examined(engine):
    return [s.edge.target for s in run_all(engine) if s.kind is StepKind.EXAMINED_EDGE and s.vertex == "A"]


def test_edge_order_by_weight(shortcut):
    assert _examined(StepwiseDijkstra(shortcut, "A")) == ["C", "B"]


def test_edge_order_by_insertion(shortcut):
    cfg = DijkstraConfig(edge_order="by_insertion_order")
    assert _examined(StepwiseDijkstra(shortcut, "A", cfg)) == ["B", "C"]


def test_edge_order_by_target_id():
    g = build_graph("ADCB", [("A", "D", 1), ("A", "C", 1), ("A", "B", 9)])
    cfg = DijkstraConfig(edge_order="by_target_id")
    assert _examined(StepwiseDijkstra(g, "A", cfg)) == ["B", "C", "D"]


def test_edge_order_does_not_change_distances(shortcut):
    results = []
    for order in ("by_weight", "by_insertion_order", "by_target_id"):
        engine = StepwiseDijkstra(shortcut, "A", DijkstraConfig(edge_order=order))
        run_all(engine)
        results.append(engine.distances())
    assert results[0] == results[1] == results[2]


def test_by_target_id_needs_comparable_ids():
    g = EdgeListGraph(["s", 1, "x"], [("s", 1, 1.0), ("s", "x", 1.0)])
    with pytest.raises(ConfigError):
        StepwiseDijkstra(g, "s", DijkstraConfig(edge_order="by_target_id"))


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------
def test_source_not_in_graph(triangle):
    with pytest.raises(SourceNotInGraph):
        StepwiseDijkstra(triangle, "Z")


def test_negative_weight_rejected():
    g = build_graph("AB", [("A", "B", -1)])
    with pytest.raises(NegativeWeight):
        StepwiseDijkstra(g, "A")


@pytest.mark.parametrize("weight", [float("nan"), float("inf"), "heavy"])
def test_invalid_weight_rejected(weight):
    g = EdgeListGraph(["A", "B"], [("A", "B", weight)])
    with pytest.raises(InvalidWeight):
        StepwiseDijkstra(g, "A")


def test_negative_weight_on_unreachable_part_still_rejected():
    g = build_graph("ABC", [("A", "B", 1), ("C", "B", -2)])
    with pytest.raises(NegativeWeight):
        StepwiseDijkstra(g, "A")


def test_unknown_vertex_query(triangle):
    engine = StepwiseDijkstra(triangle, "A")
    with pytest.raises(UnknownVertex):
        engine.distance_of("Z")
    with pytest.raises(KeyError):
        engine.path_to("Z")


def test_predecessor_cycle_is_an_invariant_violation():
    pred = PredecessorMap()
    pred.set(1, 2)
    pred.set(2, 1)
    with pytest.raises(InternalInvariantViolation):
        pred.chain(0, 1)


def test_bad_config():
    with pytest.raises(ConfigError):
        DijkstraConfig(edge_order="random")
    with pytest.raises(ConfigError):
        DijkstraConfig(frontier="fibonacci")
    with pytest.raises(ConfigError):
        DijkstraConfig(relaxation="sometimes")
    with pytest.raises(ConfigError):
        DijkstraConfig.from_dict({"bogus": 1})


def test_config_from_dict_skips_none():
    cfg = DijkstraConfig.from_dict({"frontier": "heap", "edge_order": None})
    assert cfg == DijkstraConfig(frontier="heap")
    assert cfg.to_dict() == {"edge_order": "by_weight", "frontier": "heap", "relaxation": "guarded"}


# ---------------------------------------------------------------------------
# Snapshot & duck typing
# ---------------------------------------------------------------------------
def test_graph_is_snapshotted(triangle):
    engine = StepwiseDijkstra(triangle, "A")
    triangle.create_edge("A", "C", weight=0)
    triangle.create_node(node_id="Z")
    run_all(engine)
    assert engine.distance_of("C") == 2.0
    assert "Z" not in engine.distances()


def test_duck_typed_graph_with_int_ids():
    g = EdgeListGraph([0, 1, 2], [(0, 1, 4.5), (1, 2, 0.5), (0, 2, 6)])
    engine = StepwiseDijkstra(g, 0)
    run_all(engine)
    assert engine.distances() == {0: 0.0, 1: 4.5, 2: 5.0}
    assert engine.path_to(2) == [0, 1, 2]


# ---------------------------------------------------------------------------
# Summary
# ---------------------------------------------------------------------------
def test_summary_triangle(triangle):
    engine = StepwiseDijkstra(triangle, "A")
    run_all(engine)
    assert engine.summary() == (
        "vertex = B, distance = 1.0\n"
        "vertex = C, distance = 2.0\n"
        "\n"
        "paths:\n"
        "A B \n"
        "A B C \n"
    )
    assert str(engine) == engine.summary()


def test_summary_lists_unreachable_without_path(disconnected):
    engine = StepwiseDijkstra(disconnected, "A")
    run_all(engine)
    assert engine.summary() == (
        "vertex = B, distance = 3.0\n"
        "vertex = C, distance = inf\n"
        "\n"
        "paths:\n"
        "A B \n"
    )


def test_step_descriptor_to_dict(triangle):
    engine = StepwiseDijkstra(triangle, "A")
    engine.step()
    examined = engine.step().to_dict()
    assert examined["kind"] == "examined_edge"
    assert examined["relaxed"] is True
    assert examined["edge"]["source"] == "A"
    assert examined["edge"]["target"] == "B"
    assert examined["edge"]["weight"] == 1.0
    assert examined["edge"]["id"]
    relaxed = engine.step().to_dict()
    assert relaxed["kind"] == "relaxed"
    assert relaxed["new_distance"] == 1.0
    assert relaxed["updated"] is True
