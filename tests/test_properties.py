"""Whole-run properties checked on seeded random digraphs."""

import heapq
import math

import pytest

from algorithms import DijkstraConfig, StepKind, StepwiseDijkstra
from engine import replay
from graph import Graph


SEEDS = range(12)


def reference_distances(graph: Graph, source: str):
    dist = {v: math.inf for v in graph.vertices()}
    dist[source] = 0.0
    pq = [(0.0, source)]
    while pq:
        d, u = heapq.heappop(pq)
        if d > dist[u]:
            continue
        for e in graph.out_edges(u):
            nd = d + e.weight
            if nd < dist[e.target]:
                dist[e.target] = nd
                heapq.heappush(pq, (nd, e.target))
    return dist


def random_graph(seed: int) -> Graph:
    return Graph.generate_random(
        num_nodes=4 + seed % 7,
        edge_probability=0.15 + 0.05 * (seed % 5),
        weight_range=(0, 9),
        seed=seed,
    )


def collect(engine):
    steps, snapshots = [], []

    def on_step(result):
        steps.append(result)
        snapshots.append(engine.distances())

    engine.run(on_step)
    return steps, snapshots


@pytest.mark.parametrize("seed", SEEDS)
@pytest.mark.parametrize("frontier", ["scan", "heap"])
def test_matches_reference_dijkstra(seed, frontier):
    g = random_graph(seed)
    engine = StepwiseDijkstra(g, "0", DijkstraConfig(frontier=frontier))
    collect(engine)
    assert engine.distances() == reference_distances(g, "0")
    assert engine.distance_of("0") == 0


@pytest.mark.parametrize("seed", SEEDS)
def test_paths_are_consistent(seed):
    g = random_graph(seed)
    engine = StepwiseDijkstra(g, "0")
    collect(engine)
    for v, d in engine.distances().items():
        if v == "0" or math.isinf(d):
            continue
        path = engine.path_to(v)
        assert path[0] == "0" and path[-1] == v
        total = 0.0
        for a, b in zip(path, path[1:]):
            edge = g.get_edge_between(a, b)
            assert edge is not None
            total += edge.weight
        assert total == d


@pytest.mark.parametrize("seed", SEEDS)
def test_distances_never_increase(seed):
    g = random_graph(seed)
    engine = StepwiseDijkstra(g, "0")
    previous = engine.distances()
    for snapshot in collect(engine)[1]:
        for v, d in snapshot.items():
            assert d <= previous[v]
        assert snapshot["0"] == 0
        previous = snapshot


@pytest.mark.parametrize("seed", SEEDS)
def test_each_edge_examined_at_most_once_and_run_is_bounded(seed):
    g = random_graph(seed)
    engine = StepwiseDijkstra(g, "0")
    steps, _ = collect(engine)
    ids = [s.edge.id for s in steps if s.kind is StepKind.EXAMINED_EDGE]
    assert len(ids) == len(set(ids))
    assert len(steps) <= 2 * g.node_count() + 2 * g.edge_count()
    assert len(steps) <= engine.step_bound()

    relaxed = sum(1 for s in steps if s.kind is StepKind.EXAMINED_EDGE and s.relaxed)
    assert relaxed == sum(1 for s in steps if s.kind is StepKind.RELAXED)


@pytest.mark.parametrize("seed", SEEDS)
def test_unvisited_finite_vertex_means_more_steps(seed):
    g = random_graph(seed)
    engine = StepwiseDijkstra(g, "0")
    while True:
        finite_unvisited = [v for v in engine.unvisited() if engine.distance_of(v) < math.inf]
        assert engine.has_next_step() == bool(finite_unvisited)
        if not engine.has_next_step():
            break
        engine.step()


@pytest.mark.parametrize("seed", SEEDS)
def test_deterministic_and_frontier_independent(seed):
    g = random_graph(seed)
    streams = []
    for frontier in ("scan", "heap", "scan"):
        steps, _ = collect(StepwiseDijkstra(g, "0", DijkstraConfig(frontier=frontier)))
        streams.append([s.to_dict() for s in steps])
    assert streams[0] == streams[1] == streams[2]


@pytest.mark.parametrize("seed", SEEDS)
@pytest.mark.parametrize("relaxation", ["guarded", "unconditional"])
def test_replay_reproduces_final_state(seed, relaxation):
    g = random_graph(seed)
    engine = StepwiseDijkstra(g, "0", DijkstraConfig(relaxation=relaxation))
    steps, _ = collect(engine)
    state = replay("0", g.node_ids(), steps)
    assert state.distances == engine.distances()
    assert state.predecessors == engine.predecessors()
    assert state.unvisited == set(engine.unvisited())
