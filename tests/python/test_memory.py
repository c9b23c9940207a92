from __future__ import annotations

from pytest import approx

from mindfield.sim.core.memory import MemoryGraph, cosine_similarity


def _store(graph: MemoryGraph, event, tau: float = 0.7, timestamp: int = 0) -> int:
    index = graph.add_node(event, timestamp)
    return graph.cluster_event(event, index, tau)


def test_cosine_similarity_handles_degenerate_vectors():
    assert cosine_similarity([], [1.0]) == 0.0
    assert cosine_similarity([0.0, 0.0], [1.0, 0.0]) == 0.0
    assert cosine_similarity([1.0, 0.0], [2.0, 0.0]) == approx(1.0)
    assert cosine_similarity([1.0, 0.0], [-1.0, 0.0]) == approx(-1.0)


def test_repeated_event_forms_a_single_cluster():
    graph = MemoryGraph()
    for step in range(5):
        _store(graph, [0.3, 0.4], timestamp=step)

    assert len(graph) == 5
    assert list(graph.clusters) == [0]
    assert graph.clusters[0].node_indices == [0, 1, 2, 3, 4]
    assert all(node.cluster_id == 0 for node in graph.nodes)


def test_orthogonal_events_open_separate_clusters():
    graph = MemoryGraph()
    first = _store(graph, [1.0, 0.0])
    second = _store(graph, [0.0, 1.0])

    assert (first, second) == (0, 1)
    assert graph.clusters[0].size == 1
    assert graph.clusters[1].size == 1


def test_tied_clusters_resolve_to_lowest_id():
    graph = MemoryGraph()
    _store(graph, [1.0, 0.0], tau=0.5)
    _store(graph, [0.0, 1.0], tau=0.5)

    chosen = _store(graph, [1.0, 1.0], tau=0.5)

    assert chosen == 0
    assert graph.clusters[0].node_indices == [0, 2]


def test_similarity_equal_to_threshold_opens_new_cluster():
    graph = MemoryGraph()
    _store(graph, [1.0, 0.0], tau=1.0)

    assert _store(graph, [1.0, 0.0], tau=1.0) == 1


def test_cluster_event_rejects_unknown_node():
    graph = MemoryGraph()
    assert graph.cluster_event([1.0], 3, 0.7) is None
    assert graph.clusters == {}


def test_decay_scales_every_activation():
    graph = MemoryGraph()
    _store(graph, [1.0])
    _store(graph, [-1.0])
    graph.decay(0.5)
    graph.decay(0.5)

    assert graph.activations() == approx([0.25, 0.25])


def test_affective_signal_of_fresh_positive_node():
    graph = MemoryGraph()
    _store(graph, [0.9, 0.0])
    graph.update_affective_signals()

    assert graph.affective_signals() == approx([1.0])


def test_affective_signal_follows_activation():
    graph = MemoryGraph()
    _store(graph, [-0.9, 0.0])
    graph.decay(0.5)
    graph.update_affective_signals()

    assert graph.affective_signals() == approx([-0.5])


def test_faded_nodes_do_not_contribute():
    graph = MemoryGraph()
    _store(graph, [0.9])
    graph.nodes[0].activation = 0.005
    graph.update_affective_signals()

    assert graph.affective_signals() == [0.0]


def test_affective_signal_averages_over_active_nodes():
    graph = MemoryGraph()
    _store(graph, [0.9, 1.0])
    _store(graph, [0.1, 1.0])
    graph.update_affective_signals()

    assert len(graph.clusters) == 1
    assert graph.affective_signals() == approx([0.5])


def test_neutral_events_have_zero_valence():
    graph = MemoryGraph()
    _store(graph, [0.5, 0.2])
    _store(graph, [])

    assert graph.nodes[0].valence() == 0.0
    assert graph.nodes[1].valence() == 0.0


def test_edges_require_existing_nodes():
    graph = MemoryGraph()
    graph.add_node([1.0], 0)
    graph.add_node([0.5], 1)

    assert graph.add_edge(0, 1)
    assert not graph.add_edge(1, 2)
    assert graph.edges == [(0, 1)]


def test_recall_is_activation_weighted_mean():
    graph = MemoryGraph()
    _store(graph, [1.0, 0.0])
    _store(graph, [0.0, 1.0])
    graph.nodes[0].activation = 3.0

    assert graph.recall() == approx([0.75, 0.25])
    assert graph.recall(width=3) == approx([0.75, 0.25, 0.0])
    assert graph.recall(width=1) == approx([0.75])
    assert MemoryGraph().recall() == []


def test_integrity_holds_after_clustering_and_detects_corruption():
    graph = MemoryGraph()
    for event in ([1.0, 0.0], [0.0, 1.0], [0.9, 0.1]):
        _store(graph, event)
    graph.add_edge(0, 2)

    assert graph.check_integrity()

    graph.clusters[0].node_indices.append(99)
    assert not graph.check_integrity()
