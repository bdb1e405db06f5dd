import numpy as np

from quadtree import QuadTree, NO_CHILD


def _brute_force_overlaps(positions, radii, margin=1.0):
    pairs = set()
    for i in range(len(radii)):
        for j in range(len(radii)):
            if i == j:
                continue
            d = np.hypot(*(positions[i] - positions[j]))
            if d < radii[i] + radii[j] + margin:
                pairs.add((i, j))
    return pairs


def test_root_holds_items_until_capacity_exceeded():
    positions = np.array([[10.0 + 20 * i, 10.0] for i in range(8)])
    radii = np.full(8, 4.0)
    tree = QuadTree()
    tree.build(positions, radii, 400, 400)

    assert tree.node_count == 1
    assert sorted(tree.items[0]) == list(range(8))


def test_split_moves_clean_items_into_children():
    rng = np.random.default_rng(3)
    top_left = rng.uniform(20, 180, size=(8, 2))
    positions = np.vstack([top_left, [[300.0, 300.0]]])
    radii = np.full(9, 4.0)
    tree = QuadTree()
    tree.build(positions, radii, 400, 400)

    assert tree.node_count == 5
    assert tree.items[0] == []
    assert sorted(tree.items[int(tree.children[0, 1])]) == list(range(8))
    assert tree.items[int(tree.children[0, 3])] == [8]


def test_straddling_particle_stays_at_coarser_node():
    positions = np.array([[50.0 + 10 * (i % 3), 50.0 + 10 * (i // 3)] for i in range(9)] + [[200.0, 100.0]])
    radii = np.full(10, 4.0)
    tree = QuadTree()
    tree.build(positions, radii, 400, 400)

    assert tree.children[0, 0] != NO_CHILD
    assert 9 in tree.items[0]


def test_query_finds_every_overlapping_pair():
    rng = np.random.default_rng(11)
    positions = rng.uniform(0, 500, size=(300, 2))
    radii = rng.uniform(4, 16, size=300)
    tree = QuadTree()
    tree.build(positions, radii, 500, 500)

    for i, j in _brute_force_overlaps(positions, radii):
        assert j in tree.query(i)


def test_query_skips_distant_quadrants():
    corner = [[20.0 + 12 * (i % 3), 20.0 + 12 * (i // 3)] for i in range(9)]
    far = [[450.0, 450.0]]
    positions = np.array(corner + far)
    radii = np.full(10, 4.0)
    tree = QuadTree()
    tree.build(positions, radii, 500, 500)

    assert 9 not in tree.query(0)
    assert 0 not in tree.query(9)


def test_depth_is_bounded():
    positions = np.tile([[1.0, 1.0]], (200, 1)) + np.linspace(0, 0.5, 200)[:, None]
    radii = np.full(200, 0.1)
    tree = QuadTree(margin=0.0)
    tree.build(positions, radii, 1024, 1024)

    assert tree.depths[:tree.node_count].max() <= 6


def test_candidates_match_individual_queries():
    rng = np.random.default_rng(5)
    positions = rng.uniform(0, 300, size=(60, 2))
    radii = rng.uniform(4, 16, size=60)
    tree = QuadTree()
    tree.build(positions, radii, 300, 300)
    offsets, indices = tree.candidates()

    assert offsets.shape == (61,)
    assert indices.dtype == np.int64
    for i in range(60):
        assert sorted(indices[offsets[i]:offsets[i + 1]]) == sorted(tree.query(i))


def test_rebuild_reuses_arena():
    rng = np.random.default_rng(2)
    positions = rng.uniform(0, 500, size=(200, 2))
    radii = rng.uniform(4, 16, size=200)
    tree = QuadTree()
    tree.build(positions, radii, 500, 500)
    bounds, first_count = tree.bounds, tree.node_count

    tree.build(positions, radii, 500, 500)

    assert tree.bounds is bounds
    assert tree.node_count == first_count
    assert sum(len(tree.items[n]) for n in range(tree.node_count)) == 200
