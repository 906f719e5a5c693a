import pytest

import huffman as huff
from errors import EmptyInputError, HuffmanError


def test_freq_table_counts_each_byte():
    assert huff.freq_table(b"AABC") == {65: 2, 66: 1, 67: 1}
    assert huff.freq_table(b"") == {}


def test_build_from_empty_table_raises():
    with pytest.raises(EmptyInputError):
        huff.build_huffman_tree({})


def test_single_symbol_tree_is_root_leaf():
    tree = huff.build_huffman_tree({65: 10})
    assert tree.root == 0
    assert isinstance(tree.nodes[tree.root], huff.Leaf)
    assert tree.nodes[tree.root].path == ""

    codes = huff.ensure_nonempty_code_map(huff.generate_huffman_codes(tree))
    assert codes == {65: "0"}


def test_two_equal_weight_ties_merge_in_byte_order():
    tree = huff.build_huffman_tree({65: 2, 66: 1, 67: 1})
    codes = huff.generate_huffman_codes(tree)
    assert codes == {65: "0", 66: "10", 67: "11"}


def test_tree_is_deterministic_regardless_of_key_order():
    ft = {10: 3, 200: 3, 7: 3, 99: 1, 42: 5}
    reordered = dict(reversed(list(ft.items())))
    a = huff.generate_huffman_codes(huff.build_huffman_tree(ft))
    b = huff.generate_huffman_codes(huff.build_huffman_tree(reordered))
    assert a == b


def test_merges_always_take_two_lowest_and_conserve_weight():
    ft = {i: (i * 37) % 11 + 1 for i in range(40)}
    merges = []
    tree = huff.build_huffman_tree(ft, trace=lambda l, r, p: merges.append((l, r, p)))

    working = set(range(len(ft)))
    total = sum(ft.values())
    for left, right, parent in merges:
        nodes = tree.nodes
        others = [nodes[i].weight for i in working - {left, right}]
        assert all(nodes[left].weight <= w and nodes[right].weight <= w for w in others)
        assert nodes[parent].weight == nodes[left].weight + nodes[right].weight
        working -= {left, right}
        working.add(parent)
        assert sum(nodes[i].weight for i in working) == total

    assert working == {tree.root}
    assert len(merges) == len(ft) - 1


def test_every_path_extends_its_parent_path():
    tree = huff.build_huffman_tree(huff.freq_table(b"the quick brown fox jumps over the lazy dog"))
    for index, node in enumerate(tree.nodes):
        if node.parent is None:
            assert index == tree.root
            assert node.path == ""
            continue
        parent = tree.nodes[node.parent]
        last_bit = "0" if parent.left == index else "1"
        assert node.path == parent.path + last_bit
    assert all(len(leaf.path) >= 1 for leaf in tree.leaves())


def test_internal_nodes_have_two_children():
    tree = huff.build_huffman_tree({i: i + 1 for i in range(9)})
    internals = [(i, n) for i, n in enumerate(tree.nodes) if isinstance(n, huff.Internal)]
    assert len(internals) == len(tree.leaf_list) - 1
    for index, node in internals:
        assert node.left != node.right
        assert tree.nodes[node.left].parent == index
        assert tree.nodes[node.right].parent == index


def test_preorder_visits_root_then_left_then_right():
    tree = huff.build_huffman_tree({65: 2, 66: 1, 67: 1})
    order = [tree.nodes[i].path for i in tree.preorder()]
    assert order == ["", "0", "1", "10", "11"]
    assert [leaf.symbol for leaf in tree.leaves()] == [65, 66, 67]


def test_skewed_weights_build_deep_tree_without_recursion():
    # fibonacci-like weights give a maximally unbalanced tree
    ft = {}
    a, b = 1, 1
    for symbol in range(60):
        ft[symbol] = a
        a, b = b, a + b
    tree = huff.build_huffman_tree(ft)
    assert tree.depth() == 59
    assert huff.is_prefix_free(huff.generate_huffman_codes(tree))


def test_codes_are_prefix_free():
    data = bytes(range(256)) * 3 + b"A" * 500 + b"B" * 90
    codes = huff.generate_huffman_codes(huff.build_huffman_tree(huff.freq_table(data)))
    assert len(codes) == 256
    assert huff.is_prefix_free(codes)
    words = list(codes.values())
    for c1 in words:
        for c2 in words:
            if c1 != c2:
                assert not c2.startswith(c1)


def test_is_prefix_free_detects_prefix():
    assert not huff.is_prefix_free({1: "0", 2: "01"})
    assert huff.is_prefix_free({1: "0", 2: "10", 3: "11"})


def test_reverse_code_map_skips_tail_and_validates():
    table = {65: "0", 66: "10", 67: "11", huff.TAIL_KEY: "001"}
    assert huff.reverse_code_map(table) == {"0": 65, "10": 66, "11": 67}

    with pytest.raises(HuffmanError):
        huff.reverse_code_map({65: "0", 66: "0"})
    with pytest.raises(HuffmanError):
        huff.reverse_code_map({65: ""})
    with pytest.raises(HuffmanError):
        huff.reverse_code_map({65: "02"})
    with pytest.raises(HuffmanError):
        huff.reverse_code_map({300: "1"})


def test_average_code_length():
    ft = {65: 2, 66: 1, 67: 1}
    codes = {65: "0", 66: "10", 67: "11"}
    assert huff.encoded_bit_length(codes, ft) == 6
    assert huff.average_code_length(codes, ft) == 1.5
    assert huff.average_code_length({}, {}) == 0.0
