from __future__ import annotations

import heapq
from dataclasses import dataclass
from typing import Callable, Dict, Iterator, List, Optional, Union

from loguru import logger

from errors import EmptyInputError, HuffmanError

TAIL_KEY = None # code table key holding the literal bits of the last packed byte

CodeTable = Dict[Optional[int], str]


@dataclass
class Leaf: # one distinct byte value
    symbol: int
    weight: int
    path: str = ""
    parent: Optional[int] = None # arena index, None for the root


@dataclass
class Internal: # merged weight of exactly two children
    weight: int
    left: int
    right: int
    path: str = ""
    parent: Optional[int] = None


Node = Union[Leaf, Internal]


class HuffmanTree:
    """
    Arena of nodes addressed by index. Children and parents are stored as
    indices, so the tree and its leaf list never share object references.
    """
    def __init__(self):
        self.nodes: List[Node] = []
        self.root: Optional[int] = None
        self.leaf_list: List[int] = [] # filled in pre-order once paths are composed

    def add(self, node: Node) -> int:
        self.nodes.append(node)
        return len(self.nodes) - 1

    def preorder(self) -> Iterator[int]:
        # explicit stack: skewed weights can make the tree as deep as the alphabet
        if self.root is None:
            return
        stack = [self.root]
        while stack:
            index = stack.pop()
            yield index
            node = self.nodes[index]
            if isinstance(node, Internal):
                stack.append(node.right)
                stack.append(node.left)

    def leaves(self) -> List[Leaf]:
        return [self.nodes[i] for i in self.leaf_list]

    def depth(self) -> int:
        return max((len(leaf.path) for leaf in self.leaves()), default=0)

    def compose_paths(self) -> None:
        # pre-order guarantees a parent's path is final before its children are visited
        self.leaf_list = []
        for index in self.preorder():
            node = self.nodes[index]
            if node.parent is not None:
                node.path = self.nodes[node.parent].path + node.path
            if isinstance(node, Leaf):
                self.leaf_list.append(index)


def freq_table(data: bytes) -> Dict[int, int]:
    ft: Dict[int, int] = {}
    for b in data:
        ft[b] = ft.get(b, 0) + 1
    return ft


def build_huffman_tree(frequency_table: Dict[int, int],
                       trace: Optional[Callable[[int, int, int], None]] = None) -> HuffmanTree: # frequency_table: dict of symbol -> frequency
    if not frequency_table:
        raise EmptyInputError("Cannot build a Huffman tree from an empty frequency table")

    tree = HuffmanTree()

    # Ties are broken by arena index: leaves in ascending byte order, merged nodes after them.
    # Same result as a stable sort by weight with each new parent appended at the end.
    priority_queue = []
    for symbol in sorted(frequency_table):
        weight = frequency_table[symbol]
        if weight < 1:
            raise HuffmanError(f"Symbol {symbol} has non-positive weight {weight}")
        priority_queue.append((weight, tree.add(Leaf(symbol, weight))))
    heapq.heapify(priority_queue)

    # Build the tree
    while len(priority_queue) > 1:
        left_weight, left = heapq.heappop(priority_queue)
        right_weight, right = heapq.heappop(priority_queue)
        tree.nodes[left].path = "0"
        tree.nodes[right].path = "1"
        parent = tree.add(Internal(left_weight + right_weight, left, right)) # internal node with combined weight
        tree.nodes[left].parent = parent
        tree.nodes[right].parent = parent
        if trace is not None:
            trace(left, right, parent)
        heapq.heappush(priority_queue, (left_weight + right_weight, parent))

    tree.root = priority_queue[0][1] # a single-symbol table leaves the sole leaf as root
    tree.compose_paths()
    logger.debug("Built Huffman tree: {} leaves, {} nodes, depth {}",
                 len(tree.leaf_list), len(tree.nodes), tree.depth())
    return tree


def generate_huffman_codes(tree: HuffmanTree) -> CodeTable: # leaf symbol -> leaf path
    return {leaf.symbol: leaf.path for leaf in tree.leaves()}


def ensure_nonempty_code_map(code_map: CodeTable) -> CodeTable:
    # Edge case of file with one unique symbol -> Huffman code can be empty
    # Force it to 0 so that the encoding/decoding works
    if len(code_map) == 1:
        k = next(iter(code_map.keys()))
        if code_map[k] == "":
            code_map[k] = "0"
    return code_map


def codewords(code_table: CodeTable) -> Dict[int, str]:
    return {k: v for k, v in code_table.items() if k is not TAIL_KEY}


def is_prefix_free(codes: Dict[int, str]) -> bool:
    # after sorting, a prefix always sorts directly before some word it prefixes
    words = sorted(codes.values())
    return all(not b.startswith(a) for a, b in zip(words, words[1:]))


def reverse_code_map(code_table: CodeTable) -> Dict[str, int]:
    """
    Invert the code table for decoding, leaving out the tail entry.
    Rejects anything that could not have come from a Huffman tree.
    """
    reverse: Dict[str, int] = {}
    for symbol, code in codewords(code_table).items():
        if not isinstance(symbol, int) or not 0 <= symbol <= 255:
            raise HuffmanError(f"Code table key {symbol!r} is not a byte value")
        if not code or set(code) - {"0", "1"}:
            raise HuffmanError(f"Invalid codeword {code!r} for symbol {symbol}")
        if code in reverse:
            raise HuffmanError(f"Codeword {code!r} assigned to both {reverse[code]} and {symbol}")
        reverse[code] = symbol
    return reverse


def encoded_bit_length(code_table: CodeTable, frequency_table: Dict[int, int]) -> int:
    return sum(len(code_table[s]) * n for s, n in frequency_table.items())


def average_code_length(code_table: CodeTable, frequency_table: Dict[int, int]) -> float:
    total = sum(frequency_table.values())
    if total == 0:
        return 0.0
    return encoded_bit_length(code_table, frequency_table) / total
