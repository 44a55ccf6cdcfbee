import heapq
import logging
from itertools import count
from typing import Dict, Iterable, Optional

logger = logging.getLogger(__name__)


class HuffmanNode: # Node for Huffman tree
    def __init__(self, symbol: Optional[int], frequency: int, left=None, right=None):
        self.symbol = symbol    # byte or None
        self.frequency = frequency
        self.left = left
        self.right = right

    @property
    def is_leaf(self) -> bool:
        return self.symbol is not None

    def __repr__(self):
        if self.is_leaf:
            return f"HuffmanNode(symbol={self.symbol}, frequency={self.frequency})"
        return f"HuffmanNode(frequency={self.frequency}, left={self.left!r}, right={self.right!r})"


def freq_table(data: bytes) -> Dict[int, int]:
    """
    Count each byte of data. Keys appear in first-appearance order,
    which is the order the tree builder uses to break ties
    """
    ft: Dict[int, int] = {}
    for b in data:
        ft[b] = ft.get(b, 0) + 1
    return ft


def merge_freq_tables(tables: Iterable[Dict[int, int]]) -> Dict[int, int]:
    merged: Dict[int, int] = {}
    for table in tables:
        for symbol, frequency in table.items():
            merged[symbol] = merged.get(symbol, 0) + frequency
    return merged


def freq_table_chunked(chunks: Iterable[bytes]) -> Dict[int, int]:
    """
    Count a buffer delivered as separate chunks. Same result as
    freq_table() over the concatenated chunks
    """
    return merge_freq_tables(freq_table(chunk) for chunk in chunks)


def build_huffman_tree(frequency_table: Dict[int, int]) -> HuffmanNode: # frequency_table: dict of symbol -> frequency
    if not frequency_table:
        raise ValueError("cannot build a Huffman tree from an empty frequency table")

    # (frequency, sequence, node): equal frequencies pop in insertion order,
    # leaves first in table order, then merged nodes in creation order
    sequence = count()
    priority_queue = [(frequency, next(sequence), HuffmanNode(symbol, frequency))
                      for symbol, frequency in frequency_table.items()]
    heapq.heapify(priority_queue)

    # Build the tree
    while len(priority_queue) > 1:
        left_freq, _, left = heapq.heappop(priority_queue)
        right_freq, _, right = heapq.heappop(priority_queue)
        merged_node = HuffmanNode(None, left_freq + right_freq, left, right) # internal node with combined frequency
        heapq.heappush(priority_queue, (merged_node.frequency, next(sequence), merged_node))

    root = priority_queue[0][2]
    logger.debug("built Huffman tree: %d leaves, root weight %d", len(frequency_table), root.frequency)
    return root # root of the tree


def generate_huffman_codes(root: HuffmanNode) -> Dict[int, str]: # root: root of the Huffman tree
    codes: Dict[int, str] = {}

    # Single distinct symbol: the root is a leaf and still needs one bit
    if root.is_leaf:
        codes[root.symbol] = "0"
        return codes

    def generate_codes_helper(node, current_code): # recursive helper function to traverse the tree and generate codes
        # Leaf node -> assign code
        if node.is_leaf:
            codes[node.symbol] = current_code
            return

        generate_codes_helper(node.left, current_code + '0')
        generate_codes_helper(node.right, current_code + '1')

    generate_codes_helper(root, '')
    return codes # return the mapping of symbols to their corresponding Huffman codes
