import logging
import math
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Mapping, Optional

from codec_errors import (
    CodecNotBuilt,
    DuplicateSymbol,
    EmptyQueue,
    InvalidArgument,
    MalformedInput,
    MissingSymbol,
    TruncatedCode,
)
from pqueue import PriorityQueue

logger = logging.getLogger(__name__)


class HuffmanNode: # Node for Huffman tree
    def __init__(self, symbol="", weight=0, left=None, right=None):
        if (left is None) != (right is None):
            raise InvalidArgument("internal nodes need exactly two children")
        if left is None and len(symbol) != 1:
            raise InvalidArgument(f"leaf symbol must be a single character, got {symbol!r}")
        if left is not None and symbol:
            raise InvalidArgument("internal nodes carry no symbol")

        self.symbol = symbol # single character for leaves, "" for internal nodes
        self.weight = weight
        self.left = left
        self.right = right

    @property
    def weight(self):
        return self._weight

    @weight.setter
    def weight(self, value):
        if value < 0 or (isinstance(value, float) and math.isnan(value)):
            raise InvalidArgument(f"weight cannot be negative, got {value!r}")
        self._weight = value

    def is_leaf(self) -> bool:
        return self.left is None and self.right is None

    def __repr__(self):
        if self.is_leaf():
            return f"HuffmanNode({self.symbol!r}, {self.weight!r})"
        return f"HuffmanNode(<internal>, {self.weight!r})"


@dataclass(frozen=True)
class CodeBook:
    """
    Result of one successful tree build: the root and both lookup tables.

    A codec either holds no code book (nothing built yet) or exactly one of
    these, replaced only when a later build succeeds.
    """
    root: HuffmanNode
    code_table: Mapping[str, str]   # symbol -> code, read-only
    symbol_table: Mapping[str, str] # code -> symbol, read-only


def build_priority_queue(frequency_table: Mapping[str, float]) -> PriorityQueue: # one leaf per distinct symbol
    queue = PriorityQueue()
    for symbol, frequency in frequency_table.items():
        queue.insert(HuffmanNode(symbol, frequency))
    return queue


def build_huffman_tree(queue: PriorityQueue) -> HuffmanNode:
    if queue.size() == 0:
        raise EmptyQueue("cannot build a Huffman tree from an empty priority queue")

    # Merge until only the root is left
    while queue.size() > 1:
        left = queue.remove()
        right = queue.remove()
        queue.insert(HuffmanNode("", left.weight + right.weight, left, right)) # first removed is the 0 branch

    return queue.remove()


def generate_huffman_codes(root: HuffmanNode):
    """
    Walk the tree and return ``(code_table, symbol_table)``.

    Left edges append '0' and right edges '1'. A root that is itself a leaf
    gets the empty code.
    """
    codes: Dict[str, str] = {}
    symbols: Dict[str, str] = {}

    stack = [(root, "")] # skewed trees can be deeper than the recursion limit
    while stack:
        node, current_code = stack.pop()
        if node.is_leaf():
            if node.symbol in codes:
                raise DuplicateSymbol(node.symbol)
            codes[node.symbol] = current_code
            symbols[current_code] = node.symbol
            continue

        stack.append((node.right, current_code + "1")) # popped after the whole left subtree
        stack.append((node.left, current_code + "0"))

    return codes, symbols


def build_codebook(queue: PriorityQueue) -> CodeBook:
    root = build_huffman_tree(queue)
    code_table, symbol_table = generate_huffman_codes(root)
    logger.debug("built Huffman tree over %d symbols, total weight %s", len(code_table), root.weight)
    return CodeBook(root, MappingProxyType(code_table), MappingProxyType(symbol_table))


def huffman_encode(text: str, code_table: Mapping[str, str]) -> str:
    parts = []
    for ch in text:
        code = code_table.get(ch)
        if code is None:
            raise MissingSymbol(ch)
        parts.append(code)
    return "".join(parts)


def huffman_decode(bits: str, root: HuffmanNode, bit_count: Optional[int] = None) -> str:
    if bit_count is None:
        bit_count = len(bits)
    if bit_count < 0:
        raise InvalidArgument(f"bit count cannot be negative, got {bit_count}")
    if bit_count > len(bits):
        raise TruncatedCode(bit_count, f"bit count {bit_count} exceeds the {len(bits)} bits supplied")

    if root.is_leaf():
        # Single symbol alphabet: every code is empty, so no bit can be consumed
        if bit_count:
            raise MalformedInput(0, bits[0], "single symbol tree has no codes that consume bits")
        return ""

    decoded = []
    node = root
    for position in range(bit_count):
        bit = bits[position]
        if bit == "0":
            node = node.left
        elif bit == "1":
            node = node.right
        else:
            raise MalformedInput(position, bit)

        if node.is_leaf():
            decoded.append(node.symbol)
            node = root # reset to the root for the next symbol

    if node is not root:
        raise TruncatedCode(bit_count)
    return "".join(decoded)


def weighted_code_length(code_table: Mapping[str, str], frequency_table: Mapping[str, float]):
    # expected size in bits of a text with exactly these symbol counts
    return sum(frequency * len(code_table[symbol]) for symbol, frequency in frequency_table.items())


class HuffmanCodec:
    """Encoder/decoder bound to the most recently built Huffman tree."""

    def __init__(self):
        self.codebook: Optional[CodeBook] = None

    @property
    def is_built(self) -> bool:
        return self.codebook is not None

    @property
    def root(self) -> HuffmanNode:
        return self._require_codebook().root

    def _require_codebook(self) -> CodeBook:
        if self.codebook is None:
            raise CodecNotBuilt()
        return self.codebook

    def build_tree(self, queue: PriorityQueue) -> CodeBook:
        codebook = build_codebook(queue) # previous code book stays if this raises
        self.codebook = codebook
        return codebook

    def get_code_table(self) -> Dict[str, str]:
        return dict(self._require_codebook().code_table)

    def get_symbol_table(self) -> Dict[str, str]:
        return dict(self._require_codebook().symbol_table)

    def encode(self, text: str) -> str:
        return huffman_encode(text, self._require_codebook().code_table)

    def decode(self, bits: str, bit_count: Optional[int] = None) -> str:
        return huffman_decode(bits, self._require_codebook().root, bit_count)

    @classmethod
    def from_frequencies(cls, frequency_table: Mapping[str, float]) -> "HuffmanCodec":
        codec = cls()
        codec.build_tree(build_priority_queue(frequency_table))
        return codec
