import random

import pytest

from codec_errors import EmptyQueue
from huffman import HuffmanNode
from pqueue import PriorityQueue


def _assert_heap_order(queue):
    weights = [node.weight for node in queue.nodes()]
    for i, w in enumerate(weights):
        for child in (2 * i + 1, 2 * i + 2):
            if child < len(weights):
                assert w <= weights[child]


def test_empty_queue_size_and_remove():
    queue = PriorityQueue()
    assert queue.size() == 0
    assert len(queue) == 0
    with pytest.raises(EmptyQueue):
        queue.remove()
    with pytest.raises(EmptyQueue):
        queue.peek()


def test_empty_queue_is_index_error():
    with pytest.raises(IndexError):
        PriorityQueue().remove()


def test_heap_order_after_every_operation():
    rng = random.Random(7)
    queue = PriorityQueue()
    inserted = 0
    for step in range(500):
        if queue.size() and rng.random() < 0.4:
            queue.remove()
        else:
            queue.insert(HuffmanNode(chr(65 + step % 26), rng.randint(0, 50)))
            inserted += 1
        _assert_heap_order(queue)
    assert inserted > 0


def test_removal_order_is_non_decreasing():
    rng = random.Random(11)
    weights = [rng.uniform(0, 100) for _ in range(200)]
    queue = PriorityQueue(HuffmanNode("x", w) for w in weights)
    assert queue.size() == 200

    out = [queue.remove().weight for _ in range(200)]
    assert out == sorted(weights)
    assert queue.size() == 0


def test_peek_returns_minimum_without_removing():
    queue = PriorityQueue()
    for sym, w in (("a", 3), ("b", 1), ("c", 2)):
        queue.insert(HuffmanNode(sym, w))
    assert queue.peek().symbol == "b"
    assert queue.size() == 3


def test_zero_weight_accepted():
    queue = PriorityQueue()
    queue.insert(HuffmanNode("a", 4))
    queue.insert(HuffmanNode("z", 0))
    assert queue.remove().symbol == "z"


def test_equal_weights_come_out_in_insertion_order():
    queue = PriorityQueue()
    symbols = "qwertyuiop"
    for sym in symbols:
        queue.insert(HuffmanNode(sym, 5))
    assert "".join(queue.remove().symbol for _ in symbols) == symbols


def test_remove_returns_the_inserted_objects():
    nodes = [HuffmanNode("a", 2), HuffmanNode("b", 1)]
    queue = PriorityQueue(nodes)
    assert queue.remove() is nodes[1]
    assert queue.remove() is nodes[0]


def test_compares_current_node_weight():
    queue = PriorityQueue()
    a = HuffmanNode("a", 5)
    queue.insert(a)
    a.weight = 1 # alone in the queue, so heap order still holds
    queue.insert(HuffmanNode("c", 2))
    assert queue.nodes()[0] is a
    assert queue.remove() is a
