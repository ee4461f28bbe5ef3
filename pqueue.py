import itertools
from typing import List

from codec_errors import EmptyQueue


class PriorityQueue: # array-backed binary min-heap ordered by node.weight
    """
    Min-heap of tree nodes keyed on their ``weight`` attribute.

    Equal weights come out in insertion order: each insert is stamped with a
    sequence number that breaks ties, so the same sequence of inserts always
    produces the same sequence of removes.

    Weights are read from the nodes on every comparison, never cached. A
    node must not be reweighted while it is queued, since nothing re-sifts it.
    """

    def __init__(self, nodes=None):
        self._heap = [] # entries are (sequence, node)
        self._counter = itertools.count()
        for node in nodes or ():
            self.insert(node)

    def size(self) -> int:
        return len(self._heap)

    def __len__(self) -> int:
        return len(self._heap)

    def __bool__(self) -> bool:
        return bool(self._heap)

    def nodes(self) -> List:
        return [entry[1] for entry in self._heap] # array order, index 0 is the minimum

    def peek(self):
        if not self._heap:
            raise EmptyQueue("peek from an empty priority queue")
        return self._heap[0][1]

    def insert(self, node) -> None:
        self._heap.append((next(self._counter), node))
        self._sift_up(len(self._heap) - 1)

    def remove(self):
        if not self._heap:
            raise EmptyQueue("remove from an empty priority queue")

        front = self._heap[0]
        last = self._heap.pop() # shrink by one
        if self._heap:
            self._heap[0] = last
            self._sift_down(0)
        return front[1]

    def _less(self, i: int, j: int) -> bool:
        a, b = self._heap[i], self._heap[j]
        return (a[1].weight, a[0]) < (b[1].weight, b[0])

    def _swap(self, i: int, j: int) -> None:
        self._heap[i], self._heap[j] = self._heap[j], self._heap[i]

    def _sift_up(self, index: int) -> None:
        while index > 0:
            parent = (index - 1) // 2
            if not self._less(index, parent): # parent is not strictly greater
                break
            self._swap(index, parent)
            index = parent

    def _sift_down(self, index: int) -> None:
        size = len(self._heap)
        while True:
            left = 2 * index + 1
            right = left + 1
            smallest = index
            if left < size and self._less(left, smallest):
                smallest = left
            if right < size and self._less(right, smallest):
                smallest = right
            if smallest == index: # no child is smaller, or no children
                return
            self._swap(index, smallest)
            index = smallest
