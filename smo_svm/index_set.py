"""
Множество индексов фиксированного размера для SMO.

Хранится как битовая маска плюс двусвязный список на массивах (next/previous),
поэтому вставка, удаление, проверка принадлежности и переход к следующему
элементу выполняются за O(1) без выделения памяти на каждую операцию.

Новые элементы вставляются в голову списка: обход идёт от последнего
вставленного к первому.
"""

from typing import Iterator

import numpy as np

# Сентинел "до начала" для next() и "конец списка" в ответе
NONE = -1


class IndexSet:
    """Множество целых чисел из универсума [0, size)."""

    def __init__(self, size: int):
        self._indicators = np.zeros(size, dtype=np.bool_)
        self._next = np.full(size, NONE, dtype=np.int64)
        self._previous = np.full(size, NONE, dtype=np.int64)
        self._number = 0
        self._first = NONE

    def contains(self, index: int) -> bool:
        return bool(self._indicators[index])

    def delete(self, index: int) -> None:
        """Удаляет элемент; отсутствующий элемент игнорируется."""
        if not self._indicators[index]:
            return
        nxt = int(self._next[index])
        if self._first == index:
            self._first = nxt
        else:
            self._next[self._previous[index]] = nxt
        if nxt != NONE:
            self._previous[nxt] = self._previous[index]
        self._indicators[index] = False
        self._number -= 1

    def insert(self, index: int) -> None:
        """Вставляет элемент в голову списка; повторная вставка игнорируется."""
        if self._indicators[index]:
            return
        if self._number == 0:
            self._next[index] = NONE
        else:
            self._previous[self._first] = index
            self._next[index] = self._first
        self._previous[index] = NONE
        self._first = index
        self._indicators[index] = True
        self._number += 1

    def next(self, index: int) -> int:
        """Следующий элемент после index; NONE даёт первый, в конце - NONE."""
        if index == NONE:
            return self._first
        return int(self._next[index])

    def size(self) -> int:
        return self._number

    def __len__(self) -> int:
        return self._number

    def __contains__(self, index: int) -> bool:
        return self.contains(index)

    def __iter__(self) -> Iterator[int]:
        i = self.next(NONE)
        while i != NONE:
            yield i
            i = self.next(i)

    def __repr__(self) -> str:
        return f"IndexSet({list(self)})"
