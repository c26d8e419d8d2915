"""
Кэш значений ядра для SMO.

Два режима, выбираются параметром cache_size:

- cache_size == 0: полная матрица. При первом запросе вычисляется вся нижняя
  треугольная матрица ядра (n(n+1)/2 значений), дальше - только чтение.
- cache_size > 0: множественно-ассоциативный кэш. Пара (i, j) кодируется
  ключом key = max(i,j) + min(i,j)*n, корзина начинается с позиции
  (key % cache_size) * slots. Внутри корзины slots ячеек просматриваются
  линейно; попадание меняется местами с головой корзины, промах сдвигает
  корзину вправо на одну ячейку (последняя вытесняется) и пишет в голову.
  Вытеснение локально для корзины, глобального LRU нет.

Ключи хранятся со смещением +1, чтобы 0 означал пустую ячейку.
"""

from typing import Callable, Optional

import numpy as np
from numba import njit

from .exceptions import SMOConfigurationError, SolverInvariantError
from .kernels import SparseRow

# Ячеек в одной корзине
CACHE_SLOTS = 4

# n*n должно помещаться в int64
MAX_INSTANCES = 3037000499


# =============================================================================
# Numba-функции работы с корзиной
# =============================================================================

@njit(cache=True)
def _bucket_lookup(keys: np.ndarray, storage: np.ndarray, key: int, location: int, slots: int):
    """
    Ищет key + 1 в корзине.

    Returns:
        (found, value). При попадании не в голову корзины запись
        меняется местами с головой.
    """
    loc = location
    for i in range(slots):
        this_key = keys[loc]
        if this_key == 0:
            break
        if this_key == key + 1:
            value = storage[loc]
            if i > 0:
                storage[loc] = storage[location]
                keys[loc] = keys[location]
                storage[location] = value
                keys[location] = this_key
            return True, value
        loc += 1
    return False, 0.0


@njit(cache=True)
def _bucket_store(keys: np.ndarray, storage: np.ndarray, key: int, location: int, slots: int, value: float):
    """Сдвигает корзину вправо на одну ячейку и пишет значение в голову."""
    for k in range(location + slots - 1, location, -1):
        keys[k] = keys[k - 1]
        storage[k] = storage[k - 1]
    keys[location] = key + 1
    storage[location] = value


# =============================================================================
# Кэш
# =============================================================================

class KernelCache:
    """
    Мемоизация попарных значений ядра по индексам экземпляров.

    Args:
        evaluate: Функция evaluate(id1, id2, inst1) -> float, вычисляющая ядро
            между экземпляром id1 (строка inst1, None - взять из данных) и id2
        num_instances: Размер универсума индексов n
        cache_size: 0 - полная матрица, > 0 - число корзин (лучше простое число)
        slots: Ячеек в корзине
    """

    def __init__(
        self,
        evaluate: Callable[[int, int, Optional[SparseRow]], float],
        num_instances: int,
        cache_size: int,
        slots: int = CACHE_SLOTS
    ):
        if cache_size < 0:
            raise SMOConfigurationError(f"cache_size должно быть >= 0, получено {cache_size}")
        if slots < 1:
            raise SMOConfigurationError(f"slots должно быть >= 1, получено {slots}")
        if num_instances > MAX_INSTANCES:
            raise SolverInvariantError(
                f"Cache overflow: {num_instances} instances exceed the int64 pair-key range"
            )

        self._evaluate = evaluate
        self.num_instances = num_instances
        self.cache_size = cache_size
        self.slots = slots

        self.num_evals = 0
        self.num_cache_hits = 0

        self._keys: Optional[np.ndarray] = None
        self._storage: Optional[np.ndarray] = None
        self._kernel_matrix: Optional[np.ndarray] = None
        self._released = False

        if cache_size > 0:
            self._keys = np.zeros(cache_size * slots, dtype=np.int64)
            self._storage = np.zeros(cache_size * slots, dtype=np.float64)

    @property
    def is_full(self) -> bool:
        return self.cache_size == 0

    def _build_full_matrix(self) -> None:
        """Вычисляет всю нижнюю треугольную матрицу ядра за один проход."""
        n = self.num_instances
        matrix = np.empty(n * (n + 1) // 2, dtype=np.float64)
        pos = 0
        for i in range(n):
            for j in range(i + 1):
                self.num_evals += 1
                matrix[pos] = self._evaluate(i, j, None)
                pos += 1
        self._kernel_matrix = matrix

    def get(self, id1: int, id2: int, inst1: Optional[SparseRow] = None) -> float:
        """
        Значение ядра для пары (id1, id2).

        При id1 < 0 (экземпляр вне обучающих данных) кэш не используется:
        значение вычисляется заново по inst1.
        """
        key = -1
        location = -1

        if id1 >= 0 and not self._released:
            if self.cache_size == 0:
                if self._kernel_matrix is None:
                    self._build_full_matrix()
                self.num_cache_hits += 1
                if id1 > id2:
                    return float(self._kernel_matrix[id1 * (id1 + 1) // 2 + id2])
                return float(self._kernel_matrix[id2 * (id2 + 1) // 2 + id1])

            if id1 > id2:
                key = id1 + id2 * self.num_instances
            else:
                key = id2 + id1 * self.num_instances
            location = (key % self.cache_size) * self.slots
            found, value = _bucket_lookup(self._keys, self._storage, key, location, self.slots)
            if found:
                self.num_cache_hits += 1
                return value

        result = self._evaluate(id1, id2, inst1)
        self.num_evals += 1

        if key != -1:
            _bucket_store(self._keys, self._storage, key, location, self.slots, result)
        return result

    def clean(self) -> None:
        """Освобождает хранилище. Повторный вызов безопасен."""
        self._keys = None
        self._storage = None
        self._kernel_matrix = None
        self._released = True

    free = clear = clean

    def stats(self) -> dict:
        return {
            "mode": "full" if self.is_full else "bounded",
            "cache_size": self.cache_size,
            "kernel_evals": self.num_evals,
            "cache_hits": self.num_cache_hits,
        }
