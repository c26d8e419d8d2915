"""
Ядра для SMO над разреженными строками.

Строка экземпляра - пара массивов (indices, values) с отсортированными
индексами атрибутов. Атрибут класса может присутствовать в строке и всегда
пропускается при вычислении скалярного произведения.

Поддерживаемые ядра (закрытый набор, выбирается по имени через KERNELS):
- "poly": полиномиальное K = ((<x1,x2> [+ 1]) [/ (m - 1)]) ^ p;
          при p = 1.0 - линейное ядро (SMO хранит вектор весов)
- "rbf":  K = exp(-gamma * ||x1 - x2||^2)
"""

import math
from dataclasses import dataclass
from typing import Dict, Tuple, Type

import numpy as np
from numba import njit

from .exceptions import SMOConfigurationError

SparseRow = Tuple[np.ndarray, np.ndarray]


# =============================================================================
# Numba-функции скалярного произведения
# =============================================================================

@njit(cache=True)
def sparse_dot_product(
    ind1: np.ndarray,
    val1: np.ndarray,
    ind2: np.ndarray,
    val2: np.ndarray,
    class_index: int
) -> float:
    """
    Скалярное произведение двух разреженных векторов слиянием индексов.

    Порядок суммирования определяется только индексами атрибутов, поэтому
    <x1,x2> и <x2,x1> совпадают побитово.
    """
    result = 0.0
    n1 = ind1.shape[0]
    n2 = ind2.shape[0]
    p1 = 0
    p2 = 0
    while p1 < n1 and p2 < n2:
        i1 = ind1[p1]
        i2 = ind2[p2]
        if i1 == i2:
            if i1 != class_index:
                result += val1[p1] * val2[p2]
            p1 += 1
            p2 += 1
        elif i1 > i2:
            p2 += 1
        else:
            p1 += 1
    return result


# =============================================================================
# Ядра
# =============================================================================

@dataclass(frozen=True)
class PolyKernel:
    """
    Полиномиальное ядро над разреженными строками.

    Args:
        exponent: Показатель степени; 1.0 означает линейную машину
        use_lower_order: Добавлять 1 к скалярному произведению
        rescale: Делить на (число атрибутов - 1)
    """
    exponent: float = 1.0
    use_lower_order: bool = False
    rescale: bool = False

    name = "poly"

    def __post_init__(self):
        if self.exponent == 1.0 and self.rescale:
            raise SMOConfigurationError("Нельзя использовать rescale с линейной машиной (exponent = 1)")
        if self.exponent == 1.0 and self.use_lower_order:
            raise SMOConfigurationError("Нельзя использовать lower-order terms с линейной машиной (exponent = 1)")

    @property
    def is_linear(self) -> bool:
        return self.exponent == 1.0

    def evaluate(self, inst1: SparseRow, inst2: SparseRow, class_index: int, num_attributes: int) -> float:
        result = sparse_dot_product(inst1[0], inst1[1], inst2[0], inst2[1], class_index)
        if self.use_lower_order:
            result += 1.0
        if self.rescale:
            result /= float(num_attributes) - 1.0
        if self.exponent != 1.0:
            result = float(np.power(result, self.exponent))
        return result

    def describe(self) -> str:
        text = f"Poly kernel: K(x,y) = <x,y>^{self.exponent}"
        if self.use_lower_order:
            text += " (lower-order terms)"
        if self.rescale:
            text += " (rescaled)"
        return text


@dataclass(frozen=True)
class RBFKernel:
    """Гауссово ядро exp(-gamma * ||x1 - x2||^2)."""
    gamma: float = 0.01

    name = "rbf"

    def __post_init__(self):
        if not self.gamma > 0:
            raise SMOConfigurationError(f"gamma должно быть > 0, получено {self.gamma}")

    @property
    def is_linear(self) -> bool:
        return False

    def evaluate(self, inst1: SparseRow, inst2: SparseRow, class_index: int, num_attributes: int) -> float:
        d11 = sparse_dot_product(inst1[0], inst1[1], inst1[0], inst1[1], class_index)
        d22 = sparse_dot_product(inst2[0], inst2[1], inst2[0], inst2[1], class_index)
        d12 = sparse_dot_product(inst1[0], inst1[1], inst2[0], inst2[1], class_index)
        # d11 + d22 коммутативно, так что K(x1,x2) == K(x2,x1) побитово
        return math.exp(-self.gamma * (d11 + d22 - 2.0 * d12))

    def describe(self) -> str:
        return f"RBF kernel: K(x,y) = e^-({self.gamma} * <x-y,x-y>)"


KERNELS: Dict[str, Type] = {
    PolyKernel.name: PolyKernel,
    RBFKernel.name: RBFKernel,
}


def make_kernel(name: str, **params):
    """Создаёт ядро по имени из реестра KERNELS."""
    try:
        kernel_cls = KERNELS[name]
    except KeyError:
        raise SMOConfigurationError(
            f"Неизвестное ядро '{name}', доступны: {sorted(KERNELS)}"
        ) from None
    try:
        return kernel_cls(**params)
    except TypeError as e:
        raise SMOConfigurationError(f"Некорректные параметры ядра '{name}': {e}") from e
