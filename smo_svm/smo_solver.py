"""
Sequential Minimal Optimization (SMO) солвер для бинарной SVM.

Алгоритм:
- Platt, J. (1998). "Fast Training of Support Vector Machines using Sequential
  Minimal Optimization"
- Keerthi, S.S., Shevade, S.K., Bhattacharyya, C., Murthy, K.R.K. (1999).
  "Improvements to Platt's SMO Algorithm for SVM Classifier Design" (Modification 1)

Двойственная задача:
    max_α Σ_i α_i - 1/2 Σ_i Σ_j α_i α_j y_i y_j K(x_i,x_j)

    s.t. Σ_i α_i y_i = 0
         0 ≤ α_i ≤ C

Пороги bLow/bUp поддерживаются через пять непересекающихся множеств:
    I0 = {i: 0 < α_i < C}
    I1 = {i: y_i = +1, α_i = 0}
    I2 = {i: y_i = -1, α_i = C}
    I3 = {i: y_i = +1, α_i = C}
    I4 = {i: y_i = -1, α_i = 0}

Выход SVM: f(x) = Σ_{i ∈ SV} y_i α_i K(x_i, x) - b. Для линейного ядра
(exponent = 1) вместо α хранится вектор весов w, и f(x) = <w, x> - b.

Особенности:
- Значения ядра идут через KernelCache (полная матрица или корзины)
- Numba JIT для скалярных операций внутреннего цикла
- После обучения линейной машины α, данные и кэш отбрасываются,
  а w хранится в разреженном виде
"""

import warnings
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence, Tuple

import numpy as np
from numba import njit

from .dataset import SparseData
from .exceptions import SMOConfigurationError, SolverInvariantError
from .index_set import NONE, IndexSet
from .kernel_cache import KernelCache
from .kernels import PolyKernel, SparseRow, sparse_dot_product

# Параметры по умолчанию
DEFAULT_C = 1.0
DEFAULT_CACHE_SIZE = 1000003
DEFAULT_TOL = 1.0e-3
DEFAULT_EPS = 1.0e-12

# Относительная точность "прилипания" α к 0 и C (доля от C)
DEL = 1.0e-12


class SolverState(Enum):
    """
    Состояние бинарной машины.

    CONVERGED - решение найдено, KKT условия выполнены с точностью tol.
    STOPPED - обучение прервано ограничением max_iter, модель пригодна
    для предсказаний, но KKT условия могут нарушаться.
    """
    UNINITIALIZED = "uninitialized"
    OPTIMIZING = "optimizing"
    CONVERGED = "converged"
    STOPPED = "stopped"
    DEGENERATE = "degenerate"


@dataclass
class SMOResult:
    """Результат работы SMO солвера для одной пары классов."""
    alpha: np.ndarray          # Множители Лагранжа
    b: float                   # Смещение (bias)
    n_iterations: int          # Количество проходов внешнего цикла
    n_support_vectors: int     # Количество опорных векторов
    converged: bool            # Сходимость достигнута
    n_kernel_evals: int        # Вычислений ядра
    n_cache_hits: int          # Попаданий в кэш ядра


# =============================================================================
# Numba-оптимизированные функции
# =============================================================================

@njit(cache=True)
def compute_bounds(alpha1: float, alpha2: float, y1: float, y2: float, C: float) -> Tuple[float, float]:
    """Вычисляет границы L и H для α_2 при оптимизации пары (1, 2)."""
    if y1 != y2:
        # y1 ≠ y2: α_1 - α_2 = const
        L = max(0.0, alpha2 - alpha1)
        H = min(C, C + alpha2 - alpha1)
    else:
        # y1 = y2: α_1 + α_2 = const
        L = max(0.0, alpha1 + alpha2 - C)
        H = min(C, alpha1 + alpha2)
    return L, H


@njit(cache=True)
def snap_to_bounds(a: float, C: float, delta: float) -> float:
    """Прижимает α к 0 или C, если оно ближе delta*C к границе."""
    if a > C - delta * C:
        return C
    if a <= delta * C:
        return 0.0
    return a


@njit(cache=True)
def endpoint_objective(
    a2: float,
    gamma: float,
    s: float,
    y1: float,
    y2: float,
    k11: float,
    k12: float,
    k22: float,
    v1: float,
    v2: float
) -> float:
    """Значение двойственной функции на концах отрезка при η ≥ 0."""
    a1 = gamma - s * a2
    return (a1 + a2 - 0.5 * k11 * a1 * a1 - 0.5 * k22 * a2 * a2
            - s * k12 * a1 * a2 - y1 * a1 * v1 - y2 * a2 * v2)


@njit(cache=True)
def dense_sparse_dot(weights: np.ndarray, ind: np.ndarray, val: np.ndarray, class_index: int) -> float:
    """<w, x> для плотного w и разреженного x."""
    result = 0.0
    for p in range(ind.shape[0]):
        if ind[p] != class_index:
            result += weights[ind[p]] * val[p]
    return result


@njit(cache=True)
def add_to_weights(weights: np.ndarray, ind: np.ndarray, val: np.ndarray, coef: float, class_index: int) -> None:
    """w += coef * x для разреженного x."""
    for p in range(ind.shape[0]):
        if ind[p] != class_index:
            weights[ind[p]] += coef * val[p]


# =============================================================================
# Основной класс солвера
# =============================================================================

class BinarySMO:
    """
    SMO для одной пары классов (cl1 -> y = -1, cl2 -> y = +1).

    Args:
        kernel: Ядро (PolyKernel, RBFKernel); линейное PolyKernel включает режим весов
        C: Верхняя граница α (параметр регуляризации)
        cache_size: Размер кэша ядра; 0 - полная матрица
        tol: Допуск для нарушения KKT условий
        eps: Допуск округления (минимальный шаг и сравнение концов отрезка)
        max_iter: Максимум проходов внешнего цикла (None - без ограничения)
        verbose: Выводить отладочную информацию
    """

    def __init__(
        self,
        kernel=None,
        C: float = DEFAULT_C,
        cache_size: int = DEFAULT_CACHE_SIZE,
        tol: float = DEFAULT_TOL,
        eps: float = DEFAULT_EPS,
        max_iter: Optional[int] = None,
        verbose: bool = False
    ):
        if not C > 0:
            raise SMOConfigurationError(f"C должно быть > 0, получено {C}")
        if cache_size < 0:
            raise SMOConfigurationError(f"cache_size должно быть >= 0, получено {cache_size}")
        if not tol > 0:
            raise SMOConfigurationError(f"tol должно быть > 0, получено {tol}")
        if eps < 0:
            raise SMOConfigurationError(f"eps должно быть >= 0, получено {eps}")
        if max_iter is not None and max_iter < 1:
            raise SMOConfigurationError(f"max_iter должно быть >= 1, получено {max_iter}")

        self.kernel = kernel if kernel is not None else PolyKernel()
        self.C = float(C)
        self.cache_size = cache_size
        self.tol = tol
        self.eps = eps
        self.max_iter = max_iter
        self.verbose = verbose

        self.state = SolverState.UNINITIALIZED
        self.classes: Tuple[int, int] = (-1, -1)

        # Результаты
        self.alpha: Optional[np.ndarray] = None
        self.y: Optional[np.ndarray] = None
        self.b = 0.0
        self.weights: Optional[np.ndarray] = None
        self.sparse_weights: Optional[np.ndarray] = None
        self.sparse_indices: Optional[np.ndarray] = None
        self.support_vectors: Optional[IndexSet] = None
        self.kernel_cache: Optional[KernelCache] = None
        self.attribute_names: List[str] = []
        self.n_kernel_evals = 0

        # Состояние оптимизации
        self._data: Optional[SparseData] = None
        self._class_index = -1
        self._num_attributes = 0
        self._errors: Optional[np.ndarray] = None
        self._b_low = 1.0
        self._b_up = -1.0
        self._i_low = NONE
        self._i_up = NONE
        self._I0 = self._I1 = self._I2 = self._I3 = self._I4 = None

    @property
    def is_linear(self) -> bool:
        return self.kernel.is_linear

    # -------------------------------------------------------------------------
    # Обучение
    # -------------------------------------------------------------------------

    def fit(self, data: SparseData, cl1: int, cl2: int) -> SMOResult:
        """
        Обучает машину на экземплярах классов cl1 и cl2.

        Args:
            data: Экземпляры только этих двух классов
            cl1: Класс, получающий метку -1
            cl2: Класс, получающий метку +1

        Returns:
            SMOResult с решением
        """
        n = data.num_instances
        self.classes = (cl1, cl2)
        self._class_index = data.class_index
        self._num_attributes = data.num_attributes
        self.attribute_names = list(data.attribute_names)

        # Инициализация порогов
        self._b_up, self._b_low, self.b = -1.0, 1.0, 0.0

        # Метки и опорные индексы iLow/iUp (последний встреченный экземпляр класса)
        y = np.empty(n, dtype=np.float64)
        self._i_up = self._i_low = NONE
        for i in range(n):
            label = int(data.classes[i])
            if label == cl1:
                y[i] = -1.0
                self._i_low = i
            elif label == cl2:
                y[i] = 1.0
                self._i_up = i
            else:
                raise SolverInvariantError(
                    f"Instance {i} has class {label}, expected {cl1} or {cl2}"
                )

        if self._i_up == NONE or self._i_low == NONE:
            return self._fit_degenerate(n)

        self.state = SolverState.OPTIMIZING
        self.y = y
        self._data = data
        self.weights = np.zeros(data.num_attributes, dtype=np.float64) if self.is_linear else None
        self.sparse_weights = None
        self.sparse_indices = None
        self.alpha = np.zeros(n, dtype=np.float64)

        self.support_vectors = IndexSet(n)
        self._I0 = IndexSet(n)
        self._I1 = IndexSet(n)
        self._I2 = IndexSet(n)
        self._I3 = IndexSet(n)
        self._I4 = IndexSet(n)

        # Кэш ошибок
        self._errors = np.zeros(n, dtype=np.float64)
        self._errors[self._i_low] = 1.0
        self._errors[self._i_up] = -1.0

        self.kernel_cache = KernelCache(self._evaluate_kernel, n, self.cache_size)

        # Все α = 0: каждый индекс в I1 или I4
        for i in range(n):
            if y[i] == 1.0:
                self._I1.insert(i)
            else:
                self._I4.insert(i)

        if self.verbose:
            mode = "full matrix" if self.cache_size == 0 else f"{self.cache_size} buckets"
            print(f"SMO solver started: classes {cl1} vs {cl2}, {n} instances")
            print(f"  Kernel: {self.kernel.describe()}, cache: {mode}")

        n_iter, converged = self._optimize()

        # Порог
        self.b = (self._b_low + self._b_up) / 2.0
        self.state = SolverState.CONVERGED if converged else SolverState.STOPPED

        alpha = self.alpha.copy()
        n_sv = self.support_vectors.size()
        self.n_kernel_evals = self.kernel_cache.num_evals
        n_cache_hits = self.kernel_cache.num_cache_hits

        # Освобождаем память
        self.kernel_cache.clean()
        self._errors = None
        self._I0 = self._I1 = self._I2 = self._I3 = self._I4 = None

        if self.is_linear:
            self._collapse_linear_machine()

        if self.verbose:
            print(f"SMO finished: {n_iter} sweeps, {n_sv} support vectors, converged={converged}")
            print(f"  b = {self.b:.6f}, kernel evals = {self.n_kernel_evals}, cache hits = {n_cache_hits}")

        return SMOResult(
            alpha=alpha,
            b=self.b,
            n_iterations=n_iter,
            n_support_vectors=n_sv,
            converged=converged,
            n_kernel_evals=self.n_kernel_evals,
            n_cache_hits=n_cache_hits
        )

    def _fit_degenerate(self, n: int) -> SMOResult:
        """Представлен только один класс пары: постоянный выход за этот класс."""
        self.b = 1.0 if self._i_up == NONE else -1.0
        if self.is_linear:
            self.sparse_weights = np.zeros(0, dtype=np.float64)
            self.sparse_indices = np.zeros(0, dtype=np.int64)
        self.y = None
        self.alpha = None
        self.support_vectors = None
        self.state = SolverState.DEGENERATE

        if self.verbose:
            print(f"SMO solver: only one class present for {self.classes}, constant output {-self.b:+.0f}")

        return SMOResult(
            alpha=np.zeros(n, dtype=np.float64),
            b=self.b,
            n_iterations=0,
            n_support_vectors=0,
            converged=True,
            n_kernel_evals=0,
            n_cache_hits=0
        )

    def _optimize(self) -> Tuple[int, bool]:
        """
        Внешний цикл: чередует проходы по всем индексам и по I0.

        Returns:
            (n_iterations, converged)
        """
        n = self.alpha.shape[0]
        num_changed = 0
        examine_all = True
        n_iter = 0

        while num_changed > 0 or examine_all:
            if self.max_iter is not None and n_iter >= self.max_iter:
                warnings.warn(
                    f"SMO stopped after {n_iter} sweeps without convergence "
                    f"(classes {self.classes[0]} vs {self.classes[1]})"
                )
                return n_iter, False
            n_iter += 1
            num_changed = 0

            if examine_all:
                for i in range(n):
                    if self._examine_example(i):
                        num_changed += 1
            else:
                # Modification 1 (Keerthi et al.): только несвязанные α
                for i in range(n):
                    if self._I0.contains(i):
                        if self._examine_example(i):
                            num_changed += 1
                        # Оптимальность на несвязанных векторах достигнута?
                        if self._b_up > self._b_low - 2 * self.tol:
                            num_changed = 0
                            break

            if self.verbose:
                print(f"  Sweep {n_iter}: examine_all={examine_all}, changed={num_changed}, "
                      f"bLow={self._b_low:.6f}, bUp={self._b_up:.6f}")

            if examine_all:
                examine_all = False
            elif num_changed == 0:
                examine_all = True

        return n_iter, True

    def _evaluate_kernel(self, id1: int, id2: int, inst1: Optional[SparseRow]) -> float:
        if inst1 is None:
            inst1 = self._data.row(id1)
        return self.kernel.evaluate(inst1, self._data.row(id2), self._class_index, self._num_attributes)

    def _examine_example(self, i2: int) -> bool:
        """
        Проверяет KKT условия для i2 и при нарушении выбирает пару i1.

        Returns:
            True, если множители изменились
        """
        i1 = NONE
        y2 = self.y[i2]

        if self._I0.contains(i2):
            F2 = self._errors[i2]
        else:
            F2 = self.svm_output(i2, self._data.row(i2)) + self.b - y2
            self._errors[i2] = F2

            # Обновляем пороги
            if (self._I1.contains(i2) or self._I2.contains(i2)) and F2 < self._b_up:
                self._b_up = F2
                self._i_up = i2
            elif (self._I3.contains(i2) or self._I4.contains(i2)) and F2 > self._b_low:
                self._b_low = F2
                self._i_low = i2

        # Проверка оптимальности по текущим bLow и bUp
        optimal = True
        if self._I0.contains(i2) or self._I1.contains(i2) or self._I2.contains(i2):
            if self._b_low - F2 > 2 * self.tol:
                optimal = False
                i1 = self._i_low
        if self._I0.contains(i2) or self._I3.contains(i2) or self._I4.contains(i2):
            if F2 - self._b_up > 2 * self.tol:
                optimal = False
                i1 = self._i_up
        if optimal:
            return False

        # Для несвязанного i2 берём пару с большим нарушением
        if self._I0.contains(i2):
            if self._b_low - F2 > F2 - self._b_up:
                i1 = self._i_low
            else:
                i1 = self._i_up
        if i1 == NONE:
            raise SolverInvariantError(f"No partner index for violating example {i2}")
        return self._take_step(i1, i2, F2)

    def _take_step(self, i1: int, i2: int, F2: float) -> bool:
        """
        Аналитически оптимизирует пару (α_i1, α_i2).

        Returns:
            True, если удалось продвинуться
        """
        if i1 == i2:
            return False

        C = self.C
        alph1 = self.alpha[i1]
        alph2 = self.alpha[i2]
        y1 = self.y[i1]
        y2 = self.y[i2]
        F1 = self._errors[i1]
        s = y1 * y2

        L, H = compute_bounds(alph1, alph2, y1, y2, C)
        if L >= H:
            return False

        # Вторая производная целевой функции
        row1 = self._data.row(i1)
        row2 = self._data.row(i2)
        k11 = self.kernel_cache.get(i1, i1, row1)
        k12 = self.kernel_cache.get(i1, i2, row1)
        k22 = self.kernel_cache.get(i2, i2, row2)
        eta = 2 * k12 - k11 - k22

        if eta < 0:
            # Безусловный максимум, затем обрезка до [L, H]
            a2 = alph2 - y2 * (F1 - F2) / eta
            if a2 < L:
                a2 = L
            elif a2 > H:
                a2 = H
        else:
            # Смотрим значения на концах отрезка
            f1 = self.svm_output(i1, row1)
            f2 = self.svm_output(i2, row2)
            v1 = f1 + self.b - y1 * alph1 * k11 - y2 * alph2 * k12
            v2 = f2 + self.b - y1 * alph1 * k12 - y2 * alph2 * k22
            gamma = alph1 + s * alph2
            Lobj = endpoint_objective(L, gamma, s, y1, y2, k11, k12, k22, v1, v2)
            Hobj = endpoint_objective(H, gamma, s, y1, y2, k11, k12, k22, v1, v2)
            if Lobj > Hobj + self.eps:
                a2 = L
            elif Lobj < Hobj - self.eps:
                a2 = H
            else:
                a2 = alph2

        if abs(a2 - alph2) < self.eps * (a2 + alph2 + self.eps):
            return False

        a2 = snap_to_bounds(a2, C, DEL)
        a1 = alph1 + s * (alph2 - a2)
        a1 = snap_to_bounds(a1, C, DEL)

        self._update_sets(i1, y1, a1)
        self._update_sets(i2, y2, a2)

        if self.is_linear:
            add_to_weights(self.weights, row1[0], row1[1], y1 * (a1 - alph1), self._class_index)
            add_to_weights(self.weights, row2[0], row2[1], y2 * (a2 - alph2), self._class_index)

        # Обновляем кэш ошибок для I0
        j = self._I0.next(NONE)
        while j != NONE:
            if j != i1 and j != i2:
                self._errors[j] += (y1 * (a1 - alph1) * self.kernel_cache.get(i1, j, row1)
                                    + y2 * (a2 - alph2) * self.kernel_cache.get(i2, j, row2))
            j = self._I0.next(j)

        self._errors[i1] += y1 * (a1 - alph1) * k11 + y2 * (a2 - alph2) * k12
        self._errors[i2] += y1 * (a1 - alph1) * k12 + y2 * (a2 - alph2) * k22

        self.alpha[i1] = a1
        self.alpha[i2] = a2

        self._update_thresholds(i1, i2)
        return True

    def _update_sets(self, i: int, y: float, a: float) -> None:
        """Пересчитывает принадлежность i к SV и I0..I4 по (y, α)."""
        C = self.C
        for index_set, member in (
            (self.support_vectors, a > 0),
            (self._I0, 0 < a < C),
            (self._I1, y == 1 and a == 0),
            (self._I2, y == -1 and a == C),
            (self._I3, y == 1 and a == C),
            (self._I4, y == -1 and a == 0),
        ):
            if member:
                index_set.insert(i)
            else:
                index_set.delete(i)

    def _update_thresholds(self, i1: int, i2: int) -> None:
        """Пересчитывает bLow/bUp по I0, затем учитывает i1 и i2."""
        self._b_low = -np.finfo(np.float64).max
        self._b_up = np.finfo(np.float64).max
        self._i_low = NONE
        self._i_up = NONE

        errors = self._errors
        j = self._I0.next(NONE)
        while j != NONE:
            if errors[j] < self._b_up:
                self._b_up = errors[j]
                self._i_up = j
            if errors[j] > self._b_low:
                self._b_low = errors[j]
                self._i_low = j
            j = self._I0.next(j)

        for i in (i1, i2):
            if self._I0.contains(i):
                continue
            if self._I3.contains(i) or self._I4.contains(i):
                if errors[i] > self._b_low:
                    self._b_low = errors[i]
                    self._i_low = i
            elif errors[i] < self._b_up:
                self._b_up = errors[i]
                self._i_up = i

        if self._i_low == NONE or self._i_up == NONE:
            raise SolverInvariantError(f"Thresholds lost after step on ({i1}, {i2})")

    def _collapse_linear_machine(self) -> None:
        """Переводит w в разреженный вид и отбрасывает α, метки и данные."""
        nonzero = np.flatnonzero(self.weights != 0.0)
        self.sparse_indices = nonzero.astype(np.int64)
        self.sparse_weights = self.weights[nonzero].copy()
        self.weights = None
        self.alpha = None
        self.y = None
        self.support_vectors = None
        self._data = None
        self.kernel_cache = None

    # -------------------------------------------------------------------------
    # Предсказание
    # -------------------------------------------------------------------------

    def svm_output(self, index: int, inst: SparseRow) -> float:
        """
        Выход SVM для экземпляра.

        Args:
            index: Индекс в обучающих данных или -1 для нового экземпляра
            inst: Разреженная строка (indices, values)
        """
        if self.state is SolverState.DEGENERATE:
            return -self.b

        if self.is_linear:
            if self.sparse_weights is None:
                result = dense_sparse_dot(self.weights, inst[0], inst[1], self._class_index)
            else:
                result = sparse_dot_product(inst[0], inst[1], self.sparse_indices,
                                            self.sparse_weights, self._class_index)
        else:
            result = 0.0
            j = self.support_vectors.next(NONE)
            while j != NONE:
                result += self.y[j] * self.alpha[j] * self.kernel_cache.get(index, j, inst)
                j = self.support_vectors.next(j)
        return result - self.b

    def decision_function(self, inst: SparseRow) -> float:
        if self.state is SolverState.UNINITIALIZED:
            raise SolverInvariantError("BinarySMO: No model built yet.")
        return self.svm_output(NONE, inst)

    # -------------------------------------------------------------------------
    # Диагностика
    # -------------------------------------------------------------------------

    def kkt_violations(self, data: SparseData, alpha: np.ndarray, slack: float = 1e-6) -> Tuple[List[Tuple[int, int, float]], float]:
        """
        Проверяет KKT условия для обученной машины.

        Args:
            data: Обучающие данные пары классов
            alpha: Множители (например, SMOResult.alpha)
            slack: Допуск сравнения y·f(x) с 1

        Returns:
            (violations, sum_alpha_y), где violations - список
            (индекс, номер условия 1..3, y·f(x))
        """
        cl1, cl2 = self.classes
        violations = []
        sum_alpha_y = 0.0
        for i in range(data.num_instances):
            y = -1.0 if data.classes[i] == cl1 else 1.0
            sum_alpha_y += y * alpha[i]
            margin = y * self.decision_function(data.row(i))
            if alpha[i] == 0 and margin < 1 - slack:
                violations.append((i, 1, margin))
            elif 0 < alpha[i] < self.C and abs(margin - 1) > slack:
                violations.append((i, 2, margin))
            elif alpha[i] == self.C and margin > 1 + slack:
                violations.append((i, 3, margin))
        return violations, sum_alpha_y

    def describe(self) -> str:
        """Текстовое описание машины (веса или опорные векторы)."""
        if self.state is SolverState.UNINITIALIZED:
            return "BinarySMO: No model built yet."

        lines = ["BinarySMO", ""]
        printed = 0
        if self.is_linear:
            lines.append("Machine linear: showing attribute weights, not support vectors.")
            lines.append("")
            for weight, index in zip(self.sparse_weights, self.sparse_indices):
                if index == self._class_index:
                    continue
                prefix = " + " if printed > 0 else "   "
                lines.append(f"{prefix}{weight} * {self.attribute_names[index]}")
                printed += 1
        elif self.state is not SolverState.DEGENERATE:
            for i in range(self.alpha.shape[0]):
                if self.support_vectors.contains(i):
                    prefix = " + " if printed > 0 else "   "
                    lines.append(f"{prefix}{int(self.y[i])} * {self.alpha[i]} * K[X({i}) * X]")
                    printed += 1
        lines.append(f" - {self.b}")

        if not self.is_linear:
            n_sv = self.support_vectors.size() if self.support_vectors is not None else 0
            lines.append("")
            lines.append(f"Number of support vectors: {n_sv}")
        lines.append("")
        lines.append(f"Number of kernel evaluations: {self.n_kernel_evals}")
        return "\n".join(lines)

    def __str__(self) -> str:
        return self.describe()


def train_binary_smo(
    X: np.ndarray,
    y: np.ndarray,
    C: float = DEFAULT_C,
    tol: float = DEFAULT_TOL,
    eps: float = DEFAULT_EPS,
    cache_size: int = DEFAULT_CACHE_SIZE,
    max_iter: Optional[int] = None,
    feature_names: Optional[Sequence[str]] = None,
    verbose: bool = False
) -> Tuple[np.ndarray, float, np.ndarray]:
    """
    Обучает линейную SVM на плотных данных и возвращает вектор весов.

    Решающая функция: f(x) = X @ w - b.

    Args:
        X: Матрица признаков (n_samples, n_features)
        y: Метки классов (n_samples,), значения {0, 1} или {-1, +1}

    Returns:
        w: Вектор весов (n_features,)
        b: Смещение (скаляр)
        alpha: Множители Лагранжа (n_samples,)
    """
    X = np.asarray(X, dtype=np.float64)
    classes = np.where(np.asarray(y) > 0, 1, 0)
    data = SparseData.from_dense(X, classes, feature_names)

    solver = BinarySMO(PolyKernel(), C=C, cache_size=cache_size, tol=tol, eps=eps,
                       max_iter=max_iter, verbose=verbose)
    result = solver.fit(data, 0, 1)

    w = np.zeros(X.shape[1], dtype=np.float64)
    w[solver.sparse_indices] = solver.sparse_weights
    return w, solver.b, result.alpha
