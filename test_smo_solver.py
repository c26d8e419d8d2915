"""
Тесты бинарного SMO солвера.

Проверяет:
1. Корректность решения на разделимых данных
2. Ограничения 0 <= α <= C и разбиение на I0..I4 после каждого шага
3. KKT условия после сходимости и прижатие α к границам
4. Совпадение линейной машины с двойственной формой
5. Полная матрица vs кэш с корзинами
6. Вырожденную пару и ограничение числа проходов
7. Сравнение с sklearn SVC
"""

import time
import warnings

import numpy as np
from sklearn.datasets import make_classification
from sklearn.metrics import accuracy_score
from sklearn.svm import SVC

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from smo_svm.dataset import SparseData
from smo_svm.exceptions import SMOConfigurationError, SolverInvariantError
from smo_svm.kernels import PolyKernel, RBFKernel
from smo_svm.smo_solver import DEL, BinarySMO, SolverState, train_binary_smo


# =============================================================================
# Вспомогательные функции
# =============================================================================

def create_perfect_separable_data(n_samples=100, margin=2.0, seed=42):
    """Создаёт идеально разделимые данные; метки 0/1."""
    np.random.seed(seed)
    n_half = n_samples // 2

    # Класс 1: x[0] > margin/2, класс 0: x[0] < -margin/2
    X_pos = np.column_stack([
        np.random.uniform(margin/2 + 0.1, margin/2 + 2, n_half),
        np.random.randn(n_half)
    ])
    X_neg = np.column_stack([
        np.random.uniform(-margin/2 - 2, -margin/2 - 0.1, n_half),
        np.random.randn(n_half)
    ])

    X = np.vstack([X_pos, X_neg])
    y = np.array([1] * n_half + [0] * n_half)

    idx = np.random.permutation(len(y))
    return X[idx], y[idx]


def create_overlapping_data(n_samples=120, seed=0):
    X, y = make_classification(
        n_samples=n_samples, n_features=5, n_informative=3, n_redundant=0,
        flip_y=0.1, class_sep=0.8, random_state=seed
    )
    return X, y


def check_partition(solver):
    """Каждый индекс ровно в одном из I0..I4, согласно (y_i, α_i)."""
    C = solver.C
    sets = (solver._I0, solver._I1, solver._I2, solver._I3, solver._I4)
    for i in range(solver.alpha.shape[0]):
        a = solver.alpha[i]
        y = solver.y[i]
        assert 0.0 <= a <= C, f"alpha[{i}] = {a} outside [0, {C}]"

        membership = [s.contains(i) for s in sets]
        assert sum(membership) == 1, f"index {i} in sets {membership}"
        expected = [
            0 < a < C,
            y == 1 and a == 0,
            y == -1 and a == C,
            y == 1 and a == C,
            y == -1 and a == 0,
        ]
        assert membership == expected, f"index {i}: sets {membership}, expected {expected}"
        assert solver.support_vectors.contains(i) == (a > 0)


class CheckedSMO(BinarySMO):
    """BinarySMO, проверяющий инварианты после каждого шага."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.n_steps = 0

    def _take_step(self, i1, i2, F2):
        changed = super()._take_step(i1, i2, F2)
        check_partition(self)
        if changed:
            self.n_steps += 1
        return changed


# =============================================================================
# Основные тесты
# =============================================================================

def test_toy_2d_separable():
    """Класс 0 около (0,0), класс 1 около (5,5): нулевая ошибка на обучении."""
    print("\n" + "="*60)
    print("Test: Toy 2D separable problem")
    print("="*60)

    rng = np.random.RandomState(3)
    X = np.vstack([rng.randn(20, 2) * 0.5, rng.randn(20, 2) * 0.5 + 5.0])
    y = np.array([0] * 20 + [1] * 20)

    w, b, alpha = train_binary_smo(X, y, C=1.0, verbose=True)

    print(f"  w = {w}")
    print(f"  b = {b:.6f}")
    print(f"  Support vectors: {np.sum(alpha > 0)}")

    decision = X @ w - b
    assert np.all(decision[y == 1] > 0)
    assert np.all(decision[y == 0] < 0)
    assert w[0] > 0 and w[1] > 0, "w should point from (0,0) towards (5,5)"
    assert np.all(alpha >= 0) and np.all(alpha <= 1.0)

    print("\n[PASS] Toy 2D test passed!")


def test_invariants_hold_after_every_step():
    print("\n" + "="*60)
    print("Test: Box and partition invariants")
    print("="*60)

    X, y = create_overlapping_data()
    data = SparseData.from_dense(X, y)

    for kernel, C in ((PolyKernel(), 0.5), (PolyKernel(exponent=2.0), 2.0), (RBFKernel(gamma=0.2), 1.0)):
        solver = CheckedSMO(kernel, C=C, cache_size=97)
        result = solver.fit(data, 0, 1)
        print(f"  {kernel.describe()}: {solver.n_steps} steps, {result.n_support_vectors} SV, "
              f"{result.n_iterations} sweeps")
        assert solver.n_steps > 0
        assert result.converged
        assert solver.state is SolverState.CONVERGED
        assert np.all(result.alpha >= 0) and np.all(result.alpha <= C)
        assert result.n_support_vectors == np.sum(result.alpha > 0)

    print("\n[PASS] Invariant test passed!")


def test_kkt_conditions():
    print("\n" + "="*60)
    print("Test: KKT conditions after convergence")
    print("="*60)

    X, y = create_overlapping_data(seed=5)
    data = SparseData.from_dense(X, y)
    tol = 1e-3

    for kernel in (PolyKernel(), PolyKernel(exponent=2.0, use_lower_order=True), RBFKernel(gamma=0.5)):
        solver = BinarySMO(kernel, C=1.0, tol=tol)
        result = solver.fit(data, 0, 1)
        violations, sum_alpha_y = solver.kkt_violations(data, result.alpha, slack=10 * tol)
        print(f"  {kernel.describe()}: {len(violations)} violations, sum(alpha*y) = {sum_alpha_y:.2e}")
        assert result.converged
        assert solver.state is SolverState.CONVERGED
        assert violations == [], f"KKT violations: {violations[:5]}"
        assert abs(sum_alpha_y) < 1e-8

    print("\n[PASS] KKT test passed!")


def test_alphas_snapped_to_bounds():
    """После обучения ни одно α не остаётся в пределах DEL·C от 0 или C."""
    print("\n" + "="*60)
    print("Test: Alphas snapped to bounds")
    print("="*60)

    C = 1.0
    for seed in (0, 5, 11):
        X, y = create_overlapping_data(seed=seed)
        data = SparseData.from_dense(X, y)
        for kernel in (PolyKernel(), PolyKernel(exponent=2.0, use_lower_order=True), RBFKernel(gamma=0.5)):
            solver = BinarySMO(kernel, C=C)
            alpha = solver.fit(data, 0, 1).alpha

            near_top = (alpha > C * (1 - DEL)) & (alpha < C)
            near_bottom = (alpha > 0) & (alpha < C * DEL)
            print(f"  seed={seed}, {kernel.describe()}: "
                  f"{np.sum(alpha == C)} at C, {np.sum((alpha > 0) & (alpha < C))} inside")
            assert not np.any(near_top), f"alphas just below C: {alpha[near_top]}"
            assert not np.any(near_bottom), f"alphas just above 0: {alpha[near_bottom]}"
            assert np.all((alpha >= 0) & (alpha <= C))

    print("\n[PASS] Snap test passed!")


def test_linear_weights_match_dual_form():
    """Решающая функция через w совпадает с суммой по опорным векторам."""
    X, y = create_overlapping_data(seed=11)
    X_test = np.random.RandomState(12).randn(30, X.shape[1])
    data = SparseData.from_dense(X, y)
    test_data = SparseData.from_dense(X_test, np.zeros(30, dtype=int))

    solver = BinarySMO(PolyKernel(), C=1.0)
    result = solver.fit(data, 0, 1)
    assert solver.alpha is None, "linear machine should drop alpha"
    assert solver.kernel_cache is None

    labels = np.where(y == 1, 1.0, -1.0)
    dual = (X_test @ X.T) @ (labels * result.alpha) - solver.b
    primal = np.array([solver.decision_function(test_data.row(i)) for i in range(30)])
    assert np.allclose(primal, dual, atol=1e-8), f"max diff {np.max(np.abs(primal - dual))}"

    w = np.zeros(data.num_attributes)
    w[solver.sparse_indices] = solver.sparse_weights
    assert np.allclose(w[:-1], X.T @ (labels * result.alpha), atol=1e-8)
    assert w[-1] == 0.0, "class attribute must not get a weight"
    assert np.all(solver.sparse_weights != 0.0)


def test_full_matrix_matches_bounded_cache():
    print("\n" + "="*60)
    print("Test: Full matrix vs bounded cache")
    print("="*60)

    X, y = create_overlapping_data(n_samples=80, seed=2)
    data = SparseData.from_dense(X, y)

    for kernel in (PolyKernel(), PolyKernel(exponent=2.0), RBFKernel(gamma=0.1)):
        full = BinarySMO(kernel, cache_size=0)
        bounded = BinarySMO(kernel, cache_size=1000003)
        r_full = full.fit(data, 0, 1)
        r_bounded = bounded.fit(data, 0, 1)

        assert np.array_equal(r_full.alpha, r_bounded.alpha), kernel.describe()
        assert r_full.b == r_bounded.b
        assert r_full.n_iterations == r_bounded.n_iterations
        if kernel.is_linear:
            assert np.array_equal(full.sparse_weights, bounded.sparse_weights)
        print(f"  {kernel.describe()}: full evals={r_full.n_kernel_evals}, "
              f"bounded evals={r_bounded.n_kernel_evals}, hits={r_bounded.n_cache_hits}")

    print("\n[PASS] Cache mode equivalence test passed!")


def test_degenerate_pair():
    X = np.random.RandomState(0).randn(10, 3)
    data = SparseData.from_dense(X, np.zeros(10, dtype=int))

    for kernel in (PolyKernel(), PolyKernel(exponent=2.0)):
        # Присутствует только класс -1
        solver = BinarySMO(kernel)
        result = solver.fit(data, 0, 1)
        assert solver.state is SolverState.DEGENERATE
        assert result.converged and result.n_support_vectors == 0
        assert all(solver.decision_function(data.row(i)) < 0 for i in range(10))
        assert "BinarySMO" in solver.describe()

    # Присутствует только класс +1
    solver = BinarySMO(PolyKernel())
    solver.fit(data, 5, 0)
    assert all(solver.decision_function(data.row(i)) > 0 for i in range(10))

    # Пустое подмножество
    solver = BinarySMO(PolyKernel(exponent=2.0))
    solver.fit(data.subset([]), 0, 1)
    assert solver.decision_function(data.row(0)) < 0


def test_max_iter_stops_with_warning():
    X, y = create_overlapping_data()
    data = SparseData.from_dense(X, y)
    solver = BinarySMO(PolyKernel(exponent=2.0), max_iter=1)

    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        result = solver.fit(data, 0, 1)

    assert not result.converged
    assert result.n_iterations == 1
    assert solver.state is SolverState.STOPPED
    assert any("without convergence" in str(w.message) for w in caught)
    # Машина после остановки пригодна для предсказания
    assert np.isfinite(solver.decision_function(data.row(0)))


def test_solver_validation():
    try:
        BinarySMO(PolyKernel(), C=0.0)
        assert False, "Should reject C <= 0"
    except SMOConfigurationError as e:
        print(f"  Correctly rejected C=0: {e}")

    try:
        BinarySMO(PolyKernel(), tol=-1.0)
        assert False, "Should reject tol <= 0"
    except ValueError as e:
        print(f"  Correctly rejected tol=-1: {e}")

    X = np.random.RandomState(0).randn(6, 2)
    data = SparseData.from_dense(X, [0, 1, 2, 0, 1, 2])
    try:
        BinarySMO(PolyKernel()).fit(data, 0, 1)
        assert False, "Should reject instances outside the class pair"
    except SolverInvariantError as e:
        print(f"  Correctly rejected foreign class: {e}")

    solver = BinarySMO(PolyKernel())
    assert solver.describe() == "BinarySMO: No model built yet."
    try:
        solver.decision_function(data.row(0))
        assert False, "Should not predict before fit"
    except SolverInvariantError:
        pass


def test_describe_output():
    X, y = create_perfect_separable_data(n_samples=40)
    data = SparseData.from_dense(X, y, feature_names=["left", "right"])

    linear = BinarySMO(PolyKernel())
    linear.fit(data, 0, 1)
    text = str(linear)
    print(text)
    assert "Machine linear: showing attribute weights, not support vectors." in text
    assert "* left" in text
    assert "Number of kernel evaluations:" in text
    assert "Number of support vectors" not in text

    poly = BinarySMO(PolyKernel(exponent=2.0))
    result = poly.fit(data, 0, 1)
    text = str(poly)
    assert "K[X(" in text
    assert f"Number of support vectors: {result.n_support_vectors}" in text
    assert text.count("K[X(") == result.n_support_vectors


def test_comparison_with_sklearn():
    print("\n" + "="*60)
    print("Test: Comparison with sklearn SVC")
    print("="*60)

    X, y = create_perfect_separable_data(n_samples=200, margin=1.0, seed=7)

    start = time.time()
    w, b, alpha = train_binary_smo(X, y, C=1.0)
    smo_time = time.time() - start
    y_smo = (X @ w - b > 0).astype(int)

    start = time.time()
    svc = SVC(kernel="linear", C=1.0, tol=1e-3)
    svc.fit(X, y)
    svc_time = time.time() - start
    y_svc = svc.predict(X)

    acc_smo = accuracy_score(y, y_smo)
    acc_svc = accuracy_score(y, y_svc)
    agreement = np.mean(y_smo == y_svc)

    print(f"  SMO: accuracy={acc_smo:.4f}, time={smo_time:.3f}s, SV={np.sum(alpha > 0)}")
    print(f"  SVC: accuracy={acc_svc:.4f}, time={svc_time:.3f}s, SV={len(svc.support_)}")
    print(f"  Agreement: {agreement:.4f}")

    assert acc_smo >= 0.98
    assert agreement >= 0.97

    # Решение той же задачи: w близок к w_svc, b соответствует -intercept
    w_svc = svc.coef_[0]
    cos = np.dot(w, w_svc) / (np.linalg.norm(w) * np.linalg.norm(w_svc))
    print(f"  cos(w, w_svc) = {cos:.6f}")
    assert cos > 0.99

    print("\n[PASS] sklearn comparison test passed!")


if __name__ == "__main__":
    test_toy_2d_separable()
    test_invariants_hold_after_every_step()
    test_kkt_conditions()
    test_alphas_snapped_to_bounds()
    test_linear_weights_match_dual_form()
    test_full_matrix_matches_bounded_cache()
    test_degenerate_pair()
    test_max_iter_stops_with_warning()
    test_solver_validation()
    test_describe_output()
    test_comparison_with_sklearn()
