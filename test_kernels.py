"""
Тесты ядер: скалярное произведение, симметрия, проверка опций.
"""

import math

import numpy as np
from scipy import sparse

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from smo_svm.exceptions import SMOConfigurationError
from smo_svm.kernels import PolyKernel, RBFKernel, make_kernel, sparse_dot_product


def random_rows(n=20, m=8, density=0.5, seed=0):
    """Разреженные строки (indices, values); последний столбец - класс."""
    rng = np.random.RandomState(seed)
    dense = rng.rand(n, m) * (rng.rand(n, m) < density)
    dense[:, -1] = rng.randint(0, 3, n)
    rows = sparse.csr_matrix(dense)
    rows.sort_indices()
    views = [(rows.indices[rows.indptr[i]:rows.indptr[i + 1]],
              rows.data[rows.indptr[i]:rows.indptr[i + 1]]) for i in range(n)]
    return dense, views


def test_sparse_dot_skips_class_attribute():
    print("\n" + "="*60)
    print("Test: Sparse dot product")
    print("="*60)

    dense, rows = random_rows()
    class_index = dense.shape[1] - 1
    for i in range(len(rows)):
        for j in range(len(rows)):
            expected = float(np.dot(dense[i, :-1], dense[j, :-1]))
            got = sparse_dot_product(rows[i][0], rows[i][1], rows[j][0], rows[j][1], class_index)
            assert abs(got - expected) < 1e-12, f"({i},{j}): {got} != {expected}"

    print("\n[PASS] Sparse dot product test passed!")


def test_kernels_symmetric_bitwise():
    dense, rows = random_rows(n=15, m=10, seed=3)
    m = dense.shape[1]
    kernels = [
        PolyKernel(),
        PolyKernel(exponent=2.0),
        PolyKernel(exponent=3.0, use_lower_order=True, rescale=True),
        RBFKernel(gamma=0.5),
    ]
    for kernel in kernels:
        for i in range(len(rows)):
            for j in range(len(rows)):
                kij = kernel.evaluate(rows[i], rows[j], m - 1, m)
                kji = kernel.evaluate(rows[j], rows[i], m - 1, m)
                assert kij == kji, f"{kernel.describe()}: K({i},{j})={kij} != K({j},{i})={kji}"


def test_poly_kernel_values():
    x1 = (np.array([0, 1, 3]), np.array([1.0, 2.0, 1.0]))
    x2 = (np.array([1, 2, 3]), np.array([3.0, 4.0, 0.0]))
    # Класс в столбце 3, атрибутов 4
    assert PolyKernel().evaluate(x1, x2, 3, 4) == 6.0
    assert PolyKernel(exponent=2.0).evaluate(x1, x2, 3, 4) == 36.0
    assert PolyKernel(exponent=2.0, use_lower_order=True).evaluate(x1, x2, 3, 4) == 49.0
    rescaled = PolyKernel(exponent=2.0, rescale=True).evaluate(x1, x2, 3, 4)
    assert abs(rescaled - 4.0) < 1e-12


def test_rbf_kernel_values():
    x1 = (np.array([0, 1]), np.array([1.0, 0.0]))
    x2 = (np.array([0, 1]), np.array([0.0, 1.0]))
    kernel = RBFKernel(gamma=0.5)
    assert abs(kernel.evaluate(x1, x2, 5, 6) - math.exp(-1.0)) < 1e-15
    assert kernel.evaluate(x1, x1, 5, 6) == 1.0
    assert "RBF kernel" in kernel.describe()


def test_kernel_option_validation():
    print("\n" + "="*60)
    print("Test: Kernel option validation")
    print("="*60)

    try:
        PolyKernel(exponent=1.0, rescale=True)
        assert False, "Should reject rescale with linear machine"
    except SMOConfigurationError as e:
        print(f"  Correctly rejected rescale: {e}")

    try:
        PolyKernel(exponent=1.0, use_lower_order=True)
        assert False, "Should reject lower-order terms with linear machine"
    except SMOConfigurationError as e:
        print(f"  Correctly rejected lower-order: {e}")

    try:
        RBFKernel(gamma=0.0)
        assert False, "Should reject gamma <= 0"
    except ValueError as e:
        print(f"  Correctly rejected gamma=0: {e}")

    try:
        make_kernel("sigmoid")
        assert False, "Should reject unknown kernel"
    except SMOConfigurationError as e:
        print(f"  Correctly rejected unknown kernel: {e}")

    try:
        make_kernel("rbf", exponent=2.0)
        assert False, "Should reject foreign kernel parameter"
    except SMOConfigurationError as e:
        print(f"  Correctly rejected bad parameter: {e}")

    assert make_kernel("poly", exponent=2.0).exponent == 2.0
    assert PolyKernel().is_linear
    assert not PolyKernel(exponent=2.0).is_linear
    assert not RBFKernel().is_linear

    print("\n[PASS] Kernel option validation test passed!")


if __name__ == "__main__":
    test_sparse_dot_skips_class_attribute()
    test_kernels_symmetric_bitwise()
    test_poly_kernel_values()
    test_rbf_kernel_values()
    test_kernel_option_validation()
