"""
Простейшая демонстрация SMO: бинарная и многоклассовая задачи.
Показывает, как обучить модель и посмотреть на результат.
"""

import os
import sys

import numpy as np

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from smo_svm import SMOClassifier, train_binary_smo


def main():
    # Генерация простых данных
    np.random.seed(42)
    X = np.random.randn(100, 20)  # 100 образцов, 20 признаков
    y = np.where(X[:, 0] + 0.5 * X[:, 1] + 0.3 * np.random.randn(100) > 0, 1, 0)

    print("Simple SMO Test")
    print("=" * 30)
    print(f"Data shape: {X.shape}")
    print(f"Labels: {np.sum(y > 0)} positive, {np.sum(y == 0)} negative")

    # Бинарная линейная машина на сырых признаках
    print("\nTraining binary linear SMO...")
    w, b, alpha = train_binary_smo(X, y, C=1.0, verbose=True)
    y_pred = (X @ w - b > 0).astype(int)

    print(f"\nAccuracy: {np.mean(y_pred == y):.4f}")
    print(f"Support vectors: {np.sum(alpha > 0)}/{len(y)}")
    print(f"Weight vector norm: {np.linalg.norm(w):.4f}")
    print(f"Bias: {b:.4f}")

    # Три класса, полиномиальное ядро
    centers = np.array([[0.0, 0.0], [3.0, 0.0], [0.0, 3.0]])
    labels = np.repeat(["left", "right", "top"], 30)
    X3 = np.repeat(centers, 30, axis=0) + 0.7 * np.random.randn(90, 2)

    print("\nTraining 3-class SMO (exponent=2)...")
    model = SMOClassifier(C=1.0, exponent=2.0, verbose=True)
    model.fit(X3, labels)

    accuracy = np.mean(model.predict(X3) == labels)
    print(f"\nAccuracy: {accuracy:.4f}")
    for pair, result in model.results_.items():
        print(f"  Pair {pair}: {result.n_support_vectors} SV, {result.n_iterations} sweeps, "
              f"{result.n_kernel_evals} kernel evals, {result.n_cache_hits} cache hits")

    print()
    print(model)

    print("=" * 30)
    print("Test completed successfully!")
    print("\nUsage in your code:")
    print("  from smo_svm import SMOClassifier")
    print("  model = SMOClassifier(C=1.0, exponent=1.0)")
    print("  model.fit(X_train, y_train)")
    print("  predictions = model.predict(X_test)")


if __name__ == "__main__":
    main()
