"""
Сравнение SMOClassifier со sklearn SVC на встроенных наборах данных sklearn.

Для каждого набора и ядра: 5-fold кросс-валидация, точность и время обучения.
Признаки для SVC масштабируются в [0, 1], как это делает фильтр SMO.
"""

import os
import sys
import time

import numpy as np
from sklearn.datasets import load_breast_cancer, load_digits, load_iris, load_wine
from sklearn.metrics import accuracy_score
from sklearn.model_selection import StratifiedKFold
from sklearn.preprocessing import MinMaxScaler
from sklearn.svm import SVC
from tqdm.auto import tqdm

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))
from smo_svm import SMOClassifier

# --- КОНФИГУРАЦИЯ ---
CONFIG = {
    "datasets": ["iris", "wine", "breast_cancer", "digits"],
    "n_splits": 5,
    "random_state": 42,

    # Параметры SMO (те же для SVC)
    "C": 1.0,
    "tol": 1e-3,
    # cache_size: 0 - полная матрица ядра
    "cache_size": 1000003,
    "kernels": [
        {"name": "linear", "smo": {"exponent": 1.0}, "svc": {"kernel": "linear"}},
        {"name": "poly2", "smo": {"exponent": 2.0}, "svc": {"kernel": "poly", "degree": 2, "gamma": 1.0, "coef0": 0.0}},
        {"name": "rbf", "smo": {"kernel": "rbf", "gamma": 0.5}, "svc": {"kernel": "rbf", "gamma": 0.5}},
    ],
}

LOADERS = {
    "iris": load_iris,
    "wine": load_wine,
    "breast_cancer": load_breast_cancer,
    "digits": load_digits,
}


def run_fold(X_train, y_train, X_test, y_test, kernel_config):
    """Обучает SMO и SVC на одном фолде, возвращает (acc, time) для каждого."""
    start = time.time()
    smo = SMOClassifier(C=CONFIG["C"], tol=CONFIG["tol"], cache_size=CONFIG["cache_size"],
                        **kernel_config["smo"])
    smo.fit(X_train, y_train)
    smo_time = time.time() - start
    smo_acc = accuracy_score(y_test, smo.predict(X_test))

    scaler = MinMaxScaler().fit(X_train)
    start = time.time()
    svc = SVC(C=CONFIG["C"], tol=CONFIG["tol"], **kernel_config["svc"])
    svc.fit(scaler.transform(X_train), y_train)
    svc_time = time.time() - start
    svc_acc = accuracy_score(y_test, svc.predict(scaler.transform(X_test)))

    return smo_acc, smo_time, svc_acc, svc_time


def main():
    print("SMO vs sklearn SVC")
    print(f"  C = {CONFIG['C']}, tol = {CONFIG['tol']}, cache_size = {CONFIG['cache_size']}")

    rows = []
    for name in CONFIG["datasets"]:
        X, y = LOADERS[name](return_X_y=True)
        folds = list(StratifiedKFold(
            n_splits=CONFIG["n_splits"], shuffle=True, random_state=CONFIG["random_state"]
        ).split(X, y))

        for kernel_config in CONFIG["kernels"]:
            scores = []
            for train_idx, test_idx in tqdm(folds, desc=f"{name}/{kernel_config['name']}"):
                scores.append(run_fold(X[train_idx], y[train_idx], X[test_idx], y[test_idx], kernel_config))
            scores = np.array(scores)
            rows.append((name, kernel_config["name"], *scores.mean(axis=0)))

    print("\n" + "=" * 78)
    print(f"{'dataset':<15}{'kernel':<10}{'SMO acc':>10}{'SMO time':>12}{'SVC acc':>10}{'SVC time':>12}")
    print("=" * 78)
    for name, kernel, smo_acc, smo_time, svc_acc, svc_time in rows:
        print(f"{name:<15}{kernel:<10}{smo_acc:>10.4f}{smo_time:>11.3f}s{svc_acc:>10.4f}{svc_time:>11.3f}s")


if __name__ == "__main__":
    main()
