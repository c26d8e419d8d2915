"""
Многоклассовый SMO по схеме "один против одного".

Для k классов обучается k(k-1)/2 бинарных машин BinarySMO, по одной на
пару (a, b), a < b: класс a получает метку -1, класс b - метку +1.
Предсказание - голосование: выход > 0 даёт голос классу b, иначе классу a;
побеждает класс с наибольшим числом голосов (при равенстве - меньший индекс).

Перед обучением данные проходят фильтры DataPreprocessor (пропуски,
нормализация, номинальные -> бинарные), те же фильтры применяются
к каждому экземпляру при предсказании.
"""

from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
from sklearn.exceptions import NotFittedError
from tqdm.auto import tqdm

from .dataset import Dataset
from .exceptions import DatasetContractError, SMOConfigurationError
from .filters import DataPreprocessor
from .kernels import PolyKernel, make_kernel
from .smo_solver import (
    DEFAULT_C,
    DEFAULT_CACHE_SIZE,
    DEFAULT_EPS,
    DEFAULT_TOL,
    BinarySMO,
    SMOResult,
)

DEFAULT_EXPONENT = 1.0
DEFAULT_GAMMA = 0.01

# Опции строкового вида: флаг -> (параметр, тип значения; None - булев флаг)
OPTION_FLAGS = {
    "-C": ("C", float),
    "-E": ("exponent", float),
    "-N": ("normalize", None),
    "-L": ("rescale", None),
    "-O": ("lower_order", None),
    "-A": ("cache_size", int),
    "-T": ("tol", float),
    "-P": ("eps", float),
    "-K": ("kernel", str),
    "-G": ("gamma", float),
    "-I": ("max_iter", int),
}


class SMOClassifier:
    """
    SVM-классификатор, обучаемый SMO, для произвольного числа классов.

    Args:
        C: Верхняя граница множителей Лагранжа
        exponent: Показатель полиномиального ядра (1.0 - линейная машина)
        normalize: Нормализовать числовые атрибуты в [0, 1]
        rescale: Делить скалярное произведение на (число атрибутов - 1)
        lower_order: Добавлять 1 к скалярному произведению
        cache_size: Размер кэша ядра (0 - полная матрица)
        tol: Допуск для KKT условий
        eps: Допуск округления
        kernel: "poly" или "rbf"
        gamma: Параметр RBF ядра
        max_iter: Максимум проходов SMO на пару классов (None - без ограничения)
        verbose: Выводить информацию о процессе обучения
    """

    def __init__(
        self,
        C: float = DEFAULT_C,
        exponent: float = DEFAULT_EXPONENT,
        normalize: bool = True,
        rescale: bool = False,
        lower_order: bool = False,
        cache_size: int = DEFAULT_CACHE_SIZE,
        tol: float = DEFAULT_TOL,
        eps: float = DEFAULT_EPS,
        kernel: str = "poly",
        gamma: float = DEFAULT_GAMMA,
        max_iter: Optional[int] = None,
        verbose: bool = False
    ):
        self.C = C
        self.exponent = exponent
        self.normalize = normalize
        self.rescale = rescale
        self.lower_order = lower_order
        self.cache_size = cache_size
        self.tol = tol
        self.eps = eps
        self.kernel = kernel
        self.gamma = gamma
        self.max_iter = max_iter
        self.verbose = verbose

        self._validate(self.get_params())
        self._reset_model()

    def _reset_model(self) -> None:
        self.preprocessor_: Optional[DataPreprocessor] = None
        self.classifiers_: Optional[Dict[Tuple[int, int], BinarySMO]] = None
        self.results_: Optional[Dict[Tuple[int, int], SMOResult]] = None
        self.class_attribute_ = None
        self.labels_: Optional[np.ndarray] = None

    # -------------------------------------------------------------------------
    # Конфигурация
    # -------------------------------------------------------------------------

    @staticmethod
    def _build_kernel(params: dict):
        if params["kernel"] == PolyKernel.name:
            return make_kernel(
                "poly",
                exponent=params["exponent"],
                use_lower_order=params["lower_order"],
                rescale=params["rescale"]
            )
        return make_kernel(params["kernel"], gamma=params["gamma"])

    @classmethod
    def _validate(cls, params: dict) -> None:
        """Проверяет набор параметров целиком; ядро создаётся для проверки его опций."""
        if not params["C"] > 0:
            raise SMOConfigurationError(f"C должно быть > 0, получено {params['C']}")
        if params["cache_size"] < 0:
            raise SMOConfigurationError(f"cache_size должно быть >= 0, получено {params['cache_size']}")
        if not params["tol"] > 0:
            raise SMOConfigurationError(f"tol должно быть > 0, получено {params['tol']}")
        if params["eps"] < 0:
            raise SMOConfigurationError(f"eps должно быть >= 0, получено {params['eps']}")
        if params["max_iter"] is not None and params["max_iter"] < 1:
            raise SMOConfigurationError(f"max_iter должно быть >= 1, получено {params['max_iter']}")
        if params["kernel"] != PolyKernel.name:
            poly_only = [name for name, active in (
                ("exponent", params["exponent"] != DEFAULT_EXPONENT),
                ("lower_order", params["lower_order"]),
                ("rescale", params["rescale"]),
            ) if active]
            if poly_only:
                raise SMOConfigurationError(
                    f"Опции {', '.join(poly_only)} применимы только к ядру poly, "
                    f"выбрано ядро '{params['kernel']}'"
                )
        cls._build_kernel(params)

    def get_params(self) -> dict:
        """Возвращает параметры модели"""
        return {
            "C": self.C,
            "exponent": self.exponent,
            "normalize": self.normalize,
            "rescale": self.rescale,
            "lower_order": self.lower_order,
            "cache_size": self.cache_size,
            "tol": self.tol,
            "eps": self.eps,
            "kernel": self.kernel,
            "gamma": self.gamma,
            "max_iter": self.max_iter,
            "verbose": self.verbose,
        }

    def set_options(self, options: Sequence[str]) -> None:
        """
        Задаёт параметры в строковом виде, например ["-C", "2", "-E", "2", "-O"].

        Отсутствующие опции возвращаются к значениям по умолчанию, флаг -N
        отключает нормализацию. Параметры меняются только если весь набор корректен.
        """
        params = {
            "C": DEFAULT_C,
            "exponent": DEFAULT_EXPONENT,
            "normalize": True,
            "rescale": False,
            "lower_order": False,
            "cache_size": DEFAULT_CACHE_SIZE,
            "tol": DEFAULT_TOL,
            "eps": DEFAULT_EPS,
            "kernel": "poly",
            "gamma": DEFAULT_GAMMA,
            "max_iter": None,
            "verbose": self.verbose,
        }

        options = [opt for opt in options if opt != ""]
        pos = 0
        while pos < len(options):
            flag = options[pos]
            if flag not in OPTION_FLAGS:
                raise SMOConfigurationError(f"Неизвестная опция: {flag}")
            name, value_type = OPTION_FLAGS[flag]
            if value_type is None:
                params[name] = flag != "-N"
                pos += 1
                continue
            if pos + 1 >= len(options):
                raise SMOConfigurationError(f"Нет значения для опции {flag}")
            try:
                params[name] = value_type(options[pos + 1])
            except ValueError as e:
                raise SMOConfigurationError(f"Некорректное значение для {flag}: {options[pos + 1]}") from e
            pos += 2

        self._validate(params)
        for name, value in params.items():
            setattr(self, name, value)

    def get_options(self) -> List[str]:
        """Текущие параметры в виде, пригодном для set_options."""
        options = [
            "-C", str(self.C),
            "-E", str(self.exponent),
            "-A", str(self.cache_size),
            "-T", str(self.tol),
            "-P", str(self.eps),
            "-K", self.kernel,
            "-G", str(self.gamma),
        ]
        if self.max_iter is not None:
            options.extend(["-I", str(self.max_iter)])
        if not self.normalize:
            options.append("-N")
        if self.rescale:
            options.append("-L")
        if self.lower_order:
            options.append("-O")
        return options

    # -------------------------------------------------------------------------
    # Обучение
    # -------------------------------------------------------------------------

    def fit(self, X, y=None) -> "SMOClassifier":
        """
        Обучает все попарные машины.

        Args:
            X: Dataset или матрица признаков (n_samples, n_features)
            y: Метки классов (если X - матрица); None/NaN - класс неизвестен

        Returns:
            self
        """
        params = self.get_params()
        self._validate(params)

        if isinstance(X, Dataset):
            dataset = X
        else:
            if y is None:
                raise DatasetContractError("Class attribute not set!")
            dataset = Dataset.from_arrays(X, y)

        class_attribute = dataset.class_attribute
        if dataset.check_for_string_attributes():
            raise DatasetContractError("Can't handle string attributes!")
        if class_attribute.is_numeric:
            raise DatasetContractError("SMO can't handle a numeric class!")

        dataset = dataset.delete_with_missing_class()
        if dataset.num_instances == 0:
            raise DatasetContractError("No training instances without missing class values!")

        preprocessor = DataPreprocessor(normalize=self.normalize)
        data = preprocessor.fit_transform(dataset)

        num_classes = dataset.num_classes
        subsets = [np.flatnonzero(data.classes == c) for c in range(num_classes)]
        pairs = [(i, j) for i in range(num_classes) for j in range(i + 1, num_classes)]

        if self.verbose:
            print(f"SMO: {dataset.num_instances} instances, {data.num_attributes - 1} filtered attributes, "
                  f"{num_classes} classes, {len(pairs)} binary machines")

        classifiers = {}
        results = {}
        iterator = tqdm(pairs, desc="Training SMO pairs") if self.verbose else pairs
        for i, j in iterator:
            subset = data.subset(np.concatenate([subsets[i], subsets[j]]))
            solver = BinarySMO(
                self._build_kernel(params),
                C=self.C,
                cache_size=self.cache_size,
                tol=self.tol,
                eps=self.eps,
                max_iter=self.max_iter,
                verbose=self.verbose
            )
            results[(i, j)] = solver.fit(subset, i, j)
            classifiers[(i, j)] = solver

        # Модель появляется только после успешного обучения всех пар
        self.preprocessor_ = preprocessor
        self.classifiers_ = classifiers
        self.results_ = results
        self.class_attribute_ = class_attribute
        self.labels_ = dataset.labels
        return self

    # -------------------------------------------------------------------------
    # Предсказание
    # -------------------------------------------------------------------------

    @property
    def classes_(self) -> np.ndarray:
        self._check_fitted()
        return self.labels_

    @property
    def num_classes(self) -> int:
        self._check_fitted()
        return self.class_attribute_.num_values

    def _check_fitted(self) -> None:
        if self.classifiers_ is None:
            raise NotFittedError("SMO: No model built yet.")

    def _filter(self, X):
        """Переводит вход в отфильтрованные разреженные строки."""
        self._check_fitted()
        preprocessor = self.preprocessor_
        if isinstance(X, Dataset):
            values = X.values
        else:
            values = np.atleast_2d(np.asarray(X, dtype=np.float64))
            if values.shape[1] == preprocessor.num_attributes - 1:
                # Только признаки: вставляем неизвестный класс
                values = np.insert(values, preprocessor.class_index, np.nan, axis=1)
        return preprocessor.transform(values)

    def _outputs(self, data) -> np.ndarray:
        pairs = list(self.classifiers_)
        outputs = np.empty((data.num_instances, len(pairs)), dtype=np.float64)
        for k, pair in enumerate(pairs):
            solver = self.classifiers_[pair]
            for n in range(data.num_instances):
                outputs[n, k] = solver.decision_function(data.row(n))
        return outputs

    def decision_margins(self, X) -> np.ndarray:
        """
        Выходы всех попарных машин.

        Returns:
            Матрица (n_samples, n_pairs); столбцы в порядке (0,1), (0,2), ..., (k-2,k-1)
        """
        return self._outputs(self._filter(X))

    def obtain_votes(self, X) -> np.ndarray:
        """
        Голоса классов по всем парам.

        Returns:
            Матрица (n_samples, n_classes) целых голосов; для одной строки - вектор
        """
        single = not isinstance(X, Dataset) and np.ndim(X) == 1
        outputs = self.decision_margins(X)
        votes = np.zeros((outputs.shape[0], self.num_classes), dtype=np.int64)
        for k, (i, j) in enumerate(self.classifiers_):
            positive = outputs[:, k] > 0
            votes[positive, j] += 1
            votes[~positive, i] += 1
        return votes[0] if single else votes

    def classify_instance(self, x) -> int:
        """Индекс предсказанного класса для одного экземпляра."""
        votes = self.obtain_votes(np.asarray(x, dtype=np.float64).ravel())
        return int(np.argmax(votes))

    def predict(self, X) -> np.ndarray:
        """Предсказание исходных меток классов"""
        votes = np.atleast_2d(self.obtain_votes(X))
        return self.labels_[np.argmax(votes, axis=1)]

    def weights(self) -> Tuple[np.ndarray, np.ndarray]:
        """
        Веса единственной линейной машины в разреженном виде.

        Returns:
            (values, indices) по отфильтрованным атрибутам
        """
        self._check_fitted()
        if self.num_classes > 2:
            raise SMOConfigurationError("More than one machine has been built.")
        if (0, 1) not in self.classifiers_:
            raise SMOConfigurationError("No machine has been built.")
        solver = self.classifiers_[(0, 1)]
        if not solver.is_linear:
            raise SMOConfigurationError("Weights only available for linear machines.")
        return solver.sparse_weights, solver.sparse_indices

    def describe(self) -> str:
        if self.classifiers_ is None:
            return "SMO: No model built yet."
        values = self.class_attribute_.values
        text = ["SMO\n\n"]
        for (i, j), solver in self.classifiers_.items():
            text.append(f"Classifier for classes: {values[i]}, {values[j]}\n\n")
            text.append(f"{solver}\n\n")
        return "".join(text)

    def __str__(self) -> str:
        return self.describe()
