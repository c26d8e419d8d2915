"""
Модель данных для SMO.

Dataset - исходная таблица: плотная матрица float64, где пропуски - NaN,
а значения номинальных атрибутов хранятся как индексы в списке значений.
SparseData - уже отфильтрованные числовые строки в формате CSR, которые
получает солвер; атрибут класса в них стоит последним.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np
from scipy import sparse
from scipy.io import arff

from .exceptions import DatasetContractError

NUMERIC = "numeric"
NOMINAL = "nominal"
STRING = "string"


@dataclass(frozen=True)
class Attribute:
    """Описание столбца: имя, тип и (для номинальных) список значений."""
    name: str
    kind: str = NUMERIC
    values: Tuple[str, ...] = ()

    @property
    def is_numeric(self) -> bool:
        return self.kind == NUMERIC

    @property
    def is_nominal(self) -> bool:
        return self.kind == NOMINAL

    @property
    def num_values(self) -> int:
        return len(self.values)


def _is_missing_label(label) -> bool:
    if label is None:
        return True
    if isinstance(label, (float, np.floating)):
        return bool(np.isnan(label))
    return False


@dataclass
class Dataset:
    """
    Таблица экземпляров с заголовком.

    Args:
        attributes: Описания столбцов
        values: Матрица (n_instances, n_attributes); NaN - пропуск
        class_index: Индекс атрибута класса (-1 - не задан)
        weights: Веса экземпляров (хранятся, солвером не используются)
        class_labels: Исходные метки классов для predict (по умолчанию - значения атрибута)
    """
    attributes: List[Attribute]
    values: np.ndarray
    class_index: int = -1
    weights: Optional[np.ndarray] = None
    class_labels: Optional[np.ndarray] = None

    def __post_init__(self):
        self.values = np.asarray(self.values, dtype=np.float64)
        if self.values.ndim != 2 or self.values.shape[1] != len(self.attributes):
            raise DatasetContractError(
                f"Ожидалась матрица (n, {len(self.attributes)}), получено {self.values.shape}"
            )
        if not -1 <= self.class_index < len(self.attributes):
            raise DatasetContractError(f"Некорректный class_index: {self.class_index}")
        if self.weights is None:
            self.weights = np.ones(self.values.shape[0], dtype=np.float64)

    # -------------------------------------------------------------------------
    # Конструкторы
    # -------------------------------------------------------------------------

    @classmethod
    def from_arrays(
        cls,
        X,
        y: Sequence,
        feature_names: Optional[Sequence[str]] = None,
        class_name: str = "class"
    ) -> "Dataset":
        """
        Строит набор из числовых признаков и произвольных меток.

        Класс становится последним номинальным атрибутом; его значения -
        отсортированные уникальные метки. None и NaN в y - пропуск класса.
        """
        X = np.asarray(X, dtype=np.float64)
        if X.ndim != 2:
            raise DatasetContractError(f"X должен быть двумерным, получено {X.shape}")
        y = np.asarray(y, dtype=object)
        if len(y) != X.shape[0]:
            raise DatasetContractError(f"Длины X и y различаются: {X.shape[0]} != {len(y)}")

        if feature_names is None:
            feature_names = [f"x{i}" for i in range(X.shape[1])]

        missing = np.array([_is_missing_label(label) for label in y], dtype=bool)
        present = [label for label, miss in zip(y.tolist(), missing) if not miss]
        labels = np.array(sorted(set(present)))
        index_of = {label: i for i, label in enumerate(labels.tolist())}
        class_column = np.array(
            [np.nan if miss else index_of[label] for label, miss in zip(y.tolist(), missing)],
            dtype=np.float64
        )

        attributes = [Attribute(str(name)) for name in feature_names]
        attributes.append(Attribute(class_name, NOMINAL, tuple(str(label) for label in labels.tolist())))
        values = np.column_stack([X, class_column]) if X.shape[0] else np.empty((0, len(attributes)))
        return cls(attributes, values, class_index=len(attributes) - 1, class_labels=labels)

    @classmethod
    def from_arff(cls, path: str, class_index: Optional[int] = -1) -> "Dataset":
        """
        Читает ARFF-файл (плотный формат) через scipy.io.arff.

        Отрицательный class_index отсчитывается с конца, None - класс не задан.
        """
        try:
            data, meta = arff.loadarff(path)
        except NotImplementedError as e:
            raise DatasetContractError(f"Can't handle string attributes! ({e})") from e

        attributes = []
        columns = []
        for name in meta.names():
            kind, nominal_values = meta[name]
            column = data[name]
            if kind == NUMERIC:
                attributes.append(Attribute(name, NUMERIC))
                columns.append(np.asarray(column, dtype=np.float64))
            elif kind == NOMINAL:
                nominal_values = tuple(nominal_values)
                index_of = {value: i for i, value in enumerate(nominal_values)}
                decoded = [v.decode("utf-8") if isinstance(v, bytes) else str(v) for v in column]
                attributes.append(Attribute(name, NOMINAL, nominal_values))
                columns.append(np.array([index_of.get(v, np.nan) for v in decoded], dtype=np.float64))
            else:
                raise DatasetContractError(f"Неподдерживаемый тип атрибута '{name}': {kind}")

        values = np.column_stack(columns) if columns else np.empty((len(data), 0))
        if class_index is None:
            class_index = -1
        elif class_index < 0:
            class_index += len(attributes)
        return cls(attributes, values, class_index=class_index)

    # -------------------------------------------------------------------------
    # Свойства
    # -------------------------------------------------------------------------

    @property
    def num_instances(self) -> int:
        return self.values.shape[0]

    @property
    def num_attributes(self) -> int:
        return len(self.attributes)

    @property
    def class_attribute(self) -> Attribute:
        if self.class_index < 0:
            raise DatasetContractError("Class attribute not set!")
        return self.attributes[self.class_index]

    @property
    def num_classes(self) -> int:
        return self.class_attribute.num_values

    @property
    def labels(self) -> np.ndarray:
        """Метки классов для вывода predict."""
        if self.class_labels is not None:
            return np.asarray(self.class_labels)
        return np.array(self.class_attribute.values, dtype=object)

    def class_values(self) -> np.ndarray:
        return self.values[:, self.class_index]

    def check_for_string_attributes(self) -> bool:
        return any(a.kind == STRING for a in self.attributes)

    def delete_with_missing_class(self) -> "Dataset":
        """Копия набора без экземпляров с пропущенным классом."""
        keep = ~np.isnan(self.class_values())
        return Dataset(
            list(self.attributes),
            self.values[keep].copy(),
            class_index=self.class_index,
            weights=self.weights[keep].copy(),
            class_labels=self.class_labels
        )


class SparseData:
    """
    Отфильтрованные числовые экземпляры в формате CSR.

    Args:
        rows: Матрица (n_instances, n_attributes) с отсортированными индексами
        classes: Индексы классов (int, -1 - неизвестен)
        class_index: Столбец класса в rows (пропускается ядром)
        attribute_names: Имена столбцов rows
    """

    def __init__(
        self,
        rows: sparse.csr_matrix,
        classes: np.ndarray,
        class_index: int,
        attribute_names: Sequence[str]
    ):
        rows = sparse.csr_matrix(rows, dtype=np.float64)
        rows.eliminate_zeros()
        rows.sort_indices()
        self.rows = rows
        self.classes = np.asarray(classes, dtype=np.int64)
        self.class_index = class_index
        self.attribute_names = list(attribute_names)
        self._row_views = [
            (rows.indices[rows.indptr[i]:rows.indptr[i + 1]], rows.data[rows.indptr[i]:rows.indptr[i + 1]])
            for i in range(rows.shape[0])
        ]

    @classmethod
    def from_dense(
        cls,
        features: np.ndarray,
        classes: Sequence[int],
        feature_names: Optional[Sequence[str]] = None,
        class_name: str = "class"
    ) -> "SparseData":
        """Добавляет столбец класса последним и упаковывает строки в CSR."""
        features = np.asarray(features, dtype=np.float64)
        classes = np.asarray(classes, dtype=np.int64)
        if feature_names is None:
            feature_names = [f"x{i}" for i in range(features.shape[1])]
        class_column = np.where(classes >= 0, classes, 0).astype(np.float64)
        rows = sparse.csr_matrix(np.column_stack([features, class_column]))
        return cls(rows, classes, features.shape[1], list(feature_names) + [class_name])

    @property
    def num_instances(self) -> int:
        return self.rows.shape[0]

    @property
    def num_attributes(self) -> int:
        return self.rows.shape[1]

    def row(self, i: int) -> Tuple[np.ndarray, np.ndarray]:
        return self._row_views[i]

    def subset(self, indices: Sequence[int]) -> "SparseData":
        indices = np.asarray(indices, dtype=np.int64)
        return SparseData(self.rows[indices], self.classes[indices], self.class_index, self.attribute_names)

    def to_dense(self) -> np.ndarray:
        """Плотные признаки без столбца класса."""
        dense = self.rows.toarray()
        return np.delete(dense, self.class_index, axis=1)

    def __len__(self) -> int:
        return self.num_instances
