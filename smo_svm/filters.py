"""
Предобработка данных перед SMO.

Порядок: замена пропусков -> нормализация числовых
атрибутов в [0, 1] -> перевод номинальных атрибутов в бинарные.

- Пропуски: среднее для числовых, мода для номинальных (SimpleImputer)
- Нормализация: MinMaxScaler, только если normalize=True
- Номинальные: OneHotEncoder(drop="if_binary") - двухзначный атрибут даёт
  один столбец 0/1, k-значный - k индикаторов

Обученные преобразования применяются к каждому экземпляру при предсказании.
"""

from typing import List, Optional

import numpy as np
from sklearn.compose import ColumnTransformer
from sklearn.exceptions import NotFittedError
from sklearn.impute import SimpleImputer
from sklearn.pipeline import Pipeline
from sklearn.preprocessing import MinMaxScaler, OneHotEncoder

from .dataset import Attribute, Dataset, SparseData
from .exceptions import DatasetContractError


class DataPreprocessor:
    """
    Фильтры SMO, обучаемые на тренировочном наборе.

    Args:
        normalize: Нормализовать числовые атрибуты в [0, 1]
    """

    def __init__(self, normalize: bool = True):
        self.normalize = normalize

        self.num_attributes: Optional[int] = None
        self.class_index: Optional[int] = None
        self.class_name: Optional[str] = None
        self.feature_names_: Optional[List[str]] = None
        self.only_numeric: bool = True
        self._transformer: Optional[ColumnTransformer] = None

    def _nominal_names(self, attribute: Attribute) -> List[str]:
        if attribute.num_values == 2:
            return [attribute.name]
        return [f"{attribute.name}={value}" for value in attribute.values]

    def fit(self, dataset: Dataset) -> "DataPreprocessor":
        attributes = dataset.attributes
        class_index = dataset.class_index
        feature_idx = [i for i in range(len(attributes)) if i != class_index]
        numeric_cols = [i for i in feature_idx if attributes[i].is_numeric]
        nominal_cols = [i for i in feature_idx if attributes[i].is_nominal]

        transformers = []
        if numeric_cols:
            steps = [("missing", SimpleImputer(strategy="mean", keep_empty_features=True))]
            if self.normalize:
                steps.append(("normalize", MinMaxScaler()))
            transformers.append(("numeric", Pipeline(steps), numeric_cols))
        if nominal_cols:
            categories = [np.arange(attributes[i].num_values, dtype=np.float64) for i in nominal_cols]
            steps = [
                ("missing", SimpleImputer(strategy="most_frequent", keep_empty_features=True)),
                ("binarize", OneHotEncoder(categories=categories, drop="if_binary", sparse_output=False)),
            ]
            transformers.append(("nominal", Pipeline(steps), nominal_cols))

        self.num_attributes = len(attributes)
        self.class_index = class_index
        self.class_name = attributes[class_index].name
        self.only_numeric = not nominal_cols
        self.feature_names_ = [attributes[i].name for i in numeric_cols]
        for i in nominal_cols:
            self.feature_names_.extend(self._nominal_names(attributes[i]))

        if transformers:
            self._transformer = ColumnTransformer(transformers, remainder="drop", sparse_threshold=0)
            self._transformer.fit(dataset.values)
        else:
            self._transformer = None
        return self

    def transform(self, values: np.ndarray) -> SparseData:
        """
        Применяет фильтры к строкам в кодировке Dataset.

        Args:
            values: Матрица (n, num_attributes) или одна строка; столбец класса может быть NaN
        """
        if self.num_attributes is None:
            raise NotFittedError("DataPreprocessor is not fitted yet")
        values = np.atleast_2d(np.asarray(values, dtype=np.float64))
        if values.shape[1] != self.num_attributes:
            raise DatasetContractError(
                f"Ожидалось {self.num_attributes} атрибутов, получено {values.shape[1]}"
            )

        if self._transformer is not None:
            features = np.asarray(self._transformer.transform(values), dtype=np.float64)
        else:
            features = np.empty((values.shape[0], 0))

        class_column = values[:, self.class_index]
        classes = np.where(np.isnan(class_column), -1, np.nan_to_num(class_column)).astype(np.int64)
        return SparseData.from_dense(features, classes, self.feature_names_, self.class_name)

    def fit_transform(self, dataset: Dataset) -> SparseData:
        return self.fit(dataset).transform(dataset.values)
