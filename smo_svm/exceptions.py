"""
Иерархия исключений SMO.

- SMOConfigurationError: некорректные параметры, обнаруживаются до обучения
- DatasetContractError: данные не удовлетворяют требованиям классификатора
- SolverInvariantError: внутреннее состояние, которое "не должно случиться"
"""


class SMOConfigurationError(ValueError):
    """Некорректная конфигурация (опции, ядро, параметры)."""


class DatasetContractError(ValueError):
    """Входные данные нарушают контракт (нет класса, числовой класс, строки)."""


class SolverInvariantError(RuntimeError):
    """Нарушен инвариант солвера: ошибка логики или превышен размер задачи."""
