"""
Глобальные pytest fixtures и конфигурация для всех тестов.

Этот файл автоматически загружается pytest и делает доступными
fixtures для всех тестов в проекте.
"""

import io
import os
import sys

import pytest

# Добавляем корневую директорию в путь для импортов
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from tests.test_data.fixtures import (  # noqa: E402
    DEFAULT_DAT_ROWS,
    create_ascii_dat,
    create_cfg_text,
)


@pytest.fixture
def cfg_text():
    """Fixture: CFG ревизии 2013, 2 аналоговых и 2 дискретных канала, 1200 Гц, 4 выборки."""
    return create_cfg_text()


@pytest.fixture
def ascii_dat_text():
    """Fixture: ASCII DAT, соответствующий cfg_text."""
    return create_ascii_dat(DEFAULT_DAT_ROWS)


@pytest.fixture
def dat_rows():
    return DEFAULT_DAT_ROWS


@pytest.fixture
def cfg_stream(cfg_text):
    """Fixture: CFG как открытый байтовый поток."""
    return io.BytesIO(cfg_text.encode("utf-8"))


@pytest.fixture
def dat_stream(ascii_dat_text):
    return io.BytesIO(ascii_dat_text.encode("utf-8"))


def pytest_configure(config):
    """Конфигурация pytest. Добавляем пользовательские маркеры."""
    config.addinivalue_line(
        "markers",
        "unit: быстрые unit-тесты без файловых операций"
    )
    config.addinivalue_line(
        "markers",
        "integration: интеграционные тесты с файловыми операциями"
    )
    config.addinivalue_line(
        "markers",
        "slow: медленные тесты"
    )
