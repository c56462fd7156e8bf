import pathlib

import pytest

from depeval.deptree import DepGraph, read_treebank

from hypothesis import settings

settings.register_profile("default", print_blob=True)
settings.load_profile("default")


@pytest.fixture(scope="session")
def test_data_dir() -> pathlib.Path:
    return pathlib.Path(__file__).parent / "fixtures"


@pytest.fixture(scope="session")
def gold_path(test_data_dir: pathlib.Path) -> pathlib.Path:
    return test_data_dir / "gold.conllu"


@pytest.fixture(scope="session")
def system_path(test_data_dir: pathlib.Path) -> pathlib.Path:
    return test_data_dir / "system.conllu"


@pytest.fixture(scope="session")
def gold_treebank(gold_path: pathlib.Path) -> list[DepGraph]:
    return read_treebank(gold_path)


@pytest.fixture(scope="session")
def system_treebank(system_path: pathlib.Path) -> list[DepGraph]:
    return read_treebank(system_path)
