import sys
import json
import pytest
from pathlib import Path

# Allow the import of support modules for tests
sys.path.append(str(Path(__file__).resolve().parent))

from support_modules import contracts
from support_modules.metadata_builder import MetadataBuilder


@pytest.fixture
def builder() -> MetadataBuilder:
    return MetadataBuilder("testing")


@pytest.fixture
def flipper_doc():
    return contracts.flipper()


@pytest.fixture
def erc20_doc():
    return contracts.erc20()


@pytest.fixture
def tree_doc():
    return contracts.recursive_tree()


@pytest.fixture
def metadata_file(tmp_path, erc20_doc) -> Path:
    path = tmp_path / "erc20.json"
    path.write_text(json.dumps(erc20_doc), encoding="utf-8")
    return path
