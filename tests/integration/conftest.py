import pytest

from tests.integration import mock_classification_server


@pytest.fixture(autouse=True)
def mock_server():
    """Fresh mock classification service state for every test."""
    mock_classification_server.reset()
    yield mock_classification_server
    mock_classification_server.reset()
