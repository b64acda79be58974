import pytest

from compliance_navigator.decision_tree import DecisionTreeStore

from helpers.trees import fan_out_document


@pytest.fixture(scope="session")
def store():
    """Load the shipped v1 decision tree once for the entire test session."""
    s = DecisionTreeStore()
    s.load()
    return s


@pytest.fixture
def fan_store():
    """Small fan-out tree (see helpers/trees.py)."""
    return DecisionTreeStore.from_document(fan_out_document(), strict=True)
