import pytest

from fakes import HUB, SANDBOX, FakeAccounts, RecordingReporter


@pytest.fixture
def accounts():
    return FakeAccounts([HUB, SANDBOX])


@pytest.fixture
def reporter():
    return RecordingReporter()
