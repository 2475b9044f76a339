import pytest

from github_notifyd.capabilities import CapabilityVector, RenderProfile
from tests.fakes import FakePresenter


@pytest.fixture
def presenter():
    return FakePresenter()


@pytest.fixture
def profile():
    return RenderProfile(CapabilityVector(body=True))
