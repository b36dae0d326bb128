from io import StringIO

import pytest

from taptester import api
from taptester.builder import TapBuilder
from taptester.config import TaptesterSettings
from taptester.session import SessionController


@pytest.fixture
def builder() -> TapBuilder:
    return TapBuilder(
        output=StringIO(), failure_output=StringIO(), todo_output=StringIO()
    )


@pytest.fixture
def controller(builder: TapBuilder) -> SessionController:
    return SessionController(builder, settings=TaptesterSettings())


@pytest.fixture
def default_builder(monkeypatch, builder: TapBuilder) -> TapBuilder:
    """Install ``builder`` as the process-wide default for the api module."""
    monkeypatch.setattr(api, "_builder", builder)
    monkeypatch.setattr(
        api, "_controller", SessionController(builder, settings=TaptesterSettings())
    )
    return builder
