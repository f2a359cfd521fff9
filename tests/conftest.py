import os
import tempfile
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# Importing expense_portal.main builds a module-level app from the environment;
# point it somewhere disposable before any test module imports it.
os.environ.setdefault("DATA_DIR", tempfile.mkdtemp(prefix="expense-portal-"))

from expense_portal.core.config import Settings  # noqa: E402
from expense_portal.db.gateway import ExpenseGateway  # noqa: E402
from expense_portal.main import create_app  # noqa: E402


def make_settings(data_dir: Path, **overrides) -> Settings:
    values = dict(
        data_dir=data_dir,
        debug=False,
        openai_endpoint=None,
        openai_deployment_name=None,
        openai_api_key=None,
    )
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def settings(tmp_path):
    return make_settings(tmp_path)


@pytest.fixture
def app(settings):
    return create_app(settings_override=settings)


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def gateway(app):
    return ExpenseGateway(app.state.settings.db_path)


@pytest.fixture
def broken_settings(tmp_path):
    # Parent directory never exists, so every connection attempt fails
    return make_settings(tmp_path, db_path=tmp_path / "missing" / "expenses.sqlite3")


@pytest.fixture
def broken_client(broken_settings):
    return TestClient(create_app(settings_override=broken_settings))
