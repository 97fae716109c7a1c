import shutil
import subprocess
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import pytest
import yaml

from catalog_notifier.core import config as settings_module
from catalog_notifier.core.config import reload_settings
from catalog_notifier.core.models import Notification, SchemaChangeNotification
from catalog_notifier.core.notifier_config import parse_config


def render_mdx(front_matter: Dict[str, Any], body: str = "Some documentation.") -> str:
    """Build an index.mdx document from a front matter mapping."""
    return f"---\n{yaml.safe_dump(front_matter, sort_keys=False)}---\n\n{body}\n"


class FakeVCS:
    """VersionControl double: snapshots keyed by (file path, revision)."""

    def __init__(self, snapshots: Optional[Dict[tuple, str]] = None, changed: Optional[List[str]] = None):
        self.snapshots = snapshots or {}
        self.changed = changed or []
        self.requests: List[tuple] = []

    def changed_files(self, commit_range: str) -> List[str]:
        return list(self.changed)

    def file_at_revision(self, file_path: str, revision: str) -> str:
        self.requests.append((str(file_path), revision))
        return self.snapshots.get((str(file_path), revision), "")


@pytest.fixture(autouse=True)
def isolate_settings(monkeypatch):
    """Keep NOTIFIER_* variables from the host out of the tests."""
    for name in (
        "NOTIFIER_LOG_LEVEL",
        "NOTIFIER_CONFIG_FILE",
        "NOTIFIER_HTTP_TIMEOUT",
        "NOTIFIER_ENVIRONMENT",
        "NOTIFIER_USER_AGENT",
    ):
        monkeypatch.delenv(name, raising=False)
    reload_settings()
    yield
    # Dropped rather than reloaded: the environment may still hold test values
    settings_module._settings = None


@pytest.fixture
def write_file() -> Callable[..., Path]:
    def _write(root: Path, relative: str, content: str) -> Path:
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path
    return _write


@pytest.fixture
def catalog_dir(tmp_path, write_file) -> Path:
    """
    Small EventCatalog:
    - GetInventoryList event owned by dboyne, with a JSON schema
    - InventoryService consuming it
    - PaymentGatewayService consuming it
    - OrderPlaced event with no owners
    """
    root = tmp_path / "catalog"
    write_file(root, "eventcatalog.config.js", "export default {};\n")
    write_file(root, "users/dboyne.mdx", render_mdx({
        "id": "dboyne",
        "name": "David Boyne",
        "role": "Lead developer",
        "email": "test@test.com",
    }))
    write_file(root, "teams/payments-team.mdx", render_mdx({
        "id": "payments-team",
        "name": "Payments Team",
    }))
    write_file(root, "events/GetInventoryList/index.mdx", render_mdx({
        "id": "GetInventoryList",
        "name": "List inventory list",
        "version": "0.0.1",
        "owners": ["dboyne"],
        "schemaPath": "schema.json",
    }))
    write_file(root, "events/GetInventoryList/schema.json", SCHEMA_AFTER)
    write_file(root, "events/OrderPlaced/index.mdx", render_mdx({
        "id": "OrderPlaced",
        "name": "Order Placed",
        "version": "1.0.0",
    }))
    write_file(root, "services/InventoryService/index.mdx", render_mdx({
        "id": "InventoryService",
        "name": "Inventory Service",
        "version": "0.0.2",
        "receives": [{"id": "GetInventoryList"}],
    }))
    write_file(root, "domains/Payments/services/PaymentGatewayService/index.mdx", render_mdx({
        "id": "PaymentGatewayService",
        "name": "Payment Gateway Service",
        "version": "0.0.1",
        "owners": ["payments-team"],
        "receives": [{"id": "GetInventoryList", "version": "0.0.1"}],
    }))
    write_file(root, "services/InventoryService/versioned/0.0.1/index.mdx", render_mdx({
        "id": "InventoryService",
        "name": "Inventory Service",
        "version": "0.0.1",
    }))
    return root


SCHEMA_BEFORE = """{
  "type": "object",
  "properties": {
    "sku": { "type": "string" },
    "quantity": { "type": "integer" }
  }
}
"""

SCHEMA_AFTER = """{
  "type": "object",
  "properties": {
    "sku": { "type": "string" },
    "quantity": { "type": "number" },
    "warehouse": { "type": "string" }
  }
}
"""


@pytest.fixture
def make_notification() -> Callable[..., Notification]:
    def _make(
        kind: str = "consumer-added",
        resource_owners: Optional[list] = None,
        consumer_owners: Optional[list] = None,
        resource_id: str = "PaymentComplete",
        **extra: Any,
    ) -> Notification:
        data = {
            "kind": kind,
            "resource": {
                "id": resource_id,
                "name": "Payment Complete",
                "version": "0.0.2",
                "type": "event",
                "owners": [{"id": "dboyne"}] if resource_owners is None else resource_owners,
            },
            "consumer": {
                "id": "PaymentService",
                "name": "Payment Service",
                "version": "0.0.1",
                "type": "service",
                "owners": [{"id": "dboyne"}] if consumer_owners is None else consumer_owners,
            },
            "metadata": {
                "timestamp": datetime(2025, 7, 23, 9, 49, 1, tzinfo=timezone.utc),
                "catalog_path": "/tmp/catalog",
            },
        }
        if kind == "subscribed-schema-changed":
            data.update({
                "before": extra.pop("before", SCHEMA_BEFORE.strip()),
                "after": extra.pop("after", SCHEMA_AFTER.strip()),
                "diff": extra.pop("diff", '```diff\n-    "quantity": { "type": "integer" }\n```'),
            })
            return SchemaChangeNotification(**data)
        return Notification(**data)
    return _make


@pytest.fixture
def make_config():
    def _make(text: str, environ: Optional[dict] = None):
        return parse_config(text, environ or {})
    return _make


def run_git(cwd: Path, *args: str) -> str:
    proc = subprocess.run(["git", *args], cwd=cwd, text=True, encoding="utf-8", capture_output=True, check=True)
    return proc.stdout


@pytest.fixture
def git_catalog(catalog_dir, write_file):
    """
    The catalog fixture committed to git twice: the second commit makes
    InventoryService start receiving OrderPlaced and changes the schema.
    """
    if shutil.which("git") is None:
        pytest.skip("git is not installed")

    root = catalog_dir
    run_git(root, "init", "-q")
    run_git(root, "config", "user.email", "ci@example.com")
    run_git(root, "config", "user.name", "CI")
    run_git(root, "config", "commit.gpgsign", "false")
    write_file(root, "events/GetInventoryList/schema.json", SCHEMA_BEFORE)
    run_git(root, "add", "-A")
    run_git(root, "commit", "-q", "-m", "initial catalog")

    write_file(root, "events/GetInventoryList/schema.json", SCHEMA_AFTER)
    write_file(root, "services/InventoryService/index.mdx", render_mdx({
        "id": "InventoryService",
        "name": "Inventory Service",
        "version": "0.0.2",
        "receives": [{"id": "GetInventoryList"}, {"id": "OrderPlaced"}],
    }))
    run_git(root, "add", "-A")
    run_git(root, "commit", "-q", "-m", "inventory consumes OrderPlaced")
    return root
