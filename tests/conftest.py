"""
Pytest configuration and fixtures for inventory-sync tests

This module provides shared fixtures for unit, integration, and E2E tests.
"""
import csv
import json
from pathlib import Path
from typing import Generator

import psycopg
import pytest
from openpyxl import Workbook
from testcontainers.postgres import PostgresContainer

from inventory_sync.core.config import PipelineConfig
from inventory_sync.warehouse import DatabaseConnectionPool
from inventory_sync.warehouse.schema_mgmt import load_schema_sql


# =======================
# PYTEST CONFIGURATION
# =======================

def pytest_configure(config):
    """Configure pytest with custom markers"""
    config.addinivalue_line(
        "markers", "unit: Unit tests that don't require external services"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests that touch files or Docker containers"
    )
    config.addinivalue_line(
        "markers", "e2e: End-to-end tests that drive the command-line entry points"
    )


# =======================
# DATABASE FIXTURES (Testcontainers)
# =======================

def start_postgres_container() -> PostgresContainer:
    """
    Build and start the PostgreSQL container

    Skips the calling test when Docker is not reachable. The docker client is
    opened when the container object is built, so construction is guarded too.
    """
    try:
        container = PostgresContainer(
            image="postgres:16.2-alpine",
            username="test_inventory",
            password="test_password",
            dbname="test_inventory",
            driver=None,
        )
        container.start()
    except Exception as e:  # docker client errors vary by platform
        pytest.skip(f"Docker is not available: {e}")
    return container


@pytest.fixture(scope="session")
def postgres_container() -> Generator[PostgresContainer, None, None]:
    """
    Start PostgreSQL container for integration tests

    Yields:
        PostgresContainer instance with the inventory schema applied
    """
    container = start_postgres_container()
    try:
        with psycopg.connect(container.get_connection_url()) as conn:
            with conn.cursor() as cur:
                cur.execute(load_schema_sql())
            conn.commit()
        yield container
    finally:
        container.stop()


@pytest.fixture(scope="function")
def db_pool(postgres_container) -> Generator[DatabaseConnectionPool, None, None]:
    """
    Open a connection pool against the test container

    Yields:
        Open DatabaseConnectionPool
    """
    pool = DatabaseConnectionPool(
        host=postgres_container.get_container_host_ip(),
        port=int(postgres_container.get_exposed_port(5432)),
        database=postgres_container.dbname,
        user=postgres_container.username,
        password=postgres_container.password,
        max_size=2,
        timeout=10.0,
    )
    with pool:
        yield pool


@pytest.fixture(scope="function")
def clean_db(db_pool) -> DatabaseConnectionPool:
    """
    Provide a clean database by truncating all tables before each test

    Args:
        db_pool: Open connection pool

    Returns:
        The same pool, with empty products and sync_runs tables
    """
    db_pool.execute_command("TRUNCATE TABLE products, sync_runs")
    return db_pool


# =======================
# CONFIGURATION FIXTURES
# =======================

@pytest.fixture
def data_dir(tmp_path) -> Path:
    path = tmp_path / "data"
    path.mkdir()
    return path


@pytest.fixture
def document_config(tmp_path, data_dir) -> PipelineConfig:
    """Pipeline configuration in document mode, rooted in a temp directory."""
    return PipelineConfig.model_validate({
        "mode": "document",
        "paths": {
            "source_file": str(tmp_path / "catalog.xlsx"),
            "data_dir": str(data_dir),
        },
        "report": {
            "order_log": str(data_dir / "orders.json"),
            "output_dir": str(tmp_path / "order-books"),
        },
    })


@pytest.fixture(scope="function")
def test_env_vars(monkeypatch, tmp_path):
    """
    Provide test environment variables through a .env file

    Returns:
        Path of the written .env file
    """
    env_file = tmp_path / ".env"
    env_file.write_text(
        "DB_HOST=localhost\n"
        "DB_PORT=5432\n"
        "DB_NAME=test_inventory\n"
        "DB_USER=test_inventory\n"
        "DB_PASSWORD=test_password\n"
        "LOG_LEVEL=DEBUG\n"
        "LOG_FORMAT=text\n"
    )
    # setenv then delenv, so whatever load_dotenv() sets is undone at teardown
    for var in ("DB_HOST", "DB_PORT", "DB_NAME", "DB_USER", "DB_PASSWORD", "LOG_LEVEL", "LOG_FORMAT"):
        monkeypatch.setenv(var, "")
        monkeypatch.delenv(var)
    return env_file


# =======================
# SPREADSHEET FIXTURES
# =======================

CATALOG_HEADERS = [
    "Product ID", "Product Name", "Category", "Website Section", "Price (₹)",
    "Colors Available", "Length/Size", "Main Image URL", "In Stock", "Is Sale",
]


def _catalog_row(product_id, name, category="Rings", section="Rings Page", price=1500,
                 colors="Gold", sizes="Adjustable", image="ring.jpg", in_stock="Yes", is_sale="No"):
    return [product_id, name, category, section, price, colors, sizes, image, in_stock, is_sale]


@pytest.fixture
def write_xlsx():
    """Factory writing a header row plus rows to an .xlsx file."""
    def _write(path: Path, headers: list, rows: list[list]) -> Path:
        wb = Workbook()
        ws = wb.active
        ws.title = "Inventory"
        ws.append(headers)
        for row in rows:
            ws.append(row)
        wb.save(path)
        return path
    return _write


@pytest.fixture
def write_csv():
    """Factory writing a header row plus rows to a UTF-8 (BOM) CSV file."""
    def _write(path: Path, headers: list, rows: list[list]) -> Path:
        with open(path, "w", newline="", encoding="utf-8-sig") as f:
            writer = csv.writer(f)
            writer.writerow(headers)
            writer.writerows(rows)
        return path
    return _write


@pytest.fixture
def catalog_headers() -> list[str]:
    return list(CATALOG_HEADERS)


@pytest.fixture
def make_catalog_row():
    return _catalog_row


@pytest.fixture
def catalog_rows() -> list[list]:
    """Ten valid catalog rows, NJ-001 .. NJ-010."""
    return [_catalog_row(f"NJ-{i:03d}", f"Product {i}") for i in range(1, 11)]


# =======================
# ORDER FIXTURES
# =======================

def _order(order_id, total, created_at, email="asha@example.com", name="Asha Verma",
           state="Maharashtra", city="Pune", payment_status="completed", order_status="processing"):
    return {
        "orderId": order_id,
        "customerName": name,
        "customerEmail": email,
        "customerPhone": "9876543210",
        "items": [{"name": "Pearl Drop Earrings", "quantity": 1, "price": total}],
        "totalAmount": total,
        "paymentId": f"pay_{order_id}",
        "paymentStatus": payment_status,
        "orderStatus": order_status,
        "shippingAddress": {"address": "12 MG Road", "city": city, "state": state, "pincode": "411001"},
        "createdAt": created_at,
    }


@pytest.fixture
def make_order():
    return _order


@pytest.fixture
def sample_orders() -> list[dict]:
    return [
        _order("NJ1001", 100, "2025-03-01T04:00:00.000Z"),
        _order("NJ1002", 200, "2025-02-28T09:30:00.000Z", email="ravi@example.com",
                   name="Ravi Kumar", state="Karnataka", city="Bengaluru", order_status="shipped"),
        _order("NJ1003", 300, "2025-02-27T12:00:00.000Z", payment_status="pending"),
    ]


@pytest.fixture
def write_orders():
    def _write(path: Path, orders) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(orders), encoding="utf-8")
        return path
    return _write


# =======================
# CLEANUP FIXTURES
# =======================

@pytest.fixture(autouse=True)
def isolate_environment(monkeypatch):
    """Keep host environment overrides out of every test."""
    for var in ("SYNC_MODE", "SYNC_SOURCE_FILE", "SYNC_DATA_DIR", "REPORT_TIMEZONE",
                "VERCEL", "NETLIFY", "AWS_LAMBDA_FUNCTION_NAME"):
        monkeypatch.delenv(var, raising=False)
    yield
