"""
Unit tests for pipeline configuration loading.
"""

from pathlib import Path

import pytest

from inventory_sync.core.config import PipelineConfigLoader
from inventory_sync.core.errors import ConfigError


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "pipeline.yaml"
    path.write_text(
        """
mode: relational
paths:
  source_file: exports/catalog.xlsx
  data_dir: /srv/storefront/data
header_synonyms:
  "Item Code": product_id
pricing:
  category_prices:
    rings: 1800
  sale_markup: 1.3
backup:
  retention_count: 5
report:
  timezone: Asia/Kolkata
  run_at: "06:30"
""",
        encoding="utf-8",
    )
    return path


class TestPipelineConfigLoader:
    """Tests for PipelineConfigLoader"""

    def test_missing_file_gives_defaults(self, tmp_path):
        config = PipelineConfigLoader(tmp_path / "absent.yaml", environ={}).load()

        assert config.mode == "relational"
        assert config.paths.source_file == Path("Stock-Management-Inventory-Updated.xlsx")
        assert config.backup.retention_count == 10
        assert config.report.master_file == "Book1.xlsx"

    def test_yaml_values_loaded(self, config_file):
        config = PipelineConfigLoader(config_file, environ={}).load()

        assert config.paths.source_file == Path("exports/catalog.xlsx")
        assert config.paths.projection_path == Path("/srv/storefront/data/inventory.json")
        assert config.header_synonyms == {"Item Code": "product_id"}
        assert config.pricing.category_prices == {"rings": 1800}
        assert config.pricing.sale_markup == 1.3
        assert config.backup.retention_count == 5
        assert config.report.run_at == "06:30"

    def test_environment_overrides(self, config_file):
        environ = {
            "SYNC_SOURCE_FILE": "/tmp/override.csv",
            "DB_HOST": "db.internal",
            "DB_PORT": "6543",
            "DB_PASSWORD": "secret",
            "LOG_LEVEL": "debug",
            "REPORT_TIMEZONE": "UTC",
        }
        config = PipelineConfigLoader(config_file, environ=environ).load()

        assert config.paths.source_file == Path("/tmp/override.csv")
        assert config.database.host == "db.internal"
        assert config.database.port == 6543
        assert config.database.password == "secret"
        assert config.log_level == "DEBUG"
        assert config.report.timezone == "UTC"

    @pytest.mark.parametrize("marker", ["VERCEL", "NETLIFY", "AWS_LAMBDA_FUNCTION_NAME"])
    def test_serverless_marker_forces_document_mode(self, config_file, marker):
        config = PipelineConfigLoader(config_file, environ={marker: "1"}).load()
        assert config.mode == "document"

    def test_sync_mode_override(self, config_file):
        config = PipelineConfigLoader(config_file, environ={"SYNC_MODE": "Document"}).load()
        assert config.mode == "document"

    def test_malformed_yaml_raises(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("paths: [unclosed\n", encoding="utf-8")

        with pytest.raises(ConfigError, match="Cannot parse"):
            PipelineConfigLoader(path, environ={}).load()

    def test_invalid_values_raise(self, tmp_path):
        path = tmp_path / "invalid.yaml"
        path.write_text("backup:\n  retention_count: 0\n", encoding="utf-8")

        with pytest.raises(ConfigError, match="Invalid configuration"):
            PipelineConfigLoader(path, environ={}).load()

    def test_unknown_view_flag_rejected(self, tmp_path):
        path = tmp_path / "views.yaml"
        path.write_text("views:\n  - name: gold\n    flag: is_gold\n", encoding="utf-8")

        with pytest.raises(ConfigError):
            PipelineConfigLoader(path, environ={}).load()

    def test_bundled_example_config_is_valid(self):
        example = Path(__file__).resolve().parents[2] / "config" / "pipeline.yaml"
        config = PipelineConfigLoader(example, environ={}).load()

        assert config.header_synonyms["Item Code"] == "product_id"
