"""Unit tests for the schemapack CLI."""

import json

from typer.testing import CliRunner

from schemapack import __version__
from schemapack.cli import app


class TestBuildCommand:
    """Test the build command."""

    def test_build_to_stdout(self, model_module):
        """Test that the document list is printed as JSON."""
        runner = CliRunner()

        result = runner.invoke(app, ["build", f"{model_module}:MODELS"])

        assert result.exit_code == 0, result.output
        schemas = json.loads(result.stdout)
        assert len(schemas) == 1
        assert schemas[0]["$id"] == "Schema"
        assert schemas[0]["required"] == ["Item", "Cart"]

    def test_build_options(self, model_module):
        """Test that command-line options reach the builder."""
        runner = CliRunner()

        result = runner.invoke(app, [
            "build", f"{model_module}:MODELS",
            "--id", "Shop",
            "--ref-strategy", "root",
            "--target", "draft-2020-12",
        ])

        assert result.exit_code == 0, result.output
        document = json.loads(result.stdout)[0]
        assert document["$id"] == "Shop"
        assert document["$schema"] == "https://json-schema.org/draft/2020-12/schema"
        assert document["properties"]["Cart"]["$ref"] == "Shop#/definitions/Cart"

    def test_build_to_file(self, model_module, tmp_path):
        """Test writing the document to a file."""
        runner = CliRunner()
        out_file = tmp_path / "out" / "schemas.json"

        result = runner.invoke(app, ["build", f"{model_module}:MODELS", "--out", str(out_file), "--check"])

        assert result.exit_code == 0, result.output
        assert "Wrote schema" in result.output
        schemas = json.loads(out_file.read_text(encoding="utf-8"))
        assert schemas[0]["$id"] == "Schema"

    def test_config_file_and_override(self, model_module, tmp_path):
        """Test that the discovered config file applies and flags win."""
        (tmp_path / ".schemapack.json").write_text(json.dumps({
            "options": {"$id": "FromFile", "target": "openApi3"},
        }))
        runner = CliRunner()

        from_file = runner.invoke(app, ["build", f"{model_module}:MODELS"])
        overridden = runner.invoke(app, ["build", f"{model_module}:MODELS", "--id", "FromCli"])

        assert from_file.exit_code == 0, from_file.output
        document = json.loads(from_file.stdout)[0]
        assert document["$id"] == "FromFile"
        assert "$schema" not in document
        assert document["properties"]["Cart"]["properties"]["coupon"]["nullable"] is True

        assert overridden.exit_code == 0, overridden.output
        document = json.loads(overridden.stdout)[0]
        assert document["$id"] == "FromCli"
        assert "$schema" not in document

    def test_invalid_reference(self, model_module):
        """Test error reporting for malformed references."""
        runner = CliRunner()

        result = runner.invoke(app, ["build", "nocolon"])

        assert result.exit_code == 1
        assert "Error:" in result.output
        assert "Invalid model reference" in result.output

    def test_invalid_option(self, model_module):
        """Test error reporting for rejected options."""
        runner = CliRunner()

        result = runner.invoke(app, ["build", f"{model_module}:MODELS", "--ref-strategy", "bogus"])

        assert result.exit_code == 1
        assert "Error:" in result.output

    def test_invalid_config_file(self, model_module, tmp_path):
        """Test error reporting for a broken config file."""
        config_file = tmp_path / "broken.json"
        config_file.write_text("{not json")
        runner = CliRunner()

        result = runner.invoke(app, ["build", f"{model_module}:MODELS", "--config", str(config_file)])

        assert result.exit_code == 1
        assert "Invalid JSON" in result.output


class TestRefCommand:
    """Test the ref command."""

    def test_ref_output(self, model_module):
        """Test the printed $ref record."""
        runner = CliRunner()

        result = runner.invoke(app, ["ref", f"{model_module}:MODELS", "Cart", "--id", "Shop"])

        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout) == {"$ref": "Shop#/properties/Cart"}

    def test_ref_does_not_convert_models(self, model_module):
        """Test that ref works for models the converter cannot handle."""
        runner = CliRunner()

        result = runner.invoke(app, ["ref", f"{model_module}:UNCONVERTIBLE", "Opaque", "--id", "Raw"])

        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout) == {"$ref": "Raw#/properties/Opaque"}

    def test_build_reports_unconvertible_models(self, model_module):
        """Test that build fails cleanly on the same models."""
        runner = CliRunner()

        result = runner.invoke(app, ["build", f"{model_module}:UNCONVERTIBLE"])

        assert result.exit_code == 1
        assert "Error:" in result.output

    def test_ref_unknown_key(self, model_module):
        """Test that unknown keys are reported."""
        runner = CliRunner()

        result = runner.invoke(app, ["ref", f"{model_module}:MODELS", "Nope"])

        assert result.exit_code == 1
        assert "Unknown schema key" in result.output


class TestGlobalOptions:
    """Test app-level options."""

    def test_version(self):
        """Test --version output."""
        runner = CliRunner()

        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert f"schemapack version {__version__}" in result.output

    def test_help_lists_commands(self):
        """Test that both commands are registered."""
        runner = CliRunner()

        result = runner.invoke(app, ["--help"])

        assert result.exit_code == 0
        assert "build" in result.output
        assert "ref" in result.output
