"""Unit tests for meta-schema compliance checks."""

import logging

from schemapack import build_json_schemas
from schemapack.schemas import check_schema_compliance


class TestSchemaCompliance:
    """Test check_schema_compliance."""

    def test_generated_documents_are_valid(self, models):
        """Test generated documents for each JSON Schema dialect."""
        for target in ["jsonSchema7", "jsonSchema2019-09", "jsonSchema2020-12"]:
            document = build_json_schemas(models, {"target": target}).schemas[0]

            assert check_schema_compliance(document) == []

    def test_root_strategy_is_valid(self, models):
        """Test documents that keep definitions."""
        document = build_json_schemas(models, {"$refStrategy": "root", "$id": "Api"}).schemas[0]

        assert check_schema_compliance(document) == []

    def test_invalid_document(self):
        """Test that meta-schema violations are reported."""
        errors = check_schema_compliance({"$id": "Broken", "type": 12})

        assert len(errors) == 1
        assert errors[0].startswith("Schema Broken is invalid")

    def test_errors_are_returned_not_logged_as_errors(self, caplog):
        """Test that callers own the reporting of compliance errors."""
        with caplog.at_level(logging.DEBUG):
            errors = check_schema_compliance({"$id": "Broken", "type": 12})

        assert errors
        assert not [record for record in caplog.records if record.levelno >= logging.WARNING]

    def test_document_without_dialect(self):
        """Test that documents without $schema are checked as Draft 7."""
        assert check_schema_compliance({"$id": "Plain", "type": "object"}) == []
