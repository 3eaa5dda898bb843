import pytest

from app.models.schemas import InsertionType
from app.services.code_manipulation.code_insertion import CodeInsertionService
from app.services.code_manipulation.feature_files import FeatureFilesManipulationService

NEW_SCENARIO = "@TC-2\nScenario: C"


@pytest.fixture
def service():
    return FeatureFilesManipulationService()


@pytest.fixture
def write_feature(tmp_path):
    def _write(content):
        path = tmp_path / "product.feature"
        path.write_text(content, encoding="utf-8")
        return path
    return _write


def test_appends_after_body_of_last_scenario(service, write_feature):
    path = write_feature("Scenario: A\n  Given x\n\nScenario: B\n  Given y\n")

    insertion = service.analyze_feature_file(str(path), NEW_SCENARIO, "gen-1")

    # "Given y" is line 5; its trailing blank line is line 6
    assert insertion.line == 6
    assert insertion.content == "\n" + NEW_SCENARIO
    assert insertion.type is InsertionType.SCENARIO
    assert insertion.file == str(path)
    assert insertion.description == "Insert new scenario after the last existing one"


def test_last_scenario_running_to_end_of_file(service, write_feature):
    path = write_feature("Feature: Catalog\n\nScenario: A\n  Given x\n  Then y")

    insertion = service.analyze_feature_file(str(path), NEW_SCENARIO, "gen-1")

    assert insertion.line == 6


def test_scenario_outline_is_not_a_scenario_header(service, write_feature):
    path = write_feature("Feature: F\n\nScenario: A\n  Given x\n\nScenario Outline: B\n  Given <y>\n")

    insertion = service.analyze_feature_file(str(path), NEW_SCENARIO, "gen-1")

    assert insertion.line == 5


def test_inserts_after_background_when_no_scenarios(service, write_feature):
    path = write_feature("Feature: F\n\nBackground:\n  Given base\n  And more\n\n")

    insertion = service.analyze_feature_file(str(path), NEW_SCENARIO, "gen-1")

    assert insertion.line == 6


def test_end_of_file_without_scenarios_or_background(service, write_feature):
    path = write_feature("Feature: F\n")

    insertion = service.analyze_feature_file(str(path), NEW_SCENARIO, "gen-1")

    assert insertion.line == 3


def test_missing_file_returns_none(service, tmp_path):
    assert service.analyze_feature_file(str(tmp_path / "missing.feature"), NEW_SCENARIO, "gen-1") is None


def test_existing_tag_is_not_inserted(service, write_feature):
    path = write_feature("Feature: F\n\n  @TC-2\n  Scenario: C\n    Given x\n")

    assert service.analyze_feature_file(str(path), NEW_SCENARIO, "gen-1") is None


def test_code_without_tag_is_always_inserted(service, write_feature):
    path = write_feature("Feature: F\n\nScenario: C\n  Given x\n")

    insertion = service.analyze_feature_file(str(path), "Scenario: C", "gen-1")

    assert insertion is not None


def test_insert_is_idempotent_by_tag(service, write_feature):
    path = write_feature("Feature: Catalog\n\nScenario: A\n  Given x\n")

    first = service.analyze_feature_file(str(path), "@TC-7\nScenario: Delete\n  Given y", "gen-1")
    result = CodeInsertionService().insert_code([first], "gen-1")
    second = service.analyze_feature_file(str(path), "@TC-7\nScenario: Delete\n  Given y", "gen-2")

    assert result.success
    assert second is None
    assert path.read_text(encoding="utf-8") == (
        "Feature: Catalog\n\nScenario: A\n  Given x\n\n@TC-7\nScenario: Delete\n  Given y\n"
    )


class TestFeatureHelpers:
    CONTENT = "Feature: Catalog\n\nBackground:\n  Given base\n\nScenario: List products\n  Given x\n\nScenario: Delete product\n  Given y\n"

    def test_find_all_scenarios(self, service, write_feature):
        path = write_feature(self.CONTENT)

        scenarios = service.find_all_scenarios(str(path))

        assert [(s.line, s.name) for s in scenarios] == [(6, "List products"), (9, "Delete product")]

    def test_find_background(self, service, write_feature):
        path = write_feature(self.CONTENT)

        background = service.find_background(str(path))

        assert background.line == 3
        assert background.content == "Background:"

    def test_scenario_exists(self, service, write_feature):
        path = write_feature(self.CONTENT)

        assert service.scenario_exists(str(path), "Delete product")
        assert not service.scenario_exists(str(path), "Update product")

    def test_valid_structure(self, service, write_feature):
        path = write_feature(self.CONTENT)

        assert service.validate_feature_structure(str(path)).is_valid

    def test_invalid_structure(self, service, write_feature, tmp_path):
        path = write_feature("Background:\n  Given base\n")

        result = service.validate_feature_structure(str(path))
        missing = service.validate_feature_structure(str(tmp_path / "missing.feature"))

        assert result.errors == ["Feature declaration not found", "No scenarios found"]
        assert missing.errors == ["File does not exist"]

    def test_missing_file_helpers(self, service, tmp_path):
        missing = str(tmp_path / "missing.feature")

        assert service.find_all_scenarios(missing) == []
        assert service.find_background(missing) is None
        assert service.get_feature_content(missing) is None
        assert not service.scenario_exists(missing, "x")

    def test_write_feature_content(self, service, tmp_path):
        path = str(tmp_path / "new.feature")

        service.write_feature_content(path, "Feature: New\n")

        assert service.get_feature_content(path) == "Feature: New\n"


def test_undecodable_file_returns_none(service, tmp_path):
    path = tmp_path / "broken.feature"
    path.write_bytes(b"Feature: P\n\xff\xfe\nScenario: A\n")

    assert service.analyze_feature_file(str(path), "@TC-1\nScenario: B", "gen-1") is None
