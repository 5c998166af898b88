import json

import pytest

from schema2dto.core.config import ConfigError, ConfigManager, GeneratorConfig, load_config, validate_config
from schema2dto.core.naming import NamingCase
from schema2dto.languages.python.naming import python_casing


def test_defaults():
    config = load_config()

    assert config.languages == ("java",)
    assert config.type_suffix == "Dto"
    assert config.root_namespace == ("generated", "model")
    assert config.add_validation


def test_overrides_and_unknown_keys_go_to_custom():
    config = load_config({"languages": ["kotlin", "go"], "go_module": "example.com/shop"})

    assert config.languages == ("kotlin", "go")
    assert config.custom["go_module"] == "example.com/shop"


def test_file_then_overrides(tmp_path):
    path = tmp_path / "schema2dto.json"
    path.write_text(
        json.dumps({"languages": ["python"], "root_package": "shop", "custom": {"a": 1}, "b": 2}),
        encoding="utf-8",
    )

    config = load_config({"root_package": "store", "custom": {"c": 3}}, path)

    assert config.languages == ("python",)
    assert config.root_package == "store"
    assert dict(config.custom) == {"a": 1, "b": 2, "c": 3}


@pytest.mark.parametrize(
    "name, content, message",
    [
        ("missing.json", None, "not found"),
        ("config.yaml", "languages: [java]", "must be JSON"),
        ("broken.json", "{", "Invalid JSON"),
        ("list.json", "[1, 2]", "JSON object"),
    ],
)
def test_bad_config_files(tmp_path, name, content, message):
    path = tmp_path / name
    if content is not None:
        path.write_text(content, encoding="utf-8")

    with pytest.raises(ConfigError, match=message):
        load_config(config_file=path)


def test_unknown_constructor_value_is_a_config_error():
    with pytest.raises(ConfigError):
        ConfigManager({"casing": "snake"}).get_config()


def test_save_and_reload(tmp_path):
    config = load_config({"languages": ["go"], "go_module": "example.com/shop", "casing": {"go": {"file_case": "kebab"}}})
    path = tmp_path / "saved.json"

    ConfigManager().save_config(config, path)

    assert load_config(config_file=path) == config


def test_config_is_immutable():
    config = GeneratorConfig()

    with pytest.raises(AttributeError):
        config.languages = ("go",)
    with pytest.raises(TypeError):
        config.custom["x"] = 1


def test_casing_for_applies_overrides():
    config = GeneratorConfig(
        root_package="com.shop", type_suffix="", casing={"python": {"field_case": "camel"}}
    )

    policy = config.casing_for("python", python_casing())

    assert policy.field_case is NamingCase.CAMEL_CASE
    assert policy.variant_case is NamingCase.SCREAMING_SNAKE
    assert policy.root_namespace == ("com", "shop")
    assert policy.type_suffix == ""
    assert "class" in policy.reserved_words


@pytest.mark.parametrize("casing", [{"python": {"color": "camel"}}, {"python": {"field_case": "shouting"}}])
def test_casing_for_rejects_bad_overrides(casing):
    with pytest.raises(ConfigError):
        GeneratorConfig(casing=casing).casing_for("python", python_casing())


def test_validate_config():
    config = GeneratorConfig(
        languages=("java", "cobol", "go"),
        root_package="com.1shop",
        type_suffix="-x",
        max_workers=0,
        casing={"java": {"field_case": "shouting"}},
    )

    warnings = validate_config(config, ["java", "go"])

    assert "Unknown language: cobol" in warnings
    assert "Invalid root package segment: 1shop" in warnings
    assert "Invalid type suffix: -x" in warnings
    assert "Invalid max_workers: 0" in warnings
    assert "Invalid field_case for java: shouting" in warnings
    assert any("go_module" in warning for warning in warnings)


def test_valid_config_has_no_warnings():
    assert validate_config(GeneratorConfig(), ["java"]) == []
