from pathlib import Path

import pytest

from field_quality_monitor.domain.errors import ConfigurationError, DuplicateRule
from field_quality_monitor.infrastructure.config import EngineConfig, build_catalog
from field_quality_monitor.infrastructure.constants import RULES_PATH


def write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "rules.toml"
    path.write_text(text, encoding="utf-8")
    return path


def test_bundled_rules_load():
    config = EngineConfig.load(RULES_PATH)

    assert config.engine.max_workers == 4
    assert config.logging.level == "INFO"
    assert config.output.format == "log"
    assert [f.name for f in config.fields] == ["a", "b"]

    catalog = build_catalog(config)
    assert [(r.field, r.test_name) for r in catalog.all_rules()] == [
        ("a", "is_missing"),
        ("a", "is_not_between_3_and_5"),
        ("b", "is_negative"),
        ("b", "is_missing_when_a_is_present"),
    ]
    assert catalog.get("b", "is_missing_when_a_is_present").depends_on == frozenset({"a"})


def test_defaults_and_relative_output_path(tmp_path):
    path = write(
        tmp_path,
        """
[output]
format = "jsonl"
path = "out/results.jsonl"

[[fields]]
name = "price"

  [[fields.tests]]
  name = "in_range"
  check = "between"
  min = 0
  max = 100
  depends_on = ["currency"]
""",
    )
    config = EngineConfig.load(path)

    assert config.engine.max_workers == 1
    assert config.output.path == tmp_path / "out" / "results.jsonl"
    spec = config.fields[0].tests[0]
    assert spec.params == {"min": 0, "max": 100}
    assert spec.depends_on == ("currency",)
    assert build_catalog(config).get("price", "in_range").depends_on == frozenset({"currency"})


@pytest.mark.parametrize(
    "text",
    [
        "[engine]\nmax_workers = 0\n",
        "[engine]\nthreads = 2\n",
        "[output]\nformat = \"xml\"\n",
        "[output]\nformat = \"csv\"\ncolor = true\n",
        "[[fields]]\n[[fields.tests]]\nname = \"x\"\ncheck = \"negative\"\n",
        "[[fields]]\nname = \"a\"\n[[fields.tests]]\nname = \"x\"\n",
        "not toml at all [",
    ],
)
def test_invalid_config(tmp_path, text):
    with pytest.raises(ConfigurationError):
        EngineConfig.load(write(tmp_path, text))


def test_missing_config_file(tmp_path):
    with pytest.raises(ConfigurationError):
        EngineConfig.load(tmp_path / "absent.toml")


def test_unknown_check_and_duplicate_tests(tmp_path):
    unknown = EngineConfig.load(
        write(tmp_path, "[[fields]]\nname = \"a\"\n[[fields.tests]]\nname = \"x\"\ncheck = \"nope\"\n")
    )
    with pytest.raises(ConfigurationError):
        build_catalog(unknown)

    duplicated = EngineConfig.load(
        write(
            tmp_path,
            "[[fields]]\nname = \"a\"\n"
            "[[fields.tests]]\nname = \"x\"\ncheck = \"negative\"\n"
            "[[fields.tests]]\nname = \"x\"\ncheck = \"unique\"\n",
        )
    )
    with pytest.raises(DuplicateRule):
        build_catalog(duplicated)


def test_single_dependency_may_be_a_plain_string(tmp_path):
    config = EngineConfig.load(
        write(
            tmp_path,
            "[[fields]]\nname = \"price\"\n"
            "[[fields.tests]]\nname = \"positive\"\ncheck = \"negative\"\ndepends_on = \"currency\"\n",
        )
    )

    assert config.fields[0].tests[0].depends_on == ("currency",)
    assert build_catalog(config).get("price", "positive").depends_on == frozenset({"currency"})


def test_dependency_of_wrong_type_is_rejected(tmp_path):
    with pytest.raises(ConfigurationError):
        EngineConfig.load(
            write(
                tmp_path,
                "[[fields]]\nname = \"price\"\n"
                "[[fields.tests]]\nname = \"positive\"\ncheck = \"negative\"\ndepends_on = 3\n",
            )
        )
