from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict

import tomli

from field_quality_monitor.application.services.catalog import RuleCatalog
from field_quality_monitor.domain.errors import ConfigurationError
from field_quality_monitor.infrastructure.rules.checks import build_check

OUTPUT_FORMATS = ("log", "jsonl", "csv")


@dataclass(slots=True)
class EngineSettings:
    max_workers: int = 1


@dataclass(slots=True)
class LoggingConfig:
    level: str = "INFO"


@dataclass(slots=True)
class OutputConfig:
    format: str = "log"
    path: Path | None = None


@dataclass(slots=True)
class CheckSpec:
    name: str
    check: str
    params: Dict[str, Any] = field(default_factory=dict)
    depends_on: tuple[str, ...] = ()


@dataclass(slots=True)
class FieldSpec:
    name: str
    tests: tuple[CheckSpec, ...]


@dataclass(slots=True)
class EngineConfig:
    engine: EngineSettings
    logging: LoggingConfig
    output: OutputConfig
    fields: tuple[FieldSpec, ...]

    @classmethod
    def load(cls, path: Path) -> "EngineConfig":
        try:
            with path.open("rb") as f:
                raw = tomli.load(f)
        except FileNotFoundError as exc:
            raise ConfigurationError(f"config file {path} not found") from exc
        except tomli.TOMLDecodeError as exc:
            raise ConfigurationError(f"config file {path} is not valid TOML: {exc}") from exc
        return cls.from_dict(raw, base_dir=path.parent)

    @classmethod
    def from_dict(cls, raw: Dict[str, Any], base_dir: Path | None = None) -> "EngineConfig":
        try:
            engine = EngineSettings(**raw.get("engine", {}))
            logging = LoggingConfig(**raw.get("logging", {}))
            output_raw = dict(raw.get("output", {}))
        except TypeError as exc:
            raise ConfigurationError(f"unexpected config key: {exc}") from exc

        if not isinstance(engine.max_workers, int) or engine.max_workers < 1:
            raise ConfigurationError("engine.max_workers must be a positive integer")

        output_format = output_raw.pop("format", "log")
        if output_format not in OUTPUT_FORMATS:
            raise ConfigurationError(
                f"output.format must be one of {OUTPUT_FORMATS}, got {output_format!r}"
            )
        output_path = output_raw.pop("path", None)
        if output_raw:
            raise ConfigurationError(f"unexpected output keys {sorted(output_raw)}")
        if output_path is not None:
            output_path = Path(output_path)
            if base_dir is not None and not output_path.is_absolute():
                output_path = base_dir / output_path

        fields = []
        for field_data in raw.get("fields", []):
            if "name" not in field_data:
                raise ConfigurationError("every [[fields]] entry needs a name")
            tests = []
            for test_data in field_data.get("tests", []):
                test_data = dict(test_data)
                try:
                    name = test_data.pop("name")
                    check = test_data.pop("check")
                except KeyError as exc:
                    raise ConfigurationError(
                        f"test on field '{field_data['name']}' is missing {exc}"
                    ) from exc
                depends_on = test_data.pop("depends_on", ())
                if isinstance(depends_on, str):
                    depends_on = (depends_on,)
                elif not isinstance(depends_on, (list, tuple)):
                    raise ConfigurationError(
                        f"depends_on of test '{name}' must be a field name or a list of them"
                    )
                depends_on = tuple(depends_on)
                tests.append(CheckSpec(name=name, check=check, params=test_data, depends_on=depends_on))
            fields.append(FieldSpec(name=field_data["name"], tests=tuple(tests)))

        return cls(
            engine=engine,
            logging=logging,
            output=OutputConfig(format=output_format, path=output_path),
            fields=tuple(fields),
        )


def build_catalog(config: EngineConfig, catalog: RuleCatalog | None = None) -> RuleCatalog:
    catalog = catalog if catalog is not None else RuleCatalog()
    for field_spec in config.fields:
        for test in field_spec.tests:
            logic, inferred = build_check(test.check, test.params)
            catalog.register(
                field_spec.name,
                test.name,
                logic,
                depends_on=tuple(dict.fromkeys((*test.depends_on, *inferred))),
            )
    return catalog
