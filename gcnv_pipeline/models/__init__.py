import enum
from enum import Enum
from inspect import isclass
from io import StringIO
import json
import typing

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic_core import PydanticUndefined
import ruamel
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from gcnv_pipeline.exceptions import InvalidConfiguration


def enum_options(enum: Enum) -> list[tuple[str, typing.Any]]:
    """Returns a list of tuples containing the name and value of each enum member."""
    return [(e.name, e.value) for e in enum]


def EnumField(enum: type[Enum], default: typing.Any = PydanticUndefined, *args, **kwargs):
    """
    An extension of pydantic's `Field` that adds 'options' to the json_schema_extra field,
    containing the available options of the specified enum.
    """
    extra = kwargs.get("json_schema_extra", {})
    extra.update(dict(options=enum_options(enum)))
    kwargs["json_schema_extra"] = extra
    return Field(default, *args, **kwargs)


class GcnvModel(BaseModel):
    """
    Base class for all configuration models.
    By default, extra fields are forbidden, attribute docstrings are used for field descriptions,
    enum member values instead of names are used, and default values are validated (because
    validation can potentially modify the values of fields with default values)
    """

    model_config = ConfigDict(
        extra="forbid",
        use_attribute_docstrings=True,
        use_enum_values=True,
        validate_default=True,
    )


INDENTATION = 2  # Indentation used for YAML


def _yaml_instance(typ: str = "rt"):
    yaml = YAML(typ=typ)
    yaml.indent(mapping=INDENTATION, sequence=INDENTATION * 2, offset=INDENTATION)
    return yaml


def _check_model_class(annotation, clazz: type = BaseModel) -> bool:
    """Checks whether the given annotation is a class and is a subclass of `clazz`"""
    try:
        return isclass(annotation) and issubclass(annotation, clazz)
    except TypeError:
        return False


def _annotate_model(
    config_model: type[BaseModel], comment_map: ruamel.yaml.CommentedMap, level: int = 0
):
    """Add field descriptions and enum options as comments to ``comment_map``"""
    for key, field in config_model.model_fields.items():
        options = (field.json_schema_extra or {}).get("options", [])
        if _check_model_class(field.annotation, enum.Enum):
            options = enum_options(field.annotation)
        if options:
            comment_map.yaml_add_eol_comment(
                "Options: " + ", ".join(repr(value) for _, value in options), key
            )
        if field.description:
            comment_map.yaml_set_comment_before_after_key(
                key, indent=INDENTATION * level, before="\n" + field.description
            )
        if _check_model_class(field.annotation):
            _annotate_model(field.annotation, comment_map[key], level=level + 1)


def dump_config(instance: GcnvModel) -> str:
    """Return YAML representation of ``instance`` with field descriptions as comments"""
    yaml = _yaml_instance()
    with StringIO() as s:
        yaml.dump(json.loads(instance.model_dump_json()), stream=s)
        cfg = yaml.load(s.getvalue())
    _annotate_model(type(instance), cfg)
    with StringIO() as out:
        yaml.dump(cfg, stream=out)
        return out.getvalue()


def load_config[M: GcnvModel](path: str, model: type[M]) -> M:
    """Load YAML file at ``path`` into ``model``, raising ``InvalidConfiguration`` on errors"""
    try:
        with open(path, "rt") as inputf:
            data = _yaml_instance("safe").load(inputf) or {}
    except (OSError, YAMLError) as e:
        raise InvalidConfiguration(f"Could not read configuration file {path}: {e}") from e
    try:
        return model(**data)
    except ValidationError as e:
        raise InvalidConfiguration(f"Invalid configuration in {path}:\n{e}") from e
    except TypeError as e:
        raise InvalidConfiguration(f"Configuration in {path} must be a mapping") from e
