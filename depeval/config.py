import pathlib
from typing import List, Optional

import pydantic
import yaml
from loguru import logger

from depeval.vocab import FIELDS, LAS_FIELDS, UAS_FIELDS, UD_DEPRELS


class EvaluationConfig(pydantic.BaseModel):
    include_punct: bool = False
    simplify_relation: bool = True
    uas_fields: List[str] = pydantic.Field(default_factory=lambda: list(UAS_FIELDS))
    las_fields: List[str] = pydantic.Field(default_factory=lambda: list(LAS_FIELDS))
    relations: List[str] = pydantic.Field(default_factory=lambda: list(UD_DEPRELS))

    @pydantic.field_validator("uas_fields", "las_fields")
    @classmethod
    def check_fields(cls, fields: List[str]) -> List[str]:
        if not fields:
            raise ValueError("Field sets can't be empty")
        if unknown := [f for f in fields if f not in FIELDS]:
            raise ValueError(f"Unknown fields {unknown}, expected some of {list(FIELDS)}")
        return fields


def load_config(config_path: Optional[pathlib.Path] = None, **overrides) -> EvaluationConfig:
    """Load a YAML evaluation config, with `overrides` (typically from the command line) taking
    precedence. Overrides set to `None` are ignored."""
    if config_path is None:
        config = dict()
    else:
        logger.info(f"Loading evaluation config from {config_path}")
        with open(config_path) as in_stream:
            config = yaml.load(in_stream, Loader=yaml.SafeLoader) or dict()
    config.update({k: v for k, v in overrides.items() if v is not None})
    return EvaluationConfig.model_validate(config)
