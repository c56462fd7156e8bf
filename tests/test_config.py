import pathlib

import pydantic
import pytest

from depeval.config import load_config
from depeval.vocab import LAS_FIELDS, UD_DEPRELS


def test_defaults():
    config = load_config()
    assert not config.include_punct
    assert config.simplify_relation
    assert config.las_fields == list(LAS_FIELDS)
    assert config.relations == list(UD_DEPRELS)


def test_yaml_config(tmp_path: pathlib.Path):
    config_path = tmp_path / "eval.yaml"
    config_path.write_text(
        "include_punct: true\nlas_fields: [head, deprel, upostag]\nrelations: [nsubj, obj]\n"
    )
    config = load_config(config_path)
    assert config.include_punct
    assert config.las_fields == ["head", "deprel", "upostag"]
    assert config.relations == ["nsubj", "obj"]
    # Command line overrides win, unset ones are ignored
    config = load_config(config_path, include_punct=False, simplify_relation=None)
    assert not config.include_punct
    assert config.simplify_relation


def test_empty_yaml_config(tmp_path: pathlib.Path):
    config_path = tmp_path / "eval.yaml"
    config_path.write_text("")
    assert load_config(config_path) == load_config()


def test_invalid_fields():
    with pytest.raises(pydantic.ValidationError):
        load_config(uas_fields=["heads"])
    with pytest.raises(pydantic.ValidationError):
        load_config(las_fields=[])
