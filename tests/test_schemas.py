"""Tests for settings validation."""
import re

import pytest
from pydantic import ValidationError

from potr.schemas import FilterSettings, RunSettings, TranslatorSettings


def test_filter_defaults():
    f = FilterSettings()
    assert f.skip_translated and f.skip_code_blocks and f.skip_formula_blocks and f.skip_markdown_images
    assert not f.skip_text and not f.skip_translation
    assert f.message_limit == 0
    assert f.source_regex is None and f.include_regex is None and f.exclude_regex is None


def test_filter_regexes_are_compiled():
    f = FilterSettings(source_regex=r"e\.f", include_regex="^That", exclude_regex="")
    assert isinstance(f.source_regex, re.Pattern)
    assert f.include_regex.search("That is")
    assert f.exclude_regex is None


def test_invalid_regex_is_rejected():
    with pytest.raises(ValidationError, match="invalid regular expression"):
        FilterSettings(include_regex="(unclosed")


def test_negative_limit_is_rejected():
    with pytest.raises(ValidationError):
        FilterSettings(message_limit=-1)


def test_filters_are_frozen():
    f = FilterSettings()
    with pytest.raises(ValidationError):
        f.skip_text = True


def test_translator_engine_and_language_normalization():
    t = TranslatorSettings(engine="Azure_OpenAI", target_lang=" SV ")
    assert t.engine == "azure-openai"
    assert t.target_lang == "sv"


@pytest.mark.parametrize("kwargs", [{"engine": "google"}, {"target_lang": "xx"}, {"timeout_seconds": 0}])
def test_translator_rejects_bad_values(kwargs):
    with pytest.raises(ValidationError):
        TranslatorSettings(**kwargs)


def test_public_copy_redacts_key():
    t = TranslatorSettings(engine="openai", api_key="sk-secret")
    assert t.public_copy()["api_key"] == "******"
    assert TranslatorSettings(engine="clone").public_copy()["api_key"] == ""


def test_output_defaults_to_input():
    assert RunSettings(po_file_path="a.po").output_file_path == "a.po"
    assert RunSettings(po_file_path="a.po", output_file_path="b.po").output_file_path == "b.po"
