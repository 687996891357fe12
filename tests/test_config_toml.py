import importlib
import os
import sys
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from template_translate import ParserConfig


def test_config_from_toml(tmp_path, monkeypatch):
    cfg = tmp_path / "conf.toml"
    cfg.write_text("""
ATTRIBUTE_PATTERN = "i18n-*"
TEMPLATE_LANGUAGE = "angular"
HASH_LENGTH = 12
LOG_LEVEL = "DEBUG"
""")
    monkeypatch.setenv("TEMPLATE_TRANSLATE_CONFIG", str(cfg))
    import config
    importlib.reload(config)
    try:
        assert config.HASH_LENGTH == 12
        assert config.TEMPLATE_LANGUAGE == "angular"
        assert config.LOG_LEVEL == "DEBUG"
        assert config.ATTRIBUTE_NAME == "translate"
        parser_config = ParserConfig.from_config()
        assert parser_config.hash_length == 12
        assert parser_config.attribute_pattern.get_target_name("i18n-title") == "title"
    finally:
        monkeypatch.delenv("TEMPLATE_TRANSLATE_CONFIG")
        importlib.reload(config)
    assert config.HASH_LENGTH == 9
