"""
Unit tests for TransferConfig.
"""

import math
import os

import pytest

from httpsend.config import (
    DEFAULT_CHUNK_SIZE,
    INFINITE,
    ONE_YEAR_MS,
    TransferConfig,
    parse_max_age,
)


class TestTransferConfig:

    def test_defaults(self):
        config = TransferConfig()

        assert config.root is None
        assert config.hidden is False
        assert config.index == "index.html"
        assert config.max_age == 0
        assert config.chunk_size == DEFAULT_CHUNK_SIZE

    def test_max_age_seconds_floors(self):
        assert TransferConfig(max_age=1999).max_age_seconds == 1
        assert TransferConfig(max_age=999).max_age_seconds == 0


class TestValidate:

    def test_missing_root(self, tmp_path):
        with pytest.raises(ValueError, match="does not exist"):
            TransferConfig(root=str(tmp_path / "nope")).validate()

    def test_root_is_a_file(self, docroot):
        with pytest.raises(ValueError):
            TransferConfig(root=str(docroot / "ten.txt")).validate()

    def test_empty_root(self):
        with pytest.raises(ValueError):
            TransferConfig(root="").validate()

    def test_index_with_separator(self):
        with pytest.raises(ValueError, match="bare filename"):
            TransferConfig(index="sub/index.html").validate()

    @pytest.mark.parametrize("max_age", [-1, math.nan])
    def test_bad_max_age(self, max_age):
        with pytest.raises(ValueError, match="max_age"):
            TransferConfig(max_age=max_age).validate()

    def test_bad_chunk_size(self):
        with pytest.raises(ValueError, match="chunk_size"):
            TransferConfig(chunk_size=0).validate()

    def test_valid(self, docroot):
        TransferConfig(root=str(docroot), index=None, max_age=INFINITE).validate()


class TestResolved:

    def test_root_made_absolute(self, docroot, monkeypatch):
        monkeypatch.chdir(docroot)
        config = TransferConfig(root="docs/../docs").resolved()

        assert config.root == os.path.join(os.path.abspath(str(docroot)), "docs")

    @pytest.mark.parametrize("index", [None, "", False])
    def test_disabled_index(self, index):
        assert TransferConfig(index=index).resolved().index is None

    def test_infinite_max_age(self):
        config = TransferConfig(max_age=INFINITE).resolved()

        assert config.max_age == ONE_YEAR_MS
        assert config.max_age_seconds == 31536000

    def test_original_untouched(self, docroot):
        original = TransferConfig(root=str(docroot), max_age=INFINITE)
        original.resolved()

        assert original.max_age == INFINITE


class TestFromEnv:

    def test_defaults(self, clean_env):
        config = TransferConfig.from_env()

        assert config == TransferConfig()

    def test_all_variables(self, clean_env, docroot):
        clean_env.setenv("HTTPSEND_ROOT", str(docroot))
        clean_env.setenv("HTTPSEND_HIDDEN", "true")
        clean_env.setenv("HTTPSEND_INDEX", "default.htm")
        clean_env.setenv("HTTPSEND_MAX_AGE", "infinite")
        clean_env.setenv("HTTPSEND_CHUNK_SIZE", "1024")

        config = TransferConfig.from_env()

        assert config.root == str(docroot)
        assert config.hidden is True
        assert config.index == "default.htm"
        assert config.max_age == INFINITE
        assert config.chunk_size == 1024

    def test_empty_index_disables(self, clean_env):
        clean_env.setenv("HTTPSEND_INDEX", "")

        assert TransferConfig.from_env().index is None


class TestParseMaxAge:

    @pytest.mark.parametrize("value", ["infinite", "Infinity", " inf ", INFINITE])
    def test_infinite(self, value):
        assert parse_max_age(value) == INFINITE

    def test_number(self):
        assert parse_max_age("5000") == 5000.0
        assert parse_max_age(250) == 250.0

    def test_garbage(self):
        with pytest.raises(ValueError):
            parse_max_age("soon")
