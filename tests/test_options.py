import dataclasses
import math
from datetime import timedelta
from pathlib import Path

import pytest

from servestatic.errors import ConfigurationError
from servestatic.options import (
	ONE_YEAR,
	Dotfiles,
	ServeConfig,
	maxAgeSeconds,
	parseDuration,
)


def test_defaults(tmp_path: Path):
	config = ServeConfig.Make(str(tmp_path))
	assert config.root == tmp_path.absolute()
	assert config.index == ("index.html",)
	assert config.extensions == ()
	assert config.dotfiles is Dotfiles.Ignore
	assert config.fallthrough and config.redirect
	assert config.acceptRanges and config.cacheControl
	assert config.etag and config.lastModified
	assert config.maxAge == 0
	assert not config.immutable
	assert config.setHeaders is None and config.rewrite is None


def test_relative_root_is_made_absolute():
	assert ServeConfig.Make("public").root.is_absolute()


def test_root_required():
	for root in (None, ""):
		with pytest.raises(ConfigurationError, match="root path required"):
			ServeConfig.Make(root)


def test_root_must_be_a_string():
	with pytest.raises(ConfigurationError, match="root path must be a string"):
		ServeConfig.Make(42)  # type: ignore[arg-type]


def test_set_headers_must_be_callable(tmp_path: Path):
	with pytest.raises(ConfigurationError, match="setHeaders option must be a function"):
		ServeConfig.Make(tmp_path, setHeaders="bogus")  # type: ignore[arg-type]


def test_rewrite_must_be_callable(tmp_path: Path):
	with pytest.raises(ConfigurationError):
		ServeConfig.Make(tmp_path, rewrite=1)  # type: ignore[arg-type]


def test_dotfiles(tmp_path: Path):
	assert ServeConfig.Make(tmp_path, dotfiles="allow").dotfiles is Dotfiles.Allow
	assert ServeConfig.Make(tmp_path, dotfiles=Dotfiles.Deny).dotfiles is Dotfiles.Deny
	with pytest.raises(ConfigurationError, match="dotfiles"):
		ServeConfig.Make(tmp_path, dotfiles="hide")


def test_extensions(tmp_path: Path):
	assert ServeConfig.Make(tmp_path, extensions="html").extensions == ("html",)
	assert ServeConfig.Make(tmp_path, extensions=[".html", "htm"]).extensions == (
		"html",
		"htm",
	)
	assert ServeConfig.Make(tmp_path, extensions=False).extensions == ()
	with pytest.raises(ConfigurationError):
		ServeConfig.Make(tmp_path, extensions=[1])  # type: ignore[list-item]


def test_index(tmp_path: Path):
	assert ServeConfig.Make(tmp_path, index=False).index == ()
	assert ServeConfig.Make(tmp_path, index=True).index == ("index.html",)
	assert ServeConfig.Make(tmp_path, index="default.htm").index == ("default.htm",)
	assert ServeConfig.Make(tmp_path, index=["a.html", "b.html"]).index == (
		"a.html",
		"b.html",
	)


def test_config_is_immutable(tmp_path: Path):
	config = ServeConfig.Make(tmp_path)
	with pytest.raises(dataclasses.FrozenInstanceError):
		config.maxAge = 10  # type: ignore[misc]


def test_parse_duration():
	assert parseDuration("500") == 500
	assert parseDuration("1s") == 1_000
	assert parseDuration("1h") == 3_600_000
	assert parseDuration("1.5h") == 5_400_000
	assert parseDuration("2 days") == 172_800_000
	assert parseDuration("30d") == 2_592_000_000
	for value in ("", "forever", "1 fortnight", "h"):
		with pytest.raises(ConfigurationError):
			parseDuration(value)


def test_max_age():
	assert maxAgeSeconds(None) == 0
	assert maxAgeSeconds(1_000) == 1
	assert maxAgeSeconds(1_999) == 1
	assert maxAgeSeconds(-5_000) == 0
	assert maxAgeSeconds("1h") == 3_600
	assert maxAgeSeconds("30d") == 2_592_000
	assert maxAgeSeconds(timedelta(hours=2)) == 7_200
	assert maxAgeSeconds(math.inf) == ONE_YEAR
	assert maxAgeSeconds("2y") == ONE_YEAR
	for value in (True, math.nan, "bogus", object()):
		with pytest.raises(ConfigurationError):
			maxAgeSeconds(value)


def test_max_age_option(tmp_path: Path):
	assert ServeConfig.Make(tmp_path, maxAge="30d").maxAge == 2_592_000
	with pytest.raises(ConfigurationError, match="maxAge"):
		ServeConfig.Make(tmp_path, maxAge="soon")


# EOF
