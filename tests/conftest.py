from pathlib import Path

import pytest

# The files served in tests, relative to the root
FIXTURES: dict[str, str] = {
	"todo.txt": "- groceries",
	"todo.html": "<li>groceries</li>",
	"users/index.html": "<p>tobi, loki, jane</p>",
	"users/tobi.txt": "ferret",
	"foo bar": "baz",
	"empty.txt": "",
	".hidden": "I am hidden",
	".mine/name.txt": "tobi",
	"nums": "123456789",
	"snow ☃/index.html": "snow",
}


@pytest.fixture
def root(tmp_path: Path) -> Path:
	"""A directory with the fixture files, next to a file that must never
	be served."""
	(tmp_path / "secret.txt").write_text("top secret", encoding="utf8")
	res = tmp_path / "public"
	for name, content in FIXTURES.items():
		path = res / name
		path.parent.mkdir(parents=True, exist_ok=True)
		path.write_text(content, encoding="utf8")
	# A directory without an index
	(res / "pets").mkdir()
	return res


# EOF
