import pytest

from mailru_cloud.core.paths import entry_name, normalize_path, parent_of, with_extension_of

SAMPLE_PATHS = [
    "",
    "/",
    "//",
    "\\",
    "docs",
    "/docs",
    "docs/",
    "/docs/report.docx",
    "docs//sub///file.txt",
    "\\docs\\sub\\file.txt",
    "/docs\\/sub/\\\\",
    "  spaced name/inner",
]


@pytest.mark.parametrize("path", SAMPLE_PATHS)
def test_normalize_path_is_idempotent(path: str) -> None:
    once = normalize_path(path)

    assert normalize_path(once) == once


@pytest.mark.parametrize("path", SAMPLE_PATHS)
@pytest.mark.parametrize("leading", [True, False])
@pytest.mark.parametrize("trailing", [True, False])
def test_normalize_path_is_idempotent_for_any_flags(path: str, leading: bool, trailing: bool) -> None:
    once = normalize_path(path, leading, trailing)

    assert normalize_path(once, leading, trailing) == once


@pytest.mark.parametrize("path", SAMPLE_PATHS)
def test_normalize_path_has_exactly_one_leading_and_trailing_slash(path: str) -> None:
    result = normalize_path(path)

    assert result.startswith("/")
    assert result.endswith("/")
    assert not result.startswith("//")
    assert not result.endswith("//")
    assert "\\" not in result


def test_normalize_path_collapses_mixed_separators() -> None:
    assert normalize_path("a\\\\b//c\\/d") == "/a/b/c/d/"


def test_normalize_path_respects_flags() -> None:
    assert normalize_path("/docs/file.txt/", trailing_slash=False) == "/docs/file.txt"
    assert normalize_path("docs/", leading_slash=False) == "docs/"
    assert normalize_path("/docs/a/", leading_slash=False, trailing_slash=False) == "docs/a"


def test_normalize_path_treats_none_as_root() -> None:
    assert normalize_path(None) == "/"
    assert normalize_path(None, trailing_slash=False) == "/"
    assert normalize_path(None, leading_slash=False, trailing_slash=False) == ""


@pytest.mark.parametrize(
    "path",
    ["/docs", "/docs/sub/file.txt", "docs\\sub", "/a/b/c/", "name"],
)
def test_parent_of_normalized_path_is_normalized_ancestor(path: str) -> None:
    normalized = normalize_path(path)

    parent = parent_of(normalized)

    assert parent.endswith("/")
    assert normalize_path(parent) == parent
    assert normalized.startswith(parent)
    assert len(parent) < len(normalized)


def test_parent_of_examples() -> None:
    assert parent_of("/docs/report.docx") == "/docs/"
    assert parent_of("/docs/sub/") == "/docs/"
    assert parent_of("/docs") == "/"


def test_parent_of_root_is_empty() -> None:
    assert parent_of("/") == ""
    assert parent_of("name") == ""


def test_entry_name_ignores_trailing_slash() -> None:
    assert entry_name("/docs/report.docx") == "report.docx"
    assert entry_name("/docs/sub/") == "sub"
    assert entry_name("/") == ""


def test_with_extension_of_appends_missing_extension() -> None:
    assert with_extension_of("summary", "report.docx") == "summary.docx"


def test_with_extension_of_keeps_existing_extension_case_insensitively() -> None:
    assert with_extension_of("summary.DOCX", "report.docx") == "summary.DOCX"


def test_with_extension_of_without_original_extension() -> None:
    assert with_extension_of("summary", "Makefile") == "summary"
