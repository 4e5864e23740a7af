"""
Tests for SearchService: ripgrep output parsing, the manual fallback,
docs scoping and example discovery.
"""

from unittest.mock import MagicMock

import pytest

from aztecmirror.domain import FileCategory
from aztecmirror.infra.search_client import RipgrepClient, SearchToolError
from aztecmirror.services.search_service import SearchService, expand_braces, compile_query

from conftest import write_file


@pytest.fixture
def rg():
    return MagicMock(spec=RipgrepClient)


@pytest.fixture
def broken_rg(rg):
    rg.search.side_effect = SearchToolError("rg not found")
    return rg


@pytest.fixture
def mirror(settings):
    """A small mirror tree with contracts, docs and noise directories."""
    root = settings.repos_dir
    write_file(root, "aztec-examples/token/src/main.nr", "contract Token {\n    fn transfer() {}\n}\n")
    write_file(root, "aztec-examples/token_bridge/src/main.nr", "contract TokenBridge {\n    fn claim() {}\n}\n")
    write_file(root, "aztec-examples/node_modules/dep/src/main.nr", "fn transfer() {}\n")
    write_file(root, "aztec-packages/noir-projects/noir-contracts/contracts/escrow_contract/src/main.nr",
               "contract Escrow {\n    fn withdraw() {}\n}\n")
    write_file(root, "aztec-packages/docs/docs/tutorials/first.md", "# Write your first contract\nUse PrivateSet here\n")
    write_file(root, "aztec-packages/docs/docs/concepts/notes.mdx", "Notes and PrivateSet\n")
    write_file(root, "aztec-packages/yarn-project/app.ts", "const privateset = 1;\n")
    write_file(root, "aztec-packages/.git/config.nr", "fn transfer() {}\n")
    return root


class TestHelpers:

    def test_expand_braces(self):
        assert expand_braces("*.{md,mdx}") == ["*.md", "*.mdx"]
        assert expand_braces("*.nr") == ["*.nr"]
        assert expand_braces("{a,b}.{x,y}") == ["a.x", "a.y", "b.x", "b.y"]

    def test_invalid_regex_compiles_literally(self):
        pattern = compile_query("foo(bar")
        assert pattern.search("call foo(bar)")
        assert not pattern.search("foobar")


class TestRipgrepPath:

    def test_parses_output_relative_to_root(self, settings, rg):
        root = settings.repos_dir
        root.mkdir(parents=True)
        rg.search.return_value = (
            f"{root}/aztec-examples/token/src/main.nr:2:    fn transfer() {{}}\n"
            f"{root}/noir/noir_stdlib/src/lib.nr:10:pub fn transfer()\n"
            "garbage line\n"
        )
        service = SearchService(settings, search_client=rg)

        results = service.search_code("transfer")

        assert [r.file for r in results] == [
            "aztec-examples/token/src/main.nr",
            "noir/noir_stdlib/src/lib.nr",
        ]
        assert results[0].line == 2
        assert results[0].content == "fn transfer() {}"
        assert results[0].repo == "aztec-examples"
        assert results[1].repo == "noir"

    def test_over_fetches_and_caps(self, settings, rg):
        root = settings.repos_dir
        root.mkdir(parents=True)
        rg.search.return_value = "".join(f"{root}/a/x.nr:{i}:hit\n" for i in range(1, 20))
        service = SearchService(settings, search_client=rg)

        results = service.search_code("hit", max_results=5)

        assert len(results) == 5
        assert rg.search.call_args[1]['max_count'] == 10

    def test_repo_scopes_search_path(self, settings, rg, mirror):
        rg.search.return_value = ""
        service = SearchService(settings, search_client=rg)

        assert service.search_code("x", repo="aztec-examples") == []
        assert rg.search.call_args[0][1] == str(mirror / "aztec-examples")

    def test_missing_scope_returns_empty(self, settings, rg):
        service = SearchService(settings, search_client=rg)

        assert service.search_code("x", repo="missing") == []
        rg.search.assert_not_called()


class TestManualFallback:

    def test_fallback_finds_matches(self, settings, broken_rg, mirror):
        service = SearchService(settings, search_client=broken_rg)

        results = service.search_code("fn transfer")

        assert [r.file for r in results] == ["aztec-examples/token/src/main.nr"]
        assert results[0].line == 2

    def test_fallback_skips_vcs_and_dependencies(self, settings, broken_rg, mirror):
        service = SearchService(settings, search_client=broken_rg)

        files = {r.file for r in service.search_code("transfer", max_results=50)}

        assert not any("node_modules" in f or "/.git/" in f for f in files)

    def test_fallback_is_case_insensitive(self, settings, broken_rg, mirror):
        service = SearchService(settings, search_client=broken_rg)

        results = service.search_code("PRIVATESET", file_pattern="*.ts")

        assert [r.file for r in results] == ["aztec-packages/yarn-project/app.ts"]

    def test_fallback_with_invalid_regex(self, settings, broken_rg):
        write_file(settings.repos_dir, "r/a.nr", "let x = foo(bar;\n")
        service = SearchService(settings, search_client=broken_rg)

        results = service.search_code("foo(bar")

        assert len(results) == 1
        assert results[0].content == "let x = foo(bar;"

    def test_fallback_respects_cap(self, settings, broken_rg):
        write_file(settings.repos_dir, "r/a.nr", "hit\n" * 10)
        write_file(settings.repos_dir, "r/b.nr", "hit\n" * 10)
        service = SearchService(settings, search_client=broken_rg)

        assert len(service.search_code("hit", max_results=3)) == 3

    def test_fallback_skips_unreadable_files(self, settings, broken_rg):
        root = settings.repos_dir
        (root / "r").mkdir(parents=True)
        (root / "r" / "binary.nr").write_bytes(b"\xff\xfe\x00hit")
        write_file(root, "r/text.nr", "hit\n")
        service = SearchService(settings, search_client=broken_rg)

        assert [r.file for r in service.search_code("hit")] == ["r/text.nr"]

    def test_nul_byte_query_falls_back_instead_of_raising(self, settings):
        write_file(settings.repos_dir, "r/a.nr", "fn main() {}\n")
        service = SearchService(settings, search_client=RipgrepClient())

        assert service.search_code("fn\x00main") == []

    def test_brace_pattern(self, settings, broken_rg, mirror):
        service = SearchService(settings, search_client=broken_rg)

        files = {r.file for r in service.search_code("PrivateSet", file_pattern="*.{md,mdx}")}

        assert files == {
            "aztec-packages/docs/docs/tutorials/first.md",
            "aztec-packages/docs/docs/concepts/notes.mdx",
        }


class TestSearchDocs:

    def test_section_narrows_scope(self, settings, broken_rg, mirror):
        service = SearchService(settings, search_client=broken_rg)

        results = service.search_docs("PrivateSet", section="tutorials")

        assert [r.file for r in results] == ["aztec-packages/docs/docs/tutorials/first.md"]

    def test_unknown_section_searches_whole_monorepo(self, settings, broken_rg, mirror):
        service = SearchService(settings, search_client=broken_rg)

        results = service.search_docs("PrivateSet", section="nope")

        assert len(results) == 2

    def test_uses_markdown_glob(self, settings, rg, mirror):
        rg.search.return_value = ""
        service = SearchService(settings, search_client=rg)

        service.search_docs("x")

        assert rg.search.call_args[1]['glob'] == "*.{md,mdx}"
        assert rg.search.call_args[0][1] == str(mirror / "aztec-packages")


class TestExamples:

    def test_list_examples(self, settings, rg, mirror):
        service = SearchService(settings, search_client=rg)

        examples = service.list_examples()

        assert [e.name for e in examples] == ["token", "token_bridge", "escrow_contract"]
        assert examples[0].repo == "aztec-examples"
        assert examples[0].path == "aztec-examples/token/src/main.nr"
        assert examples[2].repo == "aztec-packages"
        assert all(e.category == FileCategory.CONTRACT for e in examples)

    def test_category_filter(self, settings, rg, mirror):
        service = SearchService(settings, search_client=rg)

        assert [e.name for e in service.list_examples("ESCROW")] == ["escrow_contract"]

    def test_nothing_cloned(self, settings, rg):
        assert SearchService(settings, search_client=rg).list_examples() == []

    def test_exact_name_beats_substring(self, settings, rg, mirror):
        service = SearchService(settings, search_client=rg)

        assert service.find_example("token").name == "token"
        assert service.find_example("TOKEN_BRIDGE").name == "token_bridge"
        assert service.find_example("escrow").name == "escrow_contract"
        assert service.find_example("missing") is None

    def test_suggestions(self, settings, rg, mirror):
        service = SearchService(settings, search_client=rg)

        assert "escrow_contract" in service.suggest_examples("escro_contract")
