"""
Tests for the AztecMirror API: result shapes and in-band preconditions.
"""

from unittest.mock import MagicMock

import pytest

from aztecmirror.api import AztecMirror
from aztecmirror.infra.search_client import RipgrepClient, SearchToolError

from conftest import make_checkout, write_file, FULL_HASH


@pytest.fixture
def rg():
    client = MagicMock(spec=RipgrepClient)
    client.search.side_effect = SearchToolError("rg not found")
    return client


@pytest.fixture
def mirror(settings, fake_git, rg):
    return AztecMirror(settings=settings, git_client=fake_git, search_client=rg)


class TestPreconditions:

    def test_search_code_nothing_cloned(self, mirror):
        result = mirror.search_code("fn")
        assert result == {
            'success': False,
            'results': [],
            'message': "No repositories are cloned. Run aztec_sync_repos first.",
        }

    def test_search_code_named_repo_not_cloned(self, mirror, settings):
        make_checkout(settings.repos_dir, "noir")
        result = mirror.search_code("fn", repo="aztec-starter")
        assert not result['success']
        assert "'aztec-starter' is not cloned" in result['message']

    def test_search_docs_requires_monorepo(self, mirror, settings):
        make_checkout(settings.repos_dir, "noir")
        result = mirror.search_docs("notes")
        assert not result['success']
        assert result['message'].startswith("aztec-packages is not cloned")

    def test_list_examples_nothing_cloned(self, mirror):
        result = mirror.list_examples()
        assert not result['success']
        assert result['examples'] == []


class TestSearch:

    def test_search_code(self, mirror, settings):
        make_checkout(settings.repos_dir, "aztec-examples")
        write_file(settings.repos_dir, "aztec-examples/token/src/main.nr", "fn transfer() {}\n")

        result = mirror.search_code("transfer")

        assert result['success']
        assert result['message'] == "Found 1 matches"
        assert result['results'][0] == {
            'file': "aztec-examples/token/src/main.nr",
            'content': "fn transfer() {}",
            'repo': "aztec-examples",
            'line': 1,
        }

    def test_search_code_no_matches(self, mirror, settings):
        make_checkout(settings.repos_dir, "aztec-examples")
        result = mirror.search_code("nothing")
        assert result['success']
        assert result['message'] == "No matches found"

    def test_search_docs(self, mirror, settings):
        make_checkout(settings.repos_dir, "aztec-packages")
        write_file(settings.repos_dir, "aztec-packages/docs/docs/a.md", "notes are private\n")

        result = mirror.search_docs("notes")

        assert result['message'] == "Found 1 documentation matches"


class TestExamplesAndFiles:

    def test_list_examples_messages(self, mirror, settings):
        make_checkout(settings.repos_dir, "aztec-examples")
        write_file(settings.repos_dir, "aztec-examples/token/src/main.nr", "contract Token {}\n")

        assert mirror.list_examples()['message'] == "Found 1 example contracts"
        assert mirror.list_examples("nft")['message'] == "No examples found matching category 'nft'"

    def test_read_example(self, mirror, settings):
        write_file(settings.repos_dir, "aztec-examples/token/src/main.nr", "contract Token {}\n")

        result = mirror.read_example("token")

        assert result['success']
        assert result['content'] == "contract Token {}\n"
        assert result['message'] == "Read token from aztec-examples"

    def test_read_example_not_found_suggests(self, mirror, settings):
        write_file(settings.repos_dir, "aztec-examples/token/src/main.nr", "contract Token {}\n")

        result = mirror.read_example("tokn")

        assert not result['success']
        assert result['message'].startswith("Example 'tokn' not found.")

    def test_read_example_empty_file(self, mirror, settings):
        write_file(settings.repos_dir, "aztec-examples/token/src/main.nr", "")

        result = mirror.read_example("token")

        assert not result['success']
        assert result['message'] == "Could not read example file: aztec-examples/token/src/main.nr"

    def test_read_file(self, mirror, settings):
        write_file(settings.repos_dir, "noir/docs/intro.md", "# Intro\n")

        result = mirror.read_file("noir/docs/intro.md")

        assert result['success']
        assert result['category'] == "documentation"
        assert result['message'] == "Read file: noir/docs/intro.md"

    def test_read_file_missing(self, mirror):
        result = mirror.read_file("nope.md")
        assert not result['success']
        assert result['message'].startswith("File not found: nope.md.")


class TestSyncAndStatus:

    def test_sync_returns_dict(self, mirror, fake_git):
        result = mirror.sync(repos=["aztec-starter"], version="v2")

        assert result['success']
        assert result['version'] == "v2"
        assert result['repos'][0]['name'] == "aztec-starter"
        assert result['repos'][0]['commit'] == FULL_HASH[:7]

    def test_sync_no_match(self, mirror):
        result = mirror.sync(repos=["nope"])
        assert not result['success']
        assert result['repos'] == []

    def test_status(self, mirror, settings):
        make_checkout(settings.repos_dir, "noir")

        result = mirror.status()

        assert result['success']
        noir = [r for r in result['repos'] if r['name'] == "noir"][0]
        assert noir['cloned'] and noir['commit'] == FULL_HASH[:7]
        assert result['repos_dir'] == str(settings.repos_dir)
