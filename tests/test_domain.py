"""
Tests for domain objects: descriptors, outcomes, search results.
"""

import pytest

from aztecmirror.domain import (
    RepositoryDescriptor, RefKind, SearchPatterns, SyncAction, SyncOutcome, SyncReport,
    RepoStatus, StatusReport, SearchResult, FileInfo, FileCategory,
    classify, repository_of,
)


class TestRepositoryDescriptor:

    def test_ref_precedence_tag_over_commit_over_branch(self):
        d = RepositoryDescriptor(name="x", url="u", tag="v1", commit="abc1234", branch="main")
        assert d.ref_kind == RefKind.TAG
        assert d.ref == "v1"

        d = RepositoryDescriptor(name="x", url="u", commit="abc1234", branch="main")
        assert d.ref_kind == RefKind.COMMIT
        assert d.ref == "abc1234"

        d = RepositoryDescriptor(name="x", url="u", branch="main")
        assert d.ref_kind == RefKind.BRANCH
        assert d.ref == "main"
        assert not d.is_pinned

    def test_no_ref_means_default_branch(self):
        d = RepositoryDescriptor(name="x", url="u")
        assert d.ref_kind == RefKind.BRANCH
        assert d.ref is None

    def test_belongs_to_https_and_ssh(self):
        https = RepositoryDescriptor(name="a", url="https://github.com/noir-lang/noir")
        ssh = RepositoryDescriptor(name="b", url="git@github.com:noir-lang/noir.git")
        other = RepositoryDescriptor(name="c", url="https://github.com/noir-lang-fork/noir")

        assert https.belongs_to("noir-lang")
        assert ssh.belongs_to("noir-lang")
        assert not other.belongs_to("noir-lang")

    def test_pinned_to_commit_drops_branch(self):
        d = RepositoryDescriptor(name="noir", url="u", branch="master")
        pinned = d.pinned_to_commit("deadbeef")

        assert pinned.commit == "deadbeef"
        assert pinned.branch is None
        assert pinned.ref_kind == RefKind.COMMIT
        assert d.branch == "master"

    def test_frozen(self):
        d = RepositoryDescriptor(name="x", url="u")
        with pytest.raises(Exception):
            d.tag = "v1"

    def test_to_dict(self):
        d = RepositoryDescriptor(name="x", url="u", tag="v1", sparse=("docs",))
        data = d.to_dict()
        assert data['ref_kind'] == "tag"
        assert data['sparse'] == ["docs"]
        assert 'branch' not in data
        assert 'search_patterns' not in data

    def test_to_dict_includes_search_patterns(self):
        d = RepositoryDescriptor(
            name="aztec-packages", url="u",
            search_patterns=SearchPatterns(code=("*.nr", "*.ts"), docs=("*.md", "*.mdx")),
        )

        assert d.to_dict()['search_patterns'] == {
            'code': ["*.nr", "*.ts"],
            'docs': ["*.md", "*.mdx"],
        }


class TestSyncReport:

    def test_success_requires_every_outcome_ok(self):
        report = SyncReport(version="v1", repos_dir="/r")
        assert not report.success

        report.outcomes.append(SyncOutcome(name="a", action=SyncAction.CLONED, message="Cloned a"))
        assert report.success

        report.outcomes.append(SyncOutcome.failure("b", "boom"))
        assert not report.success
        assert [o.name for o in report.failed] == ["b"]

    def test_failure_outcome(self):
        outcome = SyncOutcome.failure("b", "network down")
        assert outcome.action == SyncAction.FAILED
        assert outcome.message == "Error: network down"
        assert outcome.to_dict()['error'] == "network down"

    def test_message_is_not_parsed_for_errors(self):
        outcome = SyncOutcome(name="a", action=SyncAction.UPDATED, message="Updated error-handling-lib")
        report = SyncReport(version="v1", repos_dir="/r", outcomes=[outcome])
        assert report.success

    def test_to_dict_shape(self):
        report = SyncReport(
            version="v1", repos_dir="/r", message="ok",
            outcomes=[SyncOutcome(name="a", action=SyncAction.CLONED, message="Cloned a", commit="abc1234")],
        )
        data = report.to_dict()
        assert data['success'] is True
        assert data['repos'][0] == {
            'name': 'a', 'status': 'Cloned a', 'action': 'cloned', 'ok': True, 'commit': 'abc1234',
        }


class TestStatusReport:

    def test_cloned_count(self):
        report = StatusReport(repos_dir="/r", repos=[
            RepoStatus(name="a", description="", cloned=True, commit="abc1234"),
            RepoStatus(name="b", description="", cloned=False),
        ])
        assert report.cloned_count == 1
        assert 'commit' not in report.to_dict()['repos'][1]


class TestSearchDomain:

    @pytest.mark.parametrize("path,category", [
        ("aztec-examples/token/src/main.nr", FileCategory.CONTRACT),
        ("noir/noir_stdlib/src/test_utils.nr", FileCategory.TEST),
        ("aztec-packages/yarn-project/foo.ts", FileCategory.SOURCE),
        ("aztec-packages/docs/docs/intro.mdx", FileCategory.DOCUMENTATION),
        ("aztec-starter/package.json", FileCategory.OTHER),
    ])
    def test_classify(self, path, category):
        assert classify(path) == category

    def test_repository_of(self):
        assert repository_of("aztec-packages/docs/docs/a.md") == "aztec-packages"
        assert repository_of("noir") == "noir"

    def test_search_result_omits_missing_line(self):
        assert 'line' not in SearchResult(file="a", content="x", repo="a").to_dict()
        assert SearchResult(file="a", content="x", repo="a", line=3).to_dict()['line'] == 3

    def test_file_info_to_dict(self):
        info = FileInfo(path="r/t/src/main.nr", name="t", repo="r", category=FileCategory.CONTRACT)
        assert info.to_dict()['category'] == "contract"
