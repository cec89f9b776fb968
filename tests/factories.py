"""Test factories using factory_boy."""

from datetime import date, datetime, timezone

import factory

from repo_changes.core.models.criteria import SearchCriteria
from repo_changes.core.models.report import ProcessedFileRecord
from repo_changes.core.models.repository import CommitInfo


class SearchCriteriaFactory(factory.Factory):
    """Factory for creating SearchCriteria instances."""

    class Meta:
        model = SearchCriteria

    branch_name = "main"
    date_from = date(2024, 3, 1)
    date_to = date(2024, 3, 31)
    author_email = "dev@example.com"


class CommitInfoFactory(factory.Factory):
    """Factory for creating CommitInfo instances."""

    class Meta:
        model = CommitInfo

    commit_id = factory.Sequence(lambda n: f"{n:040x}")
    parent_ids = factory.LazyFunction(lambda: ("f" * 40,))
    author_email = "dev@example.com"
    author_date = factory.LazyFunction(lambda: datetime(2024, 3, 10, 12, 0, tzinfo=timezone.utc))


class ProcessedFileRecordFactory(factory.Factory):
    """Factory for creating successful ProcessedFileRecord instances."""

    class Meta:
        model = ProcessedFileRecord

    file_name = factory.Sequence(lambda n: f"file_{n}.txt")
    repository_path = factory.Sequence(lambda n: f"/work/repo_{n}")
    succeeded = True
