"""GitHub client wrapping PyGithub."""

import os

from github import Auth, Github, GithubException, InputGitTreeElement
from github.Repository import Repository
from github.PullRequest import PullRequest

from taskforge.github.models import (
    CommentData,
    PRData,
    PRFile,
    CIResult,
    CICheck,
    CIStatus,
    ChangeRequest,
)


class GitHubClientError(Exception):
    """Raised when GitHub operations fail."""


class GitHubClient:
    """GitHub client covering the calls the pipeline and evaluator make."""

    def __init__(
        self,
        token: str | None = None,
        repo_name: str | None = None,
    ):
        self.token = token or os.getenv("GITHUB_TOKEN")
        if not self.token:
            raise GitHubClientError(
                "GitHub token not found. Set GITHUB_TOKEN environment variable."
            )

        self._github = Github(auth=Auth.Token(self.token))
        self._repo_name = repo_name or os.getenv("GITHUB_REPOSITORY")
        self._repo: Repository | None = None

    # ------------------------------------------------------------------
    # Repository helpers
    # ------------------------------------------------------------------

    @property
    def repo(self) -> Repository:
        if self._repo is None:
            if not self._repo_name:
                raise GitHubClientError("Repository name not set.")
            try:
                self._repo = self._github.get_repo(self._repo_name)
            except GithubException as e:
                raise GitHubClientError(f"Failed to get repository: {e}") from e
        return self._repo

    @property
    def default_branch(self) -> str:
        """Get the repository's default branch name."""
        return self.repo.default_branch

    # ------------------------------------------------------------------
    # Issues
    # ------------------------------------------------------------------

    def list_comments(self, issue_number: int) -> list[CommentData]:
        """List every comment on an issue or PR, oldest first."""
        try:
            issue = self.repo.get_issue(number=issue_number)
            return [
                CommentData(
                    author=comment.user.login if comment.user else "",
                    body=comment.body or "",
                    id=comment.id,
                    created_at=comment.created_at,
                )
                for comment in issue.get_comments()
            ]
        except GithubException as e:
            raise GitHubClientError(
                f"Failed to list comments on #{issue_number}: {e}"
            ) from e

    def post_comment(self, issue_or_pr_number: int, body: str) -> None:
        try:
            issue = self.repo.get_issue(number=issue_or_pr_number)
            issue.create_comment(body)
        except GithubException as e:
            raise GitHubClientError(
                f"Failed to post comment on #{issue_or_pr_number}: {e}"
            ) from e

    def add_labels(self, issue_number: int, labels: list[str]) -> None:
        try:
            issue = self.repo.get_issue(number=issue_number)
            issue.add_to_labels(*labels)
        except GithubException as e:
            raise GitHubClientError(
                f"Failed to add labels to #{issue_number}: {e}"
            ) from e

    def remove_label(self, issue_number: int, label: str) -> None:
        try:
            issue = self.repo.get_issue(number=issue_number)
            issue.remove_from_labels(label)
        except GithubException as e:
            raise GitHubClientError(
                f"Failed to remove label '{label}' from #{issue_number}: {e}"
            ) from e

    # ------------------------------------------------------------------
    # Pull requests
    # ------------------------------------------------------------------

    def get_change_request(self, pr_number: int) -> ChangeRequest:
        """Collect files, diff, checks and review state for evaluation."""
        try:
            pr: PullRequest = self.repo.get_pull(number=pr_number)
            reviews = list(pr.get_reviews())
            files = self._pr_files(pr)
            return ChangeRequest(
                number=pr_number,
                title=pr.title,
                author=pr.user.login if pr.user else "",
                files=files,
                additions=pr.additions,
                deletions=pr.deletions,
                diff=self._assemble_diff(files),
                checks=self._ci_status(pr).checks,
                review_state=reviews[-1].state if reviews else None,
            )
        except GithubException as e:
            raise GitHubClientError(f"Failed to get PR #{pr_number}: {e}") from e

    @staticmethod
    def _pr_files(pr: PullRequest) -> list[PRFile]:
        return [
            PRFile(
                path=f.filename,
                patch=f.patch,
                additions=f.additions,
                deletions=f.deletions,
                status=f.status,
            )
            for f in pr.get_files()
        ]

    @staticmethod
    def _assemble_diff(files: list[PRFile]) -> str:
        """Build a unified diff from per-file patches."""
        diff_parts: list[str] = []

        for f in files:
            diff_parts.append(f"--- a/{f.path}")
            diff_parts.append(f"+++ b/{f.path}")
            if f.patch:
                diff_parts.append(f.patch)
            diff_parts.append("")

        return "\n".join(diff_parts)

    @staticmethod
    def _ci_status(pr: PullRequest) -> CIResult:
        """Check-run results for the head commit of a PR."""
        commits = list(pr.get_commits())
        if not commits:
            return CIResult(status=CIStatus.PENDING, checks=[])

        checks: list[CICheck] = []
        overall_status = CIStatus.SUCCESS

        for run in commits[-1].get_check_runs():
            if run.status != "completed":
                status = CIStatus.PENDING
                overall_status = CIStatus.PENDING
            else:
                match run.conclusion:
                    case "success":
                        status = CIStatus.SUCCESS
                    case "failure":
                        status = CIStatus.FAILURE
                        overall_status = CIStatus.FAILURE
                    case "cancelled" | "skipped":
                        status = CIStatus.CANCELLED
                    case _:
                        status = CIStatus.ERROR
                        overall_status = CIStatus.ERROR

            output_summary = None
            if run.output:
                output_summary = run.output.summary or run.output.text

            checks.append(
                CICheck(
                    name=run.name,
                    status=status,
                    conclusion=run.conclusion,
                    url=run.html_url,
                    output=output_summary,
                )
            )

        return CIResult(status=overall_status, checks=checks)

    def post_review(
        self,
        pr_number: int,
        body: str,
        event: str = "COMMENT",
    ) -> None:
        try:
            pr = self.repo.get_pull(number=pr_number)
            pr.create_review(body=body, event=event)
        except GithubException as e:
            raise GitHubClientError(f"Failed to post review on PR #{pr_number}: {e}") from e

    def merge_pr(self, pr_number: int, merge_method: str = "squash") -> str:
        """Merge a pull request.

        Returns:
            SHA of the merge commit
        """
        try:
            pr = self.repo.get_pull(number=pr_number)
            status = pr.merge(merge_method=merge_method)
        except GithubException as e:
            raise GitHubClientError(f"Failed to merge PR #{pr_number}: {e}") from e

        if not status.merged:
            raise GitHubClientError(
                f"PR #{pr_number} was not merged: {status.message}"
            )
        return status.sha

    # ------------------------------------------------------------------
    # Branch & Commit Operations
    # ------------------------------------------------------------------

    def create_branch(self, branch_name: str, from_ref: str | None = None) -> None:
        """Create a new branch via GitHub API.

        Args:
            branch_name: Name of the new branch
            from_ref: Reference to create branch from. Defaults to repo's default branch.
        """
        try:
            if from_ref is None:
                from_ref = self.default_branch

            source = self.repo.get_branch(from_ref)
            self.repo.create_git_ref(
                ref=f"refs/heads/{branch_name}",
                sha=source.commit.sha,
            )
        except GithubException as e:
            if "Reference already exists" in str(e):
                return
            raise GitHubClientError(f"Failed to create branch '{branch_name}': {e}") from e

    def commit_changes(
        self,
        files: dict[str, str],
        message: str,
        branch: str,
    ) -> str:
        """Commit file changes via GitHub API.

        Args:
            files: Dictionary of file path -> content
            message: Commit message
            branch: Branch to commit to

        Returns:
            Commit SHA
        """
        try:
            ref = self.repo.get_git_ref(f"heads/{branch}")
            base_commit = self.repo.get_git_commit(ref.object.sha)

            tree_elements: list[InputGitTreeElement] = []
            for file_path, content in files.items():
                blob = self.repo.create_git_blob(content, "utf-8")
                tree_elements.append(
                    InputGitTreeElement(
                        path=file_path,
                        mode="100644",
                        type="blob",
                        sha=blob.sha,
                    )
                )

            new_tree = self.repo.create_git_tree(tree_elements, base_commit.tree)
            new_commit = self.repo.create_git_commit(
                message=message,
                tree=new_tree,
                parents=[base_commit],
            )
            ref.edit(new_commit.sha)

            return new_commit.sha
        except GithubException as e:
            raise GitHubClientError(f"Failed to commit changes: {e}") from e

    def create_pull_request(
        self,
        title: str,
        body: str,
        head: str,
        base: str | None = None,
        labels: list[str] | None = None,
    ) -> PRData:
        try:
            if base is None:
                base = self.default_branch

            pr = self.repo.create_pull(
                title=title,
                body=body,
                head=head,
                base=base,
            )

            if labels:
                pr.add_to_labels(*labels)

            return self._to_pr_data(pr)
        except GithubException as e:
            raise GitHubClientError(f"Failed to create pull request: {e}") from e

    # ------------------------------------------------------------------
    # Utils
    # ------------------------------------------------------------------

    @staticmethod
    def _to_pr_data(pr: PullRequest) -> PRData:
        return PRData(
            number=pr.number,
            title=pr.title,
            body=pr.body or "",
            head_branch=pr.head.ref,
            base_branch=pr.base.ref,
            labels=[label.name for label in pr.labels],
            author=pr.user.login if pr.user else "",
            state=pr.state,
            url=pr.html_url,
            mergeable=pr.mergeable,
            draft=pr.draft,
            created_at=pr.created_at,
            updated_at=pr.updated_at,
        )
