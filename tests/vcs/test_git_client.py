import unittest
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import patch

from semantic_commit_helper.diff.summarizer import FileContent
from semantic_commit_helper.vcs.git_client import FileChange, GitClient, GitError


class DummyProc(SimpleNamespace):
    returncode: int = 0
    stdout: str = ""
    stderr: str = ""


class TestGitClient(unittest.TestCase):
    def test_get_staged_changes_parses_index_column(self) -> None:
        output = (
            "M  staged_modified.py\0"
            " M unstaged_only.py\0"
            "A  added_file.py\0"
            "D  deleted_file.py\0"
            "R  renamed_new.py\0renamed_old.py\0"
            "MM both.py\0"
            "?? untracked.txt\0"
        )

        def fake_run(self, args, check=True):
            if args == ["status", "--porcelain", "-z"]:
                return DummyProc(returncode=0, stdout=output, stderr="")
            raise AssertionError(f"Unexpected git command: {args}")

        with patch.object(GitClient, "_run", autospec=True) as mock_run:
            mock_run.side_effect = fake_run
            client = GitClient(Path("/repo"))
            changes = client.get_staged_changes()
            files = client.get_staged_files()

        self.assertEqual(changes, [
            FileChange(path="staged_modified.py", status="M"),
            FileChange(path="added_file.py", status="A"),
            FileChange(path="deleted_file.py", status="D"),
            FileChange(path="renamed_new.py", status="R"),
            FileChange(path="both.py", status="M"),
        ])
        self.assertEqual(files, ["staged_modified.py", "added_file.py", "deleted_file.py", "renamed_new.py", "both.py"])

    def test_paths_with_spaces_and_unicode_are_not_quoted(self) -> None:
        output = "A  a b.py\0M  docs/résumé.md\0R  new name.py\0old name.py\0"
        diffs = {"a b.py": "@@ -0,0 +1 @@\n+print('hi')\n"}

        def fake_run(self, args, check=True):
            if args[0] == "status":
                return DummyProc(returncode=0, stdout=output)
            if args[:3] == ["diff", "--cached", "--"]:
                return DummyProc(returncode=0, stdout=diffs.get(args[3], ""))
            raise AssertionError(f"Unexpected git command: {args}")

        with patch.object(GitClient, "_run", autospec=True) as mock_run:
            mock_run.side_effect = fake_run
            client = GitClient(Path("/repo"))
            files = client.get_staged_files()
            diff = client.get_diff(files[0])

        self.assertEqual(files, ["a b.py", "docs/résumé.md", "new name.py"])
        self.assertEqual(diff, "@@ -0,0 +1 @@\n+print('hi')\n")

    def test_get_diff_and_file_content(self) -> None:
        calls = []

        def fake_run(self, args, check=True):
            calls.append(args)
            if args[0] == "diff":
                return DummyProc(returncode=0, stdout="+new\n")
            if args == ["show", "HEAD:new.py"]:
                return DummyProc(returncode=128, stdout="", stderr="fatal: path does not exist")
            return DummyProc(returncode=0, stdout="new\n")

        with patch.object(GitClient, "_run", autospec=True) as mock_run:
            mock_run.side_effect = fake_run
            content = GitClient(Path("/repo")).get_file_content("new.py")

        self.assertEqual(content, FileContent(diff="+new\n", old_content="", new_content="new\n"))
        self.assertIn(["diff", "--cached", "--", "new.py"], calls)
        self.assertIn(["show", ":new.py"], calls)

    def test_commit(self) -> None:
        calls = []

        def fake_run(self, args, check=True):
            calls.append(args)
            return DummyProc(returncode=0)

        with patch.object(GitClient, "_run", autospec=True) as mock_run:
            mock_run.side_effect = fake_run
            GitClient(Path("/repo")).commit("feat: add login")
        self.assertEqual(calls, [["commit", "-m", "feat: add login"]])

    def test_run_raises_on_failure(self) -> None:
        failed = DummyProc(returncode=1, stdout="", stderr="fatal: not a git repository")
        with patch("semantic_commit_helper.vcs.git_client.subprocess.run", return_value=failed):
            with self.assertRaises(GitError) as ctx:
                GitClient(Path("/repo")).get_diff("a.py")
        self.assertIn("not a git repository", str(ctx.exception))

    def test_find_repo_root(self) -> None:
        with patch("pathlib.Path.exists", lambda self: self.name == ".git" and self.parent.name == "repo"):
            self.assertEqual(GitClient.find_repo_root(Path("/tmp/repo/src/pkg")).name, "repo")
        with patch("pathlib.Path.exists", lambda self: False):
            self.assertIsNone(GitClient.find_repo_root(Path("/tmp/none")))


if __name__ == "__main__":
    unittest.main()
