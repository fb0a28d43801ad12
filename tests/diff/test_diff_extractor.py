import unittest

from semantic_commit_helper.diff.diff_extractor import extract_diffs
from semantic_commit_helper.vcs.git_client import GitError


class DummyClient:
    def __init__(self, failing=()):
        self.calls = []
        self.failing = set(failing)

    def get_diff(self, path):
        self.calls.append(path)
        if path in self.failing:
            raise GitError("bad revision")
        return f"diff for {path}"


class TestDiffExtractor(unittest.TestCase):
    def test_extract_diffs_collects_all(self) -> None:
        client = DummyClient()
        diffs = extract_diffs(client, ["a.txt", "b.py"])
        self.assertEqual(diffs, {"a.txt": "diff for a.txt", "b.py": "diff for b.py"})
        self.assertEqual(client.calls, ["a.txt", "b.py"])
        self.assertEqual(list(diffs), ["a.txt", "b.py"])

    def test_unreadable_diff_becomes_empty(self) -> None:
        client = DummyClient(failing={"b.py"})
        diffs = extract_diffs(client, ["a.txt", "b.py"])
        self.assertEqual(diffs["b.py"], "")
        self.assertEqual(diffs["a.txt"], "diff for a.txt")


if __name__ == "__main__":
    unittest.main()
