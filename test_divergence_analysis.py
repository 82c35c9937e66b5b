#!/usr/bin/env python3
"""
Tests for divergence analysis over a synthetic commit graph.

Classification uses merge-base ancestry only, never commit timestamps.
"""

import sys
import unittest
from pathlib import Path

# Add the project root to the Python path
sys.path.insert(0, str(Path(__file__).parent))

from mirrorsync.git_sync.divergence import DivergenceState, analyze_divergence
from mirrorsync.git_sync.memory_executor import CommitGraph
from mirrorsync.git_sync.repository_info import RefSnapshot


def snapshot(name, commit):
    return RefSnapshot(name, commit)


class TestDivergenceAnalysis(unittest.TestCase):

    def setUp(self):
        # a - b - c          (source)
        #      \
        #       x - y        (diverged destination)
        self.graph = CommitGraph()
        self.graph.chain(None, "a", "b", "c")
        self.graph.chain("b", "x", "y")
        self.graph.commit("z")  # unrelated root
        self.calls = []

    def common_ancestor(self, commit_a, commit_b):
        self.calls.append((commit_a, commit_b))
        return self.graph.merge_base(commit_a, commit_b)

    def analyze(self, source_commit, destination_commit):
        destination = snapshot("origin/main", destination_commit) if destination_commit else None
        return analyze_divergence(snapshot("source/main", source_commit), destination, self.common_ancestor)

    def test_missing_destination(self):
        result = self.analyze("c", None)
        self.assertEqual(result.state, DivergenceState.MISSING)
        self.assertEqual(result.source_commit, "c")
        self.assertIsNone(result.destination_commit)
        self.assertEqual(result.label, "is a new branch")
        self.assertEqual(self.calls, [])

    def test_identical(self):
        result = self.analyze("c", "c")
        self.assertEqual(result.state, DivergenceState.IDENTICAL)
        self.assertEqual(result.label, "is already up to date")
        self.assertEqual(self.calls, [])

    def test_fast_forward(self):
        result = self.analyze("c", "a")
        self.assertEqual(result.state, DivergenceState.FAST_FORWARD)
        self.assertEqual(result.merge_base, "a")
        self.assertEqual(result.label, "is clean, source is ahead")

    def test_destination_ahead(self):
        result = self.analyze("b", "y")
        self.assertEqual(result.state, DivergenceState.DESTINATION_AHEAD)
        self.assertEqual(result.merge_base, "b")

    def test_diverged(self):
        result = self.analyze("c", "y")
        self.assertEqual(result.state, DivergenceState.DIVERGED)
        self.assertEqual(result.merge_base, "b")
        self.assertEqual(result.destination_commit, "y")
        self.assertEqual(result.label, "has diverged from source")

    def test_unrelated_histories_are_diverged(self):
        result = self.analyze("c", "z")
        self.assertEqual(result.state, DivergenceState.DIVERGED)
        self.assertIsNone(result.merge_base)


class TestCommitGraph(unittest.TestCase):

    def test_unknown_parent_rejected(self):
        graph = CommitGraph()
        with self.assertRaises(KeyError):
            graph.commit("b", "a")

    def test_ancestry(self):
        graph = CommitGraph()
        tip = graph.chain(None, "a", "b", "c")
        self.assertEqual(tip, "c")
        self.assertIn("a", graph)
        self.assertTrue(graph.is_ancestor("a", "c"))
        self.assertFalse(graph.is_ancestor("c", "a"))
        self.assertEqual(graph.ancestors("b"), {"a", "b"})

    def test_merge_base_with_merge_commit(self):
        graph = CommitGraph()
        graph.chain(None, "a", "b")
        graph.chain("a", "x")
        graph.commit("m", "b", "x")
        self.assertEqual(graph.merge_base("m", "x"), "x")
        self.assertEqual(graph.merge_base("b", "x"), "a")


if __name__ == "__main__":
    unittest.main()
