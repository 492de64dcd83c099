import unittest

from precommit_installer.model import CommandResult, HookDefinition, Selection


class HookDefinitionTests(unittest.TestCase):
    def test_from_dict_normalizes_fields(self):
        hook = HookDefinition.from_dict(
            {"id": " check-yaml ", "repo": "https://github.com/pre-commit/pre-commit-hooks", "rev": "v4.5.0"},
            category="File Formatting",
        )
        self.assertEqual(hook.id, "check-yaml")
        self.assertFalse(hook.is_local)
        self.assertEqual(hook.category, "File Formatting")
        self.assertEqual(hook.description, "")

    def test_local_hooks_ignore_rev(self):
        hook = HookDefinition.from_dict({"id": "accessibility-check", "repo": "local", "rev": "v1"})
        self.assertTrue(hook.is_local)
        self.assertEqual(hook.rev, "")


class SelectionTests(unittest.TestCase):
    def test_empty_and_total(self):
        self.assertTrue(Selection().is_empty)
        selection = Selection.of(hooks=["b", "a"], scripts=["x.sh"])
        self.assertFalse(selection.is_empty)
        self.assertEqual(selection.total, 3)
        self.assertEqual(selection.sorted_hooks(), ["a", "b"])

    def test_copy_is_independent(self):
        selection = Selection.of(hooks=["a"])
        clone = selection.copy()
        clone.hooks.add("b")
        self.assertEqual(selection.hooks, {"a"})


def test_command_result_ok():
    assert CommandResult(0).ok
    assert not CommandResult(127, "missing").ok


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
