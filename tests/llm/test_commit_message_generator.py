"""Tests for commit message generator."""

import unittest
from unittest.mock import Mock, patch

import requests

from semantic_commit_helper.config.loader import ConfigurationError, default_config
from semantic_commit_helper.llm.commit_message_generator import (
    CommitMessage,
    CommitMessageGenerator,
    PipelineContext,
    generate_commit_message,
)
from semantic_commit_helper.llm.errors import LLMConnectionError, ProtocolError
from semantic_commit_helper.llm.ollama_client import StreamingOllamaBackend


CHANGESET = {
    "src/auth.py": "+def login():\n+    pass\n",
    "README.md": "-old docs\n+new docs\n",
}


class FakeBackend:
    name = "Fake"

    def __init__(self, completion="", error=None):
        self.completion = completion
        self.error = error
        self.calls = []

    def generate(self, prompt, profile):
        self.calls.append((prompt, profile))
        if self.error is not None:
            raise self.error
        return self.completion


def make_generator(backend, api_key=None):
    factory = Mock(return_value=backend)
    context = PipelineContext(config=default_config(), api_key=api_key)
    return CommitMessageGenerator(context, backend_factory=factory), factory


class TestCommitMessageGenerator(unittest.TestCase):
    """Tests for CommitMessageGenerator."""

    def test_generate_basic(self):
        backend = FakeBackend("1) feat: add login\n2) fix: handle null\n3) docs: explain login")
        generator, factory = make_generator(backend)

        result = generator.generate(CHANGESET)

        self.assertIsInstance(result, CommitMessage)
        self.assertEqual(result.messages, ("feat: add login", "feat: handle null", "feat: explain login"))
        self.assertEqual(result.type, "feat")
        profile = factory.call_args[0][0]
        self.assertEqual(profile.name, "mistral")
        prompt = backend.calls[0][0]
        self.assertIn("src/auth.py", prompt)
        self.assertIn("Instructions:", prompt)

    def test_model_override_selects_profile_and_template(self):
        backend = FakeBackend("1) chore: bump")
        generator, _factory = make_generator(backend)

        result = generator.generate(CHANGESET, model_name="deepseek")

        prompt, profile = backend.calls[0]
        self.assertEqual(profile.name, "deepseek")
        self.assertIn("Respond with just 3 lines", prompt)
        self.assertEqual(result.messages, ("chore: bump",) * 3)

    def test_thinking_tags_removed_before_normalizing(self):
        backend = FakeBackend("<think>1) docs: no</think>1) test: add login tests")
        generator, _factory = make_generator(backend)
        self.assertEqual(generator.generate(CHANGESET).messages, ("test: add login tests",) * 3)

    def test_empty_completion_degrades_to_fallback(self):
        generator, _factory = make_generator(FakeBackend(""))
        self.assertEqual(generator.generate(CHANGESET).messages, ("chore: update files",) * 3)

    def test_unknown_model(self):
        generator, factory = make_generator(FakeBackend("x"))
        with self.assertRaises(ConfigurationError) as ctx:
            generator.generate(CHANGESET, model_name="nope")
        factory.assert_not_called()
        self.assertIn("mistral", ctx.exception.remediation)

    def test_connection_error_propagates_with_ollama_help(self):
        backend = FakeBackend(error=LLMConnectionError("Connection refused"))
        generator, _factory = make_generator(backend)
        with self.assertRaises(LLMConnectionError) as ctx:
            generator.generate(CHANGESET)
        self.assertIn("ollama serve", ctx.exception.remediation)

    def test_protocol_error_propagates_with_status(self):
        backend = FakeBackend(error=ProtocolError("HTTP error! status: 404", status_code=404))
        generator, _factory = make_generator(backend)
        with self.assertRaises(ProtocolError) as ctx:
            generator.generate(CHANGESET)
        self.assertEqual(ctx.exception.status_code, 404)
        self.assertIn("ollama pull mistral", ctx.exception.remediation)

    def test_missing_api_key_for_remote_model(self):
        context = PipelineContext(config=default_config(), api_key=None)
        generator = CommitMessageGenerator(context)
        with patch("semantic_commit_helper.llm.base.requests.post") as mock_post:
            with self.assertRaises(ConfigurationError) as ctx:
                generator.generate(CHANGESET, model_name="openai")
            mock_post.assert_not_called()
        self.assertIn("OPENAI_API_KEY", ctx.exception.remediation)


class TestEndToEnd(unittest.TestCase):
    def test_connection_refused_is_distinguishable(self):
        context = PipelineContext(config=default_config())
        with patch("semantic_commit_helper.llm.base.requests.post",
                   side_effect=requests.ConnectionError("[Errno 111] Connection refused")):
            with self.assertRaises(ConnectionError) as ctx:
                generate_commit_message(CHANGESET, context=context)
        self.assertIsInstance(ctx.exception, LLMConnectionError)
        self.assertNotIsInstance(ctx.exception, ProtocolError)

    def test_context_from_environment(self):
        config = default_config()
        context = PipelineContext.from_environment(config=config, environ={"OPENAI_API_KEY": "sk-1"})
        self.assertEqual(context.api_key, "sk-1")
        self.assertTrue(context.is_single_shot("deepseek"))
        self.assertFalse(context.is_single_shot("mistral"))

    def test_default_pipeline_streams_for_mistral(self):
        context = PipelineContext.from_environment(config=default_config(), environ={})
        with patch.object(StreamingOllamaBackend, "generate", return_value="1) fix: x") as mock_generate:
            result = generate_commit_message(CHANGESET, context=context)
        mock_generate.assert_called_once()
        self.assertEqual(result.messages, ("fix: x",) * 3)


if __name__ == "__main__":
    unittest.main()
