import json
import unittest
from types import SimpleNamespace
from unittest.mock import patch

import requests

from semantic_commit_helper.config.loader import ModelProfile
from semantic_commit_helper.llm.errors import LLMConnectionError, ProtocolError
from semantic_commit_helper.llm.ollama_client import (
    SingleShotOllamaBackend,
    StreamingOllamaBackend,
    accumulate_stream,
)


PROFILE = ModelProfile(name="mistral", api_url="http://127.0.0.1:11434/api/generate", temperature=0.5, top_p=0.8)


class DummyResponse(SimpleNamespace):
    status_code: int = 200
    text: str = ""
    lines: tuple = ()
    closed: bool = False

    def json(self):
        return json.loads(self.text)

    def iter_lines(self):
        for line in self.lines:
            if isinstance(line, Exception):
                raise line
            yield line

    def close(self):
        self.closed = True


class TestAccumulateStream(unittest.TestCase):
    def test_concatenates_response_fields_in_order(self) -> None:
        lines = [
            b'{"response": "1) feat: "}',
            b'{"response": "add login"}',
            b'{"done": true}',
        ]
        self.assertEqual(accumulate_stream(lines), "1) feat: add login")

    def test_skips_malformed_fragments(self) -> None:
        lines = ['{"response": "fe', '{"response": "feat"}', "", "garbage", '{"response": ": x"}']
        self.assertEqual(accumulate_stream(lines), "feat: x")

    def test_ignores_non_object_fragments(self) -> None:
        self.assertEqual(accumulate_stream(["[1, 2]", '"text"', '{"response": "ok"}']), "ok")


class TestStreamingOllamaBackend(unittest.TestCase):
    def test_generate_streams_and_sends_profile_options(self) -> None:
        captured = {}
        response = DummyResponse(lines=[b'{"response": "Hel"}', b'{"response": "lo"}', b'{"done": true}'])

        def fake_post(url, *_args, **kwargs):
            captured["url"] = url
            captured.update(kwargs)
            return response

        with patch("semantic_commit_helper.llm.base.requests.post", fake_post):
            result = StreamingOllamaBackend().generate("prompt", PROFILE)

        self.assertEqual(result, "Hello")
        self.assertTrue(response.closed)
        self.assertEqual(captured["url"], PROFILE.api_url)
        self.assertTrue(captured["stream"])
        self.assertEqual(captured["json"]["model"], "mistral")
        self.assertTrue(captured["json"]["stream"])
        self.assertEqual(captured["json"]["options"], {"temperature": 0.5, "top_p": 0.8})

    @patch("semantic_commit_helper.llm.base.requests.post")
    def test_connection_refused(self, mock_post) -> None:
        mock_post.side_effect = requests.ConnectionError("[Errno 111] Connection refused")
        with self.assertRaises(LLMConnectionError) as ctx:
            StreamingOllamaBackend().generate("prompt", PROFILE)
        self.assertIsInstance(ctx.exception, ConnectionError)
        self.assertNotIsInstance(ctx.exception, ProtocolError)
        self.assertIn("Connection refused", str(ctx.exception))

    @patch("semantic_commit_helper.llm.base.requests.post")
    def test_timeout_is_connection_error(self, mock_post) -> None:
        mock_post.side_effect = requests.Timeout("read timed out")
        with self.assertRaises(LLMConnectionError):
            StreamingOllamaBackend().generate("prompt", PROFILE)

    @patch("semantic_commit_helper.llm.base.requests.post")
    def test_error_status(self, mock_post) -> None:
        mock_post.return_value = DummyResponse(status_code=500, text="Internal error")
        with self.assertRaises(ProtocolError) as ctx:
            StreamingOllamaBackend().generate("prompt", PROFILE)
        self.assertEqual(ctx.exception.status_code, 500)
        self.assertNotIsInstance(ctx.exception, ConnectionError)

    @patch("semantic_commit_helper.llm.base.requests.post")
    def test_stream_interrupted(self, mock_post) -> None:
        response = DummyResponse(lines=[b'{"response": "a"}', requests.exceptions.ChunkedEncodingError("reset")])
        mock_post.return_value = response
        with self.assertRaises(LLMConnectionError):
            StreamingOllamaBackend().generate("prompt", PROFILE)
        self.assertTrue(response.closed)


class TestSingleShotOllamaBackend(unittest.TestCase):
    @patch("semantic_commit_helper.llm.base.requests.post")
    def test_generate_success(self, mock_post) -> None:
        mock_post.return_value = DummyResponse(text=json.dumps({"response": "1) fix: a", "done": True}))
        result = SingleShotOllamaBackend().generate("prompt", PROFILE)
        self.assertEqual(result, "1) fix: a")
        _args, kwargs = mock_post.call_args
        self.assertFalse(kwargs["json"]["stream"])
        self.assertFalse(kwargs["stream"])

    @patch("semantic_commit_helper.llm.base.requests.post")
    def test_invalid_json(self, mock_post) -> None:
        mock_post.return_value = DummyResponse(text="not json")
        with self.assertRaises(ProtocolError):
            SingleShotOllamaBackend().generate("prompt", PROFILE)

    @patch("semantic_commit_helper.llm.base.requests.post")
    def test_model_not_found(self, mock_post) -> None:
        mock_post.return_value = DummyResponse(status_code=404, text='{"error": "model not found"}')
        with self.assertRaises(ProtocolError) as ctx:
            SingleShotOllamaBackend().generate("prompt", PROFILE)
        self.assertEqual(ctx.exception.status_code, 404)


if __name__ == "__main__":
    unittest.main()
