import unittest
from unittest.mock import patch

from models.study_models import ChatMessage, ChatRole
from services.chat_service import ChatSession, ChatState
from utils.exceptions import RateLimitError, UpstreamError


def _stream(*deltas):
    def fake_stream(messages, **kwargs):
        for delta in deltas:
            yield delta
    return fake_stream


class TestChatSession(unittest.TestCase):
    def setUp(self):
        self.session = ChatSession(url="https://chat.test/fn", api_key="anon")

    @patch("services.chat_service.stream_chat")
    def test_successful_turn_appends_user_and_assistant(self, mock_stream):
        mock_stream.side_effect = _stream("Hel", "lo")
        seen = []

        reply = self.session.send("What is osmosis?", on_delta=lambda d, full: seen.append((d, full, self.session.state)))

        self.assertEqual(reply.content, "Hello")
        self.assertEqual([m.role for m in self.session.messages], [ChatRole.USER, ChatRole.ASSISTANT])
        self.assertEqual(seen, [("Hel", "Hel", ChatState.STREAMING), ("lo", "Hello", ChatState.STREAMING)])
        self.assertEqual(self.session.state, ChatState.IDLE)
        self.assertIsNone(self.session.error_message)

    @patch("services.chat_service.stream_chat")
    def test_whole_conversation_is_resent_each_turn(self, mock_stream):
        mock_stream.side_effect = _stream("First answer")
        self.session.send("Question one")
        mock_stream.side_effect = _stream("Second answer")
        self.session.send("Question two")

        payload = mock_stream.call_args.args[0]
        self.assertEqual(payload, [
            {"role": "user", "content": "Question one"},
            {"role": "assistant", "content": "First answer"},
            {"role": "user", "content": "Question two"},
        ])
        self.assertEqual(mock_stream.call_args.kwargs["url"], "https://chat.test/fn")

    @patch("services.chat_service.stream_chat")
    def test_failure_mid_stream_rolls_back_turn(self, mock_stream):
        mock_stream.side_effect = _stream("Earlier reply")
        self.session.send("Earlier question")
        before = [m.model_copy() for m in self.session.messages]

        def broken(messages, **kwargs):
            yield "Partial"
            raise UpstreamError("Chat stream failed: connection reset")

        mock_stream.side_effect = broken
        with self.assertRaises(UpstreamError):
            self.session.send("New question")

        self.assertEqual(self.session.messages, before)
        self.assertEqual(self.session.state, ChatState.ERRORED)
        self.assertEqual(self.session.error_message, "Chat stream failed: connection reset")

    @patch("services.chat_service.stream_chat")
    def test_rate_limit_before_first_delta(self, mock_stream):
        mock_stream.side_effect = RateLimitError()

        with self.assertRaises(RateLimitError):
            self.session.send("Hello?")

        self.assertEqual(self.session.messages, [])
        self.assertEqual(self.session.error_message, "Rate limit exceeded. Please try again later.")

    @patch("services.chat_service.stream_chat")
    def test_unexpected_error_gets_generic_message(self, mock_stream):
        mock_stream.side_effect = RuntimeError("boom")

        with self.assertRaises(RuntimeError):
            self.session.send("Hello?")

        self.assertEqual(self.session.error_message, "Failed to get response")
        self.assertFalse(self.session.busy)

    @patch("services.chat_service.stream_chat")
    def test_submit_while_streaming_is_ignored(self, mock_stream):
        mock_stream.side_effect = _stream("a", "b")
        nested = []

        self.session.send("Outer", on_delta=lambda d, full: nested.append(self.session.send("Inner")))

        self.assertEqual(nested, [None, None])
        self.assertEqual(mock_stream.call_count, 1)
        self.assertEqual([m.content for m in self.session.messages], ["Outer", "ab"])

    @patch("services.chat_service.stream_chat")
    def test_blank_input_is_ignored(self, mock_stream):
        self.assertIsNone(self.session.send("   "))
        mock_stream.assert_not_called()
        self.assertEqual(self.session.messages, [])

    @patch("services.chat_service.stream_chat")
    def test_error_then_recovery(self, mock_stream):
        mock_stream.side_effect = UpstreamError("Failed to start stream")
        with self.assertRaises(UpstreamError):
            self.session.send("Try one")

        mock_stream.side_effect = _stream("Works now")
        reply = self.session.send("Try two")

        self.assertEqual(reply.content, "Works now")
        self.assertIsNone(self.session.error_message)
        self.assertEqual(self.session.state, ChatState.IDLE)

    @patch("services.chat_service.stream_chat")
    def test_stream_reply_yields_deltas_and_keeps_history(self, mock_stream):
        mock_stream.side_effect = _stream("Wa", "ter")
        history = [ChatMessage(role=ChatRole.USER, content="Hi"), ChatMessage(role=ChatRole.ASSISTANT, content="Hello!")]
        session = ChatSession(history=history)

        self.assertEqual(list(session.stream_reply("What is osmosis?")), ["Wa", "ter"])

        self.assertEqual(len(mock_stream.call_args.args[0]), 3)
        self.assertEqual(session.messages[-1].content, "Water")
        self.assertEqual(session.state, ChatState.IDLE)
        self.assertEqual(len(history), 2)

    @patch("services.chat_service.stream_chat")
    def test_abandoned_reply_discards_turn(self, mock_stream):
        mock_stream.side_effect = _stream("one", "two", "three")

        deltas = self.session.stream_reply("Question")
        self.assertEqual(next(deltas), "one")
        deltas.close()

        self.assertEqual(self.session.messages, [])
        self.assertFalse(self.session.busy)

    @patch("services.chat_service.stream_chat")
    def test_reset_clears_transcript(self, mock_stream):
        mock_stream.side_effect = _stream("hi")
        self.session.send("hello")
        self.session.reset()
        self.assertEqual(self.session.messages, [])


if __name__ == '__main__':
    unittest.main()
