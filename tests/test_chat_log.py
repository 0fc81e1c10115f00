"""Tests for omnitea.chat_log: ChatLog building and TokenCounter."""

from unittest.mock import MagicMock, patch

import pytest

from omnitea.chat_log import (
    FALLBACK_ENCODING,
    TOKENS_PER_MESSAGE,
    TOKENS_PER_REPLY,
    ChatEntry,
    ChatLog,
    ChatRole,
    TokenCounter,
)


class TestChatLog:
    def test_new_log_is_empty(self):
        assert len(ChatLog()) == 0
        assert ChatLog().to_messages() == []

    def test_builders_chain_and_keep_order(self):
        log = ChatLog().system("prompt").user("Ana says: hi").assistant("hello")
        assert [e.role for e in log] == [ChatRole.SYSTEM, ChatRole.USER, ChatRole.ASSISTANT]

    def test_builders_return_the_same_log(self):
        log = ChatLog()
        assert log.user("x") is log

    def test_to_messages_wire_shape(self):
        log = ChatLog().system("s").user("u")
        assert log.to_messages() == [
            {"role": "system", "content": "s"},
            {"role": "user", "content": "u"},
        ]

    def test_entries_passed_to_constructor_are_copied(self):
        entries = [ChatEntry(ChatRole.USER, "a")]
        log = ChatLog(entries)
        log.user("b")
        assert len(entries) == 1

    def test_role_values_match_api_names(self):
        assert {r.value for r in ChatRole} == {"system", "user", "assistant"}


def _fake_encoding() -> MagicMock:
    """An encoding that produces one token per character."""
    encoding = MagicMock()
    encoding.encode.side_effect = lambda text, **kwargs: list(text)
    return encoding


class TestTokenCounter:
    def test_counts_overhead_role_and_content(self):
        counter = TokenCounter("gpt-3.5-turbo")
        with patch("omnitea.chat_log.tiktoken.encoding_for_model", return_value=_fake_encoding()):
            total = counter(ChatLog().user("abc"))
        assert total == TOKENS_PER_REPLY + TOKENS_PER_MESSAGE + len("user") + len("abc")

    def test_empty_log_costs_only_the_reply_priming(self):
        counter = TokenCounter("gpt-3.5-turbo")
        with patch("omnitea.chat_log.tiktoken.encoding_for_model", return_value=_fake_encoding()):
            assert counter(ChatLog()) == TOKENS_PER_REPLY

    def test_more_messages_cost_more(self):
        counter = TokenCounter("gpt-3.5-turbo")
        with patch("omnitea.chat_log.tiktoken.encoding_for_model", return_value=_fake_encoding()):
            short = counter(ChatLog().user("hi"))
            long = counter(ChatLog().user("hi").assistant("hello there"))
        assert long > short

    def test_unknown_model_falls_back_to_cl100k(self):
        counter = TokenCounter("claude-sonnet-4-6")
        with patch(
            "omnitea.chat_log.tiktoken.encoding_for_model", side_effect=KeyError("unknown")
        ), patch(
            "omnitea.chat_log.tiktoken.get_encoding", return_value=_fake_encoding()
        ) as get_encoding:
            counter(ChatLog().user("x"))
        get_encoding.assert_called_once_with(FALLBACK_ENCODING)

    def test_encoding_is_loaded_once(self):
        counter = TokenCounter("gpt-3.5-turbo")
        with patch(
            "omnitea.chat_log.tiktoken.encoding_for_model", return_value=_fake_encoding()
        ) as encoding_for_model:
            counter(ChatLog().user("a"))
            counter(ChatLog().user("b"))
        encoding_for_model.assert_called_once_with("gpt-3.5-turbo")

    def test_special_tokens_are_counted_as_text(self):
        encoding = _fake_encoding()
        counter = TokenCounter("gpt-3.5-turbo")
        with patch("omnitea.chat_log.tiktoken.encoding_for_model", return_value=encoding):
            counter.count_text("<|endoftext|>")
        assert encoding.encode.call_args.kwargs["disallowed_special"] == ()
