"""
Streaming chat-completion client.

The response body is a text/event-stream of `data: {json}` lines carrying
`choices[0].delta.content`, terminated by `data: [DONE]`.
"""

import codecs
import json
import logging
from typing import Any, Dict, Iterator, List, Optional

import httpx

from utils.config import get_chat_url, require_env, get_generation_timeout
from utils.exceptions import PaymentRequiredError, RateLimitError, UpstreamError

logger = logging.getLogger(__name__)

DATA_PREFIX = "data: "
DONE_SENTINEL = "[DONE]"


class SSEDecoder:
    """
    Incremental decoder from raw body bytes to assistant content deltas.

    Bytes are decoded with an incremental UTF-8 decoder so characters split
    across reads survive. A data line that is not valid JSON is put back in
    the buffer and retried once more data has arrived; if it still fails it
    is dropped.
    """

    def __init__(self):
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._buffer = ""
        self._held_line: Optional[str] = None
        self.done = False

    def feed(self, chunk: bytes) -> List[str]:
        """Decode a chunk and return the content deltas it completes."""
        if self.done:
            return []
        self._buffer += self._decoder.decode(chunk)
        return self._drain()

    def close(self) -> List[str]:
        """Flush the decoder at end of body and process a trailing unterminated line."""
        if self.done:
            return []
        self._buffer += self._decoder.decode(b"", final=True)
        deltas = self._drain(final=True)
        if not self.done and self._buffer.strip():
            deltas.extend(self._process_line(self._buffer, final=True))
        self._buffer = ""
        return deltas

    def _drain(self, final: bool = False) -> List[str]:
        deltas: List[str] = []
        while not self.done:
            newline_index = self._buffer.find("\n")
            if newline_index == -1:
                break
            line = self._buffer[:newline_index]
            self._buffer = self._buffer[newline_index + 1:]

            result = self._process_line(line, final=final)
            if result is None:
                # unparsed: wait for more data
                self._buffer = line + "\n" + self._buffer
                break
            deltas.extend(result)
        return deltas

    def _process_line(self, line: str, final: bool = False) -> Optional[List[str]]:
        """Deltas for one line, or None when the line must be retried later."""
        if line.endswith("\r"):
            line = line[:-1]
        if line.startswith(":") or line.strip() == "":
            return []
        if not line.startswith(DATA_PREFIX):
            return []

        payload = line[len(DATA_PREFIX):].strip()
        if payload == DONE_SENTINEL:
            self.done = True
            return []

        try:
            parsed = json.loads(payload)
        except json.JSONDecodeError:
            if final or self._held_line == line:
                logger.warning(f"Dropping malformed SSE data line: {payload[:200]}")
                self._held_line = None
                return []
            self._held_line = line
            return None

        self._held_line = None
        content = _delta_content(parsed)
        return [content] if content else []


def _delta_content(event: Any) -> Optional[str]:
    try:
        content = event["choices"][0]["delta"].get("content")
    except (KeyError, IndexError, TypeError, AttributeError):
        return None
    return content if isinstance(content, str) else None


def _raise_for_stream_status(response: httpx.Response) -> None:
    if response.is_success:
        return
    body = response.read().decode("utf-8", errors="replace")
    logger.error(f"Chat stream failed to start: {response.status_code} {body[:500]}")
    if response.status_code == 429:
        raise RateLimitError(upstream_body=body)
    if response.status_code == 402:
        raise PaymentRequiredError(upstream_body=body)
    raise UpstreamError(
        "Failed to start stream",
        upstream_status=response.status_code,
        upstream_body=body,
    )


def stream_chat(
    messages: List[Dict[str, str]],
    url: Optional[str] = None,
    api_key: Optional[str] = None,
    http_client: Optional[httpx.Client] = None
) -> Iterator[str]:
    """
    Relay a conversation to the chat endpoint and yield assistant deltas as they arrive.

    Args:
        messages: The full conversation as role/content dicts.
        url: Endpoint override; defaults to the configured study-assistant function.
        api_key: Bearer token override; defaults to SUPABASE_ANON_KEY.
        http_client: Optional client, mainly for tests.

    Raises:
        RateLimitError (429), PaymentRequiredError (402), UpstreamError otherwise.
    """
    endpoint = get_chat_url(url)
    token = api_key or require_env("SUPABASE_ANON_KEY")
    headers = {
        "Content-Type": "application/json",
        "Authorization": f"Bearer {token}",
        "Accept": "text/event-stream",
    }
    # no read timeout: the stream stays open for the whole answer
    timeout = httpx.Timeout(get_generation_timeout(), read=None)
    client = http_client or httpx.Client(timeout=timeout)
    decoder = SSEDecoder()
    try:
        with client.stream("POST", endpoint, headers=headers, json={"messages": messages}) as response:
            _raise_for_stream_status(response)
            for chunk in response.iter_bytes():
                for delta in decoder.feed(chunk):
                    yield delta
                if decoder.done:
                    break
            for delta in decoder.close():
                yield delta
    except httpx.HTTPError as e:
        logger.error(f"Chat stream transport error: {e}")
        raise UpstreamError(f"Chat stream failed: {e}") from e
    finally:
        if http_client is None:
            client.close()
