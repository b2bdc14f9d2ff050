"""Ollama API client suggesting a reason for records the code table cannot classify."""

import logging
import re

import requests

from ..utils.reasons import VALID_REASONS, build_prompt_reason_lines

logger = logging.getLogger(__name__)

_MAX_DIAGNOSIS_PROMPT_LEN = 1000

_PROMPT_TEMPLATE = """\
You are an email delivery error analyst.
A Microsoft Exchange Server bounce reported the following failure, but its
internal error code is missing or unknown.

Failed Recipient: {recipient}
Remote Host: {rhost}

<diagnosis block>
{diagnosis}
</diagnosis block>

Classify into exactly ONE of the following reasons:
{reason_lines}

If none of them fits, answer with "none".

Reply in exactly two lines (no other text):
REASON: <reason>
COMMENT: <one short sentence>

Example good response:
REASON: userunknown
COMMENT: The recipient mailbox does not exist on the remote server"""

_RE_REASON = re.compile(r"REASON\s*:\s*(\S+)", re.IGNORECASE)
_RE_COMMENT = re.compile(r"COMMENT\s*:\s*(.+)", re.IGNORECASE)


class OllamaClient:
    """Thin wrapper around the Ollama ``/api/generate`` endpoint."""

    def __init__(self, base_url, model, timeout=120):
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.timeout = timeout
        self._endpoint = f"{self.base_url}/api/generate"

    def test_connection(self):
        """Return True if the Ollama server is reachable and the model is available."""
        try:
            resp = requests.get(f"{self.base_url}/api/tags", timeout=10)
            resp.raise_for_status()
            models = [m.get("name", "") for m in resp.json().get("models", [])]
            return any(self.model in m for m in models)
        except requests.RequestException as exc:
            logger.warning("Ollama connection test failed: %s", exc)
            return False

    def suggest_reason(self, record):
        """Ask Ollama which reason best fits an unclassified record.

        Parameters
        ----------
        record : DeliveryStatus
            Normalized record with an empty ``reason``.

        Returns
        -------
        dict
            ``{"reason": str, "comment": str}``; ``reason`` is one of the
            known reasons or ``""``.
        """
        if not record.diagnosis:
            return _fallback("No diagnostic text")

        prompt = _PROMPT_TEMPLATE.format(
            recipient=record.recipient,
            rhost=record.rhost or "unknown",
            diagnosis=record.diagnosis[:_MAX_DIAGNOSIS_PROMPT_LEN],
            reason_lines=build_prompt_reason_lines(),
        )

        try:
            resp = requests.post(
                self._endpoint,
                json={"model": self.model, "prompt": prompt, "stream": False},
                timeout=self.timeout,
            )
            resp.raise_for_status()
            return _parse_response(resp.json().get("response", ""))
        except requests.RequestException as exc:
            logger.warning("Ollama request failed: %s", exc)
            return _fallback()


def _parse_response(raw_text):
    """Parse the plain-text answer from Ollama's response."""
    reason_match = _RE_REASON.search(raw_text)
    comment_match = _RE_COMMENT.search(raw_text)

    reason = reason_match.group(1).lower().strip() if reason_match else ""
    comment = comment_match.group(1).strip() if comment_match else ""

    if reason not in VALID_REASONS:
        if reason != "none":
            logger.warning("Unknown reason '%s' in response: %s", reason, raw_text[:200])
        return _fallback(comment)

    return {"reason": reason, "comment": comment}


def _fallback(comment=""):
    """Return an empty suggestion."""
    return {"reason": "", "comment": comment or "Suggestion unavailable"}
