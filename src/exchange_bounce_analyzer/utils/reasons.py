"""Central registry of the bounce reasons an Exchange bounce can map to.

Each reason entry contains:
    description : str  -- Human readable description written to report rows.
    prompt      : str  -- English description injected into the Ollama prompt.
"""

REASONS = {
    "onhold": {
        "description": "Delivery held: host unknown, relay refused or size limit exceeded",
        "prompt": "Delivery could not be decided yet (unknown host, relay not allowed, message too large)",
    },
    "userunknown": {
        "description": "Recipient address does not exist",
        "prompt": "Recipient address is unknown or does not exist",
    },
    "systemerror": {
        "description": "Error inside the receiving mail system",
        "prompt": "Internal error of the receiving mail system (too many recipients, no proxy address)",
    },
    "networkerror": {
        "description": "Routing problem between mail servers",
        "prompt": "Network or routing problem such as a mail loop (too many hops)",
    },
    "contenterr": {
        "description": "Message content could not be converted or delivered",
        "prompt": "Message content rejected or conversion to Internet format failed",
    },
    "securityerr": {
        "description": "Authentication or security policy failure",
        "prompt": "Authentication or security problem (AUTH not supported, access denied)",
    },
    "filtered": {
        "description": "Recipient rejected by a filter or resolved ambiguously",
        "prompt": "Recipient filtered out or ambiguous recipient name",
    },
}

VALID_REASONS = frozenset(REASONS)


def build_prompt_reason_lines():
    """Build the reason list block for the Ollama prompt.

    Returns a multi-line string like::

        - onhold : Delivery could not be decided yet ...
        - userunknown : Recipient address is unknown ...
    """
    return "\n".join(f"- {key} : {info['prompt']}" for key, info in REASONS.items())
