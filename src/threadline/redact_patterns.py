"""
Secret patterns scrubbed from exported conversations.

ChatGPT transcripts routinely contain keys pasted in by the user while asking
for debugging help, so every string of a converted conversation is scanned
against this table before it is written.

Hyperscan-compatible: no backrefs, no lookahead/lookbehind.
Patterns match the secret value only (no surrounding context).

Sources:
- mazen160/secrets-patterns-db (high-confidence, rules-stable)
- gitleaks/gitleaks config
- Yelp/detect-secrets plugins
"""

# (name, pattern); hyperscan ids are the list positions
NAMED_PATTERNS: list[tuple[str, bytes]] = [
    ("openai-project", br"sk-proj-[a-zA-Z0-9_-]{20,}"),
    ("openai", br"sk-[a-zA-Z0-9_-]{20,}"),
    ("openai-legacy", br"sk-[A-Za-z0-9-_]*[A-Za-z0-9]{20}T3BlbkFJ[A-Za-z0-9]{20}"),
    ("anthropic", br"sk-ant-(?:api|admin)[0-9]{2}-[A-Za-z0-9_-]{80,}"),
    ("huggingface", br"hf_[A-Za-z0-9]{34}"),
    ("aws-access-key", br"AKIA[0-9A-Z]{16}"),
    ("aws-session-key", br"ASIA[0-9A-Z]{16}"),
    ("aws-appsync", br"da2-[a-z0-9]{26}"),
    ("github", br"(?:ghp|gho|ghu|ghs|ghr)_[A-Za-z0-9_]{36}"),
    ("github-fine-grained", br"github_pat_[A-Za-z0-9_]{82}"),
    ("stripe-secret", br"sk_live_[0-9a-zA-Z]{24}"),
    ("stripe-restricted", br"rk_live_[0-9a-zA-Z]{24}"),
    ("slack-token", br"xox(?:a|b|p|o|s|r)-(?:\d+-)+[a-zA-Z0-9]+"),
    ("slack-webhook", br"https://hooks\.slack\.com/services/T[a-zA-Z0-9_]+/B[a-zA-Z0-9_]+/[a-zA-Z0-9_]+"),
    ("sendgrid", br"SG\.[a-zA-Z0-9_-]{22}\.[a-zA-Z0-9_-]{43}"),
    ("discord", br"[MNO][a-zA-Z0-9_-]{23,25}\.[a-zA-Z0-9_-]{6}\.[a-zA-Z0-9_-]{27}"),
    ("google-api-key", br"AIza[0-9A-Za-z_-]{35}"),
    ("google-oauth", br"ya29\.[0-9A-Za-z_-]+"),
    ("twilio", br"SK[0-9a-fA-F]{32}"),
    ("telegram", br"[0-9]+:AA[0-9A-Za-z_-]{33}"),
    ("mailgun", br"key-[0-9a-zA-Z]{32}"),
    ("mailchimp", br"[0-9a-f]{32}-us[0-9]{1,2}"),
    ("square-access", br"sq0atp-[0-9A-Za-z_-]{22}"),
    ("square-secret", br"sq0csp-[0-9A-Za-z_-]{43}"),
    ("private-key", br"-----BEGIN (?:RSA |DSA |EC |OPENSSH |PGP )?PRIVATE KEY(?: BLOCK)?-----"),
]

PATTERNS: list[tuple[bytes, int]] = [
    (pattern, index) for index, (_, pattern) in enumerate(NAMED_PATTERNS)
]
