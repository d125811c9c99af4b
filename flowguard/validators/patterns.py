"""Pattern library — versioned regex rules for security and performance scanning.

This is the encoded scanning knowledge that keeps validation deterministic.
Every rule is compiled once at import time and reused for the whole process.

Rules are field-scoped: DOCUMENT rules run over the raw serialized document,
CODE rules run only over function-node code fields. Keeping injection and
loop heuristics off plain configuration strings is what keeps the false
positive rate down.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Optional

from flowguard.validators.models import Category, Severity

PATTERN_LIBRARY_VERSION = "2024.2"


class Tier(str, Enum):
    """Risk tier of a rule."""

    HIGH = "high"                # Plausible real secret or exploitable code
    MEDIUM = "medium"            # Looser heuristic
    PLACEHOLDER = "placeholder"  # Known non-secret dev artifact
    PERFORMANCE = "performance"  # Blocking or unbounded code
    INFO = "info"                # Good practice worth reporting


class Scope(str, Enum):
    DOCUMENT = "document"
    CODE = "code"


TIER_SEVERITY: dict[Tier, Severity] = {
    Tier.HIGH: Severity.ERROR,
    Tier.MEDIUM: Severity.WARNING,
    Tier.PLACEHOLDER: Severity.WARNING,
    Tier.PERFORMANCE: Severity.WARNING,
    Tier.INFO: Severity.INFO,
}


@dataclass(frozen=True)
class PatternRule:
    id: str
    group: str
    tier: Tier
    regex: re.Pattern
    description: str
    scope: Scope = Scope.DOCUMENT
    exclude: Optional[re.Pattern] = None

    @property
    def category(self) -> Category:
        return Category.PERFORMANCE if self.tier == Tier.PERFORMANCE else Category.SECURITY

    @property
    def severity(self) -> Severity:
        return TIER_SEVERITY[self.tier]


@dataclass(frozen=True)
class PatternMatch:
    rule: PatternRule
    excerpt: str
    count: int = 1
    samples: tuple[str, ...] = field(default_factory=tuple)


# ──────────────────────────────────────────────────────────────────────
# BUILDING BLOCKS
# ──────────────────────────────────────────────────────────────────────

# Optional JSON-escaped quote, so rules work on raw JSON and on code alike
_Q = r"""\\?['"]"""
# Values that are expressions ({{ $env.X }}, ${VAR}) are references, not secrets
_NOT_EXPRESSION = r"""(?![^'"\\\n]*(?:\{\{|\$\{))"""


# camelCase qualifier (dbPassword, authToken); stays case-sensitive so that
# lowercase run-ons like "bypassword" are not keys
_COMPOUND_PREFIX = r"(?-i:(?:[a-z0-9]+(?=[A-Z]))?)"


def _assignment(key: str, min_len: int, compound: bool = False) -> str:
    """`key = 'value'` or `"key": "value"` with a literal value of min_len+ chars.

    With compound=True the key may also carry a camelCase qualifier
    (`smtpPassword`) or a snake/kebab one (`db_password`).
    """
    prefix = _COMPOUND_PREFIX if compound else ""
    return (
        r"(?-i:(?<![A-Za-z0-9]))" + prefix + r"(?:" + key + r")" + _Q + r"?\s*[:=]\s*" + _Q
        + _NOT_EXPRESSION + r"""[^'"\\\n]{""" + str(min_len) + r",}" + _Q
    )


def _rule(
    rule_id: str,
    group: str,
    tier: Tier,
    pattern: str,
    description: str,
    scope: Scope = Scope.DOCUMENT,
    flags: int = re.IGNORECASE,
    exclude: Optional[str] = None,
) -> PatternRule:
    return PatternRule(
        id=rule_id,
        group=group,
        tier=tier,
        regex=re.compile(pattern, flags),
        description=description,
        scope=scope,
        exclude=re.compile(exclude, re.IGNORECASE) if exclude else None,
    )


# ──────────────────────────────────────────────────────────────────────
# RULE TABLE
# ──────────────────────────────────────────────────────────────────────

RULES: tuple[PatternRule, ...] = (
    # Credentials: high
    _rule("password_literal", "credentials", Tier.HIGH, _assignment(r"pass(?:word|wd)", 3, compound=True),
          "Hardcoded password literal"),
    _rule("secret_literal", "credentials", Tier.HIGH, _assignment(r"(?:client[_-]?)?secret", 3, compound=True),
          "Hardcoded secret literal"),
    _rule("api_key_literal", "credentials", Tier.HIGH, _assignment(r"(?<!x-)api[_-]?key", 10, compound=True),
          "Hardcoded API key"),
    _rule("token_literal", "credentials", Tier.HIGH,
          _assignment(r"(?:access[_-]?|refresh[_-]?)?token", 10, compound=True),
          "Hardcoded token"),
    _rule("private_key_literal", "credentials", Tier.HIGH, _assignment(r"private[_-]?key", 10, compound=True),
          "Hardcoded private key value"),
    _rule("openai_key", "credentials", Tier.HIGH, r"\bsk-[A-Za-z0-9_-]{32,}",
          "OpenAI-style secret key", flags=0),
    _rule("slack_token", "credentials", Tier.HIGH, r"\bxox[baprs]-[A-Za-z0-9-]{10,}",
          "Slack token", flags=0),
    _rule("github_pat", "credentials", Tier.HIGH, r"\bghp_[A-Za-z0-9]{36}",
          "GitHub personal access token", flags=0),
    _rule("aws_access_key", "credentials", Tier.HIGH, r"\b(?:AKIA|ASIA)[0-9A-Z]{16}\b",
          "AWS access key id", flags=0),
    _rule("jwt", "credentials", Tier.HIGH,
          r"\beyJ[A-Za-z0-9_-]{10,}\.[A-Za-z0-9_-]{10,}\.[A-Za-z0-9_-]{10,}",
          "Embedded JSON Web Token", flags=0),
    _rule("private_key_block", "credentials", Tier.HIGH,
          r"-----BEGIN (?:RSA |EC |DSA |OPENSSH )?PRIVATE KEY-----",
          "PEM private key block", flags=0),

    # Credentials: medium
    _rule("auth_literal", "credentials", Tier.MEDIUM, _assignment(r"auth", 5),
          "Possible authentication value"),
    _rule("bearer_literal", "credentials", Tier.MEDIUM, _assignment(r"bearer", 5),
          "Possible bearer credential"),
    _rule("x_api_key_literal", "credentials", Tier.MEDIUM, _assignment(r"x-api-key", 5),
          "Possible API key header value"),
    _rule("authorization_literal", "credentials", Tier.MEDIUM, _assignment(r"authorization", 5),
          "Possible authorization header value"),
    _rule("long_credential_assignment", "credentials", Tier.MEDIUM,
          r"(?<![A-Za-z0-9])(?:key|credential|passphrase|pwd)" + _Q + r"?\s*[:=]\s*" + _Q
          + r"[A-Za-z0-9+/_=-]{24,}" + _Q,
          "Long opaque string assigned to a credential-like key"),

    # Transport
    _rule("insecure_http_url", "transport", Tier.MEDIUM, r"""http://[^\s'"\\<>]+""",
          "Plain HTTP URL (use HTTPS)",
          exclude=r"^http://(?:localhost|127\.0\.0\.1|0\.0\.0\.0)(?:[:/]|$)"),
    _rule("tls_reject_unauthorized", "transport", Tier.HIGH,
          r"rejectUnauthorized" + _Q + r"?\s*[:=]\s*false\b",
          "TLS certificate verification disabled"),
    _rule("tls_weak_cipher", "transport", Tier.HIGH, r"ciphers[^\n]{0,60}?(?:RC4|\b3?DES\b)",
          "Weak TLS cipher configured"),
    _rule("tls_legacy_protocol", "transport", Tier.HIGH,
          r"(?:sslVersion|secureProtocol)[^\n]{0,20}?\bSSLv?[23]",
          "Legacy SSL protocol configured"),
    _rule("allow_unauthorized_certs", "transport", Tier.MEDIUM,
          r"allowUnauthorizedCerts" + _Q + r"?\s*:\s*true\b",
          "Node accepts unauthorized TLS certificates"),

    # Placeholders and dev configuration
    _rule("localhost", "placeholders", Tier.PLACEHOLDER, r"\blocalhost\b",
          "Localhost reference"),
    _rule("loopback_address", "placeholders", Tier.PLACEHOLDER, r"\b127\.0\.0\.1\b",
          "Loopback address"),
    _rule("any_interface_address", "placeholders", Tier.PLACEHOLDER, r"\b0\.0\.0\.0\b",
          "Bind-all address"),
    _rule("your_placeholder", "placeholders", Tier.PLACEHOLDER, r"\bYOUR_[A-Z0-9_]+",
          "Unreplaced YOUR_* placeholder", flags=0),
    _rule("your_host_placeholder", "placeholders", Tier.PLACEHOLDER, r"\byour-(?:n8n|domain|host)[\w.-]*",
          "Unreplaced placeholder host"),
    _rule("debug_enabled", "placeholders", Tier.PLACEHOLDER,
          r"\bdebug" + _Q + r"?\s*[:=]\s*(?:\\?['\"])?true\b",
          "Debug mode enabled"),
    _rule("development_env", "placeholders", Tier.PLACEHOLDER,
          r"\bNODE_ENV" + _Q + r"?\s*[:=]\s*(?:\\?['\"])?development\b",
          "Development environment configured"),
    _rule("default_admin_credentials", "placeholders", Tier.PLACEHOLDER, r"\badmin\s*[:/]\s*admin\b",
          "Default admin credentials"),

    # Sensitive personal data: worth a review, not a failure
    _rule("ssn_reference", "data_protection", Tier.MEDIUM,
          r"(?<![a-z0-9])ssn(?![a-z0-9])|social[\s_-]*security",
          "Social security number reference"),
    _rule("payment_card_reference", "data_protection", Tier.MEDIUM, r"credit[\s_-]*card",
          "Payment card data reference"),
    _rule("identity_document_reference", "data_protection", Tier.MEDIUM,
          r"\bpassport|driver'?s?[\s_-]*licen[cs]e",
          "Identity document reference"),
    _rule("personal_data_reference", "data_protection", Tier.MEDIUM,
          r"personal[\s_-]*info|(?<![a-z0-9])pii(?![a-z0-9])",
          "Personal data reference"),
    _rule("privacy_regulation_reference", "data_protection", Tier.MEDIUM,
          r"(?<![a-z0-9])(?:gdpr|ccpa)(?![a-z0-9])",
          "Privacy-regulated data reference"),

    # Environment references: rewarded, not deducted
    _rule("env_reference", "environment", Tier.INFO,
          r"\$\{[A-Za-z_][^}\n]*\}|process\.env\.[A-Za-z_]|\$env\.[A-Za-z_]|\$env\[",
          "Environment variable reference", flags=0),

    # Injection: function code only
    _rule("eval_call", "injection", Tier.HIGH, r"(?<![\w.$])eval\s*\(",
          "Dynamic code execution via eval()", Scope.CODE, flags=0),
    _rule("function_constructor", "injection", Tier.HIGH, r"(?<![\w.$])Function\s*\(",
          "Dynamic code execution via Function()", Scope.CODE, flags=0),
    _rule("string_timer", "injection", Tier.HIGH, r"\bset(?:Timeout|Interval)\s*\([^,)\n]*\$",
          "Timer built from dynamic input", Scope.CODE, flags=0),
    _rule("vm_context", "injection", Tier.HIGH, r"\bvm\.runIn(?:This|New)Context\b",
          "Code execution through the vm module", Scope.CODE, flags=0),
    _rule("child_process_exec", "injection", Tier.HIGH, r"\bchild_process\s*\.\s*exec\w*\s*\(",
          "Shell execution through child_process", Scope.CODE, flags=0),
    _rule("dynamic_require", "injection", Tier.HIGH, r"""\brequire\s*\(\s*(?!['"`]\s*[\w@./-]+\s*['"`]\s*\))[^)\n]+\)""",
          "Module loaded from a dynamic expression", Scope.CODE, flags=0),
    _rule("sql_concatenation", "injection", Tier.HIGH,
          r"\b(?:SELECT|INSERT|UPDATE|DELETE)\b[^\n]*\+[^\n]*\$",
          "SQL statement built by string concatenation", Scope.CODE),
    _rule("sql_query_interpolation", "injection", Tier.HIGH, r"\bquery\s*\([^)\n]*\$[^)\n]*\)",
          "Query call with interpolated input", Scope.CODE),
    _rule("command_interpolation", "injection", Tier.HIGH,
          r"(?<![\w.])(?:exec|execSync|spawn|spawnSync|system)\s*\([^)\n]*\$[^)\n]*\)",
          "Command built from dynamic input", Scope.CODE),
    _rule("shell_exec", "injection", Tier.HIGH, r"\bshell_exec\b[^\n]*\$",
          "shell_exec with dynamic input", Scope.CODE),

    # Dangerous input handling: function code only
    _rule("json_index_interpolation", "input_handling", Tier.HIGH, r"\$json\[[^\n]*\$",
          "Item field indexed by another dynamic value", Scope.CODE, flags=0),
    _rule("input_interpolation", "input_handling", Tier.HIGH, r"\$input\b[^\n]*\$",
          "Raw $input flows into a dynamic expression", Scope.CODE, flags=0),
    _rule("inner_html", "input_handling", Tier.HIGH, r"\binnerHTML\b[^\n]*\$",
          "Dynamic value assigned to innerHTML", Scope.CODE, flags=0),
    _rule("document_write", "input_handling", Tier.HIGH, r"\bdocument\.write\b[^\n]*\$",
          "Dynamic value passed to document.write", Scope.CODE, flags=0),

    # Dangerous modules: function code only
    _rule("dangerous_module", "modules", Tier.MEDIUM,
          r"""\brequire\s*\(\s*['"](?:child_process|fs|vm|cluster|worker_threads|os|path|crypto)['"]\s*\)""",
          "Potentially dangerous Node.js module", Scope.CODE, flags=0),

    # Performance: function code only
    _rule("while_true", "performance", Tier.PERFORMANCE, r"\bwhile\s*\(\s*(?:true|1)\s*\)",
          "Unbounded while loop", Scope.CODE, flags=0),
    _rule("for_ever", "performance", Tier.PERFORMANCE, r"\bfor\s*\(\s*;\s*;\s*\)",
          "Unbounded for(;;) loop", Scope.CODE, flags=0),
    _rule("timeout_zero", "performance", Tier.PERFORMANCE, r"\bsetTimeout\s*\([^)\n]*,\s*0\s*\)",
          "Zero-delay timer (busy scheduling)", Scope.CODE, flags=0),
    _rule("large_literal_loop", "performance", Tier.PERFORMANCE, r"\bfor\s*\([^;)\n]*;[^;)\n]*<=?\s*\d{4,}",
          "Loop over a large literal bound", Scope.CODE, flags=0),
    _rule("blocking_call", "performance", Tier.PERFORMANCE,
          r"\b(?:execSync|spawnSync|readFileSync|writeFileSync)\s*\(|\bAtomics\.wait\s*\(",
          "Synchronous blocking call", Scope.CODE, flags=0),
)


# ──────────────────────────────────────────────────────────────────────
# AUXILIARY PATTERNS (presence checks, not findings by themselves)
# ──────────────────────────────────────────────────────────────────────

INPUT_VALIDATION_IDIOMS = re.compile(
    r"validate|sanitize|escape|filter|match\s*\(|test\s*\(|typeof|instanceof|hasOwnProperty|Array\.isArray",
    re.IGNORECASE,
)
ERROR_HANDLING_IDIOMS = re.compile(r"try\s*\{|catch\s*\(|throw\s|\berror\b|\bError\b")
CRYPTO_IDIOMS = re.compile(r"encrypt|decrypt|hash|bcrypt|scrypt|pbkdf2|crypto\.", re.IGNORECASE)
WEBHOOK_AUTH_HINTS = re.compile(r"authentication|auth|bearer|apikey|api_key|hmac|signature", re.IGNORECASE)

README_QUICKSTART = re.compile(r"^#{2,}\s+(?:Quick\s*[Ss]tart|Getting\s+[Ss]tarted|Installation)", re.MULTILINE)
README_API = re.compile(r"^#{2,}\s+(?:API|Endpoints|Usage)", re.MULTILINE)

URL_TOKEN = re.compile(r"""https?://[^\s'"<>]*(?:<[^>\s]+>[^\s'"<>]*)*""")
URL_PLACEHOLDER = re.compile(r"your-[a-z0-9-]+|YOUR_[A-Z0-9_]+|<[^>\s]+>|localhost[^\s'\"]*webhook|\bexample\.(?:com|org)\b")
URL_ASSIGNMENT = re.compile(r"""\b[A-Za-z_]*URL[A-Za-z_]*\s*=\s*["']?([^"'\s]+)""")


class PatternLibrary:
    """Immutable collection of compiled rules with scoped selection."""

    def __init__(self, rules: Iterable[PatternRule] = RULES, version: str = PATTERN_LIBRARY_VERSION):
        self.rules = tuple(rules)
        self.version = version
        ids = [r.id for r in self.rules]
        if len(ids) != len(set(ids)):
            raise ValueError("Pattern rule ids must be unique")

    def __len__(self) -> int:
        return len(self.rules)

    def get(self, rule_id: str) -> PatternRule:
        for rule in self.rules:
            if rule.id == rule_id:
                return rule
        raise KeyError(rule_id)

    def select(
        self,
        scope: Optional[Scope] = None,
        tier: Optional[Tier] = None,
        group: Optional[str] = None,
        category: Optional[Category] = None,
    ) -> list[PatternRule]:
        """Rules matching every given filter, in table order."""
        return [
            r for r in self.rules
            if (scope is None or r.scope == scope)
            and (tier is None or r.tier == tier)
            and (group is None or r.group == group)
            and (category is None or r.category == category)
        ]

    def scan(self, text: str, rules: Iterable[PatternRule], max_samples: int = 3) -> list[PatternMatch]:
        """Run rules over text; one PatternMatch per rule that hit, in rule order."""
        matches = []
        if not text:
            return matches
        for rule in rules:
            hits = [m.group(0) for m in rule.regex.finditer(text)]
            if rule.exclude is not None:
                hits = [h for h in hits if not rule.exclude.search(h)]
            if not hits:
                continue
            samples = tuple(_excerpt(h) for h in hits[:max_samples])
            matches.append(PatternMatch(rule=rule, excerpt=samples[0], count=len(hits), samples=samples))
        return matches


def _excerpt(text: str, limit: int = 80) -> str:
    text = " ".join(text.split())
    return text if len(text) <= limit else text[: limit - 3] + "..."


# Module-level singleton
default_library = PatternLibrary()


def rules_for(
    category: Optional[Category] = None,
    tier: Optional[Tier] = None,
    scope: Optional[Scope] = None,
) -> list[PatternRule]:
    """Rules of the default library matching the given filters."""
    return default_library.select(scope=scope, tier=tier, category=category)
