"""Configuration management with Pydantic models."""

import json
import re
from pathlib import Path

from pydantic import BaseModel, Field

DEFAULT_SETTINGS_PATH = Path("~/.config/text-linkify/settings.toml")


class LinkifyConfig(BaseModel):
    """Configuration for traversal and rewriting."""

    processed_attribute: str = "data-linkified"
    relevant_tags: list[str] = Field(
        default_factory=lambda: [
            "p", "div", "span", "li", "td",
            "h1", "h2", "h3", "h4", "h5", "h6",
            "article", "section", "blockquote",
        ]
    )
    skip_tags: list[str] = Field(
        default_factory=lambda: [
            "a", "script", "style", "textarea", "input",
            "button", "select", "option", "code", "pre",
        ]
    )
    chunk_size: int = Field(default=50, ge=1, le=10000)
    debounce_seconds: float = Field(default=0.2, ge=0.0, le=10.0)
    invalidate_depth: int = Field(default=32, ge=1, le=1000)
    root_margin_px: int = Field(default=200, ge=0)
    threshold: float = Field(default=0.0, ge=0.0, le=1.0)
    link_style: str = "color: inherit; text-decoration: underline"

    @property
    def relevant_selector(self) -> str:
        return ", ".join(self.relevant_tags)


class CodeSearchConfig(BaseModel):
    """Bounds of the nearby-text search for access codes."""

    search_range: int = Field(default=120, ge=0)
    max_sibling_steps: int = Field(default=10, ge=0)
    sibling_text_cap: int = Field(default=50, ge=0)
    ancestor_levels: int = Field(default=5, ge=0)


class AutoFillConfig(BaseModel):
    """Configuration for access-code auto-fill on drive pages."""

    # Ordered by specificity
    input_selectors: list[str] = Field(
        default_factory=lambda: [
            "#code_txt",
            "#accessCode",
            "#pwd",
            "#code",
            'input[id*="code"]',
            'input[id*="pwd"]',
            'input[name="accessCode"]',
            'input[name="pwd"]',
            ".input-code",
            'input[placeholder*="提取码"]',
            'input[placeholder*="密码"]',
            'input[placeholder*="Code"]',
            '.ant-input[type="text"]',
            'input[type="password"]',
        ]
    )
    button_selector: str = "button, a.btn, div.btn, .btn"
    submit_keywords: str = "提取|下载|确定|Submit|OK|查看|访问"
    search_keywords: list[str] = Field(default_factory=lambda: ["搜索", "search", "查找"])
    click_delay_seconds: float = Field(default=0.3, ge=0.0, le=30.0)
    slow_hosts: dict[str, float] = Field(default_factory=lambda: {"189.cn": 1.0})
    observe_timeout_seconds: float = Field(default=15.0, ge=0.0, le=300.0)
    poll_interval_seconds: float = Field(default=0.25, gt=0.0, le=10.0)

    def click_delay_for(self, host: str) -> float:
        """Delay before clicking submit; some hosts need longer to settle."""
        for fragment, delay in self.slow_hosts.items():
            if fragment in host:
                return delay
        return self.click_delay_seconds


class FetcherConfig(BaseModel):
    """Configuration for page fetching."""

    use_js: bool = False
    timeout_ms: int = Field(default=30000, ge=1000, le=120000)
    user_agent: str = "TextLinkify/0.1 (+https://github.com/text-linkify)"
    wait_after_load_ms: int = Field(default=500, ge=0, le=10000)
    headless: bool = True
    max_retries: int = Field(default=2, ge=0, le=10)
    retry_base_delay: float = Field(default=1.0, ge=0.1, le=30.0)


class OutputConfig(BaseModel):
    """Configuration for output."""

    path: Path = Path("./linkified.html")


class AppConfig(BaseModel):
    """Main application configuration."""

    linkify: LinkifyConfig = Field(default_factory=LinkifyConfig)
    code_search: CodeSearchConfig = Field(default_factory=CodeSearchConfig)
    autofill: AutoFillConfig = Field(default_factory=AutoFillConfig)
    fetcher: FetcherConfig = Field(default_factory=FetcherConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    settings_path: Path = DEFAULT_SETTINGS_PATH
    host: str | None = None  # Overrides the hostname derived from the source URL
    verbose: bool = False

    @classmethod
    def from_toml(cls, path: Path) -> "AppConfig":
        """Load config from a TOML file."""
        with open(path, "rb") as f:
            data = load_toml(f)
        return cls.model_validate(data)

    def to_toml(self) -> str:
        """Serialize config to TOML format."""
        data = self.model_dump(mode="json", exclude_defaults=True)
        return dump_toml(data)


def load_toml(f) -> dict:
    """Parse a binary TOML stream."""
    try:
        import tomllib  # type: ignore[import-not-found]
    except ModuleNotFoundError:
        import tomli as tomllib  # type: ignore[import-not-found]
    return tomllib.load(f)


def dump_toml(data: dict, table: str = "") -> str:
    """Render a dict as TOML: scalars and arrays first, then one ``[table]`` per sub-dict."""
    body = [f"{_key(k)} = {_literal(v)}" for k, v in data.items() if not isinstance(v, dict)]
    text = "\n".join(body) + "\n" if body else ""
    for k, v in data.items():
        if isinstance(v, dict):
            name = f"{table}.{_key(k)}" if table else _key(k)
            text += f"\n[{name}]\n" + dump_toml(v, name)
    return text.lstrip("\n")


_BARE_KEY = re.compile(r"^[A-Za-z0-9_-]+$")


def _key(key: str) -> str:
    # "189.cn" must be quoted or it becomes a nested key
    return key if _BARE_KEY.match(key) else json.dumps(key, ensure_ascii=False)


def _literal(value: object) -> str:
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, (int, float)):
        return repr(value)
    if isinstance(value, (list, tuple)):
        return "[" + ", ".join(_literal(v) for v in value) + "]"
    if isinstance(value, dict):
        pairs = ", ".join(f"{_key(k)} = {_literal(v)}" for k, v in value.items())
        return "{ " + pairs + " }" if pairs else "{}"
    # JSON string escapes are valid TOML basic-string escapes
    return json.dumps(str(value), ensure_ascii=False)
