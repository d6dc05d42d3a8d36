"""Cloud-drive link rule registry."""

import re

from pydantic import BaseModel, ConfigDict

DEFAULT_CODE_LABELS = ["pwd", "code", "提取码"]


class DriveRule(BaseModel):
    """A cloud-storage provider recognized by its URL."""

    model_config = ConfigDict(frozen=True)

    name: str
    pattern: str
    code_labels: list[str] = DEFAULT_CODE_LABELS

    def matches(self, url: str) -> bool:
        return re.search(self.pattern, url) is not None


BAIDU_RULE = DriveRule(name="baidu", pattern=r"pan\.baidu\.com")
ALIYUN_RULE = DriveRule(name="aliyun", pattern=r"alipan\.com|aliyundrive\.com")
LANZOU_RULE = DriveRule(name="lanzou", pattern=r"(?:lanzou|woozooo).*\.com")
PAN123_RULE = DriveRule(name="123pan", pattern=r"123pan\.com")
QUARK_RULE = DriveRule(name="quark", pattern=r"pan\.quark\.cn")
CHENGTONG_RULE = DriveRule(name="chengtong", pattern=r"ctfile\.com|pipipan\.com")
TIANYI_RULE = DriveRule(
    name="tianyi",
    pattern=r"cloud\.189\.cn",
    code_labels=["pwd", "code", "访问码"],
)


class DriveRegistry:
    """Registry of known cloud-drive providers."""

    _rules: dict[str, DriveRule] = {
        "baidu": BAIDU_RULE,
        "aliyun": ALIYUN_RULE,
        "lanzou": LANZOU_RULE,
        "123pan": PAN123_RULE,
        "quark": QUARK_RULE,
        "chengtong": CHENGTONG_RULE,
        "tianyi": TIANYI_RULE,
    }

    @classmethod
    def register(cls, rule: DriveRule) -> None:
        """Register a new rule."""
        cls._rules[rule.name] = rule

    @classmethod
    def get(cls, name: str) -> DriveRule | None:
        """Get a rule by name."""
        return cls._rules.get(name)

    @classmethod
    def list_rules(cls) -> list[DriveRule]:
        """List all registered rules."""
        return list(cls._rules.values())

    @classmethod
    def match(cls, url: str) -> DriveRule | None:
        """Return the first rule whose pattern occurs in the URL."""
        for rule in cls._rules.values():
            if rule.matches(url):
                return rule
        return None

    @classmethod
    def is_drive_url(cls, url: str) -> bool:
        return cls.match(url) is not None
